from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, cast

import yaml  # type: ignore[import-untyped]

from adapters.db.base import DBAdapter
from sqlserver_toolkit.errors.exceptions import ConfigError
from sqlserver_toolkit.policy import Profile, ValidationPolicy
from sqlserver_toolkit.registry import ADAPTERS, POLICIES
from sqlserver_toolkit.settings import Settings, get_settings, parse_bool
from sqlserver_toolkit.toolkit import SQLServerToolkit

log = logging.getLogger(__name__)


# ------------------------------ helpers ------------------------------ #
def _require_str(value: Any, *, name: str) -> str:
    if value is None or not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Config {name} must be a non-empty string")
    return value.strip()


def _load_config(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            cfg = yaml.safe_load(fh) or {}
    except FileNotFoundError as exc:
        raise ConfigError(f"Toolkit config not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Toolkit config is not valid YAML: {path}") from exc
    if not isinstance(cfg, dict):
        raise ConfigError("Toolkit config must be a mapping at the top level")
    return cast(Dict[str, Any], cfg)


def _build_adapter(adapter_cfg: Dict[str, Any], settings: Settings) -> DBAdapter:
    kind = (adapter_cfg.get("kind") or "sqlserver").lower()
    if kind not in ADAPTERS:
        raise ConfigError(f"Unknown adapter kind: {kind}")
    if kind == "sqlite":
        dsn = _require_str(adapter_cfg.get("dsn"), name="adapter.dsn")
        return ADAPTERS[kind].connect(dsn)
    return ADAPTERS[kind].connect(settings)


def build_policy(profile: Profile, entry: Any) -> ValidationPolicy:
    """
    Resolve a policy entry from config.

    Accepts a registry key ("default", "raw") or a mapping with an optional
    `base` key plus field overrides.
    """
    variants = POLICIES[profile]
    if entry is None:
        return variants["default"]
    if isinstance(entry, str):
        if entry not in variants:
            raise ConfigError(f"Unknown {profile.value} policy: {entry}")
        return variants[entry]
    if isinstance(entry, dict):
        overrides = dict(entry)
        base = build_policy(profile, overrides.pop("base", None))
        return base.with_overrides(overrides)
    raise ConfigError(f"Invalid {profile.value} policy config: {entry!r}")


def _strict(value: Any, settings: Settings) -> bool:
    # unset in YAML: TOOLKIT_STRICT_PARAMS (settings) decides
    if value is None:
        return settings.strict_parameter_count
    return parse_bool(value)


def _tables(value: Any, settings: Settings) -> List[str]:
    if not value:
        return list(settings.tables)
    if not isinstance(value, list) or not all(isinstance(t, str) for t in value):
        raise ConfigError("Config tables must be a list of table/view names")
    return [t for t in value if t.strip()]


# ------------------------------ factory ------------------------------ #
def toolkit_from_config(
    path: Optional[str] = None,
    *,
    adapter: Optional[DBAdapter] = None,
    settings: Optional[Settings] = None,
) -> SQLServerToolkit:
    """
    Build a SQLServerToolkit from YAML configuration (dependency-injected).

    When `adapter` is given it is used as-is and the config's adapter section
    is ignored; the caller keeps ownership of it.
    """
    settings = settings or get_settings()
    cfg = _load_config(path or settings.toolkit_config_path)

    if adapter is None:
        adapter = _build_adapter(cast(Dict[str, Any], cfg.get("adapter") or {}), settings)

    policies = cast(Dict[str, Any], cfg.get("policies") or {})
    strict = _strict(cfg.get("strict_parameter_count"), settings)
    tables = _tables(cfg.get("tables"), settings)

    log.debug(
        "Building toolkit from config",
        extra={"adapter": adapter.name, "tables": tables, "strict": strict},
    )
    return SQLServerToolkit(
        adapter,
        tables=tables,
        read_policy=build_policy(Profile.READ_ONLY, policies.get("read_only")),
        write_policy=build_policy(Profile.WRITE, policies.get("write")),
        strict_parameter_count=strict,
    )
