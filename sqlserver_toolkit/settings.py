from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Resolve repo root from this file's location:
# sqlserver_toolkit/settings.py → parent = sqlserver_toolkit/ → parent = repo root
REPO_ROOT = Path(__file__).resolve().parents[1]

DEFAULT_TOOLKIT_CONFIG = REPO_ROOT / "configs" / "toolkit.yaml"


def _getenv_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


TRUTHY = {"1", "true", "yes", "on"}


def parse_bool(value: object) -> bool:
    """Booleans pass through; anything else is truthy only if in TRUTHY."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUTHY


def _getenv_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return parse_bool(raw)


def _split_csv(raw: Optional[str]) -> List[str]:
    return [part.strip() for part in (raw or "").split(",") if part.strip()]


@dataclass
class Settings:
    """
    Centralized toolkit configuration.

    Values are loaded from environment variables (and a local .env file)
    via Settings.from_env().
    """

    # --- SQL Server connection ---
    mssql_server: str = "localhost"
    mssql_port: int = 1433
    mssql_user: str = ""
    mssql_password: str = ""
    mssql_database: str = "master"
    mssql_login_timeout: int = 30
    mssql_autocommit: bool = True

    # --- Toolkit behaviour ---
    tables: List[str] = field(default_factory=list)
    strict_parameter_count: bool = True

    # --- YAML toolkit config ---
    toolkit_config_path: str = str(DEFAULT_TOOLKIT_CONFIG)

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build Settings from environment variables with sane fallbacks.

        - TOOLKIT_TABLES is a comma-separated list of table/view names.
        - TOOLKIT_CONFIG can be absolute or relative to the repo root.
        """
        load_dotenv()

        raw_cfg = os.getenv("TOOLKIT_CONFIG", "").strip()
        if raw_cfg:
            cfg_candidate = Path(raw_cfg)
            if not cfg_candidate.is_absolute():
                cfg_candidate = REPO_ROOT / raw_cfg
        else:
            cfg_candidate = DEFAULT_TOOLKIT_CONFIG

        return cls(
            mssql_server=os.getenv("MSSQL_SERVER", cls.mssql_server),
            mssql_port=_getenv_int("MSSQL_PORT", cls.mssql_port),
            mssql_user=os.getenv("MSSQL_USER", cls.mssql_user),
            mssql_password=os.getenv("MSSQL_PASSWORD", cls.mssql_password),
            mssql_database=os.getenv("MSSQL_DATABASE", cls.mssql_database),
            mssql_login_timeout=_getenv_int(
                "MSSQL_LOGIN_TIMEOUT", cls.mssql_login_timeout
            ),
            mssql_autocommit=_getenv_bool("MSSQL_AUTOCOMMIT", cls.mssql_autocommit),
            tables=_split_csv(os.getenv("TOOLKIT_TABLES")),
            strict_parameter_count=_getenv_bool(
                "TOOLKIT_STRICT_PARAMS", cls.strict_parameter_count
            ),
            toolkit_config_path=str(cfg_candidate),
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
