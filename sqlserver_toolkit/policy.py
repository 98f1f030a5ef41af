from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Tuple

from sqlserver_toolkit.errors.exceptions import ConfigError


class Profile(str, Enum):
    READ_ONLY = "read_only"
    WRITE = "write"


class CheckOrder(str, Enum):
    # which rule runs first decides the rejection reason reported
    LEADING_FIRST = "leading_first"
    FORBIDDEN_FIRST = "forbidden_first"


@dataclass(frozen=True)
class ValidationPolicy:
    """
    Statement-safety policy as plain data.

    - leading_keywords: allowed first keywords (upper-case).
    - forbidden_keywords: whole-word, case-insensitive deny list.
    - scan_normalized: scan the comment-stripped text; when False the
      forbidden scan and the leading keyword use the raw statement text.
    """

    profile: Profile
    leading_keywords: Tuple[str, ...]
    forbidden_keywords: Tuple[str, ...]
    scan_normalized: bool = True
    check_order: CheckOrder = CheckOrder.LEADING_FIRST

    def with_overrides(self, data: Optional[Mapping[str, Any]]) -> "ValidationPolicy":
        """Return a copy with keys from a config mapping applied."""
        if not data:
            return self
        unknown = set(data) - {
            "leading_keywords",
            "forbidden_keywords",
            "scan_normalized",
            "check_order",
        }
        if unknown:
            raise ConfigError(
                f"Unknown policy keys for {self.profile.value}: {sorted(unknown)}"
            )

        changes: dict[str, Any] = {}
        if "leading_keywords" in data:
            changes["leading_keywords"] = _keywords(
                data["leading_keywords"], name="leading_keywords", upper=True
            )
        if "forbidden_keywords" in data:
            changes["forbidden_keywords"] = _keywords(
                data["forbidden_keywords"], name="forbidden_keywords"
            )
        if "scan_normalized" in data:
            changes["scan_normalized"] = bool(data["scan_normalized"])
        if "check_order" in data:
            try:
                changes["check_order"] = CheckOrder(str(data["check_order"]))
            except ValueError as exc:
                raise ConfigError(
                    f"Invalid check_order: {data['check_order']!r}"
                ) from exc
        return replace(self, **changes)


def _keywords(value: Any, *, name: str, upper: bool = False) -> Tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise ConfigError(f"Policy {name} must be a list of keywords")
    out = []
    for kw in value:
        if not isinstance(kw, str) or not kw.strip():
            raise ConfigError(f"Policy {name} contains an empty or non-string entry")
        out.append(kw.strip().upper() if upper else kw.strip())
    if not out:
        raise ConfigError(f"Policy {name} must not be empty")
    return tuple(out)


READ_ONLY_POLICY = ValidationPolicy(
    profile=Profile.READ_ONLY,
    leading_keywords=("SELECT", "WITH"),
    forbidden_keywords=(
        "INSERT",
        "UPDATE",
        "DELETE",
        "DROP",
        "CREATE",
        "ALTER",
        "TRUNCATE",
        "MERGE",
        "EXEC",
        "EXECUTE",
        "sp_executesql",
        "xp_cmdshell",
        "OPENROWSET",
        "OPENDATASOURCE",
        "BULK",
        "INTO",
    ),
    check_order=CheckOrder.LEADING_FIRST,
)

WRITE_POLICY = ValidationPolicy(
    profile=Profile.WRITE,
    leading_keywords=("INSERT", "UPDATE", "DELETE", "MERGE"),
    forbidden_keywords=(
        "DROP",
        "CREATE",
        "ALTER",
        "GRANT",
        "REVOKE",
        "TRUNCATE",
        "EXEC",
        "EXECUTE",
        "sp_executesql",
        "xp_cmdshell",
        "OPENROWSET",
        "OPENDATASOURCE",
        "BULK",
    ),
    check_order=CheckOrder.FORBIDDEN_FIRST,
)
