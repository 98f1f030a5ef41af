"""
Registry mapping simple string keys to policies and adapter classes.
Used by toolkit_factory to perform lightweight dependency injection.
"""

from dataclasses import replace
from typing import Dict, Type

from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.db.sqlserver_adapter import SQLServerAdapter
from sqlserver_toolkit.policy import (
    READ_ONLY_POLICY,
    WRITE_POLICY,
    Profile,
    ValidationPolicy,
)

# "raw" scans the statement text as written, comments included
POLICIES: Dict[Profile, Dict[str, ValidationPolicy]] = {
    Profile.READ_ONLY: {
        "default": READ_ONLY_POLICY,
        "raw": replace(READ_ONLY_POLICY, scan_normalized=False),
    },
    Profile.WRITE: {
        "default": WRITE_POLICY,
        "raw": replace(WRITE_POLICY, scan_normalized=False),
    },
}

ADAPTERS: Dict[str, Type] = {
    "sqlserver": SQLServerAdapter,
    "sqlite": SQLiteAdapter,
}
