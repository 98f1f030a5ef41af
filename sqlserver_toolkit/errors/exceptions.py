from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from sqlserver_toolkit.errors.codes import ErrorCode


@dataclass
class ToolkitError(Exception):
    """Base class for toolkit-level errors raised outside the tool call path."""

    message: str
    code: str = "toolkit_error"
    retryable: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message


@dataclass
class ConfigError(ToolkitError):
    code: str = "config_error"


@dataclass
class SchemaIntrospectionError(ToolkitError):
    code: str = ErrorCode.SCHEMA_INTROSPECTION_FAILED.value
