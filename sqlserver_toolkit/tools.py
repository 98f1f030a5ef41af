"""
Agent-facing tools.

Each tool exposes a stable `name`, a `description` for the model, a pydantic
argument model (JSON schema via `parameters_schema()`), and is callable. The
executors return structured outcomes; this module is the only place that
turns them into the text/rows an agent framework hands back to the model.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from adapters.db.base import DBAdapter
from sqlserver_toolkit.errors.codes import ErrorCode
from sqlserver_toolkit.errors.exceptions import SchemaIntrospectionError
from sqlserver_toolkit.executor import ReadExecutor, WriteExecutor
from sqlserver_toolkit.schema.introspector import SchemaIntrospector
from sqlserver_toolkit.schema.render import render_report
from sqlserver_toolkit.types import Failure, Rows, WriteResult

log = logging.getLogger(__name__)

ParamValue = Optional[Union[bool, int, float, str]]


# -------------------------------- argument models --------------------------------


class SchemaArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")


class SelectArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    query: str = Field(
        description=(
            "The parameterized SELECT query. Use positional placeholders (?) for "
            'parameters. Example: "SELECT name, email FROM dbo.users WHERE id = ? '
            'AND status = ?". All dynamic values must use positional parameters.'
        )
    )
    parameters: List[ParamValue] = Field(
        default_factory=list,
        description=(
            "Parameter values in the exact order their ? placeholders appear in "
            'the query. Example: [123, "active"]. Leave empty if no parameters '
            "are needed."
        ),
    )


class WriteArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    query: str = Field(
        description=(
            "The parameterized write query using positional placeholders (?). "
            'Examples: "INSERT INTO dbo.users (name, email) VALUES (?, ?)", '
            '"UPDATE dbo.users SET name = ? WHERE id = ?", '
            '"DELETE FROM dbo.users WHERE id = ?", '
            '"MERGE INTO dbo.target USING dbo.source ON ...".'
        )
    )
    parameters: List[ParamValue] = Field(
        default_factory=list,
        description=(
            "Parameter values in the exact order their ? placeholders appear in "
            'the query. Example: ["John Doe", "john@example.com", 123]. Leave '
            "empty if no parameters are needed."
        ),
    )


# ----------------------------------- formatting -----------------------------------


def format_failure(failure: Failure) -> str:
    if failure.error_code is ErrorCode.DRIVER_FAILURE:
        return f"Error executing query: {failure.message}"
    return failure.message


def format_write_result(result: WriteResult) -> str:
    text = f"Query executed successfully. {result.affected_rows} row(s) affected."
    if result.last_insert_id is not None:
        text += f" Last insert ID: {result.last_insert_id}"
    return text


# -------------------------------------- tools --------------------------------------


class _Tool:
    name: str = ""
    description: str = ""
    args_model: Type[BaseModel] = SchemaArgs

    def parameters_schema(self) -> Dict[str, Any]:
        return self.args_model.model_json_schema()

    def spec(self) -> Dict[str, Any]:
        """Function-calling style declaration for agent frameworks."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters_schema(),
        }

    def invoke(self, arguments: Optional[Mapping[str, Any]] = None) -> Any:
        """Validate raw tool-call arguments, then call the tool."""
        try:
            args = self.args_model.model_validate(dict(arguments or {}))
        except ValidationError as exc:
            log.debug("Invalid tool arguments", extra={"tool": self.name})
            return f"Invalid arguments for {self.name}: {exc.errors(include_url=False)}"
        return self(**args.model_dump())


class SchemaTool(_Tool):
    name = "analyze_sqlserver_database_schema"
    description = (
        "Retrieves SQL Server database schema information including tables, views, "
        "columns, relationships, and indexes. Use this tool first to understand the "
        "database structure before writing any SQL queries. Essential for generating "
        "accurate queries with proper table/column names, JOIN conditions, and "
        "performance optimization. DO NOT call this tool if you already have database "
        "schema information in the context."
    )
    args_model = SchemaArgs

    def __init__(self, db: DBAdapter, tables: Optional[Sequence[str]] = None) -> None:
        self.introspector = SchemaIntrospector(db, tables=tables)

    def __call__(self) -> str:
        try:
            report = self.introspector.describe()
        except SchemaIntrospectionError as exc:
            log.warning("Schema introspection failed", extra={"error": str(exc)})
            return f"Error retrieving database schema: {exc}"
        return render_report(report)


class SelectTool(_Tool):
    name = "sqlserver_select_query"
    description = (
        "Use this tool only to run SELECT queries against the SQL Server database. "
        "This is the tool to use only to gather information from the SQL Server "
        "database. Note: SQL Server uses TOP instead of LIMIT for row limiting "
        "(e.g., SELECT TOP 10 * FROM table).\n\n"
        "IMPORTANT: This tool returns an array of results. An empty array [] means no "
        "matching records were found, which is a valid result - DO NOT retry the query "
        "if you get an empty array."
    )
    args_model = SelectArgs

    def __init__(self, db: DBAdapter, executor: Optional[ReadExecutor] = None) -> None:
        self.executor = executor or ReadExecutor(db)

    def run(self, query: str, parameters: Optional[Sequence[Any]] = None) -> Union[Rows, Failure]:
        return self.executor.run(query, parameters)

    def __call__(
        self, query: str, parameters: Optional[Sequence[Any]] = None
    ) -> Union[List[Dict[str, Any]], str]:
        outcome = self.run(query, parameters)
        if isinstance(outcome, Failure):
            return format_failure(outcome)
        return outcome.rows


class WriteTool(_Tool):
    name = "sqlserver_write_query"
    description = (
        "Use this tool to perform write operations against the SQL Server database "
        "(e.g. INSERT, UPDATE, DELETE, MERGE).\n"
        "Use positional placeholders (?) for parameters instead of named parameters.\n"
        "After an INSERT into a table with an IDENTITY column the generated ID is "
        "reported when available.\n"
        "Do NOT use this tool on views; views are read-only."
    )
    args_model = WriteArgs

    def __init__(self, db: DBAdapter, executor: Optional[WriteExecutor] = None) -> None:
        self.executor = executor or WriteExecutor(db)

    def run(
        self, query: str, parameters: Optional[Sequence[Any]] = None
    ) -> Union[WriteResult, Failure]:
        return self.executor.run(query, parameters)

    def __call__(self, query: str, parameters: Optional[Sequence[Any]] = None) -> str:
        outcome = self.run(query, parameters)
        if isinstance(outcome, Failure):
            return format_failure(outcome)
        return format_write_result(outcome)
