from __future__ import annotations

from typing import List, Optional, Sequence, Union

from adapters.db.base import DBAdapter
from adapters.metrics.base import Metrics
from adapters.metrics.prometheus import PrometheusMetrics
from sqlserver_toolkit.executor import ReadExecutor, WriteExecutor
from sqlserver_toolkit.policy import READ_ONLY_POLICY, WRITE_POLICY, ValidationPolicy
from sqlserver_toolkit.tools import SchemaTool, SelectTool, WriteTool
from sqlserver_toolkit.validator import QueryValidator

Tool = Union[SchemaTool, SelectTool, WriteTool]

GUIDELINES = """These tools allow you to learn the SQL Server database structure,
getting detailed information about tables, views, columns, relationships, and constraints
to generate and execute precise and efficient SQL queries for SQL Server / Azure SQL database.

CRITICAL QUERY EXECUTION GUIDELINES:
- The SELECT tool returns an array of results (can be empty array if no matches)
- An empty array [] is a VALID result meaning no matching records exist
- DO NOT retry queries when you get an empty array - accept it as the final answer
- Only retry if you get an actual error message in the result
- If a table genuinely has no data matching your criteria, inform the user directly

Important notes for SQL Server:
- Always use schema-qualified table names (e.g., dbo.TableName)
- Use TOP instead of LIMIT for row limiting (e.g., SELECT TOP 10 * FROM table)
- Use positional parameters (?) instead of named parameters (:name)
- The number of parameters must match the number of ? placeholders
- Be aware of IDENTITY columns (SQL Server's equivalent of AUTO_INCREMENT)
- String comparisons are case-insensitive by default (depends on collation)
- Use GETDATE() for current datetime, not NOW()
- Use LEN() instead of LENGTH() for string length
- Use + for string concatenation or CONCAT() function
- Views are read-only; do not attempt INSERT, UPDATE, or DELETE on views"""


class SQLServerToolkit:
    """
    Bundle of the schema, select and write tools over one shared adapter.

    The adapter (and its connection) is owned by the caller; the toolkit adds
    no locking or transactions of its own.
    """

    def __init__(
        self,
        db: DBAdapter,
        tables: Optional[Sequence[str]] = None,
        *,
        read_policy: ValidationPolicy = READ_ONLY_POLICY,
        write_policy: ValidationPolicy = WRITE_POLICY,
        strict_parameter_count: bool = True,
        metrics: Optional[Metrics] = None,
    ) -> None:
        self.db = db
        self.tables = list(tables or [])
        self.metrics = metrics or PrometheusMetrics()
        self.read_executor = ReadExecutor(
            db,
            QueryValidator(read_policy, metrics=self.metrics, dialect=db.dialect),
            strict_parameter_count=strict_parameter_count,
            metrics=self.metrics,
        )
        self.write_executor = WriteExecutor(
            db,
            QueryValidator(write_policy, metrics=self.metrics, dialect=db.dialect),
            strict_parameter_count=strict_parameter_count,
            metrics=self.metrics,
        )

    def guidelines(self) -> str:
        return GUIDELINES

    def provide(self) -> List[Tool]:
        return [
            SchemaTool(self.db, tables=self.tables),
            SelectTool(self.db, executor=self.read_executor),
            WriteTool(self.db, executor=self.write_executor),
        ]
