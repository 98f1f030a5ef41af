from __future__ import annotations

import logging
from typing import Any, List, Optional, Tuple

import pymssql

from adapters.db.base import DBAdapter, Params
from sqlserver_toolkit.best_effort import BestEffort, best_effort
from sqlserver_toolkit.params import qmark_to_pyformat
from sqlserver_toolkit.settings import Settings

log = logging.getLogger(__name__)

# SCOPE_IDENTITY() is batch-scoped: it must run in the INSERT's own batch.
IDENTITY_SUFFIX = "SELECT @@ROWCOUNT AS affected_rows, SCOPE_IDENTITY() AS last_id"


def _last_result_row(cur: Any) -> Optional[Tuple[Any, ...]]:
    """First row of the last result set a batch produced."""
    row = cur.fetchone() if cur.description else None
    while cur.nextset():
        row = cur.fetchone() if cur.description else None
    return row


class SQLServerAdapter(DBAdapter):
    """
    SQL Server / Azure SQL adapter over a pymssql connection.

    The connection is borrowed: pass one you manage yourself, or use
    `SQLServerAdapter.connect(settings)` and close the adapter when done.
    """

    name = "sqlserver"
    dialect = "tsql"

    def __init__(self, conn: Any, *, owns_connection: bool = False):
        self.conn = conn
        self.owns_connection = owns_connection

    @classmethod
    def connect(cls, settings: Settings) -> "SQLServerAdapter":
        """Open a pymssql connection from settings; the adapter owns it."""
        conn = pymssql.connect(
            server=settings.mssql_server,
            port=str(settings.mssql_port),
            user=settings.mssql_user or None,
            password=settings.mssql_password or None,
            database=settings.mssql_database,
            login_timeout=settings.mssql_login_timeout,
            autocommit=settings.mssql_autocommit,
        )
        log.info(
            "SQLServerAdapter connected",
            extra={
                "server": settings.mssql_server,
                "database": settings.mssql_database,
            },
        )
        return cls(conn, owns_connection=True)

    def _prepare(self, sql: str, params: Params) -> Tuple[str, Optional[tuple]]:
        if not params:
            return sql, None
        return qmark_to_pyformat(sql, self.dialect), tuple(params)

    def query(self, sql: str, params: Params = ()) -> Tuple[List[Tuple[Any, ...]], List[str]]:
        stmt, args = self._prepare(sql, params)
        cur = self.conn.cursor()
        try:
            cur.execute(stmt, args)
            desc = cur.description or ()
            cols: List[str] = [d[0] for d in desc if d]
            rows = list(cur.fetchall() or []) if desc else []
            return rows, cols
        finally:
            cur.close()

    def execute(self, sql: str, params: Params = ()) -> int:
        stmt, args = self._prepare(sql, params)
        cur = self.conn.cursor()
        try:
            cur.execute(stmt, args)
            return int(cur.rowcount)
        finally:
            cur.close()

    def insert(self, sql: str, params: Params = ()) -> Tuple[int, BestEffort[Any]]:
        batch = f"{sql.rstrip().rstrip(';')}\n;{IDENTITY_SUFFIX}"
        stmt, args = self._prepare(batch, params)
        cur = self.conn.cursor()
        try:
            cur.execute(stmt, args)
            lookup = best_effort("last_insert_id", lambda: _last_result_row(cur))
            row = lookup.value
            if row is None:
                return int(cur.rowcount), BestEffort(lookup.operation, error=lookup.error)
            return int(row[0]), BestEffort(lookup.operation, value=row[1])
        finally:
            cur.close()

    def close(self) -> None:
        if self.owns_connection:
            self.conn.close()

    def __enter__(self) -> "SQLServerAdapter":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
