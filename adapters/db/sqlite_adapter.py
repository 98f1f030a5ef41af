import sqlite3
import logging
from typing import Any, List, Tuple
from pathlib import Path

from adapters.db.base import DBAdapter, Params
from sqlserver_toolkit.best_effort import BestEffort, best_effort

log = logging.getLogger(__name__)


class SQLiteAdapter(DBAdapter):
    """
    Local adapter over a sqlite3 connection (native `?` paramstyle).

    Handy for development and tests; SQL Server catalog introspection does
    not apply to it.
    """

    name = "sqlite"
    dialect = "sqlite"

    def __init__(self, conn: sqlite3.Connection, *, owns_connection: bool = False):
        self.conn = conn
        self.owns_connection = owns_connection

    @classmethod
    def connect(cls, path: str) -> "SQLiteAdapter":
        """Open a connection in autocommit mode; the adapter owns it."""
        if path != ":memory:":
            # resolve absolute path for clearer logs
            path = str(Path(path).resolve())
        conn = sqlite3.connect(path, isolation_level=None)
        log.info("SQLiteAdapter opened connection to: %s", path)
        return cls(conn, owns_connection=True)

    def query(self, sql: str, params: Params = ()) -> Tuple[List[Tuple[Any, ...]], List[str]]:
        log.debug("Executing SQL: %s", sql.strip().replace("\n", " "))
        cur = self.conn.execute(sql, tuple(params))
        try:
            desc = cur.description or ()
            cols = [d[0] for d in desc]
            rows = cur.fetchall() if desc else []
            return rows, cols
        finally:
            cur.close()

    def execute(self, sql: str, params: Params = ()) -> int:
        cur = self.conn.execute(sql, tuple(params))
        try:
            return int(cur.rowcount)
        finally:
            cur.close()

    def insert(self, sql: str, params: Params = ()) -> Tuple[int, BestEffort[Any]]:
        affected = self.execute(sql, params)
        # last_insert_rowid() is connection-scoped
        return affected, best_effort("last_insert_id", self._last_rowid)

    def _last_rowid(self) -> Any:
        row = self.conn.execute("SELECT last_insert_rowid()").fetchone()
        return row[0] if row else None

    def close(self) -> None:
        if self.owns_connection:
            self.conn.close()

    def __enter__(self) -> "SQLiteAdapter":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
