"""Test doubles shared across test modules."""

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from sqlserver_toolkit.best_effort import best_effort


class FakeCatalogAdapter:
    """
    Canned SQL Server catalog: dispatches each query by a marker it contains
    and records every (sql, params) call.
    """

    name = "fake"
    dialect = "tsql"

    def __init__(
        self,
        tables: Optional[List[Dict[str, Any]]] = None,
        relationships: Optional[List[Dict[str, Any]]] = None,
        indexes: Optional[List[Dict[str, Any]]] = None,
        constraints: Optional[List[Dict[str, Any]]] = None,
        fail_on: Optional[str] = None,
    ) -> None:
        self.results = {
            "tables": tables or [],
            "relationships": relationships or [],
            "indexes": indexes or [],
            "constraints": constraints or [],
        }
        self.fail_on = fail_on
        self.calls: List[Tuple[str, str, List[Any]]] = []

    @staticmethod
    def _kind(sql: str) -> str:
        if "FROM INFORMATION_SCHEMA.TABLES t" in sql:
            return "tables"
        if "sys.foreign_keys" in sql:
            return "relationships"
        if "SEQ_IN_INDEX" in sql:
            return "indexes"
        return "constraints"

    def query(self, sql: str, params: Sequence[Any] = ()):
        kind = self._kind(sql)
        self.calls.append((kind, sql, list(params)))
        if kind == self.fail_on:
            raise RuntimeError(f"catalog view unavailable: {kind}")
        rows = self.results[kind]
        cols: List[str] = []
        for r in rows:
            for c in r:
                if c not in cols:
                    cols.append(c)
        return [tuple(r.get(c) for c in cols) for r in rows], cols

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        raise NotImplementedError

    def insert(self, sql: str, params: Sequence[Any] = ()):
        raise NotImplementedError

    def close(self) -> None:
        return None


class ScriptedAdapter:
    """Adapter whose write/identity behaviour is scripted per test."""

    name = "scripted"
    dialect = "tsql"

    def __init__(
        self,
        rowcount: int = 1,
        identity: Callable[[], Any] = lambda: None,
        error: Optional[Exception] = None,
    ) -> None:
        self.rowcount = rowcount
        self.identity = identity
        self.error = error
        self.executed: List[Tuple[str, List[Any]]] = []
        self.inserted: List[Tuple[str, List[Any]]] = []

    def query(self, sql: str, params: Sequence[Any] = ()):
        self.executed.append((sql, list(params)))
        if self.error is not None:
            raise self.error
        return [], []

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        self.executed.append((sql, list(params)))
        if self.error is not None:
            raise self.error
        return self.rowcount

    def insert(self, sql: str, params: Sequence[Any] = ()):
        self.executed.append((sql, list(params)))
        self.inserted.append((sql, list(params)))
        if self.error is not None:
            raise self.error
        return self.rowcount, best_effort("last_insert_id", self.identity)

    def close(self) -> None:
        return None
