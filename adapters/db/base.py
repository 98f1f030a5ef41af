from typing import Any, List, Protocol, Sequence, Tuple

from sqlserver_toolkit.best_effort import BestEffort

Params = Sequence[Any]


class DBAdapter(Protocol):
    """
    Thin wrapper around a borrowed DB-API connection.

    Statements always use positional `?` placeholders; adapters translate them
    to the driver's paramstyle. Adapters never commit, roll back or set
    timeouts: the connection owner decides all of that.
    """

    name: str
    dialect: str  # sqlglot dialect name, used to tokenize statements

    def query(self, sql: str, params: Params = ()) -> Tuple[List[Tuple[Any, ...]], List[str]]:
        """Execute a statement and return (rows, columns). Raise on driver failure."""

    def execute(self, sql: str, params: Params = ()) -> int:
        """Execute a write statement and return the affected row count."""

    def insert(self, sql: str, params: Params = ()) -> Tuple[int, BestEffort[Any]]:
        """
        Execute an INSERT and read the generated identity in the same scope.

        Driver failures of the INSERT raise; the identity read is best effort.
        """

    def close(self) -> None:
        """Close the underlying connection (only when the adapter owns it)."""
