from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

from adapters.db.base import DBAdapter
from sqlserver_toolkit.errors.exceptions import SchemaIntrospectionError
from sqlserver_toolkit.schema import catalog
from sqlserver_toolkit.schema.types import (
    ColumnDescriptor,
    ConstraintRow,
    IndexDescriptor,
    KeyKind,
    RelationshipDescriptor,
    SchemaReport,
    TableDescriptor,
    TableKind,
)

log = logging.getLogger(__name__)

Row = Dict[str, Any]


# ------------------------------ decoding helpers ------------------------------


def _int_or_none(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def full_type(
    data_type: str,
    max_length: Optional[int],
    precision: Optional[int],
    scale: Optional[int],
) -> str:
    """
    Render a column type the way SQL Server DDL spells it.

    varchar + 50 -> varchar(50); nvarchar + -1 -> nvarchar(MAX);
    decimal + 10,2 -> decimal(10,2); int + 10,0 -> int(10).
    """
    if max_length:
        return f"{data_type}({'MAX' if max_length == -1 else max_length})"
    if precision:
        if scale:
            return f"{data_type}({precision},{scale})"
        return f"{data_type}({precision})"
    return data_type


def _key_kind(value: Any) -> Optional[KeyKind]:
    try:
        return KeyKind(value) if value else None
    except ValueError:
        return None


def _rule(code: Any) -> str:
    return catalog.REFERENTIAL_ACTIONS.get(_int_or_none(code) or 0, "NO ACTION")


def decode_tables(rows: Sequence[Row]) -> List[TableDescriptor]:
    """Group one-row-per-column results into table descriptors (insertion ordered)."""
    tables: Dict[Tuple[str, str], TableDescriptor] = {}
    for row in rows:
        key = (_text(row.get("TABLE_SCHEMA")), _text(row.get("TABLE_NAME")))
        table = tables.get(key)
        if table is None:
            table = TableDescriptor(
                schema=key[0],
                name=key[1],
                kind=TableKind.VIEW if row.get("TABLE_TYPE") == "VIEW" else TableKind.TABLE,
                estimated_rows=_int_or_none(row.get("TABLE_ROWS")) or 0,
                comment=_text(row.get("TABLE_COMMENT")),
            )
            tables[key] = table

        name = row.get("COLUMN_NAME")
        if not name:
            # table or view without columns still gets an entry
            continue
        if any(c.name == name for c in table.columns):
            continue

        data_type = _text(row.get("DATA_TYPE"))
        max_length = _int_or_none(row.get("CHARACTER_MAXIMUM_LENGTH"))
        precision = _int_or_none(row.get("NUMERIC_PRECISION"))
        scale = _int_or_none(row.get("NUMERIC_SCALE"))
        default = row.get("COLUMN_DEFAULT")
        key_kind = _key_kind(row.get("COLUMN_KEY"))

        column = ColumnDescriptor(
            name=str(name),
            data_type=data_type,
            full_type=full_type(data_type, max_length, precision, scale),
            nullable=row.get("IS_NULLABLE") == "YES",
            default=None if default is None else str(default),
            is_identity=_int_or_none(row.get("IS_IDENTITY")) == 1,
            comment=_text(row.get("COLUMN_COMMENT")),
            max_length=max_length or None,
            precision=precision or None,
            scale=scale if precision else None,
            key=key_kind,
        )
        table.columns.append(column)

        if key_kind is KeyKind.PRIMARY:
            table.primary_key.append(column.name)
        elif key_kind is KeyKind.UNIQUE:
            table.unique_keys.append(column.name)
        elif key_kind is KeyKind.INDEXED:
            table.indexed_columns.append(column.name)

    return list(tables.values())


def decode_relationships(rows: Sequence[Row]) -> List[RelationshipDescriptor]:
    return [
        RelationshipDescriptor(
            constraint_name=_text(r.get("constraint_name")),
            source_schema=_text(r.get("source_schema")),
            source_table=_text(r.get("source_table")),
            source_column=_text(r.get("source_column")),
            target_schema=_text(r.get("target_schema")),
            target_table=_text(r.get("target_table")),
            target_column=_text(r.get("target_column")),
            update_rule=_rule(r.get("update_action")),
            delete_rule=_rule(r.get("delete_action")),
        )
        for r in rows
    ]


def decode_indexes(rows: Sequence[Row]) -> List[IndexDescriptor]:
    indexes: Dict[Tuple[str, str, str], IndexDescriptor] = {}
    ordinals: Dict[Tuple[str, str, str], List[Tuple[int, str]]] = {}
    for r in rows:
        key = (
            _text(r.get("TABLE_SCHEMA")),
            _text(r.get("TABLE_NAME")),
            _text(r.get("INDEX_NAME")),
        )
        if key not in indexes:
            indexes[key] = IndexDescriptor(
                schema=key[0],
                table=key[1],
                name=key[2],
                is_unique=bool(_int_or_none(r.get("is_unique"))),
                type_desc=_text(r.get("type_desc")),
            )
            ordinals[key] = []
        seq = _int_or_none(r.get("SEQ_IN_INDEX")) or 0
        ordinals[key].append((seq, _text(r.get("COLUMN_NAME"))))

    for key, index in indexes.items():
        # stable sort keeps driver order for equal ordinals (included columns are 0)
        index.columns = [name for _, name in sorted(ordinals[key], key=lambda p: p[0])]
    return list(indexes.values())


def decode_constraints(rows: Sequence[Row]) -> List[ConstraintRow]:
    return [
        ConstraintRow(
            schema=_text(r.get("TABLE_SCHEMA")),
            name=_text(r.get("CONSTRAINT_NAME")),
            table=_text(r.get("TABLE_NAME")),
            constraint_type=_text(r.get("CONSTRAINT_TYPE")),
        )
        for r in rows
    ]


# -------------------------------- introspector --------------------------------


class SchemaIntrospector:
    """
    Discover tables, views, columns, foreign keys, indexes and constraints
    from SQL Server catalog views.

    Every call queries the catalog afresh; nothing is cached.
    """

    name = "schema_introspector"

    def __init__(self, db: DBAdapter, tables: Optional[Sequence[str]] = None) -> None:
        self.db = db
        self.tables = list(tables or [])

    def _fetch(self, label: str, sql: str, params: List[str]) -> List[Row]:
        try:
            rows, cols = self.db.query(sql, params)
        except Exception as e:
            log.debug("Catalog query failed", extra={"query": label, "error": str(e)})
            raise SchemaIntrospectionError(
                f"Failed to read {label} from the database catalog: {e}",
                extra={"query": label},
            ) from e
        return [dict(zip(cols, r)) for r in rows]

    def describe(self, tables: Optional[Sequence[str]] = None) -> SchemaReport:
        """Build a SchemaReport; `tables` overrides the constructor filter."""
        t0 = time.perf_counter()
        names = list(tables) if tables is not None else self.tables

        report = SchemaReport(
            tables=decode_tables(self._fetch("tables", *catalog.tables_query(names))),
            relationships=decode_relationships(
                self._fetch("relationships", *catalog.relationships_query(names))
            ),
            indexes=decode_indexes(self._fetch("indexes", *catalog.indexes_query(names))),
            constraints=decode_constraints(
                self._fetch("constraints", *catalog.constraints_query(names))
            ),
        )
        log.debug(
            "Schema described",
            extra={
                "tables": len(report.tables),
                "relationships": len(report.relationships),
                "indexes": len(report.indexes),
                "filtered": bool(names),
                "duration_ms": (time.perf_counter() - t0) * 1000,
            },
        )
        return report
