"""
SQL Server catalog queries used for schema discovery.

Column aliases are part of the contract with `introspector.py`; the queries
target INFORMATION_SCHEMA and sys.* views as shipped with SQL Server 2016+
and Azure SQL Database.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

# sys.foreign_keys.{update,delete}_referential_action
REFERENTIAL_ACTIONS = {
    0: "NO ACTION",
    1: "CASCADE",
    2: "SET NULL",
    3: "SET DEFAULT",
}

TABLES_SQL = """
SELECT
    t.TABLE_SCHEMA,
    t.TABLE_NAME,
    t.TABLE_TYPE,
    c.COLUMN_NAME,
    c.ORDINAL_POSITION,
    c.COLUMN_DEFAULT,
    c.IS_NULLABLE,
    c.DATA_TYPE,
    c.CHARACTER_MAXIMUM_LENGTH,
    c.NUMERIC_PRECISION,
    c.NUMERIC_SCALE,
    COLUMNPROPERTY(OBJECT_ID(t.TABLE_SCHEMA + '.' + t.TABLE_NAME), c.COLUMN_NAME, 'IsIdentity') AS IS_IDENTITY,
    CASE
        WHEN pk.COLUMN_NAME IS NOT NULL THEN 'PRI'
        WHEN uq.COLUMN_NAME IS NOT NULL THEN 'UNI'
        WHEN idx.COLUMN_NAME IS NOT NULL THEN 'MUL'
        ELSE NULL
    END AS COLUMN_KEY,
    CAST(ep.value AS NVARCHAR(4000)) AS COLUMN_COMMENT,
    CAST(tep.value AS NVARCHAR(4000)) AS TABLE_COMMENT,
    p.total_rows AS TABLE_ROWS
FROM INFORMATION_SCHEMA.TABLES t
LEFT JOIN INFORMATION_SCHEMA.COLUMNS c
    ON t.TABLE_NAME = c.TABLE_NAME
    AND t.TABLE_SCHEMA = c.TABLE_SCHEMA
LEFT JOIN (
    SELECT ku.TABLE_SCHEMA, ku.TABLE_NAME, ku.COLUMN_NAME
    FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS tc
    JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE ku
        ON tc.CONSTRAINT_NAME = ku.CONSTRAINT_NAME
        AND tc.TABLE_SCHEMA = ku.TABLE_SCHEMA
    WHERE tc.CONSTRAINT_TYPE = 'PRIMARY KEY'
) pk ON c.TABLE_SCHEMA = pk.TABLE_SCHEMA
    AND c.TABLE_NAME = pk.TABLE_NAME
    AND c.COLUMN_NAME = pk.COLUMN_NAME
LEFT JOIN (
    SELECT DISTINCT ku.TABLE_SCHEMA, ku.TABLE_NAME, ku.COLUMN_NAME
    FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS tc
    JOIN INFORMATION_SCHEMA.KEY_COLUMN_USAGE ku
        ON tc.CONSTRAINT_NAME = ku.CONSTRAINT_NAME
        AND tc.TABLE_SCHEMA = ku.TABLE_SCHEMA
    WHERE tc.CONSTRAINT_TYPE = 'UNIQUE'
) uq ON c.TABLE_SCHEMA = uq.TABLE_SCHEMA
    AND c.TABLE_NAME = uq.TABLE_NAME
    AND c.COLUMN_NAME = uq.COLUMN_NAME
LEFT JOIN (
    SELECT DISTINCT
        SCHEMA_NAME(o.schema_id) AS TABLE_SCHEMA,
        o.name AS TABLE_NAME,
        col.name AS COLUMN_NAME
    FROM sys.indexes i
    JOIN sys.index_columns ic ON i.object_id = ic.object_id AND i.index_id = ic.index_id
    JOIN sys.columns col ON ic.object_id = col.object_id AND ic.column_id = col.column_id
    JOIN sys.objects o ON i.object_id = o.object_id
    WHERE i.is_primary_key = 0 AND i.is_unique_constraint = 0
) idx ON c.TABLE_SCHEMA = idx.TABLE_SCHEMA
    AND c.TABLE_NAME = idx.TABLE_NAME
    AND c.COLUMN_NAME = idx.COLUMN_NAME
LEFT JOIN sys.extended_properties ep
    ON ep.major_id = OBJECT_ID(t.TABLE_SCHEMA + '.' + t.TABLE_NAME)
    AND ep.minor_id = COLUMNPROPERTY(OBJECT_ID(t.TABLE_SCHEMA + '.' + t.TABLE_NAME), c.COLUMN_NAME, 'ColumnId')
    AND ep.name = 'MS_Description'
LEFT JOIN sys.extended_properties tep
    ON tep.major_id = OBJECT_ID(t.TABLE_SCHEMA + '.' + t.TABLE_NAME)
    AND tep.minor_id = 0
    AND tep.name = 'MS_Description'
LEFT JOIN (
    SELECT object_id, SUM(rows) AS total_rows
    FROM sys.partitions
    WHERE index_id IN (0, 1)
    GROUP BY object_id
) p ON p.object_id = OBJECT_ID(t.TABLE_SCHEMA + '.' + t.TABLE_NAME)
WHERE t.TABLE_TYPE IN ('BASE TABLE', 'VIEW'){filter}
ORDER BY t.TABLE_SCHEMA, t.TABLE_NAME, c.ORDINAL_POSITION
"""

RELATIONSHIPS_SQL = """
SELECT
    fk.name AS constraint_name,
    OBJECT_SCHEMA_NAME(fk.parent_object_id) AS source_schema,
    OBJECT_NAME(fk.parent_object_id) AS source_table,
    COL_NAME(fkc.parent_object_id, fkc.parent_column_id) AS source_column,
    OBJECT_SCHEMA_NAME(fk.referenced_object_id) AS target_schema,
    OBJECT_NAME(fk.referenced_object_id) AS target_table,
    COL_NAME(fkc.referenced_object_id, fkc.referenced_column_id) AS target_column,
    fk.update_referential_action AS update_action,
    fk.delete_referential_action AS delete_action
FROM sys.foreign_keys fk
INNER JOIN sys.foreign_key_columns fkc
    ON fk.object_id = fkc.constraint_object_id
WHERE 1=1{filter}
ORDER BY source_schema, source_table, fkc.constraint_column_id
"""

INDEXES_SQL = """
SELECT
    SCHEMA_NAME(o.schema_id) AS TABLE_SCHEMA,
    o.name AS TABLE_NAME,
    i.name AS INDEX_NAME,
    i.type_desc,
    i.is_unique,
    col.name AS COLUMN_NAME,
    ic.key_ordinal AS SEQ_IN_INDEX
FROM sys.indexes i
INNER JOIN sys.index_columns ic
    ON i.object_id = ic.object_id
    AND i.index_id = ic.index_id
INNER JOIN sys.columns col
    ON ic.object_id = col.object_id
    AND ic.column_id = col.column_id
INNER JOIN sys.objects o
    ON i.object_id = o.object_id
WHERE i.is_primary_key = 0
    AND i.is_unique_constraint = 0
    AND o.type = 'U'{filter}
ORDER BY o.name, i.name, ic.key_ordinal
"""

CONSTRAINTS_SQL = """
SELECT
    TABLE_SCHEMA,
    CONSTRAINT_NAME,
    TABLE_NAME,
    CONSTRAINT_TYPE
FROM INFORMATION_SCHEMA.TABLE_CONSTRAINTS
WHERE CONSTRAINT_TYPE IN ('UNIQUE', 'CHECK'){filter}
"""


def _in_list(column: str, count: int) -> str:
    return f"{column} IN ({', '.join('?' for _ in range(count))})"


def _normalized_filter(tables: Optional[Sequence[str]]) -> List[str]:
    return [t for t in (tables or []) if t]


def tables_query(tables: Optional[Sequence[str]] = None) -> Tuple[str, List[str]]:
    names = _normalized_filter(tables)
    if not names:
        return TABLES_SQL.format(filter=""), []
    return TABLES_SQL.format(filter=f" AND {_in_list('t.TABLE_NAME', len(names))}"), names


def relationships_query(tables: Optional[Sequence[str]] = None) -> Tuple[str, List[str]]:
    names = _normalized_filter(tables)
    if not names:
        return RELATIONSHIPS_SQL.format(filter=""), []
    # either endpoint of the foreign key may match
    clause = (
        f" AND ({_in_list('OBJECT_NAME(fk.parent_object_id)', len(names))}"
        f" OR {_in_list('OBJECT_NAME(fk.referenced_object_id)', len(names))})"
    )
    return RELATIONSHIPS_SQL.format(filter=clause), names + names


def indexes_query(tables: Optional[Sequence[str]] = None) -> Tuple[str, List[str]]:
    names = _normalized_filter(tables)
    if not names:
        return INDEXES_SQL.format(filter=""), []
    return INDEXES_SQL.format(filter=f" AND {_in_list('o.name', len(names))}"), names


def constraints_query(tables: Optional[Sequence[str]] = None) -> Tuple[str, List[str]]:
    names = _normalized_filter(tables)
    if not names:
        return CONSTRAINTS_SQL.format(filter=""), []
    return CONSTRAINTS_SQL.format(filter=f" AND {_in_list('TABLE_NAME', len(names))}"), names
