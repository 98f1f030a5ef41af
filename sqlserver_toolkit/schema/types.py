from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class TableKind(str, Enum):
    TABLE = "TABLE"
    VIEW = "VIEW"


class KeyKind(str, Enum):
    PRIMARY = "PRI"
    UNIQUE = "UNI"
    INDEXED = "MUL"


@dataclass(frozen=True)
class ColumnDescriptor:
    name: str
    data_type: str
    full_type: str
    nullable: bool
    default: Optional[str] = None
    is_identity: bool = False
    comment: str = ""
    max_length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    key: Optional[KeyKind] = None


@dataclass
class TableDescriptor:
    schema: str
    name: str
    kind: TableKind = TableKind.TABLE
    estimated_rows: int = 0
    comment: str = ""
    columns: List[ColumnDescriptor] = field(default_factory=list)
    primary_key: List[str] = field(default_factory=list)
    unique_keys: List[str] = field(default_factory=list)
    indexed_columns: List[str] = field(default_factory=list)

    @property
    def qualified_name(self) -> str:
        return f"{self.schema}.{self.name}"

    @property
    def is_view(self) -> bool:
        return self.kind is TableKind.VIEW


@dataclass(frozen=True)
class RelationshipDescriptor:
    constraint_name: str
    source_schema: str
    source_table: str
    source_column: str
    target_schema: str
    target_table: str
    target_column: str
    update_rule: str
    delete_rule: str


@dataclass
class IndexDescriptor:
    schema: str
    table: str
    name: str
    is_unique: bool
    type_desc: str
    columns: List[str] = field(default_factory=list)

    @property
    def is_clustered(self) -> bool:
        return self.type_desc == "CLUSTERED"


@dataclass(frozen=True)
class ConstraintRow:
    schema: str
    name: str
    table: str
    constraint_type: str  # UNIQUE | CHECK


@dataclass(frozen=True)
class SchemaReport:
    tables: List[TableDescriptor]
    relationships: List[RelationshipDescriptor]
    indexes: List[IndexDescriptor]
    constraints: List[ConstraintRow]
