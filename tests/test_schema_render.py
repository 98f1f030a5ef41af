from sqlserver_toolkit.schema import render_report
from sqlserver_toolkit.schema.render import common_patterns
from sqlserver_toolkit.schema.types import (
    ColumnDescriptor,
    IndexDescriptor,
    KeyKind,
    RelationshipDescriptor,
    SchemaReport,
    TableDescriptor,
    TableKind,
)


def column(name, data_type, full_type=None, **kw):
    return ColumnDescriptor(
        name=name,
        data_type=data_type,
        full_type=full_type or data_type,
        nullable=kw.pop("nullable", False),
        **kw,
    )


def make_report():
    users = TableDescriptor(
        schema="dbo",
        name="users",
        estimated_rows=42,
        comment="Registered users",
        columns=[
            column("id", "int", "int(10)", is_identity=True, key=KeyKind.PRIMARY),
            column("full_name", "nvarchar", "nvarchar(100)"),
            column("title", "nvarchar", "nvarchar(MAX)", nullable=True),
            column("created_at", "datetime2", default="(getdate())"),
            column("updated_at", "datetime2", nullable=True),
        ],
        primary_key=["id"],
        unique_keys=["full_name"],
    )
    orders = TableDescriptor(
        schema="sales",
        name="orders",
        estimated_rows=1000,
        columns=[
            column("id", "int", key=KeyKind.PRIMARY),
            column("user_id", "int"),
            column("amount", "decimal", "decimal(10,2)", comment="Gross amount"),
        ],
        primary_key=["id"],
    )
    active = TableDescriptor(
        schema="dbo",
        name="active_users",
        kind=TableKind.VIEW,
        columns=[column("id", "int")],
    )
    fk = RelationshipDescriptor(
        constraint_name="FK_orders_users",
        source_schema="sales",
        source_table="orders",
        source_column="user_id",
        target_schema="dbo",
        target_table="users",
        target_column="id",
        update_rule="NO ACTION",
        delete_rule="CASCADE",
    )
    ix = IndexDescriptor(
        schema="sales",
        table="orders",
        name="IX_orders_user",
        is_unique=False,
        type_desc="NONCLUSTERED",
        columns=["user_id", "amount"],
    )
    ux = IndexDescriptor(
        schema="dbo",
        table="users",
        name="CX_users",
        is_unique=True,
        type_desc="CLUSTERED",
        columns=["full_name"],
    )
    return SchemaReport(
        tables=[users, orders, active],
        relationships=[fk],
        indexes=[ix, ux],
        constraints=[],
    )


def test_report_header_and_overview():
    text = render_report(make_report())

    assert text.startswith("# SQL Server Database Schema Analysis\n")
    assert "This database contains 3 tables/views" in text
    assert "- **dbo.users**: 42 rows, Primary Key: id - Registered users" in text
    assert "- **sales.orders**: 1000 rows, Primary Key: id" in text
    assert "- **dbo.active_users** (VIEW): 0 rows, Primary Key: None" in text


def test_report_column_lines():
    text = render_report(make_report())

    assert "### Table: `dbo.users`" in text
    assert "### Table: `dbo.active_users` (VIEW - read only)" in text
    assert "- `id` int(10) NOT NULL IDENTITY" in text
    assert "- `title` nvarchar(MAX) NULL" in text
    assert "- `created_at` datetime2 NOT NULL DEFAULT (getdate())" in text
    assert "- `amount` decimal(10,2) NOT NULL - Gross amount" in text
    assert "**Unique Keys**: full_name" in text


def test_report_relationships_and_indexes():
    text = render_report(make_report())

    assert "## Foreign Key Relationships" in text
    assert (
        "- `sales.orders.user_id` → `dbo.users.id` (ON DELETE CASCADE, ON UPDATE NO ACTION)"
        in text
    )
    assert "## Available Indexes (for Query Optimization)" in text
    assert "- INDEX `IX_orders_user` on `sales.orders` (user_id, amount)" in text
    assert "- UNIQUE CLUSTERED INDEX `CX_users` on `dbo.users` (full_name)" in text


def test_report_omits_empty_sections():
    report = SchemaReport(tables=[], relationships=[], indexes=[], constraints=[])
    text = render_report(report)

    assert "This database contains 0 tables/views" in text
    assert "## Foreign Key Relationships" not in text
    assert "## Available Indexes" not in text
    assert "## SQL Server Query Generation Guidelines" in text
    assert "1. Always use schema-qualified table names" in text


def test_common_patterns_take_first_match_per_table():
    lines = common_patterns(make_report().tables)

    assert lines == [
        "- For temporal queries on `dbo.users`, use `created_at` column",
        "- For text searches on `dbo.users`, consider using `full_name` with LIKE or CONTAINS",
    ]
