from __future__ import annotations

from typing import List

from .types import SchemaReport, TableDescriptor

TEMPORAL_TYPES = {"datetime", "datetime2", "smalldatetime", "date", "datetimeoffset"}
TEMPORAL_HINTS = ("created", "updated", "modified")

TEXT_TYPES = {"varchar", "nvarchar", "text", "ntext"}
TEXT_HINTS = ("name", "title", "description")

GUIDELINES = [
    "Always use schema-qualified table names (e.g., dbo.TableName)",
    "Use table aliases for better readability",
    "Prefer indexed columns in WHERE clauses for better performance",
    "Use appropriate JOINs based on the foreign key relationships listed above",
    "Consider the estimated row counts when writing queries - larger tables may need TOP clauses",
    "Pay attention to nullable columns when using comparison operators",
    "Use parameterized queries with positional placeholders (?) to prevent SQL injection",
    "Views are read-only; do not attempt INSERT, UPDATE, or DELETE on views",
]


def _overview(tables: List[TableDescriptor]) -> List[str]:
    lines = ["## Tables Overview"]
    for t in tables:
        pk = ", ".join(t.primary_key) if t.primary_key else "None"
        label = " (VIEW)" if t.is_view else ""
        line = f"- **{t.qualified_name}**{label}: {t.estimated_rows} rows, Primary Key: {pk}"
        if t.comment:
            line += f" - {t.comment}"
        lines.append(line)
    lines.append("")
    return lines


def _table_details(t: TableDescriptor) -> List[str]:
    label = " (VIEW - read only)" if t.is_view else ""
    lines = [f"### Table: `{t.qualified_name}`{label}"]
    if t.comment:
        lines.append(f"**Description**: {t.comment}")
    lines.append(f"**Estimated Rows**: {t.estimated_rows}")
    lines.append("")
    lines.append("**Columns**:")
    for c in t.columns:
        nullable = "NULL" if c.nullable else "NOT NULL"
        default = f" DEFAULT {c.default}" if c.default is not None else ""
        identity = " IDENTITY" if c.is_identity else ""
        line = f"- `{c.name}` {c.full_type} {nullable}{default}{identity}"
        if c.comment:
            line += f" - {c.comment}"
        lines.append(line)

    if t.primary_key:
        lines.append("")
        lines.append(f"**Primary Key**: {', '.join(t.primary_key)}")
    if t.unique_keys:
        lines.append(f"**Unique Keys**: {', '.join(t.unique_keys)}")
    lines.append("")
    return lines


def common_patterns(tables: List[TableDescriptor]) -> List[str]:
    """Suggest temporal and text-search columns, at most one of each per table."""
    lines: List[str] = []
    for t in tables:
        for c in t.columns:
            name = c.name.lower()
            if c.data_type in TEMPORAL_TYPES and any(h in name for h in TEMPORAL_HINTS):
                lines.append(
                    f"- For temporal queries on `{t.qualified_name}`, use `{c.name}` column"
                )
                break

    for t in tables:
        for c in t.columns:
            name = c.name.lower()
            if c.data_type in TEXT_TYPES and any(h in name for h in TEXT_HINTS):
                lines.append(
                    f"- For text searches on `{t.qualified_name}`, "
                    f"consider using `{c.name}` with LIKE or CONTAINS"
                )
                break
    return lines


def render_report(report: SchemaReport) -> str:
    lines: List[str] = [
        "# SQL Server Database Schema Analysis",
        "",
        f"This database contains {len(report.tables)} tables/views "
        "with the following structure:",
        "",
    ]
    lines.extend(_overview(report.tables))

    lines.append("## Detailed Table Structures")
    lines.append("")
    for t in report.tables:
        lines.extend(_table_details(t))

    if report.relationships:
        lines.append("## Foreign Key Relationships")
        lines.append("")
        lines.append("Understanding these relationships is crucial for JOIN operations:")
        lines.append("")
        for r in report.relationships:
            lines.append(
                f"- `{r.source_schema}.{r.source_table}.{r.source_column}` → "
                f"`{r.target_schema}.{r.target_table}.{r.target_column}` "
                f"(ON DELETE {r.delete_rule}, ON UPDATE {r.update_rule})"
            )
        lines.append("")

    if report.indexes:
        lines.append("## Available Indexes (for Query Optimization)")
        lines.append("")
        lines.append("These indexes can significantly improve query performance:")
        lines.append("")
        for ix in report.indexes:
            unique = "UNIQUE " if ix.is_unique else ""
            clustered = "CLUSTERED " if ix.is_clustered else ""
            lines.append(
                f"- {unique}{clustered}INDEX `{ix.name}` on "
                f"`{ix.schema}.{ix.table}` ({', '.join(ix.columns)})"
            )
        lines.append("")

    lines.append("## SQL Server Query Generation Guidelines")
    lines.append("")
    lines.append("**Best Practices for this database**:")
    lines.extend(f"{i}. {g}" for i, g in enumerate(GUIDELINES, start=1))
    lines.append("")

    lines.append("**Common Query Patterns**:")
    lines.extend(common_patterns(report.tables))
    lines.append("")

    return "\n".join(lines) + "\n"
