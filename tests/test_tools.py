import pytest

from fakes import FakeCatalogAdapter, ScriptedAdapter
from sqlserver_toolkit.toolkit import SQLServerToolkit
from sqlserver_toolkit.tools import SchemaTool, SelectTool, WriteTool
from sqlserver_toolkit.types import Failure, Rows


@pytest.fixture
def toolkit(sqlite_db, metrics):
    return SQLServerToolkit(sqlite_db, metrics=metrics)


def test_provide_returns_three_tools_in_order(toolkit):
    schema, select, write = toolkit.provide()

    assert isinstance(schema, SchemaTool)
    assert isinstance(select, SelectTool)
    assert isinstance(write, WriteTool)
    assert [t.name for t in toolkit.provide()] == [
        "analyze_sqlserver_database_schema",
        "sqlserver_select_query",
        "sqlserver_write_query",
    ]


def test_guidelines_mention_empty_results(toolkit):
    text = toolkit.guidelines()
    assert "An empty array [] is a VALID result" in text
    assert "Use TOP instead of LIMIT" in text


def test_tool_specs_expose_argument_schema(toolkit):
    schema, select, write = toolkit.provide()

    assert schema.spec()["parameters"].get("properties", {}) == {}
    props = select.spec()["parameters"]["properties"]
    assert set(props) == {"query", "parameters"}
    assert select.spec()["parameters"]["required"] == ["query"]
    assert "positional placeholders" in write.spec()["parameters"]["properties"]["query"]["description"]


# ---------------------------------------------------------------------------
# Select tool
# ---------------------------------------------------------------------------


def test_select_returns_list_of_mappings(toolkit):
    _, select, _ = toolkit.provide()
    rows = select("SELECT name FROM users WHERE status = ? ORDER BY id", ["inactive"])
    assert rows == [{"name": "Bob"}]


def test_select_empty_result_is_empty_list(toolkit):
    _, select, _ = toolkit.provide()
    assert select("SELECT name FROM users WHERE id = ?", [99]) == []


def test_select_rejection_is_text(toolkit):
    _, select, _ = toolkit.provide()
    out = select("DELETE FROM users")
    assert isinstance(out, str)
    assert out.startswith("The query was rejected for security reasons")


def test_select_driver_error_is_prefixed(toolkit):
    _, select, _ = toolkit.provide()
    out = select("SELECT nope FROM users")
    assert out.startswith("Error executing query: ")


def test_select_run_returns_structured_outcome(toolkit):
    _, select, _ = toolkit.provide()
    assert isinstance(select.run("SELECT 1 AS one"), Rows)
    assert isinstance(select.run("DROP TABLE users"), Failure)


def test_invoke_validates_arguments(toolkit):
    _, select, _ = toolkit.provide()

    assert select.invoke({"query": "SELECT COUNT(*) AS n FROM users"}) == [{"n": 4}]
    out = select.invoke({"parameters": [1]})
    assert out.startswith("Invalid arguments for sqlserver_select_query")


def test_invoke_ignores_unknown_arguments(toolkit):
    _, select, _ = toolkit.provide()
    assert select.invoke({"query": "SELECT 1 AS one", "reasoning": "x"}) == [{"one": 1}]


# ---------------------------------------------------------------------------
# Write tool
# ---------------------------------------------------------------------------


def test_write_reports_affected_rows_and_insert_id(toolkit):
    _, select, write = toolkit.provide()

    out = write("INSERT INTO users (name, status) VALUES (?, ?)", ["Eve", "active"])
    assert out == "Query executed successfully. 1 row(s) affected. Last insert ID: 5"

    out = write("UPDATE users SET status = ? WHERE status = ?", ["gone", "inactive"])
    assert out == "Query executed successfully. 1 row(s) affected."
    assert select("SELECT name FROM users WHERE status = ?", ["gone"]) == [{"name": "Bob"}]


def test_write_rejection_names_forbidden_statements(toolkit):
    _, _, write = toolkit.provide()
    out = write("TRUNCATE TABLE users")
    assert "forbidden statements (DROP, CREATE, ALTER, GRANT, REVOKE, TRUNCATE" in out


def test_write_parameter_mismatch_is_reported(toolkit):
    _, _, write = toolkit.provide()
    out = write("DELETE FROM users WHERE id = ?", [])
    assert out.startswith("Parameter count mismatch")


def test_write_tool_with_scripted_identity(metrics):
    db = ScriptedAdapter(rowcount=1, identity=lambda: 17)
    _, _, write = SQLServerToolkit(db, metrics=metrics).provide()
    assert write.invoke({"query": "INSERT INTO dbo.t (a) VALUES (?)", "parameters": ["x"]}) == (
        "Query executed successfully. 1 row(s) affected. Last insert ID: 17"
    )


# ---------------------------------------------------------------------------
# Schema tool
# ---------------------------------------------------------------------------


def test_schema_tool_renders_report(metrics):
    db = FakeCatalogAdapter(
        tables=[
            {
                "TABLE_SCHEMA": "dbo",
                "TABLE_NAME": "users",
                "TABLE_TYPE": "BASE TABLE",
                "COLUMN_NAME": "id",
                "IS_NULLABLE": "NO",
                "DATA_TYPE": "int",
                "COLUMN_KEY": "PRI",
                "TABLE_ROWS": 3,
            }
        ]
    )
    schema, _, _ = SQLServerToolkit(db, tables=["users"], metrics=metrics).provide()

    text = schema()
    assert "- **dbo.users**: 3 rows, Primary Key: id" in text
    assert db.calls[0][2] == ["users"]
    assert schema.invoke({}) == text


def test_schema_tool_reports_catalog_errors(metrics):
    db = FakeCatalogAdapter(fail_on="tables")
    schema, _, _ = SQLServerToolkit(db, metrics=metrics).provide()

    out = schema()
    assert out.startswith("Error retrieving database schema: ")
    assert "catalog view unavailable" in out
