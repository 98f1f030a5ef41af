import textwrap

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from sqlserver_toolkit.errors.exceptions import ConfigError
from sqlserver_toolkit.policy import READ_ONLY_POLICY, WRITE_POLICY, Profile
from sqlserver_toolkit.registry import POLICIES
from sqlserver_toolkit.settings import DEFAULT_TOOLKIT_CONFIG, Settings
from sqlserver_toolkit.toolkit_factory import build_policy, toolkit_from_config


def write_config(tmp_path, body: str) -> str:
    path = tmp_path / "toolkit.yaml"
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return str(path)


@pytest.fixture
def settings():
    return Settings(tables=["users"], strict_parameter_count=True)


def test_sqlite_toolkit_from_config(tmp_path, settings):
    path = write_config(
        tmp_path,
        """
        adapter:
          kind: sqlite
          dsn: ":memory:"
        tables: [orders, customers]
        strict_parameter_count: false
        policies:
          read_only: raw
          write:
            base: default
            leading_keywords: [INSERT]
        """,
    )
    toolkit = toolkit_from_config(path, settings=settings)
    try:
        assert isinstance(toolkit.db, SQLiteAdapter)
        assert toolkit.tables == ["orders", "customers"]
        assert toolkit.read_executor.strict_parameter_count is False
        assert toolkit.read_executor.validator.policy is POLICIES[Profile.READ_ONLY]["raw"]
        write_policy = toolkit.write_executor.validator.policy
        assert write_policy.leading_keywords == ("INSERT",)
        assert write_policy.forbidden_keywords == WRITE_POLICY.forbidden_keywords

        _, select, write = toolkit.provide()
        assert select("SELECT 1 AS one") == [{"one": 1}]
        assert write("UPDATE t SET a = 1").startswith("The query was rejected")
    finally:
        toolkit.db.close()


def test_injected_adapter_skips_adapter_section(tmp_path, settings, sqlite_db):
    path = write_config(
        tmp_path,
        """
        adapter:
          kind: sqlserver
        tables: []
        """,
    )
    toolkit = toolkit_from_config(path, adapter=sqlite_db, settings=settings)

    assert toolkit.db is sqlite_db
    # empty config list falls back to settings
    assert toolkit.tables == ["users"]
    assert toolkit.read_executor.validator.policy is READ_ONLY_POLICY
    assert toolkit.write_executor.validator.policy is WRITE_POLICY
    assert toolkit.read_executor.strict_parameter_count is True


def test_settings_config_path_is_used_by_default(tmp_path, sqlite_db):
    path = write_config(tmp_path, "tables: [a]\n")
    toolkit = toolkit_from_config(adapter=sqlite_db, settings=Settings(toolkit_config_path=path))
    assert toolkit.tables == ["a"]


@pytest.mark.parametrize("strict", [True, False])
def test_shipped_config_leaves_strict_params_to_settings(sqlite_db, strict):
    toolkit = toolkit_from_config(
        str(DEFAULT_TOOLKIT_CONFIG),
        adapter=sqlite_db,
        settings=Settings(strict_parameter_count=strict),
    )
    assert toolkit.read_executor.strict_parameter_count is strict
    assert toolkit.write_executor.strict_parameter_count is strict


@pytest.mark.parametrize(
    "value, expected",
    [("\"false\"", False), ("\"no\"", False), ("\"0\"", False), ("\"yes\"", True), ("1", True)],
)
def test_strict_params_in_config_are_parsed_as_flags(tmp_path, settings, sqlite_db, value, expected):
    path = write_config(tmp_path, f"strict_parameter_count: {value}\n")
    toolkit = toolkit_from_config(path, adapter=sqlite_db, settings=settings)
    assert toolkit.read_executor.strict_parameter_count is expected


def test_missing_config_file(tmp_path, settings):
    with pytest.raises(ConfigError, match="not found"):
        toolkit_from_config(str(tmp_path / "nope.yaml"), settings=settings)


def test_invalid_yaml(tmp_path, settings):
    path = write_config(tmp_path, "adapter: [unclosed\n")
    with pytest.raises(ConfigError, match="not valid YAML"):
        toolkit_from_config(path, settings=settings)


def test_non_mapping_config(tmp_path, settings):
    path = write_config(tmp_path, "- just\n- a list\n")
    with pytest.raises(ConfigError, match="mapping"):
        toolkit_from_config(path, settings=settings)


def test_unknown_adapter_kind(tmp_path, settings):
    path = write_config(tmp_path, "adapter:\n  kind: oracle\n")
    with pytest.raises(ConfigError, match="Unknown adapter kind"):
        toolkit_from_config(path, settings=settings)


def test_sqlite_adapter_requires_dsn(tmp_path, settings):
    path = write_config(tmp_path, "adapter:\n  kind: sqlite\n")
    with pytest.raises(ConfigError, match="adapter.dsn"):
        toolkit_from_config(path, settings=settings)


def test_bad_tables_value(tmp_path, settings, sqlite_db):
    path = write_config(tmp_path, "tables: users\n")
    with pytest.raises(ConfigError, match="tables"):
        toolkit_from_config(path, adapter=sqlite_db, settings=settings)


# ---------------------------------------------------------------------------
# build_policy
# ---------------------------------------------------------------------------


def test_build_policy_defaults():
    assert build_policy(Profile.READ_ONLY, None) is READ_ONLY_POLICY
    assert build_policy(Profile.WRITE, "default") is WRITE_POLICY


def test_build_policy_override_on_raw_base():
    policy = build_policy(Profile.WRITE, {"base": "raw", "forbidden_keywords": ["DROP"]})
    assert policy.scan_normalized is False
    assert policy.forbidden_keywords == ("DROP",)


@pytest.mark.parametrize("entry", ["strict", 42, ["default"]])
def test_build_policy_rejects_unknown(entry):
    with pytest.raises(ConfigError):
        build_policy(Profile.READ_ONLY, entry)
