"""
Smoke test for the SQL Server toolkit.

Builds the toolkit from configs/toolkit.yaml (connection from MSSQL_* env
vars) and runs one tool call:

    python scripts/smoke_toolkit.py schema
    python scripts/smoke_toolkit.py select "SELECT TOP 5 * FROM dbo.users WHERE id > ?" 10
    python scripts/smoke_toolkit.py write "UPDATE dbo.users SET name = ? WHERE id = ?" Ann 3

With --sqlite PATH a local SQLite file is used instead (select/write only).
"""

import argparse
import json
import sys

from adapters.db.sqlite_adapter import SQLiteAdapter
from sqlserver_toolkit.toolkit_factory import toolkit_from_config


def parse_args(argv=None):
    p = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    p.add_argument("tool", choices=["schema", "select", "write", "spec"])
    p.add_argument("query", nargs="?", default="")
    p.add_argument("parameters", nargs="*", default=[])
    p.add_argument("--config", default=None, help="Path to toolkit YAML config")
    p.add_argument("--sqlite", default=None, help="Use a local SQLite DB file")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    adapter = SQLiteAdapter.connect(args.sqlite) if args.sqlite else None
    try:
        toolkit = toolkit_from_config(args.config, adapter=adapter)
    except Exception:
        if adapter is not None:
            adapter.close()
        raise
    tools = toolkit.provide()
    schema_tool, select_tool, write_tool = tools

    try:
        if args.tool == "spec":
            print(json.dumps([t.spec() for t in tools], indent=2))
        elif args.tool == "schema":
            print(schema_tool())
        elif args.tool == "select":
            out = select_tool(args.query, args.parameters)
            print(json.dumps(out, indent=2, default=str))
        else:
            print(write_tool(args.query, args.parameters))
    finally:
        toolkit.db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
