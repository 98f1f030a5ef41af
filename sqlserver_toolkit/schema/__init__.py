from .introspector import SchemaIntrospector
from .render import render_report
from .types import SchemaReport

__all__ = ["SchemaIntrospector", "SchemaReport", "render_report"]
