"""
Database module for the table browser.

Provides:
- Bounded connection leasing over a SQLAlchemy pool
- Live schema validation
- JSON-safe value coercion
"""

from .connection import ConnectionManager, QueryResult
from .schema_introspector import SchemaValidator, ColumnInfo
from .value_coercer import coerce_value, coerce_row, stringify_value

__all__ = [
    "ConnectionManager",
    "QueryResult",
    "SchemaValidator",
    "ColumnInfo",
    "coerce_value",
    "coerce_row",
    "stringify_value",
]
