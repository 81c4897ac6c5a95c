"""
Live Schema Validation Module.

Confirms that tables and columns named by a caller exist in the live
MySQL schema before they are embedded in SQL. Nothing is cached: every
call re-reads SHOW TABLES / SHOW COLUMNS on the request's connection.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from sqlalchemy.engine import Connection

from errors import InvalidColumns, TableNotFound, UnknownColumn, UnknownTable
from sql.builder import QueryBuilder
from sql.validator import validate_identifier

from .connection import ConnectionManager
from .value_coercer import stringify_value

logger = logging.getLogger(__name__)


@dataclass
class ColumnInfo:
    """Information about a single database column."""
    table: str
    name: str
    data_type: str
    is_nullable: bool = True
    key: str = ""
    default_value: Optional[str] = None
    extra: str = ""

    @property
    def is_primary_key(self) -> bool:
        return self.key == "PRI"

    def to_dict(self) -> Dict[str, str]:
        """SHOW COLUMNS row as attribute -> text."""
        return {
            "Field": self.name,
            "Type": self.data_type,
            "Null": "YES" if self.is_nullable else "NO",
            "Key": self.key,
            "Default": self.default_value if self.default_value is not None else "",
            "Extra": self.extra,
        }

    @classmethod
    def from_show_columns(cls, table: str, row: Dict[str, str]) -> "ColumnInfo":
        default = row.get("Default")
        return cls(
            table=table,
            name=row.get("Field", ""),
            data_type=row.get("Type", ""),
            is_nullable=row.get("Null", "YES").upper() == "YES",
            key=row.get("Key", ""),
            default_value=default if default else None,
            extra=row.get("Extra", ""),
        )


class SchemaValidator:
    """
    Checks identifiers against the live schema.

    All methods take the request's leased connection so validation and
    the data query share one checkout.
    """

    def __init__(self, manager: ConnectionManager, builder: Optional[QueryBuilder] = None):
        self.manager = manager
        self.builder = builder or QueryBuilder()

    def list_tables(self, conn: Connection) -> List[str]:
        """Get all table names in the current database."""
        result = self.manager.execute(conn, self.builder.list_tables())
        return [stringify_value(row[0]) for row in result.rows if row]

    def table_exists(self, conn: Connection, name: str) -> bool:
        """True iff the table listing contains the name exactly."""
        return name in self.list_tables(conn)

    def require_table(self, conn: Connection, name: str, not_found: bool = False) -> str:
        """
        Confirm a table exists and is safe to embed.

        Args:
            not_found: Raise the not-found variant instead of a bad request

        Raises:
            InvalidIdentifier: name is not embeddable, whether or not it exists
            UnknownTable: table absent from the live schema
        """
        validate_identifier(name)
        if not self.table_exists(conn, name):
            logger.info(f"Unknown table requested: {name!r}")
            raise TableNotFound(name) if not_found else UnknownTable(name)
        return name

    def list_columns(self, conn: Connection, table: str, not_found: bool = True) -> List[ColumnInfo]:
        """
        Get all columns of a table in ordinal order.

        Raises:
            UnknownTable: the table does not exist
        """
        self.require_table(conn, table, not_found=not_found)
        result = self.manager.execute(conn, self.builder.list_columns(table))
        columns = []
        for row in result.rows:
            attributes = {key: stringify_value(value) for key, value in zip(result.keys, row)}
            columns.append(ColumnInfo.from_show_columns(table, attributes))
        return columns

    def column_names(self, conn: Connection, table: str) -> List[str]:
        """Column names of a table; an absent table is a bad request."""
        return [col.name for col in self.list_columns(conn, table, not_found=False)]

    def column_exists(self, conn: Connection, table: str, column: str) -> bool:
        """True iff the column appears in the table's column listing."""
        return column in self.column_names(conn, table)

    def require_column(
        self,
        conn: Connection,
        table: str,
        column: str,
        kind: str = "Column",
        available: Optional[List[str]] = None,
    ) -> str:
        """
        Confirm a column exists in the table.

        Args:
            available: Column names already read on this request

        Raises:
            InvalidIdentifier: column name is not embeddable
            UnknownColumn: column absent from the table
        """
        validate_identifier(column)
        names = available if available is not None else self.column_names(conn, table)
        if column not in names:
            raise UnknownColumn(table, column, kind=kind)
        return column

    def require_columns(
        self,
        conn: Connection,
        table: str,
        columns: Iterable[str],
        available: Optional[List[str]] = None,
    ) -> List[str]:
        """
        Confirm every requested column exists, in one pass.

        Raises:
            InvalidIdentifier: a requested name is not embeddable
            InvalidColumns: listing every requested name not in the table
        """
        requested = [validate_identifier(name) for name in columns]
        names = set(available if available is not None else self.column_names(conn, table))
        invalid = [name for name in requested if name not in names]
        if invalid:
            raise InvalidColumns(table, invalid)
        return requested
