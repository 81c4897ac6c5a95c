"""
Table Browser - orchestrates one request per endpoint.

Names are checked against the identifier character class before a
connection is leased. Each operation then leases a single connection,
confirms every name against the live schema, builds the statement,
executes it, and coerces the rows. Validation failures short-circuit
before any data statement runs; on any failure no partial result is
returned.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from database import ConnectionManager, SchemaValidator, coerce_row, coerce_value
from errors import DatabaseFault, MissingParameter
from sql import (
    AllColumns,
    ExplicitColumns,
    Projection,
    QueryBuilder,
    clamp_limit,
    parse_projection,
    validate_identifier,
)

logger = logging.getLogger(__name__)


@dataclass
class QueryRequest:
    """A filtered row query as received from the caller."""
    table: str
    field: Optional[str] = None
    value: Optional[str] = None
    projection: Projection = AllColumns()
    limit: Optional[str] = None

    @classmethod
    def from_params(
        cls,
        table: str,
        field: Optional[str] = None,
        value: Optional[str] = None,
        columns: Optional[str] = None,
        limit: Optional[str] = None,
    ) -> "QueryRequest":
        return cls(
            table=table,
            field=field,
            value=value,
            projection=parse_projection(columns),
            limit=limit,
        )


class TableBrowser:
    """Long-lived service holding the pool and the stateless helpers."""

    def __init__(self, manager: ConnectionManager, builder: Optional[QueryBuilder] = None):
        self.manager = manager
        self.builder = builder or QueryBuilder()
        self.schema = SchemaValidator(manager, self.builder)

    def list_tables(self) -> Dict[str, Any]:
        with self.manager.acquire() as conn:
            tables = self.schema.list_tables(conn)
        return {"tables": tables}

    def table_columns(self, table: str) -> Dict[str, Any]:
        """Columns of a table; an absent table is a not-found error."""
        validate_identifier(table)
        with self.manager.acquire() as conn:
            columns = self.schema.list_columns(conn, table, not_found=True)
        return {"table": table, "columns": [col.to_dict() for col in columns]}

    def distinct_values(self, table: str, column: str, limit: Optional[str] = None) -> Dict[str, Any]:
        validate_identifier(table)
        validate_identifier(column)
        effective_limit = clamp_limit(limit)
        with self.manager.acquire() as conn:
            available = self.schema.column_names(conn, table)
            self.schema.require_column(conn, table, column, available=available)
            statement = self.builder.distinct_values(table, column, effective_limit)
            result = self.manager.execute(conn, statement)
        return {
            "table": table,
            "column": column,
            "distinct_values": [coerce_value(row[0]) for row in result.rows],
            "limit": effective_limit,
        }

    def row_count(self, table: str) -> Dict[str, Any]:
        validate_identifier(table)
        with self.manager.acquire() as conn:
            self.schema.require_table(conn, table)
            result = self.manager.execute(conn, self.builder.row_count(table))
        count = coerce_value(result.rows[0][0]) if result.rows else 0
        return {"table": table, "total_count": count}

    def query(self, request: QueryRequest) -> Dict[str, Any]:
        """
        Run a filtered row query.

        Missing field/value and malformed names are reported before a
        connection is leased.
        The filter value is always a bound parameter.
        """
        if request.field is None:
            raise MissingParameter("field")
        if request.value is None:
            raise MissingParameter("value")

        validate_identifier(request.table)
        validate_identifier(request.field)
        if isinstance(request.projection, ExplicitColumns):
            for name in request.projection.names:
                validate_identifier(name)

        effective_limit = clamp_limit(request.limit)
        projection = request.projection

        with self.manager.acquire() as conn:
            available = self.schema.column_names(conn, request.table)
            self.schema.require_column(
                conn, request.table, request.field, kind="Field", available=available
            )
            if isinstance(projection, ExplicitColumns):
                self.schema.require_columns(
                    conn, request.table, projection.names, available=available
                )
            statement = self.builder.filtered_rows(
                request.table, request.field, request.value, projection, effective_limit
            )
            result = self.manager.execute(conn, statement)

        logger.info(
            f"Query on {request.table} by {request.field} returned {len(result.rows)} rows "
            f"(limit {effective_limit})"
        )
        return {
            "table": request.table,
            "field": request.field,
            "value": request.value,
            "columns": projection.describe(),
            "limit": effective_limit,
            "results": [coerce_row(result.keys, row) for row in result.rows],
        }

    def health(self) -> Dict[str, Any]:
        success, message = self.manager.test_connection()
        if not success:
            raise DatabaseFault(message)
        return {"status": "ok"}
