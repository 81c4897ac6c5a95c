"""
Query Builder - parameterized MySQL statements for table browsing.

Identifiers are validated and backtick-quoted before embedding.
Scalar values are always bound as parameters, never interpolated.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from .validator import check_single_statement, quote_identifier

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
MAX_LIMIT = 1000


@dataclass(frozen=True)
class Statement:
    """An executable SQL string plus its bound parameters."""
    sql: str
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AllColumns:
    """Projection selecting every column (``*``)."""

    def describe(self) -> str:
        return "all"


@dataclass(frozen=True)
class ExplicitColumns:
    """Projection selecting the named columns, in request order."""
    names: Tuple[str, ...]

    def __post_init__(self):
        if not self.names:
            raise ValueError("ExplicitColumns requires at least one column")

    def describe(self) -> list:
        return list(self.names)


Projection = Union[AllColumns, ExplicitColumns]


def parse_projection(raw: Optional[str]) -> Projection:
    """
    Parse a comma-separated ``columns`` parameter.

    A missing or blank value selects all columns.
    Duplicates are dropped, first occurrence wins.
    """
    if raw is None:
        return AllColumns()
    names = []
    for part in raw.split(','):
        name = part.strip()
        if name and name not in names:
            names.append(name)
    if not names:
        return AllColumns()
    return ExplicitColumns(tuple(names))


def clamp_limit(raw: Union[str, int, None]) -> int:
    """
    Resolve a caller-supplied row limit.

    Absent or unparsable values (including negatives) give DEFAULT_LIMIT;
    values above MAX_LIMIT are silently truncated.
    """
    if raw is None or isinstance(raw, bool):
        return DEFAULT_LIMIT
    if isinstance(raw, int):
        value = raw
    else:
        text = str(raw).strip()
        if not (text.isascii() and text.isdigit()):
            return DEFAULT_LIMIT
        value = int(text)
    if value < 0:
        return DEFAULT_LIMIT
    return min(value, MAX_LIMIT)


class QueryBuilder:
    """Builds the fixed family of browsing statements."""

    def _finish(self, sql: str, params: Optional[Dict[str, Any]] = None) -> Statement:
        check_single_statement(sql)
        logger.debug(f"Built statement: {sql}")
        return Statement(sql=sql, params=params or {})

    def list_tables(self) -> Statement:
        return self._finish("SHOW TABLES")

    def list_columns(self, table: str) -> Statement:
        return self._finish(f"SHOW COLUMNS FROM {quote_identifier(table)}")

    def distinct_values(self, table: str, column: str, limit: Union[str, int, None] = None) -> Statement:
        """SELECT DISTINCT non-null values of one column."""
        quoted_table = quote_identifier(table)
        quoted_column = quote_identifier(column)
        effective_limit = clamp_limit(limit)
        sql = (
            f"SELECT DISTINCT {quoted_column} AS value FROM {quoted_table} "
            f"WHERE {quoted_column} IS NOT NULL LIMIT {int(effective_limit)}"
        )
        return self._finish(sql)

    def row_count(self, table: str) -> Statement:
        return self._finish(f"SELECT COUNT(*) AS count FROM {quote_identifier(table)}")

    def filtered_rows(
        self,
        table: str,
        field_name: str,
        value: Any,
        projection: Projection = AllColumns(),
        limit: Union[str, int, None] = None,
    ) -> Statement:
        """
        Build ``SELECT ... WHERE field = :value LIMIT n``.

        The filter value is bound as the ``value`` parameter.
        """
        quoted_table = quote_identifier(table)
        quoted_field = quote_identifier(field_name)
        effective_limit = clamp_limit(limit)

        if isinstance(projection, ExplicitColumns):
            select_clause = ", ".join(quote_identifier(name) for name in projection.names)
        else:
            select_clause = "*"

        sql = (
            f"SELECT {select_clause} FROM {quoted_table} "
            f"WHERE {quoted_field} = :value LIMIT {int(effective_limit)}"
        )
        return self._finish(sql, {"value": value})
