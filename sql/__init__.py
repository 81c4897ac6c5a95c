"""SQL module exports."""

from .validator import (
    StatementValidationError,
    is_valid_identifier,
    validate_identifier,
    quote_identifier,
    check_single_statement,
)
from .builder import (
    Statement,
    QueryBuilder,
    AllColumns,
    ExplicitColumns,
    Projection,
    parse_projection,
    clamp_limit,
    DEFAULT_LIMIT,
    MAX_LIMIT,
)

__all__ = [
    "StatementValidationError", "is_valid_identifier", "validate_identifier",
    "quote_identifier", "check_single_statement",
    "Statement", "QueryBuilder", "AllColumns", "ExplicitColumns", "Projection",
    "parse_projection", "clamp_limit", "DEFAULT_LIMIT", "MAX_LIMIT",
]
