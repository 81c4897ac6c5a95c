"""
SQL Validator - Security layer for identifiers and built statements.

Identifiers cannot be bound as parameters, so every table or column name
is checked against a strict allow-list before it is embedded in SQL text.
Built statements are parsed once more to make sure exactly one statement
leaves the builder.
"""

import logging
import re

import sqlparse
from sqlparse.tokens import Comment

from errors import InvalidIdentifier

logger = logging.getLogger(__name__)

# MySQL caps identifiers at 64 characters
MAX_IDENTIFIER_LENGTH = 64

IDENTIFIER_PATTERN = re.compile(r'[A-Za-z0-9_]+')


class StatementValidationError(Exception):
    """Raised when a built statement is not a single plain statement."""
    pass


def is_valid_identifier(name) -> bool:
    """Check a name against the identifier character class."""
    if not isinstance(name, str) or not name:
        return False
    if len(name) > MAX_IDENTIFIER_LENGTH:
        return False
    return IDENTIFIER_PATTERN.fullmatch(name) is not None


def validate_identifier(name: str) -> str:
    """
    Return the name unchanged if it is safe to embed.

    Raises:
        InvalidIdentifier: if the name contains anything but letters,
            digits and underscore, or is empty or too long
    """
    if not is_valid_identifier(name):
        logger.warning(f"Rejected identifier: {name!r}")
        raise InvalidIdentifier(name)
    return name


def quote_identifier(name: str) -> str:
    """Validate a name and wrap it in MySQL backticks."""
    return f"`{validate_identifier(name)}`"


def check_single_statement(sql: str) -> str:
    """
    Ensure a built SQL string parses into exactly one statement
    with no comments.

    Returns:
        The SQL string unchanged
    """
    if not sql or not sql.strip():
        raise StatementValidationError("Empty SQL statement")

    parsed = [stmt for stmt in sqlparse.parse(sql) if str(stmt).strip()]
    if len(parsed) != 1:
        raise StatementValidationError("Multiple SQL statements not allowed")

    for token in parsed[0].flatten():
        if token.ttype in Comment:
            raise StatementValidationError("Comments not allowed in SQL statement")

    return sql
