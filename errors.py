"""
Error taxonomy for the table browser.

Caller-correctable errors carry the offending names in their message.
Database and pool faults keep their detail for the server log only.
"""

from typing import Iterable, List


class BrowserError(Exception):
    """Base class for every error surfaced as an HTTP error payload."""

    status_code = 400
    label = "Bad Request"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def public_message(self) -> str:
        """Message that is safe to return to the caller."""
        return self.message

    def to_payload(self) -> dict:
        return {"error": self.label, "message": self.public_message}


class UnknownTable(BrowserError):
    """Raised when a table is not in the live schema listing."""

    template = "Table '{table}' does not exist"

    def __init__(self, table: str):
        super().__init__(self.template.format(table=table))
        self.table = table


class TableNotFound(UnknownTable):
    """UnknownTable surfaced as a not-found response."""

    status_code = 404
    label = "Not Found"
    template = "Table '{table}' not found"


class UnknownColumn(BrowserError):
    """Raised when a column is not part of a table."""

    def __init__(self, table: str, column: str, kind: str = "Column"):
        super().__init__(f"{kind} '{column}' not found in table '{table}'")
        self.table = table
        self.column = column


class InvalidIdentifier(BrowserError):
    """Raised when a name fails the identifier character class."""

    def __init__(self, name: str):
        super().__init__(
            f"Invalid identifier '{name}': only letters, digits and underscore are allowed"
        )
        self.name = name


class InvalidColumns(BrowserError):
    """Raised when requested projection columns are not in the table."""

    def __init__(self, table: str, columns: Iterable[str]):
        self.columns: List[str] = list(columns)
        super().__init__(
            f"Invalid columns for table '{table}': {', '.join(self.columns)}"
        )
        self.table = table


class MissingParameter(BrowserError):
    """Raised when a required request parameter is absent."""

    def __init__(self, name: str):
        super().__init__(f"Please provide '{name}' query parameter")
        self.name = name


class DatabaseFault(BrowserError):
    """Underlying driver or connection error."""

    status_code = 500
    label = "Internal Server Error"

    @property
    def public_message(self) -> str:
        return "A database error occurred"


class PoolUnavailable(DatabaseFault):
    """Raised when the connection pool cannot yield a connection."""
