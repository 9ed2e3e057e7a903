"""
Error types for CryptoJournal.

Store failures carry the machine-readable code reported by the backend
so callers can tell setup problems from permission problems.
"""

from typing import Optional

# Postgres / PostgREST error codes
RELATION_MISSING_CODES = {"42P01", "PGRST205"}
COLUMN_MISSING_CODES = {"42703", "PGRST204"}
PERMISSION_DENIED_CODES = {"42501"}
NO_ROWS_CODES = {"PGRST116"}


class JournalError(Exception):
    """Base class for all CryptoJournal errors."""


class ValidationError(JournalError, ValueError):
    """Rejected input. Raised before anything is written."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class GatewayError(JournalError):
    """A failed call to the persistence gateway."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[str] = None,
        hint: Optional[str] = None,
        table: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details
        self.hint = hint
        self.table = table

    def __str__(self) -> str:
        prefix = f"[{self.code}] " if self.code else ""
        where = f" (table: {self.table})" if self.table else ""
        return f"{prefix}{self.message}{where}"


class SetupError(GatewayError):
    """Missing table, missing column or missing credentials."""


class PermissionDeniedError(GatewayError):
    """Row-level security rejected the call."""


class RowNotFoundError(GatewayError):
    """A single-row read matched nothing."""


class StoreError(GatewayError):
    """Transport failure or any other unexpected store error."""


def classify_error(
    code: Optional[str],
    message: str,
    details: Optional[str] = None,
    hint: Optional[str] = None,
    table: Optional[str] = None,
) -> GatewayError:
    """
    Map a backend error code to the matching GatewayError subclass.
    """
    code = str(code) if code is not None else None
    lowered = (message or "").lower()

    if code in RELATION_MISSING_CODES or code in COLUMN_MISSING_CODES:
        cls = SetupError
    elif code in PERMISSION_DENIED_CODES:
        cls = PermissionDeniedError
    elif code in NO_ROWS_CODES:
        cls = RowNotFoundError
    elif "does not exist" in lowered and ("relation" in lowered or "column" in lowered):
        cls = SetupError
    else:
        cls = StoreError

    return cls(message, code=code, details=details, hint=hint, table=table)
