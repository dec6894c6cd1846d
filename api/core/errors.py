"""
Record gateway failure taxonomy.

Every gateway failure is one of the kinds below. Store-reported failures are
mapped from their SQLSTATE code; see `translate_error()`.
"""

from __future__ import annotations


class GatewayError(RuntimeError):
    pass


class ValidationError(GatewayError):
    """Caller supplied malformed or insufficient input."""


class UnscopedMutationError(GatewayError):
    """Update/delete without conditions would touch every row."""


class NoRowsReturnedError(GatewayError):
    """A single-row insert came back with no row."""


class NoMatchError(GatewayError):
    """An update predicate matched nothing."""


class StoreError(GatewayError):
    """
    Failure reported by the database itself.

    `sqlstate` keeps the original error code (None when the driver gave none).
    """

    def __init__(self, message: str, *, sqlstate: str | None = None) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate


class DuplicateRecordError(StoreError):
    pass


class DanglingReferenceError(StoreError):
    pass


class MissingFieldError(StoreError):
    pass


class UnknownTableError(StoreError):
    pass


class OperationFailedError(StoreError):
    pass


UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"
UNDEFINED_TABLE = "42P01"

_BY_SQLSTATE: dict[str, tuple[type[StoreError], str]] = {
    UNIQUE_VIOLATION: (DuplicateRecordError, "Record with this identifier already exists"),
    FOREIGN_KEY_VIOLATION: (DanglingReferenceError, "Referenced record does not exist"),
    NOT_NULL_VIOLATION: (MissingFieldError, "Required field is missing"),
    UNDEFINED_TABLE: (UnknownTableError, "Table does not exist"),
}


def translate_error(error: BaseException) -> StoreError:
    """
    Map a driver/pool exception to a taxonomy kind.

    Returns the new exception; callers raise it `from error`.
    """
    sqlstate = getattr(error, "sqlstate", None)
    known = _BY_SQLSTATE.get(sqlstate) if isinstance(sqlstate, str) else None
    if known is not None:
        kind, message = known
        return kind(message, sqlstate=sqlstate)

    detail = str(error).strip() or type(error).__name__
    return OperationFailedError(f"Database operation failed: {detail}", sqlstate=sqlstate)
