"""
Error taxonomy and operation outcomes for timestream_admin.

Transport errors (``botocore.exceptions.ClientError`` and friends) are
classified into three kinds:

- AlreadyExists: create on an object that already exists (ConflictException)
- NotFound: describe/update/delete on a missing object (ResourceNotFoundException)
- GenericFailure: anything else, with the service message attached

Operations that do not raise return an AdminResult describing what happened.
"""
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional

from botocore.exceptions import BotoCoreError, ClientError


class AdminError(Exception):
    """Base class for errors raised by TimeSeriesAdminClient operations."""

    def __init__(self, message: str, operation: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.code = code

    def __str__(self) -> str:
        if self.operation and self.code:
            return f"{self.operation} failed ({self.code}): {self.message}"
        if self.operation:
            return f"{self.operation} failed: {self.message}"
        return self.message


class AlreadyExists(AdminError):
    """Raised when creating a database or table that already exists."""
    pass


class NotFound(AdminError):
    """Raised when the target database or table does not exist."""
    pass


class GenericFailure(AdminError):
    """Raised for any other remote or transport failure."""
    pass


class RejectedRecords(GenericFailure):
    """Raised when the service rejects one or more records of a write batch."""

    def __init__(self, message: str, operation: Optional[str] = None, code: Optional[str] = None,
                 rejected: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message, operation=operation, code=code)
        self.rejected = rejected or []


# Service error codes mapped to the taxonomy
_CODE_MAP = {
    "ConflictException": AlreadyExists,
    "ResourceNotFoundException": NotFound,
    "RejectedRecordsException": RejectedRecords,
}


def classify(exc: Exception, operation: str) -> AdminError:
    """
    Translate a transport exception into an AdminError.

    The returned error has the original exception as ``__cause__`` so
    tracebacks still show the service response.
    """
    if isinstance(exc, AdminError):
        return exc

    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        code = error.get("Code", "Unknown")
        message = error.get("Message") or str(exc)
        error_cls = _CODE_MAP.get(code, GenericFailure)
        if error_cls is RejectedRecords:
            err = RejectedRecords(
                message, operation=operation, code=code,
                rejected=exc.response.get("RejectedRecords", []),
            )
        else:
            err = error_cls(message, operation=operation, code=code)
    elif isinstance(exc, BotoCoreError):
        err = GenericFailure(str(exc), operation=operation, code=type(exc).__name__)
    else:
        err = GenericFailure(str(exc), operation=operation)

    err.__cause__ = exc
    return err


class Outcome(str, Enum):
    """What an operation did on the remote store."""
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    UPDATED = "updated"
    DELETED = "deleted"
    WRITTEN = "written"
    SKIPPED = "skipped"
    FAILED = "failed"


class AdminResult(NamedTuple):
    """
    Outcome of an admin or write operation that does not raise.

    Attributes:
        outcome: What happened (created, skipped, failed, ...)
        value: Operation payload, e.g. a WriteStatus for writes
        error: The suppressed AdminError when outcome is FAILED (or a
            skip caused by a missing resource)
    """
    outcome: Outcome
    value: Any = None
    error: Optional[AdminError] = None

    @property
    def ok(self) -> bool:
        return self.outcome is not Outcome.FAILED

    def unwrap(self) -> Any:
        """Return the value, raising the suppressed error if the operation failed."""
        if self.outcome is Outcome.FAILED and self.error is not None:
            raise self.error
        return self.value
