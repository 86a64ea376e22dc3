"""
Failure envelope and record store error classification.

Every API response is one of:
- Success: Operation completed successfully
- KnownFailure: System knows why it failed (bad input, missing deck, store conflict)
- UnknownFailure: System does not know why it failed

Record store failures are mapped into a small closed taxonomy at the
boundary (network / permission / conflict / not-found / quota / unknown)
so callers can decide between retrying and surfacing the error.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field
from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.orm.exc import StaleDataError


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input failures
    INVALID_INPUT = "invalid_input"

    # Record store failures
    NOT_FOUND = "not_found"
    NETWORK = "network"
    PERMISSION = "permission"
    CONFLICT = "conflict"
    QUOTA = "quota"

    # Service failures
    EXTERNAL_API_ERROR = "external_api_error"

    # Unknown
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )
    retryable: bool = Field(
        default=False,
        description="True if retrying the same request may succeed",
    )


class ApiResponse(BaseModel, Generic[T]):
    """Response envelope for failures and wrapped results."""

    outcome: OutcomeType
    data: T | None = None
    failure: FailureDetail | None = None

    @classmethod
    def success(cls, data: T) -> "ApiResponse[T]":
        """Create a success response."""
        return cls(outcome=OutcomeType.SUCCESS, data=data)

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        retryable: bool = False,
    ) -> "ApiResponse[Any]":
        """Create a known failure response."""
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
                retryable=retryable,
            ),
        )

    @classmethod
    def unknown_failure(cls, detail: str | None = None) -> "ApiResponse[Any]":
        """Create an unknown failure response."""
        return cls(
            outcome=OutcomeType.UNKNOWN_FAILURE,
            failure=FailureDetail(
                kind=FailureKind.UNKNOWN,
                message="Something went wrong and the cause is unknown. Try again.",
                detail=detail,
                suggestion="If this persists, please report the issue.",
                retryable=True,
            ),
        )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    retryable = False

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
            retryable=self.retryable,
        )


# =============================================================================
# RECORD STORE FAILURES
# =============================================================================


class RecordStoreError(KnownError):
    """A record store operation failed."""

    kind = FailureKind.UNKNOWN
    default_message = "The deck store could not complete the request."
    default_status = 500

    def __init__(self, detail: str | None = None, message: str | None = None):
        super().__init__(
            kind=self.kind,
            message=message or self.default_message,
            detail=detail,
            status_code=self.default_status,
        )


class RecordNotFoundError(RecordStoreError):
    kind = FailureKind.NOT_FOUND
    default_message = "The requested record was not found."
    default_status = 404


class RecordConflictError(RecordStoreError):
    kind = FailureKind.CONFLICT
    default_message = "The record was changed by someone else while saving."
    default_status = 409
    retryable = True


class NetworkUnavailableError(RecordStoreError):
    kind = FailureKind.NETWORK
    default_message = "The deck store is unreachable."
    default_status = 503
    retryable = True


class PermissionDeniedError(RecordStoreError):
    kind = FailureKind.PERMISSION
    default_message = "You don't have permission to perform this action."
    default_status = 403


class QuotaExceededError(RecordStoreError):
    kind = FailureKind.QUOTA
    default_message = "Storage quota exceeded."
    default_status = 507


# PostgreSQL SQLSTATE class 53: insufficient resources
_QUOTA_SQLSTATE_CLASS = "53"
_QUOTA_MESSAGES = ("database or disk is full", "disk quota exceeded")


def _is_quota_error(exc: SQLAlchemyError) -> bool:
    orig = getattr(exc, "orig", None)
    if orig is None:
        return False
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if isinstance(sqlstate, str) and sqlstate.startswith(_QUOTA_SQLSTATE_CLASS):
        return True
    message = str(orig).lower()
    return any(text in message for text in _QUOTA_MESSAGES)


def classify_store_error(exc: SQLAlchemyError) -> RecordStoreError:
    """
    Map a SQLAlchemy exception into the record store taxonomy.

    Args:
        exc: Exception raised by the database layer

    Returns:
        The RecordStoreError subclass matching the failure
    """
    detail = type(exc).__name__
    if isinstance(exc, (IntegrityError, StaleDataError)):
        return RecordConflictError(detail)
    if _is_quota_error(exc):
        return QuotaExceededError(detail)
    if isinstance(exc, (OperationalError, DisconnectionError)):
        return NetworkUnavailableError(detail)
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return NetworkUnavailableError(detail)
    return RecordStoreError(detail)
