"""Unified exception taxonomy.

Every domain exception inherits from ``PackagingError`` and carries
structured context fields so the CLI can map failures to a consistent
message, JSON error envelope, and exit code.

Taxonomy categories
-------------------
- ``ValidationError``   — bad input or configuration, never retryable.
- ``PermanentError``    — unrecoverable domain failures, not retryable.
- ``ContractError``     — remote record shape drift, never retryable.
- Anything else with ``retryable=True`` (network, 5xx) is ``transient``.

Remote-operation errors
-----------------------
- ``RemoteError``             — the remote system rejected or failed a call.
- ``RemoteAuthError``         — session missing, expired or unauthorised.
- ``NotFoundError``           — the operation id is unknown remotely.
- ``OperationTimeoutError``   — wait budget exhausted, operation still running.
- ``OperationCancelledError`` — the caller interrupted the wait.
- ``UploadFailedError``       — the operation reached a failure status.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sf_package1.models.upload import UploadRequest


class PackagingError(Exception):
    """Base exception for all packaging-domain errors.

    Attributes:
        message: Human-readable error description.
        stage: Stage where the error occurred (e.g. ``"submit"``, ``"poll"``).
        code: Machine-readable error code (e.g. ``"REMOTE_ERROR"``).
        retryable: Whether the caller may retry the operation.
        correlation_id: Request correlation identifier (e.g. the ``0HD`` id).
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
        correlation_id: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        self.correlation_id = correlation_id
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ContractError):
            return "contract"
        if isinstance(self, ValidationError):
            return "validation"
        if isinstance(self, PermanentError):
            return "permanent"
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "correlation_id": self.correlation_id,
        }


# ---------------------------------------------------------------------------
# Category base classes
# ---------------------------------------------------------------------------


class ValidationError(PackagingError):
    """Input, flag, or configuration validation failure. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class PermanentError(PackagingError):
    """Unrecoverable domain failure. Not retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class ContractError(PackagingError):
    """Remote record does not match the expected shape. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Remote-operation errors
# ---------------------------------------------------------------------------


class RemoteError(PackagingError):
    """The remote system rejected a call or could not be reached.

    Attributes:
        status_code: HTTP status code, or ``0`` for transport failures.
        error_code: Salesforce ``errorCode`` from the response body, if any.
    """

    default_stage = "remote"
    default_code = "REMOTE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 0,
        error_code: str = "",
        retryable: bool = False,
        stage: str = "",
        correlation_id: str = "",
    ) -> None:
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(
            message,
            stage=stage,
            retryable=retryable,
            correlation_id=correlation_id,
        )


class RemoteAuthError(RemoteError):
    """The session is missing, expired, or not authorised for the call."""

    default_code = "REMOTE_AUTH_FAILED"

    def __init__(self, message: str, *, status_code: int = 401, error_code: str = "") -> None:
        super().__init__(message, status_code=status_code, error_code=error_code, retryable=False)


class NotFoundError(PermanentError):
    """The requested record id is unknown to the remote system."""

    default_stage = "poll"
    default_code = "NOT_FOUND"

    def __init__(self, record_id: str, message: str = "") -> None:
        self.record_id = record_id
        super().__init__(
            message or f"No record found for id {record_id!r}",
            correlation_id=record_id,
        )


class OperationStateError(PackagingError):
    """Base for errors that carry the last-known record of an operation."""

    def __init__(self, message: str, *, request_id: str, last_record: UploadRequest) -> None:
        self.request_id = request_id
        self.last_record = last_record
        super().__init__(message, correlation_id=request_id)


class OperationTimeoutError(OperationStateError):
    """The wait budget ran out before the operation reached a terminal status.

    Not a failure of the remote operation: it is still running and can be
    checked again later by ``request_id``.
    """

    default_stage = "wait"
    default_code = "WAIT_TIMEOUT"


class OperationCancelledError(OperationStateError):
    """The caller interrupted the wait. The remote operation keeps running."""

    default_stage = "wait"
    default_code = "WAIT_CANCELLED"


class UploadFailedError(OperationStateError):
    """The upload request reached the ``ERROR`` status."""

    default_stage = "upload"
    default_code = "UPLOAD_FAILED"
