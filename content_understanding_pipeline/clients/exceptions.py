"""
Custom exception classes for Content Understanding client operations.

This module defines domain-specific exceptions that provide clear error context
for API interactions and long-running operations, making error handling and
debugging easier in the orchestration layer.

Exception Hierarchy:
- ContentUnderstandingError (base for everything raised by the pipeline)
  ├── ContentUnderstandingClientError
  │   ├── APIError
  │   ├── AuthError
  │   ├── NotFoundError
  │   └── SubmitError
  └── OperationError
      ├── OperationFailedError
      └── PollingTimedOutError
"""

from ..utils.documents import operation_id_from_handle


class ContentUnderstandingError(Exception):
    """Base exception for all Content Understanding errors.

    Carries a human-readable message and, optionally, the lower-level
    exception that caused it.
    """

    def __init__(self, message: str, original_exception: Exception | None = None):
        """Initialize the exception.

        Args:
            message: Human-readable error message describing what went wrong.
            original_exception: Optional original exception that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.original_exception = original_exception

    def __str__(self) -> str:
        """Return string representation with context."""
        if self.original_exception:
            orig_type = type(self.original_exception).__name__
            orig_msg = str(self.original_exception)
            return f"{self.message} (Original: {orig_type}: {orig_msg})"
        return self.message


class ContentUnderstandingClientError(ContentUnderstandingError):
    """Base exception for HTTP client errors.

    All errors raised while talking to the service inherit from this class,
    allowing for broad exception catching when needed while maintaining
    specific error types for precise error handling.
    """

    pass


class APIError(ContentUnderstandingClientError):
    """Exception raised for API communication failures.

    This exception is raised when there are network errors, rate limits,
    server errors (5xx), or other API communication issues. These are
    considered transient and are retried on submission.
    """

    def __init__(
        self,
        message: str,
        original_exception: Exception | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message, original_exception)
        self.status_code = status_code


class AuthError(ContentUnderstandingClientError):
    """Exception raised for authentication/authorization failures.

    Raised when the subscription key is invalid or lacks access to the
    resource (401 Unauthorized, 403 Forbidden).
    """

    pass


class NotFoundError(ContentUnderstandingClientError):
    """Exception raised when an analyzer or operation is not found (404)."""

    pass


class SubmitError(ContentUnderstandingClientError):
    """Exception raised when a document submission is rejected.

    Covers 4xx responses other than auth and not-found errors, and accepted
    submissions that came back without an operation location.
    """

    pass


class OperationError(ContentUnderstandingError):
    """Base exception for long-running operation outcomes."""

    def __init__(
        self,
        message: str,
        handle: str,
        original_exception: Exception | None = None,
    ):
        super().__init__(message, original_exception)
        self.handle = handle


class OperationFailedError(OperationError):
    """The service reported the operation as Failed.

    The message follows ``Operation failed. Code: <code>, Message: <message>``.
    """

    def __init__(self, handle: str, code: str | None, message: str | None):
        self.code = code or "Unknown"
        self.service_message = message or "None"
        super().__init__(
            f"Operation failed. Code: {self.code}, Message: {self.service_message}",
            handle,
        )


class PollingTimedOutError(OperationError):
    """No terminal state was observed before the deadline (or cancellation).

    The remote operation may still complete; ``handle`` can be checked again
    later with the check-operation command.
    """

    def __init__(self, handle: str, timeout_seconds: float, cancelled: bool = False):
        self.timeout_seconds = timeout_seconds
        self.cancelled = cancelled
        operation_id = operation_id_from_handle(handle) or handle
        if cancelled:
            message = f"Polling cancelled for operation {operation_id}"
        else:
            message = (
                f"Polling timed out after {timeout_seconds:g}s for operation {operation_id}"
            )
        super().__init__(message, handle)
