"""External API clients (Content Understanding).

This module provides the analysis client interface, the HTTP client for the
Content Understanding REST API, and the exception classes used for error
handling.
"""

from .analysis_client import AnalysisClient
from .content_understanding_client import ClassifierClient, ContentUnderstandingClient
from .exceptions import (
    APIError,
    AuthError,
    ContentUnderstandingClientError,
    ContentUnderstandingError,
    NotFoundError,
    OperationError,
    OperationFailedError,
    PollingTimedOutError,
    SubmitError,
)

__all__ = [
    "AnalysisClient",
    "ClassifierClient",
    "ContentUnderstandingClient",
    "ContentUnderstandingError",
    "ContentUnderstandingClientError",
    "APIError",
    "AuthError",
    "NotFoundError",
    "SubmitError",
    "OperationError",
    "OperationFailedError",
    "PollingTimedOutError",
]
