"""
Abstract base class for document analysis client implementations.

This module defines the interface the orchestration layer relies on. The
workflow is submit-then-poll: a document is submitted for analysis, the
service answers with an operation handle, and the handle is fetched
repeatedly until the operation reaches a terminal state.

Example workflow:
    # 1. handle = client.submit(document_bytes, "application/pdf", "invoice")
    # 2. operation = client.fetch_status(handle)   # repeated by the poller
"""

from abc import ABC, abstractmethod

from ..domain.models import Operation


class AnalysisClient(ABC):
    """Abstract base class for analysis service clients.

    Implementations hide transport details (URLs, headers, API versions) and
    expose operation handles as opaque strings.
    """

    @abstractmethod
    def submit(self, document_bytes: bytes, content_type: str, analyzer: str) -> str:
        """Submit a document for analysis.

        Args:
            document_bytes: Raw document content.
            content_type: MIME type of the document.
            analyzer: Name of the analyzer (processing profile) to run.

        Returns:
            Operation handle to pass to fetch_status().

        Raises:
            ContentUnderstandingClientError: If the submission is rejected or
                the service can't be reached.
        """
        pass

    @abstractmethod
    def fetch_status(self, handle: str) -> Operation:
        """Fetch the current snapshot of an operation.

        Args:
            handle: Operation handle returned by submit(), or a bare
                operation id.

        Returns:
            Operation snapshot. Never mutated after it is returned.

        Raises:
            ContentUnderstandingClientError: If the status can't be fetched.
        """
        pass
