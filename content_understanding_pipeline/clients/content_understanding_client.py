"""Content Understanding HTTP client implementation.

This module provides a high-level interface for the Content Understanding
REST API: submitting documents to an analyzer or classifier, fetching
operation status and managing analyzer and classifier definitions.
"""

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests

from ..domain.config import RetryConfig, ServiceConfig
from ..domain.models import Operation
from ..utils.retry import retry_with_backoff
from .analysis_client import AnalysisClient
from .exceptions import (
    APIError,
    AuthError,
    ContentUnderstandingClientError,
    NotFoundError,
    SubmitError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceKind:
    """URL layout of one kind of processing profile."""

    label: str
    collection_path: str
    action: str
    results_path: str


ANALYZERS = ResourceKind("Analyzer", "/analyzers", ":analyze", "/analyzerResults")
CLASSIFIERS = ResourceKind("Classifier", "/classifiers", ":classify", "/classifierResults")


class ContentUnderstandingClient(AnalysisClient):
    """Client for the Content Understanding REST API.

    Example:
        >>> client = ContentUnderstandingClient(
        ...     ServiceConfig(endpoint="https://example.services.ai.azure.com",
        ...                   api_key="key")
        ... )
        >>> handle = client.submit(pdf_bytes, "application/pdf", "invoice-analyzer")
        >>> operation = client.fetch_status(handle)
    """

    API_BASE_PATH = "/contentunderstanding"
    AUTH_HEADER = "Ocp-Apim-Subscription-Key"

    # Response body excerpt included in error messages
    ERROR_BODY_LIMIT = 500

    def __init__(
        self,
        config: ServiceConfig,
        retry_config: RetryConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Service endpoint, key, API version and request timeout.
            retry_config: Retry settings for document submission. Defaults
                to RetryConfig().
            session: Optional pre-built session, mainly for tests.

        Raises:
            AuthError: If no API key is configured.
        """
        if not config.api_key:
            raise AuthError("No API key configured for the Content Understanding service")

        self.config = config
        self.retry_config = retry_config or RetryConfig()
        self._base_url = config.endpoint.rstrip("/") + self.API_BASE_PATH

        self._session = session or requests.Session()
        self._session.headers.update({self.AUTH_HEADER: config.api_key})

        # Only transient API errors are retried; auth and 4xx rejections are not
        self._submit_with_retry = retry_with_backoff(
            max_attempts=self.retry_config.max_attempts,
            initial_delay=self.retry_config.initial_delay,
            backoff_multiplier=self.retry_config.backoff_multiplier,
            max_delay=self.retry_config.max_delay,
            exceptions=(APIError,),
            on_retry=self._log_retry,
        )(self._submit_once)

        logger.info(f"ContentUnderstandingClient initialized (endpoint: {config.endpoint})")

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _resource_url(self, kind: ResourceKind, name: str) -> str:
        return self._url(f"{kind.collection_path}/{quote(name, safe='')}")

    def _make_request(self, method: str, url: str, **kwargs) -> requests.Response:
        """Centralized API request handler.

        Adds the api-version query parameter and default timeout, makes the
        request and maps error status codes onto the exception hierarchy.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE).
            url: Absolute request URL.
            **kwargs: Additional arguments passed to requests.Session.request().

        Returns:
            Response object for a successful (2xx/3xx) request.

        Raises:
            AuthError: On 401 and 403.
            NotFoundError: On 404.
            APIError: On any other 4xx/5xx, or if the request itself fails.
        """
        params = kwargs.pop("params", None) or {}
        if "api-version=" not in url:
            params.setdefault("api-version", self.config.api_version)
        kwargs.setdefault("timeout", self.config.request_timeout)

        try:
            response = self._session.request(method, url, params=params, **kwargs)
        except requests.RequestException as e:
            error_msg = f"Request failed: {method} {url}"
            logger.error(f"{error_msg} - {e}")
            raise APIError(error_msg, original_exception=e) from e

        logger.debug(f"API request: {method} {url} -> {response.status_code}")

        if response.status_code < 400:
            return response

        detail = (response.text or "")[: self.ERROR_BODY_LIMIT]
        error_msg = f"{response.status_code} {response.reason}: {detail}".rstrip(": ")
        if response.status_code in (401, 403):
            raise AuthError(f"Authentication failed: {error_msg}")
        if response.status_code == 404:
            raise NotFoundError(f"Resource not found: {error_msg}")
        raise APIError(
            f"Request rejected: {method} {url}: {error_msg}",
            status_code=response.status_code,
        )

    def _json(self, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise APIError("Service returned a response that is not valid JSON", e) from e

    @staticmethod
    def _log_retry(attempt: int, delay: float, exception: Exception) -> None:
        logger.warning(f"Submit attempt {attempt} failed, retrying in {delay:g}s: {exception}")

    # -------------------------------------------------------------------------
    # Document submission and operation status
    # -------------------------------------------------------------------------

    def submit(self, document_bytes: bytes, content_type: str, analyzer: str) -> str:
        """Submit a document to an analyzer.

        Transient API errors are retried with exponential backoff.

        Args:
            document_bytes: Raw document content, sent as the request body.
            content_type: MIME type of the document.
            analyzer: Analyzer name.

        Returns:
            Operation handle (the Operation-Location URL).

        Raises:
            SubmitError: If the service accepts the request without returning
                an operation location, or rejects it with a 4xx status.
            AuthError: If the key is rejected.
            NotFoundError: If the analyzer does not exist.
            APIError: If all attempts fail with transient errors.
        """
        return self._submit(ANALYZERS, document_bytes, content_type, analyzer)

    def classify(self, document_bytes: bytes, content_type: str, classifier: str) -> str:
        """Submit a document to a classifier. Same contract as submit()."""
        return self._submit(CLASSIFIERS, document_bytes, content_type, classifier)

    def _submit(
        self, kind: ResourceKind, document_bytes: bytes, content_type: str, name: str
    ) -> str:
        if not name or not name.strip():
            raise ValueError(f"{kind.label} name cannot be empty")
        if not document_bytes:
            raise ValueError("Document content cannot be empty")

        logger.debug(
            f"Submitting {len(document_bytes)} bytes ({content_type}) to "
            f"{kind.label.lower()} {name}"
        )
        return self._submit_with_retry(kind, document_bytes, content_type, name)

    def _submit_once(
        self, kind: ResourceKind, document_bytes: bytes, content_type: str, name: str
    ) -> str:
        url = self._resource_url(kind, name) + kind.action
        try:
            response = self._make_request(
                "POST",
                url,
                data=document_bytes,
                headers={"Content-Type": content_type},
            )
        except APIError as e:
            if e.status_code is not None and 400 <= e.status_code < 500 and e.status_code != 429:
                raise SubmitError(
                    f"{kind.label} '{name}' rejected the document", original_exception=e
                ) from e
            raise

        handle = response.headers.get("Operation-Location") or response.headers.get(
            "Location"
        )
        if not handle:
            raise SubmitError(
                f"{kind.label} '{name}' accepted the document but returned "
                "no Operation-Location header"
            )
        logger.debug(f"Operation-Location: {handle}")
        return handle

    def fetch_status(self, handle: str, kind: ResourceKind = ANALYZERS) -> Operation:
        """Fetch the current snapshot of an operation.

        Args:
            handle: Operation-Location URL, or a bare operation id which is
                resolved against the results path of ``kind``.
            kind: Which results path bare ids belong to.

        Returns:
            Operation snapshot parsed from the response body.
        """
        if not handle or not handle.strip():
            raise ValueError("Operation handle cannot be empty")

        if handle.startswith(("http://", "https://")):
            url = handle
        else:
            url = self._url(f"{kind.results_path}/{quote(handle.strip(), safe='')}")

        payload = self._json(self._make_request("GET", url))
        if not isinstance(payload, dict):
            raise APIError("Operation status response is not a JSON object")
        return Operation.from_payload(handle, payload)

    # -------------------------------------------------------------------------
    # Analyzer and classifier management
    # -------------------------------------------------------------------------

    def list_analyzers(self) -> list[dict[str, Any]]:
        """List the analyzers available on the resource."""
        return self._list(ANALYZERS)

    def get_analyzer(self, analyzer: str) -> dict[str, Any] | None:
        """Get an analyzer definition.

        Returns:
            The analyzer definition, or None if it doesn't exist.
        """
        return self._get(ANALYZERS, analyzer)

    def create_or_update_analyzer(
        self, analyzer: str, definition: dict[str, Any]
    ) -> dict[str, Any]:
        """Create or replace an analyzer definition.

        Args:
            analyzer: Analyzer name.
            definition: Analyzer definition (description, scenario, fieldSchema, ...).

        Returns:
            The service response body, with the operation handle under
            ``"operationLocation"`` when the service returned one.

        Raises:
            APIError: With status_code 409 if the analyzer already exists
                and the service refuses to replace it.
        """
        return self._put(ANALYZERS, analyzer, definition)

    def delete_analyzer(self, analyzer: str) -> bool:
        """Delete an analyzer.

        Returns:
            True if the analyzer was deleted, False if it didn't exist.
        """
        return self._delete(ANALYZERS, analyzer)

    def list_classifiers(self) -> list[dict[str, Any]]:
        """List the classifiers available on the resource."""
        return self._list(CLASSIFIERS)

    def get_classifier(self, classifier: str) -> dict[str, Any] | None:
        """Get a classifier definition, or None if it doesn't exist."""
        return self._get(CLASSIFIERS, classifier)

    def create_or_update_classifier(
        self, classifier: str, definition: dict[str, Any]
    ) -> dict[str, Any]:
        """Create or replace a classifier definition (categories, splitMode, ...)."""
        return self._put(CLASSIFIERS, classifier, definition)

    def delete_classifier(self, classifier: str) -> bool:
        """Delete a classifier. Returns False if it didn't exist."""
        return self._delete(CLASSIFIERS, classifier)

    def _list(self, kind: ResourceKind) -> list[dict[str, Any]]:
        payload = self._json(self._make_request("GET", self._url(kind.collection_path)))
        if isinstance(payload, dict):
            items = payload.get("value", [])
        else:
            items = payload
        if not isinstance(items, list):
            raise APIError(f"{kind.label} list response has an unexpected shape")
        return items

    def _get(self, kind: ResourceKind, name: str) -> dict[str, Any] | None:
        try:
            return self._json(self._make_request("GET", self._resource_url(kind, name)))
        except NotFoundError:
            logger.warning(f"{kind.label} not found: {name}")
            return None

    def _put(
        self, kind: ResourceKind, name: str, definition: dict[str, Any]
    ) -> dict[str, Any]:
        if not isinstance(definition, dict):
            raise ValueError(f"{kind.label} definition must be a JSON object")

        response = self._make_request("PUT", self._resource_url(kind, name), json=definition)
        body = self._json(response) if response.content else {}
        if not isinstance(body, dict):
            body = {"response": body}

        handle = response.headers.get("Operation-Location")
        if handle:
            body["operationLocation"] = handle
        logger.info(f"{kind.label} '{name}' created or updated")
        return body

    def _delete(self, kind: ResourceKind, name: str) -> bool:
        try:
            self._make_request("DELETE", self._resource_url(kind, name))
        except NotFoundError:
            logger.warning(f"{kind.label} not found, nothing to delete: {name}")
            return False
        logger.info(f"{kind.label} '{name}' deleted")
        return True

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()


class ClassifierClient(AnalysisClient):
    """Presents classification as an AnalysisClient.

    ``submit`` sends documents to a classifier instead of an analyzer, so the
    poller, exporter and BatchOrchestrator work unchanged for classify runs.
    The wrapped client's session is shared and closed by its owner.
    """

    def __init__(self, client: ContentUnderstandingClient) -> None:
        self.client = client

    def submit(self, document_bytes: bytes, content_type: str, analyzer: str) -> str:
        return self.client.classify(document_bytes, content_type, analyzer)

    def fetch_status(self, handle: str) -> Operation:
        return self.client.fetch_status(handle, CLASSIFIERS)


__all__ = [
    "ANALYZERS",
    "CLASSIFIERS",
    "ClassifierClient",
    "ContentUnderstandingClient",
    "ContentUnderstandingClientError",
    "ResourceKind",
]
