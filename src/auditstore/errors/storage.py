"""
Storage-related exceptions for the Walrus blob subsystem.

These exceptions are raised while uploading blobs to publishers, reading
them back from aggregators, or decoding publisher responses. Every error
kind carries its own code and an actionable message: exhausted retries mean
"try again later", which callers must not confuse with a bad request.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from auditstore.errors.base import AuditStoreError


class UploadErrorKind(str, Enum):
    """Distinct failure modes of an upload operation."""

    ALL_ENDPOINTS_FAILED = "AllEndpointsFailed"
    DEPLOYMENT_FAILED = "DeploymentFailed"
    MAX_RETRIES_EXCEEDED = "MaxRetriesExceeded"
    NETWORK_UNAVAILABLE = "NetworkUnavailable"
    NETWORK_TIMEOUT = "NetworkTimeout"


class RetrievalErrorKind(str, Enum):
    """Distinct failure modes of a read operation."""

    NOT_FOUND_AFTER_PROPAGATION_WAIT = "NotFoundAfterPropagationWait"


class StorageError(AuditStoreError):
    """
    Base exception for storage operations.

    Example:
        >>> raise StorageError("Failed to reach Walrus aggregator")
    """

    def __init__(
        self,
        message: str,
        *,
        blob_id: Optional[str] = None,
        endpoint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if blob_id:
            details["blob_id"] = blob_id
        if endpoint:
            details["endpoint"] = endpoint

        super().__init__(
            message,
            code="STORAGE_ERROR",
            details=details,
        )
        self.blob_id = blob_id
        self.endpoint = endpoint


class InvalidBlobIdError(StorageError):
    """
    Raised when a blob identifier is syntactically invalid.

    Example:
        >>> raise InvalidBlobIdError("../etc/passwd")
    """

    def __init__(
        self,
        blob_id: str,
        *,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if reason:
            details["reason"] = reason

        message = f"Invalid blob id: {blob_id!r}"
        if reason:
            message += f" ({reason})"

        super().__init__(message, details=details)
        self.code = "INVALID_BLOB_ID"
        self.blob_id = blob_id
        self.reason = reason


class UnexpectedResponseError(StorageError):
    """
    Raised when a publisher answers 2xx with a body that matches neither
    the ``newlyCreated`` nor the ``alreadyCertified`` shape.
    """

    def __init__(
        self,
        message: str = "Unexpected Walrus response format",
        *,
        endpoint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, endpoint=endpoint, details=details)
        self.code = "WALRUS_UNEXPECTED_RESPONSE"


class PublisherBusyError(StorageError):
    """
    Transient signal: the publisher answered 503 because of network load.

    Only used inside the deployment retry loop; once the retry budget is
    spent it is surfaced as MaxRetriesExceededError.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            "Walrus publisher is busy (HTTP 503)",
            endpoint=endpoint,
            details=details,
        )
        self.code = "WALRUS_PUBLISHER_BUSY"


# ============================================================================
# Upload Errors
# ============================================================================


class UploadError(StorageError):
    """
    Base exception for failed uploads.

    Attributes:
        kind: Which failure mode ended the upload.
    """

    kind: UploadErrorKind = UploadErrorKind.ALL_ENDPOINTS_FAILED
    default_code = "WALRUS_UPLOAD_FAILED"

    def __init__(
        self,
        message: str,
        *,
        endpoint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        details["kind"] = self.kind.value
        super().__init__(message, endpoint=endpoint, details=details)
        self.code = self.default_code


class AllEndpointsFailedError(UploadError):
    """
    Raised when every publisher rejected or failed the simple upload.

    Example:
        >>> raise AllEndpointsFailedError(attempts=[
        ...     {"endpoint": "https://publisher.example", "reason": "HTTP 500"},
        ... ])
    """

    kind = UploadErrorKind.ALL_ENDPOINTS_FAILED
    default_code = "WALRUS_ALL_PUBLISHERS_FAILED"

    def __init__(
        self,
        message: str = (
            "All Walrus publishers are currently experiencing issues. "
            "Please try again later."
        ),
        *,
        attempts: Optional[List[Dict[str, str]]] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        details["attempts"] = list(attempts or [])
        super().__init__(message, details=details)
        self.attempts = details["attempts"]


class DeploymentFailedError(UploadError):
    """
    Raised when the deployment endpoint answered a non-503 error status.

    Not retried: the request itself was refused.
    """

    kind = UploadErrorKind.DEPLOYMENT_FAILED
    default_code = "WALRUS_DEPLOYMENT_FAILED"

    def __init__(
        self,
        http_status: int,
        *,
        endpoint: Optional[str] = None,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        details["http_status"] = http_status

        message = f"Walrus deployment failed with HTTP {http_status}"
        if reason:
            message += f": {reason}"

        super().__init__(message, endpoint=endpoint, details=details)
        self.http_status = http_status


class MaxRetriesExceededError(UploadError):
    """Raised when the publisher stayed busy (503) for the whole retry budget."""

    kind = UploadErrorKind.MAX_RETRIES_EXCEEDED
    default_code = "WALRUS_MAX_RETRIES_EXCEEDED"

    def __init__(
        self,
        attempts: int,
        *,
        endpoint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        details["attempts"] = attempts
        super().__init__(
            f"Walrus network is busy; gave up after {attempts} attempts. "
            "Please retry in a few minutes.",
            endpoint=endpoint,
            details=details,
        )
        self.attempts = attempts


class NetworkUnavailableError(UploadError):
    """Raised when transport-level failures outlast the retry budget."""

    kind = UploadErrorKind.NETWORK_UNAVAILABLE
    default_code = "WALRUS_NETWORK_UNAVAILABLE"

    def __init__(
        self,
        message: str = (
            "Unable to reach the Walrus network. "
            "Check connectivity or use fallback storage."
        ),
        *,
        endpoint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, endpoint=endpoint, details=details)


class NetworkTimeoutError(UploadError):
    """Raised when requests kept timing out or the overall deadline passed."""

    kind = UploadErrorKind.NETWORK_TIMEOUT
    default_code = "WALRUS_NETWORK_TIMEOUT"

    def __init__(
        self,
        timeout_ms: int,
        *,
        endpoint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        details["timeout_ms"] = timeout_ms
        super().__init__(
            f"Walrus upload timed out after {timeout_ms}ms; "
            "the network is under high load, try again later.",
            endpoint=endpoint,
            details=details,
        )
        self.timeout_ms = timeout_ms


# ============================================================================
# Retrieval Errors
# ============================================================================


class RetrievalError(StorageError):
    """Base exception for failed reads."""

    kind: RetrievalErrorKind = RetrievalErrorKind.NOT_FOUND_AFTER_PROPAGATION_WAIT


class BlobNotFoundError(RetrievalError):
    """
    Raised when no aggregator served the blob in any propagation pass.

    Example:
        >>> raise BlobNotFoundError("abc123", passes=3)
    """

    kind = RetrievalErrorKind.NOT_FOUND_AFTER_PROPAGATION_WAIT

    def __init__(
        self,
        blob_id: str,
        *,
        passes: int,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        details["passes"] = passes
        details["kind"] = self.kind.value
        super().__init__(
            "Blob may still be propagating across the network. "
            "Please try again in a few minutes.",
            blob_id=blob_id,
            details=details,
        )
        self.code = "WALRUS_BLOB_NOT_FOUND"
        self.passes = passes
