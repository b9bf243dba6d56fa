"""
Request validation exceptions for the deployment endpoint.

Validation failures are never retried: they mean "fix the request",
not "try again later".
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from auditstore.errors.base import AuditStoreError


class DeploymentValidationKind(str, Enum):
    """Validation failures, in the order they are checked."""

    MISSING_PAYLOAD = "MissingPayload"
    MISSING_WALLET = "MissingWallet"
    PAYLOAD_TOO_LARGE = "PayloadTooLarge"


class DeploymentValidationError(AuditStoreError):
    """Base exception for rejected deployment requests."""

    kind: DeploymentValidationKind = DeploymentValidationKind.MISSING_PAYLOAD
    default_code = "INVALID_DEPLOYMENT_REQUEST"

    def __init__(
        self,
        message: str,
        *,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        details["kind"] = self.kind.value
        super().__init__(message, code=self.default_code, details=details)


class MissingPayloadError(DeploymentValidationError):
    """Raised when the request carries no file bytes."""

    kind = DeploymentValidationKind.MISSING_PAYLOAD
    default_code = "MISSING_PAYLOAD"

    def __init__(self) -> None:
        super().__init__("File data required for deployment")


class MissingWalletError(DeploymentValidationError):
    """Raised when no wallet address was supplied."""

    kind = DeploymentValidationKind.MISSING_WALLET
    default_code = "MISSING_WALLET"

    def __init__(self) -> None:
        super().__init__(
            "Sui wallet address required for deployment; connect a wallet first"
        )


class PayloadTooLargeError(DeploymentValidationError):
    """
    Raised when the payload exceeds the deployment size limit.

    Example:
        >>> raise PayloadTooLargeError(62914560, 52428800)
    """

    kind = DeploymentValidationKind.PAYLOAD_TOO_LARGE
    default_code = "PAYLOAD_TOO_LARGE"

    def __init__(self, file_size: int, max_size: int) -> None:
        super().__init__(
            f"File size ({file_size} bytes) exceeds the "
            f"{max_size // (1024 * 1024)}MB limit",
            details={
                "file_size_bytes": file_size,
                "max_size_bytes": max_size,
                "excess_bytes": file_size - max_size,
            },
        )
        self.file_size = file_size
        self.max_size = max_size


class InvalidEstimateRequestError(AuditStoreError):
    """Raised when a cost estimate is requested for an invalid size."""

    def __init__(self, file_size: Any) -> None:
        super().__init__(
            "Invalid file size; fileSizeBytes must be a positive integer",
            code="INVALID_FILE_SIZE",
            details={"file_size_bytes": file_size},
        )
