"""
Base exception class for auditstore.

All service-specific exceptions inherit from AuditStoreError, which carries
a machine-readable error code and additional context details so the HTTP
layer can render every failure as ``{"error": code, "message": ...}``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class AuditStoreError(Exception):
    """
    Base exception for all auditstore errors.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code (e.g., "WALRUS_NETWORK_TIMEOUT").
        details: Optional dictionary with additional error context.

    Example:
        >>> raise AuditStoreError(
        ...     "Publisher rejected upload",
        ...     code="WALRUS_DEPLOYMENT_FAILED",
        ...     details={"http_status": 500}
        ... )
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "AUDITSTORE_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize AuditStoreError.

        Args:
            message: Human-readable error description.
            code: Machine-readable error code.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        """Return formatted error message."""
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"details={self.details!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to a dictionary for JSON serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }
