"""
Ledger (Sui full node) exceptions.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from auditstore.errors.base import AuditStoreError


class LedgerError(AuditStoreError):
    """
    Raised when a Sui JSON-RPC query fails.

    Example:
        >>> raise LedgerError("RPC error", method="suix_getLatestSuiSystemState")
    """

    def __init__(
        self,
        message: str,
        *,
        method: Optional[str] = None,
        rpc_url: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if method:
            details["method"] = method
        if rpc_url:
            details["rpc_url"] = rpc_url

        super().__init__(message, code="LEDGER_UNAVAILABLE", details=details)
        self.method = method
        self.rpc_url = rpc_url
