"""Sui ledger queries (epochs and balances)."""

from auditstore.ledger.sui_client import SuiClient
from auditstore.ledger.types import DEFAULT_SUI_RPC_URL, SuiClientConfig, WalletCheck

__all__ = [
    "SuiClient",
    "SuiClientConfig",
    "WalletCheck",
    "DEFAULT_SUI_RPC_URL",
]
