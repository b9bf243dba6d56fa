"""
Ledger Types

Configuration and results for Sui full-node queries.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from auditstore.constants import LEDGER_TIMEOUT_MS, MIN_WALLET_BALANCE_SUI

DEFAULT_SUI_RPC_URL = "https://fullnode.testnet.sui.io:443"


class SuiClientConfig(BaseModel):
    """
    Configuration for SuiClient.

    Example:
        ```python
        config = SuiClientConfig(rpc_url="https://fullnode.mainnet.sui.io:443")
        ```
    """

    model_config = ConfigDict(frozen=True)

    rpc_url: str = Field(
        default=DEFAULT_SUI_RPC_URL,
        description="Sui full node JSON-RPC URL",
    )
    timeout_ms: int = Field(
        default=LEDGER_TIMEOUT_MS,
        ge=100,
        description="Request timeout in milliseconds",
    )


class WalletCheck(BaseModel):
    """Whether a wallet can pay for a deployment upload."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    address: str
    balance_mist: int = Field(..., alias="balanceMist", ge=0)
    balance_sui: Decimal = Field(..., alias="balanceSui")
    min_balance_sui: Decimal = Field(default=MIN_WALLET_BALANCE_SUI, alias="minBalanceSui")
    ready: bool

    @field_serializer("balance_sui", "min_balance_sui")
    def _serialize_decimal(self, value: Decimal) -> float:
        return float(value)
