"""
Sui JSON-RPC client.

Read-only queries the deployment flow needs from the ledger: the current
storage epoch and wallet balances.
"""

from __future__ import annotations

import itertools
from decimal import Decimal
from typing import Any, List, Optional

import httpx

from auditstore.constants import MIN_WALLET_BALANCE_SUI, MIST_PER_SUI
from auditstore.errors import LedgerError
from auditstore.ledger.types import SuiClientConfig, WalletCheck
from auditstore.utils.http import bounded_request
from auditstore.utils.logging import get_logger

_logger = get_logger(__name__)


class SuiClient:
    """
    Minimal Sui full-node client.

    Every call opens its own HTTP client; nothing is cached, so the epoch
    reported is always the one current at call time.

    Example:
        ```python
        sui = SuiClient(SuiClientConfig())
        epoch = await sui.get_current_epoch()
        check = await sui.check_wallet_for_deployment(address)
        ```
    """

    def __init__(
        self,
        config: Optional[SuiClientConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or SuiClientConfig()
        self._transport = transport
        self._ids = itertools.count(1)

    @property
    def rpc_url(self) -> str:
        return self._config.rpc_url

    async def _call(self, method: str, params: List[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.timeout_ms / 1000),
                transport=self._transport,
            ) as client:
                response = await bounded_request(
                    client.post(self._config.rpc_url, json=payload),
                    self._config.timeout_ms,
                )
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            _logger.warning(
                "Sui RPC request failed",
                extra={"method": method, "error": str(e)},
            )
            raise LedgerError(
                f"Sui RPC request failed: {e}",
                method=method,
                rpc_url=self._config.rpc_url,
            ) from e

        if not isinstance(body, dict):
            raise LedgerError(
                "Sui RPC returned a non-object body",
                method=method,
                rpc_url=self._config.rpc_url,
            )
        if body.get("error"):
            error = body["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise LedgerError(
                f"Sui RPC error: {message}",
                method=method,
                rpc_url=self._config.rpc_url,
            )
        if "result" not in body:
            raise LedgerError(
                "Sui RPC response has no result",
                method=method,
                rpc_url=self._config.rpc_url,
            )
        return body["result"]

    async def get_current_epoch(self) -> int:
        """
        Get the ledger's current epoch.

        Returns:
            Current epoch number

        Raises:
            LedgerError: If the node is unreachable or the response is malformed
        """
        method = "suix_getLatestSuiSystemState"
        result = await self._call(method, [])
        try:
            return int(result["epoch"])
        except (KeyError, TypeError, ValueError) as e:
            raise LedgerError(
                "System state has no usable epoch",
                method=method,
                rpc_url=self._config.rpc_url,
            ) from e

    async def get_balance(self, address: str) -> int:
        """
        Get the SUI balance of an address.

        Args:
            address: Sui address (0x-prefixed)

        Returns:
            Total balance in MIST
        """
        method = "suix_getBalance"
        result = await self._call(method, [address])
        try:
            return int(result["totalBalance"])
        except (KeyError, TypeError, ValueError) as e:
            raise LedgerError(
                "Balance response has no usable totalBalance",
                method=method,
                rpc_url=self._config.rpc_url,
            ) from e

    async def check_wallet_for_deployment(
        self,
        address: str,
        min_balance_sui: Decimal = MIN_WALLET_BALANCE_SUI,
    ) -> WalletCheck:
        """
        Check whether a wallet holds enough SUI to pay for a deployment.

        Args:
            address: Sui address
            min_balance_sui: Required balance in SUI

        Returns:
            WalletCheck with the balance and a ready flag
        """
        balance_mist = await self.get_balance(address)
        balance_sui = Decimal(balance_mist) / Decimal(MIST_PER_SUI)
        return WalletCheck(
            address=address,
            balance_mist=balance_mist,
            balance_sui=balance_sui,
            min_balance_sui=min_balance_sui,
            ready=balance_sui >= min_balance_sui,
        )
