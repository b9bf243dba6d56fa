"""
Deployment Orchestrator

Validates a deployment request, prices it, runs the paid upload and
assembles the record returned to the caller.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from auditstore.constants import DEFAULT_STORAGE_EPOCHS, MAX_DEPLOYMENT_SIZE_BYTES
from auditstore.errors import (
    InvalidEstimateRequestError,
    MissingPayloadError,
    MissingWalletError,
    PayloadTooLargeError,
)
from auditstore.ledger import SuiClient
from auditstore.server.deployments import DeploymentLog, InMemoryDeploymentLog
from auditstore.storage.cost import calculate_deployment_config, cost_breakdown
from auditstore.storage.types import DeploymentRecord
from auditstore.storage.uploader import BlobUploader
from auditstore.utils.logging import get_logger
from auditstore.utils.validation import parse_storage_epochs, sanitize_for_logging

_logger = get_logger(__name__)


class DeploymentOrchestrator:
    """
    Server-side handler for deployment uploads.

    Example:
        ```python
        orchestrator = DeploymentOrchestrator(uploader, sui_client)
        record = await orchestrator.handle_deploy(
            pdf_bytes,
            storage_epochs_header="20",
            wallet_address_header=wallet,
        )
        print(record.expiration_epoch)
        ```
    """

    def __init__(
        self,
        uploader: BlobUploader,
        ledger: SuiClient,
        deployment_log: Optional[DeploymentLog] = None,
        *,
        max_payload_bytes: int = MAX_DEPLOYMENT_SIZE_BYTES,
    ) -> None:
        self._uploader = uploader
        self._ledger = ledger
        self._log = deployment_log if deployment_log is not None else InMemoryDeploymentLog()
        self._max_payload_bytes = max_payload_bytes

    @property
    def deployment_log(self) -> DeploymentLog:
        return self._log

    @property
    def max_payload_bytes(self) -> int:
        return self._max_payload_bytes

    async def handle_deploy(
        self,
        file_bytes: Optional[bytes],
        storage_epochs_header: Optional[str] = None,
        wallet_address_header: Optional[str] = None,
        expected_cost_header: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> DeploymentRecord:
        """
        Run one deployment upload.

        Validation is checked in order (payload, wallet, size) and stops at
        the first failure without touching the network.

        Args:
            file_bytes: Uploaded file
            storage_epochs_header: Requested epochs (default 10 if unusable)
            wallet_address_header: Wallet that will own the blob
            expected_cost_header: Client-side quote, compared for logging only
            content_type: MIME type of the file (inferred if None)

        Returns:
            DeploymentRecord

        Raises:
            MissingPayloadError, MissingWalletError, PayloadTooLargeError:
                Invalid request
            LedgerError: Current epoch unavailable
            UploadError: Any failure of the paid upload
        """
        if not file_bytes:
            raise MissingPayloadError()
        wallet_address = (wallet_address_header or "").strip()
        if not wallet_address:
            raise MissingWalletError()
        file_size = len(file_bytes)
        if file_size > self._max_payload_bytes:
            raise PayloadTooLargeError(file_size, self._max_payload_bytes)

        storage_epochs = parse_storage_epochs(storage_epochs_header)
        quote = calculate_deployment_config(file_size, storage_epochs)
        self._compare_expected_cost(expected_cost_header, quote.estimated_cost)

        _logger.info(
            "Deployment request accepted",
            extra={
                "size": file_size,
                "epochs": storage_epochs,
                "quote_sui": str(quote.estimated_cost),
                "wallet": sanitize_for_logging(wallet_address),
            },
        )

        current_epoch = await self._ledger.get_current_epoch()
        metadata = await self._uploader.upload_with_deployment(
            file_bytes,
            storage_epochs,
            wallet_address,
            content_type,
        )

        record = DeploymentRecord(
            blob_id=metadata.blob_id,
            transaction_hash=metadata.transaction_hash,
            cost=metadata.deployment_cost,
            storage_epochs=storage_epochs,
            expiration_epoch=current_epoch + storage_epochs,
            wallet_address=wallet_address,
            file_size=file_size,
        )

        try:
            await self._log.record(record)
        except Exception:
            _logger.error(
                "Failed to record deployment",
                extra={"blob_id": record.blob_id},
                exc_info=True,
            )

        _logger.info(
            "Deployment complete",
            extra={
                "blob_id": record.blob_id,
                "expiration_epoch": record.expiration_epoch,
            },
        )
        return record

    @staticmethod
    def _compare_expected_cost(raw: Optional[str], estimated: Decimal) -> None:
        if raw is None or not str(raw).strip():
            return
        try:
            expected = Decimal(str(raw).strip())
        except InvalidOperation:
            _logger.warning(
                "Ignoring unparseable expected cost",
                extra={"expected": sanitize_for_logging(str(raw))},
            )
            return
        if expected != estimated:
            _logger.warning(
                "Cost mismatch",
                extra={"expected": str(expected), "calculated": str(estimated)},
            )

    async def estimate(
        self,
        file_size_bytes: Any,
        storage_epochs: Any = DEFAULT_STORAGE_EPOCHS,
    ) -> Dict[str, Any]:
        """
        Price a deployment without uploading anything.

        Args:
            file_size_bytes: Payload size (positive integer)
            storage_epochs: Requested epochs (default 10 if unusable)

        Returns:
            Dictionary with estimatedCost, breakdown and epochs

        Raises:
            InvalidEstimateRequestError: If the size is not a positive integer
            LedgerError: Current epoch unavailable
        """
        if (
            isinstance(file_size_bytes, bool)
            or not isinstance(file_size_bytes, int)
            or file_size_bytes <= 0
        ):
            raise InvalidEstimateRequestError(file_size_bytes)

        epochs = parse_storage_epochs(storage_epochs)
        breakdown = cost_breakdown(file_size_bytes, epochs)
        current_epoch = await self._ledger.get_current_epoch()
        return {
            "estimatedCost": float(breakdown.total_cost),
            "breakdown": breakdown.model_dump(by_alias=True),
            "epochs": {
                "storage": epochs,
                "current": current_epoch,
                "expiration": current_epoch + epochs,
            },
        }
