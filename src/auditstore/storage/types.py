"""
Storage Types

Type definitions for the Walrus blob subsystem:
- Component configuration (uploader, retriever, status probe)
- Publisher store responses (``newlyCreated`` / ``alreadyCertified``)
- Normalized results (BlobMetadata, DeploymentRecord, ProbeResult)
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError as PydanticValidationError,
    field_serializer,
    model_validator,
)

from auditstore.constants import (
    AGGREGATOR_TIMEOUT_MS,
    DEPLOYMENT_BASE_DELAY_MS,
    DEPLOYMENT_DEADLINE_MS,
    DEPLOYMENT_MAX_ATTEMPTS,
    GAS_COST_SUI,
    HEAD_CHECK_TIMEOUT_MS,
    PROBE_TIMEOUT_MS,
    PROPAGATION_DELAY_MS,
    PROPAGATION_PASSES,
    PUBLISHER_TIMEOUT_MS,
)
from auditstore.errors import UnexpectedResponseError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Component Configuration
# ============================================================================

class UploaderConfig(BaseModel):
    """
    Configuration for BlobUploader.

    Example:
        ```python
        config = UploaderConfig(
            deployment_endpoint="https://publisher.walrus-testnet.walrus.space",
        )
        ```
    """

    model_config = ConfigDict(frozen=True)

    publisher_timeout_ms: int = Field(
        default=PUBLISHER_TIMEOUT_MS,
        ge=100,
        description="Per-endpoint request timeout for uploads in milliseconds",
    )
    deployment_endpoint: Optional[str] = Field(
        default=None,
        description="Canonical deployment publisher (defaults to the first write endpoint)",
    )
    deployment_max_attempts: int = Field(
        default=DEPLOYMENT_MAX_ATTEMPTS,
        ge=1,
        description="Total attempts on the deployment endpoint (1 initial + retries)",
    )
    deployment_base_delay_ms: int = Field(
        default=DEPLOYMENT_BASE_DELAY_MS,
        ge=0,
        description="Backoff base; the wait after attempt k is base * 2^k",
    )
    deployment_deadline_ms: int = Field(
        default=DEPLOYMENT_DEADLINE_MS,
        ge=100,
        description="Overall deadline for one deployment upload in milliseconds",
    )


class RetrieverConfig(BaseModel):
    """Configuration for BlobRetriever."""

    model_config = ConfigDict(frozen=True)

    aggregator_timeout_ms: int = Field(
        default=AGGREGATOR_TIMEOUT_MS,
        ge=100,
        description="Per-aggregator timeout for blob reads in milliseconds",
    )
    head_timeout_ms: int = Field(
        default=HEAD_CHECK_TIMEOUT_MS,
        ge=100,
        description="Per-aggregator timeout for existence checks in milliseconds",
    )
    propagation_passes: int = Field(
        default=PROPAGATION_PASSES,
        ge=1,
        description="Number of passes over the aggregator list",
    )
    propagation_delay_ms: int = Field(
        default=PROPAGATION_DELAY_MS,
        ge=0,
        description="Wait between passes in milliseconds",
    )


class ProbeConfig(BaseModel):
    """Configuration for StatusProbe."""

    model_config = ConfigDict(frozen=True)

    timeout_ms: int = Field(
        default=PROBE_TIMEOUT_MS,
        ge=100,
        description="Client-side timeout for the availability request",
    )


# ============================================================================
# Publisher Store Responses
# ============================================================================

class WalrusBlobObject(BaseModel):
    """On-chain blob object returned for a newly stored blob."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Sui object id of the blob object")
    blob_id: str = Field(..., alias="blobId", min_length=1)
    size: int = Field(..., ge=0)
    stored_epoch: Optional[int] = Field(default=None, alias="storedEpoch")


class NewlyCreated(BaseModel):
    """The publisher stored a blob it had not seen before."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    blob_object: WalrusBlobObject = Field(..., alias="blobObject")
    cost: Optional[int] = Field(
        default=None,
        ge=0,
        description="Storage cost actually charged, in MIST",
    )


class CertificationEvent(BaseModel):
    """Reference to the event that certified an existing blob."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tx_digest: str = Field(..., alias="txDigest", min_length=1)
    event_seq: Optional[int] = Field(default=None, alias="eventSeq")


class AlreadyCertified(BaseModel):
    """
    The network already holds this content (deduplicated by hash).

    No fresh size is returned; callers take it from the payload they sent.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    blob_id: str = Field(..., alias="blobId", min_length=1)
    event_seq: Optional[int] = Field(default=None, alias="eventSeq")
    event: Optional[CertificationEvent] = None
    end_epoch: Optional[int] = Field(default=None, alias="endEpoch")

    @property
    def transaction_reference(self) -> Optional[str]:
        """Best available reference to the certifying transaction."""
        if self.event is not None:
            return self.event.tx_digest
        if self.event_seq is not None:
            return f"eventSeq:{self.event_seq}"
        return None


StoreOutcome = Union[NewlyCreated, AlreadyCertified]
"""Exactly one of the two publisher success shapes."""


class StoreResponse(BaseModel):
    """Raw publisher response envelope; exactly one case is populated."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    newly_created: Optional[NewlyCreated] = Field(default=None, alias="newlyCreated")
    already_certified: Optional[AlreadyCertified] = Field(
        default=None, alias="alreadyCertified"
    )

    @model_validator(mode="after")
    def _exactly_one_case(self) -> "StoreResponse":
        if (self.newly_created is None) == (self.already_certified is None):
            raise ValueError(
                "response must contain exactly one of newlyCreated or alreadyCertified"
            )
        return self

    @property
    def outcome(self) -> StoreOutcome:
        if self.newly_created is not None:
            return self.newly_created
        return self.already_certified  # type: ignore[return-value]


def parse_store_response(
    payload: Any,
    endpoint: Optional[str] = None,
) -> StoreOutcome:
    """
    Decode a publisher success body into one of the two store outcomes.

    Args:
        payload: Parsed JSON body
        endpoint: Publisher that produced it (for error context)

    Returns:
        NewlyCreated or AlreadyCertified

    Raises:
        UnexpectedResponseError: If the body matches neither shape
    """
    try:
        return StoreResponse.model_validate(payload).outcome
    except PydanticValidationError as e:
        raise UnexpectedResponseError(
            endpoint=endpoint,
            details={"reason": str(e)},
        ) from e


# ============================================================================
# Normalized Results
# ============================================================================

class BlobMetadata(BaseModel):
    """
    Metadata of one successful upload.

    The deployment fields (cost, epochs, transaction hash) are populated
    together by the paid path, or not at all by the simple path.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    blob_id: str = Field(..., alias="blobId", min_length=1)
    size: int = Field(..., ge=0)
    uploaded_at: datetime = Field(default_factory=_utcnow, alias="uploadedAt")
    content_type: str = Field(..., alias="contentType")
    deployment_cost: Optional[Decimal] = Field(default=None, alias="deploymentCost")
    storage_epochs: Optional[int] = Field(default=None, alias="storageEpochs", ge=1)
    transaction_hash: Optional[str] = Field(default=None, alias="transactionHash")

    @model_validator(mode="after")
    def _deployment_fields_together(self) -> "BlobMetadata":
        present = [
            self.deployment_cost is not None,
            self.storage_epochs is not None,
            self.transaction_hash is not None,
        ]
        if any(present) and not all(present):
            raise ValueError(
                "deployment_cost, storage_epochs and transaction_hash "
                "must be set together"
            )
        return self

    @property
    def is_deployment(self) -> bool:
        """Whether the paid deployment path produced this record."""
        return self.transaction_hash is not None

    @field_serializer("deployment_cost")
    def _serialize_cost(self, value: Optional[Decimal]) -> Optional[float]:
        return float(value) if value is not None else None


class DeploymentConfig(BaseModel):
    """Price quote for a deployment; recomputed on every input change."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    gas_price: Decimal = Field(default=GAS_COST_SUI, alias="gasPrice")
    storage_epochs: int = Field(..., alias="storageEpochs", ge=1)
    estimated_cost: Decimal = Field(..., alias="estimatedCost", ge=0)

    @field_serializer("gas_price", "estimated_cost")
    def _serialize_decimal(self, value: Decimal) -> float:
        return float(value)


class CostBreakdown(BaseModel):
    """Itemized estimate, each figure rounded up to the thousandth."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    storage_cost: Decimal = Field(..., alias="storageCost")
    gas_cost: Decimal = Field(..., alias="gasCost")
    total_cost: Decimal = Field(..., alias="totalCost")

    @field_serializer("storage_cost", "gas_cost", "total_cost")
    def _serialize_decimal(self, value: Decimal) -> float:
        return float(value)


class FetchedBlob(BaseModel):
    """Bytes served by an aggregator."""

    model_config = ConfigDict(frozen=True)

    blob_id: str
    data: bytes
    content_type: Optional[str] = None
    aggregator: str

    @property
    def size(self) -> int:
        return len(self.data)


class BlobHeadResult(BaseModel):
    """Outcome of an existence-only check."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    exists: bool
    size: Optional[int] = None
    content_type: Optional[str] = Field(default=None, alias="contentType")
    aggregator: Optional[str] = None


class DeploymentRecord(BaseModel):
    """Normalized result returned by the deployment endpoint."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    blob_id: str = Field(..., alias="blobId")
    transaction_hash: str = Field(..., alias="transactionHash")
    cost: Decimal
    storage_epochs: int = Field(..., alias="storageEpochs", ge=1)
    expiration_epoch: int = Field(..., alias="expirationEpoch")
    status: Literal["confirmed"] = "confirmed"
    wallet_address: str = Field(..., alias="walletAddress")
    file_size: int = Field(..., alias="fileSize", ge=0)

    @field_serializer("cost")
    def _serialize_cost(self, value: Decimal) -> float:
        return float(value)


# ============================================================================
# Network Status
# ============================================================================

class NetworkStatus(str, Enum):
    """Availability of the storage network as seen by the probe."""

    CHECKING = "checking"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"


STATUS_MESSAGES = {
    NetworkStatus.CHECKING: "Testing connection to Walrus decentralized storage...",
    NetworkStatus.AVAILABLE: "Walrus decentralized storage is operating normally.",
    NetworkStatus.TIMEOUT: (
        "The Walrus network is experiencing high load. Uploads may be slow "
        "or fail; retry shortly."
    ),
    NetworkStatus.UNAVAILABLE: (
        "Unable to connect to Walrus decentralized storage. Check your "
        "connection or use fallback storage."
    ),
}


class ProbeResult(BaseModel):
    """One availability check."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: NetworkStatus
    endpoint: str
    checked_at: datetime = Field(default_factory=_utcnow, alias="checkedAt")
    http_status: Optional[int] = Field(default=None, alias="httpStatus")

    @property
    def is_available(self) -> bool:
        return self.status == NetworkStatus.AVAILABLE

    @property
    def message(self) -> str:
        return STATUS_MESSAGES[self.status]
