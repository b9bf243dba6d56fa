"""
Storage Module - Walrus blob storage

Write and read paths against the Walrus decentralized blob network:
- Publishers accept writes (simple failover or paid deployment)
- Aggregators serve reads (propagation-aware fetch, existence checks)

Example:
    ```python
    from auditstore.storage import (
        BlobRetriever,
        BlobUploader,
        EndpointRegistry,
        estimate_cost,
    )

    registry = EndpointRegistry.testnet()
    uploader = BlobUploader(registry=registry)
    retriever = BlobRetriever(registry=registry)

    quote = estimate_cost(len(pdf_bytes), 20)
    meta = await uploader.upload_with_deployment(pdf_bytes, 20, wallet)

    blob = await retriever.fetch(meta.blob_id)
    ```
"""

from __future__ import annotations

# ============================================================================
# Clients
# ============================================================================

from auditstore.storage.retriever import BlobRetriever
from auditstore.storage.status import StatusProbe
from auditstore.storage.uploader import BlobUploader, infer_content_type

# ============================================================================
# Endpoints and Pricing
# ============================================================================

from auditstore.storage.cost import (
    calculate_deployment_config,
    cost_breakdown,
    estimate_cost,
    storage_cost,
)
from auditstore.storage.endpoints import (
    TESTNET_AGGREGATORS,
    TESTNET_PUBLISHERS,
    EndpointRegistry,
)

# ============================================================================
# Types
# ============================================================================

from auditstore.storage.types import (
    STATUS_MESSAGES,
    AlreadyCertified,
    BlobHeadResult,
    BlobMetadata,
    CertificationEvent,
    CostBreakdown,
    DeploymentConfig,
    DeploymentRecord,
    FetchedBlob,
    NetworkStatus,
    NewlyCreated,
    ProbeConfig,
    ProbeResult,
    RetrieverConfig,
    StoreOutcome,
    UploaderConfig,
    WalrusBlobObject,
    parse_store_response,
)

__all__ = [
    # Clients
    "BlobUploader",
    "BlobRetriever",
    "StatusProbe",
    "infer_content_type",
    # Endpoints
    "EndpointRegistry",
    "TESTNET_PUBLISHERS",
    "TESTNET_AGGREGATORS",
    # Pricing
    "estimate_cost",
    "storage_cost",
    "calculate_deployment_config",
    "cost_breakdown",
    # Types - Config
    "UploaderConfig",
    "RetrieverConfig",
    "ProbeConfig",
    # Types - Store responses
    "WalrusBlobObject",
    "NewlyCreated",
    "CertificationEvent",
    "AlreadyCertified",
    "StoreOutcome",
    "parse_store_response",
    # Types - Results
    "BlobMetadata",
    "DeploymentConfig",
    "CostBreakdown",
    "FetchedBlob",
    "BlobHeadResult",
    "DeploymentRecord",
    # Types - Status
    "NetworkStatus",
    "ProbeResult",
    "STATUS_MESSAGES",
]
