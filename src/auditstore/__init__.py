"""
auditstore - Walrus storage for audit reports.

Uploads audit reports to the Walrus decentralized blob network and reads
them back, tolerating individual publisher and aggregator failures.

Quick Start:
    >>> from auditstore import BlobUploader, BlobRetriever, EndpointRegistry
    >>> import asyncio
    >>>
    >>> async def main():
    ...     registry = EndpointRegistry.testnet()
    ...     meta = await BlobUploader(registry=registry).upload(b"%PDF-1.7 ...")
    ...     blob = await BlobRetriever(registry=registry).fetch(meta.blob_id)
    ...     print(blob.aggregator, blob.size)
    ...
    >>> asyncio.run(main())

Modules:
- `storage`: uploader, retriever, status probe, endpoints and pricing
- `ledger`: Sui epoch and balance queries
- `server`: FastAPI service with the deployment orchestrator
- `errors`: Exception hierarchy
- `utils`: Retry, validation and logging helpers
"""

from auditstore.version import __version__, __version_info__

# Storage
from auditstore.storage import (
    BlobMetadata,
    BlobRetriever,
    BlobUploader,
    DeploymentConfig,
    DeploymentRecord,
    EndpointRegistry,
    NetworkStatus,
    ProbeResult,
    StatusProbe,
    calculate_deployment_config,
    estimate_cost,
)

# Ledger
from auditstore.ledger import SuiClient, SuiClientConfig, WalletCheck

# Errors
from auditstore.errors import (
    AllEndpointsFailedError,
    AuditStoreError,
    BlobNotFoundError,
    DeploymentFailedError,
    MaxRetriesExceededError,
    NetworkTimeoutError,
    NetworkUnavailableError,
    UploadError,
)

__all__ = [
    "__version__",
    "__version_info__",
    # Storage
    "BlobUploader",
    "BlobRetriever",
    "StatusProbe",
    "EndpointRegistry",
    "BlobMetadata",
    "DeploymentConfig",
    "DeploymentRecord",
    "NetworkStatus",
    "ProbeResult",
    "estimate_cost",
    "calculate_deployment_config",
    # Ledger
    "SuiClient",
    "SuiClientConfig",
    "WalletCheck",
    # Errors
    "AuditStoreError",
    "UploadError",
    "AllEndpointsFailedError",
    "DeploymentFailedError",
    "MaxRetriesExceededError",
    "NetworkUnavailableError",
    "NetworkTimeoutError",
    "BlobNotFoundError",
]
