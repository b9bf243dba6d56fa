"""
Exception hierarchy for auditstore.

    AuditStoreError
    ├── StorageError
    │   ├── InvalidBlobIdError
    │   ├── UnexpectedResponseError
    │   ├── PublisherBusyError
    │   ├── UploadError
    │   │   ├── AllEndpointsFailedError
    │   │   ├── DeploymentFailedError
    │   │   ├── MaxRetriesExceededError
    │   │   ├── NetworkUnavailableError
    │   │   └── NetworkTimeoutError
    │   └── RetrievalError
    │       └── BlobNotFoundError
    ├── DeploymentValidationError
    │   ├── MissingPayloadError
    │   ├── MissingWalletError
    │   └── PayloadTooLargeError
    ├── InvalidEstimateRequestError
    └── LedgerError
"""

from auditstore.errors.base import AuditStoreError
from auditstore.errors.deployment import (
    DeploymentValidationError,
    DeploymentValidationKind,
    InvalidEstimateRequestError,
    MissingPayloadError,
    MissingWalletError,
    PayloadTooLargeError,
)
from auditstore.errors.ledger import LedgerError
from auditstore.errors.storage import (
    AllEndpointsFailedError,
    BlobNotFoundError,
    DeploymentFailedError,
    InvalidBlobIdError,
    MaxRetriesExceededError,
    NetworkTimeoutError,
    NetworkUnavailableError,
    PublisherBusyError,
    RetrievalError,
    RetrievalErrorKind,
    StorageError,
    UnexpectedResponseError,
    UploadError,
    UploadErrorKind,
)

__all__ = [
    "AuditStoreError",
    # Storage
    "StorageError",
    "InvalidBlobIdError",
    "UnexpectedResponseError",
    "PublisherBusyError",
    "UploadError",
    "UploadErrorKind",
    "AllEndpointsFailedError",
    "DeploymentFailedError",
    "MaxRetriesExceededError",
    "NetworkUnavailableError",
    "NetworkTimeoutError",
    "RetrievalError",
    "RetrievalErrorKind",
    "BlobNotFoundError",
    # Deployment validation
    "DeploymentValidationError",
    "DeploymentValidationKind",
    "MissingPayloadError",
    "MissingWalletError",
    "PayloadTooLargeError",
    "InvalidEstimateRequestError",
    # Ledger
    "LedgerError",
]
