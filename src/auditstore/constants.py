"""Constants for auditstore.

This module defines the constant values used across the service,
including Walrus pricing parameters, request timeouts, retry budgets,
size limits and HTTP header names.
"""

from decimal import Decimal

# Pricing (SUI)
STORAGE_RATE_PER_MB_PER_EPOCH = Decimal("0.01")
GAS_COST_SUI = Decimal("0.001")
COST_PRECISION = Decimal("0.001")
BYTES_PER_MB = 1024 * 1024
MIST_PER_SUI = 1_000_000_000
MIN_WALLET_BALANCE_SUI = Decimal("0.02")

# Storage duration bounds
DEFAULT_STORAGE_EPOCHS = 10
MIN_STORAGE_EPOCHS = 1
MAX_STORAGE_EPOCHS = 100

# Size limits
MAX_DEPLOYMENT_SIZE_BYTES = 50 * BYTES_PER_MB

# Timeouts (milliseconds)
PUBLISHER_TIMEOUT_MS = 30_000
AGGREGATOR_TIMEOUT_MS = 10_000
HEAD_CHECK_TIMEOUT_MS = 5_000
PROBE_TIMEOUT_MS = 5_000
DEPLOYMENT_DEADLINE_MS = 60_000
LEDGER_TIMEOUT_MS = 15_000

# Deployment retry policy
DEPLOYMENT_MAX_ATTEMPTS = 4  # 1 initial attempt + 3 retries
DEPLOYMENT_BASE_DELAY_MS = 2_000

# Propagation-aware reads
PROPAGATION_PASSES = 3
PROPAGATION_DELAY_MS = 5_000

# Status polling
PROBE_INTERVAL_SECONDS = 5 * 60

# Walrus HTTP API paths
BLOBS_PATH = "/v1/blobs"

# Content types
OCTET_STREAM = "application/octet-stream"
PDF_CONTENT_TYPE = "application/pdf"
JSON_CONTENT_TYPE = "application/json"

# Deployment request headers
HEADER_STORAGE_EPOCHS = "X-Storage-Epochs"
HEADER_EXPECTED_COST = "X-Expected-Cost"
HEADER_WALLET_ADDRESS = "X-Wallet-Address"

# Blob id syntax: base64url (Walrus) or 0x-prefixed hex object ids
BLOB_ID_PATTERN = r"^(0x)?[A-Za-z0-9_-]{1,128}$"

__all__ = [
    "STORAGE_RATE_PER_MB_PER_EPOCH",
    "GAS_COST_SUI",
    "COST_PRECISION",
    "BYTES_PER_MB",
    "MIST_PER_SUI",
    "MIN_WALLET_BALANCE_SUI",
    "DEFAULT_STORAGE_EPOCHS",
    "MIN_STORAGE_EPOCHS",
    "MAX_STORAGE_EPOCHS",
    "MAX_DEPLOYMENT_SIZE_BYTES",
    "PUBLISHER_TIMEOUT_MS",
    "AGGREGATOR_TIMEOUT_MS",
    "HEAD_CHECK_TIMEOUT_MS",
    "PROBE_TIMEOUT_MS",
    "DEPLOYMENT_DEADLINE_MS",
    "LEDGER_TIMEOUT_MS",
    "DEPLOYMENT_MAX_ATTEMPTS",
    "DEPLOYMENT_BASE_DELAY_MS",
    "PROPAGATION_PASSES",
    "PROPAGATION_DELAY_MS",
    "PROBE_INTERVAL_SECONDS",
    "BLOBS_PATH",
    "OCTET_STREAM",
    "PDF_CONTENT_TYPE",
    "JSON_CONTENT_TYPE",
    "HEADER_STORAGE_EPOCHS",
    "HEADER_EXPECTED_COST",
    "HEADER_WALLET_ADDRESS",
    "BLOB_ID_PATTERN",
]
