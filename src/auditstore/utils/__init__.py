"""
auditstore utilities.

This module provides HTTP, retry, validation and logging helpers.
"""

from auditstore.utils.http import bounded_request
from auditstore.utils.logging import configure_logging, get_logger, set_level
from auditstore.utils.retry import RetryConfig, calculate_delay, retry_async
from auditstore.utils.validation import (
    parse_storage_epochs,
    sanitize_for_logging,
    validate_blob_id,
    validate_endpoint_url,
)

__all__ = [
    # HTTP
    "bounded_request",
    # Logging
    "get_logger",
    "configure_logging",
    "set_level",
    # Retry
    "RetryConfig",
    "calculate_delay",
    "retry_async",
    # Validation
    "validate_blob_id",
    "validate_endpoint_url",
    "parse_storage_epochs",
    "sanitize_for_logging",
]
