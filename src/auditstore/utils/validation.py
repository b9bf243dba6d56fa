"""
Validation utilities for auditstore.

Provides input validation functions for:
- Walrus blob identifiers
- Endpoint URLs
- Storage epoch headers
- Log-safe rendering of untrusted strings
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlparse

from auditstore.constants import (
    BLOB_ID_PATTERN,
    DEFAULT_STORAGE_EPOCHS,
    MAX_STORAGE_EPOCHS,
    MIN_STORAGE_EPOCHS,
)
from auditstore.errors import InvalidBlobIdError

_BLOB_ID_RE = re.compile(BLOB_ID_PATTERN)
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")


def validate_blob_id(blob_id: str) -> str:
    """
    Validate Walrus blob identifier syntax.

    Blob ids are interpolated into aggregator URLs, so anything outside
    the base64url alphabet (slashes, dots, query characters) is rejected.

    Args:
        blob_id: Blob id to validate

    Returns:
        The blob id, stripped of surrounding whitespace

    Raises:
        InvalidBlobIdError: If the id is empty or malformed
    """
    if not isinstance(blob_id, str) or not blob_id.strip():
        raise InvalidBlobIdError(str(blob_id or ""), reason="blob id is required")

    blob_id = blob_id.strip()
    if not _BLOB_ID_RE.match(blob_id):
        raise InvalidBlobIdError(
            sanitize_for_logging(blob_id),
            reason="must be base64url characters or a 0x-prefixed id",
        )
    return blob_id


def validate_endpoint_url(url: str, field_name: str = "endpoint") -> str:
    """
    Validate an endpoint base URL.

    Args:
        url: URL to validate
        field_name: Field name for error messages

    Returns:
        URL without trailing slash

    Raises:
        ValueError: If the URL is malformed or not http(s)
    """
    if not url or not isinstance(url, str):
        raise ValueError(f"{field_name} is required")

    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https"):
        raise ValueError(f"Invalid {field_name}: scheme must be http or https ({url})")
    if not parsed.hostname:
        raise ValueError(f"Invalid {field_name}: missing hostname ({url})")

    return url.strip().rstrip("/")


def parse_storage_epochs(
    raw: Optional[object],
    default: int = DEFAULT_STORAGE_EPOCHS,
) -> int:
    """
    Parse a caller-supplied epoch count.

    Absent, non-integer or out-of-range values fall back to ``default``.

    Args:
        raw: Header or form value
        default: Value used when ``raw`` is unusable

    Returns:
        Epoch count within [MIN_STORAGE_EPOCHS, MAX_STORAGE_EPOCHS]
    """
    if raw is None:
        return default
    try:
        epochs = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    if epochs < MIN_STORAGE_EPOCHS or epochs > MAX_STORAGE_EPOCHS:
        return default
    return epochs


def sanitize_for_logging(value: str, max_length: int = 200) -> str:
    """
    Make an untrusted string safe to put in a log line.

    Args:
        value: Raw string
        max_length: Truncation length

    Returns:
        String without control characters, truncated with an ellipsis
    """
    cleaned = _CONTROL_CHARS_RE.sub("", str(value))
    if len(cleaned) > max_length:
        return cleaned[:max_length] + "..."
    return cleaned
