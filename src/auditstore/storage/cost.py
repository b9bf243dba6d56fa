"""
Walrus storage cost estimation.

Pricing is roughly 0.01 SUI per MB per epoch plus a fixed 0.001 SUI gas
component. Estimates are rounded up to the nearest thousandth so a quote
never under-states the actual network charge. All arithmetic is done in
``Decimal``.
"""

from __future__ import annotations

from decimal import ROUND_CEILING, Decimal

from auditstore.constants import (
    BYTES_PER_MB,
    COST_PRECISION,
    DEFAULT_STORAGE_EPOCHS,
    GAS_COST_SUI,
    MIN_STORAGE_EPOCHS,
    STORAGE_RATE_PER_MB_PER_EPOCH,
)
from auditstore.storage.types import CostBreakdown, DeploymentConfig


def _check_inputs(file_size_bytes: int, storage_epochs: int) -> None:
    if file_size_bytes < 0:
        raise ValueError(f"file_size_bytes must be non-negative, got {file_size_bytes}")
    if storage_epochs < MIN_STORAGE_EPOCHS:
        raise ValueError(
            f"storage_epochs must be at least {MIN_STORAGE_EPOCHS}, got {storage_epochs}"
        )


def _round_up(value: Decimal) -> Decimal:
    return value.quantize(COST_PRECISION, rounding=ROUND_CEILING)


def storage_cost(file_size_bytes: int, storage_epochs: int) -> Decimal:
    """Unrounded storage component: size in MB * rate * epochs."""
    _check_inputs(file_size_bytes, storage_epochs)
    size_mb = Decimal(file_size_bytes) / Decimal(BYTES_PER_MB)
    return size_mb * STORAGE_RATE_PER_MB_PER_EPOCH * Decimal(storage_epochs)


def estimate_cost(file_size_bytes: int, storage_epochs: int) -> Decimal:
    """
    Estimate the SUI cost of storing a payload.

    Args:
        file_size_bytes: Payload size in bytes (>= 0)
        storage_epochs: Number of epochs to purchase (>= 1)

    Returns:
        Cost in SUI, rounded up to 3 decimal places

    Raises:
        ValueError: If inputs are out of range

    Example:
        >>> estimate_cost(1024 * 1024, 10)
        Decimal('0.101')
    """
    return _round_up(storage_cost(file_size_bytes, storage_epochs) + GAS_COST_SUI)


def calculate_deployment_config(
    file_size_bytes: int,
    storage_epochs: int = DEFAULT_STORAGE_EPOCHS,
) -> DeploymentConfig:
    """
    Build the deployment quote for a payload.

    Args:
        file_size_bytes: Payload size in bytes
        storage_epochs: Number of epochs to purchase

    Returns:
        DeploymentConfig with gas price, epochs and estimated cost
    """
    return DeploymentConfig(
        gas_price=GAS_COST_SUI,
        storage_epochs=storage_epochs,
        estimated_cost=estimate_cost(file_size_bytes, storage_epochs),
    )


def cost_breakdown(file_size_bytes: int, storage_epochs: int) -> CostBreakdown:
    """
    Itemize an estimate into storage, gas and total.

    Args:
        file_size_bytes: Payload size in bytes
        storage_epochs: Number of epochs to purchase

    Returns:
        CostBreakdown; total equals ``estimate_cost`` for the same inputs
    """
    storage = storage_cost(file_size_bytes, storage_epochs)
    return CostBreakdown(
        storage_cost=_round_up(storage),
        gas_cost=GAS_COST_SUI,
        total_cost=_round_up(storage + GAS_COST_SUI),
    )
