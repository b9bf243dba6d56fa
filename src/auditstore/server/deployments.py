"""Bookkeeping for completed deployment uploads."""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol

from auditstore.storage.types import DeploymentRecord


class DeploymentLog(Protocol):
    """Where completed deployments are recorded."""

    async def record(self, record: DeploymentRecord) -> None:
        ...

    async def lookup(self, blob_id: str) -> Optional[DeploymentRecord]:
        ...


class InMemoryDeploymentLog:
    """Process-local DeploymentLog. One instance per application."""

    def __init__(self) -> None:
        self._records: Dict[str, DeploymentRecord] = {}

    async def record(self, record: DeploymentRecord) -> None:
        self._records[record.blob_id] = record

    async def lookup(self, blob_id: str) -> Optional[DeploymentRecord]:
        return self._records.get(blob_id)

    async def all(self) -> List[DeploymentRecord]:
        return list(self._records.values())

    def __len__(self) -> int:
        return len(self._records)
