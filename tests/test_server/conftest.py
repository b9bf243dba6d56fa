"""
Shared fixtures for the HTTP service tests.

Collaborators are mocks with ``AsyncMock`` methods so each test controls
exactly what the uploader, retriever, ledger and probe return.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from auditstore.config import ServiceSettings
from auditstore.ledger import SuiClient
from auditstore.server import InMemoryDeploymentLog, create_app
from auditstore.storage import BlobMetadata, BlobRetriever, BlobUploader, StatusProbe

VALID_BLOB_ID = "M4hsZGQ1oCktdzegB6HnI6Mi28S2nqOPHxK-W7_4BUk"
VALID_OBJECT_ID = "0x" + "c" * 64
VALID_WALLET = "0x" + "a" * 64
CURRENT_EPOCH = 100

PDF_BYTES = b"%PDF-1.7\n" + b"0" * 2048


def deployment_metadata(epochs: int = 10, size: int = len(PDF_BYTES)) -> BlobMetadata:
    return BlobMetadata(
        blob_id=VALID_BLOB_ID,
        size=size,
        content_type="application/pdf",
        deployment_cost=Decimal("0.101"),
        storage_epochs=epochs,
        transaction_hash=VALID_OBJECT_ID,
    )


@pytest.fixture
def uploader() -> MagicMock:
    mock = MagicMock(spec=BlobUploader)
    mock.upload = AsyncMock()
    mock.upload_with_deployment = AsyncMock(
        side_effect=lambda payload, epochs, wallet, content_type=None: deployment_metadata(
            epochs, len(payload)
        )
    )
    return mock


@pytest.fixture
def retriever() -> MagicMock:
    mock = MagicMock(spec=BlobRetriever)
    mock.fetch = AsyncMock()
    mock.head_check = AsyncMock()
    return mock


@pytest.fixture
def ledger() -> MagicMock:
    mock = MagicMock(spec=SuiClient)
    mock.get_current_epoch = AsyncMock(return_value=CURRENT_EPOCH)
    mock.check_wallet_for_deployment = AsyncMock()
    return mock


@pytest.fixture
def probe() -> MagicMock:
    mock = MagicMock(spec=StatusProbe)
    mock.check_availability = AsyncMock()
    return mock


@pytest.fixture
def deployment_log() -> InMemoryDeploymentLog:
    return InMemoryDeploymentLog()


@pytest.fixture
def client(uploader, retriever, ledger, probe, deployment_log) -> TestClient:
    app = create_app(
        ServiceSettings(),
        uploader=uploader,
        retriever=retriever,
        ledger=ledger,
        probe=probe,
        deployment_log=deployment_log,
    )
    return TestClient(app)
