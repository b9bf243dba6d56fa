"""Collaborators shared by the HTTP handlers of one application."""

from __future__ import annotations

from dataclasses import dataclass

from auditstore.config import ServiceSettings
from auditstore.ledger import SuiClient
from auditstore.server.deployments import DeploymentLog
from auditstore.server.orchestrator import DeploymentOrchestrator
from auditstore.storage import BlobRetriever, BlobUploader, StatusProbe


@dataclass
class Services:
    """Stored on ``app.state.services`` by ``create_app``."""

    settings: ServiceSettings
    uploader: BlobUploader
    retriever: BlobRetriever
    ledger: SuiClient
    probe: StatusProbe
    deployment_log: DeploymentLog
    orchestrator: DeploymentOrchestrator
