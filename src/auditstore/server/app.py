"""
FastAPI application factory.

``create_app`` wires the Walrus clients, the ledger client and the
deployment orchestrator into one application. Every collaborator can be
passed in, which is how tests substitute fakes.
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from auditstore.config import ServiceSettings, load_settings
from auditstore.errors import (
    AuditStoreError,
    BlobNotFoundError,
    DeploymentFailedError,
    DeploymentValidationError,
    InvalidBlobIdError,
    InvalidEstimateRequestError,
    LedgerError,
    UploadError,
)
from auditstore.ledger import SuiClient
from auditstore.server.deployments import DeploymentLog, InMemoryDeploymentLog
from auditstore.server.orchestrator import DeploymentOrchestrator
from auditstore.server.routes import router
from auditstore.server.services import Services
from auditstore.storage import BlobRetriever, BlobUploader, StatusProbe
from auditstore.utils.logging import get_logger
from auditstore.version import __version__

_logger = get_logger(__name__)


def http_status_for(error: AuditStoreError) -> int:
    """
    Map an error to its HTTP status.

    Bad requests are 400, a missing blob is 404, a refused deployment is
    500 and every transient network failure is 503.
    """
    if isinstance(
        error,
        (DeploymentValidationError, InvalidEstimateRequestError, InvalidBlobIdError),
    ):
        return 400
    if isinstance(error, BlobNotFoundError):
        return 404
    if isinstance(error, DeploymentFailedError):
        return 500
    if isinstance(error, (UploadError, LedgerError)):
        return 503
    return 500


async def _handle_auditstore_error(request: Request, exc: AuditStoreError) -> JSONResponse:
    status_code = http_status_for(exc)
    log = _logger.error if status_code >= 500 else _logger.warning
    log(
        "Request failed",
        extra={
            "path": request.url.path,
            "code": exc.code,
            "status": status_code,
        },
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.code, "message": exc.message},
    )


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "INVALID_REQUEST", "message": "Malformed request body"},
    )


def create_app(
    settings: Optional[ServiceSettings] = None,
    *,
    uploader: Optional[BlobUploader] = None,
    retriever: Optional[BlobRetriever] = None,
    ledger: Optional[SuiClient] = None,
    probe: Optional[StatusProbe] = None,
    deployment_log: Optional[DeploymentLog] = None,
) -> FastAPI:
    """
    Build the HTTP service.

    Args:
        settings: Service settings (read from the environment if None)
        uploader: BlobUploader override
        retriever: BlobRetriever override
        ledger: SuiClient override
        probe: StatusProbe override
        deployment_log: DeploymentLog override (a fresh in-memory log if None)

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = load_settings()
    registry = settings.registry()

    if uploader is None:
        uploader = BlobUploader(settings.uploader_config(), registry)
    if retriever is None:
        retriever = BlobRetriever(settings.retriever, registry)
    if ledger is None:
        ledger = SuiClient(settings.sui_config())
    if probe is None:
        probe = StatusProbe(settings.probe, registry)
    if deployment_log is None:
        deployment_log = InMemoryDeploymentLog()

    app = FastAPI(title="Audit Report Storage Service", version=__version__)
    app.state.services = Services(
        settings=settings,
        uploader=uploader,
        retriever=retriever,
        ledger=ledger,
        probe=probe,
        deployment_log=deployment_log,
        orchestrator=DeploymentOrchestrator(
            uploader,
            ledger,
            deployment_log,
            max_payload_bytes=settings.max_deployment_bytes,
        ),
    )

    app.add_exception_handler(AuditStoreError, _handle_auditstore_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.include_router(router)

    @app.get("/health", tags=["System"])
    def health_check():
        """A simple health check endpoint."""
        return {"status": "ok", "version": __version__}

    return app
