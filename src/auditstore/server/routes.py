"""
HTTP routes under ``/api/walrus``.

Handlers stay thin: they read the request, call a component and render the
result. Errors propagate to the application's AuditStoreError handler.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel, ConfigDict, Field

from auditstore.constants import (
    DEFAULT_STORAGE_EPOCHS,
    HEADER_EXPECTED_COST,
    HEADER_STORAGE_EPOCHS,
    HEADER_WALLET_ADDRESS,
    PDF_CONTENT_TYPE,
)
from auditstore.errors import LedgerError, MissingPayloadError, PayloadTooLargeError
from auditstore.server.services import Services
from auditstore.utils.logging import get_logger

_logger = get_logger(__name__)

router = APIRouter(prefix="/api/walrus", tags=["Walrus"])

# Form fields accepted in place of the deployment headers
_FORM_FALLBACKS = {
    HEADER_STORAGE_EPOCHS: "storageEpochs",
    HEADER_EXPECTED_COST: "expectedCost",
    HEADER_WALLET_ADDRESS: "walletAddress",
}


class EstimateRequest(BaseModel):
    """Body of ``POST /estimate-deployment``."""

    model_config = ConfigDict(populate_by_name=True)

    file_size_bytes: Any = Field(default=None, alias="fileSizeBytes")
    storage_epochs: Any = Field(default=DEFAULT_STORAGE_EPOCHS, alias="storageEpochs")


def get_services(request: Request) -> Services:
    return request.app.state.services


def _check_size(size: Optional[int], max_bytes: Optional[int]) -> None:
    if max_bytes is not None and size is not None and size > max_bytes:
        raise PayloadTooLargeError(size, max_bytes)


async def _read_upload(
    request: Request,
    max_bytes: Optional[int] = None,
) -> Tuple[bytes, Optional[str], Dict[str, str]]:
    """
    Return file bytes, their content type and any deployment form fields.

    With ``max_bytes`` set, an oversized file is rejected from its declared
    size before it is read into memory.
    """
    content_type = request.headers.get("content-type")
    if content_type and content_type.startswith("multipart/form-data"):
        form = await request.form()
        fields = {}
        for name in _FORM_FALLBACKS.values():
            value = form.get(name)
            if isinstance(value, str):
                fields[name] = value
        upload = form.get("file")
        if upload is None or isinstance(upload, str):
            return b"", None, fields
        _check_size(upload.size, max_bytes)
        return await upload.read(), upload.content_type, fields

    declared = request.headers.get("content-length", "")
    _check_size(int(declared) if declared.isdigit() else None, max_bytes)
    return await request.body(), content_type, {}


@router.put("/upload")
async def upload_blob(request: Request, services: Services = Depends(get_services)):
    """Best-effort upload with publisher failover."""
    data, content_type, _ = await _read_upload(request)
    if not data:
        raise MissingPayloadError()
    metadata = await services.uploader.upload(data, content_type)
    return metadata.model_dump(mode="json", by_alias=True)


@router.post("/deploy")
async def deploy_blob(request: Request, services: Services = Depends(get_services)):
    """Paid upload for a number of storage epochs."""
    data, content_type, fields = await _read_upload(
        request, services.orchestrator.max_payload_bytes
    )

    def header(name: str) -> Optional[str]:
        return request.headers.get(name) or fields.get(_FORM_FALLBACKS[name])

    record = await services.orchestrator.handle_deploy(
        data,
        storage_epochs_header=header(HEADER_STORAGE_EPOCHS),
        wallet_address_header=header(HEADER_WALLET_ADDRESS),
        expected_cost_header=header(HEADER_EXPECTED_COST),
        content_type=content_type,
    )
    return record.model_dump(mode="json", by_alias=True)


@router.head("/blob/{blob_id}")
async def head_blob(blob_id: str, services: Services = Depends(get_services)):
    head = await services.retriever.head_check(blob_id)
    if not head.exists:
        return Response(status_code=404)
    headers = {"Content-Type": head.content_type or PDF_CONTENT_TYPE}
    if head.size is not None:
        headers["Content-Length"] = str(head.size)
    return Response(status_code=200, headers=headers)


@router.get("/blob/{blob_id}")
async def get_blob(blob_id: str, services: Services = Depends(get_services)):
    """Proxy a blob from the aggregators, waiting for propagation if needed."""
    blob = await services.retriever.fetch(blob_id)
    return Response(
        content=blob.data,
        media_type=blob.content_type or PDF_CONTENT_TYPE,
        headers={
            "Content-Disposition": f'inline; filename="audit-report-{blob_id}.pdf"',
            "Cache-Control": "public, max-age=3600",
        },
    )


@router.post("/estimate-deployment")
async def estimate_deployment(
    body: EstimateRequest,
    services: Services = Depends(get_services),
):
    return await services.orchestrator.estimate(body.file_size_bytes, body.storage_epochs)


@router.get("/deployment-status/{blob_id}")
async def deployment_status(blob_id: str, services: Services = Depends(get_services)):
    """Report whether a deployed blob is readable from the aggregators yet."""
    head = await services.retriever.head_check(blob_id)
    if not head.exists:
        return {
            "status": "pending",
            "blobId": blob_id,
            "available": False,
            "message": "Blob is not yet available on Walrus aggregators; "
            "it may still be propagating.",
        }

    result: Dict[str, Any] = {
        "status": "confirmed",
        "blobId": blob_id,
        "available": True,
        "aggregator": head.aggregator,
    }
    try:
        result["currentEpoch"] = await services.ledger.get_current_epoch()
    except LedgerError as e:
        _logger.warning(
            "Current epoch unavailable for status report",
            extra={"blob_id": blob_id, "error": e.message},
        )

    record = await services.deployment_log.lookup(blob_id)
    if record is not None:
        result["expirationEpoch"] = record.expiration_epoch
    return result


@router.get("/network-status")
async def network_status(services: Services = Depends(get_services)):
    result = await services.probe.check_availability()
    body = result.model_dump(mode="json", by_alias=True)
    body["message"] = result.message
    return body


@router.get("/wallet/{address}")
async def wallet_status(address: str, services: Services = Depends(get_services)):
    check = await services.ledger.check_wallet_for_deployment(address)
    return check.model_dump(mode="json", by_alias=True)
