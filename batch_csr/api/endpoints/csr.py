# batch_csr/api/endpoints/csr.py
"""
Batch CSR API Endpoints

Provides endpoints for:
- Generating a batch of CSRs + private keys (JSON)
- Generating the same batch as the upload CSV
- Validating a single CSR

Private keys are returned once and never stored.
"""

from fastapi import APIRouter, Request, status
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool
import io

from batch_csr.core.exceptions import BatchFailedError
from batch_csr.core.logger import get_api_logger
from batch_csr.core.enums import BatchStatus
from batch_csr.core.rate_limiter import SENSITIVE_RATE_LIMIT, limiter
from batch_csr.schemas.csr import (
    BatchResult,
    CSRBatchRequest,
    CSRBatchResponse,
    CSRValidateRequest,
    CSRValidateResponse,
)
from batch_csr.services.batch_service import run_batch, summarize
from batch_csr.services.csr_service import validate_csr
from batch_csr.services.record_service import serialize_records_csv

logger = get_api_logger()

router = APIRouter(prefix="/csr", tags=["CSR Generator"])


def _failure_status(result: BatchResult) -> int:
    if result.error and result.error.category == "config":
        return status.HTTP_400_BAD_REQUEST
    if result.status == BatchStatus.CANCELLED:
        return status.HTTP_409_CONFLICT
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def _run(payload: CSRBatchRequest) -> CSRBatchResponse:
    result = await run_in_threadpool(run_batch, payload)
    summary = summarize(result, payload.output_identifier)

    if not result.success:
        logger.warning(f"Batch generation failed for range={payload.cn_range}: {summary.message}")
        raise BatchFailedError(
            summary=summary.model_dump(mode="json"),
            error=result.error.model_dump(mode="json") if result.error else None,
            status_code=_failure_status(result),
        )

    logger.info(f"Batch generated for range={payload.cn_range}: {summary.total} CSR(s)")
    return CSRBatchResponse(summary=summary, records=result.records)


@router.post("/batch", response_model=CSRBatchResponse)
@limiter.limit(SENSITIVE_RATE_LIMIT)
async def generate_batch_endpoint(request: Request, payload: CSRBatchRequest):
    """
    Generate one key pair and one CSR per CN in the range.

    The batch is all-or-nothing: any failure returns an error and no records.
    """
    return await _run(payload)


@router.post("/batch/csv", summary="Generate a batch as the upload CSV")
@limiter.limit(SENSITIVE_RATE_LIMIT)
async def generate_batch_csv_endpoint(request: Request, payload: CSRBatchRequest):
    """
    Same as /batch, but returns the 9-column CSV as a download.
    """
    response = await _run(payload)
    csv_text = serialize_records_csv(response.records)

    headers = {
        'Content-Disposition': f'attachment; filename="{response.summary.output_identifier}"'
    }
    return StreamingResponse(
        io.BytesIO(csv_text.encode("utf-8")),
        media_type="text/csv",
        headers=headers
    )


@router.post("/validate", response_model=CSRValidateResponse)
async def validate_csr_endpoint(payload: CSRValidateRequest):
    """
    Validate a CSR and extract its details.

    Useful for checking a generated CSR before uploading it.
    """
    result = validate_csr(payload.csr_pem)
    return CSRValidateResponse(**result)
