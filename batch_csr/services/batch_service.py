# batch_csr/services/batch_service.py
"""
Batch Orchestrator - one key pair + one CSR per CN in a range

Flow:
1. Pre-validate everything once (range, subject, SANs, validity, key/hash).
   Any ConfigError here ends the batch with zero records and no keys generated.
2. Generate per CN, sequentially or on a bounded thread pool.
3. Fail fast: the first per-CN failure discards the whole batch.
4. Records come back in CN order whatever order the workers finished in.

Progress is pushed through a callback (completed, total) after each CN.
Cancellation is cooperative and checked before each CN is dispatched.
"""

import threading
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, List, Optional

from batch_csr.core.config import (
    CSR_BATCH_MAX_ITEMS,
    CSR_BATCH_MAX_WORKERS,
    DEFAULT_OUTPUT_NAME,
)
from batch_csr.core.enums import BatchStatus, KeyType
from batch_csr.core.exceptions import (
    BatchTooLargeError,
    ConfigError,
    CryptoError,
    CSRBatchException,
    EncodingError,
    InvalidValidityWindowError,
)
from batch_csr.core.logger import get_service_logger
from batch_csr.schemas.csr import (
    BatchResult,
    BatchSummary,
    CSRBatchRequest,
    CSRRecord,
    ErrorDetail,
)
from batch_csr.services.csr_service import build_csr, resolve_sign_hash
from batch_csr.services.key_service import KeySpec, check_key_spec, key_spec_for
from batch_csr.services.range_service import parse_cn_range
from batch_csr.services.san_service import SANSpec, parse_sans
from batch_csr.services.subject_service import render_subject

logger = get_service_logger()

ProgressCallback = Callable[[int, int], None]


class CancellationToken:
    """Cooperative cancel flag shared between the caller and a running batch."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class BatchPlan:
    """Everything validated up front; per-CN work only reads from it."""
    request: CSRBatchRequest
    cns: List[str]
    key_spec: KeySpec
    sans: Optional[SANSpec]


class _ItemFailure(Exception):
    def __init__(self, cn: str, error: Exception, completed: int):
        self.cn = cn
        self.error = error
        self.completed = completed
        super().__init__(f"{cn}: {error}")


def _error_category(error: Exception) -> str:
    if isinstance(error, ConfigError):
        return "config"
    if isinstance(error, CryptoError):
        return "crypto"
    if isinstance(error, EncodingError):
        return "encoding"
    return "internal"


def _error_detail(error: Exception, cn: str = None, completed: int = 0) -> ErrorDetail:
    if isinstance(error, CSRBatchException):
        return ErrorDetail(
            code=error.code,
            category=_error_category(error),
            message=error.message,
            field=error.field,
            cn=cn,
            completed=completed,
        )
    return ErrorDetail(
        code="INTERNAL_ERROR",
        category="internal",
        message=str(error) or type(error).__name__,
        cn=cn,
        completed=completed,
    )


def prevalidate(request: CSRBatchRequest) -> BatchPlan:
    """
    Validate the whole configuration without generating any key.

    Raises:
        ConfigError: any invalid input (range, subject, SANs, validity, key/hash)
    """
    cn_range = parse_cn_range(request.cn_range)
    if len(cn_range) > CSR_BATCH_MAX_ITEMS:
        raise BatchTooLargeError(len(cn_range), CSR_BATCH_MAX_ITEMS)
    cns = cn_range.expand()

    # Value length limits (e.g. C) depend on the CN, so every subject is checked
    for cn in cns:
        render_subject(request.subject_template, cn).to_x509_name()

    sans = parse_sans(request.sans)

    if request.not_before > request.not_after:
        raise InvalidValidityWindowError(request.not_before, request.not_after)

    key_spec = key_spec_for(request.key_type)
    check_key_spec(key_spec)
    resolve_sign_hash(request.sign_hash_alg)

    return BatchPlan(request=request, cns=cns, key_spec=key_spec, sans=sans)


def generate_record(plan: BatchPlan, cn: str) -> CSRRecord:
    """Render, generate and sign for a single CN."""
    request = plan.request
    subject = render_subject(request.subject_template, cn)
    artifacts = build_csr(
        subject=subject,
        sans=plan.sans,
        unique_id=request.unique_id,
        key_spec=plan.key_spec,
        hash_alg=request.sign_hash_alg,
    )
    return CSRRecord(
        cn=cn,
        subject=subject.text,
        sign_hash_alg=request.sign_hash_alg,
        not_before=request.not_before,
        not_after=request.not_after,
        unique_id=artifacts.unique_id,
        sans=request.sans,
        csr_pem=artifacts.csr_pem,
        key_pair_type=KeyType(request.key_type).display_name,
        private_key_pem=artifacts.key_pem,
    )


def _report_progress(progress: Optional[ProgressCallback], completed: int, total: int) -> None:
    if progress is None:
        return
    try:
        progress(completed, total)
    except Exception as e:
        # A broken listener must not abort key generation
        logger.warning(f"Progress callback failed at {completed}/{total}: {e}")


def _generate_sequential(
    plan: BatchPlan,
    progress: Optional[ProgressCallback],
    cancel_token: CancellationToken,
) -> Optional[List[CSRRecord]]:
    total = len(plan.cns)
    records = []
    for cn in plan.cns:
        if cancel_token.cancelled:
            return None
        try:
            records.append(generate_record(plan, cn))
        except Exception as e:
            raise _ItemFailure(cn, e, len(records))
        _report_progress(progress, len(records), total)
    return records


def _generate_parallel(
    plan: BatchPlan,
    progress: Optional[ProgressCallback],
    cancel_token: CancellationToken,
    max_workers: int,
) -> Optional[List[CSRRecord]]:
    total = len(plan.cns)
    results: List[Optional[CSRRecord]] = [None] * total
    in_flight = {}
    next_index = 0
    completed = 0
    cancelled = False

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="csr-batch") as executor:
        while next_index < total or in_flight:
            # Keep at most max_workers CNs in flight; check cancel before each dispatch
            while next_index < total and len(in_flight) < max_workers and not cancelled:
                if cancel_token.cancelled:
                    cancelled = True
                    break
                future = executor.submit(generate_record, plan, plan.cns[next_index])
                in_flight[future] = next_index
                next_index += 1

            if cancelled:
                wait(in_flight)
                return None

            done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
            for future in sorted(done, key=in_flight.get):
                index = in_flight.pop(future)
                error = future.exception()
                if error is not None:
                    for other in in_flight:
                        other.cancel()
                    wait(in_flight)
                    raise _ItemFailure(plan.cns[index], error, completed)
                results[index] = future.result()
                completed += 1
                _report_progress(progress, completed, total)

    return results


def run_batch(
    request: CSRBatchRequest,
    progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    max_workers: Optional[int] = None,
) -> BatchResult:
    """
    Run one batch end to end.

    Args:
        request: validated input configuration
        progress: called with (completed, total) after each finished CN
        cancel_token: checked before each CN is dispatched
        max_workers: worker pool size (default CSR_BATCH_MAX_WORKERS; 1 = sequential)

    Returns:
        BatchResult; config, crypto and encoding failures and progress
        callback errors are reported in the result, never raised
    """
    cancel_token = cancel_token or CancellationToken()
    workers = max_workers if max_workers is not None else CSR_BATCH_MAX_WORKERS

    try:
        plan = prevalidate(request)
    except ConfigError as e:
        logger.warning(f"Batch rejected before generation: {e.code} - {e.message}")
        return BatchResult(status=BatchStatus.FAILED, error=_error_detail(e))

    logger.info(
        f"Starting CSR batch: range={request.cn_range} count={len(plan.cns)} "
        f"key={plan.key_spec} hash={request.sign_hash_alg.value} workers={workers}"
    )

    try:
        if workers <= 1 or len(plan.cns) == 1:
            records = _generate_sequential(plan, progress, cancel_token)
        else:
            records = _generate_parallel(plan, progress, cancel_token, workers)
    except _ItemFailure as failure:
        logger.error(
            f"CSR batch aborted at CN={failure.cn} after {failure.completed} record(s): {failure.error}"
        )
        return BatchResult(
            status=BatchStatus.FAILED,
            error=_error_detail(failure.error, cn=failure.cn, completed=failure.completed),
        )

    if records is None:
        logger.info(f"CSR batch cancelled: range={request.cn_range}")
        return BatchResult(status=BatchStatus.CANCELLED)

    logger.info(f"CSR batch completed: {len(records)} CSR(s) for range={request.cn_range}")
    return BatchResult(status=BatchStatus.SUCCESS, records=records)


def summarize(result: BatchResult, output_identifier: Optional[str] = None) -> BatchSummary:
    """Build the completion summary shown to the user."""
    if result.status == BatchStatus.SUCCESS:
        message = f"Generated {result.total} CSR(s)"
    elif result.status == BatchStatus.CANCELLED:
        message = "Generation cancelled; no output produced"
    else:
        message = result.error.message if result.error else "Generation failed"
        if result.error and result.error.cn:
            message = f"{message} (CN={result.error.cn}, {result.error.completed} completed before abort)"

    return BatchSummary(
        success=result.success,
        status=result.status,
        message=message,
        total=result.total,
        output_identifier=output_identifier or DEFAULT_OUTPUT_NAME,
    )
