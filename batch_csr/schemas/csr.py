# batch_csr/schemas/csr.py
"""
Pydantic schemas for batch CSR generation.
"""

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from typing import List, Optional
from datetime import datetime, timezone

from batch_csr.core.enums import BatchStatus, KeyType, SignHashAlg


class CSRBatchRequest(BaseModel):
    """Input configuration for one batch run."""

    cn_range: str = Field(
        ...,
        description="Common Name range, PREFIX0001-PREFIX0010 or a single PREFIX0001",
        examples=["YDL0001-YDL0010"]
    )
    subject_template: str = Field(
        ...,
        description="Subject clauses Key=[v1,v2];... with {CN} placeholders; escape commas in values as \\,",
        examples=["CN=[{CN}]; O=[TrustAsia Technologies\\, Inc.]; OU=[Dept 1]"]
    )
    key_type: KeyType = Field(KeyType.RSA_2048, description="Key algorithm and size")
    sign_hash_alg: SignHashAlg = Field(SignHashAlg.SHA256, description="Signature hash")
    not_before: datetime = Field(..., description="Validity start (ISO-8601, naive means UTC)")
    not_after: datetime = Field(..., description="Validity end (ISO-8601, naive means UTC)")
    unique_id: Optional[str] = Field(
        None,
        description="Out-of-band correlation value copied to every record"
    )
    sans: Optional[str] = Field(
        None,
        description="Subject alternative names",
        examples=["dNSName=[a.example.com,b.example.com];iPAddress=[127.0.0.1]"]
    )
    output_identifier: Optional[str] = Field(
        None,
        description="Name reported back in the completion summary (e.g. the CSV file name)"
    )

    @field_validator("not_before", "not_after")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("unique_id", "sans", "output_identifier")
    @classmethod
    def _blank_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None


class CSRRecord(BaseModel):
    """One generated CSR with its private key. Never mutated once built."""

    model_config = ConfigDict(frozen=True)

    cn: str
    subject: str
    sign_hash_alg: SignHashAlg
    not_before: datetime
    not_after: datetime
    unique_id: Optional[str] = None
    sans: Optional[str] = None
    csr_pem: str
    key_pair_type: str
    private_key_pem: str


class ErrorDetail(BaseModel):
    """Why a batch did not complete."""

    code: str
    category: str = Field(..., description="config, crypto, encoding or internal")
    message: str
    field: Optional[str] = None
    cn: Optional[str] = Field(None, description="CN being generated when the batch aborted")
    completed: int = Field(0, description="Records produced before the abort (all discarded)")


class BatchResult(BaseModel):
    status: BatchStatus
    records: List[CSRRecord] = Field(default_factory=list)
    error: Optional[ErrorDetail] = None

    @computed_field
    @property
    def success(self) -> bool:
        return self.status == BatchStatus.SUCCESS

    @computed_field
    @property
    def total(self) -> int:
        return len(self.records)


class BatchSummary(BaseModel):
    """Completion summary handed to the UI / writer."""

    success: bool
    status: BatchStatus
    message: str
    total: int
    output_identifier: str


class CSRBatchResponse(BaseModel):
    summary: BatchSummary
    records: List[CSRRecord]
    error: Optional[ErrorDetail] = None


class CSRValidateRequest(BaseModel):
    """Request to validate a CSR."""
    csr_pem: str = Field(..., description="PEM-encoded CSR to validate")


class CSRValidateResponse(BaseModel):
    """Response from CSR validation."""
    valid: bool
    subject: Optional[List[dict]] = None
    subject_dn: Optional[str] = None
    san_names: Optional[List[str]] = None
    signature_valid: Optional[bool] = None
    signature_hash: Optional[str] = None
    public_key_type: Optional[str] = None
    key_size: Optional[int] = None
    error: Optional[str] = None
