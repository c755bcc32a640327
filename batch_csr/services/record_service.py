# batch_csr/services/record_service.py
"""
Record -> row mapping for the CSV consumed by the CSR upload platform.

Only produces text; writing it anywhere is up to the caller.
"""
import csv
import io
from typing import Iterable, List

from batch_csr.schemas.csr import CSRRecord

ROW_COLUMNS = (
    "subject",
    "signHashAlg",
    "notBefore",
    "notAfter",
    "uniqueId",
    "sans",
    "csr",
    "keyPairType",
    "privateKey",
)


def record_to_row(record: CSRRecord) -> dict:
    return {
        "subject": record.subject,
        "signHashAlg": record.sign_hash_alg.value,
        "notBefore": record.not_before.isoformat(),
        "notAfter": record.not_after.isoformat(),
        "uniqueId": record.unique_id or "",
        "sans": record.sans or "",
        "csr": record.csr_pem,
        "keyPairType": record.key_pair_type,
        "privateKey": record.private_key_pem,
    }


def serialize_records_csv(records: Iterable[CSRRecord]) -> str:
    """
    Render records as CSV text with a header row.

    Fields holding commas, quotes or the newlines of PEM blocks are quoted,
    so parse_records_csv() gives back exactly what went in.
    """
    buffer = io.StringIO(newline="")
    writer = csv.DictWriter(buffer, fieldnames=ROW_COLUMNS, quoting=csv.QUOTE_MINIMAL)
    writer.writeheader()
    for record in records:
        writer.writerow(record_to_row(record))
    return buffer.getvalue()


def parse_records_csv(text: str) -> List[dict]:
    reader = csv.DictReader(io.StringIO(text, newline=""))
    if tuple(reader.fieldnames or ()) != ROW_COLUMNS:
        raise ValueError(f"Unexpected CSV header: {reader.fieldnames}")
    return list(reader)
