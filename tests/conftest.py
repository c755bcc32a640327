# tests/conftest.py
import os
import tempfile

# Must be set before batch_csr is imported
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "batch-csr-test-logs"))
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest

from batch_csr.schemas.csr import CSRBatchRequest

SUBJECT_TEMPLATE = r"CN=[{CN}]; O=[TrustAsia Technologies\, Inc.]; OU=[Dept 1]"


@pytest.fixture
def make_request():
    def _make(**overrides):
        data = {
            "cn_range": "YDL0001-YDL0003",
            "subject_template": SUBJECT_TEMPLATE,
            "key_type": "EC_P256",
            "sign_hash_alg": "SHA256",
            "not_before": "2026-01-01T00:00:00+08:00",
            "not_after": "2027-01-01T00:00:00+08:00",
        }
        data.update(overrides)
        return CSRBatchRequest(**data)
    return _make
