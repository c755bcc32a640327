import pytest
from fastapi.testclient import TestClient

from batch_csr.main import app
from batch_csr.services.record_service import ROW_COLUMNS, parse_records_csv

from tests.conftest import SUBJECT_TEMPLATE


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def payload():
    return {
        "cn_range": "YDL0001-YDL0002",
        "subject_template": SUBJECT_TEMPLATE,
        "key_type": "EC_P256",
        "sign_hash_alg": "SHA256",
        "not_before": "2026-01-01T00:00:00+08:00",
        "not_after": "2027-01-01T00:00:00+08:00",
        "output_identifier": "ydl.csv",
    }


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_batch_json(client, payload):
    response = client.post("/api/v1/csr/batch", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["summary"]["success"] is True
    assert body["summary"]["total"] == 2
    assert body["summary"]["output_identifier"] == "ydl.csv"
    assert [r["cn"] for r in body["records"]] == ["YDL0001", "YDL0002"]
    assert body["records"][0]["key_pair_type"] == "EC_P-256"


def test_batch_config_error(client, payload):
    payload["cn_range"] = "YDL0002-YDL0001"

    response = client.post("/api/v1/csr/batch", json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "REVERSED_RANGE"
    assert body["field"] == "cn_range"
    assert body["summary"]["total"] == 0
    assert body["summary"]["success"] is False


def test_batch_csv(client, payload):
    response = client.post("/api/v1/csr/batch/csv", json=payload)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="ydl.csv"' in response.headers["content-disposition"]
    rows = parse_records_csv(response.text)
    assert len(rows) == 2
    assert tuple(rows[0]) == ROW_COLUMNS
    assert rows[1]["subject"].startswith("CN=[YDL0002]")


def test_batch_csv_not_produced_on_error(client, payload):
    payload["sans"] = "bogus=[x]"

    response = client.post("/api/v1/csr/batch/csv", json=payload)

    assert response.status_code == 400
    assert response.json()["error"] == "UNKNOWN_SAN_TYPE"


def test_invalid_enum_rejected_by_schema(client, payload):
    payload["key_type"] = "DSA_1024"

    assert client.post("/api/v1/csr/batch", json=payload).status_code == 422


def test_validate_endpoint(client, payload):
    csr_pem = client.post("/api/v1/csr/batch", json=payload).json()["records"][0]["csr_pem"]

    response = client.post("/api/v1/csr/validate", json={"csr_pem": csr_pem})

    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is True
    assert body["signature_valid"] is True
    assert body["subject_dn"].startswith("OU=Dept 1")
