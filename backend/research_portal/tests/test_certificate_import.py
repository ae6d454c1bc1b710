import uuid

import pytest
import requests

from .conftest import client, ensure_auth_headers, create_scientist
from research_portal.services import certificate_import

REPORT_TEMPLATE = """COLLABORATIVE INSTITUTIONAL TRAINING INITIATIVE (CITI PROGRAM)
• Name: {name} (ID: 42)
• Institution Affiliation: Example Institute (ID: 7)
• Course Learner Group: {course}
• Record ID: {record}
• Completion Date: 02-Feb-2024
• Expiration Date: 01-Feb-2027
"""


def _fake_ocr(texts):
    def fake_extract(file_url):
        text = texts[file_url]
        if text is None:
            raise certificate_import.OcrServiceError("OCR request failed: timeout")
        return text

    return fake_extract


def test_process_and_confirm_batch(client, monkeypatch):
    headers, _ = ensure_auth_headers(client)
    scientist = create_scientist(client, headers, name=f"Jane {uuid.uuid4().hex[:6]}")
    course = f"Biosafety {uuid.uuid4().hex[:6]}"
    module = client.post("/api/certification-modules", json={"name": course}, headers=headers).json()
    urls = [
        "https://files.example.com/a/report-1.pdf",
        "https://files.example.com/a/invoice.pdf",
        "https://files.example.com/a/broken.pdf",
    ]
    monkeypatch.setattr(
        certificate_import,
        "extract_text",
        _fake_ocr(
            {
                urls[0]: REPORT_TEMPLATE.format(name=scientist["name"], course=course, record="777"),
                urls[1]: "Invoice 2024\nTotal due: 10.00",
                urls[2]: None,
            }
        ),
    )

    resp = client.post("/api/certificates/process-batch", json={"file_urls": urls}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Processed 3 files, detected 1 certificates"
    detected, unrecognized, failed = body["results"]
    assert detected["status"] == "detected"
    assert detected["file_name"] == "report-1.pdf"
    assert detected["module"]["id"] == module["id"]
    assert detected["scientist_id"] == scientist["id"]
    assert detected["completion_date"] == "2024-02-02"
    assert detected["record_id"] == "777"
    assert unrecognized["status"] == "unrecognized"
    assert failed["status"] == "ocr_failed"

    confirm = client.post(
        "/api/certificates/confirm-batch",
        json={
            "certifications": [
                {
                    "file_name": detected["file_name"],
                    "file_url": detected["file_url"],
                    "import_id": detected["import_id"],
                    "scientist_id": scientist["id"],
                    "module_id": module["id"],
                    "start_date": detected["completion_date"],
                    "end_date": detected["expiration_date"],
                },
                {"file_name": "invoice.pdf", "scientist_id": scientist["id"]},
            ]
        },
        headers=headers,
    )
    assert confirm.status_code == 200
    data = confirm.json()
    assert data["summary"] == {"successful": 1, "failed": 1}
    assert data["results"][1]["error"] == "Missing module, start date"

    certs = client.get("/api/certifications", params={"scientist_id": scientist["id"]}, headers=headers).json()
    assert [c["end_date"] for c in certs] == ["2027-02-01"]
    assert certs[0]["certificate_file_path"] == urls[0]

    history = client.get(
        "/api/pdf-import-history", params={"scientist_name": scientist["name"]}, headers=headers
    ).json()
    assert [h["id"] for h in history] == [detected["import_id"]]
    assert history[0]["processing_status"] == "completed"
    assert history[0]["extracted_data"]["record_id"] == "777"


def test_history_filters_by_status(client, monkeypatch):
    headers, _ = ensure_auth_headers(client)
    url = f"https://files.example.com/{uuid.uuid4().hex}.pdf"
    monkeypatch.setattr(certificate_import, "extract_text", _fake_ocr({url: None}))
    client.post("/api/certificates/process-batch", json={"file_urls": [url]}, headers=headers)
    failed = client.get("/api/pdf-import-history", params={"status": "failed"}, headers=headers).json()
    row = next(h for h in failed if h["file_url"] == url)
    assert row["error_message"]
    assert all(h["processing_status"] == "failed" for h in failed)
    completed = client.get("/api/pdf-import-history", params={"status": "completed"}, headers=headers).json()
    assert url not in [h["file_url"] for h in completed]
    future = client.get("/api/pdf-import-history", params={"date_from": "2999-01-01"}, headers=headers).json()
    assert future == []


def test_empty_batch_rejected(client):
    headers, _ = ensure_auth_headers(client)
    resp = client.post("/api/certificates/process-batch", json={"file_urls": []}, headers=headers)
    assert resp.status_code == 422


def test_extract_text_wraps_request_errors(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(certificate_import.requests, "post", boom)
    with pytest.raises(certificate_import.OcrServiceError, match="refused"):
        certificate_import.extract_text("https://files.example.com/x.pdf")
