import uuid
from datetime import date, timedelta

from .conftest import client, ensure_auth_headers, create_scientist


def _module(client, headers, **overrides):
    payload = {"name": f"Module {uuid.uuid4().hex[:6]}", "expiration_months": 36, "is_core": True}
    payload.update(overrides)
    resp = client.post("/api/certification-modules", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def _cell(matrix, scientist_id, module_id):
    return next(c for c in matrix if c["scientist_id"] == scientist_id and c["module_id"] == module_id)


def test_module_names_unique(client):
    headers, _ = ensure_auth_headers(client)
    module = _module(client, headers)
    dup = client.post("/api/certification-modules", json={"name": module["name"].upper()}, headers=headers)
    assert dup.status_code == 409


def test_end_date_defaults_from_module(client):
    headers, _ = ensure_auth_headers(client)
    scientist = create_scientist(client, headers)
    module = _module(client, headers, expiration_months=12)
    resp = client.post(
        "/api/certifications",
        json={"scientist_id": scientist["id"], "module_id": module["id"], "start_date": "2024-01-31"},
        headers=headers,
    )
    assert resp.status_code == 201
    assert resp.json()["end_date"] == "2025-01-31"
    assert resp.json()["status"] == "expired"


def test_unknown_module_rejected(client):
    headers, _ = ensure_auth_headers(client)
    scientist = create_scientist(client, headers)
    resp = client.post(
        "/api/certifications",
        json={"scientist_id": scientist["id"], "module_id": str(uuid.uuid4()), "start_date": "2024-01-01"},
        headers=headers,
    )
    assert resp.status_code == 400


def test_matrix_statuses(client):
    headers, _ = ensure_auth_headers(client)
    scientist = create_scientist(client, headers)
    never = _module(client, headers)
    expiring = _module(client, headers)
    valid = _module(client, headers)
    inactive = _module(client, headers, is_active=False)
    today = date.today()
    for module, end in ((expiring, today + timedelta(days=15)), (valid, today + timedelta(days=45))):
        client.post(
            "/api/certifications",
            json={
                "scientist_id": scientist["id"],
                "module_id": module["id"],
                "start_date": (today - timedelta(days=400)).isoformat(),
                "end_date": end.isoformat(),
            },
            headers=headers,
        )
    # an older, expired record must not hide the renewal
    client.post(
        "/api/certifications",
        json={
            "scientist_id": scientist["id"],
            "module_id": valid["id"],
            "start_date": (today - timedelta(days=1200)).isoformat(),
            "end_date": (today - timedelta(days=1)).isoformat(),
        },
        headers=headers,
    )

    matrix = client.get("/api/certifications/matrix", headers=headers).json()
    assert _cell(matrix, scientist["id"], never["id"])["status"] == "never"
    expiring_cell = _cell(matrix, scientist["id"], expiring["id"])
    assert expiring_cell["status"] == "expiring"
    assert expiring_cell["days_until_expiry"] == 15
    assert _cell(matrix, scientist["id"], valid["id"])["status"] == "valid"
    assert not any(c["module_id"] == inactive["id"] for c in matrix)
