from datetime import date, timedelta

from .conftest import client, ensure_auth_headers, create_scientist


def _payload(scientist, days=365, **extra):
    return {
        "scientist_id": scientist["id"],
        "role": "chair",
        "term_end_date": (date.today() + timedelta(days=days)).isoformat(),
        **extra,
    }


def test_regular_user_cannot_manage_board(client):
    headers, _ = ensure_auth_headers(client)
    scientist = create_scientist(client, headers)
    resp = client.post("/api/ibc-board-members/", json=_payload(scientist), headers=headers)
    assert resp.status_code == 403


def test_office_creates_and_updates_member(client):
    headers, _ = ensure_auth_headers(client, role="ibc_office")
    scientist = create_scientist(client, headers)
    resp = client.post("/api/ibc-board-members/", json=_payload(scientist), headers=headers)
    assert resp.status_code == 201
    member = resp.json()
    assert member["scientist"]["id"] == scientist["id"]
    updated = client.put(
        f"/api/ibc-board-members/{member['id']}",
        json={"is_active": False},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["is_active"] is False


def test_active_filter_excludes_ended_terms(client):
    headers, _ = ensure_auth_headers(client, role="admin")
    current = client.post(
        "/api/ibc-board-members/", json=_payload(create_scientist(client, headers)), headers=headers
    ).json()
    ended = client.post(
        "/api/ibc-board-members/", json=_payload(create_scientist(client, headers), days=-3), headers=headers
    ).json()
    active_ids = {m["id"] for m in client.get("/api/ibc-board-members/?active=true", headers=headers).json()}
    assert current["id"] in active_ids
    assert ended["id"] not in active_ids
    all_ids = {m["id"] for m in client.get("/api/ibc-board-members/", headers=headers).json()}
    assert ended["id"] in all_ids


def test_unknown_scientist_rejected(client):
    headers, _ = ensure_auth_headers(client, role="ibc_office")
    resp = client.post(
        "/api/ibc-board-members/",
        json=_payload({"id": "00000000-0000-0000-0000-000000000000"}),
        headers=headers,
    )
    assert resp.status_code == 400


def test_null_term_end_rejected(client):
    headers, _ = ensure_auth_headers(client, role="ibc_office")
    scientist = create_scientist(client, headers)
    member = client.post("/api/ibc-board-members/", json=_payload(scientist), headers=headers).json()
    resp = client.put(f"/api/ibc-board-members/{member['id']}", json={"term_end_date": None}, headers=headers)
    assert resp.status_code == 422
