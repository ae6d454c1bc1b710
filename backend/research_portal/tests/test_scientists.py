import uuid

from .conftest import client, ensure_auth_headers, create_scientist


def test_scientist_crud_and_search(client):
    headers, _ = ensure_auth_headers(client)
    scientist = create_scientist(client, headers, name=f"Ada {uuid.uuid4().hex[:6]}")
    found = client.get("/api/scientists/", params={"search": scientist["name"]}, headers=headers).json()
    assert [s["id"] for s in found] == [scientist["id"]]
    updated = client.put(f"/api/scientists/{scientist['id']}", json={"title": "Senior Scientist"}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["title"] == "Senior Scientist"
    assert client.get(f"/api/scientists/{uuid.uuid4()}", headers=headers).status_code == 404


def test_duplicate_email_conflicts(client):
    headers, _ = ensure_auth_headers(client)
    scientist = create_scientist(client, headers)
    resp = client.post(
        "/api/scientists/",
        json={"name": "Copy", "email": scientist["email"]},
        headers=headers,
    )
    assert resp.status_code == 409


def test_self_supervision_rejected(client):
    headers, _ = ensure_auth_headers(client)
    scientist = create_scientist(client, headers)
    resp = client.put(
        f"/api/scientists/{scientist['id']}", json={"supervisor_id": scientist["id"]}, headers=headers
    )
    assert resp.status_code == 400


def test_authorship_stats_unknown_scientist(client):
    headers, _ = ensure_auth_headers(client)
    resp = client.get(f"/api/scientists/{uuid.uuid4()}/authorship-stats", headers=headers)
    assert resp.status_code == 404
