import uuid
from .conftest import client, ensure_auth_headers, create_scientist


def get_headers(client):
    headers, _ = ensure_auth_headers(client, email=f"{uuid.uuid4()}@ex.com")
    return headers


def _activity(client, headers):
    resp = client.post(
        "/api/research-activities/",
        json={"sdr_number": f"SDR-{uuid.uuid4().hex[:6]}", "title": "Audit trail"},
        headers=headers,
    )
    assert resp.status_code == 201
    return resp.json()


def test_audit_log_member_added(client):
    headers = get_headers(client)
    activity = _activity(client, headers)
    scientist = create_scientist(client, headers)
    client.post(
        f"/api/research-activities/{activity['id']}/members",
        json={"scientist_id": scientist["id"], "role": "Team Member"},
        headers=headers,
    )
    logs = client.get("/api/audit/", headers=headers)
    assert logs.status_code == 200
    data = logs.json()
    assert any(l["action"] == "add_team_member" and l["target_id"] == activity["id"] for l in data)


def test_audit_report(client):
    headers = get_headers(client)
    params = {
        "start": "2000-01-01T00:00:00",
        "end": "2100-01-01T00:00:00",
    }
    resp = client.get("/api/audit/report", headers=headers, params=params)
    assert resp.status_code == 200
    data = resp.json()
    assert any(r["action"] == "register" and r["count"] >= 1 for r in data)


def test_target_history(client):
    headers = get_headers(client)
    activity = _activity(client, headers)
    scientist = create_scientist(client, headers)
    member_url = f"/api/research-activities/{activity['id']}/members"
    client.post(member_url, json={"scientist_id": scientist["id"]}, headers=headers)
    client.delete(f"{member_url}/{scientist['id']}", headers=headers)
    resp = client.get(f"/api/audit/targets/research_activity/{activity['id']}", headers=headers)
    assert resp.status_code == 200
    assert [l["action"] for l in resp.json()] == ["add_team_member", "remove_team_member"]


def test_target_history_scoped_to_office(client):
    headers = get_headers(client)
    activity = _activity(client, headers)
    scientist = create_scientist(client, headers)
    url = f"/api/audit/targets/research_activity/{activity['id']}"
    client.post(
        f"/api/research-activities/{activity['id']}/members",
        json={"scientist_id": scientist["id"]},
        headers=headers,
    )
    outsider = get_headers(client)
    assert client.get(url, headers=outsider).json() == []
    office, _ = ensure_auth_headers(client, email=f"{uuid.uuid4()}@ex.com", role="ibc_office")
    assert [l["action"] for l in client.get(url, headers=office).json()] == ["add_team_member"]
