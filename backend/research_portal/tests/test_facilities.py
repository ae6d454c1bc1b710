import uuid

from .conftest import client, ensure_auth_headers, create_scientist


def _building(client, headers, **overrides):
    payload = {"name": f"Building {uuid.uuid4().hex[:6]}", "total_floors": 3}
    payload.update(overrides)
    resp = client.post("/api/buildings", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_building_names_unique(client):
    headers, _ = ensure_auth_headers(client)
    building = _building(client, headers)
    assert building["room_count"] == 0
    dup = client.post("/api/buildings", json={"name": building["name"]}, headers=headers)
    assert dup.status_code == 409


def test_room_sets_normalized(client):
    headers, _ = ensure_auth_headers(client)
    building = _building(client, headers)
    supervisor = create_scientist(client, headers)
    resp = client.post(
        "/api/rooms",
        json={
            "building_id": building["id"],
            "room_number": " 101 ",
            "biosafety_level": "BSL-2",
            "supervisor_id": supervisor["id"],
            "certifications": ["BSL-2", " Radiation ", "BSL-2", ""],
            "available_ppe": ["Gloves", "Lab coat", "Gloves"],
        },
        headers=headers,
    )
    assert resp.status_code == 201
    room = resp.json()
    assert room["room_number"] == "101"
    assert room["certifications"] == ["BSL-2", "Radiation"]
    assert room["available_ppe"] == ["Gloves", "Lab coat"]
    fetched = client.get(f"/api/buildings/{building['id']}", headers=headers).json()
    assert fetched["room_count"] == 1


def test_room_numbers_unique_per_building(client):
    headers, _ = ensure_auth_headers(client)
    first = _building(client, headers)
    second = _building(client, headers)
    client.post("/api/rooms", json={"building_id": first["id"], "room_number": "B12"}, headers=headers)
    dup = client.post("/api/rooms", json={"building_id": first["id"], "room_number": "B12"}, headers=headers)
    assert dup.status_code == 409
    other = client.post("/api/rooms", json={"building_id": second["id"], "room_number": "B12"}, headers=headers)
    assert other.status_code == 201
    rooms = client.get("/api/rooms", params={"building_id": first["id"]}, headers=headers).json()
    assert [r["room_number"] for r in rooms] == ["B12"]


def test_room_manager_must_exist(client):
    headers, _ = ensure_auth_headers(client)
    building = _building(client, headers)
    resp = client.post(
        "/api/rooms",
        json={"building_id": building["id"], "room_number": "1", "manager_id": str(uuid.uuid4())},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Manager must be an existing scientist"


def test_room_update_and_building_delete(client):
    headers, _ = ensure_auth_headers(client)
    building = _building(client, headers)
    room = client.post(
        "/api/rooms", json={"building_id": building["id"], "room_number": "7"}, headers=headers
    ).json()
    updated = client.put(
        f"/api/rooms/{room['id']}", json={"available_ppe": ["Respirator", "Respirator"]}, headers=headers
    )
    assert updated.json()["available_ppe"] == ["Respirator"]
    blocked = client.delete(f"/api/buildings/{building['id']}", headers=headers)
    assert blocked.status_code == 409
    assert client.delete(f"/api/rooms/{room['id']}", headers=headers).status_code == 204
    assert client.delete(f"/api/buildings/{building['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/buildings/{building['id']}", headers=headers).status_code == 404
