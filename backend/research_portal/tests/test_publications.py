import uuid
from datetime import date

from .conftest import client, ensure_auth_headers, create_scientist, TestingSessionLocal
from research_portal import models


def _publication(client, headers, **overrides):
    payload = {"title": f"Manuscript {uuid.uuid4().hex[:6]}"}
    payload.update(overrides)
    resp = client.post("/api/publications/", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def _status(client, headers, pub_id, status, **fields):
    return client.patch(
        f"/api/publications/{pub_id}/status",
        json={"status": status, "updated_fields": fields},
        headers=headers,
    )


def test_new_publication_is_concept(client):
    headers, _ = ensure_auth_headers(client)
    publication = _publication(client, headers)
    assert publication["status"] == "Concept"
    options = client.get(f"/api/publications/{publication['id']}/transitions", headers=headers).json()
    assert options["allowed"] == ["Complete Draft"]
    assert options["requirements"] == {"Complete Draft": ["authors"]}


def test_complete_draft_requires_authors(client):
    headers, _ = ensure_auth_headers(client)
    publication = _publication(client, headers)
    resp = _status(client, headers, publication["id"], "Complete Draft")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Authorship field is required for Complete Draft status"
    history = client.get(f"/api/publications/{publication['id']}/history", headers=headers).json()
    assert history == []


def test_skipping_statuses_rejected(client):
    headers, _ = ensure_auth_headers(client)
    publication = _publication(client, headers, authors="A. Author")
    resp = _status(client, headers, publication["id"], "Published", doi="10.1/x", publication_date="2024-01-01")
    assert resp.status_code == 400
    assert "Invalid status transition" in resp.json()["detail"]


def test_status_change_with_fields_writes_history(client):
    headers, _ = ensure_auth_headers(client)
    publication = _publication(client, headers)
    resp = _status(client, headers, publication["id"], "Complete Draft", authors="Doe J, Roe R")
    assert resp.status_code == 200
    assert resp.json()["status"] == "Complete Draft"
    assert resp.json()["authors"] == "Doe J, Roe R"

    history = client.get(f"/api/publications/{publication['id']}/history", headers=headers).json()
    assert len(history) == 2
    status_rows = [h for h in history if h["changed_field"] is None]
    field_rows = [h for h in history if h["changed_field"] == "authors"]
    assert status_rows[0]["from_status"] == "Concept"
    assert status_rows[0]["to_status"] == "Complete Draft"
    assert field_rows[0]["old_value"] == ""
    assert field_rows[0]["new_value"] == "Doe J, Roe R"


def test_full_path_to_published(client):
    headers, _ = ensure_auth_headers(client)
    pub_id = _publication(client, headers, authors="Doe J")["id"]
    assert _status(client, headers, pub_id, "Complete Draft").status_code == 200
    assert _status(client, headers, pub_id, "Vetted for submission").status_code == 400
    assert _status(
        client, headers, pub_id, "Vetted for submission", vetted_for_submission_by_ip_office=True
    ).status_code == 200
    missing = _status(client, headers, pub_id, "Submitted for review with pre-publication", prepublication_url="https://arxiv.org/abs/1")
    assert missing.status_code == 400
    assert "Prepublication site" in missing.json()["detail"]
    assert _status(client, headers, pub_id, "Submitted for review without pre-publication").status_code == 200
    assert _status(client, headers, pub_id, "Under review").status_code == 400
    assert _status(client, headers, pub_id, "Under review", journal="Cell Reports").status_code == 200
    assert _status(client, headers, pub_id, "Accepted/In Press").status_code == 200
    published = _status(
        client, headers, pub_id, "Published", doi="10.1016/j.celrep.1", publication_date="2025-02-01"
    )
    assert published.status_code == 200
    assert published.json()["status"] == "Published"

    options = client.get(f"/api/publications/{pub_id}/transitions", headers=headers).json()
    assert options["allowed"] == []
    assert options["terminal"] is True
    again = _status(client, headers, pub_id, "Accepted/In Press")
    assert again.status_code == 400

    history = client.get(f"/api/publications/{pub_id}/history", headers=headers).json()
    assert history[0]["to_status"] == "Published"
    assert {h["changed_field"] for h in history if h["to_status"] == "Published"} == {
        None,
        "doi",
        "publication_date",
    }


def test_authors_create_then_merge(client):
    headers, _ = ensure_auth_headers(client)
    scientist = create_scientist(client, headers)
    pub_id = _publication(client, headers)["id"]
    url = f"/api/publications/{pub_id}/authors"
    created = client.post(
        url,
        json={
            "scientist_id": scientist["id"],
            "authorship": {"base_role": "Contributing Author", "is_corresponding": True},
            "author_position": 2,
        },
        headers=headers,
    )
    assert created.status_code == 201
    assert created.json()["authorship_type"] == "Contributing Author, Corresponding Author"

    merged = client.post(
        url,
        json={"scientist_id": scientist["id"], "authorship": {"base_role": "First Author", "is_shared": True}},
        headers=headers,
    )
    assert merged.status_code == 200
    body = merged.json()
    assert body["authorship_type"] == "Co-First Author, Corresponding Author"
    assert body["authorship"] == {"base_role": "First Author", "is_shared": True, "is_corresponding": True}
    assert body["author_position"] == 2

    authors = client.get(url, headers=headers).json()
    assert len(authors) == 1
    assert authors[0]["scientist"]["id"] == scientist["id"]


def test_unknown_authorship_role_rejected(client):
    headers, _ = ensure_auth_headers(client)
    scientist = create_scientist(client, headers)
    pub_id = _publication(client, headers)["id"]
    resp = client.post(
        f"/api/publications/{pub_id}/authors",
        json={"scientist_id": scientist["id"], "authorship": {"base_role": "Ghost Author"}},
        headers=headers,
    )
    assert resp.status_code == 422


def test_remove_author(client):
    headers, _ = ensure_auth_headers(client)
    scientist = create_scientist(client, headers)
    pub_id = _publication(client, headers)["id"]
    url = f"/api/publications/{pub_id}/authors"
    client.post(url, json={"scientist_id": scientist["id"], "authorship": {"base_role": "Last Author"}}, headers=headers)
    assert client.delete(f"{url}/{scientist['id']}", headers=headers).status_code == 204
    assert client.delete(f"{url}/{scientist['id']}", headers=headers).status_code == 404
    assert client.get(url, headers=headers).json() == []


def _published_with_author(client, headers, scientist, base_role, publication_date, corresponding=False):
    pub_id = _publication(client, headers, authors="Doe J", vetted_for_submission_by_ip_office=True, journal="J")["id"]
    for status in (
        "Complete Draft",
        "Vetted for submission",
        "Submitted for review without pre-publication",
        "Under review",
        "Accepted/In Press",
    ):
        assert _status(client, headers, pub_id, status).status_code == 200
    assert _status(
        client, headers, pub_id, "Published", doi=f"10.1/{uuid.uuid4().hex[:6]}", publication_date=publication_date
    ).status_code == 200
    client.post(
        f"/api/publications/{pub_id}/authors",
        json={
            "scientist_id": scientist["id"],
            "authorship": {"base_role": base_role, "is_corresponding": corresponding},
        },
        headers=headers,
    )
    return pub_id


def test_authorship_stats(client):
    headers, _ = ensure_auth_headers(client)
    scientist = create_scientist(client, headers)
    this_year = date.today().year
    _published_with_author(client, headers, scientist, "First Author", f"{this_year}-01-15", corresponding=True)
    _published_with_author(client, headers, scientist, "First Author", f"{this_year}-01-20")
    _published_with_author(client, headers, scientist, "Senior Author", f"{this_year - 1}-06-01")
    _published_with_author(client, headers, scientist, "Last Author", f"{this_year - 12}-06-01")
    # concept papers are not counted
    draft_id = _publication(client, headers)["id"]
    client.post(
        f"/api/publications/{draft_id}/authors",
        json={"scientist_id": scientist["id"], "authorship": {"base_role": "First Author"}},
        headers=headers,
    )

    resp = client.get(f"/api/scientists/{scientist['id']}/authorship-stats?years=5", headers=headers)
    assert resp.status_code == 200
    stats = {(s["year"], s["authorship_type"]): s["count"] for s in resp.json()}
    assert stats == {
        (this_year, "First Author"): 2,
        (this_year, "Corresponding Author"): 1,
        (this_year - 1, "Senior Author"): 1,
    }


def test_unknown_research_activity_rejected(client):
    headers, _ = ensure_auth_headers(client)
    bogus = str(uuid.uuid4())
    resp = client.post(
        "/api/publications/", json={"title": "Orphan", "research_activity_id": bogus}, headers=headers
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Research activity not found"
    publication = _publication(client, headers)
    resp = client.put(
        f"/api/publications/{publication['id']}", json={"research_activity_id": bogus}, headers=headers
    )
    assert resp.status_code == 400
    resp = _status(
        client, headers, publication["id"], "Complete Draft", authors="A. Author", research_activity_id=bogus
    )
    assert resp.status_code == 400
    history = client.get(f"/api/publications/{publication['id']}/history", headers=headers).json()
    assert history == []


def test_null_title_rejected(client):
    headers, _ = ensure_auth_headers(client)
    publication = _publication(client, headers)
    resp = client.put(f"/api/publications/{publication['id']}", json={"title": None}, headers=headers)
    assert resp.status_code == 422
    resp = _status(client, headers, publication["id"], "Complete Draft", authors="A. Author", title=None)
    assert resp.status_code == 422
    fetched = client.get(f"/api/publications/{publication['id']}", headers=headers).json()
    assert fetched["title"] == publication["title"]
    assert fetched["status"] == "Concept"


def test_legacy_authorship_text_is_listed(client):
    headers, _ = ensure_auth_headers(client)
    publication = _publication(client, headers)
    scientist = create_scientist(client, headers)
    db = TestingSessionLocal()
    try:
        db.add(
            models.PublicationAuthor(
                publication_id=uuid.UUID(publication["id"]),
                scientist_id=uuid.UUID(scientist["id"]),
                authorship_type="First Author, Last Author",
                author_position=1,
            )
        )
        db.commit()
    finally:
        db.close()
    resp = client.get(f"/api/publications/{publication['id']}/authors", headers=headers)
    assert resp.status_code == 200
    (author,) = resp.json()
    assert author["authorship_type"] == "First Author, Last Author"
    assert author["authorship"] is None
