import pytest
from fastapi.testclient import TestClient

from app.config import settings
from app.main import app
from app.services import groq_service
from app.services.article_store import article_store


@pytest.fixture
def doctor(fake_db):
    fake_db.put("doctors", "doc-ben", {
        "clerkUserId": "user_ben",
        "fullName": "Dr. Ben Okafor",
        "qualification": "MD",
        "specialty": "Cardiology",
    })
    return "user_ben"


def _create_alert(client, title="Flu Outbreak", content="Stay indoors.", **extra):
    r = client.post("/api/articles", json={"type": "Alert", "title": title, "content": content, **extra})
    assert r.status_code == 201, r.text
    return r.json()["data"]


def test_alert_lifecycle_example(client, as_viewer):
    created = _create_alert(client)
    assert created["slug"] == "flu-outbreak"
    assert created["likeCount"] == 0
    assert created["publishedAt"] is None
    assert "likedBy" not in created
    article_id = created["id"]

    r = client.put(f"/api/articles/{article_id}/publish")
    assert r.status_code == 200
    assert r.json()["data"]["publishedAt"] is not None

    as_viewer("u1")
    r = client.put(f"/api/articles/{article_id}/like")
    assert r.status_code == 200
    assert r.json() == {"message": "Liked", "likes": 1}

    r = client.put(f"/api/articles/{article_id}/like")
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "Already liked", "likes": 1}

    r = client.put(f"/api/articles/{article_id}/unlike")
    assert r.status_code == 200
    assert r.json() == {"message": "Unliked", "likes": 0}

    r = client.put(f"/api/articles/{article_id}/unlike")
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "Not liked before", "likes": 0}


def test_create_response_envelope(client):
    r = client.post("/api/articles", json={
        "type": "Announcement",
        "title": "Vaccination drive",
        "content": "Saturday 9am at the community hall.",
        "tags": ["vaccines"],
        "images": [{"url": "https://cdn.example/a.png", "publicId": "a"}],
    })
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["message"] == "Article created successfully"
    assert body["data"]["type"] == "Announcement"
    assert body["data"]["images"] == [{"url": "https://cdn.example/a.png", "publicId": "a"}]
    assert body["data"]["isLiked"] is False
    assert body["data"]["viewCount"] == 0


def test_create_missing_fields(client, fake_db):
    r = client.post("/api/articles", json={"title": "No type"})
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "Missing required fields: type, title"}
    assert fake_db.collections["articles"] == {}


def test_create_invalid_type(client):
    r = client.post("/api/articles", json={"type": "Blog", "title": "x", "content": "y"})
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_create_announcement_without_content(client, fake_db):
    r = client.post("/api/articles", json={"type": "Announcement", "title": "Clinic closed"})
    assert r.status_code == 400
    assert r.json()["message"] == "Content is required for Announcement and Alert"
    assert fake_db.collections["articles"] == {}


def test_create_article_generation_failed(client, fake_db, monkeypatch):
    async def empty(prompt):
        return ""

    monkeypatch.setattr(groq_service, "generate_text", empty)
    r = client.post("/api/articles", json={"type": "Article", "title": "Hydration", "keyPoints": ["water"]})
    assert r.status_code == 422
    assert r.json()["success"] is False
    assert fake_db.collections["articles"] == {}


def test_create_article_generated(client, monkeypatch):
    async def draft(prompt):
        return "## Why water matters\nIt does."

    monkeypatch.setattr(groq_service, "generate_text", draft)
    r = client.post("/api/articles", json={"type": "Article", "title": "Hydration"})
    assert r.status_code == 201
    assert r.json()["data"]["content"] == "## Why water matters\nIt does."


def test_create_article_without_groq_key_fails(client, fake_db, monkeypatch):
    monkeypatch.setattr(settings, "GROQ_API_KEY", "")
    monkeypatch.setattr(settings, "DEBUG_MOCK_GROQ", False)
    r = client.post("/api/articles", json={"type": "Article", "title": "Heat safety"})
    assert r.status_code == 422
    assert r.json()["success"] is False
    assert fake_db.collections["articles"] == {}


def test_create_duplicate_slug(client):
    _create_alert(client)
    r = client.post("/api/articles", json={"type": "Alert", "title": "Flu outbreak", "content": "again"})
    assert r.status_code == 500
    assert r.json() == {"success": False, "message": "Failed to create article"}


def test_get_counts_views_and_marks_like(client, as_viewer):
    article_id = _create_alert(client)["id"]
    as_viewer("u1")
    client.put(f"/api/articles/{article_id}/like")

    for expected in (1, 2, 3):
        r = client.get(f"/api/articles/{article_id}")
        assert r.status_code == 200
        assert r.json()["data"]["viewCount"] == expected
        assert r.json()["data"]["isLiked"] is True

    as_viewer(None)
    assert client.get(f"/api/articles/{article_id}").json()["data"]["isLiked"] is False


def test_get_missing(client):
    r = client.get("/api/articles/does-not-exist")
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Article not found"}


def test_list_annotates_viewer(client, as_viewer):
    first = _create_alert(client, title="First")["id"]
    _create_alert(client, title="Second")
    as_viewer("u2")
    client.put(f"/api/articles/{first}/like")

    r = client.get("/api/articles")
    assert r.status_code == 200
    data = r.json()["data"]
    liked = {a["title"]: a["isLiked"] for a in data}
    assert liked == {"First": True, "Second": False}
    assert all("likedBy" not in a for a in data)


def test_doctor_routes(client, doctor):
    client.post("/api/articles", json={
        "authorClerkId": doctor, "type": "Alert", "title": "Heart health", "content": "Walk daily.",
    })
    _create_alert(client, title="Admin notice")

    r = client.get(f"/api/articles/doctor/{doctor}")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["doctor"]["fullName"] == "Dr. Ben Okafor"
    assert [a["title"] for a in data["articles"]] == ["Heart health"]
    assert data["articles"][0]["author"]["specialty"] == "Cardiology"

    r = client.get(f"/api/articles/exclude/{doctor}")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["excludedDoctor"]["id"] == "doc-ben"
    assert [a["title"] for a in data["articles"]] == ["Admin notice"]

    r = client.get("/api/articles/doctor/user_nobody")
    assert r.status_code == 404
    assert r.json()["message"] == "Doctor not found"


def test_update_ignores_system_fields(client):
    created = _create_alert(client)
    r = client.put(f"/api/articles/{created['id']}", json={
        "title": "Flu Outbreak Contained",
        "tags": ["flu"],
        "slug": "other",
        "viewCount": 100,
        "publishedAt": "2024-01-01T00:00:00Z",
        "likeCount": 7,
    })
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["title"] == "Flu Outbreak Contained"
    assert data["tags"] == ["flu"]
    assert data["slug"] == "flu-outbreak"
    assert data["viewCount"] == 0
    assert data["publishedAt"] is None
    assert data["likeCount"] == 0


def test_update_blank_title(client):
    created = _create_alert(client)
    r = client.put(f"/api/articles/{created['id']}", json={"title": "   "})
    assert r.status_code == 400


@pytest.mark.parametrize("field", ["type", "title", "content", "tags", "images"])
def test_update_null_field_is_rejected_and_reads_still_work(client, fake_db, field):
    created = _create_alert(client, tags=["flu"])
    before = dict(fake_db.raw("articles", created["id"]))

    r = client.put(f"/api/articles/{created['id']}", json={field: None})
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert fake_db.raw("articles", created["id"]) == before

    assert client.get("/api/articles").status_code == 200
    assert client.get(f"/api/articles/{created['id']}").status_code == 200


def test_update_publish_delete_missing(client):
    assert client.put("/api/articles/nope", json={"title": "x"}).status_code == 404
    assert client.put("/api/articles/nope/publish").status_code == 404
    assert client.delete("/api/articles/nope").status_code == 404


def test_delete(client, fake_db):
    article_id = _create_alert(client)["id"]
    r = client.delete(f"/api/articles/{article_id}")
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Article deleted successfully"}
    assert client.get(f"/api/articles/{article_id}").status_code == 404


def test_like_requires_viewer(client, as_viewer):
    article_id = _create_alert(client)["id"]
    as_viewer(None)
    r = client.put(f"/api/articles/{article_id}/like")
    assert r.status_code == 401
    assert r.json()["message"] == "Unauthorized"
    assert client.put(f"/api/articles/{article_id}/unlike").status_code == 401


def test_like_missing_article(client, as_viewer):
    as_viewer("u1")
    r = client.put("/api/articles/nope/like")
    assert r.status_code == 404
    assert r.json()["message"] == "Content not found"


def test_like_without_token_is_unauthorized(client):
    # no override: the real dependency finds no bearer token
    article_id = _create_alert(client)["id"]
    assert client.put(f"/api/articles/{article_id}/like").status_code == 401


def test_unexpected_store_error_is_500(fake_db, monkeypatch):
    async def boom(**kwargs):
        raise RuntimeError("firestore unavailable")

    monkeypatch.setattr(article_store, "list", boom)
    with TestClient(app, raise_server_exceptions=False) as c:
        r = c.get("/api/articles")
    assert r.status_code == 500
    assert r.json()["success"] is False


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"
