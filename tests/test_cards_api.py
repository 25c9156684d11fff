"""
Tests for cards, comments, tags, templates and prompt generation.
"""
import pytest
import requests

from app.core.config import settings
from app.services import ai


def _tags(client):
    return {t["name"]: t["id"] for t in client.get("/api/tags").json()}


def _new_card(client, **fields):
    body = {"title": "Card", "columnId": "todo", **fields}
    r = client.post("/api/cards", json=body)
    assert r.status_code == 201, r.text
    return r.json()


def test_create_card_defaults(auth_client):
    card = _new_card(auth_client, title="  Write docs  ")
    assert card["title"] == "Write docs"
    assert card["notes"] == ""
    assert card["priority"] == "medium"
    assert card["tags"] == []
    assert card["dueDate"] is None
    assert card["createdAt"].endswith("Z")


def test_create_card_validation(auth_client):
    assert auth_client.post("/api/cards", json={"title": "", "columnId": "todo"}).status_code == 400
    assert auth_client.post("/api/cards", json={"title": "x" * 201, "columnId": "todo"}).status_code == 400
    assert auth_client.post("/api/cards", json={"title": "ok", "columnId": "nope"}).status_code == 404
    r = auth_client.post("/api/cards", json={"title": "ok", "columnId": "todo", "priority": "urgent"})
    assert r.status_code == 400


def test_create_card_with_tags_and_due_date(auth_client):
    tags = _tags(auth_client)
    card = _new_card(
        auth_client,
        tagIds=[tags["Bug"], tags["Urgent"], tags["Bug"]],
        dueDate="2026-01-15T09:30:00+02:00",
        priority="high",
    )
    assert sorted(t["name"] for t in card["tags"]) == ["Bug", "Urgent"]
    assert card["dueDate"] == "2026-01-15T07:30:00Z"
    assert card["priority"] == "high"


def test_unknown_tag_is_rejected(auth_client):
    r = auth_client.post("/api/cards", json={"title": "x", "columnId": "todo", "tagIds": ["missing"]})
    assert r.status_code == 400


def test_partial_update_keeps_other_fields(auth_client):
    tags = _tags(auth_client)
    card = _new_card(auth_client, notes="details", tagIds=[tags["Feature"]])

    r = auth_client.put(f"/api/cards/{card['id']}", json={"priority": "low"})
    updated = r.json()
    assert updated["priority"] == "low"
    assert updated["notes"] == "details"
    assert [t["name"] for t in updated["tags"]] == ["Feature"]

    r = auth_client.put(f"/api/cards/{card['id']}", json={"tagIds": [tags["Design"], tags["Design"]]})
    assert [t["name"] for t in r.json()["tags"]] == ["Design"]

    r = auth_client.put(f"/api/cards/{card['id']}", json={"dueDate": None, "generatedPrompt": "do it"})
    assert r.json()["dueDate"] is None
    assert r.json()["generatedPrompt"] == "do it"


def test_update_rejects_empty_title(auth_client):
    card = _new_card(auth_client)
    assert auth_client.put(f"/api/cards/{card['id']}", json={"title": ""}).status_code == 400
    assert auth_client.put(f"/api/cards/{card['id']}", json={"title": None}).status_code == 400


def test_update_column_moves_card_to_end(auth_client):
    first = _new_card(auth_client, columnId="completed")
    card = _new_card(auth_client)
    auth_client.put(f"/api/cards/{card['id']}", json={"columnId": "completed"})

    cols = {c["id"]: c["cardIds"] for c in auth_client.get("/api/board").json()["columns"]}
    assert cols["todo"] == []
    assert cols["completed"] == [first["id"], card["id"]]


def test_delete_card_removes_it_from_column(auth_client):
    card = _new_card(auth_client)
    assert auth_client.delete(f"/api/cards/{card['id']}").json() == {"success": True}
    board = auth_client.get("/api/board").json()
    assert board["cards"] == {}
    assert board["columns"][0]["cardIds"] == []
    assert auth_client.delete(f"/api/cards/{card['id']}").status_code == 404


def test_comments(auth_client):
    card = _new_card(auth_client)
    r = auth_client.post(f"/api/cards/{card['id']}/comments", json={"content": "first"})
    assert r.status_code == 201
    assert r.json()["cardId"] == card["id"]
    auth_client.post(f"/api/cards/{card['id']}/comments", json={"content": "second"})

    listed = auth_client.get(f"/api/cards/{card['id']}/comments").json()
    assert [c["content"] for c in listed] == ["first", "second"]
    assert len(auth_client.get(f"/api/cards/{card['id']}").json()["comments"]) == 2

    assert auth_client.post(f"/api/cards/{card['id']}/comments", json={"content": ""}).status_code == 400
    too_long = auth_client.post(f"/api/cards/{card['id']}/comments", json={"content": "x" * 5001})
    assert too_long.status_code == 400


def test_default_tags_are_seeded(auth_client):
    names = list(_tags(auth_client))
    assert names == sorted(names)
    assert {"Bug", "Feature", "Urgent", "Enhancement", "Documentation", "Design"} <= set(names)


def test_create_tag(auth_client):
    r = auth_client.post("/api/tags", json={"name": "Backend", "color": "#ABCDEF"})
    assert r.status_code == 201
    assert r.json()["color"] == "#abcdef"
    assert auth_client.post("/api/tags", json={"name": "Backend", "color": "#000000"}).status_code == 400
    assert auth_client.post("/api/tags", json={"name": "Bad", "color": "red"}).status_code == 400


def test_tags_require_auth(client):
    assert client.get("/api/tags").status_code == 401


def test_templates(auth_client):
    r = auth_client.post("/api/templates", json={
        "name": "Bug report",
        "title": "Fix: ",
        "notes": "Steps to reproduce",
        "tags": ["Bug"],
        "priority": "high",
    })
    assert r.status_code == 201
    assert r.json()["tags"] == ["Bug"]

    listed = auth_client.get("/api/templates").json()
    assert [t["name"] for t in listed] == ["Bug report"]
    assert auth_client.post("/api/templates", json={"name": "", "title": "x"}).status_code == 400


class _FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status}")

    def json(self):
        return self.payload


def test_generate_prompt_not_configured(auth_client):
    r = auth_client.post("/api/generate-prompt", json={"title": "Add search"})
    assert r.status_code == 503


def test_generate_prompt(auth_client, monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test")
    calls = []

    def fake_post(url, json, headers, timeout):
        calls.append(json)
        return _FakeResponse({"choices": [{"message": {"content": "  Implement search.  "}}]})

    monkeypatch.setattr(ai.requests, "post", fake_post)
    r = auth_client.post("/api/generate-prompt", json={"title": "Add search", "notes": "fuzzy"})
    assert r.status_code == 200
    assert r.json() == {"prompt": "Implement search."}
    assert "Additional Context: fuzzy" in calls[0]["messages"][1]["content"]


def test_generate_prompt_upstream_failure(auth_client, monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(ai.requests, "post", lambda *a, **kw: _FakeResponse({}, status=500))
    r = auth_client.post("/api/generate-prompt", json={"title": "Add search"})
    assert r.status_code == 502


@pytest.mark.parametrize("body", [{}, {"title": ""}])
def test_generate_prompt_requires_title(auth_client, monkeypatch, body):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "sk-test")
    assert auth_client.post("/api/generate-prompt", json=body).status_code == 400


def test_generate_prompt_rate_limited(auth_client, monkeypatch):
    for _ in range(10):
        auth_client.post("/api/generate-prompt", json={"title": "x"})
    r = auth_client.post("/api/generate-prompt", json={"title": "x"})
    assert r.status_code == 429
