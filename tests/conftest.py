import mongomock
import pytest
from fastapi.testclient import TestClient

import config
import database
import main
import push


@pytest.fixture
def mongo(monkeypatch):
    mock_db = mongomock.MongoClient()["skillswap_test"]
    monkeypatch.setattr(database, "db", mock_db)
    monkeypatch.setattr(main, "db", mock_db)
    return mock_db


@pytest.fixture
def client(mongo, tmp_path, monkeypatch):
    monkeypatch.setattr(config, "MEDIA_ROOT", str(tmp_path))
    monkeypatch.setattr(config, "APP_ENV", "production")
    monkeypatch.setattr(config, "ADMIN_UIDS", ["root"])
    push.set_sender(push.PushSender(endpoint=""))
    yield TestClient(main.app)
    push.set_sender(None)


@pytest.fixture
def make_user(client):
    def _make(uid, name=None):
        r = client.post("/api/users", json={"uid": uid, "name": name or uid.title(), "email": f"{uid}@example.com"})
        assert r.status_code == 200
        return r.json()
    return _make


@pytest.fixture
def make_skill(client):
    def _make(user_id, **overrides):
        payload = {
            "user_id": user_id,
            "title": "Perfect Paper Airplane",
            "description": "Fold a plane that actually glides",
            "category": "Crafts",
            "difficulty": "Easy",
            "duration": "2 min",
            "thumbnail": "✈️",
        }
        payload.update(overrides)
        r = client.post("/api/skills", json=payload)
        assert r.status_code == 200, r.text
        return r.json()
    return _make


@pytest.fixture
def swap(make_user, make_skill):
    """alice learns bob's skill and teaches one of her own."""
    make_user("alice")
    make_user("bob")
    teach = make_skill("alice", title="Speed Cube Solving", category="Puzzles", difficulty="Hard", duration="5 min")
    learn = make_skill("bob", title="Card Trick - The Four Aces", category="Magic", difficulty="Hard", duration="8 min")
    return {"learn": learn, "teach": teach}


@pytest.fixture
def started(client, swap):
    r = client.post("/api/challenges", json={
        "user_id": "alice",
        "learn_skill_id": swap["learn"]["id"],
        "teach_skill_id": swap["teach"]["id"],
    })
    assert r.status_code == 200, r.text
    return r.json()
