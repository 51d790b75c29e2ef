from datetime import timedelta

import database
import main
from challenge import utcnow


def test_health(client):
    assert client.get("/").json() == {"message": "SkillSwap Backend Running"}
    body = client.get("/test").json()
    assert body["connection_status"] == "Connected"
    assert body["database_name"] == "skillswap_test"


def test_without_database_routes_answer_500(client, monkeypatch):
    monkeypatch.setattr(database, "db", None)
    monkeypatch.setattr(main, "db", None)
    for r in (client.get("/api/skills/random", params={"user_id": "alice"}),
              client.post("/api/events", json={"name": "app_open", "user_id": "alice"}),
              client.get("/api/users/alice")):
        assert r.status_code == 500
        assert r.json() == {"detail": "Database not configured"}


def test_missing_media_file_is_404(client):
    assert client.get("/media/videos/alice/missing.webm").status_code == 404


def test_create_user_with_defaults(make_user):
    user = make_user("alice", "Alice")
    assert user["id"] == "alice"
    assert user["level"] == 1
    assert user["xp"] == 0
    assert user["streak"] == 0
    assert user["avatar"] == "👤"
    assert user["preferences"] == {"notifications": True, "difficulty": "mixed", "categories": [], "theme": "dark"}


def test_existing_user_is_returned_untouched(client, make_user):
    make_user("alice", "Alice")
    again = client.post("/api/users", json={"uid": "alice", "name": "Somebody Else"}).json()
    assert again["name"] == "Alice"


def test_get_user_includes_progress(client, mongo, make_user):
    make_user("alice")
    mongo["user"].update_one({"_id": "alice"}, {"$set": {"xp": 650, "level": 2, "skills_learned": 1}})
    body = client.get("/api/users/alice").json()
    assert body["display"]["xp"] == 650
    assert body["level_progress"] == {"level": 2, "percent": 30.0, "xp_to_next": 350}
    first_swap = next(a for a in body["achievements"] if a["id"] == "first_swap")
    assert first_swap["unlocked"]


def test_unknown_user_is_404(client):
    assert client.get("/api/users/ghost").status_code == 404


def test_update_merges_preferences(client, make_user):
    make_user("alice")
    r = client.patch("/api/users/alice", json={"avatar": "🦊", "preferences": {"theme": "light"}})
    assert r.status_code == 200
    body = r.json()
    assert body["avatar"] == "🦊"
    assert body["preferences"]["theme"] == "light"
    assert body["preferences"]["notifications"] is True


def test_update_rejects_bad_theme(client, make_user):
    make_user("alice")
    assert client.patch("/api/users/alice", json={"preferences": {"theme": "neon"}}).status_code == 422


def test_streak_same_day_is_unchanged(client, make_user):
    make_user("alice")
    assert client.post("/api/users/alice/streak").json() == {"streak": 0, "changed": False}


def test_streak_consecutive_day_and_gap(client, mongo, make_user):
    make_user("alice")
    mongo["user"].update_one({"_id": "alice"}, {"$set": {"streak": 3, "last_active_date": utcnow() - timedelta(hours=26)}})
    assert client.post("/api/users/alice/streak").json() == {"streak": 4, "changed": True}

    mongo["user"].update_one({"_id": "alice"}, {"$set": {"last_active_date": utcnow() - timedelta(days=4)}})
    assert client.post("/api/users/alice/streak").json()["streak"] == 1


def test_public_profile_lists_skills(client, make_user, make_skill):
    make_user("bob", "Bob")
    make_skill("bob")
    body = client.get("/api/users/bob/public").json()
    assert body["name"] == "Bob"
    assert [s["title"] for s in body["skills"]] == ["Perfect Paper Airplane"]
    assert len(client.get("/api/users/bob/skills").json()) == 1


def test_register_push_token(client, mongo, make_user):
    make_user("alice")
    assert client.post("/api/users/alice/push-token", json={"token": "tok-1"}).json() == {"push_enabled": True}
    assert mongo["user"].find_one({"_id": "alice"})["push_token"] == "tok-1"
