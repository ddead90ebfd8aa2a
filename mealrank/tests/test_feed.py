from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from mealrank.app import app

client = TestClient(app)


def _login_user(c):
    c.post("/auth/login", json={"username": "user", "password": "user123"})


def _post(pid: str, **overrides) -> dict:
    post = {
        "id": pid,
        "user_id": "alice",
        "timestamp": (datetime.now(timezone.utc) - timedelta(hours=1)).isoformat(),
        "location": "East Village, NYC",
        "meal_type": "lunch",
        "diet_tags": ["vegan"],
        "food_photos": ["a.jpg"],
        "notes": "",
        "view_count": 10,
    }
    post.update(overrides)
    return post


def test_rank_posts_orders_by_score():
    resp = client.post("/posts/rank", json={"posts": [_post("f1-a"), _post("f1-b", likes=8, comments=2)]})
    assert resp.status_code == 200
    ranked = resp.json()["posts"]
    assert [r["post"]["id"] for r in ranked] == ["f1-b", "f1-a"]
    assert ranked[0]["score"] >= ranked[1]["score"]


def test_rank_posts_empty():
    resp = client.post("/posts/rank", json={"posts": []})
    assert resp.status_code == 200
    assert resp.json()["posts"] == []


def test_rank_posts_rejects_unknown_meal_type():
    resp = client.post("/posts/rank", json={"posts": [_post("f2", meal_type="brunch")]})
    assert resp.status_code == 422


def test_shown_post_is_demoted():
    c = TestClient(app)
    posts = [_post("f3-a"), _post("f3-b")]
    assert c.post("/posts/f3-a/shown").json() == {"status": "recorded"}
    ranked = c.post("/posts/rank", json={"posts": posts}).json()["posts"]
    assert [r["post"]["id"] for r in ranked] == ["f3-b", "f3-a"]


def test_shown_accepts_creator():
    resp = client.post("/posts/f4/shown", json={"creator_id": "alice"})
    assert resp.status_code == 200


def test_like_learns_preferences():
    _login_user(client)
    liked = _post("f5", user_id="chef-bob", meal_type="dinner", diet_tags=["keto"])
    resp = client.post("/posts/like", json=liked)
    assert resp.status_code == 200
    prefs = resp.json()
    assert "keto" in prefs["favorite_diet_tags"]
    assert "chef-bob" in prefs["favorite_creators"]
    assert "dinner" in prefs["preferred_meal_types"]

    again = client.post("/posts/like", json=liked).json()
    assert again["favorite_creators"].count("chef-bob") == 1

    profile = client.get("/preferences").json()
    assert "chef-bob" in profile["feed"]["favorite_creators"]
    assert profile["food"]["preferred_price_level"] == 2


def test_engagement_recorded():
    resp = client.post("/posts/f6/engagement", json={"type": "comment"})
    assert resp.json() == {"status": "recorded"}


def test_short_view_is_ignored():
    resp = client.post("/posts/f7/engagement", json={"type": "view", "duration_seconds": 0.2})
    assert resp.json() == {"status": "ignored"}
