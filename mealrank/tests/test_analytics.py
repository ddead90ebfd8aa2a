from __future__ import annotations

from fastapi.testclient import TestClient

from mealrank.app import app

client = TestClient(app)

USER_LOCATION = {"latitude": 40.7295, "longitude": -73.9965}


def _login_user(c):
    c.post("/auth/login", json={"username": "user", "password": "user123"})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


def _recommend(c, vendor_id: str, meal_period: str = "lunch"):
    tod = {"breakfast": "morning", "lunch": "afternoon", "dinner": "evening"}[meal_period]
    c.post("/recommendations", json={
        "candidates": [{"id": vendor_id, "latitude": 40.73, "longitude": -73.99}],
        "user_location": USER_LOCATION,
        "context": {"time_of_day": tod, "meal_period": meal_period},
    })


def test_analytics_returns_empty_initially():
    app.state.engine.analytics.clear_events()
    _login_admin(client)
    resp = client.get("/analytics")
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_requests"] == 0
    assert body["avg_response_time_ms"] == 0.0
    assert body["engagement_summary"]["total"] == 0


def test_analytics_tracks_requests():
    app.state.engine.analytics.clear_events()
    app.state.engine.clear_cache()
    _login_user(client)
    _recommend(client, "a1")
    _recommend(client, "a1")
    _recommend(client, "a1", "dinner")
    _login_admin(client)
    body = client.get("/analytics").json()
    assert body["total_requests"] == 3
    assert body["meal_periods"] == {"lunch": 2, "dinner": 1}
    assert body["cache_stats"]["hits"] == 1
    assert body["cache_stats"]["misses"] == 2
    assert body["personalised_rate"] == 100.0


def test_analytics_tracks_feed_activity():
    app.state.engine.analytics.clear_events()
    post = {
        "id": "a2", "user_id": "alice", "timestamp": "2026-03-01T12:00:00Z", "meal_type": "lunch",
    }
    client.post("/posts/rank", json={"posts": [post, {**post, "id": "a3"}]})
    client.post("/posts/a2/engagement", json={"type": "share"})
    client.post("/posts/a2/engagement", json={"type": "save"})
    client.post("/posts/a3/engagement", json={"type": "like"})
    _login_admin(client)
    body = client.get("/analytics").json()
    assert body["feed"]["rankings"] == 1
    assert body["feed"]["posts_ranked"] == 2
    summary = body["engagement_summary"]
    assert summary["total"] == 3
    assert summary["by_type"] == {"share": 1, "save": 1, "like": 1}
    assert summary["top_posts"][0] == {"post_id": "a2", "score": 9}
