from datetime import timedelta

from vibedev_analytics.routers import stats as stats_router
from vibedev_analytics.utils import to_iso, utc_now

BOT_UA = "Googlebot/2.1 (+http://www.google.com/bot.html)"


def track(client, session_id, content_id="p1", content_type="project", **extra):
    payload = {"content_type": content_type, "content_id": content_id, "session_id": session_id}
    payload.update(extra)
    return client.post("/api/views/track", json=payload)


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok", "server": "alive"}


def test_new_session_without_stored_record(client):
    response = client.post("/api/views/session", json={})

    assert response.status_code == 200
    data = response.json()
    assert data["id"]
    assert data["createdAt"].endswith("Z")
    assert data["createdAt"] == data["lastActivity"]


def test_active_session_is_kept(client):
    recent = to_iso(utc_now() - timedelta(minutes=5))
    stored = {"id": "abc-123", "createdAt": recent, "lastActivity": recent}

    data = client.post("/api/views/session", json={"session": stored}).json()

    assert data["id"] == "abc-123"
    assert data["createdAt"] == recent
    assert data["lastActivity"] > recent


def test_expired_session_is_replaced(client):
    old = to_iso(utc_now() - timedelta(hours=2))
    stored = {"id": "abc-123", "createdAt": old, "lastActivity": old}

    data = client.post("/api/views/session", json={"session": stored}).json()

    assert data["id"] != "abc-123"


def test_malformed_session_is_replaced(client):
    response = client.post("/api/views/session", json={"session": {"foo": 1}})

    assert response.status_code == 200
    assert response.json()["id"]


def test_track_view_deduplicates_per_session(client):
    assert track(client, "s1").json() == {"counted": True}
    assert track(client, "s1").json() == {"counted": False}
    assert track(client, "s2").json() == {"counted": True}


def test_track_view_ignores_bot_header(client):
    response = client.post(
        "/api/views/track",
        json={"content_type": "project", "content_id": "p1", "session_id": "s1"},
        headers={"User-Agent": BOT_UA},
    )

    assert response.json() == {"counted": False}


def test_track_view_payload_user_agent_wins(client):
    assert track(client, "s1", user_agent=BOT_UA).json() == {"counted": False}


def test_track_view_validation(client):
    assert track(client, "s1", content_type="event").status_code == 422
    assert track(client, "  ").status_code == 422
    assert track(client, "s1", content_id="").status_code == 422


def test_content_stats(client):
    track(client, "S1", "P1")
    track(client, "S1", "P1")
    track(client, "S2", "P1")
    track(client, "S3", "P1", user_agent=BOT_UA)

    data = client.get("/api/views/project/P1/stats").json()

    assert data["total_views"] == 2
    assert data["unique_visitors"] == 2
    assert data["today_views"] == 2
    assert data["weekly_views"] == 2


def test_content_stats_rejects_unknown_type(client):
    assert client.get("/api/views/event/1/stats").status_code == 422


def test_delete_views(client):
    track(client, "s1", "p1")
    track(client, "s2", "p1")

    assert client.delete("/api/views/project/p1").json() == {"deleted": 2}
    assert client.get("/api/views/project/p1/stats").json()["total_views"] == 0


def test_admin_stats(client):
    track(client, "s1", "p1")
    track(client, "s2", "p1")
    track(client, "s1", "p2")
    track(client, "s1", "post-1", content_type="post")

    platform = client.get("/api/stats/views").json()
    assert platform["total_views"] == 4
    assert platform["unique_sessions"] == 2
    assert platform["views_by_type"] == {"project": 3, "post": 1}

    ranking = client.get("/api/stats/most-viewed", params={"content_type": "project", "limit": 5}).json()
    assert [item["content_id"] for item in ranking["items"]] == ["p1", "p2"]

    series = client.get("/api/stats/time-series", params={"days": 7}).json()
    assert len(series["dates"]) == 7
    assert series["views"][-1] == 4


def test_time_series_days_validation(client):
    assert client.get("/api/stats/time-series", params={"days": 0}).status_code == 422


def test_admin_token_required_when_configured(client, monkeypatch):
    monkeypatch.setenv("ADMIN_API_TOKEN", "secret")

    assert client.get("/api/stats/views").status_code == 403
    assert client.delete("/api/views/project/p1").status_code == 403
    assert client.get("/api/stats/views", headers={"X-Admin-Token": "wrong"}).status_code == 403
    assert client.get("/api/stats/views", headers={"X-Admin-Token": "secret"}).status_code == 200

    # Las rutas públicas no requieren token
    assert track(client, "s1").status_code == 200
    assert client.get("/api/views/project/p1/stats").status_code == 200


def test_track_view_write_failure_still_answers_200(client, failing_commit):
    response = track(client, "s1")

    assert response.status_code == 200
    assert response.json() == {"counted": False}

    # La escritura se descartó, así que la siguiente carga sí cuenta
    assert track(client, "s1").json() == {"counted": True}
    assert client.get("/api/views/project/p1/stats").json()["total_views"] == 1


def test_track_view_identifier_lengths(client):
    assert track(client, "s" * 100).status_code == 200
    assert track(client, "s" * 101).status_code == 422
    assert track(client, "s1", user_id="u" * 100).status_code == 200
    assert track(client, "s1", user_id="u" * 101).status_code == 422
    assert track(client, "s1", content_id="c" * 201).status_code == 422


def test_admin_stats_errors_answer_500(client, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(stats_router, "get_platform_view_stats", broken)
    monkeypatch.setattr(stats_router, "get_most_viewed", broken)
    monkeypatch.setattr(stats_router, "get_views_time_series", broken)

    assert client.get("/api/stats/views").status_code == 500
    assert client.get("/api/stats/most-viewed").status_code == 500
    assert client.get("/api/stats/time-series").status_code == 500
