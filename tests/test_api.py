from datetime import datetime, timezone

BASE = "/api/time-tracking"
UTC = timezone.utc


def test_health(client):
    resp = client.get(f"{BASE}/health")

    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_requests_without_login_are_401(client):
    resp = client.post(f"{BASE}/sessions/start")

    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "kind": "AuthenticationError", "message": "Authentication required"}


def test_full_day_flow(client, login, clock):
    login("u1")

    started = client.post(f"{BASE}/sessions/start", json={"source": "web"})
    assert started.status_code == 201
    assert started.get_json()["state"] == "WORKING"
    assert started.get_json()["source"] == "web"

    clock.advance(hours=2)
    assert client.post(f"{BASE}/breaks/start").status_code == 201
    assert client.get(f"{BASE}/sessions/current").get_json()["state"] == "ON_BREAK"

    clock.advance(minutes=30)
    ended_break = client.post(f"{BASE}/breaks/end").get_json()
    assert ended_break["durationSeconds"] == 1800

    clock.advance(hours=2)
    ended = client.post(f"{BASE}/sessions/end", json={"notes": "sprint planning"})
    body = ended.get_json()
    assert ended.status_code == 200
    assert body["status"] == "CLOSED"
    assert body["notes"] == "sprint planning"
    assert body["durationSeconds"] == 4 * 3600 + 1800
    assert body["totalBreakSeconds"] == 1800
    assert body["workedSeconds"] == 4 * 3600

    current = client.get(f"{BASE}/sessions/current").get_json()
    assert current == {"session": None, "state": "IDLE"}


def test_conflict_and_not_found_errors(client, login):
    login("u1")

    assert client.post(f"{BASE}/sessions/end").status_code == 404
    assert client.post(f"{BASE}/breaks/start").status_code == 409
    client.post(f"{BASE}/sessions/start")
    resp = client.post(f"{BASE}/sessions/start")

    assert resp.status_code == 409
    assert resp.get_json()["kind"] == "ConflictError"


def test_malformed_body_is_rejected(client, login):
    login("u1")

    resp = client.post(f"{BASE}/sessions/start", data="[1, 2]", content_type="application/json")

    assert resp.status_code == 400
    assert resp.get_json()["kind"] == "ValidationError"


def test_active_sessions_require_permission(client, login):
    login("u1")
    client.post(f"{BASE}/sessions/start")

    assert client.get(f"{BASE}/sessions/active/all").status_code == 403

    login("u9", role="manager")
    body = client.get(f"{BASE}/sessions/active/all?searchTerm=alice").get_json()
    assert body["total"] == 1
    assert body["items"][0]["user"]["fullName"] == "Alice Nowak"


def test_session_history_envelope(client, login, clock):
    login("u1")
    for _ in range(3):
        client.post(f"{BASE}/sessions/start")
        clock.advance(hours=1)
        client.post(f"{BASE}/sessions/end")
        clock.advance(hours=1)

    body = client.get(f"{BASE}/sessions?page=1&limit=2&status=completed").get_json()

    assert body["total"] == 3
    assert body["pages"] == 2
    assert body["page"] == 1
    assert body["limit"] == 2
    assert len(body["items"]) == 2
    assert client.get(f"{BASE}/sessions?status=bogus").status_code == 400
    assert client.get(f"{BASE}/sessions?limit=500").status_code == 400


def test_session_history_date_filter(client, login):
    login("u1")
    client.post(f"{BASE}/sessions/start")

    assert client.get(f"{BASE}/sessions?from=2026-02-02&to=2026-02-02").get_json()["total"] == 1
    assert client.get(f"{BASE}/sessions?from=2026-02-03").get_json()["total"] == 0
    assert client.get(f"{BASE}/sessions?from=02/02/2026").status_code == 400


def test_other_users_history(client, login):
    login("u2")
    client.post(f"{BASE}/sessions/start")

    login("u1")
    assert client.get(f"{BASE}/sessions/user/u2").status_code == 403

    login("u9", role="admin")
    assert client.get(f"{BASE}/sessions/user/u2").get_json()["total"] == 1
    assert client.get(f"{BASE}/sessions/user/nobody").status_code == 404


def test_notes_endpoint(client, login):
    login("u1")
    session_id = client.post(f"{BASE}/sessions/start").get_json()["id"]

    resp = client.put(f"{BASE}/sessions/{session_id}/notes", json={"notes": "pairing with Bob"})
    assert resp.status_code == 200
    assert resp.get_json()["notes"] == "pairing with Bob"

    assert client.put(f"{BASE}/sessions/{session_id}/notes", json={}).status_code == 400
    assert client.put(f"{BASE}/sessions/9999/notes", json={"notes": "x"}).status_code == 403

    login("u2")
    assert client.put(f"{BASE}/sessions/{session_id}/notes", json={"notes": "x"}).status_code == 403

    login("boss", role="manager")
    assert client.put(f"{BASE}/sessions/9999/notes", json={"notes": "x"}).status_code == 404
    assert client.put(f"{BASE}/sessions/{session_id}/notes", json={"notes": "reviewed"}).status_code == 200


def test_daily_summaries(client, login, clock):
    login("u1")
    clock.set(datetime(2026, 2, 10, 23, 0, tzinfo=UTC))
    client.post(f"{BASE}/sessions/start")
    clock.set(datetime(2026, 2, 11, 1, 0, tzinfo=UTC))
    client.post(f"{BASE}/sessions/end")

    body = client.get(f"{BASE}/daily-summaries?year=2026&month=2").get_json()

    assert body["userId"] == "u1"
    assert len(body["items"]) == 28
    by_date = {item["date"]: item for item in body["items"]}
    assert by_date["2026-02-10"]["workedSeconds"] == 3600
    assert by_date["2026-02-11"]["workedSeconds"] == 3600
    assert by_date["2026-02-11"]["workedHours"] == "01:00"

    assert client.get(f"{BASE}/daily-summaries?userId=u2").status_code == 403
    assert client.get(f"{BASE}/daily-summaries?month=13").status_code == 400


def test_settings_endpoints(client, login):
    login("u1")
    assert client.get(f"{BASE}/settings").get_json()["effective"]["timezone"] == "UTC"
    assert client.put(f"{BASE}/settings", json={"roundingMinutes": 15}).status_code == 403

    login("admin", role="admin")
    resp = client.put(f"{BASE}/settings", json={"roundingMinutes": 15, "timezone": "Europe/Warsaw"})
    assert resp.status_code == 200
    assert resp.get_json()["effective"]["roundingMinutes"] == 15

    resp = client.put(f"{BASE}/settings", json={"userId": "u2", "timezone": "Asia/Tokyo"})
    assert resp.get_json()["effective"]["timezone"] == "Asia/Tokyo"
    assert client.put(f"{BASE}/settings", json={"colour": "red"}).status_code == 400
    assert client.put(f"{BASE}/settings", json={"userId": "nobody", "roundingMinutes": 5}).status_code == 404

    login("u2")
    body = client.get(f"{BASE}/settings").get_json()
    assert body["global"]["timezone"] == "Europe/Warsaw"
    assert body["effective"]["timezone"] == "Asia/Tokyo"


def test_report_endpoint(client, login, clock):
    login("u1")
    client.post(f"{BASE}/sessions/start")
    clock.advance(hours=3)
    client.post(f"{BASE}/sessions/end")

    own = client.post(
        f"{BASE}/report", json={"userIds": ["u1"], "startDate": "2026-02-01", "endDate": "2026-02-03"}
    )
    assert own.status_code == 200
    body = own.get_json()
    assert body["users"]["u1"]["username"] == "alice"
    assert [row["date"] for row in body["report"]["u1"]] == ["2026-02-01", "2026-02-02", "2026-02-03"]
    assert body["totals"]["u1"]["workedSeconds"] == 3 * 3600

    others = {"userIds": ["u1", "u2"], "startDate": "2026-02-01", "endDate": "2026-02-03"}
    assert client.post(f"{BASE}/report", json=others).status_code == 403

    login("boss", role="manager")
    assert client.post(f"{BASE}/report", json=others).status_code == 200
    bad_range = {"userIds": ["u1"], "startDate": "2026-02-03", "endDate": "2026-02-01"}
    assert client.post(f"{BASE}/report", json=bad_range).status_code == 400
    too_long = {"userIds": ["u1"], "startDate": "2026-01-01", "endDate": "2026-12-31"}
    assert client.post(f"{BASE}/report", json=too_long).status_code == 400
    unknown = {"userIds": ["ghost"], "startDate": "2026-02-01", "endDate": "2026-02-01"}
    assert client.post(f"{BASE}/report", json=unknown).status_code == 404
    assert client.post(f"{BASE}/report", json={"userIds": "u1"}).status_code == 400


def test_own_report_with_padded_id(client, login):
    login("u1")

    resp = client.post(
        f"{BASE}/report", json={"userIds": [" u1 ", "u1"], "startDate": "2026-02-01", "endDate": "2026-02-01"}
    )

    assert resp.status_code == 200
    assert list(resp.get_json()["report"]) == ["u1"]
    blank = {"userIds": ["  "], "startDate": "2026-02-01", "endDate": "2026-02-01"}
    assert client.post(f"{BASE}/report", json=blank).status_code == 400


def test_end_session_rejects_non_string_notes(client, login):
    login("u1")
    client.post(f"{BASE}/sessions/start")

    resp = client.post(f"{BASE}/sessions/end", json={"notes": 42})

    assert resp.status_code == 400
    assert resp.get_json()["kind"] == "ValidationError"
    assert client.get(f"{BASE}/sessions/current").get_json()["state"] == "WORKING"


def test_report_export(client, login):
    login("u1")

    resp = client.post(
        f"{BASE}/report/export", json={"userIds": ["u1"], "startDate": "2026-02-01", "endDate": "2026-02-02"}
    )

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "time_report_20260201_20260202.csv" in resp.headers["Content-Disposition"]
    lines = resp.data.decode("utf-8-sig").strip().splitlines()
    assert lines[0].startswith("user_id,full_name")
    assert len(lines) == 3


def test_unknown_route_uses_error_envelope(client):
    resp = client.get(f"{BASE}/nope")

    assert resp.status_code == 404
    assert resp.get_json()["success"] is False
