from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

import checkin.main as main
import checkin.routers.core as core

START = "2025-01-01T08:00:00Z"
SESSION = {"start": START, "on_time_minutes": 15, "late_minutes": 10}


@pytest.fixture()
def client():
    with TestClient(main.app) as c:
        yield c


def _instant(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_attendance_config(client, monkeypatch):
    monkeypatch.setattr(core, "DEFAULT_ON_TIME_MINUTES", 15)
    monkeypatch.setattr(core, "DEFAULT_LATE_MINUTES", 10)
    monkeypatch.setattr(core, "QR_PERIOD_SECONDS", 20)
    monkeypatch.setattr(core, "ASSUME_TZ", timezone.utc)

    res = client.get("/config/attendance")
    assert res.status_code == 200
    assert res.json() == {
        "default_on_time_minutes": 15,
        "default_late_minutes": 10,
        "qr_period_seconds": 20,
        "assume_tz": "UTC",
    }


def test_evaluate_window(client):
    res = client.post(
        "/window/evaluate",
        json={**SESSION, "now": "2025-01-01T08:15:00Z"},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["phase"] == "late"
    assert body["can_check_in"] is True
    assert body["seconds_to_next_boundary"] == 600
    assert _instant(body["on_time_end"]) == datetime(2025, 1, 1, 8, 15, tzinfo=timezone.utc)
    assert _instant(body["closed_at"]) == datetime(2025, 1, 1, 8, 25, tzinfo=timezone.utc)


def test_evaluate_invalid_start_is_not_an_error(client):
    res = client.post("/window/evaluate", json={"start": "soon", "now": "2025-01-01T08:15:00Z"})
    assert res.status_code == 200
    body = res.json()
    assert body["phase"] == "invalid"
    assert body["can_check_in"] is False
    assert body["seconds_to_next_boundary"] is None


def test_evaluate_rejects_unparseable_now(client):
    res = client.post("/window/evaluate", json={**SESSION, "now": "yesterday-ish"})
    assert res.status_code == 422


def test_resolve_session_window(client):
    res = client.post(
        "/window/from-session",
        json={
            "start": START,
            "on_time_until": "2025-01-01T08:10:00Z",
            "close_at": "2025-01-01T08:30:00Z",
        },
    )
    assert res.status_code == 200
    body = res.json()
    assert body["on_time_minutes"] == 10
    assert body["late_minutes"] == 20


def test_attendance_status_absent_after_close(client):
    res = client.post(
        "/attendance/status",
        json={"session": SESSION, "now": "2025-01-01T08:30:00Z"},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "absent"
    assert body["label"] == "Absent"
    assert body["phase"] == "closed"
    assert body["can_check_in"] is False


def test_attendance_status_recorded_outcome(client):
    res = client.post(
        "/attendance/status",
        json={"session": SESSION, "record": "late", "now": "2025-01-01T08:18:00Z"},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "late"
    assert body["phase"] == "late"
    assert body["can_check_in"] is False


def test_attendance_status_pending_can_check_in(client):
    res = client.post(
        "/attendance/status",
        json={"session": SESSION, "now": "2025-01-01T08:05:00Z"},
    )
    body = res.json()
    assert body["status"] == "pending"
    assert body["can_check_in"] is True


def test_attendance_roster(client):
    res = client.post(
        "/attendance/roster",
        json={
            "session": SESSION,
            "now": "2025-01-01T08:10:00Z",
            "entries": [
                {"student_id": "a", "record": "dung_gio", "checked_in_at": "2025-01-01T08:02:00Z"},
                {"student_id": "b"},
            ],
        },
    )
    assert res.status_code == 200
    body = res.json()
    assert body["phase"] == "ontime"
    assert body["total"] == 2
    assert body["counts"]["ontime"] == 1
    assert body["counts"]["pending"] == 1


def test_attendance_roster_requires_student_id(client):
    res = client.post(
        "/attendance/roster",
        json={"session": SESSION, "entries": [{"record": "late"}]},
    )
    assert res.status_code == 422


def test_minutes_late(client):
    res = client.post(
        "/attendance/minutes-late",
        json={"checked_in_at": "2025-01-01T08:20:30Z", "start": START, "threshold_minutes": 15},
    )
    assert res.status_code == 200
    assert res.json() == {"minutes_late": 6}


def test_qr_gate(client):
    res = client.post(
        "/qr/gate",
        json={"session": {**SESSION, "qr_period_seconds": 20}, "now": "2025-01-01T08:05:00Z"},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["gate"] == "open"
    assert body["sub_phase"] == "ontime"
    assert isinstance(body["slot"], int)


def test_qr_gate_rejects_non_positive_period(client):
    res = client.post(
        "/qr/gate",
        json={"session": {**SESSION, "qr_period_seconds": 0}},
    )
    assert res.status_code == 400
    assert res.json()["detail"] == "QR period must be positive."


def test_qr_slot(client):
    res = client.get("/qr/slot", params={"period_seconds": 30})
    assert res.status_code == 200
    body = res.json()
    assert body["period_seconds"] == 30
    assert 1 <= body["refresh_in_seconds"] <= 30

    res = client.get("/qr/slot", params={"period_seconds": -1})
    assert res.status_code == 400
