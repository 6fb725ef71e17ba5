import math
import os
import uuid
from datetime import datetime, timedelta, timezone

from runconquer.core.constants import EARTH_RADIUS_M
from runconquer.core.errors import PersistenceError

T0 = datetime.now(timezone.utc).replace(microsecond=0) - timedelta(hours=1)


def get_client():
    # Use in-memory sqlite for tests
    os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
    # Import after env is set so engine is created with sqlite
    from runconquer.main import app  # noqa: WPS433
    from fastapi.testclient import TestClient  # noqa: WPS433
    return TestClient(app)


def fix(meters_north, t, speed=3.0):
    return {
        "latitude": 48.85 + math.degrees(meters_north / EARTH_RADIUS_M),
        "longitude": 2.35,
        "speed": speed,
        "timestamp": (T0 + timedelta(seconds=t)).isoformat(),
    }


def create_user(client):
    r = client.post(
        "/users/",
        json={"username": f"runner-{uuid.uuid4().hex[:8]}", "email": "runner@example.com"},
    )
    assert r.status_code == 201, r.text
    return r.json()


def run_payload(meters=1200, duration=600):
    # 10 m steps, one every 5 s, plus a jittery and a too-fast fix
    steps = int(meters // 10)
    fixes = [fix(i * 10, i * 5) for i in range(steps + 1)]
    fixes.insert(3, fix(20.5, 11))
    fixes.insert(6, fix(500, 22, speed=30.0))
    return {
        "start_time": T0.isoformat(),
        "end_time": (T0 + timedelta(seconds=duration)).isoformat(),
        "duration": duration,
        "segments": [fixes],
    }


def test_root_ok():
    client = get_client()
    r = client.get("/")
    assert r.status_code == 200
    data = r.json()
    assert "message" in data
    assert client.get("/health").json()["status"] == "OK"


def test_create_user_and_duplicate():
    client = get_client()
    user = create_user(client)
    assert user["level"] == 1
    assert user["next_level_xp"] == 100

    r = client.post("/users/", json={"username": user["username"], "email": "x@example.com"})
    assert r.status_code == 409

    r = client.post("/users/", json={"username": "bad-email", "email": "nope"})
    assert r.status_code == 422


def test_submit_run_end_to_end():
    client = get_client()
    user = create_user(client)
    uid = user["id"]

    r = client.post(f"/users/{uid}/runs/", json=run_payload())
    assert r.status_code == 200, r.text
    result = r.json()
    assert result["recorded"] is True
    run = result["run"]
    assert abs(run["distance"] - 1200) < 1e-3
    assert run["duration"] == 600
    assert run["xp_earned"] == 12010
    assert run["pace"] == "8:20"
    assert run["distance_display"] == "1.20km"
    assert abs(result["territory"]["radius"] - 120) < 1e-4
    assert {a["id"] for a in result["unlocked"]} == {"first_run", "dist_1k", "territory_1"}
    assert result["profile"]["level"] == 11

    # list
    lr = client.get(f"/users/{uid}/runs/")
    assert lr.status_code == 200
    assert [r["id"] for r in lr.json()] == [run["id"]]
    assert client.get(f"/users/{uid}/runs/{run['id']}").json()["id"] == run["id"]
    assert client.get(f"/users/{uid}/runs/missing").status_code == 404

    territories = client.get(f"/users/{uid}/territories/").json()
    assert len(territories) == 1

    achievements = client.get(f"/users/{uid}/achievements/").json()
    assert len(achievements) == 14
    assert sum(1 for a in achievements if a["unlocked_at"]) == 3

    stats = client.get(f"/users/{uid}/runs/stats").json()
    assert stats["total_runs"] == 1
    assert abs(stats["weekly_distance"] - 1200) < 1e-3
    assert stats["weekly_runs"] == 1
    assert abs(stats["daily_distance"][6] - 1200) < 1e-3


def test_sub_threshold_run_changes_nothing():
    client = get_client()
    uid = create_user(client)["id"]

    payload = {
        "start_time": T0.isoformat(),
        "end_time": (T0 + timedelta(seconds=5)).isoformat(),
        "duration": 5,
        "segments": [[fix(0, 0), fix(5, 5)]],
    }
    r = client.post(f"/users/{uid}/runs/", json=payload)
    assert r.status_code == 200
    assert r.json() == {"recorded": False, "run": None, "territory": None, "unlocked": [], "profile": None}

    assert client.get(f"/users/{uid}/runs/").json() == []
    assert client.get(f"/users/{uid}/territories/").json() == []
    assert client.get(f"/users/{uid}").json()["total_runs"] == 0


def test_unknown_user_is_404():
    client = get_client()
    assert client.get("/users/nobody").status_code == 404
    assert client.post("/users/nobody/runs/", json=run_payload()).status_code == 404


def test_persistence_failure_is_surfaced(monkeypatch):
    from runconquer.services import store

    client = get_client()
    uid = create_user(client)["id"]

    def boom(db, outcome):
        raise PersistenceError("store unavailable")

    monkeypatch.setattr(store, "save_outcome", boom)
    r = client.post(f"/users/{uid}/runs/", json=run_payload())
    assert r.status_code == 503

    monkeypatch.undo()
    assert client.get(f"/users/{uid}").json()["total_runs"] == 0


def test_import_gpx():
    client = get_client()
    uid = create_user(client)["id"]

    points = "".join(
        f'<trkpt lat="{48.85 + math.degrees(i * 8 / EARTH_RADIUS_M)}" lon="2.35">'
        f"<time>{(T0 + timedelta(seconds=i * 3)).strftime('%Y-%m-%dT%H:%M:%SZ')}</time></trkpt>"
        for i in range(40)
    )
    gpx = (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1">'
        f"<trk><trkseg>{points}</trkseg></trk></gpx>"
    )
    r = client.post(
        f"/users/{uid}/runs/import",
        files={"file": ("morning.gpx", gpx.encode(), "application/gpx+xml")},
    )
    assert r.status_code == 200, r.text
    result = r.json()
    assert result["recorded"] is True
    assert result["run"]["duration"] == 117
    assert abs(result["run"]["distance"] - 312) < 1.0

    r = client.post(
        f"/users/{uid}/runs/import",
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )
    assert r.status_code == 400


def test_verification_flow():
    from runconquer.services.verification import verification_codes

    client = get_client()
    r = client.post("/auth/send-verification", json={"email": "new@example.com"})
    assert r.status_code == 200
    code = verification_codes.pending("new@example.com").code

    r = client.post("/auth/verify", json={"email": "new@example.com", "code": code})
    assert r.status_code == 200
    token = r.json()["token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json() == {"email": "new@example.com"}
    assert client.get("/auth/me").status_code == 401

    # single use
    r = client.post("/auth/verify", json={"email": "new@example.com", "code": code})
    assert r.status_code == 400
