import pytest
from fastapi.testclient import TestClient
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from api import server
from api.server import app
from store.database import MemoryStore
from workflow import accounts

client = TestClient(app)


@pytest.fixture(autouse=True)
def memory_store(monkeypatch):
    """Every test gets a fresh in-memory store."""
    fresh = MemoryStore()
    monkeypatch.setattr(server, "store", fresh)
    return fresh


def post_reading(bin_id, level, distance=20, **extra):
    return client.post(f"/api/bins/{bin_id}/update-level",
                       json={"level": level, "distance": distance, **extra})


# ── Health ────────────────────────────────────────────────────────────────

def test_health_check():
    """Health is served both at the root and under the API prefix."""
    for path in ("/health", "/api/health"):
        response = client.get(path)
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["storeConnected"] is True
        assert data["backend"] == "memory"


def test_health_reports_store_outage(memory_store):
    memory_store.online = False
    data = client.get("/api/health").json()
    assert data["store"] == "disconnected"


def test_esp32_health_lists_endpoints():
    data = client.get("/api/esp32/health").json()
    assert data["status"] == "OK"
    assert data["endpoints"]["updateLevel"] == "/api/bins/{binId}/update-level"


def test_unknown_route():
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    assert response.json() == {"error": "route_not_found"}


# ── Sensor ingest ─────────────────────────────────────────────────────────

def test_update_level_then_read_back():
    response = post_reading("dhw001", 85, 20)
    assert response.status_code == 200
    assert response.json()["bin"]["binId"] == "DHW001"

    realtime = client.get("/api/bins/DHW001/realtime").json()
    assert realtime["level"] == 85
    assert realtime["distance"] == 20

    listed = client.get("/api/bins").json()
    assert [b["binId"] for b in listed] == ["DHW001"]


@pytest.mark.parametrize("body, code", [
    ({"level": 150, "distance": 20}, "invalid_level"),
    ({"level": -3, "distance": 20}, "invalid_level"),
    ({"distance": 20}, "missing_level"),
    ({"level": 50, "distance": -1}, "invalid_distance"),
    ({"level": 50}, "missing_distance"),
])
def test_update_level_validation(memory_store, body, code):
    response = client.post("/api/bins/DHW001/update-level", json=body)
    assert response.status_code == 400
    assert response.json() == {"error": code}
    assert memory_store.count("bin") == 0


def test_update_level_store_down(memory_store):
    memory_store.online = False
    response = post_reading("DHW001", 50)
    assert response.status_code == 503
    assert response.json() == {"error": "store_unavailable"}


def test_low_battery_reading_flags_sensor():
    bin_doc = post_reading("DHW002", 40, 60, battery=9).json()["bin"]
    assert bin_doc["sensorStatus"] == "warning"
    assert bin_doc["sensorData"]["batteryLevel"] == 9


# ── Bins ──────────────────────────────────────────────────────────────────

def test_create_bin_and_conflict():
    body = {
        "binId": "dhw100",
        "location": {"latitude": 6.85, "longitude": 79.87, "address": "Station Road"},
        "type": "Recyclable",
    }
    response = client.post("/api/bins", json=body)
    assert response.status_code == 201
    created = response.json()["bin"]
    assert created["binId"] == "DHW100"
    assert created["area"] == "Station Road"
    assert created["level"] == 0

    again = client.post("/api/bins", json=body)
    assert again.status_code == 409
    assert again.json() == {"error": "bin_exists"}


def test_create_bin_missing_id():
    response = client.post("/api/bins", json={"location": {}})
    assert response.status_code == 400
    assert response.json() == {"error": "missing_binId"}


def test_create_bin_blank_id(memory_store):
    response = client.post("/api/bins", json={
        "binId": "   ",
        "location": {"latitude": 6.85, "longitude": 79.87, "address": "Station Road"},
    })
    assert response.status_code == 400
    assert response.json() == {"error": "invalid_binId"}
    assert memory_store.count("bin") == 0


def test_get_missing_bin():
    response = client.get("/api/bins/NOPE")
    assert response.status_code == 404
    assert response.json() == {"error": "bin_not_found"}


def test_collect_bin():
    post_reading("DHW003", 95)
    response = client.post("/api/bins/DHW003/collect")
    assert response.status_code == 200
    assert response.json()["bin"]["lastCollected"] is not None


def test_read_paths_fall_back_when_store_down(memory_store):
    memory_store.online = False
    listed = client.get("/api/bins")
    assert listed.status_code == 200
    assert len(listed.json()) == 6
    assert client.get("/api/bins/DHW001").json()["binId"] == "DHW001"
    assert client.get("/api/bins/DHW001/realtime").json()["status"] == "demo_mode"
    assert client.get("/api/reports").json() == []
    assert client.get("/api/notices").json()[0]["id"] == "sample1"
    assert client.get("/api/analytics/dashboard").status_code == 200


# ── Reports ───────────────────────────────────────────────────────────────

def test_report_lifecycle():
    response = client.post("/api/reports", json={
        "reportType": "bin_full", "description": "Overflowing", "binId": "dhw001",
    })
    assert response.status_code == 201
    report = response.json()["report"]
    assert report["status"] == "pending"

    pending = client.get("/api/reports", params={"status": "pending"}).json()
    assert [r["id"] for r in pending] == [report["id"]]

    resolved = client.patch(f"/api/reports/{report['id']}/resolve",
                            json={"resolvedBy": "admin-1"}).json()["report"]
    assert resolved["status"] == "resolved"
    assert resolved["resolvedBy"] == "admin-1"
    assert resolved["resolvedAt"] is not None


def test_resolve_without_body_uses_system_resolver():
    report = client.post("/api/reports", json={
        "reportType": "other", "description": "x",
    }).json()["report"]
    resolved = client.patch(f"/api/reports/{report['id']}/resolve").json()["report"]
    assert resolved["resolvedBy"] == "system"


def test_report_errors():
    response = client.post("/api/reports", json={"reportType": "bin_full"})
    assert response.status_code == 400
    assert response.json() == {"error": "missing_description"}

    response = client.patch("/api/reports/64b7f0000000000000000000/resolve")
    assert response.status_code == 404
    assert response.json() == {"error": "report_not_found"}

    response = client.get("/api/reports", params={"status": "archived"})
    assert response.status_code == 400


# ── Notices ───────────────────────────────────────────────────────────────

def test_notice_publish_and_list():
    for title, priority in [("Routine", "low"), ("Storm", "urgent")]:
        response = client.post("/api/notices", json={
            "title": title, "content": "details", "priority": priority, "adminId": "admin-1",
        })
        assert response.status_code == 201
    titles = [n["title"] for n in client.get("/api/notices").json()]
    assert titles == ["Storm", "Routine"]


def test_notice_missing_title():
    response = client.post("/api/notices", json={"content": "no title"})
    assert response.status_code == 400
    assert response.json() == {"error": "missing_title"}


# ── Auth ──────────────────────────────────────────────────────────────────

def test_register_and_login():
    response = client.post("/api/auth/register", json={
        "email": "resident@dhmc.lk", "password": "pw-123", "name": "Resident",
    })
    assert response.status_code == 201

    again = client.post("/api/auth/register", json={
        "email": "resident@dhmc.lk", "password": "pw-123", "name": "Resident",
    })
    assert again.status_code == 409
    assert again.json() == {"error": "user_exists"}

    ok = client.post("/api/auth/login", json={"email": "resident@dhmc.lk", "password": "pw-123"})
    assert ok.status_code == 200
    assert ok.json()["user"]["userType"] == "public"

    bad = client.post("/api/auth/login", json={"email": "resident@dhmc.lk", "password": "nope"})
    assert bad.status_code == 401
    assert bad.json() == {"error": "invalid_credentials"}

    admin = client.post("/api/auth/login", json={
        "email": "resident@dhmc.lk", "password": "pw-123", "userType": "admin",
    })
    assert admin.status_code == 403


def test_admin_login(memory_store):
    accounts.seed_admin(memory_store, "admin@dhmc.lk", "admin-pw", "Admin")
    response = client.post("/api/auth/login", json={
        "email": "admin@dhmc.lk", "password": "admin-pw", "userType": "admin",
    })
    assert response.status_code == 200
    assert response.json()["user"]["userType"] == "admin"


# ── Analytics & seeding ───────────────────────────────────────────────────

def test_seed_defaults_and_dashboard(memory_store):
    assert server.seed_defaults(memory_store) == 6
    data = client.get("/api/analytics/dashboard").json()
    assert data["bins"]["total"] == 6
    assert sum(data["bins"]["tiers"].values()) == 6
    assert data["reports"]["total"] == 0


def test_startup_prepares_store_off_the_event_loop(memory_store):
    with TestClient(app) as started:
        assert started.get("/api/health").status_code == 200
    assert memory_store.count("bin") == 6


def test_prepare_store_skips_unreachable_store(memory_store):
    memory_store.online = False
    assert server.prepare_store(memory_store) is None
    memory_store.online = True
    assert memory_store.count("bin") == 0
