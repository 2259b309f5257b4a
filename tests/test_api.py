# =============================================================================
# tests/test_api.py - Admin API Tests
# =============================================================================
# This module contains tests for:
# - Health endpoints
# - Active session read/update
# - Provisioning and rollover endpoints
# - Archive listing
# - Error envelopes
#
# Each test gets a fresh in-memory Datastore via dependency overrides.
# =============================================================================

import threading

import pytest
from fastapi.testclient import TestClient

from app.dependencies import get_datastore
from app.main import app
from core.datastore import Datastore
from core.models.module import Module
from core.services.lock_service import LockManager
from lib.backends.memory import MemoryBackend, MemoryConfigStore


@pytest.fixture
def store():
    return Datastore(MemoryConfigStore(), MemoryBackend(), lock=LockManager(timeout_ms=100))


@pytest.fixture
def client(store):
    app.dependency_overrides[get_datastore] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


# =============================================================================
# Health Tests
# =============================================================================

class TestHealth:

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["name"] == "SchoolVault API"

    def test_health(self, client):
        response = client.get("/api/v1/health")

        body = response.json()
        assert response.status_code == 200
        assert body["ok"] is True
        assert body["message"] == "SchoolVault API is online."
        assert body["payload"]["session"] == "2024-25"

    def test_readiness(self, client):
        body = client.get("/api/v1/health/ready").json()

        assert body["ok"] is True
        assert body["payload"]["status"] == "ready"


# =============================================================================
# Session Tests
# =============================================================================

class TestSessions:

    def test_get_active(self, client):
        body = client.get("/api/v1/sessions/active").json()

        assert body == {"ok": True, "payload": {"activeSession": "2024-25"}, "message": ""}

    def test_set_active(self, client, store):
        response = client.put("/api/v1/sessions/active", json={"activeSession": "2025-26"})

        assert response.status_code == 200
        assert response.json()["message"] == "Session updated"
        assert store.directory.get_active_session() == "2025-26"

    def test_set_active_mirrored_in_settings(self, client, store):
        client.put("/api/v1/sessions/active", json={"activeSession": "2025-26"})

        assert store.provisioning.recorded_active_session("2025-26") == "2025-26"

    def test_set_active_busy(self, client, store):
        """A switch while another critical section runs is refused with 409."""
        release, held = threading.Event(), threading.Event()

        def holder():
            with store.lock.critical_section(timeout_ms=1000):
                held.set()
                release.wait(5)

        thread = threading.Thread(target=holder)
        thread.start()
        assert held.wait(5)
        try:
            response = client.put("/api/v1/sessions/active", json={"activeSession": "2025-26"})
        finally:
            release.set()
            thread.join()

        body = response.json()
        assert response.status_code == 409
        assert body["ok"] is False
        assert body["payload"] == {"code": "LOCK_BUSY"}
        assert store.directory.get_active_session() == "2024-25"

    def test_set_active_blank_rejected(self, client, store):
        response = client.put("/api/v1/sessions/active", json={"activeSession": "   "})

        body = response.json()
        assert response.status_code == 400
        assert body["ok"] is False
        assert body["payload"]["code"] == "INVALID_SESSION"
        assert store.directory.get_active_session() == "2024-25"

    def test_set_active_missing_field(self, client):
        response = client.put("/api/v1/sessions/active", json={})

        assert response.status_code == 422
        assert response.json()["payload"]["code"] == "VALIDATION_ERROR"

    def test_provision(self, client, store):
        body = client.post("/api/v1/sessions/provision").json()

        assert body["ok"] is True
        assert body["payload"]["tables"]["FEES"] == ["Collection_Log"]
        assert store.directory.find(Module.FEES, "2024-25") is not None


# =============================================================================
# Rollover Tests
# =============================================================================

class TestRolloverEndpoint:

    def test_rollover(self, client, store):
        ctx = store.context()
        master = store.table(Module.STUDENTS, "Master", ctx, ["Admission No", "Name"])
        store.rows.append(master, ["2024001", "Asha"])

        response = client.post(
            "/api/v1/sessions/rollover",
            json={"newSession": "2025-26", "confirmedBy": "principal"},
        )

        body = response.json()
        assert response.status_code == 200
        assert body["ok"] is True
        assert body["payload"]["state"] == "done"
        assert body["payload"]["new_session"] == "2025-26"
        students = [m for m in body["payload"]["masters"] if m["module"] == "STUDENTS"]
        assert students[0]["rows"] == 1
        assert store.directory.get_active_session() == "2025-26"

    def test_rollover_to_active_session(self, client):
        response = client.post("/api/v1/sessions/rollover", json={"newSession": "2024-25"})

        assert response.status_code == 400
        assert response.json()["payload"]["code"] == "INVALID_SESSION"

    def test_rollover_busy(self, client, store):
        release, held = threading.Event(), threading.Event()

        def holder():
            with store.lock.critical_section(timeout_ms=1000):
                held.set()
                release.wait(5)

        thread = threading.Thread(target=holder)
        thread.start()
        assert held.wait(5)
        try:
            response = client.post("/api/v1/sessions/rollover", json={"newSession": "2025-26"})
        finally:
            release.set()
            thread.join()

        assert response.status_code == 409
        assert response.json()["message"] == "Database busy. Try again later."


# =============================================================================
# Archive Tests
# =============================================================================

class TestArchiveEndpoint:

    def test_list_archive(self, client, store):
        store.archive.record(Module.STUDENTS, "2024001", ["2024001", "Asha"], "clerk", session="2024-25")

        body = client.get("/api/v1/sessions/2024-25/archive").json()

        assert body["ok"] is True
        assert body["payload"][0]["original_id"] == "2024001"
        assert body["payload"][0]["snapshot"] == ["2024001", "Asha"]

    def test_empty_archive(self, client):
        body = client.get("/api/v1/sessions/2030-31/archive").json()

        assert body["payload"] == []
