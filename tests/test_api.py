"""
Tests for FastAPI Routes
========================

Tests for:
- Health endpoints
- Announcement endpoints
- Mode endpoints
"""

import time

import pytest
from fastapi.testclient import TestClient

from a11y_announcer.main import app


def wait_for(condition, timeout: float = 1.0) -> bool:
    """Poll until the lifespan's event loop has done its work."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.005)
    return condition()


@pytest.fixture
def client(service):
    """Test client whose lifespan starts the fixture service."""
    app.state.service = service
    with TestClient(app) as client:
        yield client
    app.state.service = None


class TestHealthRoutes:
    def test_health_check(self):
        response = TestClient(app).get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data

    def test_liveness_check(self):
        response = TestClient(app).get("/health/live")

        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_readiness_without_service(self):
        app.state.service = None
        response = TestClient(app).get("/health/ready")

        assert response.status_code == 503

    def test_readiness_with_service(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert all(data["checks"].values())

    def test_service_info(self, client):
        response = client.get("/health/info")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "a11y-announcer"
        assert "version" in data
        assert data["status"]["mode"] == "unknown"


class TestRootEndpoint:
    def test_root(self):
        response = TestClient(app).get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "A11y Announcer"
        assert "version" in data


class TestAnnouncementRoutes:
    def test_service_unavailable(self):
        app.state.service = None
        response = TestClient(app).post("/announcements", json={"text": "hi"})

        assert response.status_code == 503

    def test_speak_dialogue(self, client, speech_sink):
        response = client.post(
            "/announcements",
            json={"text": "<b>Hold it!</b>", "speaker": "Phoenix", "category": "dialogue"},
        )

        assert response.status_code == 200
        assert response.json() == {"delivered": True}
        assert speech_sink.texts == ["Phoenix: Hold it!"]

    def test_duplicate_suppressed(self, client):
        client.post("/announcements", json={"text": "Saved"})
        response = client.post("/announcements", json={"text": "Saved"})

        assert response.json() == {"delivered": False}

    def test_blank_text(self, client, speech_sink):
        response = client.post("/announcements", json={"text": "   "})

        assert response.json() == {"delivered": False}
        assert speech_sink.texts == []

    def test_unknown_category(self, client):
        response = client.post("/announcements", json={"text": "x", "category": "telepathy"})

        assert response.status_code == 422

    def test_unknown_channel(self, client):
        response = client.post("/announcements", json={"text": "x", "channel": "braille"})

        assert response.status_code == 422

    def test_queue_channel_drains_to_clipboard(self, client, clipboard_sink):
        response = client.post(
            "/announcements",
            json={"text": "Evidence: Badge", "category": "evidence", "channel": "queue"},
        )

        assert response.json() == {"delivered": True}
        assert wait_for(lambda: clipboard_sink.texts == ["Evidence: Badge"])
        stats = client.get("/announcements/queue").json()
        assert stats == {"pending": 0, "delivered": 1, "dropped": 0}

    def test_clear_queue(self, service):
        # Without the lifespan the drain loop is not running
        app.state.service = service
        service.queue.enqueue("a")
        service.queue.enqueue("b")
        response = TestClient(app).delete("/announcements/queue")
        app.state.service = None

        assert response.status_code == 200
        assert response.json() == {"cleared": 2}

    def test_repeat(self, client, speech_sink):
        client.post("/announcements", json={"text": "Nick!", "speaker": "Maya", "category": "dialogue"})
        response = client.post("/announcements/repeat")

        assert response.json() == {"delivered": True}
        assert speech_sink.texts == ["Maya: Nick!", "Maya: Nick!"]

    def test_repeat_nothing(self, client, speech_sink):
        response = client.post("/announcements/repeat", params={"channel": "queue"})

        assert response.json() == {"delivered": False}

    def test_delayed(self, client, speech_sink):
        response = client.post("/announcements/delayed", json={"text": "Later", "delay": 0.01})

        assert response.status_code == 200
        assert response.json()["generation"] >= 1
        assert wait_for(lambda: speech_sink.texts == ["Later"])

    def test_cancel_delayed(self, client, speech_sink):
        client.post("/announcements/delayed", json={"text": "Never", "delay": 5})
        response = client.delete("/announcements/delayed")

        assert response.json() == {"delivered": True}
        assert speech_sink.texts == []

    def test_delay_out_of_range(self, client):
        response = client.post("/announcements/delayed", json={"text": "x", "delay": -1})

        assert response.status_code == 422


class TestModeRoutes:
    def test_current(self, client):
        response = client.get("/modes/current")

        assert response.status_code == 200
        assert response.json() == {"mode": "unknown", "coarse_mode": "unknown"}

    def test_set_coarse(self, client, speech_sink):
        response = client.put("/modes/coarse", json={"mode": "trial"})

        assert response.json()["coarse_mode"] == "trial"
        client.post("/modes/state")
        assert speech_sink.texts == ["Trial mode"]

    def test_invalid_coarse(self, client):
        response = client.put("/modes/coarse", json={"mode": "space"})

        assert response.status_code == 422

    def test_flags(self, client, speech_sink):
        response = client.put(
            "/modes/flags/puzzle",
            json={"active": True, "state": "Piece 3 of 8 selected"},
        )

        assert response.json()["mode"] == "puzzle"
        client.post("/modes/state")
        assert speech_sink.texts == ["Piece 3 of 8 selected"]

    def test_unknown_flag(self, client):
        response = client.put("/modes/flags/luminol", json={"active": True})

        assert response.status_code == 404

    def test_key_press(self, client, speech_sink):
        client.post("/announcements", json={"text": "Story", "category": "narrator"})
        response = client.post("/modes/keys/R")

        assert response.json() == {"handled": True}
        assert speech_sink.texts == ["Story", "Story"]

    def test_unbound_key(self, client):
        response = client.post("/modes/keys/q")

        assert response.json() == {"handled": False}
