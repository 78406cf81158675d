import pytest
from fastapi.testclient import TestClient

from src.feed.models import OverlayConfig
from src.overlay import server
from src.overlay.renderer import OverlayClosingError, StateRenderer


def test_state_renderer_publishes_widget():
    state = {}
    renderer = StateRenderer(state)
    renderer.on_show(OverlayConfig.from_extra({"url": "a.test", "opacity": "0.5", "durationMs": 3000}))
    widget = state["widget"]
    assert widget["id"] == 1
    assert widget["url"] == "a.test"
    assert widget["opacity"] == pytest.approx(50.0)
    assert widget["duration_ms"] == 3000

    renderer.on_hide()
    assert state["widget"] is None


def test_state_renderer_ids_increase():
    state = {}
    renderer = StateRenderer(state)
    renderer.on_show(OverlayConfig(url="a.test"))
    renderer.on_hide()
    renderer.on_show(OverlayConfig(url="b.test"))
    assert state["widget"]["id"] == 2


def test_state_renderer_rejects_empty_url():
    state = {}
    with pytest.raises(ValueError):
        StateRenderer(state).on_show(OverlayConfig())
    assert state.get("widget") is None


def test_state_renderer_hide_twice():
    state = {}
    renderer = StateRenderer(state)
    renderer.on_show(OverlayConfig(url="a.test"))
    renderer.on_hide()
    with pytest.raises(OverlayClosingError):
        renderer.on_hide()


def test_api_state(monkeypatch):
    state = {"widget": None, "connection": {"state": "connected", "text": "Connected"}}
    monkeypatch.setattr(server, "overlay_state", state)
    client = TestClient(server.app)

    data = client.get("/api/state").json()
    assert data == {"widget": None, "connection": {"state": "connected", "text": "Connected"}}

    StateRenderer(state).on_show(OverlayConfig(url="a.test"))
    data = client.get("/api/state").json()
    assert data["widget"]["url"] == "a.test"
    assert data["widget"]["content_zoom"] == 1.0


def test_overlay_page():
    client = TestClient(server.app)
    response = client.get("/")
    assert response.status_code == 200
    assert "/api/state" in response.text
