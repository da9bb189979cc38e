# tests
import pytest

from napalert.models import Sensitivity
from napalert.session import DetectionSession
from napalert.web.app import create_app


class StubStateMachine:
    """Records commands and serves a session snapshot."""

    def __init__(self):
        self.session = DetectionSession()
        self.commands = []

    def get_status(self):
        return self.session.snapshot()

    def start_detection(self):
        self.commands.append("start")
        self.session.start()

    def stop_detection(self):
        self.commands.append("stop")
        self.session.stop()

    def set_sensitivity(self, level):
        self.commands.append(("sensitivity", level))
        self.session.set_sensitivity(level)


@pytest.fixture
def state_machine():
    return StubStateMachine()


@pytest.fixture
def client(config, state_machine):
    app = create_app(config, state_machine)
    app.config["TESTING"] = True
    return app.test_client()


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["status"] == "ok"
    assert data["mock_mode"] is True


def test_status(client, state_machine):
    state_machine.session.start()
    for _ in range(10):
        state_machine.session.on_heart_rate(70)

    data = client.get("/api/status").get_json()

    assert data["detection"]["active"] is True
    assert data["detection"]["phase"] == "monitoring"
    assert data["baseline"]["value"] == 70
    assert data["vitals"]["heart_rate"] == 70


def test_status_without_state_machine(config):
    client = create_app(config).test_client()
    assert client.get("/api/status").status_code == 503


def test_toggle_detection(client, state_machine):
    assert client.post("/api/detection", json={"enabled": True}).status_code == 200
    assert client.post("/api/detection", json={"enabled": False}).status_code == 200
    assert state_machine.commands == ["start", "stop"]


def test_toggle_requires_boolean(client, state_machine):
    assert client.post("/api/detection", json={}).status_code == 400
    assert client.post("/api/detection", json={"enabled": "yes"}).status_code == 400
    assert state_machine.commands == []


def test_get_sensitivity(client):
    data = client.get("/api/sensitivity").get_json()

    assert data["level"] == "medium"
    assert data["threshold"] == 5.0
    assert [l["threshold"] for l in data["levels"]] == [7.0, 5.0, 3.0]


def test_set_sensitivity(client, state_machine):
    resp = client.post("/api/sensitivity", json={"level": "HIGH"})

    assert resp.status_code == 200
    assert resp.get_json()["threshold"] == 3.0
    assert state_machine.commands == [("sensitivity", Sensitivity.HIGH)]


def test_set_invalid_sensitivity(client, state_machine):
    assert client.post("/api/sensitivity", json={"level": "max"}).status_code == 400
    assert client.post("/api/sensitivity", data="not json").status_code == 400
    assert state_machine.commands == []
