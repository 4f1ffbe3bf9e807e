"""
Integration tests for the service-mode API.
Runs the real control loop against simulated devices.
"""

import logging
import time

import pytest
from fastapi.testclient import TestClient

from autobacklight.core.config import Settings
from autobacklight.main import create_app

from fakes import FakeBacklight, FakeSensor


def wait_for(predicate, timeout=3.0):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached")
        time.sleep(0.01)


@pytest.fixture
def sim_settings():
    """Settings for a fast loop on simulated devices."""
    return Settings(
        _env_file=None,
        sensor_mode="sim",
        backlight_mode="sim",
        probes=2,
        poll_interval_s=0.01,
        ramp_interval_s=0,
        ramp_step=20,
    )


@pytest.fixture
def fatal_errors():
    return []


@pytest.fixture
def client(sim_settings, fatal_errors):
    app = create_app(sim_settings, on_fatal=fatal_errors.append)
    with TestClient(app) as c:
        yield c


class TestLive:
    """Test the live status endpoint."""

    def test_live_snapshot(self, client):
        body = client.get("/api/live").json()

        assert body["ambient"]["window_capacity"] == 2
        assert set(body) >= {"state", "running", "backlight", "ambient", "decision", "error"}

    def test_loop_converges(self, client):
        """Test the loop drives the simulated backlight to the mapped target."""
        wait_for(lambda: client.get("/api/live").json()["backlight"]["writes"] > 0)
        wait_for(lambda: client.get("/api/live").json()["decision"]["apply"] is False)

        body = client.get("/api/live").json()
        # manual sim value 1000 with ratio 20 is 50% of the ambient scale
        assert body["backlight"]["target"] == 70
        assert body["backlight"]["current"] == 70
        assert body["ambient"]["warm"] is True


class TestSettings:
    def test_settings_and_controller(self, client):
        body = client.get("/api/settings").json()

        assert body["settings"]["sensor_mode"] == "sim"
        assert body["controller"]["max_brightness"] == 100
        assert body["controller"]["min_brightness"] == 40
        assert body["controller"]["sensitivity_unit"] == "absolute"


class TestSimulator:
    """Test simulator control endpoints."""

    def test_manual_value(self, client):
        resp = client.post("/api/sim/lux/manual", json={"value": 500})
        assert resp.status_code == 200
        assert client.get("/api/sim/status").json()["manual_value"] == 500

    def test_manual_value_validation(self, client):
        resp = client.post("/api/sim/lux/manual", json={"value": -1})
        assert resp.status_code == 422

    def test_pattern(self, client):
        resp = client.post("/api/sim/lux/pattern", json={"type": "step", "step_low": 10, "step_high": 900})
        assert resp.status_code == 200
        assert client.get("/api/sim/status").json()["mode"] == "pattern"

    def test_disabled_sensor_is_fatal(self, client, fatal_errors):
        """Test a failing sensor stops the loop and reports the fatal error."""
        client.post("/api/sim/disable")

        wait_for(lambda: fatal_errors)
        body = client.get("/api/live").json()
        assert body["running"] is False
        assert "disabled" in body["error"]


class TestLogging:
    """Test service-mode logging setup."""

    @pytest.fixture
    def root_logger(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield root
        for h in root.handlers:
            if h not in handlers:
                root.removeHandler(h)
        root.setLevel(level)

    def test_debug_enables_cycle_trace(self, root_logger, caplog):
        """Test debug=True turns on the per-cycle trace in service mode."""
        s = Settings(
            _env_file=None,
            sensor_mode="sim",
            backlight_mode="sim",
            probes=1,
            debug=True,
            poll_interval_s=0.01,
            ramp_interval_s=0,
        )
        app = create_app(s, on_fatal=lambda exc: None, setup_logging=True)
        with TestClient(app):
            wait_for(lambda: any(
                r.name == "autobacklight.services.diagnostics" for r in caplog.records
            ))

        assert root_logger.level == logging.DEBUG
        trace = [r for r in caplog.records if r.name == "autobacklight.services.diagnostics"]
        assert "light = " in trace[0].getMessage()


class TestRealSensor:
    def test_sim_endpoints_unavailable(self):
        """Test simulator endpoints answer 409 when a real sensor is in use."""
        app = create_app(
            Settings(_env_file=None, poll_interval_s=0.01, ramp_interval_s=0),
            sensor=FakeSensor(3000),
            backlight=FakeBacklight(level=70),
        )
        with TestClient(app) as c:
            assert c.get("/api/sim/status").status_code == 409
            assert c.get("/api/live").status_code == 200
