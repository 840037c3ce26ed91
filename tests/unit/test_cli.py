"""
Unit tests for the edge-sim CLI (no broker).
"""

import json
import sys

import pytest
from loguru import logger
from typer.testing import CliRunner

from edge_sim.cli import app, build_session
from edge_sim.config import SimulatorSettings
from edge_telemetry.coordinator import EdgeSession
from edge_telemetry.transport import MqttTransport

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolate(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    yield
    # commands point loguru at the runner's captured stream
    logger.remove()
    logger.add(sys.stderr)


def test_sample_prints_one_record():
    result = runner.invoke(app, ["sample", "--vehicle-id", "TR-TEST"])
    assert result.exit_code == 0
    record = json.loads(result.stdout)
    assert record["vehicle"]["vehicle_id"] == "TR-TEST"
    assert "battery" in record


def test_cache_show(tmp_path):
    path = tmp_path / "cache.json"
    path.write_text(json.dumps([{"seq": 1}, {"seq": 2}]))

    result = runner.invoke(app, ["cache-show", "--cache-file", str(path), "--records"])
    assert result.exit_code == 0
    assert "2 cached entries" in result.stdout
    assert '"seq": 2' in result.stdout


def test_cache_show_missing_file(tmp_path):
    result = runner.invoke(app, ["cache-show", "--cache-file", str(tmp_path / "none.json")])
    assert result.exit_code == 0
    assert "0 cached entries" in result.stdout


def test_cache_clear_with_yes(tmp_path):
    path = tmp_path / "cache.json"
    path.write_text(json.dumps([{"seq": 1}, {"seq": 2}, {"seq": 3}]))

    result = runner.invoke(app, ["cache-clear", "--cache-file", str(path), "--yes"])
    assert result.exit_code == 0
    assert json.loads(path.read_text()) == []


def test_cache_clear_declined_keeps_records(tmp_path):
    path = tmp_path / "cache.json"
    path.write_text(json.dumps([{"seq": 1}]))

    result = runner.invoke(app, ["cache-clear", "--cache-file", str(path)], input="n\n")
    assert result.exit_code != 0
    assert json.loads(path.read_text()) == [{"seq": 1}]


def test_build_session_wires_components(tmp_path):
    settings = SimulatorSettings(cache_file=str(tmp_path / "c.json"), broker_url="mqtt://localhost")
    session = build_session(settings)

    assert isinstance(session, EdgeSession)
    assert isinstance(session.transport, MqttTransport)
    assert session.coordinator.health().coordinator_id == settings.vehicle_id
    assert session.cache.path == tmp_path / "c.json"


def test_build_session_custom_transport(tmp_path):
    seen = []

    def factory(monitor):
        seen.append(monitor)
        return object()

    settings = SimulatorSettings(cache_file=str(tmp_path / "c.json"))
    session = build_session(settings, transport_factory=factory)
    assert seen == [session.monitor]
