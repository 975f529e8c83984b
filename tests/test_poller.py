"""Unit tests for the device poller."""

import json
import threading
from unittest import mock

import requests
from prometheus_client import CollectorRegistry

from switch_exporter import poller as poller_module
from switch_exporter.client import SwitchClient, SwitchConnectionError, SwitchResponseError
from switch_exporter.exporter import SwitchExporter
from switch_exporter.poller import SwitchPoller

SCENARIO_PAYLOAD = json.dumps({
    "power": 12.5,
    "Ws": 4400,
    "relay": True,
    "temperature": 21.3,
    "energy_since_boot": 10000,
    "time_since_boot": 3600,
})

EXPECTED_SAMPLES = [
    "device_power_watts 12.5",
    "device_energy_ws 4400.0",
    "device_relay_status 1.0",
    "device_temperature_celsius 21.3",
    "device_energy_since_boot 10000.0",
    "device_time_since_boot 3600.0",
]


def device_lines(output):
    return [line for line in output.splitlines() if line.startswith("device_") and "_poll_" not in line
            and "last_success" not in line]


def make_poller():
    client = mock.Mock(spec=SwitchClient)
    client.report_url = "http://192.168.1.50/report"
    exporter = SwitchExporter(registry=CollectorRegistry())
    return SwitchPoller(client, exporter), client, exporter


def test_poll_once_scenario():
    """Test the documented payload appears in the next scrape."""
    poller, client, exporter = make_poller()
    client.fetch_report.return_value = SCENARIO_PAYLOAD

    assert poller.poll_once() is True

    output = exporter.render()
    for sample in EXPECTED_SAMPLES:
        assert sample in output, f"Missing {sample!r}"
    assert "device_poll_success 1.0" in output


def test_poll_once_unreachable_keeps_last_values():
    """Test that a failed fetch leaves the previous values in place."""
    poller, client, exporter = make_poller()
    client.fetch_report.return_value = SCENARIO_PAYLOAD
    assert poller.poll_once() is True
    before = device_lines(exporter.render())

    client.fetch_report.side_effect = SwitchConnectionError("Connection refused")
    with mock.patch.object(poller_module.logger, "error") as log_error:
        assert poller.poll_once() is False
    log_error.assert_called_once()

    output = exporter.render()
    assert device_lines(output) == before
    for sample in EXPECTED_SAMPLES:
        assert sample in output
    assert "device_poll_success 0.0" in output


def test_poll_once_non_2xx_before_first_success():
    """Test that a failure before any success leaves zeros."""
    poller, client, exporter = make_poller()
    before = device_lines(exporter.render())

    client.fetch_report.side_effect = SwitchResponseError("Unexpected status 500")
    assert poller.poll_once() is False

    assert device_lines(exporter.render()) == before


def test_poll_once_malformed_body():
    """Test that malformed or incomplete bodies are logged and skipped."""
    poller, client, exporter = make_poller()
    client.fetch_report.return_value = SCENARIO_PAYLOAD
    poller.poll_once()
    before = device_lines(exporter.render())

    incomplete = json.dumps({"power": 99.0, "Ws": 1, "relay": False})
    for body in ("not json", "{", incomplete, '{"power": 1, "relay": "yes"}'):
        client.fetch_report.side_effect = None
        client.fetch_report.return_value = body
        with mock.patch.object(poller_module.logger, "error") as log_error:
            assert poller.poll_once() is False
        log_error.assert_called_once()
        assert "decoding" in log_error.call_args[0][0]
        assert device_lines(exporter.render()) == before


def test_poll_once_unexpected_error():
    """Test that unexpected exceptions do not escape the cycle."""
    poller, client, exporter = make_poller()
    client.fetch_report.side_effect = RuntimeError("boom")

    assert poller.poll_once() is False
    assert "device_poll_success 0.0" in exporter.render()


def test_poll_once_latest_wins():
    """Test that consecutive successful polls overwrite each other."""
    poller, client, exporter = make_poller()
    client.fetch_report.return_value = SCENARIO_PAYLOAD
    poller.poll_once()

    client.fetch_report.return_value = json.dumps({
        "power": 0.0, "Ws": 4500, "relay": False, "temperature": 22.0,
        "energy_since_boot": 10100, "time_since_boot": 3610,
    })
    poller.poll_once()

    output = exporter.render()
    assert "device_power_watts 0.0" in output
    assert "device_energy_ws 4500.0" in output
    assert "device_relay_status 0.0" in output
    assert "device_time_since_boot 3610.0" in output


def test_poll_once_with_real_client():
    """Test the full path through SwitchClient with a mocked session."""
    response = mock.Mock()
    response.status_code = 200
    response.text = SCENARIO_PAYLOAD
    response.content = SCENARIO_PAYLOAD.encode("utf-8")
    session = mock.Mock(spec=requests.Session)
    session.headers = {}
    session.get.return_value = response

    client = SwitchClient("192.168.1.50", session=session)
    exporter = SwitchExporter(registry=CollectorRegistry())
    poller = SwitchPoller(client, exporter)

    assert poller.poll_once() is True
    assert "device_temperature_celsius 21.3" in exporter.render()

    session.get.side_effect = requests.ConnectionError("Connection refused")
    assert poller.poll_once() is False
    assert "device_temperature_celsius 21.3" in exporter.render()


def test_start_and_shutdown():
    """Test that start() polls immediately and shutdown() stops the scheduler."""
    poller, client, exporter = make_poller()
    polled = threading.Event()

    def fetch():
        polled.set()
        return SCENARIO_PAYLOAD

    client.fetch_report.side_effect = fetch

    poller.start()
    try:
        assert poller.running
        assert polled.wait(timeout=5), "First poll should run immediately"
    finally:
        poller.shutdown()

    assert not poller.running
    assert "device_power_watts 12.5" in exporter.render()
