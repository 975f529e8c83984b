"""Prometheus metrics exporter module.

This module handles:
- Defining the device gauges and poll operational gauges
- Exposing the metrics HTTP server on a configurable port
- Updating gauges from decoded device reports
"""

import logging
import time
from typing import Optional

from prometheus_client import Gauge, start_http_server, generate_latest, REGISTRY, CollectorRegistry

from switch_exporter.report import DeviceReport

# Configure module logger
logger = logging.getLogger(__name__)


class SwitchExporter:
    """Prometheus exporter for smart switch telemetry.

    Owns every gauge the service publishes. The poller writes into it and
    the HTTP server reads from its registry.

    Exposes the following metrics:
    - device_power_watts: Power consumption in watts
    - device_energy_ws: Energy usage in watt-seconds
    - device_relay_status: Relay state (0=off, 1=on)
    - device_temperature_celsius: Internal temperature
    - device_energy_since_boot: Energy consumed since last boot
    - device_time_since_boot: Seconds since last boot
    - device_poll_success: Whether the last poll succeeded (1=success, 0=failure)
    - device_poll_timestamp_seconds: Unix timestamp of the last poll
    - device_poll_duration_seconds: Duration of the last poll
    - device_last_success_timestamp_seconds: Unix timestamp of the last successful poll

    Attributes:
        port: HTTP server port (default 5000)
    """

    def __init__(
        self,
        port: int = 5000,
        registry: Optional[CollectorRegistry] = None
    ):
        """Initialize the exporter.

        Args:
            port: Port to run the HTTP server on
            registry: Optional custom registry for testing. If None, uses default REGISTRY.
        """
        self.port = port
        self._registry = registry if registry is not None else REGISTRY
        self._server = None
        self._server_thread = None

        # Device readings
        self._power = Gauge(
            'device_power_watts',
            'Power consumption in watts',
            registry=self._registry
        )

        self._energy = Gauge(
            'device_energy_ws',
            'Energy usage in watt-seconds',
            registry=self._registry
        )

        self._relay = Gauge(
            'device_relay_status',
            'Status of the relay (0: off, 1: on)',
            registry=self._registry
        )

        self._temperature = Gauge(
            'device_temperature_celsius',
            'Temperature in Celsius',
            registry=self._registry
        )

        self._energy_since_boot = Gauge(
            'device_energy_since_boot',
            'Energy consumed since last boot',
            registry=self._registry
        )

        self._time_since_boot = Gauge(
            'device_time_since_boot',
            'Time elapsed since last boot',
            registry=self._registry
        )

        # Operational metrics
        self._poll_success = Gauge(
            'device_poll_success',
            'Whether the last poll succeeded (1=success, 0=failure)',
            registry=self._registry
        )

        self._poll_timestamp = Gauge(
            'device_poll_timestamp_seconds',
            'Unix timestamp of the last poll',
            registry=self._registry
        )

        self._poll_duration = Gauge(
            'device_poll_duration_seconds',
            'Duration of the last poll operation in seconds',
            registry=self._registry
        )

        self._last_success = Gauge(
            'device_last_success_timestamp_seconds',
            'Unix timestamp of the last successful poll',
            registry=self._registry
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Registry holding this exporter's gauges."""
        return self._registry

    def update_metrics(self, report: DeviceReport) -> None:
        """Publish a decoded report into the device gauges.

        Each gauge is set independently; a concurrent scrape may see a
        mix of the previous and the new report.

        Args:
            report: Successfully decoded device report
        """
        self._power.set(report.power)
        self._energy.set(report.energy)
        self._relay.set(report.relay_status)
        self._temperature.set(report.temperature)
        self._energy_since_boot.set(report.energy_since_boot)
        self._time_since_boot.set(report.time_since_boot)

        logger.debug(f"Metrics updated: power={report.power}W, relay={report.relay_status}, "
                     f"temperature={report.temperature}C")

    def set_poll_success(self, success: bool, duration: float) -> None:
        """Update operational metrics after a poll attempt.

        Args:
            success: Whether the poll succeeded
            duration: How long the poll took in seconds
        """
        now = time.time()
        self._poll_success.set(1 if success else 0)
        self._poll_timestamp.set(now)
        self._poll_duration.set(duration)
        if success:
            self._last_success.set(now)

    def render(self) -> str:
        """Render every registered metric in the text exposition format."""
        return generate_latest(self._registry).decode('utf-8')

    def start(self) -> None:
        """Start the HTTP server to expose metrics.

        The server runs in a daemon thread and exposes metrics at:
        http://localhost:{port}/metrics

        Raises:
            OSError: If the port cannot be bound
        """
        if self._server is not None:
            logger.warning("Prometheus server already started")
            return

        logger.info(f"Starting Prometheus HTTP server on port {self.port}")
        self._server, self._server_thread = start_http_server(self.port, registry=self._registry)
        # Port 0 picks a free port
        self.port = self._server.server_port

    def stop(self) -> None:
        """Stop the HTTP server if it is running."""
        if self._server is None:
            return

        self._server.shutdown()
        self._server.server_close()
        self._server = None
        self._server_thread = None
        logger.info("Prometheus HTTP server stopped")
