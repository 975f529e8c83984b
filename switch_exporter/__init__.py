"""WiFi switch Prometheus exporter package.

Polls a power-metering smart switch over HTTP every few seconds and
republishes its status report as Prometheus gauges on /metrics.
"""

__version__ = "0.1.0"
