"""Main entry point for the WiFi switch exporter.

This module handles:
- Loading configuration from environment variables (and an optional .env file)
- Starting the Prometheus HTTP server
- Starting the background poller
- Waiting for SIGINT/SIGTERM and shutting down cleanly
"""

import logging
import os
import signal
import sys
import threading

from dotenv import find_dotenv, load_dotenv

from switch_exporter import __version__
from switch_exporter.client import SwitchClient
from switch_exporter.exporter import SwitchExporter
from switch_exporter.poller import SwitchPoller

# Configure module logger
logger = logging.getLogger(__name__)

# Set by the signal handlers
shutdown_requested = threading.Event()

# Configuration from environment
config = {
    "switch_host": "",
    "exporter_port": 5000,
    "device_timeout": 5.0,
    "log_level": "INFO",
}


def load_config() -> bool:
    """Load configuration from environment variables.

    Required:
        IP_WIFI_SWITCH: Host or IP of the switch (optionally host:port)

    Optional:
        EXPORTER_PORT: Prometheus port (default: 5000)
        DEVICE_TIMEOUT: Device request timeout in seconds (default: 5.0)
        LOG_LEVEL: Logging level name (default: INFO)

    Returns:
        True if all required config loaded, False otherwise
    """
    config["switch_host"] = os.getenv("IP_WIFI_SWITCH", "").strip()

    # Optional with defaults
    try:
        config["exporter_port"] = int(os.getenv("EXPORTER_PORT", "5000"))
    except ValueError:
        logger.warning("Invalid EXPORTER_PORT, using default: 5000")
        config["exporter_port"] = 5000

    try:
        config["device_timeout"] = float(os.getenv("DEVICE_TIMEOUT", "5.0"))
    except ValueError:
        logger.warning("Invalid DEVICE_TIMEOUT, using default: 5.0")
        config["device_timeout"] = 5.0

    if config["device_timeout"] <= 0:
        logger.warning("DEVICE_TIMEOUT must be positive, using default: 5.0")
        config["device_timeout"] = 5.0

    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        logger.warning(f"Invalid LOG_LEVEL {log_level!r}, using default: INFO")
        log_level = "INFO"
    config["log_level"] = log_level

    if not config["switch_host"]:
        logger.error("Missing required environment variable: IP_WIFI_SWITCH")
        return False

    logger.info(f"Configuration loaded: switch={config['switch_host']}, "
                f"exporter_port={config['exporter_port']}, "
                f"device_timeout={config['device_timeout']}s")
    return True


def signal_handler(signum, frame):
    """Handle shutdown signals gracefully."""
    logger.info(f"Received signal {signum}, initiating graceful shutdown...")
    shutdown_requested.set()


def main() -> int:
    """Main entry point.

    1. Configure logging
    2. Load .env file with python-dotenv
    3. Load and validate configuration
    4. Start Prometheus HTTP server
    5. Start the poller (first poll runs immediately)
    6. Block until a shutdown signal arrives

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    # Configure logging
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    logger.info(f"WiFi switch exporter v{__version__} starting")

    # Load .env from the working directory; variables already in the environment take precedence
    if load_dotenv(find_dotenv(usecwd=True)):
        logger.info("Loaded .env file")

    # Load configuration
    if not load_config():
        logger.error("Configuration failed, exiting")
        return 1

    logging.getLogger().setLevel(config["log_level"])

    client = SwitchClient(host=config["switch_host"], timeout=config["device_timeout"])
    exporter = SwitchExporter(port=config["exporter_port"])

    try:
        exporter.start()
    except OSError as e:
        logger.error(f"Failed to bind metrics port {config['exporter_port']}: {e}")
        client.close()
        return 1

    logger.info(f"Prometheus metrics available at http://localhost:{exporter.port}/metrics")

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    poller = SwitchPoller(client, exporter)
    poller.start()

    try:
        shutdown_requested.wait()
    except KeyboardInterrupt:
        logger.info("Received interrupt, shutting down")
    finally:
        poller.shutdown()
        exporter.stop()
        client.close()
        logger.info("Exporter shutdown complete")

    return 0


if __name__ == "__main__":
    sys.exit(main())
