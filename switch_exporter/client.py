"""Switch HTTP client module.

This module handles:
- Building the device base URL from the configured host
- Fetching the JSON status report from the switch
- Translating requests failures into SwitchError subclasses

One request per call, no retries.
"""

import logging
from typing import Optional

import requests

# Configure module logger
logger = logging.getLogger(__name__)


class SwitchError(Exception):
    """Base exception for switch client errors."""
    pass


class SwitchConnectionError(SwitchError):
    """Exception raised when the switch cannot be reached."""
    pass


class SwitchResponseError(SwitchError):
    """Exception raised when the switch answers with a non-2xx status."""
    pass


class SwitchClient:
    """HTTP client for the smart switch status endpoint.

    Attributes:
        host: Device host or IP, optionally with a port or URL scheme
        timeout: Request timeout in seconds
    """

    REPORT_PATH = "/report"
    DEFAULT_TIMEOUT = 5.0

    def __init__(
        self,
        host: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None
    ):
        """Initialize the client.

        Args:
            host: Device host or IP (e.g. "192.168.1.50" or "switch.lan:8080")
            timeout: Request timeout in seconds
            session: Optional session, mainly for testing
        """
        if not host or not host.strip():
            raise ValueError("Switch host must not be empty")

        self.host = host.strip()
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    @property
    def base_url(self) -> str:
        """Base URL of the device, without trailing slash."""
        if self.host.startswith(("http://", "https://")):
            return self.host.rstrip("/")
        return f"http://{self.host}"

    @property
    def report_url(self) -> str:
        """Full URL of the status report."""
        return f"{self.base_url}{self.REPORT_PATH}"

    def fetch_report(self) -> str:
        """Download the raw status report.

        Returns:
            Response body as text

        Raises:
            SwitchConnectionError: If the device is unreachable or times out
            SwitchResponseError: If the device returns a non-2xx status
        """
        logger.debug(f"Fetching report from {self.report_url}")

        try:
            response = self.session.get(self.report_url, timeout=self.timeout)
        except requests.Timeout as e:
            raise SwitchConnectionError(f"Timed out after {self.timeout}s fetching {self.report_url}: {e}")
        except requests.RequestException as e:
            raise SwitchConnectionError(f"Could not reach {self.report_url}: {e}")

        if not 200 <= response.status_code < 300:
            raise SwitchResponseError(f"Unexpected status {response.status_code} from {self.report_url}")

        logger.debug(f"Received {len(response.content)} bytes from switch")
        return response.text

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()
        logger.debug("Switch client session closed")
