"""Device report decoding module.

This module handles:
- Decoding the JSON status document served by the switch at /report
- Validating field presence and types
- Converting the wire keys into a DeviceReport

Report format (one flat JSON object):
- power: Current power draw in watts
- Ws: Energy counter in watt-seconds
- relay: Relay state (true = on)
- temperature: Internal temperature in degrees Celsius
- energy_since_boot: Energy counter since the last device boot
- time_since_boot: Seconds since the last device boot
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Union


class ReportParseError(Exception):
    """Exception raised when a report body cannot be decoded."""
    pass


@dataclass
class DeviceReport:
    """A single status sample from the switch.

    Attributes:
        power: Power consumption in watts
        energy: Energy usage in watt-seconds
        relay_on: Whether the relay is switched on
        temperature: Temperature in degrees Celsius
        energy_since_boot: Energy consumed since last boot
        time_since_boot: Seconds elapsed since last boot
    """
    power: float
    energy: float
    relay_on: bool
    temperature: float
    energy_since_boot: float
    time_since_boot: int

    def __post_init__(self):
        """Validate report field types."""
        if not isinstance(self.relay_on, bool):
            raise ValueError(f"relay_on must be a bool, got {type(self.relay_on).__name__}")
        if isinstance(self.time_since_boot, bool) or not isinstance(self.time_since_boot, int):
            raise ValueError(f"time_since_boot must be an int, got {type(self.time_since_boot).__name__}")

    @property
    def relay_status(self) -> int:
        """Relay state as 1 (on) or 0 (off)."""
        return 1 if self.relay_on else 0


# Wire key for each DeviceReport field
FIELD_KEYS = {
    "power": "power",
    "energy": "Ws",
    "relay_on": "relay",
    "temperature": "temperature",
    "energy_since_boot": "energy_since_boot",
    "time_since_boot": "time_since_boot",
}


def _number(key: str, value: Any) -> float:
    # bool is an int subclass, but true/false is not a reading
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ReportParseError(f"Field '{key}' must be a number, got {value!r}")
    return float(value)


def _integer(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ReportParseError(f"Field '{key}' must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ReportParseError(f"Field '{key}' must be an integer, got {value!r}")


def _boolean(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ReportParseError(f"Field '{key}' must be a boolean, got {value!r}")
    return value


def decode_report(document: Dict[str, Any]) -> DeviceReport:
    """Build a DeviceReport from an already-decoded JSON object.

    Args:
        document: Mapping as returned by json.loads()

    Returns:
        DeviceReport with all six fields populated

    Raises:
        ReportParseError: If the document is not an object, a field is
            missing, or a field has the wrong type
    """
    if not isinstance(document, dict):
        raise ReportParseError(f"Expected a JSON object, got {type(document).__name__}")

    missing = [key for key in FIELD_KEYS.values() if key not in document]
    if missing:
        raise ReportParseError(f"Missing required fields: {', '.join(missing)}")

    return DeviceReport(
        power=_number("power", document["power"]),
        energy=_number("Ws", document["Ws"]),
        relay_on=_boolean("relay", document["relay"]),
        temperature=_number("temperature", document["temperature"]),
        energy_since_boot=_number("energy_since_boot", document["energy_since_boot"]),
        time_since_boot=_integer("time_since_boot", document["time_since_boot"]),
    )


def parse_report(content: Union[str, bytes]) -> DeviceReport:
    """Parse a raw /report response body into a DeviceReport.

    Args:
        content: Response body as text or bytes

    Returns:
        DeviceReport decoded from the body

    Raises:
        ReportParseError: If the body is empty, not valid JSON, or does
            not have the expected shape

    Example:
        >>> report = parse_report('{"power": 12.5, "Ws": 4400, "relay": true, '
        ...                       '"temperature": 21.3, "energy_since_boot": 10000, '
        ...                       '"time_since_boot": 3600}')
        >>> report.relay_status
        1
    """
    if not content or not content.strip():
        raise ReportParseError("Empty report body")

    try:
        document = json.loads(content)
    except ValueError as e:
        raise ReportParseError(f"Invalid JSON: {e}")

    return decode_report(document)
