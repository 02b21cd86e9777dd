"""Unit tests for radio serial port detection."""

from __future__ import annotations

import os
import sys
from types import SimpleNamespace

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common import serial_detection


def _ports(*entries: tuple[str, int | None]) -> list[SimpleNamespace]:
    return [SimpleNamespace(device=device, vid=vid) for device, vid in entries]


def test_candidate_ports_prefers_radio_bridges(monkeypatch) -> None:
    """Test ports behind known USB-serial bridges are listed first."""
    monkeypatch.setattr(
        serial_detection.serial.tools.list_ports,
        "comports",
        lambda: _ports(("/dev/ttyS0", None), ("/dev/ttyUSB0", 0x10C4), ("/dev/ttyACM0", 0x303A)),
    )

    assert serial_detection.candidate_ports() == ["/dev/ttyUSB0", "/dev/ttyACM0", "/dev/ttyS0"]


def test_requested_port_wins(monkeypatch) -> None:
    monkeypatch.setattr(serial_detection, "detect_radio_port", lambda: "/dev/ttyACM9")

    assert serial_detection.find_serial_port("/dev/ttyUSB3") == "/dev/ttyUSB3"


def test_detected_port(monkeypatch) -> None:
    monkeypatch.setattr(serial_detection, "candidate_ports", lambda: ["/dev/ttyS0", "/dev/ttyUSB0"])
    monkeypatch.setattr(
        serial_detection,
        "_probe_port",
        lambda path: 0x0B0B0B0B if path == "/dev/ttyUSB0" else None,
    )

    assert serial_detection.find_serial_port() == "/dev/ttyUSB0"


def test_falls_back_to_default(monkeypatch) -> None:
    """Test the platform default is used when nothing answers."""
    monkeypatch.setattr(serial_detection, "candidate_ports", lambda: [])

    assert serial_detection.find_serial_port() == serial_detection.get_default_serial_port()
