"""Serial port detection for the radio attached to a node."""

import sys
import threading
from typing import List, Optional

import serial.tools.list_ports

from common.logging_setup import get_logger

logger = get_logger(__name__)

# Timeout for probing one port (seconds)
PORT_PROBE_TIMEOUT = 3

# USB vendor ids of the serial bridges found on Meshtastic boards:
# Silicon Labs CP210x, WCH CH340/CH9102, Espressif native USB, FTDI
RADIO_USB_VENDOR_IDS = (0x10C4, 0x1A86, 0x303A, 0x0403)


def candidate_ports() -> List[str]:
    """
    List serial ports, most likely radio ports first.

    Ports behind a known USB-serial bridge come before everything else.
    """
    ports = serial.tools.list_ports.comports()
    likely = [p.device for p in ports if p.vid in RADIO_USB_VENDOR_IDS]
    others = [p.device for p in ports if p.vid not in RADIO_USB_VENDOR_IDS]
    return likely + others


def _probe_port(port_path: str) -> Optional[int]:
    """Open ``port_path`` as a Meshtastic device; return its node number."""
    from meshtastic.serial_interface import SerialInterface

    found: dict = {}

    def probe() -> None:
        interface = None
        try:
            interface = SerialInterface(port_path, debugOut=None)
            if interface.myInfo:
                found["node_id"] = interface.myInfo.my_node_num
        except Exception as e:
            logger.debug(f"Port {port_path} is not a Meshtastic device: {e}")
        finally:
            if interface is not None:
                try:
                    interface.close()
                except Exception as e:
                    logger.debug(f"Error closing probe on {port_path}: {e}")

    thread = threading.Thread(target=probe, daemon=True)
    thread.start()
    thread.join(timeout=PORT_PROBE_TIMEOUT)
    if thread.is_alive():
        logger.debug(f"Port {port_path} probe timed out after {PORT_PROBE_TIMEOUT}s")
        return None
    return found.get("node_id")


def detect_radio_port() -> Optional[str]:
    """Find the first serial port with a Meshtastic radio behind it."""
    ports = candidate_ports()
    if not ports:
        logger.debug("No serial ports found")
        return None

    for port_path in ports:
        node_id = _probe_port(port_path)
        if node_id is not None:
            logger.info(f"Found radio on {port_path} (node ID: {node_id:#x})")
            return port_path

    logger.warning("No radio found on any serial port")
    return None


def get_default_serial_port() -> str:
    """Platform default serial port."""
    if sys.platform.startswith("win"):
        return "COM1"
    if sys.platform.startswith("darwin"):
        return "/dev/tty.usbserial"
    return "/dev/ttyUSB0"


def find_serial_port(requested_port: Optional[str] = None) -> str:
    """
    Serial port to open: the requested one, a detected one, or the default.
    """
    if requested_port:
        logger.info(f"Using requested serial port: {requested_port}")
        return requested_port

    logger.info("Auto-detecting radio serial port...")
    detected = detect_radio_port()
    if detected:
        return detected

    default_port = get_default_serial_port()
    logger.warning(f"Could not auto-detect the radio, using default: {default_port}")
    return default_port
