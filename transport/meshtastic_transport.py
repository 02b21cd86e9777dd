"""Meshtastic frame transport for CubeNet.

Carries fixed-size CubeNet frames over a Meshtastic radio attached by
serial. The physical address of a node is its Meshtastic node number.
"""

import queue
import threading
import time
from typing import Any, Optional

from common.logging_setup import get_logger
from common.results import LinkResult
from transport.base import FrameReception, FrameTransport

logger = get_logger(__name__)


class MeshtasticFrameTransport(FrameTransport):
    """
    Frame transport over a Meshtastic radio.

    This class handles:
    - Serial connection to the Meshtastic device
    - Sending one frame at a time to a node number
    - Queuing received frames until the stack polls for them
    """

    # Meshtastic private app portnum for custom data
    PORTNUM = 256

    def __init__(
        self,
        serial_port: str,
        frame_size: int = 32,
        modem_preset: Optional[str] = None,
    ):
        """
        Initialize the Meshtastic frame transport.

        Args:
            serial_port: Path to serial device (e.g., /dev/ttyUSB0)
            frame_size: Bytes per frame; other payload sizes are ignored
            modem_preset: Optional Meshtastic modem preset name to apply
        """
        self.serial_port = serial_port
        self.frame_size = frame_size
        self._interface: Any = None
        self._receive_queue: "queue.Queue[FrameReception]" = queue.Queue()
        self._local_node_id: Optional[int] = None
        self._lock = threading.Lock()
        self._modem_preset = modem_preset

    def start(self) -> None:
        """
        Connect to the Meshtastic device and subscribe to incoming data.

        Raises:
            Exception: If connection to device fails
        """
        from meshtastic.serial_interface import SerialInterface
        from pubsub import pub

        logger.info(f"Connecting to Meshtastic device on {self.serial_port}")

        try:
            self._interface = SerialInterface(self.serial_port)
            if self._modem_preset:
                self._apply_modem_preset(self._modem_preset)

            if self._interface.myInfo:
                self._local_node_id = self._interface.myInfo.my_node_num
                logger.info(f"Connected to Meshtastic node {self._local_node_id:#x}")

            pub.subscribe(self._on_meshtastic_receive, "meshtastic.receive.data")
        except Exception as e:
            self._interface = None
            logger.error(f"Failed to connect to Meshtastic device: {e}")
            raise

    def _apply_modem_preset(self, preset: str) -> None:
        from meshtastic.protobufs import config_pb2

        preset_value = getattr(config_pb2.Config.LoraConfig.ModemPreset, preset, None)
        if preset_value is None:
            logger.warning(f"Unknown modem preset '{preset}', skipping apply")
            return
        self._interface.localConfig.lora.modem_preset = preset_value
        self._interface.writeConfig("lora")
        time.sleep(0.1)
        self._interface.waitForConfig()
        logger.info(f"Applied modem preset: {preset}")

    def close(self) -> None:
        """Unsubscribe and disconnect from the device."""
        if not self._interface:
            return

        from pubsub import pub

        try:
            pub.unsubscribe(self._on_meshtastic_receive, "meshtastic.receive.data")
        except Exception as e:
            logger.debug(f"Failed to unsubscribe from Meshtastic topic: {e}")

        try:
            self._interface.close()
        except Exception as e:
            logger.warning(f"Error closing Meshtastic interface: {e}")

        self._interface = None
        logger.info("Meshtastic transport stopped")

    @property
    def local_node_id(self) -> Optional[int]:
        """Get the local Meshtastic node number."""
        return self._local_node_id

    def send(self, address: int, frame: bytes) -> bool:
        if not self._interface:
            logger.error("Transport not started")
            return False
        if len(frame) != self.frame_size:
            logger.error(f"Refusing {len(frame)}-byte frame (frame size is {self.frame_size})")
            return False

        with self._lock:
            try:
                logger.debug(f"Sending frame to node {address:#x}")
                self._interface.sendData(
                    bytes(frame),
                    destinationId=address,
                    portNum=self.PORTNUM,
                    wantAck=False,  # CubeNet does its own ACKs
                )
                return True
            except Exception as e:
                logger.error(f"Failed to send frame: {e}")
                return False

    def receive(self, timeout: Optional[float] = None) -> FrameReception:
        if timeout is not None and timeout <= 0:
            timeout = 0.0
        try:
            if timeout == 0.0:
                return self._receive_queue.get_nowait()
            return self._receive_queue.get(timeout=timeout)
        except queue.Empty:
            return FrameReception(LinkResult.TIMEOUT)

    def _on_meshtastic_receive(self, packet: dict, interface: Any) -> None:
        """Handle incoming Meshtastic packet (runs on the reader thread)."""
        decoded = packet.get("decoded", {})
        if decoded.get("portnum") != "PRIVATE_APP":
            return

        from_id = packet.get("fromId") or packet.get("from", 0)
        if isinstance(from_id, str) and from_id.startswith("!"):
            from_id = int(from_id[1:], 16)

        payload = decoded.get("payload", b"")
        if isinstance(payload, str):
            # Binary payloads may arrive as ISO-8859-1 strings
            payload = payload.encode("latin-1")

        if len(payload) != self.frame_size:
            logger.debug(f"Ignoring {len(payload)}-byte payload from {from_id:#x}")
            return

        logger.debug(f"Received frame from node {from_id:#x}")
        self._receive_queue.put(FrameReception(LinkResult.SUCCESS, payload, from_id))
