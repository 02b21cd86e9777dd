"""Node daemon for CubeNet cubes and the rover."""

import argparse
import signal
import sys
from typing import Optional

from common.config import Config, list_nodes, load_node_config
from common.logging_setup import get_logger, setup_logging
from common.results import TransportResult
from common.serial_detection import find_serial_port
from node.stack import build_session, build_simulated_radio
from reliability.session import TransportReception, TransportSession
from transport.base import FrameTransport
from transport.memory import InMemoryRadioBus
from transport.meshtastic_transport import MeshtasticFrameTransport

logger = get_logger(__name__)

REPLY_TEMPLATE = (
    "Hello, whoever lives at port {source:02x}. This is {name}, at port {port:02x}.\r\n"
    "I have received {count} messages since powering on.\r\n"
    "Thanks for reaching out.\r\n"
)


class NodeDaemon:
    """
    Runs the protocol stack for one node.

    Opens the radio, sends messages on request and listens for messages
    addressed to this node's port.
    """

    def __init__(self, config: Config, bus: Optional[InMemoryRadioBus] = None):
        """
        Initialize node daemon.

        Args:
            config: Node configuration
            bus: Simulated radio bus, used when ``config.simulate_radio`` is set
        """
        self.config = config
        self._bus = bus
        self._transport: Optional[FrameTransport] = None
        self.session: Optional[TransportSession] = None
        self.messages_received = 0
        self._running = False

    def start(self) -> None:
        """Open the radio and build the stack."""
        logger.info(f"Starting node {self.config.name} ({self.config.node_address:#04x})...")

        if self.config.simulate_radio:
            self._transport = build_simulated_radio(self.config, self._bus or InMemoryRadioBus())
        else:
            transport = MeshtasticFrameTransport(
                find_serial_port(self.config.serial_port),
                frame_size=self.config.frame_size,
                modem_preset=self.config.modem_preset,
            )
            transport.start()
            self._transport = transport

        self.session = build_session(self.config, self._transport)
        self._running = True
        logger.info(f"Node listening on port {self.config.port:#04x}")

    def send(self, message: bytes, dest_port: int) -> TransportResult:
        """Send a message and log whether it got through."""
        logger.info(f"Transmitting {len(message)} bytes to port {dest_port:#04x}...")
        result = self.session.send(message, dest_port)
        if result is TransportResult.SUCCESS:
            logger.info("Transmission succeeded")
        else:
            logger.error(f"Transmission failed: {result.reason}")
        return result

    def listen(self, timeout: Optional[float] = None) -> TransportReception:
        """Wait for one message and log it."""
        reception = self.session.receive(timeout=timeout)
        if not reception.ok:
            logger.info(f"No message: {reception.result.reason}")
            return reception

        self.messages_received += 1
        text = reception.message.decode("utf-8", errors="replace")
        logger.info(
            f"Received message from port {reception.source_port:#04x}:\n{text}"
        )
        return reception

    def compose_reply(self, source_port: int) -> bytes:
        return REPLY_TEMPLATE.format(
            source=source_port,
            name=self.config.name,
            port=self.config.port,
            count=self.messages_received,
        ).encode("utf-8")

    def run(self, reply: bool = False, timeout: Optional[float] = None) -> None:
        """
        Receive messages until stopped.

        Args:
            reply: Answer every message with a short greeting
            timeout: Per-segment receive timeout, None to wait indefinitely
        """
        try:
            while self._running:
                reception = self.listen(timeout)
                if reception.result is TransportResult.IO_ERROR:
                    logger.error("Radio failure while listening, stopping")
                    break
                if reception.ok and reply:
                    self.send(self.compose_reply(reception.source_port), reception.source_port)
        except KeyboardInterrupt:
            logger.info("Received interrupt, shutting down...")

    def stop(self) -> None:
        """Close the radio."""
        logger.info("Stopping node...")
        self._running = False
        if self._transport:
            self._transport.close()
            self._transport = None
        logger.info("Node stopped")


def _port(value: str) -> int:
    port = int(value, 0)
    if not 0 <= port <= 0xFF:
        raise argparse.ArgumentTypeError(f"port must be 0-255, got {value}")
    return port


def main() -> None:
    """Main entry point for cubenet-node."""
    parser = argparse.ArgumentParser(
        description="CubeNet - radio node daemon",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--node",
        help="Node profile name (from nodes/) or path to a profile JSON file",
    )

    parser.add_argument(
        "--list-nodes",
        action="store_true",
        help="List the node profiles in nodes/ and exit",
    )

    parser.add_argument(
        "--serial",
        help="Serial port of the radio (auto-detected when omitted)",
    )

    parser.add_argument(
        "--simulate",
        action="store_true",
        help="Use an in-memory radio instead of hardware",
    )

    parser.add_argument(
        "--send",
        nargs=2,
        metavar=("PORT", "MESSAGE"),
        help="Send MESSAGE to PORT (e.g. 0x0B) and exit",
    )

    parser.add_argument(
        "--listen",
        action="store_true",
        help="Receive a single message and exit",
    )

    parser.add_argument(
        "--reply",
        action="store_true",
        help="Answer every received message",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        help="Per-segment receive timeout in seconds (default: wait forever)",
    )

    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )

    parser.add_argument(
        "--log-file",
        help="Log file path (optional)",
    )

    args = parser.parse_args()

    if args.list_nodes:
        for name in list_nodes():
            print(name)
        return

    setup_logging(level=args.log_level, log_file=args.log_file)

    overrides = {
        "serial_port": args.serial,
        "simulate_radio": args.simulate or None,
        "log_level": args.log_level,
        "log_file": args.log_file,
    }
    if args.node:
        config = load_node_config(args.node, **overrides)
    else:
        config = Config(**{k: v for k, v in overrides.items() if v is not None}).validate()

    daemon = NodeDaemon(config)

    def signal_handler(sig, frame):
        daemon.stop()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    exit_code = 0
    try:
        daemon.start()
        if args.send:
            port, text = args.send
            result = daemon.send(text.encode("utf-8"), _port(port))
            exit_code = 0 if result is TransportResult.SUCCESS else 1
        elif args.listen:
            exit_code = 0 if daemon.listen(args.timeout).ok else 1
        else:
            daemon.run(reply=args.reply, timeout=args.timeout)
    except Exception as e:
        logger.error(f"Node daemon error: {e}")
        exit_code = 1
    finally:
        daemon.stop()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
