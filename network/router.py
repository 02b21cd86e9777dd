"""Network layer: node addressing and store-and-forward routing."""

import time
from dataclasses import dataclass
from typing import Optional

from common.addressing import AddressResolver
from common.errors import AddressResolutionError, RoutingError
from common.logging_setup import get_logger
from common.results import LinkResult, NetworkResult, to_network_result
from framing.link import LinkLayer
from network.packet import PACKET_HEADER_SIZE, Packet, PacketDecodeError
from network.routing import RoutingTable

logger = get_logger(__name__)


@dataclass
class NetworkReception:
    """Payload delivered to this node by the network layer."""

    result: NetworkResult
    payload: bytes = b""
    source_node: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.result is NetworkResult.SUCCESS


class NetworkRouter:
    """
    Sends packets toward their destination and receives packets for this node.

    Packets addressed to another node are forwarded unchanged to the next
    hop while waiting for our own.
    """

    def __init__(
        self,
        link: LinkLayer,
        node_address: int,
        routing: RoutingTable,
        resolver: AddressResolver,
    ):
        self.link = link
        self.node_address = node_address
        self.routing = routing
        self.resolver = resolver
        self.packets_forwarded = 0

    @property
    def max_payload(self) -> int:
        """Largest payload one packet carries."""
        return self.link.max_payload - PACKET_HEADER_SIZE

    def transmit(
        self,
        payload: bytes,
        dest_node: int,
        src_node: Optional[int] = None,
    ) -> NetworkResult:
        """
        Send a payload toward ``dest_node``.

        Args:
            payload: Packet payload (one transport segment)
            dest_node: Final destination node
            src_node: Original source node, this node by default

        Returns:
            NetworkResult.SUCCESS or NetworkResult.ERROR. There is no retry
            at this layer.
        """
        if len(payload) > self.max_payload:
            logger.warning(
                f"Truncating {len(payload)}-byte packet payload to {self.max_payload} bytes"
            )
            payload = payload[:self.max_payload]
        if src_node is None:
            src_node = self.node_address
        return self._send_packet(Packet(dest_node, src_node, bytes(payload)))

    def _send_packet(self, packet: Packet) -> NetworkResult:
        hop = self.routing.next_hop(packet.dest_node)
        address = self.resolver.resolve_link_address(hop)
        logger.debug(f"Node {self.node_address:#04x}: sending {packet} via {hop:#04x}")
        return to_network_result(self.link.send(address, packet.sections()))

    def forward(self, packet: Packet) -> NetworkResult:
        """Pass a packet for another node on to its next hop, unchanged."""
        logger.debug(f"Node {self.node_address:#04x}: forwarding {packet}")
        result = self._send_packet(packet)
        if result is NetworkResult.SUCCESS:
            self.packets_forwarded += 1
        else:
            logger.warning(f"Node {self.node_address:#04x}: failed to forward {packet}")
        return result

    def receive(
        self,
        buf_len: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> NetworkReception:
        """
        Wait for a packet addressed to this node.

        All inner receives share one deadline, so forwarding traffic for
        other nodes never extends the wait past ``timeout``.

        Args:
            buf_len: Truncate the returned payload to this many bytes
            timeout: Seconds to wait overall, None to wait indefinitely

        Returns:
            NetworkReception with SUCCESS, TIMEOUT or ERROR
        """
        deadline = time.monotonic() + timeout if timeout is not None else None

        while True:
            remaining = None
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return NetworkReception(NetworkResult.TIMEOUT)

            reception = self.link.receive(remaining)
            if reception.result is not LinkResult.SUCCESS:
                return NetworkReception(to_network_result(reception.result))

            try:
                packet = Packet.decode(reception.payload)
            except PacketDecodeError as e:
                logger.warning(f"Node {self.node_address:#04x}: skipping bad packet: {e}")
                continue

            if packet.dest_node != self.node_address:
                try:
                    self.forward(packet)
                except (RoutingError, AddressResolutionError) as e:
                    logger.warning(f"Node {self.node_address:#04x}: dropping {packet}: {e}")
                continue

            payload = packet.payload if buf_len is None else packet.payload[:buf_len]
            logger.debug(f"Node {self.node_address:#04x}: received {packet}")
            return NetworkReception(NetworkResult.SUCCESS, payload, packet.src_node)
