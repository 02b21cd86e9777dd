"""Network layer for the CubeNet radio stack."""

from network.packet import PACKET_HEADER_SIZE, Packet, PacketDecodeError
from network.router import NetworkReception, NetworkRouter
from network.routing import RoutingTable

__all__ = [
    "PACKET_HEADER_SIZE",
    "Packet",
    "PacketDecodeError",
    "NetworkReception",
    "NetworkRouter",
    "RoutingTable",
]
