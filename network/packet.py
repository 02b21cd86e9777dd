"""Network packet carried inside one link frame.

On-Wire Packet Format (byte layout):
====================================
| Offset | Size      | Field     | Description                          |
|--------|-----------|-----------|--------------------------------------|
| 0      | 1 byte    | length    | Header + payload length              |
| 1      | 1 byte    | dest_node | Final destination node address       |
| 2      | 1 byte    | src_node  | Original source node address         |
| 3      | len-3     | payload   | One transport segment                |
====================================
"""

from dataclasses import dataclass
from typing import List

PACKET_HEADER_SIZE = 3


class PacketDecodeError(ValueError):
    """Raised when a link payload cannot be a packet."""
    pass


@dataclass(frozen=True)
class Packet:
    """One network-layer unit, addressed by node."""

    dest_node: int
    src_node: int
    payload: bytes = b""

    def __post_init__(self):
        for label, value in (("dest_node", self.dest_node), ("src_node", self.src_node)):
            if not 0 <= value <= 0xFF:
                raise ValueError(f"{label} must be 0-255, got {value}")
        if len(self.payload) > 0xFF - PACKET_HEADER_SIZE:
            raise ValueError(f"payload size {len(self.payload)} does not fit a packet")

    @property
    def length(self) -> int:
        return PACKET_HEADER_SIZE + len(self.payload)

    def header(self) -> bytes:
        return bytes([self.length, self.dest_node, self.src_node])

    def sections(self) -> List[bytes]:
        """Header and payload as separate sections for the link layer."""
        return [self.header(), self.payload]

    def encode(self) -> bytes:
        return self.header() + self.payload

    @classmethod
    def decode(cls, data: bytes) -> "Packet":
        """
        Decode a link payload into a Packet.

        The length byte is trusted; a length larger than the data received
        is clamped to what is there.

        Raises:
            PacketDecodeError: If the data is shorter than a header or the
                length byte is smaller than the header
        """
        if len(data) < PACKET_HEADER_SIZE:
            raise PacketDecodeError(
                f"Packet too short: {len(data)} bytes, minimum {PACKET_HEADER_SIZE}"
            )
        length = data[0]
        if length < PACKET_HEADER_SIZE:
            raise PacketDecodeError(f"Packet length field {length} is smaller than its header")
        return cls(
            dest_node=data[1],
            src_node=data[2],
            payload=bytes(data[PACKET_HEADER_SIZE:length]),
        )

    def __repr__(self) -> str:
        return (
            f"Packet(dest={self.dest_node:#04x}, src={self.src_node:#04x}, "
            f"payload_len={len(self.payload)})"
        )
