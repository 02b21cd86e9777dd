"""Transport segments carried as network packet payloads.

On-Wire Segment Format (byte layout):
====================================
| Offset | Size    | Field     | Description                            |
|--------|---------|-----------|----------------------------------------|
| 0      | 1 byte  | length    | Encoded size of the whole segment      |
| 1      | 1 byte  | seq       | Alternating sequence bit (0 or 1)      |
| 2      | 1 byte  | dest_port | Destination port                       |
| 3      | 1 byte  | src_port  | Source port                            |
| 4      | 1 byte  | kind      | START / DATA / END / ACK               |
| 5      | 2 bytes | msg_len   | START only: message length (uint16 BE) |
| 5      | 2 bytes | offset    | DATA only: chunk offset (uint16 BE)    |
| 7      | N bytes | chunk     | DATA only: message bytes               |
====================================

Header sizes: START 7, DATA 7 (+ chunk), END 5, ACK 5.
"""

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Union

COMMON_HEADER = struct.Struct("!BBBBB")
COMMON_HEADER_SIZE = COMMON_HEADER.size

_WORD = struct.Struct("!H")

START_SEGMENT_SIZE = COMMON_HEADER_SIZE + _WORD.size
DATA_SEGMENT_HEADER_SIZE = COMMON_HEADER_SIZE + _WORD.size
END_SEGMENT_SIZE = COMMON_HEADER_SIZE
ACK_SEGMENT_SIZE = COMMON_HEADER_SIZE

MAX_MESSAGE_LEN = 0xFFFF


class SegmentKind(IntEnum):
    """Segment identifier byte."""

    START = 0x07
    END = 0x09
    ACK = 0x0A
    DATA = 0x0D


class SegmentDecodeError(ValueError):
    """Raised when a packet payload is not a valid segment."""
    pass


def next_seq(seq: int) -> int:
    """The other sequence bit."""
    return 1 if seq == 0 else 0


@dataclass(frozen=True)
class _SegmentBase:
    seq: int
    dest_port: int
    src_port: int

    kind: ClassVar[SegmentKind]

    def _body(self) -> bytes:
        return b""

    @property
    def length(self) -> int:
        return COMMON_HEADER_SIZE + len(self._body())

    def encode(self) -> bytes:
        body = self._body()
        header = COMMON_HEADER.pack(
            COMMON_HEADER_SIZE + len(body),
            self.seq,
            self.dest_port,
            self.src_port,
            int(self.kind),
        )
        return header + body


@dataclass(frozen=True)
class StartSegment(_SegmentBase):
    """Announces a message of ``message_len`` bytes."""

    message_len: int = 0
    kind: ClassVar[SegmentKind] = SegmentKind.START

    def _body(self) -> bytes:
        return _WORD.pack(self.message_len)


@dataclass(frozen=True)
class DataSegment(_SegmentBase):
    """Carries ``chunk`` at ``offset`` within the message."""

    offset: int = 0
    chunk: bytes = b""
    kind: ClassVar[SegmentKind] = SegmentKind.DATA

    def _body(self) -> bytes:
        return _WORD.pack(self.offset) + self.chunk


@dataclass(frozen=True)
class EndSegment(_SegmentBase):
    """Marks the end of a message."""

    kind: ClassVar[SegmentKind] = SegmentKind.END


@dataclass(frozen=True)
class AckSegment(_SegmentBase):
    """Acknowledges the segment whose seq is the complement of ours."""

    kind: ClassVar[SegmentKind] = SegmentKind.ACK


Segment = Union[StartSegment, DataSegment, EndSegment, AckSegment]


def decode_segment(data: bytes) -> Segment:
    """
    Decode a packet payload into a segment.

    The length byte is trusted: for DATA segments the chunk runs to
    ``length`` (or to the end of the data, whichever comes first).

    Raises:
        SegmentDecodeError: If the header is short or the kind is unknown
    """
    if len(data) < COMMON_HEADER_SIZE:
        raise SegmentDecodeError(
            f"Segment too short: {len(data)} bytes, minimum {COMMON_HEADER_SIZE}"
        )
    length, seq, dest_port, src_port, kind_byte = COMMON_HEADER.unpack_from(data)
    try:
        kind = SegmentKind(kind_byte)
    except ValueError:
        raise SegmentDecodeError(f"Unknown segment kind {kind_byte:#04x}") from None

    if kind is SegmentKind.END:
        return EndSegment(seq, dest_port, src_port)
    if kind is SegmentKind.ACK:
        return AckSegment(seq, dest_port, src_port)

    if len(data) < COMMON_HEADER_SIZE + _WORD.size:
        raise SegmentDecodeError(f"{kind.name} segment too short: {len(data)} bytes")
    (word,) = _WORD.unpack_from(data, COMMON_HEADER_SIZE)

    if kind is SegmentKind.START:
        return StartSegment(seq, dest_port, src_port, message_len=word)
    return DataSegment(
        seq,
        dest_port,
        src_port,
        offset=word,
        chunk=bytes(data[DATA_SEGMENT_HEADER_SIZE:length]),
    )


def describe(segment: Segment) -> str:
    """Short form used in log lines, e.g. ``DATA(seq=1, offset=0, 5 bytes)``."""
    if isinstance(segment, StartSegment):
        return f"START(seq={segment.seq}, msg_len={segment.message_len})"
    if isinstance(segment, DataSegment):
        return f"DATA(seq={segment.seq}, offset={segment.offset}, {len(segment.chunk)} bytes)"
    return f"{segment.kind.name}(seq={segment.seq})"
