"""Reliable transport layer for the CubeNet radio stack."""

from reliability.segment import (
    AckSegment,
    DataSegment,
    EndSegment,
    Segment,
    SegmentDecodeError,
    SegmentKind,
    StartSegment,
    decode_segment,
)
from reliability.session import ReceiverState, TransportReception, TransportSession

__all__ = [
    "AckSegment",
    "DataSegment",
    "EndSegment",
    "Segment",
    "SegmentDecodeError",
    "SegmentKind",
    "StartSegment",
    "decode_segment",
    "ReceiverState",
    "TransportReception",
    "TransportSession",
]
