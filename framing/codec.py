"""Encode and decode functions for link frames.

This module wraps a short byte string in one fixed-size radio frame and
unwraps it again. The length byte is trusted on decode: no checksum is
carried, so a corrupted but well-formed frame decodes normally.
"""

from typing import Optional, Sequence

from common.logging_setup import get_logger
from framing.frame import FRAME_HEADER_SIZE, FRAME_PADDING, FRAME_SIZE, max_frame_payload

logger = get_logger(__name__)


class FrameDecodeError(ValueError):
    """Raised when a raw buffer is not a frame of the expected size."""
    pass


def encode_frame(payload: bytes, frame_size: int = FRAME_SIZE) -> bytes:
    """
    Encode a payload into one frame.

    Payloads longer than the frame can hold are truncated to fit; the
    length byte always matches the bytes actually written.

    Args:
        payload: Bytes to carry
        frame_size: Total frame width in bytes

    Returns:
        Exactly ``frame_size`` bytes ready for the radio
    """
    capacity = max_frame_payload(frame_size)
    if len(payload) > capacity:
        logger.warning(
            f"Truncating {len(payload)}-byte payload to {capacity} bytes to fit the frame"
        )
        payload = payload[:capacity]

    frame = bytearray([FRAME_PADDING]) * frame_size
    frame[0] = len(payload)
    frame[FRAME_HEADER_SIZE:FRAME_HEADER_SIZE + len(payload)] = payload
    return bytes(frame)


def encode_frame_sections(sections: Sequence[bytes], frame_size: int = FRAME_SIZE) -> bytes:
    """
    Encode several discontiguous byte sections, in order, into one frame.

    Args:
        sections: Ordered byte sections (e.g. a header and a body)
        frame_size: Total frame width in bytes
    """
    return encode_frame(b"".join(sections), frame_size)


def decode_frame(frame: bytes, frame_size: Optional[int] = None) -> bytes:
    """
    Decode a frame into its payload.

    Args:
        frame: Raw frame from the radio
        frame_size: Expected frame width; defaults to ``len(frame)``

    Returns:
        The payload (``length`` bytes starting at offset 1)

    Raises:
        FrameDecodeError: If the frame is empty or not ``frame_size`` bytes long
    """
    if frame_size is None:
        frame_size = len(frame)
    if not frame or len(frame) != frame_size:
        raise FrameDecodeError(
            f"Frame size mismatch: got {len(frame)} bytes, expected {frame_size}"
        )

    length = min(frame[0], max_frame_payload(frame_size))
    return bytes(frame[FRAME_HEADER_SIZE:FRAME_HEADER_SIZE + length])
