"""Link framing for the CubeNet radio stack."""

from framing.frame import FRAME_SIZE, max_frame_payload
from framing.codec import FrameDecodeError, decode_frame, encode_frame, encode_frame_sections
from framing.link import LinkLayer, LinkReception

__all__ = [
    "FRAME_SIZE",
    "max_frame_payload",
    "FrameDecodeError",
    "decode_frame",
    "encode_frame",
    "encode_frame_sections",
    "LinkLayer",
    "LinkReception",
]
