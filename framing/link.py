"""Link layer: one payload in one frame, to or from a physical address."""

from dataclasses import dataclass
from typing import Optional, Sequence, Union

from common.logging_setup import get_logger
from common.results import LinkResult
from framing.codec import FrameDecodeError, decode_frame, encode_frame_sections
from framing.frame import max_frame_payload
from transport.base import FrameTransport

logger = get_logger(__name__)


@dataclass
class LinkReception:
    """Payload received by the link layer."""

    result: LinkResult
    payload: bytes = b""
    source_address: Optional[int] = None


class LinkLayer:
    """Frames outgoing payloads and unframes incoming ones."""

    def __init__(self, transport: FrameTransport):
        self.transport = transport
        self.frame_size = transport.frame_size

    @property
    def max_payload(self) -> int:
        return max_frame_payload(self.frame_size)

    def send(self, address: int, payload: Union[bytes, Sequence[bytes]]) -> LinkResult:
        """
        Send a payload, or an ordered list of payload sections, in one frame.

        Returns:
            LinkResult.SUCCESS if the radio accepted the frame, ERROR otherwise
        """
        sections = [payload] if isinstance(payload, (bytes, bytearray)) else list(payload)
        frame = encode_frame_sections(sections, self.frame_size)
        if not self.transport.send(address, frame):
            logger.error(f"Link send to {address:#x} failed")
            return LinkResult.ERROR
        logger.debug(f"Link sent {frame[0]} bytes to {address:#x}")
        return LinkResult.SUCCESS

    def receive(self, timeout: Optional[float] = None) -> LinkReception:
        """Wait for one frame and return its payload."""
        reception = self.transport.receive(timeout)
        if reception.result is not LinkResult.SUCCESS:
            return LinkReception(reception.result)
        try:
            payload = decode_frame(reception.frame, self.frame_size)
        except FrameDecodeError as e:
            logger.error(f"Dropping malformed frame: {e}")
            return LinkReception(LinkResult.ERROR)
        return LinkReception(LinkResult.SUCCESS, payload, reception.source_address)
