"""Frame transport interface.

A frame transport moves exactly one fixed-size frame at a time to or from a
physical address. It has no notion of packets, ports or reliability.
"""

from dataclasses import dataclass
from typing import Optional

from common.results import LinkResult


@dataclass
class FrameReception:
    """Result of waiting for one frame."""

    result: LinkResult
    frame: bytes = b""
    source_address: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.result is LinkResult.SUCCESS


class FrameTransport:
    """Base class for radios that exchange fixed-size frames."""

    #: Number of bytes in every frame this transport carries
    frame_size: int = 32

    def send(self, address: int, frame: bytes) -> bool:
        """
        Transmit one frame to a physical address.

        Returns:
            True if the radio accepted the frame, False on failure
        """
        raise NotImplementedError

    def receive(self, timeout: Optional[float] = None) -> FrameReception:
        """
        Wait for one frame addressed to this radio.

        Args:
            timeout: Seconds to wait, None to wait indefinitely

        Returns:
            FrameReception with SUCCESS, TIMEOUT or ERROR
        """
        raise NotImplementedError

    def close(self) -> None:
        """Release the radio."""
