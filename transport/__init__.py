"""Frame transports for the CubeNet radio stack."""

from transport.base import FrameReception, FrameTransport
from transport.memory import InMemoryRadio, InMemoryRadioBus
from transport.meshtastic_transport import MeshtasticFrameTransport

__all__ = [
    "FrameReception",
    "FrameTransport",
    "InMemoryRadio",
    "InMemoryRadioBus",
    "MeshtasticFrameTransport",
]
