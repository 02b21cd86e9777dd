"""Outcome types shared by the layers of the CubeNet stack.

Each layer reports a coarse outcome to the layer above it. Only
``TransportResult`` values are ever seen by application code; the attempt
results are consumed by the transport retry loops.
"""

from enum import Enum


class LinkResult(Enum):
    """Outcome of a link-layer (single frame) operation."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    ERROR = "error"


class NetworkResult(Enum):
    """Outcome of a network-layer operation."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    ERROR = "error"


class TransportResult(Enum):
    """Outcome of sending or receiving a whole message."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    IO_ERROR = "io_error"
    ATTEMPT_LIMIT_REACHED = "attempt_limit_reached"

    @property
    def reason(self) -> str:
        """Human readable reason, used in log lines."""
        return _REASONS[self]


_REASONS = {
    TransportResult.SUCCESS: "succeeded",
    TransportResult.TIMEOUT: "timed out waiting for the peer",
    TransportResult.IO_ERROR: "underlying frame transport failed",
    TransportResult.ATTEMPT_LIMIT_REACHED: "attempt limit reached",
}


class AttemptResult(Enum):
    """Outcome of one transmit-and-wait-for-ACK attempt."""

    SUCCESS = "success"
    NOT_ACKNOWLEDGED = "not_acknowledged"
    NOT_AN_ACK = "not_an_ack"
    OLD_ACK = "old_ack"
    IO_ERROR = "io_error"


class RxAttemptResult(Enum):
    """Outcome of receiving and acknowledging one segment."""

    SUCCESS = "success"
    OUTDATED = "outdated"
    MALFORMED = "malformed"
    TIMEOUT = "timeout"
    IO_ERROR = "io_error"


def to_network_result(result: LinkResult) -> NetworkResult:
    """Map a link outcome onto the network layer's outcome."""
    return NetworkResult(result.value)
