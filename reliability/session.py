"""Stop-and-wait transport session.

Messages are sent as START, DATA... and END segments. Every segment carries
a one-bit sequence number and must be acknowledged before the next one is
sent.

Receiver side: every segment is acknowledged first, with the complement of
its sequence bit, whatever the receiver expected. The segment is processed
only if its bit matches the expected bit; otherwise the sender missed our
previous ACK and sent the same segment again.

Transmitter side: both ends start at sequence bit 0. An ACK carrying the
bit we just sent is stale and the segment is sent again; an ACK carrying
the other bit means the segment arrived.

Only one sender may talk to a session at a time: the expected bit is not
keyed by sender.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Tuple

from common.addressing import AddressResolver
from common.chunking import iter_chunks
from common.config import Config
from common.errors import AddressResolutionError, RoutingError
from common.logging_setup import get_logger
from common.results import AttemptResult, NetworkResult, RxAttemptResult, TransportResult
from network.router import NetworkRouter
from reliability.segment import (
    DATA_SEGMENT_HEADER_SIZE,
    MAX_MESSAGE_LEN,
    AckSegment,
    DataSegment,
    EndSegment,
    Segment,
    SegmentDecodeError,
    StartSegment,
    decode_segment,
    describe,
    next_seq,
)

logger = get_logger(__name__)


class ReceiverState(Enum):
    """Receiver state machine states."""

    IDLE = auto()
    RECEIVING = auto()


@dataclass
class SessionStats:
    """Counters for one transport session."""

    segments_sent: int = 0
    retransmits: int = 0
    acks_sent: int = 0
    duplicates: int = 0
    messages_sent: int = 0
    messages_received: int = 0
    created_at: float = field(default_factory=time.time)


@dataclass
class TransportReception:
    """A complete message, or the reason none was received."""

    result: TransportResult
    message: bytes = b""
    source_port: Optional[int] = None
    message_len: int = 0

    @property
    def ok(self) -> bool:
        return self.result is TransportResult.SUCCESS


class TransportSession:
    """
    One logical conversation endpoint on a port.

    Create one session per port and keep it for as long as the port is in
    use: the receiver's expected sequence bit lives here.
    """

    def __init__(
        self,
        router: NetworkRouter,
        resolver: AddressResolver,
        port: int,
        config: Optional[Config] = None,
    ):
        """
        Initialize a session.

        Args:
            router: Network layer to send and receive segments through
            resolver: Maps ports to the nodes that own them
            port: This endpoint's port
            config: Timing, retry and buffer settings
        """
        self.router = router
        self.resolver = resolver
        self.port = port
        self.config = config or Config()

        self.expected_seq = 0
        self.state = ReceiverState.IDLE
        self.stats = SessionStats()

    @property
    def max_segment_payload(self) -> int:
        """Largest chunk of message data one DATA segment carries."""
        return self.router.max_payload - DATA_SEGMENT_HEADER_SIZE

    # ------------------------------------------------------------------ send

    def segment_message(self, message: bytes, dest_port: int) -> List[Segment]:
        """
        Split a message into its START, DATA and END segments.

        The sequence bit alternates from 0; each segment is only sent once
        the previous one is acknowledged, so segment i always carries i % 2.
        """
        segments: List[Segment] = [
            StartSegment(0, dest_port, self.port, message_len=len(message))
        ]
        for offset, chunk in iter_chunks(message, self.max_segment_payload):
            seq = len(segments) % 2
            segments.append(DataSegment(seq, dest_port, self.port, offset=offset, chunk=chunk))
        segments.append(EndSegment(len(segments) % 2, dest_port, self.port))
        return segments

    def send(self, message: bytes, dest_port: int) -> TransportResult:
        """
        Send a whole message to ``dest_port``.

        Returns:
            SUCCESS, IO_ERROR or ATTEMPT_LIMIT_REACHED

        Raises:
            ValueError: If the message is longer than 65535 bytes
            AddressResolutionError: If no node owns ``dest_port``
        """
        if len(message) > MAX_MESSAGE_LEN:
            raise ValueError(f"message of {len(message)} bytes exceeds {MAX_MESSAGE_LEN}")

        dest_node = self.resolver.resolve_network_address(dest_port)
        spacing_s = self.config.segment_spacing_ms / 1000.0

        segments = self.segment_message(bytes(message), dest_port)
        for index, segment in enumerate(segments):
            result = self._send_segment(segment, dest_node)
            if result is not TransportResult.SUCCESS:
                logger.warning(
                    f"Port {self.port:#04x}: message to port {dest_port:#04x} failed "
                    f"at {describe(segment)}: {result.reason}"
                )
                return result
            # Throttle our own output between segments
            if index < len(segments) - 1:
                time.sleep(spacing_s)

        self.stats.messages_sent += 1
        logger.info(
            f"Port {self.port:#04x}: sent {len(message)}-byte message to port {dest_port:#04x}"
        )
        return TransportResult.SUCCESS

    def _send_segment(self, segment: Segment, dest_node: int) -> TransportResult:
        """Send one segment until it is acknowledged or the attempt limit is hit."""
        retry_delay_s = self.config.retry_delay_ms / 1000.0

        for attempt in range(1, self.config.attempt_limit + 1):
            if attempt > 1:
                self.stats.retransmits += 1
            result = self._attempt_tx(segment, dest_node)

            if result is AttemptResult.SUCCESS:
                return TransportResult.SUCCESS
            if result is AttemptResult.IO_ERROR:
                return TransportResult.IO_ERROR

            logger.debug(
                f"Port {self.port:#04x}: {describe(segment)} attempt {attempt} "
                f"got {result.value}"
            )
            if attempt < self.config.attempt_limit:
                time.sleep(retry_delay_s)

        return TransportResult.ATTEMPT_LIMIT_REACHED

    def _attempt_tx(self, segment: Segment, dest_node: int) -> AttemptResult:
        """Transmit a segment once and wait for its acknowledgement."""
        self.stats.segments_sent += 1
        if self.router.transmit(segment.encode(), dest_node) is not NetworkResult.SUCCESS:
            return AttemptResult.IO_ERROR
        logger.debug(f"Port {self.port:#04x}: sent {describe(segment)}")

        reception = self.router.receive(timeout=self.config.ack_timeout_ms / 1000.0)
        if reception.result is NetworkResult.TIMEOUT:
            return AttemptResult.NOT_ACKNOWLEDGED
        if reception.result is NetworkResult.ERROR:
            return AttemptResult.IO_ERROR

        try:
            reply = decode_segment(reception.payload)
        except SegmentDecodeError:
            return AttemptResult.NOT_AN_ACK
        if not isinstance(reply, AckSegment):
            return AttemptResult.NOT_AN_ACK
        if reply.seq == segment.seq:
            return AttemptResult.OLD_ACK
        return AttemptResult.SUCCESS

    # --------------------------------------------------------------- receive

    def receive(
        self,
        timeout: Optional[float] = None,
        buffer: Optional[bytearray] = None,
    ) -> TransportReception:
        """
        Receive one complete message.

        Args:
            timeout: Longest wait, in seconds, for each new segment; None
                waits indefinitely. Retransmitted segments do not extend it.
            buffer: Caller-owned reassembly buffer; its length is the
                message capacity. A buffer of ``max_message_len`` bytes is
                used when omitted.

        Returns:
            TransportReception with SUCCESS, TIMEOUT or IO_ERROR. On success
            ``message`` holds the first ``message_len`` bytes of the buffer.
        """
        if buffer is None:
            buffer = bytearray(self.config.max_message_len)
        buffer[:] = bytes(len(buffer))

        self.state = ReceiverState.IDLE
        message_len = 0
        source_port: Optional[int] = None

        while True:
            result, segment = self._next_segment(timeout)
            if result is not TransportResult.SUCCESS:
                self.state = ReceiverState.IDLE
                return TransportReception(result, source_port=source_port)

            if self.state is ReceiverState.IDLE:
                if isinstance(segment, StartSegment):
                    source_port = segment.src_port
                    message_len = segment.message_len
                    buffer[:] = bytes(len(buffer))
                    self.state = ReceiverState.RECEIVING
                    logger.debug(
                        f"Port {self.port:#04x}: receiving {message_len}-byte message "
                        f"from port {source_port:#04x}"
                    )
                else:
                    logger.debug(f"Port {self.port:#04x}: ignoring {describe(segment)} while idle")
                continue

            if isinstance(segment, DataSegment):
                self._write_chunk(buffer, segment)
            elif isinstance(segment, EndSegment):
                self.state = ReceiverState.IDLE
                self.stats.messages_received += 1
                message = bytes(buffer[:min(message_len, len(buffer))])
                logger.info(
                    f"Port {self.port:#04x}: received {len(message)}-byte message "
                    f"from port {source_port:#04x}"
                )
                return TransportReception(
                    TransportResult.SUCCESS, message, source_port, message_len
                )
            elif isinstance(segment, StartSegment):
                # Sender restarted the message; keep what is already written
                message_len = segment.message_len

    def _write_chunk(self, buffer: bytearray, segment: DataSegment) -> None:
        """Write a DATA chunk at its offset, clipped to the buffer."""
        start = segment.offset
        end = min(start + len(segment.chunk), len(buffer))
        if end < start + len(segment.chunk):
            logger.warning(
                f"Port {self.port:#04x}: chunk at offset {start} overflows "
                f"{len(buffer)}-byte buffer, clipping"
            )
        if start < end:
            buffer[start:end] = segment.chunk[:end - start]

    def _next_segment(self, timeout: Optional[float]) -> Tuple[TransportResult, Optional[Segment]]:
        """Receive until a new (not retransmitted) segment arrives."""
        deadline = time.monotonic() + timeout if timeout is not None else None

        while True:
            remaining = None
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return TransportResult.TIMEOUT, None

            result, segment = self._attempt_rx(remaining)
            if result is RxAttemptResult.SUCCESS:
                return TransportResult.SUCCESS, segment
            if result is RxAttemptResult.TIMEOUT:
                return TransportResult.TIMEOUT, None
            if result is RxAttemptResult.IO_ERROR:
                return TransportResult.IO_ERROR, None

    def _attempt_rx(self, timeout: Optional[float]) -> Tuple[RxAttemptResult, Optional[Segment]]:
        """Receive one segment, acknowledge it and check that it is new."""
        reception = self.router.receive(timeout=timeout)
        if reception.result is NetworkResult.TIMEOUT:
            return RxAttemptResult.TIMEOUT, None
        if reception.result is NetworkResult.ERROR:
            return RxAttemptResult.IO_ERROR, None

        try:
            segment = decode_segment(reception.payload)
        except SegmentDecodeError as e:
            logger.warning(f"Port {self.port:#04x}: skipping bad segment: {e}")
            return RxAttemptResult.MALFORMED, None

        time.sleep(self.config.ack_delay_ms / 1000.0)
        try:
            self._send_ack(segment)
        except (RoutingError, AddressResolutionError) as e:
            logger.warning(f"Port {self.port:#04x}: cannot acknowledge {describe(segment)}: {e}")
            return RxAttemptResult.MALFORMED, None

        # The sender starts every message at bit 0
        if isinstance(segment, StartSegment):
            self.expected_seq = segment.seq

        if segment.seq != self.expected_seq:
            self.stats.duplicates += 1
            logger.debug(f"Port {self.port:#04x}: outdated {describe(segment)}")
            return RxAttemptResult.OUTDATED, segment

        self.expected_seq = next_seq(self.expected_seq)
        logger.debug(f"Port {self.port:#04x}: got {describe(segment)}")
        return RxAttemptResult.SUCCESS, segment

    def _send_ack(self, segment: Segment) -> None:
        ack = AckSegment(next_seq(segment.seq), dest_port=segment.src_port, src_port=self.port)
        dest_node = self.resolver.resolve_network_address(segment.src_port)
        result = self.router.transmit(ack.encode(), dest_node)
        if result is NetworkResult.SUCCESS:
            self.stats.acks_sent += 1
        else:
            # The sender retransmits and we acknowledge again
            logger.debug(f"Port {self.port:#04x}: failed to send {describe(ack)}")
