"""In-memory radio used by the simulator and the test-suite.

Every radio attached to an ``InMemoryRadioBus`` gets its own receive queue,
keyed by its physical address. The bus can drop or duplicate frames through
optional filters, which is how lossy links are simulated.
"""

import queue
import threading
from typing import Callable, Dict, List, Optional, Tuple

from common.logging_setup import get_logger
from common.results import LinkResult
from transport.base import FrameReception, FrameTransport

logger = get_logger(__name__)

# (source address, destination address, frame) -> bool
FrameFilter = Callable[[int, int, bytes], bool]


class InMemoryRadioBus:
    """Shared medium connecting in-memory radios."""

    def __init__(
        self,
        drop_filter: Optional[FrameFilter] = None,
        duplicate_filter: Optional[FrameFilter] = None,
    ):
        self.drop_filter = drop_filter
        self.duplicate_filter = duplicate_filter
        self.history: List[Tuple[int, int, bytes]] = []
        self._queues: Dict[int, "queue.Queue[Tuple[int, bytes]]"] = {}
        self._lock = threading.Lock()

    def _queue_for(self, address: int) -> "queue.Queue[Tuple[int, bytes]]":
        with self._lock:
            if address not in self._queues:
                self._queues[address] = queue.Queue()
            return self._queues[address]

    def send(self, src: int, dest: int, frame: bytes) -> None:
        """Deliver a frame to the radio at ``dest`` (subject to the filters)."""
        with self._lock:
            self.history.append((src, dest, frame))
        if self.drop_filter and self.drop_filter(src, dest, frame):
            logger.debug(f"Bus dropped frame {src:#x} -> {dest:#x}")
            return
        target = self._queue_for(dest)
        target.put((src, frame))
        if self.duplicate_filter and self.duplicate_filter(src, dest, frame):
            logger.debug(f"Bus duplicated frame {src:#x} -> {dest:#x}")
            target.put((src, frame))

    def receive(self, address: int, timeout: Optional[float] = 0) -> Optional[Tuple[int, bytes]]:
        """Pop the next frame for ``address``; None if nothing arrives in time."""
        target = self._queue_for(address)
        try:
            if timeout is not None and timeout <= 0:
                return target.get_nowait()
            return target.get(timeout=timeout)
        except queue.Empty:
            return None

    def inject(self, src: int, dest: int, frame: bytes) -> None:
        """Place a frame straight into a receive queue, bypassing the filters."""
        self._queue_for(dest).put((src, frame))


class InMemoryRadio(FrameTransport):
    """Frame transport backed by an InMemoryRadioBus."""

    def __init__(
        self,
        address: int,
        bus: Optional[InMemoryRadioBus] = None,
        frame_size: int = 32,
    ):
        self.address = address
        self.bus = bus or InMemoryRadioBus()
        self.frame_size = frame_size
        self.frames_sent = 0

    def send(self, address: int, frame: bytes) -> bool:
        if len(frame) != self.frame_size:
            logger.error(
                f"Radio {self.address:#x}: refusing {len(frame)}-byte frame "
                f"(frame size is {self.frame_size})"
            )
            return False
        self.bus.send(self.address, address, bytes(frame))
        self.frames_sent += 1
        return True

    def receive(self, timeout: Optional[float] = None) -> FrameReception:
        item = self.bus.receive(self.address, timeout=timeout)
        if item is None:
            return FrameReception(LinkResult.TIMEOUT)
        src, frame = item
        return FrameReception(LinkResult.SUCCESS, frame, src)
