"""
File System Watcher

Watches the parent directories of the tracked pair with the watchdog
library and delivers debounced batches of change events through a
blocking queue.

Author: TwinSync Project
License: MIT
"""

import os
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from queue import Queue
from threading import Event, Lock, Thread
from typing import Callable, FrozenSet, Iterable, Iterator, List, Optional, Union

from watchdog.observers import Observer
from watchdog.events import (
    FileSystemEvent,
    FileSystemEventHandler,
    EVENT_TYPE_CLOSED,
    EVENT_TYPE_CLOSED_NO_WRITE,
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    EVENT_TYPE_OPENED,
)

from ..utils.logger import get_logger
from ..errors import WatchSubsystemError

logger = get_logger(__name__)


class EventKind(Enum):
    """Kind of a filesystem change."""
    CREATE = "create"
    MODIFY = "modify"
    REMOVE = "remove"
    ACCESS = "access"
    OTHER = "other"


# A rename onto a tracked path (editors saving atomically) is a content change
EVENT_KINDS = {
    EVENT_TYPE_CREATED: EventKind.CREATE,
    EVENT_TYPE_MODIFIED: EventKind.MODIFY,
    EVENT_TYPE_MOVED: EventKind.MODIFY,
    EVENT_TYPE_CLOSED: EventKind.MODIFY,
    EVENT_TYPE_DELETED: EventKind.REMOVE,
    EVENT_TYPE_OPENED: EventKind.ACCESS,
    EVENT_TYPE_CLOSED_NO_WRITE: EventKind.ACCESS,
}


@dataclass(frozen=True)
class ChangeEvent:
    """A filesystem change affecting one or more paths."""
    paths: FrozenSet[str]
    kind: EventKind

    @classmethod
    def of(cls, kind: EventKind, *paths: Union[str, Path]) -> 'ChangeEvent':
        """Build an event from any number of paths."""
        return cls(paths=frozenset(str(p) for p in paths), kind=kind)


def to_change_event(event: FileSystemEvent) -> ChangeEvent:
    """
    Convert a watchdog event into a ChangeEvent.

    Moves carry both the source and destination path.
    """
    kind = EVENT_KINDS.get(event.event_type, EventKind.OTHER)

    paths = [os.fsdecode(event.src_path)]
    dest_path = getattr(event, 'dest_path', None)
    if dest_path:
        paths.append(os.fsdecode(dest_path))

    return ChangeEvent.of(kind, *paths)


class DebouncedEventHandler(FileSystemEventHandler):
    """
    Collects file events and releases them together once no new event has
    arrived for the debounce window.

    A burst of events (an editor truncating then writing, say) therefore
    arrives as one batch, however long the burst lasts.
    """

    def __init__(self, debounce_seconds: float = 0.5, clock: Callable[[], float] = time.monotonic):
        """
        Initialize debounced handler.

        Args:
            debounce_seconds: Quiet period required before pending events are released
            clock: Monotonic time source
        """
        super().__init__()
        self.debounce_seconds = debounce_seconds
        self.clock = clock

        self._pending: List[ChangeEvent] = []
        self._last_event: Optional[float] = None
        self._lock = Lock()

    def on_any_event(self, event: FileSystemEvent):
        """Buffer every non-directory event."""
        if event.is_directory:
            return

        change = to_change_event(event)
        with self._lock:
            self._pending.append(change)
            self._last_event = self.clock()

    def flush_ready(self, now: Optional[float] = None) -> List[ChangeEvent]:
        """
        Take all pending events once the burst has settled.

        Nothing is released while the latest event is younger than the
        debounce window.

        Args:
            now: Current clock value (default: clock())

        Returns:
            Ready events in arrival order (possibly empty)
        """
        if now is None:
            now = self.clock()

        with self._lock:
            if self._last_event is None or now - self._last_event < self.debounce_seconds:
                return []

            ready = self._pending
            self._pending = []
            self._last_event = None

        return ready

    def pending_count(self) -> int:
        """Number of events waiting in the debounce window."""
        with self._lock:
            return len(self._pending)


_CLOSED = object()


class PairWatcher:
    """
    Non-recursive watches on up to two directories.

    The watchdog observer thread feeds a DebouncedEventHandler; a collector
    thread moves ready batches onto a queue that ``batches()`` drains with
    blocking reads.
    """

    def __init__(
        self,
        directories: Iterable[Union[str, Path]],
        debounce_seconds: float = 0.5,
        poll_interval: float = 0.1,
        observer_factory: Callable[[], Observer] = Observer
    ):
        """
        Initialize pair watcher.

        Args:
            directories: Directories to watch (duplicates are ignored)
            debounce_seconds: Debounce window for coalescing events
            poll_interval: How often the collector checks for ready events
            observer_factory: Creates the watchdog observer
        """
        self.directories: List[Path] = []
        for directory in directories:
            directory = Path(directory)
            if directory not in self.directories:
                self.directories.append(directory)

        self.poll_interval = poll_interval
        self.handler = DebouncedEventHandler(debounce_seconds=debounce_seconds)
        self.observer = observer_factory()
        self.queue: "Queue[object]" = Queue()

        self._stop_event = Event()
        self._collector_thread: Optional[Thread] = None
        self._running = False

        logger.debug(f"PairWatcher initialized for {len(self.directories)} directories")

    def start(self):
        """
        Schedule the watches and start the observer and collector threads.

        Raises:
            WatchSubsystemError: If the watches cannot be registered
        """
        if self._running:
            logger.warning("PairWatcher already running")
            return

        try:
            for directory in self.directories:
                self.observer.schedule(self.handler, str(directory), recursive=False)
                logger.info(f"Watching directory: {directory}")
            self.observer.start()
        except OSError as e:
            raise WatchSubsystemError(f"Failed to start watching: {e}") from e

        self._running = True
        self._stop_event.clear()

        self._collector_thread = Thread(target=self._collector_loop, name="twinsync-collector", daemon=True)
        self._collector_thread.start()

        logger.debug("PairWatcher started")

    def stop(self):
        """Stop watching and close the batch stream."""
        if not self._running:
            return

        self._running = False
        self._stop_event.set()

        self.observer.stop()
        self.observer.join(timeout=5)

        if self._collector_thread:
            self._collector_thread.join(timeout=5)

        self.queue.put(_CLOSED)
        logger.info("PairWatcher stopped")

    def is_running(self) -> bool:
        """Check if the watcher is currently running."""
        return self._running

    def collect_once(self) -> bool:
        """
        Move ready events onto the queue as one batch.

        Returns:
            False if the observer has died or is being stopped, True otherwise
        """
        batch = self.handler.flush_ready()
        if batch:
            self.queue.put(batch)

        if self._running and not self.observer.is_alive():
            # stop() sets the event before stopping the observer
            if self._stop_event.is_set():
                return False
            logger.error("Filesystem observer stopped unexpectedly")
            self.queue.put(WatchSubsystemError("Filesystem observer stopped unexpectedly"))
            return False

        return True

    def _collector_loop(self):
        """Thread loop that turns debounced events into batches."""
        while not self._stop_event.wait(self.poll_interval):
            if not self.collect_once():
                break

    def batches(self) -> Iterator[List[ChangeEvent]]:
        """
        Yield event batches until the watcher is stopped.

        Raises:
            WatchSubsystemError: If the observer fails while running
        """
        while True:
            item = self.queue.get()
            if item is _CLOSED:
                return
            if isinstance(item, WatchSubsystemError):
                raise item
            yield item
