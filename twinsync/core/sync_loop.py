"""
Sync Loop

Steady-state watch/react cycle: consumes batches of change events for the
tracked pair and copies content in the direction of each detected change,
keeping the held fingerprints current so the echo of its own writes is
ignored.

Author: TwinSync Project
License: MIT
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from ..utils.logger import get_logger
from ..utils.file_ops import Fingerprinter, read_content, write_content
from ..errors import FileIOError
from ..monitoring.watcher import ChangeEvent, EventKind

logger = get_logger(__name__)


@dataclass
class TrackedFile:
    """One side of the mirrored pair."""
    label: str
    path: Path
    input_path: Optional[Path] = None
    digest: Optional[str] = None

    def __post_init__(self):
        self.path = Path(self.path)
        self.input_path = Path(self.input_path) if self.input_path is not None else self.path

    @property
    def parent_directory(self) -> Path:
        """Directory watched for this file."""
        return self.path.parent


@dataclass
class PairState:
    """The two tracked files; the only mutable state of the loop."""
    a: TrackedFile
    b: TrackedFile

    @classmethod
    def from_paths(cls, path_a: Path, path_b: Path) -> 'PairState':
        return cls(a=TrackedFile("A", path_a), b=TrackedFile("B", path_b))

    def watch_directories(self) -> List[Path]:
        """Parent directories to watch, without duplicates."""
        directories = [self.a.parent_directory]
        if self.b.parent_directory != self.a.parent_directory:
            directories.append(self.b.parent_directory)
        return directories


class SyncStatus(Enum):
    """Outcome of processing one touched side."""
    PROPAGATED = "propagated"
    UNCHANGED = "unchanged"
    DIGEST_FAILED = "digest_failed"
    READ_FAILED = "read_failed"
    WRITE_FAILED = "write_failed"


class SyncResult:
    """Result of reacting to a change on one side."""

    def __init__(
        self,
        source: str,
        destination: str,
        status: SyncStatus,
        digest: Optional[str] = None,
        bytes_copied: int = 0,
        error_message: Optional[str] = None
    ):
        """
        Initialize sync result.

        Args:
            source: Label of the side that was inspected
            destination: Label of the opposite side
            status: Sync status
            digest: Fingerprint observed on the source side
            bytes_copied: Number of bytes written to the destination
            error_message: Error message if failed
        """
        self.source = source
        self.destination = destination
        self.status = status
        self.digest = digest
        self.bytes_copied = bytes_copied
        self.error_message = error_message
        self.timestamp = datetime.now()

    def __repr__(self) -> str:
        return f"SyncResult({self.source}->{self.destination}, status={self.status.value})"


def _empty_stats() -> Dict[str, int]:
    return {
        "batches": 0,
        "propagations": 0,
        "echoes_suppressed": 0,
        "errors": 0
    }


class SyncLoop:
    """
    Reacts to change events on the tracked pair.

    Processing is strictly sequential: A is handled before B within every
    batch, so the held fingerprints need no locking. File I/O goes through
    the injected ``reader`` and ``writer`` callables.
    """

    def __init__(
        self,
        state: PairState,
        fingerprinter: Optional[Fingerprinter] = None,
        reader: Callable[[Path], bytes] = read_content,
        writer: Callable[[Path, bytes], None] = write_content
    ):
        """
        Initialize sync loop.

        Args:
            state: Tracked pair, with digests already set by reconciliation
            fingerprinter: Fingerprint calculator (default: CRC-32)
            reader: Reads a file's full content
            writer: Writes content over a file
        """
        self.state = state
        self.fingerprinter = fingerprinter or Fingerprinter()
        self.reader = reader
        self.writer = writer
        self.stats = _empty_stats()

    def run(self, batches: Iterable[List[ChangeEvent]]) -> None:
        """
        Process event batches until the stream ends.

        Per-event I/O failures are logged and never end the loop; errors
        raised by the stream itself propagate.
        """
        logger.info("Watching for changes...")

        for batch in batches:
            self.handle_batch(batch)

        logger.info("Event stream closed, sync loop stopped")

    def handle_batch(self, events: Iterable[ChangeEvent]) -> List[SyncResult]:
        """
        React to one debounced batch of change events.

        Args:
            events: Change events collected during one debounce window

        Returns:
            One SyncResult per touched side, A first
        """
        self.stats["batches"] += 1

        path_a = str(self.state.a.path)
        path_b = str(self.state.b.path)
        touches_a = False
        touches_b = False

        for event in events:
            if event.kind == EventKind.ACCESS:
                continue
            if path_a in event.paths:
                touches_a = True
            if path_b in event.paths:
                touches_b = True

        results = []
        if touches_a:
            results.append(self._sync_side(self.state.a, self.state.b))
        if touches_b:
            results.append(self._sync_side(self.state.b, self.state.a))

        return results

    def _sync_side(self, source: TrackedFile, destination: TrackedFile) -> SyncResult:
        """
        Propagate a change from source to destination if there is one.

        Args:
            source: Side reported as touched
            destination: Opposite side

        Returns:
            SyncResult describing what happened
        """
        try:
            new_digest = self.fingerprinter.digest(source.path)
        except FileIOError as e:
            logger.warning(f"Error hashing {source.label}: {e}")
            self.stats["errors"] += 1
            return SyncResult(
                source=source.label,
                destination=destination.label,
                status=SyncStatus.DIGEST_FAILED,
                error_message=str(e)
            )

        if new_digest == source.digest:
            logger.debug(f"File {source.label} unchanged ({new_digest}), ignoring event")
            self.stats["echoes_suppressed"] += 1
            return SyncResult(
                source=source.label,
                destination=destination.label,
                status=SyncStatus.UNCHANGED,
                digest=new_digest
            )

        logger.info(
            f"File {source.label} changed (hash: {new_digest}). "
            f"Syncing to {destination.label}..."
        )

        try:
            content = self.reader(source.path)
        except FileIOError as e:
            # Held digest stays stale so the next event retries
            logger.error(f"Error reading {source.label}: {e}")
            self.stats["errors"] += 1
            return SyncResult(
                source=source.label,
                destination=destination.label,
                status=SyncStatus.READ_FAILED,
                digest=new_digest,
                error_message=str(e)
            )

        source.digest = new_digest

        try:
            self.writer(destination.path, content)
        except FileIOError as e:
            logger.error(f"Error writing {destination.label}: {e}")
            self.stats["errors"] += 1
            return SyncResult(
                source=source.label,
                destination=destination.label,
                status=SyncStatus.WRITE_FAILED,
                digest=new_digest,
                error_message=str(e)
            )

        destination.digest = new_digest
        self.stats["propagations"] += 1

        logger.debug(f"Copied {len(content)} bytes {source.label} -> {destination.label}")

        return SyncResult(
            source=source.label,
            destination=destination.label,
            status=SyncStatus.PROPAGATED,
            digest=new_digest,
            bytes_copied=len(content)
        )

    def get_stats(self) -> Dict[str, int]:
        """Get loop statistics."""
        return self.stats.copy()

    def reset_stats(self):
        """Reset statistics counters."""
        self.stats = _empty_stats()
        logger.info("Statistics reset")
