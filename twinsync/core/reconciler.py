"""
Reconciler

Resolves pre-existing divergence between the two files once, at startup,
before the sync loop begins watching.

Author: TwinSync Project
License: MIT
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ..utils.logger import get_logger
from ..utils.file_ops import (
    Fingerprinter,
    backup_path_for,
    get_file_size,
    read_content,
    write_content
)
from ..errors import FileIOError, UnresolvedDivergence
from .sync_loop import PairState, TrackedFile

logger = get_logger(__name__)


class SyncDecision(Enum):
    """Initial convergence decision."""
    NOOP = "noop"
    COPY_A_TO_B = "copy_a_to_b"
    COPY_B_TO_A = "copy_b_to_a"
    CONFLICT_BACKUP_THEN_COPY = "conflict_backup_then_copy"


class Direction(Enum):
    """Copy direction."""
    A_TO_B = "a_to_b"
    B_TO_A = "b_to_a"


@dataclass
class ReconcileResult:
    """Outcome of reconciliation."""
    decision: SyncDecision
    direction: Optional[Direction] = None
    backups: List[Path] = field(default_factory=list)


class Reconciler:
    """
    One-shot startup reconciliation.

    Identical files are left alone. Differing files are only touched when
    overwriting is allowed: an empty side receives the other side's
    content, and when both sides have content both are backed up and A
    wins.
    """

    def __init__(self, fingerprinter: Optional[Fingerprinter] = None):
        """
        Initialize reconciler.

        Args:
            fingerprinter: Fingerprint calculator (default: CRC-32)
        """
        self.fingerprinter = fingerprinter or Fingerprinter()

    def _try_digest(self, tracked: TrackedFile) -> Optional[str]:
        try:
            return self.fingerprinter.digest(tracked.path)
        except FileIOError as e:
            logger.warning(f"Could not hash {tracked.label}, treating it as unknown: {e}")
            return None

    def reconcile(self, state: PairState, overwrite_allowed: bool) -> ReconcileResult:
        """
        Bring the pair into agreement and seed the held digests.

        Args:
            state: Tracked pair; digests are updated in place
            overwrite_allowed: Whether differing files may be overwritten

        Returns:
            ReconcileResult with the decision taken

        Raises:
            UnresolvedDivergence: If the files differ and overwrite_allowed is False
            FileIOError: If a size probe, backup, or copy fails
        """
        a, b = state.a, state.b

        a.digest = self._try_digest(a)
        b.digest = self._try_digest(b)

        logger.info(f"Initial hashes -> A: {a.digest}, B: {b.digest}")

        # An unknown digest never matches, not even another unknown one
        if a.digest is not None and a.digest == b.digest:
            logger.info("Files are identical")
            return ReconcileResult(SyncDecision.NOOP)

        if not overwrite_allowed:
            raise UnresolvedDivergence(a.path, b.path)

        len_a = get_file_size(a.path)
        len_b = get_file_size(b.path)

        if len_a > 0 and len_b > 0:
            logger.warning("Conflict! Both files have content. Backing up both, A wins")
            backups = [self._backup(a), self._backup(b)]
            self._copy(a, b)
            return ReconcileResult(
                SyncDecision.CONFLICT_BACKUP_THEN_COPY,
                direction=Direction.A_TO_B,
                backups=backups
            )

        if len_a > 0:
            logger.info("B is empty. Syncing A -> B")
            self._copy(a, b)
            return ReconcileResult(SyncDecision.COPY_A_TO_B, direction=Direction.A_TO_B)

        if len_b > 0:
            logger.info("A is empty. Syncing B -> A")
            self._copy(b, a)
            return ReconcileResult(SyncDecision.COPY_B_TO_A, direction=Direction.B_TO_A)

        logger.info("Both files are empty")
        return ReconcileResult(SyncDecision.NOOP)

    def _backup(self, tracked: TrackedFile) -> Path:
        """Snapshot a file's full content to its backup path."""
        backup_path = backup_path_for(tracked.input_path)
        write_content(backup_path, read_content(tracked.path))
        logger.info(f"Backed up {tracked.label} to {backup_path}")
        return backup_path

    def _copy(self, source: TrackedFile, destination: TrackedFile):
        """Copy source over destination and carry the source digest across."""
        content = read_content(source.path)
        write_content(destination.path, content)

        if source.digest is None:
            source.digest = self.fingerprinter.digest_bytes(content)
        destination.digest = source.digest

        logger.info(f"Copied {len(content)} bytes {source.label} -> {destination.label}")
