"""
Orchestrator

Wires validation, reconciliation and the sync loop together for one
file pair.

Author: TwinSync Project
License: MIT
"""

from pathlib import Path
from typing import Optional, Union

from ..utils.logger import get_logger
from ..utils.file_ops import Fingerprinter
from ..config.schema import Config
from ..errors import InvalidPath
from ..monitoring.watcher import PairWatcher
from .classifier import TextClassifier
from .validator import PairValidator
from .reconciler import Reconciler, ReconcileResult
from .sync_loop import PairState, SyncLoop, TrackedFile

logger = get_logger(__name__)


def canonicalize(path: Union[str, Path]) -> Path:
    """
    Resolve a path to an absolute, symlink-free path that must exist.

    Raises:
        InvalidPath: If the path does not exist or is not a regular file
    """
    try:
        resolved = Path(path).resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise InvalidPath(f"File must exist: {path} ({e})") from e

    if not resolved.is_file():
        raise InvalidPath(f"Not a regular file: {path}")

    return resolved


class PairSyncService:
    """
    Keeps one pair of files mirrored.

    ``initialize()`` validates and reconciles; ``run()`` then watches until
    the event stream closes. Every startup failure raises before any watch
    is registered.
    """

    def __init__(
        self,
        config: Config,
        path_a: Union[str, Path],
        path_b: Union[str, Path],
        overwrite: bool = False
    ):
        """
        Initialize the service.

        Args:
            config: Application configuration
            path_a: First file, as given by the operator
            path_b: Second file, as given by the operator
            overwrite: Allow reconciliation to overwrite differing files
        """
        self.config = config
        self.overwrite = overwrite

        canonical_a = canonicalize(path_a)
        canonical_b = canonicalize(path_b)

        if canonical_a == canonical_b:
            raise InvalidPath(f"Both paths refer to the same file: {canonical_a}")

        self.state = PairState(
            a=TrackedFile("A", canonical_a, input_path=Path(path_a)),
            b=TrackedFile("B", canonical_b, input_path=Path(path_b))
        )

        self.fingerprinter = Fingerprinter(
            algorithm=config.sync.hash_algorithm,
            chunk_size=config.sync.chunk_size
        )
        self.validator = PairValidator(TextClassifier(sniff_bytes=config.sync.sniff_bytes))
        self.reconciler = Reconciler(self.fingerprinter)
        self.sync_loop = SyncLoop(self.state, self.fingerprinter)

        self.watcher: Optional[PairWatcher] = None
        self.reconcile_result: Optional[ReconcileResult] = None

    def initialize(self) -> ReconcileResult:
        """
        Validate the pair and reconcile it.

        Raises:
            ValidationError: If the pair is not eligible
            UnresolvedDivergence: If the files differ without overwrite
            FileIOError: If reconciliation I/O fails
        """
        logger.info(f"Linking: {self.state.a.path} <==> {self.state.b.path}")

        self.validator.validate(self.state.a.path, self.state.b.path)
        self.reconcile_result = self.reconciler.reconcile(self.state, self.overwrite)

        logger.info(f"Reconciliation decision: {self.reconcile_result.decision.value}")
        return self.reconcile_result

    def run(self):
        """
        Watch the pair until the watcher is stopped.

        Raises:
            WatchSubsystemError: If the watch subsystem fails
        """
        if self.reconcile_result is None:
            self.initialize()

        self.watcher = PairWatcher(
            self.state.watch_directories(),
            debounce_seconds=self.config.sync.debounce_ms / 1000.0,
            poll_interval=self.config.sync.poll_interval_ms / 1000.0
        )
        self.watcher.start()

        try:
            self.sync_loop.run(self.watcher.batches())
        finally:
            self.watcher.stop()

    def stop(self):
        """Stop watching; run() returns once the stream closes."""
        if self.watcher:
            self.watcher.stop()
