"""
Tests for the Orchestrator and CLI

Covers startup wiring (canonicalization, validation, reconciliation),
exit codes of the command-line entry point, and one end-to-end run
against real filesystem notifications.

Author: TwinSync Project
License: MIT
"""

import logging
import threading
import time
import pytest
from click.testing import CliRunner

from twinsync.cli import main
from twinsync.config.schema import Config, SyncConfig
from twinsync.core.orchestrator import PairSyncService, canonicalize
from twinsync.core.reconciler import SyncDecision
from twinsync.errors import (
    InvalidPath,
    BinaryFileRejected,
    UnresolvedDivergence
)
from twinsync.utils.logger import ROOT_LOGGER_NAME

PNG_HEADER = b'\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR'


@pytest.fixture(autouse=True)
def reset_logging(monkeypatch, tmp_path):
    """Undo CLI logging setup and keep host configuration out."""
    monkeypatch.delenv("TWINSYNC_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True


def wait_for(predicate, timeout: float = 10.0) -> bool:
    """Poll until predicate() is true or the timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.05)
    return predicate()


class TestCanonicalize:
    """Test suite for path canonicalization."""

    def test_resolves_relative_path(self, tmp_path, monkeypatch):
        """Test relative paths become absolute."""
        (tmp_path / "notes.txt").write_text("x")
        monkeypatch.chdir(tmp_path)

        assert canonicalize("notes.txt") == (tmp_path / "notes.txt").resolve()

    def test_missing_file(self, tmp_path):
        """Test a missing file is a fatal InvalidPath."""
        with pytest.raises(InvalidPath, match="must exist"):
            canonicalize(tmp_path / "missing.txt")

    def test_directory_rejected(self, tmp_path):
        """Test directories are not accepted as sync targets."""
        with pytest.raises(InvalidPath):
            canonicalize(tmp_path)


class TestPairSyncService:
    """Test suite for startup wiring."""

    def test_same_file_twice_rejected(self, pair_dirs):
        """Test a file cannot be paired with itself."""
        dir_a, _ = pair_dirs
        (dir_a / "notes.txt").write_text("x")

        with pytest.raises(InvalidPath, match="same file"):
            PairSyncService(Config(), dir_a / "notes.txt", dir_a / "." / "notes.txt")

    def test_binary_rejected_before_hashing(self, pair_dirs, monkeypatch):
        """Test validation fails on a PNG before any fingerprint is taken."""
        dir_a, dir_b = pair_dirs
        (dir_a / "notes.txt").write_bytes(PNG_HEADER)
        (dir_b / "notes.txt").write_text("text")

        service = PairSyncService(Config(), dir_a / "notes.txt", dir_b / "notes.txt", overwrite=True)
        digest_calls = []
        monkeypatch.setattr(service.fingerprinter, "digest", lambda path: digest_calls.append(path))

        with pytest.raises(BinaryFileRejected):
            service.initialize()

        assert digest_calls == []

    def test_initialize_reconciles(self, pair_dirs):
        """Test initialize() validates then reconciles with overwrite."""
        dir_a, dir_b = pair_dirs
        (dir_a / "notes.txt").write_text("hello")
        (dir_b / "notes.txt").write_text("")

        service = PairSyncService(Config(), dir_a / "notes.txt", dir_b / "notes.txt", overwrite=True)
        result = service.initialize()

        assert result.decision == SyncDecision.COPY_A_TO_B
        assert (dir_b / "notes.txt").read_text() == "hello"

    def test_initialize_divergence(self, pair_dirs):
        """Test divergence without overwrite propagates UnresolvedDivergence."""
        dir_a, dir_b = pair_dirs
        (dir_a / "notes.txt").write_text("hello")
        (dir_b / "notes.txt").write_text("world")

        service = PairSyncService(Config(), dir_a / "notes.txt", dir_b / "notes.txt")

        with pytest.raises(UnresolvedDivergence):
            service.initialize()

    def test_end_to_end_mirroring(self, pair_dirs):
        """Test a real edit on A reaches B exactly once."""
        dir_a, dir_b = pair_dirs
        file_a = dir_a / "notes.txt"
        file_b = dir_b / "notes.txt"
        file_a.write_text("start")
        file_b.write_text("start")

        config = Config(sync=SyncConfig(debounce_ms=50, poll_interval_ms=20))
        service = PairSyncService(config, file_a, file_b)
        service.initialize()

        errors = []

        def run():
            try:
                service.run()
            except Exception as e:  # surfaced through the assertion below
                errors.append(e)

        thread = threading.Thread(target=run, daemon=True)
        thread.start()

        try:
            assert wait_for(lambda: service.watcher is not None and service.watcher.is_running())

            file_a.write_text("edited on A")

            assert wait_for(lambda: file_b.read_text() == "edited on A")
            time.sleep(0.5)

            assert service.sync_loop.get_stats()["propagations"] == 1
            assert file_a.read_text() == "edited on A"
        finally:
            service.stop()
            thread.join(timeout=5)

        assert not thread.is_alive()
        assert errors == []


class TestCLI:
    """Test suite for the command-line entry point."""

    @pytest.fixture
    def runner(self):
        return CliRunner()

    def test_divergence_exits_non_zero(self, runner, pair_dirs):
        """Test differing files without --overwrite exit 4 and stay untouched."""
        dir_a, dir_b = pair_dirs
        (dir_a / "notes.txt").write_text("hello")
        (dir_b / "notes.txt").write_text("world")

        result = runner.invoke(main, [str(dir_a / "notes.txt"), str(dir_b / "notes.txt")])

        assert result.exit_code == 4
        assert (dir_a / "notes.txt").read_text() == "hello"
        assert (dir_b / "notes.txt").read_text() == "world"

    def test_binary_file_exits_non_zero_even_with_overwrite(self, runner, pair_dirs):
        """Test binary files are rejected regardless of --overwrite."""
        dir_a, dir_b = pair_dirs
        (dir_a / "photo.txt").write_bytes(PNG_HEADER)
        (dir_b / "photo.txt").write_text("")

        result = runner.invoke(main, ["--overwrite", str(dir_a / "photo.txt"), str(dir_b / "photo.txt")])

        assert result.exit_code == 3
        assert (dir_b / "photo.txt").read_text() == ""

    def test_missing_file_exits_non_zero(self, runner, pair_dirs):
        """Test a missing path is a startup failure."""
        dir_a, dir_b = pair_dirs
        (dir_a / "notes.txt").write_text("hello")

        result = runner.invoke(main, [str(dir_a / "notes.txt"), str(dir_b / "notes.txt")])

        assert result.exit_code == 3

    def test_name_mismatch_exits_non_zero(self, runner, pair_dirs):
        """Test differently named files are refused."""
        dir_a, dir_b = pair_dirs
        (dir_a / "notes.txt").write_text("hello")
        (dir_b / "todo.txt").write_text("hello")

        result = runner.invoke(main, [str(dir_a / "notes.txt"), str(dir_b / "todo.txt")])

        assert result.exit_code == 3

    def test_invalid_configuration(self, runner, pair_dirs):
        """Test a bad option value is reported as a configuration error."""
        dir_a, dir_b = pair_dirs
        (dir_a / "notes.txt").write_text("hello")
        (dir_b / "notes.txt").write_text("hello")

        result = runner.invoke(main, [
            "--hash-algorithm", "rot13",
            str(dir_a / "notes.txt"), str(dir_b / "notes.txt")
        ])

        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_overwrite_conflict_then_watch(self, runner, pair_dirs, monkeypatch):
        """Test --overwrite resolves a conflict before watching starts."""
        dir_a, dir_b = pair_dirs
        (dir_a / "notes.txt").write_text("hello")
        (dir_b / "notes.txt").write_text("world")

        watched = []
        monkeypatch.setattr(PairSyncService, "run", lambda self: watched.append(self.reconcile_result))

        result = runner.invoke(main, ["--overwrite", str(dir_a / "notes.txt"), str(dir_b / "notes.txt")])

        assert result.exit_code == 0
        assert watched[0].decision == SyncDecision.CONFLICT_BACKUP_THEN_COPY
        assert (dir_b / "notes.txt").read_text() == "hello"
        assert (dir_a / "notes_backup.txt").read_text() == "hello"
        assert (dir_b / "notes_backup.txt").read_text() == "world"

    def test_keyboard_interrupt_exits_cleanly(self, runner, pair_dirs, monkeypatch):
        """Test Ctrl-C during watching is a graceful exit."""
        dir_a, dir_b = pair_dirs
        (dir_a / "notes.txt").write_text("same")
        (dir_b / "notes.txt").write_text("same")

        def interrupted(self):
            raise KeyboardInterrupt

        monkeypatch.setattr(PairSyncService, "run", interrupted)

        result = runner.invoke(main, [str(dir_a / "notes.txt"), str(dir_b / "notes.txt")])

        assert result.exit_code == 0

    def test_version(self, runner):
        """Test --version prints the package version."""
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
