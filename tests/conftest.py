"""
Shared pytest fixtures for TwinSync tests.

Author: TwinSync Project
License: MIT
"""

import pytest

from twinsync.core.sync_loop import PairState


@pytest.fixture
def pair_dirs(tmp_path):
    """Create two sibling directories standing in for two mounts."""
    dir_a = tmp_path / "left"
    dir_b = tmp_path / "right"
    dir_a.mkdir()
    dir_b.mkdir()
    return dir_a, dir_b


@pytest.fixture
def make_pair(pair_dirs):
    """Factory writing notes.txt on both sides and returning a PairState."""
    dir_a, dir_b = pair_dirs

    def _make(content_a: bytes = b"", content_b: bytes = b"", name: str = "notes.txt") -> PairState:
        path_a = dir_a / name
        path_b = dir_b / name
        path_a.write_bytes(content_a)
        path_b.write_bytes(content_b)
        return PairState.from_paths(path_a.resolve(), path_b.resolve())

    return _make
