"""
File Operation Utilities

Provides streaming fingerprints, whole-file reads and writes, prefix probes
and backup path naming for the mirrored pair.

Author: TwinSync Project
License: MIT
"""

import hashlib
import zlib
from pathlib import Path
from typing import Union

from .logger import get_logger
from ..errors import FileIOError

logger = get_logger(__name__)

PathLike = Union[str, Path]

BACKUP_SUFFIX = "_backup"
FALLBACK_STEM = "file"
FALLBACK_EXTENSION = "txt"


class _Crc32:
    """Incremental CRC-32 with a hashlib-style interface."""

    digest_size = 4

    def __init__(self):
        self._value = 0

    def update(self, data: bytes):
        self._value = zlib.crc32(data, self._value)

    def hexdigest(self) -> str:
        return f"{self._value & 0xFFFFFFFF:08x}"


class Fingerprinter:
    """
    Computes fixed-width fingerprints of file content for change detection.

    Files are streamed in ``chunk_size`` pieces and never loaded whole.
    The default algorithm is CRC-32; any ``hashlib`` algorithm name is
    accepted as well.

    Equal fingerprints are taken as proof of equal content. Two different
    contents with the same fingerprint (a collision) would go unnoticed;
    that risk is accepted, not detected. Choose a cryptographic algorithm
    such as ``sha256`` to make it negligible.
    """

    DEFAULT_ALGORITHM = "crc32"
    DEFAULT_CHUNK_SIZE = 8192

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Initialize fingerprinter.

        Args:
            algorithm: "crc32" or a hashlib algorithm name (md5, sha1, sha256, ...)
            chunk_size: Size of chunks to read (bytes)

        Raises:
            ValueError: If algorithm is unsupported or chunk_size is not positive
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive: {chunk_size}")

        self.algorithm = algorithm.lower()
        self.chunk_size = chunk_size

        # Fail fast on unknown algorithms
        self._new_hasher()

    def _new_hasher(self):
        if self.algorithm == "crc32":
            return _Crc32()
        try:
            return hashlib.new(self.algorithm)
        except ValueError:
            raise ValueError(f"Unsupported hash algorithm: {self.algorithm}")

    def digest(self, path: PathLike) -> str:
        """
        Fingerprint a file's content.

        Args:
            path: Path to the file

        Returns:
            Lowercase hexadecimal fingerprint

        Raises:
            FileIOError: If the file cannot be opened or read
        """
        hasher = self._new_hasher()
        try:
            with open(path, 'rb') as f:
                while chunk := f.read(self.chunk_size):
                    hasher.update(chunk)
        except OSError as e:
            raise FileIOError("digest", path, e) from e

        return hasher.hexdigest()

    def digest_bytes(self, data: bytes) -> str:
        """Fingerprint an in-memory buffer with the same algorithm."""
        hasher = self._new_hasher()
        hasher.update(data)
        return hasher.hexdigest()


def is_supported_algorithm(algorithm: str) -> bool:
    """Check whether a fingerprint algorithm name is usable."""
    try:
        Fingerprinter(algorithm)
    except ValueError:
        return False
    return True


def read_content(path: PathLike) -> bytes:
    """
    Read a file's full content.

    Raises:
        FileIOError: If the file cannot be read
    """
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise FileIOError("read", path, e) from e


def write_content(path: PathLike, data: bytes) -> None:
    """
    Write bytes verbatim over a file, truncating it first.

    Raises:
        FileIOError: If the file cannot be written
    """
    try:
        with open(path, 'wb') as f:
            f.write(data)
    except OSError as e:
        raise FileIOError("write", path, e) from e

    logger.debug(f"Wrote {len(data)} bytes to {path}")


def read_prefix(path: PathLike, size: int) -> bytes:
    """
    Read at most ``size`` bytes from the start of a file.

    Raises:
        FileIOError: If the file cannot be read
    """
    try:
        with open(path, 'rb') as f:
            return f.read(size)
    except OSError as e:
        raise FileIOError("read", path, e) from e


def get_file_size(path: PathLike) -> int:
    """
    Get file size in bytes.

    Raises:
        FileIOError: If the file cannot be inspected
    """
    try:
        return Path(path).stat().st_size
    except OSError as e:
        raise FileIOError("stat", path, e) from e


def backup_path_for(original: PathLike) -> Path:
    """
    Derive the backup sibling of a file: ``{parent}/{stem}_backup.{extension}``.

    Missing stem or extension fall back to "file" and "txt". Existing
    backups are not checked for; writing one overwrites it.

    Args:
        original: Path of the file to back up

    Returns:
        Backup file path
    """
    path = Path(original)
    parent = path.parent

    # Path("notes").suffix is "" and Path(".bashrc").stem is ".bashrc"
    stem = path.stem or FALLBACK_STEM
    extension = path.suffix.lstrip('.') or FALLBACK_EXTENSION

    return parent / f"{stem}{BACKUP_SUFFIX}.{extension}"
