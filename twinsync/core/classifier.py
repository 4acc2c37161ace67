"""
Text Classifier

Decides whether a file is UTF-8 text by sniffing its first bytes: known
binary signatures (magic numbers) are rejected first, then the byte
content is inspected for byte-order marks, NUL bytes and UTF-8 validity.

Author: TwinSync Project
License: MIT
"""

import codecs
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

from ..utils.logger import get_logger
from ..utils.file_ops import read_prefix

logger = get_logger(__name__)


class ContentEncoding(Enum):
    """Byte-content classification of a file prefix."""
    UTF8 = "utf-8"
    UTF8_BOM = "utf-8-bom"
    UTF16LE = "utf-16le"
    UTF16BE = "utf-16be"
    UTF32LE = "utf-32le"
    UTF32BE = "utf-32be"
    BINARY = "binary"
    OTHER = "other"  # No NUL bytes but not valid UTF-8 (legacy 8-bit encodings)


# Longest BOMs first so UTF-32LE is not mistaken for UTF-16LE
BYTE_ORDER_MARKS: Tuple[Tuple[bytes, ContentEncoding], ...] = (
    (codecs.BOM_UTF32_LE, ContentEncoding.UTF32LE),
    (codecs.BOM_UTF32_BE, ContentEncoding.UTF32BE),
    (codecs.BOM_UTF8, ContentEncoding.UTF8_BOM),
    (codecs.BOM_UTF16_LE, ContentEncoding.UTF16LE),
    (codecs.BOM_UTF16_BE, ContentEncoding.UTF16BE),
)

# (offset, magic bytes, description)
BINARY_SIGNATURES: Tuple[Tuple[int, bytes, str], ...] = (
    # Images
    (0, b'\x89PNG\r\n\x1a\n', "PNG image"),
    (0, b'\xff\xd8\xff', "JPEG image"),
    (0, b'GIF87a', "GIF image"),
    (0, b'GIF89a', "GIF image"),
    (0, b'II*\x00', "TIFF image"),
    (0, b'MM\x00*', "TIFF image"),
    (0, b'\x00\x00\x01\x00', "ICO image"),
    (0, b'8BPS', "Photoshop image"),
    # Documents and archives
    (0, b'%PDF-', "PDF document"),
    (0, b'PK\x03\x04', "ZIP archive"),
    (0, b'PK\x05\x06', "ZIP archive"),
    (0, b'\x1f\x8b', "gzip archive"),
    (0, b'BZh', "bzip2 archive"),
    (0, b'\xfd7zXZ\x00', "xz archive"),
    (0, b"7z\xbc\xaf'\x1c", "7-Zip archive"),
    (0, b'Rar!\x1a\x07', "RAR archive"),
    (0, b'\x28\xb5\x2f\xfd', "zstd archive"),
    (0, b'\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1', "OLE2 document"),
    (0, b'SQLite format 3\x00', "SQLite database"),
    (257, b'ustar', "tar archive"),
    # Executables
    (0, b'\x7fELF', "ELF executable"),
    (0, b'MZ', "Windows executable"),
    (0, b'\xca\xfe\xba\xbe', "Mach-O or Java class"),
    (0, b'\xcf\xfa\xed\xfe', "Mach-O executable"),
    (0, b'\xce\xfa\xed\xfe', "Mach-O executable"),
    (0, b'\x00asm', "WebAssembly module"),
    # Audio and video
    (0, b'ID3', "MP3 audio"),
    (0, b'OggS', "Ogg media"),
    (0, b'fLaC', "FLAC audio"),
    (0, b'\x1aE\xdf\xa3', "Matroska video"),
    (4, b'ftyp', "MP4 media"),
    # Fonts
    (0, b'wOFF', "WOFF font"),
    (0, b'wOF2', "WOFF2 font"),
)

# RIFF containers are identified by the form type at offset 8
RIFF_FORMS = {
    b'WEBP': "WebP image",
    b'WAVE': "WAV audio",
    b'AVI ': "AVI video",
}


@dataclass
class Classification:
    """Result of classifying a file prefix."""
    signature: Optional[str]
    encoding: ContentEncoding

    @property
    def is_text(self) -> bool:
        """Only UTF-8, with or without BOM, counts as text."""
        if self.signature is not None:
            return False
        return self.encoding in (ContentEncoding.UTF8, ContentEncoding.UTF8_BOM)

    @property
    def reason(self) -> Optional[str]:
        """Human-readable explanation when the prefix is not text."""
        if self.signature is not None:
            return f"looks like {self.signature}"
        if not self.is_text:
            return f"content is {self.encoding.value}"
        return None


def sniff_signature(prefix: bytes) -> Optional[str]:
    """
    Match a byte prefix against known binary file signatures.

    Args:
        prefix: First bytes of a file

    Returns:
        Description of the matched format, or None
    """
    for offset, magic, description in BINARY_SIGNATURES:
        if prefix[offset:offset + len(magic)] == magic:
            return description

    if prefix[:4] == b'RIFF':
        return RIFF_FORMS.get(prefix[8:12])

    return None


def inspect_encoding(prefix: bytes, complete: bool = False) -> ContentEncoding:
    """
    Classify the byte content of a prefix.

    A byte-order mark decides the encoding outright. Otherwise any NUL byte
    means binary, and the rest must decode as UTF-8 to count as text. A
    multi-byte character cut off at the end of the prefix is tolerated
    unless ``complete`` says the prefix is the whole file.
    """
    for bom, encoding in BYTE_ORDER_MARKS:
        if prefix.startswith(bom):
            return encoding

    if b'\x00' in prefix:
        return ContentEncoding.BINARY

    decoder = codecs.getincrementaldecoder('utf-8')()
    try:
        decoder.decode(prefix, final=complete)
    except UnicodeDecodeError:
        return ContentEncoding.OTHER

    return ContentEncoding.UTF8


class TextClassifier:
    """
    Single-shot text/binary classifier for files.

    Reads at most ``sniff_bytes`` from the start of the file. An empty
    file is always text.
    """

    DEFAULT_SNIFF_BYTES = 1024

    def __init__(self, sniff_bytes: int = DEFAULT_SNIFF_BYTES):
        self.sniff_bytes = sniff_bytes

    def classify_bytes(self, prefix: bytes) -> Classification:
        """Classify an in-memory prefix."""
        complete = len(prefix) < self.sniff_bytes
        prefix = prefix[:self.sniff_bytes]
        if not prefix:
            return Classification(signature=None, encoding=ContentEncoding.UTF8)

        return Classification(
            signature=sniff_signature(prefix),
            encoding=inspect_encoding(prefix, complete=complete)
        )

    def classify(self, path: Union[str, Path]) -> Classification:
        """
        Classify a file on disk.

        Raises:
            FileIOError: If the prefix cannot be read
        """
        result = self.classify_bytes(read_prefix(path, self.sniff_bytes))
        logger.debug(
            f"Classified {path}: signature={result.signature}, "
            f"encoding={result.encoding.value}"
        )
        return result

    def is_text(self, path: Union[str, Path]) -> bool:
        """Check whether a file is UTF-8 text."""
        return self.classify(path).is_text
