"""
Pair Validator

Checks that two paths form an eligible sync pair before anything is
hashed or written.

Author: TwinSync Project
License: MIT
"""

from pathlib import Path
from typing import Optional, Union

from ..utils.logger import get_logger
from ..errors import InvalidPath, NameMismatch, BinaryFileRejected
from .classifier import TextClassifier

logger = get_logger(__name__)


class PairValidator:
    """
    Validates a pair of resolved file paths.

    Rules are applied in order and the first failing rule wins:

    1. Both paths have a non-empty file name.
    2. The file names match, ignoring case.
    3. A missing extension on either side is only warned about.
    4. Both files classify as UTF-8 text.
    """

    def __init__(self, classifier: Optional[TextClassifier] = None):
        """
        Initialize pair validator.

        Args:
            classifier: Text classifier used for rule 4 (default: TextClassifier())
        """
        self.classifier = classifier or TextClassifier()

    def validate(self, path_a: Union[str, Path], path_b: Union[str, Path]) -> None:
        """
        Validate a sync pair.

        Args:
            path_a: First file path
            path_b: Second file path

        Raises:
            InvalidPath: If either path has no file name
            NameMismatch: If the file names differ
            BinaryFileRejected: If either file is not UTF-8 text
            FileIOError: If a file cannot be probed
        """
        path_a = Path(path_a)
        path_b = Path(path_b)

        name_a = path_a.name
        name_b = path_b.name

        if not name_a:
            raise InvalidPath(f"Path has no file name: {path_a}")
        if not name_b:
            raise InvalidPath(f"Path has no file name: {path_b}")

        if name_a.casefold() != name_b.casefold():
            raise NameMismatch(name_a, name_b)

        for path in (path_a, path_b):
            if not path.suffix:
                logger.warning(f"File has no extension: {path}")

        for path in (path_a, path_b):
            result = self.classifier.classify(path)
            if not result.is_text:
                raise BinaryFileRejected(path, result.reason)

        logger.debug(f"Validated sync pair: {name_a}")
