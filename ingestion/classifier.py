"""
Filename to record-kind classification
"""

import re
from typing import Iterable, List, Optional, Pattern, Tuple
from schemas.registry import CLASSIFICATION_ORDER, REGISTRY
import logging

logger = logging.getLogger(__name__)


def tag_pattern(tag: str) -> Pattern:
    """Pattern for archive members named <TAG>_<YYYYMMDD>_<suffix>"""
    return re.compile(rf"^{re.escape(tag)}_[0-9]{{8}}_.+")


class FileClassifier:
    """
    Match archive member names against an ordered list of patterns.

    The first matching pattern wins, so tags that are literal prefixes
    of other tags must come after them.
    """

    def __init__(self, patterns: Iterable[Tuple[Pattern, str]]):
        self.patterns: List[Tuple[Pattern, str]] = list(patterns)

    @classmethod
    def from_registry(cls) -> "FileClassifier":
        return cls(
            (tag_pattern(REGISTRY[key].tag), key) for key in CLASSIFICATION_ORDER
        )

    def classify(self, filename: str) -> Optional[str]:
        """
        Return the classification key for a filename, or None on no match.
        """
        for pattern, key in self.patterns:
            if pattern.match(filename):
                return key

        logger.debug(f"No classification pattern matches {filename}")
        return None
