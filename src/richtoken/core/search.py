"""Offset-mapped text search over the document representation.

Embeds occupy one document offset but contribute no characters to the
text a reader sees. Searching therefore happens over a flattened text
projection, and each projected character remembers the document offset it
came from so hits can be mapped back into document space.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from richtoken.config import get_settings
from richtoken.formatting.ir import Document, LocatedRange, TextRun

logger = logging.getLogger(__name__)


@dataclass
class Projection:
    """Plain-text projection of a document.

    Attributes:
        text: Run characters in document order (embeds contribute nothing)
        offsets: Document offset of every projected character
        segments: Index of the embed-delimited segment each character is in
    """

    text: str = ""
    offsets: list[int] = field(default_factory=list)
    segments: list[int] = field(default_factory=list)

    def to_range(self, pos: int, size: int) -> LocatedRange:
        first = self.offsets[pos]
        last = self.offsets[pos + size - 1]
        return LocatedRange(start=first, length=last - first + 1)

    def crosses_embed(self, pos: int, size: int) -> bool:
        return self.segments[pos] != self.segments[pos + size - 1]


def fold_char(char: str) -> str:
    """Lowercase a single character, independent of its neighbours."""
    return char.lower()


def build_projection(document: Document, fold_case: bool = False) -> Projection:
    """Flatten the document's runs into text plus a per-character offset map.

    Args:
        document: Document to project
        fold_case: Lowercase each character. A character whose lowercase
            form is longer than one character repeats its offset so the map
            stays aligned with the projected text.
    """
    chars: list[str] = []
    offsets: list[int] = []
    segments: list[int] = []
    segment = 0
    for offset, op in document.iter_offsets():
        if not isinstance(op, TextRun):
            segment += 1
            continue
        for i, char in enumerate(op.text):
            folded = fold_char(char) if fold_case else char
            chars.append(folded)
            offsets.extend([offset + i] * len(folded))
            segments.extend([segment] * len(folded))
    return Projection(text="".join(chars), offsets=offsets, segments=segments)


def find_text_ranges(
    document: Document,
    phrase: str,
    case_sensitive: Optional[bool] = None,
) -> list[LocatedRange]:
    """Find every occurrence of a phrase, reported in document offsets.

    Occurrences may overlap: the scan restarts one character after each hit.
    A hit never spans an embed.

    Args:
        document: Document to search
        phrase: Text to look for; an empty phrase matches nothing
        case_sensitive: Match case exactly. Defaults to the configured
            search mode (case-insensitive unless overridden).

    Returns:
        List of LocatedRange in ascending start order
    """
    if not phrase:
        return []

    if case_sensitive is None:
        case_sensitive = not get_settings().case_insensitive_search

    fold_case = not case_sensitive
    projection = build_projection(document, fold_case=fold_case)
    needle = "".join(fold_char(c) for c in phrase) if fold_case else phrase
    size = len(needle)

    ranges: list[LocatedRange] = []
    start = 0
    while True:
        pos = projection.text.find(needle, start)
        if pos == -1:
            break
        if not projection.crosses_embed(pos, size):
            ranges.append(projection.to_range(pos, size))
        start = pos + 1

    logger.debug("Found %d range(s) for %r", len(ranges), phrase)
    return ranges
