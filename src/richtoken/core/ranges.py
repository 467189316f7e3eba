"""Ordered application of formatting across located ranges.

Ranges are applied from the highest start offset down. Formatting at one
offset never moves text that starts before it, so every range still
points at the right text when its turn comes. This only holds while every
mutation is formatting-only, which is checked after the pass.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from richtoken.formatting.ir import Document, LocatedRange
from richtoken.host.base import EditingSurface

logger = logging.getLogger(__name__)


class RangeApplicationError(Exception):
    """A formatting pass changed the document length."""

    pass


@dataclass(frozen=True)
class FormatRange:
    """A located range paired with the attribute value to apply.

    A falsy value removes the attribute.
    """

    start: int
    length: int
    value: Any = None

    @classmethod
    def from_located(cls, located: LocatedRange, value: Any = None) -> "FormatRange":
        return cls(start=located.start, length=located.length, value=value)


def order_ranges(ranges: Iterable[FormatRange]) -> list[FormatRange]:
    """Sort ranges by start offset, highest first (stable for equal starts)."""
    return sorted(ranges, key=lambda r: r.start, reverse=True)


def apply_format_ranges(
    surface: EditingSurface,
    attribute: str,
    ranges: Iterable[FormatRange],
) -> int:
    """Apply or remove an attribute across ranges in descending order.

    Args:
        surface: Editing surface holding the live document
        attribute: Attribute name to format
        ranges: Ranges with the value to apply (falsy to remove)

    Returns:
        Number of ranges applied

    Raises:
        RangeApplicationError: If the document length changed
    """
    ordered = order_ranges(ranges)
    if not ordered:
        return 0

    length_before = surface.get_document_length()
    for item in ordered:
        surface.format_range(item.start, item.length, attribute, item.value or False)

    length_after = surface.get_document_length()
    if length_after != length_before:
        raise RangeApplicationError(
            f"Formatting {attribute!r} changed document length "
            f"from {length_before} to {length_after}"
        )

    logger.debug("Applied %r across %d range(s)", attribute, len(ordered))
    return len(ordered)


def collect_attribute_ranges(document: Document, attribute: str) -> list[LocatedRange]:
    """Collect one range per op that carries the attribute."""
    ranges: list[LocatedRange] = []
    for offset, op in document.iter_offsets():
        if op.length and attribute in op.attributes:
            ranges.append(LocatedRange(start=offset, length=op.length))
    return ranges
