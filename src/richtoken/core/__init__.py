"""Core search, range application, tooltip placement and facade."""

from richtoken.core.models import Document, Embed, LocatedRange, TextRun
from richtoken.core.search import find_text_ranges
from richtoken.core.ranges import FormatRange, apply_format_ranges, collect_attribute_ranges
from richtoken.core.tooltip import TooltipEngine, compute_placement
from richtoken.core.facade import DocumentFacade, FacadeError, FacadeStateError

__all__ = [
    "Document",
    "Embed",
    "LocatedRange",
    "TextRun",
    "find_text_ranges",
    "FormatRange",
    "apply_format_ranges",
    "collect_attribute_ranges",
    "TooltipEngine",
    "compute_placement",
    "DocumentFacade",
    "FacadeError",
    "FacadeStateError",
]
