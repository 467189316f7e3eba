"""Core data models for richtoken.

Re-exports the IR and payload models for convenience.
"""

from richtoken.formatting.ir import (
    TextRun,
    Embed,
    Document,
    LocatedRange,
)
from richtoken.formatting.payloads import (
    HighlightPayload,
    HighlightRequest,
    PlaceholderPayload,
    TooltipPlacement,
)

__all__ = [
    "TextRun",
    "Embed",
    "Document",
    "LocatedRange",
    "HighlightPayload",
    "HighlightRequest",
    "PlaceholderPayload",
    "TooltipPlacement",
]
