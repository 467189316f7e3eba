"""Document IR, payload models and the markup tokenizer."""

from richtoken.formatting.ir import (
    TextRun,
    Embed,
    Document,
    LocatedRange,
)
from richtoken.formatting.payloads import (
    TooltipPlacement,
    PlaceholderPayload,
    HighlightPayload,
    HighlightRequest,
)
from richtoken.formatting.markup import MarkupTokenizer, MarkupToken, TokenKind

__all__ = [
    "TextRun",
    "Embed",
    "Document",
    "LocatedRange",
    "TooltipPlacement",
    "PlaceholderPayload",
    "HighlightPayload",
    "HighlightRequest",
    "MarkupTokenizer",
    "MarkupToken",
    "TokenKind",
]
