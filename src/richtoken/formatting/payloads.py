"""Tagged value types for embed and inline-attribute payloads.

Every value that crosses the codec/host boundary is one of these models.
Placeholders travel as ``PlaceholderPayload`` embeds; highlights travel as
``HighlightPayload`` inline attributes. ``HighlightRequest`` is the
caller-supplied styling request that produces highlight payloads.
"""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator


class TooltipPlacement(str, Enum):
    """Side of the anchor a tooltip overlay is attached to."""

    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"

    @property
    def opposite(self) -> "TooltipPlacement":
        """The side facing this one across the anchor."""
        return _OPPOSITES[self]

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["TooltipPlacement"]:
        """Parse a placement name, returning None for unknown or empty values."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


_OPPOSITES = {
    TooltipPlacement.TOP: TooltipPlacement.BOTTOM,
    TooltipPlacement.BOTTOM: TooltipPlacement.TOP,
    TooltipPlacement.LEFT: TooltipPlacement.RIGHT,
    TooltipPlacement.RIGHT: TooltipPlacement.LEFT,
}


class PlaceholderPayload(BaseModel):
    """Value of a placeholder embed.

    Attributes:
        key: Token key, written back to storage as ``{{key}}``
        label: Display label (defaults to the key)
    """

    kind: Literal["placeholder"] = "placeholder"
    key: str
    label: Optional[str] = None

    @model_validator(mode="after")
    def _default_label(self) -> "PlaceholderPayload":
        if not self.label:
            self.label = self.key
        return self


class HighlightPayload(BaseModel):
    """Value of the highlight inline attribute."""

    kind: Literal["highlight"] = "highlight"
    identity: Optional[str] = None
    tooltip_text: Optional[str] = None
    tooltip_placement: Optional[TooltipPlacement] = None
    styles: Optional[dict[str, str]] = None

    @property
    def has_tooltip(self) -> bool:
        return bool(self.tooltip_text)


class HighlightRequest(BaseModel):
    """A caller request to highlight every occurrence of a phrase.

    Attributes:
        text: Phrase to highlight
        styles: CSS properties applied to the highlight span
        tooltip_text: Text shown in the hover tooltip
        tooltip_placement: Preferred tooltip side
        identity: Identifier emitted when the highlight is hovered
        case_sensitive: Match the phrase case-sensitively in the document
            (None uses the configured search mode)
    """

    text: str
    styles: dict[str, str] = Field(default_factory=dict)
    tooltip_text: Optional[str] = None
    tooltip_placement: TooltipPlacement = TooltipPlacement.TOP
    identity: Optional[str] = None
    case_sensitive: Optional[bool] = None

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()

    def to_payload(self) -> HighlightPayload:
        """Build the attribute payload applied to matched ranges."""
        return HighlightPayload(
            identity=self.identity or None,
            tooltip_text=self.tooltip_text or None,
            tooltip_placement=self.tooltip_placement if self.tooltip_text else None,
            styles=dict(self.styles) if self.styles else None,
        )
