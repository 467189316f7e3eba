"""Viewport-aware tooltip placement for highlight anchors.

Placement tries the requested side, then the opposite side, and finally
clamps the overlay inside the viewport without an arrow. The engine owns an
explicit anchor -> overlay map so each anchor has at most one live overlay.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Hashable, Optional

from richtoken.config import get_settings
from richtoken.formatting.payloads import HighlightPayload, TooltipPlacement

logger = logging.getLogger(__name__)


# =============================================================================
# Geometry
# =============================================================================

@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in viewport coordinates."""

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float

    def fits(self, rect: Rect, margin: float = 0.0) -> bool:
        """Whether the rectangle lies inside the viewport inset by ``margin``."""
        return (
            rect.left >= margin
            and rect.right <= self.width - margin
            and rect.top >= margin
            and rect.bottom <= self.height - margin
        )


@dataclass(frozen=True)
class Placement:
    """Resolved overlay position.

    Attributes:
        rect: Overlay rectangle
        side: Side of the anchor the overlay is attached to, or None when the
            overlay was clamped and is shown unanchored (no arrow)
    """

    rect: Rect
    side: Optional[TooltipPlacement]

    @property
    def anchored(self) -> bool:
        return self.side is not None


def naive_rect(side: TooltipPlacement, anchor: Rect, size: Size, gap: float) -> Rect:
    """Position an overlay on one side of the anchor, centered on the other axis."""
    if side == TooltipPlacement.TOP:
        return Rect(
            anchor.left + anchor.width / 2 - size.width / 2,
            anchor.top - gap - size.height,
            size.width,
            size.height,
        )
    if side == TooltipPlacement.BOTTOM:
        return Rect(
            anchor.left + anchor.width / 2 - size.width / 2,
            anchor.bottom + gap,
            size.width,
            size.height,
        )
    if side == TooltipPlacement.LEFT:
        return Rect(
            anchor.left - gap - size.width,
            anchor.top + anchor.height / 2 - size.height / 2,
            size.width,
            size.height,
        )
    return Rect(
        anchor.right + gap,
        anchor.top + anchor.height / 2 - size.height / 2,
        size.width,
        size.height,
    )


def compute_placement(
    anchor: Rect,
    size: Size,
    viewport: Viewport,
    preferred: TooltipPlacement = TooltipPlacement.TOP,
    gap: Optional[float] = None,
    margin: Optional[float] = None,
) -> Placement:
    """Place an overlay next to an anchor, flipping or clamping as needed.

    Args:
        anchor: Bounding rectangle of the anchor
        size: Overlay size
        viewport: Visible area
        preferred: Requested side
        gap: Distance between anchor and overlay (defaults to settings)
        margin: Inset kept free along every viewport edge (defaults to settings)

    Returns:
        Placement on the preferred side, the opposite side, or clamped
    """
    settings = get_settings()
    gap = settings.tooltip_gap if gap is None else gap
    margin = settings.viewport_margin if margin is None else margin

    for side in (preferred, preferred.opposite):
        rect = naive_rect(side, anchor, size, gap)
        if viewport.fits(rect, margin):
            return Placement(rect=rect, side=side)

    # Neither side fits: clamp the last attempt into the viewport, unanchored.
    # An overlay larger than the usable area is shrunk to fit it.
    width = max(0.0, min(size.width, viewport.width - 2 * margin))
    height = max(0.0, min(size.height, viewport.height - 2 * margin))
    left = max(margin, min(rect.left, viewport.width - width - margin))
    top = max(margin, min(rect.top, viewport.height - height - margin))
    return Placement(rect=Rect(left, top, width, height), side=None)


# =============================================================================
# Overlay lifecycle
# =============================================================================

class TooltipState(str, Enum):
    HIDDEN = "hidden"
    SHOWN = "shown"


@dataclass
class TooltipAnchor:
    """A highlighted element the user can hover.

    Attributes:
        anchor_id: Stable identity of the anchor element
        rect: Current bounding rectangle
        payload: Highlight payload carrying tooltip text and identity
        scroll_container: Identity of the nearest scrollable ancestor
    """

    anchor_id: Hashable
    rect: Rect
    payload: HighlightPayload
    scroll_container: Optional[Hashable] = None


@dataclass
class Overlay:
    """A mounted tooltip overlay node."""

    anchor_id: Hashable
    text: str
    placement: Placement
    role: str = "tooltip"


@dataclass(frozen=True)
class HoverEvent:
    """Emitted when a tooltip anchor whose highlight has an identity is hovered."""

    highlight_id: str
    anchor_id: Hashable


class OverlayLayer(ABC):
    """Global layer overlays are mounted into (the document body)."""

    @abstractmethod
    def measure(self, text: str) -> Size:
        """Size an overlay showing ``text`` would occupy."""
        ...

    @abstractmethod
    def mount(self, overlay: Overlay) -> None:
        ...

    @abstractmethod
    def unmount(self, overlay: Overlay) -> None:
        ...


@dataclass
class MemoryOverlayLayer(OverlayLayer):
    """In-memory overlay layer with a fixed-pitch size estimate."""

    nodes: list[Overlay] = field(default_factory=list)

    def measure(self, text: str) -> Size:
        settings = get_settings()
        pad = settings.tooltip_padding
        max_chars = max(1, int((settings.tooltip_max_width - 2 * pad) // settings.tooltip_char_width))
        lines = [line or " " for line in text.split("\n")]
        rows = sum(max(1, -(-len(line) // max_chars)) for line in lines)
        widest = min(max(len(line) for line in lines), max_chars)
        return Size(
            width=widest * settings.tooltip_char_width + 2 * pad,
            height=rows * settings.tooltip_line_height + 2 * pad,
        )

    def mount(self, overlay: Overlay) -> None:
        self.nodes.append(overlay)

    def unmount(self, overlay: Overlay) -> None:
        self.nodes = [node for node in self.nodes if node is not overlay]


HoverListener = Callable[[HoverEvent], None]


class TooltipEngine:
    """Shows and hides tooltip overlays, one per anchor at most.

    Every exit path (hide, detach, scroll, highlight removal, hide_all)
    unmounts the overlay and forgets the anchor association.
    """

    def __init__(
        self,
        layer: OverlayLayer,
        viewport: Viewport,
        gap: Optional[float] = None,
        margin: Optional[float] = None,
    ) -> None:
        self.layer = layer
        self.viewport = viewport
        self.gap = gap
        self.margin = margin
        self._overlays: dict[Hashable, Overlay] = {}
        self._anchors: dict[Hashable, TooltipAnchor] = {}
        self._listeners: list[HoverListener] = []

    def on_hover(self, listener: HoverListener) -> None:
        """Register a listener for hover events."""
        self._listeners.append(listener)

    def state(self, anchor_id: Hashable) -> TooltipState:
        if anchor_id in self._overlays:
            return TooltipState.SHOWN
        return TooltipState.HIDDEN

    def overlay_for(self, anchor_id: Hashable) -> Optional[Overlay]:
        return self._overlays.get(anchor_id)

    @property
    def live_overlays(self) -> list[Overlay]:
        return list(self._overlays.values())

    def show(self, anchor: TooltipAnchor) -> Optional[Overlay]:
        """Handle hover-enter on an anchor.

        Replaces any overlay already shown for the anchor. Returns the new
        overlay, or None when the highlight has no tooltip text. Highlights
        without tooltip text are not hoverable and emit no event.
        """
        self.hide(anchor.anchor_id)

        payload = anchor.payload
        if not payload.tooltip_text:
            return None

        if payload.identity:
            event = HoverEvent(highlight_id=payload.identity, anchor_id=anchor.anchor_id)
            for listener in list(self._listeners):
                listener(event)

        preferred = payload.tooltip_placement or self._default_placement()
        placement = compute_placement(
            anchor.rect,
            self.layer.measure(payload.tooltip_text),
            self.viewport,
            preferred=preferred,
            gap=self.gap,
            margin=self.margin,
        )
        overlay = Overlay(
            anchor_id=anchor.anchor_id,
            text=payload.tooltip_text,
            placement=placement,
        )
        self.layer.mount(overlay)
        self._overlays[anchor.anchor_id] = overlay
        self._anchors[anchor.anchor_id] = anchor
        logger.debug(
            "Tooltip shown for %r (side=%s)",
            anchor.anchor_id,
            placement.side.value if placement.side else "clamped",
        )
        return overlay

    def hide(self, anchor_id: Hashable) -> bool:
        """Handle hover-leave. Returns True if an overlay was removed."""
        overlay = self._overlays.pop(anchor_id, None)
        self._anchors.pop(anchor_id, None)
        if overlay is None:
            return False
        self.layer.unmount(overlay)
        logger.debug("Tooltip hidden for %r", anchor_id)
        return True

    def detach(self, anchor_id: Hashable) -> bool:
        """The anchor left the document; treated as an implicit hide."""
        return self.hide(anchor_id)

    def scroll(self, container: Hashable) -> int:
        """Hide every overlay whose anchor scrolls with ``container``."""
        hidden = [
            anchor_id
            for anchor_id, anchor in self._anchors.items()
            if anchor.scroll_container == container
        ]
        for anchor_id in hidden:
            self.hide(anchor_id)
        return len(hidden)

    def detach_payload(self, payload: HighlightPayload) -> int:
        """Hide overlays of anchors carrying a highlight that was removed."""
        hidden = [
            anchor_id
            for anchor_id, anchor in self._anchors.items()
            if anchor.payload == payload
        ]
        for anchor_id in hidden:
            self.hide(anchor_id)
        return len(hidden)

    def hide_all(self) -> int:
        anchor_ids = list(self._overlays)
        for anchor_id in anchor_ids:
            self.hide(anchor_id)
        return len(anchor_ids)

    def _default_placement(self) -> TooltipPlacement:
        return (
            TooltipPlacement.parse(get_settings().default_tooltip_placement)
            or TooltipPlacement.TOP
        )
