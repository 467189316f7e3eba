"""Document facade orchestrating codecs, search and range application."""

import logging
from typing import Optional, Union

from richtoken.codecs.highlight import HighlightCodec
from richtoken.codecs.placeholder import PlaceholderCodec
from richtoken.config import get_settings
from richtoken.core.ranges import (
    FormatRange,
    apply_format_ranges,
    collect_attribute_ranges,
)
from richtoken.core.search import find_text_ranges
from richtoken.core.tooltip import TooltipEngine
from richtoken.formatting.payloads import HighlightRequest, PlaceholderPayload
from richtoken.host.base import EditingSurface

logger = logging.getLogger(__name__)


class FacadeError(Exception):
    """Error raised by the document facade."""

    pass


class FacadeStateError(FacadeError):
    """Operation called before the facade has a loaded document."""

    pass


class DocumentFacade:
    """Orchestrates storage text <-> editing surface conversions.

    Pipeline (load):
    1. Placeholder codec: ``{{KEY}}`` tokens -> embed markup
    2. Highlight codec: highlight tokens -> spans, request phrases wrapped
    3. Host converts markup to a document and replaces its contents

    Pipeline (extract):
    1. Host converts its document to markup
    2. Highlight codec strips highlight spans
    3. Placeholder codec collapses embeds back to ``{{KEY}}``
    4. ``&nbsp;`` is normalised to a plain space

    The facade holds the surface; it does not extend it.
    """

    def __init__(
        self,
        surface: EditingSurface,
        enable_placeholders: Optional[bool] = None,
        enable_highlights: Optional[bool] = None,
        tooltips: Optional[TooltipEngine] = None,
    ) -> None:
        """Initialize the facade.

        Args:
            surface: Host editing surface
            enable_placeholders: Use the placeholder codec (default from settings)
            enable_highlights: Use the highlight codec (default from settings)
            tooltips: Tooltip engine to notify when highlights go away
        """
        settings = get_settings()
        self.surface = surface
        self.enable_placeholders = (
            settings.enable_placeholders if enable_placeholders is None else enable_placeholders
        )
        self.enable_highlights = (
            settings.enable_highlights if enable_highlights is None else enable_highlights
        )
        self.tooltips = tooltips

        self.placeholder_codec = PlaceholderCodec()
        self.highlight_codec = HighlightCodec(
            on_detach=tooltips.detach_payload if tooltips else None
        )
        if self.enable_placeholders:
            surface.register_embed(self.placeholder_codec)
        if self.enable_highlights:
            surface.register_inline(self.highlight_codec)

        self._requests: list[HighlightRequest] = []
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    def _require_loaded(self, operation: str) -> None:
        if not self._loaded:
            raise FacadeStateError(f"Cannot {operation} before a document is loaded")

    # -- codecs ---------------------------------------------------------------

    def serialize(self, storage: str) -> str:
        """Convert storage text into editor markup."""
        if not storage:
            return ""
        out = storage
        if self.enable_placeholders:
            out = self.placeholder_codec.to_editor_markup(out)
        if self.enable_highlights:
            out = self.highlight_codec.to_editor_markup(out, self._requests)
        return out

    def deserialize(self, markup: Optional[str] = None) -> str:
        """Convert editor markup (default: the live document) into storage text."""
        if markup is None:
            markup = self.surface.document_to_markup(self.surface.get_document())
        out = markup
        if self.enable_highlights:
            out = self.highlight_codec.to_storage(out)
        if self.enable_placeholders:
            out = self.placeholder_codec.to_storage(out)
        return out.replace("&nbsp;", " ")

    # -- caller-facing operations ---------------------------------------------

    def load(self, storage: str) -> None:
        """Replace the document with the converted storage text."""
        document = self.surface.markup_to_document(self.serialize(storage))
        self.surface.set_document(document)
        self._loaded = True
        logger.debug("Loaded document (length %d)", document.length)

    def extract(self) -> str:
        """Return the live document as storage text."""
        if not self._loaded:
            return ""
        return self.deserialize()

    def refresh(self) -> None:
        """Re-run the storage round trip over the live document."""
        self._require_loaded("refresh")
        markup = self.surface.document_to_markup(self.surface.get_document())
        self.load(markup)

    def append(self, storage: str) -> None:
        """Append converted storage text after the current content."""
        self._require_loaded("append")
        fragment = self.surface.markup_to_document(self.serialize(storage))
        self.surface.set_document(self.surface.get_document().concat(fragment))

    def insert_placeholder(
        self,
        token: Union[PlaceholderPayload, str],
        offset: Optional[int] = None,
    ) -> int:
        """Insert a placeholder embed and place the cursor right after it.

        Args:
            token: Placeholder payload or bare key
            offset: Insert position; defaults to the selection, then the end

        Returns:
            Offset the embed was inserted at
        """
        self._require_loaded("insert a placeholder")
        if not self.enable_placeholders:
            raise FacadeError("Placeholder embeds are disabled")

        payload = PlaceholderPayload(key=token) if isinstance(token, str) else token
        if not payload.key:
            raise FacadeError("Placeholder key must not be empty")

        if offset is None:
            offset = self.surface.get_selection_offset()
        if offset is None:
            offset = self.surface.get_document_length()

        self.surface.insert_embed(offset, self.placeholder_codec.name, payload)
        # The whole embed is a single offset
        self.surface.set_selection_offset(offset + 1)
        return offset

    def set_highlight_requests(self, requests: Optional[list[HighlightRequest]]) -> None:
        self._requests = list(requests or [])

    def get_highlight_requests(self) -> list[HighlightRequest]:
        return list(self._requests)

    def apply_highlights(self, requests: list[HighlightRequest]) -> int:
        """Highlight every occurrence of each request's phrase.

        Returns:
            Number of ranges formatted
        """
        if not self.enable_highlights or not requests:
            return 0
        self._require_loaded("apply highlights")

        self.set_highlight_requests(requests)
        document = self.surface.get_document()
        ranges: list[FormatRange] = []
        for request in requests:
            if request.is_blank:
                continue
            payload = request.to_payload()
            for located in find_text_ranges(
                document, request.text, case_sensitive=request.case_sensitive
            ):
                ranges.append(FormatRange.from_located(located, payload))

        return apply_format_ranges(self.surface, self.highlight_codec.name, ranges)

    def remove_all_highlights(self) -> int:
        """Remove the highlight attribute everywhere it is set.

        Returns:
            Number of ranges cleared
        """
        if not self.enable_highlights:
            return 0
        self._require_loaded("remove highlights")

        located = collect_attribute_ranges(
            self.surface.get_document(), self.highlight_codec.name
        )
        count = apply_format_ranges(
            self.surface,
            self.highlight_codec.name,
            [FormatRange.from_located(r) for r in located],
        )
        if self.tooltips is not None:
            self.tooltips.hide_all()
        return count
