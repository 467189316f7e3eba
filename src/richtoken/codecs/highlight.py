"""Highlight token codec.

Highlights are never persisted: storage keeps only the bare phrase. While
content is loaded in the editor a highlight is a span such as::

    <span class="ql-highlight" style="background-color: #E6F7FF"
          data-hover-tooltip="..." data-tooltip-placement="top"
          data-highlight-id="...">phrase</span>

Going to storage, every highlight span is unwrapped down to its content.
Coming from storage, legacy ``data-highlight`` token spans are converted to
canonical spans and the caller's highlight requests are wrapped around
literal occurrences of their phrases.
"""

import logging
from typing import Any, Callable, Optional

from richtoken.codecs.base import TokenCodec
from richtoken.codecs.placeholder import PLACEHOLDER_CLASS
from richtoken.formatting.markup import (
    MarkupToken,
    TokenKind,
    escape_attr,
    format_style,
    match_elements,
    parse_style,
    render,
    tokenize,
    unescape_attr,
)
from richtoken.formatting.payloads import (
    HighlightPayload,
    HighlightRequest,
    TooltipPlacement,
)
from richtoken.host.base import InlineFormat

logger = logging.getLogger(__name__)

HIGHLIGHT_CLASS = "ql-highlight"
HIGHLIGHT_MARKER_ATTR = "data-highlight"
TEXT_COLOR_ATTR = "data-text-color"
HIGHLIGHT_COLOR_ATTR = "data-highlight-color"
TOOLTIP_TEXT_ATTR = "data-hover-tooltip"
TOOLTIP_PLACEMENT_ATTR = "data-tooltip-placement"
HIGHLIGHT_ID_ATTR = "data-highlight-id"


def style_has_highlight_colors(style: str) -> bool:
    """True if the style declares both a text color and a background."""
    declarations = parse_style(style)
    has_color = bool(declarations.get("color"))
    has_background = bool(
        declarations.get("background-color") or declarations.get("background")
    )
    return has_color and has_background


def is_highlight_span(token: MarkupToken) -> bool:
    """Whether a span start tag presents a highlight.

    Matches the canonical class, any ``data-highlight`` marker attribute,
    or a styled wrapper whose colors indicate a highlight.
    """
    if not token.is_start("span"):
        return False
    if token.has_class(HIGHLIGHT_CLASS):
        return True
    if any(
        attr == HIGHLIGHT_MARKER_ATTR or attr.startswith(HIGHLIGHT_MARKER_ATTR + "-")
        for attr in token.attrs
    ):
        return True
    if "style" in token.attrs and not token.has_class(PLACEHOLDER_CLASS):
        return style_has_highlight_colors(unescape_attr(token.attrs["style"]))
    return False


def _is_atomic_span(token: MarkupToken) -> bool:
    """Spans whose text must never be wrapped by a request."""
    return is_highlight_span(token) or token.has_class(PLACEHOLDER_CLASS)


class HighlightCodec(TokenCodec, InlineFormat):
    """Codec and inline-attribute hooks for highlights.

    Args:
        on_detach: Optional callback run with the removed payload whenever
            the highlight attribute is removed from a span of text.
    """

    def __init__(
        self,
        on_detach: Optional[Callable[[HighlightPayload], None]] = None,
    ) -> None:
        self.on_detach = on_detach

    @property
    def name(self) -> str:
        return "highlight"

    # -- editor markup -> storage ---------------------------------------------

    def to_storage(self, markup: str) -> str:
        return self.storage_from_document_markup(markup)

    def storage_from_document_markup(self, markup: str) -> str:
        """Unwrap every highlight span down to its inner content.

        Repeats until a pass unwraps nothing, so wrappers nested by the
        host's own normalisation are all removed.
        """
        out = markup
        passes = 0
        while True:
            tokens = tokenize(out)
            pairs = match_elements(tokens, "span")
            drop: set[int] = set()
            for start, end in pairs.items():
                if is_highlight_span(tokens[start]):
                    drop.add(start)
                    drop.add(end)
            if not drop:
                break
            out = render([t for i, t in enumerate(tokens) if i not in drop])
            passes += 1

        if passes:
            logger.debug("Stripped highlight spans in %d pass(es)", passes)
        return out

    # -- storage -> editor markup ---------------------------------------------

    def to_editor_markup(
        self,
        markup: str,
        requests: Optional[list[HighlightRequest]] = None,
    ) -> str:
        return self.document_markup_from_storage(markup, requests)

    def document_markup_from_storage(
        self,
        markup: str,
        requests: Optional[list[HighlightRequest]] = None,
    ) -> str:
        """Convert highlight tokens and wrap requested phrases."""
        out = self.tokens_to_markup(markup)
        if requests:
            out = self.wrap_requests(out, requests)
        return out

    def tokens_to_markup(self, markup: str) -> str:
        """Rewrite ``data-highlight`` token spans as canonical highlight spans."""
        tokens = tokenize(markup)
        converted = 0
        for token in tokens:
            if not self._is_highlight_token(token):
                continue
            text_color = unescape_attr(token.attrs[TEXT_COLOR_ATTR])
            highlight_color = unescape_attr(token.attrs[HIGHLIGHT_COLOR_ATTR])
            style = format_style(
                {"color": text_color, "background-color": highlight_color}
            )
            token.raw = f'<span class="{HIGHLIGHT_CLASS}" style="{escape_attr(style)}">'
            converted += 1

        if not converted:
            return markup
        logger.debug("Converted %d highlight token span(s)", converted)
        return render(tokens)

    @staticmethod
    def _is_highlight_token(token: MarkupToken) -> bool:
        return (
            token.is_start("span")
            and TEXT_COLOR_ATTR in token.attrs
            and HIGHLIGHT_COLOR_ATTR in token.attrs
        )

    def wrap_requests(self, markup: str, requests: list[HighlightRequest]) -> str:
        """Wrap literal occurrences of each request's text in highlight spans.

        Longer phrases are wrapped first. Text already inside a highlight or
        placeholder span is skipped, so a shorter phrase never splits or
        nests inside a longer one.
        """
        ordered = [r for r in requests if not r.is_blank]
        ordered.sort(key=lambda r: len(r.text), reverse=True)

        out = markup
        for request in ordered:
            out = self._wrap_one(out, request)
        return out

    def _wrap_one(self, markup: str, request: HighlightRequest) -> str:
        tokens = tokenize(markup)
        open_tag = self.render_open(request.to_payload())
        close_tag = self.render_close(None)
        wrapped = f"{open_tag}{request.text}{close_tag}"

        # One flag per open span: True when its content must not be wrapped
        span_stack: list[bool] = []
        hits = 0
        for token in tokens:
            if token.is_start("span"):
                span_stack.append(_is_atomic_span(token))
            elif token.is_end("span"):
                if span_stack:
                    span_stack.pop()
            elif token.kind == TokenKind.TEXT and not any(span_stack):
                count = token.raw.count(request.text)
                if count:
                    token.raw = token.raw.replace(request.text, wrapped)
                    hits += count

        if hits:
            logger.debug("Wrapped %d occurrence(s) of %r", hits, request.text)
        return render(tokens)

    # -- inline attribute hooks -------------------------------------------------

    def matches(self, tag: str, attrs: dict[str, str]) -> bool:
        return tag == "span" and HIGHLIGHT_CLASS in attrs.get("class", "").split()

    def value_from(self, tag: str, attrs: dict[str, str]) -> HighlightPayload:
        styles = parse_style(attrs.get("style", ""))
        tooltip_text = attrs.get(TOOLTIP_TEXT_ATTR) or None
        return HighlightPayload(
            identity=attrs.get(HIGHLIGHT_ID_ATTR) or None,
            tooltip_text=tooltip_text,
            tooltip_placement=(
                TooltipPlacement.parse(attrs.get(TOOLTIP_PLACEMENT_ATTR))
                if tooltip_text
                else None
            ),
            styles=styles or None,
        )

    def render_open(self, value: Any) -> str:
        payload = self._coerce(value)
        parts = [f'<span class="{HIGHLIGHT_CLASS}"']
        if payload.styles:
            parts.append(f'style="{escape_attr(format_style(payload.styles))}"')
        if payload.tooltip_text:
            parts.append(f'{TOOLTIP_TEXT_ATTR}="{escape_attr(payload.tooltip_text)}"')
            if payload.tooltip_placement:
                parts.append(
                    f'{TOOLTIP_PLACEMENT_ATTR}="{payload.tooltip_placement.value}"'
                )
        if payload.identity:
            parts.append(f'{HIGHLIGHT_ID_ATTR}="{escape_attr(payload.identity)}"')
        return " ".join(parts) + ">"

    def update(self, old: Any, new: Any) -> HighlightPayload:
        """Apply a new highlight value over an existing one.

        Styles are set one property at a time over the previous ones and are
        left untouched when the new value carries none. Identity and tooltip
        follow the new value.
        """
        previous = self._coerce(old)
        incoming = self._coerce(new)
        styles = dict(previous.styles or {})
        if incoming.styles:
            for prop, value in incoming.styles.items():
                styles[prop] = value
        return HighlightPayload(
            identity=incoming.identity or None,
            tooltip_text=incoming.tooltip_text or None,
            tooltip_placement=incoming.tooltip_placement if incoming.tooltip_text else None,
            styles=styles or None,
        )

    def detach(self, old: Any) -> None:
        if self.on_detach is not None:
            self.on_detach(self._coerce(old))

    @staticmethod
    def _coerce(value: Any) -> HighlightPayload:
        if isinstance(value, HighlightPayload):
            return value
        if isinstance(value, HighlightRequest):
            return value.to_payload()
        if isinstance(value, dict):
            return HighlightPayload.model_validate(value)
        # Bare ``True`` style values carry no metadata
        return HighlightPayload()
