"""In-memory reference implementation of the host editing surface.

Markup is parsed with BeautifulSoup and flattened into runs and embeds the
way a browser-based rich-text editor would: block elements end with a
newline, registered embed elements become single-offset embeds and
registered inline elements become attributes on the text they wrap.
"""

import html
import logging
from typing import Any, Iterable, Optional, Union

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString
from pydantic import BaseModel

from richtoken.formatting.ir import Document, Embed, Op, TextRun
from richtoken.host.base import EditingSurface, EmbedFormat, InlineFormat, SurfaceError

logger = logging.getLogger(__name__)

BLOCK_TAGS = frozenset(
    {"p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "li", "blockquote", "pre"}
)

# Plain formatting tags and the attribute they set
SIMPLE_TAGS: dict[str, str] = {
    "strong": "bold",
    "b": "bold",
    "em": "italic",
    "i": "italic",
    "u": "underline",
    "s": "strike",
}

# Attribute -> tag used when rendering
SIMPLE_RENDER: dict[str, str] = {
    "bold": "strong",
    "italic": "em",
    "underline": "u",
    "strike": "s",
}


def _flatten_attrs(tag: Tag) -> dict[str, str]:
    attrs: dict[str, str] = {}
    for name, value in tag.attrs.items():
        if isinstance(value, list):
            value = " ".join(value)
        attrs[name.lower()] = value
    return attrs


class MemorySurface(EditingSurface):
    """A headless editing surface holding its document in memory.

    Args:
        formats: Embed and inline formats to register up front
    """

    def __init__(
        self,
        formats: Iterable[Union[EmbedFormat, InlineFormat]] = (),
    ) -> None:
        self._document = Document()
        self._selection: Optional[int] = None
        self._embeds: dict[str, EmbedFormat] = {}
        self._inline: dict[str, InlineFormat] = {}
        for fmt in formats:
            if isinstance(fmt, EmbedFormat):
                self.register_embed(fmt)
            if isinstance(fmt, InlineFormat):
                self.register_inline(fmt)

    # -- registration ---------------------------------------------------------

    def register_embed(self, fmt: EmbedFormat) -> None:
        self._embeds[fmt.name] = fmt

    def register_inline(self, fmt: InlineFormat) -> None:
        self._inline[fmt.name] = fmt

    # -- markup conversion ----------------------------------------------------

    def markup_to_document(self, markup: str) -> Document:
        document = Document()
        if not markup:
            return document
        soup = BeautifulSoup(markup, "html.parser")
        self._walk(soup, {}, document)
        if document.ops and not document.ends_with_newline():
            document.append_text("\n")
        return document

    def _walk(self, node: Tag, attributes: dict[str, Any], document: Document) -> None:
        for child in node.children:
            if isinstance(child, PreformattedString):
                continue
            if isinstance(child, NavigableString):
                text = str(child)
                if "\n" in text and not text.strip():
                    continue
                document.append_text(text, attributes)
                continue
            if not isinstance(child, Tag):
                continue

            name = child.name.lower()
            attrs = _flatten_attrs(child)

            embed_fmt = self._match_embed(name, attrs)
            if embed_fmt is not None:
                value = embed_fmt.value_from(name, attrs, child.get_text())
                document.append(Embed(kind=embed_fmt.name, value=value, attributes=dict(attributes)))
                continue

            if name == "br":
                continue

            child_attributes = dict(attributes)
            inline_fmt = self._match_inline(name, attrs)
            if inline_fmt is not None:
                child_attributes[inline_fmt.name] = inline_fmt.value_from(name, attrs)
            elif name in SIMPLE_TAGS:
                child_attributes[SIMPLE_TAGS[name]] = True

            length_before = document.length
            self._walk(child, child_attributes, document)

            if name in BLOCK_TAGS:
                produced = document.length != length_before
                if not produced or not document.ends_with_newline():
                    document.append_text("\n")

    def _match_embed(self, name: str, attrs: dict[str, str]) -> Optional[EmbedFormat]:
        for fmt in self._embeds.values():
            if fmt.matches(name, attrs):
                return fmt
        return None

    def _match_inline(self, name: str, attrs: dict[str, str]) -> Optional[InlineFormat]:
        for fmt in self._inline.values():
            if fmt.matches(name, attrs):
                return fmt
        return None

    def document_to_markup(self, document: Document) -> str:
        if not document.ops:
            return ""

        lines: list[list[Op]] = [[]]
        for op in document.ops:
            if isinstance(op, Embed):
                lines[-1].append(op)
                continue
            for i, part in enumerate(op.text.split("\n")):
                if i > 0:
                    lines.append([])
                if part:
                    lines[-1].append(TextRun(part, op.attributes))

        if document.ends_with_newline():
            lines.pop()

        paragraphs: list[str] = []
        for line in lines:
            inner = "".join(self._render_op(op) for op in line)
            paragraphs.append(f"<p>{inner or '<br>'}</p>")
        return "".join(paragraphs)

    def _render_op(self, op: Op) -> str:
        if isinstance(op, Embed):
            fmt = self._embeds.get(op.kind)
            if fmt is None:
                raise SurfaceError(f"No embed format registered for {op.kind!r}")
            content = fmt.render(op.value)
        else:
            content = html.escape(op.text, quote=False).replace("\xa0", "&nbsp;")

        # Inline formats outermost, then plain formatting tags
        for name in reversed(SIMPLE_RENDER):
            if op.attributes.get(name):
                tag = SIMPLE_RENDER[name]
                content = f"<{tag}>{content}</{tag}>"
        for name, fmt in reversed(list(self._inline.items())):
            value = op.attributes.get(name)
            if value:
                content = f"{fmt.render_open(value)}{content}{fmt.render_close(value)}"
        return content

    # -- document access ------------------------------------------------------

    def get_document(self) -> Document:
        return self._document.copy()

    def set_document(self, document: Document) -> None:
        self._document = document.copy().compact()
        if self._selection is not None and self._selection > self._document.length:
            self._selection = self._document.length

    def get_document_length(self) -> int:
        return self._document.length

    def get_selection_offset(self) -> Optional[int]:
        return self._selection

    def set_selection_offset(self, offset: int) -> None:
        if not 0 <= offset <= self._document.length:
            raise SurfaceError(
                f"Selection offset {offset} outside document (length {self._document.length})"
            )
        self._selection = offset

    # -- mutation -------------------------------------------------------------

    def insert_embed(self, offset: int, kind: str, value: BaseModel) -> None:
        length = self._document.length
        if not 0 <= offset <= length:
            raise SurfaceError(f"Insert offset {offset} outside document (length {length})")
        if kind not in self._embeds:
            raise SurfaceError(f"No embed format registered for {kind!r}")

        ops: list[Op] = []
        inserted = False
        for start, op in self._document.iter_offsets():
            end = start + op.length
            if not inserted and start <= offset < end and isinstance(op, TextRun) and offset > start:
                cut = offset - start
                ops.append(TextRun(op.text[:cut], dict(op.attributes)))
                ops.append(Embed(kind=kind, value=value))
                ops.append(TextRun(op.text[cut:], dict(op.attributes)))
                inserted = True
                continue
            if not inserted and offset == start:
                ops.append(Embed(kind=kind, value=value))
                inserted = True
            ops.append(op.copy())
        if not inserted:
            ops.append(Embed(kind=kind, value=value))

        self._document = Document(ops).compact()
        logger.debug("Inserted %s embed at %d", kind, offset)

    def format_range(self, offset: int, length: int, attribute: str, value: Any) -> None:
        total = self._document.length
        if offset < 0 or length < 0 or offset + length > total:
            raise SurfaceError(
                f"Range ({offset}, {length}) outside document (length {total})"
            )
        if length == 0:
            return

        fmt = self._inline.get(attribute)
        range_end = offset + length
        ops: list[Op] = []
        for start, op in self._document.iter_offsets():
            end = start + op.length
            if end <= offset or start >= range_end:
                ops.append(op.copy())
                continue
            if isinstance(op, Embed):
                embed = op.copy()
                embed.attributes = self._format_attributes(op.attributes, attribute, value, fmt)
                ops.append(embed)
                continue

            cut_start = max(offset, start) - start
            cut_end = min(range_end, end) - start
            before, middle, after = (
                op.text[:cut_start],
                op.text[cut_start:cut_end],
                op.text[cut_end:],
            )
            if before:
                ops.append(TextRun(before, dict(op.attributes)))
            ops.append(
                TextRun(middle, self._format_attributes(op.attributes, attribute, value, fmt))
            )
            if after:
                ops.append(TextRun(after, dict(op.attributes)))

        self._document = Document(ops).compact()

    @staticmethod
    def _format_attributes(
        current: dict[str, Any],
        attribute: str,
        value: Any,
        fmt: Optional[InlineFormat],
    ) -> dict[str, Any]:
        attributes = dict(current)
        if not value:
            old = attributes.pop(attribute, None)
            if old is not None and fmt is not None:
                fmt.detach(old)
            return attributes

        old = attributes.get(attribute)
        if fmt is not None and old is not None:
            attributes[attribute] = fmt.update(old, value)
        else:
            attributes[attribute] = value
        return attributes
