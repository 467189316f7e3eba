"""Tokenizer for the constrained markup subset produced by the codecs and host.

The tokenizer splits markup into text, start-tag, end-tag and comment
tokens. Every token keeps its raw source slice, so a token stream that is
joined back together without changes reproduces the input exactly. This is
what lets the codecs rewrite only the fragments they recognise and pass
everything else through untouched.
"""

import html
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class TokenKind(str, Enum):
    """Kinds of markup tokens."""

    TEXT = "text"
    START = "start"
    END = "end"
    COMMENT = "comment"


@dataclass
class MarkupToken:
    """A single token of markup.

    Attributes:
        kind: Token kind
        raw: Exact source text of the token
        name: Lowercased tag name (tags only)
        attrs: Attribute name -> raw (still escaped) value, in source order
        self_closing: Whether a start tag ended with ``/>``
    """

    kind: TokenKind
    raw: str
    name: str = ""
    attrs: dict[str, str] = field(default_factory=dict)
    self_closing: bool = False

    @property
    def classes(self) -> list[str]:
        return self.attrs.get("class", "").split()

    def has_class(self, class_name: str) -> bool:
        return class_name in self.classes

    def get(self, attr: str) -> Optional[str]:
        return self.attrs.get(attr)

    def is_start(self, name: str) -> bool:
        return self.kind == TokenKind.START and self.name == name and not self.self_closing

    def is_end(self, name: str) -> bool:
        return self.kind == TokenKind.END and self.name == name


class MarkupTokenizer:
    """Split markup into tokens without interpreting its structure."""

    TAG_NAME_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9:-]*")
    ATTRIBUTE_PATTERN = re.compile(
        r"""\s*([^\s"'>/=]+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+)))?"""
    )

    def tokenize(self, markup: str) -> list[MarkupToken]:
        """Convert markup into a list of tokens covering every character."""
        tokens: list[MarkupToken] = []
        text_start = 0
        pos = 0

        while pos < len(markup):
            if markup[pos] != "<":
                pos += 1
                continue

            token, end = self._read_markup(markup, pos)
            if token is None:
                # Stray "<", keep it as text
                pos += 1
                continue

            if text_start < pos:
                tokens.append(MarkupToken(TokenKind.TEXT, markup[text_start:pos]))
            tokens.append(token)
            pos = end
            text_start = end

        if text_start < len(markup):
            tokens.append(MarkupToken(TokenKind.TEXT, markup[text_start:]))

        return tokens

    def _read_markup(self, markup: str, pos: int) -> tuple[Optional[MarkupToken], int]:
        """Read a tag or comment starting at ``pos`` (which holds ``<``)."""
        if markup.startswith("<!--", pos):
            end = markup.find("-->", pos + 4)
            if end == -1:
                return None, pos
            end += 3
            return MarkupToken(TokenKind.COMMENT, markup[pos:end]), end

        is_end = markup.startswith("</", pos)
        name_start = pos + 2 if is_end else pos + 1
        name_match = self.TAG_NAME_PATTERN.match(markup, name_start)
        if name_match is None:
            return None, pos

        close = self._find_tag_close(markup, name_match.end())
        if close == -1:
            return None, pos

        raw = markup[pos : close + 1]
        name = name_match.group(0).lower()
        if is_end:
            return MarkupToken(TokenKind.END, raw, name=name), close + 1

        body = markup[name_match.end() : close]
        self_closing = body.rstrip().endswith("/")
        if self_closing:
            body = body.rstrip()[:-1]
        return (
            MarkupToken(
                TokenKind.START,
                raw,
                name=name,
                attrs=self._parse_attributes(body),
                self_closing=self_closing,
            ),
            close + 1,
        )

    def _find_tag_close(self, markup: str, pos: int) -> int:
        """Find the ``>`` ending a tag, skipping quoted attribute values."""
        quote: Optional[str] = None
        while pos < len(markup):
            char = markup[pos]
            if quote:
                if char == quote:
                    quote = None
            elif char in "\"'":
                quote = char
            elif char == ">":
                return pos
            elif char == "<":
                return -1
            pos += 1
        return -1

    def _parse_attributes(self, body: str) -> dict[str, str]:
        attrs: dict[str, str] = {}
        for match in self.ATTRIBUTE_PATTERN.finditer(body):
            name = match.group(1).lower()
            value = next((g for g in match.groups()[1:] if g is not None), "")
            attrs.setdefault(name, value)
        return attrs


_tokenizer = MarkupTokenizer()


def tokenize(markup: str) -> list[MarkupToken]:
    """Tokenize markup with the shared tokenizer."""
    return _tokenizer.tokenize(markup)


def render(tokens: list[MarkupToken]) -> str:
    """Join tokens back into markup."""
    return "".join(token.raw for token in tokens)


def match_elements(tokens: list[MarkupToken], name: str) -> dict[int, int]:
    """Pair start tags with their end tags for one element name.

    Returns a map of start-token index -> end-token index. Unclosed start
    tags and stray end tags are left out.
    """
    pairs: dict[int, int] = {}
    stack: list[int] = []
    for index, token in enumerate(tokens):
        if token.is_start(name):
            stack.append(index)
        elif token.is_end(name) and stack:
            pairs[stack.pop()] = index
    return pairs


def parse_style(style: str) -> dict[str, str]:
    """Parse an inline style declaration into property -> value."""
    declarations: dict[str, str] = {}
    for part in style.split(";"):
        prop, sep, value = part.partition(":")
        if not sep:
            continue
        prop = prop.strip().lower()
        value = value.strip()
        if prop and value:
            declarations[prop] = value
    return declarations


def format_style(declarations: dict[str, str]) -> str:
    """Render property -> value pairs as an inline style declaration."""
    return "; ".join(f"{prop}: {value}" for prop, value in declarations.items() if value)


def escape_attr(value: str) -> str:
    return html.escape(value, quote=True)


def unescape_attr(value: str) -> str:
    return html.unescape(value)


def render_with_escaped_spaces(markup: str) -> str:
    """Render every space as ``&nbsp;`` for a readable markup preview."""
    return markup.replace(" ", "&nbsp;")
