"""Placeholder token codec.

Storage form is ``{{KEY}}``. Inside the editor the token is an inline
embed rendered as::

    <span class="ql-placeholder" data-key="KEY" data-label="KEY"
          contenteditable="false">KEY</span>

Only the key survives the trip back to storage; a custom label is dropped.
"""

import logging
import re
from typing import Optional

from pydantic import BaseModel

from richtoken.codecs.base import TokenCodec
from richtoken.formatting.markup import MarkupToken, match_elements, tokenize
from richtoken.formatting.payloads import HighlightRequest, PlaceholderPayload
from richtoken.host.base import EmbedFormat

logger = logging.getLogger(__name__)

PLACEHOLDER_CLASS = "ql-placeholder"
KEY_ATTR = "data-key"
LABEL_ATTR = "data-label"


class PlaceholderCodec(TokenCodec, EmbedFormat):
    """Codec and embed hooks for ``{{KEY}}`` placeholders."""

    TOKEN_PATTERN = re.compile(r"\{\{([^}]+)\}\}")

    @property
    def name(self) -> str:
        return "placeholder"

    # -- storage <-> editor markup ------------------------------------------

    def to_editor_markup(
        self,
        markup: str,
        requests: Optional[list[HighlightRequest]] = None,
    ) -> str:
        return self.tokens_to_markup(markup)

    def to_storage(self, markup: str) -> str:
        return self.markup_to_tokens(markup)

    def tokens_to_markup(self, text: str) -> str:
        """Replace every ``{{KEY}}`` token with canonical embed markup."""

        def _replace(match: re.Match) -> str:
            key = match.group(1).strip()
            return self.render_fragment(key, key)

        result, count = self.TOKEN_PATTERN.subn(_replace, text)
        if count:
            logger.debug("Expanded %d placeholder token(s)", count)
        return result

    def markup_to_tokens(self, markup: str) -> str:
        """Collapse every canonical placeholder element to ``{{KEY}}``."""
        tokens = tokenize(markup)
        pairs = match_elements(tokens, "span")
        parts: list[str] = []
        collapsed = 0

        index = 0
        while index < len(tokens):
            token = tokens[index]
            if index in pairs and self.is_placeholder_tag(token):
                parts.append("{{%s}}" % token.attrs[KEY_ATTR])
                index = pairs[index] + 1
                collapsed += 1
                continue
            parts.append(token.raw)
            index += 1

        if collapsed:
            logger.debug("Collapsed %d placeholder element(s)", collapsed)
        return "".join(parts)

    @staticmethod
    def is_placeholder_tag(token: MarkupToken) -> bool:
        return (
            token.is_start("span")
            and token.has_class(PLACEHOLDER_CLASS)
            and KEY_ATTR in token.attrs
        )

    @staticmethod
    def render_fragment(key: str, label: str) -> str:
        return (
            f'<span class="{PLACEHOLDER_CLASS}" {KEY_ATTR}="{key}" '
            f'{LABEL_ATTR}="{label}" contenteditable="false">{label}</span>'
        )

    # -- embed hooks ---------------------------------------------------------

    def matches(self, tag: str, attrs: dict[str, str]) -> bool:
        return (
            tag == "span"
            and PLACEHOLDER_CLASS in attrs.get("class", "").split()
            and KEY_ATTR in attrs
        )

    def value_from(self, tag: str, attrs: dict[str, str], text: str) -> BaseModel:
        return PlaceholderPayload(
            key=attrs[KEY_ATTR],
            label=attrs.get(LABEL_ATTR) or text or None,
        )

    def render(self, value: BaseModel) -> str:
        payload = PlaceholderPayload.model_validate(value.model_dump())
        return self.render_fragment(payload.key, payload.label or payload.key)
