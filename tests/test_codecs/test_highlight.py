"""Tests for the highlight token codec."""

import pytest

from richtoken.codecs import HighlightCodec, PlaceholderCodec
from richtoken.codecs.highlight import is_highlight_span, style_has_highlight_colors
from richtoken.formatting.markup import tokenize
from richtoken.formatting.payloads import (
    HighlightPayload,
    HighlightRequest,
    TooltipPlacement,
)


@pytest.fixture
def codec() -> HighlightCodec:
    return HighlightCodec()


class TestHighlightDetection:
    """Tests for recognising highlight spans."""

    @pytest.mark.parametrize(
        "tag",
        [
            '<span class="ql-highlight">',
            '<span class="other ql-highlight">',
            '<span data-highlight="1">',
            '<span data-highlight-id="h1">',
            '<span style="color: #000; background-color: #ff0">',
            '<span style="background: yellow; color: black">',
            '<span style="color: red; background: blue" data-x="1">',
        ],
    )
    def test_highlight_spans(self, tag):
        assert is_highlight_span(tokenize(tag)[0])

    @pytest.mark.parametrize(
        "tag",
        [
            "<span>",
            '<span class="ql-placeholder" data-key="k">',
            '<span style="color: red">',
            '<span data-highlighted="1">',
            '<em class="ql-highlight">',
        ],
    )
    def test_other_spans(self, tag):
        assert not is_highlight_span(tokenize(tag)[0])

    def test_style_colors(self):
        assert style_has_highlight_colors("color: red; background-color: blue")
        assert not style_has_highlight_colors("background-color: blue")


class TestStorageFromDocumentMarkup:
    """Tests for stripping highlight presentation."""

    def test_unwraps_canonical_span(self, codec):
        """Test a highlight span is replaced by its content."""
        markup = '<p><span class="ql-highlight" style="color: red">Hi</span> there</p>'

        assert codec.storage_from_document_markup(markup) == "<p>Hi there</p>"

    def test_unwraps_nested_spans(self, codec):
        """Test wrappers nested by the host are all removed."""
        markup = (
            '<span class="ql-highlight"><span data-highlight-id="h">'
            '<span style="color: #000; background: #ff0">a</span></span></span>'
        )

        assert codec.to_storage(markup) == "a"

    def test_keeps_inner_markup(self, codec):
        """Test formatting inside a highlight survives the unwrap."""
        markup = '<span class="ql-highlight"><strong>bold</strong> text</span>'

        assert codec.to_storage(markup) == "<strong>bold</strong> text"

    def test_keeps_placeholders_and_plain_spans(self, codec):
        placeholder = PlaceholderCodec().tokens_to_markup("{{k}}")
        markup = f'{placeholder}<span class="note">n</span>'

        assert codec.to_storage(markup) == markup

    def test_unwraps_styled_span_with_other_attributes(self, codec):
        """Test a colored wrapper is unwrapped whatever else it carries."""
        markup = '<p><span style="color: red; background: blue" data-x="1">Hi</span></p>'

        assert codec.to_storage(markup) == "<p>Hi</p>"

    def test_unclosed_span_passes_through(self, codec):
        """Test malformed markup is returned unchanged."""
        markup = '<span class="ql-highlight">never closed'

        assert codec.to_storage(markup) == markup

    @pytest.mark.parametrize(
        "markup",
        [
            "",
            "plain",
            '<span class="ql-highlight">a</span>b',
            '<span class="ql-highlight"><span class="ql-highlight">x</span></span>',
            '<span class="ql-highlight">open <span>inner</span>',
            '</span><span data-highlight="1">y</span></span>',
        ],
    )
    def test_idempotent(self, codec, markup):
        """Test stripping twice equals stripping once."""
        once = codec.storage_from_document_markup(markup)

        assert codec.storage_from_document_markup(once) == once


class TestTokensToMarkup:
    """Tests for converting legacy highlight tokens."""

    def test_converts_token_span(self, codec):
        """Test data-highlight token spans become canonical spans."""
        markup = (
            '<span data-highlight="1" data-text-color="#111" '
            'data-highlight-color="#ff0">Hi</span>'
        )

        assert codec.tokens_to_markup(markup) == (
            '<span class="ql-highlight" style="color: #111; background-color: #ff0">Hi</span>'
        )

    def test_converts_token_without_marker(self, codec):
        """Test the two color attributes alone identify a token span."""
        markup = '<span data-text-color="#111" data-highlight-color="#ff0">Hi</span>'

        assert codec.tokens_to_markup(markup) == (
            '<span class="ql-highlight" style="color: #111; background-color: #ff0">Hi</span>'
        )

    def test_incomplete_token_passes_through(self, codec):
        """Test a token span missing a color attribute is left alone."""
        markup = '<span data-highlight="1" data-text-color="#111">Hi</span>'

        assert codec.tokens_to_markup(markup) == markup


class TestWrapRequests:
    """Tests for wrapping requested phrases."""

    def test_wraps_every_occurrence(self, codec):
        result = codec.document_markup_from_storage(
            "<p>fox and fox</p>", [HighlightRequest(text="fox")]
        )

        assert result == (
            '<p><span class="ql-highlight">fox</span> and '
            '<span class="ql-highlight">fox</span></p>'
        )

    def test_carries_request_attributes(self, codec):
        """Test style, tooltip, placement and identity are written."""
        request = HighlightRequest(
            text="fox",
            styles={"background-color": "#ff0"},
            tooltip_text='A "quick" fox',
            tooltip_placement=TooltipPlacement.LEFT,
            identity="h1",
        )

        result = codec.to_editor_markup("fox", [request])

        assert result == (
            '<span class="ql-highlight" style="background-color: #ff0" '
            'data-hover-tooltip="A &quot;quick&quot; fox" '
            'data-tooltip-placement="left" data-highlight-id="h1">fox</span>'
        )

    def test_longest_first(self, codec):
        """Test a longer phrase is wrapped before a shorter one it contains."""
        requests = [HighlightRequest(text="Hello"), HighlightRequest(text="Hello world")]

        result = codec.wrap_requests("Hello world and Hello", requests)

        assert result == (
            '<span class="ql-highlight">Hello world</span> and '
            '<span class="ql-highlight">Hello</span>'
        )
        assert result.count("<span") == 2

    def test_skips_placeholder_content(self, codec):
        """Test text inside a placeholder embed is never wrapped."""
        markup = PlaceholderCodec().tokens_to_markup("{{name}} name")

        result = codec.wrap_requests(markup, [HighlightRequest(text="name")])

        assert result.endswith(' <span class="ql-highlight">name</span>')
        assert result.count("ql-highlight") == 1

    def test_blank_requests_ignored(self, codec):
        assert codec.wrap_requests("a b", [HighlightRequest(text=" ")]) == "a b"

    def test_does_not_touch_attributes(self, codec):
        """Test a phrase inside a tag's attributes is not wrapped."""
        markup = '<p title="fox">dog</p>'

        assert codec.wrap_requests(markup, [HighlightRequest(text="fox")]) == markup

    def test_phrase_across_tag_boundary_not_matched(self, codec):
        """Test the known limitation: phrases split by a tag are not wrapped."""
        markup = "<strong>Hel</strong>lo"

        assert codec.wrap_requests(markup, [HighlightRequest(text="Hello")]) == markup

    def test_wrapped_markup_strips_back(self, codec):
        """Test wrapping then stripping returns the storage text."""
        storage = "<p>Hello world and Hello</p>"
        requests = [HighlightRequest(text="Hello"), HighlightRequest(text="world")]

        wrapped = codec.to_editor_markup(storage, requests)

        assert codec.to_storage(wrapped) == storage


class TestInlineHooks:
    """Tests for the inline attribute hooks."""

    def test_matches(self, codec):
        assert codec.matches("span", {"class": "ql-highlight"})
        assert not codec.matches("span", {"class": "ql-placeholder"})

    def test_value_from(self, codec):
        """Test payload fields are read from element attributes."""
        attrs = {
            "class": "ql-highlight",
            "style": "color: red",
            "data-hover-tooltip": "Tip",
            "data-tooltip-placement": "bottom",
            "data-highlight-id": "h",
        }

        assert codec.value_from("span", attrs) == HighlightPayload(
            identity="h",
            tooltip_text="Tip",
            tooltip_placement=TooltipPlacement.BOTTOM,
            styles={"color": "red"},
        )

    def test_value_from_without_tooltip_drops_placement(self, codec):
        attrs = {"class": "ql-highlight", "data-tooltip-placement": "left"}

        assert codec.value_from("span", attrs) == HighlightPayload()

    def test_render_open_minimal(self, codec):
        assert codec.render_open(HighlightPayload()) == '<span class="ql-highlight">'
        assert codec.render_open(True) == '<span class="ql-highlight">'

    def test_update_merges_styles(self, codec):
        """Test styles are set one by one over the previous ones."""
        old = HighlightPayload(styles={"color": "red", "background": "blue"})
        new = HighlightPayload(styles={"background": "green"}, identity="n")

        merged = codec.update(old, new)

        assert merged.styles == {"color": "red", "background": "green"}
        assert merged.identity == "n"

    def test_update_without_styles_keeps_old(self, codec):
        old = HighlightPayload(styles={"color": "red"}, tooltip_text="old")
        new = HighlightPayload(tooltip_text="new")

        merged = codec.update(old, new)

        assert merged.styles == {"color": "red"}
        assert merged.tooltip_text == "new"

    def test_detach_calls_callback(self):
        """Test removal of the attribute notifies the callback."""
        removed = []
        codec = HighlightCodec(on_detach=removed.append)
        payload = HighlightPayload(identity="h")

        codec.detach(payload)

        assert removed == [payload]

    def test_detach_without_callback(self, codec):
        codec.detach(HighlightPayload())


class TestHighlightRequest:
    """Tests for request -> payload conversion."""

    def test_placement_only_with_tooltip(self):
        request = HighlightRequest(text="a", tooltip_placement=TooltipPlacement.RIGHT)

        assert request.to_payload().tooltip_placement is None

    def test_defaults(self):
        request = HighlightRequest(text="a", tooltip_text="t")

        assert request.case_sensitive is None
        assert request.to_payload().tooltip_placement == TooltipPlacement.TOP
        assert request.to_payload().styles is None

    def test_is_blank(self):
        assert HighlightRequest(text="  ").is_blank
        assert not HighlightRequest(text=" a ").is_blank

    def test_invalid_placement_rejected(self):
        with pytest.raises(ValueError):
            HighlightRequest(text="a", tooltip_placement="middle")
