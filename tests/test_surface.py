"""Tests for the in-memory reference editing surface."""

import pytest

from richtoken.codecs import HighlightCodec, PlaceholderCodec
from richtoken.formatting.ir import Document, Embed, TextRun
from richtoken.formatting.payloads import HighlightPayload, PlaceholderPayload
from richtoken.host.base import SurfaceError
from richtoken.host.memory import MemorySurface


@pytest.fixture
def registered() -> MemorySurface:
    """Surface with both codecs registered."""
    return MemorySurface([PlaceholderCodec(), HighlightCodec()])


class TestMarkupToDocument:
    """Tests for markup -> document conversion."""

    def test_paragraph_with_formatting(self, surface):
        document = surface.markup_to_document("<p>Hello <strong>world</strong></p>")

        assert document.ops == [
            TextRun("Hello "),
            TextRun("world", {"bold": True}),
            TextRun("\n"),
        ]

    def test_empty_paragraph(self, surface):
        document = surface.markup_to_document("<p>a</p><p><br></p><p>b</p>")

        assert document.plain_text == "a\n\nb\n"

    def test_bare_text_gets_trailing_newline(self, surface):
        assert surface.markup_to_document("Hello").plain_text == "Hello\n"

    def test_empty_markup(self, surface):
        assert surface.markup_to_document("").ops == []

    def test_formatting_whitespace_skipped(self, surface):
        """Test newlines between blocks are not content."""
        document = surface.markup_to_document("<p>a</p>\n  <p>b</p>\n")

        assert document.plain_text == "a\nb\n"

    def test_comments_skipped(self, surface):
        assert surface.markup_to_document("<p>a<!-- c -->b</p>").plain_text == "ab\n"

    def test_entities_decoded(self, surface):
        document = surface.markup_to_document("<p>a&nbsp;b &amp; c</p>")

        assert document.plain_text == "a\xa0b & c\n"

    def test_placeholder_becomes_embed(self, registered):
        """Test registered embed elements occupy one offset."""
        markup = PlaceholderCodec().tokens_to_markup("<p>Hi {{name}}</p>")

        document = registered.markup_to_document(markup)

        assert document.ops == [
            TextRun("Hi "),
            Embed(kind="placeholder", value=PlaceholderPayload(key="name")),
            TextRun("\n"),
        ]
        assert document.length == 5

    def test_highlight_becomes_attribute(self, registered):
        markup = '<p><span class="ql-highlight" style="color: red">Hi</span></p>'

        document = registered.markup_to_document(markup)

        assert document.ops[0] == TextRun(
            "Hi", {"highlight": HighlightPayload(styles={"color": "red"})}
        )

    def test_unregistered_spans_are_plain_text(self, surface):
        markup = PlaceholderCodec().tokens_to_markup("{{name}}")

        assert surface.markup_to_document(markup).plain_text == "name\n"


class TestDocumentToMarkup:
    """Tests for document -> markup conversion."""

    def test_round_trips_paragraphs(self, surface):
        markup = "<p>a</p><p><br></p><p>b</p>"

        assert surface.document_to_markup(surface.markup_to_document(markup)) == markup

    def test_escapes_text(self, surface):
        document = Document([TextRun("a < b & c\xa0d\n")])

        assert surface.document_to_markup(document) == "<p>a &lt; b &amp; c&nbsp;d</p>"

    def test_renders_formats(self, registered):
        document = Document(
            [
                TextRun("Hi", {"highlight": HighlightPayload(styles={"color": "red"})}),
                TextRun(" "),
                TextRun("there", {"bold": True, "italic": True}),
                TextRun("\n"),
            ]
        )

        assert registered.document_to_markup(document) == (
            '<p><span class="ql-highlight" style="color: red">Hi</span> '
            "<strong><em>there</em></strong></p>"
        )

    def test_renders_embeds(self, registered):
        document = Document(
            [Embed(kind="placeholder", value=PlaceholderPayload(key="k")), TextRun("\n")]
        )

        assert registered.document_to_markup(document) == (
            '<p><span class="ql-placeholder" data-key="k" data-label="k" '
            'contenteditable="false">k</span></p>'
        )

    def test_unknown_embed_raises(self, surface):
        document = Document([Embed(kind="video", value=PlaceholderPayload(key="k"))])

        with pytest.raises(SurfaceError):
            surface.document_to_markup(document)

    def test_empty_document(self, surface):
        assert surface.document_to_markup(Document()) == ""


class TestInsertEmbed:
    """Tests for embed insertion."""

    @pytest.fixture
    def loaded(self, registered) -> MemorySurface:
        registered.set_document(Document([TextRun("abcd\n")]))
        return registered

    def test_insert_inside_run(self, loaded):
        loaded.insert_embed(2, "placeholder", PlaceholderPayload(key="k"))

        ops = loaded.get_document().ops
        assert ops[0] == TextRun("ab")
        assert isinstance(ops[1], Embed)
        assert ops[2] == TextRun("cd\n")
        assert loaded.get_document_length() == 6

    def test_insert_at_start_and_end(self, loaded):
        loaded.insert_embed(0, "placeholder", PlaceholderPayload(key="a"))
        loaded.insert_embed(6, "placeholder", PlaceholderPayload(key="b"))

        document = loaded.get_document()
        assert [op.value.key for op in document.embeds] == ["a", "b"]
        assert isinstance(document.ops[0], Embed)
        assert isinstance(document.ops[-1], Embed)

    @pytest.mark.parametrize("offset", [-1, 6])
    def test_out_of_bounds(self, loaded, offset):
        with pytest.raises(SurfaceError):
            loaded.insert_embed(offset, "placeholder", PlaceholderPayload(key="k"))

    def test_unknown_kind(self, loaded):
        with pytest.raises(SurfaceError):
            loaded.insert_embed(0, "video", PlaceholderPayload(key="k"))


class TestFormatRange:
    """Tests for range formatting."""

    @pytest.fixture
    def loaded(self, surface) -> MemorySurface:
        surface.set_document(Document([TextRun("Hello world\n")]))
        return surface

    def test_set_and_remove(self, loaded):
        loaded.format_range(6, 5, "bold", True)

        assert loaded.get_document().ops == [
            TextRun("Hello "),
            TextRun("world", {"bold": True}),
            TextRun("\n"),
        ]

        loaded.format_range(6, 5, "bold", False)

        assert loaded.get_document().ops == [TextRun("Hello world\n")]

    def test_length_unchanged(self, loaded):
        loaded.format_range(0, 12, "italic", True)

        assert loaded.get_document_length() == 12

    def test_out_of_bounds(self, loaded):
        with pytest.raises(SurfaceError):
            loaded.format_range(10, 5, "bold", True)

    def test_zero_length_is_noop(self, loaded):
        loaded.format_range(3, 0, "bold", True)

        assert loaded.get_document().ops == [TextRun("Hello world\n")]

    def test_formats_embeds(self, registered):
        registered.set_document(
            Document(
                [
                    TextRun("a"),
                    Embed(kind="placeholder", value=PlaceholderPayload(key="k")),
                    TextRun("b\n"),
                ]
            )
        )

        registered.format_range(0, 3, "bold", True)

        assert all(op.attributes == {"bold": True} for op in registered.get_document().ops[:3])

    def test_update_and_detach_hooks(self):
        """Test existing values go through update and removal calls detach."""
        removed = []
        surface = MemorySurface([HighlightCodec(on_detach=removed.append)])
        surface.set_document(Document([TextRun("abc\n")]))

        surface.format_range(0, 3, "highlight", HighlightPayload(styles={"color": "red"}))
        surface.format_range(0, 3, "highlight", HighlightPayload(styles={"background": "blue"}))

        value = surface.get_document().ops[0].attributes["highlight"]
        assert value.styles == {"color": "red", "background": "blue"}

        surface.format_range(0, 3, "highlight", False)

        assert removed == [value]
        assert surface.get_document().ops == [TextRun("abc\n")]


class TestSelection:
    """Tests for selection handling."""

    def test_default_is_none(self, surface):
        assert surface.get_selection_offset() is None

    def test_set_and_get(self, surface):
        surface.set_document(Document([TextRun("abc\n")]))
        surface.set_selection_offset(2)

        assert surface.get_selection_offset() == 2

    def test_out_of_bounds(self, surface):
        with pytest.raises(SurfaceError):
            surface.set_selection_offset(1)

    def test_clamped_when_document_shrinks(self, surface):
        surface.set_document(Document([TextRun("abcdef\n")]))
        surface.set_selection_offset(6)
        surface.set_document(Document([TextRun("a\n")]))

        assert surface.get_selection_offset() == 2

    def test_get_document_is_a_copy(self, surface):
        surface.set_document(Document([TextRun("abc\n")]))
        surface.get_document().ops[0].text = "changed"

        assert surface.get_document().plain_text == "abc\n"
