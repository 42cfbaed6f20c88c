"""Tests for the public parse/render API."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from strict_markup import (
    Element,
    MarkupParser,
    Opaque,
    ParseError,
    ParserConfig,
    RenderConfig,
    RenderTypeError,
    TokenizeError,
    TrailingContentError,
    UnterminatedElementError,
    new_element,
    parse,
    parse_file,
    render,
    unwrap,
)

WELL_FORMED = [
    '<div id="1" class="a b"><p>Hello &amp; world</p><br></div>',
    "<p>a <b>bold</b> and <i>it&#39;s</i></p>",
    '<a href="/x?a=1&amp;b=2" title=\'say "hi"\' data-id="7">link</a>',
    "<ul>\n  <li>one</li>\n  <li>two\n     lines</li>\n</ul>",
    "<!doctype html><html><head><meta charset=\"utf-8\"></head><body></body></html>",
    "<form><input disabled=\"\"/><br/></form>",
    "<p>&lt;tag&gt; &quot;quoted&quot;</p>",
]


class TestParse:
    """Test the parse function."""

    def test_reference_document(self):
        """Test parsing the reference document."""
        root = parse('<div id="1" class="a b"><p>Hello &amp; world</p><br></div>')

        assert isinstance(root, Element)
        assert root.id == "1"
        assert root.class_ == ["a", "b"]
        assert root.attrs == ()
        assert root.content[0] == new_element("p", content="Hello & world")
        assert root.content[1] == new_element("br")

    @pytest.mark.parametrize("text", ["<br>", "<br/>", "<meta>"])
    def test_void_elements(self, text):
        """Test void elements parse with empty content."""
        assert parse(text).content == ()

    def test_boolean_attribute_with_html_config(self):
        """Test <input disabled> with the full void element list."""
        root = parse("<input disabled>", ParserConfig.html())
        assert root.attrs == (("disabled", ""),)

    def test_boolean_attribute_needs_close_by_default(self):
        """Test that input is not void in the default configuration."""
        assert isinstance(parse("<input disabled>"), UnterminatedElementError)
        assert parse("<input disabled/>").attrs == (("disabled", ""),)

    @pytest.mark.parametrize("body,expected", [
        ("foo\n\nbar", "foobar"),
        ("foo\nbar", "foo bar"),
        ("foo\n  bar", "foo bar"),
    ])
    def test_whitespace(self, body, expected):
        """Test line break folding through the API."""
        assert parse(f"<p>{body}</p>").content == (expected,)

    def test_errors_are_returned(self):
        """Test that malformed input yields error values."""
        assert isinstance(parse("<div><p>text"), UnterminatedElementError)
        assert isinstance(parse("<p>&copy;</p>"), TokenizeError)
        assert isinstance(parse("<a></a><b></b>"), TrailingContentError)

    def test_error_is_logged(self, caplog):
        """Test that returned errors are logged at warning level."""
        with caplog.at_level(logging.WARNING, logger="strict_markup.api.parser"):
            parse("<p>&copy;</p>")

        assert any("Parse failed" in record.message for record in caplog.records)
        assert caplog.records[-1].component == "parse"

    def test_correlation_id_passed_through(self, caplog):
        """Test explicit correlation IDs on log records."""
        with caplog.at_level(logging.WARNING, logger="strict_markup.api.parser"):
            parse("<1>", correlation_id="req-1")
        assert caplog.records[-1].correlation_id == "req-1"

    def test_non_string_input(self):
        """Test that non-text input is a programming error."""
        with pytest.raises(TypeError):
            parse(b"<p/>")

    def test_parse_file(self, tmp_path: Path):
        """Test parsing from a file."""
        path = tmp_path / "doc.html"
        path.write_text("<p>file</p>", encoding="utf-8")
        assert parse_file(path).text() == "file"


class TestRender:
    """Test the render function."""

    def test_escaping(self):
        """Test text escaping through the API."""
        assert render("<a & b>") == "&lt;a &amp; b&gt;"

    def test_data_attribute(self):
        """Test the data attribute convention."""
        assert render(new_element("div", {"_foo": "bar"})) == '<div data-foo="bar"></div>'

    def test_render_error_is_returned(self):
        """Test that unsupported values yield an error value."""
        result = render(new_element("p", content=[object()]))
        assert isinstance(result, RenderTypeError)

    def test_opaque(self):
        """Test opaque output through the API."""
        slot = Opaque("x")
        assert render(new_element("p", content=[slot])) == ["<p>", slot, "</p>"]


class TestRoundTrip:
    """Test that rendering preserves the parsed structure."""

    @pytest.mark.parametrize("text", WELL_FORMED)
    def test_parse_render_parse(self, text):
        """Test parse(render(parse(x))) == parse(x)."""
        config = ParserConfig.default()
        first = unwrap(parse(text, config))
        rendered = unwrap(render(first, RenderConfig.from_parser_config(config)))
        assert unwrap(parse(rendered, config)) == first

    def test_byte_identical_reference(self):
        """Test that the reference document renders back unchanged."""
        text = '<div id="1" class="a b"><p>Hello &amp; world</p><br></div>'
        assert render(parse(text)) == text

    def test_single_quote_round_trip(self):
        """Test round trip with single quoted rendering."""
        tree = unwrap(parse("<a title=\"it's\"></a>"))
        rendered = render(tree, RenderConfig(quotes="single"))
        assert rendered == "<a title='it&#39;s'></a>"
        assert parse(rendered) == tree


class TestUnwrap:
    """Test unwrap."""

    def test_returns_value(self):
        """Test that successful results pass through."""
        assert unwrap("text") == "text"

    def test_raises_error(self):
        """Test that errors are raised."""
        with pytest.raises(UnterminatedElementError):
            unwrap(parse("<div>"))


class TestMarkupParser:
    """Test the configured parser class."""

    def test_round_trip(self):
        """Test parse and render in one call."""
        parser = MarkupParser(ParserConfig.html())
        assert parser.round_trip("<p>a<input disabled></p>") == '<p>a<input disabled=""></p>'

    def test_round_trip_error(self):
        """Test that round_trip returns parse errors."""
        parser = MarkupParser()
        assert isinstance(parser.round_trip("<p>"), ParseError)

    def test_render_config_follows_parser_config(self):
        """Test the derived render configuration."""
        parser = MarkupParser(ParserConfig.html())
        assert "img" in parser.render_config.void_elements

    def test_statistics(self):
        """Test parse counters."""
        parser = MarkupParser(correlation_id="fixed")

        parser.parse("<p/>")
        parser.parse("<p>")

        assert parser.correlation_id == "fixed"
        assert parser.parse_count == 2
        assert parser.failure_rate == 0.5

    def test_generated_correlation_id(self):
        """Test correlation ID generation when tracking is enabled."""
        assert MarkupParser().correlation_id is not None
        config = ParserConfig().override(global__enable_correlation_tracking=False)
        assert MarkupParser(config).correlation_id is None

    def test_uses_configured_components(self):
        """Test that the parser passes its configuration to the tokenizer."""
        config = ParserConfig.default()
        with patch("strict_markup.api.parser.MarkupTokenizer") as tokenizer_class:
            tokenizer_class.return_value.tokenize.return_value = []
            parser = MarkupParser(config, correlation_id="c")
            result = parser.parse("<p/>")

        tokenizer_class.assert_called_once_with(config.tokenizer, "c")
        assert isinstance(result, ParseError)
