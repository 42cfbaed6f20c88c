"""Tests for the error taxonomy and diagnostics."""

import pytest

from strict_markup.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    MarkupError,
    NestingDepthError,
    ParseError,
    RenderTypeError,
    TokenizeError,
    TokenSequenceError,
    TrailingContentError,
    UnterminatedElementError,
)


class TestHierarchy:
    """Test exception relationships."""

    @pytest.mark.parametrize("error_class", [
        TokenizeError,
        UnterminatedElementError,
        TrailingContentError,
        TokenSequenceError,
        NestingDepthError,
    ])
    def test_parse_errors(self, error_class):
        """Test that parse failures share a base class."""
        assert issubclass(error_class, ParseError)
        assert issubclass(error_class, MarkupError)

    def test_render_type_error(self):
        """Test that render errors are also TypeErrors."""
        assert issubclass(RenderTypeError, TypeError)
        assert not issubclass(RenderTypeError, ParseError)


class TestMessages:
    """Test error messages and details."""

    def test_tokenize_error_end_of_input(self):
        """Test the message when input ran out."""
        error = TokenizeError("Input ended", state="entity", char=None, line=3, column=4)
        assert str(error) == "Input ended: end of input in state entity at line 3, column 4"

    def test_unterminated(self):
        """Test open tag reporting."""
        error = UnterminatedElementError(["html", "body"])
        assert "html > body" in str(error)
        assert error.details() == {"open_tags": ["html", "body"]}

    def test_nesting(self):
        """Test nesting error details."""
        error = NestingDepthError(8, "div")
        assert error.details() == {"max_depth": 8, "tag": "div"}

    def test_render_type_error(self):
        """Test render error details."""
        error = RenderTypeError(1.5j, where="attribute value")
        assert "complex" in str(error)
        assert error.details()["where"] == "attribute value"

    def test_sequence_error_without_token(self):
        """Test that a missing token gives no position."""
        assert TokenSequenceError("Empty document").position is None


class TestDiagnostics:
    """Test DiagnosticEntry."""

    def test_to_diagnostic(self):
        """Test converting an error to a diagnostic."""
        diagnostic = NestingDepthError(2, "a").to_diagnostic("cid")

        assert diagnostic.severity is DiagnosticSeverity.ERROR
        assert diagnostic.component == "tree_builder"
        assert diagnostic.is_error
        assert diagnostic.to_dict()["correlation_id"] == "cid"

    def test_validation(self):
        """Test that empty messages are rejected."""
        with pytest.raises(ValueError, match="message cannot be empty"):
            DiagnosticEntry(DiagnosticSeverity.INFO, "", "parser")

    def test_minimal_dict(self):
        """Test that optional fields are omitted."""
        entry = DiagnosticEntry(DiagnosticSeverity.WARNING, "note", "cli")
        assert entry.to_dict() == {"severity": "WARNING", "message": "note", "component": "cli"}
        assert not entry.is_error
