"""Tests for entity resolution."""

from strict_markup.shared.config import DEFAULT_ENTITIES
from strict_markup.tokenization import EntityResolver


class TestEntityResolver:
    """Test the EntityResolver lookup table."""

    def test_default_table(self):
        """Test resolution with the default whitelist."""
        resolver = EntityResolver()

        assert resolver.resolve("amp") == "&"
        assert resolver.resolve("#39") == "'"
        assert resolver.resolve("copy") is None
        assert len(resolver) == len(DEFAULT_ENTITIES)
        assert "quot" in resolver

    def test_max_length(self):
        """Test that the longest name bounds accumulation."""
        resolver = EntityResolver()

        assert resolver.max_length == 4
        assert resolver.accepts_prefix("quot")
        assert not resolver.accepts_prefix("hellip")

    def test_custom_table(self):
        """Test a caller supplied table."""
        resolver = EntityResolver({"nbsp": " "})

        assert resolver.resolve("nbsp") == " "
        assert resolver.resolve("amp") is None

    def test_empty_table(self):
        """Test that an empty table resolves nothing."""
        resolver = EntityResolver({})

        assert resolver.max_length == 0
        assert not resolver.accepts_prefix("a")

    def test_names_is_a_copy(self):
        """Test that callers cannot mutate the table."""
        resolver = EntityResolver()
        names = resolver.names
        names["copy"] = "(c)"

        assert resolver.resolve("copy") is None
