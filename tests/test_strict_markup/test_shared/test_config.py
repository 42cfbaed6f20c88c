"""Tests for the configuration system."""

import json

import pytest

from strict_markup.shared.config import (
    DEFAULT_ENTITIES,
    DEFAULT_VOID_ELEMENTS,
    HTML_VOID_ELEMENTS,
    MINIMAL_ENTITIES,
    ConfigValidationError,
    GlobalConfig,
    ParserConfig,
    RenderConfig,
    TokenizerConfig,
    TreeConfig,
)


class TestTokenizerConfig:
    """Test suite for TokenizerConfig."""

    def test_default_configuration(self):
        """Test default tokenizer configuration values."""
        config = TokenizerConfig()

        assert config.void_elements == DEFAULT_VOID_ELEMENTS
        assert config.entities == DEFAULT_ENTITIES
        assert config.data_attr_prefix == "data-"
        assert config.data_attr_marker == "_"
        assert config.max_entity_length == 4

    def test_void_elements_are_lowercased(self):
        """Test that void element names are normalized."""
        config = TokenizerConfig(void_elements=frozenset({"BR", "Img"}))
        assert config.void_elements == frozenset({"br", "img"})

    @pytest.mark.parametrize("name", ["", "a;b", "a b"])
    def test_invalid_entity_name(self, name):
        """Test that malformed entity names are rejected."""
        with pytest.raises(ValueError, match="Invalid entity name"):
            TokenizerConfig(entities={name: "x"})

    def test_empty_entity_value(self):
        """Test that an entity must map to text."""
        with pytest.raises(ValueError, match="non-empty string"):
            TokenizerConfig(entities={"x": ""})

    def test_invalid_marker(self):
        """Test that an alphanumeric data attribute marker is rejected."""
        with pytest.raises(ValueError, match="data_attr_marker"):
            TokenizerConfig(data_attr_marker="d")


class TestTreeAndGlobalConfig:
    """Test suite for TreeConfig and GlobalConfig."""

    def test_defaults(self):
        """Test default values."""
        assert TreeConfig().max_depth == 512
        assert GlobalConfig().logging_level == "WARNING"
        assert GlobalConfig().enable_correlation_tracking is True

    def test_invalid_max_depth(self):
        """Test max_depth validation."""
        with pytest.raises(ValueError, match="max_depth must be > 0"):
            TreeConfig(max_depth=0)

    def test_invalid_logging_level(self):
        """Test logging level validation."""
        with pytest.raises(ValueError, match="logging_level"):
            GlobalConfig(logging_level="LOUD")


class TestParserConfig:
    """Test suite for ParserConfig."""

    def test_is_frozen(self):
        """Test that the configuration is immutable."""
        config = ParserConfig()
        with pytest.raises(AttributeError):
            config.name = "changed"

    def test_override_nested_field(self):
        """Test component__field overrides."""
        config = ParserConfig().override(tree__max_depth=64, name="custom")

        assert config.tree.max_depth == 64
        assert config.name == "custom"
        assert ParserConfig().tree.max_depth == 512

    def test_override_unknown_component(self):
        """Test that unknown components are reported with suggestions."""
        with pytest.raises(ConfigValidationError) as exc_info:
            ParserConfig().override(bogus__field=1)

        assert exc_info.value.field_name == "bogus__field"
        assert "tree" in exc_info.value.suggestions

    def test_override_invalid_value(self):
        """Test that invalid override values raise ConfigValidationError."""
        with pytest.raises(ConfigValidationError):
            ParserConfig().override(tree__max_depth=-1)

    def test_json_round_trip(self):
        """Test serialization to JSON and back."""
        config = ParserConfig.html().override(tree__max_depth=32)
        restored = ParserConfig.from_json(config.to_json())

        assert restored.tokenizer.void_elements == HTML_VOID_ELEMENTS
        assert restored.tokenizer.entities == config.tokenizer.entities
        assert restored.tree.max_depth == 32
        assert restored.name == "html"

    def test_to_dict_is_json_compatible(self):
        """Test that to_dict only produces JSON types."""
        data = ParserConfig().to_dict()
        assert json.loads(json.dumps(data)) == data
        assert data["tokenizer"]["void_elements"] == ["br", "meta"]

    def test_from_dict_invalid_data(self):
        """Test that bad dictionaries raise ConfigValidationError."""
        with pytest.raises(ConfigValidationError, match="Invalid configuration data"):
            ParserConfig.from_dict({"tree": {"max_depth": 0}})

    def test_presets(self):
        """Test preset factory methods."""
        assert ParserConfig.default().name == "default"
        assert "input" in ParserConfig.html().tokenizer.void_elements
        assert ParserConfig.html().tokenizer.entities["nbsp"] == "\u00a0"
        assert ParserConfig.minimal().tokenizer.entities == MINIMAL_ENTITIES


class TestRenderConfig:
    """Test suite for RenderConfig."""

    def test_defaults(self):
        """Test default render configuration."""
        config = RenderConfig()

        assert config.quote_char == '"'
        assert config.doctype is False
        assert config.escape_table["&"] == "&amp;"

    def test_single_quotes(self):
        """Test the single quote option."""
        assert RenderConfig(quotes="single").quote_char == "'"

    def test_invalid_quotes(self):
        """Test quote style validation."""
        with pytest.raises(ConfigValidationError, match="quotes"):
            RenderConfig(quotes="backtick")

    def test_extra_escapes_merge(self):
        """Test that extra escapes extend the default table."""
        config = RenderConfig(extra_escapes={"\u00a0": "&nbsp;"})
        assert config.escape_table["\u00a0"] == "&nbsp;"
        assert config.escape_table["<"] == "&lt;"

    def test_invalid_extra_escape_key(self):
        """Test that escape keys must be single characters."""
        with pytest.raises(ConfigValidationError, match="single character"):
            RenderConfig(extra_escapes={"ab": "x"})

    def test_hooks_must_be_callable(self):
        """Test hook validation."""
        with pytest.raises(ConfigValidationError, match="callable"):
            RenderConfig(prerender="not callable")

    def test_from_parser_config(self):
        """Test deriving render settings from a parser configuration."""
        config = RenderConfig.from_parser_config(ParserConfig.html(), quotes="single")

        assert config.void_elements == HTML_VOID_ELEMENTS
        assert config.quotes == "single"
