"""Configuration classes for markup parsing and rendering.

Parsing is controlled by the immutable :class:`ParserConfig`, which bundles
the tokenizer, tree building and global settings. Rendering has its own
:class:`RenderConfig` because it carries caller supplied hook functions that
cannot be serialized.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, FrozenSet, List, Optional

# Elements that never have children and need no closing tag.
DEFAULT_VOID_ELEMENTS: FrozenSet[str] = frozenset({"br", "meta"})

# The full HTML void element list, available through ParserConfig.html().
HTML_VOID_ELEMENTS: FrozenSet[str] = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input", "keygen",
    "link", "meta", "param", "source", "track", "wbr",
})

# Entity names resolved by the tokenizer. quot and #39 are included so every
# sequence the renderer escapes parses back.
MINIMAL_ENTITIES: Dict[str, str] = {"amp": "&", "lt": "<", "gt": ">"}
DEFAULT_ENTITIES: Dict[str, str] = {**MINIMAL_ENTITIES, "quot": '"', "#39": "'"}

# Character substitutions applied by the renderer.
DEFAULT_ESCAPES: Dict[str, str] = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "'": "&#39;",
    '"': "&quot;",
}

VALID_LOGGING_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
QUOTE_CHARS = {"double": '"', "single": "'"}


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


def _validate_marker(marker: str, prefix: str) -> None:
    if len(marker) != 1 or marker.isalnum():
        raise ValueError("data_attr_marker must be a single non-alphanumeric character")
    if not prefix:
        raise ValueError("data_attr_prefix cannot be empty")


@dataclass
class TokenizerConfig:
    """Configuration for the character level tokenizer."""

    void_elements: FrozenSet[str] = DEFAULT_VOID_ELEMENTS
    entities: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ENTITIES))
    data_attr_prefix: str = "data-"
    data_attr_marker: str = "_"

    def __post_init__(self) -> None:
        """Normalize and validate tokenizer configuration."""
        self.void_elements = frozenset(tag.lower() for tag in self.void_elements)
        for name, value in self.entities.items():
            if not name or ";" in name or any(c.isspace() for c in name):
                raise ValueError(f"Invalid entity name: {name!r}")
            if not isinstance(value, str) or not value:
                raise ValueError(f"Entity {name!r} must map to a non-empty string")
        _validate_marker(self.data_attr_marker, self.data_attr_prefix)

    @property
    def max_entity_length(self) -> int:
        """Length of the longest recognized entity name."""
        return max((len(name) for name in self.entities), default=0)


@dataclass
class TreeConfig:
    """Configuration for tree building."""

    max_depth: int = 512

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if self.max_depth <= 0:
            raise ValueError("max_depth must be > 0")


@dataclass
class GlobalConfig:
    """Settings that apply across all components."""

    logging_level: str = "WARNING"
    enable_correlation_tracking: bool = True

    def __post_init__(self) -> None:
        """Validate global configuration."""
        if self.logging_level not in VALID_LOGGING_LEVELS:
            raise ValueError(f"logging_level must be one of {VALID_LOGGING_LEVELS}")


_COMPONENTS = {
    "tokenizer": TokenizerConfig,
    "tree": TreeConfig,
    "global_": GlobalConfig,
}


@dataclass(frozen=True)
class ParserConfig:
    """Immutable configuration for the whole parsing pipeline.

    Thread-safe to share between concurrent parse calls because neither the
    config nor its components are mutated after construction.
    """

    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete parser configuration."""
        try:
            self.tokenizer.__post_init__()
            self.tree.__post_init__()
            self.global_.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Nested fields are addressed as ``component__field``.

        Example:
            >>> config = ParserConfig().override(tree__max_depth=64)
            >>> config.tree.max_depth
            64
        """
        nested: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component == "global":
                    component = "global_"
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=sorted(_COMPONENTS),
                    )
                nested.setdefault(component, {})[field_name] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = {}
        try:
            for component, overrides in nested.items():
                new_fields[component] = replace(getattr(self, component), **overrides)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e
        new_fields.update(top_level)
        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a JSON compatible dictionary."""
        return {
            "tokenizer": {
                "void_elements": sorted(self.tokenizer.void_elements),
                "entities": dict(self.tokenizer.entities),
                "data_attr_prefix": self.tokenizer.data_attr_prefix,
                "data_attr_marker": self.tokenizer.data_attr_marker,
            },
            "tree": {"max_depth": self.tree.max_depth},
            "global_": {
                "logging_level": self.global_.logging_level,
                "enable_correlation_tracking": self.global_.enable_correlation_tracking,
            },
            "name": self.name,
            "description": self.description,
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from a dictionary produced by :meth:`to_dict`."""
        if not isinstance(data, dict):
            raise ConfigValidationError(
                f"Configuration must be an object, got {type(data).__name__}"
            )
        components: Dict[str, Any] = {}
        try:
            for key, component_class in _COMPONENTS.items():
                values = dict(data.get(key) or {})
                if key == "tokenizer" and "void_elements" in values:
                    values["void_elements"] = frozenset(values["void_elements"])
                components[key] = component_class(**values)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(f"Invalid configuration data: {e}") from e
        return cls(
            name=data.get("name"),
            description=data.get("description"),
            **components,
        )

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from a JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def default(cls) -> "ParserConfig":
        """Void elements br/meta and the default entity table."""
        return cls(name="default")

    @classmethod
    def html(cls) -> "ParserConfig":
        """Recognize every HTML void element and the ellipsis entity."""
        return cls(
            tokenizer=TokenizerConfig(
                void_elements=HTML_VOID_ELEMENTS,
                entities={**DEFAULT_ENTITIES, "hellip": "…", "nbsp": "\u00a0"},
            ),
            name="html",
            description="Full HTML void element list with a wider entity table",
        )

    @classmethod
    def minimal(cls) -> "ParserConfig":
        """Resolve only amp, lt and gt."""
        return cls(
            tokenizer=TokenizerConfig(entities=dict(MINIMAL_ENTITIES)),
            name="minimal",
            description="Smallest entity whitelist",
        )


@dataclass(frozen=True)
class RenderConfig:
    """Immutable configuration for rendering element trees.

    ``prerender`` is applied to every node before it is rendered and
    ``postrender`` to the complete chunk list before adjacent literals are
    coalesced.
    """

    prerender: Optional[Callable[[Any], Any]] = None
    postrender: Optional[Callable[[List[Any]], List[Any]]] = None
    quotes: str = "double"
    extra_escapes: Dict[str, str] = field(default_factory=dict)
    void_elements: FrozenSet[str] = DEFAULT_VOID_ELEMENTS
    data_attr_prefix: str = "data-"
    data_attr_marker: str = "_"
    doctype: bool = False

    def __post_init__(self) -> None:
        """Validate render configuration."""
        try:
            if self.quotes not in QUOTE_CHARS:
                raise ValueError(f"quotes must be one of {sorted(QUOTE_CHARS)}")
            for char, entity in self.extra_escapes.items():
                if len(char) != 1:
                    raise ValueError(f"Escape key must be a single character: {char!r}")
                if not entity:
                    raise ValueError(f"Escape for {char!r} cannot be empty")
            for hook in (self.prerender, self.postrender):
                if hook is not None and not callable(hook):
                    raise ValueError("prerender and postrender must be callable")
            _validate_marker(self.data_attr_marker, self.data_attr_prefix)
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e
        object.__setattr__(
            self, "void_elements", frozenset(tag.lower() for tag in self.void_elements)
        )

    @property
    def quote_char(self) -> str:
        """Character placed around attribute values."""
        return QUOTE_CHARS[self.quotes]

    @property
    def escape_table(self) -> Dict[str, str]:
        """Default escapes merged with the configured extras."""
        return {**DEFAULT_ESCAPES, **self.extra_escapes}

    def override(self, **kwargs: Any) -> "RenderConfig":
        """Create a new render configuration with specific overrides."""
        return replace(self, **kwargs)

    @classmethod
    def from_parser_config(cls, config: ParserConfig, **kwargs: Any) -> "RenderConfig":
        """Derive a render configuration consistent with a parser configuration."""
        kwargs.setdefault("void_elements", config.tokenizer.void_elements)
        kwargs.setdefault("data_attr_prefix", config.tokenizer.data_attr_prefix)
        kwargs.setdefault("data_attr_marker", config.tokenizer.data_attr_marker)
        return cls(**kwargs)
