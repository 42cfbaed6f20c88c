"""Strict Markup.

A strict parser and renderer for an HTML-like markup language. Malformed
input is rejected with a descriptive error instead of being repaired.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), render(), unwrap()
- Level 2: Configured parser - MarkupParser class with ParserConfig/RenderConfig
- Level 3: Components - MarkupTokenizer, TreeBuilder, Renderer
"""

__version__ = "0.1.0"
__author__ = "Strict Markup Team"

# Level 1: Simple functions
# Level 2: Configured parser
from .api import MarkupParser, parse, parse_file, render, unwrap

# Rendering helpers
from .rendering import bind, escape

# Configuration and errors
from .shared.config import (
    DEFAULT_ENTITIES,
    DEFAULT_VOID_ELEMENTS,
    ParserConfig,
    RenderConfig,
    TokenizerConfig,
    TreeConfig,
)
from .shared.errors import (
    MarkupError,
    NestingDepthError,
    ParseError,
    RenderTypeError,
    TokenizeError,
    TokenSequenceError,
    TrailingContentError,
    UnterminatedElementError,
)

# Tree model
from .tree import Element, Opaque, new_element

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "parse",
    "parse_file",
    "render",
    "unwrap",
    "bind",
    "escape",

    # Level 2: Configured parser
    "MarkupParser",

    # Tree model
    "Element",
    "Opaque",
    "new_element",

    # Configuration
    "DEFAULT_ENTITIES",
    "DEFAULT_VOID_ELEMENTS",
    "ParserConfig",
    "RenderConfig",
    "TokenizerConfig",
    "TreeConfig",

    # Errors
    "MarkupError",
    "ParseError",
    "TokenizeError",
    "UnterminatedElementError",
    "TrailingContentError",
    "TokenSequenceError",
    "NestingDepthError",
    "RenderTypeError",
]
