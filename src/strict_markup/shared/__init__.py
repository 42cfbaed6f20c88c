"""Shared utilities for markup parsing and rendering.

This module provides the configuration objects, diagnostic types, error
taxonomy and logging helpers used across all processing layers.
"""

from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
)
from .config import (
    DEFAULT_ENTITIES,
    DEFAULT_ESCAPES,
    DEFAULT_VOID_ELEMENTS,
    HTML_VOID_ELEMENTS,
    MINIMAL_ENTITIES,
    ConfigError,
    ConfigValidationError,
    GlobalConfig,
    ParserConfig,
    RenderConfig,
    TokenizerConfig,
    TreeConfig,
)
from .errors import (
    MarkupError,
    NestingDepthError,
    ParseError,
    RenderTypeError,
    TokenizeError,
    TokenSequenceError,
    TrailingContentError,
    UnterminatedElementError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)

__all__ = [
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "DEFAULT_ENTITIES",
    "DEFAULT_ESCAPES",
    "DEFAULT_VOID_ELEMENTS",
    "HTML_VOID_ELEMENTS",
    "MINIMAL_ENTITIES",
    "ConfigError",
    "ConfigValidationError",
    "GlobalConfig",
    "ParserConfig",
    "RenderConfig",
    "TokenizerConfig",
    "TreeConfig",
    "MarkupError",
    "NestingDepthError",
    "ParseError",
    "RenderTypeError",
    "TokenizeError",
    "TokenSequenceError",
    "TrailingContentError",
    "UnterminatedElementError",
    "CorrelationLogger",
    "get_logger",
]
