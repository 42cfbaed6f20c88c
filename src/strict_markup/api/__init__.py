"""Public API for strict markup parsing and rendering."""

from .parser import MarkupParser, parse, parse_file, render, unwrap

__all__ = [
    "MarkupParser",
    "parse",
    "parse_file",
    "render",
    "unwrap",
]
