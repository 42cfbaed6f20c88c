"""Tokenization layer for strict markup parsing.

This module turns markup text into an ordered list of typed tokens using a
character level state machine, resolving whitelisted entity references and
normalizing whitespace along the way.

Key Components:
    MarkupTokenizer: State machine tokenizer
    TokenizationResult: Token list with basic statistics
    EntityResolver: Whitelisted entity lookup
    classify: Pure character classification function
"""

from .entities import EntityResolver
from .tokenizer import (
    CharClass,
    MarkupTokenizer,
    Token,
    TokenizationResult,
    TokenizerState,
    TokenKind,
    TokenPosition,
    classify,
)

__all__ = [
    "CharClass",
    "EntityResolver",
    "MarkupTokenizer",
    "Token",
    "TokenizationResult",
    "TokenizerState",
    "TokenKind",
    "TokenPosition",
    "classify",
]
