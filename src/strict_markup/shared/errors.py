"""Error taxonomy for markup parsing and rendering.

The tokenizer, tree builder and renderer raise these exceptions internally.
The public entry points in :mod:`strict_markup.api` catch them and hand them
back to the caller as values, so a malformed document never escapes as an
uncaught fault.
"""

from typing import Any, Dict, List, Optional, Sequence

from .result import DiagnosticEntry, DiagnosticSeverity


def _state_name(state: Any) -> str:
    return getattr(state, "name", str(state)).lower()


class MarkupError(Exception):
    """Base exception for everything the markup core reports."""

    component = "markup"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def position(self) -> Optional[Dict[str, int]]:
        """Source position of the failure, when one is known."""
        return None

    def details(self) -> Dict[str, Any]:
        """Structured context for diagnostics."""
        return {}

    def to_diagnostic(self, correlation_id: Optional[str] = None) -> DiagnosticEntry:
        """Convert the error into a diagnostic entry."""
        return DiagnosticEntry(
            severity=DiagnosticSeverity.ERROR,
            message=self.message,
            component=self.component,
            position=self.position,
            details=self.details(),
            correlation_id=correlation_id,
        )


class ParseError(MarkupError):
    """Base class for every failure produced while parsing text."""

    component = "parser"


class TokenizeError(ParseError):
    """Unrecoverable character/state mismatch or unknown entity.

    Carries the full tokenizer context at the moment of failure: the state,
    the offending character, the partially accumulated buffer, the last
    completed token and the next character (``None`` at end of input).
    """

    component = "tokenizer"

    def __init__(
        self,
        reason: str,
        state: Any,
        char: Optional[str],
        buffer_state: Any = None,
        buffer: str = "",
        last_token: Any = None,
        next_char: Optional[str] = None,
        line: int = 1,
        column: int = 1,
        offset: int = 0,
    ) -> None:
        self.reason = reason
        self.state = state
        self.char = char
        self.buffer_state = buffer_state
        self.buffer = buffer
        self.last_token = last_token
        self.next_char = next_char
        self.line = line
        self.column = column
        self.offset = offset
        shown = "end of input" if char is None else repr(char)
        super().__init__(
            f"{reason}: {shown} in state {_state_name(state)} "
            f"at line {line}, column {column}"
        )

    @property
    def position(self) -> Optional[Dict[str, int]]:
        return {"line": self.line, "column": self.column, "offset": self.offset}

    def details(self) -> Dict[str, Any]:
        return {
            "state": _state_name(self.state),
            "char": self.char,
            "buffer": {
                "state": _state_name(self.buffer_state),
                "text": self.buffer,
            },
            "last_token": repr(self.last_token) if self.last_token else None,
            "next_char": self.next_char,
        }


class UnterminatedElementError(ParseError):
    """Input ended while elements were still open."""

    component = "tree_builder"

    def __init__(self, open_tags: Sequence[str]) -> None:
        self.open_tags: List[str] = list(open_tags)
        path = " > ".join(self.open_tags)
        super().__init__(f"Input ended inside unterminated element(s): {path}")

    def details(self) -> Dict[str, Any]:
        return {"open_tags": list(self.open_tags)}


class TrailingContentError(ParseError):
    """Valid markup was followed by tokens outside the root element."""

    component = "tree_builder"

    def __init__(self, compiled: Any, rest: Sequence[Any]) -> None:
        self.compiled = compiled
        self.rest = list(rest)
        super().__init__(
            f"Unparsable content after root element <{getattr(compiled, 'tag', '?')}>: "
            f"{len(self.rest)} leftover token(s)"
        )

    @property
    def position(self) -> Optional[Dict[str, int]]:
        if not self.rest:
            return None
        first = getattr(self.rest[0], "position", None)
        return first.to_dict() if first is not None else None

    def details(self) -> Dict[str, Any]:
        return {
            "root": getattr(self.compiled, "tag", None),
            "rest": [repr(token) for token in self.rest],
        }


class TokenSequenceError(ParseError):
    """Token stream that cannot describe a single well-formed element."""

    component = "tree_builder"

    def __init__(self, message: str, token: Any = None) -> None:
        self.token = token
        super().__init__(message)

    @property
    def position(self) -> Optional[Dict[str, int]]:
        position = getattr(self.token, "position", None)
        return position.to_dict() if position is not None else None

    def details(self) -> Dict[str, Any]:
        return {"token": repr(self.token) if self.token is not None else None}


class NestingDepthError(ParseError):
    """Element nesting exceeded the configured maximum depth."""

    component = "tree_builder"

    def __init__(self, max_depth: int, tag: str) -> None:
        self.max_depth = max_depth
        self.tag = tag
        super().__init__(
            f"Element <{tag}> exceeds maximum nesting depth of {max_depth}"
        )

    def details(self) -> Dict[str, Any]:
        return {"max_depth": self.max_depth, "tag": self.tag}


class RenderTypeError(MarkupError, TypeError):
    """Content or attribute value of a kind the renderer cannot emit."""

    component = "renderer"

    def __init__(self, value: Any, where: str = "content") -> None:
        self.value = value
        self.where = where
        super().__init__(
            f"Unsupported {where} type {type(value).__name__}: {value!r}"
        )

    def details(self) -> Dict[str, Any]:
        return {"where": self.where, "type": type(self.value).__name__}
