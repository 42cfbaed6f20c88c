"""Character level markup tokenization with a strict state machine.

This module converts markup text into an ordered list of typed tokens. Unlike
a browser tokenizer it never guesses: any character that does not fit the
current state stops tokenization with a :class:`TokenizeError` carrying the
full machine context.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional

from strict_markup.shared.config import TokenizerConfig
from strict_markup.shared.errors import TokenizeError
from strict_markup.shared.logging import get_logger

from .entities import EntityResolver

# Characters stripped when deciding whether a content run is blank.
MARKUP_WHITESPACE = " \t\n\r"


class TokenKind(Enum):
    """Token kinds handed to the tree builder."""

    TAG_OPEN_NAME = auto()   # Name of a start tag: <div
    ATTR_FIELD = auto()      # Attribute name
    ATTR_VALUE = auto()      # Attribute value (entities resolved)
    CONTENT_TEXT = auto()    # Normalized text between tags
    TAG_CLOSE = auto()       # '>' ending a start tag, content follows
    TAG_SELF_CLOSE = auto()  # '/>' or the '>' of a void element
    TAG_END = auto()         # Explicit end tag: </div>


class TokenizerState(Enum):
    """State machine states for markup tokenization."""

    BLANK = auto()            # Before anything significant
    DOCTYPE = auto()          # Inside <!...> before the root
    COMMENT = auto()          # Inside <!-- ... -->
    OPEN = auto()             # After '<'
    START_TAG = auto()        # Reading a start tag name
    START_TAG_CLOSE = auto()  # Whitespace after a start tag name
    ATTR_FIELD = auto()       # Reading an attribute name
    ATTR_SEP = auto()         # After '='
    ATTR_OPEN = auto()        # After the opening quote
    ATTR_VALUE = auto()       # Reading an attribute value
    ATTR_CLOSE = auto()       # After the closing quote
    SLASH = auto()            # After '/' in a tag
    END_TAG = auto()          # Reading an end tag name
    END_CLOSE = auto()        # After '>' of an end tag
    START_CLOSE = auto()      # After '>' of a start tag
    CLOSE = auto()            # After '/>' or a void element's '>'
    CONTENT = auto()          # Reading text content
    CONTENT_NEWLINE = auto()  # After a folded line break
    OPEN_ENTITY = auto()      # After '&'
    ENTITY = auto()           # Reading an entity name
    CLOSE_ENTITY = auto()     # After the ';' of an entity


class CharClass(Enum):
    """Classes of characters the state machine distinguishes."""

    LETTER = auto()     # A-Z, a-z, '_' and ':'
    DIGIT = auto()
    SPACE = auto()      # Space and tab
    NEWLINE = auto()    # '\n' and a lone '\r'
    LT = auto()
    GT = auto()
    EQUALS = auto()
    AMP = auto()
    SEMICOLON = auto()
    SLASH = auto()
    QUOTE = auto()
    OTHER = auto()


_STRUCTURAL: Dict[str, CharClass] = {
    " ": CharClass.SPACE,
    "\t": CharClass.SPACE,
    "\n": CharClass.NEWLINE,
    "\r": CharClass.NEWLINE,
    "<": CharClass.LT,
    ">": CharClass.GT,
    "=": CharClass.EQUALS,
    "&": CharClass.AMP,
    ";": CharClass.SEMICOLON,
    "/": CharClass.SLASH,
    '"': CharClass.QUOTE,
    "'": CharClass.QUOTE,
}


def classify(char: str) -> CharClass:
    """Classify a single character for transition selection."""
    cls = _STRUCTURAL.get(char)
    if cls is not None:
        return cls
    if ("a" <= char <= "z") or ("A" <= char <= "Z") or char in "_:":
        return CharClass.LETTER
    if "0" <= char <= "9":
        return CharClass.DIGIT
    return CharClass.OTHER


# States from which a new text run or a new tag may start.
_CONTENT_BOUNDARIES = frozenset({
    TokenizerState.BLANK,
    TokenizerState.START_CLOSE,
    TokenizerState.END_CLOSE,
    TokenizerState.CLOSE,
})
_TAG_OPENERS = _CONTENT_BOUNDARIES | {TokenizerState.CONTENT}
_NAME_STATES = frozenset({TokenizerState.START_TAG, TokenizerState.END_TAG})
_TEXT_STATES = frozenset({TokenizerState.CONTENT, TokenizerState.ATTR_VALUE})
_START_TAG_ENDINGS = frozenset({
    TokenizerState.START_TAG,
    TokenizerState.START_TAG_CLOSE,
    TokenizerState.ATTR_CLOSE,
})
_WHITESPACE = (CharClass.SPACE, CharClass.NEWLINE)


@dataclass(frozen=True)
class TokenPosition:
    """Position information for tokens, used in error reporting."""

    line: int
    column: int
    offset: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")

    def to_dict(self) -> Dict[str, int]:
        return {"line": self.line, "column": self.column, "offset": self.offset}


@dataclass(frozen=True)
class Token:
    """A single typed token with its text payload."""

    kind: TokenKind
    value: str
    position: TokenPosition = field(
        default=TokenPosition(1, 1, 0), compare=False, repr=False
    )


@dataclass
class TokenizationResult:
    """Tokens produced from one input together with basic statistics."""

    tokens: List[Token]
    character_count: int = 0
    processing_time_ms: float = 0.0

    @property
    def token_count(self) -> int:
        """Get the total number of tokens."""
        return len(self.tokens)

    @property
    def kind_distribution(self) -> Dict[str, int]:
        """Count tokens per kind."""
        counts: Dict[str, int] = {}
        for token in self.tokens:
            counts[token.kind.name] = counts.get(token.kind.name, 0) + 1
        return counts


class MarkupTokenizer:
    """Strict markup tokenizer driven by a character state machine.

    An instance keeps per-call state while tokenizing, so share the
    configuration between threads rather than the tokenizer itself.
    """

    def __init__(
        self,
        config: Optional[TokenizerConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the tokenizer.

        Args:
            config: Void elements, entity whitelist and data attribute naming
            correlation_id: Optional correlation ID for tracking requests
        """
        self.config = config or TokenizerConfig()
        self.correlation_id = correlation_id
        self.entities = EntityResolver(self.config.entities)
        self.logger = get_logger(__name__, correlation_id, "tokenizer")
        self._reset_state("")

    def _reset_state(self, text: str) -> None:
        """Reset tokenizer state for new processing."""
        self.text = text
        self.state = TokenizerState.BLANK
        self.tokens: List[Token] = []
        self._index = 0
        self._line = 1
        self._column = 1
        self._buffer_state = TokenizerState.BLANK
        self._buffer: List[str] = []
        self._buffer_start = TokenPosition(1, 1, 0)
        self._quote: Optional[str] = None
        self._resume_state = TokenizerState.CONTENT
        self._comment_resume = TokenizerState.BLANK
        self._slash_after_open = False
        self._current_tag = ""
        self._end_tag = ""

    def tokenize(self, text: str) -> TokenizationResult:
        """Tokenize markup text.

        Args:
            text: Complete markup document

        Returns:
            TokenizationResult with the ordered token list

        Raises:
            TokenizeError: On any character that does not fit the current state
        """
        start_time = time.time()
        self._reset_state(text.replace("\r\n", "\n"))

        self.logger.debug(
            "Starting tokenization",
            extra={"char_count": len(self.text)}
        )

        while self._index < len(self.text):
            consumed = self._process_character(self.text[self._index])
            self._advance(consumed)
        self._finish()

        result = TokenizationResult(
            tokens=self.tokens,
            character_count=len(self.text),
            processing_time_ms=(time.time() - start_time) * 1000,
        )
        self.logger.debug(
            "Tokenization completed",
            extra={
                "token_count": result.token_count,
                "processing_time_ms": result.processing_time_ms,
            }
        )
        return result

    # State machine

    def _process_character(self, char: str) -> int:
        """Run one transition and return how many characters it consumed."""
        state = self.state
        cls = classify(char)

        if state is TokenizerState.DOCTYPE:
            if cls is CharClass.GT:
                self.state = TokenizerState.BLANK
            return 1
        if state is TokenizerState.COMMENT:
            if self.text.startswith("-->", self._index):
                self.state = self._comment_resume
                return 3
            return 1
        if state is TokenizerState.ENTITY and cls is not CharClass.SEMICOLON:
            return self._process_entity_char(char)
        if state is TokenizerState.CLOSE_ENTITY:
            self._next(self._resume_state)
            return self._process_character(char)
        if state is TokenizerState.CONTENT_NEWLINE:
            if cls in _WHITESPACE:
                return 1
            self._next(self._resume_state)
            return self._process_character(char)

        if cls is CharClass.LT and state in _TAG_OPENERS:
            if self.text.startswith("<!--", self._index):
                self._comment_resume = state
                self.state = TokenizerState.COMMENT
                return 4
            if state is TokenizerState.BLANK and self._peek() == "!":
                self.state = TokenizerState.DOCTYPE
                return 2

        if state is TokenizerState.ATTR_FIELD and (
            cls in _WHITESPACE or cls in (CharClass.GT, CharClass.SLASH)
        ):
            return self._synthesize_boolean_attr(char)

        if cls is CharClass.NEWLINE and (
            state in _TEXT_STATES
            or state in (TokenizerState.ATTR_OPEN, TokenizerState.START_CLOSE,
                         TokenizerState.END_CLOSE, TokenizerState.CLOSE)
        ):
            return self._fold_newline(state)

        if cls in _WHITESPACE:
            return self._process_whitespace(char)
        if cls in (CharClass.LETTER, CharClass.DIGIT):
            return self._process_name_char(char, cls)
        if cls is CharClass.LT:
            return self._process_open_tag(char)
        if cls is CharClass.GT:
            return self._process_close_tag(char)
        if cls is CharClass.EQUALS and state is TokenizerState.ATTR_FIELD:
            self._next(TokenizerState.ATTR_SEP)
            return 1
        if cls is CharClass.AMP:
            return self._process_open_entity(char)
        if cls is CharClass.SEMICOLON and state is TokenizerState.ENTITY:
            return self._process_close_entity(char)
        if cls is CharClass.SLASH:
            return self._process_slash(char)
        if cls is CharClass.QUOTE:
            return self._process_quote(char)
        return self._process_text_char(char, cls)

    def _process_whitespace(self, char: str) -> int:
        """Handle space, tab, and line breaks outside text states."""
        state = self.state
        if state is TokenizerState.START_TAG:
            self._next(TokenizerState.START_TAG_CLOSE)
        elif state is TokenizerState.END_TAG:
            # Only whitespace may follow the name of an end tag.
            self._flush()
        elif state in _CONTENT_BOUNDARIES and state is not TokenizerState.BLANK:
            self._next(TokenizerState.CONTENT, char)
        elif state in _TEXT_STATES:
            self._consume(char)
        elif state is TokenizerState.ATTR_OPEN:
            self._next(TokenizerState.ATTR_VALUE, char)
        elif state in (TokenizerState.OPEN, TokenizerState.OPEN_ENTITY):
            self._error("Whitespace not allowed here", char)
        # Structural whitespace inside tags and before the root is dropped.
        return 1

    def _process_name_char(self, char: str, cls: CharClass) -> int:
        """Handle letters and digits."""
        state = self.state
        if state is TokenizerState.END_TAG and self._buffer_state is not state:
            self._error("Unexpected character after end tag name", char)
        elif state in _NAME_STATES or state in _TEXT_STATES or state is TokenizerState.ATTR_FIELD:
            self._consume(char)
        elif state in _CONTENT_BOUNDARIES:
            self._next(TokenizerState.CONTENT, char)
        elif state is TokenizerState.OPEN and cls is CharClass.LETTER:
            self._next(TokenizerState.START_TAG, char)
        elif (
            state is TokenizerState.SLASH
            and self._slash_after_open
            and cls is CharClass.LETTER
        ):
            self._next(TokenizerState.END_TAG, char)
        elif state in (TokenizerState.START_TAG_CLOSE, TokenizerState.ATTR_CLOSE):
            self._next(TokenizerState.ATTR_FIELD, char)
        elif state is TokenizerState.ATTR_OPEN:
            self._next(TokenizerState.ATTR_VALUE, char)
        elif state is TokenizerState.OPEN_ENTITY:
            self._next(TokenizerState.ENTITY, char)
        elif state is TokenizerState.ATTR_SEP:
            self._error("Attribute values must be quoted", char)
        else:
            self._error("Unexpected character", char)
        return 1

    def _process_open_tag(self, char: str) -> int:
        """Handle '<'."""
        if self.state not in _TAG_OPENERS:
            self._error("Unexpected '<'", char)
        self._next(TokenizerState.OPEN)
        return 1

    def _process_close_tag(self, char: str) -> int:
        """Handle '>'."""
        state = self.state
        if state in _START_TAG_ENDINGS:
            tag = self._pending_tag_name()
            if tag in self.config.void_elements:
                self._next(TokenizerState.CLOSE)
                self._emit(TokenKind.TAG_SELF_CLOSE, ">")
            else:
                self._next(TokenizerState.START_CLOSE)
                self._emit(TokenKind.TAG_CLOSE, ">")
        elif state is TokenizerState.SLASH and not self._slash_after_open:
            self._next(TokenizerState.CLOSE)
            self._emit(TokenKind.TAG_SELF_CLOSE, "/>")
        elif state is TokenizerState.END_TAG:
            self._next(TokenizerState.END_CLOSE)
            self._emit(TokenKind.TAG_END, self._end_tag)
        else:
            self._error("Unexpected '>'", char)
        return 1

    def _process_open_entity(self, char: str) -> int:
        """Handle '&' by opening an entity reference."""
        state = self.state
        if state in (TokenizerState.ATTR_VALUE, TokenizerState.ATTR_OPEN):
            self._resume_state = TokenizerState.ATTR_VALUE
        elif state is TokenizerState.CONTENT or state in _CONTENT_BOUNDARIES:
            self._resume_state = TokenizerState.CONTENT
        else:
            self._error("Unexpected '&'", char)
        self._next(TokenizerState.OPEN_ENTITY)
        return 1

    def _process_entity_char(self, char: str) -> int:
        """Accumulate an entity name, bounded by the longest known name."""
        self._consume(char)
        if not self.entities.accepts_prefix("".join(self._buffer)):
            self._error("Entity reference too long or missing ';'", char)
        return 1

    def _process_close_entity(self, char: str) -> int:
        """Resolve the entity name on ';'."""
        name = "".join(self._buffer)
        literal = self.entities.resolve(name)
        if literal is None:
            self._error(f"Unknown entity '&{name};'", char)
        kind = self._text_kind(self._resume_state)
        self._emit(kind, literal, self._buffer_start)
        self._buffer_state = TokenizerState.CLOSE_ENTITY
        self._buffer = []
        self.state = TokenizerState.CLOSE_ENTITY
        return 1

    def _process_slash(self, char: str) -> int:
        """Handle '/'."""
        state = self.state
        if state is TokenizerState.OPEN:
            self._slash_after_open = True
            self._next(TokenizerState.SLASH)
        elif state in _START_TAG_ENDINGS:
            self._slash_after_open = False
            self._next(TokenizerState.SLASH)
        else:
            return self._process_text_char(char, CharClass.SLASH)
        return 1

    def _process_quote(self, char: str) -> int:
        """Handle quote characters delimiting attribute values."""
        state = self.state
        if state is TokenizerState.ATTR_SEP:
            self._quote = char
            self._next(TokenizerState.ATTR_OPEN)
        elif state in (TokenizerState.ATTR_VALUE, TokenizerState.ATTR_OPEN):
            if char != self._quote:
                return self._process_text_char(char, CharClass.QUOTE)
            # Always emit, so an empty value still produces a token.
            self._buffer_state = TokenizerState.ATTR_VALUE
            self._next(TokenizerState.ATTR_CLOSE)
        else:
            return self._process_text_char(char, CharClass.QUOTE)
        return 1

    def _process_text_char(self, char: str, cls: CharClass) -> int:
        """Handle characters that are only meaningful as literal text."""
        state = self.state
        if state in _TEXT_STATES:
            self._consume(char)
        elif state is TokenizerState.ATTR_FIELD and cls is CharClass.OTHER:
            self._consume(char)
        elif state in _CONTENT_BOUNDARIES:
            self._next(TokenizerState.CONTENT, char)
        elif state is TokenizerState.ATTR_OPEN:
            self._next(TokenizerState.ATTR_VALUE, char)
        elif state is TokenizerState.OPEN_ENTITY and cls is CharClass.OTHER:
            self._next(TokenizerState.ENTITY, char)
        else:
            self._error("Unexpected character", char)
        return 1

    def _synthesize_boolean_attr(self, char: str) -> int:
        """Close an attribute that has no '=value' part with an empty value."""
        self._next(TokenizerState.ATTR_CLOSE)
        self._emit(TokenKind.ATTR_VALUE, "")
        return self._process_character(char)

    def _fold_newline(self, state: TokenizerState) -> int:
        """Fold a line break in text according to what follows it."""
        if state in (TokenizerState.ATTR_VALUE, TokenizerState.ATTR_OPEN):
            self._resume_state = TokenizerState.ATTR_VALUE
        else:
            self._resume_state = TokenizerState.CONTENT

        following = self._peek()
        if following is not None and classify(following) is CharClass.NEWLINE:
            self._next(TokenizerState.CONTENT_NEWLINE)
            return 2
        if following is not None and classify(following) is CharClass.SPACE:
            self._next(TokenizerState.CONTENT_NEWLINE, following)
            return 2
        self._next(TokenizerState.CONTENT_NEWLINE, " ")
        return 1

    def _finish(self) -> None:
        """Flush the last buffer once the input is exhausted."""
        if self.state in (TokenizerState.OPEN_ENTITY, TokenizerState.ENTITY):
            self._error("Input ended inside an entity reference", None)
        if self.state is TokenizerState.COMMENT:
            self._error("Input ended inside a comment", None)
        if self.state is TokenizerState.DOCTYPE:
            self._error("Input ended inside a doctype declaration", None)
        self._flush()
        self._drop_blank_content()

    # Buffer helpers

    def _consume(self, char: str) -> None:
        self._buffer.append(char)

    def _next(self, new_state: TokenizerState, initial: str = "") -> None:
        """Flush the current buffer and start a new one in ``new_state``."""
        self._flush()
        self.state = new_state
        self._buffer_state = new_state
        self._buffer = [initial] if initial else []
        self._buffer_start = self._position()

    def _flush(self) -> None:
        """Turn the accumulated buffer into a token when it carries data."""
        text = "".join(self._buffer)
        buffer_state = self._buffer_state
        if buffer_state is TokenizerState.START_TAG:
            self._current_tag = text.lower()
            self._emit(TokenKind.TAG_OPEN_NAME, self._current_tag, self._buffer_start)
        elif buffer_state is TokenizerState.END_TAG:
            self._end_tag = text.lower()
        elif buffer_state is TokenizerState.ATTR_FIELD:
            self._emit(TokenKind.ATTR_FIELD, self._attr_field_name(text), self._buffer_start)
        elif buffer_state is TokenizerState.ATTR_VALUE:
            self._emit(TokenKind.ATTR_VALUE, text, self._buffer_start)
        elif buffer_state is TokenizerState.CONTENT and text:
            self._emit(TokenKind.CONTENT_TEXT, text, self._buffer_start)
        elif buffer_state is TokenizerState.CONTENT_NEWLINE and text:
            self._emit(self._text_kind(self._resume_state), text, self._buffer_start)
        self._buffer = []
        self._buffer_state = TokenizerState.BLANK

    def _emit(
        self,
        kind: TokenKind,
        value: str,
        position: Optional[TokenPosition] = None
    ) -> None:
        """Append a token, merging adjacent text fragments of the same kind."""
        if self.tokens:
            last = self.tokens[-1]
            if last.kind is kind and kind in (TokenKind.CONTENT_TEXT, TokenKind.ATTR_VALUE):
                self.tokens[-1] = Token(kind, last.value + value, last.position)
                return
        if kind is not TokenKind.CONTENT_TEXT:
            self._drop_blank_content()
        self.tokens.append(Token(kind, value, position or self._position()))

    def _drop_blank_content(self) -> None:
        """Remove a finished content run that holds only whitespace."""
        if (
            self.tokens
            and self.tokens[-1].kind is TokenKind.CONTENT_TEXT
            and not self.tokens[-1].value.strip(MARKUP_WHITESPACE)
        ):
            self.tokens.pop()

    def _attr_field_name(self, name: str) -> str:
        """Map ``data-x`` fields onto the reserved marker form ``_x``."""
        prefix = self.config.data_attr_prefix
        if name.startswith(prefix) and len(name) > len(prefix):
            return self.config.data_attr_marker + name[len(prefix):]
        return name

    def _pending_tag_name(self) -> str:
        if self._buffer_state is TokenizerState.START_TAG:
            return "".join(self._buffer).lower()
        return self._current_tag

    @staticmethod
    def _text_kind(state: TokenizerState) -> TokenKind:
        if state is TokenizerState.ATTR_VALUE:
            return TokenKind.ATTR_VALUE
        return TokenKind.CONTENT_TEXT

    # Position helpers

    def _peek(self, distance: int = 1) -> Optional[str]:
        index = self._index + distance
        return self.text[index] if index < len(self.text) else None

    def _position(self) -> TokenPosition:
        return TokenPosition(self._line, self._column, self._index)

    def _advance(self, count: int) -> None:
        for char in self.text[self._index:self._index + count]:
            if char in "\n\r":
                self._line += 1
                self._column = 1
            else:
                self._column += 1
        self._index += count

    def _error(self, reason: str, char: Optional[str]) -> None:
        """Stop tokenizing and raise with the complete machine context."""
        raise TokenizeError(
            reason,
            state=self.state,
            char=char,
            buffer_state=self._buffer_state,
            buffer="".join(self._buffer),
            last_token=self.tokens[-1] if self.tokens else None,
            next_char=self._peek() if char is not None else None,
            line=self._line,
            column=self._column,
            offset=self._index,
        )
