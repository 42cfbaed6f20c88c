"""Tree building from tokenizer output.

The builder folds the token list into a single root element using an
explicit stack of frames, so nesting depth is limited by configuration
rather than by the interpreter's recursion limit.
"""

import time
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Union

from strict_markup.shared.config import TreeConfig
from strict_markup.shared.errors import (
    NestingDepthError,
    TokenSequenceError,
    TrailingContentError,
    UnterminatedElementError,
)
from strict_markup.shared.logging import get_logger
from strict_markup.tokenization import Token, TokenizationResult, TokenKind

from .element import Element, lift_id_and_class


@dataclass
class Frame:
    """In-progress element on the builder stack."""

    tag: str
    attrs: List[Any] = field(default_factory=list)
    content: List[Any] = field(default_factory=list)
    in_content: bool = False
    pending_field: Optional[str] = None

    def to_element(self) -> Element:
        """Complete the frame into an immutable element."""
        element_id, classes, attrs = lift_id_and_class(self.attrs)
        return Element(
            tag=self.tag,
            id=element_id,
            classes=classes,
            attrs=attrs,
            content=tuple(self.content),
        )


class TreeBuilder:
    """Builds a single root element from an ordered token sequence."""

    def __init__(
        self,
        config: Optional[TreeConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or TreeConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "tree_builder")

    def build(self, tokens: Union[TokenizationResult, Sequence[Token]]) -> Element:
        """Build the element tree.

        Args:
            tokens: Tokenizer output, either the result object or its token list

        Returns:
            The root element

        Raises:
            UnterminatedElementError: Input ended with open elements
            TrailingContentError: Tokens remain after the root element closed
            TokenSequenceError: Tokens that cannot form a well-formed element
            NestingDepthError: Nesting deeper than ``max_depth``
        """
        if isinstance(tokens, TokenizationResult):
            tokens = tokens.tokens
        start_time = time.time()
        self.logger.debug("Starting tree building", extra={"token_count": len(tokens)})

        stack: List[Frame] = []
        root: Optional[Element] = None

        for index, token in enumerate(tokens):
            if root is not None:
                raise TrailingContentError(root, tokens[index:])
            kind = token.kind

            if kind is TokenKind.TAG_OPEN_NAME:
                if stack and not stack[-1].in_content:
                    raise TokenSequenceError(
                        f"Start tag <{token.value}> inside unfinished start tag "
                        f"<{stack[-1].tag}>",
                        token,
                    )
                if len(stack) >= self.config.max_depth:
                    raise NestingDepthError(self.config.max_depth, token.value)
                stack.append(Frame(token.value))

            elif kind is TokenKind.ATTR_FIELD:
                self._start_tag_frame(stack, token).pending_field = token.value

            elif kind is TokenKind.ATTR_VALUE:
                frame = self._start_tag_frame(stack, token)
                if frame.pending_field is None:
                    raise TokenSequenceError("Attribute value without a field", token)
                frame.attrs.append((frame.pending_field, token.value))
                frame.pending_field = None

            elif kind is TokenKind.TAG_CLOSE:
                self._start_tag_frame(stack, token).in_content = True

            elif kind is TokenKind.CONTENT_TEXT:
                if not stack or not stack[-1].in_content:
                    raise TokenSequenceError("Content outside of any element", token)
                stack[-1].content.append(token.value)

            elif kind is TokenKind.TAG_SELF_CLOSE:
                self._start_tag_frame(stack, token)
                root = self._complete(stack)

            elif kind is TokenKind.TAG_END:
                if not stack or not stack[-1].in_content:
                    raise TokenSequenceError(
                        f"End tag </{token.value}> without an open element", token
                    )
                if stack[-1].tag != token.value:
                    raise TokenSequenceError(
                        f"End tag </{token.value}> does not match open element "
                        f"<{stack[-1].tag}>",
                        token,
                    )
                root = self._complete(stack)

        if stack:
            raise UnterminatedElementError([frame.tag for frame in stack])
        if root is None:
            raise TokenSequenceError("Empty document: no root element")

        self.logger.debug(
            "Tree building completed",
            extra={
                "root": root.tag,
                "processing_time_ms": (time.time() - start_time) * 1000,
            }
        )
        return root

    @staticmethod
    def _start_tag_frame(stack: List[Frame], token: Token) -> Frame:
        """Return the top frame, which must still be reading its start tag."""
        if not stack or stack[-1].in_content:
            raise TokenSequenceError(
                f"{token.kind.name.lower()} token outside of a start tag", token
            )
        frame = stack[-1]
        if frame.pending_field is not None and token.kind is not TokenKind.ATTR_VALUE:
            raise TokenSequenceError(
                f"Attribute '{frame.pending_field}' has no value", token
            )
        return frame

    @staticmethod
    def _complete(stack: List[Frame]) -> Optional[Element]:
        """Pop the top frame; return it as the root when the stack empties."""
        element = stack.pop().to_element()
        if stack:
            stack[-1].content.append(element)
            return None
        return element
