"""Public parse and render entry points.

The core components raise :class:`MarkupError` subclasses internally. The
functions here catch them at the boundary, log them, and return them as
values, so callers distinguish success from failure with ``isinstance`` or
:func:`unwrap`:

    >>> tree = parse('<div id="1" class="a b"><p>Hi</p></div>')
    >>> tree.class_
    ['a', 'b']
    >>> render(tree)
    '<div id="1" class="a b"><p>Hi</p></div>'
"""

import uuid
from pathlib import Path
from typing import Any, Optional, TypeVar, Union

from strict_markup.rendering import Renderer, RenderOutput
from strict_markup.shared import (
    MarkupError,
    ParseError,
    ParserConfig,
    RenderConfig,
    RenderTypeError,
    get_logger,
)
from strict_markup.tokenization import MarkupTokenizer
from strict_markup.tree import Element, TreeBuilder

T = TypeVar("T")

# Max length for content preview in logs
PREVIEW_LENGTH = 60


def _correlation_id(config: ParserConfig, correlation_id: Optional[str]) -> Optional[str]:
    if correlation_id is None and config.global_.enable_correlation_tracking:
        return uuid.uuid4().hex[:12]
    return correlation_id


def parse(
    text: str,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> Union[Element, ParseError]:
    """Parse markup text into a single root element.

    Args:
        text: Complete markup document
        config: Parser configuration (defaults to ``ParserConfig.default()``)
        correlation_id: Optional correlation ID for request tracking

    Returns:
        The root Element, or the ParseError describing why the input was
        rejected

    Examples:
        >>> parse("<p>a &amp; b</p>").content
        ('a & b',)
        >>> isinstance(parse("<div><p>text"), ParseError)
        True
    """
    if not isinstance(text, str):
        raise TypeError(f"parse() expects str, got {type(text).__name__}")
    config = config or ParserConfig.default()
    correlation_id = _correlation_id(config, correlation_id)
    logger = get_logger(__name__, correlation_id, "parse")

    try:
        tokens = MarkupTokenizer(config.tokenizer, correlation_id).tokenize(text)
        return TreeBuilder(config.tree, correlation_id).build(tokens)
    except ParseError as e:
        logger.warning(
            f"Parse failed: {e}",
            extra={
                "error_type": type(e).__name__,
                "position": e.position,
                "preview": text[:PREVIEW_LENGTH],
            }
        )
        return e


def parse_file(
    file_path: Union[str, Path],
    config: Optional[ParserConfig] = None,
    encoding: str = "utf-8",
    correlation_id: Optional[str] = None
) -> Union[Element, ParseError]:
    """Read a file and parse its contents.

    Raises:
        OSError: If the file cannot be read
    """
    path_obj = Path(file_path)
    with path_obj.open(encoding=encoding) as f:
        content = f.read()
    return parse(content, config, correlation_id)


def render(
    node: Any,
    config: Optional[RenderConfig] = None,
    correlation_id: Optional[str] = None
) -> Union[RenderOutput, RenderTypeError]:
    """Render a node back to markup.

    Returns:
        A string, a list of strings and Opaque chunks when an Opaque node is
        reachable, or the RenderTypeError for unsupported values
    """
    try:
        return Renderer(config, correlation_id).render(node)
    except RenderTypeError as e:
        get_logger(__name__, correlation_id, "render").warning(
            f"Render failed: {e}",
            extra={"error_type": type(e).__name__, "where": e.where}
        )
        return e


def unwrap(result: T) -> T:
    """Raise ``result`` if it is an error, otherwise return it unchanged.

    Examples:
        >>> unwrap(parse("<br>")).tag
        'br'
    """
    if isinstance(result, MarkupError):
        raise result
    return result


class MarkupParser:
    """Reusable parser bundling parse and render configuration.

    Attributes:
        config: Parser configuration
        render_config: Render configuration, derived from ``config`` when omitted
        correlation_id: Correlation ID for request tracking

    Examples:
        >>> parser = MarkupParser(ParserConfig.html())
        >>> parser.round_trip('<p>a<input disabled></p>')
        '<p>a<input disabled=""></p>'
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        render_config: Optional[RenderConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or ParserConfig.default()
        self.render_config = render_config or RenderConfig.from_parser_config(self.config)
        self.correlation_id = _correlation_id(self.config, correlation_id)
        self.logger = get_logger(__name__, self.correlation_id, "markup_parser")

        self._parse_count = 0
        self._failed_parses = 0

        self.logger.debug(
            "MarkupParser initialized",
            extra={"config_name": self.config.name}
        )

    def parse(self, text: str) -> Union[Element, ParseError]:
        """Parse markup text with this parser's configuration."""
        result = parse(text, self.config, self.correlation_id)
        self._parse_count += 1
        if isinstance(result, ParseError):
            self._failed_parses += 1
        return result

    def render(self, node: Any) -> Union[RenderOutput, RenderTypeError]:
        """Render a node with this parser's render configuration."""
        return render(node, self.render_config, self.correlation_id)

    def round_trip(self, text: str) -> Union[RenderOutput, MarkupError]:
        """Parse then render, normalizing the markup."""
        tree = self.parse(text)
        if isinstance(tree, ParseError):
            return tree
        return self.render(tree)

    @property
    def parse_count(self) -> int:
        """Number of parse calls made through this instance."""
        return self._parse_count

    @property
    def failure_rate(self) -> float:
        """Share of parse calls that returned an error."""
        if self._parse_count == 0:
            return 0.0
        return self._failed_parses / self._parse_count
