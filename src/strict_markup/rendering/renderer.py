"""Rendering of element trees back to markup text.

The renderer produces a plain string, unless an :class:`Opaque` node is
reachable. In that case it produces a list of literal strings and opaque
chunks, to be completed later with :func:`bind`.
"""

import time
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Union

from strict_markup.shared.config import DEFAULT_ESCAPES, RenderConfig
from strict_markup.shared.errors import RenderTypeError
from strict_markup.shared.logging import get_logger
from strict_markup.tree.element import Element, Opaque

RenderOutput = Union[str, List[Any]]

DOCTYPE = "<!doctype html>"


class _Markup(NamedTuple):
    """Literal markup queued on the work stack; never escaped or prerendered."""

    text: str


def escape(text: str, table: Optional[Dict[str, str]] = None) -> str:
    """Escape ``text`` in a single left-to-right scan.

    Substituted entity text is never scanned again, so ``&`` is only escaped
    once.
    """
    table = DEFAULT_ESCAPES if table is None else table
    return "".join(table.get(char, char) for char in text)


def attr_field(name: str, config: Optional[RenderConfig] = None) -> str:
    """Map a stored attribute field to its rendered name."""
    config = config or RenderConfig()
    marker = config.data_attr_marker
    if name.startswith(marker) and len(name) > len(marker):
        return config.data_attr_prefix + name[len(marker):]
    return name


def coalesce(chunks: List[Any]) -> RenderOutput:
    """Merge adjacent literal chunks, collapsing to a string when possible."""
    merged: List[Any] = []
    for chunk in chunks:
        if isinstance(chunk, str):
            if not chunk:
                continue
            if merged and isinstance(merged[-1], str):
                merged[-1] += chunk
                continue
        elif not isinstance(chunk, Opaque):
            raise RenderTypeError(chunk, "chunk")
        merged.append(chunk)
    if all(isinstance(chunk, str) for chunk in merged):
        return "".join(merged)
    return merged


class Renderer:
    """Turns nodes into markup using an explicit work stack."""

    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or RenderConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "renderer")
        self._escapes = self.config.escape_table
        self._quote = self.config.quote_char

    def render(self, node: Any) -> RenderOutput:
        """Render a node.

        Args:
            node: An Element, a text string or an Opaque placeholder

        Returns:
            A string, or a coalesced list of strings and Opaque chunks

        Raises:
            RenderTypeError: For unsupported content or attribute value types
        """
        start_time = time.time()
        chunks: List[Any] = []
        stack: List[Any] = [node]
        first = True

        while stack:
            item = stack.pop()
            if isinstance(item, _Markup):
                chunks.append(item.text)
                continue
            if self.config.prerender is not None:
                item = self.config.prerender(item)

            if first and self.config.doctype and isinstance(item, Element) \
                    and item.tag == "html":
                chunks.append(DOCTYPE)
            first = False

            if isinstance(item, str):
                chunks.append(escape(item, self._escapes))
            elif isinstance(item, Opaque):
                chunks.append(item)
            elif isinstance(item, Element):
                self._render_start_tag(item, chunks)
                if item.content or item.tag not in self.config.void_elements:
                    stack.append(_Markup(f"</{item.tag}>"))
                    stack.extend(reversed(item.content))
            else:
                raise RenderTypeError(item)

        if self.config.postrender is not None:
            chunks = list(self.config.postrender(chunks))
        result = coalesce(chunks)

        self.logger.debug(
            "Rendering completed",
            extra={
                "chunk_count": 1 if isinstance(result, str) else len(result),
                "processing_time_ms": (time.time() - start_time) * 1000,
            }
        )
        return result

    def _render_start_tag(self, element: Element, chunks: List[Any]) -> None:
        chunks.append(f"<{element.tag}")
        attrs: List[Any] = []
        if element.id is not None:
            attrs.append(("id", element.id))
        if element.classes:
            attrs.append(("class", list(element.classes)))
        attrs.extend(element.attrs)

        for name, value in attrs:
            if value is None:
                continue
            chunks.append(f" {attr_field(name, self.config)}={self._quote}")
            chunks.extend(self._attr_value(value))
            chunks.append(self._quote)
        chunks.append(">")

    def _attr_value(self, value: Any) -> List[Any]:
        """Render an attribute value into chunks."""
        if isinstance(value, Opaque):
            return [value]
        if isinstance(value, (list, tuple)):
            parts: List[Any] = []
            for index, item in enumerate(value):
                if index:
                    parts.append(" ")
                if isinstance(item, (list, tuple)):
                    raise RenderTypeError(item, "attribute value")
                parts.extend(self._attr_value(item))
            return parts
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise RenderTypeError(value, "attribute value")
        return [escape(str(value), self._escapes)]


def render(node: Any, config: Optional[RenderConfig] = None) -> RenderOutput:
    """Render a node with a fresh :class:`Renderer`."""
    return Renderer(config).render(node)


def bind(
    chunks: RenderOutput,
    resolver: Callable[[Opaque], Any],
    config: Optional[RenderConfig] = None
) -> RenderOutput:
    """Resolve opaque chunks and splice their rendering into the output.

    Each opaque chunk is passed to ``resolver``. Its return value is rendered
    with the same configuration; opaque nodes in that result stay opaque.
    """
    if isinstance(chunks, str):
        return chunks
    renderer = Renderer(config)
    bound: List[Any] = []
    for chunk in chunks:
        if isinstance(chunk, Opaque):
            rendered = renderer.render(resolver(chunk))
            if isinstance(rendered, str):
                bound.append(rendered)
            else:
                bound.extend(rendered)
        else:
            bound.append(chunk)
    return coalesce(bound)
