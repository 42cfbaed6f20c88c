"""Query and transformation helpers over element trees.

Elements are immutable, so every transformation returns a new tree and
leaves its input untouched.
"""

from dataclasses import replace
from typing import Any, Callable, List, Optional

from .element import Element


def matches(node: Any, tag: Optional[str] = None, **criteria: Any) -> bool:
    """Check whether ``node`` is an element satisfying every given criterion.

    Criteria are ``tag``, ``id`` and ``class_``; a ``class_`` list requires
    all of its names to be present.
    """
    return isinstance(node, Element) and node.matches(tag, **criteria)


def select(node: Any, tag: Optional[str] = None, **criteria: Any) -> List[Element]:
    """Collect matching elements in document order."""
    if not isinstance(node, Element):
        return []
    return node.find_all(tag, **criteria)


def member(node: Any, tag: Optional[str] = None, **criteria: Any) -> bool:
    """Check whether any element in the tree matches."""
    return isinstance(node, Element) and node.find(tag, **criteria) is not None


def transform(node: Any, fun: Callable[[Any], Any]) -> Any:
    """Apply ``fun`` to every node, parents before their children.

    Returning None from ``fun`` removes the node. The children that are
    visited are those of the node ``fun`` returned.
    """
    result = fun(node)
    if isinstance(result, Element):
        return replace(result, content=_transform_children(result.content, fun))
    return result


def _transform_children(content: Any, fun: Callable[[Any], Any]) -> tuple:
    children = []
    for child in content:
        new_child = transform(child, fun)
        if new_child is not None:
            children.append(new_child)
    return tuple(children)


def _transform_after(node: Any, fun: Callable[[Any], Any]) -> Any:
    """Like :func:`transform` but children are processed first."""
    if isinstance(node, Element):
        children = []
        for child in node.content:
            new_child = _transform_after(child, fun)
            if new_child is not None:
                children.append(new_child)
        node = replace(node, content=tuple(children))
    return fun(node)


def remove(node: Any, tag: Optional[str] = None, **criteria: Any) -> Any:
    """Drop every matching element; the root itself becomes None if it matches."""
    return transform(
        node, lambda n: None if matches(n, tag, **criteria) else n
    )


def add(
    node: Any,
    data: Any,
    at: str = "end",
    tag: Optional[str] = None,
    **criteria: Any
) -> Any:
    """Add ``data`` to the content of every matching element.

    Args:
        node: Tree to update
        data: A node or a list of nodes to insert
        at: ``"end"`` to append, ``"begin"`` to prepend
    """
    if at not in ("end", "begin"):
        raise ValueError("at must be 'end' or 'begin'")
    extra = tuple(data) if isinstance(data, (list, tuple)) else (data,)

    def _add(n: Any) -> Any:
        if not matches(n, tag, **criteria):
            return n
        content = n.content + extra if at == "end" else extra + n.content
        return replace(n, content=content)

    return _transform_after(node, _add)
