"""Immutable element tree model shared by the tree builder and the renderer.

An element is a frozen value object. Its ``id`` and ``class`` attributes are
lifted out of the attribute list at construction time, so ``attrs`` never
contains either of them.
"""

import re
from collections import deque
from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

TAG_NAME_PATTERN = re.compile(r"^[A-Za-z_:][A-Za-z0-9_:]*$")

Attr = Tuple[str, Any]


@dataclass(frozen=True)
class Opaque:
    """Placeholder carrying an external reference the core never stringifies."""

    ref: Any


Node = Union["Element", str, Opaque]


@dataclass(frozen=True)
class Element:
    """Single markup element with lifted id/class and ordered children."""

    tag: str
    id: Optional[str] = None
    classes: Tuple[str, ...] = ()
    attrs: Tuple[Attr, ...] = ()
    content: Tuple[Any, ...] = field(default=())

    def __post_init__(self) -> None:
        """Validate the tag name and freeze sequence fields."""
        if not isinstance(self.tag, str) or not TAG_NAME_PATTERN.match(self.tag):
            raise ValueError(f"Invalid tag name: {self.tag!r}")
        object.__setattr__(self, "classes", tuple(self.classes))
        object.__setattr__(self, "attrs", tuple(tuple(attr) for attr in self.attrs))
        object.__setattr__(self, "content", tuple(self.content))
        for name, _ in self.attrs:
            if name in ("id", "class"):
                raise ValueError(f"'{name}' must be given through the dedicated field")

    @property
    def class_(self) -> Union[None, str, List[str]]:
        """Class value: None, a single class name, or a list of names."""
        if not self.classes:
            return None
        if len(self.classes) == 1:
            return self.classes[0]
        return list(self.classes)

    @property
    def children(self) -> List["Element"]:
        """Direct child elements, skipping text and opaque content."""
        return [child for child in self.content if isinstance(child, Element)]

    def get_attribute(self, name: str, default: Any = None) -> Any:
        """Get the first value of an attribute, including id and class."""
        if name == "id":
            return self.id if self.id is not None else default
        if name == "class":
            return " ".join(self.classes) if self.classes else default
        for field_name, value in self.attrs:
            if field_name == name:
                return value
        return default

    def has_attribute(self, name: str) -> bool:
        """Check whether the element carries an attribute."""
        sentinel = object()
        return self.get_attribute(name, sentinel) is not sentinel

    def matches(
        self,
        tag: Optional[str] = None,
        id: Optional[str] = None,
        class_: Union[None, str, Sequence[str]] = None,
    ) -> bool:
        """Check that every given criterion holds for this element."""
        if tag is not None and self.tag != tag.lower():
            return False
        if id is not None and self.id != id:
            return False
        if class_ is not None:
            wanted = [class_] if isinstance(class_, str) else list(class_)
            if not all(name in self.classes for name in wanted):
                return False
        return True

    def iter_elements(self) -> Iterator["Element"]:
        """Yield this element and all descendant elements in document order."""
        stack: List[Element] = [self]
        while stack:
            element = stack.pop()
            yield element
            stack.extend(reversed(element.children))

    def find(self, tag: Optional[str] = None, **criteria: Any) -> Optional["Element"]:
        """Find the first element (self included) matching the criteria."""
        for element in self.iter_elements():
            if element.matches(tag, **criteria):
                return element
        return None

    def find_all(self, tag: Optional[str] = None, **criteria: Any) -> List["Element"]:
        """Find all elements (self included) matching the criteria."""
        return [e for e in self.iter_elements() if e.matches(tag, **criteria)]

    def text(self) -> str:
        """Concatenated text of all descendant text nodes."""
        parts: List[str] = []
        pending: deque = deque([self])
        while pending:
            node = pending.popleft()
            if isinstance(node, str):
                parts.append(node)
            elif isinstance(node, Element):
                pending.extendleft(reversed(node.content))
        return "".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the element tree to JSON compatible data."""
        return {
            "tag": self.tag,
            "id": self.id,
            "class": self.class_,
            "attrs": [[name, _value_to_json(value)] for name, value in self.attrs],
            "content": [_node_to_json(child) for child in self.content],
        }


def _value_to_json(value: Any) -> Any:
    if isinstance(value, Opaque):
        return {"opaque": repr(value.ref)}
    if isinstance(value, (list, tuple)):
        return [_value_to_json(item) for item in value]
    return value


def _node_to_json(node: Any) -> Any:
    if isinstance(node, Element):
        return node.to_dict()
    return _value_to_json(node)


def split_classes(value: Any) -> Tuple[str, ...]:
    """Turn a class attribute value into an ordered tuple of class names."""
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(value.split())
    if isinstance(value, (list, tuple)):
        names: List[str] = []
        for item in value:
            names.extend(split_classes(item))
        return tuple(names)
    raise ValueError(f"Unsupported class value: {value!r}")


def lift_id_and_class(
    attrs: Iterable[Attr],
) -> Tuple[Optional[str], Tuple[str, ...], Tuple[Attr, ...]]:
    """Separate id and class from the remaining attributes.

    The first ``id`` wins and every ``id`` pair is removed. ``class`` values
    are split on whitespace and collected in encounter order.
    """
    element_id: Optional[str] = None
    seen_id = False
    classes: List[str] = []
    rest: List[Attr] = []
    for name, value in attrs:
        if name == "id":
            if not seen_id:
                element_id, seen_id = value, True
        elif name == "class":
            classes.extend(split_classes(value))
        else:
            rest.append((name, value))
    return element_id, tuple(classes), tuple(rest)


def new_element(
    tag: str,
    attrs: Union[None, Mapping[str, Any], Iterable[Attr]] = None,
    content: Any = None,
    id: Optional[str] = None,
    class_: Union[None, str, Sequence[str]] = None,
) -> Element:
    """Build an element from loose arguments.

    Args:
        tag: Element name, lower-cased on input
        attrs: Mapping or sequence of (field, value) pairs; ``id`` and
            ``class`` entries are lifted out
        content: A single node, a sequence of nodes, or None
        id: Explicit id, taking precedence over an ``id`` attribute
        class_: Class names, added before classes found in ``attrs``

    Raises:
        ValueError: If the tag name is invalid
    """
    if not isinstance(tag, str):
        raise ValueError(f"Invalid tag name: {tag!r}")
    pairs: Iterable[Attr]
    if attrs is None:
        pairs = ()
    elif isinstance(attrs, Mapping):
        pairs = attrs.items()
    else:
        pairs = attrs
    attr_id, attr_classes, rest = lift_id_and_class(pairs)

    if content is None:
        children: Tuple[Any, ...] = ()
    elif isinstance(content, (list, tuple)):
        children = tuple(content)
    else:
        children = (content,)

    return Element(
        tag=tag.lower(),
        id=id if id is not None else attr_id,
        classes=split_classes(class_) + attr_classes,
        attrs=rest,
        content=children,
    )
