"""Tree data model populated by the tag parser.

An :class:`Element` holds the name, the ordered attributes and the inner text
of one tag. A :class:`Node` wraps one element and links it into the tree: an
ordered list of child nodes and a weak, non-owning reference to the parent.
Every node also holds its tree's :class:`TreeArena`, which owns the root.
Holding any node therefore keeps the whole tree alive, and the tree is only
released once no node of it is referenced.
"""

import weakref
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

ROOT_ELEMENT_NAME = "root"


class TreeArena:
    """Owner of one tree. Nodes reference it strongly, it references the root."""

    def __init__(self, root: "Node") -> None:
        self.root = root


@dataclass(frozen=True)
class Attribute:
    """A single ``key="value"`` pair from an opening tag."""

    key: str
    value: str = ""

    def __post_init__(self) -> None:
        """Validate attribute values."""
        if not isinstance(self.key, str) or not isinstance(self.value, str):
            raise TypeError("Attribute key and value must be strings")
        if not self.key:
            raise ValueError("Attribute key cannot be empty")

    def to_dict(self) -> Dict[str, str]:
        """Convert attribute to dictionary representation."""
        return {"key": self.key, "value": self.value}


@dataclass(eq=False)
class Element:
    """A tag's name, attributes and inner text.

    ``inner_text`` starts unset (``None``) and can be assigned exactly once;
    the same holds for ``tail``.
    """

    name: str
    attributes: List[Attribute] = field(default_factory=list)
    source_offset: Optional[int] = None
    _inner_text: Optional[str] = field(default=None, init=False, repr=False)
    _tail: Optional[str] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate element values."""
        if not isinstance(self.name, str):
            raise TypeError("Element name must be a string")
        if not self.name:
            raise ValueError("Element name cannot be empty")

    @property
    def inner_text(self) -> Optional[str]:
        """Text between the opening tag and the first child or closing tag."""
        return self._inner_text

    @inner_text.setter
    def inner_text(self, text: str) -> None:
        if not isinstance(text, str):
            raise TypeError("Inner text must be a string")
        if self._inner_text is not None:
            raise ValueError(f"Inner text of <{self.name}> is already set")
        self._inner_text = text

    @property
    def tail(self) -> Optional[str]:
        """Text following the element's end, when tail capture is enabled."""
        return self._tail

    @tail.setter
    def tail(self, text: str) -> None:
        if not isinstance(text, str):
            raise TypeError("Tail text must be a string")
        if self._tail is not None:
            raise ValueError(f"Tail text of <{self.name}> is already set")
        self._tail = text

    @property
    def is_opened(self) -> bool:
        """True once the opening tag has been closed or marked self-closing."""
        return self._inner_text is not None

    def get_attribute(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get the value of the first attribute named ``key``."""
        for attribute in self.attributes:
            if attribute.key == key:
                return attribute.value
        return default

    def get_attributes(self, key: str) -> List[str]:
        """Get the values of every attribute named ``key``, in document order."""
        return [attribute.value for attribute in self.attributes if attribute.key == key]

    def has_attribute(self, key: str) -> bool:
        """Check if element has an attribute named ``key``."""
        return any(attribute.key == key for attribute in self.attributes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert element to dictionary representation."""
        result: Dict[str, Any] = {
            "name": self.name,
            "attributes": [attribute.to_dict() for attribute in self.attributes],
            "inner_text": self._inner_text,
        }
        if self._tail is not None:
            result["tail"] = self._tail
        return result


@dataclass(eq=False)
class Node:
    """Position of one element in the tree."""

    element: Element
    children: List["Node"] = field(default_factory=list)
    _parent_ref: Optional["weakref.ReferenceType[Node]"] = field(
        default=None, init=False, repr=False
    )
    _arena: Optional[TreeArena] = field(default=None, init=False, repr=False)

    @property
    def parent(self) -> Optional["Node"]:
        """Parent node, or ``None`` for the root or a detached node."""
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def arena(self) -> TreeArena:
        """Arena of the tree this node currently belongs to."""
        if self._arena is None:
            self._arena = TreeArena(self)
        return self._arena

    @property
    def name(self) -> str:
        """Shortcut for the wrapped element's name."""
        return self.element.name

    @property
    def depth(self) -> int:
        """Number of ancestors above this node (root = 0)."""
        depth = 0
        node = self.parent
        while node is not None:
            depth += 1
            node = node.parent
        return depth

    def is_ancestor_of(self, other: "Node") -> bool:
        """Check whether this node appears on ``other``'s parent chain."""
        node = other.parent
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False

    def iter(self) -> Iterator["Node"]:
        """Iterate over this node and its descendants in document order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def iter_with_depth(self) -> Iterator[Tuple["Node", int]]:
        """Like :meth:`iter`, also yielding each node's depth below this one."""
        stack = [(self, 0)]
        while stack:
            node, level = stack.pop()
            yield node, level
            stack.extend((child, level + 1) for child in reversed(node.children))

    def find(self, name: str) -> Optional["Node"]:
        """Find the first descendant whose element is named ``name``."""
        return next(
            (node for node in self.iter() if node is not self and node.name == name),
            None,
        )

    def find_all(self, name: str) -> List["Node"]:
        """Find all descendants whose element is named ``name``."""
        return [node for node in self.iter() if node is not self and node.name == name]

    def to_dict(self) -> Dict[str, Any]:
        """Convert the subtree to nested dictionaries."""
        result = self.element.to_dict()
        result["children"] = []
        stack = [(self, result)]
        while stack:
            node, data = stack.pop()
            for child in node.children:
                child_data = child.element.to_dict()
                child_data["children"] = []
                data["children"].append(child_data)
                stack.append((child, child_data))
        return result


def create_attribute(key: str, value: str) -> Attribute:
    """Create an attribute."""
    return Attribute(key=key, value=value)


def create_element(name: str, source_offset: Optional[int] = None) -> Element:
    """Create an element with no attributes and unset inner text."""
    return Element(name=name, source_offset=source_offset)


def add_attribute(element: Element, attribute: Attribute) -> None:
    """Append ``attribute`` after the attributes already on ``element``."""
    if not isinstance(attribute, Attribute):
        raise TypeError("Attribute must be an Attribute instance")
    element.attributes.append(attribute)


def create_node(element: Element) -> Node:
    """Create a detached node wrapping ``element``."""
    if not isinstance(element, Element):
        raise TypeError("Node element must be an Element instance")
    node = Node(element=element)
    node._arena = TreeArena(node)
    return node


def create_root() -> Node:
    """Create the synthetic root node that seeds every parse."""
    return create_node(create_element(ROOT_ELEMENT_NAME))


def append_child(parent: Node, child: Node) -> None:
    """Append ``child`` as the last child of ``parent``."""
    if not isinstance(child, Node):
        raise TypeError("Child must be a Node instance")
    if child.parent is not None:
        raise ValueError("Node already has a parent")
    if child is parent or (child.children and child.is_ancestor_of(parent)):
        raise ValueError("Cannot append a node to itself or its descendant")

    parent.children.append(child)
    child._parent_ref = weakref.ref(parent)
    arena = parent.arena
    for node in child.iter():
        node._arena = arena
