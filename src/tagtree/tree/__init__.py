"""Tree data model for tagtree."""

from .model import (
    ROOT_ELEMENT_NAME,
    Attribute,
    Element,
    Node,
    TreeArena,
    add_attribute,
    append_child,
    create_attribute,
    create_element,
    create_node,
    create_root,
)

__all__ = [
    "ROOT_ELEMENT_NAME",
    "Attribute",
    "Element",
    "Node",
    "TreeArena",
    "add_attribute",
    "append_child",
    "create_attribute",
    "create_element",
    "create_node",
    "create_root",
]
