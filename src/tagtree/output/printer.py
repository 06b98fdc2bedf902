"""Human-readable rendering of a parsed tree.

Each element is rendered on two lines, indented by one tab per nesting
level: the tag name with its attributes, then its inner text one tab
further in. Elements appear depth-first in document order.
"""

import sys
from typing import Iterator, List, Optional, TextIO

from tagtree.tree import Element, Node

INDENT = "\t"
ATTRIBUTE_SEPARATOR = "  "


def format_element(element: Element, level: int = 0) -> List[str]:
    """Render one element as its header and inner-text lines."""
    indent = INDENT * level
    parts = [f"<{element.name}>"]
    parts.extend(f'{attribute.key}="{attribute.value}"' for attribute in element.attributes)
    header = indent + ATTRIBUTE_SEPARATOR.join(parts)
    text_line = indent + INDENT + (element.inner_text or "")
    return [header, text_line]


def iter_lines(node: Node, include_root: bool = False) -> Iterator[str]:
    """Yield the rendered lines for ``node``'s subtree.

    Args:
        node: Subtree to render, usually ``ParseResult.root``
        include_root: Render ``node`` itself instead of starting at its children
    """
    for current, level in node.iter_with_depth():
        if current is node and not include_root:
            continue
        yield from format_element(current.element, level if include_root else level - 1)


def format_tree(node: Node, include_root: bool = False) -> str:
    """Render ``node``'s subtree as a single string."""
    lines = list(iter_lines(node, include_root))
    return "\n".join(lines) + "\n" if lines else ""


def print_tree(
    node: Node,
    stream: Optional[TextIO] = None,
    include_root: bool = False
) -> None:
    """Write the rendered subtree to ``stream`` (standard output by default)."""
    out = stream if stream is not None else sys.stdout
    for line in iter_lines(node, include_root):
        out.write(line + "\n")
