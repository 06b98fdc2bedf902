"""Output helpers for parsed trees."""

from .printer import format_element, format_tree, iter_lines, print_tree

__all__ = ["format_element", "format_tree", "iter_lines", "print_tree"]
