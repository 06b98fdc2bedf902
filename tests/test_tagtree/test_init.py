"""Tests for the package's public surface."""

import tagtree


def test_version():
    """Test that version is defined."""
    assert tagtree.__version__ == "0.1.0"


def test_author():
    """Test that author is defined."""
    assert tagtree.__author__ == "tagtree Team"


def test_public_api_exports():
    """Test that every name in __all__ is importable from the package."""
    for name in tagtree.__all__:
        assert hasattr(tagtree, name), name


def test_top_level_parse_string():
    """Test the Level 1 entry point end to end."""
    result = tagtree.parse_string('<a x="1">hi</a>')
    assert result.success
    assert result.root.children[0].element.inner_text == "hi"
