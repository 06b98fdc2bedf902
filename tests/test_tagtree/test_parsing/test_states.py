"""Tests for the pure transition function."""

import pytest

from tagtree.parsing.states import WHITESPACE, Effect, ParserState, Transition, transition

S = ParserState
E = Effect


class TestLookForElement:
    """Transitions between tags."""

    def test_open_angle_starts_name(self):
        assert transition(S.LOOK_FOR_ELEMENT, "<", "a") == Transition(
            S.READ_ELEMENT_NAME, E.BEGIN_ELEMENT_NAME
        )

    def test_closing_marker_closes_element(self):
        assert transition(S.LOOK_FOR_ELEMENT, "<", "/") == Transition(
            S.LOOK_FOR_ELEMENT, E.CLOSE_ELEMENT
        )

    def test_open_angle_at_end_of_input(self):
        """Test that '<' as the last character still starts a name."""
        step = transition(S.LOOK_FOR_ELEMENT, "<", None)
        assert step.state is S.READ_ELEMENT_NAME

    def test_close_angle_ends_closing_tag(self):
        step = transition(S.LOOK_FOR_ELEMENT, ">", "x")
        assert step == Transition(S.LOOK_FOR_ELEMENT, E.CLOSING_TAG_END)

    @pytest.mark.parametrize("char", ["a", "/", " ", "=", '"'])
    def test_other_characters_ignored(self, char):
        assert transition(S.LOOK_FOR_ELEMENT, char, "<") == Transition(S.LOOK_FOR_ELEMENT, E.NONE)


class TestReadElementName:
    """Transitions inside a tag name."""

    def test_close_angle_opens_element(self):
        assert transition(S.READ_ELEMENT_NAME, ">", "t") == Transition(
            S.READ_INNER_HTML, E.OPEN_ELEMENT
        )

    @pytest.mark.parametrize("char", sorted(WHITESPACE))
    def test_whitespace_opens_element_with_attributes(self, char):
        assert transition(S.READ_ELEMENT_NAME, char, "x") == Transition(
            S.LOOK_FOR_ATTRIBUTE_KEY, E.OPEN_ELEMENT_WITH_ATTRIBUTES
        )

    def test_slash_opens_self_closing_element(self):
        assert transition(S.READ_ELEMENT_NAME, "/", ">") == Transition(
            S.LOOK_FOR_ELEMENT, E.OPEN_SELF_CLOSING_ELEMENT
        )

    @pytest.mark.parametrize("char", ["a", "Z", "1", "-", ":", "="])
    def test_name_characters_accumulate(self, char):
        assert transition(S.READ_ELEMENT_NAME, char, None) == Transition(
            S.READ_ELEMENT_NAME, E.NONE
        )


class TestLookForAttributeKey:
    """Transitions inside an opening tag after the name."""

    def test_close_angle_begins_inner_text(self):
        assert transition(S.LOOK_FOR_ATTRIBUTE_KEY, ">", "x") == Transition(
            S.READ_INNER_HTML, E.BEGIN_INNER_TEXT
        )

    def test_slash_self_closes(self):
        assert transition(S.LOOK_FOR_ATTRIBUTE_KEY, "/", ">") == Transition(
            S.LOOK_FOR_ELEMENT, E.SELF_CLOSE
        )

    def test_whitespace_skipped(self):
        assert transition(S.LOOK_FOR_ATTRIBUTE_KEY, " ", "k") == Transition(
            S.LOOK_FOR_ATTRIBUTE_KEY, E.NONE
        )

    def test_other_character_begins_key(self):
        assert transition(S.LOOK_FOR_ATTRIBUTE_KEY, "k", "=") == Transition(
            S.READ_ATTRIBUTE_KEY, E.BEGIN_ATTRIBUTE_KEY
        )


class TestReadAttributeKey:
    """Transitions inside an attribute key."""

    def test_equals_quote_ends_key(self):
        step = transition(S.READ_ATTRIBUTE_KEY, "=", '"')
        assert step == Transition(S.READ_ATTRIBUTE_VALUE, E.END_ATTRIBUTE_KEY, consumed=2)

    @pytest.mark.parametrize("lookahead", ["v", "'", None])
    def test_equals_without_quote(self, lookahead):
        step = transition(S.READ_ATTRIBUTE_KEY, "=", lookahead)
        assert step.effect is E.MISSING_QUOTE

    @pytest.mark.parametrize("char", ["<", ">", " ", "\n"])
    def test_key_terminated_early(self, char):
        assert transition(S.READ_ATTRIBUTE_KEY, char, None).effect is E.UNTERMINATED_KEY

    def test_key_characters_accumulate(self):
        assert transition(S.READ_ATTRIBUTE_KEY, "e", "y") == Transition(
            S.READ_ATTRIBUTE_KEY, E.NONE
        )


class TestReadAttributeValue:
    """Transitions inside a quoted value."""

    def test_quote_ends_value(self):
        assert transition(S.READ_ATTRIBUTE_VALUE, '"', ">") == Transition(
            S.LOOK_FOR_ATTRIBUTE_KEY, E.END_ATTRIBUTE_VALUE
        )

    @pytest.mark.parametrize("char", ["<", ">", "=", " ", "/"])
    def test_markup_characters_are_literal(self, char):
        assert transition(S.READ_ATTRIBUTE_VALUE, char, '"') == Transition(
            S.READ_ATTRIBUTE_VALUE, E.NONE
        )


class TestReadInnerHtml:
    """Transitions inside inner text."""

    def test_closing_marker(self):
        assert transition(S.READ_INNER_HTML, "<", "/") == Transition(
            S.LOOK_FOR_ELEMENT, E.INNER_TEXT_THEN_CLOSE
        )

    def test_child_element(self):
        assert transition(S.READ_INNER_HTML, "<", "b") == Transition(
            S.READ_ELEMENT_NAME, E.INNER_TEXT_THEN_OPEN
        )

    @pytest.mark.parametrize("char", ["a", ">", '"', "="])
    def test_text_accumulates(self, char):
        assert transition(S.READ_INNER_HTML, char, "<") == Transition(
            S.READ_INNER_HTML, E.NONE
        )


def test_every_state_has_transitions():
    """Test that no state falls through to the error branch."""
    for state in ParserState:
        assert isinstance(transition(state, "x", None), Transition)


def test_unknown_state_rejected():
    """Test that invalid states raise."""
    with pytest.raises(ValueError, match="Unknown parser state"):
        transition("LOOK_FOR_ELEMENT", "<", None)


def test_transition_is_pure():
    """Test that repeated calls give equal results."""
    assert transition(S.READ_INNER_HTML, "<", "/") == transition(S.READ_INNER_HTML, "<", "/")
