"""State set and transition function of the tag parser.

The transition function is pure: given the current state, the character
under the cursor and the character after it, it returns the next state and
the effect the driver must apply to the tree. Nothing here touches the tree
or the input buffer, so each row of the table can be checked on its own.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

WHITESPACE = frozenset(" \t\r\n")


class ParserState(Enum):
    """States of the character-by-character scanner."""

    LOOK_FOR_ELEMENT = auto()        # Between tags, waiting for '<'
    READ_ELEMENT_NAME = auto()       # Inside '<name'
    LOOK_FOR_ATTRIBUTE_KEY = auto()  # Inside an opening tag, after the name
    READ_ATTRIBUTE_KEY = auto()      # Inside 'key' up to '='
    READ_ATTRIBUTE_VALUE = auto()    # Inside '"value"'
    READ_INNER_HTML = auto()         # After '>', up to the next '<'


class Effect(Enum):
    """Tree operation requested by a transition."""

    NONE = auto()
    BEGIN_ELEMENT_NAME = auto()           # Name capture starts after this '<'
    CLOSE_ELEMENT = auto()                # '</': current node moves to its parent
    CLOSING_TAG_END = auto()              # '>' of a skipped closing tag
    OPEN_ELEMENT = auto()                 # Name done by '>': push, inner text follows
    OPEN_ELEMENT_WITH_ATTRIBUTES = auto()  # Name done by whitespace: push
    OPEN_SELF_CLOSING_ELEMENT = auto()    # Name done by '/': push, empty, pop
    BEGIN_INNER_TEXT = auto()             # '>' after attributes
    SELF_CLOSE = auto()                   # '/' after attributes: empty, pop
    BEGIN_ATTRIBUTE_KEY = auto()          # Key capture starts at this character
    END_ATTRIBUTE_KEY = auto()            # '="': key done, value capture follows
    END_ATTRIBUTE_VALUE = auto()          # Closing '"': attribute complete
    INNER_TEXT_THEN_CLOSE = auto()        # '<' + '/' ends inner text and element
    INNER_TEXT_THEN_OPEN = auto()         # '<' ends inner text, child name follows
    MISSING_QUOTE = auto()                # '=' not followed by '"'
    UNTERMINATED_KEY = auto()             # Key ran into '<', '>' or whitespace


@dataclass(frozen=True)
class Transition:
    """Result of feeding one character to the state machine.

    ``consumed`` is the number of input characters the transition uses up;
    only ``END_ATTRIBUTE_KEY`` consumes two (the ``=`` and its opening quote).
    """

    state: ParserState
    effect: Effect
    consumed: int = 1


_S = ParserState
_E = Effect

_LOOK_FOR_ELEMENT = Transition(_S.LOOK_FOR_ELEMENT, _E.NONE)
_BEGIN_ELEMENT_NAME = Transition(_S.READ_ELEMENT_NAME, _E.BEGIN_ELEMENT_NAME)
_CLOSE_ELEMENT = Transition(_S.LOOK_FOR_ELEMENT, _E.CLOSE_ELEMENT)
_CLOSING_TAG_END = Transition(_S.LOOK_FOR_ELEMENT, _E.CLOSING_TAG_END)

_READ_ELEMENT_NAME = Transition(_S.READ_ELEMENT_NAME, _E.NONE)
_OPEN_ELEMENT = Transition(_S.READ_INNER_HTML, _E.OPEN_ELEMENT)
_OPEN_WITH_ATTRIBUTES = Transition(_S.LOOK_FOR_ATTRIBUTE_KEY, _E.OPEN_ELEMENT_WITH_ATTRIBUTES)
_OPEN_SELF_CLOSING = Transition(_S.LOOK_FOR_ELEMENT, _E.OPEN_SELF_CLOSING_ELEMENT)

_LOOK_FOR_ATTRIBUTE_KEY = Transition(_S.LOOK_FOR_ATTRIBUTE_KEY, _E.NONE)
_BEGIN_INNER_TEXT = Transition(_S.READ_INNER_HTML, _E.BEGIN_INNER_TEXT)
_SELF_CLOSE = Transition(_S.LOOK_FOR_ELEMENT, _E.SELF_CLOSE)
_BEGIN_ATTRIBUTE_KEY = Transition(_S.READ_ATTRIBUTE_KEY, _E.BEGIN_ATTRIBUTE_KEY)

_READ_ATTRIBUTE_KEY = Transition(_S.READ_ATTRIBUTE_KEY, _E.NONE)
_END_ATTRIBUTE_KEY = Transition(_S.READ_ATTRIBUTE_VALUE, _E.END_ATTRIBUTE_KEY, consumed=2)
_MISSING_QUOTE = Transition(_S.READ_ATTRIBUTE_KEY, _E.MISSING_QUOTE)
_UNTERMINATED_KEY = Transition(_S.READ_ATTRIBUTE_KEY, _E.UNTERMINATED_KEY)

_READ_ATTRIBUTE_VALUE = Transition(_S.READ_ATTRIBUTE_VALUE, _E.NONE)
_END_ATTRIBUTE_VALUE = Transition(_S.LOOK_FOR_ATTRIBUTE_KEY, _E.END_ATTRIBUTE_VALUE)

_READ_INNER_HTML = Transition(_S.READ_INNER_HTML, _E.NONE)
_INNER_TEXT_THEN_CLOSE = Transition(_S.LOOK_FOR_ELEMENT, _E.INNER_TEXT_THEN_CLOSE)
_INNER_TEXT_THEN_OPEN = Transition(_S.READ_ELEMENT_NAME, _E.INNER_TEXT_THEN_OPEN)


def transition(state: ParserState, char: str, lookahead: Optional[str]) -> Transition:
    """Compute the transition for ``char`` in ``state``.

    Args:
        state: Current parser state
        char: Character under the cursor
        lookahead: Following character, or ``None`` at end of input

    Returns:
        The next state, the effect to apply and the number of characters consumed
    """
    if state is _S.LOOK_FOR_ELEMENT:
        if char == "<":
            return _CLOSE_ELEMENT if lookahead == "/" else _BEGIN_ELEMENT_NAME
        if char == ">":
            return _CLOSING_TAG_END
        return _LOOK_FOR_ELEMENT

    if state is _S.READ_ELEMENT_NAME:
        if char == ">":
            return _OPEN_ELEMENT
        if char in WHITESPACE:
            return _OPEN_WITH_ATTRIBUTES
        if char == "/":
            return _OPEN_SELF_CLOSING
        return _READ_ELEMENT_NAME

    if state is _S.LOOK_FOR_ATTRIBUTE_KEY:
        if char == ">":
            return _BEGIN_INNER_TEXT
        if char == "/":
            return _SELF_CLOSE
        if char in WHITESPACE:
            return _LOOK_FOR_ATTRIBUTE_KEY
        return _BEGIN_ATTRIBUTE_KEY

    if state is _S.READ_ATTRIBUTE_KEY:
        if char == "=":
            return _END_ATTRIBUTE_KEY if lookahead == '"' else _MISSING_QUOTE
        if char in "<>" or char in WHITESPACE:
            return _UNTERMINATED_KEY
        return _READ_ATTRIBUTE_KEY

    if state is _S.READ_ATTRIBUTE_VALUE:
        if char == '"':
            return _END_ATTRIBUTE_VALUE
        return _READ_ATTRIBUTE_VALUE

    if state is _S.READ_INNER_HTML:
        if char == "<":
            return _INNER_TEXT_THEN_CLOSE if lookahead == "/" else _INNER_TEXT_THEN_OPEN
        return _READ_INNER_HTML

    raise ValueError(f"Unknown parser state: {state!r}")
