"""Step-through tracing of the parser state machine.

A :class:`DebugSession` hooks into :class:`TagTreeParser` and records one
:class:`DebugState` per transition, so a malformed document can be
inspected character by character.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from tagtree.parsing import Effect, ParseResult, ParserState, TagTreeParser, Transition
from tagtree.shared import ParserConfig, get_logger


@dataclass
class DebugState:
    """Snapshot of one transition."""

    offset: int
    char: str
    state: ParserState
    next_state: ParserState
    effect: Effect

    @property
    def is_state_change(self) -> bool:
        """True when the transition moved to a different state."""
        return self.state is not self.next_state

    def to_dict(self) -> Dict[str, Any]:
        """Convert debug state to dictionary."""
        return {
            "offset": self.offset,
            "char": self.char,
            "state": self.state.name,
            "next_state": self.next_state.name,
            "effect": self.effect.name,
        }

    def format(self) -> str:
        """Render the step as one aligned line."""
        return (
            f"{self.offset:>6}  {self.char!r:<6} {self.state.name:<24} -> "
            f"{self.next_state.name:<24} {self.effect.name}"
        )


@dataclass
class DebugSession:
    """Collected trace of one parse.

    Args:
        limit: Maximum number of steps to keep (None keeps all)
        effects_only: Only record transitions with an effect other than NONE
        breakpoints: Offsets at which ``on_break`` is called
    """

    limit: Optional[int] = None
    effects_only: bool = False
    breakpoints: Set[int] = field(default_factory=set)
    on_break: Optional[Callable[[DebugState], None]] = None
    states: List[DebugState] = field(default_factory=list)
    truncated: bool = False

    def __post_init__(self) -> None:
        """Validate session settings."""
        if self.limit is not None and self.limit < 0:
            raise ValueError("limit must be >= 0 or None")

    def record(self, offset: int, char: str, state: ParserState, step: Transition) -> None:
        """Step hook for :class:`TagTreeParser`."""
        debug_state = DebugState(offset, char, state, step.state, step.effect)
        if offset in self.breakpoints and self.on_break is not None:
            self.on_break(debug_state)
        if self.effects_only and step.effect is Effect.NONE:
            return
        if self.limit is not None and len(self.states) >= self.limit:
            self.truncated = True
            return
        self.states.append(debug_state)

    def state_changes(self) -> List[DebugState]:
        """Recorded steps that moved the machine to another state."""
        return [state for state in self.states if state.is_state_change]

    def format(self) -> str:
        """Render the whole trace."""
        lines = [state.format() for state in self.states]
        if self.truncated:
            lines.append(f"... trace truncated after {self.limit} steps")
        return "\n".join(lines)

    def to_json(self, indent: int = 2) -> str:
        """Export the trace as JSON."""
        return json.dumps(
            {"steps": [state.to_dict() for state in self.states], "truncated": self.truncated},
            indent=indent,
        )


def trace_transitions(
    text: str,
    config: Optional[ParserConfig] = None,
    limit: Optional[int] = None,
    effects_only: bool = False
) -> Tuple[DebugSession, ParseResult]:
    """Parse ``text`` while recording every transition.

    Returns:
        The populated session and the parse result
    """
    session = DebugSession(limit=limit, effects_only=effects_only)
    parser = TagTreeParser(config=config, step_hook=session.record)
    result = parser.parse(text)

    logger = get_logger(__name__, parser.config.correlation_id, "debugging")
    logger.debug(
        "Trace captured",
        extra={"steps": len(session.states), "truncated": session.truncated}
    )
    return session, result
