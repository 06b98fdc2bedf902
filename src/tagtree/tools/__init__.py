"""Developer tools for tagtree."""

from .debugging import DebugSession, DebugState, trace_transitions

__all__ = ["DebugSession", "DebugState", "trace_transitions"]
