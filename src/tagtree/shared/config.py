"""Configuration classes for tagtree parsing.

The configuration is a single immutable :class:`ParserConfig`. It can be
built directly, derived from an existing instance with :meth:`ParserConfig.override`,
or loaded from a dictionary/JSON document such as the file accepted by the
``--config`` option of the command-line tool.
"""

import json
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, List, Optional

DEFAULT_MAX_DEPTH = 1000
VALID_LOGGING_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class TailTextPolicy(Enum):
    """What happens to text that follows an element's end."""

    DROP = "drop"   # Discarded (default)
    TAIL = "tail"   # Stored on the closed element's ``tail`` field


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ParserConfig:
    """Immutable configuration for the tag parser and its API layer.

    Attributes:
        max_depth: Maximum element nesting depth before the parse is aborted
        tail_text: Policy for text after a child element's closing tag
        never_fail_mode: Convert parse failures into results instead of raising
        warn_on_unbalanced: Emit a warning diagnostic for unclosed elements
        correlation_id: Correlation ID attached to logs and diagnostics
        logging_level: Level used by the command-line tool
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    tail_text: TailTextPolicy = TailTextPolicy.DROP
    never_fail_mode: bool = True
    warn_on_unbalanced: bool = True
    correlation_id: Optional[str] = None
    logging_level: str = "WARNING"

    def __post_init__(self) -> None:
        """Validate the configuration."""
        if isinstance(self.tail_text, str):
            # JSON and CLI input carry the plain value
            try:
                object.__setattr__(self, "tail_text", TailTextPolicy(self.tail_text))
            except ValueError as e:
                raise ConfigValidationError(
                    f"tail_text must be one of {[p.value for p in TailTextPolicy]}",
                    field_name="tail_text",
                ) from e
        if not isinstance(self.max_depth, int) or self.max_depth <= 0:
            raise ConfigValidationError(
                "max_depth must be > 0",
                field_name="max_depth",
                suggestions=[f"Use the default of {DEFAULT_MAX_DEPTH}"],
            )
        if self.logging_level not in VALID_LOGGING_LEVELS:
            raise ConfigValidationError(
                f"logging_level must be one of {VALID_LOGGING_LEVELS}",
                field_name="logging_level",
            )

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Example:
            >>> config = ParserConfig()
            >>> config.override(max_depth=64).max_depth
            64
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration field(s): {', '.join(unknown)}",
                field_name=unknown[0],
                suggestions=sorted(known),
            )
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        result: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            result[f.name] = value.value if isinstance(value, Enum) else value
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so that typos in configuration files are
        reported rather than silently ignored.
        """
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration data must be a mapping")
        return cls().override(**data)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def strict(cls) -> "ParserConfig":
        """Preset that raises parse errors instead of returning failed results."""
        return cls(never_fail_mode=False)

    @classmethod
    def lenient(cls) -> "ParserConfig":
        """Preset that keeps trailing text and stays quiet about unclosed tags."""
        return cls(tail_text=TailTextPolicy.TAIL, warn_on_unbalanced=False)
