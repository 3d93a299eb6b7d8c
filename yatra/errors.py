"""
Typed errors raised by the engine.

Both concrete errors also subclass ValueError so callers that only guard
against bad input with ``except ValueError`` keep working.
"""


class YatraError(Exception):
    """Base class for all engine errors."""


class ParseError(YatraError, ValueError):
    """Raw text or persisted JSON could not be decoded into a Value."""


class InsufficientHistoryError(YatraError, ValueError):
    """A day series is shorter than the stability window requires."""

    def __init__(self, required: int, actual: int):
        self.required = required
        self.actual = actual
        super().__init__(
            f"Stability analysis needs at least {required} days of history, got {actual}"
        )
