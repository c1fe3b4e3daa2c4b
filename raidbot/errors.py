"""Exception taxonomy for the combat and movement engine.

Soft conditions (an unreachable target) are handled where they are raised;
hard conditions (no path, area sync timeout) propagate to the caller, and
``PlayerDiedError`` is forwarded untouched by every layer.
"""

from __future__ import annotations


class RaidbotError(Exception):
    """Base class for every engine error."""


class PlayerDiedError(RaidbotError):
    """The character died; the current action must stop immediately."""

    def __init__(self, message: str = "player died") -> None:
        super().__init__(message)


class SessionStoppedError(RaidbotError):
    """The supervising session asked this control loop to stop."""


class MonsterUnreachableError(RaidbotError):
    """The target cannot be damaged or reached; the caller should pick another."""

    def __init__(self, unit_id: int) -> None:
        super().__init__(f"monster {unit_id} appears to be unreachable or unkillable")
        self.unit_id = unit_id


class PathNotFoundError(RaidbotError):
    """No path exists to the requested destination."""


class MonstersInPathError(RaidbotError):
    """Living enemies obstruct the movement path."""


class AreaSyncTimeoutError(RaidbotError):
    """The loaded area data never caught up with the character's area."""


class AreaNotFoundError(RaidbotError):
    """The destination area is not adjacent to the current one."""


class InteractionError(RaidbotError):
    """Interacting with an entrance or object did not complete."""


class MissingKeyBindingError(RaidbotError):
    """A skill the engine needs has no key binding."""
