"""Shared type aliases, records and errors for tick-transition."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

StateName = str
EventName = str

# Hook callback signature: (ctx, entity) -> None. A hook fails by raising.
Hook = Callable[[Any, Any], None]


class HookSlot(str, enum.Enum):
    """Pipeline position of a hook, in execution order."""

    BEFORE = "before"
    EXIT = "exit"
    ENTER = "enter"
    AFTER = "after"


@dataclass(frozen=True, slots=True)
class StateChange:
    """Bookkeeping for the most recent committed transition."""

    event: EventName
    from_state: StateName
    to_state: StateName
    at: datetime


class TransitionError(Exception):
    """Base class for every error raised by tick-transition."""


class DefinitionError(TransitionError, ValueError):
    """Raised when states, events or rules are registered inconsistently."""


class UnknownEventError(TransitionError, KeyError):
    """Raised when triggering an event that was never registered."""

    def __init__(self, event: EventName) -> None:
        self.event = event
        super().__init__(f"Unknown event {event!r}")

    def __str__(self) -> str:
        # KeyError would repr() the message otherwise.
        return str(self.args[0])


class NoMatchingTransitionError(TransitionError):
    """Raised when no rule of the event covers the entity's current state."""

    def __init__(self, event: EventName, state: StateName) -> None:
        self.event = event
        self.state = state
        super().__init__(
            f"Event {event!r} has no transition from state {state!r}"
        )


class HookError(TransitionError):
    """Wraps an exception raised by a before/exit/enter/after hook.

    The hook's own exception is available as ``original`` and is also
    chained as ``__cause__``.
    """

    def __init__(
        self,
        slot: HookSlot,
        event: EventName,
        state: StateName,
        original: BaseException,
    ) -> None:
        self.slot = slot
        self.event = event
        self.state = state
        self.original = original
        super().__init__(
            f"{slot.value} hook failed during {event!r} from {state!r}: {original}"
        )


class CancelledError(TransitionError):
    """Raised by ``Context.raise_if_cancelled`` once cancelled or expired."""
