"""Statable capability and the Transition mixin that provides it."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from tick_transition.types import StateChange, StateName


@runtime_checkable
class Statable(Protocol):
    """Minimal contract an entity needs to be driven by a StateMachine.

    An empty state means "unset": the machine's initial state is used.
    """

    def get_state(self) -> StateName: ...

    def set_state(self, state: StateName) -> None: ...


@runtime_checkable
class RecordsStateChange(Protocol):
    """Optional capability: remembers the last committed transition."""

    def set_last_state_change(self, change: StateChange) -> None: ...

    def get_last_state_change(self) -> StateChange | None: ...


@dataclass(kw_only=True)
class Transition:
    """Mix into an entity dataclass to make it Statable.

    Fields are keyword-only so the mixin can sit in front of an entity's own
    required fields::

        @dataclass
        class Order(Transition):
            id: int
            address: str = ""
    """

    state: StateName = ""
    last_state_change: StateChange | None = None

    def get_state(self) -> StateName:
        return self.state

    def set_state(self, state: StateName) -> None:
        self.state = state

    def get_last_state_change(self) -> StateChange | None:
        return self.last_state_change

    def set_last_state_change(self, change: StateChange) -> None:
        self.last_state_change = change
