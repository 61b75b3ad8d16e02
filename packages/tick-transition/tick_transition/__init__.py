"""tick-transition - Declarative state machines with transactional hooks."""
from __future__ import annotations

from tick_transition.context import Context
from tick_transition.definitions import EventDefinition, StateDefinition, TransitionRule
from tick_transition.machine import StateMachine
from tick_transition.statable import RecordsStateChange, Statable, Transition
from tick_transition.types import (
    CancelledError,
    DefinitionError,
    HookError,
    HookSlot,
    NoMatchingTransitionError,
    StateChange,
    TransitionError,
    UnknownEventError,
)

__all__ = [
    "StateMachine",
    "StateDefinition",
    "EventDefinition",
    "TransitionRule",
    "Statable",
    "RecordsStateChange",
    "Transition",
    "StateChange",
    "Context",
    "HookSlot",
    "TransitionError",
    "DefinitionError",
    "UnknownEventError",
    "NoMatchingTransitionError",
    "HookError",
    "CancelledError",
]
