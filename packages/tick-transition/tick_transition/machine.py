"""StateMachine - builder API, transition resolution and the trigger pipeline."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Generic, TypeVar

from tick_transition.definitions import EventDefinition, StateDefinition, TransitionRule
from tick_transition.statable import RecordsStateChange, Statable
from tick_transition.types import (
    DefinitionError,
    EventName,
    Hook,
    HookError,
    HookSlot,
    NoMatchingTransitionError,
    StateChange,
    StateName,
    UnknownEventError,
)

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=Statable)

# Listener signature: (entity, change) -> None, after a committed transition.
TransitionListener = Callable[[Any, StateChange], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StateMachine(Generic[S]):
    """Declarative state machine driving caller-owned Statable entities.

    Build once, then call ``trigger`` as often as needed. Definitions are
    never sealed, but they are not synchronized either: finish registering
    before triggering from several threads.

    ``allow_overlap`` lets two rules of one event share a source state, in
    which case the first declared rule wins. ``clock`` supplies the
    timestamp recorded in each ``StateChange``.
    """

    def __init__(
        self,
        allow_overlap: bool = False,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._allow_overlap = allow_overlap
        self._clock = clock if clock is not None else _utcnow
        self._states: dict[StateName, StateDefinition] = {}
        self._events: dict[EventName, EventDefinition] = {}
        self._initial: StateName | None = None
        self._listeners: list[TransitionListener] = []

    @property
    def allow_overlap(self) -> bool:
        return self._allow_overlap

    @property
    def initial_state(self) -> StateName | None:
        return self._initial

    # --- Registration ---

    def initial(self, name: StateName) -> StateDefinition:
        """Register *name* if needed and make it the initial state.

        Only one state is initial; calling again with another name moves
        the flag.
        """
        definition = self.state(name)
        self._initial = name
        return definition

    def state(self, name: StateName) -> StateDefinition:
        """Return the definition for *name*, creating it on first use."""
        definition = self._states.get(name)
        if definition is None:
            definition = StateDefinition(self, name)
            self._states[name] = definition
        return definition

    def event(self, name: EventName) -> EventDefinition:
        """Return the definition for *name*, creating it on first use."""
        definition = self._events.get(name)
        if definition is None:
            definition = EventDefinition(self, name)
            self._events[name] = definition
        return definition

    def on_transition(self, listener: TransitionListener) -> None:
        """Call ``listener(entity, change)`` after every committed transition."""
        self._listeners.append(listener)

    def _require_state(self, name: StateName) -> None:
        if name not in self._states:
            raise DefinitionError(f"State {name!r} is not declared")

    # --- Queries ---

    def has_state(self, name: StateName) -> bool:
        return name in self._states

    def has_event(self, name: EventName) -> bool:
        return name in self._events

    def states(self) -> list[StateName]:
        """State names in registration order."""
        return list(self._states)

    def events(self) -> list[EventName]:
        """Event names in registration order."""
        return list(self._events)

    def state_definition(self, name: StateName) -> StateDefinition | None:
        return self._states.get(name)

    def event_definition(self, name: EventName) -> EventDefinition | None:
        return self._events.get(name)

    def current_state(self, entity: S) -> StateName:
        """The entity's state, or the initial state when it has none yet.

        Raises ``DefinitionError`` if the entity is unset and no initial
        state was declared.
        """
        state = entity.get_state()
        if state:
            return state
        if self._initial is None:
            raise DefinitionError("Entity has no state and no initial state is declared")
        return self._initial

    def resolve(self, event: EventName, state: StateName) -> TransitionRule:
        """Select the rule *event* applies from *state*.

        Rules are scanned in declaration order and the first one whose
        sources contain *state* wins.
        """
        definition = self._events.get(event)
        if definition is None:
            raise UnknownEventError(event)
        rule = definition.resolve(state)
        if rule is None:
            raise NoMatchingTransitionError(event, state)
        return rule

    def can(self, event: EventName, entity: S) -> bool:
        """Whether ``trigger(event, entity)`` would find a rule. Hooks are not run."""
        definition = self._events.get(event)
        if definition is None:
            return False
        if not entity.get_state() and self._initial is None:
            return False
        return definition.resolve(self.current_state(entity)) is not None

    def available_events(self, entity: S) -> list[EventName]:
        """Events that have a rule from the entity's current state."""
        return [name for name in self._events if self.can(name, entity)]

    # --- Execution ---

    def trigger(self, event: EventName, entity: S, ctx: Any = None) -> StateChange:
        """Fire *event* on *entity* and return the committed change.

        The context comes last and is optional; it is handed to every hook
        unchanged as ``hook(ctx, entity)``.

        Hooks run in order before, exit, enter, after. An entity with no
        state is moved to the initial state once a rule resolves, before any
        hook runs. The entity's state is switched between exit and enter.
        A failing before/exit hook leaves that state in place; a failing
        enter/after hook restores it. Hook failures are raised as
        ``HookError`` chained to the original exception. Side effects of
        hooks that already ran are not undone.

        Listeners run after the change is committed; a failing listener is
        logged and does not affect the result.
        """
        if event not in self._events:
            raise UnknownEventError(event)
        original = self.current_state(entity)
        rule = self.resolve(event, original)
        target = rule.target

        if not entity.get_state():
            entity.set_state(original)

        self._run_hook(HookSlot.BEFORE, rule.before_hook, ctx, entity, event, original)
        self._run_hook(
            HookSlot.EXIT, self._states[original].on_exit, ctx, entity, event, original
        )

        entity.set_state(target)
        try:
            self._run_hook(
                HookSlot.ENTER, self._states[target].on_enter, ctx, entity, event, original
            )
            self._run_hook(HookSlot.AFTER, rule.after_hook, ctx, entity, event, original)
        except BaseException:
            entity.set_state(original)
            logger.warning(
                "Rolled back %r: %s -> %s, entity stays in %s", event, original, target, original
            )
            raise

        change = StateChange(event=event, from_state=original, to_state=target, at=self._clock())
        if isinstance(entity, RecordsStateChange):
            entity.set_last_state_change(change)
        logger.debug("Transition %r: %s -> %s", event, original, target)
        for listener in self._listeners:
            try:
                listener(entity, change)
            except Exception:
                logger.exception(
                    "Transition listener failed after %r: %s -> %s", event, original, target
                )
        return change

    def _run_hook(
        self,
        slot: HookSlot,
        hook: Hook | None,
        ctx: Any,
        entity: S,
        event: EventName,
        state: StateName,
    ) -> None:
        if hook is None:
            return
        try:
            hook(ctx, entity)
        except Exception as exc:
            logger.debug("%s hook rejected %r from %s: %s", slot.value, event, state, exc)
            raise HookError(slot, event, state, exc) from exc

    def __repr__(self) -> str:
        return (
            f"StateMachine(states={len(self._states)}, events={len(self._events)}, "
            f"initial={self._initial!r})"
        )
