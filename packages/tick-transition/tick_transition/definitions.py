"""State, event and transition-rule definitions.

Definitions are builders: every setter returns the definition so calls can
be chained, and they stay open for further configuration between triggers.
Setting a hook twice replaces the earlier one.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from tick_transition.types import DefinitionError, EventName, Hook, StateName

if TYPE_CHECKING:
    from tick_transition.machine import StateMachine


class StateDefinition:
    """A named state with optional enter/exit hooks."""

    def __init__(self, machine: StateMachine, name: StateName) -> None:
        self._machine = machine
        self._name = name
        self._on_enter: Hook | None = None
        self._on_exit: Hook | None = None

    @property
    def name(self) -> StateName:
        return self._name

    @property
    def is_initial(self) -> bool:
        return self._machine.initial_state == self._name

    @property
    def on_enter(self) -> Hook | None:
        return self._on_enter

    @property
    def on_exit(self) -> Hook | None:
        return self._on_exit

    def enter(self, hook: Hook) -> StateDefinition:
        """Run *hook* after an entity has moved into this state."""
        self._on_enter = hook
        return self

    def exit(self, hook: Hook) -> StateDefinition:
        """Run *hook* before an entity leaves this state."""
        self._on_exit = hook
        return self

    def __repr__(self) -> str:
        flag = ", initial" if self.is_initial else ""
        return f"StateDefinition({self._name!r}{flag})"


class TransitionRule:
    """Moves an entity from any of ``sources`` to ``target`` for one event."""

    def __init__(self, event: EventDefinition, target: StateName) -> None:
        self._event = event
        self._target = target
        # list keeps declaration order for repr and error messages
        self._sources: list[StateName] = []
        self._before: Hook | None = None
        self._after: Hook | None = None
        self._attached = False

    @property
    def event(self) -> EventDefinition:
        return self._event

    @property
    def target(self) -> StateName:
        return self._target

    @property
    def sources(self) -> frozenset[StateName]:
        return frozenset(self._sources)

    @property
    def before_hook(self) -> Hook | None:
        return self._before

    @property
    def after_hook(self) -> Hook | None:
        return self._after

    def from_(self, *sources: StateName) -> TransitionRule:
        """Permit this rule from each of *sources*. Adds to earlier sources.

        On a rule fresh from ``to()``, re-declaring sources an existing rule
        with the same target already covers returns that existing rule, so
        further hooks attach to it. Any other sources start a new rule.
        """
        if not sources:
            raise DefinitionError(
                f"Rule {self._event.name!r} -> {self._target!r} needs at least one source state"
            )
        if not self._attached:
            existing = self._event._redeclared(self._target, sources)
            if existing is not None:
                if self._before is not None:
                    existing.before(self._before)
                if self._after is not None:
                    existing.after(self._after)
                return existing
        for source in sources:
            self._event._check_source(self, source)
        for source in sources:
            if source not in self._sources:
                self._sources.append(source)
        if not self._attached:
            self._event._rules.append(self)
            self._attached = True
        return self

    def before(self, hook: Hook) -> TransitionRule:
        """Run *hook* before the entity leaves its current state."""
        self._before = hook
        return self

    def after(self, hook: Hook) -> TransitionRule:
        """Run *hook* once the entity is in ``target``."""
        self._after = hook
        return self

    def matches(self, state: StateName) -> bool:
        return state in self._sources

    def __repr__(self) -> str:
        return (
            f"TransitionRule({self._event.name!r}: "
            f"{self._sources!r} -> {self._target!r})"
        )


class EventDefinition:
    """A named event holding transition rules in declaration order."""

    def __init__(self, machine: StateMachine, name: EventName) -> None:
        self._machine = machine
        self._name = name
        self._rules: list[TransitionRule] = []

    @property
    def name(self) -> EventName:
        return self._name

    @property
    def rules(self) -> tuple[TransitionRule, ...]:
        return tuple(self._rules)

    def to(self, target: StateName) -> TransitionRule:
        """Begin a rule moving to *target*.

        The rule joins the event once ``from_()`` gives it sources.
        """
        self._machine._require_state(target)
        return TransitionRule(self, target)

    def _redeclared(
        self, target: StateName, sources: tuple[StateName, ...]
    ) -> TransitionRule | None:
        for rule in self._rules:
            if rule.target == target and all(rule.matches(s) for s in sources):
                return rule
        return None

    def resolve(self, state: StateName) -> TransitionRule | None:
        """First rule, in declaration order, whose sources contain *state*."""
        for rule in self._rules:
            if rule.matches(state):
                return rule
        return None

    def _check_source(self, rule: TransitionRule, source: StateName) -> None:
        self._machine._require_state(source)
        if self._machine.allow_overlap:
            return
        for other in self._rules:
            if other is not rule and other.matches(source):
                raise DefinitionError(
                    f"Event {self._name!r} already moves {source!r} to "
                    f"{other.target!r}; cannot also move it to {rule.target!r}"
                )

    def __repr__(self) -> str:
        return f"EventDefinition({self._name!r}, rules={len(self._rules)})"
