"""Tests for StateMachine resolution and introspection."""
from __future__ import annotations

from dataclasses import dataclass

import pytest
from tick_transition import (
    DefinitionError,
    NoMatchingTransitionError,
    StateMachine,
    Transition,
    UnknownEventError,
)


@dataclass
class Order(Transition):
    id: int = 0


@pytest.fixture
def machine() -> StateMachine[Order]:
    sm: StateMachine[Order] = StateMachine()
    sm.initial("draft")
    for name in ("checkout", "paid", "processed", "cancelled", "paid_cancelled"):
        sm.state(name)
    sm.event("checkout").to("checkout").from_("draft")
    sm.event("pay").to("paid").from_("checkout")
    cancel = sm.event("cancel")
    cancel.to("cancelled").from_("draft", "checkout")
    cancel.to("paid_cancelled").from_("paid", "processed")
    return sm


class TestResolve:
    def test_single_rule(self, machine: StateMachine[Order]) -> None:
        assert machine.resolve("checkout", "draft").target == "checkout"

    def test_multi_rule_dispatch(self, machine: StateMachine[Order]) -> None:
        assert machine.resolve("cancel", "draft").target == "cancelled"
        assert machine.resolve("cancel", "checkout").target == "cancelled"
        assert machine.resolve("cancel", "paid").target == "paid_cancelled"
        assert machine.resolve("cancel", "processed").target == "paid_cancelled"

    def test_unknown_event(self, machine: StateMachine[Order]) -> None:
        with pytest.raises(UnknownEventError) as info:
            machine.resolve("refund", "draft")
        assert info.value.event == "refund"
        assert str(info.value) == "Unknown event 'refund'"

    def test_unknown_event_is_key_error(self, machine: StateMachine[Order]) -> None:
        with pytest.raises(KeyError):
            machine.resolve("refund", "draft")

    def test_no_matching_transition(self, machine: StateMachine[Order]) -> None:
        with pytest.raises(NoMatchingTransitionError) as info:
            machine.resolve("pay", "draft")
        assert info.value.event == "pay"
        assert info.value.state == "draft"

    def test_event_without_rules(self, machine: StateMachine[Order]) -> None:
        machine.event("archive")
        with pytest.raises(NoMatchingTransitionError):
            machine.resolve("archive", "draft")

    def test_first_declared_rule_wins_on_overlap(self) -> None:
        sm: StateMachine[Order] = StateMachine(allow_overlap=True)
        sm.initial("a")
        sm.state("b")
        sm.state("c")
        go = sm.event("go")
        go.to("b").from_("a")
        go.to("c").from_("a")
        assert sm.resolve("go", "a").target == "b"


class TestCurrentState:
    def test_set_state_returned(self, machine: StateMachine[Order]) -> None:
        assert machine.current_state(Order(state="paid")) == "paid"

    def test_unset_defaults_to_initial(self, machine: StateMachine[Order]) -> None:
        assert machine.current_state(Order()) == "draft"

    def test_unset_without_initial_raises(self) -> None:
        sm: StateMachine[Order] = StateMachine()
        sm.state("draft")
        with pytest.raises(DefinitionError, match="no initial state"):
            sm.current_state(Order())

    def test_does_not_mutate_entity(self, machine: StateMachine[Order]) -> None:
        order = Order()
        machine.current_state(order)
        assert order.state == ""


class TestIntrospection:
    def test_states_in_registration_order(self, machine: StateMachine[Order]) -> None:
        assert machine.states() == [
            "draft", "checkout", "paid", "processed", "cancelled", "paid_cancelled",
        ]

    def test_events_in_registration_order(self, machine: StateMachine[Order]) -> None:
        assert machine.events() == ["checkout", "pay", "cancel"]

    def test_has_state_and_event(self, machine: StateMachine[Order]) -> None:
        assert machine.has_state("paid")
        assert not machine.has_state("shipped")
        assert machine.has_event("pay")
        assert not machine.has_event("ship")

    def test_definition_lookup(self, machine: StateMachine[Order]) -> None:
        assert machine.state_definition("paid") is machine.state("paid")
        assert machine.state_definition("shipped") is None
        assert machine.event_definition("pay") is machine.event("pay")
        assert machine.event_definition("ship") is None

    def test_can(self, machine: StateMachine[Order]) -> None:
        order = Order()
        assert machine.can("checkout", order)
        assert machine.can("cancel", order)
        assert not machine.can("pay", order)
        assert not machine.can("refund", order)

    def test_can_without_initial(self) -> None:
        sm: StateMachine[Order] = StateMachine()
        sm.state("a")
        sm.event("go").to("a").from_("a")
        assert not sm.can("go", Order())
        assert sm.can("go", Order(state="a"))

    def test_available_events(self, machine: StateMachine[Order]) -> None:
        assert machine.available_events(Order()) == ["checkout", "cancel"]
        assert machine.available_events(Order(state="checkout")) == ["pay", "cancel"]
        assert machine.available_events(Order(state="cancelled")) == []

    def test_repr(self, machine: StateMachine[Order]) -> None:
        assert repr(machine) == "StateMachine(states=6, events=3, initial='draft')"

    def test_machines_are_independent(self) -> None:
        a: StateMachine[Order] = StateMachine()
        b: StateMachine[Order] = StateMachine()
        a.initial("draft")
        assert not b.has_state("draft")
        assert b.initial_state is None
