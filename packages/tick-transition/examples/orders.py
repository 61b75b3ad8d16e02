"""Order workflow -- declarative states, events and transactional hooks.

Demonstrates:
- Declaring states, an initial state and events with To/From rules
- One event with two rules (cancel before vs. after payment)
- Enter/exit hooks on states and before/after hooks on rules
- A failing hook rolling the order back to its previous state
- Passing a Context so hooks can honour a deadline

Run: python -m examples.orders
"""

import logging
from dataclasses import dataclass

from tick_transition import Context, HookError, StateMachine, Transition


# ---------------------------------------------------------------------------
# Entity
# ---------------------------------------------------------------------------

@dataclass
class Order(Transition):
    id: int = 0
    paid_amount: int = 0
    notes: str = ""


# ---------------------------------------------------------------------------
# Hooks
# ---------------------------------------------------------------------------

def charge_card(ctx: Context, order: Order) -> None:
    ctx.raise_if_cancelled()
    if order.id % 2 == 0:
        raise RuntimeError(f"card declined for order {order.id}")
    order.paid_amount = 100


def note_arrival(ctx: Context, order: Order) -> None:
    order.notes = f"arrived in {order.state}"


def build_machine() -> StateMachine[Order]:
    sm: StateMachine[Order] = StateMachine()
    sm.initial("draft")
    for name in ("checkout", "paid", "cancelled", "paid_cancelled"):
        sm.state(name).enter(note_arrival)

    sm.event("checkout").to("checkout").from_("draft")
    sm.event("pay").to("paid").from_("checkout").before(charge_card)

    cancel = sm.event("cancel")
    cancel.to("cancelled").from_("draft", "checkout")
    cancel.to("paid_cancelled").from_("paid")
    return sm


def main() -> None:
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)-8s %(name)s | %(message)s")
    print("=== Order workflow ===\n")

    sm = build_machine()
    sm.on_transition(
        lambda order, change: print(
            f"  order {order.id}: {change.from_state} -> {change.to_state} ({change.event})"
        )
    )

    for order in (Order(id=1), Order(id=2)):
        ctx = Context.with_timeout(5.0)
        sm.trigger("checkout", order, ctx)
        try:
            sm.trigger("pay", order, ctx)
        except HookError as exc:
            print(f"  order {order.id}: {exc.slot.value} hook refused: {exc.original}")
        print(f"  order {order.id} can now: {', '.join(sm.available_events(order))}")
        sm.trigger("cancel", order, ctx)
        print(f"  order {order.id} final state: {order.state}, notes: {order.notes!r}\n")


if __name__ == "__main__":
    main()
