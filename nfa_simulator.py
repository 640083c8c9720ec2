# NFA simulation by subset construction.
# instead of guessing a path we carry the set of every state the automaton
# could be in, widened by epsilon closure after each step.

import logging

from state_arena import EPSILON, Arena, Fragment

logger = logging.getLogger(__name__)


def epsilon_closure(arena: Arena, state_id: int, visited=None) -> set:
    """
    Ids of every state reachable from state_id without consuming input,
    state_id included.

    `visited` guards against the epsilon cycles make_star introduces; each
    id is added to it exactly once, when the state is expanded. Pass your
    own set to share the guard across several calls.
    """
    if visited is None:
        visited = set()
    closure = set()
    pending = [state_id]
    while pending:
        current = pending.pop()
        if current in visited:
            continue
        visited.add(current)
        closure.add(current)
        # reversed so targets are expanded in insertion order
        pending.extend(reversed(arena.state(current).targets(EPSILON)))
    return closure


def closure_of_set(arena: Arena, state_ids) -> set:
    visited = set()
    closure = set()
    for state_id in state_ids:
        closure |= epsilon_closure(arena, state_id, visited)
    return closure


def move(arena: Arena, state_ids, symbol) -> list:
    # states one `symbol` step away, without closure
    reached = []
    for state_id in sorted(state_ids):
        reached.extend(arena.state(state_id).targets(symbol))
    return reached


class StepTrace:
    # What happened to the active set while consuming text[position].
    __slots__ = ("position", "symbol", "before", "after", "died")

    def __init__(self, position, symbol, before, after, died):
        self.position = position
        self.symbol = symbol
        self.before = frozenset(before)
        self.after = frozenset(after)
        self.died = frozenset(died)

    def __repr__(self):
        return (f"StepTrace({self.position}, {self.symbol!r}, "
                f"before={sorted(self.before)}, after={sorted(self.after)})")


def run(fragment: Fragment, text: str, steps=None) -> set:
    # Active set after consuming text. Stops early once no state is live.
    # When `steps` is a list, one StepTrace per consumed symbol is appended.
    arena = fragment.arena
    active = epsilon_closure(arena, fragment.entry)
    for position, symbol in enumerate(text):
        following = closure_of_set(arena, move(arena, active, symbol))
        if steps is not None:
            # states that read input but not this symbol; pure epsilon
            # junctions never die
            died = {s for s in active
                    if any(key is not EPSILON for key in arena.state(s).transitions)
                    and not arena.state(s).targets(symbol)}
            steps.append(StepTrace(position, symbol, active, following, died))
        active = following
        if not active:
            logger.debug("dead state at %d of %d symbols", position + 1, len(text))
            break
    return active


def simulate(fragment: Fragment, text: str) -> bool:
    return bool(run(fragment, text) & fragment.accepts)


def format_trace(steps, accepted) -> str:
    def ids(states):
        return "{" + ", ".join(str(s) for s in sorted(states)) + "}"

    lines = []
    for step in steps:
        lines.append(f"[{step.position}] '{step.symbol}': {ids(step.before)} -> {ids(step.after)}")
        if step.died:
            lines.append(f"    died: {ids(step.died)}")
        if not step.after:
            lines.append("    no live states; rejecting")
    lines.append("ACCEPT" if accepted else "REJECT")
    return "\n".join(lines)


def simulate_with_trace(fragment: Fragment, text: str):
    """
    Same answer as simulate(), plus a step-by-step report of the active set
    before and after each symbol and which states had no move on it.
    """
    steps = []
    accepted = bool(run(fragment, text, steps) & fragment.accepts)
    return accepted, format_trace(steps, accepted)
