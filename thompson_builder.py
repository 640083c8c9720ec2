# Thompson construction: postfix pattern -> NFA fragment.
# each operator glues fragments together with epsilon moves; every state it
# needs is allocated from the Arena passed in by the caller.

import logging

from state_arena import EPSILON, Arena, Fragment
from regex_preprocessor import CONCAT, STAR, UNION, preprocess, to_postfix

logger = logging.getLogger(__name__)


class MalformedPattern(ValueError):
    # The postfix expression can not be reduced to exactly one fragment.
    def __init__(self, postfix, reason):
        super().__init__(f"malformed pattern {postfix!r}: {reason}")
        self.postfix = postfix
        self.reason = reason


def _same_arena(*fragments):
    arena = fragments[0].arena
    for fragment in fragments[1:]:
        if fragment.arena is not arena:
            raise ValueError("fragments belong to different arenas")
    return arena


# --- FRAGMENT CONSTRUCTORS ---

def make_literal(arena: Arena, symbol: str) -> Fragment:
    # start --symbol--> end
    start = arena.create()
    end = arena.create()
    start.add_transition(symbol, end.id)
    return Fragment(start.id, [end.id], arena)


def make_concat(first: Fragment, second: Fragment) -> Fragment:
    # first's accepting states flow into second's entry
    arena = _same_arena(first, second)
    for state_id in first.accepts:
        arena.state(state_id).add_transition(EPSILON, second.entry)
    return Fragment(first.entry, second.accepts, arena)


def make_union(first: Fragment, second: Fragment) -> Fragment:
    # new start branches into both operands, both operands meet in a new end
    arena = _same_arena(first, second)
    start = arena.create()
    end = arena.create()
    start.add_transition(EPSILON, first.entry)
    start.add_transition(EPSILON, second.entry)
    for state_id in sorted(first.accepts | second.accepts):
        arena.state(state_id).add_transition(EPSILON, end.id)
    return Fragment(start.id, [end.id], arena)


def make_star(fragment: Fragment) -> Fragment:
    # zero passes: start -> end; repeat: accepts -> fragment entry
    arena = fragment.arena
    start = arena.create()
    end = arena.create()
    start.add_transition(EPSILON, fragment.entry)
    start.add_transition(EPSILON, end.id)
    for state_id in sorted(fragment.accepts):
        state = arena.state(state_id)
        state.add_transition(EPSILON, fragment.entry)
        state.add_transition(EPSILON, end.id)
    return Fragment(start.id, [end.id], arena)


BINARY = {CONCAT: make_concat, UNION: make_union}


def build(postfix: str, arena: Arena = None) -> Fragment:
    """
    Evaluate a postfix pattern on an operand stack and return the final
    fragment. Raises MalformedPattern for empty input, operator underflow,
    or leftover operands (a missing concatenation).
    """
    if arena is None:
        arena = Arena()
    if not postfix:
        raise MalformedPattern(postfix, "empty pattern")

    stack = []
    for position, c in enumerate(postfix):
        if c in BINARY:
            if len(stack) < 2:
                raise MalformedPattern(
                    postfix, f"operator {c!r} at {position} needs two operands")
            second = stack.pop()
            first = stack.pop()
            stack.append(BINARY[c](first, second))
        elif c == STAR:
            if not stack:
                raise MalformedPattern(
                    postfix, f"operator {c!r} at {position} needs an operand")
            stack.append(make_star(stack.pop()))
        else:
            stack.append(make_literal(arena, c))

    if len(stack) != 1:
        raise MalformedPattern(
            postfix, f"{len(stack)} fragments left on the stack (missing concatenation?)")
    fragment = stack[0]
    logger.debug("built %r from %r using %d states", fragment, postfix, len(arena))
    return fragment


def compile_pattern(pattern: str, arena: Arena = None) -> Fragment:
    # Full pipeline. A fresh arena is used unless one is given; it stays
    # reachable as fragment.arena.
    postfix = to_postfix(preprocess(pattern))
    return build(postfix, arena)
