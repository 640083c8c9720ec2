# state storage for the Thompson automata.
# every state lives in an Arena and is addressed by an integer id; transitions
# hold ids, never live objects, so a Fragment is just (entry id, accepting ids)
# plus a pointer back to the arena that owns them.

import logging

logger = logging.getLogger(__name__)

# reserved transition symbol for moves that consume no input
EPSILON = None


class StaleStateError(LookupError):
    # Raised when a state id is looked up after its arena was cleared.
    def __init__(self, state_id, base):
        super().__init__(
            f"state {state_id} was released by Arena.clear() "
            f"(live ids start at {base})")
        self.state_id = state_id


class State:
    # One automaton node. `transitions` maps a symbol (or EPSILON) to the
    # ordered list of target state ids.
    __slots__ = ("id", "transitions")

    def __init__(self, state_id: int):
        self.id = state_id
        self.transitions = {}

    def add_transition(self, symbol, target: int) -> None:
        self.transitions.setdefault(symbol, []).append(target)

    def targets(self, symbol) -> list:
        return self.transitions.get(symbol, [])

    def __eq__(self, other):
        return isinstance(other, State) and other.id == self.id

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return f"State({self.id})"


class Arena:
    """
    Owner of every State created during one compilation.

    Ids are handed out monotonically and are never reused, not even after
    clear(): ids issued before a clear() raise StaleStateError instead of
    silently pointing at a newer state.
    """

    def __init__(self):
        self._states = []
        self._base = 0

    def create(self) -> State:
        state = State(self._base + len(self._states))
        self._states.append(state)
        return state

    def state(self, state_id: int) -> State:
        index = state_id - self._base
        if index < 0:
            raise StaleStateError(state_id, self._base)
        try:
            return self._states[index]
        except IndexError:
            raise LookupError(f"state {state_id} was never issued by this arena") from None

    def clear(self) -> None:
        logger.debug("releasing %d states (ids %d..%d)",
                     len(self._states), self._base, self._base + len(self._states) - 1)
        self._base += len(self._states)
        self._states = []

    def __len__(self):
        return len(self._states)

    def __iter__(self):
        return iter(self._states)

    def __contains__(self, state_id):
        return 0 <= state_id - self._base < len(self._states)


class Fragment:
    # A piece of automaton: an entry state id and the set of accepting ids.
    # It does not own anything; `arena` must outlive it.
    __slots__ = ("entry", "accepts", "arena")

    def __init__(self, entry: int, accepts, arena: Arena):
        self.entry = entry
        self.accepts = frozenset(accepts)
        self.arena = arena

    def __eq__(self, other):
        return (isinstance(other, Fragment) and other.arena is self.arena
                and other.entry == self.entry and other.accepts == self.accepts)

    def __hash__(self):
        return hash((self.entry, self.accepts))

    def __repr__(self):
        return f"Fragment(entry={self.entry}, accepts={sorted(self.accepts)})"
