import json
from graphviz import Digraph

from state_arena import EPSILON

# diagnostic views of a compiled automaton: plain data for json, and a
# Graphviz graph for drawing. neither touches the filesystem.

EPSILON_LABEL = "ε"


def _label(symbol):
    return EPSILON_LABEL if symbol is EPSILON else symbol


def reachable_states(fragment):
    """
    Ids of every state reachable from the fragment's entry, in
    breadth-first order.
    """
    arena = fragment.arena
    order = [fragment.entry]
    seen = {fragment.entry}
    i = 0
    while i < len(order):
        for targets in arena.state(order[i]).transitions.values():
            for target in targets:
                if target not in seen:
                    seen.add(target)
                    order.append(target)
        i += 1
    return order


def automaton_to_dict(fragment):
    """
    Convert a fragment into a JSON-serializable dictionary.
    """
    arena = fragment.arena
    states = []
    for state_id in reachable_states(fragment):
        state = arena.state(state_id)
        states.append({
            "id": state_id,
            "accepting": state_id in fragment.accepts,
            "transitions": {_label(symbol): list(targets)
                            for symbol, targets in state.transitions.items()},
        })
    return {
        "entry": fragment.entry,
        "accepts": sorted(fragment.accepts),
        "states": states,
    }


def automaton_to_json(fragment, indent=2) -> str:
    return json.dumps(automaton_to_dict(fragment), indent=indent, ensure_ascii=False)


def automaton_to_graph(fragment, format: str = 'png', comment: str = 'Thompson NFA') -> Digraph:
    """
    Build a Graphviz graph of the automaton. Accepting states are double
    circles; an arrow from a point marks the entry. Call .render() or read
    .source on the result.
    """
    graph = Digraph(comment=comment, format=format)
    graph.attr(rankdir='LR')
    graph.node('start', '', shape='point')

    for state_id in reachable_states(fragment):
        shape = 'doublecircle' if state_id in fragment.accepts else 'circle'
        graph.node(str(state_id), str(state_id), shape=shape)

    graph.edge('start', str(fragment.entry))
    arena = fragment.arena
    for state_id in reachable_states(fragment):
        for symbol, targets in arena.state(state_id).transitions.items():
            for target in targets:
                graph.edge(str(state_id), str(target), label=_label(symbol))
    return graph
