from pathlib import Path
from typing import Any, Hashable, Iterable, Set

import networkx as nx
from networkx import MultiDiGraph
from pyformlang.finite_automaton import Epsilon, EpsilonNFA, State, Symbol

from fa_engine.errors import InvalidArgumentError
from fa_engine.state_graph import EPSILON, Alphabet, StateGraph

__all__ = [
    "EPSILON_LABEL",
    "state_graph_to_epsilon_nfa",
    "epsilon_nfa_to_state_graph",
    "graph_to_state_graph",
    "state_graph_to_multidigraph",
    "save_state_graph_to_dot",
]

EPSILON_LABEL = "epsilon"


def _sorted_values(values: Iterable[Hashable]) -> list[Hashable]:
    values = list(values)
    try:
        return sorted(values)
    except TypeError:
        return sorted(values, key=repr)


def state_graph_to_epsilon_nfa(graph: StateGraph) -> EpsilonNFA:
    enfa = EpsilonNFA(states={State(st) for st in range(graph.state_count)})
    enfa.add_start_state(State(graph.start))
    for st in graph.final_states:
        enfa.add_final_state(State(st))

    for from_st, symbol, to_st in graph.transitions():
        label = Epsilon() if symbol is EPSILON else Symbol(symbol)
        enfa.add_transition(State(from_st), label, State(to_st))
    return enfa


def _build(
    nodes: list[Hashable],
    symbols: list[Hashable],
    edges: Iterable[tuple[Hashable, Hashable, Hashable]],
    start_nodes: Set[Hashable],
    final_nodes: Set[Hashable],
) -> StateGraph:
    if not start_nodes:
        raise InvalidArgumentError("the automaton has no start state")

    st_to_idx: dict[Hashable, int] = {st: i for i, st in enumerate(nodes)}
    unknown = (set(start_nodes) | set(final_nodes)) - st_to_idx.keys()
    if unknown:
        raise InvalidArgumentError(f"unknown start or final states {unknown!r}")
    # several start states are joined under a fresh one by epsilon edges
    extra_start = len(start_nodes) > 1
    graph = StateGraph(
        Alphabet(symbols, epsilon=True), len(nodes) + int(extra_start)
    )

    if extra_start:
        graph.set_start(len(nodes))
        for st in start_nodes:
            graph.add_transition(len(nodes), st_to_idx[st], EPSILON)
    else:
        graph.set_start(st_to_idx[next(iter(start_nodes))])

    for st in final_nodes:
        graph.add_final_state(st_to_idx[st])
    for u, v, symbol in edges:
        graph.add_transition(st_to_idx[u], st_to_idx[v], symbol)
    return graph


def epsilon_nfa_to_state_graph(enfa: EpsilonNFA) -> StateGraph:
    nodes = _sorted_values(st.value for st in enfa.states)
    symbols = _sorted_values(
        sym.value for sym in enfa.symbols if not isinstance(sym, Epsilon)
    )

    def edges():
        for from_st, transitions in enfa.to_dict().items():
            for symbol, to_sts in transitions.items():
                label = EPSILON if isinstance(symbol, Epsilon) else symbol.value
                if not isinstance(to_sts, Iterable):
                    to_sts = {to_sts}
                for to_st in to_sts:
                    yield from_st.value, to_st.value, label

    return _build(
        nodes,
        symbols,
        edges(),
        {st.value for st in enfa.start_states},
        {st.value for st in enfa.final_states},
    )


def graph_to_state_graph(
    graph: MultiDiGraph, start_nodes: Set[Any], final_nodes: Set[Any]
) -> StateGraph:
    """
    Read a labeled multigraph as an epsilon-NFA.

    Edges carry their symbol in the ``label`` attribute; ``"epsilon"`` marks
    an epsilon edge.
    """
    nodes = _sorted_values(graph.nodes)
    labels = {lbl for _, _, lbl in graph.edges(data="label")}
    if None in labels:
        raise InvalidArgumentError("every edge needs a 'label' attribute")

    def edges():
        for u, v, lbl in graph.edges(data="label"):
            yield u, v, EPSILON if lbl == EPSILON_LABEL else lbl

    return _build(
        nodes,
        _sorted_values(labels - {EPSILON_LABEL}),
        edges(),
        set(start_nodes),
        set(final_nodes),
    )


def state_graph_to_multidigraph(graph: StateGraph) -> MultiDiGraph:
    g = MultiDiGraph()
    for st in range(graph.state_count):
        g.add_node(st, is_start=st == graph.start, is_final=st in graph.final_states)
    for u, symbol, v in graph.transitions():
        g.add_edge(u, v, label=EPSILON_LABEL if symbol is EPSILON else symbol)
    return g


def save_state_graph_to_dot(graph: StateGraph, output_file: Path) -> None:
    nx.drawing.nx_pydot.write_dot(state_graph_to_multidigraph(graph), output_file)
