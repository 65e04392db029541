from typing import Iterable

import numpy as np
from scipy.sparse import csr_matrix

from fa_engine.state_graph import EPSILON, StateGraph, Symbol

__all__ = ["symbol_closure", "epsilon_closure", "accepts"]


def _front(graph: StateGraph, states: Iterable[int]) -> csr_matrix:
    idx = sorted({graph.check_state(st) for st in states})
    return csr_matrix(
        (np.ones(len(idx), dtype=bool), (np.zeros(len(idx), dtype=int), idx)),
        shape=(1, graph.state_count),
        dtype=bool,
    )


def _step(graph: StateGraph, states: Iterable[int], symbol: Symbol) -> frozenset[int]:
    front = _front(graph, states)
    if front.nnz == 0:
        return frozenset()
    reached = front @ graph.adjacency_matrix(symbol)
    return frozenset(int(i) for i in reached.nonzero()[1])


def symbol_closure(
    graph: StateGraph, anchors: Iterable[int], symbol: Symbol
) -> frozenset[int]:
    """States reachable from ``anchors`` by exactly one ``symbol`` edge."""
    return _step(graph, anchors, graph.check_symbol(symbol))


def epsilon_closure(graph: StateGraph, anchors: Iterable[int]) -> frozenset[int]:
    """
    Smallest superset of ``anchors`` closed under epsilon edges.

    Expands a frontier of newly reached states until it runs dry, so the
    number of rounds is bounded by the state count.
    """
    closure = {graph.check_state(st) for st in anchors}
    if not graph.alphabet.has_epsilon:
        return frozenset(closure)

    front = set(closure)
    while front:
        front = _step(graph, front, EPSILON) - closure
        closure |= front
    return frozenset(closure)


def accepts(graph: StateGraph, word: Iterable[Symbol]) -> bool:
    cur_configs = epsilon_closure(graph, {graph.start})

    for symbol in word:
        if symbol is EPSILON or symbol not in graph.alphabet:
            return False
        cur_configs = epsilon_closure(graph, symbol_closure(graph, cur_configs, symbol))
        if not cur_configs:
            return False

    return not cur_configs.isdisjoint(graph.final_states)
