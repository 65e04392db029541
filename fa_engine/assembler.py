from typing import TYPE_CHECKING, Iterable, Sequence

from fa_engine.errors import InvalidArgumentError
from fa_engine.state_graph import Alphabet, StateGraph

if TYPE_CHECKING:
    from fa_engine.subset_construction import CompositeState

__all__ = ["assemble"]


def assemble(
    composites: Sequence["CompositeState"],
    nfa_final_states: Iterable[int],
    alphabet: Alphabet,
) -> StateGraph:
    """
    Commit a finished composite-state list to a fixed-size DFA.

    Composite ``i`` becomes state ``i``; state 0 is the start. A state is final
    when its anchors contain at least one NFA final state.
    """
    if not composites:
        raise InvalidArgumentError("cannot assemble an automaton without states")
    if alphabet.has_epsilon:
        raise InvalidArgumentError("a deterministic alphabet must not contain epsilon")

    nfa_final_sts = frozenset(nfa_final_states)
    dfa = StateGraph(alphabet, len(composites), start=0)

    for from_idx, composite in enumerate(composites):
        for symbol in alphabet:
            to_idx = composite.next.get(symbol)
            if to_idx is not None:
                dfa.add_transition(from_idx, to_idx, symbol)
        if not composite.anchors.isdisjoint(nfa_final_sts):
            dfa.add_final_state(from_idx)

    return dfa
