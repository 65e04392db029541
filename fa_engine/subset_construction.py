from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from fa_engine.assembler import assemble
from fa_engine.closure import epsilon_closure, symbol_closure
from fa_engine.errors import InvalidArgumentError
from fa_engine.logging_utils import get_logger
from fa_engine.state_graph import StateGraph, Symbol

__all__ = [
    "Phase",
    "CompositeState",
    "ConversionObserver",
    "LoggingObserver",
    "SubsetConstruction",
    "convert",
]

logger = get_logger(__name__)


class Phase(Enum):
    UNSTARTED = "unstarted"
    DISCOVERING = "discovering"
    DONE = "done"


@dataclass
class CompositeState:
    """A DFA state under construction: the set of NFA states it stands for."""

    anchors: frozenset[int]
    next: dict[Symbol, int] = field(default_factory=dict)
    marked: bool = False


class ConversionObserver:
    """Receives construction events. Every hook is a no-op by default."""

    def state_discovered(self, index: int, anchors: frozenset[int]) -> None:
        pass

    def transition_recorded(
        self,
        source: int,
        symbol: Symbol,
        moved: frozenset[int],
        target_anchors: frozenset[int],
        target: int,
    ) -> None:
        pass

    def state_marked(self, index: int) -> None:
        pass


def _fmt_states(states: Iterable[int]) -> str:
    return "{" + ",".join(str(st + 1) for st in sorted(states)) + "}"


class LoggingObserver(ConversionObserver):
    """Writes the hand-worked conversion trace (1-based ids) at DEBUG level."""

    def __init__(self, log=None):
        self.log = log or logger
        self._anchors: dict[int, frozenset[int]] = {}

    def state_discovered(self, index, anchors):
        self._anchors[index] = anchors
        if index == 0:
            self.log.debug("E-closure(I0) = %s = %d", _fmt_states(anchors), 1)

    def transition_recorded(self, source, symbol, moved, target_anchors, target):
        self.log.debug(
            "%s --%s--> %s",
            _fmt_states(self._anchors.get(source, ())),
            symbol,
            _fmt_states(moved),
        )
        self.log.debug(
            "E-closure%s = %s = %d",
            _fmt_states(moved),
            _fmt_states(target_anchors),
            target + 1,
        )

    def state_marked(self, index):
        self.log.debug("Mark %d", index + 1)


class SubsetConstruction:
    """
    Worklist-driven subset construction over an epsilon-NFA.

    Composite states live in a growable list and are addressed by index; a
    dict keyed by the frozen anchor set guarantees each distinct set is
    created once. Unmarked states are processed first-discovered-first, and
    symbols in alphabet order, so state numbering is reproducible.
    """

    def __init__(self, nfa: StateGraph, observer: Optional[ConversionObserver] = None):
        if not nfa.alphabet.has_epsilon:
            raise InvalidArgumentError(
                "subset construction needs an NFA whose alphabet includes epsilon"
            )
        self.nfa = nfa
        self.observer = observer or ConversionObserver()
        self.phase = Phase.UNSTARTED
        self.composites: list[CompositeState] = []
        self._index: dict[frozenset[int], int] = {}
        self._unmarked: deque[int] = deque()

    def _discover(self, anchors: frozenset[int]) -> int:
        idx = self._index.get(anchors)
        if idx is not None:
            return idx

        idx = len(self.composites)
        self.composites.append(CompositeState(anchors))
        self._index[anchors] = idx
        self._unmarked.append(idx)
        self.observer.state_discovered(idx, anchors)
        return idx

    def _mark(self, idx: int) -> None:
        composite = self.composites[idx]

        for symbol in self.nfa.alphabet:
            moved = symbol_closure(self.nfa, composite.anchors, symbol)
            target_anchors = epsilon_closure(self.nfa, moved)
            if not target_anchors:
                continue

            target = self._discover(target_anchors)
            composite.next[symbol] = target
            self.observer.transition_recorded(
                idx, symbol, moved, target_anchors, target
            )

        composite.marked = True
        self.observer.state_marked(idx)

    def run(self) -> list[CompositeState]:
        if self.phase is Phase.DONE:
            return self.composites

        self.phase = Phase.DISCOVERING
        self._discover(epsilon_closure(self.nfa, {self.nfa.start}))

        while self._unmarked:
            self._mark(self._unmarked.popleft())

        self.phase = Phase.DONE
        return self.composites

    def to_graph(self) -> StateGraph:
        self.run()
        return assemble(
            self.composites, self.nfa.final_states, self.nfa.alphabet.without_epsilon()
        )


def convert(nfa: StateGraph, observer: Optional[ConversionObserver] = None) -> StateGraph:
    """Build a (possibly partial) DFA accepting the same language as ``nfa``."""
    dfa = SubsetConstruction(nfa, observer).to_graph()
    logger.info(
        "converted NFA with %d states into DFA with %d states",
        nfa.state_count,
        dfa.state_count,
    )
    return dfa
