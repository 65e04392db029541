import operator
from typing import Hashable, Iterable, Iterator

from scipy.sparse import csr_matrix, lil_matrix

from fa_engine.errors import InvalidArgumentError, OutOfRangeError, UnknownSymbolError

__all__ = ["EPSILON", "Alphabet", "StateGraph", "build_graph"]

Symbol = Hashable


class _Epsilon:
    """The empty-word label. A singleton that never equals a user symbol."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __reduce__(self):
        return _Epsilon, ()

    def __repr__(self):
        return "EPSILON"

    def __str__(self):
        return "ε"


EPSILON = _Epsilon()


class Alphabet:
    """
    Ordered input alphabet.

    Iterating, ``len`` and ``symbols`` only show the visible symbols; epsilon,
    when present, is reachable through ``has_epsilon`` and ``all_symbols``.
    """

    def __init__(self, symbols: Iterable[Symbol], epsilon: bool = False):
        symbols = tuple(symbols)
        visible = tuple(s for s in symbols if s is not EPSILON)
        index = {s: i for i, s in enumerate(visible)}
        if len(index) != len(visible):
            raise InvalidArgumentError(f"duplicate symbols in alphabet {visible!r}")
        if len(symbols) - len(visible) > 1:
            raise InvalidArgumentError("epsilon appears more than once in alphabet")

        self._symbols = visible
        self._index = index
        self._epsilon = epsilon or len(visible) != len(symbols)

    @property
    def symbols(self) -> tuple:
        return self._symbols

    @property
    def has_epsilon(self) -> bool:
        return self._epsilon

    def all_symbols(self) -> tuple:
        return self._symbols + (EPSILON,) if self._epsilon else self._symbols

    def without_epsilon(self) -> "Alphabet":
        return Alphabet(self._symbols)

    def with_epsilon(self) -> "Alphabet":
        return Alphabet(self._symbols, epsilon=True)

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols)

    def __len__(self) -> int:
        return len(self._symbols)

    def __contains__(self, symbol) -> bool:
        if symbol is EPSILON:
            return self._epsilon
        try:
            return symbol in self._index
        except TypeError:
            return False

    def __eq__(self, other):
        return (
            isinstance(other, Alphabet)
            and self._symbols == other._symbols
            and self._epsilon == other._epsilon
        )

    def __hash__(self):
        return hash((self._symbols, self._epsilon))

    def __repr__(self):
        return f"Alphabet({list(self.all_symbols())!r})"


def _as_int(value, what: str) -> int:
    # floats and numeric strings are rejected, not truncated
    try:
        return operator.index(value)
    except TypeError:
        raise InvalidArgumentError(
            f"{what} must be an integer, got {value!r}"
        ) from None


class StateGraph:
    """
    Labeled transition graph with states ``0 .. state_count - 1``.

    Every symbol of the alphabet (epsilon included, when present) owns a
    boolean ``state_count x state_count`` sparse adjacency matrix: row ``s``
    is the bit vector of destinations of ``s`` under that symbol. The state
    count is fixed at construction time.
    """

    def __init__(
        self,
        alphabet: Alphabet | Iterable[Symbol],
        state_count: int,
        start: int = 0,
        final_states: Iterable[int] = (),
    ):
        if not isinstance(alphabet, Alphabet):
            alphabet = Alphabet(alphabet)
        state_count = _as_int(state_count, "state count")
        if state_count <= 0:
            raise InvalidArgumentError(
                f"state count must be positive, got {state_count}"
            )

        self._alphabet = alphabet
        self._state_count = state_count
        self._adjacency_matrices: dict[Symbol, lil_matrix] = {
            symbol: lil_matrix((self._state_count, self._state_count), dtype=bool)
            for symbol in alphabet.all_symbols()
        }
        self._csr_cache: dict[Symbol, csr_matrix] = {}
        self._start = 0
        self._final_states: set[int] = set()

        self.set_start(start)
        for state in final_states:
            self.add_final_state(state)

    @property
    def alphabet(self) -> Alphabet:
        return self._alphabet

    @property
    def state_count(self) -> int:
        return self._state_count

    @property
    def start(self) -> int:
        return self._start

    @property
    def final_states(self) -> frozenset[int]:
        return frozenset(self._final_states)

    @property
    def is_nfa(self) -> bool:
        return self._alphabet.has_epsilon

    def check_state(self, state: int) -> int:
        state = _as_int(state, "state id")
        if not 0 <= state < self._state_count:
            raise OutOfRangeError(state, self._state_count)
        return state

    def check_symbol(self, symbol: Symbol) -> Symbol:
        if symbol not in self._alphabet:
            raise UnknownSymbolError(symbol)
        return symbol

    def set_start(self, state: int) -> None:
        try:
            self._start = self.check_state(state)
        except OutOfRangeError as e:
            raise InvalidArgumentError(f"start {e}") from e

    def add_final_state(self, state: int) -> None:
        try:
            self._final_states.add(self.check_state(state))
        except OutOfRangeError as e:
            raise InvalidArgumentError(f"final {e}") from e

    def remove_final_state(self, state: int) -> None:
        self._final_states.discard(self.check_state(state))

    def add_transition(self, from_st: int, to_st: int, symbol: Symbol) -> None:
        self._set_edge(from_st, to_st, symbol, True)

    def remove_transition(self, from_st: int, to_st: int, symbol: Symbol) -> None:
        self._set_edge(from_st, to_st, symbol, False)

    def _set_edge(self, from_st: int, to_st: int, symbol: Symbol, value: bool) -> None:
        from_idx, to_idx = self.check_state(from_st), self.check_state(to_st)
        matrix = self._adjacency_matrices[self.check_symbol(symbol)]
        if bool(matrix[from_idx, to_idx]) == value:
            return
        matrix[from_idx, to_idx] = value
        self._csr_cache.pop(symbol, None)

    def successors(self, state: int, symbol: Symbol) -> frozenset[int]:
        matrix = self._adjacency_matrices[self.check_symbol(symbol)]
        return frozenset(matrix.rows[self.check_state(state)])

    def adjacency_matrix(self, symbol: Symbol) -> csr_matrix:
        """Boolean adjacency matrix of ``symbol``. Shared; do not modify."""
        symbol = self.check_symbol(symbol)
        if symbol not in self._csr_cache:
            self._csr_cache[symbol] = self._adjacency_matrices[symbol].tocsr()
        return self._csr_cache[symbol]

    def transitions(self) -> Iterator[tuple[int, Symbol, int]]:
        for from_idx in range(self._state_count):
            for symbol in self._alphabet.all_symbols():
                for to_idx in self._adjacency_matrices[symbol].rows[from_idx]:
                    yield from_idx, symbol, to_idx

    def is_deterministic(self) -> bool:
        if self._alphabet.has_epsilon:
            return False
        return all(
            len(row) <= 1
            for matrix in self._adjacency_matrices.values()
            for row in matrix.rows
        )

    def __eq__(self, other):
        if not isinstance(other, StateGraph):
            return NotImplemented
        return (
            self._alphabet == other._alphabet
            and self._state_count == other._state_count
            and self._start == other._start
            and self._final_states == other._final_states
            and list(self.transitions()) == list(other.transitions())
        )

    __hash__ = None

    def __repr__(self):
        return (
            f"StateGraph(states={self._state_count}, alphabet={self._alphabet!r}, "
            f"start={self._start}, final={sorted(self._final_states)})"
        )


def build_graph(
    alphabet: Alphabet | Iterable[Symbol],
    state_count: int,
    start: int,
    final_states: Iterable[int],
) -> StateGraph:
    return StateGraph(alphabet, state_count, start, final_states)
