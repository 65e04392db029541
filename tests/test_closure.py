import pytest

from fa_engine.closure import accepts, epsilon_closure, symbol_closure
from fa_engine.errors import OutOfRangeError, UnknownSymbolError
from fa_engine.state_graph import EPSILON, StateGraph, build_graph


@pytest.fixture
def chain_nfa() -> StateGraph:
    """0 -E-> 1 -E-> 2 -E-> 3, 3 -a-> 4, 1 -a-> 0, 4 -E-> 4, 5 isolated."""
    graph = build_graph(["a", "b", EPSILON], 6, 0, {4})
    for from_st in range(3):
        graph.add_transition(from_st, from_st + 1, EPSILON)
    graph.add_transition(3, 4, "a")
    graph.add_transition(1, 0, "a")
    graph.add_transition(4, 4, EPSILON)
    return graph


class TestSymbolClosure:
    def test_union_of_successors(self, chain_nfa):
        assert symbol_closure(chain_nfa, {1, 3}, "a") == {0, 4}

    def test_no_edges(self, chain_nfa):
        assert symbol_closure(chain_nfa, {0, 1, 2}, "b") == frozenset()
        assert symbol_closure(chain_nfa, set(), "a") == frozenset()

    def test_does_not_follow_epsilon(self, chain_nfa):
        assert symbol_closure(chain_nfa, {0}, "a") == frozenset()

    def test_accepts_duplicates_in_anchors(self, chain_nfa):
        assert symbol_closure(chain_nfa, [3, 3, 1], "a") == {0, 4}

    def test_validation(self, chain_nfa):
        with pytest.raises(UnknownSymbolError):
            symbol_closure(chain_nfa, {0}, "z")
        with pytest.raises(OutOfRangeError):
            symbol_closure(chain_nfa, {6}, "a")


class TestEpsilonClosure:
    def test_transitive(self, chain_nfa):
        assert epsilon_closure(chain_nfa, {0}) == {0, 1, 2, 3}
        assert epsilon_closure(chain_nfa, {2}) == {2, 3}

    def test_contains_anchors_without_epsilon_edges(self, chain_nfa):
        assert epsilon_closure(chain_nfa, {5}) == {5}
        assert epsilon_closure(chain_nfa, set()) == frozenset()

    def test_self_loop(self, chain_nfa):
        assert epsilon_closure(chain_nfa, {4}) == {4}

    def test_cycle(self):
        graph = StateGraph(["a", EPSILON], 3)
        graph.add_transition(0, 1, EPSILON)
        graph.add_transition(1, 2, EPSILON)
        graph.add_transition(2, 0, EPSILON)
        for st in range(3):
            assert epsilon_closure(graph, {st}) == {0, 1, 2}

    def test_long_chain_is_not_recursive(self):
        state_count = 5000
        graph = StateGraph([EPSILON], state_count)
        for st in range(state_count - 1):
            graph.add_transition(st, st + 1, EPSILON)
        assert len(epsilon_closure(graph, {0})) == state_count

    def test_graph_without_epsilon(self):
        graph = StateGraph(["a"], 2)
        graph.add_transition(0, 1, "a")
        assert epsilon_closure(graph, {0}) == {0}

    @pytest.mark.parametrize("anchors", [{0}, {2}, {3, 5}, {1, 4}, set()])
    def test_monotone_and_idempotent(self, chain_nfa, anchors):
        closure = epsilon_closure(chain_nfa, anchors)
        assert anchors <= closure
        assert epsilon_closure(chain_nfa, closure) == closure


class TestAccepts:
    @pytest.mark.parametrize(
        "word,expected",
        [
            ("a", True),
            ("aa", True),
            ("", False),
            ("b", False),
            ("ab", False),
            ("x", False),
        ],
    )
    def test_words(self, chain_nfa, word, expected):
        assert accepts(chain_nfa, word) == expected

    def test_epsilon_is_not_a_letter(self, chain_nfa):
        assert not accepts(chain_nfa, [EPSILON, "a"])

    def test_empty_word_on_final_start(self):
        assert accepts(build_graph(["a"], 1, 0, {0}), [])
