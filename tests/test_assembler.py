import pytest

from fa_engine.assembler import assemble
from fa_engine.errors import InvalidArgumentError
from fa_engine.state_graph import Alphabet
from fa_engine.subset_construction import CompositeState


def test_assemble_links_and_final_states():
    composites = [
        CompositeState(frozenset({0, 1}), {"a": 1, "b": 0}),
        CompositeState(frozenset({2}), {"b": 2}),
        CompositeState(frozenset({3, 4})),
    ]
    dfa = assemble(composites, {1, 4}, Alphabet(["a", "b"]))

    assert dfa.state_count == 3
    assert dfa.start == 0
    assert dfa.final_states == {0, 2}
    assert list(dfa.transitions()) == [(0, "a", 1), (0, "b", 0), (1, "b", 2)]
    assert dfa.is_deterministic()


def test_assemble_ignores_links_for_symbols_outside_alphabet():
    composites = [CompositeState(frozenset({0}), {"a": 0, "z": 0})]
    dfa = assemble(composites, set(), Alphabet(["a"]))
    assert list(dfa.transitions()) == [(0, "a", 0)]
    assert dfa.final_states == frozenset()


@pytest.mark.parametrize(
    "composites,alphabet",
    [
        ([], Alphabet(["a"])),
        ([CompositeState(frozenset({0}))], Alphabet(["a"], epsilon=True)),
    ],
)
def test_assemble_rejects_bad_input(composites, alphabet):
    with pytest.raises(InvalidArgumentError):
        assemble(composites, {0}, alphabet)
