import io

import pytest

from fa_engine.cli import main

NFA_TEXT = """\
Initial State: {1}
Final States:  {2}
Total States:  2
State    a     E
1      {2}   {2}
2      {}    {}
"""

DFA_TEXT = """\
Initial State: {1}
Final States:  {1,2}
Total States:  2
State\ta
1\t{2}
2\t{}
"""


@pytest.fixture
def nfa_file(tmp_path):
    path = tmp_path / "nfa.txt"
    path.write_text(NFA_TEXT, encoding="utf-8")
    return path


def test_convert_file(nfa_file, capsys):
    assert main([str(nfa_file)]) == 0
    assert capsys.readouterr().out == DFA_TEXT


def test_convert_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO(NFA_TEXT))
    assert main([]) == 0
    assert capsys.readouterr().out == DFA_TEXT


def test_anchors_and_show_input(nfa_file, capsys):
    assert main([str(nfa_file), "--anchors", "--show-input"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Initial State: {1}\nFinal States:  {2}\n")
    assert "State\ta\tE\n" in out
    assert out.endswith(DFA_TEXT + "\n1 = {1,2}\n2 = {2}\n")


def test_zero_based(tmp_path, capsys):
    path = tmp_path / "nfa.txt"
    path.write_text(
        NFA_TEXT.replace("{1}", "{0}")
        .replace("{2}", "{1}")
        .replace("\n1 ", "\n0 ")
        .replace("\n2 ", "\n1 ")
        .replace(" E\n", " eps\n"),
        encoding="utf-8",
    )
    assert main([str(path), "--zero-based", "--epsilon-token", "eps"]) == 0
    assert capsys.readouterr().out.startswith(
        "Initial State: {0}\nFinal States:  {0,1}\n"
    )


def test_trace(nfa_file, capsys, caplog):
    assert main([str(nfa_file), "--trace"]) == 0
    assert capsys.readouterr().out == DFA_TEXT
    assert "E-closure(I0) = {1,2} = 1" in caplog.text
    assert "Mark 2" in caplog.text


def test_malformed_input(tmp_path, capsys):
    path = tmp_path / "nfa.txt"
    path.write_text(NFA_TEXT.replace("Total States:  2", "Total States: none"))
    assert main([str(path)]) == 1
    assert "line 3" in capsys.readouterr().err


def test_missing_epsilon_column(tmp_path, capsys):
    path = tmp_path / "nfa.txt"
    path.write_text(NFA_TEXT.replace(" E\n", " b\n"))
    assert main([str(path)]) == 1
    assert "epsilon" in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "absent.txt")]) == 1
    assert "fa-engine: error" in capsys.readouterr().err


def test_undecodable_file(tmp_path, capsys):
    path = tmp_path / "nfa.txt"
    path.write_bytes(b"\xff\xfeInitial State: {1}\n")
    assert main([str(path)]) == 1
    assert "fa-engine: error" in capsys.readouterr().err


def test_help_shows_input_format(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["--help"])
    assert exc_info.value.code == 0
    assert "Initial State: {3}" in capsys.readouterr().out
