"""
Reader and writer for the tabular automaton description::

    Initial State: {1}
    Final States:  {2}
    Total States:  2
    State    a     E
    1      {2}   {2}
    2      {}    {}

One row per state, one brace-delimited cell per column. The column named by
``TextFormat.epsilon_token`` holds epsilon edges.
"""

import re
from typing import Iterable, Iterator, Sequence

from fa_engine.config import TextFormat
from fa_engine.errors import FormatError, InvalidArgumentError
from fa_engine.state_graph import EPSILON, Alphabet, StateGraph, Symbol

__all__ = ["FORMAT_HELP", "parse_automaton", "format_automaton", "format_anchors"]

FORMAT_HELP = """Input Format:

Initial State: {3}
Final States:  {12,...}
Total States:  15
State    a     b     E
1      {...} {...} {...}
...    ...
"""

_INITIAL_RE = re.compile(r"\s*Initial\s+State\s*:\s*\{\s*(\S*?)\s*\}\s*")
_FINAL_RE = re.compile(r"\s*Final\s+States\s*:\s*\{([^}]*)\}\s*")
_TOTAL_RE = re.compile(r"\s*Total\s+States\s*:\s*(\S+)\s*")
_HEADER_RE = re.compile(r"\s*State\b(.*)")
_ROW_RE = re.compile(r"\s*(\S+?):?((?:\s*\{[^}]*\})*)\s*")
_CELL_RE = re.compile(r"\{([^}]*)\}")


def _numbered_lines(text: str | Iterable[str]) -> Iterator[tuple[int, str]]:
    lines = text.splitlines() if isinstance(text, str) else text
    for line_no, line in enumerate(lines, start=1):
        line = line.rstrip("\r\n")
        if line.strip():
            yield line_no, line


def _parse_id(token: str, line_no: int) -> int:
    token = token.strip()
    if not token.isdigit():
        raise FormatError(f"expected a state number, got {token!r}", line_no)
    return int(token)


def _parse_ids(body: str, line_no: int) -> list[int]:
    if not body.strip():
        return []
    return [_parse_id(token, line_no) for token in body.split(",")]


def _next_line(lines: Iterator[tuple[int, str]], what: str) -> tuple[int, str]:
    try:
        return next(lines)
    except StopIteration:
        raise FormatError(f"unexpected end of input while reading {what}") from None


def _match(pattern: re.Pattern, lines: Iterator[tuple[int, str]], what: str):
    line_no, line = _next_line(lines, what)
    match = pattern.fullmatch(line)
    if match is None:
        raise FormatError(f"malformed input while reading {what}: {line!r}", line_no)
    return line_no, match


def _to_state(graph: StateGraph, number: int, offset: int, line_no: int) -> int:
    state = number - offset
    if not 0 <= state < graph.state_count:
        raise FormatError(
            f"state {number} is outside {offset}..{graph.state_count - 1 + offset}",
            line_no,
        )
    return state


def parse_automaton(
    text: str | Iterable[str], fmt: TextFormat = TextFormat()
) -> StateGraph:
    lines = _numbered_lines(text)
    offset = fmt.offset

    init_line, match = _match(_INITIAL_RE, lines, "Initial State")
    initial = _parse_id(match.group(1), init_line)
    final_line, match = _match(_FINAL_RE, lines, "Final States")
    finals = _parse_ids(match.group(1), final_line)
    total_line, match = _match(_TOTAL_RE, lines, "Total States")
    total = _parse_id(match.group(1), total_line)
    if total == 0:
        raise FormatError("an automaton needs at least one state", total_line)

    header_line, match = _match(_HEADER_RE, lines, "alphabet")
    columns: list[Symbol] = [
        EPSILON if token == fmt.epsilon_token else token
        for token in match.group(1).split()
    ]
    if not columns:
        raise FormatError("the alphabet header names no symbols", header_line)
    try:
        alphabet = Alphabet(columns)
    except InvalidArgumentError as e:
        raise FormatError(str(e), header_line) from e

    graph = StateGraph(alphabet, total)
    graph.set_start(_to_state(graph, initial, offset, init_line))
    for number in finals:
        graph.add_final_state(_to_state(graph, number, offset, final_line))

    for row in range(total):
        line_no, match = _match(_ROW_RE, lines, f"state {row + offset}")
        label, cells = match.group(1), _CELL_RE.findall(match.group(2))
        if label != str(row + offset):
            raise FormatError(
                f"expected state {row + offset}, got {label!r}; states must be "
                "listed in order",
                line_no,
            )
        if len(cells) != len(columns):
            raise FormatError(
                f"expected {len(columns)} transition sets, got {len(cells)}", line_no
            )
        for symbol, cell in zip(columns, cells):
            for number in _parse_ids(cell, line_no):
                graph.add_transition(
                    row, _to_state(graph, number, offset, line_no), symbol
                )

    extra = next(lines, None)
    if extra is not None:
        raise FormatError(f"unexpected trailing input {extra[1]!r}", extra[0])
    return graph


def _fmt_set(states: Iterable[int], offset: int) -> str:
    return "{" + ",".join(str(st + offset) for st in sorted(states)) + "}"


def _column_name(symbol: Symbol, fmt: TextFormat) -> str:
    return fmt.epsilon_token if symbol is EPSILON else str(symbol)


def format_automaton(graph: StateGraph, fmt: TextFormat = TextFormat()) -> str:
    offset = fmt.offset
    symbols = graph.alphabet.all_symbols()
    lines = [
        f"Initial State: {_fmt_set([graph.start], offset)}",
        f"Final States:  {_fmt_set(graph.final_states, offset)}",
        f"Total States:  {graph.state_count}",
        "\t".join(["State"] + [_column_name(symbol, fmt) for symbol in symbols]),
    ]
    for state in range(graph.state_count):
        cells = [_fmt_set(graph.successors(state, symbol), offset) for symbol in symbols]
        lines.append("\t".join([str(state + offset)] + cells))
    return "\n".join(lines) + "\n"


def format_anchors(
    anchors: Sequence[Iterable[int]], fmt: TextFormat = TextFormat()
) -> str:
    """One ``state = {nfa states}`` line per DFA state."""
    offset = fmt.offset
    return "".join(
        f"{idx + offset} = {_fmt_set(states, offset)}\n"
        for idx, states in enumerate(anchors)
    )
