import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from fa_engine.config import TextFormat
from fa_engine.errors import AutomatonError
from fa_engine.logging_utils import LOG_LEVEL_ENV, configure_logging, get_logger
from fa_engine.subset_construction import LoggingObserver, SubsetConstruction
from fa_engine.text_format import (
    FORMAT_HELP,
    format_anchors,
    format_automaton,
    parse_automaton,
)

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="fa-engine",
        description="Convert an epsilon-NFA into an equivalent DFA by subset construction.",
        epilog=FORMAT_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument(
        "file", nargs="?", default=None, help="NFA description (default: stdin)"
    )
    p.add_argument(
        "--trace",
        action="store_true",
        help="Log every closure and marked state while converting.",
    )
    p.add_argument(
        "--log-level",
        default=None,
        help=f"Logging level (e.g., INFO, DEBUG). Also respects {LOG_LEVEL_ENV} env var.",
    )
    p.add_argument(
        "--epsilon-token",
        default=TextFormat.epsilon_token,
        help="Column header naming epsilon transitions (default: %(default)s).",
    )
    p.add_argument(
        "--zero-based",
        action="store_true",
        help="Number states from 0 instead of 1 in input and output.",
    )
    p.add_argument("--show-input", action="store_true", help="Echo the parsed NFA first.")
    p.add_argument(
        "--anchors",
        action="store_true",
        help="List the NFA states behind every DFA state.",
    )
    return p


def _read_input(file: Optional[str]) -> str:
    if file is None:
        return sys.stdin.read()
    return Path(file).read_text(encoding="utf-8")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.trace else args.log_level)
    fmt = TextFormat(epsilon_token=args.epsilon_token, one_based=not args.zero_based)

    try:
        nfa = parse_automaton(_read_input(args.file), fmt)
        engine = SubsetConstruction(nfa, LoggingObserver() if args.trace else None)
        dfa = engine.to_graph()
    except (AutomatonError, OSError, UnicodeDecodeError) as e:
        logger.debug("conversion failed", exc_info=True)
        print(f"fa-engine: error: {e}", file=sys.stderr)
        return 1

    if args.show_input:
        sys.stdout.write(format_automaton(nfa, fmt) + "\n")
    sys.stdout.write(format_automaton(dfa, fmt))
    if args.anchors:
        sys.stdout.write("\n" + format_anchors([c.anchors for c in engine.composites], fmt))
    return 0


if __name__ == "__main__":
    sys.exit(main())
