__all__ = [
    "AutomatonError",
    "InvalidArgumentError",
    "OutOfRangeError",
    "UnknownSymbolError",
    "FormatError",
]


class AutomatonError(Exception):
    """Base class for every error raised by fa_engine."""


class InvalidArgumentError(AutomatonError, ValueError):
    pass


class OutOfRangeError(InvalidArgumentError, IndexError):
    def __init__(self, state: int, state_count: int):
        super().__init__(f"state {state} is outside [0, {state_count})")
        self.state = state
        self.state_count = state_count


class UnknownSymbolError(InvalidArgumentError, LookupError):
    def __init__(self, symbol):
        super().__init__(f"symbol {symbol!r} is not in the alphabet")
        self.symbol = symbol


class FormatError(InvalidArgumentError):
    """Malformed textual automaton description."""

    def __init__(self, message: str, line_no: int | None = None):
        if line_no is not None:
            message = f"line {line_no}: {message}"
        super().__init__(message)
        self.line_no = line_no
