from dataclasses import asdict, dataclass
from typing import Any, Dict
import json

__all__ = ["TextFormat"]


@dataclass(frozen=True)
class TextFormat:
    """Conventions of the tabular automaton description.

    ``epsilon_token`` is the column header standing for the empty word;
    ``one_based`` selects 1-based state numbers in text (the graph itself is
    always 0-based).
    """

    epsilon_token: str = "E"
    one_based: bool = True

    @property
    def offset(self) -> int:
        return 1 if self.one_based else 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "TextFormat":
        return TextFormat(**d)

    @staticmethod
    def from_json(s: str) -> "TextFormat":
        return TextFormat.from_dict(json.loads(s))
