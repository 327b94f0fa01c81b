from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

EASY = 'easy'
MEDIUM = 'medium'
HARD = 'hard'

DEFAULT_DIFFICULTY = MEDIUM

CARD_COUNTS: Dict[str, int] = {EASY: 8, MEDIUM: 12, HARD: 16}

# Column count used by narrow layouts; wide layouts always use 4.
GRID_COLUMNS: Dict[str, int] = {EASY: 2, MEDIUM: 3, HARD: 4}


def normalize_difficulty(level: Optional[str]) -> str:
    """Maps any input onto a known difficulty, falling back to medium."""
    key = str(level or '').strip().lower()
    return key if key in CARD_COUNTS else DEFAULT_DIFFICULTY


def card_count_for_difficulty(level: Optional[str]) -> int:
    """Number of cards dealt for a difficulty (easy=8, medium=12, hard=16)."""
    return CARD_COUNTS[normalize_difficulty(level)]


def grid_columns_for_difficulty(level: Optional[str]) -> int:
    return GRID_COLUMNS[normalize_difficulty(level)]


@dataclass
class Card:
    """One face of the board. `revealed` is a display aid, never used for scoring."""
    id: int
    name: str
    artwork_ref: str
    revealed: bool = False


@dataclass
class Board:
    """Ordered arrangement of cards as currently shown to the player."""
    cards: List[Card]

    def __len__(self) -> int:
        return len(self.cards)

    def __getitem__(self, index: int) -> Card:
        return self.cards[index]

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def ids(self) -> List[int]:
        return [card.id for card in self.cards]

    def duplicate_ids(self) -> List[int]:
        """Returns every id that occurs more than once, sorted."""
        seen = set()
        dupes = set()
        for card_id in self.ids():
            if card_id in seen:
                dupes.add(card_id)
            seen.add(card_id)
        return sorted(dupes)

    def pretty(self, columns: int = 4) -> str:
        """Generates a human-readable grid of positions and card names."""
        lines: List[str] = []
        width = max((len(card.name) for card in self.cards), default=0)
        for start in range(0, len(self.cards), columns):
            row: List[str] = []
            for index in range(start, min(start + columns, len(self.cards))):
                card = self.cards[index]
                row.append(f"{index:>2} {card.name:<{width}}")
            lines.append("  ".join(row))
        return "\n".join(lines)
