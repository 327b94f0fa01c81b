from __future__ import annotations

import logging
import random
from typing import List, MutableSequence, Optional, Sequence, TypeVar

from .board import Board, Card, card_count_for_difficulty, normalize_difficulty
from .exceptions import BoardInvariantError
from .provider import CardSpec, sprite_url

logger = logging.getLogger(__name__)

T = TypeVar('T')


def shuffle_cards(items: MutableSequence[T], rng: Optional[random.Random] = None) -> MutableSequence[T]:
    """Shuffles in place with Fisher-Yates and returns the same sequence.

    Walks i from the last index down to 1 and swaps with a uniform j in [0, i].
    """
    rand = rng or random.Random()
    for i in range(len(items) - 1, 0, -1):
        j = rand.randint(0, i)
        items[i], items[j] = items[j], items[i]
    return items


def placeholder_specs(count: int) -> List[CardSpec]:
    """Deterministic stand-in cards used when the data source is unavailable."""
    return [CardSpec(name=f"pokemon-{i + 1}", artwork_ref=sprite_url(i + 1)) for i in range(count)]


def validate_board(board: Board, expected_size: int) -> None:
    dupes = board.duplicate_ids()
    if dupes:
        logger.error("Generated board has duplicate card ids: %s", dupes)
        raise BoardInvariantError(f"duplicate card ids {dupes}")
    if len(board) != expected_size:
        logger.error("Generated board has %d cards, expected %d", len(board), expected_size)
        raise BoardInvariantError(f"board size {len(board)} != {expected_size}")


def build_board(specs: Sequence[CardSpec], rng: Optional[random.Random] = None) -> Board:
    """Assigns ids 0..n-1 in source order, then shuffles."""
    cards = [Card(id=i, name=spec.name, artwork_ref=spec.artwork_ref) for i, spec in enumerate(specs)]
    shuffle_cards(cards, rng)
    return Board(cards=cards)


class BoardGenerator:
    """Turns a difficulty into a shuffled board. Never fails on data-source errors."""

    def __init__(self, provider, seed: Optional[int] = None, rng: Optional[random.Random] = None) -> None:
        self.provider = provider
        self.rng = rng or random.Random(seed)

    def _request_specs(self, difficulty: str, count: int) -> List[CardSpec]:
        try:
            specs = list(self.provider.fetch(difficulty))
        except Exception as exc:
            logger.warning("Card provider failed for %s, using placeholders: %s", difficulty, exc)
            return placeholder_specs(count)
        if len(specs) < count:
            logger.warning("Card provider returned %d of %d cards, using placeholders", len(specs), count)
            return placeholder_specs(count)
        return specs[:count]

    def generate(self, difficulty: Optional[str]) -> Board:
        level = normalize_difficulty(difficulty)
        count = card_count_for_difficulty(level)
        board = build_board(self._request_specs(level, count), self.rng)
        validate_board(board, count)
        return board
