from __future__ import annotations

# Facade module that re-exports the memory game core.
# Kept so the Flask app, the CLI and the tests share one import surface.
# Single-responsibility modules live under memory_core/*.

from memory_core.board import (
    CARD_COUNTS,
    DEFAULT_DIFFICULTY,
    EASY,
    HARD,
    MEDIUM,
    Board,
    Card,
    card_count_for_difficulty,
    grid_columns_for_difficulty,
    normalize_difficulty,
)
from memory_core.config import Config
from memory_core.db import (
    DIFFICULTY_KEY,
    HIGH_SCORE_KEY,
    SOUND_MUTED_KEY,
    KeyValueStore,
    MemoryKeyValueStore,
    SqliteKeyValueStore,
)
from memory_core.deal import (
    BoardGenerator,
    build_board,
    placeholder_specs,
    shuffle_cards,
    validate_board,
)
from memory_core.engine import GameEngine, create_engine
from memory_core.exceptions import (
    BoardInvariantError,
    CardProviderError,
    InvalidClickError,
    MemoryGameError,
)
from memory_core.provider import CardSpec, PokeApiCardProvider, StaticCardProvider
from memory_core.scheduler import CancelToken, FeedbackScheduler, ManualTimers, ThreadingTimers
from memory_core.sound import CueQueue, SoundManager
from memory_core.state import (
    ERROR,
    LOADING,
    LOSE,
    READY,
    SUCCESS,
    TERMINAL,
    TERMINAL_PENDING,
    WIN,
    Session,
)


def main() -> None:
    # CLI driver delegated to memory_core.cli
    from memory_core.cli import main as _main
    _main()


if __name__ == '__main__':
    main()
