"""The game state machine.

loading -> ready -> (ready | terminal_pending -> terminal(lose) | terminal(win))

All entry points hold the guard mutex for their whole body, and every
scheduled callback takes the same mutex, so no two of them interleave.
"""
from __future__ import annotations

import itertools
import logging
import random
from collections.abc import Mapping
from typing import Any, Optional

from .board import Board, card_count_for_difficulty, normalize_difficulty
from .db import DIFFICULTY_KEY, HIGH_SCORE_KEY, KeyValueStore, MemoryKeyValueStore, SqliteKeyValueStore
from .deal import BoardGenerator, shuffle_cards
from .exceptions import InvalidClickError
from .guard import SessionGuard, guarded, serialized
from .provider import PokeApiCardProvider, StaticCardProvider
from .scheduler import FeedbackScheduler
from .sound import SoundManager
from .state import ERROR, LOSE, SUCCESS, WIN, Session

logger = logging.getLogger(__name__)


def _setting(config: Any, key: str, default: Any) -> Any:
    """Reads a setting from a Flask config mapping or a Config-style class."""
    if config is None:
        return default
    if isinstance(config, Mapping):
        return config.get(key, default)
    return getattr(config, key, default)


class GameEngine:
    def __init__(
        self,
        generator: BoardGenerator,
        store: Optional[KeyValueStore] = None,
        sound: Optional[SoundManager] = None,
        timers=None,
        card_cue_delay: float = 0.4,
        commit_delay: float = 0.6,
        success_feedback: float = 0.7,
        error_feedback: float = 0.4,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.generator = generator
        self.store = store if store is not None else MemoryKeyValueStore()
        self.sound = sound or SoundManager(store=self.store)
        self.guard = SessionGuard()
        self.scheduler = FeedbackScheduler(
            self.sound,
            timers=timers,
            lock=self.guard.mutex,
            card_cue_delay=card_cue_delay,
            commit_delay=commit_delay,
        )
        self.success_feedback = success_feedback
        self.error_feedback = error_feedback
        self.rng = rng or generator.rng
        self.high_score = max(0, self.store.get_int(HIGH_SCORE_KEY, 0))
        self.difficulty = normalize_difficulty(self.store.get_string(DIFFICULTY_KEY))
        self.session: Optional[Session] = None
        self._ids = itertools.count(1)

    # ------------------------------------------------------------------
    # session lifecycle
    # ------------------------------------------------------------------
    def _new_session(self, difficulty: str) -> Session:
        previous = self.session
        if previous is not None:
            self.scheduler.cancel(previous.token)
        session_id = next(self._ids)
        session = Session(
            session_id=session_id,
            difficulty=difficulty,
            token=self.scheduler.new_token(session_id),
            high_score=self.high_score,
        )
        self.session = session
        if difficulty != self.difficulty:
            self.difficulty = difficulty
            self.store.set_string(DIFFICULTY_KEY, difficulty)
        logger.info("Session %d loading (%s)", session_id, difficulty)
        self._board_arrived(session, self.generator.generate(difficulty))
        return session

    def _board_arrived(self, session: Session, board: Board) -> None:
        if session is not self.session:
            logger.debug("Board for superseded session %d discarded", session.session_id)
            return
        session.board = board
        session.history.clear()
        session.current_score = 0
        session.final_score = None
        session.terminal = None
        self.guard.unlock(session)
        logger.info("Session %d ready with %d cards", session.session_id, len(board))

    @serialized
    def start(self, difficulty: Optional[str] = None) -> Session:
        """Starts the first session, or returns the current one if already started."""
        if self.session is not None:
            return self.session
        return self._new_session(normalize_difficulty(difficulty or self.difficulty))

    @serialized
    def play_again(self) -> Optional[Session]:
        """New board; a difficulty chosen on the game-over screen is applied now."""
        session = self.session
        if session is None:
            return None
        return self._new_session(normalize_difficulty(session.pending_difficulty or session.difficulty))

    @serialized
    def change_difficulty(self, level: Optional[str]) -> Optional[Session]:
        session = self.session
        if session is None:
            return None
        difficulty = normalize_difficulty(level)
        if self.guard.is_locked(session):
            # Game-over screen: remember the choice, keep the result on screen
            session.pending_difficulty = difficulty if difficulty != session.difficulty else None
            return session
        if difficulty == session.difficulty:
            return session
        return self._new_session(difficulty)

    @serialized
    def dismiss(self) -> Optional[Session]:
        """Closes the game-over screen without a new game. Only unlocks."""
        session = self.session
        if session is None or session.terminal is None:
            return session
        session.terminal = None
        self.guard.unlock(session)
        return session

    @serialized
    def toggle_mute(self) -> bool:
        muted = self.sound.toggle_mute()
        self.sound.play_cue('click')
        return muted

    @serialized
    def shutdown(self) -> None:
        if self.session is not None:
            self.scheduler.cancel(self.session.token)

    # ------------------------------------------------------------------
    # clicks
    # ------------------------------------------------------------------
    @guarded
    def click(self, index: int) -> Session:
        session = self.session
        board = session.board
        if board is None:
            return session
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(board):
            raise InvalidClickError(f"no card at position {index!r}")
        card = board[index]
        if card.id in session.history:
            self._lose(session, card)
        else:
            self._reveal(session, card)
        return session

    def _reveal(self, session: Session, card) -> None:
        session.history.add(card.id)
        card.revealed = True
        shuffle_cards(session.board.cards, self.rng)
        session.current_score = len(session.history)
        session.last_result = SUCCESS
        if session.current_score > self.high_score:
            self.high_score = session.current_score
            self.store.set_int(HIGH_SCORE_KEY, self.high_score)
        session.high_score = self.high_score
        if session.current_score == card_count_for_difficulty(session.difficulty):
            self.guard.lock(session, 'win')
            session.final_score = session.current_score
            session.terminal = WIN
            logger.info("Session %d won with %d", session.session_id, session.final_score)
        self._schedule_feedback_reset(session, self.success_feedback)
        self.sound.play_card_cue(card.name)
        if session.terminal == WIN:
            self.scheduler.play_win(session.token)

    def _lose(self, session: Session, card) -> None:
        # The lock goes first: nothing after this line can let another click in
        self.guard.lock(session, 'duplicate')
        session.final_score = session.current_score
        session.last_result = ERROR
        session.history.clear()
        shuffle_cards(session.board.cards, self.rng)
        logger.info("Session %d lost on %s at %d", session.session_id, card.name, session.final_score)
        self._schedule_feedback_reset(session, self.error_feedback)
        self.scheduler.play_loss_sequence(session.token, card.name, lambda: self._commit_loss(session))

    @serialized
    def _commit_loss(self, session: Session) -> None:
        if session is not self.session or session.token.cancelled:
            return
        session.current_score = 0
        session.terminal = LOSE

    def _schedule_feedback_reset(self, session: Session, delay: float) -> None:
        if session.feedback_timer is not None:
            session.feedback_timer.cancel()
            session.token.forget(session.feedback_timer)
        session.feedback_timer = self.scheduler.schedule(
            session.token, delay, lambda: self._clear_feedback(session)
        )

    @serialized
    def _clear_feedback(self, session: Session) -> None:
        if session is self.session:
            session.last_result = None
            session.feedback_timer = None


def store_from_config(config: Any) -> KeyValueStore:
    """SQLite store at MEMORY_DB, or an in-memory one when MEMORY_DB is empty."""
    db_path = _setting(config, 'MEMORY_DB', None)
    return SqliteKeyValueStore(db_path) if db_path else MemoryKeyValueStore()


def create_engine(
    config: Any = None,
    *,
    provider=None,
    store: Optional[KeyValueStore] = None,
    sound: Optional[SoundManager] = None,
    sound_backend=None,
    timers=None,
    seed: Optional[int] = None,
) -> GameEngine:
    """Builds an engine from a Config class or a Flask config mapping."""
    rng = random.Random(seed)
    if provider is None:
        if _setting(config, 'CARD_PROVIDER', 'pokeapi') == 'static':
            provider = StaticCardProvider(rng=rng)
        else:
            provider = PokeApiCardProvider(
                base_url=_setting(config, 'POKEAPI_BASE_URL', 'https://pokeapi.co/api/v2'),
                timeout=float(_setting(config, 'POKEAPI_TIMEOUT_SEC', 5)),
                max_offset=int(_setting(config, 'POKEAPI_MAX_OFFSET', 800)),
                rng=rng,
            )
    if store is None:
        store = store_from_config(config)
    if sound is None:
        sound = SoundManager(backend=sound_backend, store=store, volume=float(_setting(config, 'SOUND_VOLUME', 0.4)))
    return GameEngine(
        BoardGenerator(provider, rng=rng),
        store=store,
        sound=sound,
        timers=timers,
        card_cue_delay=int(_setting(config, 'LOSS_CARD_CUE_DELAY_MS', 400)) / 1000.0,
        commit_delay=int(_setting(config, 'LOSS_COMMIT_DELAY_MS', 600)) / 1000.0,
        success_feedback=int(_setting(config, 'SUCCESS_FEEDBACK_MS', 700)) / 1000.0,
        error_feedback=int(_setting(config, 'ERROR_FEEDBACK_MS', 400)) / 1000.0,
        rng=rng,
    )
