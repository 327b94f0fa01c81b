from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Set

from .board import Board
from .scheduler import CancelToken

SUCCESS = 'success'
ERROR = 'error'

WIN = 'win'
LOSE = 'lose'

LOADING = 'loading'
READY = 'ready'
TERMINAL_PENDING = 'terminal_pending'
TERMINAL = 'terminal'


@dataclass
class Session:
    """One playthrough, from board load to the next board load.

    Mutated only by GameEngine entry points. `current_score` equals
    `len(history)` except while a loss is pending: the history is already
    cleared but the score keeps its value until the deferred commit zeroes it.
    """
    session_id: int
    difficulty: str
    token: CancelToken
    high_score: int = 0
    board: Optional[Board] = None
    history: Set[int] = field(default_factory=set)
    current_score: int = 0
    pending_difficulty: Optional[str] = None
    last_result: Optional[str] = None  # 'success' | 'error'
    terminal: Optional[str] = None  # 'win' | 'lose'
    final_score: Optional[int] = None
    locked: bool = False
    feedback_timer: Optional[Any] = field(default=None, repr=False)

    @property
    def status(self) -> str:
        if self.board is None:
            return LOADING
        if self.terminal is not None:
            return TERMINAL
        if self.locked:
            return TERMINAL_PENDING
        return READY
