"""The single input lock of a game.

`SessionGuard` owns two things: the re-entrant mutex that makes each engine
entry point run to completion before the next starts, and the read/write of
the `locked` field on the current Session. The lock lives on the Session
record itself, never on a copy, so any caller that reads the engine's current
Session sees a lock the instant it was written.
"""
from __future__ import annotations

import functools
import logging
import threading
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

F = TypeVar('F', bound=Callable[..., Any])


class SessionGuard:
    def __init__(self) -> None:
        self.mutex = threading.RLock()

    @staticmethod
    def is_locked(session) -> bool:
        return session is not None and bool(session.locked)

    def lock(self, session, reason: str = '') -> bool:
        """Check-and-set. Returns False when the session was already locked."""
        with self.mutex:
            if session.locked:
                return False
            session.locked = True
        logger.debug("Session %s locked%s", session.session_id, f" ({reason})" if reason else '')
        return True

    def unlock(self, session) -> None:
        with self.mutex:
            session.locked = False


def serialized(method: F) -> F:
    """Runs an engine method under the guard mutex."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.guard.mutex:
            return method(self, *args, **kwargs)
    return wrapper  # type: ignore[return-value]


def guarded(method: F) -> F:
    """Like `serialized`, but a locked or missing session turns the call into a no-op.

    The lock is read before anything else in the method runs; the current
    session is returned unchanged when the call is refused.
    """
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.guard.mutex:
            session: Optional[Any] = self.session
            if session is None or self.guard.is_locked(session):
                logger.debug("%s ignored while session is locked", method.__name__)
                return session
            return method(self, *args, **kwargs)
    return wrapper  # type: ignore[return-value]
