"""Session-tagged, cancelable timers for post-click feedback.

Every callback belongs to a CancelToken issued for one Session. Cancelling the
token cancels the underlying timers and marks the token so a callback that is
already in flight finds it cancelled when it gets the lock and returns early.
"""
from __future__ import annotations

import heapq
import itertools
import logging
import threading
from contextlib import nullcontext
from typing import Any, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class ThreadingTimers:
    """Real-time backend: one daemon threading.Timer per callback."""

    def call_later(self, delay: float, fn: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(max(0.0, delay), fn)
        timer.daemon = True
        timer.start()
        return timer


class ManualTimer:
    def __init__(self, due: float, fn: Callable[[], None]) -> None:
        self.due = due
        self.fn = fn
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimers:
    """Deterministic backend: time only moves when `advance` is called."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: List[Tuple[float, int, ManualTimer]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, fn: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.now + max(0.0, delay), fn)
        heapq.heappush(self._queue, (timer.due, next(self._seq), timer))
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for _, _, t in self._queue if not t.cancelled)

    def advance(self, seconds: float) -> int:
        """Moves the clock forward, firing due timers in order. Returns how many fired."""
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            self.now = max(self.now, due)
            if timer.cancelled:
                continue
            timer.fn()
            fired += 1
        self.now = target
        return fired

    def run_all(self) -> int:
        """Fires everything still queued, including timers scheduled while firing."""
        fired = 0
        while self._queue:
            fired += self.advance(max(0.0, self._queue[0][0] - self.now))
        return fired


class CancelToken:
    """Handle for all timers scheduled on behalf of one Session."""

    def __init__(self, session_id: int) -> None:
        self.session_id = session_id
        self.cancelled = False
        self._handles: List[Any] = []

    def track(self, handle: Any) -> None:
        self._handles.append(handle)

    def forget(self, handle: Any) -> None:
        try:
            self._handles.remove(handle)
        except ValueError:
            pass

    @property
    def outstanding(self) -> int:
        return len(self._handles)

    def cancel(self) -> int:
        """Cancels every outstanding timer; returns how many were cancelled."""
        count = len(self._handles)
        for handle in self._handles:
            handle.cancel()
        self._handles = []
        self.cancelled = True
        return count


class FeedbackScheduler:
    """Sequences timed cues and the deferred loss commit.

    Callbacks run under `lock` (the engine's entry-point mutex) so they are
    atomic with respect to clicks and other entry points.
    """

    def __init__(
        self,
        sound,
        timers=None,
        lock=None,
        card_cue_delay: float = 0.4,
        commit_delay: float = 0.6,
    ) -> None:
        self.sound = sound
        self.timers = timers or ThreadingTimers()
        self.lock = lock
        self.card_cue_delay = card_cue_delay
        self.commit_delay = commit_delay

    def new_token(self, session_id: int) -> CancelToken:
        return CancelToken(session_id)

    def cancel(self, token: CancelToken) -> int:
        count = token.cancel()
        if count:
            logger.debug("Cancelled %d timer(s) for session %s", count, token.session_id)
        return count

    def schedule(self, token: CancelToken, delay: float, callback: Callable[[], None]) -> Optional[Any]:
        """Runs `callback` after `delay` seconds unless `token` is cancelled first."""
        if token.cancelled:
            return None
        holder: dict = {}

        def fire() -> None:
            with self.lock if self.lock is not None else nullcontext():
                token.forget(holder.get('handle'))
                if token.cancelled:
                    logger.debug("Dropped stale callback for session %s", token.session_id)
                    return
                callback()

        handle = self.timers.call_later(delay, fire)
        holder['handle'] = handle
        token.track(handle)
        return handle

    def play_loss_sequence(self, token: CancelToken, card_name: str, commit: Callable[[], None]) -> None:
        """error cue now, card cue after D1, then commit and lose cue after D2 more."""
        self.sound.play_cue('error')

        def card_cue() -> None:
            self.sound.play_card_cue(card_name, is_defeat=True)
            self.schedule(token, self.commit_delay, finish)

        def finish() -> None:
            commit()
            self.sound.play_cue('lose')

        self.schedule(token, self.card_cue_delay, card_cue)

    def play_win(self, token: CancelToken) -> None:
        if not token.cancelled:
            self.sound.play_cue('win')
