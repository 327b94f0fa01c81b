"""Sound cue dispatch.

The game never waits on or reads anything back from a cue. Playback itself is
done by a backend callable that receives one event dict per cue; the Flask app
queues them for the browser, the CLI prints them.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from .db import SOUND_MUTED_KEY, KeyValueStore

logger = logging.getLogger(__name__)

CUE_URLS: Dict[str, str] = {
    'click': '/sounds/click.mp3',
    'success': '/sounds/click.mp3',
    'error': '/sounds/error.mp3',
    'win': '/sounds/win.mp3',
    'lose': '/sounds/lose.mp3',
}
CRY_URL = 'https://play.pokemonshowdown.com/audio/cries/{name}.mp3'

DEFEAT_RATE = 0.7

CueEvent = Dict[str, Any]


class CueQueue:
    """Backend that collects cue events until someone drains them."""

    def __init__(self) -> None:
        self.events: List[CueEvent] = []

    def __call__(self, event: CueEvent) -> None:
        self.events.append(event)

    def drain(self) -> List[CueEvent]:
        out, self.events = self.events, []
        return out


class SoundManager:
    def __init__(
        self,
        backend: Optional[Callable[[CueEvent], None]] = None,
        store: Optional[KeyValueStore] = None,
        volume: float = 0.4,
    ) -> None:
        self.backend = backend or CueQueue()
        self.store = store
        self.volume = volume
        self.muted = store.get_bool(SOUND_MUTED_KEY, False) if store is not None else False

    def _emit(self, event: CueEvent) -> None:
        self.backend(event)

    def play_cue(self, name: str, fallback: bool = True) -> None:
        """Plays a named cue; failures are logged and never raised."""
        if self.muted or name not in CUE_URLS:
            return
        try:
            self._emit({'cue': name, 'url': CUE_URLS[name], 'volume': self.volume, 'rate': 1.0})
        except Exception as exc:
            logger.warning("Error playing sound %s: %s", name, exc)
            if fallback and name != 'click':
                self.play_cue('click', fallback=False)

    def play_card_cue(self, card_name: str, is_defeat: bool = False) -> None:
        """Plays the generic cue right away, then the card's own cry."""
        if self.muted:
            return
        self.play_cue('error' if is_defeat else 'success', fallback=False)
        volume = self.volume * DEFEAT_RATE if is_defeat else self.volume
        try:
            self._emit({
                'cue': 'card',
                'card': card_name,
                'url': CRY_URL.format(name=card_name.lower()),
                'volume': volume,
                'rate': DEFEAT_RATE if is_defeat else 1.0,
            })
        except Exception as exc:
            logger.warning("Error playing card sound for %s: %s", card_name, exc)

    def set_volume(self, volume: float) -> None:
        self.volume = max(0.0, min(1.0, float(volume)))

    def toggle_mute(self) -> bool:
        """Flips and persists the mute flag; returns the new value."""
        self.muted = not self.muted
        if self.store is not None:
            self.store.set_bool(SOUND_MUTED_KEY, self.muted)
        return self.muted
