"""Card data sources.

The board generator only needs `fetch(difficulty)` returning name/artwork pairs;
anything raised here is treated by the generator as "use placeholders".
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import requests

from .board import card_count_for_difficulty
from .exceptions import CardProviderError

logger = logging.getLogger(__name__)

POKEAPI_BASE_URL = 'https://pokeapi.co/api/v2'
SPRITE_URL = 'https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon/{number}.png'


@dataclass(frozen=True)
class CardSpec:
    """Display data for one card before it is given an id."""
    name: str
    artwork_ref: str


def sprite_url(number: int) -> str:
    return SPRITE_URL.format(number=number)


# (national dex number, name) pairs served when no network source is configured.
STATIC_ROSTER: Sequence[tuple] = (
    (21, 'spearow'), (22, 'fearow'), (23, 'ekans'), (24, 'arbok'),
    (25, 'pikachu'), (26, 'raichu'), (27, 'sandshrew'), (28, 'sandslash'),
    (29, 'nidoran-f'), (30, 'nidorina'), (31, 'nidoqueen'), (32, 'nidoran-m'),
    (33, 'nidorino'), (34, 'nidoking'), (35, 'clefairy'), (36, 'clefable'),
    (37, 'vulpix'), (38, 'ninetales'), (39, 'jigglypuff'), (40, 'wigglytuff'),
)


class StaticCardProvider:
    """Draws a random sample from a fixed roster; never touches the network."""

    def __init__(self, roster: Sequence[tuple] = STATIC_ROSTER, rng: Optional[random.Random] = None) -> None:
        self.roster = list(roster)
        self.rng = rng or random.Random()

    def fetch(self, difficulty: str) -> List[CardSpec]:
        count = card_count_for_difficulty(difficulty)
        if count > len(self.roster):
            raise CardProviderError(f"roster holds {len(self.roster)} cards, {count} requested")
        picked = self.rng.sample(self.roster, count)
        return [CardSpec(name=name, artwork_ref=sprite_url(number)) for number, name in picked]


class PokeApiCardProvider:
    """Fetches a random window of Pokemon and their sprites from PokeAPI."""

    def __init__(
        self,
        base_url: str = POKEAPI_BASE_URL,
        timeout: float = 5.0,
        max_offset: int = 800,
        session: Optional[requests.Session] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.max_offset = max_offset
        self.session = session or requests.Session()
        self.rng = rng or random.Random()

    def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        response = self.session.get(url, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def fetch(self, difficulty: str) -> List[CardSpec]:
        count = card_count_for_difficulty(difficulty)
        # Random window so consecutive games show different cards
        offset = self.rng.randint(1, self.max_offset)
        try:
            data = self._get_json(f"{self.base_url}/pokemon", params={'limit': count, 'offset': offset})
            results = list(data['results'])
        except (requests.exceptions.RequestException, ValueError, KeyError, TypeError) as exc:
            raise CardProviderError(f"Failed to fetch Pokemon list: {exc}") from exc

        return [self._detail(entry, offset + i + 1) for i, entry in enumerate(results)]

    def _detail(self, entry: Dict[str, Any], fallback_number: int) -> CardSpec:
        """Resolves one list entry to a CardSpec; a failed detail lookup keeps the card."""
        try:
            name = str(entry['name'])
        except (KeyError, TypeError) as exc:
            raise CardProviderError(f"Malformed Pokemon entry: {entry!r}") from exc
        sprite: Optional[str] = None
        try:
            detail = self._get_json(entry['url'])
            sprite = detail['sprites']['front_default']
        except (requests.exceptions.RequestException, ValueError, KeyError, TypeError) as exc:
            logger.warning("Error fetching details for %s: %s", name, exc)
        if not sprite:
            sprite = sprite_url(fallback_number)
        return CardSpec(name=name, artwork_ref=str(sprite))
