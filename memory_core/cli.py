from __future__ import annotations

import argparse
import logging
import random
from typing import Any, Dict, Optional

from .board import CARD_COUNTS, grid_columns_for_difficulty
from .config import Config
from .db import SqliteKeyValueStore
from .engine import create_engine
from .exceptions import InvalidClickError
from .provider import PokeApiCardProvider, StaticCardProvider
from .scheduler import ManualTimers
from .state import TERMINAL, TERMINAL_PENDING

HELP = "Commands: <n> reveal card n | d <easy|medium|hard> | p play again | x dismiss | m mute | q quit"


def _print_cue(event: Dict[str, Any]) -> None:
    if event.get('cue') == 'card':
        print(f"  ♪ {event['card']}{' (defeat)' if event.get('rate', 1.0) < 1.0 else ''}")
    else:
        print(f"  ♪ {event['cue']}")


def _show(engine) -> None:
    s = engine.session
    print()
    print(f"[{s.difficulty}] score {s.current_score}  best {s.high_score}")
    if s.status == TERMINAL:
        title = 'Congratulations!' if s.terminal == 'win' else 'Game Over!'
        print(f"{title} Final score: {s.final_score}. 'p' to play again.")
        if s.pending_difficulty:
            print(f"Next game: {s.pending_difficulty}")
        return
    print(s.board.pretty(columns=max(4, grid_columns_for_difficulty(s.difficulty))))


def build_provider(kind: str, seed: Optional[int] = None, config=Config):
    """Card source for terminal play; both kinds draw from a seeded RNG."""
    rng = random.Random(seed)
    if kind == 'static':
        return StaticCardProvider(rng=rng)
    return PokeApiCardProvider(
        base_url=config.POKEAPI_BASE_URL,
        timeout=config.POKEAPI_TIMEOUT_SEC,
        max_offset=config.POKEAPI_MAX_OFFSET,
        rng=rng,
    )


def main() -> None:
    parser = argparse.ArgumentParser(description='Memory match: reveal every card exactly once')
    parser.add_argument('--difficulty', choices=sorted(CARD_COUNTS), default=None, help='Starting difficulty')
    parser.add_argument('--db', default=Config.MEMORY_DB, help='SQLite file for high score and settings')
    parser.add_argument('--seed', type=int, default=None, help='RNG seed for card selection and shuffles')
    parser.add_argument('--provider', choices=['static', 'pokeapi'], default='static', help='Card source')
    parser.add_argument('--verbose', action='store_true', help='Log engine events')
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    timers = ManualTimers()
    store = SqliteKeyValueStore(args.db)
    provider = build_provider(args.provider, args.seed)
    engine = create_engine(Config, provider=provider, store=store, sound_backend=_print_cue, timers=timers, seed=args.seed)
    engine.start(args.difficulty)
    print(HELP)

    while True:
        _show(engine)
        try:
            text = input('> ').strip().lower()
        except EOFError:
            break
        if not text:
            continue
        if text == 'q':
            break
        if text == 'p':
            engine.play_again()
        elif text == 'x':
            engine.dismiss()
        elif text == 'm':
            print('Sound muted.' if engine.toggle_mute() else 'Sound on.')
        elif text.startswith('d '):
            engine.change_difficulty(text[2:].strip())
        else:
            try:
                engine.click(int(text))
            except ValueError:
                print(HELP)
                continue
            except InvalidClickError as exc:
                print(f"error: {exc}")
                continue
            if engine.session.status == TERMINAL_PENDING:
                print('Already picked that one!')
        # Play out any feedback before the next prompt
        timers.run_all()
    engine.shutdown()
