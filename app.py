from __future__ import annotations

import os
import threading
from typing import Any, Dict, List, Optional

from flask import Flask, jsonify, request

from memory_core.board import Board, grid_columns_for_difficulty
from memory_core.config import Config
from memory_core.engine import GameEngine, create_engine
from memory_core.exceptions import InvalidClickError
from memory_core.sound import CueQueue
from memory_core.state import Session

app = Flask(__name__)
app.config.from_object(Config)

# One game per process; created on first request so tests can swap it first.
_engine: Optional[GameEngine] = None
_cues: Optional[CueQueue] = None
_engine_lock = threading.Lock()


def set_engine(engine: Optional[GameEngine], cues: Optional[CueQueue] = None) -> None:
    """Installs (or clears, with None) the process-wide engine and its cue queue."""
    global _engine, _cues
    with _engine_lock:
        if _engine is not None and _engine is not engine:
            _engine.shutdown()
        _engine = engine
        _cues = cues


def get_engine() -> GameEngine:
    global _engine, _cues
    with _engine_lock:
        if _engine is None:
            cues = CueQueue()
            engine = create_engine(app.config, sound_backend=cues)
            _engine, _cues = engine, cues
            app.logger.info("Memory engine created (provider=%s)", app.config.get('CARD_PROVIDER'))
        engine = _engine
    engine.start()
    return engine


def _drain_cues() -> List[Dict[str, Any]]:
    return _cues.drain() if _cues is not None else []


def board_to_json(b: Board) -> List[Dict[str, Any]]:
    return [
        {"position": i, "id": int(c.id), "name": c.name, "artwork": c.artwork_ref, "revealed": bool(c.revealed)}
        for i, c in enumerate(b.cards)
    ]


def session_to_json(s: Session) -> Dict[str, Any]:
    return {
        "sessionId": int(s.session_id),
        "status": s.status,
        "difficulty": s.difficulty,
        "pendingDifficulty": s.pending_difficulty,
        "columns": grid_columns_for_difficulty(s.difficulty),
        "board": board_to_json(s.board) if s.board is not None else [],
        "currentScore": int(s.current_score),
        "highScore": int(s.high_score),
        "lastResult": s.last_result,
        "terminal": s.terminal,
        "finalScore": s.final_score,
        "locked": bool(s.locked),
    }


def _respond(engine: GameEngine, status: int = 200, **extra: Any) -> Any:
    with engine.guard.mutex:
        payload: Dict[str, Any] = {
            "ok": status < 400,
            "state": session_to_json(engine.session),
            "muted": bool(engine.sound.muted),
            "cues": _drain_cues(),
        }
    payload.update(extra)
    return jsonify(payload), status


@app.get("/api/state")
def api_state() -> Any:
    return _respond(get_engine())


@app.post("/api/click")
def api_click() -> Any:
    engine = get_engine()
    body = request.get_json(force=True, silent=True) or {}
    if not isinstance(body, dict):
        return _respond(engine, 400, error="JSON object required")
    index = body.get("index")
    if isinstance(index, bool) or not isinstance(index, int):
        return _respond(engine, 400, error="index (integer) required")
    try:
        engine.click(index)
    except InvalidClickError as e:
        app.logger.warning("Rejected click: %s", e)
        return _respond(engine, 400, error=str(e))
    return _respond(engine)


@app.post("/api/difficulty")
def api_difficulty() -> Any:
    engine = get_engine()
    body = request.get_json(force=True, silent=True) or {}
    if not isinstance(body, dict):
        return _respond(engine, 400, error="JSON object required")
    level = body.get("level")
    if not isinstance(level, str):
        return _respond(engine, 400, error="level (string) required")
    engine.change_difficulty(level)
    return _respond(engine)


@app.post("/api/play-again")
def api_play_again() -> Any:
    engine = get_engine()
    engine.play_again()
    return _respond(engine)


@app.post("/api/dismiss")
def api_dismiss() -> Any:
    engine = get_engine()
    engine.dismiss()
    return _respond(engine)


@app.post("/api/mute")
def api_mute() -> Any:
    engine = get_engine()
    engine.toggle_mute()
    return _respond(engine)


# Entrypoint for "python app.py"
if __name__ == "__main__":
    debug = os.getenv("FLASK_DEBUG", os.getenv("DEBUG", "0")).lower() in ("1", "true", "yes", "on")
    port = int(os.getenv("PORT", "5000"))
    app.run(host="0.0.0.0", port=port, debug=debug, threaded=True)
