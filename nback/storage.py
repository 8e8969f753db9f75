"""Persistent player progress for the n-back deck.

Stores rewards, achievements and best scores in
~/.streamdeck-nback/progress.json.
"""

import json
import os
import threading
from dataclasses import asdict

from nback.progress import Progress
from nback.rewards import PlayerRewards
from nback.scoring import TurnLogEntry, TurnResult

DEFAULT_PATH = os.path.expanduser("~/.streamdeck-nback/progress.json")
FORMAT_VERSION = 1
_lock = threading.Lock()


def _load_raw(path: str) -> dict:
    try:
        with open(path) as f:
            return json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _from_raw(raw: dict) -> Progress:
    rewards = raw.get("rewards") or {}
    return Progress(
        rewards=PlayerRewards(
            stars=int(rewards.get("stars", 0)),
            gems=int(rewards.get("gems", 0)),
            trophies=int(rewards.get("trophies", 0)),
            perfect_scores=int(rewards.get("perfect_scores", 0)),
        ),
        unlocked=dict(raw.get("unlocked") or {}),
        best_scores={k: int(v) for k, v in (raw.get("best_scores") or {}).items()},
        last_turn_log=[
            TurnLogEntry(int(e["turn"]), int(e["score"]), TurnResult(e["result"]))
            for e in (raw.get("last_turn_log") or [])
        ],
    )


def _to_raw(progress: Progress) -> dict:
    return {
        "version": FORMAT_VERSION,
        "rewards": asdict(progress.rewards),
        "unlocked": dict(progress.unlocked),
        "best_scores": dict(progress.best_scores),
        "last_turn_log": [
            {"turn": e.turn, "score": e.score, "result": e.result.value}
            for e in progress.last_turn_log
        ],
    }


def load_progress(path: str | None = None) -> Progress:
    """Load saved progress. Returns a fresh record if none (or unreadable)."""
    path = os.path.expanduser(path or DEFAULT_PATH)
    return _from_raw(_load_raw(path))


def save_progress(progress: Progress, path: str | None = None) -> None:
    path = os.path.expanduser(path or DEFAULT_PATH)
    with _lock:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w") as f:
            json.dump(_to_raw(progress), f, indent=2)
