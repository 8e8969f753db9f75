"""Tests for settling a finished game into player progress."""

from datetime import datetime, timezone

from nback.config import GameSettings
from nback.progress import Progress, settle
from nback.rewards import PlayerRewards
from nback.scoring import TurnLogEntry, TurnResult
from nback.session import GameStats

NOW = datetime(2026, 3, 1, tzinfo=timezone.utc)
LOG = [TurnLogEntry(0, 0, TurnResult.NEUTRAL), TurnLogEntry(1, 10, TurnResult.CORRECT)]


def _stats(score, incorrect=0, max_streak=5):
    return GameStats(
        score=score,
        settings=GameSettings(n_level=1, stimulus_type="color"),
        max_streak=max_streak,
        incorrect_presses=incorrect,
        game_completed=True,
    )


def test_settle_perfect_game():
    """500 points at 1-back: 10 stars carry to a gem, plus the perfect gem."""
    result = settle(Progress(), _stats(500), LOG, now=NOW)
    assert result.stars == 10
    assert result.perfect
    assert result.rewards.earned == PlayerRewards(stars=10, gems=2)
    assert result.progress.rewards == PlayerRewards(gems=2)
    assert result.new_achievements == ["first_game", "score_500", "streak_5", "perfect_precision"]
    assert result.progress.unlocked["score_500"] == NOW.isoformat()
    assert result.progress.best_scores == {"COLOR-1": 500}
    assert result.new_best
    assert result.progress.last_turn_log == LOG


def test_settle_keeps_best_and_achievements():
    first = settle(Progress(), _stats(500), LOG, now=NOW).progress
    second = settle(first, _stats(120, incorrect=2, max_streak=1), LOG)
    assert not second.new_best
    assert not second.perfect
    assert second.new_achievements == []
    assert second.progress.best_scores == {"COLOR-1": 500}
    assert second.progress.unlocked == first.unlocked
    assert second.progress.rewards == PlayerRewards(stars=2, gems=2)


def test_settle_does_not_touch_input():
    start = Progress()
    settle(start, _stats(500), LOG, now=NOW)
    assert start == Progress()
