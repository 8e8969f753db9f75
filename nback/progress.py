"""Player progress and post-game settlement."""

from dataclasses import dataclass, field, replace
from datetime import datetime

from nback.achievements import check_achievements, unlock
from nback.rewards import PlayerRewards, RewardSummary, calculate_stars, is_perfect_game, process_rewards
from nback.scoring import TurnLogEntry
from nback.session import GameStats


@dataclass(frozen=True)
class Progress:
    rewards: PlayerRewards = field(default_factory=PlayerRewards)
    unlocked: dict[str, str] = field(default_factory=dict)  # id -> ISO 8601 unlock time
    best_scores: dict[str, int] = field(default_factory=dict)  # "COLOR-2" -> score
    last_turn_log: list[TurnLogEntry] = field(default_factory=list)


@dataclass(frozen=True)
class GameResult:
    stars: int
    perfect: bool
    rewards: RewardSummary
    new_achievements: list[str]
    new_best: bool
    progress: Progress


def settle(progress: Progress, stats: GameStats, turn_log: list[TurnLogEntry],
           now: datetime | None = None) -> GameResult:
    """Fold a finished game into the player's progress."""
    stars = calculate_stars(stats)
    perfect = is_perfect_game(stats)
    summary = process_rewards(progress.rewards, stars, perfect)

    new_ids = check_achievements(stats, progress.unlocked)
    unlocked = unlock(progress.unlocked, new_ids, now=now)

    key = stats.settings.level_key
    previous = progress.best_scores.get(key, 0)
    new_best = stats.score > previous
    best_scores = dict(progress.best_scores)
    best_scores[key] = max(previous, stats.score)

    updated = replace(
        progress,
        rewards=summary.new_totals,
        unlocked=unlocked,
        best_scores=best_scores,
        last_turn_log=list(turn_log),
    )
    return GameResult(
        stars=stars,
        perfect=perfect,
        rewards=summary,
        new_achievements=new_ids,
        new_best=new_best,
        progress=updated,
    )
