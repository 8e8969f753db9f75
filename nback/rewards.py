"""Reward cascade — stars roll up into gems, trophies and perfect scores.

Every tier below the top carries over at 10: ten stars make a gem, ten gems a
trophy, ten trophies a perfect score. Perfect scores have no cap.
"""

from dataclasses import dataclass

from nback.scoring import base_points
from nback.session import GameStats

CARRY = 10
STARS_PER_CORRECT = 5  # one star per 5 correct answers' worth of base points


@dataclass(frozen=True)
class PlayerRewards:
    stars: int = 0
    gems: int = 0
    trophies: int = 0
    perfect_scores: int = 0


@dataclass(frozen=True)
class RewardSummary:
    earned: PlayerRewards  # this session's gains, for the summary screen
    new_totals: PlayerRewards  # fully cascaded totals to persist


def calculate_stars(stats: GameStats) -> int:
    if stats.score <= 0:
        return 0
    rate = STARS_PER_CORRECT * base_points(stats.settings.n_level)
    return stats.score // rate


def is_perfect_game(stats: GameStats) -> bool:
    return stats.game_completed and stats.incorrect_presses == 0 and stats.score > 0


def _carry(low: int, high: int) -> tuple[int, int, int]:
    """Carry low into high. Returns (low, high, carried)."""
    if low < CARRY:
        return low, high, 0
    carried = low // CARRY
    return low % CARRY, high + carried, carried


def process_rewards(current: PlayerRewards, stars: int, was_perfect: bool) -> RewardSummary:
    """Add a session's stars (and perfect-game gem) to current totals.

    Pure: current is not touched. A perfect game adds one bonus gem before
    the gem tier carries, so the bonus can roll into a trophy.
    """
    gems = current.gems + (1 if was_perfect else 0)
    star_total, gems, gems_from_stars = _carry(current.stars + stars, gems)
    gems, trophies, trophies_earned = _carry(gems, current.trophies)
    trophies, perfect_scores, perfect_earned = _carry(trophies, current.perfect_scores)

    earned = PlayerRewards(
        stars=stars,
        gems=gems_from_stars + (1 if was_perfect else 0),
        trophies=trophies_earned,
        perfect_scores=perfect_earned,
    )
    new_totals = PlayerRewards(
        stars=star_total,
        gems=gems,
        trophies=trophies,
        perfect_scores=perfect_scores,
    )
    return RewardSummary(earned=earned, new_totals=new_totals)
