"""Achievements — static definitions and the post-game evaluator."""

import enum
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone

from nback.session import GameStats


class AchievementCategory(str, enum.Enum):
    SCORE = "score"
    STREAK = "streak"
    LEVEL_COMPLETE = "level_complete"
    PRECISION = "precision"
    ACTION = "action"  # unlocked by an outside event, never by stats
    GENERIC = "generic"


@dataclass(frozen=True)
class Threshold:
    value: int


@dataclass(frozen=True)
class Predicate:
    test: Callable[[GameStats], bool]


Goal = Threshold | Predicate

_GOAL_SHAPES: dict[AchievementCategory, type] = {
    AchievementCategory.SCORE: Threshold,
    AchievementCategory.STREAK: Threshold,
    AchievementCategory.PRECISION: Threshold,
    AchievementCategory.ACTION: Threshold,
    AchievementCategory.LEVEL_COMPLETE: Predicate,
    AchievementCategory.GENERIC: Predicate,
}


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    description: str
    emoji: str
    category: AchievementCategory
    goal: Goal

    def __post_init__(self):
        expected = _GOAL_SHAPES[self.category]
        if not isinstance(self.goal, expected):
            raise ValueError(
                f"achievement {self.id!r}: {self.category.value} goal must be "
                f"{expected.__name__}, got {type(self.goal).__name__}"
            )


ALL_ACHIEVEMENTS: list[Achievement] = [
    Achievement(
        id="first_game",
        name="First Steps",
        description="Finish your first game.",
        emoji="\U0001F463",
        category=AchievementCategory.GENERIC,
        goal=Predicate(lambda stats: stats.game_completed),
    ),
    Achievement(
        id="score_500",
        name="High Scorer",
        description="Score 500 points in a single game.",
        emoji="\U0001F3C6",
        category=AchievementCategory.SCORE,
        goal=Threshold(500),
    ),
    Achievement(
        id="streak_5",
        name="On a Roll",
        description="Get 5 correct answers in a row.",
        emoji="\U0001F525",
        category=AchievementCategory.STREAK,
        goal=Threshold(5),
    ),
    Achievement(
        id="streak_10",
        name="Unstoppable",
        description="Get 10 correct answers in a row.",
        emoji="\U0001F680",
        category=AchievementCategory.STREAK,
        goal=Threshold(10),
    ),
    Achievement(
        id="n2_master",
        name="2-Back Master",
        description="Finish a 2-back game with 400 points or more.",
        emoji="\U0001F9E0",
        category=AchievementCategory.LEVEL_COMPLETE,
        goal=Predicate(lambda stats: (
            stats.settings.n_level == 2 and stats.score >= 400 and stats.game_completed
        )),
    ),
    Achievement(
        id="n3_pro",
        name="3-Back Pro",
        description="Finish a 3-back game with 800 points or more.",
        emoji="\U0001F31F",
        category=AchievementCategory.LEVEL_COMPLETE,
        goal=Predicate(lambda stats: (
            stats.settings.n_level == 3 and stats.score >= 800 and stats.game_completed
        )),
    ),
    Achievement(
        id="perfect_precision",
        name="Flawless",
        description="Finish a game without a single mistake.",
        emoji="✨",
        category=AchievementCategory.PRECISION,
        goal=Threshold(0),
    ),
    Achievement(
        id="resource_explorer",
        name="Explorer",
        description="Add your own stimuli to the pool for the first time.",
        emoji="\U0001F9ED",
        category=AchievementCategory.ACTION,
        goal=Threshold(1),
    ),
]

ACHIEVEMENTS_BY_ID: dict[str, Achievement] = {a.id: a for a in ALL_ACHIEVEMENTS}


def _met(achievement: Achievement, stats: GameStats) -> bool:
    goal = achievement.goal
    category = achievement.category
    if category == AchievementCategory.ACTION:
        return False
    if isinstance(goal, Predicate):
        if category in (AchievementCategory.LEVEL_COMPLETE, AchievementCategory.GENERIC):
            return bool(goal.test(stats))
        return False
    if category == AchievementCategory.SCORE:
        return stats.score >= goal.value
    if category == AchievementCategory.STREAK:
        return stats.max_streak >= goal.value
    if category == AchievementCategory.PRECISION:
        return stats.game_completed and stats.incorrect_presses == goal.value
    return False


def check_achievements(
    stats: GameStats,
    unlocked: Mapping[str, str],
    achievements: Iterable[Achievement] = ALL_ACHIEVEMENTS,
) -> list[str]:
    """Ids newly earned by this game, in definition order."""
    return [
        a.id for a in achievements
        if a.id not in unlocked and _met(a, stats)
    ]


def unlock(unlocked: Mapping[str, str], ids: Iterable[str],
           now: datetime | None = None) -> dict[str, str]:
    """Return a copy of unlocked with ids stamped. Existing stamps are kept."""
    stamp = (now or datetime.now(timezone.utc)).isoformat()
    result = dict(unlocked)
    for achievement_id in ids:
        result.setdefault(achievement_id, stamp)
    return result


def unlock_action(unlocked: Mapping[str, str], achievement_id: str,
                  now: datetime | None = None) -> dict[str, str]:
    """Unlock an ACTION achievement when its outside event happens."""
    achievement = ACHIEVEMENTS_BY_ID.get(achievement_id)
    if achievement is None:
        raise KeyError(f"Unknown achievement: {achievement_id}")
    if achievement.category != AchievementCategory.ACTION:
        raise ValueError(f"{achievement_id!r} is earned by playing, not by an action")
    return unlock(unlocked, [achievement_id], now=now)
