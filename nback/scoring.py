"""Scoring and streak tracking for one session."""

import enum
import math
from dataclasses import dataclass


class TurnResult(str, enum.Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class TurnLogEntry:
    turn: int  # turns completed so far
    score: int
    result: TurnResult


def base_points(n_level: int) -> int:
    """Points for a correct answer, doubling with every n-back level."""
    return 10 * 2 ** (n_level - 1)


def penalty(n_level: int) -> int:
    return math.ceil(base_points(n_level) / 2)


class ScoreKeeper:
    def __init__(self, n_level: int, keep_streak_on_pass: bool = True):
        self.n_level = n_level
        self.keep_streak_on_pass = keep_streak_on_pass
        self.base = base_points(n_level)
        self.penalty = penalty(n_level)
        self.reset()

    def reset(self):
        self.score = 0
        self.streak = 0
        self.max_streak = 0
        self.incorrect_presses = 0
        self.last_result = TurnResult.NEUTRAL
        self.log: list[TurnLogEntry] = [TurnLogEntry(0, 0, TurnResult.NEUTRAL)]

    def correct(self) -> int:
        """Score a correct answer. Returns the new streak."""
        self.streak += 1
        combo = (self.streak - 1) * 5 * self.n_level
        self.score += self.base + combo
        if self.streak > self.max_streak:
            self.max_streak = self.streak
        self.last_result = TurnResult.CORRECT
        return self.streak

    def incorrect(self):
        """Score a wrong answer or a missed match."""
        self.score = max(0, self.score - self.penalty)
        self.streak = 0
        self.incorrect_presses += 1
        self.last_result = TurnResult.INCORRECT

    def passed(self):
        """Player correctly held back on a non-match."""
        if not self.keep_streak_on_pass:
            self.streak = 0
        self.last_result = TurnResult.NEUTRAL

    def neutral(self):
        """Turn with nothing to judge (before position n)."""
        self.last_result = TurnResult.NEUTRAL

    def record_turn(self, turn: int):
        """Append a chart point unless this turn is already logged."""
        if self.log[-1].turn == turn:
            return
        self.log.append(TurnLogEntry(turn, self.score, self.last_result))
