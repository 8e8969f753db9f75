"""Sequence generator — builds the stimulus stream for one session.

The first n positions cannot match anything, so they are drawn without
repeats. Every later position is planned up front as a match (copy of the
stimulus n steps back) or a non-match (anything but that stimulus). Roughly a
third of the planned positions are matches, shuffled, then spread out so the
player does not see long runs of the same answer.
"""

import random
from collections.abc import Sequence
from dataclasses import dataclass

from nback.config import GameSettings
from nback.stimuli import Stimulus, distinct_count

MATCH_RATIO = 0.33
MAX_STREAK = 3  # longest run of identical match/non-match answers
MAX_PASSES = 5


def balance_turn_types(types: Sequence[bool], max_streak: int = MAX_STREAK,
                       max_passes: int = MAX_PASSES) -> list[bool]:
    """Break up runs longer than max_streak in a shuffled match plan.

    A window of max_streak + 1 identical answers gets its last element swapped
    with the last differing element after it. Passes repeat until one makes no
    swap or max_passes is reached, so a run can survive (e.g. a trailing run
    with nothing left to swap in).
    """
    balanced = list(types)
    width = max_streak + 1
    for _ in range(max_passes):
        changed = False
        for i in range(len(balanced) - width + 1):
            window = balanced[i:i + width]
            if any(v != window[0] for v in window):
                continue
            target = i + max_streak
            for j in range(len(balanced) - 1, target, -1):
                if balanced[j] != window[0]:
                    balanced[target], balanced[j] = balanced[j], balanced[target]
                    changed = True
                    break
        if not changed:
            break
    return balanced


@dataclass(frozen=True)
class GameSequence:
    """Stimuli for one session plus the match plan they were built from.

    turn_types[k] is the planned answer for position n_level + k.
    """

    stimuli: tuple[Stimulus, ...] = ()
    turn_types: tuple[bool, ...] = ()
    n_level: int = 1

    def __len__(self) -> int:
        return len(self.stimuli)

    def __getitem__(self, index: int) -> Stimulus:
        return self.stimuli[index]

    def is_match(self, index: int) -> bool:
        """Ground truth: does position index repeat position index - n?"""
        if index < self.n_level or index >= len(self.stimuli):
            return False
        return self.stimuli[index].id == self.stimuli[index - self.n_level].id


class SequenceGenerator:
    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def _pick(self, pool: list[Stimulus], exclude: list[Stimulus]) -> Stimulus:
        excluded = {s.id for s in exclude}
        available = [s for s in pool if s.id not in excluded]
        if not available:
            return self.rng.choice(pool)
        return self.rng.choice(available)

    def plan_turn_types(self, remaining: int) -> list[bool]:
        """Match plan for the positions after the first n."""
        if remaining <= 0:
            return []
        matches = max(1, int(remaining * MATCH_RATIO + 0.5))
        types = [True] * matches + [False] * (remaining - matches)
        self.rng.shuffle(types)
        return balance_turn_types(types)

    def generate(self, settings: GameSettings, stimuli: Sequence[Stimulus]) -> GameSequence:
        """Build a sequence of settings.game_length stimuli.

        Returns an empty sequence when the pool has fewer than two distinct
        stimuli: such a pool cannot express a non-match.
        """
        n = settings.n_level
        pool = list(stimuli)
        if distinct_count(pool) < 2:
            return GameSequence(n_level=n)

        chosen: list[Stimulus] = []
        for i in range(min(n, settings.game_length)):
            chosen.append(self._pick(pool, chosen[:i]))

        plan = self.plan_turn_types(settings.game_length - n)
        for offset, is_match in enumerate(plan):
            index = n + offset
            n_back = chosen[index - n]
            if is_match:
                chosen.append(n_back)
                continue
            exclude = [n_back]
            if n == 1:
                exclude.append(chosen[index - 1])
            chosen.append(self._pick(pool, exclude))

        return GameSequence(stimuli=tuple(chosen), turn_types=tuple(plan), n_level=n)
