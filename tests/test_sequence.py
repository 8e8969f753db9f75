"""Tests for sequence generation and match-plan balancing."""

import random

from nback.config import GameSettings
from nback.sequence import GameSequence, SequenceGenerator, balance_turn_types
from nback.stimuli import Stimulus, StimulusType

T, F = True, False

COLORS = [
    Stimulus(f"c{i}", StimulusType.COLOR, value)
    for i, value in enumerate(["#ef4444", "#22c55e", "#3b82f6", "#fbbf24"])
]


def _runs(values) -> list[tuple[int, int]]:
    """(start, length) of every run of equal values."""
    runs = []
    start = 0
    for i in range(1, len(values) + 1):
        if i == len(values) or values[i] != values[start]:
            runs.append((start, i - start))
            start = i
    return runs


def test_balance_swaps_end_of_long_run():
    """A run of 5 gets its 4th element swapped with the last differing one."""
    assert balance_turn_types([F, F, F, F, F, T, T]) == [F, F, F, T, F, T, F]


def test_balance_leaves_trailing_run_when_nothing_to_swap():
    """Best effort: nothing after the run means it stays."""
    assert balance_turn_types([T, F, F, F, F]) == [T, F, F, F, F]


def test_balance_keeps_short_runs():
    plan = [T, F, F, F, T, T, F, T]
    assert balance_turn_types(plan) == plan


def test_balance_pass_cap():
    plan = [F, F, F, F, F, T, T]
    assert balance_turn_types(plan, max_passes=0) == plan


def test_balance_does_not_mutate_input():
    plan = [F, F, F, F, T]
    balance_turn_types(plan)
    assert plan == [F, F, F, F, T]


def test_plan_match_count_is_a_third():
    gen = SequenceGenerator(random.Random(1))
    assert sum(gen.plan_turn_types(18)) == 6
    assert sum(gen.plan_turn_types(9)) == 3
    assert len(gen.plan_turn_types(9)) == 9


def test_plan_has_at_least_one_match():
    gen = SequenceGenerator(random.Random(1))
    assert gen.plan_turn_types(1) == [True]
    assert gen.plan_turn_types(0) == []


def test_generated_sequence_follows_plan():
    """Every position after n matches its n-back exactly when planned to."""
    for seed in range(20):
        gen = SequenceGenerator(random.Random(seed))
        seq = gen.generate(GameSettings(n_level=2, game_length=20), COLORS)
        assert len(seq) == 20
        assert len(seq.turn_types) == 18
        assert seq[0].id != seq[1].id
        for i in range(2, 20):
            assert seq.is_match(i) == seq.turn_types[i - 2]


def test_one_back_non_match_differs_from_previous():
    for seed in range(20):
        gen = SequenceGenerator(random.Random(seed))
        seq = gen.generate(GameSettings(n_level=1, game_length=12), COLORS)
        for i in range(1, 12):
            same = seq[i].id == seq[i - 1].id
            assert same == seq.turn_types[i - 1]


def test_initial_block_has_no_repeats():
    gen = SequenceGenerator(random.Random(7))
    seq = gen.generate(GameSettings(n_level=3, game_length=10), COLORS)
    assert len({s.id for s in seq.stimuli[:3]}) == 3


def test_short_game_is_truncated_to_length():
    gen = SequenceGenerator(random.Random(7))
    seq = gen.generate(GameSettings(n_level=3, game_length=2), COLORS)
    assert len(seq) == 2
    assert seq.turn_types == ()


def test_small_pool_falls_back_to_full_pool():
    """n=3 with two stimuli: the third opening slot reuses one of them."""
    gen = SequenceGenerator(random.Random(3))
    seq = gen.generate(GameSettings(n_level=3, game_length=12), COLORS[:2])
    assert len(seq) == 12
    for i in range(3, 12):
        assert seq.is_match(i) == seq.turn_types[i - 3]


def test_degenerate_pool_gives_empty_sequence():
    gen = SequenceGenerator(random.Random(0))
    settings = GameSettings(n_level=1, game_length=10)
    assert len(gen.generate(settings, COLORS[:1])) == 0
    twin = Stimulus(COLORS[0].id, StimulusType.COLOR, "#000000")
    assert len(gen.generate(settings, [COLORS[0], twin])) == 0
    assert not gen.generate(settings, [])


def test_same_seed_same_sequence():
    settings = GameSettings(n_level=2, game_length=25)
    a = SequenceGenerator(random.Random(42)).generate(settings, COLORS)
    b = SequenceGenerator(random.Random(42)).generate(settings, COLORS)
    assert a == b


def test_long_runs_only_survive_at_the_tail():
    """After balancing, a run longer than 3 can only be the trailing run."""
    for seed in range(50):
        plan = SequenceGenerator(random.Random(seed)).plan_turn_types(30)
        for start, length in _runs(plan):
            if length > 3:
                assert start + length == len(plan)


def test_is_match_out_of_range():
    seq = GameSequence(stimuli=tuple(COLORS[:2]) * 2, turn_types=(False, True), n_level=2)
    assert not seq.is_match(0)
    assert not seq.is_match(1)
    assert seq.is_match(2)
    assert not seq.is_match(10)
