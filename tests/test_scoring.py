"""Tests for points, penalties, combos and the turn log."""

from nback.scoring import ScoreKeeper, TurnResult, base_points, penalty


def test_base_points_double_per_level():
    assert base_points(1) == 10
    assert base_points(2) == 20
    assert base_points(3) == 40


def test_penalty_is_half_rounded_up():
    assert penalty(1) == 5
    assert penalty(2) == 10


def test_combo_bonus_on_consecutive_correct():
    """n=2: +20, then +20 + (2-1)*5*2 = +30."""
    keeper = ScoreKeeper(n_level=2)
    assert keeper.correct() == 1
    assert keeper.score == 20
    assert keeper.correct() == 2
    assert keeper.score == 50
    assert keeper.last_result == TurnResult.CORRECT


def test_incorrect_subtracts_penalty_and_resets_streak():
    keeper = ScoreKeeper(n_level=2)
    keeper.correct()
    keeper.correct()
    keeper.incorrect()
    assert keeper.score == 40
    assert keeper.streak == 0
    assert keeper.max_streak == 2
    assert keeper.incorrect_presses == 1
    assert keeper.last_result == TurnResult.INCORRECT


def test_score_clamped_at_zero():
    keeper = ScoreKeeper(n_level=3)
    keeper.incorrect()
    assert keeper.score == 0
    keeper.correct()
    keeper.incorrect()
    keeper.incorrect()
    assert keeper.score == 0


def test_pass_keeps_streak_by_default():
    keeper = ScoreKeeper(n_level=1)
    keeper.correct()
    keeper.passed()
    assert keeper.streak == 1
    assert keeper.score == 10
    keeper.correct()
    assert keeper.streak == 2
    assert keeper.score == 10 + 15


def test_pass_can_break_streak():
    keeper = ScoreKeeper(n_level=1, keep_streak_on_pass=False)
    keeper.correct()
    keeper.passed()
    assert keeper.streak == 0
    assert keeper.max_streak == 1
    assert keeper.score == 10


def test_turn_log_dedups_same_turn():
    keeper = ScoreKeeper(n_level=1)
    keeper.correct()
    keeper.record_turn(1)
    keeper.record_turn(1)
    keeper.incorrect()
    keeper.record_turn(2)
    assert [(e.turn, e.score, e.result) for e in keeper.log] == [
        (0, 0, TurnResult.NEUTRAL),
        (1, 10, TurnResult.CORRECT),
        (2, 5, TurnResult.INCORRECT),
    ]


def test_reset():
    keeper = ScoreKeeper(n_level=1)
    keeper.correct()
    keeper.incorrect()
    keeper.record_turn(1)
    keeper.reset()
    assert (keeper.score, keeper.streak, keeper.max_streak, keeper.incorrect_presses) == (0, 0, 0, 0)
    assert len(keeper.log) == 1
