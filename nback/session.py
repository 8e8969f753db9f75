"""Turn state machine for one n-back session.

Each turn shows one stimulus and arms a timer of settings.speed ms. Either the
player answers first (respond) or the timer elapses, never both: the
`responded` flag and a timer token guard every callback. All mutations happen
under one RLock so timer threads and key callbacks never interleave.
"""

import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from nback.config import GameSettings
from nback.scheduler import Cancellable, Scheduler
from nback.scoring import ScoreKeeper, TurnLogEntry, TurnResult
from nback.sequence import GameSequence, SequenceGenerator
from nback.stimuli import Stimulus, distinct_count, filter_pool

CORRECT_FEEDBACK_MS = 500  # pause after a correct answer before the next turn
MISS_REVIEW_MS = 1000  # review overlay after a missed match


class NotEnoughStimuli(ValueError):
    """The pool cannot produce a playable sequence."""


@dataclass(frozen=True)
class GameStats:
    score: int
    settings: GameSettings
    max_streak: int
    incorrect_presses: int
    game_completed: bool


@dataclass(frozen=True)
class SessionView:
    """Read model handed to the host after every change."""

    current_stimulus: Stimulus | None
    score: int
    turn: int  # 1-based
    total_turns: int
    game_over: bool
    progress: float  # 0..1
    show_review: bool
    review: tuple[Stimulus, ...]
    turn_log: tuple[TurnLogEntry, ...]
    streak: int
    paused: bool
    awaiting_answer: bool  # respond() would be accepted right now
    last_result: TurnResult


class GameSession:
    def __init__(
        self,
        settings: GameSettings,
        stimuli: Iterable[Stimulus],
        scheduler: Scheduler,
        generator: SequenceGenerator | None = None,
        on_change: Callable[[SessionView], None] | None = None,
        on_response: Callable[[bool, int], None] | None = None,
        on_game_over: Callable[[GameStats, list[TurnLogEntry]], None] | None = None,
    ):
        self.settings = settings
        # Snapshot: the pool is read-only for the whole session.
        self.pool = tuple(filter_pool(stimuli, settings.stimulus_type))
        self.scheduler = scheduler
        self.generator = generator or SequenceGenerator()
        self.on_change = on_change
        self.on_response = on_response
        self.on_game_over = on_game_over
        self.lock = threading.RLock()

        self.sequence = GameSequence(n_level=settings.n_level)
        self.scorer = ScoreKeeper(settings.n_level, settings.keep_streak_on_pass)
        self.turn = 0
        self.history: list[Stimulus] = []
        self.started = False
        self.responded = False
        self.paused = False
        self.over = False
        self.stopped = False
        self.show_review = False

        self._timer: Cancellable | None = None
        self._token = 0
        self._pending: tuple[int, Callable[[], None]] | None = None

    # -- lifecycle ---------------------------------------------------------

    def start(self):
        """Generate a fresh sequence and begin turn 0."""
        with self.lock:
            sequence = self.generator.generate(self.settings, self.pool)
            if not sequence:
                raise NotEnoughStimuli(
                    f"need at least 2 distinct {self.settings.stimulus_type.value} "
                    f"stimuli, have {distinct_count(self.pool)}"
                )
            self._cancel_timer()
            self.sequence = sequence
            self.scorer.reset()
            self.turn = 0
            self.history = []
            self.responded = False
            self.paused = False
            self.over = False
            self.stopped = False
            self.show_review = False
            self.started = True
            self._begin_turn()

    def pause(self):
        with self.lock:
            if not self.started or self.over or self.stopped or self.paused:
                return
            self.paused = True
            self._cancel_timer(forget=False)
            self._changed()

    def resume(self):
        """Unpause. The interrupted timer restarts with its full delay."""
        with self.lock:
            if not self.paused:
                return
            self.paused = False
            if self._pending:
                delay, callback = self._pending
                self._arm(delay, callback)
            self._changed()

    def stop(self):
        """Tear down mid-game: cancel timers, no further state changes."""
        with self.lock:
            self.stopped = True
            self._cancel_timer()

    def finish(self):
        """Enter the terminal state. Safe to call more than once."""
        with self.lock:
            if not self.started or self.over or self.stopped:
                return
            self.over = True
            self.show_review = False
            self._cancel_timer()
            stats = self.stats()
            self._changed()
            if self.on_game_over:
                self.on_game_over(stats, list(self.scorer.log))

    # -- input -------------------------------------------------------------

    def respond(self, match: bool) -> bool:
        """Player says MATCH (True) or NO MATCH (False).

        Returns False when the answer was ignored: already answered this
        turn, no n-back stimulus yet, paused, or not running.
        """
        with self.lock:
            if not self._awaiting_answer():
                return False
            self.responded = True
            self._cancel_timer()

            if match == self.sequence.is_match(self.turn):
                streak = self.scorer.correct()
                self._notify(True, streak)
                self._arm(CORRECT_FEEDBACK_MS, self._advance)
                self._changed()
            else:
                self.scorer.incorrect()
                self._notify(False, 0)
                self._review(self.settings.speed)
            return True

    def _awaiting_answer(self) -> bool:
        if not self.started or self.over or self.stopped or self.paused:
            return False
        return not self.responded and self.turn >= self.settings.n_level

    # -- turn flow ---------------------------------------------------------

    def _begin_turn(self):
        self.responded = False
        self._arm(self.settings.speed, self._turn_elapsed)
        self._changed()

    def _turn_elapsed(self):
        # No answer in time counts as "no match".
        if self.responded or self.over:
            return
        self.responded = True
        if self.turn < self.settings.n_level:
            self.scorer.neutral()
            self._advance()
        elif self.sequence.is_match(self.turn):
            self.scorer.incorrect()
            self._notify(False, 0)
            self._review(MISS_REVIEW_MS)
        else:
            self.scorer.passed()
            self._advance()

    def _review(self, delay_ms: int):
        self.show_review = True
        self._arm(delay_ms, self._end_review)
        self._changed()

    def _end_review(self):
        self.show_review = False
        self._advance()

    def _advance(self):
        if self.over or self.stopped:
            return
        self.history.append(self.sequence[self.turn])
        if self.turn < len(self.sequence) - 1:
            self.turn += 1
            self.scorer.record_turn(self.turn)
            self._begin_turn()
        else:
            self.scorer.record_turn(self.turn + 1)
            self.finish()

    # -- timers ------------------------------------------------------------

    def _arm(self, delay_ms: int, callback: Callable[[], None]):
        self._cancel_timer()
        self._pending = (delay_ms, callback)
        token = self._token

        def fire():
            with self.lock:
                if token != self._token or self.paused or self.stopped:
                    return
                self._timer = None
                self._pending = None
                callback()

        self._timer = self.scheduler.schedule(delay_ms, fire)

    def _cancel_timer(self, forget: bool = True):
        self._token += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if forget:
            self._pending = None

    # -- read model --------------------------------------------------------

    def _notify(self, correct: bool, streak: int):
        if self.on_response:
            self.on_response(correct, streak)

    def _changed(self):
        if self.on_change:
            self.on_change(self.view())

    @property
    def turn_log(self) -> list[TurnLogEntry]:
        return list(self.scorer.log)

    def current_stimulus(self) -> Stimulus | None:
        if not self.started or self.over or self.turn >= len(self.sequence):
            return None
        return self.sequence[self.turn]

    def view(self) -> SessionView:
        with self.lock:
            total = len(self.sequence) or self.settings.game_length
            n = self.settings.n_level
            return SessionView(
                current_stimulus=self.current_stimulus(),
                score=self.scorer.score,
                turn=self.turn + 1,
                total_turns=total,
                game_over=self.over,
                progress=min(1.0, (self.turn + 1) / total),
                show_review=self.show_review,
                review=tuple(self.history[-n:]),
                turn_log=tuple(self.scorer.log),
                streak=self.scorer.streak,
                paused=self.paused,
                awaiting_answer=self._awaiting_answer(),
                last_result=self.scorer.last_result,
            )

    def stats(self) -> GameStats:
        with self.lock:
            return GameStats(
                score=self.scorer.score,
                settings=self.settings,
                max_streak=self.scorer.max_streak,
                incorrect_presses=self.scorer.incorrect_presses,
                game_completed=self.over and len(self.history) == len(self.sequence),
            )
