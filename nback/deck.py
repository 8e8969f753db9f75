# nback/deck.py
"""N-Back trainer — Stream Deck host.

Drives a GameSession from key presses on a 32-key deck. Row 1 is the HUD,
rows 2-4 the game area: the current stimulus in the middle, the review strip
above it after a mistake, MATCH / NO MATCH / PAUSE along the bottom.

Usage:
    nback-deck --config config.yaml
"""

import argparse
import sys
import threading
from dataclasses import replace
from pathlib import Path

from StreamDeck.DeviceManager import DeviceManager
from StreamDeck.ImageHelpers import PILHelper

from nback import renderer, storage
from nback.achievements import ACHIEVEMENTS_BY_ID, unlock_action
from nback.config import AppConfig, load_config
from nback.progress import GameResult, settle
from nback.scheduler import Scheduler, ThreadingScheduler
from nback.scoring import TurnLogEntry, TurnResult
from nback.sequence import SequenceGenerator
from nback.session import GameSession, GameStats, NotEnoughStimuli, SessionView
from nback.stimuli import DEFAULT_STIMULI, distinct_count

# -- layout ----------------------------------------------------------------
HUD_KEYS = list(range(0, 8))
GAME_KEYS = list(range(8, 32))
TITLE_KEY, LEVEL_KEY, SCORE_KEY, TURN_KEY, STREAK_KEY, BEST_KEY, REWARDS_KEY, EXIT_KEY = HUD_KEYS
REVIEW_LABEL_KEY = 8
REVIEW_KEYS = list(range(9, 16))  # up to 7 stimuli back
STIMULUS_KEY = 20
START_KEY = 20
FEEDBACK_KEY = 21
MATCH_KEY = 25
PAUSE_KEY = 28
NO_MATCH_KEY = 30
RESTART_KEY = 28  # PAUSE_KEY doubles as restart on the summary screen
SUMMARY_KEYS = [16, 17, 18, 19, 20, 21, 22, 23]
ACHIEVEMENT_KEYS = [9, 10, 11, 12, 13, 14]

EXPLORER_ID = "resource_explorer"


def find_deck():
    """Find first visual Stream Deck device."""
    decks = DeviceManager().enumerate()
    for deck in decks:
        if deck.is_visual():
            return deck
    return None


class NBackDeck:
    """Deck host: idle -> ready (countdown) -> playing <-> paused -> over."""

    def __init__(
        self,
        deck,
        config: AppConfig,
        scheduler: Scheduler | None = None,
        generator: SequenceGenerator | None = None,
        verbose: bool = False,
    ):
        self.deck = deck
        self.config = config
        self.scheduler = scheduler or ThreadingScheduler()
        self.generator = generator
        self.verbose = verbose or config.deck.verbose
        self.progress_path = config.storage.path
        self.progress = storage.load_progress(self.progress_path)
        self.state = "idle"
        self.session: GameSession | None = None
        self.last_result: GameResult | None = None
        self._countdown = None
        self._shown_turn = 0
        self.lock = threading.RLock()
        self._check_custom_pool()

    def _log(self, msg: str):
        if self.verbose:
            print(msg)

    def _check_custom_pool(self):
        """A user-supplied stimulus pool earns the explorer achievement."""
        if self.config.stimuli == DEFAULT_STIMULI or EXPLORER_ID in self.progress.unlocked:
            return
        unlocked = unlock_action(self.progress.unlocked, EXPLORER_ID)
        self.progress = replace(self.progress, unlocked=unlocked)
        storage.save_progress(self.progress, self.progress_path)
        self._log(f"Achievement unlocked: {ACHIEVEMENTS_BY_ID[EXPLORER_ID].name}")

    def set_key(self, pos: int, img):
        native = PILHelper.to_native_key_format(self.deck, img)
        with self.deck:
            self.deck.set_key_image(pos, native)

    def _best(self) -> int:
        return self.progress.best_scores.get(self.config.game.level_key, 0)

    def _clear_grid(self):
        for k in GAME_KEYS:
            self.set_key(k, renderer.render_empty_cell())

    def _update_hud(self, view: SessionView | None = None):
        settings = self.config.game
        self.set_key(TITLE_KEY, renderer.render_hud_title())
        self.set_key(LEVEL_KEY, renderer.render_hud_level(settings.n_level))
        self.set_key(SCORE_KEY, renderer.render_hud_score(view.score if view else 0))
        if view:
            self.set_key(TURN_KEY, renderer.render_hud_turn(view.turn, view.total_turns))
            self.set_key(STREAK_KEY, renderer.render_hud_streak(view.streak))
        else:
            self.set_key(TURN_KEY, renderer.render_hud_turn(0, settings.game_length))
            self.set_key(STREAK_KEY, renderer.render_hud_streak(0))
        self.set_key(BEST_KEY, renderer.render_hud_best(self._best()))
        self.set_key(REWARDS_KEY, renderer.render_hud_rewards(self.progress.rewards))
        self.set_key(EXIT_KEY, renderer.render_exit_button())

    # -- screens -----------------------------------------------------------

    def show_idle(self):
        """Show start screen."""
        with self.lock:
            self.state = "idle"
            self._update_hud()
            for k in GAME_KEYS:
                if k == START_KEY:
                    self.set_key(k, renderer.render_start())
                else:
                    self.set_key(k, renderer.render_empty_cell())

    def _show_error(self, lines: list[str]):
        self.state = "idle"
        self._clear_grid()
        self.set_key(STIMULUS_KEY - 1, renderer.render_text_button(
            lines=lines, bg_color="#7f1d1d", font_sizes=[13], colors=["white"]))
        self.set_key(START_KEY, renderer.render_start())

    def start_game(self):
        """Begin the countdown for a new game."""
        with self.lock:
            if self.state in ("ready", "playing", "paused"):
                return
            self.session = GameSession(
                self.config.game,
                self.config.stimuli,
                self.scheduler,
                generator=self.generator,
                on_change=self._on_change,
                on_response=self._on_response,
                on_game_over=self._on_game_over,
            )
            if distinct_count(self.session.pool) < 2:
                self._log(f"Not enough {self.config.game.stimulus_type.value} stimuli to play")
                self._show_error(["NEED 2+", "STIMULI"])
                return
            self.state = "ready"
            self.last_result = None
            self._shown_turn = 0
            self._clear_grid()
            self._update_hud()
            self._tick(self.config.deck.countdown)

    def _tick(self, remaining: int):
        with self.lock:
            if self.state != "ready":
                return
            if remaining > 0:
                self.set_key(STIMULUS_KEY, renderer.render_countdown(remaining))
                self._countdown = self.scheduler.schedule(1000, lambda: self._tick(remaining - 1))
                return
            self._countdown = None
            self.state = "playing"
            try:
                self.session.start()
            except NotEnoughStimuli as e:
                self._log(f"Cannot start: {e}")
                self._show_error(["NEED 2+", "STIMULI"])
                return
            self._log(f"Game started: {self.config.game.n_level}-back, "
                      f"{self.config.game.game_length} turns")

    def toggle_pause(self):
        with self.lock:
            if self.state == "playing":
                self.state = "paused"
                self.session.pause()
            elif self.state == "paused":
                self.state = "playing"
                self.session.resume()

    def exit_game(self):
        """Abandon the current game and go back to the start screen."""
        with self.lock:
            if self._countdown is not None:
                self._countdown.cancel()
                self._countdown = None
            if self.session:
                self.session.stop()
            self._log("Game abandoned")
            self.show_idle()

    # -- session callbacks -------------------------------------------------

    def _on_change(self, view: SessionView):
        if view.game_over:
            return
        self._update_hud(view)

        if view.turn != self._shown_turn:
            self._shown_turn = view.turn
            self.set_key(FEEDBACK_KEY, renderer.render_empty_cell())

        if view.paused:
            self.set_key(STIMULUS_KEY, renderer.render_paused())
        elif view.current_stimulus:
            self.set_key(STIMULUS_KEY, renderer.render_stimulus(view.current_stimulus))
        else:
            self.set_key(STIMULUS_KEY, renderer.render_empty_cell())

        if view.show_review:
            self.set_key(REVIEW_LABEL_KEY, renderer.render_review_label(len(view.review)))
        else:
            self.set_key(REVIEW_LABEL_KEY, renderer.render_empty_cell())
        for i, k in enumerate(REVIEW_KEYS):
            if view.show_review and i < len(view.review):
                self.set_key(k, renderer.render_stimulus(view.review[i]))
            else:
                self.set_key(k, renderer.render_empty_cell())

        self.set_key(MATCH_KEY, renderer.render_match_button(view.awaiting_answer))
        self.set_key(NO_MATCH_KEY, renderer.render_no_match_button(view.awaiting_answer))
        self.set_key(PAUSE_KEY, renderer.render_pause_button(view.paused))

    def _on_response(self, correct: bool, streak: int):
        result = TurnResult.CORRECT if correct else TurnResult.INCORRECT
        self.set_key(FEEDBACK_KEY, renderer.render_feedback_cell(result))
        if correct and streak > 1:
            self._log(f"Combo x{streak}")

    def _on_game_over(self, stats: GameStats, turn_log: list[TurnLogEntry]):
        # Called under the session lock. Lock order is self.lock -> session.lock,
        # so session callbacks never take self.lock.
        result = settle(self.progress, stats, turn_log)
        self.progress = result.progress
        self.last_result = result
        self.state = "over"
        storage.save_progress(self.progress, self.progress_path)
        self._log(f"Game over: score {stats.score}, max streak {stats.max_streak}, "
                  f"mistakes {stats.incorrect_presses}, stars +{result.stars}")
        for achievement_id in result.new_achievements:
            self._log(f"Achievement unlocked: {ACHIEVEMENTS_BY_ID[achievement_id].name}")
        self.show_game_over(stats, result)

    def show_game_over(self, stats: GameStats, result: GameResult):
        self._clear_grid()
        self._update_hud()
        self.set_key(SCORE_KEY, renderer.render_hud_score(stats.score))

        earned = result.rewards.earned
        tiles = [
            renderer.render_game_over(),
            renderer.render_final_score(stats.score),
            renderer.render_reward_tile("STARS", earned.stars, "#fbbf24"),
            renderer.render_reward_tile("GEMS", earned.gems, "#38bdf8"),
            renderer.render_reward_tile("TROPHIES", earned.trophies, "#f59e0b"),
            renderer.render_reward_tile("PERFECT", earned.perfect_scores, "#f472b6"),
        ]
        if result.new_best:
            tiles.append(renderer.render_new_best())
        for k, img in zip(SUMMARY_KEYS, tiles):
            self.set_key(k, img)

        for k, achievement_id in zip(ACHIEVEMENT_KEYS, result.new_achievements):
            a = ACHIEVEMENTS_BY_ID[achievement_id]
            self.set_key(k, renderer.render_achievement(a.emoji, a.name))

        self.set_key(RESTART_KEY, renderer.render_start())

    # -- input -------------------------------------------------------------

    def on_key(self, _deck, key: int, pressed: bool):
        if not pressed:
            return

        if key == EXIT_KEY:
            if self.state in ("ready", "playing", "paused"):
                self.exit_game()
            return

        if self.state == "idle" and key == START_KEY:
            self.start_game()
            return
        if self.state == "over" and key == RESTART_KEY:
            self.start_game()
            return

        if key == PAUSE_KEY and self.state in ("playing", "paused"):
            self.toggle_pause()
            return

        if self.state != "playing":
            return
        if key == MATCH_KEY:
            self.session.respond(True)
        elif key == NO_MATCH_KEY:
            self.session.respond(False)

    def close(self):
        with self.lock:
            if self._countdown is not None:
                self._countdown.cancel()
            if self.session:
                self.session.stop()


def main():
    parser = argparse.ArgumentParser(description="N-back trainer for Stream Deck")
    parser.add_argument("--config", default="config.yaml", help="Config file path")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    args = parser.parse_args()

    config_path = Path(args.config)
    if not config_path.exists():
        print(f"Config not found: {config_path}")
        sys.exit(1)

    try:
        config = load_config(config_path)
    except ValueError as e:
        print(f"Invalid config: {e}")
        sys.exit(1)

    deck = find_deck()
    if deck is None:
        print("No Stream Deck found. Is it plugged in?")
        sys.exit(1)

    deck.open()
    deck.reset()
    deck.set_brightness(config.deck.brightness)
    print(f"Connected: {deck.deck_type()} ({deck.key_count()} keys)")

    app = NBackDeck(deck, config, verbose=args.verbose)
    app.show_idle()
    deck.set_key_callback(app.on_key)
    print("N-BACK TRAINER! Press START to begin.")

    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        print(f"\nBye! Best score: {app._best()}")
    finally:
        app.close()
        deck.reset()
        deck.close()
        print("Done.")


if __name__ == "__main__":
    main()
