"""Config loader — YAML to dataclasses."""

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from nback.stimuli import DEFAULT_STIMULI, Stimulus, StimulusType, parse_type


@dataclass
class DeckConfig:
    brightness: int = 60
    countdown: int = 3  # seconds of 3-2-1 before the first turn
    verbose: bool = False


@dataclass
class GameSettings:
    n_level: int = 1
    stimulus_type: StimulusType = StimulusType.RANDOM
    game_length: int = 20  # number of turns
    speed: int = 2500  # ms per turn
    keep_streak_on_pass: bool = True  # correct abstention keeps the combo alive

    def __post_init__(self):
        self.stimulus_type = parse_type(self.stimulus_type)
        if self.n_level < 1:
            raise ValueError(f"n_level must be >= 1, got {self.n_level}")
        if self.game_length < 1:
            raise ValueError(f"game_length must be >= 1, got {self.game_length}")
        if self.speed <= 0:
            raise ValueError(f"speed must be positive, got {self.speed}")

    @property
    def level_key(self) -> str:
        """Key for the per-level best score record, e.g. "COLOR-2"."""
        return f"{self.stimulus_type.value}-{self.n_level}"


@dataclass
class StorageConfig:
    path: str = "~/.streamdeck-nback/progress.json"


@dataclass
class AppConfig:
    deck: DeckConfig = field(default_factory=DeckConfig)
    game: GameSettings = field(default_factory=GameSettings)
    storage: StorageConfig = field(default_factory=StorageConfig)
    stimuli: list[Stimulus] = field(default_factory=lambda: list(DEFAULT_STIMULI))


def _stimulus(raw: dict) -> Stimulus:
    return Stimulus(
        id=str(raw["id"]),
        type=parse_type(raw["type"]),
        value=str(raw["value"]),
        name=raw.get("name"),
    )


def load_config(path: Path) -> AppConfig:
    """Load config from YAML file."""
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    deck = DeckConfig(**{k: v for k, v in (raw.get("deck") or {}).items()})
    game = GameSettings(**{k: v for k, v in (raw.get("game") or {}).items()})
    storage = StorageConfig(**{k: v for k, v in (raw.get("storage") or {}).items()})
    stimuli = [_stimulus(s) for s in (raw.get("stimuli") or [])]

    return AppConfig(
        deck=deck,
        game=game,
        storage=storage,
        stimuli=stimuli or list(DEFAULT_STIMULI),
    )
