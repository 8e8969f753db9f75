"""Tests for config loader — YAML to dataclasses."""

import tempfile
from pathlib import Path

import pytest
import yaml


def _write(raw: dict) -> Path:
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(raw, f)
        return Path(f.name)


def test_load_config_parses_game_and_stimuli():
    """load_config should parse YAML into GameSettings and a Stimulus list."""
    raw = {
        "deck": {"brightness": 30, "countdown": 2},
        "game": {"n_level": 2, "stimulus_type": "color", "game_length": 15, "speed": 2000},
        "stimuli": [
            {"id": "red", "type": "color", "value": "#ef4444", "name": "Red"},
            {"id": "seven", "type": "NUMBER", "value": 7},
        ],
    }
    from nback.config import load_config
    from nback.stimuli import StimulusType

    cfg = load_config(_write(raw))
    assert cfg.deck.brightness == 30
    assert cfg.deck.countdown == 2
    assert cfg.game.n_level == 2
    assert cfg.game.stimulus_type == StimulusType.COLOR
    assert cfg.game.game_length == 15
    assert cfg.game.speed == 2000
    assert len(cfg.stimuli) == 2
    assert cfg.stimuli[0].name == "Red"
    assert cfg.stimuli[1].type == StimulusType.NUMBER
    assert cfg.stimuli[1].value == "7"
    assert cfg.stimuli[1].name is None


def test_load_config_defaults():
    """Missing sections should get defaults and the built-in pool."""
    from nback.config import load_config
    from nback.stimuli import DEFAULT_STIMULI, StimulusType

    cfg = load_config(_write({"deck": {}}))
    assert cfg.deck.brightness == 60
    assert cfg.game.n_level == 1
    assert cfg.game.stimulus_type == StimulusType.RANDOM
    assert cfg.game.keep_streak_on_pass is True
    assert cfg.stimuli == DEFAULT_STIMULI
    assert cfg.storage.path.endswith("progress.json")


def test_empty_file_gives_defaults(tmp_path):
    from nback.config import load_config

    path = tmp_path / "config.yaml"
    path.write_text("")
    cfg = load_config(path)
    assert cfg.game.game_length == 20


def test_invalid_settings_rejected():
    """n_level below 1, zero turns or zero speed are config errors."""
    from nback.config import GameSettings

    with pytest.raises(ValueError):
        GameSettings(n_level=0)
    with pytest.raises(ValueError):
        GameSettings(game_length=0)
    with pytest.raises(ValueError):
        GameSettings(speed=0)


def test_unknown_stimulus_type_rejected():
    from nback.config import load_config

    with pytest.raises(ValueError, match="Unknown stimulus type"):
        load_config(_write({"game": {"stimulus_type": "smell"}}))


def test_level_key():
    from nback.config import GameSettings

    assert GameSettings(n_level=3, stimulus_type="shape").level_key == "SHAPE-3"
