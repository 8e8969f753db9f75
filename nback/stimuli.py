"""Stimulus pool — the things shown on the deck, one per turn."""

import enum
from collections.abc import Iterable
from dataclasses import dataclass


class StimulusType(str, enum.Enum):
    IMAGE = "IMAGE"
    EMOJI = "EMOJI"
    COLOR = "COLOR"
    SHAPE = "SHAPE"
    NUMBER = "NUMBER"
    TEXT = "TEXT"
    LETTER = "LETTER"
    RANDOM = "RANDOM"  # wildcard: any type


@dataclass(frozen=True)
class Stimulus:
    id: str
    type: StimulusType
    value: str  # image path, emoji, hex color, shape name, number or text
    name: str | None = None


def parse_type(value: str | StimulusType) -> StimulusType:
    """Parse a stimulus type name ("color", "COLOR") into StimulusType."""
    if isinstance(value, StimulusType):
        return value
    try:
        return StimulusType(str(value).upper())
    except ValueError:
        raise ValueError(f"Unknown stimulus type: {value!r}") from None


def filter_pool(stimuli: Iterable[Stimulus], stimulus_type: StimulusType) -> list[Stimulus]:
    """Keep stimuli of the selected type. RANDOM keeps all of them."""
    if stimulus_type == StimulusType.RANDOM:
        return list(stimuli)
    return [s for s in stimuli if s.type == stimulus_type]


def distinct_count(stimuli: Iterable[Stimulus]) -> int:
    return len({s.id for s in stimuli})


def _pool(kind: StimulusType, prefix: str, values: list[tuple[str, str | None]]) -> list[Stimulus]:
    return [
        Stimulus(id=f"{prefix}-{i}", type=kind, value=value, name=name)
        for i, (value, name) in enumerate(values)
    ]


DEFAULT_STIMULI: list[Stimulus] = (
    _pool(StimulusType.COLOR, "color", [
        ("#ef4444", "Red"),
        ("#22c55e", "Green"),
        ("#3b82f6", "Blue"),
        ("#fbbf24", "Yellow"),
        ("#a855f7", "Purple"),
        ("#f97316", "Orange"),
    ])
    + _pool(StimulusType.NUMBER, "number", [(str(d), None) for d in range(1, 10)])
    + _pool(StimulusType.LETTER, "letter", [(c, None) for c in "BCDFHKLQRT"])
    + _pool(StimulusType.SHAPE, "shape", [
        ("circle", "Circle"),
        ("square", "Square"),
        ("triangle", "Triangle"),
        ("diamond", "Diamond"),
    ])
    + _pool(StimulusType.EMOJI, "emoji", [
        ("\U0001F34E", "Apple"),
        ("\U0001F436", "Dog"),
        ("\U0001F697", "Car"),
        ("\U0001F31F", "Star"),
        ("\U0001F3B8", "Guitar"),
    ])
)
