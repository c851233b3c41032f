from __future__ import annotations

"""Tuning presets and instrument profiles.

Offsets are semitones relative to E2, low string first. A profile id is the
tuning identity used in stat keys, so two guitars keep separate histories.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from ..theory.keys import offset_note_name

STRING_COUNT = 6


@dataclass(frozen=True)
class TuningPreset:
    name: str
    offsets: Tuple[int, ...]


STANDARD_TUNING: Tuple[int, ...] = (0, 5, 10, 15, 19, 24)

TUNING_PRESETS: List[TuningPreset] = [
    TuningPreset("Standard (EADGBE)", (0, 5, 10, 15, 19, 24)),
    TuningPreset("Drop D (DADGBE)", (-2, 5, 10, 15, 19, 24)),
    TuningPreset("Double Drop D (DADGBD)", (-2, 5, 10, 15, 19, 22)),
    TuningPreset("DADGAD", (-2, 5, 10, 15, 17, 22)),
    TuningPreset("Open D (DADF#AD)", (-2, 5, 10, 14, 17, 22)),
    TuningPreset("Open G (DGDGBD)", (-2, 3, 10, 15, 19, 22)),
    TuningPreset("Open C (CGCGCE)", (-4, 3, 8, 15, 20, 24)),
    TuningPreset("Half Step Down", (-1, 4, 9, 14, 18, 23)),
    TuningPreset("Whole Step Down", (-2, 3, 8, 13, 17, 22)),
]


def validate_tuning(offsets) -> Tuple[int, ...]:
    """Coerce to a tuple of six ints; raise ValueError otherwise."""
    try:
        values = tuple(int(o) for o in offsets)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Tuning offsets must be integers: {offsets!r}") from e
    if len(values) != STRING_COUNT:
        raise ValueError(f"Tuning needs {STRING_COUNT} offsets, got {len(values)}")
    return values


def find_preset(name: str) -> Optional[TuningPreset]:
    needle = name.strip().lower()
    for preset in TUNING_PRESETS:
        if preset.name.lower() == needle or preset.name.lower().startswith(needle):
            return preset
    return None


def open_string_names(offsets) -> List[str]:
    return [offset_note_name(o) for o in validate_tuning(offsets)]


class GuitarProfile(BaseModel):
    """A named instrument with its current tuning."""

    id: str = Field(min_length=1)
    name: str
    tuning_name: str = "Standard (EADGBE)"
    tuning: List[int] = Field(default_factory=lambda: list(STANDARD_TUNING))

    @field_validator("tuning")
    @classmethod
    def _six_strings(cls, v: List[int]) -> List[int]:
        return list(validate_tuning(v))

    def offsets(self) -> Tuple[int, ...]:
        return tuple(self.tuning)

    def retune(self, preset: TuningPreset) -> "GuitarProfile":
        return self.model_copy(update={"tuning_name": preset.name, "tuning": list(preset.offsets)})


DEFAULT_PROFILE = GuitarProfile(
    id="default",
    name="Classical Guitar",
    tuning_name="Standard (EADGBE)",
    tuning=list(STANDARD_TUNING),
)
