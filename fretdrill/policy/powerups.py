from __future__ import annotations

"""Streak rewards (powerups) and the per-session game rules around them."""

import random
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

from ..fretboard.positions import Position, iter_positions

POWERUP_DURATION = 2
SUPER_STREAK = 10
STREAK_STEP = 5

REVEAL_NATURALS_STRING = "REVEAL_NATURALS_STRING"
REVEAL_FRET = "REVEAL_FRET"
FEWER_CHOICES = "FEWER_CHOICES"
SUPER_REVEAL_ALL_NATURALS = "SUPER_REVEAL_ALL_NATURALS"


@dataclass(frozen=True)
class Powerup:
    type: str
    duration: int = POWERUP_DURATION
    value: Optional[int] = None          # string or fret index, by type
    label: str = ""

    def tick(self) -> Optional["Powerup"]:
        """One question consumed; None once exhausted."""
        remaining = self.duration - 1
        return replace(self, duration=remaining) if remaining > 0 else None


def powerup_for_streak(streak: int, max_fret: int, string_count: int = 6, rng: Optional[random.Random] = None) -> Optional[Powerup]:
    """Reward for reaching ``streak``; every 10th beats every 5th."""
    rng = rng or random.Random()
    if streak <= 0:
        return None
    if streak % SUPER_STREAK == 0:
        return Powerup(SUPER_REVEAL_ALL_NATURALS, label="SUPER STREAK! ALL NATURALS REVEALED!")
    if streak % STREAK_STEP != 0:
        return None
    roll = rng.random()
    if roll < 0.33:
        return Powerup(FEWER_CHOICES, label="50/50 Choices Active!")
    if roll < 0.66:
        s = rng.randrange(string_count)
        return Powerup(REVEAL_NATURALS_STRING, value=s, label=f"Natural Notes on String {s + 1} Revealed!")
    fret = rng.randrange(max(int(max_fret), 1)) + 1
    return Powerup(REVEAL_FRET, value=fret, label=f"Notes at Fret {fret} Revealed!")


def revealed_positions(powerup: Optional[Powerup], tuning: Sequence[int], max_fret: int) -> List[Position]:
    """Positions whose names the powerup shows on the fretboard."""
    if powerup is None:
        return []
    naturals = lambda p: len(p.note_name) == 1  # noqa: E731
    out = []
    for p in iter_positions(tuning, max_fret):
        if powerup.type == SUPER_REVEAL_ALL_NATURALS and naturals(p):
            out.append(p)
        elif powerup.type == REVEAL_NATURALS_STRING and p.string_index == powerup.value and naturals(p):
            out.append(p)
        elif powerup.type == REVEAL_FRET and p.fret_index == powerup.value:
            out.append(p)
    return out
