from __future__ import annotations

"""Fretboard positions and the valid-position pool.

The pool enumerates strings then frets, so a given configuration always
produces the same order.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from ..logger import get_logger
from ..theory.focus import matches
from ..theory.keys import note_at_position, pitch_class_of
from ..theory.scale import KeyContext
from ..theory.staff import StaffNote, fretboard_to_staff_note
from .tuning import validate_tuning

logger = get_logger(__name__)

FALLBACK_STRING = 0
FALLBACK_FRET = 1


@dataclass(frozen=True)
class Position:
    string_index: int   # 0 = lowest-pitched string
    fret_index: int
    note_name: str

    @classmethod
    def at(cls, tuning: Sequence[int], string_index: int, fret_index: int) -> "Position":
        return cls(string_index, fret_index, note_at_position(tuning[string_index], fret_index))

    def same_spot(self, other: Optional["Position"]) -> bool:
        return (
            other is not None
            and self.string_index == other.string_index
            and self.fret_index == other.fret_index
        )

    def staff_note(self, tuning: Sequence[int]) -> StaffNote:
        return fretboard_to_staff_note(tuning[self.string_index], self.fret_index)


def iter_positions(tuning: Sequence[int], max_fret: int) -> Iterable[Position]:
    offsets = validate_tuning(tuning)
    for s in range(len(offsets)):
        for f in range(0, int(max_fret) + 1):
            yield Position.at(offsets, s, f)


def valid_positions(
    tuning: Sequence[int],
    max_fret: int,
    focus: str = "ALL",
    key: Optional[KeyContext] = None,
) -> List[Position]:
    """All positions up to ``max_fret`` whose note passes the focus filter.

    May return an empty list; callers substitute :func:`fallback_position`.
    """
    return [p for p in iter_positions(tuning, max_fret) if matches(p.note_name, focus, key)]


def fallback_position(tuning: Sequence[int]) -> Position:
    """Single position used when the pool comes back empty."""
    return Position.at(validate_tuning(tuning), FALLBACK_STRING, FALLBACK_FRET)


def pool_or_fallback(
    tuning: Sequence[int],
    max_fret: int,
    focus: str = "ALL",
    key: Optional[KeyContext] = None,
) -> List[Position]:
    pool = valid_positions(tuning, max_fret, focus, key)
    if not pool:
        logger.warning(f"No valid positions for focus={focus} key={key} max_fret={max_fret}; using fallback")
        pool = [fallback_position(tuning)]
    return pool


def positions_of_note(tuning: Sequence[int], max_fret: int, name: str) -> List[Position]:
    """Every place a pitch class appears, e.g. for revealing a note's locations."""
    pc = pitch_class_of(name)
    return [p for p in iter_positions(tuning, max_fret) if pitch_class_of(p.note_name) == pc]
