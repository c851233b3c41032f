from __future__ import annotations

"""Staff-notation pitches: fretboard mapping, range-bounded sampling, clef choice."""

import random
import re
from dataclasses import dataclass
from typing import List, Literal, Optional

from ..logger import get_logger
from .focus import allowed_labels
from .keys import NOTES_SHARP, UnknownNoteError, absolute_pitch, normalize_name, semitones_from_reference, to_absolute_note
from .scale import KeyContext
from .spelling import AccidentalStyle, display_name

logger = get_logger(__name__)

Clef = Literal["treble", "bass"]

CLEF_BOUNDARY_OCTAVE = 4
DEFAULT_LOW = "E2"
DEFAULT_HIGH = "E5"

_NOTE_RE = re.compile(r"^([A-Ga-g](?:#|b|♯|♭)?)(-?\d+)$")


@dataclass(frozen=True)
class StaffNote:
    note_name: str
    octave: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "note_name", normalize_name(self.note_name))
        object.__setattr__(self, "octave", int(self.octave))

    @property
    def absolute_pitch(self) -> int:
        return absolute_pitch(self.note_name, self.octave)

    @property
    def semitones_from_reference(self) -> int:
        return semitones_from_reference(self.note_name, self.octave)

    def transposed(self, octaves: int) -> "StaffNote":
        return StaffNote(self.note_name, self.octave + octaves)

    def display(self, preference: AccidentalStyle = "SHARP", key: Optional[KeyContext] = None) -> str:
        return f"{display_name(self.note_name, key, preference)}{self.octave}"

    def __str__(self) -> str:
        return f"{self.note_name}{self.octave}"


DEFAULT_NOTE = StaffNote("C", 4)


@dataclass(frozen=True)
class PitchRange:
    """Inclusive low/high bound on absolute pitch."""

    low: StaffNote
    high: StaffNote

    @classmethod
    def from_strings(cls, low: str, high: str) -> "PitchRange":
        return cls(parse_note_string(low), parse_note_string(high))

    def contains(self, note: StaffNote) -> bool:
        return self.low.absolute_pitch <= note.absolute_pitch <= self.high.absolute_pitch

    @property
    def is_inverted(self) -> bool:
        return self.low.absolute_pitch > self.high.absolute_pitch


DEFAULT_RANGE = PitchRange(StaffNote("E", 2), StaffNote("E", 5))


def parse_note_string(note: str) -> StaffNote:
    """Parse "E2", "C#4", "Bb3" or "B♭3" into a StaffNote.

    Raises:
        UnknownNoteError: on anything else.
    """
    m = _NOTE_RE.match(str(note).strip())
    if not m:
        raise UnknownNoteError(f"Invalid note string: {note!r}")
    return StaffNote(m.group(1), int(m.group(2)))


def to_staff_note(semitones_from_reference: int) -> StaffNote:
    name, octave = to_absolute_note(semitones_from_reference)
    return StaffNote(name, octave)


def fretboard_to_staff_note(tuning_offset: int, fret: int) -> StaffNote:
    return to_staff_note(int(tuning_offset) + int(fret))


def notes_in_range(pitch_range: PitchRange, focus: str = "ALL", key: Optional[KeyContext] = None) -> List[StaffNote]:
    """Every focus-allowed note whose absolute pitch lies inside the range, low to high."""
    low_abs = pitch_range.low.absolute_pitch
    high_abs = pitch_range.high.absolute_pitch
    labels = allowed_labels(focus, key)
    found: List[StaffNote] = []
    for octave in range(pitch_range.low.octave, pitch_range.high.octave + 1):
        for name in labels:
            if low_abs <= absolute_pitch(name, octave) <= high_abs:
                found.append(StaffNote(name, octave))
    found.sort(key=lambda n: n.absolute_pitch)
    return found


def random_in_range(
    pitch_range: PitchRange,
    focus: str = "ALL",
    key: Optional[KeyContext] = None,
    rng: Optional[random.Random] = None,
) -> StaffNote:
    """Uniformly pick an allowed note inside ``pitch_range``.

    An empty candidate set (inverted or too narrow range) yields middle C.
    """
    candidates = notes_in_range(pitch_range, focus, key)
    if not candidates:
        logger.warning(f"No notes between {pitch_range.low} and {pitch_range.high}; using {DEFAULT_NOTE}")
        return DEFAULT_NOTE
    return (rng or random).choice(candidates)


def recommended_clef(note: StaffNote) -> Clef:
    """Treble above octave 4, bass below.

    Inside octave 4 the tie-break compares the chromatic index with C's (0),
    which every label satisfies, so the whole octave reads as treble.
    """
    if note.octave > CLEF_BOUNDARY_OCTAVE:
        return "treble"
    if note.octave < CLEF_BOUNDARY_OCTAVE:
        return "bass"
    return "treble" if NOTES_SHARP.index(note.note_name) >= 0 else "bass"
