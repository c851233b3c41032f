from __future__ import annotations

"""Pitch-class names and the fretboard pitch model.

Offsets are semitones from the open low string of standard tuning (E2), so
offset 0 / fret 0 is E in octave 2. Octave numbers change at C, not at E.
"""

from typing import Dict, List, Tuple


NOTES_SHARP: Tuple[str, ...] = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")
NOTES_FLAT: Tuple[str, ...] = ("C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B")
NATURAL_NOTES: Tuple[str, ...] = ("C", "D", "E", "F", "G", "A", "B")

REFERENCE_NAME = "E"
REFERENCE_INDEX = 4
REFERENCE_OCTAVE = 2

_GLYPHS = {"♯": "#", "♭": "b"}

NAME_TO_PC: Dict[str, int] = {name: pc for pc, name in enumerate(NOTES_SHARP)}
NAME_TO_PC.update({name: pc for pc, name in enumerate(NOTES_FLAT)})
# edge enharmonics accepted on input only
NAME_TO_PC.update({"B#": 0, "E#": 5, "Cb": 11, "Fb": 4})


class UnknownNoteError(ValueError):
    """Raised for a pitch-class label or note string the engine cannot read."""


def _ascii(name: str) -> str:
    for glyph, plain in _GLYPHS.items():
        name = name.replace(glyph, plain)
    return name


def pitch_class_of(name: str) -> int:
    """Return the chromatic index 0..11 of a label like "C#", "Db" or "B♭".

    Raises:
        UnknownNoteError: if the label is not a pitch-class name.
    """
    if not isinstance(name, str) or not name:
        raise UnknownNoteError(f"Unknown note name: {name!r}")
    norm = _ascii(name.strip())
    norm = norm[:1].upper() + norm[1:]
    if norm not in NAME_TO_PC:
        raise UnknownNoteError(f"Unknown note name: {name!r}")
    return NAME_TO_PC[norm]


def normalize_name(name: str) -> str:
    """Map any accepted spelling onto the canonical sharp label."""
    return NOTES_SHARP[pitch_class_of(name)]


def is_natural(pc: int) -> bool:
    return NOTES_SHARP[pc % 12] == NOTES_FLAT[pc % 12]


def pitch_class_at(tuning_offset: int, fret: int) -> int:
    """Pitch class sounding at a fret on a string with the given offset.

    Python's modulo is already non-negative, so drop tunings (negative
    offsets) need no extra normalization.
    """
    return (REFERENCE_INDEX + int(tuning_offset) + int(fret)) % 12


def note_at_position(tuning_offset: int, fret: int) -> str:
    return NOTES_SHARP[pitch_class_at(tuning_offset, fret)]


def offset_note_name(offset: int) -> str:
    """Name of an open string tuned ``offset`` semitones from E2."""
    return note_at_position(offset, 0)


def to_absolute_note(semitones_from_reference: int) -> Tuple[str, int]:
    """Convert semitones above E2 into a (sharp label, octave) pair.

    The octave advances at C: E2 + 8 semitones is C3, E2 - 1 is D#2 and
    E2 - 5 is B1.
    """
    octave_steps, pc = divmod(REFERENCE_INDEX + int(semitones_from_reference), 12)
    return NOTES_SHARP[pc], REFERENCE_OCTAVE + octave_steps


def absolute_pitch(name: str, octave: int) -> int:
    """Comparable pitch number: ``octave * 12 + chromatic index``."""
    return int(octave) * 12 + pitch_class_of(name)


def semitones_from_reference(name: str, octave: int) -> int:
    """Inverse of :func:`to_absolute_note`."""
    return absolute_pitch(name, octave) - absolute_pitch(REFERENCE_NAME, REFERENCE_OCTAVE)


def note_name_to_midi(name: str, octave: int) -> int:
    """MIDI number with C4 = 60."""
    return (int(octave) + 1) * 12 + pitch_class_of(name)


def note_labels(pcs: List[int]) -> List[str]:
    return [NOTES_SHARP[pc % 12] for pc in pcs]
