from __future__ import annotations

"""Diatonic mode and triad interval tables.

Plain lookup tables: the seven modes of the major scale and the two triad
qualities used by study mode.
"""

from typing import Dict, List, Tuple

from .keys import NOTES_SHARP, pitch_class_of


MODE_INTERVALS: Dict[str, Tuple[int, ...]] = {
    "MAJOR": (0, 2, 4, 5, 7, 9, 11),
    "DORIAN": (0, 2, 3, 5, 7, 9, 10),
    "PHRYGIAN": (0, 1, 3, 5, 7, 8, 10),
    "LYDIAN": (0, 2, 4, 6, 7, 9, 11),
    "MIXOLYDIAN": (0, 2, 4, 5, 7, 9, 10),
    "NATURAL_MINOR": (0, 2, 3, 5, 7, 8, 10),
    "LOCRIAN": (0, 1, 3, 5, 6, 8, 10),
}

# semitones from each mode's tonic down to its relative major tonic
MODE_OFFSETS: Dict[str, int] = {
    "MAJOR": 0,
    "DORIAN": 2,
    "PHRYGIAN": 4,
    "LYDIAN": 5,
    "MIXOLYDIAN": 7,
    "NATURAL_MINOR": 9,
    "LOCRIAN": 11,
}

MODES = tuple(MODE_INTERVALS)

TRIAD_INTERVALS: Dict[str, Tuple[int, int, int]] = {
    "MAJOR": (0, 4, 7),
    "NATURAL_MINOR": (0, 3, 7),
}

# relative-major roots whose signatures carry flats: F, Bb, Eb, Ab, Db, Gb
FLAT_MAJOR_ROOTS = frozenset({5, 10, 3, 8, 1, 6})

_MODE_ALIASES = {
    "IONIAN": "MAJOR",
    "MINOR": "NATURAL_MINOR",
    "AEOLIAN": "NATURAL_MINOR",
}


def normalize_mode(mode: str) -> str:
    """Accept loose spellings ("minor", "aeolian", "natural-minor")."""
    m = str(mode).strip().upper().replace("-", "_").replace(" ", "_")
    m = _MODE_ALIASES.get(m, m)
    if m not in MODE_INTERVALS:
        raise ValueError(f"Unsupported mode: {mode}")
    return m


def scale_pcs(root: str, mode: str) -> List[int]:
    """Pitch classes of the seven degrees of ``root`` ``mode``."""
    root_pc = pitch_class_of(root)
    return [(root_pc + step) % 12 for step in MODE_INTERVALS[normalize_mode(mode)]]


def scale_notes(root: str, mode: str) -> List[str]:
    return [NOTES_SHARP[pc] for pc in scale_pcs(root, mode)]


def chord_notes(root: str, quality: str) -> List[str]:
    """Triad note names for a MAJOR or NATURAL_MINOR chord on ``root``."""
    q = normalize_mode(quality)
    if q not in TRIAD_INTERVALS:
        raise ValueError(f"Unsupported triad quality: {quality}")
    root_pc = pitch_class_of(root)
    return [NOTES_SHARP[(root_pc + step) % 12] for step in TRIAD_INTERVALS[q]]


def relative_major_pc(root: str, mode: str) -> int:
    return (pitch_class_of(root) - MODE_OFFSETS[normalize_mode(mode)]) % 12
