from __future__ import annotations

"""Enharmonic spelling: choose "#" or "b" names for a pitch class.

A key context always wins over the global preference, so in-key practice
shows the conventional spelling for that signature.
"""

from typing import Literal, Optional

from .keys import NOTES_FLAT, NOTES_SHARP, is_natural, pitch_class_of
from .scale import KeyContext


AccidentalStyle = Literal["SHARP", "FLAT"]
ACCIDENTAL_STYLES = ("SHARP", "FLAT")

SHARP_GLYPH = "♯"
FLAT_GLYPH = "♭"


def spell(pc: int, key: Optional[KeyContext] = None, preference: AccidentalStyle = "SHARP") -> str:
    """Return the ASCII label for pitch class ``pc`` ("A#" or "Bb").

    Args:
        pc: Chromatic index; taken modulo 12.
        key: Optional key context. When given, flats are used iff its
            relative major has a flat signature.
        preference: Global accidental style used only without a key.
    """
    pc = int(pc) % 12
    if is_natural(pc):
        return NOTES_SHARP[pc]
    if key is not None:
        use_flat = key.prefers_flats()
    else:
        use_flat = preference == "FLAT"
    return NOTES_FLAT[pc] if use_flat else NOTES_SHARP[pc]


def to_glyphs(label: str) -> str:
    """Swap ASCII accidentals for the Unicode sharp/flat signs."""
    if len(label) < 2:
        return label
    return label[0] + label[1:].replace("#", SHARP_GLYPH).replace("b", FLAT_GLYPH)


def display_name(name: str, key: Optional[KeyContext] = None, preference: AccidentalStyle = "SHARP") -> str:
    """Spell a note label for display, e.g. "A#" in F major -> "B♭"."""
    return to_glyphs(spell(pitch_class_of(name), key, preference))
