from __future__ import annotations

"""Focus filters: which pitch classes a drill may ask about."""

from typing import List, Literal, Optional

from .keys import NATURAL_NOTES, NOTES_SHARP, is_natural, pitch_class_of
from .scale import KeyContext


FocusMode = Literal["ALL", "NATURALS", "KEY"]
FOCUS_MODES = ("ALL", "NATURALS", "KEY")


def allowed_labels(focus: str, key: Optional[KeyContext] = None) -> List[str]:
    """Label pool for a focus filter, sharp-spelled.

    KEY without a key context falls back to the full chromatic set.
    """
    if focus == "NATURALS":
        return list(NATURAL_NOTES)
    if focus == "KEY" and key is not None:
        return key.notes()
    return list(NOTES_SHARP)


def matches(name: str, focus: str, key: Optional[KeyContext] = None) -> bool:
    """Predicate form of :func:`allowed_labels` for a single label."""
    pc = pitch_class_of(name)
    if focus == "NATURALS":
        return is_natural(pc)
    if focus == "KEY" and key is not None:
        return pc in key.pitch_classes()
    return True
