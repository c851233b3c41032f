from __future__ import annotations

"""Study mode: free exploration of a note set on the fretboard, no scoring."""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set

from ..theory.chord import Chord
from ..theory.keys import normalize_name
from ..theory.scale import KeyContext
from .positions import Position, iter_positions


@dataclass
class StudyConfig:
    root: Optional[str] = None
    mode: Optional[str] = None
    chords: List[Chord] = field(default_factory=list)
    manual_notes: List[str] = field(default_factory=list)
    active_strings: List[int] = field(default_factory=list)
    active_frets: List[int] = field(default_factory=list)

    def key(self) -> Optional[KeyContext]:
        if self.root and self.mode:
            return KeyContext(self.root, self.mode)
        return None

    def toggle_note(self, name: str) -> None:
        name = normalize_name(name)
        if name in self.manual_notes:
            self.manual_notes.remove(name)
        else:
            self.manual_notes.append(name)

    def toggle_chord(self, root: str, quality: str) -> None:
        """Add a chord, switch its quality, or remove it if already present as-is."""
        chord = Chord(root, quality)
        for i, existing in enumerate(self.chords):
            if existing.root == chord.root:
                if existing.quality == chord.quality:
                    del self.chords[i]
                else:
                    self.chords[i] = chord
                return
        self.chords.append(chord)


def study_note_set(
    root: Optional[str] = None,
    mode: Optional[str] = None,
    chords: Sequence[Chord] = (),
    manual: Sequence[str] = (),
) -> List[str]:
    """Union of scale, chord and hand-picked notes, first occurrence order."""
    ordered: List[str] = []
    sources = [KeyContext(root, mode).notes() if root and mode else []]
    sources += [c.notes() for c in chords]
    sources.append([normalize_name(n) for n in manual])
    for group in sources:
        for n in group:
            if n not in ordered:
                ordered.append(n)
    return ordered


def visible_notes(cfg: StudyConfig) -> List[str]:
    return study_note_set(cfg.root, cfg.mode, cfg.chords, cfg.manual_notes)


def highlighted_positions(cfg: StudyConfig, tuning: Sequence[int], max_fret: int) -> List[Position]:
    """Positions to light up: visible notes, plus any whole string or fret the user picked."""
    wanted: Set[str] = set(visible_notes(cfg))
    strings = set(cfg.active_strings)
    frets = set(cfg.active_frets)
    return [
        p for p in iter_positions(tuning, max_fret)
        if p.note_name in wanted or p.string_index in strings or p.fret_index in frets
    ]
