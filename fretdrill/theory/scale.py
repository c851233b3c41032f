from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, List

from .keys import NOTES_SHARP, normalize_name, pitch_class_of
from .scales import FLAT_MAJOR_ROOTS, normalize_mode, relative_major_pc, scale_pcs


@dataclass(frozen=True)
class KeyContext:
    """A concrete key + mode (e.g. D dorian). Responsible for diatonic membership."""

    root: str
    mode: str = "MAJOR"

    def __post_init__(self) -> None:
        object.__setattr__(self, "root", normalize_name(self.root))
        object.__setattr__(self, "mode", normalize_mode(self.mode))

    @property
    def root_pc(self) -> int:
        return pitch_class_of(self.root)

    def pitch_classes(self) -> FrozenSet[int]:
        return frozenset(scale_pcs(self.root, self.mode))

    def notes(self) -> List[str]:
        """Scale note labels in degree order, sharp-spelled."""
        return [NOTES_SHARP[pc] for pc in scale_pcs(self.root, self.mode)]

    def contains(self, name: str) -> bool:
        return pitch_class_of(name) in self.pitch_classes()

    def relative_major(self) -> str:
        return NOTES_SHARP[relative_major_pc(self.root, self.mode)]

    def prefers_flats(self) -> bool:
        return relative_major_pc(self.root, self.mode) in FLAT_MAJOR_ROOTS

    def transpose(self, new_root: str) -> "KeyContext":
        return KeyContext(new_root, self.mode)

    def __str__(self) -> str:
        return f"{self.root} {self.mode.lower()}"
