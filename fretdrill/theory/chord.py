from __future__ import annotations
from dataclasses import dataclass
from typing import List

from .keys import normalize_name
from .scales import TRIAD_INTERVALS, chord_notes, normalize_mode


@dataclass(frozen=True)
class Chord:
    """A simple major or minor triad used to highlight study note sets."""

    root: str
    quality: str = "MAJOR"   # "MAJOR" | "NATURAL_MINOR"

    def __post_init__(self) -> None:
        quality = normalize_mode(self.quality)
        if quality not in TRIAD_INTERVALS:
            raise ValueError(f"Unsupported triad quality: {self.quality}")
        object.__setattr__(self, "root", normalize_name(self.root))
        object.__setattr__(self, "quality", quality)

    def notes(self) -> List[str]:
        return chord_notes(self.root, self.quality)

    def to_symbol(self) -> str:
        """Compact symbol for logs ("C", "Am")."""
        return self.root + ("m" if self.quality == "NATURAL_MINOR" else "")
