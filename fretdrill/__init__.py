"""fretdrill: adaptive fretboard note-identification drill engine.

The engine names the pitch at any (string, fret) under a tuning, schedules
weak and stale positions more often, builds multiple-choice answer sets, and
maps fretboard positions onto staff notation.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .theory.keys import UnknownNoteError, pitch_class_at, to_absolute_note  # noqa: E402
from .theory.scale import KeyContext  # noqa: E402
from .theory.spelling import spell, display_name  # noqa: E402
from .theory.staff import StaffNote, PitchRange, to_staff_note, random_in_range, recommended_clef  # noqa: E402
from .fretboard.positions import Position, valid_positions, fallback_position  # noqa: E402
from .stats.stats import StatRecord, StatsStore, stat_key  # noqa: E402
from .policy.scheduler import AdaptiveScheduler, SchedulerWeights  # noqa: E402
from .policy.options import build_options  # noqa: E402

__all__ = [
    "__version__",
    "UnknownNoteError",
    "pitch_class_at",
    "to_absolute_note",
    "KeyContext",
    "spell",
    "display_name",
    "StaffNote",
    "PitchRange",
    "to_staff_note",
    "random_in_range",
    "recommended_clef",
    "Position",
    "valid_positions",
    "fallback_position",
    "StatRecord",
    "StatsStore",
    "stat_key",
    "AdaptiveScheduler",
    "SchedulerWeights",
    "build_options",
]
