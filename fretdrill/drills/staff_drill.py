from __future__ import annotations

"""Staff -> note name drill.

Shows one or more notes on a staff inside a pitch range and asks for their
names one at a time. Sequences avoid back-to-back identical notes with a
bounded number of redraws.
"""

import random
from dataclasses import dataclass, field
from typing import List, Optional

from ..app.explain import trace as xtrace
from ..policy.options import ChoicePolicy, build_options
from ..results.result_manager import ResultManager
from ..theory.staff import DEFAULT_RANGE, PitchRange, StaffNote, random_in_range, recommended_clef
from .base_drill import BaseDrill, DrillContext, Question, now_ms

ALL_DURATIONS = ("w", "h", "q", "8", "16", "wd", "hd", "qd", "8d")
MAX_SEQUENCE_RETRIES = 10
GUITAR_OCTAVE_SHIFT = 1


@dataclass
class StaffConfig:
    pitch_range: PitchRange = DEFAULT_RANGE
    clef: str = "random"             # treble | bass | random
    note_count: int = 1
    durations: List[str] = field(default_factory=lambda: list(ALL_DURATIONS))
    guitar_transposition: bool = True


@dataclass
class StaffQuestion(Question):
    notes: List[StaffNote] = field(default_factory=list)     # sounding pitches
    shown: List[StaffNote] = field(default_factory=list)     # as written
    durations: List[str] = field(default_factory=list)
    clef: str = "treble"
    active: int = 0


class StaffNoteDrill(BaseDrill):
    game_mode = "STAFF_TO_NOTE"

    def __init__(
        self,
        ctx: DrillContext,
        staff: Optional[StaffConfig] = None,
        results: Optional[ResultManager] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(ctx, results=results, rng=rng)
        self.staff = staff or StaffConfig()
        self._sequence: Optional[StaffQuestion] = None

    def generate_sequence(self) -> List[StaffNote]:
        notes: List[StaffNote] = []
        for _ in range(max(self.staff.note_count, 1)):
            note = random_in_range(self.staff.pitch_range, self.ctx.focus, self.ctx.key(), self.rng)
            attempts = 1
            while notes and note == notes[-1] and attempts < MAX_SEQUENCE_RETRIES:
                note = random_in_range(self.staff.pitch_range, self.ctx.focus, self.ctx.key(), self.rng)
                attempts += 1
            notes.append(note)
        return notes

    def choose_clef(self, shown: List[StaffNote]) -> str:
        if self.staff.clef in ("treble", "bass"):
            return self.staff.clef
        return recommended_clef(shown[0])

    def next_question(self, now: Optional[int] = None) -> StaffQuestion:
        stamp = now_ms() if now is None else int(now)
        seq = self._sequence
        if seq is not None and seq.active + 1 < len(seq.notes):
            seq.active += 1
        else:
            notes = self.generate_sequence()
            shift = GUITAR_OCTAVE_SHIFT if self.staff.guitar_transposition else 0
            shown = [n.transposed(shift) for n in notes]
            durations = [self.rng.choice(self.staff.durations or list(ALL_DURATIONS)) for _ in notes]
            seq = StaffQuestion(
                index=0,
                target=notes[0].note_name,
                options=[],
                started_ms=stamp,
                notes=notes,
                shown=shown,
                durations=durations,
                clef=self.choose_clef(shown),
            )
            self._sequence = seq

        self.state.index += 1
        seq.index = self.state.index
        seq.target = seq.notes[seq.active].note_name
        seq.options = build_options(seq.target, self.ctx.focus, self.ctx.key(), ChoicePolicy.for_difficulty(self.ctx.difficulty), self.rng)
        seq.display_options = [self.ctx.spelled(o) for o in seq.options]
        seq.started_ms = stamp
        self.current = seq
        xtrace("question_created", {"index": seq.index, "note": str(seq.notes[seq.active]), "clef": seq.clef})
        return seq

    def _on_miss(self) -> None:
        # a miss abandons the rest of the sequence
        self._sequence = None

    def prompt(self, q: Question) -> str:
        written = "  ".join(
            ("[" + n.display(self.ctx.accidental_preference) + "]") if i == q.active else n.display(self.ctx.accidental_preference)
            for i, n in enumerate(q.shown)
        )
        return f"Q{q.index} ({q.clef} clef): {written}"
