from __future__ import annotations

"""Fretboard -> note name drill.

Each round: build the valid pool, let the scheduler pick a position, build the
answer options, and on answer/timeout write the outcome to the stats store.
"""

import random
from dataclasses import dataclass
from typing import List, Optional

from ..app.explain import trace as xtrace
from ..fretboard.positions import Position, pool_or_fallback
from ..fretboard.tuning import DEFAULT_PROFILE, GuitarProfile
from ..policy.options import ChoicePolicy, build_options
from ..policy.powerups import FEWER_CHOICES, Powerup, powerup_for_streak, revealed_positions
from ..policy.scheduler import AdaptiveScheduler
from ..results.result_manager import ResultManager
from ..stats.stats import StatsStore, stat_key
from .base_drill import BaseDrill, DrillContext, Question, now_ms


@dataclass
class FretQuestion(Question):
    position: Optional[Position] = None
    powerup: Optional[Powerup] = None


class FretNoteDrill(BaseDrill):
    """Name the note at a highlighted fretboard position."""

    game_mode = "FRETBOARD_TO_NOTE"

    def __init__(
        self,
        ctx: DrillContext,
        stats: StatsStore,
        profile: GuitarProfile = DEFAULT_PROFILE,
        scheduler: Optional[AdaptiveScheduler] = None,
        results: Optional[ResultManager] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        super().__init__(ctx, results=results, rng=rng)
        self.stats = stats
        self.profile = profile
        self.scheduler = scheduler or AdaptiveScheduler(rng=self.rng)
        self.max_fret = min(ctx.starting_fret, ctx.max_fret_cap)
        self.powerup: Optional[Powerup] = None
        self.previous: Optional[Position] = None

    def start(self, tuning_name: Optional[str] = None) -> None:
        super().start(tuning_name or self.profile.tuning_name)
        self.max_fret = min(self.ctx.starting_fret, self.ctx.max_fret_cap)
        self.powerup = None
        self.previous = None

    @property
    def tuning(self):
        return self.profile.offsets()

    def pool(self) -> List[Position]:
        return pool_or_fallback(self.tuning, self.max_fret, self.ctx.focus, self.ctx.key())

    def next_question(self, now: Optional[int] = None) -> FretQuestion:
        active = self.powerup
        self.powerup = active.tick() if active else None

        position = self.scheduler.next(
            self.pool(),
            self.stats,
            previous=self.previous,
            adaptive=self.ctx.adaptive,
            tuning_id=self.profile.id,
            now=now,
        )
        self.previous = position

        fewer = active is not None and active.type == FEWER_CHOICES
        policy = ChoicePolicy.for_difficulty(self.ctx.difficulty, fewer_choices=fewer)
        options = build_options(position.note_name, self.ctx.focus, self.ctx.key(), policy, self.rng)

        self.state.index += 1
        q = FretQuestion(
            position=position,
            powerup=active,
            index=self.state.index,
            target=position.note_name,
            options=options,
            started_ms=now_ms() if now is None else int(now),
            display_options=[self.ctx.spelled(o) for o in options],
        )
        self.current = q
        if self.results is not None and self.session_id is not None:
            self.results.note_max_fret(self.session_id, self.max_fret)
        xtrace("question_created", {"index": q.index, "string": position.string_index, "fret": position.fret_index})
        return q

    def revealed(self) -> List[Position]:
        q = self.current
        return revealed_positions(getattr(q, "powerup", None), self.tuning, self.max_fret)

    def _stat_key(self, question: Question) -> Optional[str]:
        p = question.position
        return stat_key(self.profile.id, p.string_index, p.fret_index)

    def _record(self, question, answer, correct, timed_out, elapsed_ms, now) -> None:
        rec = self.stats.record_outcome(self._stat_key(question), correct, timed_out, elapsed_ms, now)
        xtrace("stats_recorded", {"key": self._stat_key(question), "total": rec.total})
        super()._record(question, answer, correct, timed_out, elapsed_ms, now)

    def _on_correct(self):
        label = None
        reward = powerup_for_streak(self.state.streak, self.max_fret, len(self.tuning), self.rng)
        if reward is not None:
            self.powerup = reward
            label = reward.label
        level_up = (
            self.state.score % self.ctx.level_up_every == 0
            and self.max_fret < self.ctx.max_fret_cap
        )
        if level_up:
            self.max_fret = min(self.max_fret + 1, self.ctx.max_fret_cap)
        return level_up, label

    def _on_miss(self) -> None:
        self.powerup = None

    def prompt(self, q: Question) -> str:
        p = q.position
        return f"Q{q.index}: string {p.string_index + 1} (low=1), fret {p.fret_index}"
