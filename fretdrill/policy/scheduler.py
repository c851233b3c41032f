from __future__ import annotations

"""Adaptive scheduler: pick the next position to drill.

Weighted roulette over the pool. Low accuracy, slow answers and long gaps
since the last sighting raise a position's weight; a floor keeps mastered
positions in rotation, and unseen positions get the maximum.
"""

import random
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from ..app.explain import enabled as explain_enabled
from ..app.explain import trace as xtrace
from ..fretboard.positions import Position
from ..stats.stats import StatRecord, StatsStore, now_ms, stat_key


class SchedulerWeights(BaseModel):
    """Tunable weight constants.

    - floor: added to every seen position
    - accuracy: scale of the (1 - accuracy) term
    - speed / speed_cap_ms: scale and saturation of the average answer time
    - recency / recency_cap_ms: scale and saturation of time since last seen
    - unseen: weight of a position with no attempts
    - max_repeat_attempts: uniform-draw retries before accepting a repeat
    """

    floor: float = Field(5.0, ge=0)
    accuracy: float = Field(50.0, ge=0)
    speed: float = Field(30.0, ge=0)
    speed_cap_ms: float = Field(5000.0, gt=0)
    recency: float = Field(40.0, ge=0)
    recency_cap_ms: float = Field(300000.0, gt=0)
    unseen: float = Field(100.0, ge=0)
    max_repeat_attempts: int = Field(10, ge=1)


class AdaptiveScheduler:
    def __init__(
        self,
        weights: Optional[SchedulerWeights] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.weights = weights or SchedulerWeights()
        self.rng = rng or random.Random()

    def stat_weight(self, stat: Optional[StatRecord], now: int) -> float:
        w = self.weights
        if stat is None or stat.total == 0:
            return w.unseen
        since_ms = max(now - stat.last_seen_epoch_ms, 0)
        return (
            w.floor
            + (1.0 - stat.accuracy) * w.accuracy
            + (min(stat.avg_time_ms, w.speed_cap_ms) / w.speed_cap_ms) * w.speed
            + (min(since_ms, w.recency_cap_ms) / w.recency_cap_ms) * w.recency
        )

    def weigh(
        self,
        pool: Sequence[Position],
        stats: Dict[str, StatRecord],
        tuning_id: str,
        previous: Optional[Position] = None,
        now: Optional[int] = None,
    ) -> List[float]:
        """Weight per pool entry; an immediate repeat is 0 when there is a choice."""
        stamp = now_ms() if now is None else int(now)
        weights: List[float] = []
        for p in pool:
            if len(pool) > 1 and p.same_spot(previous):
                weights.append(0.0)
                continue
            stat = stats.get(stat_key(tuning_id, p.string_index, p.fret_index))
            weights.append(self.stat_weight(stat, stamp))
        return weights

    def pick_uniform(self, pool: Sequence[Position], previous: Optional[Position] = None) -> Position:
        """Uniform draw with bounded retries against repeating ``previous``."""
        choice = self.rng.choice(pool)
        attempts = 1
        while len(pool) > 1 and choice.same_spot(previous) and attempts < self.weights.max_repeat_attempts:
            choice = self.rng.choice(pool)
            attempts += 1
        return choice

    def pick_weighted(self, pool: Sequence[Position], weights: Sequence[float]) -> Position:
        """Cumulative-weight roulette; float drift lands on the last candidate."""
        total = sum(weights)
        if total <= 0:
            return self.rng.choice(pool)
        r = self.rng.random() * total
        for p, w in zip(pool, weights):
            if r < w:
                return p
            r -= w
        return pool[-1]

    def next(
        self,
        pool: Sequence[Position],
        stats: StatsStore,
        previous: Optional[Position] = None,
        adaptive: bool = True,
        *,
        tuning_id: str = "default",
        now: Optional[int] = None,
    ) -> Position:
        if not pool:
            raise ValueError("pool is empty; substitute a fallback position first")
        snapshot = stats.snapshot() if adaptive else {}
        if not adaptive or not snapshot:
            choice = self.pick_uniform(pool, previous)
            xtrace("scheduled", {"mode": "uniform", "string": choice.string_index, "fret": choice.fret_index})
            return choice
        weights = self.weigh(pool, snapshot, tuning_id, previous, now)
        choice = self.pick_weighted(pool, weights)
        if explain_enabled():
            heaviest = sorted(zip(pool, weights), key=lambda pw: -pw[1])[:3]
            xtrace(
                "scheduled",
                {
                    "mode": "adaptive",
                    "string": choice.string_index,
                    "fret": choice.fret_index,
                    "heaviest": [[p.string_index, p.fret_index, round(w, 1)] for p, w in heaviest],
                },
            )
        return choice
