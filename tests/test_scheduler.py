import io
import random
import unittest
from contextlib import redirect_stdout

from pydantic import ValidationError

from fretdrill.app import explain
from fretdrill.fretboard.positions import Position, valid_positions
from fretdrill.fretboard.tuning import STANDARD_TUNING
from fretdrill.policy.scheduler import AdaptiveScheduler, SchedulerWeights
from fretdrill.stats.stats import StatRecord, StatsStore, stat_key
from fretdrill.storage.store import MemoryStore


class ScriptedRng:
    """Replays fixed ``choice``/``random`` results and counts calls."""

    def __init__(self, choices=(), randoms=()):
        self.choices = list(choices)
        self.randoms = list(randoms)
        self.choice_calls = 0

    def choice(self, seq):
        self.choice_calls += 1
        return self.choices.pop(0)

    def random(self):
        return self.randoms.pop(0)


def seeded_stats(pool, now):
    stats = StatsStore(MemoryStore())
    for i, p in enumerate(pool):
        stats.record_outcome(stat_key("default", p.string_index, p.fret_index), i % 3 != 0, False, 500 * (i + 1), now=now - 1000 * i)
    return stats


class WeightTests(unittest.TestCase):
    def test_worked_example(self) -> None:
        now = 10_000_000
        rec = StatRecord(correct=9, incorrect=1, timeouts=0, total_time_ms=10000, last_seen_epoch_ms=now - 600000)
        self.assertAlmostEqual(AdaptiveScheduler().stat_weight(rec, now), 56.0)

    def test_unseen_is_maximal(self) -> None:
        sched = AdaptiveScheduler()
        self.assertEqual(sched.stat_weight(None, 0), 100)
        self.assertEqual(sched.stat_weight(StatRecord(), 0), 100)

    def test_floor_for_mastered_position(self) -> None:
        rec = StatRecord(correct=10, total_time_ms=0, last_seen_epoch_ms=1000)
        self.assertAlmostEqual(AdaptiveScheduler().stat_weight(rec, 1000), 5.0)

    def test_previous_position_weighs_zero(self) -> None:
        pool = valid_positions(STANDARD_TUNING, 1, "ALL")
        weights = AdaptiveScheduler().weigh(pool, {}, "default", previous=pool[3], now=0)
        self.assertEqual(weights[3], 0.0)
        self.assertTrue(all(w == 100 for i, w in enumerate(weights) if i != 3))

    def test_single_entry_pool_keeps_previous(self) -> None:
        only = Position(0, 1, "F")
        self.assertEqual(AdaptiveScheduler().weigh([only], {}, "default", previous=only, now=0), [100])

    def test_weights_are_validated(self) -> None:
        with self.assertRaises(ValidationError):
            SchedulerWeights(speed_cap_ms=0)
        with self.assertRaises(ValidationError):
            SchedulerWeights(accuracy=-1)


class NextTests(unittest.TestCase):
    def test_empty_pool_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            AdaptiveScheduler().next([], StatsStore(MemoryStore()))

    def test_adaptive_pick_stays_in_pool_and_skips_previous(self) -> None:
        now = 5_000_000
        pool = valid_positions(STANDARD_TUNING, 3, "NATURALS")
        stats = seeded_stats(pool, now)
        sched = AdaptiveScheduler(rng=random.Random(1234))
        for _ in range(300):
            choice = sched.next(pool, stats, previous=pool[0], now=now)
            self.assertIn(choice, pool)
            self.assertNotEqual(choice, pool[0])

    def test_roulette_walks_cumulative_weights(self) -> None:
        pool = valid_positions(STANDARD_TUNING, 0, "ALL")
        weights = [0.0, 10.0, 30.0, 0.0, 60.0, 0.0]
        self.assertEqual(AdaptiveScheduler(rng=ScriptedRng(randoms=[0.0])).pick_weighted(pool, weights), pool[1])
        self.assertEqual(AdaptiveScheduler(rng=ScriptedRng(randoms=[0.2])).pick_weighted(pool, weights), pool[2])
        self.assertEqual(AdaptiveScheduler(rng=ScriptedRng(randoms=[0.99])).pick_weighted(pool, weights), pool[4])

    def test_empty_store_draws_uniformly(self) -> None:
        pool = valid_positions(STANDARD_TUNING, 0, "ALL")
        rng = ScriptedRng(choices=[pool[2]])
        choice = AdaptiveScheduler(rng=rng).next(pool, StatsStore(MemoryStore()), adaptive=True)
        self.assertEqual(choice, pool[2])
        self.assertEqual(rng.choice_calls, 1)

    def test_uniform_retries_against_repeat(self) -> None:
        a, b = Position(0, 0, "E"), Position(0, 1, "F")
        rng = ScriptedRng(choices=[a, a, a, b])
        self.assertEqual(AdaptiveScheduler(rng=rng).pick_uniform([a, b], previous=a), b)
        self.assertEqual(rng.choice_calls, 4)

    def test_uniform_accepts_repeat_after_bounded_retries(self) -> None:
        a, b = Position(0, 0, "E"), Position(0, 1, "F")
        rng = ScriptedRng(choices=[a] * 20)
        sched = AdaptiveScheduler(rng=rng)
        self.assertEqual(sched.next([a, b], StatsStore(MemoryStore()), previous=a, adaptive=False), a)
        self.assertEqual(rng.choice_calls, 10)

    def test_adaptive_off_ignores_stats(self) -> None:
        pool = valid_positions(STANDARD_TUNING, 0, "ALL")
        stats = seeded_stats(pool, 100_000)
        rng = ScriptedRng(choices=[pool[5]])
        self.assertEqual(AdaptiveScheduler(rng=rng).next(pool, stats, adaptive=False), pool[5])


class ExplainTraceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.pool = valid_positions(STANDARD_TUNING, 0, "ALL")
        self.stats = StatsStore(MemoryStore())
        self.stats.record_outcome(stat_key("default", 0, 0), True, False, 500, now=0)
        self.addCleanup(explain.enable, False)

    def _next(self) -> str:
        out = io.StringIO()
        with redirect_stdout(out):
            choice = AdaptiveScheduler(rng=ScriptedRng(randoms=[0.0])).next(self.pool, self.stats, previous=self.pool[0], now=1000)
        self.assertEqual(choice, self.pool[1])
        return out.getvalue()

    def test_adaptive_trace_lists_heaviest_candidates(self) -> None:
        explain.enable(True)
        self.assertTrue(explain.enabled())
        line = self._next()
        self.assertIn("[EXPLAIN] scheduled", line)
        self.assertIn('"mode":"adaptive"', line)
        self.assertIn('"heaviest":[[1,0,', line)

    def test_silent_when_disabled(self) -> None:
        explain.enable(False)
        self.assertFalse(explain.enabled())
        self.assertEqual(self._next(), "")


if __name__ == "__main__":
    unittest.main()
