import itertools
import random
import unittest

from fretdrill.drills.base_drill import DrillContext
from fretdrill.drills.fret_drill import FretNoteDrill
from fretdrill.drills.staff_drill import StaffConfig, StaffNoteDrill
from fretdrill.fretboard.positions import valid_positions
from fretdrill.fretboard.tuning import STANDARD_TUNING
from fretdrill.results.result_manager import ResultManager
from fretdrill.stats.stats import StatsStore, stat_key
from fretdrill.storage.store import MemoryStore
from fretdrill.theory.keys import UnknownNoteError, pitch_class_of
from fretdrill.theory.staff import PitchRange, StaffNote


def wrong_label(q):
    return next(o for o in q.options if pitch_class_of(o) != pitch_class_of(q.target))


class FretDrillTests(unittest.TestCase):
    def setUp(self) -> None:
        self.stats = StatsStore(MemoryStore())
        self.results = ResultManager()
        self.drill = FretNoteDrill(DrillContext(), self.stats, results=self.results, rng=random.Random(7))
        self.drill.start()

    def test_question_comes_from_pool(self) -> None:
        q = self.drill.next_question(now=1000)
        self.assertIn(q.position, valid_positions(STANDARD_TUNING, 3, "ALL"))
        self.assertEqual(q.target, q.position.note_name)
        self.assertIn(q.target, q.options)
        self.assertEqual(len(q.options), 5)
        self.assertEqual(len(q.display_options), 5)

    def test_correct_answer_updates_stats(self) -> None:
        q = self.drill.next_question(now=1000)
        result = self.drill.answer(q.target, now=2500)
        self.assertTrue(result.correct)
        self.assertEqual(result.message, "Correct!")
        rec = self.stats.get(stat_key("default", q.position.string_index, q.position.fret_index))
        self.assertEqual((rec.correct, rec.total_time_ms, rec.last_seen_epoch_ms), (1, 1500, 2500))
        self.assertEqual(self.drill.state.score, 1)

    def test_wrong_answer_costs_health(self) -> None:
        q = self.drill.next_question(now=0)
        result = self.drill.answer(wrong_label(q), now=300)
        self.assertFalse(result.correct)
        self.assertTrue(result.message.startswith("Wrong! It was "))
        self.assertEqual(self.drill.state.health, 4)
        self.assertEqual(self.drill.state.streak, 0)

    def test_timeout_is_recorded_as_timeout(self) -> None:
        q = self.drill.next_question(now=0)
        result = self.drill.timeout(now=10000)
        self.assertTrue(result.timed_out)
        self.assertTrue(result.message.startswith("Time up! It was "))
        rec = self.stats.get(stat_key("default", q.position.string_index, q.position.fret_index))
        self.assertEqual((rec.correct, rec.incorrect, rec.timeouts), (0, 0, 1))

    def test_enharmonic_answers(self) -> None:
        self.assertTrue(self.drill.grade("Bb", "A#"))
        self.assertFalse(self.drill.grade("B", "A#"))
        with self.assertRaises(UnknownNoteError):
            self.drill.grade("H", "A#")

    def test_game_over_after_five_misses(self) -> None:
        for i in range(5):
            self.drill.next_question(now=i * 100)
            result = self.drill.timeout(now=i * 100 + 50)
        self.assertTrue(result.game_over)
        self.assertTrue(self.drill.state.over)
        with self.assertRaises(RuntimeError):
            self.drill.answer("E")

    def test_level_up_and_streak_reward(self) -> None:
        for i in range(5):
            q = self.drill.next_question(now=i * 1000)
            result = self.drill.answer(q.target, now=i * 1000 + 400)
        self.assertTrue(result.level_up)
        self.assertEqual(self.drill.max_fret, 4)
        self.assertIsNotNone(self.drill.powerup)
        self.assertTrue(result.message.endswith("Level Up!"))

        q = self.drill.next_question(now=10_000)
        self.assertEqual(q.powerup.duration, 2)
        self.assertEqual(self.drill.powerup.duration, 1)
        self.drill.answer(wrong_label(q), now=10_500)
        self.assertIsNone(self.drill.powerup)

    def test_level_up_respects_cap(self) -> None:
        drill = FretNoteDrill(DrillContext(starting_fret=3, max_fret_cap=3), self.stats, rng=random.Random(1))
        drill.start()
        for i in range(5):
            q = drill.next_question(now=i)
            result = drill.answer(q.target, now=i)
        self.assertFalse(result.level_up)
        self.assertEqual(drill.max_fret, 3)

    def test_session_summary(self) -> None:
        q = self.drill.next_question(now=0)
        self.drill.answer(q.target, now=1000)
        self.drill.next_question(now=2000)
        self.drill.timeout(now=12000)
        summary = self.results.summarize(self.drill.session_id)
        self.assertEqual((summary["total"], summary["correct"], summary["timeouts"]), (2, 1, 1))
        self.assertAlmostEqual(summary["avg_time_seconds"], 5.5)
        row = self.results.to_summary_row(self.drill.session_id, max_fret=self.drill.max_fret)
        self.assertEqual(row.max_fret, 3)
        self.assertEqual(row.tuning_name, "Standard (EADGBE)")

    def test_key_focus_spelling(self) -> None:
        ctx = DrillContext(focus="KEY", key_root="F", key_mode="MAJOR")
        drill = FretNoteDrill(ctx, self.stats, rng=random.Random(2))
        drill.start()
        for i in range(30):
            q = drill.next_question(now=i)
            self.assertNotIn("A♯", q.display_options)
            drill.answer(q.target, now=i)

    def test_terminal_loop(self) -> None:
        clock = itertools.count(0, 100)
        replies = iter(["xyz"])
        said = []

        def ask(prompt):
            return next(replies, None) or self.drill.current.target

        ui = {"ask": ask, "inform": said.append, "clock": lambda: next(clock)}
        summary = self.drill.run(3, ui)
        self.assertEqual(summary["score"], 3)
        self.assertEqual(summary["total"], 3)
        self.assertIn("'xyz' is not a note name, try again.", said)

    def test_terminal_loop_slow_answer_times_out(self) -> None:
        clock = itertools.count(0, 20_000)
        ui = {"ask": lambda prompt: self.drill.current.target, "inform": lambda msg: None, "clock": lambda: next(clock)}
        summary = self.drill.run(2, ui)
        self.assertEqual(summary["timeouts"], 2)
        self.assertEqual(summary["score"], 0)


class StaffDrillTests(unittest.TestCase):
    def make(self, **staff) -> StaffNoteDrill:
        cfg = StaffConfig(pitch_range=PitchRange.from_strings("C3", "C4"), **staff)
        drill = StaffNoteDrill(DrillContext(), cfg, results=ResultManager(), rng=random.Random(9))
        drill.start()
        return drill

    def test_single_note_question(self) -> None:
        drill = self.make(clef="bass", guitar_transposition=False)
        q = drill.next_question(now=0)
        self.assertEqual(len(q.notes), 1)
        self.assertEqual(q.shown, q.notes)
        self.assertEqual(q.clef, "bass")
        self.assertTrue(drill.staff.pitch_range.contains(q.notes[0]))
        self.assertIn(q.target, q.options)

    def test_transposition_shifts_written_octave(self) -> None:
        drill = self.make()
        q = drill.next_question(now=0)
        self.assertEqual(q.shown[0], q.notes[0].transposed(1))
        self.assertEqual(q.clef, "treble" if q.shown[0].octave >= 4 else "bass")

    def test_sequence_advances_then_regenerates(self) -> None:
        drill = self.make(note_count=3, durations=["q"])
        q = drill.next_question(now=0)
        notes = list(q.notes)
        self.assertEqual(len(notes), 3)
        self.assertEqual(q.durations, ["q", "q", "q"])
        for a, b in zip(notes, notes[1:]):
            self.assertNotEqual(a, b)

        drill.answer(q.target, now=100)
        q2 = drill.next_question(now=200)
        self.assertEqual((q2.active, q2.notes), (1, notes))
        self.assertEqual(q2.target, notes[1].note_name)
        self.assertIn("[", drill.prompt(q2))

        drill.answer(wrong_label(q2), now=300)
        q3 = drill.next_question(now=400)
        self.assertEqual(q3.active, 0)

    def test_narrow_range_repeats_are_accepted(self) -> None:
        cfg = StaffConfig(pitch_range=PitchRange.from_strings("E4", "E4"), note_count=3)
        drill = StaffNoteDrill(DrillContext(), cfg, rng=random.Random(0))
        self.assertEqual(drill.generate_sequence(), [StaffNote("E", 4)] * 3)


if __name__ == "__main__":
    unittest.main()
