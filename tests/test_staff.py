import random
import unittest

from fretdrill.theory.keys import NOTES_SHARP, UnknownNoteError
from fretdrill.theory.scale import KeyContext
from fretdrill.theory.staff import (
    DEFAULT_NOTE,
    PitchRange,
    StaffNote,
    fretboard_to_staff_note,
    notes_in_range,
    parse_note_string,
    random_in_range,
    recommended_clef,
    to_staff_note,
)


class RandomInRangeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.rng = random.Random(5)

    def test_single_note_range(self) -> None:
        rng_e4 = PitchRange.from_strings("E4", "E4")
        for _ in range(20):
            self.assertEqual(random_in_range(rng_e4, "ALL", None, self.rng), StaffNote("E", 4))

    def test_inverted_range_falls_back(self) -> None:
        inverted = PitchRange.from_strings("E5", "E2")
        self.assertTrue(inverted.is_inverted)
        with self.assertLogs("fretdrill.theory.staff", level="WARNING"):
            self.assertEqual(random_in_range(inverted, "ALL", None, self.rng), DEFAULT_NOTE)
        self.assertEqual(DEFAULT_NOTE, StaffNote("C", 4))

    def test_no_allowed_note_falls_back(self) -> None:
        between = PitchRange.from_strings("C#3", "C#3")
        with self.assertLogs("fretdrill.theory.staff", level="WARNING"):
            self.assertEqual(random_in_range(between, "NATURALS", None, self.rng), DEFAULT_NOTE)

    def test_results_respect_bounds_and_focus(self) -> None:
        bounds = PitchRange.from_strings("C3", "G3")
        for _ in range(200):
            note = random_in_range(bounds, "NATURALS", None, self.rng)
            self.assertTrue(bounds.contains(note))
            self.assertEqual(len(note.note_name), 1)

    def test_key_focus_candidates(self) -> None:
        bounds = PitchRange.from_strings("A3", "C4")
        found = notes_in_range(bounds, "KEY", KeyContext("F"))
        self.assertEqual([str(n) for n in found], ["A3", "A#3", "C4"])

    def test_candidates_cover_whole_range(self) -> None:
        found = notes_in_range(PitchRange.from_strings("E2", "E5"))
        self.assertEqual(len(found), 37)
        self.assertEqual(found[0], StaffNote("E", 2))
        self.assertEqual(found[-1], StaffNote("E", 5))


class ClefTests(unittest.TestCase):
    def test_outside_octave_four(self) -> None:
        self.assertEqual(recommended_clef(StaffNote("C", 5)), "treble")
        self.assertEqual(recommended_clef(StaffNote("B", 3)), "bass")
        self.assertEqual(recommended_clef(StaffNote("E", 2)), "bass")

    def test_octave_four_always_reads_treble(self) -> None:
        for name in NOTES_SHARP:
            self.assertEqual(recommended_clef(StaffNote(name, 4)), "treble")


class StaffMappingTests(unittest.TestCase):
    def test_to_staff_note(self) -> None:
        self.assertEqual(to_staff_note(0), StaffNote("E", 2))
        self.assertEqual(to_staff_note(8), StaffNote("C", 3))
        self.assertEqual(to_staff_note(-5), StaffNote("B", 1))
        self.assertEqual(fretboard_to_staff_note(24, 0), StaffNote("E", 4))
        self.assertEqual(fretboard_to_staff_note(19, 1), StaffNote("C", 4))

    def test_semitones_round_trip(self) -> None:
        for semis in range(-12, 49):
            self.assertEqual(to_staff_note(semis).semitones_from_reference, semis)

    def test_parse_note_string(self) -> None:
        self.assertEqual(parse_note_string("Bb3"), StaffNote("A#", 3))
        self.assertEqual(parse_note_string("B♭3"), StaffNote("A#", 3))
        self.assertEqual(parse_note_string(" c#4 "), StaffNote("C#", 4))
        for bad in ("H2", "C", "E#x", ""):
            with self.assertRaises(UnknownNoteError):
                parse_note_string(bad)

    def test_display_and_transpose(self) -> None:
        note = StaffNote("A#", 3)
        self.assertEqual(note.display("FLAT"), "B♭3")
        self.assertEqual(note.display(), "A♯3")
        self.assertEqual(note.transposed(1), StaffNote("A#", 4))


if __name__ == "__main__":
    unittest.main()
