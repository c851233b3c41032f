import os
import tempfile
import unittest

from fretdrill.app.presets import FRET_PRESETS, apply_fret_preset, apply_staff_preset
from fretdrill.config.config import load_config, validate_config
from fretdrill.policy.scheduler import SchedulerWeights


class ConfigDefaultsTests(unittest.TestCase):
    def test_packaged_defaults(self) -> None:
        cfg = validate_config(load_config())
        self.assertEqual(cfg["drill"]["difficulty"], "EASY")
        self.assertEqual(cfg["drill"]["focus"], "ALL")
        self.assertEqual(cfg["drill"]["starting_fret"], 3)
        self.assertEqual(cfg["staff"]["low"], "E2")
        self.assertEqual(cfg["staff"]["high"], "E5")
        self.assertEqual(cfg["ui"]["accidental_preference"], "SHARP")
        self.assertEqual(cfg["scheduler"], SchedulerWeights().model_dump())

    def test_empty_config_gets_defaults(self) -> None:
        cfg = validate_config({})
        self.assertEqual(cfg["drill"]["max_fret_cap"], 12)
        self.assertEqual(cfg["drill"]["time_limit_s"], 10)
        self.assertEqual(cfg["staff"]["durations"], "all")
        self.assertTrue(cfg["storage"]["history"])
        self.assertEqual(cfg["scheduler"]["unseen"], 100)

    def test_missing_file_exits(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(SystemExit):
                load_config(os.path.join(tmp, "nope.yml"))

    def test_yaml_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "cfg.yml")
            with open(path, "w", encoding="utf-8") as f:
                f.write("drill:\n  difficulty: hard\n  focus: key\n  key_root: Bb\n  key_mode: minor\n")
            cfg = validate_config(load_config(path))
        self.assertEqual(cfg["drill"]["difficulty"], "HARD")
        self.assertEqual(cfg["drill"]["focus"], "KEY")
        self.assertEqual(cfg["drill"]["key_root"], "A#")
        self.assertEqual(cfg["drill"]["key_mode"], "NATURAL_MINOR")


class ConfigValidationTests(unittest.TestCase):
    def test_invalid_enums_are_replaced(self) -> None:
        raw = {"drill": {"difficulty": "INSANE", "focus": "weird"}, "ui": {"accidental_preference": "double"}}
        with self.assertLogs("fretdrill.config.config", level="WARNING"):
            cfg = validate_config(raw)
        self.assertEqual(cfg["drill"]["difficulty"], "EASY")
        self.assertEqual(cfg["drill"]["focus"], "ALL")
        self.assertEqual(cfg["ui"]["accidental_preference"], "SHARP")

    def test_invalid_key_falls_back_to_c_major(self) -> None:
        with self.assertLogs("fretdrill.config.config", level="WARNING"):
            cfg = validate_config({"drill": {"key_root": "H", "key_mode": "blues"}})
        self.assertEqual((cfg["drill"]["key_root"], cfg["drill"]["key_mode"]), ("C", "MAJOR"))

    def test_staff_section(self) -> None:
        with self.assertLogs("fretdrill.config.config", level="WARNING"):
            cfg = validate_config({"staff": {"low": "Q9", "clef": "alto", "durations": ["q", "zz", "8d"]}})
        self.assertEqual(cfg["staff"]["low"], "E2")
        self.assertEqual(cfg["staff"]["clef"], "random")
        self.assertEqual(cfg["staff"]["durations"], ["q", "8d"])
        self.assertEqual(validate_config({"staff": {"durations": ["zz"]}})["staff"]["durations"], "all")

    def test_bad_scheduler_weights(self) -> None:
        with self.assertLogs("fretdrill.config.config", level="WARNING"):
            cfg = validate_config({"scheduler": {"speed_cap_ms": 0}})
        self.assertEqual(cfg["scheduler"], SchedulerWeights().model_dump())

    def test_custom_scheduler_weights_survive(self) -> None:
        cfg = validate_config({"scheduler": {"recency": 80}})
        self.assertEqual(cfg["scheduler"]["recency"], 80)
        self.assertEqual(cfg["scheduler"]["floor"], 5)

    def test_starting_fret_clamped_to_cap(self) -> None:
        with self.assertLogs("fretdrill.config.config", level="WARNING"):
            cfg = validate_config({"drill": {"starting_fret": 15, "max_fret_cap": 9}})
        self.assertEqual(cfg["drill"]["starting_fret"], 9)

    def test_non_integer_values(self) -> None:
        with self.assertLogs("fretdrill.config.config", level="WARNING"):
            cfg = validate_config({"drill": {"questions": "lots"}})
        self.assertEqual(cfg["drill"]["questions"], 20)


class PresetTests(unittest.TestCase):
    def test_fret_preset(self) -> None:
        cfg = validate_config(apply_fret_preset({}, "beginner"))
        self.assertEqual(cfg["drill"]["focus"], "NATURALS")
        self.assertEqual(cfg["drill"]["max_fret_cap"], 5)
        self.assertEqual(set(FRET_PRESETS), {"beginner", "default", "advanced"})

    def test_staff_preset(self) -> None:
        cfg = validate_config(apply_staff_preset({}, "advanced"))
        self.assertEqual(cfg["staff"]["note_count"], 4)
        self.assertEqual(cfg["drill"]["difficulty"], "HARD")

    def test_unknown_preset(self) -> None:
        with self.assertRaises(KeyError):
            apply_fret_preset({}, "expert")


if __name__ == "__main__":
    unittest.main()
