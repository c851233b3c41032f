from __future__ import annotations

"""Curated human-friendly parameter presets per drill.

Presets help users select sensible defaults quickly without many flags.
They override the ``drill`` (and for the staff drill, ``staff``) config sections.
"""

FRET_PRESETS = {
    "beginner": {
        "difficulty": "EASY",
        "focus": "NATURALS",
        "starting_fret": 3,
        "max_fret_cap": 5,
        "time_limit_s": 15,
        "questions": 10,
    },
    "default": {
        "difficulty": "EASY",
        "focus": "ALL",
        "starting_fret": 3,
        "max_fret_cap": 12,
        "time_limit_s": 10,
        "questions": 20,
    },
    "advanced": {
        "difficulty": "HARD",
        "focus": "ALL",
        "starting_fret": 7,
        "max_fret_cap": 12,
        "time_limit_s": 6,
        "questions": 40,
    },
}

STAFF_PRESETS = {
    "beginner": {
        "drill": {"difficulty": "EASY", "focus": "NATURALS", "questions": 10},
        "staff": {"low": "E3", "high": "E4", "note_count": 1, "clef": "treble"},
    },
    "default": {
        "drill": {"difficulty": "EASY", "focus": "ALL", "questions": 20},
        "staff": {"low": "E2", "high": "E5", "note_count": 1, "clef": "random"},
    },
    "advanced": {
        "drill": {"difficulty": "HARD", "focus": "ALL", "questions": 30},
        "staff": {"low": "E2", "high": "E5", "note_count": 4, "clef": "random"},
    },
}


def apply_fret_preset(cfg: dict, name: str) -> dict:
    if name not in FRET_PRESETS:
        raise KeyError(f"Unknown preset: {name}")
    cfg.setdefault("drill", {}).update(FRET_PRESETS[name])
    return cfg


def apply_staff_preset(cfg: dict, name: str) -> dict:
    if name not in STAFF_PRESETS:
        raise KeyError(f"Unknown preset: {name}")
    for section, values in STAFF_PRESETS[name].items():
        cfg.setdefault(section, {}).update(values)
    return cfg
