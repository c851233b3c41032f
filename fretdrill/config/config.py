from __future__ import annotations

"""Configuration loading and validation for fretdrill.

Loads YAML configuration, applies defaults, and replaces invalid enum values
with safe defaults (logged) rather than failing.
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from ..logger import get_logger
from ..policy.scheduler import SchedulerWeights
from ..theory.focus import FOCUS_MODES
from ..theory.keys import UnknownNoteError, normalize_name
from ..theory.scales import normalize_mode
from ..theory.spelling import ACCIDENTAL_STYLES
from ..theory.staff import DEFAULT_HIGH, DEFAULT_LOW, parse_note_string

logger = get_logger(__name__)

ALLOWED_DIFFICULTIES = {"EASY", "HARD"}
ALLOWED_CLEFS = {"treble", "bass", "random"}
ALLOWED_DURATIONS = ("w", "h", "q", "8", "16", "wd", "hd", "qd", "8d")


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        print(f"ERROR: Config file not found: {path}", file=sys.stderr)
        sys.exit(1)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or the packaged defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.
    """
    if path:
        return _load_yaml(Path(path))
    return _load_yaml(Path(__file__).with_name("defaults.yml"))


def _enum(section: Dict[str, Any], name: str, allowed, default, upper: bool = True) -> None:
    value = section.get(name)
    norm = str(value).upper() if upper and value is not None else value
    if norm not in allowed:
        logger.warning(f"Unsupported {name} {value!r}, using {default!r}.")
        section[name] = default
    else:
        section[name] = norm


def _int(section: Dict[str, Any], name: str, default: int, minimum: int = 0) -> None:
    try:
        section[name] = max(int(section.get(name, default)), minimum)
    except (TypeError, ValueError):
        logger.warning(f"Invalid {name} {section.get(name)!r}, using {default}.")
        section[name] = default


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply defaults and validate configuration values.

    Args:
        cfg: The raw configuration dictionary.

    Returns:
        The validated and merged configuration dictionary.
    """
    for section in ("drill", "staff", "scheduler", "storage", "ui"):
        if not isinstance(cfg.get(section), dict):
            cfg[section] = {}

    drill = cfg["drill"]
    staff = cfg["staff"]
    storage = cfg["storage"]
    ui = cfg["ui"]

    drill.setdefault("difficulty", "EASY")
    drill.setdefault("focus", "ALL")
    drill.setdefault("key_root", "C")
    drill.setdefault("key_mode", "MAJOR")
    drill.setdefault("starting_fret", 3)
    drill.setdefault("max_fret_cap", 12)
    drill.setdefault("time_limit_s", 10)
    drill.setdefault("adaptive", True)
    drill.setdefault("questions", 20)
    drill.setdefault("max_health", 5)
    drill.setdefault("level_up_every", 5)

    staff.setdefault("low", DEFAULT_LOW)
    staff.setdefault("high", DEFAULT_HIGH)
    staff.setdefault("clef", "random")
    staff.setdefault("note_count", 1)
    staff.setdefault("durations", "all")
    staff.setdefault("guitar_transposition", True)

    storage.setdefault("data_dir", "./fretdrill_data")
    storage.setdefault("history", True)

    ui.setdefault("accidental_preference", "SHARP")
    ui.setdefault("log_level", "WARNING")

    # Enum validations
    _enum(drill, "difficulty", ALLOWED_DIFFICULTIES, "EASY")
    _enum(drill, "focus", FOCUS_MODES, "ALL")
    _enum(ui, "accidental_preference", ACCIDENTAL_STYLES, "SHARP")
    _enum(staff, "clef", ALLOWED_CLEFS, "random", upper=False)

    try:
        drill["key_root"] = normalize_name(str(drill["key_root"]))
    except UnknownNoteError:
        logger.warning(f"Unsupported key_root {drill['key_root']!r}, using 'C'.")
        drill["key_root"] = "C"
    try:
        drill["key_mode"] = normalize_mode(str(drill["key_mode"]))
    except ValueError:
        logger.warning(f"Unsupported key_mode {drill['key_mode']!r}, using 'MAJOR'.")
        drill["key_mode"] = "MAJOR"

    _int(drill, "starting_fret", 3)
    _int(drill, "max_fret_cap", 12)
    _int(drill, "time_limit_s", 10, minimum=1)
    _int(drill, "questions", 20, minimum=1)
    _int(drill, "max_health", 5, minimum=1)
    _int(drill, "level_up_every", 5, minimum=1)
    drill["adaptive"] = bool(drill["adaptive"])
    if drill["starting_fret"] > drill["max_fret_cap"]:
        logger.warning("starting_fret above max_fret_cap; clamping.")
        drill["starting_fret"] = drill["max_fret_cap"]

    _int(staff, "note_count", 1, minimum=1)
    for bound, default in (("low", DEFAULT_LOW), ("high", DEFAULT_HIGH)):
        try:
            parse_note_string(str(staff[bound]))
        except UnknownNoteError:
            logger.warning(f"Invalid staff {bound} {staff[bound]!r}, using {default}.")
            staff[bound] = default
    durations = staff.get("durations")
    if durations != "all":
        kept = [str(d) for d in (durations or []) if str(d) in ALLOWED_DURATIONS]
        staff["durations"] = kept or "all"

    try:
        cfg["scheduler"] = SchedulerWeights.model_validate(cfg["scheduler"]).model_dump()
    except ValidationError as e:
        logger.warning(f"Invalid scheduler weights, using defaults: {e.errors()[:1]}")
        cfg["scheduler"] = SchedulerWeights().model_dump()

    storage["history"] = bool(storage["history"])
    return cfg
