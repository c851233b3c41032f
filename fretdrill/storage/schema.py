from __future__ import annotations

"""Schema constants and Pydantic models for persisted records."""

from datetime import datetime, timezone
from typing import Literal, Optional

import pandas as pd
from pandas.api.types import CategoricalDtype
from pydantic import BaseModel, Field, field_validator

# --- Constants ---

DIFFICULTIES = {"EASY", "HARD"}
FOCUS_MODES = {"ALL", "NATURALS", "KEY"}
GAME_MODES = {"FRETBOARD_TO_NOTE", "STAFF_TO_NOTE"}

# store keys
STATS_KEY = "note_stats"
PROFILES_KEY = "guitars"
ACTIVE_PROFILE_KEY = "active_guitar"
PREFERENCES_KEY = "preferences"


def _cat_dtype(categories: set[str]) -> CategoricalDtype:
    return CategoricalDtype(categories=sorted(categories), ordered=False)


HISTORY_DTYPES = {
    "session_id": "string",
    "date": pd.DatetimeTZDtype(tz="UTC"),
    "score": "UInt32",
    "questions": "UInt32",
    "correct": "UInt32",
    "timeouts": "UInt32",
    "accuracy": "float32",
    "avg_time_seconds": "float32",
    "difficulty": _cat_dtype(DIFFICULTIES),
    "focus_mode": _cat_dtype(FOCUS_MODES),
    "game_mode": _cat_dtype(GAME_MODES),
    "max_fret": "UInt8",
    "tuning_name": "string",
}


# --- Pydantic models ---

class StatRecordRow(BaseModel):
    correct: int = Field(default=0, ge=0)
    incorrect: int = Field(default=0, ge=0)
    timeouts: int = Field(default=0, ge=0)
    total_time_ms: int = Field(default=0, ge=0)
    last_seen_epoch_ms: int = Field(default=0, ge=0)


class Preferences(BaseModel):
    accidental_preference: Literal["SHARP", "FLAT"] = "SHARP"
    adaptive: bool = True


class SessionSummaryRow(BaseModel):
    session_id: str
    date: datetime
    score: int = Field(ge=0)
    questions: int = Field(ge=0)
    correct: int = Field(ge=0)
    timeouts: int = Field(default=0, ge=0)
    accuracy: float = Field(ge=0.0, le=1.0)
    avg_time_seconds: float = Field(ge=0.0)
    difficulty: Literal["EASY", "HARD"]
    focus_mode: Literal["ALL", "NATURALS", "KEY"] = "ALL"
    game_mode: Literal["FRETBOARD_TO_NOTE", "STAFF_TO_NOTE"] = "FRETBOARD_TO_NOTE"
    max_fret: int = Field(ge=0, le=255)
    tuning_name: Optional[str] = None

    @field_validator("correct")
    @classmethod
    def _correct_le_questions(cls, v: int, info):
        q = int(info.data.get("questions", 0))
        if v > q:
            raise ValueError("correct must be <= questions")
        return v

    @field_validator("date")
    @classmethod
    def _ensure_utc(cls, v: datetime):
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)
