from __future__ import annotations

"""Result schema dataclasses."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class SessionRecord:
    session_id: str
    started_at: datetime
    difficulty: str
    focus_mode: str
    game_mode: str
    tuning_name: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RoundOutcome:
    """One answered (or timed-out) round, as handed to the session recorder."""

    index: int
    target: str                 # note label, e.g. "F#"
    answer: Optional[str]       # None on timeout
    correct: bool
    timed_out: bool
    elapsed_ms: int
    timestamp_ms: int
    stat_key: Optional[str] = None   # fretboard rounds only
