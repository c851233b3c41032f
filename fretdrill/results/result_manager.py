from __future__ import annotations

"""Results Manager.

Collects per-round outcomes in memory and folds them into a session summary
(score, accuracy, average time) when the session ends.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..storage.schema import SessionSummaryRow
from .schema import RoundOutcome, SessionRecord


class ResultManager:
    def __init__(self) -> None:
        self._sessions: Dict[str, SessionRecord] = {}
        self._rounds: Dict[str, List[RoundOutcome]] = {}
        self._max_fret: Dict[str, int] = {}

    def start_session(self, ctx: Dict[str, Any]) -> str:
        session_id = str(uuid4())
        self._sessions[session_id] = SessionRecord(
            session_id=session_id,
            started_at=datetime.now(timezone.utc),
            difficulty=ctx.get("difficulty", "EASY"),
            focus_mode=ctx.get("focus_mode", "ALL"),
            game_mode=ctx.get("game_mode", "FRETBOARD_TO_NOTE"),
            tuning_name=ctx.get("tuning_name"),
            params=ctx.get("params", {}),
        )
        self._rounds[session_id] = []
        return session_id

    def record(self, session_id: str, outcome: RoundOutcome) -> None:
        self._rounds[session_id].append(outcome)

    def note_max_fret(self, session_id: str, max_fret: int) -> None:
        self._max_fret[session_id] = int(max_fret)

    def rounds(self, session_id: str) -> List[RoundOutcome]:
        return list(self._rounds.get(session_id, []))

    def summarize(self, session_id: str) -> Dict[str, Any]:
        rounds = self._rounds.get(session_id, [])
        total = len(rounds)
        correct = sum(1 for r in rounds if r.correct and not r.timed_out)
        timeouts = sum(1 for r in rounds if r.timed_out)
        time_ms = sum(r.elapsed_ms for r in rounds)
        return {
            "session_id": session_id,
            "total": total,
            "correct": correct,
            "timeouts": timeouts,
            "score": correct,
            "accuracy": (correct / total) if total else 0.0,
            "avg_time_seconds": (time_ms / total / 1000.0) if total else 0.0,
        }

    def to_summary_row(self, session_id: str, max_fret: Optional[int] = None) -> SessionSummaryRow:
        rec = self._sessions[session_id]
        s = self.summarize(session_id)
        return SessionSummaryRow(
            session_id=session_id,
            date=rec.started_at,
            score=s["score"],
            questions=s["total"],
            correct=s["correct"],
            timeouts=s["timeouts"],
            accuracy=s["accuracy"],
            avg_time_seconds=s["avg_time_seconds"],
            difficulty=rec.difficulty,
            focus_mode=rec.focus_mode,
            game_mode=rec.game_mode,
            max_fret=max_fret if max_fret is not None else self._max_fret.get(session_id, 0),
            tuning_name=rec.tuning_name,
        )
