from __future__ import annotations

"""Base drill abstractions: context, per-round state and the terminal run loop."""

import random
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from ..app.explain import trace as xtrace
from ..results.result_manager import ResultManager
from ..results.schema import RoundOutcome
from ..theory.keys import UnknownNoteError, pitch_class_of
from ..theory.scale import KeyContext
from ..theory.spelling import display_name


@dataclass
class DrillContext:
    """Session-scoped drill configuration."""

    difficulty: str = "EASY"
    focus: str = "ALL"
    key_root: Optional[str] = "C"
    key_mode: Optional[str] = "MAJOR"
    accidental_preference: str = "SHARP"
    adaptive: bool = True
    starting_fret: int = 3
    max_fret_cap: int = 12
    time_limit_ms: int = 10000
    max_health: int = 5
    level_up_every: int = 5

    def key(self) -> Optional[KeyContext]:
        if self.focus == "KEY" and self.key_root and self.key_mode:
            return KeyContext(self.key_root, self.key_mode)
        return None

    def spelled(self, name: str) -> str:
        """Display spelling; key context only counts in KEY focus."""
        return display_name(name, self.key(), self.accidental_preference)


@dataclass
class Question:
    index: int
    target: str
    options: List[str]
    started_ms: int
    display_options: List[str] = field(default_factory=list)


@dataclass
class DrillState:
    score: int = 0
    streak: int = 0
    health: int = 5
    index: int = 0
    over: bool = False


@dataclass(frozen=True)
class RoundResult:
    correct: bool
    timed_out: bool
    message: str
    game_over: bool
    level_up: bool = False
    powerup_label: Optional[str] = None


def now_ms() -> int:
    return int(time.time() * 1000)


class BaseDrill:
    """Abstract base for drills; subclasses build questions and react to outcomes."""

    game_mode = "FRETBOARD_TO_NOTE"

    def __init__(
        self,
        ctx: DrillContext,
        results: Optional[ResultManager] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.ctx = ctx
        self.rng = rng or random.Random()
        self.results = results
        self.session_id: Optional[str] = None
        self.state = DrillState(health=ctx.max_health)
        self.current: Optional[Question] = None

    def start(self, tuning_name: Optional[str] = None) -> None:
        self.state = DrillState(health=self.ctx.max_health)
        self.current = None
        if self.results is not None:
            self.session_id = self.results.start_session({
                "difficulty": self.ctx.difficulty,
                "focus_mode": self.ctx.focus,
                "game_mode": self.game_mode,
                "tuning_name": tuning_name,
            })

    def next_question(self, now: Optional[int] = None) -> Question:
        raise NotImplementedError

    def grade(self, answer: str, truth: str) -> bool:
        """Enharmonic-aware: "Bb" answers an "A#" target.

        Raises:
            UnknownNoteError: if ``answer`` is not a note label.
        """
        return pitch_class_of(answer) == pitch_class_of(truth)

    def _record(self, question: Question, answer: Optional[str], correct: bool, timed_out: bool, elapsed_ms: int, now: int) -> None:
        """Hook for subclasses (stats store); base keeps the session log."""
        if self.results is not None and self.session_id is not None:
            self.results.record(self.session_id, RoundOutcome(
                index=question.index,
                target=question.target,
                answer=answer,
                correct=correct,
                timed_out=timed_out,
                elapsed_ms=elapsed_ms,
                timestamp_ms=now,
                stat_key=self._stat_key(question),
            ))

    def _stat_key(self, question: Question) -> Optional[str]:
        return None

    def _on_correct(self) -> tuple[bool, Optional[str]]:
        """Returns (level_up, powerup_label)."""
        return False, None

    def _on_miss(self) -> None:
        pass

    def _resolve(self, answer: Optional[str], timed_out: bool, elapsed_ms: Optional[int], now: Optional[int]) -> RoundResult:
        q = self.current
        if q is None or self.state.over:
            raise RuntimeError("no open question")
        stamp = now_ms() if now is None else int(now)
        elapsed = max(stamp - q.started_ms, 0) if elapsed_ms is None else max(int(elapsed_ms), 0)
        correct = (not timed_out) and answer is not None and self.grade(answer, q.target)
        self._record(q, answer, correct, timed_out, elapsed, stamp)
        self.current = None

        shown = self.ctx.spelled(q.target)
        level_up, label = False, None
        if correct:
            self.state.score += 1
            self.state.streak += 1
            level_up, label = self._on_correct()
            message = label or "Correct!"
            if level_up:
                message = f"{label} + Level Up!" if label else "Level Up! Fretboard Expanded!"
        else:
            self.state.streak = 0
            self.state.health = max(self.state.health - 1, 0)
            self._on_miss()
            message = f"Time up! It was {shown}" if timed_out else f"Wrong! It was {shown}"
        self.state.over = self.state.health <= 0
        xtrace("graded", {"index": q.index, "answer": answer, "truth": q.target, "correct": correct, "timeout": timed_out})
        return RoundResult(correct, timed_out, message, self.state.over, level_up, label)

    def answer(self, label: str, elapsed_ms: Optional[int] = None, now: Optional[int] = None) -> RoundResult:
        return self._resolve(label, False, elapsed_ms, now)

    def timeout(self, elapsed_ms: Optional[int] = None, now: Optional[int] = None) -> RoundResult:
        return self._resolve(None, True, elapsed_ms, now)

    def prompt(self, q: Question) -> str:
        return f"Q{q.index}: name the note"

    def run(self, num_questions: int, ui_callbacks: Dict[str, Callable]) -> Dict:
        """Terminal loop: ask, grade, repeat until done or out of health.

        Answers slower than the time limit count as timeouts.
        """
        ask = ui_callbacks["ask"]
        inform = ui_callbacks["inform"]
        clock = ui_callbacks.get("clock", now_ms)

        for _ in range(num_questions):
            if self.state.over:
                break
            q = self.next_question(now=clock())
            inform(self.prompt(q))
            if q.display_options:
                inform("Options: " + "  ".join(q.display_options))
            while True:
                ans = ask("> ").strip()
                stamp = clock()
                if stamp - q.started_ms > self.ctx.time_limit_ms:
                    result = self.timeout(now=stamp)
                    break
                try:
                    result = self.answer(ans, now=stamp)
                except UnknownNoteError:
                    inform(f"'{ans}' is not a note name, try again.")
                    continue
                break
            inform(result.message)

        summary: Dict = {"score": self.state.score, "health": self.state.health}
        if self.results is not None and self.session_id is not None:
            summary.update(self.results.summarize(self.session_id))
        xtrace("session_ended", summary)
        return summary
