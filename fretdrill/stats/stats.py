from __future__ import annotations

"""Per-position performance stats keyed by tuning identity and position.

All records live in one JSON map under a single store key. Records are created
lazily on first outcome and never deleted.
"""

import time
from dataclasses import asdict, dataclass
from typing import Dict, Iterator, Optional, Tuple

from pydantic import ValidationError

from ..logger import get_logger
from ..storage.schema import STATS_KEY, StatRecordRow
from ..storage.store import KeyValueStore, decode_json, encode_json

logger = get_logger(__name__)


def stat_key(tuning_id: str, string_index: int, fret_index: int) -> str:
    """``"<tuning>-<string>-<fret>"``: same fret under two profiles stays separate."""
    return f"{tuning_id}-{int(string_index)}-{int(fret_index)}"


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class StatRecord:
    correct: int = 0
    incorrect: int = 0
    timeouts: int = 0
    total_time_ms: int = 0
    last_seen_epoch_ms: int = 0

    @property
    def total(self) -> int:
        return self.correct + self.incorrect + self.timeouts

    @property
    def accuracy(self) -> float:
        return self.correct / self.total if self.total else 0.0

    @property
    def avg_time_ms(self) -> float:
        return self.total_time_ms / self.total if self.total else 0.0

    def with_outcome(self, correct: bool, timed_out: bool, elapsed_ms: int, now: int) -> "StatRecord":
        """Count exactly one of correct/incorrect/timeouts; a timeout wins."""
        return StatRecord(
            correct=self.correct + (1 if correct and not timed_out else 0),
            incorrect=self.incorrect + (1 if not correct and not timed_out else 0),
            timeouts=self.timeouts + (1 if timed_out else 0),
            total_time_ms=self.total_time_ms + max(int(elapsed_ms), 0),
            last_seen_epoch_ms=int(now),
        )

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data) -> Optional["StatRecord"]:
        """Validated record, or None when the stored value is malformed."""
        if not isinstance(data, dict):
            return None
        try:
            row = StatRecordRow.model_validate(data)
        except ValidationError:
            return None
        return cls(**row.model_dump())


class StatsStore:
    """Reads and writes StatRecords through a key/value store."""

    def __init__(self, store: KeyValueStore, namespace: str = STATS_KEY) -> None:
        self.store = store
        self.namespace = namespace

    def _load_map(self, raw: Optional[bytes]) -> Dict[str, dict]:
        data = decode_json(raw, default={})
        if not isinstance(data, dict):
            logger.warning("Stats map is not an object; starting fresh")
            return {}
        return data

    def get(self, key: str) -> Optional[StatRecord]:
        entry = self._load_map(self.store.get(self.namespace)).get(key)
        if entry is None:
            return None
        rec = StatRecord.from_dict(entry)
        if rec is None:
            logger.warning(f"Ignoring malformed stat record {key!r}")
        return rec

    def snapshot(self) -> Dict[str, StatRecord]:
        """All well-formed records, read once (the scheduler reads this per round)."""
        out: Dict[str, StatRecord] = {}
        for key, entry in self._load_map(self.store.get(self.namespace)).items():
            rec = StatRecord.from_dict(entry)
            if rec is not None:
                out[key] = rec
        return out

    def is_empty(self) -> bool:
        return not self.snapshot()

    def items(self) -> Iterator[Tuple[str, StatRecord]]:
        return iter(sorted(self.snapshot().items()))

    def record_outcome(
        self,
        key: str,
        correct: bool,
        timed_out: bool,
        elapsed_ms: int,
        now: Optional[int] = None,
    ) -> StatRecord:
        """Apply one round's outcome as an atomic read-modify-write of ``key``."""
        stamp = now_ms() if now is None else int(now)
        result: Dict[str, StatRecord] = {}

        def _apply(raw: Optional[bytes]) -> bytes:
            data = self._load_map(raw)
            base = StatRecord.from_dict(data.get(key)) or StatRecord()
            updated = base.with_outcome(correct, timed_out, elapsed_ms, stamp)
            data[key] = updated.to_dict()
            result["rec"] = updated
            return encode_json(data)

        self.store.update(self.namespace, _apply)
        return result["rec"]
