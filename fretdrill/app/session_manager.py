from __future__ import annotations

"""Session Manager: wires config, storage, stats and a drill together.

CLI-agnostic; a front end asks it for a drill, runs rounds, then calls
``finish`` to persist the session summary.
"""

import random
from pathlib import Path
from typing import Any, Dict, Optional

from ..drills.base_drill import BaseDrill, DrillContext
from ..drills.fret_drill import FretNoteDrill
from ..drills.staff_drill import ALL_DURATIONS, StaffConfig, StaffNoteDrill
from ..fretboard.tuning import GuitarProfile
from ..logger import get_logger
from ..policy.scheduler import AdaptiveScheduler, SchedulerWeights
from ..results.result_manager import ResultManager
from ..stats.stats import StatsStore
from ..storage.history import append_sessions, load_history, smart_starting_fret
from ..storage.preferences import PreferenceStore
from ..storage.schema import Preferences
from ..storage.store import FileStore, KeyValueStore
from ..theory.staff import PitchRange
from .explain import trace as xtrace

logger = get_logger(__name__)


class SessionManager:
    def __init__(
        self,
        cfg: Dict[str, Any],
        store: Optional[KeyValueStore] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.cfg = cfg
        self.data_dir = Path(cfg["storage"]["data_dir"])
        self.store = store if store is not None else FileStore(self.data_dir)
        self.prefs = PreferenceStore(self.store)
        self.stats = StatsStore(self.store)
        self.results = ResultManager()
        self.rng = rng or random.Random()
        self.drill: Optional[BaseDrill] = None

    @property
    def history_enabled(self) -> bool:
        return bool(self.cfg["storage"].get("history", True))

    def profile(self) -> GuitarProfile:
        return self.prefs.active_profile()

    def drill_context(self) -> DrillContext:
        d = self.cfg["drill"]
        prefs = self.prefs.preferences(Preferences(
            accidental_preference=self.cfg["ui"]["accidental_preference"],
            adaptive=bool(d["adaptive"]),
        ))
        starting = int(d["starting_fret"])
        if self.history_enabled:
            starting = smart_starting_fret(load_history(self.data_dir), default=starting)
        return DrillContext(
            difficulty=d["difficulty"],
            focus=d["focus"],
            key_root=d["key_root"],
            key_mode=d["key_mode"],
            accidental_preference=prefs.accidental_preference,
            adaptive=prefs.adaptive and bool(d["adaptive"]),
            starting_fret=min(starting, int(d["max_fret_cap"])),
            max_fret_cap=int(d["max_fret_cap"]),
            time_limit_ms=int(d["time_limit_s"]) * 1000,
            max_health=int(d["max_health"]),
            level_up_every=int(d["level_up_every"]),
        )

    def start_fret_drill(self) -> FretNoteDrill:
        profile = self.profile()
        scheduler = AdaptiveScheduler(SchedulerWeights.model_validate(self.cfg["scheduler"]), rng=self.rng)
        drill = FretNoteDrill(
            self.drill_context(),
            self.stats,
            profile=profile,
            scheduler=scheduler,
            results=self.results,
            rng=self.rng,
        )
        drill.start(profile.tuning_name)
        self.drill = drill
        xtrace("session_started", {"drill": "fret", "profile": profile.id, "focus": drill.ctx.focus})
        return drill

    def start_staff_drill(self) -> StaffNoteDrill:
        s = self.cfg["staff"]
        durations = list(ALL_DURATIONS) if s["durations"] == "all" else list(s["durations"])
        staff = StaffConfig(
            pitch_range=PitchRange.from_strings(s["low"], s["high"]),
            clef=s["clef"],
            note_count=int(s["note_count"]),
            durations=durations,
            guitar_transposition=bool(s["guitar_transposition"]),
        )
        drill = StaffNoteDrill(self.drill_context(), staff, results=self.results, rng=self.rng)
        drill.start(self.profile().tuning_name)
        self.drill = drill
        xtrace("session_started", {"drill": "staff", "range": f"{s['low']}-{s['high']}"})
        return drill

    def finish(self) -> Dict[str, Any]:
        """Summarize the running drill and append it to the history table."""
        drill = self.drill
        if drill is None or drill.session_id is None:
            return {}
        summary = self.results.summarize(drill.session_id)
        if self.history_enabled and summary["total"] > 0:
            max_fret = getattr(drill, "max_fret", 0)
            row = self.results.to_summary_row(drill.session_id, max_fret=max_fret)
            append_sessions([row], self.data_dir)
        xtrace("session_saved", {"session_id": drill.session_id, "history": self.history_enabled})
        self.drill = None
        return summary
