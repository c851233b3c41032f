from __future__ import annotations

"""CLI for fretdrill: reference lookups plus terminal fretboard/staff drills."""

import argparse
from typing import Any

import numpy as np

from ..analytics.config import AnalyticsConfig
from ..analytics.heatmap import METRICS, compute_metrics, heatmap_grid, stats_frame, weakest_positions
from ..analytics.trend import ewma_by_session
from ..config.config import load_config, validate_config
from ..fretboard.positions import pool_or_fallback
from ..fretboard.study import StudyConfig, highlighted_positions, visible_notes
from ..fretboard.tuning import DEFAULT_PROFILE, TUNING_PRESETS, find_preset, open_string_names
from ..logger import get_logger, setup_logging
from ..stats.stats import StatsStore
from ..storage.history import load_history
from ..storage.preferences import PreferenceStore
from ..storage.store import FileStore
from ..theory.chord import Chord
from ..theory.focus import FOCUS_MODES
from ..theory.keys import pitch_class_of
from ..theory.scale import KeyContext
from ..theory.spelling import display_name, spell
from ..theory.staff import PitchRange, random_in_range, recommended_clef
from ..util.randomness import make_rng, seed_if_needed
from .explain import enable as explain_enable
from .presets import FRET_PRESETS, STAFF_PRESETS, apply_fret_preset, apply_staff_preset
from .session_manager import SessionManager

logger = get_logger(__name__)


def _build_ui() -> dict[str, Any]:
    def ask(prompt: str) -> str:
        return input(prompt)

    def inform(msg: str) -> None:
        print(msg)

    return {"ask": ask, "inform": inform}


def _key_from_args(args) -> KeyContext | None:
    if not getattr(args, "key", None):
        return None
    return KeyContext(args.key, args.mode or "MAJOR")


def _apply_drill_overrides(cfg: dict, args) -> None:
    drill = cfg.setdefault("drill", {})
    if args.questions is not None:
        drill["questions"] = args.questions
    if args.difficulty is not None:
        drill["difficulty"] = args.difficulty
    if args.focus is not None:
        drill["focus"] = args.focus
    if args.key is not None:
        drill["key_root"] = args.key
    if args.mode is not None:
        drill["key_mode"] = args.mode


def _add_drill_args(p: argparse.ArgumentParser, presets) -> None:
    p.add_argument("--config", default=None)
    p.add_argument("--preset", default=None, choices=sorted(presets))
    p.add_argument("--questions", type=int, default=None)
    p.add_argument("--difficulty", default=None, choices=["EASY", "HARD"])
    p.add_argument("--focus", default=None, choices=list(FOCUS_MODES))
    p.add_argument("--key", default=None, help="Key root for KEY focus, e.g. F or Bb")
    p.add_argument("--mode", default=None, help="Key mode, e.g. MAJOR, DORIAN, NATURAL_MINOR")
    p.add_argument("--flats", dest="accidentals", action="store_const", const="FLAT", help="Remember flat spelling")
    p.add_argument("--sharps", dest="accidentals", action="store_const", const="SHARP", help="Remember sharp spelling")
    p.add_argument("--explain", action="store_true")


def _print_grid(grid: np.ndarray, metric: str) -> None:
    frets = grid.shape[1]
    print("string " + " ".join(f"{f:>5}" for f in range(frets)))
    # highest string on top, like a tab
    for s in range(grid.shape[0] - 1, -1, -1):
        cells = []
        for v in grid[s]:
            if np.isnan(v):
                cells.append(f"{'.':>5}")
            elif metric == "FREQUENCY":
                cells.append(f"{int(v):>5}")
            else:
                cells.append(f"{v:>5.2f}")
        print(f"{s + 1:>6} " + " ".join(cells))


def _parse_chord(symbol: str) -> Chord:
    """Chord symbol to triad: "Am" is A minor, "Eb" is E-flat major."""
    if len(symbol) > 1 and symbol.endswith("m"):
        return Chord(symbol[:-1], "NATURAL_MINOR")
    return Chord(symbol)


def _print_study(positions, string_count: int, max_fret: int) -> None:
    lit = {(p.string_index, p.fret_index): p.note_name for p in positions}
    print("string " + " ".join(f"{f:>3}" for f in range(max_fret + 1)))
    for s in range(string_count - 1, -1, -1):
        cells = [f"{lit.get((s, f), '-'):>3}" for f in range(max_fret + 1)]
        print(f"{s + 1:>6} " + " ".join(cells))


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="fretdrill")
    p.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    p.add_argument("--seed", type=int, default=None, help="Seed random/numpy (overrides SEED env)")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("tunings")

    pp = sub.add_parser("pool")
    pp.add_argument("--tuning", default=None, help="Tuning preset name (prefix match)")
    pp.add_argument("--max-fret", type=int, default=3)
    pp.add_argument("--focus", default="ALL", choices=list(FOCUS_MODES))
    pp.add_argument("--key", default=None)
    pp.add_argument("--mode", default=None)

    sp = sub.add_parser("spell")
    sp.add_argument("note", help="Pitch class 0-11 or a note label")
    sp.add_argument("--key", default=None)
    sp.add_argument("--mode", default=None)
    sp.add_argument("--flats", action="store_true")

    np_ = sub.add_parser("staff-note")
    np_.add_argument("--low", default="E2")
    np_.add_argument("--high", default="E5")
    np_.add_argument("--focus", default="ALL", choices=list(FOCUS_MODES))
    np_.add_argument("--key", default=None)
    np_.add_argument("--mode", default=None)
    np_.add_argument("--count", type=int, default=1)

    sd = sub.add_parser("study")
    sd.add_argument("--tuning", default=None, help="Tuning preset name (prefix match)")
    sd.add_argument("--max-fret", type=int, default=12)
    sd.add_argument("--key", default=None)
    sd.add_argument("--mode", default=None)
    sd.add_argument("--chord", action="append", default=[], help="Triad to highlight, e.g. C or Am; repeatable")
    sd.add_argument("--note", action="append", default=[], help="Extra note to highlight; repeatable")
    sd.add_argument("--string", type=int, action="append", default=[], help="Light a whole string (1 = lowest)")
    sd.add_argument("--fret", type=int, action="append", default=[], help="Light a whole fret")

    st = sub.add_parser("stats")
    st.add_argument("--config", default=None)
    st.add_argument("--metric", default="ACCURACY", choices=list(METRICS))
    st.add_argument("--max-fret", type=int, default=12)
    st.add_argument("--weakest", type=int, default=0, help="Also list the N weakest positions")
    st.add_argument("--trend", type=int, default=0, help="Also show the last N sessions with smoothed accuracy")

    rp = sub.add_parser("run")
    _add_drill_args(rp, FRET_PRESETS)
    rp.add_argument("--tuning", default=None, help="Retune the active guitar to a preset")

    rs = sub.add_parser("run-staff")
    _add_drill_args(rs, STAFF_PRESETS)
    rs.add_argument("--low", default=None)
    rs.add_argument("--high", default=None)
    rs.add_argument("--count", type=int, default=None)
    rs.add_argument("--clef", default=None, choices=["treble", "bass", "random"])

    args = p.parse_args(argv)
    setup_logging(args.log_level)
    seed = seed_if_needed(args.seed)

    try:
        if args.cmd == "tunings":
            for preset in TUNING_PRESETS:
                print(f"{preset.name:<24} {' '.join(open_string_names(preset.offsets))}  {list(preset.offsets)}")
            return 0

        if args.cmd == "pool":
            tuning = DEFAULT_PROFILE.offsets()
            if args.tuning:
                preset = find_preset(args.tuning)
                if preset is None:
                    print(f"Unknown tuning: {args.tuning}")
                    return 2
                tuning = preset.offsets
            positions = pool_or_fallback(tuning, args.max_fret, args.focus, _key_from_args(args))
            for pos in positions:
                print(f"string {pos.string_index + 1} fret {pos.fret_index:>2}: {pos.note_name}")
            print(f"{len(positions)} positions")
            return 0

        if args.cmd == "spell":
            pc = int(args.note) % 12 if args.note.lstrip("-").isdigit() else pitch_class_of(args.note)
            key = _key_from_args(args)
            pref = "FLAT" if args.flats else "SHARP"
            print(f"{spell(pc, key, pref)} ({display_name(spell(pc), key, pref)})")
            return 0

        if args.cmd == "staff-note":
            rng = make_rng(seed)
            pitch_range = PitchRange.from_strings(args.low, args.high)
            for _ in range(max(args.count, 1)):
                note = random_in_range(pitch_range, args.focus, _key_from_args(args), rng)
                print(f"{note}  clef={recommended_clef(note)}")
            return 0

        if args.cmd == "study":
            tuning = DEFAULT_PROFILE.offsets()
            if args.tuning:
                preset = find_preset(args.tuning)
                if preset is None:
                    print(f"Unknown tuning: {args.tuning}")
                    return 2
                tuning = preset.offsets
            study = StudyConfig(
                root=args.key,
                mode=(args.mode or "MAJOR") if args.key else None,
                chords=[_parse_chord(c) for c in args.chord],
                manual_notes=list(args.note),
                active_strings=[s - 1 for s in args.string],
                active_frets=list(args.fret),
            )
            print("notes: " + (" ".join(visible_notes(study)) or "(none)"))
            lit = highlighted_positions(study, tuning, args.max_fret)
            _print_study(lit, len(tuning), args.max_fret)
            print(f"{len(lit)} positions highlighted")
            return 0

        if args.cmd == "stats":
            cfg = validate_config(load_config(args.config))
            store = FileStore(cfg["storage"]["data_dir"])
            profile = PreferenceStore(store).active_profile()
            df = compute_metrics(stats_frame(StatsStore(store).items(), profile.id), AnalyticsConfig())
            print(f"{profile.name} [{profile.tuning_name}] {args.metric}")
            _print_grid(heatmap_grid(df, args.metric, len(profile.tuning), args.max_fret), args.metric)
            if args.weakest:
                print()
                print(weakest_positions(df, args.weakest).to_string(index=False))
            if args.trend:
                history = load_history(cfg["storage"]["data_dir"])
                if history.empty:
                    print("\nNo sessions recorded yet.")
                else:
                    trend = ewma_by_session(history, "accuracy", span=AnalyticsConfig().smoothing_span)
                    print()
                    print(trend[["date", "game_mode", "score", "accuracy", "accuracy_smooth"]].tail(args.trend).to_string(index=False))
            return 0

        if args.cmd in ("run", "run-staff"):
            if args.explain:
                explain_enable(True)
            cfg = load_config(args.config)
            if args.preset:
                if args.cmd == "run":
                    apply_fret_preset(cfg, args.preset)
                else:
                    apply_staff_preset(cfg, args.preset)
            _apply_drill_overrides(cfg, args)
            if args.cmd == "run-staff":
                staff = cfg.setdefault("staff", {})
                for name in ("low", "high", "clef"):
                    if getattr(args, name) is not None:
                        staff[name] = getattr(args, name)
                if args.count is not None:
                    staff["note_count"] = args.count
            cfg = validate_config(cfg)

            sm = SessionManager(cfg, rng=make_rng(seed))
            if args.accidentals:
                sm.prefs.set_accidental_preference(args.accidentals)
            if args.cmd == "run":
                if args.tuning:
                    preset = find_preset(args.tuning)
                    if preset is None:
                        print(f"Unknown tuning: {args.tuning}")
                        return 2
                    profile = sm.profile().retune(preset)
                    sm.prefs.upsert_profile(profile)
                    sm.prefs.set_active_profile(profile.id)
                drill = sm.start_fret_drill()
                print(f"{sm.profile().name} [{sm.profile().tuning_name}], frets 0-{drill.max_fret}")
            else:
                drill = sm.start_staff_drill()

            drill.run(int(cfg["drill"]["questions"]), _build_ui())
            summary = sm.finish()
            print("\nSession Summary:")
            print(summary)
            return 0
    except ValueError as e:
        print(f"ERROR: {e}")
        return 2
    except KeyboardInterrupt:
        print()
        return 130

    p.error(f"unknown command {args.cmd}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
