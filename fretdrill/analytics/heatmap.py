from __future__ import annotations

"""Per-position metrics from the stats store, shaped for a fretboard heatmap.

Metrics:
- ACCURACY: correct / attempts
- SPEED: 1 - min(avg_ms, ref) / ref, so faster answers score higher
- FREQUENCY: attempts
"""

from typing import Iterable, Tuple

import numpy as np
import pandas as pd

from ..stats.stats import StatRecord
from .config import AnalyticsConfig

METRICS = ("ACCURACY", "SPEED", "FREQUENCY")


def stats_frame(items: Iterable[Tuple[str, StatRecord]], tuning_id: str) -> pd.DataFrame:
    """One row per recorded position of ``tuning_id``."""
    prefix = f"{tuning_id}-"
    rows = []
    for key, rec in items:
        if not key.startswith(prefix):
            continue
        parts = key[len(prefix):].split("-")
        if len(parts) != 2 or not all(p.isdigit() for p in parts):
            continue
        rows.append({
            "string": int(parts[0]),
            "fret": int(parts[1]),
            "attempts": rec.total,
            "correct": rec.correct,
            "timeouts": rec.timeouts,
            "total_time_ms": rec.total_time_ms,
            "last_seen_epoch_ms": rec.last_seen_epoch_ms,
        })
    cols = ["string", "fret", "attempts", "correct", "timeouts", "total_time_ms", "last_seen_epoch_ms"]
    return pd.DataFrame(rows, columns=cols)


def compute_metrics(df: pd.DataFrame, cfg: AnalyticsConfig) -> pd.DataFrame:
    """Add accuracy, avg_time_ms and speed columns (NaN where never attempted)."""
    out = df.copy()
    attempts = out["attempts"].astype("float32")
    safe = attempts.where(attempts > 0, other=np.nan)
    out["accuracy"] = (out["correct"].astype("float32") / safe).astype("float32")
    out["avg_time_ms"] = (out["total_time_ms"].astype("float32") / safe).astype("float32")
    ref = float(cfg.speed_ref_ms)
    out["speed"] = (1.0 - np.minimum(out["avg_time_ms"], ref) / ref).astype("float32")
    return out


def heatmap_grid(df: pd.DataFrame, metric: str, strings: int = 6, max_fret: int = 12, cfg: AnalyticsConfig | None = None) -> np.ndarray:
    """``strings x (max_fret + 1)`` array of the metric; NaN for unseen cells.

    FREQUENCY cells without data are 0 instead of NaN.
    """
    metric = metric.upper()
    if metric not in METRICS:
        raise ValueError(f"Unknown metric: {metric}")
    cfg = cfg or AnalyticsConfig()
    fill = 0.0 if metric == "FREQUENCY" else np.nan
    grid = np.full((strings, max_fret + 1), fill, dtype="float32")
    if df.empty:
        return grid
    m = compute_metrics(df, cfg)
    col = {"ACCURACY": "accuracy", "SPEED": "speed", "FREQUENCY": "attempts"}[metric]
    inside = m[(m["string"] < strings) & (m["fret"] <= max_fret)]
    grid[inside["string"].to_numpy(), inside["fret"].to_numpy()] = inside[col].astype("float32").to_numpy()
    return grid


def weakest_positions(df: pd.DataFrame, n: int = 5, cfg: AnalyticsConfig | None = None) -> pd.DataFrame:
    """Lowest-accuracy positions first, slower answers breaking ties."""
    if df.empty:
        return df
    m = compute_metrics(df, cfg or AnalyticsConfig())
    m = m[m["attempts"] > 0]
    return m.sort_values(["accuracy", "avg_time_ms"], ascending=[True, False], kind="stable").head(n).reset_index(drop=True)
