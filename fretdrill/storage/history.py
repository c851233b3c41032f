from __future__ import annotations

"""Parquet-backed session history using pandas + pyarrow.

Unit of data: one summary row per finished session.
"""

from pathlib import Path

import pandas as pd

from .schema import HISTORY_DTYPES, SessionSummaryRow

HISTORY_FILE = "history.parquet"
MIN_STARTING_FRET = 3


def _empty_df() -> pd.DataFrame:
    return pd.DataFrame({k: pd.Series(dtype=v) for k, v in HISTORY_DTYPES.items()})


def _fix_dtypes(df: pd.DataFrame) -> pd.DataFrame:
    for col, dt in HISTORY_DTYPES.items():
        if col not in df.columns:
            df[col] = pd.Series(pd.NA, index=df.index)
        df[col] = df[col].astype(dt)
    return df[list(HISTORY_DTYPES.keys())]


def init_history(data_dir: Path) -> Path:
    """Ensure the data directory and an empty history file exist."""
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    f = data_dir / HISTORY_FILE
    if not f.exists():
        _empty_df().to_parquet(f, engine="pyarrow", compression="zstd", index=False)
    return f


def rows_to_frame(rows: list[SessionSummaryRow]) -> pd.DataFrame:
    """Validate rows and return a DataFrame with the history dtypes."""
    if not isinstance(rows, list):
        raise TypeError("rows must be a list[SessionSummaryRow]")
    parsed = [r if isinstance(r, SessionSummaryRow) else SessionSummaryRow.model_validate(r) for r in rows]
    df = pd.DataFrame([r.model_dump() for r in parsed])
    return _fix_dtypes(df)


def append_sessions(rows: list[SessionSummaryRow], data_dir: Path) -> None:
    """Append summary rows; exact duplicates are dropped."""
    f = init_history(data_dir)
    df_old = _fix_dtypes(pd.read_parquet(f, engine="pyarrow"))
    df_new = rows_to_frame(rows)
    combined = pd.concat([df_old, df_new], ignore_index=True) if not df_old.empty else df_new
    combined = _fix_dtypes(combined).drop_duplicates()
    combined.to_parquet(f, engine="pyarrow", compression="zstd", index=False)


def load_history(data_dir: Path) -> pd.DataFrame:
    """Full history sorted by date; empty frame if nothing was recorded."""
    f = Path(data_dir) / HISTORY_FILE
    if not f.exists():
        return _empty_df()
    df = _fix_dtypes(pd.read_parquet(f, engine="pyarrow"))
    return df.sort_values("date", kind="stable").reset_index(drop=True)


def smart_starting_fret(df: pd.DataFrame, default: int = MIN_STARTING_FRET) -> int:
    """Resume a couple of frets below where the last session ended."""
    if df.empty:
        return default
    last = df.iloc[-1]["max_fret"]
    if pd.isna(last):
        return default
    return max(int(last) - 2, MIN_STARTING_FRET)
