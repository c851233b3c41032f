from __future__ import annotations

"""Session trend smoothing (EWMA over session order)."""

import pandas as pd


def ewma_by_session(
    df: pd.DataFrame,
    value_col: str,
    span: int,
    group_cols: list[str] | None = None,
) -> pd.DataFrame:
    """Smooth ``value_col`` over sessions, optionally per group.

    Returns a copy sorted by date with a new column f"{value_col}_smooth".
    """
    g = df.sort_values("date", kind="stable").reset_index(drop=True).copy()
    if g.empty:
        g[f"{value_col}_smooth"] = pd.Series(dtype="float32")
        return g
    values = g[value_col].astype("float32")
    if group_cols:
        smooth = values.groupby([g[c] for c in group_cols], observed=True).transform(lambda s: s.ewm(span=span).mean())
    else:
        smooth = values.ewm(span=span).mean()
    g[f"{value_col}_smooth"] = smooth.astype("float32")
    return g
