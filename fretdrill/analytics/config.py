from __future__ import annotations

"""Analytics configuration (hyperparameters) using Pydantic."""

from pydantic import BaseModel, Field


class AnalyticsConfig(BaseModel):
    """Hyperparameters for heatmaps and trend smoothing.

    - speed_ref_ms: answer time that maps to a speed score of 0 (>0)
    - smoothing_span: EWMA span in sessions (>1)
    """

    speed_ref_ms: int = Field(5000, gt=0)
    smoothing_span: int = Field(10, gt=1)
