from .config import AnalyticsConfig
from .heatmap import METRICS, compute_metrics, heatmap_grid, stats_frame, weakest_positions
from .trend import ewma_by_session

__all__ = [
    "AnalyticsConfig",
    "METRICS",
    "compute_metrics",
    "heatmap_grid",
    "stats_frame",
    "weakest_positions",
    "ewma_by_session",
]
