from critical_days.aggregate.critical_days import (
    aggregate_critical_days,
    average_critical_days,
    count_critical_days,
    critical_days,
    critical_days_main,
    summarize_by_region,
)
from critical_days.aggregate.masking import build_grid_points, build_lookup_table
from critical_days.aggregate.timeseries import extract_time_series, join_regions

RUNNERS = {
    "critical_days": critical_days,
}

__all__ = [
    "RUNNERS",
    "aggregate_critical_days",
    "average_critical_days",
    "build_grid_points",
    "build_lookup_table",
    "count_critical_days",
    "critical_days",
    "critical_days_main",
    "extract_time_series",
    "join_regions",
    "summarize_by_region",
]
