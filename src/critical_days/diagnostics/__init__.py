from critical_days.diagnostics.plots import (
    critical_days_plots,
    critical_days_plots_main,
    plot_critical_days_bars,
    plot_critical_days_map,
)

RUNNERS = {
    "critical_days_plots": critical_days_plots,
}

__all__ = [
    "RUNNERS",
    "critical_days_plots",
    "critical_days_plots_main",
    "plot_critical_days_bars",
    "plot_critical_days_map",
]
