import matplotlib.pyplot as plt
import pandas as pd
import pytest
import requests

from critical_days.diagnostics import plots
from critical_days.diagnostics.plots import (
    critical_days_plots_main,
    plot_critical_days_bars,
    plot_critical_days_map,
)


@pytest.fixture
def aggregate():
    return pd.DataFrame(
        {
            "year_id": [2019, 2019, 2020, 2020],
            "admin_1_name": ["North"] * 4,
            "admin_2_name": ["A", "B", "A", "B"],
            "critical_days": [1.0, 2.0, 3.0, 4.0],
        }
    )


def test_map_colors_every_region(aggregate, boundaries):
    summary = aggregate.groupby(["admin_1_name", "admin_2_name"], as_index=False)[
        "critical_days"
    ].mean()
    fig = plot_critical_days_map(summary, boundaries)
    map_ax = fig.axes[0]
    assert len(map_ax.collections) >= 1


def test_map_accepts_regions_without_values(aggregate, boundaries):
    summary = pd.DataFrame(
        {"admin_1_name": ["North"], "admin_2_name": ["A"], "critical_days": [2.0]}
    )
    fig = plot_critical_days_map(summary, boundaries)
    assert fig.axes


def test_bars_stack_one_segment_per_region_without_legend(aggregate):
    fig = plot_critical_days_bars(aggregate)
    ax = fig.axes[0]
    assert ax.get_legend() is None
    assert len(ax.containers) == 2
    assert [len(container) for container in ax.containers] == [2, 2]
    tops = [
        sum(container[i].get_height() for container in ax.containers) for i in range(2)
    ]
    assert tops == pytest.approx([3.0, 7.0])


def test_plots_main_writes_both_figures(cd_data, data_root, gadm_file, aggregate):
    cd_data.save_results(aggregate, "tx", "TST", 2, 34.0)

    critical_days_plots_main("tx", "TST", 2, 34.0, data_root)

    assert cd_data.plot_path("map", "tx", "TST", 2, 34.0).exists()
    assert cd_data.plot_path("bars", "tx", "TST", 2, 34.0).exists()


def test_bars_keep_unmatched_and_same_named_regions_apart():
    aggregate = pd.DataFrame(
        {
            "year_id": [2020, 2020, 2020],
            "admin_1_name": ["North", "South", None],
            "admin_2_name": ["A", "A", None],
            "critical_days": [1.0, 2.0, 4.0],
        }
    )
    fig = plot_critical_days_bars(aggregate)
    ax = fig.axes[0]
    assert len(ax.containers) == 3
    heights = sorted(container[0].get_height() for container in ax.containers)
    assert heights == pytest.approx([1.0, 2.0, 4.0])


def test_basemap_fetch_failures_are_reported_not_raised(monkeypatch, capsys):
    def unavailable(ax, source):
        raise requests.HTTPError("503 tile server unavailable")

    monkeypatch.setattr(plots.ctx, "add_basemap", unavailable)
    fig, ax = plt.subplots()
    plots.safe_add_basemap(ax)
    assert "tile server unavailable" in capsys.readouterr().out
