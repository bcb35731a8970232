from pathlib import Path

import click
import contextily as ctx
import geopandas as gpd
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
from requests.exceptions import HTTPError
from rra_tools import plotting
from xyzservices import TileProvider

from critical_days import cli_options as clio
from critical_days import constants as cdc
from critical_days.aggregate import summarize_by_region
from critical_days.data import CriticalDaysData

MAP_FIG_SIZE = (12, 12)
BAR_FIG_SIZE = (20, 10)
TITLE_FONTSIZE = 20
LABEL_FONT_SIZE = 14
TICK_FONT_SIZE = 10

MAP_CMAP = "YlOrRd"
WEB_MERCATOR = "EPSG:3857"
TILE_PROVIDER = ctx.providers.CartoDB.PositronNoLabels
# Bar segment label for grid points that fall in no region.
UNMATCHED_REGION = "No region"


def safe_add_basemap(ax: plt.Axes, provider: TileProvider | str = TILE_PROVIDER) -> None:
    try:
        ctx.add_basemap(ax, source=provider)
    except HTTPError as e:
        print(f"Error adding basemap: {e}")


def plot_critical_days_map(
    summary: pd.DataFrame,
    boundaries: gpd.GeoDataFrame,
    *,
    basemap: bool = False,
) -> plt.Figure:
    """Choropleth of the long-run average number of critical days per region.

    Parameters
    ----------
    summary
        One row per region with admin_1_name, admin_2_name and critical_days.
    boundaries
        The region polygons. Regions without a value are drawn hatched.
    basemap
        Whether to draw web map tiles under the regions.

    Returns
    -------
    plt.Figure
        The rendered figure.
    """
    gdf = boundaries.merge(summary, on=cdc.REGION_COLUMNS, how="left")
    if basemap:
        gdf = gdf.to_crs(WEB_MERCATOR)

    fig, ax = plt.subplots(figsize=MAP_FIG_SIZE)
    gdf.plot(
        column=cdc.CRITICAL_DAYS,
        ax=ax,
        cmap=MAP_CMAP,
        legend=True,
        legend_kwds={"label": "Average critical days per year", "shrink": 0.6},
        edgecolor="black",
        linewidth=0.3,
        alpha=0.8 if basemap else 1.0,
        missing_kwds={"color": "lightgrey", "hatch": "///", "label": "No data"},
    )
    if basemap:
        safe_add_basemap(ax)
    plotting.strip_axes(ax)
    return fig


def plot_critical_days_bars(aggregate: pd.DataFrame) -> plt.Figure:
    """Stacked bars of yearly critical days, one segment per region, no legend."""
    named = aggregate.fillna({column: UNMATCHED_REGION for column in cdc.REGION_COLUMNS})
    wide = named.pivot_table(
        index=cdc.YEAR_ID,
        columns=cdc.REGION_COLUMNS,
        values=cdc.CRITICAL_DAYS,
        aggfunc="mean",
    ).sort_index()

    fig, ax = plt.subplots(figsize=BAR_FIG_SIZE)
    wide.plot.bar(stacked=True, ax=ax, legend=False, width=0.9, colormap="tab20")
    ax.set_xlabel("Year", fontsize=LABEL_FONT_SIZE)
    ax.set_ylabel("Critical days (sum of regional averages)", fontsize=LABEL_FONT_SIZE)
    ax.tick_params(axis="both", which="major", labelsize=TICK_FONT_SIZE)
    sns.despine(ax=ax)
    return fig


def critical_days_plots_main(
    variable: str,
    iso3: str,
    admin_level: int | str,
    threshold: float,
    output_dir: str | Path,
    *,
    basemap: bool = False,
    write: bool = True,
) -> tuple[plt.Figure, plt.Figure]:
    print(f"Plotting critical days for {iso3} admin {admin_level}")
    cd_data = CriticalDaysData(output_dir, read_only=not write)

    print("Loading results and boundaries")
    aggregate = cd_data.load_results(variable, iso3, admin_level, threshold)
    boundaries = cd_data.load_boundaries(iso3, admin_level)

    print("Plotting map")
    map_fig = plot_critical_days_map(
        summarize_by_region(aggregate), boundaries, basemap=basemap
    )
    map_fig.suptitle(
        f"Days with {variable} over {threshold:g}, {iso3} average",
        fontsize=TITLE_FONTSIZE,
    )

    print("Plotting yearly bars")
    bar_fig = plot_critical_days_bars(aggregate)
    bar_fig.suptitle(
        f"Days with {variable} over {threshold:g} by year, {iso3}",
        fontsize=TITLE_FONTSIZE,
    )

    print("Writing figures")
    run = (variable, iso3, admin_level, threshold)
    for name, fig in [("map", map_fig), ("bars", bar_fig)]:
        path = cd_data.plot_path(name, *run) if write else None
        plotting.write_or_show(fig, path)
    return map_fig, bar_fig


@click.command()
@clio.with_eobs_variable()
@clio.with_iso3()
@clio.with_admin_level()
@clio.with_threshold()
@clio.with_output_directory(cdc.MODEL_ROOT)
@clio.with_basemap()
def critical_days_plots(
    eobs_variable: str,
    iso3: str,
    admin_level: str,
    threshold: float,
    output_dir: str,
    *,
    basemap: bool,
) -> None:
    """Map and bar chart of critical days by region."""
    critical_days_plots_main(
        eobs_variable,
        iso3,
        admin_level,
        threshold,
        output_dir,
        basemap=basemap,
    )
