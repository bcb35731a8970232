"""Runner for the critical days aggregation.

This module counts, for every grid point and year, the days on which a climate variable
strictly exceeds a threshold, and averages those counts over the grid points of each
administrative region. The full run:
1. Loads the gridded variable and the country's administrative boundaries
2. Finds the grid cells inside the boundaries and the region of each one
3. Extracts the daily series at every retained cell and attaches region names
4. Counts critical days per point and year, then averages per region and year
5. Saves the aggregate table
"""

from collections.abc import Sequence
from pathlib import Path

import click
import pandas as pd

from critical_days import cli_options as clio
from critical_days import constants as cdc
from critical_days.aggregate.masking import build_grid_points
from critical_days.aggregate.timeseries import extract_time_series, join_regions
from critical_days.data import CriticalDaysData
from critical_days.errors import CriticalDaysError
from critical_days.extract import extract_gadm_main


def count_critical_days(
    joined: pd.DataFrame,
    threshold: float = cdc.CRITICAL_THRESHOLD,
    region_columns: Sequence[str] = cdc.REGION_COLUMNS,
) -> pd.DataFrame:
    """Count critical days per year, grid point and region.

    A day is critical when its value is strictly greater than the threshold;
    a value equal to the threshold is not counted. Missing values are never
    critical. Rows with missing region names form their own groups.

    Parameters
    ----------
    joined
        Time series rows with point_id, date, value and region name columns.
    threshold
        The exceedance threshold, in the units of the values.
    region_columns
        The region name columns to carry through the grouping.

    Returns
    -------
    pd.DataFrame
        One row per (year_id, point_id, region) with the critical_days count.
    """
    group_cols = [cdc.YEAR_ID, cdc.POINT_ID, *region_columns]
    return (
        joined.assign(
            **{
                cdc.YEAR_ID: joined[cdc.DATE].dt.year,
                cdc.CRITICAL_DAYS: joined[cdc.VALUE] > threshold,
            }
        )
        .groupby(group_cols, dropna=False)[cdc.CRITICAL_DAYS]
        .sum()
        .astype("int64")
        .reset_index()
    )


def average_critical_days(
    counts: pd.DataFrame,
    region_columns: Sequence[str] = cdc.REGION_COLUMNS,
) -> pd.DataFrame:
    """Average per-point yearly counts across the points of each region.

    Only (year, region) pairs present in the counts appear in the output.
    """
    return (
        counts.groupby([cdc.YEAR_ID, *region_columns], dropna=False)[cdc.CRITICAL_DAYS]
        .mean()
        .reset_index()
    )


def aggregate_critical_days(
    joined: pd.DataFrame,
    threshold: float = cdc.CRITICAL_THRESHOLD,
    region_columns: Sequence[str] = cdc.REGION_COLUMNS,
) -> pd.DataFrame:
    counts = count_critical_days(joined, threshold, region_columns)
    return average_critical_days(counts, region_columns)


def summarize_by_region(
    aggregate: pd.DataFrame,
    region_columns: Sequence[str] = cdc.REGION_COLUMNS,
) -> pd.DataFrame:
    """Long-run mean of the yearly critical day averages of each region."""
    return (
        aggregate.groupby(list(region_columns), dropna=False)[cdc.CRITICAL_DAYS]
        .mean()
        .reset_index()
    )


def critical_days_main(
    variable: str,
    iso3: str,
    admin_level: int | str,
    threshold: float,
    start_year: int | None,
    end_year: int | None,
    output_dir: str | Path,
    *,
    progress_bar: bool = False,
) -> pd.DataFrame:
    print(f"Counting days with {variable} over {threshold:g} in {iso3} admin {admin_level}")
    cd_data = CriticalDaysData(output_dir)

    print("Loading raster")
    raster = cd_data.load_raster(variable, start_year=start_year, end_year=end_year)

    print("Loading boundaries")
    if not cd_data.boundaries_path(iso3).exists():
        extract_gadm_main(iso3, output_dir, progress_bar=progress_bar)
    boundaries = cd_data.load_boundaries(iso3, admin_level)

    print("Building grid points")
    points, lookup = build_grid_points(raster, boundaries)
    unmatched = lookup[cdc.ADMIN_2_NAME].isna().sum()
    print(f"Kept {len(points)} grid points, {unmatched} outside every region")

    print("Extracting time series")
    time_series = extract_time_series(raster, points, progress_bar=progress_bar)
    joined = join_regions(time_series, lookup)

    print("Aggregating")
    results = aggregate_critical_days(joined, threshold)

    print("Saving results")
    cd_data.save_results(results, variable, iso3, admin_level, threshold)
    return results


@click.command()
@clio.with_eobs_variable()
@clio.with_iso3()
@clio.with_admin_level()
@clio.with_threshold()
@clio.with_start_year()
@clio.with_end_year()
@clio.with_output_directory(cdc.MODEL_ROOT)
@clio.with_progress_bar()
def critical_days(
    eobs_variable: str,
    iso3: str,
    admin_level: str,
    threshold: float,
    start_year: int | None,
    end_year: int | None,
    output_dir: str,
    *,
    progress_bar: bool,
) -> None:
    """Average yearly counts of critical days by administrative region."""
    if start_year is not None and end_year is not None and start_year > end_year:
        msg = f"--start-year {start_year} is after --end-year {end_year}"
        raise click.UsageError(msg)
    try:
        critical_days_main(
            eobs_variable,
            iso3,
            admin_level,
            threshold,
            start_year,
            end_year,
            output_dir,
            progress_bar=progress_bar,
        )
    except CriticalDaysError as e:
        raise click.ClickException(str(e)) from e
