"""
Critical Days CLI Options
-------------------------

This module provides a set of CLI options for the critical days pipeline. These options are used
to specify the data to process, such as the climate variable, the country and administrative
level of the boundaries, the exceedance threshold, and the years to include.
"""

from collections.abc import Callable

import click
from rra_tools.cli_tools import (
    with_output_directory,
    with_overwrite,
    with_progress_bar,
)

from critical_days import constants as cdc


def with_eobs_variable[**P, T]() -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Create a CLI option for selecting an E-OBS variable."""
    return click.option(
        "--eobs-variable",
        "-x",
        type=click.Choice(cdc.EOBS_VARIABLES.names()),
        default=cdc.DEFAULT_VARIABLE,
        show_default=True,
        help="E-OBS variable to process.",
    )


def with_eobs_version[**P, T]() -> Callable[[Callable[P, T]], Callable[P, T]]:
    return click.option(
        "--eobs-version",
        type=click.STRING,
        default=cdc.EOBS_VERSION,
        show_default=True,
        help="E-OBS release to process.",
    )


def with_iso3[**P, T]() -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Create a CLI option for selecting a country."""
    return click.option(
        "--iso3",
        "-c",
        type=click.STRING,
        default=cdc.DEFAULT_COUNTRY,
        show_default=True,
        help="ISO alpha-3 code of the country to subset to.",
    )


def with_admin_level[**P, T]() -> Callable[[Callable[P, T]], Callable[P, T]]:
    return click.option(
        "--admin-level",
        "-a",
        type=click.Choice(cdc.ADMIN_LEVELS),
        default=cdc.DEFAULT_ADMIN_LEVEL,
        show_default=True,
        help="Administrative level to aggregate to.",
    )


def with_threshold[**P, T]() -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Create a CLI option for the critical day threshold."""
    return click.option(
        "--threshold",
        "-t",
        type=click.FLOAT,
        default=cdc.CRITICAL_THRESHOLD,
        show_default=True,
        help="Days with values strictly above this are critical.",
    )


def with_start_year[**P, T]() -> Callable[[Callable[P, T]], Callable[P, T]]:
    return click.option(
        "--start-year",
        type=click.INT,
        default=None,
        help="First year to include. Defaults to the start of the record.",
    )


def with_end_year[**P, T]() -> Callable[[Callable[P, T]], Callable[P, T]]:
    return click.option(
        "--end-year",
        type=click.INT,
        default=None,
        help="Last year to include. Defaults to the end of the record.",
    )


def with_basemap[**P, T]() -> Callable[[Callable[P, T]], Callable[P, T]]:
    return click.option(
        "--basemap/--no-basemap",
        default=False,
        show_default=True,
        help="Draw web map tiles under the choropleth.",
    )


__all__ = [
    "with_admin_level",
    "with_basemap",
    "with_end_year",
    "with_eobs_variable",
    "with_eobs_version",
    "with_iso3",
    "with_output_directory",
    "with_overwrite",
    "with_progress_bar",
    "with_start_year",
    "with_threshold",
]
