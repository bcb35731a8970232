"""
Critical Days Utilities
-----------------------

Utility functions for working with gridded climate data.
"""

import re
from collections.abc import Sequence
from typing import Any, cast

import geopandas as gpd
import numpy as np
import numpy.typing as npt
import pandas as pd
import rasterra as rt
import shapely
import xarray as xr
from affine import Affine

from critical_days import constants as cdc
from critical_days.errors import DateParseError

# CF time units mapped to pandas timedelta units
CF_TIME_UNITS = {
    "days": "D",
    "hours": "h",
    "minutes": "min",
    "seconds": "s",
}
CF_UNITS_PATTERN = re.compile(r"\s*(\w+)\s+since\s+(.+?)\s*")

# Year, month and day separated by any non-digit, e.g. X1950.01.01 or 1950-01-01
SEPARATED_DATE_PATTERN = re.compile(r"(?<!\d)(\d{4})\D(\d{1,2})\D(\d{1,2})(?!\d)")
# Compact YYYYMMDD, e.g. tx_19500101
COMPACT_DATE_PATTERN = re.compile(r"(?<!\d)(\d{4})(\d{2})(\d{2})(?!\d)")

DATE_STAGE = "parse_dates"


def to_raster(
    da: xr.DataArray,
    no_data_value: float | int,
    lat_col: str = "latitude",
    lon_col: str = "longitude",
    crs: str = cdc.DEFAULT_CRS,
    resolution: tuple[float, float] | None = None,
) -> rt.RasterArray:
    """Convert a 2D xarray DataArray on a regular lat/lon grid to a RasterArray.

    The coordinates of the DataArray are taken to be cell centers. Latitude may be
    stored in either order; the returned raster is always north-up.

    Parameters
    ----------
    da
        The xarray DataArray to convert.
    no_data_value
        The value to use for missing data. This should be consistent with the dtype of the data.
    lat_col
        The name of the latitude coordinate in the dataset.
    lon_col
        The name of the longitude coordinate in the dataset.
    crs
        The coordinate reference system of the data.
    resolution
        The (longitude, latitude) cell size. Measured from the coordinates when
        not given, which requires at least two cells along each axis.

    Returns
    -------
    rt.RasterArray
        The RasterArray representation of the input data.
    """
    da = north_up(da, lat_col=lat_col).transpose(lat_col, lon_col)
    lat, lon = da[lat_col].to_numpy(), da[lon_col].to_numpy()
    if resolution is None:
        dlon, dlat = grid_resolution(lon), grid_resolution(lat)
    else:
        dlon, dlat = resolution

    transform = Affine(
        a=dlon,
        b=0.0,
        c=lon[0] - dlon / 2,
        d=0.0,
        e=-dlat,
        f=lat[0] + dlat / 2,
    )
    return rt.RasterArray(
        data=da.to_numpy(),
        transform=transform,
        crs=crs,
        no_data_value=no_data_value,
    )


def north_up(da: xr.DataArray, lat_col: str = "latitude") -> xr.DataArray:
    """Sort a DataArray so its first latitude row is the northernmost."""
    return da.sortby(lat_col, ascending=False)


def grid_resolution(coordinates: npt.ArrayLike) -> float:
    """Absolute mean spacing of a 1D coordinate array."""
    values = np.asarray(coordinates, dtype=np.float64)
    if values.size < 2:  # noqa: PLR2004
        msg = "Need at least two coordinates to measure grid resolution"
        raise ValueError(msg)
    return float(np.abs(np.diff(values)).mean())


def get_bbox(raster: rt.RasterArray, crs: str | None = None) -> shapely.Polygon:
    """Get the bounding box of a raster array.

    Parameters
    ----------
    raster
        The raster array to get the bounding box of.
    crs
        The CRS to return the bounding box in. If None, the bounding box
        is returned in the CRS of the raster.

    Returns
    -------
    shapely.Polygon
        The bounding box of the raster in the CRS specified by the crs parameter.
    """
    xmin, xmax, ymin, ymax = raster.bounds
    bbox = gpd.GeoSeries([shapely.box(xmin, ymin, xmax, ymax)], crs=raster.crs)
    if crs is not None:
        bbox = bbox.to_crs(crs)
    return cast(shapely.Polygon, bbox.iloc[0])


def crop_to_bounds(
    da: xr.DataArray,
    bounds: tuple[float, float, float, float],
    buffer: float = 0.0,
) -> xr.DataArray:
    """Subset a north-up DataArray to a (xmin, ymin, xmax, ymax) box.

    Parameters
    ----------
    da
        The data to crop. Must have latitude and longitude coordinates.
    bounds
        The box to crop to, in the same units as the coordinates.
    buffer
        Extra margin added on every side of the box.

    Returns
    -------
    xr.DataArray
        The cropped data, sorted so that latitude decreases.
    """
    lon_min, lat_min, lon_max, lat_max = bounds
    return north_up(da.sortby("longitude")).sel(
        longitude=slice(lon_min - buffer, lon_max + buffer),
        latitude=slice(lat_max + buffer, lat_min - buffer),
    )


def parse_layer_dates(
    labels: Sequence[Any] | np.ndarray,
    units: str | None = None,
) -> pd.DatetimeIndex:
    """Map raster layer identifiers to calendar dates.

    Parameters
    ----------
    labels
        One identifier per layer. Accepted encodings are already decoded datetimes,
        numeric offsets from a reference date (requires ``units``), and strings that
        contain a year, month and day either separated by non-digit characters
        (``X1950.01.01``, ``1950-01-01``) or written as a compact ``YYYYMMDD``.
    units
        CF-style time units such as ``"days since 1950-01-01 00:00"``. Only used for
        numeric identifiers.

    Returns
    -------
    pd.DatetimeIndex
        The date of each layer, normalized to midnight.

    Raises
    ------
    DateParseError
        If any identifier cannot be converted to a date.
    """
    values = np.asarray(labels)
    if np.issubdtype(values.dtype, np.datetime64):
        return pd.DatetimeIndex(values).normalize()
    if np.issubdtype(values.dtype, np.number):
        return _parse_offsets(values, units)
    return pd.DatetimeIndex([_parse_label(str(label)) for label in values])


def _parse_offsets(values: np.ndarray, units: str | None) -> pd.DatetimeIndex:
    if units is None:
        identifier = str(values[0]) if values.size else "<empty>"
        raise DateParseError(
            DATE_STAGE, identifier, "numeric layer identifiers require time units"
        )
    match = CF_UNITS_PATTERN.fullmatch(units)
    if match is None or match.group(1).lower() not in CF_TIME_UNITS:
        raise DateParseError(DATE_STAGE, units, "unrecognized time units")

    step, reference_str = match.groups()
    try:
        reference = pd.Timestamp(reference_str)
    except ValueError as e:
        raise DateParseError(DATE_STAGE, units, "unparseable reference date") from e
    if reference.tz is not None:
        reference = reference.tz_convert(None)

    offsets = pd.to_timedelta(values, unit=CF_TIME_UNITS[step.lower()])
    return pd.DatetimeIndex(reference + offsets).normalize()


def _parse_label(label: str) -> pd.Timestamp:
    for pattern in [SEPARATED_DATE_PATTERN, COMPACT_DATE_PATTERN]:
        match = pattern.search(label)
        if match is None:
            continue
        year, month, day = (int(g) for g in match.groups())
        try:
            return pd.Timestamp(year=year, month=month, day=day)
        except ValueError as e:
            raise DateParseError(DATE_STAGE, label, "invalid calendar date") from e
    raise DateParseError(DATE_STAGE, label, "no date found in layer identifier")
