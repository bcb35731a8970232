from pathlib import Path

import geopandas as gpd
import numpy as np
import pandas as pd
import xarray as xr
from shapely import box

EOBS_TIME_UNITS = "days since 1950-01-01 00:00"

# Cell centers of a 1 degree grid. Latitude ascends, as in E-OBS files.
LONGITUDE = np.array([0.5, 1.5, 2.5, 3.5])
LATITUDE = np.array([0.5, 1.5, 2.5])

# Region A covers the two western columns, region B the third column below
# latitude 2. The easternmost column is outside every region.
REGION_A = box(0, 0, 2, 3)
REGION_B = box(2, 0, 3, 2)

# Grid points expected from the fake raster and boundaries, in id order:
# row-major from the north-west corner, skipping the cell that is missing
# in the first layer (longitude 0.5, latitude 2.5).
EXPECTED_POINTS = [
    (1.5, 2.5, "A"),
    (0.5, 1.5, "A"),
    (1.5, 1.5, "A"),
    (2.5, 1.5, "B"),
    (0.5, 0.5, "A"),
    (1.5, 0.5, "A"),
    (2.5, 0.5, "B"),
]


def make_values(n_days: int) -> np.ndarray:
    """Distinct values per (day, latitude, longitude) with one missing cell."""
    values = np.arange(n_days * LATITUDE.size * LONGITUDE.size, dtype="float64")
    values = values.reshape(n_days, LATITUDE.size, LONGITUDE.size)
    values[0, 2, 0] = np.nan
    return values


def make_raster(values: np.ndarray, start: str = "2020-01-01") -> xr.DataArray:
    """An in-memory raster shaped like the output of the raster loader."""
    dates = pd.date_range(start, periods=values.shape[0], freq="D")
    return xr.DataArray(
        values,
        dims=("date", "latitude", "longitude"),
        coords={"date": dates, "latitude": LATITUDE, "longitude": LONGITUDE},
        attrs={"crs": "EPSG:4326"},
        name="tx",
    )


def write_fake_eobs_netcdf(
    path: Path,
    values: np.ndarray,
    start: str = "2020-01-01",
    variable: str = "tx",
) -> Path:
    """Write a small file laid out like an E-OBS ensemble mean file."""
    dates = pd.date_range(start, periods=values.shape[0], freq="D")
    offsets = (dates - pd.Timestamp("1950-01-01")).days.to_numpy().astype("float64")
    ds = xr.Dataset(
        data_vars={
            variable: (("time", "latitude", "longitude"), values.astype("float32")),
        },
        coords={
            "time": ("time", offsets, {"units": EOBS_TIME_UNITS, "calendar": "standard"}),
            "latitude": LATITUDE,
            "longitude": LONGITUDE,
        },
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    ds.to_netcdf(path)
    ds.close()
    return path


def make_region_boundaries(crs: str | None = "EPSG:4326") -> gpd.GeoDataFrame:
    """Boundaries shaped like the output of the boundary loader."""
    return gpd.GeoDataFrame(
        {
            "admin_1_name": ["North", "North"],
            "admin_2_name": ["A", "B"],
        },
        geometry=[REGION_A, REGION_B],
        crs=crs,
    )


def write_fake_gadm(path: Path) -> Path:
    """Write a geopackage with GADM layer and column names."""
    level_2 = gpd.GeoDataFrame(
        {
            "GID_0": ["TST", "TST"],
            "NAME_1": ["North", "North"],
            "NAME_2": ["A", "B"],
        },
        geometry=[REGION_A, REGION_B],
        crs="EPSG:4326",
    )
    level_1 = level_2.dissolve(by="NAME_1").reset_index()[["NAME_1", "geometry"]]

    path.parent.mkdir(parents=True, exist_ok=True)
    level_1.to_file(path, layer="ADM_ADM_1", driver="GPKG")
    level_2.to_file(path, layer="ADM_ADM_2", driver="GPKG")
    return path
