"""
Critical Days Data Management
-----------------------------

This module provides a class for managing the data used in the project. It includes methods for
loading and saving data, as well as for accessing the various directories where data is stored.
All paths are derived from a single root directory, which makes it easy to point a run at a
different data store and keeps the on-disk layout in one place.

The main class is:
- CriticalDaysData: Handles the extracted inputs (E-OBS gridded climate files and GADM boundary
    geopackages) and the pipeline outputs (aggregate tables and figures). This class provides
    read and write access to the data unless constructed as read-only.
"""

from pathlib import Path

import geopandas as gpd
import pandas as pd
import pyogrio
import xarray as xr
from rra_tools.shell_tools import mkdir, touch

from critical_days import constants as cdc
from critical_days.errors import DataNotFoundError, FormatError
from critical_days.utils import parse_layer_dates

RASTER_STAGE = "load_raster"
BOUNDARY_STAGE = "load_boundaries"

# Coordinate names we've seen in gridded products, mapped to the names used
# throughout the pipeline.
COORDINATE_NAMES = {
    "lat": "latitude",
    "lon": "longitude",
    "time": "date",
}
RASTER_DIMS = ("date", "latitude", "longitude")


class CriticalDaysData:
    """Class for managing the critical days inputs and outputs."""

    def __init__(
        self,
        root: str | Path = cdc.MODEL_ROOT,
        *,
        read_only: bool = False,
    ) -> None:
        self._root = Path(root)
        self._read_only = read_only
        if not read_only:
            self._create_model_root()

    def _create_model_root(self) -> None:
        mkdir(self.root, exist_ok=True, parents=True)

        mkdir(self.extracted_data, exist_ok=True)
        mkdir(self.extracted_eobs, exist_ok=True)
        mkdir(self.extracted_gadm, exist_ok=True)

        mkdir(self.results, exist_ok=True)
        mkdir(self.plots, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    ##################
    # Extracted data #
    ##################

    @property
    def extracted_data(self) -> Path:
        return self.root / "extracted_data"

    @property
    def extracted_eobs(self) -> Path:
        return self.extracted_data / "eobs"

    def raw_raster_path(self, variable: str, version: str = cdc.EOBS_VERSION) -> Path:
        file_name = cdc.EOBS_FILE_TEMPLATE.format(
            variable=variable,
            resolution=cdc.EOBS_RESOLUTION,
            version=version,
        )
        return self.extracted_eobs / file_name

    def load_raster(
        self,
        variable: str,
        version: str = cdc.EOBS_VERSION,
        start_year: int | None = None,
        end_year: int | None = None,
    ) -> xr.DataArray:
        """Load a daily gridded variable as a (date, latitude, longitude) array.

        The data is opened lazily and treated as read-only by every downstream
        stage. Layer identifiers are converted to calendar dates on load.

        Parameters
        ----------
        variable
            The short code of the variable to load (e.g. "tx").
        version
            The dataset version, used to build the file name.
        start_year
            First year to keep, inclusive. Keeps everything from the start of the
            record if None.
        end_year
            Last year to keep, inclusive. Keeps everything to the end of the
            record if None.

        Returns
        -------
        xr.DataArray
            The raster, with a ``crs`` attribute.

        Raises
        ------
        DataNotFoundError
            If the file does not exist, does not contain the variable, or has no
            layers in the requested year range.
        ValueError
            If start_year is after end_year.
        FormatError
            If the file cannot be read as a gridded dataset.
        DateParseError
            If a layer identifier cannot be converted to a date.
        """
        path = self.raw_raster_path(variable, version)
        if not path.exists():
            raise DataNotFoundError(RASTER_STAGE, str(path), "raster file not found")

        try:
            ds = xr.open_dataset(path, decode_times=False)
        except (OSError, ValueError) as e:
            raise FormatError(
                RASTER_STAGE, str(path), f"not a readable gridded dataset ({e})"
            ) from e

        if variable not in ds.data_vars:
            raise DataNotFoundError(
                RASTER_STAGE, f"{path}:{variable}", "variable not in dataset"
            )

        da = ds[variable]
        da = da.rename({k: v for k, v in COORDINATE_NAMES.items() if k in da.dims})
        if set(da.dims) != set(RASTER_DIMS):
            raise FormatError(
                RASTER_STAGE,
                f"{path}:{variable}",
                f"expected dimensions {RASTER_DIMS}, found {da.dims}",
            )

        dates = parse_layer_dates(da["date"].to_numpy(), da["date"].attrs.get("units"))
        da = (
            da.assign_coords(date=dates)
            .transpose(*RASTER_DIMS)
            .assign_attrs(crs=da.attrs.get("crs", cdc.DEFAULT_CRS))
        )

        if start_year is not None and end_year is not None and start_year > end_year:
            msg = f"start_year {start_year} is after end_year {end_year}"
            raise ValueError(msg)

        start = None if start_year is None else f"{start_year}-01-01"
        end = None if end_year is None else f"{end_year}-12-31"
        da = da.sel(date=slice(start, end))
        if da.sizes["date"] == 0:
            raise DataNotFoundError(
                RASTER_STAGE,
                f"{path}:{start_year}-{end_year}",
                "no layers in requested year range",
            )
        return da

    @property
    def extracted_gadm(self) -> Path:
        return self.extracted_data / "gadm"

    def boundaries_path(self, iso3: str, version: str = cdc.GADM_VERSION) -> Path:
        file_name = cdc.GADM_FILE_TEMPLATE.format(
            version=version.replace(".", ""),
            iso3=iso3.upper(),
        )
        return self.extracted_gadm / file_name

    def load_boundaries(
        self,
        iso3: str,
        admin_level: int | str = cdc.DEFAULT_ADMIN_LEVEL,
        version: str = cdc.GADM_VERSION,
    ) -> gpd.GeoDataFrame:
        """Load the administrative boundaries of a country.

        Parameters
        ----------
        iso3
            The ISO 3166-1 alpha-3 code of the country (e.g. "FRA").
        admin_level
            The administrative detail level, 1 or 2.
        version
            The GADM release the boundaries were extracted from.

        Returns
        -------
        gpd.GeoDataFrame
            One row per polygon in source order, with admin_1_name,
            admin_2_name and geometry columns. At level 1 the level-2 name
            repeats the level-1 name.
        """
        if str(admin_level) not in cdc.ADMIN_LEVELS:
            msg = f"Unknown admin level: {admin_level}"
            raise ValueError(msg)

        path = self.boundaries_path(iso3, version)
        if not path.exists():
            raise DataNotFoundError(
                BOUNDARY_STAGE, iso3, f"no boundary source at {path}"
            )

        layer = cdc.GADM_LAYER_TEMPLATE.format(level=admin_level)
        if layer not in pyogrio.list_layers(path)[:, 0]:
            raise DataNotFoundError(
                BOUNDARY_STAGE, f"{iso3}:{layer}", "admin level not in boundary source"
            )
        gdf = gpd.read_file(path, layer=layer)

        name_2 = "NAME_2" if str(admin_level) == "2" else "NAME_1"
        gdf = gdf.rename(columns={"NAME_1": cdc.ADMIN_1_NAME}).assign(
            **{cdc.ADMIN_2_NAME: gdf[name_2]}
        )
        return gdf[[*cdc.REGION_COLUMNS, "geometry"]].reset_index(drop=True)

    ###########
    # Results #
    ###########

    @property
    def results(self) -> Path:
        return self.root / "results"

    def results_path(
        self,
        variable: str,
        iso3: str,
        admin_level: int | str,
        threshold: float,
        suffix: str = ".parquet",
    ) -> Path:
        stem = run_stem(variable, iso3, admin_level, threshold)
        return self.results / f"{stem}{suffix}"

    def save_results(
        self,
        df: pd.DataFrame,
        variable: str,
        iso3: str,
        admin_level: int | str,
        threshold: float,
    ) -> None:
        if self._read_only:
            msg = "Cannot save results to read-only data"
            raise ValueError(msg)
        run = (variable, iso3, admin_level, threshold)
        save_parquet(df, self.results_path(*run))
        save_csv(df, self.results_path(*run, suffix=".csv"))

    def load_results(
        self,
        variable: str,
        iso3: str,
        admin_level: int | str,
        threshold: float,
    ) -> pd.DataFrame:
        path = self.results_path(variable, iso3, admin_level, threshold)
        return pd.read_parquet(path)

    @property
    def plots(self) -> Path:
        return self.root / "plots"

    def plot_path(
        self,
        plot_name: str,
        variable: str,
        iso3: str,
        admin_level: int | str,
        threshold: float,
    ) -> Path:
        stem = run_stem(variable, iso3, admin_level, threshold)
        return self.plots / f"{plot_name}_{stem}.png"


def run_stem(
    variable: str,
    iso3: str,
    admin_level: int | str,
    threshold: float,
) -> str:
    """File name stem shared by all outputs of one pipeline run."""
    return f"{variable}_{iso3.upper()}_adm{admin_level}_over_{threshold:g}"


def save_parquet(
    df: pd.DataFrame,
    output_path: str | Path,
) -> None:
    """Save a pandas DataFrame to a file with standard parameters.

    Parameters
    ----------
    df
        The DataFrame to save.
    output_path
        The path to save the DataFrame to.
    """
    touch(output_path, clobber=True)
    df.to_parquet(output_path)


def save_csv(
    df: pd.DataFrame,
    output_path: str | Path,
) -> None:
    touch(output_path, clobber=True)
    df.to_csv(output_path, index=False)
