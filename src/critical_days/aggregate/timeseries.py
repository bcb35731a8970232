import geopandas as gpd
import numpy as np
import pandas as pd
import tqdm
import xarray as xr

from critical_days import constants as cdc
from critical_days.utils import parse_layer_dates

# Number of grid points read from the raster at a time.
POINT_BLOCK_SIZE = 500


def extract_time_series(
    raster: xr.DataArray,
    points: gpd.GeoDataFrame,
    *,
    block_size: int = POINT_BLOCK_SIZE,
    progress_bar: bool = False,
) -> pd.DataFrame:
    """Pull the full daily series at every grid point into a long-form table.

    Parameters
    ----------
    raster
        The (date, latitude, longitude) raster the points were drawn from.
    points
        Grid points with point_id, longitude and latitude columns. Coordinates
        must be cell centers of the raster.
    block_size
        Number of points to read per pass over the raster.
    progress_bar
        Whether to show a progress bar.

    Returns
    -------
    pd.DataFrame
        One row per (point_id, date) with the raster value, ordered by point_id
        then date. The table has exactly len(points) * len(dates) rows.
    """
    dates = parse_layer_dates(raster["date"].to_numpy(), raster["date"].attrs.get("units"))

    blocks = []
    for start in tqdm.trange(0, len(points), block_size, disable=not progress_bar):
        block = points.iloc[start : start + block_size]
        values = (
            raster.sel(
                longitude=xr.DataArray(block["longitude"].to_numpy(), dims=cdc.POINT_ID),
                latitude=xr.DataArray(block["latitude"].to_numpy(), dims=cdc.POINT_ID),
            )
            .transpose(cdc.POINT_ID, "date")
            .to_numpy()
        )
        blocks.append(
            pd.DataFrame(
                {
                    cdc.POINT_ID: np.repeat(block[cdc.POINT_ID].to_numpy(), len(dates)),
                    cdc.DATE: np.tile(dates.to_numpy(), len(block)),
                    cdc.VALUE: values.reshape(-1),
                }
            )
        )

    if not blocks:
        return pd.DataFrame(
            {
                cdc.POINT_ID: pd.Series(dtype=np.int64),
                cdc.DATE: pd.Series(dtype="datetime64[ns]"),
                cdc.VALUE: pd.Series(dtype=np.float64),
            }
        )
    return pd.concat(blocks, ignore_index=True)


def join_regions(time_series: pd.DataFrame, lookup: pd.DataFrame) -> pd.DataFrame:
    """Attach region names to every time series row.

    This is a left join on point_id: rows whose point has no region, or no
    lookup entry at all, are kept with missing names.
    """
    region_columns = [c for c in cdc.REGION_COLUMNS if c in lookup.columns]
    return time_series.merge(
        lookup[[cdc.POINT_ID, *region_columns]],
        on=cdc.POINT_ID,
        how="left",
        validate="many_to_one",
    )
