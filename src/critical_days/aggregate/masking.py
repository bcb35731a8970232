"""Subset a gridded dataset to the cells inside a set of administrative boundaries.

The masker produces the grid points the rest of the pipeline works on and a lookup
table assigning each point to the region that contains it. Point ids are dense
(0..N-1) and follow row-major order (north to south, then west to east) over the
cropped extent, so they are deterministic for a given raster and boundary set.
"""

import geopandas as gpd
import numpy as np
import pandas as pd
import shapely
import xarray as xr
from pyproj.exceptions import CRSError
from rasterio.features import MergeAlg, rasterize

from critical_days import constants as cdc
from critical_days.errors import DataNotFoundError, ProjectionMismatchError
from critical_days.utils import crop_to_bounds, get_bbox, grid_resolution, to_raster

MASK_STAGE = "mask"


def reproject_boundaries(boundaries: gpd.GeoDataFrame, crs: str) -> gpd.GeoDataFrame:
    """Bring boundaries into the coordinate reference system of the raster.

    Raises
    ------
    ProjectionMismatchError
        If the boundaries carry no CRS or cannot be transformed into ``crs``.
    """
    if boundaries.crs is None:
        raise ProjectionMismatchError(
            MASK_STAGE, "boundaries", f"no CRS to reproject into {crs}"
        )
    try:
        return boundaries.to_crs(crs)
    except CRSError as e:
        raise ProjectionMismatchError(
            MASK_STAGE, str(boundaries.crs), f"cannot reproject into {crs}"
        ) from e


def build_grid_points(
    raster: xr.DataArray,
    boundaries: gpd.GeoDataFrame,
) -> tuple[gpd.GeoDataFrame, pd.DataFrame]:
    """Find the raster cells inside the boundaries and map them to regions.

    A cell is retained when its center falls inside the union of the boundaries
    and the first layer of the raster has a value there.

    Parameters
    ----------
    raster
        The (date, latitude, longitude) raster. The first date is used as the
        reference layer for the missing-value mask.
    boundaries
        The administrative boundaries, with admin_1_name and admin_2_name columns.

    Returns
    -------
    tuple[gpd.GeoDataFrame, pd.DataFrame]
        The first element holds one row per retained grid point with point_id,
        longitude, latitude and a point geometry in the raster CRS. The second
        element is the lookup table from point_id to region names, with one row
        per grid point and missing names where no polygon contains the point.
    """
    crs = raster.attrs.get("crs", cdc.DEFAULT_CRS)
    shapes = reproject_boundaries(boundaries, crs)
    shapes = shapes[shapes.geometry.notna() & ~shapes.geometry.is_empty]
    if shapes.empty:
        raise DataNotFoundError(MASK_STAGE, "boundaries", "no polygons to mask with")

    # Measure the resolution on the full grid so a crop that is a single cell
    # wide still gets a correct transform.
    resolution = (
        grid_resolution(raster["longitude"]),
        grid_resolution(raster["latitude"]),
    )
    first_layer = raster.isel(date=0)
    raster_bbox = get_bbox(
        to_raster(first_layer, no_data_value=np.nan, crs=crs, resolution=resolution)
    )
    if not raster_bbox.intersects(shapely.box(*shapes.total_bounds)):
        raise ProjectionMismatchError(
            MASK_STAGE, crs, "boundaries do not overlap the raster extent"
        )

    reference = crop_to_bounds(
        first_layer, tuple(shapes.total_bounds), buffer=max(resolution)
    ).transpose("latitude", "longitude")
    template = to_raster(reference, no_data_value=np.nan, crs=crs, resolution=resolution)

    inside = rasterize(
        [(shape, 1) for shape in shapes.geometry],
        out_shape=reference.shape,
        transform=template.transform,
        fill=0,
        dtype=np.uint8,
        merge_alg=MergeAlg.replace,
    ).astype(bool)
    valid = ~np.isnan(reference.to_numpy())

    rows, cols = np.nonzero(inside & valid)
    longitude = reference["longitude"].to_numpy()[cols]
    latitude = reference["latitude"].to_numpy()[rows]
    points = gpd.GeoDataFrame(
        {
            cdc.POINT_ID: np.arange(len(rows)),
            "longitude": longitude,
            "latitude": latitude,
        },
        geometry=gpd.points_from_xy(longitude, latitude),
        crs=crs,
    )
    return points, build_lookup_table(points, shapes)


def build_lookup_table(
    points: gpd.GeoDataFrame,
    boundaries: gpd.GeoDataFrame,
) -> pd.DataFrame:
    """Assign each grid point the names of the polygon that contains it.

    Points on an edge shared by two polygons take the polygon that comes first
    in the boundary collection. Points inside no polygon keep their row with
    missing names.
    """
    shapes = boundaries[[*cdc.REGION_COLUMNS, "geometry"]].reset_index(drop=True)
    joined = gpd.sjoin(points, shapes, how="left", predicate="intersects")
    lookup = (
        joined.sort_values([cdc.POINT_ID, "index_right"])
        .drop_duplicates(subset=cdc.POINT_ID, keep="first")
        .loc[:, [cdc.POINT_ID, *cdc.REGION_COLUMNS]]
        .reset_index(drop=True)
    )
    return pd.DataFrame(lookup)
