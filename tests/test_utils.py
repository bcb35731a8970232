import numpy as np
import pandas as pd
import pytest
import xarray as xr

from critical_days.errors import DateParseError
from critical_days.utils import (
    crop_to_bounds,
    get_bbox,
    grid_resolution,
    parse_layer_dates,
    to_raster,
)

# =============================================================================
# Layer dates
# =============================================================================


def test_decoded_datetimes_pass_through():
    labels = np.array(["2020-01-01T12:00", "2020-01-02T00:00"], dtype="datetime64[ns]")
    dates = parse_layer_dates(labels)
    assert list(dates) == [pd.Timestamp("2020-01-01"), pd.Timestamp("2020-01-02")]


def test_numeric_offsets_use_cf_units():
    dates = parse_layer_dates(np.array([0.0, 1.0, 25567.0]), "days since 1950-01-01 00:00")
    assert list(dates) == [
        pd.Timestamp("1950-01-01"),
        pd.Timestamp("1950-01-02"),
        pd.Timestamp("2020-01-01"),
    ]


def test_hourly_offsets_are_normalized_to_days():
    dates = parse_layer_dates(np.array([0, 36]), "hours since 2000-01-01")
    assert list(dates) == [pd.Timestamp("2000-01-01"), pd.Timestamp("2000-01-02")]


@pytest.mark.parametrize(
    "label",
    ["X1950.01.01", "1950-01-01", "tx_1950_1_1", "layer 1950/01/01", "19500101"],
)
def test_string_identifiers_in_several_encodings(label):
    assert parse_layer_dates([label])[0] == pd.Timestamp("1950-01-01")


def test_numeric_offsets_without_units_fail():
    with pytest.raises(DateParseError) as exc_info:
        parse_layer_dates(np.array([1.0, 2.0]))
    assert exc_info.value.stage == "parse_dates"


def test_unknown_time_units_fail():
    with pytest.raises(DateParseError, match="fortnights since"):
        parse_layer_dates(np.array([1, 2]), "fortnights since 1950-01-01")


@pytest.mark.parametrize("label", ["X1", "band_7", "1950-13-01"])
def test_unparseable_identifiers_fail(label):
    with pytest.raises(DateParseError) as exc_info:
        parse_layer_dates(["X1950.01.01", label])
    assert exc_info.value.identifier == label


# =============================================================================
# Grid geometry
# =============================================================================


def test_grid_resolution_needs_two_cells():
    assert grid_resolution([0.05, 0.15, 0.25]) == pytest.approx(0.1)
    with pytest.raises(ValueError, match="at least two"):
        grid_resolution([0.05])


def test_to_raster_places_cell_edges_half_a_cell_from_centers(raster):
    template = to_raster(raster.isel(date=0), no_data_value=np.nan)
    transform = template.transform
    assert transform.c == pytest.approx(0.0)
    assert transform.f == pytest.approx(3.0)
    assert transform.a == pytest.approx(1.0)
    assert transform.e == pytest.approx(-1.0)


def test_to_raster_is_north_up_for_either_latitude_order(raster):
    layer = raster.isel(date=1)
    ascending = to_raster(layer, no_data_value=np.nan)
    descending = to_raster(layer.sortby("latitude", ascending=False), no_data_value=np.nan)
    assert ascending.transform == descending.transform
    xmin, xmax, ymin, ymax = ascending.bounds
    assert (xmin, xmax, ymin, ymax) == pytest.approx((0.0, 4.0, 0.0, 3.0))


def test_get_bbox_matches_raster_bounds(raster):
    bbox = get_bbox(to_raster(raster.isel(date=1), no_data_value=np.nan))
    assert bbox.bounds == pytest.approx((0.0, 0.0, 4.0, 3.0))


def test_crop_to_bounds_returns_north_up_subset(raster):
    cropped = crop_to_bounds(raster, (0.0, 0.0, 2.0, 2.0))
    assert list(cropped["longitude"].to_numpy()) == [0.5, 1.5]
    assert list(cropped["latitude"].to_numpy()) == [1.5, 0.5]


def test_crop_to_bounds_buffer_widens_the_box(raster):
    cropped = crop_to_bounds(raster, (1.0, 1.0, 2.0, 2.0), buffer=1.0)
    assert cropped.sizes["longitude"] == 3
    assert cropped.sizes["latitude"] == 3
    assert isinstance(cropped, xr.DataArray)
