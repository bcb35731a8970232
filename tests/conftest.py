"""Root-level pytest fixtures for the critical days test suite.

Provides a throwaway data root populated with small synthetic inputs: a 3 x 4
cell E-OBS-like raster and a two-region GADM-like boundary geopackage.
"""

import matplotlib
import pytest
from helpers.fake_data import (
    make_raster,
    make_region_boundaries,
    make_values,
    write_fake_eobs_netcdf,
    write_fake_gadm,
)

from critical_days.data import CriticalDaysData

matplotlib.use("Agg")


# =============================================================================
# In-memory inputs
# =============================================================================


@pytest.fixture
def raster():
    """Three-day raster with one missing cell in the first layer."""
    return make_raster(make_values(3))


@pytest.fixture
def boundaries():
    """Two regions, A and B, both in level-1 region North."""
    return make_region_boundaries()


# =============================================================================
# On-disk inputs
# =============================================================================


@pytest.fixture
def data_root(tmp_path):
    return tmp_path / "critical_days"


@pytest.fixture
def cd_data(data_root):
    return CriticalDaysData(data_root)


@pytest.fixture
def eobs_file(cd_data):
    """E-OBS-like tx file spanning two years."""
    values = make_values(4)
    return write_fake_eobs_netcdf(
        cd_data.raw_raster_path("tx"), values, start="2019-12-30"
    )


@pytest.fixture
def gadm_file(cd_data):
    return write_fake_gadm(cd_data.boundaries_path("TST"))
