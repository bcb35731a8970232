from pathlib import Path
from typing import NamedTuple

##############
# File roots #
##############

# Working directory for extracted inputs and pipeline outputs
MODEL_ROOT = Path("/mnt/share/climate/critical_days/")


######################
# Pipeline variables #
######################

# Exceedance threshold in degrees Celsius. A day is critical when the
# observed value is strictly greater than this.
CRITICAL_THRESHOLD = 34.0

# Space

DEFAULT_CRS = "EPSG:4326"

DEFAULT_COUNTRY = "FRA"
ADMIN_LEVELS = ["1", "2"]
DEFAULT_ADMIN_LEVEL = "2"

# Column names used by every table the pipeline produces.
POINT_ID = "point_id"
DATE = "date"
VALUE = "value"
YEAR_ID = "year_id"
ADMIN_1_NAME = "admin_1_name"
ADMIN_2_NAME = "admin_2_name"
REGION_COLUMNS = [ADMIN_1_NAME, ADMIN_2_NAME]
CRITICAL_DAYS = "critical_days"

# Extraction Constants

EOBS_VERSION = "v29.0e"
EOBS_RESOLUTION = "0.1deg"
EOBS_URL_TEMPLATE = (
    "https://knmi-ecad-assets-prd.s3.amazonaws.com/ensembles/data/"
    "Grid_{resolution}_reg_ensemble/{file_name}"
)
EOBS_FILE_TEMPLATE = "{variable}_ens_mean_{resolution}_reg_{version}.nc"


class EOBSVariable(NamedTuple):
    name: str
    description: str
    units: str


class _EOBSVariables(NamedTuple):
    tx: EOBSVariable = EOBSVariable(
        name="tx",
        description="Daily maximum temperature",
        units="degC",
    )
    tn: EOBSVariable = EOBSVariable(
        name="tn",
        description="Daily minimum temperature",
        units="degC",
    )
    tg: EOBSVariable = EOBSVariable(
        name="tg",
        description="Daily mean temperature",
        units="degC",
    )

    def names(self) -> list[str]:
        return [v.name for v in self]

    def get(self, name: str) -> EOBSVariable:
        return getattr(self, name)  # type: ignore[no-any-return]


EOBS_VARIABLES = _EOBSVariables()
DEFAULT_VARIABLE = EOBS_VARIABLES.tx.name

GADM_VERSION = "4.1"
GADM_URL_TEMPLATE = (
    "https://geodata.ucdavis.edu/gadm/gadm{version}/gpkg/{file_name}"
)
GADM_FILE_TEMPLATE = "gadm{version}_{iso3}.gpkg"
GADM_LAYER_TEMPLATE = "ADM_ADM_{level}"
