from critical_days.extract.eobs import (
    extract_eobs,
    extract_eobs_main,
)
from critical_days.extract.gadm import (
    extract_gadm,
    extract_gadm_main,
)

RUNNERS = {
    "eobs": extract_eobs,
    "gadm": extract_gadm,
}

__all__ = [
    "RUNNERS",
    "extract_eobs",
    "extract_eobs_main",
    "extract_gadm",
    "extract_gadm_main",
]
