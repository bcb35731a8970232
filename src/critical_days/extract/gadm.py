from http import HTTPStatus
from pathlib import Path

import click
import requests

from critical_days import cli_options as clio
from critical_days import constants as cdc
from critical_days.data import BOUNDARY_STAGE, CriticalDaysData
from critical_days.errors import DataNotFoundError
from critical_days.extract.download import download


def extract_gadm_main(
    iso3: str,
    output_dir: str | Path,
    version: str = cdc.GADM_VERSION,
    *,
    overwrite: bool = False,
    progress_bar: bool = False,
) -> Path:
    """Download the GADM boundaries geopackage for a country.

    The geopackage holds one layer per administrative level. The download is
    attempted once; network failures propagate to the caller.

    Raises
    ------
    DataNotFoundError
        If the identifier is not an ISO alpha-3 code or GADM has no file for it.
    """
    if len(iso3) != 3 or not iso3.isalpha():  # noqa: PLR2004
        raise DataNotFoundError(BOUNDARY_STAGE, iso3, "not an ISO alpha-3 country code")

    cd_data = CriticalDaysData(output_dir)
    out_path = cd_data.boundaries_path(iso3, version)
    if out_path.exists() and not overwrite:
        print(f"{out_path.name} already extracted")
        return out_path

    url = cdc.GADM_URL_TEMPLATE.format(version=version, file_name=out_path.name)
    print(f"Downloading {url}")
    try:
        download(url, out_path, progress_bar=progress_bar)
    except requests.HTTPError as e:
        if e.response is not None and e.response.status_code == HTTPStatus.NOT_FOUND:
            raise DataNotFoundError(
                BOUNDARY_STAGE, iso3, f"no GADM {version} boundaries at {url}"
            ) from e
        raise
    return out_path


@click.command()
@clio.with_iso3()
@clio.with_output_directory(cdc.MODEL_ROOT)
@clio.with_overwrite()
@clio.with_progress_bar()
def extract_gadm(
    iso3: str,
    output_dir: str,
    *,
    overwrite: bool,
    progress_bar: bool,
) -> None:
    """Download GADM administrative boundaries."""
    extract_gadm_main(iso3, output_dir, overwrite=overwrite, progress_bar=progress_bar)
