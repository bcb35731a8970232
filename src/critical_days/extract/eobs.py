from pathlib import Path

import click

from critical_days import cli_options as clio
from critical_days import constants as cdc
from critical_days.data import CriticalDaysData
from critical_days.extract.download import download


def extract_eobs_main(
    variable: str,
    version: str,
    output_dir: str | Path,
    *,
    overwrite: bool = False,
    progress_bar: bool = False,
) -> Path:
    """Download the E-OBS ensemble mean file for a variable.

    Parameters
    ----------
    variable
        The E-OBS short code of the variable (e.g. "tx").
    version
        The E-OBS release (e.g. "v29.0e").
    output_dir
        The root directory of the critical days data.
    overwrite
        Whether to replace a file that has already been downloaded.
    progress_bar
        Whether to show a progress bar.

    Returns
    -------
    Path
        The path of the downloaded file.
    """
    cd_data = CriticalDaysData(output_dir)
    out_path = cd_data.raw_raster_path(variable, version)
    if out_path.exists() and not overwrite:
        print(f"{out_path.name} already extracted")
        return out_path

    url = cdc.EOBS_URL_TEMPLATE.format(
        resolution=cdc.EOBS_RESOLUTION,
        file_name=out_path.name,
    )
    print(f"Downloading {url}")
    download(url, out_path, progress_bar=progress_bar)
    return out_path


@click.command()
@clio.with_eobs_variable()
@clio.with_eobs_version()
@clio.with_output_directory(cdc.MODEL_ROOT)
@clio.with_overwrite()
@clio.with_progress_bar()
def extract_eobs(
    eobs_variable: str,
    eobs_version: str,
    output_dir: str,
    *,
    overwrite: bool,
    progress_bar: bool,
) -> None:
    """Download E-OBS gridded observations."""
    extract_eobs_main(
        eobs_variable,
        eobs_version,
        output_dir,
        overwrite=overwrite,
        progress_bar=progress_bar,
    )
