from pathlib import Path

import requests
import tqdm
from rra_tools.shell_tools import touch

CHUNK_SIZE = 16 * 1024**2
TIMEOUT = 30  # seconds


def download(url: str, out_path: Path, *, progress_bar: bool = False) -> None:
    """Stream a remote file to disk in a single attempt.

    Chunks are written to a ``.part`` file next to ``out_path``, which is only
    renamed into place once the whole body has been written. An interrupted
    download never leaves a file at ``out_path``.

    Parameters
    ----------
    url
        The URL to download.
    out_path
        Where to write the file.
    progress_bar
        Whether to show a progress bar while writing chunks.

    Raises
    ------
    requests.HTTPError
        If the server answers with an error status.
    """
    response = requests.get(url, stream=True, timeout=TIMEOUT)
    response.raise_for_status()

    part_path = out_path.with_name(f"{out_path.name}.part")
    touch(part_path, clobber=True)
    try:
        with part_path.open("wb") as fp:
            for chunk in tqdm.tqdm(
                response.iter_content(chunk_size=CHUNK_SIZE),
                disable=not progress_bar,
            ):
                fp.write(chunk)
    except BaseException:
        part_path.unlink(missing_ok=True)
        raise
    part_path.replace(out_path)
