"""
Downloads of the source spreadsheets published by NRS and Scotland's Census.
"""

from __future__ import annotations

import logging
from pathlib import Path

import requests

from .config import REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def download_file(url: str, dest: str | Path, timeout: int = REQUEST_TIMEOUT) -> Path:
    """Stream ``url`` to ``dest`` and return the written path.

    Any failure (connection, HTTP status, timeout, disk) removes the
    partially written file and re-raises; there are no retries.
    """
    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Downloading %s", url)
    try:
        with requests.get(url, stream=True, timeout=timeout) as response:
            response.raise_for_status()
            with dest.open("wb") as fh:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        fh.write(chunk)
    except Exception:
        dest.unlink(missing_ok=True)
        raise
    logger.debug("Saved %s (%d bytes)", dest, dest.stat().st_size)
    return dest
