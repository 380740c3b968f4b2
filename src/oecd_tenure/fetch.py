from __future__ import annotations

from pathlib import Path

import requests

from oecd_tenure.config import HTTP_TIMEOUT, RAW_WORKBOOK, SOURCE_URL
from oecd_tenure.logging import get_logger

log = get_logger(__name__)


def download_workbook(url: str = SOURCE_URL, dest: Path = RAW_WORKBOOK,
                      timeout: float = HTTP_TIMEOUT) -> Path:
    """
    Download the OECD tenure workbook and overwrite ``dest`` with it.

    Network errors, non-2xx responses and write failures propagate; there is
    no retry.
    """
    log.info("download_start", url=url, dest=str(dest))
    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()

    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(resp.content)
    log.info("download_complete", dest=str(dest), bytes=len(resp.content))
    return dest
