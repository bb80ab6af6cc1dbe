from __future__ import annotations

import threading
from pathlib import Path
from typing import List

import requests

from .errors import FetchError
from .logging import get_logger
from .rules import FETCH_TIMEOUT_SECONDS

logger = get_logger(__name__)

CHUNK_SIZE = 64 * 1024


def _download(
    url: str,
    dest: Path,
    timeout: float,
    cancelled: threading.Event,
    opened: List[requests.Response],
) -> None:
    try:
        with requests.get(url, stream=True, timeout=timeout) as response:
            opened.append(response)
            response.raise_for_status()
            with open(dest, "wb") as fh:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if cancelled.is_set():
                        return
                    fh.write(chunk)
    except requests.Timeout as exc:
        raise FetchError(f"{url}: timed out after {timeout:g} seconds") from exc
    except requests.RequestException as exc:
        raise FetchError(f"{url}: {exc}") from exc
    except OSError as exc:
        raise FetchError(f"cannot write {dest}: {exc}") from exc


def fetch_to_file(url: str, dest: Path, timeout: float = FETCH_TIMEOUT_SECONDS) -> Path:
    """
    Download `url` into `dest` with a single GET.

    `timeout` bounds the whole transfer, however slowly the server sends:
    the download runs on a daemon thread and is abandoned once the deadline
    passes. Any transport error, non-2xx status or overrun raises FetchError;
    there are no retries.
    """
    cancelled = threading.Event()
    opened: List[requests.Response] = []
    errors: List[Exception] = []

    def run() -> None:
        try:
            _download(url, dest, timeout, cancelled, opened)
        except Exception as exc:
            errors.append(exc)

    logger.info("fetch_started", url=url, timeout=timeout)
    worker = threading.Thread(target=run, name="epp-repo-ids-fetch", daemon=True)
    worker.start()
    worker.join(timeout)

    if worker.is_alive():
        cancelled.set()
        for response in opened:
            response.close()
        raise FetchError(f"{url}: timed out after {timeout:g} seconds")
    if errors:
        raise errors[0]

    logger.info("fetch_finished", url=url, bytes=Path(dest).stat().st_size)
    return Path(dest)
