"""End-to-end update: fetch, parse, validate, render, publish."""

from __future__ import annotations

import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from .config import Settings
from .errors import DataDirectoryError, FatalError
from .fetch import fetch_to_file
from .logging import get_logger
from .models import NormalizationReport
from .normalize import normalize_registry
from .rules import TOOL_NAME
from .writer import publish_database, render_database

logger = get_logger(__name__)

Fetcher = Callable[[str, Path, float], Path]


@dataclass(frozen=True)
class UpdateResult:
    path: Path
    report: NormalizationReport


def ensure_data_dir(path: Path) -> Path:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DataDirectoryError(f"cannot create data directory {path}: {exc}") from exc
    if not path.is_dir():
        raise DataDirectoryError(f"{path} is not a directory")
    return path


def run_update(
    settings: Settings,
    source: Optional[Path] = None,
    now: Optional[datetime] = None,
    fetcher: Fetcher = fetch_to_file,
) -> UpdateResult:
    """
    Rebuild the database from the registry.

    With `source` set, that local CSV is used and nothing is fetched. Every
    fatal error is raised before the destination file is touched.
    """
    ensure_data_dir(settings.data_dir)
    destination = settings.database_path
    logger.info("update_started", destination=str(destination))

    with tempfile.TemporaryDirectory(prefix="epp-repo-ids-") as workdir:
        if source is None:
            source = fetcher(settings.source_url, Path(workdir) / "registry.csv", settings.fetch_timeout)
        try:
            stream = open(source, "rb")
        except OSError as exc:
            raise FatalError(f"cannot read {source}: {exc}") from exc
        with stream:
            records, report = normalize_registry(stream)

    publish_database(destination, render_database(records, now, TOOL_NAME))
    logger.info(
        "update_finished",
        destination=str(destination),
        accepted=report.summary.accepted,
        rejected=report.summary.rejected,
    )
    return UpdateResult(path=destination, report=report)
