"""Database rendering and atomic publishing."""

from __future__ import annotations

import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, Optional

from .charset import LEGAL_CHARACTERS, LegalCharacterSet
from .errors import PublishError
from .logging import get_logger
from .models import OutputRecord
from .rules import DATABASE_ENCODING, END_OF_FILE, TOOL_NAME

logger = get_logger(__name__)


def sanitize_line(text: str, charset: LegalCharacterSet = LEGAL_CHARACTERS) -> str:
    """Keep printable ASCII and legal identifier characters, `?` for the rest."""
    return "".join(ch if " " <= ch <= "~" or ch in charset else "?" for ch in text)


def render_database(
    records: Iterable[OutputRecord],
    generated_at: Optional[datetime] = None,
    tool: str = TOOL_NAME,
) -> Iterator[str]:
    if generated_at is None:
        generated_at = datetime.now().astimezone()
    yield f"# This file was automatically generated at {generated_at:%Y-%m-%d %H:%M:%S %Z}."
    yield "#"
    yield f"# Do not edit manually. Regenerate it using {tool}."
    yield "#"
    for record in records:
        yield sanitize_line(record.line)
    yield END_OF_FILE


def _verify_complete(path: Path) -> None:
    with open(path, "rb") as fh:
        fh.seek(0, os.SEEK_END)
        size = fh.tell()
        tail = len(END_OF_FILE) + 1
        if size < tail:
            raise PublishError(f"{path}: incomplete database")
        fh.seek(size - tail)
        if fh.read() != (END_OF_FILE + "\n").encode(DATABASE_ENCODING):
            raise PublishError(f"{path}: missing {END_OF_FILE} sentinel")


def _sync_directory(directory: Path) -> None:
    """Flush the rename itself; the new database is already in place."""
    if not hasattr(os, "O_DIRECTORY"):
        return
    try:
        dir_fd = os.open(directory, os.O_DIRECTORY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)
    except OSError as exc:
        logger.warning("directory_sync_failed", path=str(directory), error=str(exc))


def publish_database(path: Path, lines: Iterable[str]) -> None:
    """
    Write `lines` next to `path` and atomically move the result onto it.

    The destination keeps its previous content unless every line was written,
    flushed to disk and verified. Any failure removes the temporary file and
    raises PublishError.
    """
    path = Path(path)
    tmp_path: Path | None = None
    existing_mode: int | None = None
    try:
        if path.exists():
            try:
                existing_mode = path.stat().st_mode & 0o777
            except OSError:
                existing_mode = None
        with tempfile.NamedTemporaryFile(
            "w",
            encoding=DATABASE_ENCODING,
            newline="\n",
            delete=False,
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
        ) as tmp:
            tmp_path = Path(tmp.name)
            for line in lines:
                tmp.write(line + "\n")
            tmp.flush()
            os.fsync(tmp.fileno())
        _verify_complete(tmp_path)
        os.chmod(tmp_path, existing_mode if existing_mode is not None else 0o644)
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as exc:
        raise PublishError(f"cannot publish {path}: {exc}") from exc
    finally:
        if tmp_path is not None and tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                logger.warning("temp_cleanup_failed", path=str(tmp_path))
    _sync_directory(path.parent)
    logger.info("database_published", path=str(path))
