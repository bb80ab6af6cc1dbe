"""
Registry CSV reading and normalization.

Responsibilities:
- strict UTF-8 decoding, one physical line at a time
- control character rejection and whitespace normalization
- header enforcement
- data record extraction and per-record validation
- ragged row reporting
"""

from __future__ import annotations

import base64
import csv
import hashlib
import io
from datetime import datetime
from typing import BinaryIO, Iterator, List, Optional, Tuple

from charset_normalizer import from_bytes

from .errors import (
    ControlCharacterError,
    CsvSyntaxError,
    EmptyIdError,
    HeaderMismatchError,
    PrematureEndError,
    SourceEncodingError,
)
from .logging import get_logger
from .models import (
    Database,
    NormalizationReport,
    NormalizeResponse,
    OutputRecord,
    RawRecord,
    Rejected,
    ReportItem,
)
from .rules import DATABASE_ENCODING, EXPECTED_HEADER, SOURCE_ENCODING, TOOL_NAME
from .validate import validate
from .writer import render_database

logger = get_logger(__name__)

_UTF8_BOM = b"\xef\xbb\xbf"


def _sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _encoding_hint(raw: bytes) -> str:
    match = from_bytes(raw).best()
    if match is None or match.encoding in ("utf_8", "ascii"):
        return ""
    return f" (input looks like {match.encoding})"


class CsvReader:
    """Reads the registry one physical line at a time."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self.line_number = 0

    def read_record(self) -> Optional[List[str]]:
        """
        Return the trimmed fields of the next line.

        An empty list marks a blank line (every field empty after trimming);
        None marks the end of the stream.
        """
        raw = self._stream.readline()
        if not raw:
            return None
        self.line_number += 1
        if self.line_number == 1 and raw.startswith(_UTF8_BOM):
            raw = raw[len(_UTF8_BOM):]

        try:
            text = raw.decode(SOURCE_ENCODING)
        except UnicodeDecodeError as exc:
            raise SourceEncodingError(
                "Non-unicode character found" + _encoding_hint(raw), line=self.line_number
            ) from exc

        text = text.rstrip("\r\n").replace("\t", " ")
        for ch in text:
            if ord(ch) < 0x20:
                raise ControlCharacterError(
                    f"control character U+{ord(ch):04X} found", line=self.line_number
                )

        try:
            row = next(csv.reader([text], strict=True), [])
        except csv.Error as exc:
            raise CsvSyntaxError(f"malformed CSV: {exc}", line=self.line_number) from exc

        fields = [field.strip() for field in row]
        if not any(fields):
            return []
        return fields


def check_header(fields: List[str]) -> None:
    for i in range(max(len(EXPECTED_HEADER), len(fields))):
        expected = EXPECTED_HEADER[i] if i < len(EXPECTED_HEADER) else "<none>"
        got = fields[i] if i < len(fields) else "<missing>"
        if expected != got:
            raise HeaderMismatchError(i + 1, expected, got)


def read_registry(
    stream: BinaryIO, report: Optional[NormalizationReport] = None
) -> Iterator[RawRecord]:
    """Yield the data records following the header, in file order."""
    reader = CsvReader(stream)

    fields = reader.read_record()
    while fields == []:
        fields = reader.read_record()
    if fields is None:
        raise PrematureEndError("end of data before the header", line=reader.line_number)
    check_header(fields)

    number = 1
    while True:
        fields = reader.read_record()
        if fields is None or fields == []:
            if number == 1:
                raise PrematureEndError(
                    "end of data before the first record", line=reader.line_number
                )
            return
        number += 1
        if not fields[0]:
            raise EmptyIdError("unexpected empty ID", line=reader.line_number)
        if len(fields) != len(EXPECTED_HEADER):
            logger.warning(
                "ragged_row", record=number, line=reader.line_number, columns=len(fields)
            )
            if report is not None:
                report.warnings.append(ReportItem(
                    record=number,
                    issue="ragged_row",
                    value=str(len(fields)),
                    action=f"expected_{len(EXPECTED_HEADER)}",
                ))
        yield RawRecord(number=number, fields=tuple(fields))


def normalize_registry(
    stream: BinaryIO,
) -> Tuple[List[OutputRecord], NormalizationReport]:
    """Validate every identifier; output order follows the CSV row order."""
    report = NormalizationReport()
    records: List[OutputRecord] = []

    for raw in read_registry(stream, report):
        result = validate(raw.fields[0], raw.number)
        records.append(result)
        if isinstance(result, Rejected):
            report.rejections.append(ReportItem(
                record=result.record,
                issue=result.reason.value,
                value=raw.fields[0],
                action="commented_out",
            ))

    report.summary.records = len(records)
    report.summary.rejected = len(report.rejections)
    report.summary.accepted = len(records) - len(report.rejections)
    return records, report


def normalize_registry_bytes(
    raw: bytes, generated_at: Optional[datetime] = None
) -> NormalizeResponse:
    """
    In-memory variant used by the HTTP surface.

    Returns the rendered database and the report matching the API's response
    envelope.
    """
    records, report = normalize_registry(io.BytesIO(raw))
    text = "".join(line + "\n" for line in render_database(records, generated_at, TOOL_NAME))
    content = text.encode(DATABASE_ENCODING)

    return NormalizeResponse(
        database=Database(
            sha256=_sha256_hex(content),
            encoding=DATABASE_ENCODING,
            content_b64=base64.b64encode(content).decode("ascii"),
        ),
        report=report,
    )
