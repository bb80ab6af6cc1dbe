"""
Identifier extraction and validation.

The first registry column carries every identifier twice, as a literal and in
code-point-reference notation, e.g. `MX, #x004D #x0058`. Validation runs five
checks in a fixed order and stops at the first failure:

1. split the field into literal and code point list
2. check the code point list grammar
3. compare the decoded list with the literal
4. bound the length
5. check every character against the legal set

A failing record becomes a `Rejected` comment line; it never aborts the run.
"""

from __future__ import annotations

from string import hexdigits
from typing import List, Optional, Union

from .charset import LEGAL_CHARACTERS, MAX_CODE_POINT, LegalCharacterSet
from .codec import decode_code_points, encode_code_points
from .logging import get_logger
from .models import Accepted, CandidateIdentifier, Rejected, RejectReason
from .rules import MAX_ID_LENGTH

logger = get_logger(__name__)

_HEX_DIGITS = frozenset(hexdigits)
_MIN_HEX, _MAX_HEX = 4, 6


def _skip_spaces(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] == " ":
        pos += 1
    return pos


def split_field(field: str) -> Optional[CandidateIdentifier]:
    """`<literal>[spaces],<codepoint-spec>`; the literal holds no comma or space."""
    pos = 0
    while pos < len(field) and field[pos] not in ", ":
        pos += 1
    if pos == 0:
        return None
    literal = field[:pos]
    pos = _skip_spaces(field, pos)
    if pos >= len(field) or field[pos] != ",":
        return None
    return CandidateIdentifier(literal=literal, codepoint_spec=field[pos + 1:])


def parse_code_point_spec(spec: str) -> Optional[List[int]]:
    """
    Scan `[spaces]#xHHHH([spaces]#xHHHH)*[spaces]`.

    Returns the code point values, or None when the text does not follow the
    grammar or a value is not a Unicode scalar value.
    """
    values: List[int] = []
    pos = _skip_spaces(spec, 0)
    if pos == len(spec):
        return None
    while pos < len(spec):
        if not spec.startswith("#x", pos):
            return None
        start = pos = pos + 2
        while pos < len(spec) and spec[pos] in _HEX_DIGITS:
            pos += 1
        if not _MIN_HEX <= pos - start <= _MAX_HEX:
            return None
        value = int(spec[start:pos], 16)
        if value > MAX_CODE_POINT or 0xD800 <= value <= 0xDFFF:
            return None
        values.append(value)
        pos = _skip_spaces(spec, pos)
    return values


def check_representations(candidate: CandidateIdentifier) -> Optional[str]:
    """Return the decoded code point list when it differs from the literal."""
    decoded = decode_code_points(candidate.codepoint_spec)
    return None if decoded == candidate.literal else decoded


def check_length(literal: str, limit: int = MAX_ID_LENGTH) -> bool:
    return len(literal) <= limit


def find_illegal_code_point(
    literal: str, charset: LegalCharacterSet = LEGAL_CHARACTERS
) -> Optional[int]:
    for ch in literal:
        if ord(ch) not in charset:
            return ord(ch)
    return None


def _reject(
    record_number: int, reason: RejectReason, comment: str, field: str, **context: str
) -> Rejected:
    logger.warning(
        "record_rejected", record=record_number, reason=reason.value, field=field, **context
    )
    return Rejected(record=record_number, reason=reason, comment=f"# Record {record_number}: {comment}")


def validate(
    field: str,
    record_number: int,
    charset: LegalCharacterSet = LEGAL_CHARACTERS,
) -> Union[Accepted, Rejected]:
    candidate = split_field(field)
    if candidate is None:
        return _reject(
            record_number, RejectReason.UNPARSABLE, f'cannot parse entry "{field}"', field
        )

    literal, spec = candidate.literal, candidate.codepoint_spec
    if parse_code_point_spec(spec) is None:
        return _reject(
            record_number,
            RejectReason.MALFORMED_CODE_POINTS,
            f'malformed code point list "{spec.strip()}" for ID "{literal}"',
            field,
        )

    decoded = check_representations(candidate)
    if decoded is not None:
        return _reject(
            record_number,
            RejectReason.MISMATCH,
            f'mismatch between ID "{literal}" and code points "{spec.strip()}" '
            f'(decodes to "{decoded}")',
            field,
            literal_code_points=encode_code_points(literal),
        )

    if not check_length(literal):
        return _reject(
            record_number,
            RejectReason.TOO_LONG,
            f'ID "{literal}" too long ({len(literal)} characters, at most {MAX_ID_LENGTH})',
            field,
        )

    illegal = find_illegal_code_point(literal, charset)
    if illegal is not None:
        return _reject(
            record_number,
            RejectReason.ILLEGAL_CODE_POINT,
            f'illegal code point U+{illegal:04X} in ID "{literal}"',
            field,
        )

    return Accepted(record=record_number, id=literal)
