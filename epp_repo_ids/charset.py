"""
Legal identifier characters.

Identifiers may only use the XML 1.0 (Appendix B) `Letter`/`Digit` characters,
i.e. the union of the `BaseChar`, `Ideographic` and `Digit` productions. The
productions are kept below in their published notation and compiled once, at
import time, into a sorted list of closed intervals.

Table grammar (one entry per line):
- blank lines are ignored
- lines whose first non-blank character is `;` are comments
- anything else is a `|`-separated list of tokens, each either a single code
  point `#xHHHH` or an inclusive range `[#xHHHH-#xHHHH]` (4-6 hex digits)
"""

from __future__ import annotations

import bisect
import re
from typing import Iterable, List, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import CharacterTableError

MAX_CODE_POINT = 0x10FFFF

_HEX = r"#x([0-9A-Fa-f]{4,6})"
_SINGLE = re.compile(_HEX)
_RANGE = re.compile(r"\[" + _HEX + "-" + _HEX + r"\]")


XML_NAME_CHARACTER_TABLE = """
; [85] BaseChar
[#x0041-#x005A] | [#x0061-#x007A] | [#x00C0-#x00D6] | [#x00D8-#x00F6]
| [#x00F8-#x00FF] | [#x0100-#x0131] | [#x0134-#x013E] | [#x0141-#x0148]
| [#x014A-#x017E] | [#x0180-#x01C3] | [#x01CD-#x01F0] | [#x01F4-#x01F5]
| [#x01FA-#x0217] | [#x0250-#x02A8] | [#x02BB-#x02C1] | #x0386
| [#x0388-#x038A] | #x038C | [#x038E-#x03A1] | [#x03A3-#x03CE]
| [#x03D0-#x03D6] | #x03DA | #x03DC | #x03DE | #x03E0 | [#x03E2-#x03F3]
| [#x0401-#x040C] | [#x040E-#x044F] | [#x0451-#x045C] | [#x045E-#x0481]
| [#x0490-#x04C4] | [#x04C7-#x04C8] | [#x04CB-#x04CC] | [#x04D0-#x04EB]
| [#x04EE-#x04F5] | [#x04F8-#x04F9] | [#x0531-#x0556] | #x0559
| [#x0561-#x0586] | [#x05D0-#x05EA] | [#x05F0-#x05F2] | [#x0621-#x063A]
| [#x0641-#x064A] | [#x0671-#x06B7] | [#x06BA-#x06BE] | [#x06C0-#x06CE]
| [#x06D0-#x06D3] | #x06D5 | [#x06E5-#x06E6] | [#x0905-#x0939] | #x093D
| [#x0958-#x0961] | [#x0985-#x098C] | [#x098F-#x0990] | [#x0993-#x09A8]
| [#x09AA-#x09B0] | #x09B2 | [#x09B6-#x09B9] | [#x09DC-#x09DD]
| [#x09DF-#x09E1] | [#x09F0-#x09F1] | [#x0A05-#x0A0A] | [#x0A0F-#x0A10]
| [#x0A13-#x0A28] | [#x0A2A-#x0A30] | [#x0A32-#x0A33] | [#x0A35-#x0A36]
| [#x0A38-#x0A39] | [#x0A59-#x0A5C] | #x0A5E | [#x0A72-#x0A74]
| [#x0A85-#x0A8B] | #x0A8D | [#x0A8F-#x0A91] | [#x0A93-#x0AA8]
| [#x0AAA-#x0AB0] | [#x0AB2-#x0AB3] | [#x0AB5-#x0AB9] | #x0ABD | #x0AE0
| [#x0B05-#x0B0C] | [#x0B0F-#x0B10] | [#x0B13-#x0B28] | [#x0B2A-#x0B30]
| [#x0B32-#x0B33] | [#x0B36-#x0B39] | #x0B3D | [#x0B5C-#x0B5D]
| [#x0B5F-#x0B61] | [#x0B85-#x0B8A] | [#x0B8E-#x0B90] | [#x0B92-#x0B95]
| [#x0B99-#x0B9A] | #x0B9C | [#x0B9E-#x0B9F] | [#x0BA3-#x0BA4]
| [#x0BA8-#x0BAA] | [#x0BAE-#x0BB5] | [#x0BB7-#x0BB9] | [#x0C05-#x0C0C]
| [#x0C0E-#x0C10] | [#x0C12-#x0C28] | [#x0C2A-#x0C33] | [#x0C35-#x0C39]
| [#x0C60-#x0C61] | [#x0C85-#x0C8C] | [#x0C8E-#x0C90] | [#x0C92-#x0CA8]
| [#x0CAA-#x0CB3] | [#x0CB5-#x0CB9] | #x0CDE | [#x0CE0-#x0CE1]
| [#x0D05-#x0D0C] | [#x0D0E-#x0D10] | [#x0D12-#x0D28] | [#x0D2A-#x0D39]
| [#x0D60-#x0D61] | [#x0E01-#x0E2E] | #x0E30 | [#x0E32-#x0E33]
| [#x0E40-#x0E45] | [#x0E81-#x0E82] | #x0E84 | [#x0E87-#x0E88] | #x0E8A
| #x0E8D | [#x0E94-#x0E97] | [#x0E99-#x0E9F] | [#x0EA1-#x0EA3] | #x0EA5
| #x0EA7 | [#x0EAA-#x0EAB] | [#x0EAD-#x0EAE] | #x0EB0 | [#x0EB2-#x0EB3]
| #x0EBD | [#x0EC0-#x0EC4] | [#x0F40-#x0F47] | [#x0F49-#x0F69]
| [#x10A0-#x10C5] | [#x10D0-#x10F6] | #x1100 | [#x1102-#x1103]
| [#x1105-#x1107] | #x1109 | [#x110B-#x110C] | [#x110E-#x1112] | #x113C
| #x113E | #x1140 | #x114C | #x114E | #x1150 | [#x1154-#x1155] | #x1159
| [#x115F-#x1161] | #x1163 | #x1165 | #x1167 | #x1169 | [#x116D-#x116E]
| [#x1172-#x1173] | #x1175 | #x119E | #x11A8 | #x11AB | [#x11AE-#x11AF]
| [#x11B7-#x11B8] | #x11BA | [#x11BC-#x11C2] | #x11EB | #x11F0 | #x11F9
| [#x1E00-#x1E9B] | [#x1EA0-#x1EF9] | [#x1F00-#x1F15] | [#x1F18-#x1F1D]
| [#x1F20-#x1F45] | [#x1F48-#x1F4D] | [#x1F50-#x1F57] | #x1F59 | #x1F5B
| #x1F5D | [#x1F5F-#x1F7D] | [#x1F80-#x1FB4] | [#x1FB6-#x1FBC] | #x1FBE
| [#x1FC2-#x1FC4] | [#x1FC6-#x1FCC] | [#x1FD0-#x1FD3] | [#x1FD6-#x1FDB]
| [#x1FE0-#x1FEC] | [#x1FF2-#x1FF4] | [#x1FF6-#x1FFC] | #x2126
| [#x212A-#x212B] | #x212E | [#x2180-#x2182] | [#x3041-#x3094]
| [#x30A1-#x30FA] | [#x3105-#x312C] | [#xAC00-#xD7A3]

; [86] Ideographic
[#x4E00-#x9FA5] | #x3007 | [#x3021-#x3029]

; [88] Digit
[#x0030-#x0039] | [#x0660-#x0669] | [#x06F0-#x06F9] | [#x0966-#x096F]
| [#x09E6-#x09EF] | [#x0A66-#x0A6F] | [#x0AE6-#x0AEF] | [#x0B66-#x0B6F]
| [#x0BE7-#x0BEF] | [#x0C66-#x0C6F] | [#x0CE6-#x0CEF] | [#x0D66-#x0D6F]
| [#x0E50-#x0E59] | [#x0ED0-#x0ED9] | [#x0F20-#x0F29]
"""


class CodePointRange(BaseModel):
    """Closed interval of Unicode scalar values."""

    model_config = ConfigDict(frozen=True)

    low: int = Field(ge=0, le=MAX_CODE_POINT)
    high: int = Field(ge=0, le=MAX_CODE_POINT)

    @model_validator(mode="after")
    def _ordered(self) -> "CodePointRange":
        if self.low > self.high:
            raise ValueError(f"empty range #x{self.low:04X}-#x{self.high:04X}")
        return self


def _parse_token(token: str, line_number: int) -> CodePointRange:
    m = _SINGLE.fullmatch(token)
    if m:
        value = int(m.group(1), 16)
        return _build_range(value, value, token, line_number)
    m = _RANGE.fullmatch(token)
    if m:
        return _build_range(int(m.group(1), 16), int(m.group(2), 16), token, line_number)
    raise CharacterTableError(f"invalid character table token {token!r}", line=line_number)


def _build_range(low: int, high: int, token: str, line_number: int) -> CodePointRange:
    try:
        return CodePointRange(low=low, high=high)
    except ValueError as exc:
        raise CharacterTableError(
            f"invalid character table token {token!r}", line=line_number
        ) from exc


def compile_table(table: Union[str, Iterable[str]]) -> List[CodePointRange]:
    lines = table.splitlines() if isinstance(table, str) else table
    ranges: List[CodePointRange] = []
    for line_number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith(";"):
            continue
        for token in stripped.split("|"):
            token = token.strip()
            if token:
                ranges.append(_parse_token(token, line_number))
    return ranges


class LegalCharacterSet:
    """Immutable union of code point ranges with O(log n) membership."""

    __slots__ = ("_lows", "_highs")

    def __init__(self, ranges: Iterable[CodePointRange]) -> None:
        merged: List[Tuple[int, int]] = []
        for r in sorted(ranges, key=lambda r: (r.low, r.high)):
            if merged and r.low <= merged[-1][1] + 1:
                merged[-1] = (merged[-1][0], max(merged[-1][1], r.high))
            else:
                merged.append((r.low, r.high))
        self._lows: Sequence[int] = tuple(low for low, _ in merged)
        self._highs: Sequence[int] = tuple(high for _, high in merged)

    def contains(self, codepoint: int) -> bool:
        i = bisect.bisect_right(self._lows, codepoint) - 1
        return i >= 0 and codepoint <= self._highs[i]

    def __contains__(self, item: Union[int, str]) -> bool:
        if isinstance(item, str):
            if len(item) != 1:
                return False
            item = ord(item)
        return self.contains(item)

    def __len__(self) -> int:
        return sum(high - low + 1 for low, high in zip(self._lows, self._highs))

    @property
    def ranges(self) -> List[CodePointRange]:
        return [CodePointRange(low=low, high=high) for low, high in zip(self._lows, self._highs)]


LEGAL_CHARACTERS = LegalCharacterSet(compile_table(XML_NAME_CHARACTER_TABLE))
