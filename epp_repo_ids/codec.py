"""Code-point-reference notation: `#x004D #x0058` <-> `MX`."""

from __future__ import annotations

import re

_TOKEN = re.compile(r"#x([0-9A-Fa-f]{4,6})")


def decode_code_points(spec: str) -> str:
    """
    Decode a code-point-reference string into the text it denotes.

    All spaces are removed first, then every `#xHHHH` token (4-6 hex digits)
    is replaced by its character. Text between tokens is kept as is; legality
    is not checked here.

    Raises ValueError for values above U+10FFFF.
    """
    compact = spec.replace(" ", "")
    return _TOKEN.sub(lambda m: chr(int(m.group(1), 16)), compact)


def encode_code_points(text: str) -> str:
    return " ".join(f"#x{ord(ch):04X}" for ch in text)
