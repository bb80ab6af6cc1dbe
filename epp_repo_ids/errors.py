from __future__ import annotations

from typing import Optional


class FatalError(Exception):
    """Aborts the whole run; the published database is never touched."""

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class CharacterTableError(FatalError):
    """The built-in character range table is corrupt."""


class SourceEncodingError(FatalError):
    pass


class ControlCharacterError(FatalError):
    pass


class CsvSyntaxError(FatalError):
    pass


class HeaderMismatchError(FatalError):
    def __init__(self, column: int, expected: str, got: str) -> None:
        super().__init__(
            f"unexpected header in column {column}: expected {expected!r}, got {got!r}"
        )
        self.column = column
        self.expected = expected
        self.got = got


class PrematureEndError(FatalError):
    pass


class EmptyIdError(FatalError):
    pass


class FetchError(FatalError):
    pass


class DataDirectoryError(FatalError):
    pass


class PublishError(FatalError):
    pass
