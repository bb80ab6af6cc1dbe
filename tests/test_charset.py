import pytest

from epp_repo_ids.charset import (
    LEGAL_CHARACTERS,
    CodePointRange,
    LegalCharacterSet,
    compile_table,
)
from epp_repo_ids.errors import CharacterTableError, FatalError


def test_compile_table_skips_blank_and_comment_lines():
    table = """
    ; letters
    [#x0041-#x005A] | #x005F

    | [#x0061-#x007A]
    """
    assert compile_table(table) == [
        CodePointRange(low=0x41, high=0x5A),
        CodePointRange(low=0x5F, high=0x5F),
        CodePointRange(low=0x61, high=0x7A),
    ]


def test_compile_table_accepts_six_hex_digits():
    assert compile_table("[#x010000-#x01FFFF]") == [CodePointRange(low=0x10000, high=0x1FFFF)]


@pytest.mark.parametrize(
    "token",
    ["#x41", "#x0041000", "[#x0041 - #x005A]", "U+0041", "[#x005A-#x0041]", "#x110000"],
)
def test_compile_table_rejects_corrupt_tokens(token):
    with pytest.raises(CharacterTableError) as excinfo:
        compile_table(["; header", token])
    assert excinfo.value.line == 2
    assert isinstance(excinfo.value, FatalError)


def test_ranges_are_merged_and_membership_uses_bounds():
    charset = LegalCharacterSet([
        CodePointRange(low=0x61, high=0x7A),
        CodePointRange(low=0x41, high=0x5A),
        CodePointRange(low=0x5B, high=0x5B),
    ])
    assert len(charset.ranges) == 2
    assert charset.contains(0x41)
    assert charset.contains(0x5B)
    assert charset.contains(0x7A)
    assert not charset.contains(0x40)
    assert not charset.contains(0x5C)
    assert not charset.contains(0x7B)
    assert len(charset) == 26 + 1 + 26


@pytest.mark.parametrize(
    "ch",
    ["A", "z", "0", "9", "é", "٣", "一", "龥", "〇", "가", "ก"],
)
def test_xml_letters_and_digits_are_legal(ch):
    assert ch in LEGAL_CHARACTERS


@pytest.mark.parametrize(
    "ch",
    ["-", "_", ".", " ", "×", "÷", "龦", "\U0001F600", "̀", "ab"],
)
def test_other_characters_are_illegal(ch):
    assert ch not in LEGAL_CHARACTERS
