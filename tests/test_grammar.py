"""Tests for `urnkit.grammar` character classes and percent-encoding helpers."""

import pytest

from urnkit.errors import ComponentKind, MalformedPercentEncodingError
from urnkit.grammar import (
    ascii_lower,
    find_invalid_char,
    is_percent_triplet,
    is_reserved_nid,
    is_valid_nid,
    is_valid_nss_char,
    is_valid_trans_char,
    normalize_percent_encoding,
    overencoded_octets,
    validate_percent_encoding,
)
from urnkit.urn import parse_urn


@pytest.mark.parametrize(
    "nid",
    ["a", "1", "example", "ISBN", "ex-ample", "a-b-c", "x" * 31, "a" + "-" * 29 + "b"],
)
def test_is_valid_nid_accepts(nid: str) -> None:
    assert is_valid_nid(nid) is True


@pytest.mark.parametrize(
    "nid",
    ["", "-", "-ex", "ex-", "ex_ample", "ex.ample", "ex ample", "é", "x" * 32, "ex\n"],
)
def test_is_valid_nid_rejects(nid: str) -> None:
    assert is_valid_nid(nid) is False


@pytest.mark.parametrize("nid,reserved", [("urn", True), ("URN", True), ("uRn", True), ("urnx", False), ("ur", False)])
def test_is_reserved_nid(nid: str, reserved: bool) -> None:
    assert is_reserved_nid(nid) is reserved


@pytest.mark.parametrize("char", ["a", "Z", "0", "-", ".", "_", "~", "!", "$", "&", "'", "(", ")", "*", "+", ",", ";", "=", ":", "@", "/"])
def test_nss_char_class(char: str) -> None:
    assert is_valid_nss_char(char) is True
    assert is_valid_trans_char(char) is True


@pytest.mark.parametrize("char", ["#", "%", " ", "[", "]", "<", '"', "\\", "^", "`", "{", "|", "é", "\n"])
def test_chars_outside_both_classes(char: str) -> None:
    assert is_valid_nss_char(char) is False
    assert is_valid_trans_char(char) is False


def test_question_mark_only_allowed_in_components() -> None:
    assert is_valid_trans_char("?") is True
    assert is_valid_nss_char("?") is False


@pytest.mark.parametrize(
    "value,index,expected",
    [("a%2Fb", 1, True), ("%c3", 0, True), ("%2", 0, False), ("%GG", 0, False), ("a%2Fb", 0, False)],
)
def test_is_percent_triplet(value: str, index: int, expected: bool) -> None:
    assert is_percent_triplet(value, index) is expected


def test_find_invalid_char_skips_valid_triplets() -> None:
    assert find_invalid_char("abc%2Fdef%c3%A9", is_valid_nss_char) is None


@pytest.mark.parametrize(
    "value,expected",
    [("ab c", 2), ("ab%2", 2), ("a%zz", 1), ("a?b", 1), ("%", 0)],
)
def test_find_invalid_char_reports_first_bad_index(value: str, expected: int) -> None:
    assert find_invalid_char(value, is_valid_nss_char) == expected


def test_find_invalid_char_respects_bounds() -> None:
    assert find_invalid_char("xx?yy", is_valid_nss_char, 3, 5) is None
    assert find_invalid_char("xx?yy", is_valid_nss_char, 0, 5) == 2
    # A triplet running past the end bound is not a triplet
    assert find_invalid_char("a%2F", is_valid_nss_char, 0, 3) == 1


def test_validate_percent_encoding_accepts_well_formed() -> None:
    validate_percent_encoding("a%2Fb%c3%A9")
    validate_percent_encoding("no escapes at all")


@pytest.mark.parametrize("value,position", [("a%2", 1), ("%%41", 0), ("a%41%4", 4), ("%x1", 0)])
def test_validate_percent_encoding_reports_position(value: str, position: int) -> None:
    with pytest.raises(MalformedPercentEncodingError) as excinfo:
        validate_percent_encoding(value, ComponentKind.NSS)

    assert excinfo.value.position == position
    assert excinfo.value.component is ComponentKind.NSS


def test_validate_percent_encoding_respects_bounds() -> None:
    # The triplet straddling `end` is malformed; text past it is ignored
    with pytest.raises(MalformedPercentEncodingError) as excinfo:
        validate_percent_encoding("x:a%41b%4#%zz", ComponentKind.NSS, 2, 9)
    assert excinfo.value.position == 7

    validate_percent_encoding("%zz:a%41", ComponentKind.NSS, 4)
    validate_percent_encoding("a%41#%", ComponentKind.NSS, 0, 4)


@pytest.mark.parametrize("text", ["urn:example:a%2", "urn:example:a?+r%4#f", "urn:example:a#%g1"])
def test_parser_agrees_with_validate_percent_encoding(text: str) -> None:
    with pytest.raises(MalformedPercentEncodingError) as parsed:
        parse_urn(text)
    with pytest.raises(MalformedPercentEncodingError) as direct:
        validate_percent_encoding(text, parsed.value.component, len("urn:example:"))

    assert parsed.value.position == direct.value.position


def test_normalize_percent_encoding_lowercases_hex_only() -> None:
    assert normalize_percent_encoding("AB%2Fcd%C3%a9") == "AB%2fcd%c3%a9"
    assert normalize_percent_encoding("ABC") == "ABC"


def test_normalize_percent_encoding_is_idempotent() -> None:
    once = normalize_percent_encoding("%2F%3A%C3%A9")
    assert normalize_percent_encoding(once) == once


def test_overencoded_octets_flags_unreserved_only() -> None:
    assert overencoded_octets("a%41%2F%7e%2d") == ["%41", "%7e", "%2d"]
    assert overencoded_octets("a%2F%3A") == []


def test_ascii_lower_leaves_non_ascii_alone() -> None:
    assert ascii_lower("URN:Example") == "urn:example"
    # str.lower() would change these
    assert ascii_lower("İK") == "İk"
    assert ascii_lower("\u212a") == "\u212a"  # Kelvin sign
