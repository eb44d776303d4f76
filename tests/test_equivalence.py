"""Canonicalization and RFC 8141 section 3 equivalence."""

from itertools import combinations

import pytest

from urnkit.errors import MissingSchemePrefixError
from urnkit.urn import Urn, canonicalize, equivalent, format_urn, parse_urn

# RFC 8141 section 3.2: all of these are equivalent to each other
RFC_EQUIVALENT = [
    "urn:example:a123,z456",
    "URN:example:a123,z456",
    "urn:EXAMPLE:a123,z456",
    "urn:example:a123,z456?+abc",
    "urn:example:a123,z456?=xyz",
    "urn:example:a123,z456#789",
]

# ...and none of these is equivalent to the above or to each other
RFC_DISTINCT = [
    "urn:example:a123,z456/foo",
    "urn:example:a123,z456/bar",
    "urn:example:a123,z456/baz",
    "urn:example:A123,z456",
    "urn:example:a123,Z456",
    "urn:example:a123%2Cz456",
]

VALID_SAMPLES = RFC_EQUIVALENT + RFC_DISTINCT + [
    "URN:EXAMPLE:a123%2cz456?+R%2F?=Q%3A#F%C3%A9",
    "urn:example:a?+?=#",
    "urn:isbn:0451450523",
    "Urn:Ex-Ample:%41%42?=x?y",
]


@pytest.mark.parametrize("a,b", list(combinations(RFC_EQUIVALENT, 2)))
def test_rfc_equivalent_group(a: str, b: str) -> None:
    assert equivalent(a, b) is True


@pytest.mark.parametrize("a,b", list(combinations(RFC_DISTINCT + RFC_EQUIVALENT[:1], 2)))
def test_rfc_distinct_group(a: str, b: str) -> None:
    assert equivalent(a, b) is False


def test_percent_encoding_hex_case_is_ignored() -> None:
    assert equivalent("urn:example:a123%2Cz456", "URN:EXAMPLE:a123%2cz456") is True


def test_scheme_and_nid_case_is_ignored() -> None:
    assert equivalent("URN:Example:a123", "urn:example:a123") is True


def test_components_are_excluded_from_identity() -> None:
    assert equivalent("urn:example:a123?+res", "urn:example:a123#frag") is True
    assert equivalent("urn:example:a123?=q1", "urn:example:a123?=q2") is True


def test_equivalent_accepts_urn_values() -> None:
    urn = Urn(nid="Example", nss="a123")

    assert equivalent(urn, "urn:example:a123#f") is True
    assert equivalent("urn:example:a123", urn) is True
    assert equivalent(urn, Urn(nid="example", nss="b")) is False


def test_equivalent_propagates_parse_errors() -> None:
    with pytest.raises(MissingSchemePrefixError):
        equivalent("urn:example:a", "example:a")


def test_equivalent_rejects_other_types() -> None:
    with pytest.raises(TypeError, match="expected str or Urn"):
        equivalent(42, "urn:example:a")  # type: ignore[arg-type]


def test_canonicalize_lowercases_scheme_nid_and_hex_only() -> None:
    urn = canonicalize(parse_urn("URN:EXAMPLE:a123%2cz456?+R%2F?=Q%3A#F%C3%A9"))

    assert format_urn(urn) == "urn:example:a123%2cz456?+R%2f?=Q%3a#F%c3%a9"


def test_canonicalize_keeps_which_characters_are_encoded() -> None:
    urn = canonicalize(parse_urn("urn:example:%41"))

    assert urn.nss == "%41"
    assert urn.is_canonical is False


def test_canonicalize_keeps_component_presence() -> None:
    urn = canonicalize(parse_urn("urn:Example:a?=#"))

    assert urn.r_component is None
    assert urn.q_component == ""
    assert urn.f_component == ""


@pytest.mark.parametrize("text", VALID_SAMPLES)
def test_canonicalize_is_idempotent(text: str) -> None:
    once = canonicalize(parse_urn(text))

    assert canonicalize(once) == once


@pytest.mark.parametrize("text", VALID_SAMPLES)
def test_format_then_parse_keeps_identity(text: str) -> None:
    urn = parse_urn(text)
    again = parse_urn(format_urn(urn))

    assert again == urn
    assert equivalent(again, text) is True
    assert equivalent(format_urn(canonicalize(urn)), text) is True


def test_identity_key_deduplicates() -> None:
    keys = {parse_urn(text).identity_key() for text in RFC_EQUIVALENT}

    assert keys == {("urn", "example", "a123,z456")}
