"""RFC 8141 character classes and grammar predicates.

    NID           = alphanum *ldh alphanum        ; 1-31 chars here
    NSS           = pchar *(pchar / "/")
    r-component   = *(pchar / "/" / "?")
    q-component   = *(pchar / "/" / "?")
    f-component   = *(pchar / "/" / "?")
    pchar         = unreserved / pct-encoded / sub-delims / ":" / "@"

Percent-encoded triplets are not part of the single-character classes below;
scanners check them with ``is_percent_triplet``.
"""

import re
import string
from collections.abc import Callable

from .errors import ComponentKind, MalformedPercentEncodingError

ALPHA = frozenset(string.ascii_letters)
DIGIT = frozenset(string.digits)
HEXDIG = frozenset(string.hexdigits)
UNRESERVED = ALPHA | DIGIT | frozenset("-._~")
SUB_DELIMS = frozenset("!$&'()*+,;=")
PCHAR = UNRESERVED | SUB_DELIMS | frozenset(":@")
NSS_CHARS = PCHAR | frozenset("/")
COMPONENT_CHARS = NSS_CHARS | frozenset("?")

NID_MAX_LENGTH = 31
RESERVED_NID = "urn"

NID_PATTERN = re.compile(r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,29}[A-Za-z0-9])?")
PCT_ENCODED_PATTERN = re.compile(r"%([0-9A-Fa-f]{2})")

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def ascii_lower(value: str) -> str:
    """Lowercase A-Z only, independent of locale and Unicode case rules."""
    return value.translate(_ASCII_LOWER)


def is_valid_nid(value: str) -> bool:
    """Check the namespace identifier length, character and hyphen rules."""
    return NID_PATTERN.fullmatch(value) is not None


def is_reserved_nid(value: str) -> bool:
    """A NID may not collide with the scheme token itself."""
    return ascii_lower(value) == RESERVED_NID


def is_valid_nss_char(char: str) -> bool:
    return char in NSS_CHARS


def is_valid_trans_char(char: str) -> bool:
    """Character class shared by the r-, q- and f-components."""
    return char in COMPONENT_CHARS


def is_percent_triplet(value: str, index: int) -> bool:
    """True if ``value[index:index + 3]`` is '%' followed by two hex digits."""
    return (
        index + 2 < len(value)
        and value[index] == "%"
        and value[index + 1] in HEXDIG
        and value[index + 2] in HEXDIG
    )


def find_invalid_char(
    value: str,
    predicate: Callable[[str], bool],
    start: int = 0,
    end: int | None = None,
) -> int | None:
    """Return the index of the first character the grammar rejects.

    Valid percent triplets are skipped as a unit. A '%' that does not start a
    valid triplet is reported at its own index, so callers can tell malformed
    percent-encoding apart from a disallowed character by looking at
    ``value[index]``.
    """
    if end is None:
        end = len(value)
    i = start
    while i < end:
        char = value[i]
        if char == "%":
            if i + 2 < end and is_percent_triplet(value, i):
                i += 3
                continue
            return i
        if not predicate(char):
            return i
        i += 1
    return None


def validate_percent_encoding(
    value: str,
    component: ComponentKind | None = None,
    start: int = 0,
    end: int | None = None,
) -> None:
    """Raise MalformedPercentEncodingError unless every '%' starts a hex triplet.

    Only ``value[start:end]`` is checked; a triplet must fit inside it. The
    reported position is an index into ``value``.
    """
    if end is None:
        end = len(value)
    i = value.find("%", start, end)
    while i != -1:
        if i + 2 >= end or not is_percent_triplet(value, i):
            raise MalformedPercentEncodingError(value, i, component)
        i = value.find("%", i + 3, end)


def normalize_percent_encoding(value: str) -> str:
    """Lowercase the hex digits of every percent triplet, nothing else."""
    return PCT_ENCODED_PATTERN.sub(lambda m: "%" + m.group(1).lower(), value)


def overencoded_octets(value: str) -> list[str]:
    """Triplets that encode an unreserved character, e.g. '%41' for 'A'.

    These are legal but not canonical: RFC 3986 says unreserved characters
    should appear unencoded.
    """
    return [
        m.group(0)
        for m in PCT_ENCODED_PATTERN.finditer(value)
        if chr(int(m.group(1), 16)) in UNRESERVED
    ]
