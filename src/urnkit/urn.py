"""RFC 8141 URN parsing, formatting and equivalence."""

from dataclasses import dataclass, replace
from typing import Any, Self
from urllib.parse import quote, unquote

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from .errors import (
    ComponentKind,
    EmptyNamespaceSpecificStringError,
    InvalidComponentError,
    InvalidNamespaceIdentifierError,
    InvalidNamespaceSpecificStringError,
    MissingNamespaceIdentifierError,
    MissingSchemePrefixError,
    TrailingInputError,
)
from .grammar import (
    ascii_lower,
    find_invalid_char,
    is_reserved_nid,
    is_valid_nid,
    is_valid_nss_char,
    is_valid_trans_char,
    normalize_percent_encoding,
    overencoded_octets,
    validate_percent_encoding,
)

SCHEME = "urn"
PREFIX = "urn:"
R_DELIMITER = "?+"
Q_DELIMITER = "?="
F_DELIMITER = "#"

# Characters quote_nss leaves alone besides alphanumerics and "_.-~"
_NSS_SAFE = "!$&'()*+,;=:@/"


@dataclass(frozen=True, slots=True)
class Urn:
    """A validated URN.

    Fields hold the text exactly as given (original case, percent-encoding
    untouched). ``None`` means the component delimiter was absent; an empty
    string means it was present with nothing after it.

    Construction re-runs the parser's validation, so every instance is one
    ``parse_urn`` could have produced.
    """

    nid: str
    nss: str
    r_component: str | None = None
    q_component: str | None = None
    f_component: str | None = None
    scheme: str = SCHEME

    def __post_init__(self) -> None:
        if ascii_lower(self.scheme) != SCHEME:
            raise MissingSchemePrefixError(self.scheme)
        _check_nid(self.nid, 0, len(self.nid))
        _check_nss(self.nss, 0, len(self.nss))
        if self.r_component is not None:
            _check_component(self.r_component, 0, len(self.r_component), ComponentKind.R)
        if self.q_component is not None:
            _check_component(self.q_component, 0, len(self.q_component), ComponentKind.Q)
        if self.f_component is not None:
            _check_component(self.f_component, 0, len(self.f_component), ComponentKind.F)

    @classmethod
    def parse(cls, text: str) -> Self:
        return cls(**_scan(text))

    def __str__(self) -> str:
        return format_urn(self)

    @property
    def namespace_id(self) -> str:
        return self.nid

    @property
    def namespace_specific_string(self) -> str:
        return self.nss

    @property
    def assigned_name(self) -> str:
        """The ``urn:<NID>:<NSS>`` part, without r/q/f components."""
        return f"{self.scheme}:{self.nid}:{self.nss}"

    @property
    def decoded_nss(self) -> str:
        """NSS with percent-encoding decoded as UTF-8. For display only."""
        return unquote(self.nss)

    @property
    def is_canonical(self) -> bool:
        """True if canonicalize() is a no-op and nothing is over-encoded."""
        if canonicalize(self) != self:
            return False
        parts = (self.nss, self.r_component, self.q_component, self.f_component)
        return not any(overencoded_octets(part) for part in parts if part)

    def identity_key(self) -> tuple[str, str, str]:
        """Canonical (scheme, nid, nss): equal keys mean equivalent URNs."""
        canonical = canonicalize(self)
        return canonical.scheme, canonical.nid, canonical.nss

    def without_fragment(self) -> "Urn":
        return replace(self, f_component=None)

    def without_components(self) -> "Urn":
        """Drop the r-, q- and f-components, keeping the assigned name."""
        return replace(self, r_component=None, q_component=None, f_component=None)

    def with_components(
        self,
        r_component: str | None = None,
        q_component: str | None = None,
        f_component: str | None = None,
    ) -> "Urn":
        """Return a copy with all three components replaced (None removes one)."""
        return replace(
            self,
            r_component=r_component,
            q_component=q_component,
            f_component=f_component,
        )

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        # Accept text or an existing Urn; always serialize through format_urn
        from_text = core_schema.no_info_after_validator_function(
            parse_urn, core_schema.str_schema()
        )
        return core_schema.json_or_python_schema(
            json_schema=from_text,
            python_schema=core_schema.union_schema(
                [core_schema.is_instance_schema(cls), from_text]
            ),
            serialization=core_schema.plain_serializer_function_ser_schema(format_urn),
        )


def _find_first(text: str, start: int, delimiters: tuple[str, ...]) -> int:
    """Index of the earliest delimiter at or after start, or len(text)."""
    hits = [pos for d in delimiters if (pos := text.find(d, start)) != -1]
    return min(hits, default=len(text))


def _find_nid_end(text: str, start: int) -> int | None:
    for i in range(start, len(text)):
        if text[i] == ":":
            return i
        if text[i] == F_DELIMITER or text.startswith((R_DELIMITER, Q_DELIMITER), i):
            return None
    return None


def _check_nid(text: str, start: int, end: int) -> None:
    nid = text[start:end]
    if not is_valid_nid(nid):
        raise InvalidNamespaceIdentifierError(text, start, nid)
    if is_reserved_nid(nid):
        raise InvalidNamespaceIdentifierError(
            text, start, nid, f"namespace identifier {nid!r} collides with the URN scheme"
        )


def _check_nss(text: str, start: int, end: int) -> None:
    if start == end:
        raise EmptyNamespaceSpecificStringError(text, start)
    if text[start] == "/":
        raise InvalidNamespaceSpecificStringError(
            text, start, "namespace-specific string must not start with '/'"
        )
    bad = find_invalid_char(text, is_valid_nss_char, start, end)
    if bad is None:
        return
    if text[bad] == "%":
        validate_percent_encoding(text, ComponentKind.NSS, start, end)
    raise InvalidNamespaceSpecificStringError(text, bad)


# Delimiter that may not appear inside each component: it would either end
# the component early or put the components out of order.
_OUT_OF_ORDER = {
    ComponentKind.R: Q_DELIMITER,
    ComponentKind.Q: R_DELIMITER,
}


def _check_component(text: str, start: int, end: int, component: ComponentKind) -> None:
    bad = find_invalid_char(text, is_valid_trans_char, start, end)
    forbidden = _OUT_OF_ORDER.get(component)
    if forbidden is not None:
        misplaced = text.find(forbidden, start, end)
        if misplaced != -1 and (bad is None or misplaced < bad):
            raise InvalidComponentError(
                text,
                misplaced,
                component,
                f"delimiter {forbidden!r} out of order inside {component.value}-component",
            )
    if bad is None:
        return
    if text[bad] == "%":
        validate_percent_encoding(text, component, start, end)
    raise InvalidComponentError(text, bad, component)


def parse_urn(text: str) -> Urn:
    """Parse RFC 8141 URN text.

    Scans scheme, NID, NSS and then the optional r-, q- and f-components in
    that order, stopping at the first violation.

    Raises:
        MissingSchemePrefixError: Text does not start with 'urn:' (any case)
        MissingNamespaceIdentifierError: No ':' terminates the NID
        InvalidNamespaceIdentifierError: NID is malformed or is 'urn'
        EmptyNamespaceSpecificStringError: Nothing between the NID and a delimiter
        InvalidNamespaceSpecificStringError: NSS holds a disallowed character
        InvalidComponentError: r-, q- or f-component holds a disallowed character
        MalformedPercentEncodingError: A '%' is not followed by two hex digits
    """
    return Urn(**_scan(text))


def _scan(text: str) -> dict[str, str | None]:
    """Split and validate URN text into Urn constructor arguments."""
    if ascii_lower(text[:len(PREFIX)]) != PREFIX:
        raise MissingSchemePrefixError(text)

    nid_start = len(PREFIX)
    nid_end = _find_nid_end(text, nid_start)
    if nid_end is None:
        raise MissingNamespaceIdentifierError(text, nid_start)
    _check_nid(text, nid_start, nid_end)

    nss_start = nid_end + 1
    nss_end = _find_first(text, nss_start, (R_DELIMITER, Q_DELIMITER, F_DELIMITER))
    _check_nss(text, nss_start, nss_end)

    cursor = nss_end
    r_component = q_component = f_component = None

    if text.startswith(R_DELIMITER, cursor):
        start = cursor + len(R_DELIMITER)
        cursor = _find_first(text, start, (Q_DELIMITER, F_DELIMITER))
        _check_component(text, start, cursor, ComponentKind.R)
        r_component = text[start:cursor]

    if text.startswith(Q_DELIMITER, cursor):
        start = cursor + len(Q_DELIMITER)
        cursor = _find_first(text, start, (F_DELIMITER,))
        _check_component(text, start, cursor, ComponentKind.Q)
        q_component = text[start:cursor]

    if text.startswith(F_DELIMITER, cursor):
        start = cursor + len(F_DELIMITER)
        cursor = len(text)
        _check_component(text, start, cursor, ComponentKind.F)
        f_component = text[start:cursor]

    if cursor != len(text):
        raise TrailingInputError(text, cursor)

    return {
        "scheme": text[:len(SCHEME)],
        "nid": text[nid_start:nid_end],
        "nss": text[nss_start:nss_end],
        "r_component": r_component,
        "q_component": q_component,
        "f_component": f_component,
    }


def format_urn(urn: Urn) -> str:
    """Serialize a Urn exactly as stored. This is not canonicalization."""
    parts = [urn.assigned_name]
    if urn.r_component is not None:
        parts.append(R_DELIMITER + urn.r_component)
    if urn.q_component is not None:
        parts.append(Q_DELIMITER + urn.q_component)
    if urn.f_component is not None:
        parts.append(F_DELIMITER + urn.f_component)
    return "".join(parts)


def _normalize_optional(value: str | None) -> str | None:
    return None if value is None else normalize_percent_encoding(value)


def canonicalize(urn: Urn) -> Urn:
    """Lowercase scheme, NID and percent-encoding hex digits.

    Which characters are percent-encoded is left as is, as are the presence
    and content of the r-, q- and f-components otherwise.
    """
    return Urn(
        scheme=SCHEME,
        nid=ascii_lower(urn.nid),
        nss=normalize_percent_encoding(urn.nss),
        r_component=_normalize_optional(urn.r_component),
        q_component=_normalize_optional(urn.q_component),
        f_component=_normalize_optional(urn.f_component),
    )


def _coerce(value: str | Urn) -> Urn:
    if isinstance(value, Urn):
        return value
    if isinstance(value, str):
        return parse_urn(value)
    raise TypeError(f"expected str or Urn, got {type(value).__name__}")


def equivalent(a: str | Urn, b: str | Urn) -> bool:
    """RFC 8141 section 3 equivalence.

    Strings are parsed first and parse errors propagate. Only the scheme,
    NID and NSS take part; r-, q- and f-components are ignored.
    """
    return _coerce(a).identity_key() == _coerce(b).identity_key()


def to_urn(
    nid: str,
    nss: str,
    *,
    r_component: str | None = None,
    q_component: str | None = None,
    f_component: str | None = None,
) -> str:
    """Build URN text from its parts, validating them on the way."""
    return format_urn(
        Urn(
            nid=nid,
            nss=nss,
            r_component=r_component,
            q_component=q_component,
            f_component=f_component,
        )
    )


def quote_nss(value: str) -> str:
    """Percent-encode arbitrary text (as UTF-8) into a valid NSS body."""
    encoded = quote(value, safe=_NSS_SAFE)
    if encoded.startswith("/"):
        encoded = "%2F" + encoded[1:]
    return encoded
