"""URN parse errors.

Every failure carries the text being validated, the offending position and a
``kind`` naming the RFC 8141 rule that was violated.
"""

from enum import Enum


class ParseErrorKind(str, Enum):
    """Why a URN was rejected."""

    MISSING_SCHEME_PREFIX = "missing_scheme_prefix"
    MISSING_NAMESPACE_IDENTIFIER = "missing_namespace_identifier"
    INVALID_NAMESPACE_IDENTIFIER = "invalid_namespace_identifier"
    EMPTY_NAMESPACE_SPECIFIC_STRING = "empty_namespace_specific_string"
    INVALID_NAMESPACE_SPECIFIC_STRING = "invalid_namespace_specific_string"
    INVALID_COMPONENT = "invalid_component"
    MALFORMED_PERCENT_ENCODING = "malformed_percent_encoding"
    TRAILING_INPUT = "trailing_input"


class ComponentKind(str, Enum):
    """The part of a URN a character belongs to."""

    NSS = "nss"
    R = "r"
    Q = "q"
    F = "f"


class UrnParseError(ValueError):
    """Base class for all URN validation failures."""

    kind: ParseErrorKind

    def __init__(self, text: str, position: int, reason: str):
        self.text = text
        self.position = position
        self.reason = reason
        super().__init__(f"Invalid URN: {reason} (at position {position})")

    @property
    def fragment(self) -> str:
        """The input from the failing position onwards."""
        return self.text[self.position:]


class MissingSchemePrefixError(UrnParseError):
    kind = ParseErrorKind.MISSING_SCHEME_PREFIX

    def __init__(self, text: str):
        super().__init__(text, 0, "expected 'urn:' prefix")


class MissingNamespaceIdentifierError(UrnParseError):
    kind = ParseErrorKind.MISSING_NAMESPACE_IDENTIFIER

    def __init__(self, text: str, position: int):
        super().__init__(text, position, "no ':' after namespace identifier")


class InvalidNamespaceIdentifierError(UrnParseError):
    """NID breaks the length, character or hyphen rule, or is reserved."""

    kind = ParseErrorKind.INVALID_NAMESPACE_IDENTIFIER

    def __init__(self, text: str, position: int, nid: str, reason: str | None = None):
        self.nid = nid
        super().__init__(
            text,
            position,
            reason or f"namespace identifier {nid!r} must be 1-31 letters, digits or inner hyphens",
        )


class EmptyNamespaceSpecificStringError(UrnParseError):
    kind = ParseErrorKind.EMPTY_NAMESPACE_SPECIFIC_STRING

    def __init__(self, text: str, position: int):
        super().__init__(text, position, "namespace-specific string is empty")


class InvalidNamespaceSpecificStringError(UrnParseError):
    kind = ParseErrorKind.INVALID_NAMESPACE_SPECIFIC_STRING

    def __init__(self, text: str, position: int, reason: str | None = None):
        char = text[position] if position < len(text) else ""
        super().__init__(
            text,
            position,
            reason or f"character {char!r} not allowed in namespace-specific string",
        )


class InvalidComponentError(UrnParseError):
    """r-, q- or f-component contains a character outside its class."""

    kind = ParseErrorKind.INVALID_COMPONENT

    def __init__(self, text: str, position: int, component: ComponentKind, reason: str | None = None):
        self.component = component
        char = text[position] if position < len(text) else ""
        super().__init__(
            text,
            position,
            reason or f"character {char!r} not allowed in {component.value}-component",
        )


class MalformedPercentEncodingError(UrnParseError):
    """A '%' is not followed by exactly two hexadecimal digits."""

    kind = ParseErrorKind.MALFORMED_PERCENT_ENCODING

    def __init__(self, text: str, position: int, component: ComponentKind | None = None):
        self.component = component
        where = f" in {component.value}" if component is not None else ""
        triplet = text[position:position + 3]
        super().__init__(text, position, f"malformed percent-encoding {triplet!r}{where}")


class TrailingInputError(UrnParseError):
    kind = ParseErrorKind.TRAILING_INPUT

    def __init__(self, text: str, position: int):
        super().__init__(text, position, f"unexpected trailing input {text[position:]!r}")
