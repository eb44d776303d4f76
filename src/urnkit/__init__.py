"""RFC 8141 URN parsing, validation, canonicalization and comparison."""

from .errors import (
    ComponentKind,
    EmptyNamespaceSpecificStringError,
    InvalidComponentError,
    InvalidNamespaceIdentifierError,
    InvalidNamespaceSpecificStringError,
    MalformedPercentEncodingError,
    MissingNamespaceIdentifierError,
    MissingSchemePrefixError,
    ParseErrorKind,
    TrailingInputError,
    UrnParseError,
)
from .urn import Urn, canonicalize, equivalent, format_urn, parse_urn, quote_nss, to_urn

__version__ = "0.1.0"

__all__ = [
    "ComponentKind",
    "EmptyNamespaceSpecificStringError",
    "InvalidComponentError",
    "InvalidNamespaceIdentifierError",
    "InvalidNamespaceSpecificStringError",
    "MalformedPercentEncodingError",
    "MissingNamespaceIdentifierError",
    "MissingSchemePrefixError",
    "ParseErrorKind",
    "TrailingInputError",
    "Urn",
    "UrnParseError",
    "canonicalize",
    "equivalent",
    "format_urn",
    "parse_urn",
    "quote_nss",
    "to_urn",
]
