"""URN validation microservice.

A FastAPI service that parses, canonicalizes and compares RFC 8141 URNs.
Resolution of URNs to resources is deliberately not offered.
"""

import logging
from contextlib import asynccontextmanager
from functools import lru_cache

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from . import __version__
from .config import Settings, get_settings
from .errors import UrnParseError
from .urn import Urn, canonicalize, equivalent, format_urn, parse_urn

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@lru_cache
def get_cached_settings() -> Settings:
    """Get cached settings instance."""
    return get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the effective limits on startup."""
    settings = get_cached_settings()
    logger.info(
        "URN service ready (max_input_length=%d, max_batch_size=%d)",
        settings.max_input_length,
        settings.max_batch_size,
    )
    yield
    logger.info("URN service stopped")


app = FastAPI(
    title="URN Validation Service",
    description="Parses, canonicalizes and compares RFC 8141 URNs",
    version=__version__,
    lifespan=lifespan,
)


# Request/Response models


class UrnRequest(BaseModel):
    """A single URN to work on."""

    urn: str


class EquivalenceRequest(BaseModel):
    """Two URNs to compare."""

    a: str
    b: str


class BatchValidateRequest(BaseModel):
    """URNs to validate in one call."""

    urns: list[str]


class UrnResponse(BaseModel):
    """Parsed URN components, as given plus canonical form."""

    urn: Urn  # Serialized exactly as given
    scheme: str
    nid: str
    nss: str
    r_component: str | None = None
    q_component: str | None = None
    f_component: str | None = None
    canonical: str
    is_canonical: bool


class CanonicalResponse(BaseModel):
    """Input URN and its canonical form."""

    input_urn: str
    canonical_urn: str


class EquivalenceResponse(BaseModel):
    """RFC 8141 equivalence of two URNs (r/q/f components ignored)."""

    a: str
    b: str
    equivalent: bool


class ErrorResponse(BaseModel):
    """Error body naming the violated rule.

    Error categories:
    - any ParseErrorKind value (missing_scheme_prefix, invalid_component, ...) (400)
    - input_too_large: URN or batch over the configured limit (413)
    """

    error: str  # Error category
    detail: str  # Human-readable description
    urn: str | None = None  # The URN that caused the error, if applicable
    position: int | None = None  # Offending index into urn
    component: str | None = None  # nss, r, q or f where applicable


class ValidationResult(BaseModel):
    """Outcome for one URN of a batch."""

    urn: str
    valid: bool
    canonical: str | None = None
    error: ErrorResponse | None = None


class BatchValidateResponse(BaseModel):
    """Response from batch validate endpoint."""

    results: list[ValidationResult]
    valid: int
    invalid: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


# Error helpers
def error_response(status_code: int, body: ErrorResponse) -> HTTPException:
    """Create an HTTPException carrying an ErrorResponse body."""
    return HTTPException(status_code=status_code, detail=body.model_dump(exclude_none=True))


def _describe(exc: UrnParseError) -> ErrorResponse:
    component = getattr(exc, "component", None)
    return ErrorResponse(
        error=exc.kind.value,
        detail=exc.reason,
        urn=exc.text,
        position=exc.position,
        component=component.value if component is not None else None,
    )


def _too_large(urn: str, limit: int) -> ErrorResponse:
    return ErrorResponse(
        error="input_too_large",
        detail=f"URN is longer than {limit} characters",
        urn=urn[:64] + "..." if len(urn) > 64 else urn,
    )


def _parse_or_raise(urn: str) -> Urn:
    """Parse a URN for an endpoint. Raises HTTPException on error."""
    settings = get_cached_settings()
    if len(urn) > settings.max_input_length:
        raise error_response(413, _too_large(urn, settings.max_input_length))
    try:
        return parse_urn(urn)
    except UrnParseError as e:
        logger.debug("Rejected URN %r: %s", urn, e)
        raise error_response(400, _describe(e))


# Endpoints


@app.get("/health", response_model=HealthResponse)
@app.get("/healthz", response_model=HealthResponse, include_in_schema=False)
async def health_check() -> HealthResponse:
    """Health check endpoint. The service has no dependencies to probe."""
    return HealthResponse(status="ok", version=__version__)


@app.post("/parse", response_model=UrnResponse)
async def parse_endpoint(request: UrnRequest) -> UrnResponse:
    """Split a URN into its components."""
    urn = _parse_or_raise(request.urn)
    return UrnResponse(
        urn=urn,
        scheme=urn.scheme,
        nid=urn.nid,
        nss=urn.nss,
        r_component=urn.r_component,
        q_component=urn.q_component,
        f_component=urn.f_component,
        canonical=format_urn(canonicalize(urn)),
        is_canonical=urn.is_canonical,
    )


@app.post("/canonical", response_model=CanonicalResponse)
async def canonical_endpoint(request: UrnRequest) -> CanonicalResponse:
    """Normalize a URN to its canonical form.

    Scheme and NID are lowercased, as are the hex digits of percent-encoded
    octets. Useful for deduplication and comparison.
    """
    urn = _parse_or_raise(request.urn)
    return CanonicalResponse(input_urn=request.urn, canonical_urn=format_urn(canonicalize(urn)))


@app.post("/equivalent", response_model=EquivalenceResponse)
async def equivalent_endpoint(request: EquivalenceRequest) -> EquivalenceResponse:
    """Compare two URNs for RFC 8141 equivalence."""
    a = _parse_or_raise(request.a)
    b = _parse_or_raise(request.b)
    return EquivalenceResponse(
        a=request.a,
        b=request.b,
        equivalent=equivalent(a, b),
    )


@app.post("/validate", response_model=BatchValidateResponse)
async def validate_batch(request: BatchValidateRequest) -> BatchValidateResponse:
    """Validate many URNs at once. Invalid entries do not fail the request."""
    settings = get_cached_settings()
    if len(request.urns) > settings.max_batch_size:
        raise error_response(
            413,
            ErrorResponse(
                error="input_too_large",
                detail=f"Batch of {len(request.urns)} URNs exceeds limit of {settings.max_batch_size}",
            ),
        )

    results: list[ValidationResult] = []
    for text in request.urns:
        if len(text) > settings.max_input_length:
            results.append(
                ValidationResult(urn=text, valid=False, error=_too_large(text, settings.max_input_length))
            )
            continue
        try:
            urn = parse_urn(text)
        except UrnParseError as e:
            results.append(ValidationResult(urn=text, valid=False, error=_describe(e)))
            continue
        results.append(ValidationResult(urn=text, valid=True, canonical=format_urn(canonicalize(urn))))

    valid = sum(1 for r in results if r.valid)
    logger.info("Validated batch of %d URNs (%d invalid)", len(results), len(results) - valid)

    return BatchValidateResponse(results=results, valid=valid, invalid=len(results) - valid)


def main():
    """Run the service with uvicorn."""
    import uvicorn

    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    uvicorn.run(
        "urnkit.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
