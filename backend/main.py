import html
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from settings import get_settings
from tripmap.errors import TripMapError
from tripmap.extraction.extractor import PlaceExtractor
from tripmap.geocoding.client import GeocodingClient
from tripmap.highlight.matcher import HighlightTarget, highlight
from tripmap.middleware import OptionalAPIKeyMiddleware, RequestLoggingMiddleware, get_valid_api_keys
from tripmap.monitoring.metrics import get_metrics
from tripmap.places.models import GeocodedLocation, TripMap
from tripmap.trips.maps_url import directions_url, search_url
from tripmap.trips.models import (
    ExtractTripRequest,
    HighlightRequest,
    HighlightResponse,
    MapsUrlRequest,
    MapsUrlResponse,
)
from tripmap.trips.service import build_trip_map

settings = get_settings()

# Structured logging: include module and level; handlers can add JSON later
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=["100/minute"])

QUERY_MIN_LEN, QUERY_MAX_LEN = 2, 200
EXTRACT_RATE_LIMIT = "30/minute"  # each call costs one LLM request + N geocodes


def _check_text(text: str) -> str:
    if not text or not text.strip():
        raise HTTPException(status_code=400, detail="Provide trip notes in text.")
    if len(text) > settings.max_text_chars:
        raise HTTPException(
            status_code=400,
            detail=f"text must be at most {settings.max_text_chars} characters",
        )
    return text


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.extractor = (
        PlaceExtractor(
            api_key=settings.anthropic_api_key,
            model=settings.extraction_model,
            max_tokens=settings.extraction_max_tokens,
            timeout_seconds=settings.extraction_timeout_seconds,
        )
        if settings.anthropic_api_key
        else None
    )
    app.state.geocoder = (
        GeocodingClient(
            api_key=settings.google_maps_api_key,
            timeout_seconds=settings.geocode_timeout_seconds,
            bias_radius_m=settings.geocode_bias_radius_m,
        )
        if settings.google_maps_api_key
        else None
    )
    yield
    app.state.extractor = None
    app.state.geocoder = None


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(TripMapError)
def trip_map_error_handler(request: Request, exc: TripMapError):
    """Upstream and input failures: user-facing message plus a stable kind for clients."""
    logger.warning(
        "telemetry trip_map_error path=%s kind=%s error=%s",
        request.url.path,
        exc.kind,
        str(exc),
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.user_message, "kind": exc.kind, "retryable": exc.retryable},
    )


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception):
    """Return consistent JSON error for unhandled exceptions (500). Skip validation/HTTP errors."""
    from fastapi.exceptions import RequestValidationError
    if isinstance(exc, (HTTPException, RequestValidationError)):
        raise exc
    logger.exception("telemetry unhandled_exception path=%s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred. Please try again later."},
    )


# Order: last added = innermost. So RequestLogging runs first (outermost), then Auth, then CORS.
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    OptionalAPIKeyMiddleware,
    api_key_required=settings.api_key_required,
    api_keys=get_valid_api_keys(settings.api_keys),
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _require_extractor() -> PlaceExtractor:
    extractor = getattr(app.state, "extractor", None)
    if not extractor:
        raise HTTPException(
            status_code=503,
            detail="Place extraction not configured. Set ANTHROPIC_API_KEY in the environment.",
        )
    return extractor


def _require_geocoder() -> GeocodingClient:
    geocoder = getattr(app.state, "geocoder", None)
    if not geocoder:
        raise HTTPException(
            status_code=503,
            detail="Geocoding not configured. Set GOOGLE_MAPS_API_KEY in the environment.",
        )
    return geocoder


@app.get("/favicon.ico", include_in_schema=False)
@limiter.exempt
def favicon(request: Request):
    """Return 204 so browser favicon requests don't log 404."""
    return Response(status_code=204)


@app.get("/health")
@limiter.exempt
def health(request: Request):
    logger.info("telemetry route=health")
    return {"status": "ok"}


@app.get("/metrics")
@limiter.exempt
def metrics(request: Request):
    """Request counts, pipeline counters and uptime."""
    return get_metrics()


# --- Trip notes -> places ---


@app.post("/trips/extract", response_model=TripMap)
@limiter.limit(EXTRACT_RATE_LIMIT)
def extract_trip(request: Request, body: ExtractTripRequest):
    """
    Extract destination + places from trip notes, geocode them, and return
    { destination, places, unresolved_count, highlighted_html, google_maps_url }.
    Places that cannot be located are left out and counted in unresolved_count.
    """
    text = _check_text(body.text)
    extractor = _require_extractor()
    geocoder = _require_geocoder()
    logger.info("telemetry route=trips_extract chars=%s", len(text))
    return build_trip_map(
        text,
        extractor,
        geocoder,
        max_distance_km=settings.max_distance_km,
        max_workers=settings.geocode_max_workers,
    )


@app.post("/trips/highlight", response_model=HighlightResponse)
def highlight_trip(request: Request, body: HighlightRequest):
    """Wrap place names in the notes with place-link anchors; data-place-index is the position in places."""
    text = _check_text(body.text)
    targets = [HighlightTarget(p.name, i) for i, p in enumerate(body.places)]
    if not targets:
        return HighlightResponse(html=html.escape(text, quote=False))
    return HighlightResponse(html=highlight(text, targets))


@app.post("/trips/maps-url", response_model=MapsUrlResponse)
def trip_maps_url(request: Request, body: MapsUrlRequest):
    """Shareable Google Maps search and directions URLs for places, in order."""
    return MapsUrlResponse(
        search_url=search_url(body.places),
        directions_url=directions_url(body.places),
    )


@app.get("/geocode", response_model=GeocodedLocation)
def geocode(request: Request, q: str = "", destination: str = ""):
    """
    Resolve a place name (optionally within a destination, e.g. q=Louvre&destination=Paris) to coordinates.
    Returns first result as { latitude, longitude, address }; 404 if none.
    """
    query = (q or "").strip()
    if not (QUERY_MIN_LEN <= len(query) <= QUERY_MAX_LEN):
        raise HTTPException(
            status_code=400,
            detail=f"Provide a search query of {QUERY_MIN_LEN}-{QUERY_MAX_LEN} characters.",
        )
    geocoder = _require_geocoder()
    logger.info("telemetry route=geocode")
    return geocoder.resolve(query, destination=destination.strip() or None)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=settings.debug)
