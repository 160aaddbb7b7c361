"""
Google Geocoding API client: place name (+ optional destination and bias point) -> coordinates.
Every non-OK status maps to a GeocodeOutcome and is raised as a GeocodeError;
callers decide whether to drop, surface or retry. No caching, no retries.
"""
import logging
from typing import Any

import httpx

from tripmap.data.geo import Coordinates
from tripmap.errors import GeocodeError, GeocodeOutcome, geocode_error_for
from tripmap.places.models import GeocodedLocation

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
GEOCODE_REQUEST_TIMEOUT_SECONDS = 10.0
GEOCODE_BIAS_RADIUS_M = 50_000

# Google status -> outcome; "OK" is handled separately
_STATUS_OUTCOMES: dict[str, GeocodeOutcome] = {
    "ZERO_RESULTS": GeocodeOutcome.NOT_FOUND,
    "OVER_QUERY_LIMIT": GeocodeOutcome.QUOTA_EXCEEDED,
    "REQUEST_DENIED": GeocodeOutcome.AUTH_DENIED,
    "INVALID_REQUEST": GeocodeOutcome.BAD_REQUEST,
    "UNKNOWN_ERROR": GeocodeOutcome.TRANSIENT_SERVER_ERROR,
}


def build_search_query(query: str, destination: str | None = None) -> str:
    """Append the destination as context: "Louvre, Paris, France"."""
    query = query.strip()
    destination = (destination or "").strip()
    return f"{query}, {destination}" if destination else query


def _parse_first_result(query: str, data: dict[str, Any]) -> GeocodedLocation:
    """Turn an OK response into a location (first result wins)."""
    results = data.get("results") or []
    if not isinstance(results, list) or not results:
        logger.warning("telemetry geocode_ok_without_results query=%s", query)
        raise geocode_error_for(GeocodeOutcome.NOT_FOUND, f'No results for "{query[:80]}".')
    first = results[0]
    try:
        location = first["geometry"]["location"]
        return GeocodedLocation(
            latitude=float(location["lat"]),
            longitude=float(location["lng"]),
            address=str(first.get("formatted_address") or ""),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise geocode_error_for(
            GeocodeOutcome.MALFORMED_RESPONSE,
            f"Geocoding result for {query[:80]!r} has no usable location.",
        ) from e


def _log_status(status: str, query: str) -> None:
    if status == "ZERO_RESULTS":
        logger.debug("telemetry geocode_zero_results query=%s", query)
    elif status == "OVER_QUERY_LIMIT":
        logger.error("telemetry geocode_quota_exceeded query=%s", query)
    elif status == "REQUEST_DENIED":
        logger.error("telemetry geocode_request_denied query=%s (check API key)", query)
    elif status == "INVALID_REQUEST":
        logger.error("telemetry geocode_invalid_request query=%s", query)
    elif status == "UNKNOWN_ERROR":
        logger.error("telemetry geocode_server_error query=%s retryable=true", query)
    else:
        logger.warning("telemetry geocode_unexpected_status status=%s query=%s", status, query)


class GeocodingClient:
    """Client for the Google Geocoding API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = GEOCODE_URL,
        timeout_seconds: float = GEOCODE_REQUEST_TIMEOUT_SECONDS,
        bias_radius_m: int = GEOCODE_BIAS_RADIUS_M,
    ):
        self._api_key = api_key
        self._url = base_url
        self._timeout = timeout_seconds
        self._bias_radius_m = bias_radius_m

    def _params(self, search: str, bias: Coordinates | None) -> dict[str, Any]:
        params: dict[str, Any] = {"address": search, "key": self._api_key}
        if bias is not None:
            # Preference only; Google may still return out-of-radius matches
            params["location"] = f"{bias.lat},{bias.lon}"
            params["radius"] = self._bias_radius_m
        return params

    def resolve(
        self,
        query: str,
        destination: str | None = None,
        bias: Coordinates | None = None,
    ) -> GeocodedLocation:
        """
        Geocode query (with destination context and optional bias point).
        Returns the first result's { latitude, longitude, address }; raises GeocodeError otherwise.
        """
        if not query or not query.strip():
            raise geocode_error_for(GeocodeOutcome.BAD_REQUEST, "Empty geocoding query.")
        if not self._api_key:
            logger.error("telemetry geocode_missing_api_key")
            raise geocode_error_for(GeocodeOutcome.AUTH_DENIED, "Google Maps API key is missing.")

        search = build_search_query(query, destination)
        logger.debug("telemetry geocode_request query=%s biased=%s", search, bias is not None)
        try:
            with httpx.Client(timeout=self._timeout) as client:
                resp = client.get(self._url, params=self._params(search, bias))
                resp.raise_for_status()
                data = resp.json()
        except httpx.TimeoutException as e:
            logger.warning("telemetry geocode_timeout query=%s", search)
            raise geocode_error_for(GeocodeOutcome.TRANSPORT_FAILURE, "Geocoding request timed out.") from e
        except httpx.HTTPError as e:
            logger.warning("telemetry geocode_http_error query=%s error=%s", search, str(e))
            raise geocode_error_for(GeocodeOutcome.TRANSPORT_FAILURE, f"Geocoding request failed: {e}") from e
        except ValueError as e:
            raise geocode_error_for(GeocodeOutcome.MALFORMED_RESPONSE, "Geocoding response is not JSON.") from e

        if not isinstance(data, dict):
            raise geocode_error_for(GeocodeOutcome.MALFORMED_RESPONSE, "Geocoding response is not an object.")

        status = str(data.get("status") or "")
        if status == "OK":
            location = _parse_first_result(search, data)
            logger.debug(
                "telemetry geocode_ok query=%s lat=%s lng=%s",
                search,
                location.latitude,
                location.longitude,
            )
            return location

        _log_status(status, search)
        outcome = _STATUS_OUTCOMES.get(status, GeocodeOutcome.UNEXPECTED_STATUS)
        raise geocode_error_for(outcome, f"Geocoding status {status or '<missing>'} for {search[:80]!r}.")

    def resolve_point(self, query: str) -> Coordinates | None:
        """Resolve query to a bias point, or None when it cannot be located."""
        try:
            return self.resolve(query).coordinates
        except GeocodeError as e:
            logger.warning("telemetry geocode_destination_failed query=%s outcome=%s", query, e.outcome.value)
            return None
