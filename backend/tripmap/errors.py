"""
Error taxonomy for extraction and geocoding.

Every error carries a stable `kind` string, a `user_message` safe to show to
end users, the HTTP status the API layer answers with, and whether a caller
may reasonably retry. Nothing inside tripmap retries on its own.
"""
from __future__ import annotations

from enum import Enum


class TripMapError(Exception):
    kind = "error"
    status_code = 500
    retryable = False
    default_message = "An unexpected error occurred. Please try again."

    def __init__(self, message: str | None = None, *, user_message: str | None = None):
        super().__init__(message or self.default_message)
        self.user_message = user_message or self.default_message


class InputError(TripMapError):
    kind = "input"
    status_code = 400
    default_message = "Invalid input."


class UpstreamTransportError(TripMapError):
    kind = "upstream_transport"
    status_code = 504
    retryable = True
    default_message = "An upstream service could not be reached. Please try again."


class UpstreamResponseError(TripMapError):
    kind = "upstream_response"
    status_code = 502
    default_message = "An upstream service returned an unexpected response."


class UpstreamQuotaOrAuthError(TripMapError):
    kind = "upstream_quota_or_auth"
    status_code = 503
    default_message = "An upstream service refused the request."


class NotFoundError(TripMapError):
    kind = "not_found"
    status_code = 404
    default_message = "Nothing matched the request."


# --- Extraction ---


class ExtractionError(TripMapError):
    """Base for failures of the place extraction call."""


class EmptyInputError(ExtractionError, InputError):
    kind = "empty_input"
    default_message = "No text provided"


class MalformedResponseError(ExtractionError, UpstreamResponseError):
    kind = "malformed_response"
    default_message = "Failed to parse extracted places. Please try again."


class ExtractionTimeoutError(ExtractionError, UpstreamTransportError):
    kind = "timeout"
    default_message = "Request timed out. Please try again."


class ExtractionConnectionError(ExtractionError, UpstreamTransportError):
    kind = "connection_failure"
    status_code = 502
    default_message = "Could not connect to the AI service. Please check your internet connection."


class RateLimitedError(ExtractionError, UpstreamQuotaOrAuthError):
    kind = "rate_limited"
    status_code = 429
    retryable = True
    default_message = "AI service is busy. Please try again in a moment."


class AuthConfigError(ExtractionError, UpstreamQuotaOrAuthError):
    kind = "auth_config"
    default_message = "AI service configuration error. Please contact support."


class ExtractionServiceError(ExtractionError, UpstreamResponseError):
    kind = "service_error"
    default_message = "AI service error. Please try again."


# --- Geocoding ---


class GeocodeOutcome(str, Enum):
    """Non-success outcomes of a single geocoding lookup."""

    NOT_FOUND = "not_found"
    QUOTA_EXCEEDED = "quota_exceeded"
    AUTH_DENIED = "auth_denied"
    BAD_REQUEST = "bad_request"
    TRANSIENT_SERVER_ERROR = "transient_server_error"
    UNEXPECTED_STATUS = "unexpected_status"
    TRANSPORT_FAILURE = "transport_failure"
    MALFORMED_RESPONSE = "malformed_response"


class GeocodeError(TripMapError):
    """Base for failed lookups; `outcome` says which."""

    outcome = GeocodeOutcome.UNEXPECTED_STATUS

    def __init__(self, message: str | None = None, *, outcome: GeocodeOutcome | None = None, user_message: str | None = None):
        super().__init__(message, user_message=user_message)
        if outcome is not None:
            self.outcome = outcome
        self.kind = self.outcome.value


class GeocodeNotFoundError(GeocodeError, NotFoundError):
    outcome = GeocodeOutcome.NOT_FOUND
    default_message = "No location found."


class GeocodeQuotaOrAuthError(GeocodeError, UpstreamQuotaOrAuthError):
    default_message = "Geocoding service refused the request."


class GeocodeTransientError(GeocodeError, UpstreamResponseError):
    outcome = GeocodeOutcome.TRANSIENT_SERVER_ERROR
    retryable = True
    default_message = "Geocoding service error. Retrying may succeed."


class GeocodeResponseError(GeocodeError, UpstreamResponseError):
    default_message = "Geocoding service returned an unexpected response."


class GeocodeTransportError(GeocodeError, UpstreamTransportError):
    outcome = GeocodeOutcome.TRANSPORT_FAILURE
    default_message = "Geocoding service unavailable. Try again."


def geocode_error_for(outcome: GeocodeOutcome, message: str) -> GeocodeError:
    """Build the error class matching a lookup outcome."""
    if outcome is GeocodeOutcome.NOT_FOUND:
        return GeocodeNotFoundError(message)
    if outcome in (GeocodeOutcome.QUOTA_EXCEEDED, GeocodeOutcome.AUTH_DENIED):
        return GeocodeQuotaOrAuthError(message, outcome=outcome)
    if outcome is GeocodeOutcome.TRANSIENT_SERVER_ERROR:
        return GeocodeTransientError(message)
    if outcome is GeocodeOutcome.TRANSPORT_FAILURE:
        return GeocodeTransportError(message)
    return GeocodeResponseError(message, outcome=outcome)
