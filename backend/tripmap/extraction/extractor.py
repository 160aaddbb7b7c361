"""
Place extraction with Claude: free-form trip notes -> destination + ordered places.
Wraps anthropic.Anthropic; SDK failures are classified into ExtractionError kinds
and never retried here (the SDK's own retries are disabled too).
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any

import anthropic

from tripmap.errors import (
    AuthConfigError,
    EmptyInputError,
    ExtractionConnectionError,
    ExtractionServiceError,
    ExtractionTimeoutError,
    MalformedResponseError,
    RateLimitedError,
)
from tripmap.places.models import PLACE_TYPES, UNKNOWN_DESTINATION, ExtractedPlace, ExtractionResult

logger = logging.getLogger(__name__)

MODEL = "claude-sonnet-4-6"
EXTRACTION_MAX_TOKENS = 800  # keeps runaway responses (and costs) bounded
EXTRACTION_TEMPERATURE = 0.2
EXTRACTION_TIMEOUT_SECONDS = 30.0

EXTRACTION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "destination": {"type": "string"},
        "places": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "context": {"type": "string"},
                    "type": {"type": "string"},
                },
                "required": ["name", "context", "type"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["destination", "places"],
    "additionalProperties": False,
}

SYSTEM_PROMPT = (
    "You are a travel planning assistant that extracts location information from trip notes. "
    "Respond ONLY with valid JSON matching this schema: " + json.dumps(EXTRACTION_SCHEMA)
)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def build_prompt(text: str) -> str:
    return (
        "Analyze this travel text and extract location information.\n\n"
        "First, identify the PRIMARY DESTINATION (city, region, or country) the user is traveling to "
        "or writing about.\n"
        "Then, extract ONLY places (landmarks, restaurants, hotels, attractions) that are located IN or "
        "NEAR that primary destination.\n\n"
        "Ignore places in other cities or countries unless they are clearly part of the same trip.\n\n"
        "Return JSON in this exact format:\n"
        '{"destination": "City Name, Country", "places": [{"name": "Place Name", '
        '"context": "brief description from text", "type": "' + "|".join(PLACE_TYPES) + '"}]}\n\n'
        "Choose the most appropriate type for each place.\n\n"
        f"Text:\n{text}"
    )


def _response_text(message: Any) -> str | None:
    """First text block of a Messages API response, if any."""
    for block in getattr(message, "content", None) or []:
        text = getattr(block, "text", None)
        if isinstance(text, str):
            return text
    return None


def _normalize_place(raw: Any) -> ExtractedPlace | None:
    if not isinstance(raw, dict):
        return None
    return ExtractedPlace(
        name=str(raw.get("name") or "").strip(),
        context=str(raw.get("context") or "").strip(),
        type=str(raw.get("type") or "").strip().lower(),
    )


def parse_extraction(content: str) -> ExtractionResult:
    """
    Parse the model's JSON. Accepts a top-level array of places, or an object with
    "places" (preferred) or "locations" (fallback). Raises MalformedResponseError.
    """
    stripped = content.strip()
    fenced = _CODE_FENCE.match(stripped)
    if fenced:
        stripped = fenced.group(1)
    try:
        data = json.loads(stripped)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Extraction response is not JSON: {e}") from e

    if isinstance(data, list):
        destination, raw_places = UNKNOWN_DESTINATION, data
    elif isinstance(data, dict):
        destination = str(data.get("destination") or "").strip() or UNKNOWN_DESTINATION
        # "locations" only when "places" is absent; an empty "places" list is an answer
        raw_places = data.get("places")
        if raw_places is None:
            raw_places = data.get("locations")
        if raw_places is None:
            raw_places = []
    else:
        raise MalformedResponseError("Extraction response is neither an object nor an array.")

    if not isinstance(raw_places, list):
        raise MalformedResponseError("Extraction response places is not an array.")

    places = [p for p in (_normalize_place(r) for r in raw_places) if p is not None]
    return ExtractionResult(destination=destination, places=places)


class PlaceExtractor:
    def __init__(
        self,
        api_key: str = "",
        model: str = MODEL,
        max_tokens: int = EXTRACTION_MAX_TOKENS,
        timeout_seconds: float = EXTRACTION_TIMEOUT_SECONDS,
        client: Any = None,
    ):
        self._model = model
        self._max_tokens = max_tokens
        if client is None:
            client = anthropic.Anthropic(api_key=api_key, timeout=timeout_seconds, max_retries=0)
        self._client = client

    def _ask(self, text: str) -> Any:
        try:
            return self._client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                temperature=EXTRACTION_TEMPERATURE,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": build_prompt(text)}],
            )
        # APITimeoutError subclasses APIConnectionError; keep it first
        except anthropic.APITimeoutError as e:
            logger.error("telemetry extraction_timeout error=%s", str(e))
            raise ExtractionTimeoutError(str(e)) from e
        except anthropic.APIConnectionError as e:
            logger.error("telemetry extraction_connection_failed error=%s", str(e))
            raise ExtractionConnectionError(str(e)) from e
        except anthropic.RateLimitError as e:
            logger.error("telemetry extraction_rate_limited error=%s", str(e))
            raise RateLimitedError(str(e)) from e
        except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as e:
            logger.error("telemetry extraction_auth_error error=%s", str(e))
            raise AuthConfigError(str(e)) from e
        except anthropic.APIError as e:
            logger.error("telemetry extraction_api_error error=%s", str(e))
            raise ExtractionServiceError(str(e)) from e

    def extract(self, text: str) -> ExtractionResult:
        """
        Extract the primary destination and the places mentioned in text.
        Returns: ExtractionResult(destination, places=[ExtractedPlace(name, context, type)])
        """
        if not text or not text.strip():
            raise EmptyInputError()

        logger.info("telemetry extraction_started chars=%s", len(text))
        message = self._ask(text)
        content = _response_text(message)
        if content is None:
            logger.error("telemetry extraction_empty_response")
            raise MalformedResponseError("No text content in extraction response.")

        try:
            result = parse_extraction(content)
        except MalformedResponseError:
            logger.error("telemetry extraction_parse_failed")
            raise
        logger.info(
            "telemetry extraction_finished destination=%s places=%s",
            result.destination,
            len(result.places),
        )
        return result
