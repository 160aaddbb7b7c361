"""Tests for place extraction: request shape, response parsing, error classification."""
import anthropic
import httpx
import pytest

from tripmap.errors import (
    AuthConfigError,
    EmptyInputError,
    ExtractionConnectionError,
    ExtractionServiceError,
    ExtractionTimeoutError,
    InputError,
    MalformedResponseError,
    RateLimitedError,
    UpstreamQuotaOrAuthError,
    UpstreamResponseError,
    UpstreamTransportError,
)
from tripmap.extraction.extractor import EXTRACTION_MAX_TOKENS, PlaceExtractor, build_prompt, parse_extraction

from tests.fakes import FakeAnthropic, json_message, text_message

NOTES = "Visit Tokyo Tower and eat at Sukiyabashi Jiro"
TOKYO_PAYLOAD = {
    "destination": "Tokyo, Japan",
    "places": [
        {"name": "Tokyo Tower", "context": "iconic landmark", "type": "landmark"},
        {"name": "Sukiyabashi Jiro", "context": "famous sushi", "type": "restaurant"},
    ],
}
REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _extractor(response=None, error=None) -> PlaceExtractor:
    return PlaceExtractor(client=FakeAnthropic(response=response, error=error))


# --- Success ---


def test_extract_destination_and_places_in_order():
    result = _extractor(json_message(TOKYO_PAYLOAD)).extract(NOTES)
    assert result.destination == "Tokyo, Japan"
    assert [p.name for p in result.places] == ["Tokyo Tower", "Sukiyabashi Jiro"]
    assert result.places[1].context == "famous sushi"
    assert result.places[1].type == "restaurant"


def test_extract_sends_one_request_with_notes_and_schema():
    fake = FakeAnthropic(response=json_message(TOKYO_PAYLOAD))
    PlaceExtractor(client=fake, model="test-model").extract(NOTES)
    assert len(fake.messages.calls) == 1
    call = fake.messages.calls[0]
    assert call["model"] == "test-model"
    assert call["max_tokens"] == EXTRACTION_MAX_TOKENS
    assert "JSON" in call["system"]
    assert '"places"' in call["system"]
    assert NOTES in call["messages"][0]["content"]


def test_build_prompt_lists_place_types():
    prompt = build_prompt("notes")
    assert "restaurant|bar|cafe|hotel|landmark|museum|park|shopping|nightlife|attraction" in prompt
    assert prompt.endswith("Text:\nnotes")


# --- Response shapes ---


def test_parse_top_level_array():
    result = parse_extraction('[{"name": "Louvre", "context": "art", "type": "museum"}]')
    assert result.destination == "Unknown"
    assert [p.name for p in result.places] == ["Louvre"]


def test_parse_locations_fallback():
    result = parse_extraction('{"destination": "Paris, France", "locations": [{"name": "Louvre"}]}')
    assert result.destination == "Paris, France"
    assert result.places[0].name == "Louvre"
    assert result.places[0].context == ""
    assert result.places[0].type == ""


def test_parse_places_preferred_over_locations():
    result = parse_extraction('{"destination": "Paris", "places": [{"name": "A"}], "locations": [{"name": "B"}]}')
    assert [p.name for p in result.places] == ["A"]


def test_parse_empty_places_does_not_fall_back_to_locations():
    result = parse_extraction('{"destination": "Paris", "places": [], "locations": [{"name": "Louvre"}]}')
    assert result.places == []


def test_parse_null_places_falls_back_to_locations():
    result = parse_extraction('{"destination": "Paris", "places": null, "locations": [{"name": "Louvre"}]}')
    assert [p.name for p in result.places] == ["Louvre"]


def test_parse_missing_destination_and_places():
    result = parse_extraction("{}")
    assert result.destination == "Unknown"
    assert result.places == []


def test_parse_skips_non_object_entries_and_normalizes_type():
    result = parse_extraction('{"destination": "Rome", "places": ["Colosseum", {"name": "Pantheon", "type": "Landmark"}]}')
    assert [p.name for p in result.places] == ["Pantheon"]
    assert result.places[0].type == "landmark"


def test_parse_tolerates_code_fence():
    result = parse_extraction('```json\n{"destination": "Rome", "places": []}\n```')
    assert result.destination == "Rome"


# --- Failures ---


def test_blank_text_makes_no_request():
    fake = FakeAnthropic(response=json_message(TOKYO_PAYLOAD))
    with pytest.raises(EmptyInputError) as exc_info:
        PlaceExtractor(client=fake).extract("   \n")
    assert fake.messages.calls == []
    assert isinstance(exc_info.value, InputError)
    assert exc_info.value.user_message == "No text provided"


def test_malformed_json_is_upstream_response_error():
    with pytest.raises(MalformedResponseError) as exc_info:
        _extractor(text_message("Sure! Here are the places: Tokyo Tower")).extract(NOTES)
    assert isinstance(exc_info.value, UpstreamResponseError)


def test_missing_text_content_is_malformed():
    from types import SimpleNamespace
    with pytest.raises(MalformedResponseError):
        _extractor(SimpleNamespace(content=[])).extract(NOTES)


def test_places_not_a_list_is_malformed():
    with pytest.raises(MalformedResponseError):
        _extractor(json_message({"destination": "Rome", "places": "Colosseum"})).extract(NOTES)


def test_scalar_json_is_malformed():
    with pytest.raises(MalformedResponseError):
        parse_extraction("42")


@pytest.mark.parametrize(
    "error,expected_cls,family",
    [
        (anthropic.APITimeoutError(request=REQUEST), ExtractionTimeoutError, UpstreamTransportError),
        (anthropic.APIConnectionError(request=REQUEST), ExtractionConnectionError, UpstreamTransportError),
        (
            anthropic.RateLimitError("rate_limit_error", response=httpx.Response(429, request=REQUEST), body=None),
            RateLimitedError,
            UpstreamQuotaOrAuthError,
        ),
        (
            anthropic.AuthenticationError("invalid x-api-key", response=httpx.Response(401, request=REQUEST), body=None),
            AuthConfigError,
            UpstreamQuotaOrAuthError,
        ),
        (
            anthropic.PermissionDeniedError("forbidden", response=httpx.Response(403, request=REQUEST), body=None),
            AuthConfigError,
            UpstreamQuotaOrAuthError,
        ),
        (
            anthropic.InternalServerError("overloaded", response=httpx.Response(500, request=REQUEST), body=None),
            ExtractionServiceError,
            UpstreamResponseError,
        ),
    ],
)
def test_sdk_errors_are_classified(error, expected_cls, family):
    fake = FakeAnthropic(error=error)
    with pytest.raises(expected_cls) as exc_info:
        PlaceExtractor(client=fake).extract(NOTES)
    assert isinstance(exc_info.value, family)
    assert exc_info.value.__cause__ is error
    # classified, never retried
    assert len(fake.messages.calls) == 1


def test_timeout_is_not_reported_as_connection_failure():
    with pytest.raises(ExtractionTimeoutError) as exc_info:
        _extractor(error=anthropic.APITimeoutError(request=REQUEST)).extract(NOTES)
    assert exc_info.value.kind == "timeout"
    assert exc_info.value.user_message == "Request timed out. Please try again."
