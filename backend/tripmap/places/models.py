"""Pydantic models for extracted and geocoded places."""
from pydantic import BaseModel, Field

from tripmap.data.geo import Coordinates

# Vocabulary the extraction prompt asks for; not enforced on responses.
PLACE_TYPES = (
    "restaurant",
    "bar",
    "cafe",
    "hotel",
    "landmark",
    "museum",
    "park",
    "shopping",
    "nightlife",
    "attraction",
)


class ExtractedPlace(BaseModel):
    model_config = {"frozen": True}

    name: str
    context: str = ""
    type: str = ""


class GeocodedLocation(BaseModel):
    latitude: float
    longitude: float
    address: str = ""

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(self.latitude, self.longitude)


class GeocodedPlace(ExtractedPlace):
    latitude: float
    longitude: float
    address: str = ""

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(self.latitude, self.longitude)

    @classmethod
    def from_location(cls, place: ExtractedPlace, location: GeocodedLocation) -> "GeocodedPlace":
        return cls(
            name=place.name,
            context=place.context,
            type=place.type,
            latitude=location.latitude,
            longitude=location.longitude,
            address=location.address,
        )


UNKNOWN_DESTINATION = "Unknown"


class ExtractionResult(BaseModel):
    destination: str = UNKNOWN_DESTINATION
    places: list[ExtractedPlace] = Field(default_factory=list)


class TripMap(BaseModel):
    """Output of the full pipeline for one set of trip notes."""

    destination: str
    places: list[GeocodedPlace]
    unresolved_count: int = 0  # extracted places that could not be located
    highlighted_html: str = ""
    google_maps_url: str | None = None
