"""Pydantic request/response models for the trip endpoints."""
from pydantic import BaseModel, Field, model_validator


class ExtractTripRequest(BaseModel):
    text: str


class HighlightPlace(BaseModel):
    name: str


class HighlightRequest(BaseModel):
    text: str
    places: list[HighlightPlace] = Field(default_factory=list)


class HighlightResponse(BaseModel):
    html: str


class MapsUrlPlace(BaseModel):
    name: str = ""
    latitude: float | None = None
    longitude: float | None = None

    @model_validator(mode="after")
    def check_name_or_coordinates(self):
        if not self.name.strip() and (self.latitude is None or self.longitude is None):
            raise ValueError("each place needs a name or latitude and longitude")
        if self.latitude is not None and not (-90 <= self.latitude <= 90):
            raise ValueError("latitude must be between -90 and 90")
        if self.longitude is not None and not (-180 <= self.longitude <= 180):
            raise ValueError("longitude must be between -180 and 180")
        return self


class MapsUrlRequest(BaseModel):
    places: list[MapsUrlPlace] = Field(default_factory=list)


class MapsUrlResponse(BaseModel):
    search_url: str | None
    directions_url: str | None
