from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Trip Map API"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    # CORS: "*" for dev; in production set to comma-separated origins, e.g. "https://app.example.com"
    cors_origins: str = "*"

    # Optional API key auth. When enabled, requests must include X-API-Key or Authorization: Bearer <key>.
    api_key_required: bool = False
    api_keys: str = ""  # Comma-separated list of valid keys (no spaces). Example: API_KEYS=key1,key2

    # Place extraction (Claude)
    anthropic_api_key: str = ""  # get at console.anthropic.com
    extraction_model: str = "claude-sonnet-4-6"
    extraction_max_tokens: int = 800
    extraction_timeout_seconds: float = 30.0

    # Geocoding (Google Geocoding API)
    google_maps_api_key: str = ""
    geocode_timeout_seconds: float = 10.0
    geocode_bias_radius_m: int = 50_000  # proximity preference around the destination
    geocode_max_workers: int = 8
    max_distance_km: float = 100.0  # places farther than this from the destination are dropped

    max_text_chars: int = 20_000


def get_settings() -> Settings:
    return Settings()
