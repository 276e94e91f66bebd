"""Application settings loaded from environment variables via pydantic-settings.

Values come from, highest priority first:

  1. environment variables (``SETLISTFM_API_KEY=...``),
  2. the ``.env`` file in the working directory,
  3. the defaults below.

An empty API key means "not configured": the matching adapter answers
with a failure envelope instead of calling the provider.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

# Keys whose absence is reported by validate_config.  Songkick no longer
# issues new keys, so it is listed as optional.
_REQUIRED_KEYS: dict[str, str] = {
    "setlistfm_api_key": "SETLISTFM_API_KEY",
    "ticketmaster_api_key": "TICKETMASTER_API_KEY",
    "news_api_key": "NEWS_API_KEY",
}
_OPTIONAL_KEYS: dict[str, str] = {
    "songkick_api_key": "SONGKICK_API_KEY",
}

IMAGE_PROVIDER_CHOICES = ("musicbrainz", "lastfm", "spotify", "multi")


class Settings(BaseSettings):
    """gigtrail application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # === Event databases ===
    setlistfm_api_key: str = ""
    setlistfm_base_url: str = "https://api.setlist.fm/rest/1.0"
    songkick_api_key: str = ""
    songkick_base_url: str = "https://api.songkick.com/api/3.0"
    ticketmaster_api_key: str = ""
    ticketmaster_base_url: str = "https://app.ticketmaster.com/discovery/v2"
    musicbrainz_base_url: str = "https://musicbrainz.org/ws/2"
    musicbrainz_app_name: str = "gigtrail"
    musicbrainz_app_version: str = "0.1.0"
    musicbrainz_contact: str = ""

    # === Source links ===
    news_api_key: str = ""
    news_api_base_url: str = "https://newsapi.org/v2"
    wikipedia_api_url: str = "https://en.wikipedia.org/w/api.php"

    # === Artist images ===
    image_provider: str = "musicbrainz"
    lastfm_api_key: str = ""
    spotify_client_id: str = ""
    spotify_client_secret: str = ""

    # === Cache ===
    cache_ttl_seconds: float = 3600.0
    cache_cleanup_interval_seconds: float = 300.0

    # === Aggregation ===
    max_source_links: int = 10
    http_timeout_seconds: float = 15.0

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 3000
    app_env: str = "development"
    log_level: str = "INFO"

    @property
    def musicbrainz_user_agent(self) -> str:
        """User-Agent string MusicBrainz requires from every client."""
        contact = f" ( {self.musicbrainz_contact} )" if self.musicbrainz_contact else ""
        return f"{self.musicbrainz_app_name}/{self.musicbrainz_app_version}{contact}"

    def get_missing_keys(self, include_optional: bool = False) -> list[str]:
        """Return the env-var names of API keys that are not configured."""
        keys = dict(_REQUIRED_KEYS)
        if include_optional:
            keys.update(_OPTIONAL_KEYS)
        return [env_name for field, env_name in keys.items() if not getattr(self, field)]

    def validate_config(self) -> tuple[bool, list[str]]:
        """Return ``(valid, missing)`` for the required provider keys."""
        missing = self.get_missing_keys()
        return (not missing, missing)

    def get_service_status(self) -> dict[str, bool]:
        """Per-service "has credentials" map for the health endpoint."""
        return {
            "setlistfm": bool(self.setlistfm_api_key),
            "songkick": bool(self.songkick_api_key),
            "ticketmaster": bool(self.ticketmaster_api_key),
            "musicbrainz": True,
            "news_api": bool(self.news_api_key),
            "wikipedia": True,
        }
