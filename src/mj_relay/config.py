"""Application configuration via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MEDIA_DOMAINS = ("media.discordapp.net",)
DEFAULT_EXCLUDED_MARKERS = ("avatars", "attachments")


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    Frozen: a job receives one Settings instance at construction and can rely
    on it not changing underneath it.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Discord session (required)
    discord_token: str
    discord_server_id: str
    discord_channel_id: str

    # Downstream collector (required)
    make_webhook_url: str

    # Discord surface
    discord_host: str = "discord.com"
    headless: bool = True

    # Detection criteria and controls
    imagine_command: str = "/imagine"
    command_marker: str = "/imagine prompt"
    author_marker: str = "Midjourney Bot"
    upscale_label: str = "U1"

    # Image selection
    media_domains: tuple[str, ...] = DEFAULT_MEDIA_DOMAINS
    excluded_path_markers: tuple[str, ...] = DEFAULT_EXCLUDED_MARKERS

    # Timing (seconds). Sleeps are heuristics, not completion signals.
    reply_timeout_seconds: float = 120.0
    poll_interval_seconds: float = 5.0
    render_wait_seconds: float = 50.0
    upscale_settle_seconds: float = 10.0
    suggestion_settle_seconds: float = 3.0
    navigation_timeout_seconds: float = 60.0
    ui_ready_timeout_seconds: float = 60.0
    messages_wait_timeout_seconds: float = 30.0
    sink_timeout_seconds: float = 30.0

    # App
    log_level: str = "INFO"
    port: int = 3000

    @property
    def channel_url(self) -> str:
        """Conversation URL for the configured server and channel."""
        return (
            f"https://{self.discord_host}/channels/"
            f"{self.discord_server_id}/{self.discord_channel_id}"
        )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings. Lazy initialization to avoid import-time errors."""
    return Settings()
