"""Configuration management for pebblechat."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_MODEL = "claude-haiku-4-5"
DEFAULT_SYSTEM_MESSAGE = (
    "You're running on a Pebble smartwatch. Please respond in plain text without any formatting, "
    "keeping your responses within 1-3 sentences."
)
DEFAULT_CONFIG_PAGE_URL = "https://breitburg.github.io/claude-for-pebble/config/"

# Keys persisted by the settings page, in the order the page expects them.
USER_SETTING_KEYS: tuple[str, ...] = (
    "api_key",
    "base_url",
    "model",
    "system_message",
    "web_search_enabled",
    "mcp_servers",
)


class Settings(BaseSettings):
    """Process settings, loaded from env with PEBBLECHAT_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="PEBBLECHAT_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    home: Path = Field(default=Path.home() / ".pebblechat", description="Directory holding settings.json")
    log_level: str = Field(default="INFO", description="Log level")
    request_timeout_seconds: float = Field(default=15.0, description="Budget for the single API attempt")
    max_tokens: int = Field(default=256, description="max_tokens sent with every request")
    response_max_chars: int = Field(default=2000, description="Upper bound on RESPONSE_TEXT length")
    config_page_url: str = Field(default=DEFAULT_CONFIG_PAGE_URL, description="Remote settings page")

    # Env defaults for user settings; values saved in the store win.
    api_key: str | None = None
    base_url: str | None = None
    model: str | None = None
    system_message: str | None = None
    web_search_enabled: str | None = None
    mcp_servers: str | None = None

    @property
    def settings_file(self) -> Path:
        return self.home.expanduser() / "settings.json"

    def user_defaults(self) -> dict[str, str]:
        values = {key: getattr(self, key) for key in USER_SETTING_KEYS}
        return {key: value for key, value in values.items() if value}


@dataclass(frozen=True)
class ChatConfig:
    """Snapshot of everything one request needs, read once at request time."""

    api_key: str | None
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    system_message: str = DEFAULT_SYSTEM_MESSAGE
    web_search_enabled: bool = False
    mcp_servers: str | None = None
    max_tokens: int = 256
    timeout_seconds: float = 15.0
    response_max_chars: int = 2000

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    @property
    def has_mcp_servers(self) -> bool:
        return bool(self.mcp_servers and self.mcp_servers.strip())

    @classmethod
    def from_values(cls, values: dict[str, str], settings: Settings | None = None) -> ChatConfig:
        """Build a snapshot from raw string settings, applying defaults for missing keys."""

        settings = settings or Settings()
        return cls(
            api_key=values.get("api_key") or None,
            base_url=values.get("base_url") or DEFAULT_BASE_URL,
            model=values.get("model") or DEFAULT_MODEL,
            system_message=values.get("system_message") or DEFAULT_SYSTEM_MESSAGE,
            web_search_enabled=values.get("web_search_enabled") == "true",
            mcp_servers=values.get("mcp_servers") or None,
            max_tokens=settings.max_tokens,
            timeout_seconds=settings.request_timeout_seconds,
            response_max_chars=settings.response_max_chars,
        )


def load_settings() -> Settings:
    """Load process settings; pydantic-settings reads env and .env."""

    return Settings()
