"""Configuration for TodoAssistant."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration.

    Values come from environment variables (case-insensitive) or a local ``.env``.
    A missing API key disables the matching provider.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    openai_api_key: str | None = Field(default=None)
    openai_base_url: str | None = Field(default=None)  # Proxy override
    openai_max_tokens: int = Field(default=2048)

    minimax_api_key: str | None = Field(default=None)
    minimax_api_group: str = Field(default="default")
    minimax_base_url: str = Field(default="https://api.minimax.chat/v1")

    ai_provider: str = Field(default="auto")  # "auto" or a provider name
    request_timeout: float = Field(default=60.0)

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=3000)
    log_level: str = Field(default="INFO")
