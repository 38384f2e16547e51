"""Runtime configuration, loaded from the environment and an optional .env file."""

from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://www.mdskills.ai"
DEFAULT_REVIEW_MODEL = "claude-sonnet-4-5-20250929"


class ConfigError(RuntimeError):
    """Raised when a command needs a setting that is not configured."""


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    # Catalog backends
    supabase_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("NEXT_PUBLIC_SUPABASE_URL", "SUPABASE_URL"),
    )
    supabase_service_role_key: Optional[str] = Field(
        default=None, validation_alias="SUPABASE_SERVICE_ROLE_KEY"
    )
    db_path: Optional[Path] = Field(default=None, validation_alias="MDSKILLS_DB_PATH")

    # Upstream APIs
    github_token: Optional[str] = Field(default=None, validation_alias="GITHUB_TOKEN")
    anthropic_api_key: Optional[str] = Field(default=None, validation_alias="ANTHROPIC_API_KEY")
    review_model: str = Field(default=DEFAULT_REVIEW_MODEL, validation_alias="MDSKILLS_REVIEW_MODEL")

    # Public marketplace
    api_url: str = Field(default=DEFAULT_API_URL, validation_alias="MDSKILLS_API_URL")

    # Timeouts and throttling (seconds)
    request_timeout: float = 15.0
    import_delay: float = 1.0
    review_delay: float = 0.5

    @property
    def has_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)

    def require_supabase(self) -> None:
        if not self.has_supabase:
            raise ConfigError(
                "Missing NEXT_PUBLIC_SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY in .env "
                "(or pass --local to use a SQLite catalog)"
            )

    def require_anthropic(self) -> str:
        if not self.anthropic_api_key:
            raise ConfigError("Missing ANTHROPIC_API_KEY")
        return self.anthropic_api_key


def get_settings(**overrides) -> Settings:
    """Build settings, letting explicit keyword overrides win over the environment."""
    return Settings(**{k: v for k, v in overrides.items() if v is not None})
