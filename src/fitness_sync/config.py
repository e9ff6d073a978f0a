"""Application configuration."""

import os
from dataclasses import dataclass

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_base_url: str = "http://localhost:3000/api"
    api_timeout_seconds: float = 5.0
    storage_dir: str = ".fitness_sync"
    remote_backend: str = "http"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


@dataclass(frozen=True)
class SyncConfig:
    """Per-collection settings handed to a sync engine at construction."""

    collection_key: str
    scope_by_owner: bool = True
    singleton: bool = False

    def storage_key(self, owner_key: str | None) -> str:
        """Return the local storage key, scoped to the owner when enabled."""
        if self.scope_by_owner and owner_key:
            return f"{self.collection_key}:{owner_key}"
        return self.collection_key


FOODS = SyncConfig(collection_key="@muscleup/foods")
WEIGHT_ENTRIES = SyncConfig(collection_key="@weight_entries")
GOALS = SyncConfig(collection_key="@muscleup/goals", singleton=True)
WORKOUT_HISTORY = SyncConfig(
    collection_key="@muscleup/workout_history", scope_by_owner=False
)


def parse_remote_backend(raw: str | None) -> str:
    """Normalize the configured remote backend name."""
    if raw is None:
        return "http"
    cleaned = raw.strip().lower()
    if cleaned in {"", "http", "rest"}:
        return "http"
    if cleaned == "supabase":
        return "supabase"
    raise ValueError(f"Unknown remote backend: {raw}")
