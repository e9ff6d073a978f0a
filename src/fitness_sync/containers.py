"""Dependency container wiring for the sync core."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from supabase import create_client

from fitness_sync.adapters.documents import (
    FoodEntryCodec,
    GoalSetCodec,
    WeightEntryCodec,
    WorkoutHistoryCodec,
)
from fitness_sync.adapters.file_storage import FileStorage
from fitness_sync.adapters.http_remote_collection import HttpxRemoteCollection
from fitness_sync.adapters.supabase_remote_collection import SupabaseRemoteCollection
from fitness_sync.app_logging import configure_logging
from fitness_sync.config import (
    FOODS,
    GOALS,
    WEIGHT_ENTRIES,
    Settings,
    SyncConfig,
    parse_remote_backend,
)
from fitness_sync.services.credentials import CredentialProvider
from fitness_sync.services.exercise_progress import ExerciseProgressService
from fitness_sync.services.goals import GoalsService
from fitness_sync.services.local_store import LocalStore, RecordCodec
from fitness_sync.services.nutrition import NutritionLogService
from fitness_sync.services.progress import WeightProgressService
from fitness_sync.services.storage import InMemoryStorage, KeyValueStorage
from fitness_sync.services.sync_engine import RemoteCollection, SyncEngine

T = TypeVar("T")


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    credentials: CredentialProvider
    storage: KeyValueStorage
    nutrition_service: NutritionLogService
    progress_service: WeightProgressService
    goals_service: GoalsService
    exercise_progress_service: ExerciseProgressService
    close_resources: Callable[[], Awaitable[None]]


def build_container(
    credentials: CredentialProvider,
    settings: Settings | None = None,
    storage: KeyValueStorage | None = None,
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(resolved_settings.log_level)
    resolved_storage = storage or _build_storage(resolved_settings)
    backend = parse_remote_backend(resolved_settings.remote_backend)
    http_remotes: list[HttpxRemoteCollection] = []

    if backend == "supabase":
        if not (
            resolved_settings.supabase_url and resolved_settings.supabase_service_key
        ):
            raise ValueError("Supabase backend requires url and service key")
        supabase_client = create_client(
            resolved_settings.supabase_url, resolved_settings.supabase_service_key
        )

        def remote_for(path: str, codec: RecordCodec[T]) -> RemoteCollection[T]:
            return SupabaseRemoteCollection(
                client=supabase_client, table=path.strip("/"), codec=codec
            )

    else:

        def remote_for(path: str, codec: RecordCodec[T]) -> RemoteCollection[T]:
            remote = HttpxRemoteCollection.create_client(
                base_url=resolved_settings.api_base_url,
                path=path,
                codec=codec,
                timeout=resolved_settings.api_timeout_seconds,
            )
            http_remotes.append(remote)
            return remote

    def engine_for(
        config: SyncConfig, path: str, codec: RecordCodec[T]
    ) -> SyncEngine[T]:
        return SyncEngine(
            config=config,
            local_store=LocalStore(resolved_storage, codec),
            remote=remote_for(path, codec),
            credentials=credentials,
        )

    foods_engine = engine_for(FOODS, "/food", FoodEntryCodec())
    weights_engine = engine_for(WEIGHT_ENTRIES, "/weight", WeightEntryCodec())
    goals_engine = engine_for(GOALS, "/goals", GoalSetCodec())
    engines = (foods_engine, weights_engine, goals_engine)

    async def close_resources() -> None:
        for engine in engines:
            await engine.drain()
        for remote in http_remotes:
            await remote.close()

    return AppContainer(
        settings=resolved_settings,
        credentials=credentials,
        storage=resolved_storage,
        nutrition_service=NutritionLogService(foods_engine),
        progress_service=WeightProgressService(weights_engine),
        goals_service=GoalsService(goals_engine),
        exercise_progress_service=ExerciseProgressService(
            LocalStore(resolved_storage, WorkoutHistoryCodec())
        ),
        close_resources=close_resources,
    )


def _build_storage(settings: Settings) -> KeyValueStorage:
    if not settings.storage_dir:
        return InMemoryStorage()
    return FileStorage.create(settings.storage_dir)
