"""Supabase remote collection storing one document per row."""

import asyncio
from dataclasses import dataclass
from typing import TypeVar

from supabase import Client

from fitness_sync.domain.errors import RemoteCollectionError
from fitness_sync.domain.identity import is_provisional
from fitness_sync.services.local_store import RecordCodec
from fitness_sync.services.sync_engine import RemoteCollection

T = TypeVar("T")


@dataclass
class SupabaseRemoteCollection(RemoteCollection[T]):
    """Supabase table with ``id``, ``owner_key`` and ``document`` columns.

    The client is created with the service key, so the bearer credential
    is not forwarded.
    """

    client: Client
    table: str
    codec: RecordCodec[T]
    owner_field: str = "userEmail"

    async def create(self, record: T, credential: str) -> T:
        """Insert or update a row and return the stored record."""
        return await asyncio.to_thread(self._create, record)

    async def delete(self, record_id: str, credential: str) -> None:
        """Delete a row by id."""
        await asyncio.to_thread(self._delete, record_id)

    def _create(self, record: T) -> T:
        document = self.codec.to_document(record)
        record_id = document.pop("_id", None)
        row: dict[str, object] = {
            "owner_key": str(document.get(self.owner_field) or ""),
            "document": document,
        }
        if record_id and not is_provisional(str(record_id)):
            row["id"] = str(record_id)
        try:
            response = self.client.table(self.table).upsert(row).execute()
        except Exception as exc:
            raise RemoteCollectionError(f"Insert into {self.table} failed") from exc
        if not response.data:
            raise RemoteCollectionError(f"Failed to create row in {self.table}")
        return self._parse_row(response.data[0])

    def _delete(self, record_id: str) -> None:
        try:
            self.client.table(self.table).delete().eq("id", record_id).execute()
        except Exception as exc:
            raise RemoteCollectionError(f"Delete from {self.table} failed") from exc

    def _list(self, owner_key: str) -> list[T]:
        try:
            response = (
                self.client.table(self.table)
                .select("id, owner_key, document")
                .eq("owner_key", owner_key)
                .order("created_at", desc=False)
                .execute()
            )
        except Exception as exc:
            raise RemoteCollectionError(f"Select from {self.table} failed") from exc
        return [self._parse_row(row) for row in response.data or []]

    def _parse_row(self, row: dict[str, object]) -> T:
        document = row.get("document")
        if not isinstance(document, dict):
            raise RemoteCollectionError(f"Row in {self.table} has no document")
        try:
            return self.codec.from_document({**document, "_id": str(row["id"])})
        except (KeyError, TypeError, ValueError) as exc:
            raise RemoteCollectionError(f"Malformed row in {self.table}") from exc

    async def list(self, owner_key: str, credential: str) -> list[T]:
        """Return every row owned by an account."""
        return await asyncio.to_thread(self._list, owner_key)
