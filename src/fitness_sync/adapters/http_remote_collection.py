"""REST remote collection backed by httpx."""

from dataclasses import dataclass
from typing import TypeVar

import httpx

from fitness_sync.domain.errors import RemoteCollectionError
from fitness_sync.domain.identity import is_provisional
from fitness_sync.services.local_store import RecordCodec
from fitness_sync.services.sync_engine import RemoteCollection

T = TypeVar("T")


@dataclass
class HttpxRemoteCollection(RemoteCollection[T]):
    """Remote collection exposed as a REST resource.

    ``GET {path}?userEmail=`` lists, ``POST {path}`` creates and
    ``DELETE {path}?id=`` deletes. Every failure surfaces as
    ``RemoteCollectionError``.
    """

    base_url: str
    path: str
    codec: RecordCodec[T]
    http_client: httpx.AsyncClient
    timeout: float = 5.0
    owner_param: str = "userEmail"

    @classmethod
    def create_client(
        cls,
        base_url: str,
        path: str,
        codec: RecordCodec[T],
        timeout: float = 5.0,
    ) -> "HttpxRemoteCollection[T]":
        """Create a remote collection with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            path=path,
            codec=codec,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def create(self, record: T, credential: str) -> T:
        """POST a record and return the stored version."""
        document = self.codec.to_document(record)
        if is_provisional(_as_str(document.get("_id"))):
            document.pop("_id", None)
        payload = await self._request("POST", credential, json=document)
        if not isinstance(payload, dict):
            raise RemoteCollectionError(f"Unexpected create response from {self.path}")
        return self._decode(payload)

    async def delete(self, record_id: str, credential: str) -> None:
        """DELETE a record by id."""
        await self._request("DELETE", credential, params={"id": record_id})

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request(
        self,
        method: str,
        credential: str,
        params: dict[str, str] | None = None,
        json: object | None = None,
    ) -> object:
        url = f"{self.base_url}{self.path}"
        headers = {"Content-Type": "application/json"}
        if credential:
            headers["Authorization"] = f"Bearer {credential}"
        try:
            response = await self.http_client.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if not response.content:
                return None
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise RemoteCollectionError(f"{method} {self.path} failed: {exc}") from exc

    def _decode(self, document: dict[str, object]) -> T:
        try:
            return self.codec.from_document(document)
        except (KeyError, TypeError, ValueError) as exc:
            raise RemoteCollectionError(
                f"Malformed document from {self.path}: {exc}"
            ) from exc

    async def list(self, owner_key: str, credential: str) -> list[T]:
        """GET every record of an owner.

        A single object response (the goals resource) is one record; an
        empty body is no records.
        """
        payload = await self._request(
            "GET", credential, params={self.owner_param: owner_key}
        )
        if payload is None:
            return []
        if isinstance(payload, dict):
            return [self._decode(payload)] if payload else []
        if not isinstance(payload, list):
            raise RemoteCollectionError(f"Unexpected list response from {self.path}")
        return [self._decode(document) for document in payload]


def _as_str(value: object) -> str | None:
    return str(value) if value is not None else None
