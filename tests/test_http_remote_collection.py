"""Tests for the REST remote collection."""

import asyncio
import json
from datetime import date

import httpx
import pytest

from fitness_sync.adapters.documents import FoodEntryCodec, GoalSetCodec
from fitness_sync.adapters.http_remote_collection import HttpxRemoteCollection
from fitness_sync.domain.errors import RemoteCollectionError
from tests.conftest import make_food


def _remote(handler, path: str = "/food", codec=None) -> HttpxRemoteCollection:  # type: ignore[no-untyped-def]
    transport = httpx.MockTransport(handler)
    return HttpxRemoteCollection(
        base_url="http://api.test/api",
        path=path,
        codec=codec or FoodEntryCodec(),
        http_client=httpx.AsyncClient(transport=transport),
    )


def test_list_sends_owner_and_bearer_token() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json=[
                {
                    "_id": "65a1",
                    "userEmail": "ana@example.com",
                    "name": "Oats",
                    "calories": 150,
                    "protein": 5,
                    "mealType": "breakfast",
                    "date": "2024-01-08T00:00:00.000Z",
                }
            ],
        )

    records = asyncio.run(_remote(handler).list("ana@example.com", "tok"))

    assert seen[0].method == "GET"
    assert seen[0].url.path == "/api/food"
    assert seen[0].url.params["userEmail"] == "ana@example.com"
    assert seen[0].headers["Authorization"] == "Bearer tok"
    assert records[0].id == "65a1"
    assert records[0].date == date(2024, 1, 8)


def test_list_accepts_single_document_and_empty_body() -> None:
    responses = [
        httpx.Response(200, json={"_id": "g1", "userEmail": "ana@example.com"}),
        httpx.Response(200),
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    remote = _remote(handler, path="/goals", codec=GoalSetCodec())

    async def scenario():  # type: ignore[no-untyped-def]
        return (
            await remote.list("ana@example.com", "tok"),
            await remote.list("ana@example.com", "tok"),
        )

    single, empty = asyncio.run(scenario())

    assert [goals.id for goals in single] == ["g1"]
    assert empty == []


def test_create_strips_provisional_id() -> None:
    payloads: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content.decode())
        payloads.append(payload)
        return httpx.Response(201, json={**payload, "_id": "65a2"})

    created = asyncio.run(
        _remote(handler).create(make_food(id="local-1704715200000-a1b2c3"), "tok")
    )

    assert "_id" not in payloads[0]
    assert payloads[0]["mealType"] == "breakfast"
    assert created.id == "65a2"


def test_create_keeps_confirmed_id() -> None:
    payloads: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        payloads.append(json.loads(request.content.decode()))
        return httpx.Response(200, json=payloads[-1])

    asyncio.run(_remote(handler).create(make_food(id="65a3"), "tok"))

    assert payloads[0]["_id"] == "65a3"


def test_delete_passes_id_as_query_parameter() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"message": "deleted"})

    asyncio.run(_remote(handler).delete("65a1", "tok"))

    assert seen[0].method == "DELETE"
    assert seen[0].url.params["id"] == "65a1"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "boom"}),
        httpx.Response(200, content=b"<html>"),
        httpx.Response(200, json="unexpected"),
    ],
)
def test_list_failures_raise_remote_error(response: httpx.Response) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return response

    with pytest.raises(RemoteCollectionError):
        asyncio.run(_remote(handler).list("ana@example.com", "tok"))


def test_transport_error_raises_remote_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    with pytest.raises(RemoteCollectionError):
        asyncio.run(_remote(handler).create(make_food(), "tok"))


def test_malformed_document_raises_remote_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"_id": "x", "calories": 1}])

    with pytest.raises(RemoteCollectionError):
        asyncio.run(_remote(handler).list("ana@example.com", "tok"))


def test_create_client_strips_trailing_slash() -> None:
    remote = HttpxRemoteCollection.create_client(
        base_url="http://api.test/api/", path="/weight", codec=FoodEntryCodec()
    )

    assert remote.base_url == "http://api.test/api"
    asyncio.run(remote.close())
