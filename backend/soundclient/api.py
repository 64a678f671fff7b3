"""HTTP client for the room endpoints."""

from __future__ import annotations

from http import HTTPStatus
from typing import TYPE_CHECKING, Self

import httpx

from shared.errors import InvalidInputError, RoomNotFoundError, SoundboardError
from shared.wire import RoomInfo

if TYPE_CHECKING:
    from types import TracebackType


class RoomApiClient:
    """Create and look up rooms over HTTP.

    Pass ``client`` to reuse an existing httpx.AsyncClient (tests hand in one
    bound to an ASGITransport); otherwise the client owns its own connection
    pool and must be closed with ``aclose`` or used as an async context manager.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def create_room(self, name: str) -> RoomInfo:
        if not name.strip():
            raise InvalidInputError("room name must not be empty")
        response = await self._request("POST", "/room", params={"name": name})
        if response.status_code == HTTPStatus.BAD_REQUEST:
            raise InvalidInputError(_error_message(response))
        if response.status_code != HTTPStatus.CREATED:
            raise SoundboardError(f"create room failed with status {response.status_code}")
        return RoomInfo.model_validate(response.json())

    async def get_room(self, room_id: str) -> RoomInfo:
        response = await self._request("GET", f"/room/{room_id}")
        if response.status_code == HTTPStatus.NOT_FOUND:
            raise RoomNotFoundError(room_id)
        if response.status_code != HTTPStatus.OK:
            raise SoundboardError(f"get room failed with status {response.status_code}")
        return RoomInfo.model_validate(response.json())

    async def _request(self, method: str, path: str, **kwargs: object) -> httpx.Response:
        try:
            return await self._client.request(method, path, **kwargs)  # type: ignore[arg-type]
        except httpx.RequestError as e:
            raise SoundboardError(f"request to {path} failed: {e}") from e


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or "bad request"
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return "bad request"
