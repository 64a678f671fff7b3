"""Client-side realtime transports."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed, InvalidHandshake

from shared.errors import TransportLostError

if TYPE_CHECKING:
    from websockets.asyncio.client import ClientConnection


class Transport(ABC):
    """One duplex channel to the server. A reconnect opens a new instance."""

    @abstractmethod
    async def send_text(self, data: str) -> None:
        """Send a text frame. Raises TransportLostError if the channel is gone."""
        ...

    @abstractmethod
    async def receive_frame(self) -> str | bytes:
        """Wait for the next frame. Raises TransportLostError when the channel closes."""
        ...

    @abstractmethod
    async def close(self) -> None: ...


# Opens a transport for a URL, raising TransportLostError on failure.
Connector = Callable[[str], Awaitable[Transport]]


class WebSocketTransport(Transport):
    def __init__(self, connection: ClientConnection) -> None:
        self._connection = connection

    async def send_text(self, data: str) -> None:
        try:
            await self._connection.send(data)
        except ConnectionClosed as e:
            raise TransportLostError(f"websocket closed: {e}") from e

    async def receive_frame(self) -> str | bytes:
        try:
            return await self._connection.recv()
        except ConnectionClosed as e:
            raise TransportLostError(f"websocket closed: {e}") from e

    async def close(self) -> None:
        await self._connection.close()


def websocket_connector(open_timeout: float = 10.0) -> Connector:
    """Build a connector that opens WebSocketTransports with the given handshake timeout."""

    async def _connect(url: str) -> Transport:
        try:
            connection = await connect(url, open_timeout=open_timeout)
        except (OSError, TimeoutError, InvalidHandshake) as e:
            raise TransportLostError(f"failed to connect to {url}: {e}") from e
        return WebSocketTransport(connection)

    return _connect
