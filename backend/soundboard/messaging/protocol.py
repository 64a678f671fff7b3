"""Abstract connection protocol for JSON text-frame communication."""

from abc import ABC, abstractmethod

from shared.wire import SoundEvent, encode_event


class ConnectionProtocol(ABC):
    """
    Abstract interface for one client transport.

    Lets session and routing logic be tested without real WebSocket
    connections.
    """

    @property
    @abstractmethod
    def connection_id(self) -> str:
        """Unique identifier for this transport connection."""
        ...

    @property
    @abstractmethod
    def room_id(self) -> str:
        """Room ID from the WebSocket URL path (e.g., /ws/{room_id})."""
        ...

    @abstractmethod
    async def send_text(self, data: str) -> None:
        """
        Send a text frame to the client.
        """
        ...

    @abstractmethod
    async def receive_frame(self) -> str | bytes:
        """
        Receive one frame from the client (bytes for binary frames).
        """
        ...

    @abstractmethod
    async def close(self, code: int = 1000, reason: str = "") -> None:
        """
        Close the connection.
        """
        ...

    async def send_event(self, event: SoundEvent) -> None:
        await self.send_text(encode_event(event))
