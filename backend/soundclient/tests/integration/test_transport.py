import pytest

from shared.errors import TransportLostError
from soundclient.transport import websocket_connector


class TestWebSocketConnector:
    async def test_refused_connection_raises_transport_lost(self):
        connect = websocket_connector(open_timeout=2)

        with pytest.raises(TransportLostError, match="failed to connect"):
            await connect("ws://127.0.0.1:1/ws/room-1?nickname=Alice")
