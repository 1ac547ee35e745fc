from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from fastapi import WebSocket

from connectn.actions import Delivery

logger = logging.getLogger(__name__)


class ConnectionHub:
    """In-process WebSocket registry keyed by connection id.

    Contract:
      - register a socket via `connect(connection_id, websocket)`.
      - push dispatcher output with `deliver(deliveries)`.

    Sends are fire-and-forget: a socket that fails to receive is dropped and
    never blocks delivery to the other recipients.
    """

    def __init__(self) -> None:
        self._by_connection: dict[str, WebSocket] = {}
        self._lock = asyncio.Lock()

    async def connect(self, connection_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._by_connection[connection_id] = websocket

    async def disconnect(self, connection_id: str) -> None:
        async with self._lock:
            self._by_connection.pop(connection_id, None)

    async def send(self, connection_id: str, payload: dict[str, object]) -> bool:
        async with self._lock:
            ws = self._by_connection.get(connection_id)
        if ws is None:
            return False
        try:
            await ws.send_json(payload)
        except Exception:
            logger.warning("Dropping connection %s after failed send", connection_id)
            await self.disconnect(connection_id)
            return False
        return True

    async def deliver(self, deliveries: Iterable[Delivery]) -> None:
        for delivery in deliveries:
            payload = delivery.message.to_payload()
            for connection_id in delivery.recipients:
                await self.send(connection_id, payload)


hub = ConnectionHub()
