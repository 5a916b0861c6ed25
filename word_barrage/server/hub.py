"""WebSocket connection hub for the /cable endpoint.

Keeps the set of connected renderers and fans records out to all of
them. A send that fails marks the peer dead; it is dropped from the set
instead of breaking the broadcast for everyone else.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionHub:
    def __init__(self) -> None:
        self._clients: Set[WebSocket] = set()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._clients)

    async def add(self, ws: WebSocket) -> None:
        async with self._lock:
            self._clients.add(ws)
        logger.info("Client connected. Total: %d", len(self._clients))

    async def remove(self, ws: WebSocket) -> None:
        async with self._lock:
            self._clients.discard(ws)
        logger.info("Client disconnected. Total: %d", len(self._clients))

    async def broadcast(self, text: str) -> int:
        """Send text to every client; returns how many received it."""
        async with self._lock:
            clients = list(self._clients)

        dead = []
        for ws in clients:
            try:
                await ws.send_text(text)
            except Exception:
                logger.warning("Dropping client after failed send", exc_info=True)
                dead.append(ws)

        if dead:
            async with self._lock:
                for ws in dead:
                    self._clients.discard(ws)
        return len(clients) - len(dead)
