"""Follower client for a remote state authority.

WHY: In a multi-screen setup one process owns the conversational state
and every renderer follows it. A follower must survive the authority
restarting or the venue Wi-Fi dropping: it keeps animating on local
input and reattaches as soon as the authority is reachable again.

HOW: run() holds a WebSocket (``websockets``) to the authority's /cable
endpoint and applies every valid record to the local BarrageSession.
Any transport error is logged, followed by a fixed backoff sleep and a
fresh connect, forever, until the task is cancelled or stop() is
called. forward_utterance() pushes locally recognized speech to the
authority over HTTP (``httpx``).

RULES:
- Reconnect delay is fixed (RECONNECT_BACKOFF_S), no growth, no limit
- Handshake timeouts count as transport errors
- Malformed records are dropped with a warning; the connection stays up
- Records missed while disconnected are not replayed
- The session is put in follower mode so state() mirrors the authority
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

import httpx
import websockets

from word_barrage import config, protocol
from word_barrage.core.session import BarrageSession

logger = logging.getLogger(__name__)


def http_base_url(ws_url: str) -> str:
    """Derive the authority's HTTP base URL from its /cable WebSocket URL."""
    parts = urlsplit(ws_url)
    scheme = {"ws": "http", "wss": "https"}.get(parts.scheme, parts.scheme)
    path = parts.path
    if path.endswith("/cable"):
        path = path[: -len("/cable")]
    return urlunsplit((scheme, parts.netloc, path.rstrip("/"), "", ""))


class AuthorityClient:
    """Keeps a local session in sync with a remote authority."""

    def __init__(
        self,
        session: BarrageSession,
        url: str = config.AUTHORITY_URL,
        backoff_s: float = config.RECONNECT_BACKOFF_S,
    ) -> None:
        if not url:
            raise ValueError(
                "Authority URL not configured. "
                "Pass --authority or set BARRAGE_AUTHORITY_URL."
            )
        self.session = session
        self.session.follower = True
        self.url = url
        self.backoff_s = backoff_s
        self.connected = False
        self._stopping = False
        self._stop: Optional[asyncio.Event] = None

    def stop(self) -> None:
        self._stopping = True
        if self._stop is not None:
            self._stop.set()

    def handle_message(self, raw: str) -> bool:
        """Apply one inbound record. Returns False when it was dropped."""
        try:
            message = protocol.decode_message(raw)
        except protocol.ProtocolError as exc:
            logger.warning("Dropping malformed record from authority: %s", exc)
            return False
        protocol.apply_message(self.session, message)
        return True

    async def run(self) -> None:
        """Follow the authority until stopped, reconnecting after any failure."""
        # The stop event must belong to the loop that runs this task
        self._stop = asyncio.Event()
        if self._stopping:
            self._stop.set()
        while not self._stop.is_set():
            try:
                async with websockets.connect(self.url) as ws:
                    self.connected = True
                    logger.info("Connected to authority %s", self.url)
                    async for raw in ws:
                        if isinstance(raw, bytes):
                            raw = raw.decode("utf-8", errors="replace")
                        self.handle_message(raw)
                        if self._stop.is_set():
                            break
            except (OSError, asyncio.TimeoutError, websockets.WebSocketException) as exc:
                logger.warning(
                    "Authority connection lost (%s); retrying in %.1fs",
                    exc, self.backoff_s,
                )
            finally:
                self.connected = False

            if self._stop.is_set():
                break
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.backoff_s)
            except asyncio.TimeoutError:
                pass

    async def forward_utterance(
        self,
        text: str,
        client: Optional[httpx.AsyncClient] = None,
    ) -> bool:
        """POST a recognized utterance to the authority. Returns False on failure."""
        url = http_base_url(self.url) + "/utterances"
        owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(timeout=httpx.Timeout(5.0))
        try:
            resp = await client.post(url, json={"text": text})
            resp.raise_for_status()
            return bool(resp.json().get("accepted", False))
        except httpx.HTTPError as exc:
            logger.warning("Failed to forward utterance to %s: %s", url, exc)
            return False
        finally:
            if owns_client:
                await client.aclose()
