"""FastAPI state authority: HTTP control routes and the /cable WebSocket.

WHY: Recognition bridges, admin tools and renderers run as separate
processes, often on separate machines. One process has to own the
conversational state and tell everyone else about it. FastAPI gives us
request validation, OpenAPI docs and WebSockets in one place.

HOW: A module-level BarrageSession is driven by a tick task started in
the app lifespan. A second task broadcasts the state record once per
second. HTTP routes enqueue utterances and apply control commands; the
/cable WebSocket accepts the same commands as JSON (see protocol.py)
and fans state/flash records out to every connected renderer.

RULES:
- The session is a singleton created at import time
- State is broadcast after every tick that processed an utterance and at
  least once per STATE_BROADCAST_INTERVAL_S
- Malformed WebSocket messages, text or binary, are dropped with a warning;
  the socket stays open
- A failing tick is logged and the loop continues
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from word_barrage import __version__, config, protocol
from word_barrage.core.session import BarrageSession
from word_barrage.server.hub import ConnectionHub
from word_barrage.server.models import (
    AcceptedResponse,
    FlashRequest,
    FlashResponse,
    FrameResponse,
    HealthResponse,
    ParticleModel,
    SpawnWordRequest,
    StateResponse,
    UtteranceRequest,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and session setup
# ---------------------------------------------------------------------------

session = BarrageSession()
hub = ConnectionHub()


async def _broadcast_state() -> None:
    await hub.broadcast(protocol.encode_state(session.state()))


async def _tick_loop() -> None:
    """Drive the session at TICK_RATE."""
    interval = 1.0 / config.TICK_RATE
    while True:
        try:
            report = session.tick()
            if report.utterances:
                await _broadcast_state()
        except Exception:
            logger.exception("Tick failed")
        await asyncio.sleep(interval)


async def _periodic_broadcast() -> None:
    """Broadcast the state record every STATE_BROADCAST_INTERVAL_S."""
    while True:
        await asyncio.sleep(config.STATE_BROADCAST_INTERVAL_S)
        try:
            await _broadcast_state()
        except Exception:
            logger.exception("State broadcast failed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the tick loop and broadcaster on startup, cancel on shutdown."""
    tasks = [
        asyncio.create_task(_tick_loop()),
        asyncio.create_task(_periodic_broadcast()),
    ]
    logger.info("Tick loop started at %d Hz", config.TICK_RATE)
    yield
    for task in tasks:
        task.cancel()
    for task in tasks:
        try:
            await task
        except asyncio.CancelledError:
            pass


app = FastAPI(
    lifespan=lifespan,
    title="Word Barrage State Authority",
    description=(
        "Owns the conversational state of a live session. Push recognized "
        "utterances and control commands over HTTP or the /cable WebSocket; "
        "renderers subscribe to /cable for state and flash records and pull "
        "/frame for the live particle barrage."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Endpoints: Input
# ---------------------------------------------------------------------------


@app.post(
    "/utterances",
    response_model=AcceptedResponse,
    status_code=202,
    tags=["input"],
    summary="Push a recognized utterance",
    description=(
        "Enqueue recognized speech. It is processed on the next tick; the "
        "resulting state record is broadcast to all /cable clients."
    ),
)
async def post_utterance(body: UtteranceRequest) -> AcceptedResponse:
    return AcceptedResponse(accepted=session.submit_text(body.text))


# ---------------------------------------------------------------------------
# Endpoints: Control
# ---------------------------------------------------------------------------


@app.post(
    "/control/reset",
    response_model=StateResponse,
    tags=["control"],
    summary="Reset the session",
    description="Clears tension, silence stage, speaker side and the barrage.",
)
async def reset_session() -> StateResponse:
    session.reset()
    await _broadcast_state()
    return StateResponse.from_record(session.state())


@app.post(
    "/control/flash",
    response_model=FlashResponse,
    tags=["control"],
    summary="Flash a word full-screen",
)
async def flash_word(body: FlashRequest) -> FlashResponse:
    if body.ttl is not None:
        record = session.flash(body.word, ttl=body.ttl)
    else:
        record = session.flash(body.word)
    await hub.broadcast(protocol.encode_flash(record))
    return FlashResponse.from_record(record)


@app.post(
    "/control/spawn",
    response_model=AcceptedResponse,
    status_code=201,
    tags=["control"],
    summary="Spawn a word with explicit overrides",
    description="Unknown style tags spawn with the normal physics defaults.",
)
async def spawn_word(body: SpawnWordRequest) -> AcceptedResponse:
    session.spawn_word(**body.model_dump())
    return AcceptedResponse(accepted=True)


# ---------------------------------------------------------------------------
# Endpoints: Observation
# ---------------------------------------------------------------------------


@app.get(
    "/state",
    response_model=StateResponse,
    tags=["state"],
    summary="Current conversational state",
)
async def get_state() -> StateResponse:
    return StateResponse.from_record(session.state())


@app.get(
    "/frame",
    response_model=FrameResponse,
    tags=["state"],
    summary="Current render frame",
    description="State, live particles and screen effects for one frame.",
)
async def get_frame() -> FrameResponse:
    frame = session.frame()
    return FrameResponse(
        state=StateResponse.from_record(frame.state),
        particles=[ParticleModel.from_view(p) for p in frame.particles],
        shake=frame.shake,
        flash=frame.flash,
        background=frame.background,
        flash_word=frame.flash_word,
        mic_volume=frame.mic_volume,
        silence_stage=frame.silence_stage,
    )


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__, clients=len(hub))


# ---------------------------------------------------------------------------
# WebSocket
# ---------------------------------------------------------------------------


@app.websocket("/cable")
async def cable(ws: WebSocket) -> None:
    await ws.accept()
    await hub.add(ws)
    try:
        await ws.send_text(protocol.encode_state(session.state()))
        while True:
            received = await ws.receive()
            if received["type"] == "websocket.disconnect":
                break
            raw = received.get("text")
            if raw is None:
                raw = received.get("bytes")
            try:
                message = protocol.decode_message(raw)
            except protocol.ProtocolError as exc:
                logger.warning("Dropping malformed message: %s", exc)
                continue
            record = protocol.apply_message(session, message)
            if record is not None:
                await hub.broadcast(protocol.encode_record(record))
    except WebSocketDisconnect:
        pass
    finally:
        await hub.remove(ws)


def run_api(host: str = config.HOST, port: int = config.PORT) -> None:
    """Entry point for the word-barrage-api console script."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    uvicorn.run(app, host=host, port=port)
