"""Command-line interface for Word Barrage.

WHY: Operators need two things from a terminal: start the state
authority for a venue, and run a session headless to rehearse keyword
lists, watch the tension curve, or follow a remote authority without a
display attached.

HOW: argparse with two subcommands.
  serve:     run the FastAPI authority under uvicorn
  simulate:  run a BarrageSession at --fps for --duration seconds;
             utterances are read from stdin lines on a daemon thread;
             one JSON state line per second goes to stdout; with
             --authority the session follows a remote authority and
             local utterances are forwarded to it

RULES:
- Status output goes to stderr (not stdout), state lines to stdout
- --duration 0 runs until interrupted
- --seed makes particle placement reproducible
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import random
import sys
import threading
import time
from typing import List, Optional, TextIO

from word_barrage import __version__, config
from word_barrage.core.session import BarrageSession
from word_barrage.remote import AuthorityClient


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _state_line(session: BarrageSession) -> str:
    frame = session.frame()
    body = frame.state.to_dict()
    body["particles"] = len(frame.particles)
    body["silence_stage"] = frame.silence_stage
    return json.dumps(body, ensure_ascii=False)


def _start_reader(
    session: BarrageSession,
    stream: TextIO,
    loop: asyncio.AbstractEventLoop,
    client: Optional[AuthorityClient],
) -> threading.Thread:
    """Feed stdin lines into the session from a daemon thread."""

    def _read() -> None:
        for line in stream:
            text = line.strip()
            if not text:
                continue
            session.submit_text(text)
            if client is not None:
                asyncio.run_coroutine_threadsafe(client.forward_utterance(text), loop)

    thread = threading.Thread(target=_read, name="utterance-reader", daemon=True)
    thread.start()
    return thread


async def _simulate(
    session: BarrageSession,
    duration: float,
    fps: int,
    authority: Optional[str],
    stream: TextIO,
    out: TextIO,
) -> None:
    loop = asyncio.get_running_loop()
    client = AuthorityClient(session, url=authority) if authority else None
    follow_task = asyncio.create_task(client.run()) if client else None
    _start_reader(session, stream, loop, client)

    interval = 1.0 / fps
    started = time.monotonic()
    next_report = started + config.STATE_BROADCAST_INTERVAL_S
    try:
        while duration <= 0 or time.monotonic() - started < duration:
            report = session.tick()
            now = time.monotonic()
            if report.utterances or now >= next_report:
                print(_state_line(session), file=out, flush=True)
                if now >= next_report:
                    next_report = now + config.STATE_BROADCAST_INTERVAL_S
            await asyncio.sleep(interval)
    finally:
        if client is not None and follow_task is not None:
            client.stop()
            follow_task.cancel()
            try:
                await follow_task
            except asyncio.CancelledError:
                pass


def _run_simulate(args: argparse.Namespace) -> None:
    rng = random.Random(args.seed) if args.seed is not None else None
    session = BarrageSession(rng=rng)
    _status("Watching {} danger words".format(len(session.tension.danger_words)))
    _status("Simulating at {} fps{}".format(
        args.fps,
        ", following {}".format(args.authority) if args.authority else "",
    ))
    try:
        asyncio.run(_simulate(
            session,
            duration=args.duration,
            fps=args.fps,
            authority=args.authority,
            stream=sys.stdin,
            out=sys.stdout,
        ))
    except KeyboardInterrupt:
        _status("Interrupted")


def _run_serve(args: argparse.Namespace) -> None:
    from word_barrage.server.app import run_api

    _status("Serving on {}:{}".format(args.host, args.port))
    run_api(host=args.host, port=args.port)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="word-barrage",
        description="Conversational atmosphere engine: tension, silence, and word particles.",
    )
    parser.add_argument("--version", action="version", version="%(prog)s " + __version__)
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the state authority server.")
    serve.add_argument("--host", default=config.HOST, help="Bind address (default: %(default)s).")
    serve.add_argument("--port", type=int, default=config.PORT, help="Port (default: %(default)s).")
    serve.set_defaults(func=_run_serve)

    simulate = sub.add_parser("simulate", help="Run a headless session fed from stdin.")
    simulate.add_argument(
        "--duration", type=float, default=0.0,
        help="Seconds to run; 0 runs until interrupted (default: %(default)s).",
    )
    simulate.add_argument(
        "--fps", type=int, default=config.TICK_RATE,
        help="Ticks per second (default: %(default)s).",
    )
    simulate.add_argument("--seed", type=int, default=None, help="Seed for particle randomness.")
    simulate.add_argument(
        "--authority", default=config.AUTHORITY_URL or None,
        help="ws:// URL of a remote authority's /cable endpoint to follow.",
    )
    simulate.set_defaults(func=_run_simulate)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "simulate" and args.fps <= 0:
        parser.error("--fps must be positive")
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    args.func(args)
