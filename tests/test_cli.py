"""Tests for the command-line interface."""

from __future__ import annotations

import asyncio
import io
import json
import random

import pytest

from word_barrage import __version__, cli, config
from word_barrage.core.session import BarrageSession
from word_barrage.server import app as app_module


class TestParser:
    def test_serve_defaults(self):
        args = cli.build_parser().parse_args(["serve"])
        assert args.host == config.HOST
        assert args.port == config.PORT

    def test_simulate_options(self):
        args = cli.build_parser().parse_args(
            ["simulate", "--duration", "1.5", "--fps", "30", "--seed", "7"]
        )
        assert args.duration == 1.5
        assert args.fps == 30
        assert args.seed == 7

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.main(["--version"])
        assert exc.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_non_positive_fps_rejected(self):
        with pytest.raises(SystemExit) as exc:
            cli.main(["simulate", "--fps", "0"])
        assert exc.value.code == 2


class TestServe:
    def test_serve_runs_api(self, monkeypatch, capsys):
        calls = []
        monkeypatch.setattr(app_module, "run_api", lambda host, port: calls.append((host, port)))
        cli.main(["serve", "--host", "127.0.0.1", "--port", "9999"])
        assert calls == [("127.0.0.1", 9999)]
        assert "Serving on 127.0.0.1:9999" in capsys.readouterr().err


class TestSimulate:
    def test_state_line(self, session):
        session.spawn_word("hello")
        body = json.loads(cli._state_line(session))
        assert body == {
            "state": "UNKNOWN",
            "tension": 0.0,
            "split_degree": 0.0,
            "particles": 1,
            "silence_stage": 0,
        }

    def test_stdin_utterances_reach_session(self):
        session = BarrageSession(rng=random.Random(1))
        out = io.StringIO()
        asyncio.run(cli._simulate(
            session,
            duration=0.5,
            fps=50,
            authority=None,
            stream=io.StringIO("それは嘘だ\n\n"),
            out=out,
        ))
        lines = [json.loads(line) for line in out.getvalue().splitlines()]
        assert lines
        assert any(line["state"] == "ALIGNED" for line in lines)

    def test_simulate_reports_danger_words(self, monkeypatch, capsys):
        monkeypatch.setenv("BARRAGE_DANGER_WORDS", "foo,bar")
        monkeypatch.setattr("sys.stdin", io.StringIO(""))
        cli.main(["simulate", "--duration", "0.05", "--fps", "50", "--authority", ""])
        assert "Watching 2 danger words" in capsys.readouterr().err
