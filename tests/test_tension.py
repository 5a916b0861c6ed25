"""Unit tests for the tension state machine.

WHY: Tension is the single number the whole atmosphere hangs off. An
off-by-one in the banding or a negative value after decay would flip
the background to the wrong state for everyone in the room.

HOW: A FakeClock drives decay exactly. Tests cover increments, decay,
clamping, exact band edges, split degree, reset, and the hand-off to
the silence escalator.
"""

import random

import pytest

from word_barrage import config
from word_barrage.core.ir import ConversationalState
from word_barrage.core.silence import SilenceEscalator
from word_barrage.core.tension import TensionStateMachine, classify_tension


@pytest.fixture
def machine(clock):
    return TensionStateMachine(danger_words=["矛盾", "嘘"], clock=clock)


class TestIncrements:
    def test_danger_word_adds_three(self, machine):
        assert machine.process("それは矛盾している") is True
        assert machine.tension == pytest.approx(3.0)

    def test_plain_utterance_adds_point_two(self, machine):
        assert machine.process("こんにちは") is False
        assert machine.tension == pytest.approx(0.2)

    def test_multiple_danger_words_still_add_three(self, machine):
        machine.process("嘘だ、矛盾だ")
        assert machine.tension == pytest.approx(3.0)


class TestDecay:
    def test_linear_decay(self, machine, clock):
        machine.process("嘘")
        clock.advance(2.0)
        assert machine.get_state().tension == pytest.approx(2.0)

    def test_never_negative(self, machine, clock):
        machine.process("hello")
        clock.advance(100.0)
        record = machine.get_state()
        assert record.tension == 0.0
        assert record.state == ConversationalState.UNKNOWN

    def test_random_sequences_stay_non_negative(self, clock):
        machine = TensionStateMachine(danger_words=["嘘"], clock=clock)
        rnd = random.Random(7)
        for _ in range(500):
            clock.advance(rnd.uniform(0.0, 4.0))
            if rnd.random() < 0.5:
                machine.process(rnd.choice(["嘘", "うん", "そう"]))
            assert machine.get_state().tension >= 0.0


class TestBanding:
    @pytest.mark.parametrize(
        "tension, expected",
        [
            (0.0, ConversationalState.UNKNOWN),
            (2.0, ConversationalState.UNKNOWN),
            (2.0001, ConversationalState.ALIGNED),
            (8.0, ConversationalState.ALIGNED),
            (8.0001, ConversationalState.SPLIT),
            (50.0, ConversationalState.SPLIT),
        ],
    )
    def test_band_edges(self, tension, expected):
        assert classify_tension(tension) == expected

    def test_three_danger_words_split(self, machine):
        for _ in range(3):
            machine.process("嘘")
        assert machine.get_state().state == ConversationalState.SPLIT

    def test_one_danger_word_aligned(self, machine):
        machine.process("嘘")
        assert machine.get_state().state == ConversationalState.ALIGNED


class TestStateRecord:
    def test_split_degree_is_tension_over_ten(self, machine):
        machine.process("嘘")
        machine.process("矛盾")
        assert machine.get_state().split_degree == pytest.approx(0.6)

    def test_split_degree_clamped(self, machine):
        for _ in range(5):
            machine.process("嘘")
        assert machine.get_state().split_degree == 1.0

    def test_reset_clears(self, machine):
        machine.process("嘘")
        machine.reset()
        record = machine.get_state()
        assert record.tension == 0.0
        assert record.state == ConversationalState.UNKNOWN

    def test_overwrite_clamps_negative(self, machine):
        machine.overwrite(-4.0)
        assert machine.tension == 0.0

    def test_overwrite_reclassifies(self, machine):
        machine.overwrite(9.5)
        assert machine.state == ConversationalState.SPLIT


class TestSilenceHandOff:
    def test_process_resets_silence(self, clock):
        silence = SilenceEscalator(clock=clock)
        machine = TensionStateMachine(danger_words=["嘘"], clock=clock, silence=silence)
        clock.advance(3.0)
        assert silence.check_silence() is not None
        assert silence.stage == 1

        machine.process("はい")
        assert silence.stage == 0
        assert silence.last_speech_time == clock.now


class TestDangerWordConfig:
    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("BARRAGE_DANGER_WORDS", "foo, bar ,,")
        assert config.load_danger_words() == ("foo", "bar")

    def test_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("BARRAGE_DANGER_WORDS", raising=False)
        assert config.load_danger_words() == config.DEFAULT_DANGER_WORDS

    def test_machine_reads_env_words(self, monkeypatch, clock):
        monkeypatch.setenv("BARRAGE_DANGER_WORDS", "foo,bar")
        machine = TensionStateMachine(clock=clock)
        assert machine.danger_words == ("foo", "bar")
        assert machine.process("a foo b") is True

    def test_explicit_words_win_over_env(self, monkeypatch, clock):
        monkeypatch.setenv("BARRAGE_DANGER_WORDS", "foo")
        machine = TensionStateMachine(danger_words=["嘘"], clock=clock)
        assert machine.danger_words == ("嘘",)
