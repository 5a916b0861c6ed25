"""Unit tests for speaker-side tracking."""

from word_barrage.core.turns import TurnTracker


class TestTurnTracker:
    def test_quick_reply_keeps_side(self, clock):
        tracker = TurnTracker(clock=clock)
        clock.advance(1.0)
        assert tracker.observe(is_conjunction=False) is False
        clock.advance(1.5)
        assert tracker.observe(is_conjunction=False) is False

    def test_long_gap_flips(self, clock):
        tracker = TurnTracker(clock=clock)
        clock.advance(2.5)
        assert tracker.observe(is_conjunction=False) is True
        clock.advance(3.0)
        assert tracker.observe(is_conjunction=False) is False

    def test_gap_of_exactly_two_seconds_does_not_flip(self, clock):
        tracker = TurnTracker(clock=clock)
        clock.advance(2.0)
        assert tracker.observe(is_conjunction=False) is False

    def test_conjunction_flips_without_gap(self, clock):
        tracker = TurnTracker(clock=clock)
        clock.advance(0.5)
        assert tracker.observe(is_conjunction=True) is True

    def test_records_time_after_decision(self, clock):
        tracker = TurnTracker(clock=clock)
        clock.advance(1.9)
        tracker.observe(is_conjunction=False)
        clock.advance(1.9)
        # 1.9s since the previous utterance, not 3.8s since start
        assert tracker.observe(is_conjunction=False) is False
        assert tracker.last_utterance_time == clock.now

    def test_reset(self, clock):
        tracker = TurnTracker(clock=clock)
        tracker.observe(is_conjunction=True)
        tracker.reset()
        assert tracker.side is False
