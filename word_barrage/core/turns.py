"""Abstract speaker-side tracking.

There is no diarization in the live pipeline, so turn-taking is
approximated: a pause longer than TURN_GAP_S or a conjunction ("but",
"however") is read as the other side of the room taking over. The side
decides which edge of the screen a word is thrown from.
"""

from __future__ import annotations

import time
from typing import Callable

from word_barrage import config


class TurnTracker:
    """Flips a binary speaker side on long gaps and conjunctions."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        gap_s: float = config.TURN_GAP_S,
    ) -> None:
        self._clock = clock
        self._gap_s = gap_s
        self.side = False  # False = left, True = right
        self.last_utterance_time = clock()

    def observe(self, is_conjunction: bool, now: float | None = None) -> bool:
        """Record a non-silence utterance and return the side it belongs to."""
        now = self._clock() if now is None else now
        if now - self.last_utterance_time > self._gap_s or is_conjunction:
            self.side = not self.side
        self.last_utterance_time = now
        return self.side

    def reset(self) -> None:
        self.side = False
        self.last_utterance_time = self._clock()
