"""Elapsed-silence timer producing staged ambient word configs.

WHY: Silence is part of the conversation too. The longer nobody speaks,
the heavier the glyphs that drift onto the screen: dots, then 間, then
沈黙 falling like a weight, then 静寂 rising from below.

HOW: Silence duration is always recomputed from last_speech_time, so a
skipped or late check simply catches up on the next call. Each call
advances at most one stage. After stage 4 the escalator loops, emitting
dots every SILENCE_LOOP_INTERVAL_S without advancing further.

RULES:
- Stage thresholds (s): 0→1 >2.0, 1→2 >5.0, 2→3 >8.0, 3→4 >12.0
- First loop emission at >17.0 s, then every 5.0 s after that
- At most one emission per check_silence() call
- mark_speech() resets last_speech_time and the stage to 0
"""

from __future__ import annotations

import time
from typing import Callable

from word_barrage import config
from word_barrage.core.ir import ColorTag, WordSpawnConfig, WordStyle

MAX_STAGE = len(config.SILENCE_STAGES)


class SilenceEscalator:
    """Five-stage silence automaton (0 = talking, 4 = abyss)."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self.last_speech_time = clock()
        self.stage = 0
        self._next_loop_s = 0.0

    def mark_speech(self, now: float | None = None) -> None:
        self.last_speech_time = self._clock() if now is None else now
        self.stage = 0

    def silence_duration(self, now: float | None = None) -> float:
        now = self._clock() if now is None else now
        return now - self.last_speech_time

    def check_silence(self, now: float | None = None) -> WordSpawnConfig | None:
        """Return the next silence config if a threshold was crossed, else None."""
        duration = self.silence_duration(now)

        if self.stage < MAX_STAGE:
            threshold, text, style, color, scale, vy = config.SILENCE_STAGES[self.stage]
            if duration <= threshold:
                return None
            self.stage += 1
            if self.stage == MAX_STAGE:
                self._next_loop_s = threshold + config.SILENCE_LOOP_INTERVAL_S
            return WordSpawnConfig(
                text=text,
                style=WordStyle(style),
                color=ColorTag(color),
                scale=scale,
                vy=vy,
            )

        if duration > self._next_loop_s:
            self._next_loop_s += config.SILENCE_LOOP_INTERVAL_S
            return WordSpawnConfig(
                text=config.SILENCE_LOOP_TEXT,
                style=WordStyle.SILENCE_DOTS,
                color=ColorTag.GREY_ALPHA,
                scale=config.SILENCE_LOOP_SCALE,
            )
        return None

    def reset(self) -> None:
        self.mark_speech()
