"""Scalar conversational-tension model with linear decay.

WHY: The atmosphere needs one number that says how heated the room is.
Danger words spike it, ordinary talk nudges it, and silence lets it cool
off. The renderer only cares about the band the number falls in.

HOW: Tension is stored as a float alongside the time of the last
recalculation. Every observation (process, get_state) first subtracts
the decay accrued since then, clamps at zero, and reclassifies.

RULES:
- process(): +3.0 on any danger word, otherwise +0.2, then recalculate
- recalculate(): tension -= dt * 0.5, clamped at 0
- SPLIT if tension > 8.0, ALIGNED if tension > 2.0, else UNKNOWN
- split_degree = clamp(tension / 10, 0, 1)
- process() also marks speech on the attached silence escalator
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Callable, Iterable

from word_barrage import config
from word_barrage.core.ir import ConversationalState, StateRecord

if TYPE_CHECKING:
    from word_barrage.core.silence import SilenceEscalator


def classify_tension(tension: float) -> ConversationalState:
    """Band a tension value into a conversational state."""
    if tension > config.SPLIT_THRESHOLD:
        return ConversationalState.SPLIT
    if tension > config.ALIGNED_THRESHOLD:
        return ConversationalState.ALIGNED
    return ConversationalState.UNKNOWN


class TensionStateMachine:
    """Tension accumulator with continuous cooling."""

    def __init__(
        self,
        danger_words: Iterable[str] | None = None,
        clock: Callable[[], float] = time.monotonic,
        silence: SilenceEscalator | None = None,
    ) -> None:
        self._danger_words = tuple(
            danger_words if danger_words is not None else config.load_danger_words()
        )
        self._clock = clock
        self._silence = silence
        self.tension = 0.0
        self.state = ConversationalState.UNKNOWN
        self._last_update = clock()

    @property
    def danger_words(self) -> tuple[str, ...]:
        return self._danger_words

    def is_danger(self, text: str) -> bool:
        return any(word in text for word in self._danger_words)

    def process(self, text: str) -> bool:
        """Register an utterance. Returns True when it contained a danger word."""
        if self._silence is not None:
            self._silence.mark_speech()

        hit = self.is_danger(text)
        self.tension += config.DANGER_INCREMENT if hit else config.ACTIVITY_INCREMENT
        self.recalculate()
        return hit

    def recalculate(self) -> ConversationalState:
        now = self._clock()
        dt = now - self._last_update
        self._last_update = now

        self.tension = max(0.0, self.tension - dt * config.TENSION_DECAY_PER_S)
        self.state = classify_tension(self.tension)
        return self.state

    def get_state(self) -> StateRecord:
        self.recalculate()
        return StateRecord(
            state=self.state,
            tension=self.tension,
            split_degree=min(max(self.tension / config.SPLIT_DEGREE_SCALE, 0.0), 1.0),
        )

    def overwrite(self, tension: float) -> None:
        """Replace tension with a value received from a remote authority."""
        self.tension = max(0.0, float(tension))
        self._last_update = self._clock()
        self.state = classify_tension(self.tension)

    def reset(self) -> None:
        self.tension = 0.0
        self.state = ConversationalState.UNKNOWN
        self._last_update = self._clock()
