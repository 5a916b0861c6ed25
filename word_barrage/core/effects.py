"""Auxiliary screen effects: shake, flash, and background tint.

WHY: Impact words do more than spawn a glyph; the whole screen jolts
and flashes, and the background slowly takes on the colour of the
conversation. These are renderer inputs that the core has to keep
decaying between words.

HOW: EffectDecay holds two accumulators that spawns bump and every tick
decays. BackgroundTint holds a target colour, retargeted on each word,
and a displayed colour that eases toward it.

RULES:
- shake *= 0.9 per tick and snaps to 0 below 0.5
- flash *= 0.85 per tick, never snapped
- SPLIT forces the alert target; conjunctions force a neutral grey target
- Otherwise the target hue comes from a CRC32 of the utterance text
- Displayed colour moves 5% of the remaining distance per tick, per channel
"""

from __future__ import annotations

import colorsys
import zlib
from typing import Tuple

from word_barrage import config
from word_barrage.core.ir import ConversationalState, WordStyle

RGB = Tuple[float, float, float]

ALERT_COLOR: RGB = (60.0, 0.0, 0.0)
NEUTRAL_COLOR: RGB = (40.0, 40.0, 40.0)
BASE_COLOR: RGB = (10.0, 10.0, 10.0)

HUE_SATURATION = 0.6
HUE_VALUE = 0.25


class EffectDecay:
    """Shake and flash accumulators."""

    def __init__(self) -> None:
        self.shake = 0.0
        self.flash = 0.0

    def add_shake(self, amount: float) -> None:
        self.shake += amount

    def trigger_flash(self) -> None:
        self.flash = 1.0

    def tick(self) -> None:
        self.shake *= config.SHAKE_DECAY
        if self.shake < config.SHAKE_SNAP:
            self.shake = 0.0
        self.flash *= config.FLASH_DECAY

    def reset(self) -> None:
        self.shake = 0.0
        self.flash = 0.0


def text_hue_color(text: str) -> RGB:
    """Map text to a dark, saturated colour through a stable hash."""
    hue = (zlib.crc32(text.encode("utf-8")) % 360) / 360.0
    r, g, b = colorsys.hsv_to_rgb(hue, HUE_SATURATION, HUE_VALUE)
    return (r * 255.0, g * 255.0, b * 255.0)


class BackgroundTint:
    """Target/displayed background colour pair."""

    def __init__(self) -> None:
        self.target: RGB = BASE_COLOR
        self.current: RGB = BASE_COLOR

    def retarget(self, text: str, style: WordStyle, state: ConversationalState) -> None:
        if state == ConversationalState.SPLIT:
            self.target = ALERT_COLOR
        elif style.is_silence:
            return
        elif style == WordStyle.CONJUNCTION:
            self.target = NEUTRAL_COLOR
        else:
            self.target = text_hue_color(text)

    def step(self, state: ConversationalState | None = None) -> None:
        if state == ConversationalState.SPLIT:
            self.target = ALERT_COLOR
        rate = config.BACKGROUND_LERP
        self.current = tuple(  # type: ignore[assignment]
            c + (t - c) * rate for c, t in zip(self.current, self.target)
        )

    def rgb(self) -> Tuple[int, int, int]:
        r, g, b = self.current
        return (int(round(r)), int(round(g)), int(round(b)))

    def reset(self) -> None:
        self.target = BASE_COLOR
        self.current = BASE_COLOR
