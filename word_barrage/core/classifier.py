"""Ordered keyword rules mapping an utterance to a word spawn config.

WHY: How a word moves should say something about what it means. A hard
contradiction should hit the screen, an "upside down" should flip, a
"but" should turn the glyph around, and an "um" should drift quietly.

HOW: Rules are evaluated top to bottom and the first match wins. Keyword
sets overlap (e.g. 違う is both an impact word and a color-inversion
cue), so the order below is part of the behaviour:

  1. impact: impact word
  2. invert_v: vertical cue + invert cue
  3. invert_h: horizontal cue + invert cue
  4. invert_c: color cue + invert/different cue
  5. conjunction: conjunction word
  6. hesitation: hesitation word
  7. question: question mark
  8. normal: default

RULES:
- Matching is plain substring containment on the raw utterance
- Every result is a complete WordSpawnConfig
- The default result leaves scale unset so the volume-derived scale applies
"""

from __future__ import annotations

import math
from typing import Iterable

from word_barrage import config
from word_barrage.core.ir import ColorTag, WordSpawnConfig, WordStyle


def _contains_any(text: str, words: Iterable[str]) -> bool:
    return any(word in text for word in words)


class SemanticClassifier:
    """First-match-wins keyword classifier."""

    def __init__(
        self,
        impact_words: Iterable[str] = config.IMPACT_WORDS,
        conjunction_words: Iterable[str] = config.CONJUNCTION_WORDS,
        hesitation_words: Iterable[str] = config.HESITATION_WORDS,
    ) -> None:
        self.impact_words = tuple(impact_words)
        self.conjunction_words = tuple(conjunction_words)
        self.hesitation_words = tuple(hesitation_words)

    def classify(self, text: str) -> WordSpawnConfig:
        if _contains_any(text, self.impact_words):
            return WordSpawnConfig(
                text=text,
                style=WordStyle.IMPACT,
                flash=True,
                shake=20.0,
                color=ColorTag.RED,
                scale=2.5,
                scale_x=1.0,
                rotation=0.0,
            )

        inverted = _contains_any(text, config.INVERT_WORDS)

        if inverted and _contains_any(text, config.VERTICAL_WORDS):
            return WordSpawnConfig(
                text=text,
                style=WordStyle.INVERT_V,
                rotation=math.pi,
                vy_multiplier=-1.0,
                color=ColorTag.CYAN,
                scale_x=1.0,
            )

        if inverted and _contains_any(text, config.HORIZONTAL_WORDS):
            return WordSpawnConfig(
                text=text,
                style=WordStyle.INVERT_H,
                scale_x=-1.0,
                rotation=0.0,
                color=ColorTag.CYAN,
            )

        if _contains_any(text, config.COLOR_WORDS) and _contains_any(text, config.DIFFERENT_WORDS):
            return WordSpawnConfig(
                text=text,
                style=WordStyle.INVERT_C,
                color=ColorTag.CYAN,
                scale_x=1.0,
                rotation=0.0,
            )

        if _contains_any(text, self.conjunction_words):
            return WordSpawnConfig(
                text=text,
                style=WordStyle.CONJUNCTION,
                scale_x=-1.0,
                rotation=math.pi,
                color=ColorTag.YELLOW,
            )

        if _contains_any(text, self.hesitation_words):
            return WordSpawnConfig(
                text=text,
                style=WordStyle.HESITATION,
                color=ColorTag.GREY,
                scale_x=1.0,
                rotation=0.0,
            )

        if _contains_any(text, config.QUESTION_MARKS):
            return WordSpawnConfig(
                text=text,
                style=WordStyle.QUESTION,
                color=ColorTag.WHITE,
                scale_x=1.0,
                rotation=0.0,
            )

        return default_config(text)


def default_config(text: str) -> WordSpawnConfig:
    """The rule-7 default: normal style, white, unmirrored, upright."""
    return WordSpawnConfig(
        text=text,
        style=WordStyle.NORMAL,
        scale_x=1.0,
        rotation=0.0,
        color=ColorTag.WHITE,
        vy_multiplier=1.0,
    )
