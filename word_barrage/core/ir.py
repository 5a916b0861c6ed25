"""Intermediate representation dataclasses for the atmosphere engine.

WHY: The classifier, the silence escalator, the particle simulator and
the renderers all talk about the same few things: a conversational
state, a word spawn request, a live word particle. Giving them one
well-typed home decouples the producers of spawn requests from the
simulator that consumes them, and the simulator from the renderers.

HOW: Enums for the closed sets (state, style, color tag) and dataclasses
for the records:
  WordSpawnConfig: a fully resolved request to spawn one word glyph
  WordParticle:    one live glyph owned by the simulator
  ParticleView:    the immutable copy of a particle handed to renderers
  StateRecord:     {state, tension, split_degree} as broadcast to clients
  FlashRecord:     {word, ttl} as broadcast to clients

RULES:
- WordStyle.parse() never raises; unknown tags become NORMAL
- Optional WordSpawnConfig fields mean "use the style default"
- A particle's glyph handle belongs to that particle only and is never copied
  into a ParticleView
- Colors are (r, g, b, a) tuples of 0-255 ints
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Tuple

RGBA = Tuple[int, int, int, int]


class ConversationalState(str, enum.Enum):
    """Three-way classification of tension.

    Inherits from str so values serialize cleanly to JSON.
    """

    UNKNOWN = "UNKNOWN"
    ALIGNED = "ALIGNED"
    SPLIT = "SPLIT"


class WordStyle(str, enum.Enum):
    """Closed set of style tags a spawn request may carry."""

    NORMAL = "normal"
    IMPACT = "impact"
    GLITCH = "glitch"
    INVERT_V = "invert_v"
    INVERT_H = "invert_h"
    INVERT_C = "invert_c"
    CONJUNCTION = "conjunction"
    HESITATION = "hesitation"
    QUESTION = "question"
    SILENCE_DOTS = "silence_dots"
    SILENCE_MA = "silence_ma"
    SILENCE_HEAVY = "silence_heavy"
    SILENCE_ABYSS = "silence_abyss"

    @classmethod
    def parse(cls, tag: str | WordStyle | None) -> WordStyle:
        """Map a raw tag to a style, falling back to NORMAL for unknown tags."""
        if isinstance(tag, WordStyle):
            return tag
        try:
            return cls(str(tag).strip().lower())
        except ValueError:
            return cls.NORMAL

    @property
    def is_silence(self) -> bool:
        return self in _SILENCE_STYLES


_SILENCE_STYLES = frozenset({
    WordStyle.SILENCE_DOTS,
    WordStyle.SILENCE_MA,
    WordStyle.SILENCE_HEAVY,
    WordStyle.SILENCE_ABYSS,
})


class ColorTag(str, enum.Enum):
    """Symbolic colors used by spawn requests; resolved to RGBA by the simulator."""

    WHITE = "white"
    RED = "red"
    CYAN = "cyan"
    YELLOW = "yellow"
    GREY = "grey"
    GREY_ALPHA = "grey_alpha"
    BLUE_WHITE = "blue_white"
    DARK_GREY = "dark_grey"
    BLACK = "black"

    @classmethod
    def parse(cls, tag: str | ColorTag | None) -> ColorTag | None:
        if tag is None or isinstance(tag, ColorTag):
            return tag
        try:
            return cls(str(tag).strip().lower())
        except ValueError:
            return None


COLOR_TABLE: dict[ColorTag, RGBA] = {
    ColorTag.WHITE: (240, 240, 240, 255),
    ColorTag.RED: (198, 40, 40, 255),
    ColorTag.CYAN: (0, 229, 255, 255),
    ColorTag.YELLOW: (253, 216, 53, 255),
    ColorTag.GREY: (150, 150, 150, 255),
    ColorTag.GREY_ALPHA: (160, 160, 160, 110),
    ColorTag.BLUE_WHITE: (210, 228, 255, 230),
    ColorTag.DARK_GREY: (70, 70, 70, 255),
    ColorTag.BLACK: (12, 12, 14, 255),
}


@dataclass
class WordSpawnConfig:
    """A request to spawn one word glyph.

    WHY: The classifier, the silence escalator and manual spawn commands
    all produce the same kind of request; the simulator consumes it
    without knowing where it came from.

    RULES:
    - style is always a WordStyle (callers parse raw tags first)
    - scale / scale_x / rotation / vy / color None → style default applies
    - vy_multiplier is applied after vy, default 1.0
    - flash sets the flash accumulator to 1.0; shake adds to the shake accumulator
    """

    text: str
    style: WordStyle = WordStyle.NORMAL
    scale: float | None = None
    scale_x: float | None = None
    rotation: float | None = None
    color: ColorTag | None = None
    vy: float | None = None
    vy_multiplier: float = 1.0
    flash: bool = False
    shake: float = 0.0


@dataclass
class WordParticle:
    """One live word glyph in the barrage.

    RULES:
    - life drops by exactly 1 per tick; the particle is removed at life <= 0
    - resting particles keep aging but no longer integrate
    - glyph is the renderer's rasterized handle, set lazily on first draw
    """

    text: str
    style: WordStyle
    x: float
    y: float
    vx: float
    vy: float
    rotation: float
    angular_velocity: float
    scale: float
    scale_x: float
    color: RGBA
    life: int
    max_life: int
    resting: bool = False
    is_filler: bool = False
    glitch: bool = False
    glyph: Any = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class ParticleView:
    """Read-only copy of a particle for renderers."""

    text: str
    style: str
    x: float
    y: float
    rotation: float
    scale: float
    scale_x: float
    color: RGBA
    life: int
    max_life: int
    glitch: bool

    @classmethod
    def of(cls, particle: WordParticle) -> ParticleView:
        return cls(
            text=particle.text,
            style=particle.style.value,
            x=particle.x,
            y=particle.y,
            rotation=particle.rotation,
            scale=particle.scale,
            scale_x=particle.scale_x,
            color=particle.color,
            life=particle.life,
            max_life=particle.max_life,
            glitch=particle.glitch,
        )


@dataclass(frozen=True)
class StateRecord:
    """Periodic state broadcast: {state, tension, split_degree}."""

    state: ConversationalState
    tension: float
    split_degree: float

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "tension": self.tension,
            "split_degree": self.split_degree,
        }


@dataclass(frozen=True)
class FlashRecord:
    """Flash broadcast: a word to show full-screen for ``ttl`` ticks."""

    word: str
    ttl: int

    def to_dict(self) -> dict:
        return {"word": self.word, "ttl": self.ttl}
