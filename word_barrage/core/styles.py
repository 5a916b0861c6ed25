"""Per-style physics profiles for spawned words.

WHY: Each style throws its glyph differently. Impact words erupt from
the middle, heavy silence falls from above, the abyss rises from below.
Keeping those defaults in one table, one profile per style, means the
simulator never has to guess what an unfamiliar style tag should do.

HOW: StyleProfile is a frozen dataclass carrying only physics defaults.
PROFILES maps every WordStyle member to exactly one profile; a module
level check makes a missing entry an import-time error.

RULES:
- placement is one of the Placement members; the simulator handles each
- scale_factor multiplies the volume-derived scale when fixed_scale is None
- gravity_scale multiplies GRAVITY (filler scaling is applied on top)
- base_color is the color before config overrides and the SPLIT override
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from word_barrage.core.ir import ColorTag, WordStyle


class Placement(str, enum.Enum):
    """Where a glyph starts and how it is launched."""

    ERUPTION = "eruption"        # screen centre ± jitter, random burst
    SCATTER = "scatter"          # uniform point, slow drift
    HOVER = "hover"              # upper-middle third, static
    FALL = "fall"                # random x above the top edge
    RISE = "rise"                # random x below the bottom edge
    THROW = "throw"              # speaker side band, thrown across


@dataclass(frozen=True)
class StyleProfile:
    placement: Placement
    life: int
    base_color: ColorTag
    fixed_scale: float | None = None
    scale_factor: float = 1.0
    start_vy: float = 0.0
    gravity_scale: float = 1.0


_THROW = StyleProfile(placement=Placement.THROW, life=600, base_color=ColorTag.WHITE)
_ERUPTION = StyleProfile(
    placement=Placement.ERUPTION,
    life=300,
    base_color=ColorTag.RED,
    scale_factor=1.5,
)

PROFILES: dict[WordStyle, StyleProfile] = {
    WordStyle.NORMAL: _THROW,
    WordStyle.CONJUNCTION: _THROW,
    WordStyle.HESITATION: _THROW,
    WordStyle.QUESTION: _THROW,
    WordStyle.INVERT_V: _THROW,
    WordStyle.INVERT_H: _THROW,
    WordStyle.INVERT_C: _THROW,
    WordStyle.IMPACT: _ERUPTION,
    WordStyle.GLITCH: _ERUPTION,
    WordStyle.SILENCE_DOTS: StyleProfile(
        placement=Placement.SCATTER,
        life=300,
        base_color=ColorTag.GREY_ALPHA,
        fixed_scale=1.0,
        gravity_scale=0.0,
    ),
    WordStyle.SILENCE_MA: StyleProfile(
        placement=Placement.HOVER,
        life=800,
        base_color=ColorTag.BLUE_WHITE,
        fixed_scale=3.0,
        gravity_scale=0.0,
    ),
    WordStyle.SILENCE_HEAVY: StyleProfile(
        placement=Placement.FALL,
        life=1000,
        base_color=ColorTag.DARK_GREY,
        fixed_scale=5.0,
        start_vy=15.0,
    ),
    WordStyle.SILENCE_ABYSS: StyleProfile(
        placement=Placement.RISE,
        life=1200,
        base_color=ColorTag.BLACK,
        fixed_scale=7.0,
        start_vy=-1.0,
        gravity_scale=0.0,
    ),
}

_missing = set(WordStyle) - set(PROFILES)
if _missing:
    raise RuntimeError("styles without a physics profile: {}".format(sorted(_missing)))


def profile_for(style: WordStyle | str) -> StyleProfile:
    """Look up the profile for a style; unknown tags get the normal profile."""
    return PROFILES[WordStyle.parse(style)]
