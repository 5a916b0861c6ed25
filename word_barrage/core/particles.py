"""Word-particle simulator: spawning and fixed-step integration.

WHY: This is the barrage itself. Every recognized utterance and every
silence stage becomes a glyph that is thrown, falls, bounces off the
floor, settles, and fades. How violently it moves is what makes the
conversation's state visible at a glance.

HOW: spawn() resolves a WordSpawnConfig against the style's physics
profile (see styles.py), applies the config's explicit overrides, and
appends a WordParticle. tick() advances every particle by one fixed
step (gravity, integration, friction, floor and wall collision) and
then ages it, pruning particles whose life has run out.

RULES:
- Volume scale: clamp(1 + volume * 3, 1, 4) + uniform(0, 0.5)
- Override order: rotation, scale_x, vy (absolute), vy multiplier, scale, color
- SPLIT state or glitch style forces red and doubles both velocity components
- Filler words (short or hesitation, never silence) get 0.2x gravity
- Floor: clamp, vy *= -0.6, vx *= 0.8; |vy| < 1 → resting, vy = 0
- Walls: vx *= -0.8 plus one extra position step
- Life decreases by exactly 1 per tick, resting or not; removed at life <= 0
- No particle-particle interaction
"""

from __future__ import annotations

import logging
import random
from typing import List

from word_barrage import config
from word_barrage.core.effects import EffectDecay
from word_barrage.core.ir import (
    COLOR_TABLE,
    ColorTag,
    ConversationalState,
    ParticleView,
    WordParticle,
    WordSpawnConfig,
    WordStyle,
)
from word_barrage.core.styles import Placement, StyleProfile, profile_for

logger = logging.getLogger(__name__)

THROW_SPEED = (5.0, 10.0)
ERUPTION_SPEED = 10.0
DRIFT_SPEED = 0.5
SPIN = 0.05
OFFSCREEN_MARGIN = 100.0


def nuance_scale(mic_volume: float) -> float:
    """Volume-derived base scale in [1, 4]."""
    return min(max(1.0 + mic_volume * 3.0, 1.0), 4.0)


def is_filler(text: str, style: WordStyle) -> bool:
    if style.is_silence:
        return False
    return len(text) <= config.FILLER_MAX_LENGTH or style == WordStyle.HESITATION


class ParticleSimulator:
    """Owns the live barrage and integrates it one tick at a time.

    WHY: Particles are mutated every tick and spawned from several
    sources. One owner keeps the collection consistent; everything
    outside gets ParticleView copies.

    RULES:
    - rng drives every random choice; pass a seeded Random for repeatable runs
    - effects receives the shake/flash side effects of spawns
    - width/height define the screen; the floor sits FLOOR_MARGIN above the bottom
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        effects: EffectDecay | None = None,
        width: float = config.SCREEN_WIDTH,
        height: float = config.SCREEN_HEIGHT,
    ) -> None:
        self.rng = rng or random.Random()
        self.effects = effects or EffectDecay()
        self.width = float(width)
        self.height = float(height)
        self.floor_y = self.height - config.FLOOR_MARGIN
        self._particles: List[WordParticle] = []

    def __len__(self) -> int:
        return len(self._particles)

    # ------------------------------------------------------------------
    # Spawning
    # ------------------------------------------------------------------

    def spawn(
        self,
        spawn_config: WordSpawnConfig,
        state: ConversationalState = ConversationalState.UNKNOWN,
        speaker_side: bool = False,
        mic_volume: float = 0.0,
    ) -> WordParticle:
        """Create one particle from a spawn config and add it to the barrage."""
        style = WordStyle.parse(spawn_config.style)
        profile = profile_for(style)

        if profile.fixed_scale is not None:
            scale = profile.fixed_scale
        else:
            scale = (nuance_scale(mic_volume) + self.rng.uniform(0.0, 0.5)) * profile.scale_factor

        x, y, vx, vy = self._launch(profile, state, speaker_side)
        angular_velocity = 0.0
        if profile.placement in (Placement.THROW, Placement.ERUPTION):
            angular_velocity = self.rng.uniform(-SPIN, SPIN)
        rotation = 0.0
        scale_x = 1.0
        color = COLOR_TABLE[profile.base_color]

        if spawn_config.rotation is not None:
            rotation = spawn_config.rotation
        if spawn_config.scale_x is not None:
            scale_x = spawn_config.scale_x
        if spawn_config.vy is not None:
            vy = spawn_config.vy
        vy *= spawn_config.vy_multiplier
        if spawn_config.scale is not None:
            scale = spawn_config.scale
        tag = ColorTag.parse(spawn_config.color)
        if tag is not None:
            color = COLOR_TABLE[tag]

        if spawn_config.shake:
            self.effects.add_shake(spawn_config.shake)
        if spawn_config.flash:
            self.effects.trigger_flash()

        glitch = style == WordStyle.GLITCH
        if state == ConversationalState.SPLIT or glitch:
            color = COLOR_TABLE[ColorTag.RED]
            vx *= 2.0
            vy *= 2.0

        particle = WordParticle(
            text=spawn_config.text,
            style=style,
            x=x,
            y=y,
            vx=vx,
            vy=vy,
            rotation=rotation,
            angular_velocity=angular_velocity,
            scale=scale,
            scale_x=scale_x,
            color=color,
            life=profile.life,
            max_life=profile.life,
            is_filler=is_filler(spawn_config.text, style),
            glitch=glitch,
        )
        self._particles.append(particle)
        logger.debug("Spawned %r (%s) at (%.0f, %.0f)", particle.text, style.value, x, y)
        return particle

    def spawn_text(
        self,
        text: str,
        glitch: bool = False,
        state: ConversationalState = ConversationalState.UNKNOWN,
        speaker_side: bool = False,
        mic_volume: float = 0.0,
    ) -> WordParticle:
        """Spawn a bare word: glitch style when flagged, otherwise normal."""
        style = WordStyle.GLITCH if glitch else WordStyle.NORMAL
        return self.spawn(WordSpawnConfig(text=text, style=style), state, speaker_side, mic_volume)

    def _launch(
        self,
        profile: StyleProfile,
        state: ConversationalState,
        speaker_side: bool,
    ) -> tuple[float, float, float, float]:
        """Start position and velocity (x, y, vx, vy) for a profile."""
        rng = self.rng
        w, h = self.width, self.height
        margin = config.WALL_MARGIN
        placement = profile.placement

        if placement == Placement.ERUPTION:
            x = w / 2.0 + rng.uniform(-w * 0.15, w * 0.15)
            y = h / 2.0 + rng.uniform(-h * 0.15, h * 0.15)
            return x, y, rng.uniform(-ERUPTION_SPEED, ERUPTION_SPEED), rng.uniform(-ERUPTION_SPEED, ERUPTION_SPEED)

        if placement == Placement.SCATTER:
            x = rng.uniform(margin, w - margin)
            y = rng.uniform(0.0, self.floor_y)
            return x, y, rng.uniform(-DRIFT_SPEED, DRIFT_SPEED), rng.uniform(-DRIFT_SPEED, DRIFT_SPEED)

        if placement == Placement.HOVER:
            return w / 2.0, h / 3.0, 0.0, 0.0

        if placement == Placement.FALL:
            return rng.uniform(margin, w - margin), -OFFSCREEN_MARGIN, 0.0, profile.start_vy

        if placement == Placement.RISE:
            return rng.uniform(margin, w - margin), h + OFFSCREEN_MARGIN, 0.0, profile.start_vy

        if placement == Placement.THROW:
            speed_x = rng.uniform(*THROW_SPEED)
            vy = -rng.uniform(*THROW_SPEED)
            if state == ConversationalState.SPLIT:
                direction = rng.choice((-1.0, 1.0))
                return w / 2.0, h * 0.6, direction * speed_x, vy
            # Left side throws right, right side throws left
            x = w * (0.8 if speaker_side else 0.2)
            y = h * 0.6 + rng.uniform(-h * 0.1, h * 0.1)
            return x, y, (-speed_x if speaker_side else speed_x), vy

        raise ValueError("unhandled placement: {}".format(placement))

    # ------------------------------------------------------------------
    # Integration
    # ------------------------------------------------------------------

    def tick(self) -> None:
        """Advance every particle one step and drop the expired ones."""
        survivors: List[WordParticle] = []
        for particle in self._particles:
            if not particle.resting:
                self._integrate(particle)
                self.collide(particle)
            particle.life -= 1
            if particle.life > 0:
                survivors.append(particle)
            else:
                particle.glyph = None
        self._particles = survivors

    def _integrate(self, p: WordParticle) -> None:
        gravity = config.GRAVITY * profile_for(p.style).gravity_scale
        if p.is_filler:
            gravity *= config.FILLER_GRAVITY_SCALE
        p.vy += gravity
        p.x += p.vx
        p.y += p.vy
        p.rotation += p.angular_velocity
        p.vx *= config.FRICTION
        p.angular_velocity *= config.FRICTION

    def collide(self, p: WordParticle) -> None:
        """Resolve floor and wall contact for one particle."""
        if p.y > self.floor_y and p.vy > 0:
            p.y = self.floor_y
            p.vy *= config.FLOOR_RESTITUTION
            p.vx *= config.FLOOR_FRICTION
            if abs(p.vy) < config.REST_SPEED:
                p.resting = True
                p.vy = 0.0

        margin = config.WALL_MARGIN
        if (p.x < margin and p.vx < 0) or (p.x > self.width - margin and p.vx > 0):
            p.vx *= config.WALL_RESTITUTION
            p.x += p.vx

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def views(self) -> List[ParticleView]:
        return [ParticleView.of(p) for p in self._particles]

    def clear(self) -> None:
        for particle in self._particles:
            particle.glyph = None
        self._particles = []
