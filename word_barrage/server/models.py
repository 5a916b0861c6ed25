"""Pydantic request/response models for the HTTP API.

WHY: The control endpoints take small JSON bodies from admin tools and
recognition bridges. Pydantic enforces field types at the edge and
generates JSON Schema for the /docs UI, so a malformed request never
reaches the session.

HOW: One model per request body and per response shape. Field
descriptions feed the OpenAPI documentation.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- style is a free string; unknown tags fall back to "normal" in the session
- Numeric overrides must be finite (NaN and Infinity are rejected with 422)
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from word_barrage.core.ir import FlashRecord, ParticleView, StateRecord


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class UtteranceRequest(BaseModel):
    """A recognized utterance pushed by a speech-recognition bridge."""

    text: str = Field(min_length=1, description="Recognized utterance text.")


class FlashRequest(BaseModel):
    word: str = Field(min_length=1, description="Word to flash full-screen.")
    ttl: Optional[int] = Field(
        default=None,
        ge=1,
        description="Display time in ticks. Defaults to 60.",
    )


class SpawnWordRequest(BaseModel):
    """Manually spawn one word with explicit overrides.

    RULES:
    - Omitted overrides use the style's physics defaults
    - Unknown style and color tags are accepted and ignored
    """

    text: str = Field(min_length=1, description="Glyph text to spawn.")
    style: str = Field(default="normal", description="Style tag, e.g. 'impact', 'silence_heavy'.")
    scale: Optional[float] = Field(default=None, allow_inf_nan=False, description="Absolute glyph scale.")
    scale_x: Optional[float] = Field(default=None, allow_inf_nan=False, description="Horizontal mirror sign (1 or -1).")
    rotation: Optional[float] = Field(default=None, allow_inf_nan=False, description="Rotation in radians.")
    color: Optional[str] = Field(default=None, description="Color tag, e.g. 'red', 'cyan'.")
    vy: Optional[float] = Field(default=None, allow_inf_nan=False, description="Absolute vertical velocity.")
    vy_multiplier: float = Field(default=1.0, allow_inf_nan=False, description="Multiplier applied after vy.")
    flash: bool = Field(default=False, description="Trigger the screen flash.")
    shake: float = Field(default=0.0, ge=0.0, allow_inf_nan=False, description="Screen shake to add.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class StateResponse(BaseModel):
    state: str = Field(description="UNKNOWN, ALIGNED, or SPLIT.")
    tension: float = Field(description="Current tension (>= 0).")
    split_degree: float = Field(description="tension / 10 clamped to [0, 1].")

    @classmethod
    def from_record(cls, record: StateRecord) -> "StateResponse":
        return cls(**record.to_dict())


class FlashResponse(BaseModel):
    word: str = Field(description="Flashed word.")
    ttl: int = Field(description="Display time in ticks.")

    @classmethod
    def from_record(cls, record: FlashRecord) -> "FlashResponse":
        return cls(**record.to_dict())


class AcceptedResponse(BaseModel):
    accepted: bool = Field(description="False when the input queue was full and the item was dropped.")


class ParticleModel(BaseModel):
    text: str
    style: str
    x: float
    y: float
    rotation: float
    scale: float
    scale_x: float
    color: Tuple[int, int, int, int]
    life: int
    max_life: int
    glitch: bool

    @classmethod
    def from_view(cls, view: ParticleView) -> "ParticleModel":
        return cls(
            text=view.text,
            style=view.style,
            x=view.x,
            y=view.y,
            rotation=view.rotation,
            scale=view.scale,
            scale_x=view.scale_x,
            color=view.color,
            life=view.life,
            max_life=view.max_life,
            glitch=view.glitch,
        )


class FrameResponse(BaseModel):
    """Everything a renderer needs to draw the current frame."""

    state: StateResponse
    particles: List[ParticleModel]
    shake: float = Field(description="Screen shake magnitude in pixels.")
    flash: float = Field(description="Flash intensity, 0..1.")
    background: Tuple[int, int, int] = Field(description="Background RGB.")
    flash_word: Optional[str] = Field(default=None, description="Word being flashed, if any.")
    mic_volume: float = Field(description="Smoothed microphone volume.")
    silence_stage: int = Field(description="Silence escalation stage, 0-4.")


class HealthResponse(BaseModel):
    status: str = Field(description="'ok' when the tick loop is running.")
    version: str = Field(description="Package version.")
    clients: int = Field(description="Connected WebSocket clients.")
