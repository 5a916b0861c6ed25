"""Configuration constants, keyword tables, and .env loading.

WHY: Centralizes every tunable value of the atmosphere engine (keyword
lists, screen geometry, timing, network endpoints) so they are easy to
find and override. Keyword tables are plain data, not buried in the
classifier, so a facilitator can adapt them to a new workshop without
touching logic.

HOW: python-dotenv loads the .env file on import. Constants are
module-level tuples, floats and strings. Values that differ between
venues (screen size, port, danger words) can be overridden through
environment variables.

RULES:
- Keyword tables are tuples of substrings; matching is substring containment
- BARRAGE_DANGER_WORDS (comma-separated) replaces the default danger words
- Geometry is in screen pixels, timing in seconds, physics in pixels per tick
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the working directory
load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


# ---------------------------------------------------------------------------
# Keyword tables
# ---------------------------------------------------------------------------

DEFAULT_DANGER_WORDS: tuple[str, ...] = (
    "矛盾", "ふざけるな", "嘘", "絶対", "違う", "変", "おかしい",
)
"""Words that spike tension by +3.0 when they appear in an utterance."""

IMPACT_WORDS: tuple[str, ...] = ("絶対", "嘘", "違う", "矛盾", "変", "おかしい")

VERTICAL_WORDS: tuple[str, ...] = ("上下", "天井", "逆さま")
HORIZONTAL_WORDS: tuple[str, ...] = ("左右", "鏡")
COLOR_WORDS: tuple[str, ...] = ("色", "カラー")
INVERT_WORDS: tuple[str, ...] = ("反転", "逆")
DIFFERENT_WORDS: tuple[str, ...] = ("反転", "違う")

CONJUNCTION_WORDS: tuple[str, ...] = (
    "でも", "しかし", "だが", "逆に", "とは言え", "けど", "反対に",
)
HESITATION_WORDS: tuple[str, ...] = (
    "えっと", "うーん", "あの", "多分", "かな", "なんか", "えー",
)
QUESTION_MARKS: tuple[str, ...] = ("?", "？")


def load_danger_words() -> tuple[str, ...]:
    """Return the configured danger words.

    RULES:
    - BARRAGE_DANGER_WORDS, when set, is split on commas; blanks are dropped
    - Falls back to DEFAULT_DANGER_WORDS when unset or empty
    """
    raw = os.getenv("BARRAGE_DANGER_WORDS", "")
    words = tuple(w.strip() for w in raw.split(",") if w.strip())
    return words or DEFAULT_DANGER_WORDS


# ---------------------------------------------------------------------------
# Tension model
# ---------------------------------------------------------------------------

DANGER_INCREMENT = 3.0
ACTIVITY_INCREMENT = 0.2
TENSION_DECAY_PER_S = 0.5
SPLIT_THRESHOLD = 8.0
ALIGNED_THRESHOLD = 2.0
SPLIT_DEGREE_SCALE = 10.0

# ---------------------------------------------------------------------------
# Silence escalation: (threshold seconds, text, style, color tag, scale, vy)
# ---------------------------------------------------------------------------

SILENCE_STAGES: tuple[tuple[float, str, str, str, float, float | None], ...] = (
    (2.0, "…", "silence_dots", "grey_alpha", 0.8, None),
    (5.0, "間", "silence_ma", "blue_white", 1.0, 0.0),
    (8.0, "沈黙", "silence_heavy", "dark_grey", 1.5, 15.0),
    (12.0, "静寂", "silence_abyss", "black", 2.0, -1.0),
)
SILENCE_LOOP_INTERVAL_S = 5.0
SILENCE_LOOP_TEXT = "…"
SILENCE_LOOP_SCALE = 1.0

# ---------------------------------------------------------------------------
# Turn taking
# ---------------------------------------------------------------------------

TURN_GAP_S = 2.0

# ---------------------------------------------------------------------------
# Screen geometry and physics
# ---------------------------------------------------------------------------

SCREEN_WIDTH = _env_int("BARRAGE_SCREEN_WIDTH", 1920)
SCREEN_HEIGHT = _env_int("BARRAGE_SCREEN_HEIGHT", 1080)
FLOOR_MARGIN = 60.0
WALL_MARGIN = 40.0

GRAVITY = 0.25
FILLER_GRAVITY_SCALE = 0.2
FRICTION = 0.98
FLOOR_RESTITUTION = -0.6
FLOOR_FRICTION = 0.8
WALL_RESTITUTION = -0.8
REST_SPEED = 1.0
FILLER_MAX_LENGTH = 3

SHAKE_DECAY = 0.9
SHAKE_SNAP = 0.5
FLASH_DECAY = 0.85
BACKGROUND_LERP = 0.05

# ---------------------------------------------------------------------------
# Audio smoothing and queues
# ---------------------------------------------------------------------------

VOLUME_GAIN = 8.0
VOLUME_DECAY = 0.92
VOLUME_IDLE_DECAY = 0.95
QUEUE_SIZE = 10

FLASH_TTL_TICKS = 60

# ---------------------------------------------------------------------------
# Runtime / network
# ---------------------------------------------------------------------------

TICK_RATE = _env_int("BARRAGE_TICK_RATE", 60)
STATE_BROADCAST_INTERVAL_S = 1.0
HOST = os.getenv("BARRAGE_HOST", "0.0.0.0")
PORT = _env_int("BARRAGE_PORT", 4567)
AUTHORITY_URL = os.getenv("BARRAGE_AUTHORITY_URL", "")
RECONNECT_BACKOFF_S = _env_float("BARRAGE_RECONNECT_BACKOFF_S", 2.0)
