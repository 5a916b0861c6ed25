"""The single owning aggregate for one live atmosphere session.

WHY: Tension, silence stage, speaker side, mic volume and the particle
barrage are all mutated from several places: the tick loop, audio and
recognition producers, HTTP and WebSocket control messages. Scattered
fields invite interleaved updates; one owner behind one lock does not.

HOW: BarrageSession composes the core components and exposes two kinds
of entry points:
  producers: submit_volume() and submit_text(), non-blocking enqueue into
             bounded queues, safe from any thread, never touch state
  locked:    tick(), reset(), flash(), spawn_word(), apply_remote_state(),
             state(), frame(): acquire the session lock
tick() drains whatever the producers queued, applies it, checks silence,
steps the simulation and effects, and reports what happened.

RULES:
- All state mutation happens under self._lock
- Queues are bounded (QUEUE_SIZE); overflow is dropped, never blocks
- No queued volume sample → smoothed volume decays by 0.95
- Silence is only checked on ticks that processed no utterance
- reset() clears tension, silence stage, speaker side, effects and the
  barrage in one locked step
- In follower mode state() reports the last remote record verbatim
"""

from __future__ import annotations

import logging
import queue
import random
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from word_barrage import config
from word_barrage.core.classifier import SemanticClassifier
from word_barrage.core.effects import BackgroundTint, EffectDecay
from word_barrage.core.ir import (
    ColorTag,
    ConversationalState,
    FlashRecord,
    ParticleView,
    StateRecord,
    WordSpawnConfig,
    WordStyle,
)
from word_barrage.core.particles import ParticleSimulator
from word_barrage.core.silence import SilenceEscalator
from word_barrage.core.tension import TensionStateMachine
from word_barrage.core.turns import TurnTracker

logger = logging.getLogger(__name__)


@dataclass
class TickReport:
    """What one tick did, for broadcasters and logs."""

    utterances: List[str] = field(default_factory=list)
    spawned: List[WordSpawnConfig] = field(default_factory=list)


@dataclass(frozen=True)
class Frame:
    """Everything a renderer needs to draw one frame."""

    state: StateRecord
    particles: Tuple[ParticleView, ...]
    shake: float
    flash: float
    background: Tuple[int, int, int]
    flash_word: Optional[str]
    mic_volume: float
    silence_stage: int


class BarrageSession:
    """Owns all conversational and particle state for one session."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
        danger_words: Optional[List[str]] = None,
        width: float = config.SCREEN_WIDTH,
        height: float = config.SCREEN_HEIGHT,
        follower: bool = False,
    ) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self.follower = follower

        self.silence = SilenceEscalator(clock=clock)
        self.tension = TensionStateMachine(
            danger_words=danger_words, clock=clock, silence=self.silence
        )
        self.classifier = SemanticClassifier()
        self.turns = TurnTracker(clock=clock)
        self.effects = EffectDecay()
        self.background = BackgroundTint()
        self.simulator = ParticleSimulator(
            rng=rng, effects=self.effects, width=width, height=height
        )

        self.mic_volume = 0.0
        self.flash_word: Optional[str] = None
        self.flash_ttl = 0
        self._remote_state: Optional[StateRecord] = None

        self._volume_queue: "queue.Queue[float]" = queue.Queue(maxsize=config.QUEUE_SIZE)
        self._text_queue: "queue.Queue[str]" = queue.Queue(maxsize=config.QUEUE_SIZE)

    # ------------------------------------------------------------------
    # Producers (any thread, never blocks)
    # ------------------------------------------------------------------

    def submit_volume(self, level: float) -> bool:
        try:
            self._volume_queue.put_nowait(float(level))
        except queue.Full:
            logger.debug("Volume queue full, dropping sample %.3f", level)
            return False
        return True

    def submit_text(self, text: str) -> bool:
        text = text.strip()
        if not text:
            return False
        try:
            self._text_queue.put_nowait(text)
        except queue.Full:
            logger.debug("Text queue full, dropping %r", text)
            return False
        return True

    # ------------------------------------------------------------------
    # Tick loop
    # ------------------------------------------------------------------

    def tick(self) -> TickReport:
        """Run one fixed simulation step."""
        report = TickReport()
        with self._lock:
            self._drain_volume()

            for text in _drain(self._text_queue):
                report.utterances.append(text)
                report.spawned.append(self._handle_utterance(text))

            if not report.utterances:
                silence_config = self.silence.check_silence()
                if silence_config is not None:
                    self._spawn(silence_config, self._current_state().state)
                    report.spawned.append(silence_config)

            state = self._current_state().state
            self.simulator.tick()
            self.effects.tick()
            self.background.step(state)
            if self.flash_ttl > 0:
                self.flash_ttl -= 1
                if self.flash_ttl == 0:
                    self.flash_word = None
        return report

    def _drain_volume(self) -> None:
        samples = _drain(self._volume_queue)
        if not samples:
            self.mic_volume *= config.VOLUME_IDLE_DECAY
            return
        for level in samples:
            target = level * config.VOLUME_GAIN
            if target > self.mic_volume:
                self.mic_volume = target
            else:
                self.mic_volume *= config.VOLUME_DECAY

    def _handle_utterance(self, text: str) -> WordSpawnConfig:
        self.tension.process(text)
        spawn_config = self.classifier.classify(text)
        self.turns.observe(spawn_config.style == WordStyle.CONJUNCTION)
        state = self._current_state().state
        self._spawn(spawn_config, state)
        return spawn_config

    def _spawn(self, spawn_config: WordSpawnConfig, state: ConversationalState) -> None:
        self.simulator.spawn(spawn_config, state, self.turns.side, self.mic_volume)
        self.background.retarget(spawn_config.text, spawn_config.style, state)

    def _current_state(self) -> StateRecord:
        if self.follower and self._remote_state is not None:
            return self._remote_state
        return self.tension.get_state()

    # ------------------------------------------------------------------
    # Control (locked)
    # ------------------------------------------------------------------

    def reset(self) -> None:
        with self._lock:
            self.tension.reset()
            self.silence.reset()
            self.turns.reset()
            self.simulator.clear()
            self.effects.reset()
            self.background.reset()
            self.flash_word = None
            self.flash_ttl = 0
            self._remote_state = None
            _drain(self._text_queue)
        logger.info("Session reset")

    def flash(self, word: str, ttl: int = config.FLASH_TTL_TICKS) -> FlashRecord:
        with self._lock:
            self.flash_word = word
            self.flash_ttl = ttl
            self.effects.trigger_flash()
        return FlashRecord(word=word, ttl=ttl)

    def spawn_word(
        self,
        text: str,
        style: str = "normal",
        scale: Optional[float] = None,
        scale_x: Optional[float] = None,
        rotation: Optional[float] = None,
        color: Optional[str] = None,
        vy: Optional[float] = None,
        vy_multiplier: float = 1.0,
        flash: bool = False,
        shake: float = 0.0,
    ) -> WordSpawnConfig:
        """Spawn a manually specified word; unknown style tags spawn as normal."""
        spawn_config = WordSpawnConfig(
            text=text,
            style=WordStyle.parse(style),
            scale=scale,
            scale_x=scale_x,
            rotation=rotation,
            color=ColorTag.parse(color),
            vy=vy,
            vy_multiplier=vy_multiplier,
            flash=flash,
            shake=shake,
        )
        with self._lock:
            self._spawn(spawn_config, self._current_state().state)
        return spawn_config

    def apply_remote_state(self, record: StateRecord) -> None:
        """Overwrite conversational state with a record from the authority."""
        with self._lock:
            self._remote_state = record
            self.tension.overwrite(record.tension)

    # ------------------------------------------------------------------
    # Observation (locked)
    # ------------------------------------------------------------------

    def state(self) -> StateRecord:
        with self._lock:
            return self._current_state()

    def frame(self) -> Frame:
        with self._lock:
            return Frame(
                state=self._current_state(),
                particles=tuple(self.simulator.views()),
                shake=self.effects.shake,
                flash=self.effects.flash,
                background=self.background.rgb(),
                flash_word=self.flash_word,
                mic_volume=self.mic_volume,
                silence_stage=self.silence.stage,
            )


def _drain(q: "queue.Queue") -> list:
    """Pop everything currently queued without blocking."""
    items = []
    while True:
        try:
            items.append(q.get_nowait())
        except queue.Empty:
            return items
