"""Word Barrage: conversational atmosphere engine for live dialogue.

WHY: A live conversation has a temperature that nobody in the room can
see. This package turns recognized speech and ambient volume into a
visible "atmosphere": a tension model, a semantic classifier, a silence
escalator, and a word-particle simulation that throws short-lived word
glyphs across the screen.

HOW: Three layers: core (pure state machines and the particle
integrator, owned by one session aggregate), protocol (JSON records
exchanged with renderers and remote authorities), and surfaces (FastAPI
state authority, WebSocket follower client, CLI). Each layer is
independently testable.

RULES:
- All mutation of session state happens inside BarrageSession under one lock
- Producers (audio, recognition, network) only enqueue or call locked controls
- Time and randomness are injected so every behaviour is reproducible in tests
"""

__version__ = "0.1.0"
