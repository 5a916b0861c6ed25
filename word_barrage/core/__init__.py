"""Conversational-state engine and word-particle physics.

WHY: The core package holds everything with real algorithmic content:
the tension model, the semantic classifier, the silence escalator, turn
tracking, and the particle integrator, free of any I/O.

HOW: ir.py defines the shared records, styles.py the per-style physics
profiles, one module per component, and session.py composes them into
the lock-guarded BarrageSession that every surface talks to.

RULES:
- No network, audio, or rendering code in this package
- Time and randomness are always injectable
"""
