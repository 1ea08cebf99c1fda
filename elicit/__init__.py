"""
Adaptive elicitation engine.

A session starts from a few seed keywords; each round the engine asks a batch
of yes/no questions synthesized by a generative model, and once enough is known
it produces a final brief (summary, title candidates, categorized answers)
that can be handed to the document generator.
"""

from __future__ import annotations

__all__ = [
    "backend",
    "config",
    "constants",
    "database",
    "errors",
    "final",
    "handler",
    "handoff",
    "logger",
    "models",
    "prompts",
    "research",
    "store",
    "synthesizer",
    "termination",
    "titles",
]  # pragma: no cover
