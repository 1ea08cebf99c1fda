"""Exception hierarchy for the elicitation engine.

Only :class:`InputError` (and its subclasses) ever reaches a caller of the
session protocol. Backend and payload errors are raised inside the engine and
absorbed by the retry/fallback paths.
"""

from __future__ import annotations


class ElicitationError(Exception):
    """Base class for all engine errors."""


class InputError(ElicitationError):
    """The caller sent something the protocol cannot accept."""


class SessionNotFound(InputError):
    """No seed record exists for the given session id."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class BackendError(ElicitationError):
    """The generative backend failed to answer (transport, timeout, empty text)."""


class PayloadError(ElicitationError):
    """The backend answered, but the answer violates the expected contract."""


__all__ = ["ElicitationError", "InputError", "SessionNotFound", "BackendError", "PayloadError"]
