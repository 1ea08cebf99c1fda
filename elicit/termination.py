"""Session termination rules."""

from __future__ import annotations

from typing import Optional

from .constants import DEFAULT_TARGET_LENGTH, HARD_CAP
from .models import Done, FinalBriefSkeleton, StepResult
from .titles import default_title


def templated_skeleton(primary: str, year: Optional[int] = None) -> FinalBriefSkeleton:
    """Skeleton used whenever the session ends without a model-proposed title."""
    return FinalBriefSkeleton(title=default_title(primary, year), target_length=DEFAULT_TARGET_LENGTH)


class TerminationPolicy:
    """A session ends when the transcript hits the hard cap or the synthesizer says so.

    The cap is checked first and wins over anything the synthesizer returns.
    """

    def __init__(self, hard_cap: int = HARD_CAP):
        self.hard_cap = hard_cap

    def cap_reached(self, transcript_len: int) -> bool:
        return transcript_len >= self.hard_cap

    def should_terminate(self, transcript_len: int, step: Optional[StepResult] = None) -> bool:
        return self.cap_reached(transcript_len) or isinstance(step, Done)

    def resolve(
        self,
        transcript_len: int,
        step: Optional[StepResult],
        primary: str,
        year: Optional[int] = None,
    ) -> Optional[Done]:
        """Return the effective ``Done`` for this call, or None to keep asking."""
        if self.cap_reached(transcript_len):
            return Done(templated_skeleton(primary, year))
        if isinstance(step, Done):
            return step
        return None


__all__ = ["TerminationPolicy", "templated_skeleton"]
