"""Final synthesis fan-out: summary, six titles and answer statistics."""

from __future__ import annotations

import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from .backend import GenerativeBackend, extract_json_payload, string_list
from .constants import FALLBACK_SUMMARY, SUMMARY_GENERATION, TITLE_CANDIDATE_COUNT, TITLE_GENERATION
from .errors import PayloadError
from .logger import LOGGER
from .models import Answer, AnswerTotals, FinalBrief, FinalBriefSkeleton, SeedRecord
from .prompts import summary_prompt, title_prompt
from .titles import fallback_title_set, finalize_candidates

T = TypeVar("T")


def categorize(transcript: Sequence[Answer]) -> Tuple[Dict[str, List[Answer]], AnswerTotals]:
    """Group answers by category (first-seen order) and tally decisions."""
    grouped: Dict[str, List[Answer]] = {}
    for answer in transcript:
        grouped.setdefault(answer.category, []).append(answer)
    yes_count = sum(1 for a in transcript if a.is_yes)
    totals = AnswerTotals(
        answer_count=len(transcript),
        yes_count=yes_count,
        no_count=len(transcript) - yes_count,
    )
    return grouped, totals


class FinalSynthesizer:
    """Builds the :class:`FinalBrief` when a session terminates.

    Summary and titles are requested concurrently; each has its own fallback,
    so one failing never blocks or cancels the other. Categorization is local.
    """

    MAX_WORKERS = 4

    def __init__(
        self,
        backend: GenerativeBackend,
        *,
        summary_model: str,
        title_model: str,
        artifact_timeout: float = 60.0,
        year: Optional[int] = None,
    ):
        self.backend = backend
        self.summary_model = summary_model
        self.title_model = title_model
        self.artifact_timeout = artifact_timeout
        self.year = year
        self._executor = ThreadPoolExecutor(max_workers=self.MAX_WORKERS, thread_name_prefix="final-synth")

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def synthesize(
        self,
        seed: SeedRecord,
        transcript: Sequence[Answer],
        skeleton: FinalBriefSkeleton,
    ) -> FinalBrief:
        t0 = time.time()
        summary_future = self._executor.submit(self._summary, seed, transcript)
        titles_future = self._executor.submit(self._titles, seed, transcript)

        grouped, totals = categorize(transcript)

        # One deadline for both artifacts, measured from submission
        wait([summary_future, titles_future], timeout=max(0.0, self.artifact_timeout - (time.time() - t0)))
        summary = self._collect(summary_future, "summary", lambda: FALLBACK_SUMMARY)
        raw_titles = self._collect(titles_future, "titles", lambda: None)

        if raw_titles:
            candidates = finalize_candidates(raw_titles, skeleton.title, self.year)
        else:
            angles = fallback_title_set(seed.primary_topic, self.year)
            candidates = finalize_candidates([skeleton.title, *angles[1:]], skeleton.title, self.year)

        LOGGER.info(
            "Final brief for %s: %d answers (%d yes / %d no), %d categories, %.1fs",
            seed.session_id,
            totals.answer_count,
            totals.yes_count,
            totals.no_count,
            len(grouped),
            time.time() - t0,
        )
        return FinalBrief(
            title_candidates=candidates,
            selected_title=candidates[0],
            target_length=skeleton.target_length,
            summary=summary,
            categorized_answers=grouped,
            totals=totals,
        )

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False)

    # -----------------------------------------------------------------
    # Artifacts
    # -----------------------------------------------------------------

    def _summary(self, seed: SeedRecord, transcript: Sequence[Answer]) -> str:
        max_tokens, temperature = SUMMARY_GENERATION
        text = self.backend.generate(
            summary_prompt(seed.topic, transcript),
            model=self.summary_model,
            max_output_tokens=max_tokens,
            temperature=temperature,
        ).strip()
        if not text:
            raise PayloadError("empty summary")
        return text

    def _titles(self, seed: SeedRecord, transcript: Sequence[Answer]) -> List[str]:
        max_tokens, temperature = TITLE_GENERATION
        raw = self.backend.generate(
            title_prompt(seed.topic, transcript, year=self._year(), count=TITLE_CANDIDATE_COUNT),
            model=self.title_model,
            max_output_tokens=max_tokens,
            temperature=temperature,
        )
        return string_list(extract_json_payload(raw).get("titles"), key="title")

    def _collect(self, future: "Future[T]", name: str, fallback: Callable[[], T]) -> T:
        if not future.done():
            # Still queued or running past the deadline; drop it if it never started
            future.cancel()
            LOGGER.warning("Final %s timed out after %.1fs, using fallback", name, self.artifact_timeout)
            return fallback()
        try:
            return future.result()
        except Exception as exc:
            LOGGER.warning("Final %s failed, using fallback: %s", name, exc)
            return fallback()

    def _year(self) -> int:
        if self.year is not None:
            return self.year
        return time.localtime().tm_year


__all__ = ["FinalSynthesizer", "categorize"]
