"""Batch question synthesis: the next set of yes/no cards, or the signal to stop."""

from __future__ import annotations

import re
import time
from datetime import datetime
from typing import Any, List, Optional, Sequence

from .backend import GenerativeBackend, extract_json_payload
from .constants import (
    FALLBACK_BATCH_SIZE,
    HARD_CAP,
    MAX_BATCH_SIZE,
    MAX_PARSE_ATTEMPTS,
    NEXT_STEP_GENERATION,
)
from .errors import PayloadError
from .logger import LOGGER
from .models import (
    Answer,
    Continue,
    Done,
    FinalBriefSkeleton,
    Question,
    StepResult,
    TopicResearch,
    coerce_target_length,
)
from .prompts import next_step_prompt
from .termination import templated_skeleton
from .titles import normalize_title_year

_LINE_BREAKS = re.compile(r"\s*[\r\n]+\s*")


def single_line(text: Any) -> str:
    """Drop every line break together with the whitespace around it."""
    return _LINE_BREAKS.sub("", "" if text is None else str(text)).strip()


def _is_done(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value is True


def parse_step(raw: str, year: Optional[int] = None) -> StepResult:
    """Validate one backend response into a :class:`StepResult`.

    Raises:
        PayloadError: the response does not satisfy the continue/done contract.
    """
    data = extract_json_payload(raw)

    if _is_done(data.get("done")):
        final = data.get("finalData")
        if not isinstance(final, dict):
            raise PayloadError("done without finalData")
        title = normalize_title_year(final.get("title"), year).strip()
        if not title:
            raise PayloadError("done without a title")
        length = final.get("targetChars", final.get("targetLength"))
        if length is None:
            raise PayloadError("done without a target length")
        return Done(FinalBriefSkeleton(title=title, target_length=coerce_target_length(length)))

    items = data.get("questions")
    if not isinstance(items, list) or not items:
        raise PayloadError("no questions in response")

    batch: List[Question] = []
    for item in items:
        if isinstance(item, dict):
            text = single_line(item.get("question", item.get("text")))
            category = single_line(item.get("category"))
        else:
            text, category = single_line(item), ""
        if text:
            batch.append(Question.mint(text, category))

    if not batch:
        raise PayloadError("every question was empty after line-break removal")
    return Continue(batch[:MAX_BATCH_SIZE])


def fallback_questions(primary: str) -> List[Question]:
    templates = [
        (f"「{primary}」について詳しく説明しますか？", "記事の方向性"),
        ("初心者向けの内容にしますか？", "ターゲット読者"),
        ("比較記事の形式にしますか？", "記事タイプ"),
    ]
    return [Question.mint(text, category) for text, category in templates[:FALLBACK_BATCH_SIZE]]


class QuestionSynthesizer:
    """Asks the backend for the next batch of questions or a final brief skeleton.

    Every attempt re-issues the backend request; after ``max_attempts``
    failures a deterministic local result is returned instead. ``next_step``
    never raises for backend faults.
    """

    def __init__(
        self,
        backend: GenerativeBackend,
        model: str,
        *,
        max_attempts: int = MAX_PARSE_ATTEMPTS,
        retry_delay: float = 0.5,
        hard_cap: int = HARD_CAP,
        year: Optional[int] = None,
    ):
        self.backend = backend
        self.model = model
        self.max_attempts = max(1, max_attempts)
        self.retry_delay = retry_delay
        self.hard_cap = hard_cap
        self.year = year

    def next_step(
        self,
        topic: Sequence[str],
        transcript: Sequence[Answer],
        enrichment: Optional[TopicResearch] = None,
    ) -> StepResult:
        primary = topic[0].strip()
        if len(transcript) >= self.hard_cap:
            LOGGER.info("Hard cap reached (%d answers); skipping backend", len(transcript))
            return Done(templated_skeleton(primary, self.year))

        keywords = enrichment.merged() if enrichment is not None else []
        prompt = next_step_prompt(topic, transcript, keywords, year=self._year())
        max_tokens, temperature = NEXT_STEP_GENERATION

        for attempt in range(1, self.max_attempts + 1):
            try:
                raw = self.backend.generate(
                    prompt,
                    model=self.model,
                    max_output_tokens=max_tokens,
                    temperature=temperature,
                )
                step = parse_step(raw, self.year)
            except Exception as exc:
                LOGGER.warning(
                    "Next-step attempt %d/%d failed (%d answers): %s",
                    attempt, self.max_attempts, len(transcript), exc,
                )
                if attempt < self.max_attempts and self.retry_delay > 0:
                    time.sleep(self.retry_delay)
                continue

            if isinstance(step, Continue):
                LOGGER.info("Synthesized %d questions after %d answers", len(step.questions), len(transcript))
            else:
                LOGGER.info("Synthesizer finished the session: %s", step.skeleton.title)
            return step

        LOGGER.warning("Next-step synthesis exhausted %d attempts; using fallback", self.max_attempts)
        return self.fallback(primary, len(transcript))

    def fallback(self, primary: str, transcript_len: int) -> StepResult:
        if transcript_len < self.hard_cap:
            return Continue(fallback_questions(primary))
        return Done(templated_skeleton(primary, self.year))

    def _year(self) -> int:
        return self.year if self.year is not None else datetime.now().year


__all__ = ["QuestionSynthesizer", "fallback_questions", "parse_step", "single_line"]
