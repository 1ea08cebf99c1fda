"""Session protocol handler: StartSession, NextStep and Finalize.

The handler is stateless across calls. The client resends the whole
transcript every time; the only things read from storage are the immutable
seed record and the advisory keyword-research cache.
"""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional

from .backend import GeminiBackend, GenerativeBackend
from .config import AppConfig
from .constants import RESEARCH_PHASE_LIMIT
from .errors import InputError, SessionNotFound
from .final import FinalSynthesizer
from .handoff import create_job
from .logger import LOGGER
from .models import (
    Answer,
    Continue,
    DocumentJob,
    Done,
    NextStepOutcome,
    SeedRecord,
    TopicResearch,
    parse_transcript,
)
from .research import TopicResearcher
from .store import SeedStore
from .synthesizer import QuestionSynthesizer
from .termination import TerminationPolicy, templated_skeleton
from .titles import normalize_title_year


class SessionHandler:
    """Ties the store, researcher, synthesizers and termination policy together."""

    def __init__(
        self,
        store: SeedStore,
        synthesizer: QuestionSynthesizer,
        researcher: TopicResearcher,
        final: FinalSynthesizer,
        policy: Optional[TerminationPolicy] = None,
        *,
        research_phase_limit: int = RESEARCH_PHASE_LIMIT,
        year: Optional[int] = None,
    ):
        self.store = store
        self.synthesizer = synthesizer
        self.researcher = researcher
        self.final = final
        self.policy = policy or TerminationPolicy(synthesizer.hard_cap)
        self.research_phase_limit = research_phase_limit
        self.year = year

    # ------------------------------------------------------------------
    # StartSession
    # ------------------------------------------------------------------

    def start_session(self, topic: Any) -> SeedRecord:
        if not isinstance(topic, list) or not topic:
            raise InputError("topic must be a non-empty list of keywords")
        if not all(isinstance(k, str) for k in topic):
            raise InputError("topic keywords must be strings")
        keywords = [k.strip() for k in topic if k.strip()]
        if not keywords:
            raise InputError("topic must contain at least one non-blank keyword")
        return self.store.create(keywords)

    # ------------------------------------------------------------------
    # NextStep
    # ------------------------------------------------------------------

    def next_step(self, session_id: Any, transcript: Any) -> NextStepOutcome:
        seed = self._load_seed(session_id)
        answers = self._coerce_transcript(transcript)
        count = len(answers)

        # Hard cap first: no backend call for the next-step decision.
        if self.policy.cap_reached(count):
            LOGGER.info("Session %s reached the hard cap with %d answers", seed.session_id, count)
            skeleton = templated_skeleton(seed.primary_topic, self.year)
            return NextStepOutcome(done=True, final_brief=self.final.synthesize(seed, answers, skeleton))

        enrichment = self._enrichment(seed, count)
        step = self.synthesizer.next_step(seed.topic, answers, enrichment)

        done = self.policy.resolve(count, step, seed.primary_topic, self.year)
        if done is None and isinstance(step, Continue):
            return NextStepOutcome(done=False, questions=step.questions)

        if done is None:
            done = Done(templated_skeleton(seed.primary_topic, self.year))
        LOGGER.info("Session %s terminated after %d answers", seed.session_id, count)
        return NextStepOutcome(done=True, final_brief=self.final.synthesize(seed, answers, done.skeleton))

    # ------------------------------------------------------------------
    # Finalize
    # ------------------------------------------------------------------

    def finalize(
        self,
        session_id: Any,
        final_brief: Any,
        transcript: Any,
        primary_info: Optional[str] = None,
    ) -> DocumentJob:
        seed = self._load_seed(session_id)
        answers = self._coerce_transcript(transcript)
        if not isinstance(final_brief, dict):
            raise InputError("finalBrief must be an object")

        title = normalize_title_year(self._selected_title(final_brief), self.year).strip()
        if not title:
            raise InputError("finalBrief needs a selectedTitle")

        target_length = final_brief.get("targetLength", final_brief.get("targetChars"))
        if isinstance(target_length, bool) or not isinstance(target_length, int) or target_length <= 0:
            raise InputError("finalBrief.targetLength must be a positive integer")

        job = create_job(
            seed,
            title=title,
            target_length=target_length,
            transcript=answers,
            summary=str(final_brief.get("summary") or ""),
            primary_info=primary_info,
        )
        return self.store.add_job(job)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _load_seed(self, session_id: Any) -> SeedRecord:
        if not isinstance(session_id, str) or not session_id.strip():
            raise InputError("sessionId is required")
        seed = self.store.get(session_id.strip())
        if seed is None:
            raise SessionNotFound(session_id)
        return seed

    @staticmethod
    def _coerce_transcript(transcript: Any) -> List[Answer]:
        if isinstance(transcript, list) and all(isinstance(a, Answer) for a in transcript):
            return list(transcript)
        return parse_transcript(transcript)

    @staticmethod
    def _selected_title(final_brief: Dict[str, Any]) -> str:
        selected = final_brief.get("selectedTitle") or final_brief.get("title")
        if isinstance(selected, str) and selected.strip():
            return selected
        candidates = final_brief.get("titleCandidates")
        if isinstance(candidates, list) and candidates and isinstance(candidates[0], str):
            return candidates[0]
        return ""

    def _enrichment(self, seed: SeedRecord, count: int) -> Optional[TopicResearch]:
        """Keyword research, attempted at most once per session.

        The outcome is stored even when empty, so a failed lookup is not repeated.
        """
        if count >= self.research_phase_limit:
            return None

        cached = self.store.get_research(seed.session_id)
        if cached is not None:
            return None if cached.is_empty() else cached

        research = self.researcher.research(seed.topic)
        try:
            self.store.put_research(seed.session_id, research)
        except sqlite3.Error as exc:
            LOGGER.warning("Could not record keyword research for %s: %s", seed.session_id, exc)
        return None if research.is_empty() else research


def build_handler(
    config: Optional[AppConfig] = None,
    backend: Optional[GenerativeBackend] = None,
    store: Optional[SeedStore] = None,
) -> SessionHandler:
    """Wire a handler from configuration. ``backend`` defaults to Gemini."""
    config = config or AppConfig.get()
    backend = backend or GeminiBackend(config.client, config.models)
    store = store or SeedStore(config.paths.db_path)
    models = config.models

    synthesizer = QuestionSynthesizer(backend, models.question_model, retry_delay=models.retry_delay)
    return SessionHandler(
        store=store,
        synthesizer=synthesizer,
        researcher=TopicResearcher(backend, models.text_model),
        final=FinalSynthesizer(
            backend,
            summary_model=models.text_model,
            title_model=models.question_model,
            artifact_timeout=models.timeout_ms / 1000 * 2,
        ),
    )


__all__ = ["SessionHandler", "build_handler"]
