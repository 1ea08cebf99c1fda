"""Keyword research used to ground the early question batches."""

from __future__ import annotations

from typing import Sequence

from .backend import GenerativeBackend, extract_json_payload, string_list
from .constants import RESEARCH_GENERATION
from .logger import LOGGER
from .models import TopicResearch
from .prompts import keyword_research_prompt


class TopicResearcher:
    """Expands a seed topic into related / target / long-tail / competitor keywords.

    Soft-fails: any problem yields an empty :class:`TopicResearch`.
    """

    def __init__(self, backend: GenerativeBackend, model: str):
        self.backend = backend
        self.model = model

    def research(self, topic: Sequence[str]) -> TopicResearch:
        max_tokens, temperature = RESEARCH_GENERATION
        try:
            raw = self.backend.generate(
                keyword_research_prompt(topic),
                model=self.model,
                max_output_tokens=max_tokens,
                temperature=temperature,
            )
            data = extract_json_payload(raw)
        except Exception as exc:
            LOGGER.warning("Keyword research failed for %s: %s", list(topic), exc)
            return TopicResearch.empty()

        research = TopicResearch(
            related=string_list(data.get("relatedKeywords")),
            target=string_list(data.get("targetKeywords")),
            long_tail=string_list(data.get("longTailKeywords")),
            competitor=string_list(data.get("competitorKeywords")),
        )
        if research.is_empty():
            LOGGER.warning("Keyword research returned no keywords for %s", list(topic))
            return TopicResearch.empty()

        LOGGER.info("Keyword research found %d keywords for %s", len(research.merged()), topic[0])
        return research


__all__ = ["TopicResearcher"]
