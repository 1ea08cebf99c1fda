"""Data model for elicitation sessions.

Everything here is a plain dataclass. Wire dictionaries use camelCase keys,
attributes use snake_case; ``to_dict``/``from_dict`` translate between them.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Sequence, Union

from .constants import (
    DECISIONS,
    DEFAULT_ANSWER_CATEGORY,
    DEFAULT_QUESTION_CATEGORY,
    DEFAULT_TARGET_LENGTH,
    TARGET_LENGTHS,
)
from .errors import InputError


def coerce_target_length(value: Any) -> int:
    """Snap any numeric-looking value onto the nearest allowed target length."""
    try:
        number = int(float(value))
    except (TypeError, ValueError):
        return DEFAULT_TARGET_LENGTH
    if number <= 0:
        return DEFAULT_TARGET_LENGTH
    return min(TARGET_LENGTHS, key=lambda allowed: (abs(allowed - number), allowed))


@dataclass(frozen=True)
class SeedRecord:
    """Immutable record created once per session."""

    session_id: str
    topic: List[str]
    created_at: datetime

    @property
    def primary_topic(self) -> str:
        return self.topic[0].strip()

    @classmethod
    def new(cls, topic: Sequence[str]) -> "SeedRecord":
        return cls(
            session_id=uuid.uuid4().hex,
            topic=list(topic),
            created_at=datetime.now(timezone.utc),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "topic": list(self.topic),
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class Answer:
    """One yes/no decision in the client-owned transcript."""

    question_id: str
    question_text: str
    category: str
    decision: str  # "yes" | "no"
    order: int

    @property
    def is_yes(self) -> bool:
        return self.decision == "yes"

    @property
    def decision_label(self) -> str:
        return "はい" if self.is_yes else "いいえ"

    @classmethod
    def from_dict(cls, data: Any, position: int) -> "Answer":
        """Validate one wire answer. Accepts the legacy ``question``/``answer`` keys."""
        if not isinstance(data, dict):
            raise InputError(f"transcript[{position}] must be an object")

        text = data.get("questionText", data.get("question"))
        if not isinstance(text, str) or not text.strip():
            raise InputError(f"transcript[{position}].questionText is required")

        decision = data.get("decision", data.get("answer"))
        decision = decision.strip().lower() if isinstance(decision, str) else decision
        if decision not in DECISIONS:
            raise InputError(f"transcript[{position}].decision must be 'yes' or 'no'")

        order = data.get("order", position)
        if isinstance(order, bool) or not isinstance(order, int):
            raise InputError(f"transcript[{position}].order must be an integer")

        category = str(data.get("category") or "").strip() or DEFAULT_ANSWER_CATEGORY
        return cls(
            question_id=str(data.get("questionId") or ""),
            question_text=text.strip(),
            category=category,
            decision=decision,
            order=order,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionId": self.question_id,
            "questionText": self.question_text,
            "category": self.category,
            "decision": self.decision,
            "order": self.order,
        }


def parse_transcript(raw: Any) -> List[Answer]:
    """Turn a wire transcript into answers, raising :class:`InputError` on bad shape."""
    if not isinstance(raw, list):
        raise InputError("transcript must be a list")
    return [Answer.from_dict(item, position) for position, item in enumerate(raw)]


@dataclass(frozen=True)
class Question:
    id: str
    text: str
    category: str = DEFAULT_QUESTION_CATEGORY

    @classmethod
    def mint(cls, text: str, category: str = "") -> "Question":
        return cls(id=str(uuid.uuid4()), text=text, category=category.strip() or DEFAULT_QUESTION_CATEGORY)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text, "category": self.category}


@dataclass
class TopicResearch:
    """Classified keyword lists used to ground early questions."""

    related: List[str] = field(default_factory=list)
    target: List[str] = field(default_factory=list)
    long_tail: List[str] = field(default_factory=list)
    competitor: List[str] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "TopicResearch":
        return cls()

    def is_empty(self) -> bool:
        return not (self.related or self.target or self.long_tail or self.competitor)

    def merged(self) -> List[str]:
        seen = set()
        out: List[str] = []
        for keyword in [*self.related, *self.target, *self.long_tail, *self.competitor]:
            if keyword not in seen:
                seen.add(keyword)
                out.append(keyword)
        return out

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "related": list(self.related),
            "target": list(self.target),
            "longTail": list(self.long_tail),
            "competitor": list(self.competitor),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TopicResearch":
        return cls(
            related=list(data.get("related", [])),
            target=list(data.get("target", [])),
            long_tail=list(data.get("longTail", [])),
            competitor=list(data.get("competitor", [])),
        )


@dataclass(frozen=True)
class FinalBriefSkeleton:
    """What the synthesizer proposes when it decides the session is complete."""

    title: str
    target_length: int = DEFAULT_TARGET_LENGTH


@dataclass(frozen=True)
class Continue:
    questions: List[Question]
    kind: Literal["continue"] = "continue"


@dataclass(frozen=True)
class Done:
    skeleton: FinalBriefSkeleton
    kind: Literal["done"] = "done"


StepResult = Union[Continue, Done]


@dataclass(frozen=True)
class AnswerTotals:
    answer_count: int
    yes_count: int
    no_count: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "answerCount": self.answer_count,
            "yesCount": self.yes_count,
            "noCount": self.no_count,
        }


@dataclass
class FinalBrief:
    """Terminal artifact of a session. Built fresh from the transcript, never stored here."""

    title_candidates: List[str]
    selected_title: str
    target_length: int
    summary: str
    categorized_answers: Dict[str, List[Answer]]
    totals: AnswerTotals

    def to_dict(self) -> Dict[str, Any]:
        return {
            "titleCandidates": list(self.title_candidates),
            "selectedTitle": self.selected_title,
            "targetLength": self.target_length,
            "summary": self.summary,
            "categorizedAnswers": {
                category: [a.to_dict() for a in answers]
                for category, answers in self.categorized_answers.items()
            },
            "totals": self.totals.to_dict(),
        }


@dataclass
class NextStepOutcome:
    """Response of one protocol call: a batch of questions or the final brief."""

    done: bool
    questions: List[Question] = field(default_factory=list)
    final_brief: Optional[FinalBrief] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.done and self.final_brief is not None:
            return {"done": True, "finalBrief": self.final_brief.to_dict()}
        return {"done": False, "questions": [q.to_dict() for q in self.questions]}


@dataclass
class DocumentJob:
    """Hand-off record consumed by the document generation pipeline."""

    job_id: str
    session_id: str
    title: str
    keywords: List[str]
    target_length: int
    article_type: str
    request_text: str
    status: str = "queued"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobId": self.job_id,
            "sessionId": self.session_id,
            "title": self.title,
            "keywords": list(self.keywords),
            "targetLength": self.target_length,
            "articleType": self.article_type,
            "requestText": self.request_text,
            "status": self.status,
            "createdAt": self.created_at.isoformat(),
        }


__all__ = [
    "Answer",
    "AnswerTotals",
    "Continue",
    "DocumentJob",
    "Done",
    "FinalBrief",
    "FinalBriefSkeleton",
    "NextStepOutcome",
    "Question",
    "SeedRecord",
    "StepResult",
    "TopicResearch",
    "coerce_target_length",
    "parse_transcript",
]
