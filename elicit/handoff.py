"""Hand-off of an accepted brief to the document generation pipeline."""

from __future__ import annotations

import uuid
from typing import Dict, List, Optional, Sequence

from .constants import ARTICLE_TYPES, DEFAULT_ANSWER_CATEGORY
from .models import Answer, DocumentJob, SeedRecord

_ARTICLE_TYPE_MARKERS = {
    "comparison": ("比較",),
    "explanation": ("解説", "説明"),
    "howto": ("HowTo", "使い方"),
}


def infer_article_type(transcript: Sequence[Answer]) -> str:
    """Guess the article format from the questions the user said yes to."""
    yes_texts = [a.question_text for a in transcript if a.is_yes]
    for article_type in ARTICLE_TYPES:
        markers = _ARTICLE_TYPE_MARKERS.get(article_type, ())
        if any(marker in text for text in yes_texts for marker in markers):
            return article_type
    return ARTICLE_TYPES[-1]


def build_request_text(
    transcript: Sequence[Answer],
    summary: str = "",
    primary_info: Optional[str] = None,
) -> str:
    grouped: Dict[str, List[str]] = {}
    for answer in transcript:
        category = answer.category or DEFAULT_ANSWER_CATEGORY
        grouped.setdefault(category, []).append(f"{answer.question_text}: {answer.decision_label}")

    details = "\n\n".join(f"【{category}】\n" + "\n".join(items) for category, items in grouped.items())
    primary = (primary_info or "").strip()
    summary = (summary or "").strip()

    blocks = [
        f"【一次情報（必ず反映）】\n{primary}" if primary else "",
        f"【質問回答から得た方向性】\n{summary}" if summary else "",
        f"【スワイプ回答詳細】\n{details}" if details else "",
    ]
    return "\n\n".join(block for block in blocks if block)


def create_job(
    seed: SeedRecord,
    title: str,
    target_length: int,
    transcript: Sequence[Answer],
    summary: str = "",
    primary_info: Optional[str] = None,
) -> DocumentJob:
    return DocumentJob(
        job_id=uuid.uuid4().hex,
        session_id=seed.session_id,
        title=title,
        keywords=[k.strip() for k in seed.topic],
        target_length=target_length,
        article_type=infer_article_type(transcript),
        request_text=build_request_text(transcript, summary, primary_info),
    )


__all__ = ["build_request_text", "create_job", "infer_article_type"]
