"""Elicitation session endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from api.dependencies import get_handler
from elicit.errors import InputError, SessionNotFound
from elicit.handler import SessionHandler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/elicitation/sessions", tags=["elicitation"])


# --- Request / Response Models ---

class StartSessionRequest(BaseModel):
    topic: List[Any] = Field(..., description="Seed keywords; the first one is the primary topic.")


class StartSessionResponse(BaseModel):
    sessionId: str
    topic: List[str]
    createdAt: str


class NextStepRequest(BaseModel):
    transcript: List[Any] = Field(
        default_factory=list,
        description="Every answer so far, in order. The server keeps no per-turn state.",
    )


class FinalizeRequest(BaseModel):
    finalBrief: Dict[str, Any]
    transcript: List[Any] = Field(default_factory=list)
    primaryInfo: Optional[str] = Field(default=None, max_length=20000)


class FinalizeResponse(BaseModel):
    jobId: str
    articleType: str


def _http_error(exc: InputError) -> NoReturn:
    if isinstance(exc, SessionNotFound):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


# --- Endpoints ---

@router.post("", response_model=StartSessionResponse, status_code=status.HTTP_201_CREATED)
def start_session(
    request: StartSessionRequest,
    handler: SessionHandler = Depends(get_handler),
):
    """Create a session from seed keywords."""
    try:
        seed = handler.start_session(request.topic)
    except InputError as exc:
        logger.info("Rejected session start: %s", exc)
        _http_error(exc)
    return StartSessionResponse(**seed.to_dict())


@router.post("/{session_id}/next")
def next_step(
    session_id: str,
    request: NextStepRequest,
    handler: SessionHandler = Depends(get_handler),
) -> Dict[str, Any]:
    """Next batch of questions, or the final brief once the session is over."""
    try:
        outcome = handler.next_step(session_id, request.transcript)
    except InputError as exc:
        logger.info("Rejected next step for %s: %s", session_id, exc)
        _http_error(exc)
    return outcome.to_dict()


@router.post("/{session_id}/finalize", response_model=FinalizeResponse, status_code=status.HTTP_202_ACCEPTED)
def finalize(
    session_id: str,
    request: FinalizeRequest,
    handler: SessionHandler = Depends(get_handler),
):
    """Accept a final brief and queue it for document generation."""
    try:
        job = handler.finalize(session_id, request.finalBrief, request.transcript, request.primaryInfo)
    except InputError as exc:
        logger.info("Rejected finalize for %s: %s", session_id, exc)
        _http_error(exc)
    return FinalizeResponse(jobId=job.job_id, articleType=job.article_type)
