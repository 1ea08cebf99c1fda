"""Shared fixtures: a scripted backend and a handler wired to a temp database."""

from __future__ import annotations

import json
import threading
from typing import Any, Dict, List, Optional, Tuple

import pytest

from elicit.errors import BackendError
from elicit.final import FinalSynthesizer
from elicit.handler import SessionHandler
from elicit.research import TopicResearcher
from elicit.store import SeedStore
from elicit.synthesizer import QuestionSynthesizer

YEAR = 2025

_PROMPT_KINDS = (
    ("SEOキーワード分析", "research"),
    ("質問を生成するAI", "next"),
    ("質問回答を分析するAI", "summary"),
    ("記事タイトル作成の専門家", "titles"),
)


def prompt_kind(prompt: str) -> str:
    for marker, kind in _PROMPT_KINDS:
        if marker in prompt:
            return kind
    return "unknown"


class FakeBackend:
    """Returns queued responses per prompt kind; raises when a queue is empty.

    A queued ``Exception`` instance is raised instead of returned.
    """

    def __init__(self, **scripts: List[Any]):
        self.scripts: Dict[str, List[Any]] = {kind: list(items) for kind, items in scripts.items()}
        self.calls: List[Tuple[str, str, str]] = []
        self._lock = threading.Lock()

    def generate(self, prompt: str, *, model: str, max_output_tokens: int, temperature: float = 0.7) -> str:
        kind = prompt_kind(prompt)
        with self._lock:
            self.calls.append((kind, model, prompt))
            queue = self.scripts.get(kind) or []
            if not queue:
                raise BackendError(f"no scripted {kind} response")
            item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def count(self, kind: str) -> int:
        return sum(1 for call in self.calls if call[0] == kind)


def questions_json(*texts: str, category: str = "読者") -> str:
    return json.dumps(
        {"done": False, "questions": [{"question": t, "category": category} for t in texts]},
        ensure_ascii=False,
    )


def done_json(title: str, target_chars: Any = 4000) -> str:
    return json.dumps({"done": True, "finalData": {"title": title, "targetChars": target_chars}}, ensure_ascii=False)


def make_transcript(count: int, decisions: Optional[List[str]] = None) -> List[Dict[str, Any]]:
    out = []
    for i in range(count):
        decision = decisions[i % len(decisions)] if decisions else ("yes" if i % 2 == 0 else "no")
        out.append(
            {
                "questionId": f"q{i}",
                "questionText": f"質問{i}を含めますか？",
                "category": f"cat{i % 3}",
                "decision": decision,
                "order": i,
            }
        )
    return out


@pytest.fixture
def store(tmp_path) -> SeedStore:
    return SeedStore(tmp_path / "elicit.db")


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


def build_test_handler(store: SeedStore, backend: FakeBackend) -> SessionHandler:
    synthesizer = QuestionSynthesizer(backend, "question-model", retry_delay=0, year=YEAR)
    final = FinalSynthesizer(
        backend,
        summary_model="text-model",
        title_model="question-model",
        artifact_timeout=5.0,
        year=YEAR,
    )
    return SessionHandler(
        store=store,
        synthesizer=synthesizer,
        researcher=TopicResearcher(backend, "text-model"),
        final=final,
        year=YEAR,
    )


@pytest.fixture
def handler(store, backend):
    h = build_test_handler(store, backend)
    yield h
    h.final.shutdown()
