"""Tests for final synthesis."""

from __future__ import annotations

import json
import time

import pytest

from elicit.constants import FALLBACK_SUMMARY
from elicit.final import FinalSynthesizer, categorize
from elicit.models import FinalBriefSkeleton, SeedRecord, parse_transcript
from elicit.titles import fallback_title_set

from conftest import FakeBackend, make_transcript

SKELETON = FinalBriefSkeleton("「会計ソフト」完全ガイド【2025年最新版】", 6000)


@pytest.fixture
def seed():
    return SeedRecord.new(["会計ソフト"])


def _final(backend, **kwargs):
    kwargs.setdefault("artifact_timeout", 5.0)
    return FinalSynthesizer(backend, summary_model="text-model", title_model="question-model", year=2025, **kwargs)


class TestCategorize:
    """Tests for categorize."""

    def test_every_answer_in_exactly_one_category(self):
        transcript = parse_transcript(make_transcript(10))

        grouped, totals = categorize(transcript)

        assert sum(len(v) for v in grouped.values()) == totals.answer_count == 10
        assert totals.yes_count + totals.no_count == totals.answer_count
        assert totals.yes_count == 5
        assert list(grouped) == ["cat0", "cat1", "cat2"]
        assert [a.order for a in grouped["cat0"]] == [0, 3, 6, 9]

    def test_empty(self):
        grouped, totals = categorize([])

        assert grouped == {}
        assert totals.to_dict() == {"answerCount": 0, "yesCount": 0, "noCount": 0}


class TestFinalSynthesizer:
    """Tests for FinalSynthesizer.synthesize."""

    def test_happy_path(self, seed):
        titles = ["【2023年最新版】会計ソフト比較", "会計ソフトの選び方"]
        backend = FakeBackend(summary=["要約です。"], titles=[json.dumps({"titles": titles}, ensure_ascii=False)])
        final = _final(backend)

        brief = final.synthesize(seed, parse_transcript(make_transcript(4)), SKELETON)
        final.shutdown()

        assert brief.summary == "要約です。"
        assert brief.title_candidates[:2] == ["【2025年最新版】会計ソフト比較", "会計ソフトの選び方"]
        assert brief.title_candidates[2:] == [SKELETON.title] * 4
        assert brief.selected_title == brief.title_candidates[0]
        assert brief.target_length == 6000
        assert brief.totals.answer_count == 4

    def test_both_artifacts_fall_back(self, seed):
        backend = FakeBackend()
        final = _final(backend)

        brief = final.synthesize(seed, parse_transcript(make_transcript(3)), SKELETON)
        final.shutdown()

        assert brief.summary == FALLBACK_SUMMARY
        assert len(brief.title_candidates) == 6
        assert brief.title_candidates[0] == SKELETON.title
        assert brief.title_candidates[1:] == fallback_title_set("会計ソフト", 2025)[1:]
        assert backend.count("summary") == 1
        assert backend.count("titles") == 1

    def test_one_failure_does_not_affect_the_other(self, seed):
        backend = FakeBackend(summary=["   "], titles=['{"titles": ["T1", "T2", "T3", "T4", "T5", "T6", "T7"]}'])
        final = _final(backend)

        brief = final.synthesize(seed, [], SKELETON)
        final.shutdown()

        assert brief.summary == FALLBACK_SUMMARY
        assert brief.title_candidates == ["T1", "T2", "T3", "T4", "T5", "T6"]

    def test_slow_artifact_times_out_to_fallback(self, seed):
        class SlowBackend(FakeBackend):
            def generate(self, prompt, **kwargs):
                if "記事タイトル作成の専門家" in prompt:
                    time.sleep(1.0)
                return super().generate(prompt, **kwargs)

        backend = SlowBackend(summary=["要約"], titles=['{"titles": ["遅いタイトル"]}'])
        final = _final(backend, artifact_timeout=0.1)

        brief = final.synthesize(seed, [], SKELETON)
        final.shutdown()

        assert brief.summary == "要約"
        assert "遅いタイトル" not in brief.title_candidates
        assert len(brief.title_candidates) == 6

    def test_titles_with_only_blanks_use_templates(self, seed):
        backend = FakeBackend(summary=["要約"], titles=['{"titles": ["", "  "]}'])
        final = _final(backend)

        brief = final.synthesize(seed, [], SKELETON)
        final.shutdown()

        assert brief.title_candidates[1:] == fallback_title_set("会計ソフト", 2025)[1:]

    def test_artifacts_share_one_deadline(self, seed):
        class SlowBackend(FakeBackend):
            def generate(self, prompt, **kwargs):
                time.sleep(1.0)
                return super().generate(prompt, **kwargs)

        backend = SlowBackend(summary=["要約"], titles=['{"titles": ["T"]}'])
        final = _final(backend, artifact_timeout=0.3)

        t0 = time.time()
        brief = final.synthesize(seed, [], SKELETON)
        elapsed = time.time() - t0
        final.shutdown()

        assert elapsed < 0.55
        assert brief.summary == FALLBACK_SUMMARY
        assert brief.title_candidates[0] == SKELETON.title
