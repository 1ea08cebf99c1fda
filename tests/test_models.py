"""Tests for the session data model."""

from __future__ import annotations

import pytest

from elicit.errors import InputError
from elicit.models import (
    Answer,
    NextStepOutcome,
    Question,
    SeedRecord,
    TopicResearch,
    coerce_target_length,
    parse_transcript,
)


class TestParseTranscript:
    """Tests for transcript validation."""

    def test_parses_wire_answers(self):
        answers = parse_transcript(
            [{"questionId": "a", "questionText": " 比較しますか？ ", "category": "形式", "decision": "YES", "order": 0}]
        )

        assert answers == [Answer("a", "比較しますか？", "形式", "yes", 0)]

    def test_legacy_keys_and_defaults(self):
        answers = parse_transcript([{"question": "Q", "answer": "no"}])

        assert answers[0].decision == "no"
        assert answers[0].category == "一般"
        assert answers[0].order == 0

    def test_not_a_list(self):
        with pytest.raises(InputError):
            parse_transcript({"questionText": "Q"})

    @pytest.mark.parametrize(
        "item",
        [
            "yes",
            {"questionText": "", "decision": "yes"},
            {"questionText": "Q", "decision": "maybe"},
            {"questionText": "Q", "decision": "yes", "order": "1"},
            {"questionText": "Q", "decision": "yes", "order": True},
        ],
    )
    def test_malformed_answers(self, item):
        with pytest.raises(InputError):
            parse_transcript([item])

    def test_round_trip_keys(self):
        answer = Answer("a", "Q", "c", "yes", 3)

        assert answer.to_dict() == {
            "questionId": "a",
            "questionText": "Q",
            "category": "c",
            "decision": "yes",
            "order": 3,
        }
        assert answer.decision_label == "はい"


class TestCoerceTargetLength:
    """Tests for coerce_target_length."""

    @pytest.mark.parametrize(
        "value, expected",
        [(4000, 4000), ("8000", 8000), (9000.0, 8000), (12000, 10000), (100, 2000), (0, 4000), ("abc", 4000), (None, 4000)],
    )
    def test_snaps_to_allowed(self, value, expected):
        assert coerce_target_length(value) == expected


class TestRecords:
    """Tests for the smaller records."""

    def test_seed_record(self):
        seed = SeedRecord.new(["  会計ソフト ", "クラウド"])

        assert seed.primary_topic == "会計ソフト"
        data = seed.to_dict()
        assert data["sessionId"] == seed.session_id
        assert data["topic"] == ["  会計ソフト ", "クラウド"]

    def test_question_default_category(self):
        question = Question.mint("Q", "  ")

        assert question.category == "確認"
        assert question.to_dict() == {"id": question.id, "text": "Q", "category": "確認"}

    def test_topic_research_merged_dedupes(self):
        research = TopicResearch(related=["a", "b"], target=["b"], long_tail=["c"], competitor=["a", "d"])

        assert research.merged() == ["a", "b", "c", "d"]
        assert TopicResearch.from_dict(research.to_dict()) == research
        assert TopicResearch.empty().is_empty()

    def test_outcome_continue_shape(self):
        outcome = NextStepOutcome(done=False, questions=[Question("id", "Q", "c")])

        assert outcome.to_dict() == {"done": False, "questions": [{"id": "id", "text": "Q", "category": "c"}]}
