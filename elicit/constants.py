"""Protocol constants shared by the elicitation components."""

from __future__ import annotations

# Transcript length at which a session always terminates, whatever the model says.
HARD_CAP = 30

# Keyword research only enriches the early part of a session.
RESEARCH_PHASE_LIMIT = 15

TARGET_BATCH_SIZE = 8
MAX_BATCH_SIZE = 8
FALLBACK_BATCH_SIZE = 3

# Backend requests per next-step decision before the local fallback fires.
MAX_PARSE_ATTEMPTS = 3

TITLE_CANDIDATE_COUNT = 6

TARGET_LENGTHS = (2000, 4000, 6000, 8000, 10000)
DEFAULT_TARGET_LENGTH = 4000

DECISIONS = ("yes", "no")

DEFAULT_ANSWER_CATEGORY = "一般"
DEFAULT_QUESTION_CATEGORY = "確認"

FALLBACK_SUMMARY = "質問回答を分析した結果、記事の方向性を決定しました。"

# Per-call generation limits (max output tokens, temperature)
RESEARCH_GENERATION = (2000, 0.7)
NEXT_STEP_GENERATION = (1200, 0.7)
SUMMARY_GENERATION = (2000, 0.7)
TITLE_GENERATION = (1000, 0.8)

# Checked in this order by the hand-off; the last one is the default.
ARTICLE_TYPES = ("comparison", "explanation", "howto", "list")
