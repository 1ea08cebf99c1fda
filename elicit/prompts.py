"""Prompt builders for every backend call made by the engine."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from .constants import TARGET_BATCH_SIZE, TARGET_LENGTHS
from .models import Answer


def answers_text(transcript: Sequence[Answer]) -> str:
    """Serialize the transcript as Q/A pairs."""
    return "\n\n".join(f"Q: {a.question_text}\nA: {a.decision_label}" for a in transcript)


def keyword_research_prompt(topic: Sequence[str]) -> str:
    return f"""あなたはSEOキーワード分析の専門家です。
以下のキーワードについて、関連キーワードや派生キーワードを詳細に分析してください。

主キーワード: {", ".join(topic)}

要件:
- 主キーワードに関連するキーワードを20-30個抽出してください
- 類義語、上位概念、下位概念、関連語、派生語を含めてください
- 長尾キーワード（「〜とは」「〜方法」「〜おすすめ」「〜比較」「〜違い」など）を含めてください
- 競合キーワード、代替キーワード、具体的なサービス名・製品名も含めてください
- 「このキーワードは狙いますか？」という質問で使える具体的なキーワードを優先してください

出力形式:
{{
  "relatedKeywords": ["関連キーワード1", "関連キーワード2"],
  "targetKeywords": ["狙い手キーワード1", "狙い手キーワード2"],
  "longTailKeywords": ["長尾キーワード1", "長尾キーワード2"],
  "competitorKeywords": ["競合キーワード1", "競合キーワード2"]
}}

JSONのみを出力してください。"""


def next_step_prompt(
    topic: Sequence[str],
    transcript: Sequence[Answer],
    keywords: Iterable[str] = (),
    *,
    year: int,
) -> str:
    keyword_list: List[str] = list(keywords)
    related = f"\n関連キーワード・狙い手キーワード・長尾キーワード・競合キーワード: {', '.join(keyword_list)}" if keyword_list else ""
    history = answers_text(transcript) or "（まだ回答はありません）"
    lengths = "、".join(f"{n:,}" for n in TARGET_LENGTHS)
    return f"""あなたは記事作成のための質問を生成するAIです。
これまでの回答を分析し、記事を作成するために必要な情報が揃っているか判断してください。

主キーワード: {", ".join(topic)}{related}

これまでの回答:
{history}

要件:
1. まだ必要な情報がある場合は、次の質問を{TARGET_BATCH_SIZE}問生成してください
   - 質問はYes/Noで答えられる形式にしてください
   - 具体的なキーワード名を含めた質問を作成してください
   - これまでの回答を考慮して、まだ聞いていない観点について質問してください
   - ターゲット読者層、記事の種類、ユーザーインテントなども観点に含めてください
   - 極力短く（30文字以内を推奨）、1文で簡潔に表現してください
   - 改行は禁止です（質問文に改行を含めないでください）

2. 必要な情報が揃った場合は、記事のタイトルと目標文字数を提案してください
   - タイトルの年号は必ず{year}年にしてください（例: 【{year}年最新版】）
   - 目標文字数は{lengths}のいずれかにしてください

出力形式（質問を生成する場合）:
{{
  "done": false,
  "questions": [
    {{"question": "短い質問文", "category": "質問のカテゴリ"}}
  ]
}}

出力形式（完了する場合）:
{{
  "done": true,
  "finalData": {{"title": "記事タイトル", "targetChars": 4000}}
}}

JSONのみを出力してください。"""


def summary_prompt(topic: Sequence[str], transcript: Sequence[Answer]) -> str:
    return f"""あなたは記事作成のための質問回答を分析するAIです。
以下の質問と回答から、記事の方向性・内容・ターゲットなどを要約してください。

主キーワード: {", ".join(topic)}

質問と回答:
{answers_text(transcript)}

要件:
- 「この質問にこう回答したので、記事にこの内容を含めました」という形式で説明してください
- 具体的で分かりやすい文章にしてください

要約文のみを出力してください（JSON形式は不要）。"""


def title_prompt(topic: Sequence[str], transcript: Sequence[Answer], *, year: int, count: int) -> str:
    return f"""あなたは記事タイトル作成の専門家です。
以下の情報を元に、魅力的な記事タイトルを{count}種類提案してください。

主キーワード: {", ".join(topic)}

質問と回答:
{answers_text(transcript)}

要件:
- 各タイトルは異なるアプローチで作成してください：
  比較・目的別おすすめ系、年度＋選び方ガイド系（【{year}年版】）、プロ解説系、
  初心者向け系、落とし穴・注意点系、事例集・活用系
- タイトルは30〜60文字程度にしてください
- 主キーワードを必ず含めてください

出力形式:
{{
  "titles": ["タイトル1", "タイトル2"]
}}

JSONのみを出力してください。"""


__all__ = [
    "answers_text",
    "keyword_research_prompt",
    "next_step_prompt",
    "summary_prompt",
    "title_prompt",
]
