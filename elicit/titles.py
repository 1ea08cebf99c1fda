"""Deterministic title post-processing.

``normalize_title_year`` is the one piece of the engine that does not depend on
the model at all: every title leaving the engine passes through it.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Iterable, List, Optional

from .constants import TITLE_CANDIDATE_COUNT

# Order matters: the bracketed marker must be rewritten before the bare year rule.
_BRACKETED_LATEST = re.compile(r"【20\d{2}年最新(?:版)?】")
_BARE_LATEST = re.compile(r"20\d{2}年最新(?:版)?")
_BARE_YEAR = re.compile(r"20\d{2}年")


def _current_year() -> int:
    return datetime.now().year


def normalize_title_year(title: Any, year: Optional[int] = None) -> str:
    """Rewrite stale year markers in ``title`` to the current year.

    1. ``【20XX年最新】`` / ``【20XX年最新版】`` -> ``【Y年最新版】``
    2. ``20XX年最新`` / ``20XX年最新版`` -> ``Y年最新版``
    3. ``20XX年`` -> ``Y年``

    Only year tokens change; everything else, surrounding whitespace included,
    is returned as given. Never raises. Applying it twice gives the same result
    as applying it once.
    """
    if title is None:
        return ""
    text = title if isinstance(title, str) else str(title)
    if not text:
        return text
    y = year if year is not None else _current_year()
    text = _BRACKETED_LATEST.sub(f"【{y}年最新版】", text)
    text = _BARE_LATEST.sub(f"{y}年最新版", text)
    return _BARE_YEAR.sub(f"{y}年", text)


def default_title(primary: str, year: Optional[int] = None) -> str:
    y = year if year is not None else _current_year()
    return normalize_title_year(f"「{primary}」完全ガイド【{y}年最新版】", y)


def fallback_title_set(primary: str, year: Optional[int] = None) -> List[str]:
    """Six templated titles, one per rhetorical angle."""
    y = year if year is not None else _current_year()
    templates = [
        default_title(primary, y),
        f"{primary}比較｜目的別おすすめ＆導入前の注意点",
        f"失敗しない！{primary}【{y}年版】選び方ガイド",
        f"プロが解説｜{primary}で見るべきポイント",
        f"{primary}：初心者向け｜無料から始める活用術",
        f"{primary}｜導入前に知っておくべき落とし穴",
    ]
    return [normalize_title_year(t, y) for t in templates]


def finalize_candidates(raw: Iterable[Any], default: str, year: Optional[int] = None) -> List[str]:
    """Normalize, de-duplicate, then truncate or pad to exactly six titles."""
    fallback = normalize_title_year(default, year).strip()
    candidates: List[str] = []
    for item in raw:
        title = normalize_title_year(item, year).strip()
        if title and title not in candidates:
            candidates.append(title)
    candidates = candidates[:TITLE_CANDIDATE_COUNT]
    while len(candidates) < TITLE_CANDIDATE_COUNT:
        candidates.append(fallback)
    return candidates


__all__ = ["default_title", "fallback_title_set", "finalize_candidates", "normalize_title_year"]
