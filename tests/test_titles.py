"""Tests for title normalization and candidate assembly."""

from __future__ import annotations

import pytest

from elicit.titles import (
    default_title,
    fallback_title_set,
    finalize_candidates,
    normalize_title_year,
)


class TestNormalizeTitleYear:
    """Tests for normalize_title_year."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("【2023年最新版】サービス比較", "【2025年最新版】サービス比較"),
            ("【2024年最新】サービス比較", "【2025年最新版】サービス比較"),
            ("2022年最新ガイド", "2025年最新版ガイド"),
            ("2022年最新版ガイド", "2025年最新版ガイド"),
            ("2021年の動向", "2025年の動向"),
            ("タイトルに年なし", "タイトルに年なし"),
            ("", ""),
        ],
    )
    def test_literal_cases(self, raw, expected):
        assert normalize_title_year(raw, 2025) == expected

    @pytest.mark.parametrize("raw", ["  タイトルに年なし \n", " 【2025年最新版】 余白つき "])
    def test_whitespace_preserved(self, raw):
        assert normalize_title_year(raw, 2025) == raw

    def test_year_rewritten_inside_whitespace(self):
        assert normalize_title_year("  2021年の動向\n", 2025) == "  2025年の動向\n"

    def test_non_string_input(self):
        assert normalize_title_year(None, 2025) == ""
        assert normalize_title_year(2023, 2025) == "2023"

    @pytest.mark.parametrize(
        "raw",
        [
            "【2023年最新版】サービス比較",
            "2022年最新ガイド",
            "2019年と2020年の比較【2018年最新】",
            "【2025年最新版】すでに正規化済み",
        ],
    )
    def test_idempotent(self, raw):
        once = normalize_title_year(raw, 2025)
        assert normalize_title_year(once, 2025) == once

    def test_already_current_marker_unchanged(self):
        title = "【2025年最新版】クラウド会計"
        assert normalize_title_year(title, 2025) == title


class TestTitleTemplates:
    """Tests for the templated titles."""

    def test_default_title(self):
        assert default_title("会計ソフト", 2025) == "「会計ソフト」完全ガイド【2025年最新版】"

    def test_fallback_set_has_six_distinct_titles(self):
        titles = fallback_title_set("会計ソフト", 2025)

        assert len(titles) == 6
        assert len(set(titles)) == 6
        assert titles[0] == default_title("会計ソフト", 2025)
        assert all("会計ソフト" in t for t in titles)
        assert "失敗しない！会計ソフト【2025年版】選び方ガイド" in titles


class TestFinalizeCandidates:
    """Tests for finalize_candidates."""

    @pytest.mark.parametrize("count", [0, 3, 9])
    def test_always_six(self, count):
        raw = [f"タイトル{i}" for i in range(count)]

        candidates = finalize_candidates(raw, "既定タイトル", 2025)

        assert len(candidates) == 6
        assert candidates[: min(count, 6)] == raw[:6]

    def test_pads_with_default(self):
        candidates = finalize_candidates(["A"], "既定", 2025)

        assert candidates == ["A", "既定", "既定", "既定", "既定", "既定"]

    def test_drops_blanks_and_duplicates(self):
        candidates = finalize_candidates(["A", "", "  ", "A", None, "B"], "既定", 2025)

        assert candidates[:2] == ["A", "B"]
        assert candidates[2:] == ["既定"] * 4

    def test_candidates_are_stripped(self):
        candidates = finalize_candidates(["  A  ", "A"], " 既定 ", 2025)

        assert candidates == ["A", "既定", "既定", "既定", "既定", "既定"]

    def test_normalizes_each_candidate(self):
        candidates = finalize_candidates(["【2022年最新】X"], "【2021年最新版】既定", 2025)

        assert candidates[0] == "【2025年最新版】X"
        assert candidates[1] == "【2025年最新版】既定"
