"""Unit tests for contract classification."""

from datetime import date, timedelta

import pytest

from contract_import.services.extraction.contract_classifier import (
    SHORT_TERM_MAX_DAYS,
    classify_by_dates,
    classify_contract,
    months_between,
)

START = date(2025, 1, 1)

TYPE_ORDER = ["one_day", "weekly", "monthly", "short_term", "long_term"]


class TestClassifyByDates:
    """Tests for the date-derived baseline."""

    @pytest.mark.parametrize(
        "days, expected_type, advance_days",
        [
            (0, "one_day", 0),
            (1, "one_day", 0),
            (7, "weekly", 3),
            (30, "monthly", 7),
            (90, "short_term", 14),
            (365, "long_term", 30),
        ],
    )
    def test_buckets(self, days, expected_type, advance_days):
        result = classify_by_dates(START, START + timedelta(days=days))
        assert result.contract_type == expected_type
        assert result.generate_advance_days == advance_days
        assert result.total_days == days

    def test_one_day_is_event_based(self):
        result = classify_by_dates(START, START)
        assert result.service_scope == "event_based"
        assert result.auto_generate_shifts is False
        assert result.is_renewable is False

    def test_weekly_is_not_renewable(self):
        assert classify_by_dates(START, START + timedelta(days=5)).is_renewable is False

    def test_missing_dates_default_to_long_term(self):
        result = classify_by_dates(None, START)
        assert result.contract_type == "long_term"
        assert result.duration_months == 12
        assert result.service_scope == "shift_based"

    @pytest.mark.parametrize(
        "start",
        [date(2025, 1, 1), date(2025, 1, 15), date(2025, 1, 28), date(2025, 1, 31), date(2024, 8, 31)],
    )
    def test_type_never_shrinks_as_duration_grows(self, start):
        previous = -1
        for days in range(0, 400):
            rank = TYPE_ORDER.index(classify_by_dates(start, start + timedelta(days=days)).contract_type)
            assert rank >= previous
            previous = rank

    @pytest.mark.parametrize(
        "start, end, expected_type",
        [
            (date(2025, 1, 31), date(2025, 8, 1), "short_term"),
            (date(2025, 1, 1), date(2025, 7, 3), "short_term"),
            (date(2025, 1, 1), date(2025, 7, 4), "long_term"),
            (date(2025, 1, 1), date(2025, 7, 31), "long_term"),
        ],
    )
    def test_short_term_boundary_uses_elapsed_days(self, start, end, expected_type):
        result = classify_by_dates(start, end)
        assert result.contract_type == expected_type
        assert (result.total_days <= SHORT_TERM_MAX_DAYS) == (expected_type == "short_term")

    def test_months_between_ignores_day_of_month(self):
        assert months_between(date(2025, 1, 31), date(2025, 2, 1)) == 1
        assert months_between(date(2025, 1, 1), date(2026, 1, 1)) == 12


class TestKeywordOverrides:
    """Tests for wording that overrides the baseline."""

    def test_long_term_wording(self):
        result = classify_contract("Đây là hợp đồng dài hạn", START, START + timedelta(days=20))
        assert result.contract_type == "long_term"
        assert result.is_renewable is True

    def test_short_term_wording_first_in_chain(self):
        text = "hợp đồng ngắn hạn cho hợp đồng sự kiện"
        result = classify_contract(text, START, START + timedelta(days=200))
        assert result.contract_type == "short_term"
        assert result.is_renewable is False
        # Event wording still sets the scope.
        assert result.service_scope == "event_based"

    def test_event_contract(self):
        result = classify_contract("Hợp đồng sự kiện ca nhạc", START, START + timedelta(days=200))
        assert result.contract_type == "one_day"
        assert result.auto_generate_shifts is False

    def test_auto_renewal(self):
        result = classify_contract("Hợp đồng tự động gia hạn mỗi năm", START, START + timedelta(days=365))
        assert result.auto_renewal is True
        assert result.contract_type == "long_term"

    def test_no_keywords_keeps_baseline(self):
        baseline = classify_by_dates(START, START + timedelta(days=10))
        assert classify_contract("Nội dung thông thường", START, START + timedelta(days=10)) == baseline
