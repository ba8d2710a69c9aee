"""Unit tests for warranty coverage computation."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from services.warranty_bff_service.core.warranty_calculator import (
    NEAR_EXPIRY_THRESHOLD_DAYS,
    WarrantyStatus,
    classify,
    compute,
)

UTC_PLUS_7 = timezone(timedelta(hours=7))


class TestCompute:
    def test_one_year_warranty_mid_term(self) -> None:
        activation = datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
        now = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)

        result = compute(activation, 365, now)

        assert result.end_date == date(2024, 12, 31)
        assert result.remaining_days == 213
        assert result.status == WarrantyStatus.ACTIVE

    def test_end_date_is_activation_plus_duration(self) -> None:
        result = compute(date(2024, 2, 28), 2, date(2024, 2, 28))

        # Leap year: 28 Feb + 2 days = 1 Mar
        assert result.end_date == date(2024, 3, 1)
        assert result.remaining_days == 2

    def test_remaining_days_counts_calendar_days_not_hours(self) -> None:
        activation = datetime(2024, 1, 1, 23, 59, tzinfo=timezone.utc)
        now = datetime(2024, 1, 2, 0, 1, tzinfo=timezone.utc)

        result = compute(activation, 10, now)

        assert result.remaining_days == 9

    def test_aware_now_is_converted_into_activation_timezone(self) -> None:
        activation = datetime(2024, 3, 1, 12, 0, tzinfo=UTC_PLUS_7)
        # 20:00 UTC on 10 Mar is already 11 Mar in UTC+7
        now = datetime(2024, 3, 10, 20, 0, tzinfo=timezone.utc)

        result = compute(activation, 30, now)

        assert result.end_date == date(2024, 3, 31)
        assert result.remaining_days == 20

    def test_expired_warranty_keeps_negative_remaining_days(self) -> None:
        result = compute(date(2020, 1, 1), 365, date(2024, 1, 1))

        assert result.status == WarrantyStatus.EXPIRED
        assert result.remaining_days < 0
        assert result.display_remaining_days == 0

    def test_is_deterministic(self) -> None:
        activation = datetime(2024, 5, 5, tzinfo=timezone.utc)
        now = datetime(2024, 8, 1, tzinfo=timezone.utc)

        assert compute(activation, 90, now) == compute(activation, 90, now)

    @pytest.mark.parametrize("duration", [0, -1, -365])
    def test_rejects_non_positive_duration(self, duration: int) -> None:
        with pytest.raises(ValueError):
            compute(date(2024, 1, 1), duration, date(2024, 1, 1))

    def test_remaining_days_never_increase_as_time_passes(self) -> None:
        activation = date(2024, 1, 1)
        previous = None
        for offset in range(0, 400, 7):
            remaining = compute(activation, 365, activation + timedelta(days=offset)).remaining_days
            if previous is not None:
                assert remaining <= previous
            previous = remaining


class TestClassify:
    @pytest.mark.parametrize(
        "remaining, expected",
        [
            (-10, WarrantyStatus.EXPIRED),
            (0, WarrantyStatus.EXPIRED),
            (1, WarrantyStatus.NEAR_EXPIRY),
            (NEAR_EXPIRY_THRESHOLD_DAYS, WarrantyStatus.NEAR_EXPIRY),
            (NEAR_EXPIRY_THRESHOLD_DAYS + 1, WarrantyStatus.ACTIVE),
            (365, WarrantyStatus.ACTIVE),
        ],
    )
    def test_status_boundaries(self, remaining: int, expected: WarrantyStatus) -> None:
        assert classify(remaining) == expected

    def test_last_day_of_coverage_is_expired(self) -> None:
        activation = date(2024, 1, 1)
        end = activation + timedelta(days=30)

        assert compute(activation, 30, end).status == WarrantyStatus.EXPIRED
        assert compute(activation, 30, end - timedelta(days=1)).status == WarrantyStatus.NEAR_EXPIRY
