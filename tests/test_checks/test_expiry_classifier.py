"""Tests for document expiry classification."""
from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from checks.expiry_classifier import classify_expiry, parse_fact_date
from models.compliance import ExpiryCutoffs
from models.shared import ExpiryTier
from utils.error_handler import MalformedDate

TODAY = date(2024, 8, 15)
CUTOFFS = ExpiryCutoffs(urgent_days=30, warning_days=60)


class TestClassifyExpiry:

    @pytest.mark.parametrize(
        "expiry, days, tier",
        [
            (date(2024, 8, 20), 5, ExpiryTier.URGENT),
            (date(2024, 9, 20), 36, ExpiryTier.WARNING),
            (date(2024, 7, 1), -45, ExpiryTier.EXPIRED),
        ],
    )
    def test_reference_dates(self, expiry, days, tier):
        status = classify_expiry(expiry, TODAY, CUTOFFS)

        assert status.days_remaining == days
        assert status.tier == tier

    @pytest.mark.parametrize(
        "days, tier",
        [
            (-1, ExpiryTier.EXPIRED),
            (0, ExpiryTier.URGENT),
            (30, ExpiryTier.URGENT),
            (31, ExpiryTier.WARNING),
            (60, ExpiryTier.WARNING),
            (61, ExpiryTier.NONE),
        ],
    )
    def test_boundaries(self, days, tier):
        expiry = date.fromordinal(TODAY.toordinal() + days)

        assert classify_expiry(expiry, TODAY, CUTOFFS).tier == tier

    def test_custom_cutoffs(self):
        cutoffs = ExpiryCutoffs(urgent_days=7, warning_days=14)

        assert classify_expiry(date(2024, 8, 25), TODAY, cutoffs).tier == ExpiryTier.WARNING
        assert classify_expiry(date(2024, 9, 1), TODAY, cutoffs).tier == ExpiryTier.NONE

    def test_time_of_day_is_ignored(self):
        late = datetime(2024, 8, 20, 23, 59, tzinfo=timezone.utc)
        early_today = datetime(2024, 8, 15, 0, 1)

        assert classify_expiry(late, early_today, CUTOFFS).days_remaining == 5

    def test_iso_strings_accepted(self):
        assert classify_expiry("2024-08-20", "2024-08-15", CUTOFFS).days_remaining == 5
        assert classify_expiry("2024-08-20T10:00:00Z", TODAY, CUTOFFS).days_remaining == 5

    @pytest.mark.parametrize("bad", ["", "not-a-date", "2024-13-01", None, 20240820])
    def test_malformed_expiry_raises(self, bad):
        with pytest.raises(MalformedDate):
            classify_expiry(bad, TODAY, CUTOFFS)

    def test_to_dict(self):
        assert classify_expiry(date(2024, 8, 20), TODAY, CUTOFFS).to_dict() == {
            "days_remaining": 5,
            "tier": "Urgent",
        }


def test_parse_fact_date_truncates_datetime():
    assert parse_fact_date(datetime(2024, 8, 15, 18, 30)) == date(2024, 8, 15)
