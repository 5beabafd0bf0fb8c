"""Tests for compliance configuration models."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from models.compliance import (
    DutyLimitCeilings,
    DutyLimitConfig,
    ExpiryCutoffs,
    Person,
    TenantConfig,
)
from models.shared import DutyWindow
from utils.error_handler import InvalidConfiguration


class TestDutyLimitConfig:

    def test_configure_clamps_to_ceiling(self):
        config = DutyLimitConfig.configure(daily=12, weekly=25, monthly=150)

        assert config.daily_limit == 8.0
        assert config.weekly_limit == 25.0
        assert config.monthly_limit == 100.0

    def test_configure_defaults_to_ceilings(self):
        ceilings = DutyLimitCeilings(daily=10, weekly=40, monthly=120)
        config = DutyLimitConfig.configure(weekly=35, ceilings=ceilings)

        assert config.limit_for(DutyWindow.DAILY) == 10
        assert config.limit_for(DutyWindow.WEEKLY) == 35
        assert config.limit_for(DutyWindow.MONTHLY) == 120

    def test_configure_rejects_negative(self):
        with pytest.raises(InvalidConfiguration) as excinfo:
            DutyLimitConfig.configure(daily=-1)

        assert excinfo.value.setting == "duty_limits.daily"

    def test_direct_construction_above_ceiling_rejected(self):
        with pytest.raises(ValidationError):
            DutyLimitConfig(daily_limit=9)

    def test_limits_never_exceed_ceilings(self):
        for requested in (0, 4, 8, 8.5, 50, 1000):
            config = DutyLimitConfig.configure(daily=requested, weekly=requested, monthly=requested)
            for window in DutyWindow:
                assert config.limit_for(window) <= config.ceilings.for_window(window)


class TestExpiryCutoffs:

    def test_defaults(self):
        cutoffs = ExpiryCutoffs()

        assert (cutoffs.urgent_days, cutoffs.warning_days) == (30, 60)

    def test_urgent_must_be_below_warning(self):
        with pytest.raises(InvalidConfiguration):
            ExpiryCutoffs(urgent_days=60, warning_days=30)

    def test_equal_cutoffs_rejected(self):
        with pytest.raises(InvalidConfiguration):
            ExpiryCutoffs(urgent_days=30, warning_days=30)


def test_tenant_config_defaults():
    config = TenantConfig(tenant_id="acme")

    assert config.escalate_on_tier_change is False
    assert config.duty_limits.daily_limit == 8.0
    assert config.expiry_cutoffs.warning_days == 60


def test_person_keeps_unknown_record_fields():
    person = Person(person_id="p-1", tenant_id="acme", callsign="Maverick")

    assert person.active is True
    assert person.documents == []
    assert person.model_extra == {"callsign": "Maverick"}
