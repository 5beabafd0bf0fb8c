"""Tests for SPI definition models."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from models.shared import CalculationMode, IndicatorType, TargetDirection
from models.spi import SafetyEvent, SafetyEventFilter, SpiDefinition, SpiThresholds
from utils.error_handler import InvalidThresholdOrder


def _definition(**overrides) -> SpiDefinition:
    data = {
        "spi_id": "spi-1",
        "name": "Runway incursions",
        "thresholds": {"target": 1, "alert2": 2, "alert3": 3, "alert4": 4},
    }
    data.update(overrides)
    return SpiDefinition.model_validate(data)


class TestSpiDefinition:

    def test_defaults(self):
        definition = _definition()

        assert definition.indicator_type == IndicatorType.LAGGING
        assert definition.calculation_mode == CalculationMode.COUNT
        assert definition.target_direction == TargetDirection.LOWER_IS_BETTER
        assert definition.rate_scale == 100.0
        assert definition.period_days == 365

    def test_misordered_thresholds_rejected_on_build(self):
        with pytest.raises(InvalidThresholdOrder):
            _definition(thresholds={"target": 4, "alert2": 3, "alert3": 2, "alert4": 1})

    def test_higher_is_better_needs_descending(self):
        definition = _definition(
            target_direction="higher_is_better",
            thresholds={"target": 4, "alert2": 3, "alert3": 2, "alert4": 1},
        )

        assert definition.thresholds.as_tuple() == (4, 3, 2, 1)

    def test_with_thresholds_revalidates(self):
        definition = _definition()

        updated = definition.with_thresholds(SpiThresholds(target=2, alert2=4, alert3=6, alert4=8))
        assert updated.thresholds.alert4 == 8

        with pytest.raises(InvalidThresholdOrder):
            definition.with_thresholds(SpiThresholds(target=8, alert2=6, alert3=4, alert4=2))

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValidationError):
            SpiThresholds(target=-1, alert2=2, alert3=3, alert4=4)

    def test_unknown_calculation_mode_rejected(self):
        with pytest.raises(ValidationError):
            _definition(calculation_mode="median")


class TestSafetyEventFilter:

    event = SafetyEvent(
        event_id="e-1",
        tenant_id="acme",
        report_type="Occurrence",
        occurrence_category="Ground Operations",
        sub_category="Runway Incursion",
        status="Open",
        heading="Runway incursion at holding point A",
    )

    def test_empty_filter_matches_everything(self):
        assert SafetyEventFilter().matches(self.event)

    def test_all_criteria_must_match(self):
        matching = SafetyEventFilter(
            report_types=["Occurrence"],
            occurrence_categories=["Ground Operations"],
            sub_categories=["Runway Incursion"],
            statuses=["Open", "Closed"],
            keyword="INCURSION",
        )
        wrong_status = matching.model_copy(update={"statuses": ["Closed"]})

        assert matching.matches(self.event)
        assert not wrong_status.matches(self.event)

    def test_keyword_miss(self):
        assert not SafetyEventFilter(keyword="bird strike").matches(self.event)
