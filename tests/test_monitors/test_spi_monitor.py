"""Tests for the SPI monitor."""
from __future__ import annotations

from datetime import date

import pytest

from models.shared import CalculationMode, SpiTier, TargetDirection
from models.spi import SafetyEvent, SafetyEventFilter, SpiDefinition, SpiThresholds
from monitors.spi_monitor import SpiMonitor
from store.memory import InMemoryRecordStore
from utils.error_handler import StoreUnavailable

TODAY = date(2024, 8, 15)


def _event(event_id: str, occurred: str, **fields) -> SafetyEvent:
    return SafetyEvent(event_id=event_id, tenant_id="acme", occurrence_date=occurred, **fields)


@pytest.fixture
def records() -> InMemoryRecordStore:
    store = InMemoryRecordStore()
    for i, occurred in enumerate(["2024-08-01", "2024-07-01", "2024-03-01", "2023-12-01", "2023-01-01"]):
        store.add_safety_event(_event(f"e-{i}", occurred, report_type="Occurrence", heading="Runway incursion"))
    store.add_safety_event(_event("h-1", "2024-08-10", report_type="Hazard", heading="Bird activity"))
    return store


@pytest.fixture
def monitor(records) -> SpiMonitor:
    return SpiMonitor(records, clock=lambda: TODAY)


class TestCountSpi:

    def test_counts_matching_events_in_period(self, records, monitor):
        records.save_spi_definition("acme", SpiDefinition(
            spi_id="incursions",
            name="Runway incursions",
            thresholds=SpiThresholds(target=1, alert2=2, alert3=3, alert4=4),
            event_filter=SafetyEventFilter(report_types=["Occurrence"]),
        ))

        [evaluation] = monitor.evaluate("acme")

        # 2023-01-01 is outside the 365-day period
        assert evaluation.event_count == 4
        assert evaluation.current_value == 4.0
        assert evaluation.tier == SpiTier.ACTION
        assert evaluation.normalizer_hours is None

    def test_short_period(self, records, monitor):
        records.save_spi_definition("acme", SpiDefinition(
            spi_id="recent",
            name="Recent occurrences",
            period_days=30,
            thresholds=SpiThresholds(target=0, alert2=2, alert3=4, alert4=6),
            event_filter=SafetyEventFilter(keyword="incursion"),
        ))

        [evaluation] = monitor.evaluate("acme")

        assert evaluation.event_count == 1
        assert evaluation.tier == SpiTier.MONITOR

    def test_higher_is_better(self, records, monitor):
        records.save_spi_definition("acme", SpiDefinition(
            spi_id="hazard-reports",
            name="Hazard reports filed",
            indicator_type="Leading Indicator",
            target_direction=TargetDirection.HIGHER_IS_BETTER,
            thresholds=SpiThresholds(target=5, alert2=3, alert3=2, alert4=1),
            event_filter=SafetyEventFilter(report_types=["Hazard"]),
        ))

        [evaluation] = monitor.evaluate("acme")

        assert evaluation.current_value == 1.0
        assert evaluation.tier == SpiTier.ACTION

    def test_malformed_event_date_skipped(self, records, monitor):
        records.add_safety_event(_event("bad", "sometime", report_type="Occurrence"))
        records.save_spi_definition("acme", SpiDefinition(
            spi_id="incursions",
            name="Runway incursions",
            thresholds=SpiThresholds(target=1, alert2=2, alert3=3, alert4=4),
            event_filter=SafetyEventFilter(report_types=["Occurrence"]),
        ))

        assert monitor.evaluate("acme")[0].event_count == 4


class TestRateSpi:

    def _definition(self) -> SpiDefinition:
        return SpiDefinition(
            spi_id="rate",
            name="Occurrences per 100 flight hours",
            calculation_mode=CalculationMode.RATE,
            unit="per 100 hours",
            thresholds=SpiThresholds(target=0.5, alert2=1, alert3=2, alert4=3),
            event_filter=SafetyEventFilter(report_types=["Occurrence"]),
        )

    def test_normalized_by_flight_hours(self, records, monitor):
        records.add_flight_hours("acme", "2024-06-01", 400)
        records.save_spi_definition("acme", self._definition())

        [evaluation] = monitor.evaluate("acme")

        assert evaluation.event_count == 4
        assert evaluation.normalizer_hours == 400
        assert evaluation.current_value == 1.0
        assert evaluation.tier == SpiTier.MONITOR

    def test_zero_flight_hours_is_no_data(self, records, monitor):
        records.add_safety_event(_event("e-5", "2024-08-05", report_type="Occurrence"))
        records.save_spi_definition("acme", self._definition())

        [evaluation] = monitor.evaluate("acme")

        assert evaluation.event_count == 5
        assert evaluation.current_value is None
        assert evaluation.normalizer_hours == 0
        assert evaluation.tier == SpiTier.NO_DATA

    def test_zero_flight_hours_higher_is_better_is_no_data(self, records, monitor):
        records.add_safety_event(_event("e-5", "2024-08-05", report_type="Occurrence"))
        records.save_spi_definition("acme", SpiDefinition(
            spi_id="rate-up",
            name="Reports per 100 flight hours",
            calculation_mode=CalculationMode.RATE,
            target_direction=TargetDirection.HIGHER_IS_BETTER,
            thresholds=SpiThresholds(target=3, alert2=2, alert3=1, alert4=0.5),
            event_filter=SafetyEventFilter(report_types=["Occurrence"]),
        ))

        [evaluation] = monitor.evaluate("acme")

        assert evaluation.current_value is None
        assert evaluation.tier == SpiTier.NO_DATA

    def test_no_data_to_dict(self, records, monitor):
        records.save_spi_definition("acme", self._definition())

        result = monitor.evaluate("acme")[0].to_dict()

        assert result["current_value"] is None
        assert result["tier"] == "NoData"


class TestPeriodBounds:

    def test_period_is_period_days_long(self):
        store = InMemoryRecordStore()
        # 2024-08-15 back 365 days inclusive starts on 2023-08-17
        store.add_safety_event(_event("in", "2023-08-17", report_type="Occurrence"))
        store.add_safety_event(_event("out", "2023-08-16", report_type="Occurrence"))
        store.save_spi_definition("acme", SpiDefinition(
            spi_id="year",
            name="Occurrences",
            thresholds=SpiThresholds(target=1, alert2=2, alert3=3, alert4=4),
        ))

        [evaluation] = SpiMonitor(store, clock=lambda: TODAY).evaluate("acme")

        assert evaluation.event_count == 1

    def test_one_day_period_is_reference_day_only(self, records, monitor):
        records.add_safety_event(_event("today", "2024-08-15", report_type="Occurrence"))
        records.add_safety_event(_event("yesterday", "2024-08-14", report_type="Occurrence"))
        records.save_spi_definition("acme", SpiDefinition(
            spi_id="daily",
            name="Occurrences today",
            period_days=1,
            thresholds=SpiThresholds(target=1, alert2=2, alert3=3, alert4=4),
            event_filter=SafetyEventFilter(report_types=["Occurrence"]),
        ))

        assert monitor.evaluate("acme")[0].event_count == 1


def test_no_definitions(monitor):
    assert monitor.evaluate("acme") == []


def test_store_unavailable_propagates(records, monitor):
    records.available = False

    with pytest.raises(StoreUnavailable):
        monitor.evaluate("acme")


def test_to_dict(records, monitor):
    records.save_spi_definition("acme", SpiDefinition(
        spi_id="incursions",
        name="Runway incursions",
        thresholds=SpiThresholds(target=1, alert2=2, alert3=3, alert4=4),
    ))

    result = monitor.evaluate("acme")[0].to_dict()

    assert result["spi_id"] == "incursions"
    assert result["tier"] == "Urgent"
    assert result["event_count"] == 5
    assert result["target_direction"] == "lower_is_better"
