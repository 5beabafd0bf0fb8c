"""Safety Performance Indicator monitor.

Evaluates each configured SPI over the current snapshot of safety events and
returns (definition, current value, tier). Results are for management review
and are never written to the alert stream.
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Callable, Optional

import structlog

from checks.expiry_classifier import parse_fact_date
from checks.threshold_evaluator import evaluate_threshold
from models.shared import CalculationMode, SpiTier
from models.spi import SafetyEvent, SpiDefinition, SpiEvaluation
from store.base import RecordStore
from utils.error_handler import MalformedDate

logger = structlog.get_logger(__name__)


class SpiMonitor:
    """Computes current SPI values and their alert tiers."""

    def __init__(self, record_store: RecordStore, clock: Optional[Callable[[], Any]] = None):
        self.record_store = record_store
        self.clock = clock or date.today

    def evaluate(self, tenant_id: str) -> list[SpiEvaluation]:
        """Evaluate every SPI definition of the tenant.

        Raises:
            StoreUnavailable: if the record store cannot be read
        """
        reference = parse_fact_date(self.clock())
        definitions = self.record_store.list_spi_definitions(tenant_id)
        evaluations = [self.evaluate_definition(tenant_id, d, reference) for d in definitions]

        logger.info(
            "spi_evaluation_completed",
            tenant_id=tenant_id,
            indicators=len(evaluations),
            tiers={e.definition.spi_id: e.tier.value for e in evaluations},
        )
        return evaluations

    def evaluate_definition(self, tenant_id: str, definition: SpiDefinition, reference: date) -> SpiEvaluation:
        """Evaluate one definition over the `period_days` calendar days ending on `reference`.

        A Rate definition with no flight hours in the period has no value;
        it is reported as NO_DATA instead of being tiered.
        """
        period_start = reference - timedelta(days=definition.period_days - 1)
        events = self.record_store.list_safety_events_matching(tenant_id, definition.event_filter.matches)
        in_period = [e for e in events if self._in_period(e, period_start, reference, definition)]
        count = len(in_period)

        if definition.calculation_mode != CalculationMode.RATE:
            value = float(count)
            tier = evaluate_threshold(value, definition.thresholds, definition.target_direction)
            return SpiEvaluation(definition=definition, current_value=value, tier=tier, event_count=count)

        normalizer = self.record_store.get_flight_hours(tenant_id, period_start, reference)
        if normalizer <= 0:
            logger.warning(
                "spi_rate_without_flight_hours",
                tenant_id=tenant_id,
                spi_id=definition.spi_id,
                events=count,
            )
            return SpiEvaluation(
                definition=definition,
                current_value=None,
                tier=SpiTier.NO_DATA,
                event_count=count,
                normalizer_hours=normalizer,
            )

        value = count / normalizer * definition.rate_scale
        tier = evaluate_threshold(value, definition.thresholds, definition.target_direction)
        return SpiEvaluation(
            definition=definition,
            current_value=round(value, 3),
            tier=tier,
            event_count=count,
            normalizer_hours=normalizer,
        )

    @staticmethod
    def _in_period(event: SafetyEvent, start: date, end: date, definition: SpiDefinition) -> bool:
        try:
            day = parse_fact_date(event.occurrence_date)
        except MalformedDate as e:
            logger.warning(
                "safety_event_skipped",
                spi_id=definition.spi_id,
                event_id=event.event_id,
                reason=e.message,
            )
            return False
        return start <= day <= end
