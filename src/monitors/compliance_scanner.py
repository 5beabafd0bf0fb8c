"""Compliance scanner: document expiries and duty limits to deduplicated alerts.

For every active person of a tenant the scanner classifies each document
expiry, aggregates duty time over the daily/weekly/monthly windows, and
stages an alert for each Urgent/Warning document and each exceeded duty
window that does not already have an open alert with the same dedup key.
Staged alerts are committed per person as one atomic batch.

Dedup key: (target_holder_id, title), or (target_holder_id, title, tier)
when the tenant enables escalate_on_tier_change. With the default key a
document that moves from Warning to Urgent keeps its original alert.

Write modes:
- READ_THEN_WRITE: the existence check and the write are separate store
  calls. Two concurrent scans of the same person can both pass the check
  and both write.
- CONDITIONAL: the store performs insert-if-absent on the dedup key inside
  one critical section, which closes that race.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Callable, Optional

import structlog

from checks.duty_limits import DutyWindowStatus, evaluate_duty_limits
from checks.expiry_classifier import classify_expiry, parse_fact_date
from config.loader import (
    get_dedup_mode,
    get_duty_lookback_days,
    get_scanner_max_workers,
)
from models.alerts import Alert
from models.compliance import Person, TenantConfig
from models.shared import (
    ALERTING_EXPIRY_TIERS,
    DOCUMENT_EXPIRY_TITLE,
    DUTY_LIMIT_TITLE,
    AlertKind,
    AlertTier,
    DedupMode,
)
from store.base import AlertStore, RecordStore
from utils.error_handler import MalformedDate, StoreUnavailable, describe_error

logger = structlog.get_logger(__name__)


@dataclass
class PersonScanResult:
    """Outcome of one person's scan."""
    person_id: str
    alerts_created: list[Alert] = field(default_factory=list)
    skipped_facts: list[str] = field(default_factory=list)
    duty_statuses: list[DutyWindowStatus] = field(default_factory=list)
    error: str = ""

    @property
    def failed(self) -> bool:
        return bool(self.error)

    def to_dict(self) -> dict[str, Any]:
        return {
            "person_id": self.person_id,
            "alerts_created": [a.title for a in self.alerts_created],
            "skipped_facts": self.skipped_facts,
            "duty": [s.to_dict() for s in self.duty_statuses],
            "error": self.error,
        }


@dataclass
class ComplianceScanReport:
    """Summary of one tenant scan."""
    tenant_id: str
    reference_date: date
    results: list[PersonScanResult] = field(default_factory=list)
    error: str = ""  # set when the person list itself could not be read

    @property
    def persons_scanned(self) -> int:
        return len(self.results)

    @property
    def alerts_created(self) -> int:
        return sum(len(r.alerts_created) for r in self.results)

    @property
    def failed_persons(self) -> list[str]:
        return [r.person_id for r in self.results if r.failed]

    @property
    def skipped_facts(self) -> int:
        return sum(len(r.skipped_facts) for r in self.results)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "reference_date": self.reference_date.isoformat(),
            "persons_scanned": self.persons_scanned,
            "alerts_created": self.alerts_created,
            "failed_persons": self.failed_persons,
            "skipped_facts": self.skipped_facts,
            "error": self.error,
            "persons": [r.to_dict() for r in sorted(self.results, key=lambda r: r.person_id)],
        }


class ComplianceScanner:
    """Scans a tenant's compliance facts and writes new alerts."""

    def __init__(
        self,
        record_store: RecordStore,
        alert_store: AlertStore,
        dedup_mode: Optional[DedupMode] = None,
        max_workers: Optional[int] = None,
        clock: Optional[Callable[[], Any]] = None,
    ):
        self.record_store = record_store
        self.alert_store = alert_store
        self.dedup_mode = DedupMode(dedup_mode) if dedup_mode else get_dedup_mode()
        self.max_workers = max_workers or get_scanner_max_workers()
        self.clock = clock or date.today
        self.duty_lookback_days = get_duty_lookback_days()

    def scan(self, config: TenantConfig) -> ComplianceScanReport:
        """Scan every active person of the tenant.

        Never raises for store failures: an unreachable store aborts the
        affected person's batch (or the whole scan when the person list
        cannot be read) and is reported and logged for the next trigger.
        """
        reference = parse_fact_date(self.clock())
        report = ComplianceScanReport(tenant_id=config.tenant_id, reference_date=reference)

        try:
            persons = self.record_store.list_active_persons(config.tenant_id)
        except StoreUnavailable as e:
            logger.error(
                "compliance_scan_aborted",
                tenant_id=config.tenant_id,
                error_type=e.error_type,
                details=e.details,
            )
            report.error = describe_error(e)
            return report

        if persons:
            workers = max(1, min(self.max_workers, len(persons)))
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = [pool.submit(self.scan_person, p, config, reference) for p in persons]
                for future in as_completed(futures):
                    report.results.append(future.result())

        logger.info(
            "compliance_scan_completed",
            tenant_id=config.tenant_id,
            reference_date=reference.isoformat(),
            persons_scanned=report.persons_scanned,
            alerts_created=report.alerts_created,
            failed_persons=len(report.failed_persons),
            skipped_facts=report.skipped_facts,
            dedup_mode=self.dedup_mode.value,
        )
        return report

    def scan_person(self, person: Person, config: TenantConfig, reference: date) -> PersonScanResult:
        """Check-then-commit for one person; StoreUnavailable aborts only this person."""
        result = PersonScanResult(person_id=person.person_id)
        try:
            existing = self.alert_store.find_unacknowledged(config.tenant_id, person.person_id)
            events = self.record_store.list_duty_events(
                person.person_id,
                since=reference - timedelta(days=self.duty_lookback_days),
            )
            result.duty_statuses = evaluate_duty_limits(events, config.duty_limits, reference)

            staged = self.stage_alerts(person, config, reference, existing, result)
            if staged:
                result.alerts_created = self._commit(staged, config)
        except StoreUnavailable as e:
            logger.error(
                "person_scan_aborted",
                tenant_id=config.tenant_id,
                person_id=person.person_id,
                operation=e.operation,
                details=e.details,
            )
            result.alerts_created = []
            result.error = describe_error(e)

        return result

    def stage_alerts(
        self,
        person: Person,
        config: TenantConfig,
        reference: date,
        existing: list[Alert],
        result: PersonScanResult,
    ) -> list[Alert]:
        """Build the alerts this person needs that are not already open."""
        include_tier = config.escalate_on_tier_change
        seen = {
            a.dedup_key(include_tier)
            for a in existing
            if a.target_holder_id == person.person_id
        }
        staged: list[Alert] = []

        def stage(alert: Alert) -> None:
            key = alert.dedup_key(include_tier)
            if key in seen:
                return
            seen.add(key)
            staged.append(alert)

        for document in person.documents:
            try:
                status = classify_expiry(document.expiry_date, reference, config.expiry_cutoffs)
            except MalformedDate as e:
                logger.warning(
                    "expiry_fact_skipped",
                    tenant_id=config.tenant_id,
                    person_id=person.person_id,
                    document_type=document.document_type,
                    reason=e.message,
                )
                result.skipped_facts.append(document.document_type)
                continue

            if status.tier not in ALERTING_EXPIRY_TIERS:
                continue

            expiry_day = parse_fact_date(document.expiry_date)
            stage(Alert(
                tenant_id=config.tenant_id,
                kind=AlertKind.DOCUMENT_EXPIRY,
                title=DOCUMENT_EXPIRY_TITLE.format(document_type=document.document_type),
                description=(
                    f"{document.document_type} for {person.name or person.person_id} expires on "
                    f"{expiry_day.isoformat()} ({status.days_remaining} days remaining)."
                ),
                target_holder_id=person.person_id,
                tier=AlertTier(status.tier.value).value,
            ))

        for status in result.duty_statuses:
            if not status.exceeded:
                continue
            stage(Alert(
                tenant_id=config.tenant_id,
                kind=AlertKind.DUTY_LIMIT,
                title=DUTY_LIMIT_TITLE.format(window=status.window.value),
                description=(
                    f"{person.name or person.person_id} has logged {status.total_hours} hours in the "
                    f"{status.window.value} window, above the limit of {status.limit_hours} hours."
                ),
                target_holder_id=person.person_id,
                tier=AlertTier.URGENT.value,
            ))

        return staged

    def _commit(self, staged: list[Alert], config: TenantConfig) -> list[Alert]:
        if self.dedup_mode == DedupMode.CONDITIONAL:
            include_tier = config.escalate_on_tier_change
            return self.alert_store.commit_batch_if_absent(
                staged,
                key_fn=lambda a: a.dedup_key(include_tier),
            )
        return self.alert_store.commit_batch(staged)
