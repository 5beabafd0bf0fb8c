"""In-memory record and alert stores.

Used by the CLI (through snapshot files) and by the tests. State is guarded
by a lock so concurrent scans see the same semantics a document store with
batched writes would give them.
"""
from __future__ import annotations

import threading
from datetime import date
from typing import Iterable, Optional

import structlog

from checks.expiry_classifier import parse_fact_date
from models.alerts import Alert
from models.compliance import DutyEvent, DutyLimitConfig, ExpiryCutoffs, Person
from models.shared import AlertKind
from models.spi import SafetyEvent, SpiDefinition
from store.base import AlertStore, ConfigurableRecordStore, DedupKeyFn, SafetyEventPredicate
from utils.error_handler import MalformedDate, StoreUnavailable

logger = structlog.get_logger(__name__)


def is_open(alert: Alert) -> bool:
    """Targeted alerts stay open until their target acknowledges them.

    Broadcast alerts are never auto-expired.
    """
    if alert.target_holder_id is None:
        return True
    return alert.target_holder_id not in alert.acknowledged_by


class InMemoryRecordStore(ConfigurableRecordStore):
    """Dictionary-backed record layer snapshot."""

    def __init__(self):
        self.persons: dict[str, list[Person]] = {}
        self.duty_events: dict[str, list[DutyEvent]] = {}
        self.spi_definitions: dict[str, list[SpiDefinition]] = {}
        self.safety_events: dict[str, list[SafetyEvent]] = {}
        self.duty_limits: dict[str, DutyLimitConfig] = {}
        self.expiry_cutoffs: dict[str, ExpiryCutoffs] = {}
        self.flight_hours: dict[str, list[tuple[str, float]]] = {}  # tenant -> [(date, hours)]
        self.available = True

    def _check_available(self, operation: str) -> None:
        if not self.available:
            raise StoreUnavailable(operation, "record store marked unavailable")

    # Record layer writes (not part of the core's interface)

    def add_person(self, person: Person) -> None:
        self.persons.setdefault(person.tenant_id, []).append(person)

    def add_duty_event(self, event: DutyEvent) -> None:
        self.duty_events.setdefault(event.holder_id, []).append(event)

    def add_safety_event(self, event: SafetyEvent) -> None:
        self.safety_events.setdefault(event.tenant_id, []).append(event)

    def save_spi_definition(self, tenant_id: str, definition: SpiDefinition) -> None:
        definitions = [d for d in self.spi_definitions.get(tenant_id, []) if d.spi_id != definition.spi_id]
        definitions.append(definition)
        self.spi_definitions[tenant_id] = definitions

    def set_duty_limit_config(self, tenant_id: str, config: DutyLimitConfig) -> None:
        self.duty_limits[tenant_id] = config

    def set_expiry_cutoffs(self, tenant_id: str, cutoffs: ExpiryCutoffs) -> None:
        self.expiry_cutoffs[tenant_id] = cutoffs

    def add_flight_hours(self, tenant_id: str, flown_on: str, hours: float) -> None:
        self.flight_hours.setdefault(tenant_id, []).append((flown_on, hours))

    # RecordStore

    def list_active_persons(self, tenant_id: str) -> list[Person]:
        self._check_available("list_active_persons")
        return [p for p in self.persons.get(tenant_id, []) if p.active]

    def list_duty_events(self, person_id: str, since: date) -> list[DutyEvent]:
        self._check_available("list_duty_events")
        result: list[DutyEvent] = []
        for event in self.duty_events.get(person_id, []):
            try:
                if parse_fact_date(event.event_date) < since:
                    continue
            except MalformedDate:
                # Let the aggregator log and skip it
                pass
            result.append(event)
        return result

    def list_spi_definitions(self, tenant_id: str) -> list[SpiDefinition]:
        self._check_available("list_spi_definitions")
        return list(self.spi_definitions.get(tenant_id, []))

    def list_safety_events_matching(self, tenant_id: str, predicate: SafetyEventPredicate) -> list[SafetyEvent]:
        self._check_available("list_safety_events_matching")
        return [e for e in self.safety_events.get(tenant_id, []) if predicate(e)]

    def get_duty_limit_config(self, tenant_id: str) -> Optional[DutyLimitConfig]:
        self._check_available("get_duty_limit_config")
        return self.duty_limits.get(tenant_id)

    def get_expiry_cutoffs(self, tenant_id: str) -> Optional[ExpiryCutoffs]:
        self._check_available("get_expiry_cutoffs")
        return self.expiry_cutoffs.get(tenant_id)

    def get_flight_hours(self, tenant_id: str, since: date, until: date) -> float:
        self._check_available("get_flight_hours")
        total = 0.0
        for flown_on, hours in self.flight_hours.get(tenant_id, []):
            try:
                day = parse_fact_date(flown_on)
            except MalformedDate as e:
                logger.warning("flight_hours_entry_skipped", tenant_id=tenant_id, reason=e.message)
                continue
            if since <= day <= until:
                total += hours
        return round(total, 2)


class InMemoryAlertStore(AlertStore):
    """Alert stream with all-or-nothing batch writes."""

    def __init__(self, alerts: Optional[Iterable[Alert]] = None):
        self._lock = threading.Lock()
        self._alerts: dict[str, Alert] = {}
        for alert in alerts or []:
            self._alerts[alert.alert_id] = alert
        self.available = True

    def _check_available(self, operation: str) -> None:
        if not self.available:
            raise StoreUnavailable(operation, "alert store marked unavailable")

    def list_alerts(self, tenant_id: str) -> list[Alert]:
        self._check_available("list_alerts")
        with self._lock:
            return [a for a in self._alerts.values() if a.tenant_id == tenant_id]

    def find_unacknowledged(
        self,
        tenant_id: str,
        holder_id: str,
        kinds: Optional[Iterable[AlertKind]] = None,
    ) -> list[Alert]:
        self._check_available("find_unacknowledged")
        kind_set = {AlertKind(k) for k in kinds} if kinds else None
        with self._lock:
            alerts = list(self._alerts.values())
        return [
            a for a in alerts
            if a.tenant_id == tenant_id
            and a.is_visible_to(holder_id)
            and not a.is_acknowledged_by(holder_id)
            and (kind_set is None or a.kind in kind_set)
        ]

    def _check_new_ids(self, alerts: list[Alert]) -> None:
        ids = [a.alert_id for a in alerts]
        if len(set(ids)) != len(ids):
            raise ValueError("batch contains duplicate alert ids")
        clashes = [i for i in ids if i in self._alerts]
        if clashes:
            raise ValueError(f"alert ids already exist: {clashes}")

    def commit_batch(self, alerts: list[Alert]) -> list[Alert]:
        self._check_available("commit_batch")
        with self._lock:
            self._check_new_ids(alerts)
            for alert in alerts:
                self._alerts[alert.alert_id] = alert
        return list(alerts)

    def commit_batch_if_absent(self, alerts: list[Alert], key_fn: DedupKeyFn) -> list[Alert]:
        self._check_available("commit_batch_if_absent")
        with self._lock:
            self._check_new_ids(alerts)
            taken = {
                (a.tenant_id, key_fn(a)) for a in self._alerts.values() if is_open(a)
            }
            written: list[Alert] = []
            for alert in alerts:
                key = (alert.tenant_id, key_fn(alert))
                if key in taken:
                    continue
                taken.add(key)
                written.append(alert)
            for alert in written:
                self._alerts[alert.alert_id] = alert
        return written

    def acknowledge(self, tenant_id: str, alert_ids: Iterable[str], holder_id: str) -> int:
        self._check_available("acknowledge")
        updated = 0
        with self._lock:
            for alert_id in alert_ids:
                alert = self._alerts.get(alert_id)
                if alert is None or alert.tenant_id != tenant_id:
                    logger.warning("acknowledge_unknown_alert", tenant_id=tenant_id, alert_id=alert_id)
                    continue
                if alert.is_acknowledged_by(holder_id):
                    continue
                self._alerts[alert_id] = alert.acknowledge(holder_id)
                updated += 1
        return updated
