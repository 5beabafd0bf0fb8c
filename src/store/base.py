"""Store interfaces consumed by the monitoring core.

The record store is read-only from the core's point of view. The alert
store is the only place the core writes to. Implementations raise
StoreUnavailable when the backing service cannot be reached.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Callable, Iterable, Optional

from models.alerts import Alert
from models.compliance import DutyEvent, DutyLimitConfig, ExpiryCutoffs, Person
from models.shared import AlertKind
from models.spi import SafetyEvent, SpiDefinition

SafetyEventPredicate = Callable[[SafetyEvent], bool]
DedupKeyFn = Callable[[Alert], tuple]


class RecordStore(ABC):
    """Read access to the tenant record layer."""

    @abstractmethod
    def list_active_persons(self, tenant_id: str) -> list[Person]:
        """Active persons of a tenant, each with embedded document expiries."""
        pass

    @abstractmethod
    def list_duty_events(self, person_id: str, since: date) -> list[DutyEvent]:
        """Duty/flight events of a person dated on or after `since`."""
        pass

    @abstractmethod
    def list_spi_definitions(self, tenant_id: str) -> list[SpiDefinition]:
        pass

    @abstractmethod
    def list_safety_events_matching(self, tenant_id: str, predicate: SafetyEventPredicate) -> list[SafetyEvent]:
        pass

    @abstractmethod
    def get_duty_limit_config(self, tenant_id: str) -> Optional[DutyLimitConfig]:
        """Configured duty limits, or None when the tenant never set any."""
        pass

    @abstractmethod
    def get_expiry_cutoffs(self, tenant_id: str) -> Optional[ExpiryCutoffs]:
        """Configured expiry cutoffs, or None when the tenant uses the defaults."""
        pass

    @abstractmethod
    def get_flight_hours(self, tenant_id: str, since: date, until: date) -> float:
        """Total flown hours in [since, until]; normalizer for Rate SPIs."""
        pass


class ConfigurableRecordStore(RecordStore):
    """Record store that also accepts the record layer's configuration edits."""

    @abstractmethod
    def save_spi_definition(self, tenant_id: str, definition: SpiDefinition) -> None:
        pass

    @abstractmethod
    def set_duty_limit_config(self, tenant_id: str, config: DutyLimitConfig) -> None:
        pass

    @abstractmethod
    def set_expiry_cutoffs(self, tenant_id: str, cutoffs: ExpiryCutoffs) -> None:
        pass


class AlertStore(ABC):
    """Tenant alert stream."""

    @abstractmethod
    def list_alerts(self, tenant_id: str) -> list[Alert]:
        pass

    @abstractmethod
    def find_unacknowledged(
        self,
        tenant_id: str,
        holder_id: str,
        kinds: Optional[Iterable[AlertKind]] = None,
    ) -> list[Alert]:
        """Alerts visible to holder_id (targeted or broadcast) they have not acknowledged."""
        pass

    @abstractmethod
    def commit_batch(self, alerts: list[Alert]) -> list[Alert]:
        """Write all alerts or none. Returns the written alerts."""
        pass

    @abstractmethod
    def commit_batch_if_absent(self, alerts: list[Alert], key_fn: DedupKeyFn) -> list[Alert]:
        """Atomically write the alerts whose dedup key has no unacknowledged match.

        The existence check and the write happen under one critical section
        (compare-and-swap). Returns the alerts actually written.
        """
        pass

    @abstractmethod
    def acknowledge(self, tenant_id: str, alert_ids: Iterable[str], holder_id: str) -> int:
        """Append holder_id to acknowledged_by of each alert. Returns the count updated."""
        pass
