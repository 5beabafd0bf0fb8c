"""Load record-store snapshots from YAML/JSON files.

Snapshot layout (one entry per tenant):

    tenants:
      - tenant_id: acme-flight-school
        duty_limits: {daily: 8, weekly: 25, monthly: 90}
        expiry_cutoffs: {urgent_days: 14, warning_days: 45}
        persons:
          - person_id: p-1
            name: Jane Doe
            documents:
              - {document_type: Medical, expiry_date: 2024-08-20}
        duty_events:
          - {holder_id: p-1, event_date: 2024-08-15, duration_hours: 2.0}
        spi_definitions: [...]
        safety_events: [...]
        flight_hours:
          - {date: 2024-08-01, hours: 120}
        alerts: [...]
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import structlog
import yaml

from config.loader import get_regulatory_ceilings, get_spi_defaults
from models.alerts import Alert
from models.compliance import DocumentExpiry, DutyEvent, DutyLimitConfig, ExpiryCutoffs, Person
from models.spi import SafetyEvent, SpiDefinition
from store.memory import InMemoryAlertStore, InMemoryRecordStore
from utils.error_handler import StoreUnavailable

logger = structlog.get_logger(__name__)


def _read(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise StoreUnavailable("load_snapshot", f"snapshot not found: {path}")
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    return data or {}


def _write(path: Path, data: dict[str, Any]) -> None:
    if path.suffix.lower() == ".json":
        text = json.dumps(data, indent=2, default=str)
    else:
        text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    temp = path.with_suffix(path.suffix + ".tmp")
    try:
        temp.write_text(text, encoding="utf-8")
        os.replace(temp, path)
    except OSError:
        temp.unlink(missing_ok=True)
        raise


def load_snapshot(path: str | Path) -> tuple[InMemoryRecordStore, InMemoryAlertStore]:
    """Build in-memory stores from a snapshot file.

    Raises:
        StoreUnavailable: if the file does not exist
    """
    path = Path(path)
    data = _read(path)

    records = InMemoryRecordStore()
    alerts: list[Alert] = []
    ceilings = get_regulatory_ceilings()

    for tenant in data.get("tenants", []):
        tenant_id = tenant["tenant_id"]

        limits = tenant.get("duty_limits")
        if limits:
            records.set_duty_limit_config(
                tenant_id,
                DutyLimitConfig.configure(
                    daily=limits.get("daily"),
                    weekly=limits.get("weekly"),
                    monthly=limits.get("monthly"),
                    ceilings=ceilings,
                ),
            )

        cutoffs = tenant.get("expiry_cutoffs")
        if cutoffs:
            records.set_expiry_cutoffs(tenant_id, ExpiryCutoffs(**cutoffs))

        for raw in tenant.get("persons", []):
            documents = [
                DocumentExpiry(**{"holder_id": raw["person_id"], **doc})
                for doc in raw.get("documents", [])
            ]
            records.add_person(Person(**{**raw, "tenant_id": tenant_id, "documents": documents}))

        for raw in tenant.get("duty_events", []):
            records.add_duty_event(DutyEvent(**raw))

        for raw in tenant.get("spi_definitions", []):
            records.save_spi_definition(tenant_id, SpiDefinition.model_validate({**get_spi_defaults(), **raw}))

        for raw in tenant.get("safety_events", []):
            records.add_safety_event(SafetyEvent(**{**raw, "tenant_id": tenant_id}))

        for raw in tenant.get("flight_hours", []):
            records.add_flight_hours(tenant_id, raw["date"], float(raw["hours"]))

        for raw in tenant.get("alerts", []):
            alerts.append(Alert(**{**raw, "tenant_id": tenant_id}))

    logger.info(
        "snapshot_loaded",
        path=str(path),
        tenants=len(data.get("tenants", [])),
        alerts=len(alerts),
    )
    return records, InMemoryAlertStore(alerts)


def save_alerts(path: str | Path, alert_store: InMemoryAlertStore) -> None:
    """Write the alert stream of every tenant back into the snapshot file."""
    path = Path(path)
    data = _read(path)

    for tenant in data.get("tenants", []):
        tenant_alerts = alert_store.list_alerts(tenant["tenant_id"])
        tenant["alerts"] = [
            a.model_dump(mode="json", exclude={"tenant_id"})
            for a in sorted(tenant_alerts, key=lambda a: a.created_at)
        ]

    _write(path, data)
    logger.info("snapshot_alerts_saved", path=str(path))
