"""Operations exposed to the record and presentation layers.

Wraps the scorer, the monitors and the alert store behind the calls the
surrounding application makes: risk matrix selection, compliance scans,
SPI evaluation and alert acknowledgement.
"""
from __future__ import annotations

from typing import Any, Callable, Iterable, Optional

import structlog

from checks.expiry_classifier import parse_fact_date
from config.loader import build_tenant_config, get_regulatory_ceilings, get_spi_defaults
from models.alerts import Alert
from models.compliance import DutyLimitConfig, ExpiryCutoffs, TenantConfig
from models.risk import RiskAssessment
from models.shared import AlertKind, DedupMode, RiskDomain
from models.spi import SpiDefinition, SpiEvaluation
from monitors.compliance_scanner import ComplianceScanReport, ComplianceScanner
from monitors.spi_monitor import SpiMonitor
from scoring.risk_domains import assess
from scoring.risk_scorer import score_risk
from store.base import AlertStore, ConfigurableRecordStore
from utils.error_handler import StoreUnavailable, describe_error

logger = structlog.get_logger(__name__)


class SafetyComplianceService:
    """Facade over the monitoring core for one record/alert store pair."""

    def __init__(
        self,
        record_store: ConfigurableRecordStore,
        alert_store: AlertStore,
        dedup_mode: Optional[DedupMode] = None,
        max_workers: Optional[int] = None,
        clock: Optional[Callable[[], Any]] = None,
    ):
        self.record_store = record_store
        self.alert_store = alert_store
        self.scanner = ComplianceScanner(
            record_store,
            alert_store,
            dedup_mode=dedup_mode,
            max_workers=max_workers,
            clock=clock,
        )
        self.spi_monitor = SpiMonitor(record_store, clock=clock)
        self.last_scan_report: Optional[ComplianceScanReport] = None

    # Risk scoring

    def score_risk(self, likelihood_rank: int, severity_rank: int) -> dict[str, Any]:
        """Score a matrix cell by ranks; returns score, tier and color."""
        assessment = score_risk(likelihood_rank, severity_rank)
        return {"score": assessment.score, "tier": assessment.tier.value, "color": assessment.color}

    def score_risk_labels(self, domain: RiskDomain, likelihood_label: str, severity_label: str) -> RiskAssessment:
        return assess(domain, likelihood_label, severity_label)

    # Configuration

    def tenant_config(self, tenant_id: str) -> TenantConfig:
        return build_tenant_config(
            tenant_id,
            duty_limits=self.record_store.get_duty_limit_config(tenant_id),
            expiry_cutoffs=self.record_store.get_expiry_cutoffs(tenant_id),
        )

    def configure_duty_limits(
        self,
        tenant_id: str,
        daily: Optional[float] = None,
        weekly: Optional[float] = None,
        monthly: Optional[float] = None,
    ) -> DutyLimitConfig:
        """Save tenant duty limits, clamped to the regulatory ceilings."""
        config = DutyLimitConfig.configure(
            daily=daily,
            weekly=weekly,
            monthly=monthly,
            ceilings=get_regulatory_ceilings(),
        )
        self.record_store.set_duty_limit_config(tenant_id, config)
        logger.info(
            "duty_limits_configured",
            tenant_id=tenant_id,
            daily=config.daily_limit,
            weekly=config.weekly_limit,
            monthly=config.monthly_limit,
        )
        return config

    def configure_expiry_cutoffs(self, tenant_id: str, urgent_days: int, warning_days: int) -> ExpiryCutoffs:
        """Save tenant expiry cutoffs.

        Raises:
            InvalidConfiguration: when urgent_days is not below warning_days
        """
        cutoffs = ExpiryCutoffs(urgent_days=urgent_days, warning_days=warning_days)
        self.record_store.set_expiry_cutoffs(tenant_id, cutoffs)
        logger.info("expiry_cutoffs_configured", tenant_id=tenant_id, urgent_days=urgent_days, warning_days=warning_days)
        return cutoffs

    def save_spi_definition(self, tenant_id: str, definition: SpiDefinition | dict[str, Any]) -> SpiDefinition:
        """Validate and store an SPI definition.

        Raises:
            InvalidThresholdOrder: when the thresholds do not follow the direction
        """
        if not isinstance(definition, SpiDefinition):
            definition = SpiDefinition.model_validate({**get_spi_defaults(), **definition})
        self.record_store.save_spi_definition(tenant_id, definition)
        return definition

    # Monitors

    def run_compliance_scan(self, tenant_id: str) -> int:
        """Scan the tenant and return the number of new alerts.

        Store failures are logged and reported as zero new alerts; the next
        trigger retries.
        """
        try:
            config = self.tenant_config(tenant_id)
        except StoreUnavailable as e:
            logger.error("compliance_scan_aborted", tenant_id=tenant_id, error_type=e.error_type, details=e.details)
            self.last_scan_report = ComplianceScanReport(
                tenant_id=tenant_id,
                reference_date=parse_fact_date(self.scanner.clock()),
                error=describe_error(e),
            )
            return 0
        report = self.scanner.scan(config)
        self.last_scan_report = report
        return report.alerts_created

    def evaluate_spis(self, tenant_id: str) -> list[SpiEvaluation]:
        return self.spi_monitor.evaluate(tenant_id)

    # Alerts

    def find_unacknowledged_alerts(
        self,
        tenant_id: str,
        person_id: str,
        kinds: Optional[Iterable[AlertKind]] = None,
    ) -> list[Alert]:
        alerts = self.alert_store.find_unacknowledged(tenant_id, person_id, kinds)
        return sorted(alerts, key=lambda a: a.created_at, reverse=True)

    def acknowledge(self, tenant_id: str, alert_ids: Iterable[str], person_id: str) -> int:
        updated = self.alert_store.acknowledge(tenant_id, list(alert_ids), person_id)
        logger.info("alerts_acknowledged", tenant_id=tenant_id, person_id=person_id, updated=updated)
        return updated
