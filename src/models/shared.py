"""Shared model definitions for the Safety Risk & Compliance Monitoring Core.

This module contains canonical definitions for the tier enums and type codes
used by the scorer, the evaluators and the monitors.

Usage:
    from models.shared import RiskTier, SpiTier, ExpiryTier, AlertKind
"""
from __future__ import annotations

from enum import Enum


class RiskTier(str, Enum):
    """Severity bucket of a likelihood x severity score."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    EXTREME = "Extreme"


class Tolerability(str, Enum):
    """ICAO tolerability region of a risk score."""
    ACCEPTABLE = "Acceptable"
    TOLERABLE = "Tolerable"
    INTOLERABLE = "Intolerable"


class RiskDomain(str, Enum):
    """Safety domains that use their own likelihood/severity vocabularies."""
    SAFETY_OCCURRENCE = "safety_occurrence"
    CHANGE_HAZARD = "change_hazard"


class SpiTier(str, Enum):
    """Alert level of a Safety Performance Indicator.

    - ON_TARGET: value is at or better than target
    - MONITOR: alert level 2
    - ACTION: alert level 3
    - URGENT: alert level 4
    - NO_DATA: the value could not be computed (a rate with no flight hours)
    """
    ON_TARGET = "OnTarget"
    MONITOR = "Monitor"
    ACTION = "Action"
    URGENT = "Urgent"
    NO_DATA = "NoData"


class TargetDirection(str, Enum):
    """Which way an SPI value improves."""
    LOWER_IS_BETTER = "lower_is_better"
    HIGHER_IS_BETTER = "higher_is_better"


class CalculationMode(str, Enum):
    COUNT = "count"
    RATE = "rate"


class IndicatorType(str, Enum):
    LEADING = "Leading Indicator"
    LAGGING = "Lagging Indicator"


class ExpiryTier(str, Enum):
    """Urgency bucket of a document expiry."""
    EXPIRED = "Expired"
    URGENT = "Urgent"
    WARNING = "Warning"
    NONE = "None"


class DutyWindow(str, Enum):
    """Rolling windows tracked for flight and duty time."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


# Window lengths in days
DUTY_WINDOW_DAYS: dict[DutyWindow, int] = {
    DutyWindow.DAILY: 1,
    DutyWindow.WEEKLY: 7,
    DutyWindow.MONTHLY: 30,
}


class UtilizationBand(str, Enum):
    """Fraction of a duty limit already used."""
    NORMAL = "normal"
    ELEVATED = "elevated"
    HIGH = "high"
    CRITICAL = "critical"


class AlertKind(str, Enum):
    """Alert categories written to the tenant alert stream."""
    DOCUMENT_EXPIRY = "Document Expiry"
    DUTY_LIMIT = "Duty Limit"
    RED_TAG = "Red Tag"
    YELLOW_TAG = "Yellow Tag"
    TASK = "Task"
    SIGNATURE_REQUEST = "Signature Request"
    SYSTEM_HEALTH = "System Health"


class AlertTier(str, Enum):
    """Severity recorded on scanner alerts, shared by every alert kind.

    Document alerts carry the expiry tier. An exceeded duty window is URGENT.
    """
    URGENT = "Urgent"
    WARNING = "Warning"


# Alert titles double as dedup keys; a changed format re-raises every open alert
DOCUMENT_EXPIRY_TITLE = "Document Expiry: {document_type}"
DUTY_LIMIT_TITLE = "Duty Limit Exceeded: {window}"


class DedupMode(str, Enum):
    """How the compliance scanner commits staged alerts.

    - READ_THEN_WRITE: existence check, then unconditional batch write
    - CONDITIONAL: insert-if-absent keyed on the dedup key at the store
    """
    READ_THEN_WRITE = "read_then_write"
    CONDITIONAL = "conditional"


# Tiers that produce a document expiry alert
ALERTING_EXPIRY_TIERS = {ExpiryTier.URGENT, ExpiryTier.WARNING}

SPI_TIER_ORDER: list[SpiTier] = [
    SpiTier.ON_TARGET,
    SpiTier.MONITOR,
    SpiTier.ACTION,
    SpiTier.URGENT,
]
