"""Configuration loader for the monitoring core.

Provides centralized access to deployment defaults. Evaluators never read
this module directly; the service turns it into an explicit TenantConfig.
"""
from __future__ import annotations

import os
import yaml
from pathlib import Path
from typing import Any, Optional
import structlog

from models.compliance import DutyLimitCeilings, DutyLimitConfig, ExpiryCutoffs, TenantConfig
from models.shared import DedupMode

logger = structlog.get_logger(__name__)

CONFIG_FILE = Path(__file__).parent / "sms_config.yaml"


class ConfigLoader:
    """Loads and provides access to deployment configuration."""

    _instance: Optional[ConfigLoader] = None
    _config: Optional[dict[str, Any]] = None

    def __new__(cls) -> ConfigLoader:
        """Singleton pattern - ensure only one config instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize config loader (only runs once due to singleton)."""
        if self._config is None:
            self._load_config()

    def _config_path(self) -> Path:
        override = os.getenv("SMS_CORE_CONFIG")
        return Path(override) if override else CONFIG_FILE

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        path = self._config_path()
        if path.exists():
            with open(path) as f:
                self._config = yaml.safe_load(f) or {}
            logger.info("config_loaded", path=str(path))
        else:
            logger.warning("config_file_not_found", path=str(path))
            self._config = {}

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot-notation key.

        Examples:
            config.get("expiry.urgent_days")
            config.get("duty_limits.regulatory_ceiling.weekly")
            config.get("nonexistent.key", default=100)
        """
        if not self._config:
            return default

        keys = key.split(".")
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def get_section(self, section: str) -> dict[str, Any]:
        """Get entire configuration section."""
        return self.get(section, default={})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._config = None
        self._load_config()


# Singleton instance
_config = ConfigLoader()


def get_config() -> ConfigLoader:
    """Get the global config instance."""
    return _config


def get_expiry_cutoffs() -> ExpiryCutoffs:
    """Get urgent/warning day cutoffs for document expiry."""
    return ExpiryCutoffs(
        urgent_days=int(_config.get("expiry.urgent_days", 30)),
        warning_days=int(_config.get("expiry.warning_days", 60)),
    )


def get_regulatory_ceilings() -> DutyLimitCeilings:
    """Get the fixed regulatory duty ceilings of this deployment."""
    return DutyLimitCeilings(
        daily=float(_config.get("duty_limits.regulatory_ceiling.daily", 8)),
        weekly=float(_config.get("duty_limits.regulatory_ceiling.weekly", 30)),
        monthly=float(_config.get("duty_limits.regulatory_ceiling.monthly", 100)),
    )


def get_default_duty_limits() -> DutyLimitConfig:
    """Get duty limits for tenants that have not configured their own."""
    return DutyLimitConfig.configure(
        daily=_config.get("duty_limits.default.daily"),
        weekly=_config.get("duty_limits.default.weekly"),
        monthly=_config.get("duty_limits.default.monthly"),
        ceilings=get_regulatory_ceilings(),
    )


def get_scanner_max_workers() -> int:
    return int(_config.get("scanner.max_workers", 8))


def get_dedup_mode() -> DedupMode:
    return DedupMode(_config.get("scanner.dedup_mode", DedupMode.CONDITIONAL.value))


def get_escalate_on_tier_change() -> bool:
    return bool(_config.get("scanner.escalate_on_tier_change", False))


def get_duty_lookback_days() -> int:
    """Get how many days of duty events a scan fetches (at least the monthly window)."""
    return max(30, int(_config.get("scanner.duty_lookback_days", 30)))


def build_tenant_config(
    tenant_id: str,
    duty_limits: Optional[DutyLimitConfig] = None,
    expiry_cutoffs: Optional[ExpiryCutoffs] = None,
) -> TenantConfig:
    """Assemble the explicit per-tenant configuration passed to evaluators.

    Settings the tenant has not configured fall back to the deployment defaults.
    """
    return TenantConfig(
        tenant_id=tenant_id,
        duty_limits=duty_limits or get_default_duty_limits(),
        expiry_cutoffs=expiry_cutoffs or get_expiry_cutoffs(),
        escalate_on_tier_change=get_escalate_on_tier_change(),
    )


def get_spi_defaults() -> dict[str, Any]:
    """Get defaults applied to SPI definitions that omit them."""
    return {
        "rate_scale": float(_config.get("spi.default_rate_scale", 100)),
        "period_days": int(_config.get("spi.default_period_days", 365)),
    }
