"""Monitors orchestrating the pure checks over a tenant's records."""
from monitors.compliance_scanner import ComplianceScanReport, ComplianceScanner, PersonScanResult
from monitors.spi_monitor import SpiMonitor

__all__ = [
    "ComplianceScanReport",
    "ComplianceScanner",
    "PersonScanResult",
    "SpiMonitor",
]
