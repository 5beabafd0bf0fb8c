from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from datetime import date
from pathlib import Path
from typing import Any, Optional

import structlog
from dotenv import load_dotenv

from models.shared import AlertKind, DedupMode, RiskDomain
from sms_service import SafetyComplianceService
from store.snapshot import load_snapshot, save_alerts
from utils.error_handler import InvalidRank, SmsCoreError, exit_with_error


logger = logging.getLogger(__name__)

COMMANDS = ("score", "scan", "spis", "alerts", "ack")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sms-core",
        description="Safety risk scoring, SPI evaluation and compliance alerting",
    )
    parser.add_argument("command", choices=COMMANDS, help="Subcommand to run")
    return parser


def _add_common_arguments(parser: argparse.ArgumentParser, snapshot: bool = True) -> None:
    if snapshot:
        parser.add_argument(
            "--snapshot",
            dest="snapshot_path",
            default=os.getenv("SMS_CORE_SNAPSHOT", "data/snapshot.yaml"),
            help="Path to the record/alert snapshot (.yaml/.yml/.json)",
        )
        parser.add_argument(
            "--tenant",
            dest="tenant_id",
            required=True,
            help="Tenant (organization) identifier",
        )

    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=os.getenv("SMS_CORE_LOG_LEVEL", "INFO"),
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    parser.add_argument(
        "--dotenv",
        dest="dotenv_path",
        default=".env",
        help="Path to .env file to load (default: .env at repo root)",
    )


def build_score_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sms-core score",
        description="Score a risk matrix cell from ranks (1-5) or domain labels",
    )

    parser.add_argument(
        "--likelihood",
        required=True,
        help="Likelihood rank 1-5, or a likelihood label when --domain is set",
    )

    parser.add_argument(
        "--severity",
        required=True,
        help="Severity rank 1-5, or a severity label when --domain is set",
    )

    parser.add_argument(
        "--domain",
        choices=[d.value for d in RiskDomain],
        default="",
        help="Label set to resolve --likelihood/--severity against",
    )

    _add_common_arguments(parser, snapshot=False)
    return parser


def build_scan_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sms-core scan",
        description="Run a compliance scan over a snapshot and write new alerts back to it",
    )

    parser.add_argument(
        "--today",
        default="",
        help="Reference date (YYYY-MM-DD). Defaults to the current date.",
    )

    parser.add_argument(
        "--dedup-mode",
        dest="dedup_mode",
        choices=[m.value for m in DedupMode],
        default="",
        help="Alert write mode (default from config: scanner.dedup_mode)",
    )

    parser.add_argument(
        "--max-workers",
        dest="max_workers",
        type=int,
        default=0,
        help="Persons scanned in parallel (default from config: scanner.max_workers)",
    )

    parser.add_argument(
        "--output",
        dest="output_path",
        default="",
        help="Optional path for the scan report JSON. If not set, prints to stdout.",
    )

    _add_common_arguments(parser)
    return parser


def build_spis_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sms-core spis",
        description="Evaluate the tenant's Safety Performance Indicators",
    )

    parser.add_argument(
        "--today",
        default="",
        help="Reference date (YYYY-MM-DD). Defaults to the current date.",
    )

    _add_common_arguments(parser)
    return parser


def build_alerts_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sms-core alerts",
        description="List a person's unacknowledged alerts, newest first",
    )

    parser.add_argument(
        "--person",
        dest="person_id",
        required=True,
        help="Person (holder) identifier",
    )

    parser.add_argument(
        "--kind",
        dest="kinds",
        action="append",
        choices=[k.value for k in AlertKind],
        default=None,
        help="Only alerts of this kind (repeatable)",
    )

    _add_common_arguments(parser)
    return parser


def build_ack_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sms-core ack",
        description="Acknowledge alerts on behalf of a person",
    )

    parser.add_argument(
        "--person",
        dest="person_id",
        required=True,
        help="Person (holder) acknowledging the alerts",
    )

    parser.add_argument(
        "alert_ids",
        nargs="+",
        help="Alert ids to acknowledge",
    )

    _add_common_arguments(parser)
    return parser


def _configure_logging(log_level: str) -> None:
    level = getattr(logging, str(log_level).upper(), logging.INFO)
    logging.basicConfig(level=level, stream=sys.stderr)

    # Route structlog through stdlib logging so stdout stays reserved for JSON output.
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def _emit(payload: Any, output_path: str = "") -> None:
    text = json.dumps(payload, indent=2, default=str)
    if output_path:
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(text, encoding="utf-8")
        logger.info("[output] wrote=%s", str(output_file))
    else:
        print(text)


def _clock(today: str):
    return (lambda: today) if today else date.today


def run_score(likelihood: str, severity: str, domain: str = "") -> int:
    from scoring.risk_domains import assess
    from scoring.risk_scorer import score_risk

    if domain:
        assessment = assess(RiskDomain(domain), likelihood, severity)
    else:
        ranks = []
        for field, raw in (("likelihood_rank", likelihood), ("severity_rank", severity)):
            try:
                ranks.append(int(raw))
            except ValueError:
                raise InvalidRank(field, raw) from None
        assessment = score_risk(*ranks)

    _emit(assessment.to_dict())
    return 0


def run_scan(
    snapshot_path: str,
    tenant_id: str,
    today: str = "",
    dedup_mode: str = "",
    max_workers: int = 0,
    output_path: str = "",
) -> int:
    records, alerts = load_snapshot(snapshot_path)
    service = SafetyComplianceService(
        records,
        alerts,
        dedup_mode=DedupMode(dedup_mode) if dedup_mode else None,
        max_workers=max_workers or None,
        clock=_clock(today),
    )

    logger.info("[run] scan tenant=%s snapshot=%s", tenant_id, snapshot_path)
    created = service.run_compliance_scan(tenant_id)
    report = service.last_scan_report

    if created:
        save_alerts(snapshot_path, alerts)
    logger.info("[output] alerts_created=%s", created)

    _emit(report.to_dict(), output_path)
    return 1 if report.error else 0


def run_spis(snapshot_path: str, tenant_id: str, today: str = "") -> int:
    records, alerts = load_snapshot(snapshot_path)
    service = SafetyComplianceService(records, alerts, clock=_clock(today))

    evaluations = service.evaluate_spis(tenant_id)
    _emit([e.to_dict() for e in evaluations])
    return 0


def run_alerts(snapshot_path: str, tenant_id: str, person_id: str, kinds: Optional[list[str]] = None) -> int:
    records, alerts = load_snapshot(snapshot_path)
    service = SafetyComplianceService(records, alerts)

    found = service.find_unacknowledged_alerts(
        tenant_id,
        person_id,
        [AlertKind(k) for k in kinds] if kinds else None,
    )
    _emit([a.model_dump(mode="json") for a in found])
    return 0


def run_ack(snapshot_path: str, tenant_id: str, person_id: str, alert_ids: list[str]) -> int:
    records, alerts = load_snapshot(snapshot_path)
    service = SafetyComplianceService(records, alerts)

    updated = service.acknowledge(tenant_id, alert_ids, person_id)
    if updated:
        save_alerts(snapshot_path, alerts)

    _emit({"acknowledged": updated})
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    argv_list = list(argv) if argv is not None else sys.argv[1:]

    if not argv_list or argv_list[0] not in COMMANDS:
        build_parser().parse_args(argv_list[:1])
        return 2

    command, rest = argv_list[0], argv_list[1:]

    if command == "score":
        args = build_score_parser().parse_args(rest)
    elif command == "scan":
        args = build_scan_parser().parse_args(rest)
    elif command == "spis":
        args = build_spis_parser().parse_args(rest)
    elif command == "alerts":
        args = build_alerts_parser().parse_args(rest)
    else:
        args = build_ack_parser().parse_args(rest)

    _configure_logging(args.log_level)
    load_dotenv(args.dotenv_path)

    try:
        if command == "score":
            return run_score(args.likelihood, args.severity, domain=args.domain)

        if command == "scan":
            return run_scan(
                snapshot_path=args.snapshot_path,
                tenant_id=args.tenant_id,
                today=args.today,
                dedup_mode=args.dedup_mode,
                max_workers=int(args.max_workers),
                output_path=args.output_path,
            )

        if command == "spis":
            return run_spis(args.snapshot_path, args.tenant_id, today=args.today)

        if command == "alerts":
            return run_alerts(args.snapshot_path, args.tenant_id, args.person_id, kinds=args.kinds)

        return run_ack(args.snapshot_path, args.tenant_id, args.person_id, args.alert_ids)
    except SmsCoreError as e:
        return exit_with_error(e, context=command)


if __name__ == "__main__":
    raise SystemExit(main())
