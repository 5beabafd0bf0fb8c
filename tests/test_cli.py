from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from cli import build_scan_parser, main


@pytest.fixture
def snapshot(tmp_path: Path) -> Path:
    path = tmp_path / "snapshot.yaml"
    path.write_text(
        yaml.safe_dump({
            "tenants": [
                {
                    "tenant_id": "acme",
                    "persons": [
                        {
                            "person_id": "p-1",
                            "name": "Jane Doe",
                            "documents": [
                                {"document_type": "Medical", "expiry_date": "2024-08-20"},
                                {"document_type": "License", "expiry_date": "2024-09-20"},
                            ],
                        },
                    ],
                    "spi_definitions": [
                        {
                            "spi_id": "spi-1",
                            "name": "Occurrences",
                            "thresholds": {"target": 0, "alert2": 1, "alert3": 2, "alert4": 3},
                        },
                    ],
                    "safety_events": [{"event_id": "e-1", "occurrence_date": "2024-08-01"}],
                },
            ],
        }),
        encoding="utf-8",
    )
    return path


def _run(capsys, argv: list[str]):
    code = main(argv)
    out = capsys.readouterr().out
    return code, json.loads(out) if out.strip() else None


def test_scan_parser_builds() -> None:
    args = build_scan_parser().parse_args(["--tenant", "acme", "--snapshot", "s.yaml"])

    assert args.tenant_id == "acme"
    assert args.snapshot_path == "s.yaml"
    assert isinstance(args.log_level, str)


def test_score_ranks(capsys) -> None:
    code, payload = _run(capsys, ["score", "--likelihood", "4", "--severity", "4"])

    assert code == 0
    assert payload["score"] == 16
    assert payload["tier"] == "High"
    assert payload["risk_code"] == "4B"


def test_score_domain_labels(capsys) -> None:
    code, payload = _run(
        capsys,
        ["score", "--domain", "change_hazard", "--likelihood", "Remote", "--severity", "Hazardous"],
    )

    assert code == 0
    assert payload["score"] == 12


def test_score_invalid_rank_exits_1(capsys) -> None:
    code = main(["score", "--likelihood", "six", "--severity", "4"])

    assert code == 1
    assert "Invalid likelihood_rank" in capsys.readouterr().err


def test_scan_writes_alerts_back(capsys, snapshot: Path) -> None:
    argv = ["scan", "--snapshot", str(snapshot), "--tenant", "acme", "--today", "2024-08-15"]

    code, report = _run(capsys, argv)

    assert code == 0
    assert report["alerts_created"] == 2
    saved = yaml.safe_load(snapshot.read_text(encoding="utf-8"))["tenants"][0]["alerts"]
    assert sorted(a["title"] for a in saved) == ["Document Expiry: License", "Document Expiry: Medical"]

    code, report = _run(capsys, argv)

    assert code == 0
    assert report["alerts_created"] == 0


def test_scan_report_to_file(capsys, snapshot: Path, tmp_path: Path) -> None:
    out_path = tmp_path / "out" / "report.json"

    code = main([
        "scan", "--snapshot", str(snapshot), "--tenant", "acme",
        "--today", "2024-08-15", "--dedup-mode", "read_then_write", "--output", str(out_path),
    ])

    assert code == 0
    assert json.loads(out_path.read_text(encoding="utf-8"))["reference_date"] == "2024-08-15"


def test_spis(capsys, snapshot: Path) -> None:
    code, payload = _run(
        capsys,
        ["spis", "--snapshot", str(snapshot), "--tenant", "acme", "--today", "2024-08-15"],
    )

    assert code == 0
    assert payload[0]["spi_id"] == "spi-1"
    assert payload[0]["tier"] == "Monitor"


def test_alerts_and_ack(capsys, snapshot: Path) -> None:
    main(["scan", "--snapshot", str(snapshot), "--tenant", "acme", "--today", "2024-08-15"])
    capsys.readouterr()

    code, alerts = _run(
        capsys,
        ["alerts", "--snapshot", str(snapshot), "--tenant", "acme", "--person", "p-1",
         "--kind", "Document Expiry"],
    )
    assert code == 0
    assert len(alerts) == 2

    alert_id = alerts[0]["alert_id"]
    code, payload = _run(
        capsys,
        ["ack", "--snapshot", str(snapshot), "--tenant", "acme", "--person", "p-1", alert_id],
    )
    assert code == 0
    assert payload == {"acknowledged": 1}

    _, remaining = _run(
        capsys,
        ["alerts", "--snapshot", str(snapshot), "--tenant", "acme", "--person", "p-1"],
    )
    assert [a["alert_id"] for a in remaining] != [alert_id]
    assert len(remaining) == 1


def test_missing_snapshot_exits_1(capsys, tmp_path: Path) -> None:
    code = main(["spis", "--snapshot", str(tmp_path / "missing.yaml"), "--tenant", "acme"])

    assert code == 1
    assert "Store unavailable" in capsys.readouterr().err


def test_unknown_command_exits() -> None:
    with pytest.raises(SystemExit):
        main(["frobnicate"])
