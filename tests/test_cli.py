"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from a11ylint.cli import _build_parser, main
from a11ylint.logging import configure_logging


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "scan"])
    assert args.verbose is True
    assert args.command == "scan"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["scan", "src", "--verbose"])
    assert args.verbose is True
    assert args.path == "src"


@pytest.mark.parametrize(("raw", "expected"), [("sync", "sequential"), ("auto", "auto"), ("6", 6)])
def test_cli_parses_workers(raw: str, expected: object) -> None:
    args = _build_parser().parse_args(["scan", "--workers", raw])
    assert args.workers == expected


def test_cli_rejects_bad_workers_and_tiers() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["scan", "--workers", "0"])
    with pytest.raises(SystemExit):
        parser.parse_args(["scan", "--tier", "extended"])


def test_checks_command_lists_tier(capsys: pytest.CaptureFixture[str]) -> None:
    main(["checks", "--tier", "basic"])

    output = capsys.readouterr().out
    assert "image-alt" in output
    assert "color-contrast" in output
    assert "prefers-reduced-motion" not in output


def _project(source_builder) -> Path:
    source_builder.write(
        {
            "app/home.component.html": '<img src="hero.png">\n<button>Save</button>\n',
            "app/home.component.scss": ".home { color: #000; background: #fff; }\n",
        }
    )
    return source_builder.path()


def test_scan_writes_json_report(source_builder, tmp_path: Path) -> None:
    root = _project(source_builder)
    output = tmp_path / "report.json"

    main(["scan", str(root), "--tier", "basic", "--format", "json", "--output", str(output)])

    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["tier"] == "basic"
    units = {unit["unit_id"]: unit for unit in data["units"]}
    html_unit = units["app/home.component"]
    assert [issue["check_id"] for issue in html_unit["issues"]] == ["image-alt"]
    assert data["totals"]["error"] == 1


def test_scan_text_output_and_fail_under(source_builder, capsys: pytest.CaptureFixture[str]) -> None:
    root = _project(source_builder)

    with pytest.raises(SystemExit) as excinfo:
        main(["scan", str(root), "--tier", "basic", "--fail-under", "90"])

    assert excinfo.value.code == 1
    output = capsys.readouterr().out
    assert "[error] image-alt: Image is missing an alt attribute" in output


def test_scan_reads_config_file(source_builder, capsys: pytest.CaptureFixture[str]) -> None:
    root = _project(source_builder)
    (root / ".a11ylint.yml").write_text("check: button-name\n", encoding="utf-8")

    main(["scan", str(root)])

    output = capsys.readouterr().out
    assert "selection: button-name" in output
    assert "image-alt" not in output


def test_scan_unknown_check_exits_with_status_two(source_builder) -> None:
    root = _project(source_builder)

    with pytest.raises(SystemExit) as excinfo:
        main(["scan", str(root), "--check", "no-such-check"])

    assert excinfo.value.code == 2


def test_scan_missing_path_exits_with_status_two(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["scan", str(tmp_path / "missing")])

    assert excinfo.value.code == 2


def test_cli_accepts_log_file_before_or_after_command() -> None:
    parser = _build_parser()
    assert parser.parse_args(["--log-file", "a.log", "scan"]).log_file == Path("a.log")
    assert parser.parse_args(["scan", "--log-file", "b.log"]).log_file == Path("b.log")
    assert parser.parse_args(["scan"]).log_file is None


def test_scan_log_file_records_debug_detail(source_builder, tmp_path: Path) -> None:
    root = _project(source_builder)
    log_file = tmp_path / "logs" / "scan.log"

    main(
        [
            "scan",
            str(root),
            "--tier",
            "basic",
            "--output",
            str(tmp_path / "out.txt"),
            "--log-file",
            str(log_file),
        ]
    )
    configure_logging()

    contents = log_file.read_text(encoding="utf-8")
    assert "a11ylint.engine: Scan complete" in contents
    assert "Check execution took" in contents
