"""CLI entrypoints for a11ylint commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .checks import TIERS, load_registry
from .config import load_config
from .engine import ScanEngine, ScanOptions
from .errors import A11yLintError
from .logging import configure_logging
from .collector import SourceCollector
from .report import render_text, report_to_dict


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_log_file_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "--log-file",
        type=Path,
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write a DEBUG-level log of the run to this file.",
    )


def _workers(value: str) -> str | int:
    lowered = value.strip().lower()
    if lowered in {"sync", "sequential"}:
        return "sequential"
    if lowered == "auto":
        return "auto"
    if lowered.isdigit() and int(lowered) > 0:
        return int(lowered)
    raise argparse.ArgumentTypeError("expected 'sync', 'auto' or a positive worker count")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="a11ylint",
        description="Static accessibility analysis for component templates and style sheets.",
    )
    _add_verbose_option(parser)
    _add_log_file_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser(
        "scan",
        help="Scan a directory of templates and style sheets.",
    )
    _add_verbose_option(scan_parser, suppress_default=True)
    _add_log_file_option(scan_parser, suppress_default=True)
    scan_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Directory to scan (defaults to current directory).",
    )
    scan_parser.add_argument("--tier", choices=TIERS, help="Check tier to run.")
    scan_parser.add_argument("--check", help="Run a single check by id, ignoring tiers.")
    scan_parser.add_argument(
        "--workers",
        type=_workers,
        help="'sync' (default), 'auto' or an explicit worker count.",
    )
    scan_parser.add_argument(
        "--no-collapse",
        action="store_true",
        help="Report every finding instead of collapsing shared root causes.",
    )
    scan_parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format.",
    )
    scan_parser.add_argument("--output", type=Path, help="Write the report to a file.")
    scan_parser.add_argument(
        "--fail-under",
        type=int,
        help="Exit with status 1 when any unit scores below this value.",
    )
    scan_parser.add_argument(
        "--check-timeout",
        type=float,
        help="Seconds before a single check is abandoned (default 30).",
    )

    checks_parser = subparsers.add_parser("checks", help="List available checks.")
    _add_verbose_option(checks_parser, suppress_default=True)
    checks_parser.add_argument("--tier", choices=TIERS, help="Only list checks in this tier.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for a11ylint commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "checks":
        _list_checks(args.tier)
    elif args.command == "scan":
        _scan(parser, args)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(2, "Unknown command\n")


def _list_checks(tier: str | None) -> None:
    registry = load_registry()
    definitions = registry.tier(tier) if tier else list(registry.values())
    for definition in sorted(definitions, key=lambda item: item.id):
        wcag = f" WCAG {definition.wcag}" if definition.wcag else ""
        print(
            f"{definition.id:<34} {definition.content_type.value:<6} "
            f"{definition.tier:<9} weight {definition.weight:>2}{wcag}  {definition.description}"
        )


def _scan(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    root = Path(args.path).expanduser()
    try:
        config = load_config(root)
    except A11yLintError as exc:
        parser.exit(2, f"{exc}\n")

    options = ScanOptions(
        tier=args.tier or config.tier,
        check=args.check or config.check,
        workers=args.workers if args.workers is not None else config.workers,
        collapse=False if args.no_collapse else config.collapse,
        check_timeout=args.check_timeout or config.check_timeout,
    )
    fail_under = args.fail_under if args.fail_under is not None else config.fail_under

    engine = ScanEngine(collector=SourceCollector(exclude_paths=config.exclude_paths))
    try:
        report = engine.scan_path(root, options)
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(2, f"{exc}\n")
    except A11yLintError as exc:
        parser.exit(2, f"a11ylint scan failed: {exc}\n")
    except Exception as exc:  # pragma: no cover - unexpected failure
        parser.exit(2, f"a11ylint scan failed: {exc}\nRun with --verbose for more details.\n")

    if args.format == "json":
        rendered = json.dumps(report_to_dict(report), indent=2) + "\n"
    else:
        rendered = render_text(report)

    if args.output:
        args.output.write_text(rendered, encoding="utf-8")
        print(f"Report written to {_relativize(args.output)}")
    else:
        sys.stdout.write(rendered)

    if fail_under is not None:
        failing = [unit for unit in report.units if unit.score is not None and unit.score < fail_under]
        if failing:
            parser.exit(1, f"{len(failing)} unit(s) scored below {fail_under}\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
