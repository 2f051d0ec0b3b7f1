"""Command-line interface for casesource-check."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from analysis.analyzer import CaseSourceAnalyzer
from analysis.host import AnalysisHost, build_project_index
from logging_config import configure_logging
from report.write import build_summary, format_jsonl, format_text, write_reports
from rules.config import ConfigError, load_config, resolve_output_dir
from scan.files import find_python_files, read_source_files

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_DIAGNOSTICS = 1
EXIT_CONFIG_ERROR = 2


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Project root (default: .)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="casesource")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check", help="Validate case-source decorator references"
    )
    _add_common_paths(check_parser)
    check_parser.add_argument(
        "--out-dir",
        default=None,
        help="Write diagnostics.jsonl and summary.json into this directory",
    )
    check_parser.add_argument(
        "--write",
        action="store_true",
        help="Write reports into the configured output dir",
    )
    check_parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format on stdout (default: text)",
    )
    check_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug details to stderr",
    )

    subparsers.add_parser("rules", help="List supported diagnostics")

    return parser


def _resolve_report_dir(
    root: Path, out_dir: str | None, write: bool, configured: str
) -> Path | None:
    if out_dir is not None:
        return Path(out_dir).expanduser().resolve()
    if write:
        return resolve_output_dir(root, configured)
    return None


def _handle_check(
    root: Path,
    out_dir: str | None,
    write: bool,
    output_format: str,
) -> int:
    try:
        config = load_config(root)
        report_dir = _resolve_report_dir(root, out_dir, write, config.output_dir)
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return EXIT_CONFIG_ERROR

    paths = find_python_files(
        root,
        output_dir=config.output_dir,
        include_patterns=config.include,
        exclude_patterns=config.exclude,
        nested_gitignore=config.nested_gitignore,
    )
    sources = read_source_files(root, paths)
    index = build_project_index(
        sources,
        decorators=config.decorators,
        nameof_functions=config.nameof_functions,
    )
    host = AnalysisHost(
        [CaseSourceAnalyzer()],
        severity_overrides=config.diagnostics,
        max_workers=config.max_workers,
    )
    records = host.run(index)

    usage_count = sum(len(module.usages) for module in index.modules)
    summary = build_summary(records, files_scanned=len(sources), usages_analyzed=usage_count)
    logger.debug(
        "%d files, %d usages, %d diagnostics", len(sources), usage_count, summary.total
    )

    if output_format == "json":
        sys.stdout.write(format_jsonl(records).decode("utf-8"))
    else:
        for record in records:
            sys.stdout.write(f"{format_text(record)}\n")

    if report_dir is not None:
        write_reports(report_dir, records, summary)

    return EXIT_DIAGNOSTICS if summary.has_errors else EXIT_OK


def _handle_rules() -> int:
    for descriptor in CaseSourceAnalyzer.supported_descriptors:
        sys.stdout.write(
            f"{descriptor.id}  {descriptor.default_severity:<7}  "
            f"{descriptor.category}  {descriptor.title}\n"
        )
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "rules":
        return _handle_rules()

    configure_logging(verbose=args.verbose)
    root = Path(args.root).expanduser().resolve()

    if args.command == "check":
        return _handle_check(root, args.out_dir, args.write, args.format)

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
