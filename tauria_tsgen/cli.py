"""CLI entrypoint for tauria-tsgen."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import load_config
from .errors import TsGenError
from .logging import configure_logging, get_logger, log_diagnostics
from .orchestrator import Orchestrator

logger = get_logger("cli")


def _add_verbosity_options(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    group.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=False,
        help="Only log warnings and errors.",
    )


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tauria-tsgen",
        description="Generate TypeScript bindings for Tauri commands and events.",
    )
    _add_verbosity_options(parser)
    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        help="Configuration file (YAML or JSON) with input_path and output_path.",
    )
    parser.add_argument(
        "--input-path",
        metavar="DIR",
        help="Directory containing the Rust sources. Required without a config file.",
    )
    parser.add_argument(
        "--output-path",
        metavar="DIR",
        help="Directory the TypeScript files are written to. Required without a config file.",
    )
    parser.add_argument(
        "--mock-api",
        action="store_true",
        help="Also generate mock implementations under mock-api/.",
    )
    parser.add_argument(
        "--workers",
        type=_positive_int,
        metavar="N",
        help="Number of files parsed in parallel.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Analyze and render, list the files that would be written, write nothing.",
    )
    parser.add_argument(
        "--log-file",
        metavar="FILE",
        help="Also write log output to FILE.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for tauria-tsgen."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(args.quiet),
        log_file=Path(args.log_file) if args.log_file else None,
    )

    try:
        config = load_config(
            Path(args.config) if args.config else None,
            input_path=args.input_path,
            output_path=args.output_path,
            mock_api=bool(args.mock_api),
            workers=args.workers,
        )
        outcome = Orchestrator().generate(config, dry_run=bool(args.dry_run))
    except FileNotFoundError as exc:
        parser.exit(1, f"{exc}\n")
    except TsGenError as exc:
        parser.exit(1, f"tauria-tsgen failed: {exc}\nRun with --verbose for more details.\n")

    result = outcome.result
    error_count, warning_count = log_diagnostics(result.diagnostics, logger)

    if outcome.dry_run:
        print(f"Would write {len(outcome.artifacts)} files to {_relativize(config.output_path)} (dry-run):")
        for artifact in sorted(outcome.artifacts, key=lambda item: item.path):
            print(f"  {artifact.path}")
    else:
        print(f"Generated {len(outcome.written)} files in {_relativize(config.output_path)}")

    if error_count:
        parser.exit(1, f"{error_count} source file(s) could not be analyzed\n")
    if warning_count and config.fail_on_warnings:
        parser.exit(1, f"{warning_count} warning(s) with fail_on_warnings enabled\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
