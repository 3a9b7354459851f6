"""Command-line interface for tagsniff."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from . import __version__
from .doctor import render_report, run_doctor
from .logging_utils import setup_logging
from .paths import log_dir
from .runtime_config import (
    limits_from_cli,
    normalize_concurrency,
    resolve_log_level,
)
from .services.scan_service import ScanResult, ScanService, collect_audio_files
from .tags import TAG_KEYS
from .utils.time_format import format_duration
from .version import build_help_epilog


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tagsniff",
        description="Read title/artist/album tags and durations from audio files.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=build_help_epilog(),
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument(
        "--quiet", action="store_true", help="Only show warnings and errors"
    )
    parser.add_argument("--log-file", help="Write logs to a file path")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="Probe files or directories.")
    scan.add_argument("paths", nargs="+", help="Audio files or directories.")
    scan.add_argument("--json", action="store_true", help="Emit one JSON per line")
    scan.add_argument(
        "--no-duration", action="store_true", help="Skip duration estimation"
    )
    scan.add_argument(
        "--ogg-scan-mib",
        type=int,
        help="Bytes of OGG files searched for comments, in MiB (1-256).",
    )
    scan.add_argument(
        "--concurrency", type=int, help="Files probed in parallel (1-32)."
    )

    subparsers.add_parser("doctor", help="Check optional duration dependencies.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logger = logging.getLogger(__name__)
    try:
        level = resolve_log_level(verbose=args.verbose, quiet=args.quiet)
        setup_logging(
            log_dir=log_dir(),
            level=level,
            log_file=Path(args.log_file) if args.log_file else None,
        )
        if args.command == "doctor":
            report = run_doctor()
            print(render_report(report))
            return report.exit_code
        return run_scan(args)
    except Exception as exc:  # pragma: no cover - top-level safety net
        logger.exception("Unhandled error: %s", exc)
        print("Unexpected error. Re-run with --verbose for details.", file=sys.stderr)
        return 1


def run_scan(args: argparse.Namespace) -> int:
    paths = collect_audio_files(Path(raw) for raw in args.paths)
    if not paths:
        print("No supported audio files found.", file=sys.stderr)
        return 1
    logging.getLogger(__name__).info("Scanning %d file(s)", len(paths))
    service = ScanService(
        concurrency=normalize_concurrency(args.concurrency),
        limits=limits_from_cli(ogg_scan_mib=args.ogg_scan_mib),
        with_duration=not args.no_duration,
    )
    results = asyncio.run(service.scan(paths))
    for result in results:
        if args.json:
            print(json.dumps(result_to_json(result), ensure_ascii=False))
        else:
            print(render_result(result, with_duration=not args.no_duration))
    return 1 if any(result.error for result in results) else 0


def result_to_json(result: ScanResult) -> dict[str, object]:
    return {
        "path": str(result.path),
        "tags": result.tags.as_dict(),
        "duration_seconds": result.duration_seconds,
        "size_bytes": result.size_bytes,
        "error": result.error,
    }


def render_result(result: ScanResult, *, with_duration: bool = True) -> str:
    """Render one scan result as an indented text block."""
    lines = [str(result.path)]
    if result.error:
        lines.append(f"  error    {result.error}")
        return "\n".join(lines)
    for key in TAG_KEYS:
        lines.append(f"  {key:<8} {result.tags.get(key, '-')}")
    if with_duration:
        lines.append(f"  {'duration':<8} {format_duration(result.duration_seconds)}")
    return "\n".join(lines)


if __name__ == "__main__":
    raise SystemExit(main())
