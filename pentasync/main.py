"""
pentasync/main.py -- Command-line entry point.

Syncs the Pentabarf schedule cache with the local page tree.

Usage::

    pentasync --config config.json
    pentasync --cache tmp/pentacache --outdir content/schedule --workers 4
    python -m pentasync --stats

Exit codes:
    0  published
    1  the cache, its references, a slug or a template is broken
       (nothing was written)
    2  bad command-line arguments
    3  an I/O error while reconciling the output directory
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pentasync.artifact_sync import SyncReport
from pentasync.config import load_config
from pentasync.entity_store import CacheError
from pentasync.index_builder import ScheduleIntegrityError
from pentasync.publisher import publish
from pentasync.renderer import RenderError
from pentasync.slugs import SlugError

logger = logging.getLogger("pentasync")

EXIT_OK = 0
EXIT_DATA_ERROR = 1
EXIT_IO_ERROR = 3


def _setup_logging(verbosity: int) -> None:
    """Configure logging for command-line runs."""
    level = {-1: logging.WARNING, 0: logging.INFO}.get(verbosity, logging.DEBUG)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pentasync",
        description="Sync the Pentabarf schedule with the local files",
    )
    parser.add_argument("--config", type=Path, help="JSON config file (settings under 'pentabarf')")
    parser.add_argument("--cache", type=Path, help="Pentabarf cache directory")
    parser.add_argument("--outdir", type=Path, help="Output directory for the schedule pages")
    parser.add_argument("--templates", type=Path, help="Directory of page templates")
    parser.add_argument("--workers", type=int, help="Threads used to write pages")
    parser.add_argument("--stats", action="store_true", help="Print schedule graph statistics")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Also log unchanged pages")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    return parser


def format_report(report: SyncReport) -> list[str]:
    """Return one fixed-width line per action: action, duration, path."""
    lines = []
    for entry in report.entries:
        path = f"{entry.path}/" if entry.is_dir else entry.path
        lines.append("%12s  [%2.2fs]  %s" % (entry.action.value, entry.duration, path))
    return lines


def main(argv: list[str] | None = None) -> int:
    """Run pentasync and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be at least 1")

    _setup_logging(-1 if args.quiet else (1 if args.verbose else 0))

    try:
        config = load_config(args.config)
    except ValueError as exc:
        print(f"pentasync: {exc}", file=sys.stderr)
        return EXIT_DATA_ERROR

    overrides = {
        "cache_dir": args.cache,
        "output_dir": args.outdir,
        "templates_dir": args.templates,
        "workers": args.workers,
    }
    config = config.model_copy(update={k: v for k, v in overrides.items() if v is not None})

    print("Compiling schedule pages...")
    try:
        result = publish(config)
    except (CacheError, ScheduleIntegrityError, SlugError, RenderError) as exc:
        logger.debug("Publishing aborted", exc_info=True)
        print(f"pentasync: {exc}", file=sys.stderr)
        return EXIT_DATA_ERROR
    except OSError as exc:
        logger.error("Reconciling %s failed: %s", config.output_dir, exc)
        print(f"pentasync: {exc}", file=sys.stderr)
        return EXIT_IO_ERROR

    for line in format_report(result.report):
        if args.verbose or not line.lstrip().startswith("identical"):
            print(line)

    if args.stats:
        stats = result.index.stats()
        print()
        for key in ("node_count", "edge_count", "speaker_count", "component_count"):
            print(f"  {key}: {stats[key]}")
        if stats["empty_rooms"]:
            print(f"  rooms without events: {', '.join(stats['empty_rooms'])}")
        if stats["empty_tracks"]:
            print(f"  tracks without events: {', '.join(stats['empty_tracks'])}")

    print()
    print(f"Schedule compiled in {result.elapsed:.2f}s to {config.output_dir}.")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
