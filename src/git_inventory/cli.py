from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import load_config, resolve_run_config
from .models import InventoryError
from .progress import ConsoleProgress
from .report import sort_records, write_report
from .scanner import scan_directories


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inventory git repositories under one or more directories into a CSV report.")
    parser.add_argument(
        "--directory",
        type=str,
        action="append",
        default=[],
        help="Path to a directory to search (can be repeated).",
    )
    parser.add_argument("--config", type=Path, default=Path("config.json"), help="Path to config.json.")
    parser.add_argument("--output", type=Path, default=None, help="Report file (default: git_projects_report.csv).")
    parser.add_argument("--timeout", type=float, default=None, help="Seconds allowed per git command (default: 10).")
    parser.add_argument("--quiet", action="store_true", help="Do not print every directory visited.")
    return parser


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    parser = _build_parser()
    args = parser.parse_args(argv)
    run = resolve_run_config(args, load_config(args.config))
    if not run.directories:
        raise SystemExit("Please provide at least one --directory=/path")

    progress = ConsoleProgress(quiet=run.quiet)
    records = scan_directories(run.directories, progress=progress, timeout_s=run.timeout_s)
    records = sort_records(records)

    try:
        written = write_report(run.output, records)
    except InventoryError as e:
        print(f"[ERROR] {e.describe()}", file=sys.stderr)
        return 1

    print(f"Report saved to '{run.output}' ({written} repositories)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
