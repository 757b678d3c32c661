from __future__ import annotations

import argparse
import dataclasses
import json
from pathlib import Path

from .git import DEFAULT_TIMEOUT_S
from .report import REPORT_FILENAME


@dataclasses.dataclass(frozen=True)
class RunConfig:
    directories: list[str]
    output: Path
    timeout_s: float
    quiet: bool


def load_config(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise SystemExit(f"Invalid JSON in config ({e}): {config_path}") from e
    if not isinstance(data, dict):
        raise SystemExit(f"Config must be a JSON object: {config_path}")
    return data


def _clean_directories(values: list[str]) -> list[str]:
    out: list[str] = []
    for v in values:
        v = str(v or "").strip()
        if v:
            out.append(v)
    return out


def resolve_run_config(args: argparse.Namespace, config: dict) -> RunConfig:
    """Merge CLI flags over config.json values. CLI directories come first."""
    directories = _clean_directories(list(args.directory or []))
    directories += _clean_directories(list(config.get("directories", []) or []))

    output = args.output if args.output is not None else Path(str(config.get("output") or REPORT_FILENAME))

    if args.timeout is not None:
        timeout_s = float(args.timeout)
    else:
        raw = config.get("git_timeout_s", DEFAULT_TIMEOUT_S)
        try:
            timeout_s = float(raw)
        except (TypeError, ValueError) as e:
            raise SystemExit(f"git_timeout_s must be a number, got: {raw!r}") from e
    if timeout_s <= 0:
        raise SystemExit(f"Timeout must be positive, got: {timeout_s}")

    quiet = bool(args.quiet) or bool(config.get("quiet", False))
    return RunConfig(directories=directories, output=output, timeout_s=timeout_s, quiet=quiet)
