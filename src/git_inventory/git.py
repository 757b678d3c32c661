from __future__ import annotations

import datetime as dt
import os
import re
import subprocess
from pathlib import Path
from typing import IO, Optional

from .models import ErrorKind, InventoryError
from .progress import ProgressReporter

DEFAULT_TIMEOUT_S = 10.0

# `git log --date=iso` output, e.g. "2024-05-15 15:00:00 +0300"
COMMIT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"
_COMMIT_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} [+-]\d{4}$")

REMOTE_ARGS = ["remote", "get-url", "origin"]
LAST_COMMIT_ARGS = ["log", "-1", "--format=%cd", "--date=iso"]


def run_git(
    args: list[str],
    cwd: Path | str,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    stderr: Optional[IO[str]] = None,
) -> tuple[int, str]:
    proc = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        stdout=subprocess.PIPE,
        stderr=stderr if stderr is not None else subprocess.DEVNULL,
        encoding="utf-8",
        errors="surrogateescape",
        timeout=timeout_s,
    )
    return proc.returncode, proc.stdout


def parse_commit_date(value: str) -> dt.datetime:
    s = (value or "").strip()
    if not _COMMIT_DATE_RE.match(s):
        raise ValueError(f"unexpected commit date format: {s!r}")
    return dt.datetime.strptime(s, COMMIT_DATE_FORMAT)


def get_remote_origin(
    repo: str,
    *,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    stderr: Optional[IO[str]] = None,
    progress: Optional[ProgressReporter] = None,
) -> str:
    """
    URL of the `origin` remote, or "" when git cannot report one.

    Only a timeout is an error here; a missing remote or a failing git is
    reported as a warning.
    """
    try:
        code, out = run_git(REMOTE_ARGS, cwd=repo, timeout_s=timeout_s, stderr=stderr)
    except subprocess.TimeoutExpired as e:
        raise InventoryError(ErrorKind.TIMEOUT, repo, "remote get-url") from e
    except OSError as e:
        if progress is not None:
            progress.warn(repo, f"failed to get remote repo: {e}")
        return ""
    if code != 0:
        if progress is not None:
            progress.warn(repo, f"failed to get remote repo: git exited with status {code}")
        return ""
    return out.strip()


def get_last_commit_time(
    repo: str,
    *,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    stderr: Optional[IO[str]] = None,
) -> dt.datetime:
    try:
        code, out = run_git(LAST_COMMIT_ARGS, cwd=repo, timeout_s=timeout_s, stderr=stderr)
    except subprocess.TimeoutExpired as e:
        raise InventoryError(ErrorKind.TIMEOUT, repo, "log") from e
    except OSError as e:
        raise InventoryError(ErrorKind.COMMAND_FAILED, repo, e) from e
    if code != 0:
        raise InventoryError(ErrorKind.COMMAND_FAILED, repo, f"git log exited with status {code}")

    line = out.strip()
    try:
        return parse_commit_date(line)
    except ValueError as e:
        raise InventoryError(ErrorKind.PARSE_FAILED, repo, line) from e


def extract_metadata(
    repo: str,
    *,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    progress: Optional[ProgressReporter] = None,
) -> tuple[str, dt.datetime]:
    """
    Return `(remote_url, last_commit_time)` for the repository rooted at `repo`.

    Each git command gets its own `timeout_s` window. Raises `InventoryError`
    when the commit time cannot be determined or either command times out.
    """
    with open(os.devnull, "w", encoding="utf-8") as devnull:
        remote = get_remote_origin(repo, timeout_s=timeout_s, stderr=devnull, progress=progress)
        last_commit = get_last_commit_time(repo, timeout_s=timeout_s, stderr=devnull)
    return remote, last_commit
