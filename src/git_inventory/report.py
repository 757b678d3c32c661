from __future__ import annotations

import csv
import datetime as dt
import functools
from pathlib import Path
from typing import Iterable

from .models import ErrorKind, InventoryError, RepositoryRecord

REPORT_FILENAME = "git_projects_report.csv"
REPORT_HEADER = ["Project name", "Path", "Remote repository", "Last commit date"]
REPORT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def compare_records(a: RepositoryRecord, b: RepositoryRecord) -> int:
    # Pairwise rule, not a single key: remote then newest commit when both
    # have a remote, otherwise by name.
    if a.remote_url and b.remote_url:
        if a.remote_url == b.remote_url:
            if a.last_commit_time > b.last_commit_time:
                return -1
            if a.last_commit_time < b.last_commit_time:
                return 1
            return 0
        return -1 if a.remote_url < b.remote_url else 1
    if a.name == b.name:
        return 0
    return -1 if a.name < b.name else 1


def sort_records(records: Iterable[RepositoryRecord]) -> list[RepositoryRecord]:
    return sorted(records, key=functools.cmp_to_key(compare_records))


def format_commit_time(value: dt.datetime) -> str:
    """Wall-clock time in the commit's own offset; the offset itself is dropped."""
    return value.strftime(REPORT_TIME_FORMAT)


def report_rows(records: Iterable[RepositoryRecord]) -> list[list[str]]:
    rows = [list(REPORT_HEADER)]
    for r in records:
        rows.append([r.name, r.path, r.remote_url, format_commit_time(r.last_commit_time)])
    return rows


def write_report(path: Path, records: Iterable[RepositoryRecord]) -> int:
    """Write the CSV report; returns the number of data rows written."""
    rows = report_rows(records)
    try:
        f = path.open("w", newline="", encoding="utf-8", errors="surrogateescape")
    except OSError as e:
        raise InventoryError(ErrorKind.SINK_CREATION_FAILURE, str(path), e) from e
    with f:
        writer = csv.writer(f)
        writer.writerows(rows)
    return len(rows) - 1
