from __future__ import annotations

import datetime as dt
import os
from typing import Callable, Iterable, Iterator, Optional

from .git import DEFAULT_TIMEOUT_S, extract_metadata
from .models import ErrorKind, InventoryError, RepositoryRecord
from .progress import ProgressReporter

METADATA_DIRNAME = ".git"

Extractor = Callable[..., tuple[str, dt.datetime]]


def iter_repository_roots(
    root: str,
    *,
    progress: Optional[ProgressReporter] = None,
) -> Iterator[str]:
    """
    Walk `root` depth-first and yield every directory that holds a `.git`
    directory. The `.git` directory itself is never entered; everything else
    is, so nested repositories are found too.
    """
    progress = progress or ProgressReporter()

    def onerror(err: OSError) -> None:
        path = err.filename if err.filename is not None else root
        progress.traversal_error(InventoryError(ErrorKind.TRAVERSAL_ERROR, str(path), err))

    for dirpath, dirnames, _filenames in os.walk(root, onerror=onerror):
        progress.entering(dirpath)
        has_git = METADATA_DIRNAME in dirnames
        dirnames[:] = sorted(d for d in dirnames if d != METADATA_DIRNAME)
        if has_git:
            yield os.path.normpath(dirpath)


def scan_root(
    root: str,
    *,
    progress: Optional[ProgressReporter] = None,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    extract: Extractor = extract_metadata,
) -> list[RepositoryRecord]:
    progress = progress or ProgressReporter()
    records: list[RepositoryRecord] = []
    for repo in iter_repository_roots(root, progress=progress):
        try:
            remote, last_commit = extract(repo, timeout_s=timeout_s, progress=progress)
        except InventoryError as e:
            progress.skipped(e)
            continue
        record = RepositoryRecord.from_path(repo, remote, last_commit)
        records.append(record)
        progress.added(record)
    return records


def scan_directories(
    roots: Iterable[str],
    *,
    progress: Optional[ProgressReporter] = None,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    extract: Extractor = extract_metadata,
) -> list[RepositoryRecord]:
    """Scan each root in order; the same repository reached twice is recorded twice."""
    progress = progress or ProgressReporter()
    records: list[RepositoryRecord] = []
    for root in roots:
        progress.scanning(root)
        records.extend(scan_root(root, progress=progress, timeout_s=timeout_s, extract=extract))
    return records
