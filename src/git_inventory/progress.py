from __future__ import annotations

import sys
from typing import IO, Optional

from .models import InventoryError, RepositoryRecord


class ProgressReporter:
    """Receives scan events. The base class ignores all of them."""

    def scanning(self, root: str) -> None:
        pass

    def entering(self, path: str) -> None:
        pass

    def added(self, record: RepositoryRecord) -> None:
        pass

    def skipped(self, error: InventoryError) -> None:
        pass

    def warn(self, path: str, message: str) -> None:
        pass

    def traversal_error(self, error: InventoryError) -> None:
        pass


class ConsoleProgress(ProgressReporter):
    def __init__(self, stream: Optional[IO[str]] = None, *, quiet: bool = False) -> None:
        self.stream = stream
        self.quiet = quiet

    def _emit(self, line: str) -> None:
        out = self.stream if self.stream is not None else sys.stdout
        # Paths from os.walk may carry undecodable bytes as surrogates.
        enc = getattr(out, "encoding", None) or "utf-8"
        line = line.encode(enc, "backslashreplace").decode(enc)
        print(line, file=out, flush=True)

    def scanning(self, root: str) -> None:
        self._emit(f"Scanning: {root}")

    def entering(self, path: str) -> None:
        if not self.quiet:
            self._emit(f"Entering: {path}")

    def added(self, record: RepositoryRecord) -> None:
        self._emit(f"+ {record.path}")

    def skipped(self, error: InventoryError) -> None:
        self._emit(f"[SKIP] {error.describe()}")

    def warn(self, path: str, message: str) -> None:
        self._emit(f"[WARN] [{path}] {message}")

    def traversal_error(self, error: InventoryError) -> None:
        self._emit(f"[ERROR] {error.describe()}")
