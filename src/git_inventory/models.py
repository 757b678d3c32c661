from __future__ import annotations

import dataclasses
import datetime as dt
import enum
import os


class ErrorKind(str, enum.Enum):
    TIMEOUT = "timeout"
    COMMAND_FAILED = "commandFailed"
    PARSE_FAILED = "parseFailed"
    TRAVERSAL_ERROR = "traversalError"
    SINK_CREATION_FAILURE = "sinkCreationFailure"


class InventoryError(Exception):
    """
    Failure with a closed `kind` plus the path it concerns and the underlying
    cause (an exception, or the offending text for parse failures).
    """

    def __init__(self, kind: ErrorKind, path: str, cause: object = None) -> None:
        self.kind = kind
        self.path = path
        self.cause = cause
        super().__init__(self.describe())

    def describe(self) -> str:
        if self.kind is ErrorKind.TIMEOUT:
            what = f"git {self.cause} timed out" if self.cause else "git timed out"
        elif self.kind is ErrorKind.COMMAND_FAILED:
            what = f"git command failed: {self.cause}"
        elif self.kind is ErrorKind.PARSE_FAILED:
            what = f"could not parse commit date {self.cause!r}"
        elif self.kind is ErrorKind.TRAVERSAL_ERROR:
            what = f"could not read directory: {self.cause}"
        else:
            what = f"could not create report: {self.cause}"
        return f"[{self.path}] {what}"


@dataclasses.dataclass(frozen=True)
class RepositoryRecord:
    path: str
    name: str
    remote_url: str
    last_commit_time: dt.datetime

    @classmethod
    def from_path(cls, path: str, remote_url: str, last_commit_time: dt.datetime) -> "RepositoryRecord":
        path = os.path.normpath(path)
        name = os.path.basename(path) or path
        return cls(path=path, name=name, remote_url=remote_url or "", last_commit_time=last_commit_time)
