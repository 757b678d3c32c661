from __future__ import annotations

import csv
import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from git_inventory.cli import main
from git_inventory.report import REPORT_FILENAME, REPORT_HEADER


def _run(cmd: list[str], *, cwd: Path, env: dict[str, str] | None = None) -> str:
    proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=True, capture_output=True, text=True, errors="surrogateescape")
    return proc.stdout


def _init_repo(*, repo: Path, remote: str, date: str) -> None:
    repo.mkdir(parents=True, exist_ok=True)
    _run(["git", "init"], cwd=repo)
    _run(["git", "config", "user.name", "Test User"], cwd=repo)
    _run(["git", "config", "user.email", "test@example.com"], cwd=repo)
    _run(["git", "config", "commit.gpgsign", "false"], cwd=repo)
    if remote:
        _run(["git", "remote", "add", "origin", remote], cwd=repo)
    (repo / "a.txt").write_text("a\n", encoding="utf-8")
    _run(["git", "add", "a.txt"], cwd=repo)
    env = os.environ.copy()
    env["GIT_AUTHOR_DATE"] = date
    env["GIT_COMMITTER_DATE"] = date
    _run(["git", "commit", "-m", "init"], cwd=repo, env=env)


def _read(path: Path) -> list[list[str]]:
    with path.open(newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


def test_requires_a_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code not in (0, None)
    assert "--directory" in str(exc_info.value.code)
    assert not (tmp_path / REPORT_FILENAME).exists()


def test_blank_directory_arguments_do_not_count(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit):
        main(["--directory", "   "])


def test_single_repository_scenario(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    root = tmp_path / "a"
    _init_repo(repo=root / "repo1", remote="git@host:x.git", date="2024-05-15T15:00:00+03:00")
    (root / "repo2").mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)

    assert main(["--directory", f"  {root}  "]) == 0

    rows = _read(work / REPORT_FILENAME)
    assert rows == [
        REPORT_HEADER,
        ["repo1", str(root / "repo1"), "git@host:x.git", "2024-05-15 15:00:00"],
    ]
    out = capsys.readouterr().out
    assert f"Scanning: {root}" in out
    assert f"Entering: {root / 'repo2'}" in out
    assert "Report saved to" in out


def test_repository_without_remote_gets_empty_remote_field(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    root = tmp_path / "a"
    _init_repo(repo=root / "local", remote="", date="2023-02-03T04:05:06+00:00")
    _init_repo(repo=root / "empty-history", remote="git@host:e.git", date="2023-01-01T00:00:00+00:00")
    # Reset the second repository to an unborn branch so `git log` fails.
    _run(["git", "update-ref", "-d", "HEAD"], cwd=root / "empty-history")
    out_file = tmp_path / "out.csv"
    monkeypatch.chdir(tmp_path)

    assert main(["--directory", str(root), "--output", str(out_file), "--quiet"]) == 0

    rows = _read(out_file)
    assert rows == [REPORT_HEADER, ["local", str(root / "local"), "", "2023-02-03 04:05:06"]]
    out = capsys.readouterr().out
    assert "[WARN]" in out
    assert f"[SKIP] [{root / 'empty-history'}]" in out
    assert "Entering:" not in out


def test_multiple_directories_are_merged_and_sorted(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _init_repo(repo=tmp_path / "one" / "old", remote="git@host:same.git", date="2020-01-01T00:00:00+00:00")
    _init_repo(repo=tmp_path / "two" / "new", remote="git@host:same.git", date="2024-01-01T00:00:00+00:00")
    _init_repo(repo=tmp_path / "two" / "first", remote="git@host:aaa.git", date="2022-01-01T00:00:00+00:00")
    monkeypatch.chdir(tmp_path)

    assert main(["--directory", str(tmp_path / "one"), "--directory", str(tmp_path / "two"), "--quiet"]) == 0

    names = [r[0] for r in _read(tmp_path / REPORT_FILENAME)[1:]]
    assert names == ["first", "new", "old"]


def test_directories_and_output_from_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "empty").mkdir()
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"directories": [str(tmp_path / "empty")], "output": "inventory.csv"}), encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    assert main([]) == 0

    assert _read(tmp_path / "inventory.csv") == [REPORT_HEADER]


def test_unwritable_report_exits_non_zero(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "empty").mkdir()
    monkeypatch.chdir(tmp_path)

    code = main(["--directory", str(tmp_path / "empty"), "--output", str(tmp_path / "missing" / "r.csv")])

    assert code == 1
    assert "could not create report" in capsys.readouterr().err


def test_module_entry_point_prints_help(tmp_path: Path) -> None:
    env = os.environ.copy()
    env["PYTHONPATH"] = str(Path(__file__).resolve().parents[1] / "src")
    proc = subprocess.run([sys.executable, "-m", "git_inventory", "--help"], cwd=str(tmp_path), env=env, text=True, capture_output=True)
    assert proc.returncode == 0, proc.stderr
    assert "--directory" in proc.stdout


@pytest.mark.skipif(sys.platform != "linux", reason="needs a filesystem that accepts non-UTF-8 names")
def test_non_utf8_repository_and_remote_do_not_stop_the_run(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    root = tmp_path / "a"
    _init_repo(repo=root / "good", remote="git@host:good.git", date="2024-01-01T00:00:00+00:00")
    odd = Path(os.fsdecode(os.fsencode(root) + b"/caf\xe9"))
    _init_repo(repo=odd, remote="", date="2023-01-01T00:00:00+00:00")
    subprocess.run(["git", "remote", "add", "origin", b"/srv/caf\xe9.git"], cwd=str(odd), check=True, capture_output=True)
    monkeypatch.chdir(tmp_path)

    assert main(["--directory", str(root)]) == 0

    lines = (tmp_path / REPORT_FILENAME).read_bytes().splitlines()
    assert len(lines) == 3
    assert lines[1].startswith(b"caf\xe9,")
    assert lines[1].endswith(b",/srv/caf\xe9.git,2023-01-01 00:00:00")
    assert lines[2].startswith(b"good,")
    assert "Report saved to" in capsys.readouterr().out
