"""Tests for the all-or-nothing artifact writer."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from tauria_tsgen.errors import WriteError
from tauria_tsgen.render import Artifact
from tauria_tsgen.writer import Writer


def test_commit_writes_nested_files(tmp_path: Path) -> None:
    output = tmp_path / "generated"
    writer = Writer(output)

    written = writer.commit([Artifact("index.ts", "a\n"), Artifact("tauria-api/api/User.ts", "b\n")])

    assert written == [output / "index.ts", output / "tauria-api" / "api" / "User.ts"]
    assert (output / "tauria-api" / "api" / "User.ts").read_text(encoding="utf-8") == "b\n"
    assert [path.name for path in tmp_path.iterdir()] == ["generated"]


def test_commit_overwrites_and_keeps_unrelated_files(tmp_path: Path) -> None:
    output = tmp_path / "generated"
    output.mkdir()
    (output / "index.ts").write_text("old\n", encoding="utf-8")
    (output / "custom.ts").write_text("mine\n", encoding="utf-8")

    Writer(output).commit([Artifact("index.ts", "new\n")])

    assert (output / "index.ts").read_text(encoding="utf-8") == "new\n"
    assert (output / "custom.ts").read_text(encoding="utf-8") == "mine\n"


@pytest.mark.parametrize("path", ["../escape.ts", "/abs.ts", "a/../../b.ts", ""])
def test_paths_outside_output_are_rejected(tmp_path: Path, path: str) -> None:
    with pytest.raises(WriteError):
        Writer(tmp_path / "out").commit([Artifact(path, "x")])
    assert not (tmp_path / "out").exists()


def test_duplicate_paths_are_rejected(tmp_path: Path) -> None:
    with pytest.raises(WriteError, match="same path"):
        Writer(tmp_path).commit([Artifact("a.ts", "1"), Artifact("a.ts", "2")])


def test_failed_move_restores_previous_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    output = tmp_path / "generated"
    output.mkdir()
    (output / "index.ts").write_text("old\n", encoding="utf-8")
    real_replace = os.replace
    calls = []

    def flaky_replace(source, target):
        calls.append(target)
        if len(calls) == 2:
            raise OSError("disk full")
        return real_replace(source, target)

    monkeypatch.setattr(os, "replace", flaky_replace)

    with pytest.raises(WriteError, match="disk full"):
        Writer(output).commit([Artifact("index.ts", "new\n"), Artifact("sub/User.ts", "user\n")])

    assert (output / "index.ts").read_text(encoding="utf-8") == "old\n"
    assert not (output / "sub").exists()
    assert [path.name for path in tmp_path.iterdir()] == ["generated"]
