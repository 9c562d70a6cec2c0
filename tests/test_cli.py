"""CLI behaviour tests."""

from __future__ import annotations

import pytest

from tauria_tsgen.cli import _build_parser, main
from tests._fixtures.source_builder import SourceBuilder

COMMAND = """
#[tauri::command]
fn greet(name: String) -> String {
    format!("Hello {}", name)
}
"""


def _paths(builder: SourceBuilder) -> list:
    return ["--input-path", str(builder.path()), "--output-path", str(builder.output)]


def test_cli_accepts_all_flags() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        [
            "-v",
            "--config",
            "tsgen.yml",
            "--input-path",
            "src",
            "--output-path",
            "out",
            "--mock-api",
            "--workers",
            "3",
            "--dry-run",
            "--log-file",
            "run.log",
        ]
    )
    assert args.verbose is True
    assert args.config == "tsgen.yml"
    assert args.input_path == "src"
    assert args.output_path == "out"
    assert args.mock_api is True
    assert args.workers == 3
    assert args.dry_run is True
    assert args.log_file == "run.log"


def test_cli_verbose_and_quiet_are_exclusive() -> None:
    parser = _build_parser()
    assert parser.parse_args(["-q"]).quiet is True
    with pytest.raises(SystemExit):
        parser.parse_args(["-v", "-q"])


def test_cli_rejects_non_positive_workers(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        _build_parser().parse_args(["--workers", "0"])
    assert excinfo.value.code == 2
    assert "at least 1" in capsys.readouterr().err


def test_main_generates_files(source_builder: SourceBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    source_builder.write({"lib.rs": COMMAND})

    main([*_paths(source_builder), "--mock-api"])

    assert "Generated" in capsys.readouterr().out
    assert (source_builder.output / "tauria-api" / "Lib.ts").exists()
    assert (source_builder.output / "mock-api" / "Lib.ts").exists()
    assert (source_builder.output / "index.ts").exists()


def test_main_dry_run_lists_files(source_builder: SourceBuilder, capsys: pytest.CaptureFixture[str]) -> None:
    source_builder.write({"lib.rs": COMMAND})

    main([*_paths(source_builder), "--dry-run"])

    out = capsys.readouterr().out
    assert "dry-run" in out
    assert "  tauria-api/Lib.ts" in out
    assert not source_builder.output.exists()


def test_main_without_paths_fails(tmp_path, monkeypatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.chdir(tmp_path)

    with pytest.raises(SystemExit) as excinfo:
        main([])

    assert excinfo.value.code == 1
    assert "tauria-tsgen failed" in capsys.readouterr().err


def test_main_missing_input_fails(tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--input-path", str(tmp_path / "absent"), "--output-path", str(tmp_path / "out")])

    assert excinfo.value.code == 1
    assert "Input path not found" in capsys.readouterr().err


def test_syntax_errors_still_write_and_exit_non_zero(source_builder: SourceBuilder) -> None:
    source_builder.write({"lib.rs": COMMAND, "broken.rs": "fn broken( {\n"})

    with pytest.raises(SystemExit) as excinfo:
        main(_paths(source_builder))

    assert excinfo.value.code == 1
    assert (source_builder.output / "tauria-api" / "Lib.ts").exists()


def test_fail_on_warnings_from_config(source_builder: SourceBuilder, tmp_path) -> None:
    source_builder.write(
        {"lib.rs": "#[tauri::command]\nfn raw(ptr: *const u8) {}\n"}
    )
    config_file = tmp_path / "tsgen.yml"
    config_file.write_text(
        f"input_path: {source_builder.path()}\noutput_path: {source_builder.output}\nfail_on_warnings: true\n",
        encoding="utf-8",
    )

    with pytest.raises(SystemExit) as excinfo:
        main(["--config", str(config_file)])

    assert excinfo.value.code == 1
