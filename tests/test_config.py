"""Tests for tauria_tsgen.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from tauria_tsgen.config import ConfigError, TsGenConfig, load_config


def test_command_line_paths_without_config(tmp_path: Path) -> None:
    config = load_config(
        input_path=str(tmp_path / "src"),
        output_path=str(tmp_path / "out"),
        search_dir=tmp_path,
    )

    assert isinstance(config, TsGenConfig)
    assert config.input_path == (tmp_path / "src").resolve()
    assert config.output_path == (tmp_path / "out").resolve()
    assert config.mock_api is False
    assert config.workers >= 1
    assert config.exclude_paths == []
    assert config.templates_dir is None
    assert config.config_file is None


def test_missing_paths_are_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="--input-path and --output-path"):
        load_config(input_path=str(tmp_path), search_dir=tmp_path)


def test_config_file_paths_are_relative_to_the_file(tmp_path: Path) -> None:
    project = tmp_path / "project"
    project.mkdir()
    config_file = project / "tsgen.yml"
    config_file.write_text(
        """
input_path: src-tauri/src
output_path: src/generated
mock_api: true
workers: 3
fail_on_warnings: yes
exclude_paths:
  - "bin/"
  - "legacy/*.rs"
templates_dir: templates
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.input_path == (project / "src-tauri" / "src").resolve()
    assert config.output_path == (project / "src" / "generated").resolve()
    assert config.mock_api is True
    assert config.workers == 3
    assert config.fail_on_warnings is True
    assert config.exclude_paths == ["bin/", "legacy/*.rs"]
    assert config.templates_dir == (project / "templates").resolve()
    assert config.config_file == config_file.resolve()


def test_command_line_overrides_config_file(tmp_path: Path) -> None:
    config_file = tmp_path / "tsgen.yml"
    config_file.write_text("input_path: a\noutput_path: b\nworkers: 2\n", encoding="utf-8")

    config = load_config(
        config_file,
        output_path=str(tmp_path / "elsewhere"),
        mock_api=True,
        workers=5,
    )

    assert config.input_path == (tmp_path / "a").resolve()
    assert config.output_path == (tmp_path / "elsewhere").resolve()
    assert config.mock_api is True
    assert config.workers == 5


def test_default_config_is_found_in_input_directory(tmp_path: Path) -> None:
    source = tmp_path / "src"
    source.mkdir()
    (source / ".tauria-tsgen.yml").write_text("output_path: ../gen\nmock_api: true\n", encoding="utf-8")

    config = load_config(input_path=str(source), search_dir=tmp_path / "nowhere")

    assert config.output_path == (tmp_path / "gen").resolve()
    assert config.mock_api is True


def test_explicit_missing_config_fails(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Config file not found"):
        load_config(tmp_path / "absent.yml")


@pytest.mark.parametrize(
    "content, message",
    [
        ("- a\n- b\n", "mapping"),
        ("input_path: [unclosed\n", "Failed to parse"),
        ("input_path: a\noutput_path: b\nworkers: many\n", "integer"),
        ("input_path: a\noutput_path: b\nworkers: 0\n", "at least 1"),
    ],
)
def test_invalid_config_files(tmp_path: Path, content: str, message: str) -> None:
    config_file = tmp_path / "tsgen.yml"
    config_file.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError, match=message):
        load_config(config_file)
