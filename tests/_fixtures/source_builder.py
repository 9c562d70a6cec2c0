"""Helper utilities for constructing temporary Tauri source trees in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping

from tauria_tsgen.models import AnalysisResult
from tauria_tsgen.orchestrator import Orchestrator
from tauria_tsgen.source_scanner import DirectoryFileProvider, InMemoryFileProvider


def dedent(content: str) -> str:
    return textwrap.dedent(content).lstrip("\n")


class SourceBuilder:
    """Utility for writing Rust files into a throwaway crate and analyzing it."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "src-tauri" / "src"
        self.root.mkdir(parents=True)
        self.output = tmp_path / "generated"

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries below the source root."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(dedent(content), encoding="utf-8")

    def analyze(self, workers: int = 1) -> AnalysisResult:
        """Return a fresh analysis of the source root."""
        return Orchestrator().analyze(DirectoryFileProvider(self.root), workers=workers)

    def path(self) -> Path:
        return self.root


def analyze_files(files: Mapping[str, str], workers: int = 1) -> AnalysisResult:
    """Analyze in-memory sources without touching the filesystem."""
    provider = InMemoryFileProvider({path: dedent(text) for path, text in files.items()})
    return Orchestrator().analyze(provider, workers=workers)


__all__ = ["SourceBuilder", "analyze_files", "dedent"]
