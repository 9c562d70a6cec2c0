"""High-level orchestration of a tauria-tsgen run."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Optional

from .analyzers import analyze_source
from .analyzers.events import merge_event_sites
from .analyzers.module_tree import assemble
from .analyzers.type_model import TypeModel
from .config import TsGenConfig
from .diagnostics import Diagnostic, SourceReadError
from .logging import get_logger
from .models import AnalysisResult, FileAnalysis
from .render import Artifact, Renderer, TemplateRenderer, build_artifacts
from .source_scanner import DirectoryFileProvider, FileProvider
from .syntax import module_segments
from .writer import Writer

logger = get_logger("orchestrator")


@dataclass
class GenerationOutcome:
    """What a generation run produced."""

    result: AnalysisResult
    artifacts: List[Artifact]
    written: List[Path] = field(default_factory=list)
    dry_run: bool = False


def _analyze_file(provider: FileProvider, path: str) -> FileAnalysis:
    try:
        text = provider.read_text(path)
    except (OSError, UnicodeDecodeError) as exc:
        return FileAnalysis(
            path=path,
            module=module_segments(path),
            diagnostics=(SourceReadError(f"cannot read file: {exc}", path=path),),
        )
    return analyze_source(path, text)


class Orchestrator:
    """Coordinates scanning, analysis, rendering and writing."""

    def __init__(self, renderer: Optional[Renderer] = None) -> None:
        self._renderer = renderer

    def analyze(self, provider: FileProvider, *, workers: int = 1) -> AnalysisResult:
        """Build the complete model for every source ``provider`` yields."""
        paths = list(provider.iter_sources())
        logger.info("Analyzing %d source files", len(paths))

        analyses: List[Optional[FileAnalysis]] = [None] * len(paths)
        if workers <= 1 or len(paths) <= 1:
            for index, path in enumerate(paths):
                analyses[index] = _analyze_file(provider, path)
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                future_to_index = {
                    executor.submit(_analyze_file, provider, path): index
                    for index, path in enumerate(paths)
                }
                for future in as_completed(future_to_index):
                    analyses[future_to_index[future]] = future.result()

        ordered = [analysis for analysis in analyses if analysis is not None]
        diagnostics: List[Diagnostic] = []
        for analysis in ordered:
            diagnostics.extend(analysis.diagnostics)

        model = TypeModel([decl for analysis in ordered for decl in analysis.types])
        linked: List[FileAnalysis] = []
        for analysis in ordered:
            linked.append(
                replace(
                    analysis,
                    commands=tuple(model.link_command(item, diagnostics) for item in analysis.commands),
                    types=tuple(model.link_declaration(item, diagnostics) for item in analysis.types),
                    event_sites=tuple(
                        model.link_site(item, analysis.module, diagnostics) for item in analysis.event_sites
                    ),
                )
            )

        groups, found = merge_event_sites([site for analysis in linked for site in analysis.event_sites])
        diagnostics.extend(found)
        root, found = assemble(linked)
        diagnostics.extend(found)

        result = AnalysisResult(
            files=tuple(paths),
            root=root,
            types=tuple(decl for analysis in linked for decl in analysis.types),
            events=groups,
            diagnostics=tuple(diagnostics),
        )
        logger.info(
            "Found %d commands, %d types and %d event scopes (%d errors, %d warnings)",
            len(result.commands),
            len(result.types),
            len(result.events),
            len(result.errors),
            len(result.warnings),
        )
        return result

    def generate(self, config: TsGenConfig, *, dry_run: bool = False) -> GenerationOutcome:
        """Analyze ``config.input_path`` and write the artifacts to ``config.output_path``."""
        provider = DirectoryFileProvider(config.input_path, config.exclude_paths)
        result = self.analyze(provider, workers=config.workers)
        renderer = self._renderer or TemplateRenderer(config.templates_dir)
        artifacts = build_artifacts(result, renderer, mock_api=config.mock_api)

        if dry_run:
            logger.info("Dry run: %d artifacts not written", len(artifacts))
            return GenerationOutcome(result=result, artifacts=artifacts, dry_run=True)

        written = Writer(config.output_path).commit(artifacts)
        return GenerationOutcome(result=result, artifacts=artifacts, written=written)


__all__ = ["GenerationOutcome", "Orchestrator"]
