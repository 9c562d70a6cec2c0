"""Per-file analysis: parse, resolve, build commands, types and event sites."""

from __future__ import annotations

from typing import List

from ..diagnostics import Diagnostic, SourceSyntaxError
from ..errors import SourceParseError
from ..models import FileAnalysis
from ..syntax import module_segments
from .commands import build_commands
from .events import detect_event_sites
from .parser import parse_source
from .resolver import TypeResolver
from .type_model import build_type_declarations


def analyze_source(path: str, text: str) -> FileAnalysis:
    """Analyze one file; a syntax error yields an analysis with no declarations."""
    try:
        source = parse_source(path, text)
    except SourceParseError as exc:
        return FileAnalysis(
            path=path,
            module=module_segments(path),
            diagnostics=(
                SourceSyntaxError(exc.reason, path=path, line=exc.line, column=exc.column),
            ),
        )

    resolver = TypeResolver.for_source(source)
    diagnostics: List[Diagnostic] = []
    commands, found = build_commands(source, resolver)
    diagnostics.extend(found)
    types, found = build_type_declarations(source, resolver)
    diagnostics.extend(found)
    sites, found = detect_event_sites(source, resolver)
    diagnostics.extend(found)
    return FileAnalysis(
        path=path,
        module=source.module,
        commands=commands,
        types=types,
        event_sites=sites,
        diagnostics=tuple(diagnostics),
    )


__all__ = ["analyze_source"]
