"""Assembles per-file analyses into a tree mirroring the input layout."""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from ..diagnostics import Diagnostic, NameCollisionWarning
from ..errors import InvariantViolation
from ..models import FileAnalysis, ModuleNode
from ..naming import pascal_case


def assemble(analyses: Sequence[FileAnalysis]) -> Tuple[ModuleNode, List[Diagnostic]]:
    """Build the module tree from linked analyses given in scan order."""
    root = ModuleNode(segment="")
    diagnostics: List[Diagnostic] = []
    wrapper_names: Dict[Tuple[str, ...], Dict[str, str]] = {}

    for analysis in analyses:
        if not analysis.module:
            raise InvariantViolation(f"{analysis.path} has no module path")
        parent = root
        for index, segment in enumerate(analysis.module[:-1]):
            node = parent.child(segment, "directory")
            if node is None:
                node = ModuleNode(segment=segment, path=analysis.module[: index + 1])
                parent.children.append(node)
            parent = node

        node = ModuleNode(
            segment=analysis.module[-1],
            path=analysis.module,
            kind="file",
            source_path=analysis.path,
            commands=list(analysis.commands),
            types=list(analysis.types),
        )
        if node.commands:
            taken = wrapper_names.setdefault(parent.path, {})
            node.wrapper_name = _unique_wrapper_name(node, taken, diagnostics)
        parent.children.append(node)

    diagnostics.extend(_type_collisions(analyses))
    _check_ownership(root, analyses)
    return root, diagnostics


def _unique_wrapper_name(
    node: ModuleNode, taken: Dict[str, str], diagnostics: List[Diagnostic]
) -> str:
    base = pascal_case(node.segment) or "Module"
    name = base
    if name in taken:
        suffix = 2
        while f"{base}{suffix}" in taken:
            suffix += 1
        name = f"{base}{suffix}"
        diagnostics.append(
            NameCollisionWarning(
                f"wrapper name `{base}` is already used by {taken[base]}; using `{name}`",
                path=node.source_path,
            )
        )
    taken[name] = node.source_path or ""
    return name


def _type_collisions(analyses: Sequence[FileAnalysis]) -> List[Diagnostic]:
    first_seen: Dict[str, str] = {}
    diagnostics: List[Diagnostic] = []
    for analysis in analyses:
        for decl in analysis.types:
            owner = first_seen.get(decl.name)
            if owner is None:
                first_seen[decl.name] = decl.path
                continue
            diagnostics.append(
                NameCollisionWarning(
                    f"type `{decl.name}` is also declared in {owner}; both are exported "
                    "into one namespace",
                    path=decl.path,
                    line=decl.line,
                )
            )
    return diagnostics


def _check_ownership(root: ModuleNode, analyses: Sequence[FileAnalysis]) -> None:
    owners: Dict[int, int] = {}
    for node in root.iter_files():
        for item in [*node.commands, *node.types]:
            owners[id(item)] = owners.get(id(item), 0) + 1
    for analysis in analyses:
        for item in [*analysis.commands, *analysis.types]:
            count = owners.get(id(item), 0)
            if count != 1:
                raise InvariantViolation(
                    f"`{item.name}` from {analysis.path} is owned by {count} modules"
                )


__all__ = ["assemble"]
