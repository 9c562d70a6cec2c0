"""Builds command entries from a parsed source file."""

from __future__ import annotations

from typing import Iterable, List, Set, Tuple

from ..descriptors import VOID, TypeDescriptor, Unsupported, walk
from ..diagnostics import Diagnostic, NameCollisionWarning, UnsupportedTypeWarning
from ..models import CommandFunction, Parameter
from ..syntax import SourceFile
from .resolver import TypeResolver


def unsupported_warnings(
    descriptor: TypeDescriptor, context: str, path: str, line: int
) -> Iterable[Diagnostic]:
    """Yield one warning per ``Unsupported`` node nested in ``descriptor``."""
    for node in walk(descriptor):
        if isinstance(node, Unsupported):
            yield UnsupportedTypeWarning(
                f"cannot map type `{node.expression}` in {context}", path=path, line=line
            )


def build_commands(
    source: SourceFile, resolver: TypeResolver
) -> Tuple[Tuple[CommandFunction, ...], List[Diagnostic]]:
    """Return the file's commands in declaration order.

    Bridge-injected handle parameters are dropped; a repeated command name
    keeps the first definition.
    """
    commands: List[CommandFunction] = []
    diagnostics: List[Diagnostic] = []
    seen: Set[str] = set()

    for function in source.functions:
        if not function.is_command:
            continue
        if function.name in seen:
            diagnostics.append(
                NameCollisionWarning(
                    f"command `{function.name}` is declared more than once; keeping the first",
                    path=source.path,
                    line=function.line,
                )
            )
            continue
        seen.add(function.name)

        params = []
        for param in function.params:
            if resolver.is_excluded(param.type_expr):
                continue
            descriptor = resolver.resolve(param.type_expr)
            diagnostics.extend(
                unsupported_warnings(
                    descriptor,
                    f"parameter `{param.name}` of command `{function.name}`",
                    source.path,
                    function.line,
                )
            )
            params.append(
                Parameter(
                    name=param.name,
                    type=descriptor,
                    is_reference=param.type_expr.kind == "reference",
                    canonical_path=resolver.canonical_path(param.type_expr),
                )
            )

        if function.return_type is None:
            return_type: TypeDescriptor = VOID
        else:
            return_type = resolver.resolve(function.return_type)
            diagnostics.extend(
                unsupported_warnings(
                    return_type,
                    f"return type of command `{function.name}`",
                    source.path,
                    function.line,
                )
            )

        commands.append(
            CommandFunction(
                name=function.name,
                doc=function.doc,
                params=tuple(params),
                return_type=return_type,
                module=source.module,
                path=source.path,
                is_async=function.is_async,
                rename_all=function.rename_all,
                line=function.line,
            )
        )
    return tuple(commands), diagnostics


__all__ = ["build_commands", "unsupported_warnings"]
