"""Plain records extracted from Rust syntax trees.

The parser converts tree-sitter nodes into these immutable, picklable
records so later phases never touch the syntax tree or the raw text again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class TypeExpr:
    """A Rust type expression.

    ``kind`` is one of ``path`` (``a::B<C>``), ``reference`` (``&T``; the
    referent is ``args[0]``), ``tuple``, ``array`` (slices and fixed arrays;
    the element is ``args[0]``), ``unit`` or ``other`` (anything the resolver
    cannot map, kept as text).
    """

    kind: str
    text: str
    path: Optional[str] = None
    args: Tuple["TypeExpr", ...] = ()


@dataclass(frozen=True)
class ArgExpr:
    """A classified call argument.

    ``value`` holds the literal content for ``string_literal``, the name for
    ``identifier`` and the type path for ``struct``.
    """

    kind: str
    text: str
    value: Optional[str] = None


@dataclass(frozen=True)
class EmitCall:
    """A ``<receiver>.emit(...)`` or ``<receiver>.emit_to(...)`` call."""

    method: str
    receiver: str
    receiver_name: Optional[str]
    args: Tuple[ArgExpr, ...]
    line: int
    column: int


@dataclass(frozen=True)
class ParamDecl:
    name: str
    type_expr: TypeExpr


@dataclass(frozen=True)
class FunctionDecl:
    name: str
    doc: str
    params: Tuple[ParamDecl, ...]
    return_type: Optional[TypeExpr]
    is_command: bool
    is_async: bool = False
    rename_all: Optional[str] = None
    emit_calls: Tuple[EmitCall, ...] = ()
    line: int = 1


@dataclass(frozen=True)
class FieldDecl:
    """A named struct field, or a positional one named ``"0"``, ``"1"``..."""

    name: str
    type_expr: TypeExpr
    doc: str = ""
    rename: Optional[str] = None
    skip: bool = False


@dataclass(frozen=True)
class VariantDecl:
    """An enum variant; ``shape`` is ``unit``, ``tuple`` or ``struct``."""

    name: str
    shape: str
    fields: Tuple[FieldDecl, ...] = ()
    doc: str = ""
    rename: Optional[str] = None
    skip: bool = False


@dataclass(frozen=True)
class TypeDecl:
    """A struct or enum; ``shape`` is ``named``, ``tuple`` or ``unit`` for structs."""

    name: str
    kind: str
    doc: str = ""
    shape: str = "named"
    fields: Tuple[FieldDecl, ...] = ()
    variants: Tuple[VariantDecl, ...] = ()
    derives: Tuple[str, ...] = ()
    rename_all: Optional[str] = None
    line: int = 1


Declaration = Union[FunctionDecl, TypeDecl]


@dataclass(frozen=True)
class AliasBinding:
    """``use <path> as <alias>``; plain imports bind their last segment."""

    alias: str
    path: str


@dataclass(frozen=True)
class SourceFile:
    """One parsed file; ``globs`` lists the prefixes of `use a::b::*` imports."""

    path: str
    module: Tuple[str, ...]
    declarations: Tuple[Declaration, ...] = ()
    aliases: Tuple[AliasBinding, ...] = ()
    globs: Tuple[str, ...] = ()
    alias_table: Dict[str, str] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.alias_table and self.aliases:
            # later bindings shadow earlier ones
            object.__setattr__(
                self, "alias_table", {binding.alias: binding.path for binding in self.aliases}
            )

    @property
    def functions(self) -> Tuple[FunctionDecl, ...]:
        return tuple(item for item in self.declarations if isinstance(item, FunctionDecl))

    @property
    def types(self) -> Tuple[TypeDecl, ...]:
        return tuple(item for item in self.declarations if isinstance(item, TypeDecl))


def module_segments(rel_path: str) -> Tuple[str, ...]:
    """``src/api/user.rs`` -> ``("src", "api", "user")``."""
    parts = rel_path.split("/")
    stem = parts[-1]
    if "." in stem:
        stem = stem.rsplit(".", 1)[0]
    return tuple(parts[:-1]) + (stem,)


__all__ = [
    "AliasBinding",
    "ArgExpr",
    "Declaration",
    "EmitCall",
    "FieldDecl",
    "FunctionDecl",
    "ParamDecl",
    "SourceFile",
    "TypeDecl",
    "TypeExpr",
    "VariantDecl",
    "module_segments",
]
