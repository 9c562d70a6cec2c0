"""Exportable data types and second-pass resolution of named references."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

from ..descriptors import NamedRef, TypeDescriptor, Unsupported, transform
from ..diagnostics import Diagnostic, UnsupportedTypeWarning
from ..models import (
    CommandFunction,
    EventSite,
    FieldEntry,
    TypeDeclaration,
    VariantEntry,
)
from ..naming import apply_rename_rule
from ..syntax import FieldDecl, SourceFile, TypeDecl
from .commands import unsupported_warnings
from .resolver import TypeResolver

_RELATIVE_ROOTS = frozenset({"crate", "self", "super"})


def build_type_declarations(
    source: SourceFile, resolver: TypeResolver
) -> Tuple[Tuple[TypeDeclaration, ...], List[Diagnostic]]:
    declarations: List[TypeDeclaration] = []
    diagnostics: List[Diagnostic] = []
    for decl in source.types:
        context = f"type `{decl.name}`"
        if decl.kind == "enum":
            variants = []
            for variant in decl.variants:
                if variant.skip:
                    continue
                fields = _fields(variant.fields, None, resolver)
                variants.append(
                    VariantEntry(
                        name=variant.name,
                        serialized_name=variant.rename or apply_rename_rule(variant.name, decl.rename_all),
                        shape=variant.shape,
                        fields=fields,
                        doc=variant.doc,
                    )
                )
            entry = _declaration(source, decl, variants=tuple(variants))
        else:
            entry = _declaration(source, decl, fields=_fields(decl.fields, decl.rename_all, resolver))

        for field in _all_fields(entry):
            diagnostics.extend(
                unsupported_warnings(
                    field.type, f"field `{field.name}` of {context}", source.path, decl.line
                )
            )
        declarations.append(entry)
    return tuple(declarations), diagnostics


def _declaration(source: SourceFile, decl: TypeDecl, **members: object) -> TypeDeclaration:
    return TypeDeclaration(
        name=decl.name,
        kind=decl.kind,
        doc=decl.doc,
        module=source.module,
        path=source.path,
        shape=decl.shape if decl.kind == "struct" else "named",
        serialize="Serialize" in decl.derives,
        deserialize="Deserialize" in decl.derives,
        line=decl.line,
        **members,  # type: ignore[arg-type]
    )


def _fields(
    fields: Sequence[FieldDecl], rename_all: Optional[str], resolver: TypeResolver
) -> Tuple[FieldEntry, ...]:
    return tuple(
        FieldEntry(
            name=field.name,
            serialized_name=field.rename or apply_rename_rule(field.name, rename_all),
            type=resolver.resolve(field.type_expr),
            doc=field.doc,
        )
        for field in fields
        if not field.skip
    )


def _module_path(module: Tuple[str, ...]) -> Tuple[str, ...]:
    """``("models", "mod")`` names the same module as ``("models",)``."""
    if len(module) > 1 and module[-1] == "mod":
        return module[:-1]
    return module


def _all_fields(decl: TypeDeclaration) -> List[FieldEntry]:
    fields = list(decl.fields)
    for variant in decl.variants:
        fields.extend(variant.fields)
    return fields


class TypeModel:
    """All type declarations of a run, in scan order."""

    def __init__(self, declarations: Sequence[TypeDeclaration]) -> None:
        self.declarations: Tuple[TypeDeclaration, ...] = tuple(declarations)
        self._by_name: Dict[str, List[TypeDeclaration]] = {}
        for decl in self.declarations:
            self._by_name.setdefault(decl.name, []).append(decl)

    def __len__(self) -> int:
        return len(self.declarations)

    def lookup(self, ref: NamedRef, module: Tuple[str, ...] = ()) -> Optional[TypeDeclaration]:
        """Find the declaration ``ref`` points at.

        A qualified path selects the module whose trailing segments match it.
        A path into another crate that matches no module resolves to nothing.
        Otherwise a declaration in ``module`` wins over the first one scanned.
        """
        candidates = self._by_name.get(ref.name)
        if not candidates:
            return None
        segments = ref.path.split("::")
        hint = tuple(segment for segment in segments[:-1] if segment not in _RELATIVE_ROOTS)
        if hint:
            for decl in candidates:
                if _module_path(decl.module)[-len(hint):] == hint:
                    return decl
            if segments[0] not in _RELATIVE_ROOTS:
                return None
        for decl in candidates:
            if decl.module == module:
                return decl
        return candidates[0]

    # linking --------------------------------------------------------------

    def link(
        self,
        descriptor: TypeDescriptor,
        module: Tuple[str, ...],
        context: str,
        path: str,
        line: int,
        diagnostics: List[Diagnostic],
    ) -> TypeDescriptor:
        """Resolve every forward ``NamedRef`` in ``descriptor``."""

        def _link(node: TypeDescriptor) -> TypeDescriptor:
            if not isinstance(node, NamedRef) or node.resolved:
                return node
            target = self.lookup(node, module)
            if target is None:
                diagnostics.append(
                    UnsupportedTypeWarning(
                        f"unresolved type `{node.path}` in {context}", path=path, line=line
                    )
                )
                return Unsupported(node.path)
            return replace(node, origin=target.path)

        return transform(descriptor, _link)

    def link_command(
        self, command: CommandFunction, diagnostics: List[Diagnostic]
    ) -> CommandFunction:
        params = tuple(
            replace(
                param,
                type=self.link(
                    param.type,
                    command.module,
                    f"parameter `{param.name}` of command `{command.name}`",
                    command.path,
                    command.line,
                    diagnostics,
                ),
            )
            for param in command.params
        )
        return_type = self.link(
            command.return_type,
            command.module,
            f"return type of command `{command.name}`",
            command.path,
            command.line,
            diagnostics,
        )
        return replace(command, params=params, return_type=return_type)

    def link_declaration(
        self, decl: TypeDeclaration, diagnostics: List[Diagnostic]
    ) -> TypeDeclaration:
        def _link_fields(fields: Sequence[FieldEntry]) -> Tuple[FieldEntry, ...]:
            return tuple(
                replace(
                    field,
                    type=self.link(
                        field.type,
                        decl.module,
                        f"field `{field.name}` of type `{decl.name}`",
                        decl.path,
                        decl.line,
                        diagnostics,
                    ),
                )
                for field in fields
            )

        variants = tuple(replace(variant, fields=_link_fields(variant.fields)) for variant in decl.variants)
        return replace(decl, fields=_link_fields(decl.fields), variants=variants)

    def link_site(
        self, site: EventSite, module: Tuple[str, ...], diagnostics: List[Diagnostic]
    ) -> EventSite:
        payload = self.link(
            site.payload,
            module,
            f"payload of event `{site.name}`",
            site.path,
            site.line,
            diagnostics,
        )
        return replace(site, payload=payload)


__all__ = ["TypeModel", "build_type_declarations"]
