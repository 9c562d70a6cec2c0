"""Semantic model shared by the analyzers, renderer and orchestrator."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .descriptors import TypeDescriptor
from .diagnostics import Diagnostic
from .naming import pascal_case


@dataclass(frozen=True)
class Parameter:
    """A command parameter as seen by the client."""

    name: str
    type: TypeDescriptor
    is_reference: bool = False
    canonical_path: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "type": self.type.to_dict(),
            "is_reference": self.is_reference,
            "canonical_path": self.canonical_path,
        }


@dataclass(frozen=True)
class CommandFunction:
    """A bridgeable backend function."""

    name: str
    doc: str
    params: Tuple[Parameter, ...]
    return_type: TypeDescriptor
    module: Tuple[str, ...]
    path: str
    is_async: bool = False
    rename_all: Optional[str] = None
    line: int = 1

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "doc": self.doc,
            "params": [param.to_dict() for param in self.params],
            "return_type": self.return_type.to_dict(),
            "module": list(self.module),
            "path": self.path,
            "is_async": self.is_async,
            "rename_all": self.rename_all,
            "line": self.line,
        }


@dataclass(frozen=True)
class FieldEntry:
    """A struct field or variant payload slot.

    ``serialized_name`` is the key the value travels under across the bridge.
    """

    name: str
    serialized_name: str
    type: TypeDescriptor
    doc: str = ""

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "serialized_name": self.serialized_name,
            "type": self.type.to_dict(),
            "doc": self.doc,
        }


@dataclass(frozen=True)
class VariantEntry:
    name: str
    serialized_name: str
    shape: str
    fields: Tuple[FieldEntry, ...] = ()
    doc: str = ""

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "serialized_name": self.serialized_name,
            "shape": self.shape,
            "fields": [item.to_dict() for item in self.fields],
            "doc": self.doc,
        }


@dataclass(frozen=True)
class TypeDeclaration:
    """An exportable struct or enum."""

    name: str
    kind: str
    doc: str
    module: Tuple[str, ...]
    path: str
    shape: str = "named"
    fields: Tuple[FieldEntry, ...] = ()
    variants: Tuple[VariantEntry, ...] = ()
    serialize: bool = False
    deserialize: bool = False
    line: int = 1

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "kind": self.kind,
            "doc": self.doc,
            "module": list(self.module),
            "path": self.path,
            "shape": self.shape,
            "fields": [item.to_dict() for item in self.fields],
            "variants": [item.to_dict() for item in self.variants],
            "serialize": self.serialize,
            "deserialize": self.deserialize,
            "line": self.line,
        }


@dataclass(frozen=True)
class EventScope:
    """Where an event is delivered: every listener, or one named window."""

    kind: str
    window: Optional[str] = None

    @property
    def is_global(self) -> bool:
        return self.kind == "global"

    @property
    def label(self) -> str:
        if self.is_global:
            return "Global"
        return f"{pascal_case(self.window or '')}Window"

    @property
    def handler_name(self) -> str:
        return f"{self.label}EventHandlers"

    def sort_key(self) -> Tuple[int, str]:
        return (0, "") if self.is_global else (1, self.window or "")

    def to_dict(self) -> Dict[str, object]:
        return {"kind": self.kind, "window": self.window}


GLOBAL_SCOPE = EventScope("global")


def window_scope(name: str) -> EventScope:
    return EventScope("window", name)


@dataclass(frozen=True)
class EventSite:
    """One broadcast call site."""

    name: str
    payload: TypeDescriptor
    scope: EventScope
    path: str
    line: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "payload": self.payload.to_dict(),
            "scope": self.scope.to_dict(),
            "path": self.path,
            "line": self.line,
        }


@dataclass(frozen=True)
class EventEntry:
    """A merged event: one callback slot in a scope's handler record."""

    key: str
    name: str
    callback: str
    payload: TypeDescriptor
    sites: Tuple[EventSite, ...]

    def to_dict(self) -> Dict[str, object]:
        return {
            "key": self.key,
            "name": self.name,
            "callback": self.callback,
            "payload": self.payload.to_dict(),
            "sites": [f"{site.path}:{site.line}" for site in self.sites],
        }


@dataclass(frozen=True)
class EventHandlerGroup:
    scope: EventScope
    entries: Tuple[EventEntry, ...]

    @property
    def name(self) -> str:
        return self.scope.handler_name

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "scope": self.scope.to_dict(),
            "entries": [entry.to_dict() for entry in self.entries],
        }


@dataclass
class ModuleNode:
    """A directory or source file in the mirrored output tree."""

    segment: str
    path: Tuple[str, ...] = ()
    kind: str = "directory"
    source_path: Optional[str] = None
    wrapper_name: Optional[str] = None
    children: List["ModuleNode"] = field(default_factory=list)
    commands: List[CommandFunction] = field(default_factory=list)
    types: List[TypeDeclaration] = field(default_factory=list)

    @property
    def is_file(self) -> bool:
        return self.kind == "file"

    @property
    def directory(self) -> Tuple[str, ...]:
        """Directory segments the node's artifacts are written under."""
        return self.path[:-1] if self.is_file else self.path

    def child(self, segment: str, kind: str) -> Optional["ModuleNode"]:
        for node in self.children:
            if node.segment == segment and node.kind == kind:
                return node
        return None

    def iter_nodes(self) -> Iterator["ModuleNode"]:
        yield self
        for node in self.children:
            yield from node.iter_nodes()

    def iter_files(self) -> Iterator["ModuleNode"]:
        for node in self.iter_nodes():
            if node.is_file:
                yield node

    def to_dict(self) -> Dict[str, object]:
        return {
            "segment": self.segment,
            "path": list(self.path),
            "kind": self.kind,
            "source_path": self.source_path,
            "wrapper_name": self.wrapper_name,
            "commands": [command.name for command in self.commands],
            "types": [item.name for item in self.types],
            "children": [node.to_dict() for node in self.children],
        }


@dataclass(frozen=True)
class FileAnalysis:
    """Everything derived from a single source file before linking."""

    path: str
    module: Tuple[str, ...]
    commands: Tuple[CommandFunction, ...] = ()
    types: Tuple[TypeDeclaration, ...] = ()
    event_sites: Tuple[EventSite, ...] = ()
    diagnostics: Tuple[Diagnostic, ...] = ()


@dataclass(frozen=True)
class AnalysisResult:
    """The complete model of one run, ready for rendering."""

    files: Tuple[str, ...]
    root: ModuleNode
    types: Tuple[TypeDeclaration, ...]
    events: Tuple[EventHandlerGroup, ...]
    diagnostics: Tuple[Diagnostic, ...] = ()

    @property
    def commands(self) -> List[CommandFunction]:
        return [command for node in self.root.iter_files() for command in node.commands]

    @property
    def errors(self) -> List[Diagnostic]:
        return [item for item in self.diagnostics if item.is_error]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [item for item in self.diagnostics if not item.is_error]

    def to_dict(self) -> Dict[str, object]:
        return {
            "files": list(self.files),
            "modules": self.root.to_dict(),
            "commands": [command.to_dict() for command in self.commands],
            "types": [decl.to_dict() for decl in self.types],
            "events": [group.to_dict() for group in self.events],
            "diagnostics": [item.to_dict() for item in self.diagnostics],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, sort_keys=True)


__all__ = [
    "AnalysisResult",
    "CommandFunction",
    "EventEntry",
    "EventHandlerGroup",
    "EventScope",
    "EventSite",
    "FieldEntry",
    "FileAnalysis",
    "GLOBAL_SCOPE",
    "ModuleNode",
    "Parameter",
    "TypeDeclaration",
    "VariantEntry",
    "window_scope",
]
