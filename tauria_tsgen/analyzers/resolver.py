"""Maps Rust type expressions to normalized type descriptors."""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

from ..descriptors import (
    BOOLEAN,
    NUMBER,
    STRING,
    VOID,
    CollectionType,
    MappingType,
    NamedRef,
    Opaque,
    OptionalType,
    ResultType,
    TupleType,
    TypeDescriptor,
    Unsupported,
    narrow,
)
from ..syntax import SourceFile, TypeExpr

WINDOW_HANDLE_TYPES = frozenset({"tauri::Window", "tauri::WebviewWindow", "tauri::Webview"})
APP_HANDLE_TYPES = frozenset({"tauri::AppHandle"})
STATE_TYPES = frozenset({"tauri::State"})
EXCLUDED_HANDLE_TYPES = WINDOW_HANDLE_TYPES | APP_HANDLE_TYPES | STATE_TYPES
OPAQUE_TYPES = frozenset({"tauri::ipc::Response"})

_STD_ROOTS = frozenset({"std", "core", "alloc"})

_STRING_TYPES = frozenset({"String", "str", "char", "PathBuf", "Path", "OsString", "OsStr"})
_NUMBER_TYPES = frozenset(
    {
        "i8", "i16", "i32", "i64", "i128", "isize",
        "u8", "u16", "u32", "u64", "u128", "usize",
        "f32", "f64",
    }
)
_COLLECTION_TYPES = frozenset({"Vec", "VecDeque", "HashSet", "BTreeSet", "LinkedList", "BinaryHeap"})
_MAPPING_TYPES = frozenset({"HashMap", "BTreeMap", "IndexMap"})
_TRANSPARENT_TYPES = frozenset({"Box", "Arc", "Rc", "Cow"})


class TypeResolver:
    """Resolves type expressions against one file's ``use`` bindings.

    Resolution is a pure function of the expression and the file's alias
    table; nothing is cached between calls.
    """

    def __init__(self, aliases: Mapping[str, str], globs: Sequence[str] = ()) -> None:
        self._aliases = dict(aliases)
        self._globs = tuple(globs)

    @classmethod
    def for_source(cls, source: SourceFile) -> "TypeResolver":
        return cls(source.alias_table, source.globs)

    # paths ----------------------------------------------------------------

    def expand_path(self, path: str) -> str:
        """Expand the first segment of ``path`` through the alias table."""
        segments = path.split("::")
        head = segments[0]
        target = self._aliases.get(head)
        if target is not None:
            return "::".join([target, *segments[1:]])
        if len(segments) == 1:
            for prefix in self._globs:
                candidate = f"{prefix}::{head}"
                if candidate in EXCLUDED_HANDLE_TYPES or candidate in OPAQUE_TYPES:
                    return candidate
        return path

    def canonical_path(self, expr: TypeExpr) -> Optional[str]:
        """Alias-resolved path of ``expr`` with borrows stripped and generics ignored."""
        while expr.kind == "reference" and expr.args:
            expr = expr.args[0]
        if expr.kind != "path" or not expr.path:
            return None
        return self.expand_path(expr.path)

    def is_excluded(self, expr: TypeExpr) -> bool:
        return self.canonical_path(expr) in EXCLUDED_HANDLE_TYPES

    def is_window_handle(self, expr: TypeExpr) -> bool:
        return self.canonical_path(expr) in WINDOW_HANDLE_TYPES

    # descriptors ----------------------------------------------------------

    def classify(self, expr: TypeExpr) -> TypeDescriptor:
        """Map ``expr`` to a descriptor, keeping ``Result`` wrappers intact."""
        if expr.kind == "reference":
            if not expr.args:
                return Unsupported(expr.text)
            return self.classify(expr.args[0])
        if expr.kind == "unit":
            return VOID
        if expr.kind == "tuple":
            if not expr.args:
                return VOID
            return TupleType(tuple(self.classify(item) for item in expr.args))
        if expr.kind == "array":
            return CollectionType(self.classify(expr.args[0]))
        if expr.kind != "path" or not expr.path:
            return Unsupported(expr.text)
        return self._classify_path(expr)

    def resolve(self, expr: TypeExpr) -> TypeDescriptor:
        """Classify ``expr`` and narrow every ``Result`` to its success arm."""
        return narrow(self.classify(expr))

    def _classify_path(self, expr: TypeExpr) -> TypeDescriptor:
        canonical = self.expand_path(expr.path or "")
        if canonical in OPAQUE_TYPES:
            return Opaque()
        if canonical in EXCLUDED_HANDLE_TYPES:
            return Unsupported(expr.text)

        segments = canonical.split("::")
        name = segments[-1]
        args = expr.args
        from_std = len(segments) == 1 or segments[0] in _STD_ROOTS

        if name == "Result" and 1 <= len(args) <= 2:
            error = self.classify(args[1]) if len(args) == 2 else None
            return ResultType(self.classify(args[0]), error)
        if name == "Option" and len(args) == 1:
            return OptionalType(self.classify(args[0]))

        if from_std:
            if not args:
                if name in _STRING_TYPES:
                    return STRING
                if name in _NUMBER_TYPES:
                    return NUMBER
                if name == "bool":
                    return BOOLEAN
            if name in _COLLECTION_TYPES and len(args) == 1:
                return CollectionType(self.classify(args[0]))
            if name in _MAPPING_TYPES and len(args) >= 2:
                return MappingType(self.classify(args[0]), self.classify(args[1]))
            if name in _TRANSPARENT_TYPES and len(args) == 1:
                return self.classify(args[0])
        if name in _MAPPING_TYPES and len(args) >= 2:
            return MappingType(self.classify(args[0]), self.classify(args[1]))

        if args or name == "Self":
            return Unsupported(expr.text)
        return NamedRef(path=canonical, name=name)


__all__ = [
    "APP_HANDLE_TYPES",
    "EXCLUDED_HANDLE_TYPES",
    "OPAQUE_TYPES",
    "STATE_TYPES",
    "TypeResolver",
    "WINDOW_HANDLE_TYPES",
]
