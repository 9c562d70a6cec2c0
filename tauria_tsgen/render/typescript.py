"""TypeScript spelling of descriptors, identifiers and doc comments."""

from __future__ import annotations

import posixpath
import re
from typing import List, Sequence

from ..descriptors import (
    CollectionType,
    MappingType,
    NamedRef,
    Opaque,
    OptionalType,
    Primitive,
    ResultType,
    TupleType,
    TypeDescriptor,
    Unsupported,
    walk,
)

TYPES_NAMESPACE = "T"

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_RESERVED = frozenset(
    {
        "break", "case", "catch", "class", "const", "continue", "debugger", "default",
        "delete", "do", "else", "enum", "export", "extends", "false", "finally", "for",
        "function", "if", "import", "in", "instanceof", "new", "null", "return", "super",
        "switch", "this", "throw", "true", "try", "typeof", "var", "void", "while", "with",
    }
)


def ts_type(descriptor: TypeDescriptor, namespace: str = TYPES_NAMESPACE, *, payload: bool = False) -> str:
    """Spell ``descriptor`` as a TypeScript type.

    Named types are qualified with ``namespace`` unless it is empty. In
    ``payload`` position ``void`` is spelled ``null``, which is what the
    bridge delivers for a unit payload.
    """
    if isinstance(descriptor, Primitive):
        if payload and descriptor.name == "void":
            return "null"
        return descriptor.name
    if isinstance(descriptor, OptionalType):
        return f"{ts_type(descriptor.inner, namespace, payload=True)} | null"
    if isinstance(descriptor, ResultType):
        return ts_type(descriptor.ok, namespace, payload=payload)
    if isinstance(descriptor, CollectionType):
        item = ts_type(descriptor.item, namespace, payload=True)
        if " " in item:
            item = f"({item})"
        return f"{item}[]"
    if isinstance(descriptor, MappingType):
        key = ts_type(descriptor.key, namespace, payload=True)
        if key not in {"string", "number"}:
            key = "string"
        return f"Record<{key}, {ts_type(descriptor.value, namespace, payload=True)}>"
    if isinstance(descriptor, TupleType):
        return "[" + ", ".join(ts_type(item, namespace, payload=True) for item in descriptor.items) + "]"
    if isinstance(descriptor, NamedRef):
        return f"{namespace}.{descriptor.name}" if namespace else descriptor.name
    if isinstance(descriptor, Opaque):
        return "unknown"
    if isinstance(descriptor, Unsupported):
        return "any"
    return "unknown"


def placeholder(descriptor: TypeDescriptor, namespace: str = TYPES_NAMESPACE) -> str:
    """A value of ``descriptor``'s type for mock implementations."""
    if isinstance(descriptor, Primitive):
        return {"string": '""', "number": "0", "boolean": "false"}.get(descriptor.name, "undefined")
    if isinstance(descriptor, OptionalType):
        return "null"
    if isinstance(descriptor, ResultType):
        return placeholder(descriptor.ok, namespace)
    if isinstance(descriptor, CollectionType):
        return "[]"
    if isinstance(descriptor, MappingType):
        return "{}"
    if isinstance(descriptor, TupleType):
        return "[" + ", ".join(placeholder(item, namespace) for item in descriptor.items) + "]"
    return f"undefined as unknown as {ts_type(descriptor, namespace)}"


def uses_named(descriptors: Sequence[TypeDescriptor]) -> bool:
    return any(isinstance(node, NamedRef) for item in descriptors for node in walk(item))


def ts_identifier(name: str) -> str:
    if name in _RESERVED:
        return f"{name}_"
    return name


def ts_property(name: str) -> str:
    """Object key, quoted when it is not a bare identifier."""
    if _IDENTIFIER_RE.match(name):
        return name
    return '"' + name.replace("\\", "\\\\").replace('"', '\\"') + '"'


def ts_string(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n") + '"'


def doc_lines(doc: str) -> List[str]:
    return [line.replace("*/", "*\\/") for line in doc.splitlines()] if doc.strip() else []


def relative_import(from_dir: str, target: str) -> str:
    """Module specifier for ``target`` as seen from a file in ``from_dir``."""
    relative = posixpath.relpath(target, from_dir or ".")
    if not relative.startswith("."):
        relative = f"./{relative}"
    return relative


__all__ = [
    "TYPES_NAMESPACE",
    "doc_lines",
    "placeholder",
    "relative_import",
    "ts_identifier",
    "ts_property",
    "ts_string",
    "ts_type",
    "uses_named",
]
