"""Normalized type descriptors produced by the type resolver."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, ClassVar, Dict, Iterator, Optional, Tuple


@dataclass(frozen=True)
class TypeDescriptor:
    """Base class for every resolved type shape."""

    kind: ClassVar[str] = "type"

    def children(self) -> Tuple["TypeDescriptor", ...]:
        return ()

    def to_dict(self) -> Dict[str, object]:
        return {"kind": self.kind}


@dataclass(frozen=True)
class Primitive(TypeDescriptor):
    """One of ``string``, ``number``, ``boolean`` or ``void``."""

    name: str

    kind: ClassVar[str] = "primitive"

    def to_dict(self) -> Dict[str, object]:
        return {"kind": self.kind, "name": self.name}


STRING = Primitive("string")
NUMBER = Primitive("number")
BOOLEAN = Primitive("boolean")
VOID = Primitive("void")


@dataclass(frozen=True)
class OptionalType(TypeDescriptor):
    inner: TypeDescriptor

    kind: ClassVar[str] = "optional"

    def children(self) -> Tuple[TypeDescriptor, ...]:
        return (self.inner,)

    def to_dict(self) -> Dict[str, object]:
        return {"kind": self.kind, "inner": self.inner.to_dict()}


@dataclass(frozen=True)
class ResultType(TypeDescriptor):
    """Fallible value; only survives until narrowing."""

    ok: TypeDescriptor
    error: Optional[TypeDescriptor] = None

    kind: ClassVar[str] = "result"

    def children(self) -> Tuple[TypeDescriptor, ...]:
        if self.error is None:
            return (self.ok,)
        return (self.ok, self.error)

    def to_dict(self) -> Dict[str, object]:
        return {
            "kind": self.kind,
            "ok": self.ok.to_dict(),
            "error": self.error.to_dict() if self.error is not None else None,
        }


@dataclass(frozen=True)
class CollectionType(TypeDescriptor):
    item: TypeDescriptor

    kind: ClassVar[str] = "collection"

    def children(self) -> Tuple[TypeDescriptor, ...]:
        return (self.item,)

    def to_dict(self) -> Dict[str, object]:
        return {"kind": self.kind, "item": self.item.to_dict()}


@dataclass(frozen=True)
class MappingType(TypeDescriptor):
    key: TypeDescriptor
    value: TypeDescriptor

    kind: ClassVar[str] = "mapping"

    def children(self) -> Tuple[TypeDescriptor, ...]:
        return (self.key, self.value)

    def to_dict(self) -> Dict[str, object]:
        return {"kind": self.kind, "key": self.key.to_dict(), "value": self.value.to_dict()}


@dataclass(frozen=True)
class TupleType(TypeDescriptor):
    items: Tuple[TypeDescriptor, ...]

    kind: ClassVar[str] = "tuple"

    def children(self) -> Tuple[TypeDescriptor, ...]:
        return self.items

    def to_dict(self) -> Dict[str, object]:
        return {"kind": self.kind, "items": [item.to_dict() for item in self.items]}


@dataclass(frozen=True)
class NamedRef(TypeDescriptor):
    """Reference to a declared data type.

    ``origin`` is empty until the second pass links the reference to the
    source file that declares it.
    """

    path: str
    name: str
    origin: Optional[str] = None

    kind: ClassVar[str] = "named"

    @property
    def resolved(self) -> bool:
        return self.origin is not None

    def to_dict(self) -> Dict[str, object]:
        return {"kind": self.kind, "path": self.path, "name": self.name, "origin": self.origin}


@dataclass(frozen=True)
class Opaque(TypeDescriptor):
    """The bridge's raw response type; deliberately untyped on the client."""

    kind: ClassVar[str] = "opaque"


@dataclass(frozen=True)
class Unsupported(TypeDescriptor):
    expression: str

    kind: ClassVar[str] = "unsupported"

    def to_dict(self) -> Dict[str, object]:
        return {"kind": self.kind, "expression": self.expression}


def walk(descriptor: TypeDescriptor) -> Iterator[TypeDescriptor]:
    """Yield ``descriptor`` and every nested descriptor, depth first."""
    yield descriptor
    for child in descriptor.children():
        yield from walk(child)


def transform(
    descriptor: TypeDescriptor, func: Callable[[TypeDescriptor], TypeDescriptor]
) -> TypeDescriptor:
    """Rebuild ``descriptor`` bottom-up, applying ``func`` to every node."""
    if isinstance(descriptor, OptionalType):
        descriptor = replace(descriptor, inner=transform(descriptor.inner, func))
    elif isinstance(descriptor, ResultType):
        error = transform(descriptor.error, func) if descriptor.error is not None else None
        descriptor = replace(descriptor, ok=transform(descriptor.ok, func), error=error)
    elif isinstance(descriptor, CollectionType):
        descriptor = replace(descriptor, item=transform(descriptor.item, func))
    elif isinstance(descriptor, MappingType):
        descriptor = replace(
            descriptor,
            key=transform(descriptor.key, func),
            value=transform(descriptor.value, func),
        )
    elif isinstance(descriptor, TupleType):
        descriptor = replace(
            descriptor, items=tuple(transform(item, func) for item in descriptor.items)
        )
    return func(descriptor)


def narrow(descriptor: TypeDescriptor) -> TypeDescriptor:
    """Replace every ``Result`` with its success arm."""

    def _narrow(node: TypeDescriptor) -> TypeDescriptor:
        if isinstance(node, ResultType):
            return node.ok
        return node

    return transform(descriptor, _narrow)


__all__ = [
    "BOOLEAN",
    "CollectionType",
    "MappingType",
    "NUMBER",
    "NamedRef",
    "Opaque",
    "OptionalType",
    "Primitive",
    "ResultType",
    "STRING",
    "TupleType",
    "TypeDescriptor",
    "Unsupported",
    "VOID",
    "narrow",
    "transform",
    "walk",
]
