"""Turns an analysis result into rendered output files."""

from __future__ import annotations

import posixpath
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Sequence

from ..descriptors import VOID, TypeDescriptor
from ..logging import get_logger
from ..models import (
    AnalysisResult,
    CommandFunction,
    EventHandlerGroup,
    FieldEntry,
    ModuleNode,
    TypeDeclaration,
    VariantEntry,
)
from ..naming import apply_rename_rule, camel_case, pascal_case
from .renderer import Renderer
from .typescript import (
    doc_lines,
    placeholder,
    relative_import,
    ts_identifier,
    ts_property,
    ts_string,
    ts_type,
    uses_named,
)

API_DIR = "tauria-api"
INTERFACE_DIR = "interface"
COMMANDS_DIR = "interface/commands"
TYPES_MODULE = "interface/types"
EVENTS_DIR = "tauria-api/events"
MOCK_DIR = "mock-api"

DEFAULT_ARGUMENT_CASE = "camelCase"

logger = get_logger("render")


@dataclass(frozen=True)
class Artifact:
    """One output file, addressed by its POSIX path under the output root."""

    path: str
    content: str


def build_artifacts(
    result: AnalysisResult, renderer: Renderer, *, mock_api: bool = False
) -> List[Artifact]:
    """Render every artifact for ``result``; a pure function of its inputs."""
    artifacts: List[Artifact] = []
    wrappers = [node for node in result.root.iter_files() if node.commands]
    has_types = bool(result.types)

    for node in wrappers:
        artifacts.append(_command_artifact(node, renderer, "interface.ts.j2", COMMANDS_DIR, has_types))
        artifacts.append(_command_artifact(node, renderer, "wrapper.ts.j2", API_DIR, has_types))
        if mock_api:
            artifacts.append(_command_artifact(node, renderer, "mock.ts.j2", MOCK_DIR, has_types))

    if has_types:
        artifacts.append(
            Artifact(
                path=f"{TYPES_MODULE}/index.ts",
                content=renderer.render(
                    "types.ts.j2", declarations=[_type_context(decl) for decl in result.types]
                ),
            )
        )

    for group in result.events:
        artifacts.append(_event_artifact(group, renderer))

    artifacts.extend(_barrels(wrappers, result.events, renderer, has_types=has_types, mock_api=mock_api))
    logger.debug("Rendered %d artifacts", len(artifacts))
    return artifacts


# commands -----------------------------------------------------------------


def _module_dir(node: ModuleNode) -> str:
    return "/".join(node.directory)


def _artifact_dir(base: str, node: ModuleNode) -> str:
    directory = _module_dir(node)
    return posixpath.join(base, directory) if directory else base


def _interface_module(node: ModuleNode) -> str:
    return posixpath.join(_artifact_dir(COMMANDS_DIR, node), node.wrapper_name or "")


def _command_artifact(
    node: ModuleNode, renderer: Renderer, template: str, base: str, has_types: bool
) -> Artifact:
    out_dir = _artifact_dir(base, node)
    descriptors: List[TypeDescriptor] = []
    for command in node.commands:
        descriptors.append(command.return_type)
        descriptors.extend(param.type for param in command.params)
    types_import = None
    if has_types and uses_named(descriptors):
        types_import = relative_import(out_dir, TYPES_MODULE)

    content = renderer.render(
        template,
        source=node.source_path,
        wrapper_name=node.wrapper_name,
        interface_name=f"I{node.wrapper_name}",
        interface_import=relative_import(out_dir, _interface_module(node)),
        types_import=types_import,
        methods=[_method_context(command) for command in node.commands],
    )
    return Artifact(path=f"{out_dir}/{node.wrapper_name}.ts", content=content)


def _method_context(command: CommandFunction) -> Dict[str, object]:
    signature = []
    args = []
    for index, param in enumerate(command.params):
        identifier = ts_identifier(camel_case(param.name) or f"arg{index}")
        key = apply_rename_rule(param.name, command.rename_all or DEFAULT_ARGUMENT_CASE) or identifier
        signature.append(f"{identifier}: {ts_type(param.type)}")
        args.append(identifier if key == identifier else f"{ts_property(key)}: {identifier}")
    returns = ts_type(command.return_type)
    return {
        "name": ts_identifier(camel_case(command.name)),
        "command": ts_string(command.name),
        "doc_lines": doc_lines(command.doc),
        "signature": ", ".join(signature),
        "args": "{ " + ", ".join(args) + " }" if args else None,
        "returns": returns,
        "placeholder": None if command.return_type == VOID else placeholder(command.return_type),
    }


# types --------------------------------------------------------------------


def _field_context(field: FieldEntry) -> Dict[str, object]:
    return {
        "property": ts_property(field.serialized_name),
        "type": ts_type(field.type, ""),
        "doc_lines": doc_lines(field.doc),
    }


def _positional(fields: Sequence[FieldEntry]) -> str:
    if len(fields) == 1:
        return ts_type(fields[0].type, "")
    return "[" + ", ".join(ts_type(field.type, "") for field in fields) + "]"


def _variant_type(variant: VariantEntry) -> str:
    tag = ts_string(variant.serialized_name)
    if variant.shape == "unit":
        return tag
    if variant.shape == "tuple":
        return f"{{ {ts_property(variant.serialized_name)}: {_positional(variant.fields)} }}"
    members = "; ".join(
        f"{ts_property(field.serialized_name)}: {ts_type(field.type, '')}" for field in variant.fields
    )
    body = f"{{ {members} }}" if members else "{}"
    return f"{{ {ts_property(variant.serialized_name)}: {body} }}"


def _type_context(decl: TypeDeclaration) -> Dict[str, object]:
    context: Dict[str, object] = {
        "name": decl.name,
        "source": decl.path,
        "doc_lines": doc_lines(decl.doc),
    }
    if decl.kind == "enum":
        if not decl.variants:
            context.update(form="alias", definition="never")
        else:
            context.update(
                form="union",
                members=[
                    {"type": _variant_type(variant), "doc_lines": doc_lines(variant.doc)}
                    for variant in decl.variants
                ],
            )
    elif decl.shape == "tuple" and decl.fields:
        context.update(form="alias", definition=_positional(decl.fields))
    elif decl.shape == "unit":
        context.update(form="alias", definition="null")
    else:
        context.update(form="interface", fields=[_field_context(field) for field in decl.fields])
    return context


# events -------------------------------------------------------------------


def _event_artifact(group: EventHandlerGroup, renderer: Renderer) -> Artifact:
    scope = group.scope
    payloads = [entry.payload for entry in group.entries]
    types_import = relative_import(EVENTS_DIR, TYPES_MODULE) if uses_named(payloads) else None
    if scope.is_global:
        description = "events broadcast to every window"
    else:
        description = f"events emitted to the `{scope.window}` window"
    content = renderer.render(
        "events.ts.j2",
        name=group.name,
        callbacks_name=f"{group.name}Callbacks",
        is_global=scope.is_global,
        listen="listen" if scope.is_global else "target.listen",
        scope_description=description,
        types_import=types_import,
        entries=[
            {
                "name": entry.name,
                "event": ts_string(entry.name),
                "callback": entry.callback,
                "payload": ts_type(entry.payload, payload=True),
            }
            for entry in group.entries
        ],
    )
    return Artifact(path=f"{EVENTS_DIR}/{group.name}.ts", content=content)


# barrels ------------------------------------------------------------------


def _module_exports(
    wrappers: Sequence[ModuleNode], base: str, from_dir: str, namespace_prefix: str
) -> List[str]:
    """``export *`` lines, namespacing wrappers whose names repeat across directories."""
    counts = Counter(node.wrapper_name for node in wrappers)
    lines = []
    for node in sorted(wrappers, key=lambda item: (item.directory, item.wrapper_name or "")):
        target = relative_import(from_dir, posixpath.join(_artifact_dir(base, node), node.wrapper_name or ""))
        if counts[node.wrapper_name] > 1:
            qualified = "_".join([*node.directory, node.wrapper_name or ""])
            if namespace_prefix:
                namespace = namespace_prefix + pascal_case(qualified)
            else:
                namespace = camel_case(qualified)
            lines.append(f"export * as {namespace} from {ts_string(target)};")
        else:
            lines.append(f"export * from {ts_string(target)};")
    return lines


def _barrels(
    wrappers: Sequence[ModuleNode],
    events: Sequence[EventHandlerGroup],
    renderer: Renderer,
    *,
    has_types: bool,
    mock_api: bool,
) -> List[Artifact]:
    interface_exports = _module_exports(wrappers, COMMANDS_DIR, INTERFACE_DIR, "I")
    if has_types:
        interface_exports.append(f"export * from {ts_string(relative_import(INTERFACE_DIR, TYPES_MODULE))};")

    api_exports = _module_exports(wrappers, API_DIR, API_DIR, "")
    for group in sorted(events, key=lambda item: item.scope.sort_key()):
        target = relative_import(API_DIR, f"{EVENTS_DIR}/{group.name}")
        api_exports.append(f"export * from {ts_string(target)};")

    artifacts = [
        Artifact(f"{INTERFACE_DIR}/index.ts", renderer.render("barrel.ts.j2", exports=interface_exports)),
        Artifact(f"{API_DIR}/index.ts", renderer.render("barrel.ts.j2", exports=api_exports)),
    ]
    if mock_api:
        mock_exports = _module_exports(wrappers, MOCK_DIR, MOCK_DIR, "")
        artifacts.append(Artifact(f"{MOCK_DIR}/index.ts", renderer.render("barrel.ts.j2", exports=mock_exports)))
    artifacts.append(Artifact("index.ts", renderer.render("root_index.ts.j2", mock_api=mock_api)))
    return artifacts


__all__ = ["API_DIR", "Artifact", "COMMANDS_DIR", "EVENTS_DIR", "MOCK_DIR", "TYPES_MODULE", "build_artifacts"]
