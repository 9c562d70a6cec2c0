"""Detection and per-scope merging of event broadcast sites."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

from ..descriptors import BOOLEAN, NUMBER, STRING, VOID, TypeDescriptor, Unsupported
from ..diagnostics import (
    Diagnostic,
    NameCollisionWarning,
    UnstaticEventNameWarning,
)
from ..logging import get_logger
from ..models import (
    GLOBAL_SCOPE,
    EventEntry,
    EventHandlerGroup,
    EventScope,
    EventSite,
    window_scope,
)
from ..naming import pascal_case
from ..syntax import ArgExpr, EmitCall, FunctionDecl, ParamDecl, SourceFile, TypeExpr
from .commands import unsupported_warnings
from .resolver import TypeResolver

logger = get_logger("events")


def detect_event_sites(
    source: SourceFile, resolver: TypeResolver
) -> Tuple[Tuple[EventSite, ...], List[Diagnostic]]:
    """Collect broadcast sites from every top-level function of ``source``."""
    sites: List[EventSite] = []
    diagnostics: List[Diagnostic] = []
    for function in source.functions:
        params = {param.name: param for param in function.params}
        for call in function.emit_calls:
            site = _site(source, function, params, call, resolver, diagnostics)
            if site is not None:
                sites.append(site)
    return tuple(sites), diagnostics


def _site(
    source: SourceFile,
    function: FunctionDecl,
    params: Dict[str, ParamDecl],
    call: EmitCall,
    resolver: TypeResolver,
    diagnostics: List[Diagnostic],
) -> Optional[EventSite]:
    args = list(call.args)
    scope: EventScope
    if call.method == "emit_to":
        if not args:
            return None
        target = args.pop(0)
        if target.kind != "string_literal" or target.value is None:
            diagnostics.append(
                UnstaticEventNameWarning(
                    f"`emit_to` target `{target.text}` in `{function.name}` is not a string literal",
                    path=source.path,
                    line=call.line,
                    column=call.column,
                )
            )
            return None
        scope = window_scope(target.value)
    else:
        param = params.get(call.receiver_name or "")
        if param is not None and resolver.is_window_handle(param.type_expr):
            scope = window_scope(param.name)
        else:
            scope = GLOBAL_SCOPE

    if not args:
        return None
    name_arg = args[0]
    if name_arg.kind != "string_literal" or name_arg.value is None:
        diagnostics.append(
            UnstaticEventNameWarning(
                f"event name `{name_arg.text}` in `{function.name}` is not a string literal",
                path=source.path,
                line=call.line,
                column=call.column,
            )
        )
        return None

    payload = payload_type(args[1] if len(args) > 1 else None, params, resolver)
    diagnostics.extend(
        unsupported_warnings(
            payload, f"payload of event `{name_arg.value}`", source.path, call.line
        )
    )
    logger.debug("Event %s (%s) at %s:%d", name_arg.value, scope.label, source.path, call.line)
    return EventSite(
        name=name_arg.value,
        payload=payload,
        scope=scope,
        path=source.path,
        line=call.line,
    )


def payload_type(
    arg: Optional[ArgExpr], params: Dict[str, ParamDecl], resolver: TypeResolver
) -> TypeDescriptor:
    """Infer the type of an event payload expression."""
    if arg is None or arg.kind == "unit":
        return VOID
    if arg.kind in {"string", "string_literal"}:
        return STRING
    if arg.kind in {"integer", "float"}:
        return NUMBER
    if arg.kind == "boolean":
        return BOOLEAN
    if arg.kind == "identifier":
        param = params.get(arg.value or "")
        if param is not None:
            return resolver.resolve(param.type_expr)
    if arg.kind == "struct" and arg.value:
        return resolver.resolve(TypeExpr(kind="path", text=arg.value, path=arg.value))
    return Unsupported(arg.text)


def merge_event_sites(
    sites: Sequence[EventSite],
) -> Tuple[Tuple[EventHandlerGroup, ...], List[Diagnostic]]:
    """Merge sites by ``(scope, name)`` into one handler group per scope.

    Groups and their entries keep first-discovery order. Sites whose payload
    disagrees with an earlier site of the same event get their own entry,
    keyed ``name#2``, ``name#3`` and so on.
    """
    diagnostics: List[Diagnostic] = []
    order: List[EventScope] = []
    entries: Dict[EventScope, List[EventEntry]] = {}

    by_handler: Dict[str, EventScope] = {}

    for site in sites:
        known = by_handler.get(site.scope.handler_name)
        if known is not None and known != site.scope:
            diagnostics.append(
                NameCollisionWarning(
                    f"window `{site.scope.window}` shares {known.handler_name} with "
                    f"window `{known.window}`; merging their events",
                    path=site.path,
                    line=site.line,
                )
            )
            site = replace(site, scope=known)
        by_handler.setdefault(site.scope.handler_name, site.scope)
        if site.scope not in entries:
            order.append(site.scope)
            entries[site.scope] = []
        scoped = entries[site.scope]
        same_name = [index for index, entry in enumerate(scoped) if entry.name == site.name]

        merged = False
        for index in same_name:
            entry = scoped[index]
            if entry.payload == site.payload:
                scoped[index] = EventEntry(
                    key=entry.key,
                    name=entry.name,
                    callback=entry.callback,
                    payload=entry.payload,
                    sites=entry.sites + (site,),
                )
                merged = True
                break
        if merged:
            continue

        key = site.name
        callback = f"On{pascal_case(site.name)}"
        if same_name:
            ordinal = len(same_name) + 1
            key = f"{site.name}#{ordinal}"
            callback = f"{callback}{ordinal}"
            diagnostics.append(
                NameCollisionWarning(
                    f"event `{site.name}` in {site.scope.handler_name} is emitted with "
                    f"different payload types; keeping both as `{site.name}` and `{key}`",
                    path=site.path,
                    line=site.line,
                )
            )
        callbacks = {entry.callback for entry in scoped}
        if callback in callbacks:
            base = callback
            suffix = 2
            while f"{base}{suffix}" in callbacks:
                suffix += 1
            callback = f"{base}{suffix}"
            diagnostics.append(
                NameCollisionWarning(
                    f"event `{site.name}` in {site.scope.handler_name} maps to an existing "
                    f"callback `{base}`; using `{callback}`",
                    path=site.path,
                    line=site.line,
                )
            )
        scoped.append(
            EventEntry(key=key, name=site.name, callback=callback, payload=site.payload, sites=(site,))
        )

    groups = tuple(EventHandlerGroup(scope=scope, entries=tuple(entries[scope])) for scope in order)
    return groups, diagnostics


__all__ = ["detect_event_sites", "merge_event_sites", "payload_type"]
