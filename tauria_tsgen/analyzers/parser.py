"""Tree-sitter powered Rust declaration parser."""

from __future__ import annotations

import re
import threading
from typing import Iterable, Iterator, List, Optional, Tuple

import tree_sitter_rust
from tree_sitter import Language, Node, Parser

from ..errors import SourceParseError
from ..logging import get_logger
from ..syntax import (
    AliasBinding,
    ArgExpr,
    Declaration,
    EmitCall,
    FieldDecl,
    FunctionDecl,
    ParamDecl,
    SourceFile,
    TypeDecl,
    TypeExpr,
    VariantDecl,
    module_segments,
)

RUST_LANGUAGE = Language(tree_sitter_rust.language())

COMMAND_MARKERS = frozenset({"tauri::command", "command"})
EMIT_METHODS = frozenset({"emit", "emit_to"})

_TRIVIA = frozenset({"attribute_item", "line_comment", "block_comment", "visibility_modifier"})
_COMMENTS = frozenset({"line_comment", "block_comment"})
_SKIPPED_TYPE_ARGS = frozenset(
    {"lifetime", "type_binding", "trait_bounds", "block", "line_comment", "block_comment"}
)
_STRING_METHODS = frozenset({"to_string", "to_owned"})
_PASSTHROUGH_METHODS = frozenset({"clone", "into"})

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0", "\\": "\\", '"': '"', "'": "'"}
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)
_RENAME_ALL_RE = re.compile(r'\brename_all\s*=\s*"([^"]*)"')
_RENAME_RE = re.compile(r'\brename\s*=\s*"([^"]*)"')
_SKIP_RE = re.compile(r"\b(?:skip|skip_serializing)\b")
_STRING_LITERAL_RE = re.compile(r'"(?:\\.|[^"\\])*"')

_local = threading.local()

logger = get_logger("parser")


def _get_parser() -> Parser:
    parser = getattr(_local, "parser", None)
    if parser is None:
        parser = Parser(RUST_LANGUAGE)
        _local.parser = parser
    return parser


def parse_source(path: str, text: str) -> SourceFile:
    """Parse one Rust file into its retained top-level declarations.

    Raises :class:`SourceParseError` pointing at the first syntax error.
    """
    source_bytes = text.encode("utf-8")
    tree = _get_parser().parse(source_bytes)
    root = tree.root_node
    if root.has_error:
        raise _syntax_error(root)

    extractor = _Extractor(source_bytes)
    declarations: List[Declaration] = []
    aliases: List[AliasBinding] = []
    globs: List[str] = []
    for child in root.named_children:
        if child.type == "use_declaration":
            for binding in extractor.use_bindings(child):
                if binding.alias == "*":
                    globs.append(binding.path)
                else:
                    aliases.append(binding)
        elif child.type == "function_item":
            declarations.append(extractor.function(child))
        elif child.type in {"struct_item", "enum_item"}:
            declarations.append(extractor.type_decl(child))
    logger.debug(
        "Parsed %s: %d declarations, %d aliases", path, len(declarations), len(aliases)
    )
    return SourceFile(
        path=path,
        module=module_segments(path),
        declarations=tuple(declarations),
        aliases=tuple(aliases),
        globs=tuple(globs),
    )


def _syntax_error(root: Node) -> SourceParseError:
    node = _first_error(root) or root
    line, column = node.start_point[0] + 1, node.start_point[1] + 1
    if node.is_missing:
        reason = f"expected {node.type}"
    else:
        reason = "unexpected syntax"
    return SourceParseError(reason, line, column)


def _first_error(node: Node) -> Optional[Node]:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def _decode_string(literal: str) -> Optional[str]:
    if literal.startswith("r"):
        body = literal[1:].strip("#")
        if len(body) >= 2 and body[0] == '"' and body[-1] == '"':
            return body[1:-1]
        return None
    if len(literal) >= 2 and literal[0] == '"' and literal[-1] == '"':
        return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), literal[1:-1])
    return None


def _is_skipped(serde_args: str) -> bool:
    return bool(_SKIP_RE.search(_STRING_LITERAL_RE.sub('""', serde_args)))


def _clean_doc_block(text: str) -> List[str]:
    body = text[3:]
    if body.endswith("*/"):
        body = body[:-2]
    lines = []
    for raw in body.splitlines():
        stripped = raw.strip()
        if stripped.startswith("*"):
            stripped = stripped[1:].strip()
        lines.append(stripped)
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return lines


class _Extractor:
    """Converts syntax nodes of one file into plain records."""

    def __init__(self, source_bytes: bytes) -> None:
        self._source = source_bytes

    def _node_text(self, node: Node) -> str:
        return self._source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def _compact(self, node: Node) -> str:
        return " ".join(self._node_text(node).split())

    # leading trivia -------------------------------------------------------

    def _leading(self, node: Node) -> List[Node]:
        trivia: List[Node] = []
        sibling = node.prev_named_sibling
        while sibling is not None and sibling.type in _TRIVIA:
            trivia.append(sibling)
            sibling = sibling.prev_named_sibling
        trivia.reverse()
        return trivia

    def _attributes(self, node: Node) -> List[Tuple[str, Node]]:
        """Return ``(path, attribute)`` pairs for outer attributes of ``node``."""
        found = []
        candidates = list(self._leading(node))
        candidates.extend(child for child in node.named_children if child.type == "attribute_item")
        for item in candidates:
            if item.type != "attribute_item":
                continue
            for attribute in item.named_children:
                if attribute.type != "attribute" or not attribute.named_children:
                    continue
                path = self._compact(attribute.named_children[0]).lstrip(":")
                found.append((path, attribute))
        return found

    def _doc(self, node: Node) -> str:
        lines: List[str] = []
        items = list(self._leading(node))
        items.extend(child for child in node.named_children if child.type == "attribute_item")
        for item in items:
            if item.type == "line_comment":
                text = self._node_text(item).rstrip("\r\n")
                if text.startswith("///") and not text.startswith("////"):
                    lines.append(text[3:].strip())
            elif item.type == "block_comment":
                text = self._node_text(item)
                if text.startswith("/**") and not text.startswith("/***") and text != "/**/":
                    lines.extend(_clean_doc_block(text))
            elif item.type == "attribute_item":
                for attribute in item.named_children:
                    if attribute.type != "attribute" or not attribute.named_children:
                        continue
                    if self._node_text(attribute.named_children[0]) != "doc":
                        continue
                    value = attribute.child_by_field_name("value")
                    if value is not None:
                        decoded = _decode_string(self._node_text(value))
                        if decoded is not None:
                            lines.append(decoded.strip())
        return "\n".join(lines)

    def _attribute_args(self, attribute: Node) -> str:
        arguments = attribute.child_by_field_name("arguments")
        return self._node_text(arguments) if arguments is not None else ""

    def _serde_args(self, node: Node) -> str:
        return " ".join(
            self._attribute_args(attribute)
            for path, attribute in self._attributes(node)
            if path == "serde"
        )

    # declarations ---------------------------------------------------------

    def function(self, node: Node) -> FunctionDecl:
        name_node = node.child_by_field_name("name")
        is_command = False
        rename_all = None
        for path, attribute in self._attributes(node):
            if path in COMMAND_MARKERS:
                is_command = True
                match = _RENAME_ALL_RE.search(self._attribute_args(attribute))
                if match:
                    rename_all = match.group(1)

        params: List[ParamDecl] = []
        parameters = node.child_by_field_name("parameters")
        if parameters is not None:
            for child in parameters.named_children:
                if child.type != "parameter":
                    continue
                pattern = child.child_by_field_name("pattern")
                type_node = child.child_by_field_name("type")
                if pattern is None or type_node is None:
                    continue
                params.append(ParamDecl(name=self._compact(pattern), type_expr=self.type_expr(type_node)))

        return_node = node.child_by_field_name("return_type")
        body = node.child_by_field_name("body")
        is_async = any(
            child.type == "function_modifiers" and "async" in self._node_text(child).split()
            for child in node.children
        )
        return FunctionDecl(
            name=self._node_text(name_node) if name_node is not None else "",
            doc=self._doc(node),
            params=tuple(params),
            return_type=self.type_expr(return_node) if return_node is not None else None,
            is_command=is_command,
            is_async=is_async,
            rename_all=rename_all,
            emit_calls=tuple(self._emit_calls(body)) if body is not None else (),
            line=node.start_point[0] + 1,
        )

    def type_decl(self, node: Node) -> TypeDecl:
        name_node = node.child_by_field_name("name")
        derives: List[str] = []
        for path, attribute in self._attributes(node):
            if path == "derive":
                inner = self._attribute_args(attribute).strip("()")
                derives.extend(
                    item.strip().split("::")[-1] for item in inner.split(",") if item.strip()
                )
        serde = self._serde_args(node)
        match = _RENAME_ALL_RE.search(serde)
        body = node.child_by_field_name("body")

        fields: Tuple[FieldDecl, ...] = ()
        variants: Tuple[VariantDecl, ...] = ()
        shape = "named"
        if node.type == "enum_item":
            kind = "enum"
            if body is not None:
                variants = tuple(
                    self._variant(child) for child in body.named_children if child.type == "enum_variant"
                )
        else:
            kind = "struct"
            shape, fields = self._fields(body)

        return TypeDecl(
            name=self._node_text(name_node) if name_node is not None else "",
            kind=kind,
            doc=self._doc(node),
            shape=shape,
            fields=fields,
            variants=variants,
            derives=tuple(derives),
            rename_all=match.group(1) if match else None,
            line=node.start_point[0] + 1,
        )

    def _fields(self, body: Optional[Node]) -> Tuple[str, Tuple[FieldDecl, ...]]:
        if body is None:
            return "unit", ()
        if body.type == "field_declaration_list":
            named = []
            for child in body.named_children:
                if child.type != "field_declaration":
                    continue
                name_node = child.child_by_field_name("name")
                type_node = child.child_by_field_name("type")
                if name_node is None or type_node is None:
                    continue
                named.append(self._field(self._node_text(name_node), type_node, child))
            return "named", tuple(named)
        if body.type == "ordered_field_declaration_list":
            positional = [
                self._field(str(index), type_node, type_node)
                for index, type_node in enumerate(body.children_by_field_name("type"))
            ]
            return "tuple", tuple(positional)
        return "unit", ()

    def _field(self, name: str, type_node: Node, anchor: Node) -> FieldDecl:
        serde = self._serde_args(anchor)
        rename = _RENAME_RE.search(serde)
        return FieldDecl(
            name=name,
            type_expr=self.type_expr(type_node),
            doc=self._doc(anchor),
            rename=rename.group(1) if rename else None,
            skip=_is_skipped(serde),
        )

    def _variant(self, node: Node) -> VariantDecl:
        name_node = node.child_by_field_name("name")
        shape, fields = self._fields(node.child_by_field_name("body"))
        if shape == "named":
            shape = "struct"
        serde = self._serde_args(node)
        rename = _RENAME_RE.search(serde)
        return VariantDecl(
            name=self._node_text(name_node) if name_node is not None else "",
            shape=shape,
            fields=fields,
            doc=self._doc(node),
            rename=rename.group(1) if rename else None,
            skip=_is_skipped(serde),
        )

    # use trees ------------------------------------------------------------

    def use_bindings(self, node: Node) -> List[AliasBinding]:
        argument = node.child_by_field_name("argument")
        if argument is None:
            return []
        return [
            binding for binding in self._use_tree(argument, "") if binding.alias != binding.path
        ]

    def _use_tree(self, node: Node, prefix: str) -> Iterator[AliasBinding]:
        def join(path: str) -> str:
            path = path.lstrip(":")
            return f"{prefix}::{path}" if prefix else path

        kind = node.type
        if kind in {"identifier", "scoped_identifier"}:
            full = join(self._compact(node).replace(" ", ""))
            name = full.split("::")[-1]
            if name == "self":
                full = full.rsplit("::", 1)[0]
                name = full.split("::")[-1]
            yield AliasBinding(alias=name, path=full)
        elif kind == "self":
            if prefix:
                yield AliasBinding(alias=prefix.split("::")[-1], path=prefix)
        elif kind == "use_as_clause":
            path_node = node.child_by_field_name("path")
            alias_node = node.child_by_field_name("alias")
            if path_node is None or alias_node is None:
                return
            alias = self._node_text(alias_node)
            if alias != "_":
                yield AliasBinding(alias=alias, path=join(self._compact(path_node).replace(" ", "")))
        elif kind == "scoped_use_list":
            path_node = node.child_by_field_name("path")
            list_node = node.child_by_field_name("list")
            nested = join(self._compact(path_node).replace(" ", "")) if path_node is not None else prefix
            if list_node is not None:
                yield from self._use_tree(list_node, nested)
        elif kind == "use_wildcard":
            stem = self._compact(node).replace(" ", "")[:-1].rstrip(":")
            target = join(stem) if stem else prefix
            if target:
                yield AliasBinding(alias="*", path=target)
        elif kind == "use_list":
            for child in node.named_children:
                if child.type not in _COMMENTS:
                    yield from self._use_tree(child, prefix)

    # type expressions -----------------------------------------------------

    def type_expr(self, node: Node) -> TypeExpr:
        text = self._compact(node)
        kind = node.type
        if kind in {"type_identifier", "primitive_type", "scoped_type_identifier"}:
            return TypeExpr(kind="path", text=text, path=text.replace(" ", "").lstrip(":"))
        if kind == "generic_type":
            base = node.child_by_field_name("type")
            arguments = node.child_by_field_name("type_arguments")
            args: List[TypeExpr] = []
            if arguments is not None:
                args = [
                    self.type_expr(child)
                    for child in arguments.named_children
                    if child.type not in _SKIPPED_TYPE_ARGS and not child.type.endswith("_literal")
                ]
            path = self._compact(base).replace(" ", "").lstrip(":") if base is not None else text
            return TypeExpr(kind="path", text=text, path=path, args=tuple(args))
        if kind == "reference_type":
            inner = node.child_by_field_name("type")
            if inner is None:
                return TypeExpr(kind="other", text=text)
            return TypeExpr(kind="reference", text=text, args=(self.type_expr(inner),))
        if kind == "unit_type":
            return TypeExpr(kind="unit", text=text)
        if kind == "tuple_type":
            items = tuple(
                self.type_expr(child) for child in node.named_children if child.type not in _COMMENTS
            )
            return TypeExpr(kind="tuple", text=text, args=items)
        if kind == "array_type":
            element = node.child_by_field_name("element")
            if element is None:
                return TypeExpr(kind="other", text=text)
            return TypeExpr(kind="array", text=text, args=(self.type_expr(element),))
        return TypeExpr(kind="other", text=text)

    # broadcast calls ------------------------------------------------------

    def _emit_calls(self, body: Node) -> Iterator[EmitCall]:
        stack = [body]
        while stack:
            node = stack.pop()
            if node.type == "call_expression":
                call = self._emit_call(node)
                if call is not None:
                    yield call
            stack.extend(reversed(node.named_children))

    def _emit_call(self, node: Node) -> Optional[EmitCall]:
        function = node.child_by_field_name("function")
        if function is not None and function.type == "generic_function":
            function = function.child_by_field_name("function")
        if function is None or function.type != "field_expression":
            return None
        field = function.child_by_field_name("field")
        receiver = function.child_by_field_name("value")
        if field is None or receiver is None:
            return None
        method = self._node_text(field)
        if method not in EMIT_METHODS:
            return None
        arguments = node.child_by_field_name("arguments")
        args: Tuple[ArgExpr, ...] = ()
        if arguments is not None:
            args = tuple(
                self.arg_expr(child) for child in arguments.named_children if child.type not in _COMMENTS
            )
        receiver_name = self._node_text(receiver) if receiver.type in {"identifier", "self"} else None
        return EmitCall(
            method=method,
            receiver=self._compact(receiver),
            receiver_name=receiver_name,
            args=args,
            line=node.start_point[0] + 1,
            column=node.start_point[1] + 1,
        )

    def arg_expr(self, node: Node) -> ArgExpr:
        text = self._compact(node)
        kind = node.type
        if kind in {"reference_expression", "parenthesized_expression"}:
            inner = node.child_by_field_name("value")
            if inner is None:
                inner = next(iter(self._expressions(node.named_children)), None)
            return self.arg_expr(inner) if inner is not None else ArgExpr("other", text)
        if kind in {"string_literal", "raw_string_literal"}:
            value = _decode_string(self._node_text(node))
            if value is None:
                return ArgExpr("string", text)
            return ArgExpr("string_literal", text, value)
        if kind == "integer_literal":
            return ArgExpr("integer", text)
        if kind == "float_literal":
            return ArgExpr("float", text)
        if kind == "boolean_literal":
            return ArgExpr("boolean", text)
        if kind == "unit_expression":
            return ArgExpr("unit", text)
        if kind == "identifier":
            return ArgExpr("identifier", text, text)
        if kind == "unary_expression" and text.startswith("-"):
            operand = next(iter(self._expressions(node.named_children)), None)
            if operand is not None and operand.type in {"integer_literal", "float_literal"}:
                return self.arg_expr(operand)
        if kind == "macro_invocation":
            macro = node.child_by_field_name("macro")
            if macro is not None and self._node_text(macro) == "format":
                return ArgExpr("string", text)
        if kind == "struct_expression":
            name = node.child_by_field_name("name")
            if name is not None:
                if name.type == "generic_type_with_turbofish":
                    name = name.child_by_field_name("type") or name
                return ArgExpr("struct", text, self._compact(name).replace(" ", "").lstrip(":"))
        if kind == "call_expression":
            function = node.child_by_field_name("function")
            if function is not None and function.type == "field_expression":
                field = function.child_by_field_name("field")
                receiver = function.child_by_field_name("value")
                method = self._node_text(field) if field is not None else ""
                if method in _STRING_METHODS:
                    return ArgExpr("string", text)
                if method in _PASSTHROUGH_METHODS and receiver is not None:
                    return self.arg_expr(receiver)
            elif function is not None and self._compact(function).replace(" ", "") == "String::from":
                return ArgExpr("string", text)
        return ArgExpr("other", text)

    @staticmethod
    def _expressions(nodes: Iterable[Node]) -> Iterator[Node]:
        for node in nodes:
            if node.type not in _COMMENTS:
                yield node


__all__ = ["COMMAND_MARKERS", "EMIT_METHODS", "RUST_LANGUAGE", "parse_source"]
