"""Tests for the tree-sitter Rust declaration parser."""

from __future__ import annotations

import pytest

from tauria_tsgen.analyzers.parser import parse_source
from tauria_tsgen.errors import SourceParseError
from tauria_tsgen.syntax import FunctionDecl, TypeDecl
from tests._fixtures.source_builder import dedent


def _parse(text: str, path: str = "src/api.rs"):
    return parse_source(path, dedent(text))


def test_parse_recognizes_command_markers_only() -> None:
    source = _parse(
        """
        use tauri::AppHandle;

        /// Says hello.
        /// Second line.
        #[tauri::command]
        pub fn greet(name: String) -> String {
            format!("Hello, {}!", name)
        }

        #[command(rename_all = "snake_case")]
        async fn save_file(file_path: String) -> Result<(), String> {
            Ok(())
        }

        fn get_helper() -> u32 {
            1
        }
        """
    )

    functions = source.functions
    assert [fn.name for fn in functions] == ["greet", "save_file", "get_helper"]
    greet, save_file, helper = functions
    assert greet.is_command is True
    assert greet.doc == "Says hello.\nSecond line."
    assert [param.name for param in greet.params] == ["name"]
    assert greet.return_type is not None and greet.return_type.path == "String"

    assert save_file.is_command is True
    assert save_file.is_async is True
    assert save_file.rename_all == "snake_case"

    assert helper.is_command is False
    assert source.module == ("src", "api")


def test_parse_collects_structs_with_field_docs_and_serde_attributes() -> None:
    source = _parse(
        """
        use serde::{Deserialize, Serialize};

        /** A registered user. */
        #[derive(Debug, Serialize, serde::Deserialize)]
        #[serde(rename_all = "camelCase")]
        pub struct User {
            /// Unique identifier.
            pub id: u32,
            #[doc = "Display name"]
            pub display_name: String,
            #[serde(skip)]
            pub password: String,
            #[serde(rename = "mail")]
            pub email: Option<String>,
        }

        pub struct Meters(pub f64);

        pub struct Marker;
        """
    )

    user, meters, marker = source.types
    assert isinstance(user, TypeDecl)
    assert user.doc == "A registered user."
    assert user.derives == ("Debug", "Serialize", "Deserialize")
    assert user.rename_all == "camelCase"
    assert [field.name for field in user.fields] == ["id", "display_name", "password", "email"]
    assert user.fields[0].doc == "Unique identifier."
    assert user.fields[1].doc == "Display name"
    assert user.fields[2].skip is True
    assert user.fields[3].rename == "mail"
    assert user.fields[3].type_expr.path == "Option"
    assert user.fields[3].type_expr.args[0].path == "String"

    assert meters.shape == "tuple"
    assert [field.name for field in meters.fields] == ["0"]
    assert marker.shape == "unit"


def test_parse_serde_skip_ignores_string_values() -> None:
    source = _parse(
        """
        pub struct Flags {
            #[serde(rename = "skip")]
            pub a: u32,
            #[serde(skip_serializing_if = "Option::is_none")]
            pub b: Option<u32>,
            #[serde(default, skip_serializing)]
            pub c: u32,
        }
        """
    )

    (flags,) = source.types
    assert [field.skip for field in flags.fields] == [False, False, True]
    assert flags.fields[0].rename == "skip"


def test_parse_enum_variant_shapes() -> None:
    source = _parse(
        """
        /// Shapes we can draw.
        pub enum Shape {
            /// Nothing at all.
            Empty,
            Circle(f64),
            Rect { width: f64, height: f64 },
        }
        """
    )

    (shape,) = source.types
    assert shape.kind == "enum"
    assert shape.doc == "Shapes we can draw."
    assert [(variant.name, variant.shape) for variant in shape.variants] == [
        ("Empty", "unit"),
        ("Circle", "tuple"),
        ("Rect", "struct"),
    ]
    assert shape.variants[0].doc == "Nothing at all."
    assert [field.name for field in shape.variants[2].fields] == ["width", "height"]


def test_parse_builds_alias_table_from_use_trees() -> None:
    source = _parse(
        """
        use tauri::AppHandle as Handle;
        use tauri::{State, Window as Win, ipc::Response};
        use std::collections::HashMap;
        use crate::models::{self, User};
        use tauri::*;
        """
    )

    assert source.alias_table == {
        "Handle": "tauri::AppHandle",
        "State": "tauri::State",
        "Win": "tauri::Window",
        "Response": "tauri::ipc::Response",
        "HashMap": "std::collections::HashMap",
        "models": "crate::models",
        "User": "crate::models::User",
    }
    assert source.globs == ("tauri",)


def test_parse_captures_type_expression_shapes() -> None:
    source = _parse(
        """
        #[tauri::command]
        fn shapes(a: &str, b: Vec<(u8, bool)>, c: [u16; 4], d: HashMap<String, Vec<u32>>, e: ()) {}
        """
    )

    (function,) = source.functions
    kinds = [param.type_expr.kind for param in function.params]
    assert kinds == ["reference", "path", "array", "path", "unit"]
    assert function.params[0].type_expr.args[0].path == "str"
    assert function.params[1].type_expr.args[0].kind == "tuple"
    assert [arg.path for arg in function.params[3].type_expr.args] == ["String", "Vec"]
    assert function.return_type is None


def test_parse_extracts_emit_calls_with_classified_arguments() -> None:
    source = _parse(
        """
        use tauri::{AppHandle, Emitter, WebviewWindow};

        fn notify(app: AppHandle, window: WebviewWindow, payload: Payload, name: String) {
            app.emit("progress", 42).unwrap();
            app.emit_to("main", "done", Payload { value: 1 }).unwrap();
            window.emit("status", format!("{} ready", name)).unwrap();
            app.emit(&name, payload.clone()).unwrap();
            app.emit("ping", ()).unwrap();
        }
        """
    )

    (function,) = source.functions
    calls = function.emit_calls
    assert [call.method for call in calls] == ["emit", "emit_to", "emit", "emit", "emit"]
    assert [call.receiver_name for call in calls] == ["app", "app", "window", "app", "app"]

    first, second, third, fourth, fifth = calls
    assert [arg.kind for arg in first.args] == ["string_literal", "integer"]
    assert first.args[0].value == "progress"
    assert [arg.kind for arg in second.args] == ["string_literal", "string_literal", "struct"]
    assert second.args[2].value == "Payload"
    assert third.args[1].kind == "string"
    assert fourth.args[0].kind == "identifier"
    assert fourth.args[1].kind == "identifier" and fourth.args[1].value == "payload"
    assert fifth.args[1].kind == "unit"
    assert first.line == 4


def test_parse_skips_impl_blocks_and_nested_modules() -> None:
    source = _parse(
        """
        struct Service;

        impl Service {
            #[tauri::command]
            fn hidden() {}
        }

        mod inner {
            #[tauri::command]
            pub fn also_hidden() {}
        }

        const LIMIT: u32 = 3;
        """
    )

    assert [decl.name for decl in source.declarations] == ["Service"]
    assert not any(isinstance(decl, FunctionDecl) for decl in source.declarations)


def test_parse_reports_syntax_error_location() -> None:
    text = dedent(
        """
        #[tauri::command]
        fn ok() {}

        fn broken(x: u32 {
            let y = ;
        }
        """
    )

    with pytest.raises(SourceParseError) as excinfo:
        parse_source("src/broken.rs", text)

    assert excinfo.value.line >= 4
    assert excinfo.value.column >= 1
    assert "line" in str(excinfo.value)
