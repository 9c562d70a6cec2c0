from __future__ import annotations

import pytest

from tauria_tsgen.analyzers import analyze_source
from tauria_tsgen.analyzers.module_tree import assemble
from tauria_tsgen.diagnostics import NameCollisionWarning
from tauria_tsgen.errors import InvariantViolation
from tauria_tsgen.models import FileAnalysis
from tests._fixtures.source_builder import dedent

COMMAND = dedent(
    """
    #[tauri::command]
    fn hello() -> String { String::new() }
    """
)
USER = "pub struct User { pub id: u32 }\n"


def test_tree_mirrors_directories() -> None:
    root, diagnostics = assemble(
        [
            analyze_source("main.rs", COMMAND),
            analyze_source("api/user_profile.rs", COMMAND),
            analyze_source("api/admin/audit.rs", USER),
        ]
    )

    files = {node.source_path: node for node in root.iter_files()}
    assert set(files) == {"main.rs", "api/user_profile.rs", "api/admin/audit.rs"}
    assert files["api/user_profile.rs"].wrapper_name == "UserProfile"
    assert files["api/user_profile.rs"].directory == ("api",)
    assert files["api/admin/audit.rs"].wrapper_name is None
    assert [node.segment for node in root.children] == ["main", "api"]
    assert diagnostics == []


def test_duplicate_types_are_kept_and_reported() -> None:
    first = analyze_source("a/user.rs", USER)
    second = analyze_source("b/user.rs", USER)

    root, diagnostics = assemble([first, second])

    owners = [node for node in root.iter_files() if node.types]
    assert [node.source_path for node in owners] == ["a/user.rs", "b/user.rs"]
    assert owners[0].types[0] is not owners[1].types[0]
    assert len(diagnostics) == 1
    assert isinstance(diagnostics[0], NameCollisionWarning)
    assert diagnostics[0].path == "b/user.rs"


def test_wrapper_name_clash_in_one_directory_gets_suffix() -> None:
    root, diagnostics = assemble(
        [
            analyze_source("api/user_info.rs", COMMAND),
            analyze_source("api/user-info.rs", COMMAND),
        ]
    )

    names = [node.wrapper_name for node in root.iter_files()]
    assert names == ["UserInfo", "UserInfo2"]
    assert len(diagnostics) == 1


def test_same_wrapper_name_in_other_directories_is_allowed() -> None:
    root, diagnostics = assemble(
        [analyze_source("a/user.rs", COMMAND), analyze_source("b/user.rs", COMMAND)]
    )

    assert [node.wrapper_name for node in root.iter_files()] == ["User", "User"]
    assert diagnostics == []


def test_empty_module_path_is_rejected() -> None:
    with pytest.raises(InvariantViolation):
        assemble([FileAnalysis(path="", module=())])
