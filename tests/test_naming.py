from __future__ import annotations

import pytest

from tauria_tsgen.naming import apply_rename_rule, camel_case, kebab_case, pascal_case, snake_case, split_words


def test_split_words_handles_mixed_styles() -> None:
    assert split_words("get_user") == ["get", "user"]
    assert split_words("window-event") == ["window", "event"]
    assert split_words("HTTPServerError") == ["HTTP", "Server", "Error"]
    assert split_words("userID2") == ["user", "ID", "2"]


def test_case_conversions() -> None:
    assert pascal_case("user_profile") == "UserProfile"
    assert camel_case("get_user") == "getUser"
    assert camel_case("HTTPServer") == "httpServer"
    assert snake_case("UserProfile") == "user_profile"
    assert kebab_case("main_event") == "main-event"
    assert camel_case("") == ""


@pytest.mark.parametrize(
    "rule, expected",
    [
        ("lowercase", "inprogress"),
        ("UPPERCASE", "INPROGRESS"),
        ("PascalCase", "InProgress"),
        ("camelCase", "inProgress"),
        ("snake_case", "in_progress"),
        ("SCREAMING_SNAKE_CASE", "IN_PROGRESS"),
        ("kebab-case", "in-progress"),
        ("SCREAMING-KEBAB-CASE", "IN-PROGRESS"),
        ("nonsense", "InProgress"),
        (None, "InProgress"),
    ],
)
def test_serde_rename_rules(rule, expected) -> None:
    assert apply_rename_rule("InProgress", rule) == expected
