"""Tests for event site detection and per-scope merging."""

from __future__ import annotations

from tauria_tsgen.analyzers.events import detect_event_sites, merge_event_sites
from tauria_tsgen.analyzers.parser import parse_source
from tauria_tsgen.analyzers.resolver import TypeResolver
from tauria_tsgen.descriptors import BOOLEAN, NUMBER, STRING, VOID, NamedRef
from tauria_tsgen.diagnostics import NameCollisionWarning, UnstaticEventNameWarning
from tauria_tsgen.models import GLOBAL_SCOPE, EventSite, window_scope
from tests._fixtures.source_builder import dedent


def _sites(text: str, path: str = "events.rs"):
    source = parse_source(path, dedent(text))
    return detect_event_sites(source, TypeResolver.for_source(source))


def _site(name, payload, scope=GLOBAL_SCOPE, line=1) -> EventSite:
    return EventSite(name=name, payload=payload, scope=scope, path="events.rs", line=line)


def test_window_sites_keep_discovery_order() -> None:
    sites, diagnostics = _sites(
        """
        use tauri::Window;

        #[tauri::command]
        fn start(window: Window) {
            window.emit("window-event", 1).unwrap();
            window.emit("main_event", "ready").unwrap();
        }
        """
    )

    assert [site.name for site in sites] == ["window-event", "main_event"]
    assert {site.scope for site in sites} == {window_scope("window")}
    assert [site.payload for site in sites] == [NUMBER, STRING]
    assert diagnostics == []

    (group,), merge_diagnostics = merge_event_sites(sites)
    assert group.name == "WindowWindowEventHandlers"
    assert [entry.callback for entry in group.entries] == ["OnWindowEvent", "OnMainEvent"]
    assert merge_diagnostics == []


def test_scopes_from_receivers_and_targets() -> None:
    sites, _ = _sites(
        """
        use tauri::{AppHandle, Emitter};

        pub struct Progress {
            pub done: u32,
        }

        fn report(app: AppHandle, flag: bool) {
            app.emit("started", flag).unwrap();
            app.emit_to("settings", "saved", ()).unwrap();
            app.emit("progress", Progress { done: 3 }).unwrap();
        }
        """
    )

    started, saved, progress = sites
    assert started.scope == GLOBAL_SCOPE
    assert started.payload == BOOLEAN
    assert saved.scope == window_scope("settings")
    assert saved.payload == VOID
    assert progress.payload == NamedRef(path="Progress", name="Progress")


def test_dynamic_names_are_reported_and_skipped() -> None:
    sites, diagnostics = _sites(
        """
        fn notify(app: tauri::AppHandle, name: String, label: String) {
            app.emit(&name, 1).unwrap();
            app.emit_to(label, "refresh", 2).unwrap();
            app.emit("kept", format!("{}!", name)).unwrap();
        }
        """
    )

    assert [site.name for site in sites] == ["kept"]
    assert sites[0].payload == STRING
    assert [type(item) for item in diagnostics] == [UnstaticEventNameWarning, UnstaticEventNameWarning]
    assert diagnostics[0].line == 2
    assert diagnostics[0].column == 5


def test_identical_sites_merge_into_one_entry() -> None:
    groups, diagnostics = merge_event_sites(
        [_site("tick", NUMBER, line=3), _site("tick", NUMBER, line=9)]
    )

    (group,) = groups
    (entry,) = group.entries
    assert entry.key == "tick"
    assert [site.line for site in entry.sites] == [3, 9]
    assert diagnostics == []


def test_conflicting_payloads_are_kept_apart() -> None:
    groups, diagnostics = merge_event_sites([_site("tick", NUMBER), _site("tick", STRING)])

    (group,) = groups
    assert [entry.key for entry in group.entries] == ["tick", "tick#2"]
    assert [entry.callback for entry in group.entries] == ["OnTick", "OnTick2"]
    assert [type(item) for item in diagnostics] == [NameCollisionWarning]


def test_callback_clash_gets_a_suffix() -> None:
    groups, diagnostics = merge_event_sites([_site("user-saved", VOID), _site("user_saved", VOID)])

    (group,) = groups
    assert [entry.callback for entry in group.entries] == ["OnUserSaved", "OnUserSaved2"]
    assert len(diagnostics) == 1


def test_groups_follow_first_discovery() -> None:
    groups, _ = merge_event_sites(
        [
            _site("a", VOID, scope=window_scope("main")),
            _site("b", VOID),
            _site("c", VOID, scope=window_scope("main")),
        ]
    )

    assert [group.name for group in groups] == ["MainWindowEventHandlers", "GlobalEventHandlers"]
    assert [entry.name for entry in groups[0].entries] == ["a", "c"]


def test_windows_sharing_a_handler_name_merge() -> None:
    groups, diagnostics = merge_event_sites(
        [
            _site("a", VOID, scope=window_scope("main-view")),
            _site("b", VOID, scope=window_scope("main_view")),
        ]
    )

    (group,) = groups
    assert group.scope == window_scope("main-view")
    assert [entry.name for entry in group.entries] == ["a", "b"]
    assert len(diagnostics) == 1
