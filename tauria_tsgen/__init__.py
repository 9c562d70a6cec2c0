"""Generate typed TypeScript bindings for Tauri commands and events."""

__version__ = "0.3.0"
