"""Enumerates Rust sources under a root for analysis."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Protocol, Sequence

from .errors import FatalError
from .logging import get_logger

SOURCE_SUFFIX = ".rs"

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "target",
    "node_modules",
    ".idea",
    ".vscode",
    "gen",
}

logger = get_logger("scanner")


class FileProvider(Protocol):
    """Source of ``.rs`` files, addressed by POSIX paths relative to a root."""

    def iter_sources(self) -> List[str]:
        ...

    def read_text(self, path: str) -> str:
        ...


@dataclass
class IgnoreRule:
    """A gitignore-style pattern from ``.gitignore`` or ``exclude_paths``."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return is_dir and rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if pattern.startswith("!"):
        negate = not negate
        pattern = pattern[1:]
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        rule = build_ignore_rule(line)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


class DirectoryFileProvider:
    """Walks a directory tree for ``.rs`` files, honouring ignore rules."""

    def __init__(self, root: Path, exclude_paths: Sequence[str] = ()) -> None:
        self.root = Path(root).expanduser().resolve()
        if not self.root.exists():
            raise FatalError(f"Input path not found: {root}")
        if not self.root.is_dir():
            raise FatalError(f"Input path is not a directory: {root}")
        self._rules = _parse_gitignore(self.root / ".gitignore")
        for pattern in exclude_paths:
            rule = build_ignore_rule(pattern)
            if rule is not None:
                self._rules.append(rule)

    def iter_sources(self) -> List[str]:
        sources = sorted(self._walk())
        logger.debug("Found %d source files under %s", len(sources), self.root)
        return sources

    def _walk(self) -> Iterator[str]:
        for dirpath, dirnames, filenames in os.walk(self.root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(self.root).as_posix() if current_dir != self.root else ""

            kept = []
            for name in dirnames:
                if name in _EXCLUDED_DIRS:
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if _should_ignore(rel_path, True, self._rules):
                    continue
                kept.append(name)
            dirnames[:] = kept

            for filename in filenames:
                if not filename.endswith(SOURCE_SUFFIX):
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if _should_ignore(rel_path, False, self._rules):
                    continue
                yield rel_path

    def read_text(self, path: str) -> str:
        return (self.root / path).read_text(encoding="utf-8")


class InMemoryFileProvider:
    """A fixed mapping of relative paths to source text."""

    def __init__(self, files: Mapping[str, str]) -> None:
        self._files: Dict[str, str] = dict(files)

    def iter_sources(self) -> List[str]:
        return sorted(path for path in self._files if path.endswith(SOURCE_SUFFIX))

    def read_text(self, path: str) -> str:
        try:
            return self._files[path]
        except KeyError:
            raise FileNotFoundError(path) from None


__all__ = [
    "DirectoryFileProvider",
    "FileProvider",
    "IgnoreRule",
    "InMemoryFileProvider",
    "SOURCE_SUFFIX",
    "build_ignore_rule",
]
