"""All-or-nothing commit of rendered artifacts to an output directory."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Sequence

from .errors import WriteError
from .logging import get_logger
from .render import Artifact

logger = get_logger("writer")


class Writer:
    """Stages every artifact next to the output root, then moves them into place.

    If anything fails while staging or moving, files already replaced are
    restored from their previous contents and new files are removed.
    """

    def __init__(self, output_root: Path) -> None:
        self.output_root = Path(output_root)

    def commit(self, artifacts: Sequence[Artifact]) -> List[Path]:
        targets = [self._target(artifact.path) for artifact in artifacts]
        if len(set(targets)) != len(targets):
            raise WriteError("Refusing to write two artifacts to the same path")

        self.output_root.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=".tauria-tsgen-", dir=self.output_root.parent))
        try:
            staged = self._stage(staging, artifacts)
            self._swap(staged, targets, staging)
        finally:
            shutil.rmtree(staging, ignore_errors=True)
        logger.info("Wrote %d files to %s", len(targets), self.output_root)
        return targets

    def _target(self, relative: str) -> Path:
        posix = PurePosixPath(relative)
        if posix.is_absolute() or ".." in posix.parts or not posix.parts:
            raise WriteError(f"Artifact path escapes the output directory: {relative}")
        return self.output_root.joinpath(*posix.parts)

    def _stage(self, staging: Path, artifacts: Iterable[Artifact]) -> List[Path]:
        staged = []
        for index, artifact in enumerate(artifacts):
            path = staging / "new" / f"{index}.ts"
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(artifact.content, encoding="utf-8", newline="\n")
            except OSError as exc:
                raise WriteError(f"Failed to stage {artifact.path}: {exc}") from exc
            staged.append(path)
        return staged

    def _swap(self, staged: Sequence[Path], targets: Sequence[Path], staging: Path) -> None:
        backups: List[tuple[Path, Path | None]] = []
        created_dirs: List[Path] = []
        try:
            for index, (source, target) in enumerate(zip(staged, targets)):
                created_dirs.extend(_missing_parents(target.parent))
                target.parent.mkdir(parents=True, exist_ok=True)
                backup = None
                if target.exists():
                    backup = staging / "old" / f"{index}.ts"
                    backup.parent.mkdir(parents=True, exist_ok=True)
                    shutil.copy2(target, backup)
                backups.append((target, backup))
                os.replace(source, target)
        except OSError as exc:
            self._rollback(backups, created_dirs)
            raise WriteError(f"Failed to write artifacts to {self.output_root}: {exc}") from exc

    @staticmethod
    def _rollback(backups: Sequence[tuple[Path, Path | None]], created_dirs: Sequence[Path]) -> None:
        for target, backup in reversed(backups):
            try:
                if backup is None:
                    target.unlink(missing_ok=True)
                else:
                    os.replace(backup, target)
            except OSError:
                logger.error("Could not restore %s", target)
        for directory in sorted(set(created_dirs), key=lambda item: len(item.parts), reverse=True):
            try:
                directory.rmdir()
            except OSError:
                logger.debug("Left directory %s in place", directory)


def _missing_parents(directory: Path) -> List[Path]:
    missing = []
    while not directory.exists():
        missing.append(directory)
        directory = directory.parent
    return missing


__all__ = ["Writer"]
