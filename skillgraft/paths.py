"""Centralized path construction for a project under skill management."""

from __future__ import annotations

from pathlib import Path

from .config import (
    BACKUP_DIR_NAME,
    BASE_DIR_NAME,
    DEPENDENCY_MANIFEST,
    ENGINE_DIR,
    ENV_EXAMPLE,
    LOCK_FILE,
    PENDING_FILE,
    STATE_FILE,
)


class ProjectPaths:
    """Paths for one project root. Defaults to the current working directory."""

    def __init__(self, root: Path | str | None = None) -> None:
        self.root = Path(root) if root is not None else Path.cwd()

    @property
    def engine_dir(self) -> Path:
        """Engine directory: {root}/.skillgraft"""
        return self.root / ENGINE_DIR

    @property
    def state_file(self) -> Path:
        return self.engine_dir / STATE_FILE

    @property
    def pending_file(self) -> Path:
        return self.engine_dir / PENDING_FILE

    @property
    def lock_file(self) -> Path:
        return self.engine_dir / LOCK_FILE

    @property
    def base_dir(self) -> Path:
        """Baseline snapshot tree: {root}/.skillgraft/base"""
        return self.engine_dir / BASE_DIR_NAME

    @property
    def backup_dir(self) -> Path:
        """Transaction-scoped backup tree: {root}/.skillgraft/backup"""
        return self.engine_dir / BACKUP_DIR_NAME

    @property
    def dependency_manifest(self) -> Path:
        return self.root / DEPENDENCY_MANIFEST

    @property
    def env_example(self) -> Path:
        return self.root / ENV_EXAMPLE

    def live(self, rel_path: str) -> Path:
        """Live project file for a project-relative path."""
        return self.root / rel_path

    def base(self, rel_path: str) -> Path:
        """Baseline copy of a project-relative path."""
        return self.base_dir / rel_path

    def backup(self, rel_path: str) -> Path:
        return self.backup_dir / rel_path

    def relative(self, path: Path) -> str:
        """Project-relative POSIX form of an absolute or root-relative path."""
        if not path.is_absolute():
            return path.as_posix()
        return path.resolve().relative_to(self.root.resolve()).as_posix()
