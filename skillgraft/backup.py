"""Transaction-scoped backup and restore of project files."""

from __future__ import annotations

import shutil
from typing import TYPE_CHECKING

from .fs_utils import copy_file
from .logger import logger
from .paths import ProjectPaths

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path


def create_backup(rel_paths: Iterable[str], project_root: Path | None = None) -> list[str]:
    """Copy each existing project file into the backup tree.

    Missing files are skipped since there is nothing to protect. Returns the
    paths actually backed up.
    """
    paths = ProjectPaths(project_root)
    paths.backup_dir.mkdir(parents=True, exist_ok=True)

    captured: list[str] = []
    for rel_path in dict.fromkeys(rel_paths):
        live = paths.live(rel_path)
        if not live.is_file():
            continue
        copy_file(live, paths.backup(rel_path))
        captured.append(rel_path)

    logger.debug("Backup captured", files=captured)
    return captured


def restore_backup(project_root: Path | None = None) -> list[str]:
    """Copy every backed-up file over its original location."""
    paths = ProjectPaths(project_root)
    backup_dir = paths.backup_dir
    if not backup_dir.exists():
        return []

    restored: list[str] = []
    for entry in sorted(backup_dir.rglob("*")):
        if not entry.is_file():
            continue
        rel_path = entry.relative_to(backup_dir).as_posix()
        copy_file(entry, paths.live(rel_path))
        restored.append(rel_path)

    logger.info("Backup restored", files=restored)
    return restored


def clear_backup(project_root: Path | None = None) -> None:
    """Remove the entire backup tree."""
    backup_dir = ProjectPaths(project_root).backup_dir
    if backup_dir.exists():
        shutil.rmtree(backup_dir)


def has_backup(project_root: Path | None = None) -> bool:
    backup_dir = ProjectPaths(project_root).backup_dir
    return backup_dir.exists() and any(p.is_file() for p in backup_dir.rglob("*"))
