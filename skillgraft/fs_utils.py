"""Filesystem utilities for the skills engine."""

from __future__ import annotations

import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


def copy_tree(
    src: Path,
    dest: Path,
    exclude: Callable[[Path], bool] | None = None,
) -> list[Path]:
    """Recursively copy src into dest, skipping entries the predicate excludes.

    The predicate receives each source entry (file or directory). Returns the
    destination files written.
    """
    copied: list[Path] = []
    for entry in sorted(src.iterdir()):
        if exclude is not None and exclude(entry):
            continue

        dest_path = dest / entry.name
        if entry.is_dir():
            copied.extend(copy_tree(entry, dest_path, exclude))
        else:
            dest_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(entry, dest_path)
            copied.append(dest_path)
    return copied


def copy_file(src: Path, dest: Path) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dest)


@contextmanager
def scratch_copy(source: Path) -> Iterator[Path]:
    """Yield a disposable temp copy of source, removed on every exit path."""
    fd, name = tempfile.mkstemp(prefix="skillgraft-merge-", suffix=f"-{source.name}")
    os.close(fd)
    scratch = Path(name)
    try:
        shutil.copy2(source, scratch)
        yield scratch
    finally:
        scratch.unlink(missing_ok=True)


def prune_empty_dirs(start: Path, stop: Path) -> None:
    """Remove empty directories from start upwards, never touching stop itself."""
    current = start
    while current != stop and stop in current.parents:
        try:
            current.rmdir()
        except OSError:
            return
        current = current.parent
