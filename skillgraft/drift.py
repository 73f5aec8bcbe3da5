"""Drift detection against baseline snapshots."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .paths import ProjectPaths
from .state import compute_file_hash

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path


def detect_drift(rel_paths: Iterable[str], project_root: Path | None = None) -> list[str]:
    """Return the paths whose live content no longer matches their baseline.

    Paths without a live file or without a baseline are not drifted.
    """
    paths = ProjectPaths(project_root)
    drifted: list[str] = []
    for rel_path in rel_paths:
        live = paths.live(rel_path)
        base = paths.base(rel_path)
        if live.is_file() and base.is_file() and compute_file_hash(live) != compute_file_hash(base):
            drifted.append(rel_path)
    return drifted
