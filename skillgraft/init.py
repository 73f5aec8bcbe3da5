"""Initialize the engine directory and baseline snapshot."""

from __future__ import annotations

import json
import shutil
from pathlib import Path

from .config import BASELINE_EXCLUDES, BASELINE_INCLUDES, SCHEMA_VERSION
from .fs_utils import copy_file, copy_tree
from .logger import logger
from .paths import ProjectPaths
from .resolution_cache import enable_resolution_cache
from .state import write_state
from .types import EngineState


def init_project(project_root: Path | None = None, core_version: str | None = None) -> EngineState:
    """Snapshot the baseline, write a fresh state and enable the resolution cache."""
    paths = ProjectPaths(project_root)
    base_dir = paths.base_dir

    if base_dir.exists():
        shutil.rmtree(base_dir)
    base_dir.mkdir(parents=True, exist_ok=True)

    def excluded(entry: Path) -> bool:
        return entry.name in BASELINE_EXCLUDES

    for include in BASELINE_INCLUDES:
        src = paths.live(include)
        if not src.exists():
            continue
        if src.is_dir():
            copy_tree(src, paths.base(include), exclude=excluded)
        else:
            copy_file(src, paths.base(include))

    state = EngineState(
        skills_system_version=SCHEMA_VERSION,
        core_version=core_version or _read_core_version(paths),
        applied_skills=[],
    )
    write_state(state, paths.root)

    cache_enabled = enable_resolution_cache(paths.root)
    logger.info("Skills engine initialized", root=str(paths.root), resolution_cache=cache_enabled)
    return state


def _read_core_version(paths: ProjectPaths) -> str:
    """Version field of package.json, or 0.0.0 when unavailable."""
    try:
        pkg = json.loads(paths.dependency_manifest.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return "0.0.0"
    version = pkg.get("version") if isinstance(pkg, dict) else None
    return str(version) if version else "0.0.0"
