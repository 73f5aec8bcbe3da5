"""Three-way merge of skill-modified files against their baselines."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from .config import MODIFY_DIR
from .errors import MergeFacilityError, MergeSourceMissing
from .fs_utils import copy_file, scratch_copy
from .logger import logger
from .paths import ProjectPaths
from .resolution_cache import clear_merge_state, replay_resolution, resolution_cache_available, stage_conflict
from .types import MergeOutcome, MergeResult


@dataclass
class FileMerge:
    rel_path: str
    outcome: MergeOutcome
    created_live: bool = False
    created_baseline: bool = False


def merge_file(current_path: Path, base_path: Path, skill_path: Path) -> MergeResult:
    """Run git merge-file, modifying current_path in place.

    Exit status 1..127 is the number of conflicts written as markers; any
    other non-zero status is a tool failure.
    """
    result = subprocess.run(
        ["git", "merge-file", str(current_path), str(base_path), str(skill_path)],
        capture_output=True,
        text=True,
    )

    if result.returncode == 0:
        return MergeResult(clean=True, conflict_count=0)
    if 0 < result.returncode < 128:
        return MergeResult(clean=False, conflict_count=result.returncode)

    raise MergeFacilityError(f"git merge-file failed with exit code {result.returncode}: {result.stderr}")


def merge_skill_file(rel_path: str, skill_dir: Path, project_root: Path | None = None) -> FileMerge:
    """Merge the skill's replacement for rel_path into the live project file.

    The live file is only ever overwritten from a finished scratch copy. On an
    unresolved conflict the live file receives the conflict-marked content.
    """
    paths = ProjectPaths(project_root)
    live = paths.live(rel_path)
    base = paths.base(rel_path)
    theirs = skill_dir / MODIFY_DIR / rel_path

    if not theirs.is_file():
        raise MergeSourceMissing(f"Skill modified file not found: {theirs}")

    if not live.exists():
        copy_file(theirs, live)
        return FileMerge(rel_path, MergeOutcome.INSTALLED, created_live=True)

    created_baseline = False
    if not base.exists():
        # First touch: current content becomes the common ancestor
        copy_file(live, base)
        created_baseline = True

    with scratch_copy(live) as scratch:
        result = merge_file(scratch, base, theirs)
        if result.clean:
            copy_file(scratch, live)
            return FileMerge(rel_path, MergeOutcome.MERGED, created_baseline=created_baseline)

        use_cache = resolution_cache_available(paths.root)
        try:
            if use_cache:
                # live still holds "ours" at this point
                stage_conflict(rel_path, base, live, theirs, paths.root)
            copy_file(scratch, live)
            resolved = use_cache and replay_resolution(rel_path, paths.root)
        finally:
            if use_cache:
                clear_merge_state(rel_path, paths.root)

    if resolved:
        logger.info("Conflict resolved from cache", path=rel_path)
        return FileMerge(rel_path, MergeOutcome.RESOLVED, created_baseline=created_baseline)

    logger.warning("Merge conflict", path=rel_path, conflicts=result.conflict_count)
    return FileMerge(rel_path, MergeOutcome.CONFLICTED, created_baseline=created_baseline)


def refresh_baseline(rel_path: str, project_root: Path | None = None) -> None:
    """Make the live content of rel_path the ancestor for the next skill."""
    paths = ProjectPaths(project_root)
    live = paths.live(rel_path)
    if live.is_file():
        copy_file(live, paths.base(rel_path))
