"""Finish or abandon an application left waiting on merge conflicts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .apply import read_pending, remove_created
from .backup import clear_backup, restore_backup
from .config import DEPENDENCY_MANIFEST, ENV_EXAMPLE
from .errors import NoPendingApplication
from .lock import project_lock
from .logger import logger
from .manifest import read_manifest
from .merge import refresh_baseline
from .paths import ProjectPaths
from .resolution_cache import has_conflict_markers, record_resolutions
from .state import collect_file_hashes, record_skill_application
from .structured import apply_structured_edits
from .types import ApplyPhase, ApplyResult, PendingApplicationRecord

if TYPE_CHECKING:
    from pathlib import Path


def _require_pending(paths: ProjectPaths) -> PendingApplicationRecord:
    pending = read_pending(paths.root)
    if pending is None:
        raise NoPendingApplication("No skill application is waiting on conflict resolution.")
    return pending


def commit_resolution(project_root: Path | None = None) -> ApplyResult:
    """Commit a conflicted application once every conflict has been resolved by hand.

    Runs the steps the conflicted run skipped: structured merges, state commit,
    baseline refresh and backup cleanup. Hand resolutions are recorded in the
    resolution cache so the same conflict resolves itself next time.
    """
    paths = ProjectPaths(project_root)

    with project_lock(paths.root):
        pending = _require_pending(paths)
        unresolved = [p for p in pending.merge_conflicts if has_conflict_markers(paths.live(p))]
        if unresolved:
            return ApplyResult(
                success=False,
                skill=pending.skill,
                version=pending.version,
                phase=ApplyPhase.CONFLICTS_PENDING,
                merge_conflicts=unresolved,
                backup_pending=True,
                error=f"Conflict markers remain in: {', '.join(unresolved)}",
            )

        record_resolutions(pending.merge_conflicts, paths.root)

        manifest = read_manifest(pending.skill_dir)
        structured_files = (DEPENDENCY_MANIFEST, ENV_EXAMPLE)
        snapshot = {p: paths.live(p).read_bytes() for p in structured_files if paths.live(p).exists()}
        try:
            outcomes = apply_structured_edits(manifest, paths.root)
        except Exception:
            # Structured files return to their pre-commit content
            remove_created([p for p in structured_files if p not in snapshot], paths.root)
            for rel_path, content in snapshot.items():
                paths.live(rel_path).write_bytes(content)
            raise
        file_hashes = collect_file_hashes([*manifest.adds, *manifest.modifies], paths.root)
        record_skill_application(manifest.skill, manifest.version, file_hashes, outcomes, paths.root)

        for rel_path in manifest.modifies:
            refresh_baseline(rel_path, paths.root)

        clear_backup(paths.root)
        paths.pending_file.unlink()

    logger.info("Conflicted application committed", skill=manifest.skill, version=manifest.version)
    return ApplyResult(success=True, skill=manifest.skill, version=manifest.version, phase=ApplyPhase.SUCCEEDED)


def abort_application(project_root: Path | None = None) -> PendingApplicationRecord:
    """Roll a conflicted application back to the project's pre-apply content."""
    paths = ProjectPaths(project_root)

    with project_lock(paths.root):
        pending = _require_pending(paths)
        remove_created(pending.created_files, paths.root)
        for rel_path in pending.created_baselines:
            paths.base(rel_path).unlink(missing_ok=True)
        restore_backup(paths.root)
        clear_backup(paths.root)
        paths.pending_file.unlink()

    logger.info("Conflicted application aborted", skill=pending.skill)
    return pending
