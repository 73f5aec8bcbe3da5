"""Apply a skill package to a project as one transaction."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import yaml

from .backup import clear_backup, create_backup, restore_backup
from .config import ADD_DIR, DEPENDENCY_MANIFEST, ENV_EXAMPLE
from .drift import detect_drift
from .errors import ConflictingSkill, DependencyUnmet, PendingApplication, PreconditionFailed
from .fs_utils import copy_tree, prune_empty_dirs
from .lock import project_lock
from .logger import logger
from .manifest import check_conflicts, check_core_version, check_dependencies, read_manifest
from .merge import merge_skill_file, refresh_baseline
from .paths import ProjectPaths
from .state import collect_file_hashes, read_state, record_skill_application
from .structured import apply_structured_edits
from .types import ApplyPhase, ApplyResult, MergeOutcome, PendingApplicationRecord, SkillManifest


def read_pending(project_root: Path | None = None) -> PendingApplicationRecord | None:
    pending_path = ProjectPaths(project_root).pending_file
    if not pending_path.exists():
        return None
    raw = yaml.safe_load(pending_path.read_text(encoding="utf-8"))
    return PendingApplicationRecord.model_validate(raw)


def write_pending(record: PendingApplicationRecord, project_root: Path | None = None) -> None:
    pending_path = ProjectPaths(project_root).pending_file
    pending_path.parent.mkdir(parents=True, exist_ok=True)
    pending_path.write_text(yaml.safe_dump(record.model_dump(), sort_keys=True), encoding="utf-8")


def remove_created(rel_paths: list[str], root: Path) -> None:
    """Delete files a transaction created, pruning directories it left empty."""
    for rel_path in rel_paths:
        target = root / rel_path
        if target.is_file():
            target.unlink()
            prune_empty_dirs(target.parent, root)


class SkillApplication:
    """One transactional application of a skill package.

    Phases run strictly in order. Failures before the backup is captured are
    reported in the result; unexpected errors after it roll the project back
    and propagate. Unresolved merge conflicts leave the merged files and the
    backup in place for manual resolution.
    """

    def __init__(self, skill_dir: Path | str, project_root: Path | None = None) -> None:
        self.skill_dir = Path(skill_dir)
        self.paths = ProjectPaths(project_root)
        self.phase = ApplyPhase.VALIDATING
        self.drift: list[str] = []
        self.created_files: list[str] = []
        self.created_baselines: list[str] = []
        self._log = logger.bind(skill_dir=str(self.skill_dir))

    def run(self) -> ApplyResult:
        with project_lock(self.paths.root):
            return self._run()

    def _enter(self, phase: ApplyPhase) -> None:
        self.phase = phase
        self._log.debug("Apply phase", phase=phase.value)

    def _result(self, manifest: SkillManifest, success: bool, **fields: object) -> ApplyResult:
        return ApplyResult(
            success=success,
            skill=manifest.skill,
            version=manifest.version,
            phase=self.phase,
            drift=self.drift or None,
            **fields,
        )

    def _run(self) -> ApplyResult:
        self._enter(ApplyPhase.VALIDATING)
        manifest = read_manifest(self.skill_dir)
        self._log = self._log.bind(skill=manifest.skill, version=manifest.version)

        self._enter(ApplyPhase.CHECKING_PRECONDITIONS)
        try:
            self._check_preconditions(manifest)
        except PreconditionFailed as err:
            self._log.warning("Skill not applied", reason=str(err))
            return self._result(manifest, False, error=str(err))

        self.drift = detect_drift(manifest.modifies, self.paths.root)
        if self.drift:
            self._log.info("Drift detected, three-way merge will reconcile", files=self.drift)

        try:
            return self._transaction(manifest)
        except Exception:
            self._rollback()
            raise

    def _check_preconditions(self, manifest: SkillManifest) -> None:
        state = read_state(self.paths.root)
        applied = {s.name for s in state.applied_skills}

        pending = read_pending(self.paths.root)
        if pending is not None:
            raise PendingApplication(pending.skill)

        deps = check_dependencies(manifest, applied)
        if not deps.ok:
            raise DependencyUnmet(deps.names)

        conflicts = check_conflicts(manifest, applied)
        if not conflicts.ok:
            raise ConflictingSkill(conflicts.names)

        core = check_core_version(manifest, state.core_version)
        if core.warning:
            self._log.warning(core.warning)

    def _transaction(self, manifest: SkillManifest) -> ApplyResult:
        self._enter(ApplyPhase.CAPTURING_BACKUP)
        create_backup(
            [
                *manifest.modifies,
                *manifest.adds,
                DEPENDENCY_MANIFEST,
                ENV_EXAMPLE,
            ],
            self.paths.root,
        )

        self._enter(ApplyPhase.COPYING_ADDS)
        self._copy_adds(manifest)

        self._enter(ApplyPhase.MERGING)
        merge_conflicts = self._merge_modified(manifest)
        if merge_conflicts:
            return self._leave_conflicts(manifest, merge_conflicts)

        self._enter(ApplyPhase.STRUCTURED_MERGING)
        self.created_files.extend(p for p in (DEPENDENCY_MANIFEST, ENV_EXAMPLE) if not self.paths.live(p).exists())
        outcomes = apply_structured_edits(manifest, self.paths.root)

        self._enter(ApplyPhase.COMMITTING_STATE)
        file_hashes = collect_file_hashes([*manifest.adds, *manifest.modifies], self.paths.root)
        record_skill_application(manifest.skill, manifest.version, file_hashes, outcomes, self.paths.root)

        self._enter(ApplyPhase.REFRESHING_BASELINES)
        for rel_path in manifest.modifies:
            refresh_baseline(rel_path, self.paths.root)

        self._enter(ApplyPhase.CLEARING_BACKUP)
        clear_backup(self.paths.root)

        self._enter(ApplyPhase.SUCCEEDED)
        self._log.info("Skill applied", files=len(file_hashes))
        return self._result(manifest, True)

    def _copy_adds(self, manifest: SkillManifest) -> None:
        add_dir = self.skill_dir / ADD_DIR
        declared = set(manifest.adds)
        self.created_files.extend(p for p in manifest.adds if not self.paths.live(p).exists())

        if not add_dir.is_dir():
            if declared:
                self._log.warning("Skill declares adds but has no add/ directory", adds=sorted(declared))
            return

        def undeclared(entry: Path) -> bool:
            return entry.is_file() and entry.relative_to(add_dir).as_posix() not in declared

        copied = copy_tree(add_dir, self.paths.root, exclude=undeclared)
        missing = declared - {self.paths.relative(p) for p in copied}
        if missing:
            self._log.warning("Declared adds missing from skill package", files=sorted(missing))
            self.created_files = [p for p in self.created_files if p not in missing]

    def _merge_modified(self, manifest: SkillManifest) -> list[str]:
        merge_conflicts: list[str] = []
        for rel_path in manifest.modifies:
            merged = merge_skill_file(rel_path, self.skill_dir, self.paths.root)
            if merged.created_live:
                self.created_files.append(rel_path)
            if merged.created_baseline:
                self.created_baselines.append(rel_path)
            if merged.outcome is MergeOutcome.CONFLICTED:
                merge_conflicts.append(rel_path)
            self._log.debug("File merged", path=rel_path, outcome=merged.outcome.value)
        return merge_conflicts

    def _leave_conflicts(self, manifest: SkillManifest, merge_conflicts: list[str]) -> ApplyResult:
        self._enter(ApplyPhase.CONFLICTS_PENDING)
        write_pending(
            PendingApplicationRecord(
                skill=manifest.skill,
                version=manifest.version,
                skill_dir=str(self.skill_dir.resolve()),
                started_at=datetime.now(UTC).isoformat(),
                merge_conflicts=merge_conflicts,
                created_files=self.created_files,
                created_baselines=self.created_baselines,
            ),
            self.paths.root,
        )
        self._log.warning("Merge conflicts pending", files=merge_conflicts)
        return self._result(
            manifest,
            False,
            merge_conflicts=merge_conflicts,
            backup_pending=True,
            error=(
                f"Merge conflicts in: {', '.join(merge_conflicts)}. "
                "Resolve them manually then run commit_resolution(), or abort_application() to roll back."
            ),
        )

    def _rollback(self) -> None:
        self._log.error("Apply failed, rolling back", phase=self.phase.value)
        self._enter(ApplyPhase.RESTORING_BACKUP)
        remove_created(self.created_files, self.paths.root)
        for rel_path in self.created_baselines:
            self.paths.base(rel_path).unlink(missing_ok=True)
        restore_backup(self.paths.root)
        self._enter(ApplyPhase.CLEARING_BACKUP)
        clear_backup(self.paths.root)
        self._enter(ApplyPhase.FAILED)


def apply_skill(skill_dir: Path | str, project_root: Path | None = None) -> ApplyResult:
    """Apply the skill package at skill_dir to the project (default: cwd)."""
    return SkillApplication(skill_dir, project_root).run()
