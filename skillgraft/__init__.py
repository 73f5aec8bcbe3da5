"""Transactional engine for applying skill packages to a project tree."""

from __future__ import annotations

from .apply import SkillApplication, apply_skill, read_pending
from .backup import clear_backup, create_backup, has_backup, restore_backup
from .config import ENGINE_DIR, SCHEMA_VERSION
from .drift import detect_drift
from .errors import (
    ConflictingSkill,
    DependencyUnmet,
    LockHeld,
    ManifestError,
    MergeFacilityError,
    MergeSourceMissing,
    NoPendingApplication,
    PendingApplication,
    PreconditionFailed,
    SkillEngineError,
    StateNotInitialized,
    StateVersionMismatch,
    StructuredConflict,
)
from .fs_utils import copy_tree, scratch_copy
from .init import init_project
from .lock import acquire_lock, is_locked, project_lock, release_lock
from .manifest import check_conflicts, check_core_version, check_dependencies, read_manifest
from .merge import FileMerge, merge_file, merge_skill_file, refresh_baseline
from .paths import ProjectPaths
from .resolution_cache import (
    clear_merge_state,
    enable_resolution_cache,
    has_conflict_markers,
    has_head,
    is_git_repo,
    record_resolutions,
    replay_resolution,
    resolution_cache_available,
    stage_conflict,
)
from .resolve import abort_application, commit_resolution
from .state import (
    collect_file_hashes,
    compare_semver,
    compute_file_hash,
    get_applied_skills,
    list_applied,
    read_state,
    record_skill_application,
    write_state,
)
from .structured import (
    apply_structured_edits,
    merge_env_additions,
    merge_npm_dependencies,
    run_dependency_install,
)
from .types import (
    AppliedSkill,
    ApplyPhase,
    ApplyResult,
    CheckResult,
    EngineState,
    MergeOutcome,
    MergeResult,
    PendingApplicationRecord,
    SkillManifest,
    StructuredEdits,
)

__all__ = [
    # apply
    "SkillApplication",
    "apply_skill",
    "read_pending",
    # backup
    "clear_backup",
    "create_backup",
    "has_backup",
    "restore_backup",
    # config
    "ENGINE_DIR",
    "SCHEMA_VERSION",
    # drift
    "detect_drift",
    # errors
    "ConflictingSkill",
    "DependencyUnmet",
    "LockHeld",
    "ManifestError",
    "MergeFacilityError",
    "MergeSourceMissing",
    "NoPendingApplication",
    "PendingApplication",
    "PreconditionFailed",
    "SkillEngineError",
    "StateNotInitialized",
    "StateVersionMismatch",
    "StructuredConflict",
    # fs_utils
    "copy_tree",
    "scratch_copy",
    # init
    "init_project",
    # lock
    "acquire_lock",
    "is_locked",
    "project_lock",
    "release_lock",
    # manifest
    "check_conflicts",
    "check_core_version",
    "check_dependencies",
    "read_manifest",
    # merge
    "FileMerge",
    "merge_file",
    "merge_skill_file",
    "refresh_baseline",
    # paths
    "ProjectPaths",
    # resolution_cache
    "clear_merge_state",
    "enable_resolution_cache",
    "has_conflict_markers",
    "has_head",
    "is_git_repo",
    "record_resolutions",
    "replay_resolution",
    "resolution_cache_available",
    "stage_conflict",
    # resolve
    "abort_application",
    "commit_resolution",
    # state
    "collect_file_hashes",
    "compare_semver",
    "compute_file_hash",
    "get_applied_skills",
    "list_applied",
    "read_state",
    "record_skill_application",
    "write_state",
    # structured
    "apply_structured_edits",
    "merge_env_additions",
    "merge_npm_dependencies",
    "run_dependency_install",
    # types
    "AppliedSkill",
    "ApplyPhase",
    "ApplyResult",
    "CheckResult",
    "EngineState",
    "MergeOutcome",
    "MergeResult",
    "PendingApplicationRecord",
    "SkillManifest",
    "StructuredEdits",
]
