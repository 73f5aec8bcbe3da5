"""Skills engine domain types."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ApplyPhase(str, Enum):
    VALIDATING = "validating"
    CHECKING_PRECONDITIONS = "checking_preconditions"
    CAPTURING_BACKUP = "capturing_backup"
    COPYING_ADDS = "copying_adds"
    MERGING = "merging"
    CONFLICTS_PENDING = "conflicts_pending"
    STRUCTURED_MERGING = "structured_merging"
    COMMITTING_STATE = "committing_state"
    REFRESHING_BASELINES = "refreshing_baselines"
    CLEARING_BACKUP = "clearing_backup"
    SUCCEEDED = "succeeded"
    RESTORING_BACKUP = "restoring_backup"
    FAILED = "failed"


class MergeOutcome(str, Enum):
    INSTALLED = "installed"  # live file was absent, skill content copied verbatim
    MERGED = "merged"
    RESOLVED = "resolved"  # conflict replayed from the resolution cache
    CONFLICTED = "conflicted"


class StructuredEdits(BaseModel):
    npm_dependencies: dict[str, str] = Field(default_factory=dict)
    env_additions: list[str] = Field(default_factory=list)


class SkillManifest(BaseModel):
    skill: str
    version: str
    description: str = ""
    core_version: str
    adds: list[str]
    modifies: list[str]
    structured: StructuredEdits | None = None
    conflicts: list[str] = Field(default_factory=list)
    depends: list[str] = Field(default_factory=list)
    test: str | None = None
    author: str | None = None
    license: str | None = None


class AppliedSkill(BaseModel):
    name: str
    version: str
    applied_at: str
    file_hashes: dict[str, str]
    structured_outcomes: dict[str, Any] | None = None


class EngineState(BaseModel):
    skills_system_version: str
    core_version: str
    applied_skills: list[AppliedSkill] = Field(default_factory=list)


class CheckResult(BaseModel):
    ok: bool
    names: list[str] = Field(default_factory=list)
    warning: str | None = None


class MergeResult(BaseModel):
    clean: bool
    conflict_count: int


class PendingApplicationRecord(BaseModel):
    """Journal of an application left waiting on manual conflict resolution."""

    skill: str
    version: str
    skill_dir: str
    started_at: str
    merge_conflicts: list[str]
    created_files: list[str] = Field(default_factory=list)
    created_baselines: list[str] = Field(default_factory=list)


class ApplyResult(BaseModel):
    success: bool
    skill: str
    version: str
    phase: ApplyPhase
    merge_conflicts: list[str] | None = None
    backup_pending: bool | None = None
    drift: list[str] | None = None
    error: str | None = None
