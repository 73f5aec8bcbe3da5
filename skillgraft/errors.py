"""Exception taxonomy for the skills engine."""

from __future__ import annotations


class SkillEngineError(Exception):
    """Base class for all engine errors."""


class ManifestError(SkillEngineError, ValueError):
    """Skill manifest is missing, malformed, or lacks a required field."""


class StateNotInitialized(SkillEngineError, FileNotFoundError):
    """The engine state file does not exist yet."""


class StateVersionMismatch(SkillEngineError, RuntimeError):
    """Persisted state was written by a newer engine than the running one."""


class PreconditionFailed(SkillEngineError):
    """A pre-flight check refused the application. Reported, never raised to callers."""

    def __init__(self, message: str, names: list[str] | None = None) -> None:
        super().__init__(message)
        self.names = names or []


class DependencyUnmet(PreconditionFailed):
    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"Missing dependencies: {', '.join(missing)}", missing)


class ConflictingSkill(PreconditionFailed):
    def __init__(self, conflicting: list[str]) -> None:
        super().__init__(f"Conflicting skills: {', '.join(conflicting)}", conflicting)


class PendingApplication(PreconditionFailed):
    def __init__(self, skill: str) -> None:
        super().__init__(
            f"Application of {skill} is waiting on conflict resolution. "
            "Run commit_resolution() or abort_application() first.",
            [skill],
        )


class MergeSourceMissing(SkillEngineError, FileNotFoundError):
    """A path declared under `modifies` has no replacement content in the skill package."""


class MergeFacilityError(SkillEngineError, RuntimeError):
    """The external three-way merge tool failed (as opposed to reporting conflicts)."""


class StructuredConflict(SkillEngineError, ValueError):
    """A declarative edit collides with existing content."""


class LockHeld(SkillEngineError, RuntimeError):
    """Another live process holds the project lock."""


class NoPendingApplication(SkillEngineError, RuntimeError):
    """commit/abort was requested but no application is waiting on conflicts."""
