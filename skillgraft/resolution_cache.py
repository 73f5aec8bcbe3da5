"""Resolution cache backed by git rerere.

A conflicting three-way merge is staged as an in-progress merge (index stages
1/2/3 plus MERGE_HEAD) so that `git rerere` can either record its preimage or
replay a resolution recorded for the same conflict earlier.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from .logger import logger

if TYPE_CHECKING:
    from collections.abc import Iterable


CONFLICT_MARKER = b"<<<<<<<"


def is_git_repo(cwd: Path | None = None) -> bool:
    """Check if the directory is inside a git work tree."""
    result = subprocess.run(
        ["git", "rev-parse", "--git-dir"],
        cwd=str(cwd or Path.cwd()),
        capture_output=True,
        text=True,
        check=False,
    )
    return result.returncode == 0


def has_conflict_markers(file_path: Path) -> bool:
    return file_path.is_file() and CONFLICT_MARKER in file_path.read_bytes()


def has_head(cwd: Path | None = None) -> bool:
    """Whether the repository has at least one commit."""
    result = subprocess.run(
        ["git", "rev-parse", "--verify", "-q", "HEAD"],
        cwd=str(cwd or Path.cwd()),
        capture_output=True,
        text=True,
        check=False,
    )
    return result.returncode == 0


def resolution_cache_available(project_root: Path | None = None) -> bool:
    """Whether conflicts under project_root can be staged for rerere.

    Index paths are relative to the work tree top level, so the project root
    must be that top level. An unborn branch has no HEAD for MERGE_HEAD.
    """
    cwd = project_root or Path.cwd()
    if not is_git_repo(cwd):
        return False
    toplevel = _git(["rev-parse", "--show-toplevel"], cwd, check=False)
    if not toplevel or Path(toplevel).resolve() != cwd.resolve():
        return False
    return has_head(cwd)


def _git(args: list[str], cwd: Path, *, input_text: str | None = None, check: bool = True) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        input=input_text,
        capture_output=True,
        text=True,
        check=check,
    )
    return result.stdout.strip()


def _git_dir(cwd: Path) -> Path:
    git_dir = Path(_git(["rev-parse", "--git-dir"], cwd))
    return git_dir if git_dir.is_absolute() else cwd / git_dir


def enable_resolution_cache(project_root: Path | None = None) -> bool:
    """Turn on rerere for the repository. Returns False outside a git work tree."""
    cwd = project_root or Path.cwd()
    if not is_git_repo(cwd):
        return False
    _git(["config", "--local", "rerere.enabled", "true"], cwd)
    return True


def stage_conflict(
    rel_path: str,
    base_path: Path,
    ours_path: Path,
    theirs_path: Path,
    project_root: Path | None = None,
) -> None:
    """Register an in-progress merge of rel_path with the three given variants."""
    cwd = project_root or Path.cwd()
    git_dir = _git_dir(cwd)

    if (git_dir / "MERGE_HEAD").exists():
        # Left behind by a crashed run
        clear_merge_state(rel_path, cwd)

    hashes = [
        _git(["hash-object", "-w", "--no-filters", "--", str(variant)], cwd)
        for variant in (base_path, ours_path, theirs_path)
    ]
    index_info = "".join(f"100644 {obj} {stage}\t{rel_path}\n" for stage, obj in enumerate(hashes, start=1))
    _git(["update-index", "--index-info"], cwd, input_text=index_info)

    head = _git(["rev-parse", "HEAD"], cwd)
    (git_dir / "MERGE_HEAD").write_text(head + "\n", encoding="utf-8")
    (git_dir / "MERGE_MSG").write_text(f"Skill merge: {rel_path}\n", encoding="utf-8")


def replay_resolution(rel_path: str, project_root: Path | None = None) -> bool:
    """Let rerere record or replay the staged conflict.

    The live file must already hold the conflict-marked content. Returns True
    when a recorded resolution removed every conflict hunk.
    """
    cwd = project_root or Path.cwd()
    try:
        _git(["rerere"], cwd)
    except subprocess.CalledProcessError as err:
        logger.warning("rerere failed", path=rel_path, stderr=err.stderr)
        return False
    return not has_conflict_markers(cwd / rel_path)


def record_resolutions(rel_paths: Iterable[str], project_root: Path | None = None) -> None:
    """Record hand-made resolutions of previously staged conflicts as postimages."""
    cwd = project_root or Path.cwd()
    if not resolution_cache_available(cwd):
        return
    result = subprocess.run(["git", "rerere"], cwd=str(cwd), capture_output=True, text=True, check=False)
    if result.returncode != 0:
        logger.warning("rerere could not record resolutions", stderr=result.stderr.strip())
        return
    logger.info("Resolutions recorded", files=list(rel_paths))


def clear_merge_state(rel_path: str | None = None, project_root: Path | None = None) -> None:
    """Drop MERGE_HEAD/MERGE_MSG and the unmerged index entries of rel_path.

    Only rel_path is reset so the user's own staged changes survive.
    """
    cwd = project_root or Path.cwd()
    if not is_git_repo(cwd):
        return

    git_dir = _git_dir(cwd)
    (git_dir / "MERGE_HEAD").unlink(missing_ok=True)
    (git_dir / "MERGE_MSG").unlink(missing_ok=True)

    args = ["reset", "--", rel_path] if rel_path else ["reset"]
    _git(args, cwd, check=False)
