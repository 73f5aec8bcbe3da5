"""Advisory file lock held for the duration of one engine operation."""

from __future__ import annotations

import contextlib
import json
import os
import time
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

from .config import LOCK_STALE_AFTER_S
from .errors import LockHeld
from .logger import logger
from .paths import ProjectPaths

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@dataclass
class LockInfo:
    pid: int
    timestamp: float

    @property
    def stale(self) -> bool:
        return time.time() - self.timestamp > LOCK_STALE_AFTER_S


def _read_lock(lock_path: Path) -> LockInfo | None:
    try:
        data = json.loads(lock_path.read_text(encoding="utf-8"))
        return LockInfo(pid=int(data["pid"]), timestamp=float(data["timestamp"]))
    except (OSError, ValueError, KeyError, TypeError):
        return None


def _is_process_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    return True


def _try_create(lock_path: Path) -> bool:
    try:
        fd = os.open(str(lock_path), os.O_WRONLY | os.O_CREAT | os.O_EXCL)
    except FileExistsError:
        return False
    try:
        os.write(fd, json.dumps(asdict(LockInfo(pid=os.getpid(), timestamp=time.time()))).encode())
    finally:
        os.close(fd)
    return True


def acquire_lock(project_root: Path | None = None) -> None:
    """Create the lock file, taking over stale or orphaned locks."""
    lock_path = ProjectPaths(project_root).lock_file
    lock_path.parent.mkdir(parents=True, exist_ok=True)

    if _try_create(lock_path):
        return

    existing = _read_lock(lock_path)
    if existing is not None and not existing.stale and _is_process_alive(existing.pid):
        started = time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(existing.timestamp))
        raise LockHeld(
            f"Operation in progress (pid {existing.pid}, started {started}). If this is stale, delete {lock_path}"
        )

    logger.warning("Taking over stale lock", lock=str(lock_path), owner=existing.pid if existing else None)
    with contextlib.suppress(FileNotFoundError):
        lock_path.unlink()

    if not _try_create(lock_path):
        raise LockHeld("Lock contention: another process acquired the lock. Retry.")


def release_lock(project_root: Path | None = None) -> None:
    """Remove the lock file if this process owns it (or it is unreadable)."""
    lock_path = ProjectPaths(project_root).lock_file
    if not lock_path.exists():
        return
    info = _read_lock(lock_path)
    if info is None or info.pid == os.getpid():
        with contextlib.suppress(FileNotFoundError):
            lock_path.unlink()


def is_locked(project_root: Path | None = None) -> bool:
    """Whether a live, non-stale lock is held."""
    info = _read_lock(ProjectPaths(project_root).lock_file)
    return info is not None and not info.stale and _is_process_alive(info.pid)


@contextmanager
def project_lock(project_root: Path | None = None) -> Iterator[None]:
    """Hold the project lock for the body of a with-block."""
    acquire_lock(project_root)
    try:
        yield
    finally:
        release_lock(project_root)
