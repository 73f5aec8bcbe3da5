"""Tests for drift detection against baselines."""

from __future__ import annotations

from typing import TYPE_CHECKING

from skillgraft.drift import detect_drift

from .conftest import write_file

if TYPE_CHECKING:
    from pathlib import Path


def test_flags_file_differing_from_baseline(engine_dir: Path) -> None:
    write_file(engine_dir / ".skillgraft" / "base" / "src" / "a.ts", "base")
    write_file(engine_dir / "src" / "a.ts", "edited locally")
    assert detect_drift(["src/a.ts"]) == ["src/a.ts"]


def test_matching_file_is_not_flagged(engine_dir: Path) -> None:
    write_file(engine_dir / ".skillgraft" / "base" / "src" / "a.ts", "same")
    write_file(engine_dir / "src" / "a.ts", "same")
    assert detect_drift(["src/a.ts"]) == []


def test_missing_baseline_or_live_file_is_not_drift(engine_dir: Path) -> None:
    write_file(engine_dir / "src" / "only-live.ts", "x")
    write_file(engine_dir / ".skillgraft" / "base" / "src" / "only-base.ts", "x")
    assert detect_drift(["src/only-live.ts", "src/only-base.ts", "src/neither.ts"]) == []


def test_preserves_input_order(engine_dir: Path) -> None:
    for name in ("b.ts", "a.ts"):
        write_file(engine_dir / ".skillgraft" / "base" / name, "base")
        write_file(engine_dir / name, "live")
    assert detect_drift(["b.ts", "a.ts"]) == ["b.ts", "a.ts"]
