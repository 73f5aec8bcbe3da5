"""Initialize the skills engine in the current project."""

from __future__ import annotations

import sys

from skillgraft.init import init_project


def main() -> None:
    core_version = sys.argv[1] if len(sys.argv) > 1 else None
    state = init_project(core_version=core_version)
    print(f"Skills engine initialized (core {state.core_version}).")


if __name__ == "__main__":
    main()
