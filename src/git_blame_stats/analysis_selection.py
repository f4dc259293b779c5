from __future__ import annotations

import os
import sys
from pathlib import Path

from .git import is_git_repo

IGNORED_DIRNAMES = {".git", "node_modules"}


def find_repositories(root: Path, depth: int) -> list[Path]:
    """Return git repositories at `root` or up to `depth - 1` directory levels below it."""
    if depth <= 0:
        return []
    if not root.exists():
        raise ValueError(f"Path does not exist: {root}")
    if not root.is_dir():
        raise ValueError(f"Path is not a directory: {root}")
    if is_git_repo(root):
        return [root]

    found: list[Path] = []

    def onerror(err: OSError) -> None:
        print(f"Could not read directory: {err.filename}", file=sys.stderr)

    root_depth = len(root.parts)
    for dirpath, dirnames, _filenames in os.walk(root, onerror=onerror):
        current = Path(dirpath)
        level = len(current.parts) - root_depth
        if current != root and is_git_repo(current):
            found.append(current)
            dirnames[:] = []
            continue
        if level + 1 >= depth:
            dirnames[:] = []
            continue
        dirnames[:] = sorted(d for d in dirnames if d not in IGNORED_DIRNAMES)
    return sorted(set(found))


def repo_paths_to_process(input_paths: list[str], depth: int = 3) -> list[Path]:
    repos: set[Path] = set()
    for p in input_paths or ["."]:
        repos.update(find_repositories(Path(p).resolve(), depth))
    return sorted(repos)
