from __future__ import annotations

import fnmatch
from pathlib import PurePosixPath


def normalize_path(path: str) -> str:
    p = (path or "").strip().replace("\\", "/")
    while p.startswith("./"):
        p = p[2:]
    return p.strip("/")


def split_path(path: str | tuple[str, ...] | list[str]) -> tuple[str, ...]:
    if isinstance(path, str):
        p = normalize_path(path)
        if not p:
            raise ValueError(f"Invalid path: {path!r}")
        parts = tuple(p.split("/"))
    else:
        parts = tuple(str(x) for x in path)
        if not parts:
            raise ValueError(f"Invalid path: {path!r}")
    for part in parts:
        if part in ("", ".", ".."):
            raise ValueError(f"Invalid path segment {part!r} in {path!r}")
    return parts


def join_path(parts: tuple[str, ...]) -> str:
    return "/".join(parts)


def matches_globs(path: str, include_globs: list[str] | tuple[str, ...], exclude_globs: list[str] | tuple[str, ...]) -> bool:
    p = normalize_path(path)
    base = p.rsplit("/", 1)[-1]
    if include_globs and not any(fnmatch.fnmatch(p, g) or fnmatch.fnmatch(base, g) for g in include_globs if g):
        return False
    for pat in exclude_globs:
        if pat and (fnmatch.fnmatch(p, pat) or fnmatch.fnmatch(base, pat)):
            return False
    return True


def language_for_path(path: str) -> str:
    p = path.replace("\\", "/")
    base = p.rsplit("/", 1)[-1]
    if base == "Dockerfile" or base.lower().startswith("dockerfile."):
        return "Dockerfile"
    if base == "Makefile" or base == "makefile":
        return "Makefile"

    ext = PurePosixPath(base).suffix.lower()
    by_ext = {
        ".py": "Python",
        ".ipynb": "Jupyter",
        ".js": "JavaScript",
        ".jsx": "JavaScript",
        ".ts": "TypeScript",
        ".tsx": "TypeScript",
        ".mjs": "JavaScript",
        ".cjs": "JavaScript",
        ".java": "Java",
        ".kt": "Kotlin",
        ".swift": "Swift",
        ".go": "Go",
        ".rs": "Rust",
        ".php": "PHP",
        ".rb": "Ruby",
        ".cs": "C#",
        ".c": "C",
        ".h": "C/C++ Headers",
        ".cpp": "C++",
        ".hpp": "C++",
        ".scala": "Scala",
        ".sql": "SQL",
        ".yml": "YAML",
        ".yaml": "YAML",
        ".json": "JSON",
        ".toml": "TOML",
        ".md": "Markdown",
        ".html": "HTML",
        ".css": "CSS",
        ".scss": "SCSS",
        ".sh": "Shell",
        ".gradle": "Gradle",
        ".xml": "XML",
        ".properties": "Properties",
    }
    if ext in by_ext:
        return by_ext[ext]
    # Unknown extensions are reported as-is so they stay distinguishable.
    if ext:
        return ext
    return "Other"
