from __future__ import annotations

import dataclasses
import subprocess
import threading
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Optional


def run_git(args: list[str], cwd: Path, timeout_s: int = 300) -> tuple[int, str, str]:
    proc = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        timeout=timeout_s,
    )
    return proc.returncode, proc.stdout, proc.stderr


def is_git_repo(path: Path) -> bool:
    return (path / ".git").exists()


def get_repo_toplevel(candidate: Path) -> Optional[Path]:
    try:
        code, out, _ = run_git(["rev-parse", "--show-toplevel"], cwd=candidate)
    except (OSError, subprocess.TimeoutExpired):
        return None
    if code != 0:
        return None
    try:
        return Path(out.strip()).resolve()
    except Exception:
        return None


def ls_files(repo: Path, target: str = ".", include_globs: Iterable[str] = (), exclude_globs: Iterable[str] = ()) -> list[str]:
    # Pathspecs are ORed by git: include globs replace the target instead of adding to it.
    includes = [g for g in include_globs if g]
    args = ["-c", "core.quotepath=off", "ls-files", "--", *(includes or [target or "."])]
    args.extend(f":!{g}" for g in exclude_globs if g)
    code, out, err = run_git(args, cwd=repo)
    if code != 0:
        raise RuntimeError(f"git ls-files exited {code}: {err.strip()[:500]}")
    return [line for line in out.splitlines() if line.strip()]


def find_revision(repo: Path, depth: int) -> str | None:
    """Return the commit `depth` commits behind HEAD, or None when history is shorter."""
    if depth <= 0:
        return None
    code, out, _ = run_git(["rev-list", "--max-count=1", f"--skip={int(depth)}", "HEAD"], cwd=repo)
    if code != 0:
        return None
    sha = out.strip()
    return sha or None


@dataclasses.dataclass(frozen=True)
class BlameLine:
    commit: str
    author: str
    time: int
    boundary: bool = False


def parse_porcelain(lines: Iterable[str]) -> Iterator[BlameLine]:
    """
    Parse `git blame --line-porcelain` output into one BlameLine per source line.

    Header lines start with a 40-hex sha (prefixed with `^` for boundary
    commits), followed by `key value` lines; the source line itself is prefixed
    with a tab and closes the entry.
    """
    commit = ""
    author = ""
    time_s = 0
    boundary = False
    for raw in lines:
        line = raw.rstrip("\n")
        if line.startswith("\t"):
            yield BlameLine(commit=commit, author=author, time=time_s, boundary=boundary)
            continue
        if not line:
            continue
        head = line.split(" ", 1)
        key = head[0]
        value = head[1] if len(head) > 1 else ""
        sha = key[1:] if key.startswith("^") else key
        if len(sha) == 40 and all(c in "0123456789abcdef" for c in sha):
            commit = sha
            boundary = key.startswith("^")
            continue
        if key == "author":
            author = value.strip()
            if author.startswith("<") and author.endswith(">"):
                author = author[1:-1]
        elif key == "committer-time":
            try:
                time_s = int(value.strip())
            except ValueError:
                time_s = 0
        elif key == "boundary":
            boundary = True


def stream_blame(repo: Path, file: str, revision_range: str | None = None, errors: list[str] | None = None) -> Iterator[BlameLine]:
    """
    Stream `git blame --line-porcelain` for one file.

    stderr is drained on a separate thread so a chatty git cannot block stdout.
    A non-zero exit is reported through `errors` rather than raised.
    """
    cmd = ["git", "blame", "--line-porcelain"]
    if revision_range:
        cmd.append(revision_range)
    cmd.extend(["--", file])

    try:
        proc = subprocess.Popen(
            cmd,
            cwd=str(repo),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            # Own session: a terminal Ctrl+C reaches only us, not the running blame.
            start_new_session=True,
        )
    except OSError as e:
        if errors is not None:
            errors.append(f"{file}: failed to start git blame: {e}")
        return

    stderr_chunks: list[str] = []
    stderr_chars = 0
    max_stderr_chars = 50_000

    def drain_stderr() -> None:
        nonlocal stderr_chars
        if proc.stderr is None:
            return
        while True:
            chunk = proc.stderr.read(8192)
            if not chunk:
                return
            if stderr_chars >= max_stderr_chars:
                continue
            take = chunk[: max_stderr_chars - stderr_chars]
            stderr_chunks.append(take)
            stderr_chars += len(take)

    stderr_thread: threading.Thread | None = None
    if proc.stderr is not None:
        stderr_thread = threading.Thread(target=drain_stderr, daemon=True)
        stderr_thread.start()

    assert proc.stdout is not None
    finished = False
    try:
        yield from parse_porcelain(proc.stdout)
        finished = True
    finally:
        # Consumer stopped early (cancellation): do not leave git running.
        if not finished and proc.poll() is None:
            proc.kill()
        code = proc.wait()
        proc.stdout.close()
        if stderr_thread is not None:
            stderr_thread.join()
        stderr = "".join(stderr_chunks)
        if finished and code != 0 and errors is not None:
            errors.append(f"{file}: git blame exited {code}: {stderr.strip()[:500]}")
