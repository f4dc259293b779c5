from __future__ import annotations

import sys
from collections.abc import Iterable, Iterator
from pathlib import Path

from .analysis_clusters import cluster_files, cluster_lookup, cluster_size_bounds
from .analysis_paths import language_for_path, matches_globs
from .analysis_progress import Progress
from .analysis_stream import CancelToken
from .analysis_write import append_jsonl, iter_jsonl
from .git import BlameLine, find_revision, get_repo_toplevel, ls_files, stream_blame
from .models import LEGACY_AUTHOR, AuthorshipRecord, RepoScan, ScanConfig


def _newest_per_author(lines: Iterable[BlameLine]) -> list[BlameLine]:
    newest: dict[str, BlameLine] = {}
    for line in lines:
        cur = newest.get(line.author)
        if cur is None or line.time > cur.time:
            newest[line.author] = line
    return list(newest.values())


def _attributed(line: BlameLine, boundary: str | None) -> BlameLine:
    # Everything at or before the boundary revision is reported as pre-history.
    if boundary and (line.boundary or line.commit == boundary):
        return BlameLine(commit="0" * 40, author=LEGACY_AUTHOR, time=0, boundary=True)
    return line


def blame_file_records(
    repo: Path,
    repository: str,
    file: str,
    *,
    cluster: str = "",
    boundary: str | None = None,
    granularity: str = "line",
    errors: list[str] | None = None,
) -> list[AuthorshipRecord]:
    revision_range = f"{boundary}..HEAD" if boundary else None
    lines = (_attributed(line, boundary) for line in stream_blame(repo, file, revision_range, errors))
    if granularity == "file":
        lines = iter(_newest_per_author(lines))
    language = language_for_path(file)
    return [
        AuthorshipRecord(
            repository=repository,
            file_path=file,
            author=line.author,
            commit_timestamp=int(line.time),
            language=language,
            cluster=cluster,
        )
        for line in lines
    ]


def read_record_cache(cache_path: Path, config: ScanConfig, errors: list[str] | None = None) -> Iterator[AuthorshipRecord]:
    for obj in iter_jsonl(cache_path, errors):
        try:
            record = AuthorshipRecord.from_json(obj)  # type: ignore[arg-type]
        except (KeyError, TypeError, ValueError, AttributeError):
            if errors is not None:
                errors.append(f"{cache_path}: malformed cache record skipped")
            continue
        if matches_globs(record.file_path, config.filename_globs, config.exclude_globs):
            yield record


def _is_blamable(path: Path, errors: list[str]) -> bool:
    try:
        st = path.stat()
    except OSError as e:
        errors.append(f"{path}: cannot stat: {e.strerror or e}")
        return False
    return path.is_file() and st.st_size > 0


def iter_repo_records(
    repo: Path,
    config: ScanConfig,
    *,
    cancel: CancelToken | None = None,
    progress: Progress | None = None,
    scan: RepoScan | None = None,
) -> Iterator[AuthorshipRecord]:
    """
    Yield one AuthorshipRecord per blamed line (or per author per file) of `repo`.

    Files come from `git ls-files` filtered by the configured globs. Each record
    is tagged with the path of the cluster its file landed in. Cancellation is
    checked between files, so the file being blamed is always finished.
    """
    toplevel = get_repo_toplevel(repo) or repo.resolve()
    repository = toplevel.name
    if scan is None:
        scan = RepoScan(repository=repository, path=str(toplevel))
    else:
        scan.repository = repository
        scan.path = str(toplevel)

    print(f"\nProcessing repository: {toplevel}", file=sys.stderr)
    cache_path = toplevel / config.cache.file_name

    if config.cache.read and cache_path.is_file():
        print(f"Reading cached records from: {cache_path}", file=sys.stderr)
        scan.from_cache = True
        for record in read_record_cache(cache_path, config, scan.errors):
            if cancel is not None and cancel.cancelled:
                return
            scan.records += 1
            yield record
        print(f"Analysis complete for '{repository}'.", file=sys.stderr)
        return

    try:
        files = ls_files(toplevel, ".", config.filename_globs, config.exclude_globs)
    except (OSError, RuntimeError) as e:
        scan.errors.append(f"{toplevel}: {e}")
        return
    files = [
        f
        for f in files
        if f != config.cache.file_name and matches_globs(f, config.filename_globs, config.exclude_globs)
    ]
    scan.files = len(files)

    lookup: dict[str, str] = {}
    if config.cluster and files:
        min_size, max_size = cluster_size_bounds(len(files))
        print(f"Clustering {len(files)} files into {min_size}..{max_size}+ sized chunks", file=sys.stderr)
        scan.clusters = cluster_files(files, max_size, min_size)
        lookup = cluster_lookup(scan.clusters)

    boundary = find_revision(toplevel, config.history_depth) if config.history_depth > 0 else None
    if boundary:
        print(f"History boundary: {boundary[:12]} ({config.history_depth} commits back)", file=sys.stderr)

    print(f"Found {len(files)} files to analyze in '{repository}'...", file=sys.stderr)

    cache_out = None
    if config.cache.write:
        cache_out = cache_path.open("w", encoding="utf-8")
    try:
        for i, file in enumerate(files, start=1):
            if cancel is not None and cancel.cancelled:
                break
            if progress is not None:
                progress.set_progress("File", i, len(files))
                progress.set_message("File", file)
            if not _is_blamable(toplevel / file, scan.errors):
                scan.files_skipped += 1
                continue
            n_errors = len(scan.errors)
            records = blame_file_records(
                toplevel,
                repository,
                file,
                cluster=lookup.get(file, ""),
                boundary=boundary,
                granularity=config.granularity,
                errors=scan.errors,
            )
            if len(scan.errors) > n_errors:
                scan.files_skipped += 1
                continue
            for record in records:
                if cache_out is not None:
                    append_jsonl(cache_out, record.to_json())
                scan.records += 1
                yield record
    finally:
        if cache_out is not None:
            cache_out.close()
        if progress is not None:
            progress.stop("File")
            progress.clear()

    print(f"Analysis complete for '{repository}'.", file=sys.stderr)


def iter_records(
    repos: Iterable[Path],
    config: ScanConfig,
    *,
    cancel: CancelToken | None = None,
    progress: Progress | None = None,
    scans: list[RepoScan] | None = None,
) -> Iterator[AuthorshipRecord]:
    for repo in repos:
        if cancel is not None and cancel.cancelled:
            return
        scan = RepoScan(repository=repo.name, path=str(repo))
        if scans is not None:
            scans.append(scan)
        yield from iter_repo_records(repo, config, cancel=cancel, progress=progress, scan=scan)
