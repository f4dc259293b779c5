from __future__ import annotations

import argparse
import contextlib
import json
import signal
import sys
from collections.abc import Iterator
from pathlib import Path

from .analysis_aggregate import aggregate, aggregate_dataset, secondary_order_for
from .analysis_buckets import year_month
from .analysis_dataset import distinct_count
from .analysis_progress import Progress
from .analysis_render import render_html, render_table
from .analysis_repo import iter_records
from .analysis_selection import repo_paths_to_process
from .analysis_stream import CancelToken, RecordStream
from .analysis_write import ensure_dir, read_dataset_jsonl, result_to_json, write_dataset_jsonl, write_records_csv
from .config import build_config, read_config_file
from .models import RepoScan, ScanConfig

_CONFIG_ARG_KEYS = (
    "additional_repo_paths",
    "output_format",
    "html_output_file",
    "filename_globs",
    "exclude_globs",
    "group_by",
    "then_by",
    "day_buckets",
    "granularity",
    "history_depth",
    "cluster",
    "discovery_depth",
    "cache_read",
    "cache_write",
    "cache_file",
)


def format_startup_header(config: ScanConfig, *, mode: str) -> str:
    lines = [
        "┌──────────────────────────────────────────────────────────────┐",
        "│                        git-blame-stats                        │",
        "└──────────────────────────────────────────────────────────────┘",
        "",
        "What to expect:",
        f"- Target: {Path(config.target_path).resolve()}",
    ]
    if config.additional_repo_paths:
        lines.append(f"- Additional repos: {', '.join(config.additional_repo_paths)}")
    if mode == "analyze":
        lines.append(f"- Grouping: {config.group_by} then {config.then_by}  Output: {config.output_format}")
    else:
        lines.append("- Output: distinct (author, year, month, language, cluster, repository) rows as JSON lines")
    cache_modes = [m for m, on in (("read", config.cache.read), ("write", config.cache.write)) if on]
    lines.append(
        f"- Granularity: {config.granularity}  History depth: {config.history_depth or 'full'}  "
        f"Clusters: {'on' if config.cluster else 'off'}  Cache: {'+'.join(cache_modes) or 'off'}"
    )
    lines.append("- Press Ctrl+C once to stop with partial results, twice to exit immediately")
    lines.append("")
    return "\n".join(lines)


@contextlib.contextmanager
def sigint_cancels(cancel: CancelToken) -> Iterator[None]:
    """First Ctrl+C cancels `cancel`; the second exits with status 130."""

    def handler(signum, frame) -> None:
        if cancel.cancelled:
            print("\nForcing exit.", file=sys.stderr)
            raise SystemExit(130)
        cancel.cancel("interrupted by user")
        print("\nSignal received. Stopping and keeping partial results. Press Ctrl+C again to exit immediately.", file=sys.stderr)

    try:
        previous = signal.signal(signal.SIGINT, handler)
    except ValueError:
        # Not on the main thread: leave signal handling alone.
        yield
        return
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def load_scan_config(args: argparse.Namespace, target: str | None) -> ScanConfig:
    cli = {k: getattr(args, k, None) for k in _CONFIG_ARG_KEYS}
    cli["target_path"] = target
    try:
        file_cfg = read_config_file(getattr(args, "config", None), Path(target or ".").resolve())
        return build_config(cli, file_cfg)
    except (OSError, ValueError) as e:
        raise SystemExit(f"Invalid configuration: {e}")


def _discover(config: ScanConfig, inputs: list[str]) -> list[Path]:
    try:
        repos = repo_paths_to_process([*inputs, *config.additional_repo_paths], config.discovery_depth)
    except ValueError as e:
        raise SystemExit(str(e))
    if repos:
        print(f"Found {len(repos)} repositories to analyze:", file=sys.stderr)
        for r in repos:
            print(f"- {r}", file=sys.stderr)
    else:
        print(f"No git repositories found under: {', '.join(inputs)}", file=sys.stderr)
    return repos


def _print_summary(scans: list[RepoScan], extra_errors: list[str], interrupted: bool) -> None:
    errors = [e for s in scans for e in s.errors] + list(extra_errors)
    skipped = sum(s.files_skipped for s in scans)
    if skipped or errors:
        print(f"{skipped} files skipped; first errors:", file=sys.stderr)
        for e in errors[:5]:
            print(f"  {e}", file=sys.stderr)
    if interrupted:
        print("Note: the run was interrupted; the report may be incomplete.", file=sys.stderr)


def run_analysis(*, args: argparse.Namespace) -> int:
    config = load_scan_config(args, getattr(args, "target", None))
    print(format_startup_header(config, mode="analyze"), file=sys.stderr)

    repos = _discover(config, [config.target_path])
    if not repos:
        return 2

    cancel = CancelToken()
    progress = Progress()
    scans: list[RepoScan] = []
    records = iter_records(repos, config, cancel=cancel, progress=progress, scans=scans)

    with sigint_cancels(cancel):
        try:
            if config.output_format == "csv":
                stream = RecordStream(records, cancel)
                write_records_csv(sys.stdout, stream)
                sys.stdout.flush()
                result = None
            else:
                result = aggregate(records, config.group_by, config.then_by, config.day_buckets, cancel=cancel)
        finally:
            progress.close()

    if result is None:
        _print_summary(scans, stream.errors, stream.interrupted or cancel.cancelled)
        return 0

    result.interrupted = result.interrupted or cancel.cancelled
    order = secondary_order_for(result, config.day_buckets)

    if config.output_format == "json":
        print(json.dumps(result_to_json(result), indent=2))
    elif config.output_format == "html":
        out_path = Path(config.html_output_file).resolve()
        ensure_dir(out_path.parent)
        out_path.write_text(render_html(result, order), encoding="utf-8")
        print(f"HTML report generated: {out_path}", file=sys.stderr)
    else:
        sys.stdout.write(render_table(result, order))

    _print_summary(scans, result.errors, result.interrupted)
    print("Done.", file=sys.stderr)
    return 0


def run_scan(*, args: argparse.Namespace) -> int:
    inputs = [str(p) for p in (args.paths or ["."])]
    config = load_scan_config(args, inputs[0])
    print(format_startup_header(config, mode="scan"), file=sys.stderr)

    repos = _discover(config, inputs)
    if not repos:
        return 2

    cancel = CancelToken()
    progress = Progress()
    scans: list[RepoScan] = []
    stream = RecordStream(iter_records(repos, config, cancel=cancel, progress=progress, scans=scans), cancel)
    rows = ((r.author, *year_month(r.commit_timestamp), r.language, r.cluster, r.repository) for r in stream)

    with sigint_cancels(cancel):
        try:
            pairs = distinct_count(rows)
        finally:
            progress.close()

    if args.output is not None:
        ensure_dir(args.output.resolve().parent)
        with args.output.open("w", encoding="utf-8") as f:
            n = write_dataset_jsonl(f, pairs)
        print(f"Wrote {n} dataset rows to: {args.output}", file=sys.stderr)
    else:
        write_dataset_jsonl(sys.stdout, pairs)
        sys.stdout.flush()

    _print_summary(scans, stream.errors, stream.interrupted or cancel.cancelled)
    return 0


def run_html(*, args: argparse.Namespace, default_input: Path) -> int:
    inputs = list(args.inputs or [default_input])
    missing = [p for p in inputs if not p.is_file()]
    if missing:
        for p in missing:
            print(f"Input data file not found: {p.resolve()}", file=sys.stderr)
        return 1

    errors: list[str] = []
    # Rows from several scans are merged by summing their trailing count column.
    pairs = distinct_count(read_dataset_jsonl(inputs, errors), multiplicity_index=-1)
    result = aggregate_dataset(pairs, args.group_by, args.then_by)
    result.errors = errors + result.errors

    out_path = args.output.resolve()
    ensure_dir(out_path.parent)
    out_path.write_text(render_html(result, secondary_order_for(result, ()), title="Code authorship by year"), encoding="utf-8")
    print(f"HTML report generated: {out_path}", file=sys.stderr)
    _print_summary([], result.errors, False)
    return 0
