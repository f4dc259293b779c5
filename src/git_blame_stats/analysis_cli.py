from __future__ import annotations

import argparse
from pathlib import Path

from .analysis_aggregate import DATASET_THEN_BY_CHOICES
from .analysis_run import run_analysis, run_html, run_scan
from .models import GRANULARITIES, GROUP_BY_CHOICES, OUTPUT_FORMATS, THEN_BY_CHOICES

DEFAULT_DATASET_PATH = Path(".git-stats") / "data.jsonl"
DEFAULT_DATASET_HTML_PATH = Path(".git-stats") / "report.html"


def _add_extraction_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", type=Path, default=None, help="Path to a JSON config (default: .gitstats.config.json in the target).")
    parser.add_argument("--repo", dest="additional_repo_paths", action="append", default=[], help="Additional repository path (repeatable).")
    parser.add_argument("--include", dest="filename_globs", action="append", default=[], help="Only blame files matching this glob (repeatable).")
    parser.add_argument("--exclude", dest="exclude_globs", action="append", default=[], help="Skip files matching this glob (repeatable).")
    parser.add_argument("--granularity", choices=GRANULARITIES, default=None, help="Count every line, or one record per author per file.")
    parser.add_argument(
        "--history-depth",
        type=int,
        default=None,
        help="Attribute lines older than this many commits to 'Legacy' (0 = full history).",
    )
    parser.add_argument("--no-cluster", dest="cluster", action="store_const", const=False, default=None, help="Do not group files into clusters.")
    parser.add_argument("--discovery-depth", type=int, default=None, help="How many directory levels to search for repositories.")
    parser.add_argument("--cache-read", action="store_const", const=True, default=None, help="Read records from the per-repo cache file when present.")
    parser.add_argument("--cache-write", action="store_const", const=True, default=None, help="Write extracted records to the per-repo cache file.")
    parser.add_argument("--cache-file", type=str, default=None, help="Cache file name inside each repository.")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Count surviving lines of code per author, repository, language, age or cluster.")
    parser.add_argument("target", nargs="?", default=None, help="Repository, or directory to search for repositories (default: .).")
    _add_extraction_args(parser)
    parser.add_argument("--format", dest="output_format", choices=OUTPUT_FORMATS, default=None, help="Output format.")
    parser.add_argument("--html-output", dest="html_output_file", type=str, default=None, help="Where --format html writes its report.")
    parser.add_argument("--group-by", choices=GROUP_BY_CHOICES, default=None, help="Primary dimension.")
    parser.add_argument("--then-by", choices=THEN_BY_CHOICES, default=None, help="Secondary dimension.")
    parser.add_argument("--day-buckets", type=str, default=None, help="Comma-separated age buckets in days (e.g. 7,30,180,365).")
    return parser


def _build_scan_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-blame-stats scan",
        description="Scan repositories and print distinct (author, year, month, language, cluster, repository) rows with counts as JSON lines.",
    )
    parser.add_argument("paths", nargs="*", help="Repositories or directories to search (default: .).")
    _add_extraction_args(parser)
    parser.add_argument("--output", type=Path, default=None, help="Write JSON lines here instead of stdout.")
    return parser


def _build_html_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="git-blame-stats html", description="Render an HTML report from one or more scan datasets.")
    parser.add_argument("inputs", nargs="*", type=Path, help=f"Dataset files written by `scan` (default: {DEFAULT_DATASET_PATH}).")
    parser.add_argument("--output", type=Path, default=DEFAULT_DATASET_HTML_PATH, help="HTML report path.")
    parser.add_argument("--group-by", choices=GROUP_BY_CHOICES, default="user", help="Primary dimension.")
    parser.add_argument("--then-by", choices=DATASET_THEN_BY_CHOICES, default="year", help="Secondary dimension.")
    return parser


def main(argv: list[str]) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return run_analysis(args=args)


def scan_main(argv: list[str]) -> int:
    args = _build_scan_parser().parse_args(argv)
    return run_scan(args=args)


def html_main(argv: list[str]) -> int:
    args = _build_html_parser().parse_args(argv)
    return run_html(args=args, default_input=DEFAULT_DATASET_PATH)
