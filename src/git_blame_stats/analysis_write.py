from __future__ import annotations

import csv
import json
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import TextIO

from .analysis_dataset import dataset_rows
from .models import AggregateResult, AuthorshipRecord

CSV_HEADER = ["repositoryName", "filePath", "language", "username", "commitTimestamp"]


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def result_to_json(result: AggregateResult) -> dict[str, object]:
    return {
        "group_by": result.group_by,
        "then_by": result.then_by,
        "records": result.records,
        "interrupted": result.interrupted,
        "totals": result.totals(),
        "table": result.table,
        "errors": list(result.errors),
    }


def write_records_csv(out: TextIO, records: Iterable[AuthorshipRecord]) -> int:
    """Stream raw records as CSV rows; returns the number of rows written."""
    writer = csv.writer(out)
    writer.writerow(CSV_HEADER)
    n = 0
    for r in records:
        writer.writerow([r.repository, r.file_path, r.language, r.author, r.commit_timestamp])
        n += 1
    return n


def append_jsonl(out: TextIO, obj: object) -> None:
    out.write(json.dumps(obj, ensure_ascii=False, separators=(",", ":")) + "\n")


def iter_jsonl(path: Path, errors: list[str] | None = None) -> Iterator[object]:
    """Yield parsed JSON lines; blank lines are ignored, unparsable ones skipped."""
    with path.open("r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                if errors is not None:
                    errors.append(f"{path}:{lineno}: invalid JSON line skipped: {e.msg}")


def write_dataset_jsonl(out: TextIO, pairs: Iterable[tuple[tuple, int]]) -> int:
    rows = dataset_rows(pairs)
    for row in rows:
        append_jsonl(out, row)
    return len(rows)


def read_dataset_jsonl(paths: Iterable[Path], errors: list[str] | None = None) -> Iterator[list[object]]:
    """Rows of one or more dataset files; each row keeps its trailing count column."""
    for path in paths:
        for obj in iter_jsonl(path, errors):
            if not isinstance(obj, list) or len(obj) < 2:
                if errors is not None:
                    errors.append(f"{path}: dataset line is not a row list: {obj!r}"[:300])
            elif not isinstance(obj[-1], int) or isinstance(obj[-1], bool):
                if errors is not None:
                    errors.append(f"{path}: dataset row has no numeric count: {obj!r}"[:300])
            else:
                yield obj
