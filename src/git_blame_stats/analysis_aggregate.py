from __future__ import annotations

import time
from collections import defaultdict
from collections.abc import Iterable

from .analysis_buckets import age_in_days, bucket_for_age, bucket_labels
from .analysis_stream import CancelToken, as_record_stream
from .models import (
    DEFAULT_DAY_BUCKETS,
    GROUP_BY_CHOICES,
    THEN_BY_CHOICES,
    AggregateResult,
    AggregateTable,
    AuthorshipRecord,
)

DATASET_COLUMNS = ("author", "year", "month", "language", "cluster", "repository")
DATASET_THEN_BY_CHOICES = ("repo", "lang", "cluster", "year")

_PRIMARY_FIELDS = {"user": "author", "repo": "repository", "lang": "language"}
_SECONDARY_FIELDS = {"repo": "repository", "lang": "language", "cluster": "cluster"}


def validate_dimensions(group_by: str, then_by: str) -> None:
    if group_by not in GROUP_BY_CHOICES:
        raise ValueError(f"Invalid group_by: {group_by!r} (expected one of {', '.join(GROUP_BY_CHOICES)})")
    if then_by not in THEN_BY_CHOICES:
        raise ValueError(f"Invalid then_by: {then_by!r} (expected one of {', '.join(THEN_BY_CHOICES)})")


def primary_key_for(record: AuthorshipRecord, group_by: str) -> str:
    return str(getattr(record, _PRIMARY_FIELDS[group_by]))


def secondary_key_for(record: AuthorshipRecord, then_by: str, day_buckets: tuple[int, ...], now: float) -> str:
    if then_by == "date":
        return bucket_for_age(age_in_days(record.commit_timestamp, now), day_buckets)
    return str(getattr(record, _SECONDARY_FIELDS[then_by]))


def finalize_table(table: dict[str, dict[str, int]], *, secondary_order: list[str] | None = None) -> AggregateTable:
    rank = {k: i for i, k in enumerate(secondary_order or [])}

    def sort_key(k: str) -> tuple[int, str]:
        return (rank.get(k, len(rank)), k)

    out: AggregateTable = {}
    for primary in sorted(table):
        row = table[primary]
        out[primary] = {k: int(row[k]) for k in sorted(row, key=sort_key)}
    return out


def aggregate(
    records: Iterable[AuthorshipRecord],
    group_by: str = "user",
    then_by: str = "date",
    day_buckets: tuple[int, ...] | list[int] = DEFAULT_DAY_BUCKETS,
    *,
    now: float | None = None,
    cancel: CancelToken | None = None,
) -> AggregateResult:
    """
    Count records into table[primary][secondary].

    `then_by="date"` puts each record into the first day bucket its age fits
    (age <= bucket), falling back to "Older". The stream is pulled until it
    ends, fails or is cancelled; in the last two cases the partial table is
    returned with `interrupted=True`.
    """
    validate_dimensions(group_by, then_by)
    buckets = tuple(int(d) for d in day_buckets)
    if now is None:
        now = time.time()

    stream = as_record_stream(records, cancel)
    counts: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
    n = 0
    for record in stream:
        counts[primary_key_for(record, group_by)][secondary_key_for(record, then_by, buckets, now)] += 1
        n += 1

    order = bucket_labels(buckets) if then_by == "date" else None
    return AggregateResult(
        group_by=group_by,
        then_by=then_by,
        table=finalize_table(counts, secondary_order=order),
        records=n,
        interrupted=stream.interrupted,
        errors=list(stream.errors),
    )


def aggregate_dataset(
    pairs: Iterable[tuple[tuple, int]],
    group_by: str = "user",
    then_by: str = "year",
) -> AggregateResult:
    """Aggregate distinct-count dataset rows (see DATASET_COLUMNS) into a table."""
    if group_by not in GROUP_BY_CHOICES:
        raise ValueError(f"Invalid group_by: {group_by!r} (expected one of {', '.join(GROUP_BY_CHOICES)})")
    if then_by not in DATASET_THEN_BY_CHOICES:
        raise ValueError(f"Invalid then_by: {then_by!r} (expected one of {', '.join(DATASET_THEN_BY_CHOICES)})")
    primary_col = DATASET_COLUMNS.index({"user": "author", "repo": "repository", "lang": "language"}[group_by])
    secondary_col = DATASET_COLUMNS.index(
        {"repo": "repository", "lang": "language", "cluster": "cluster", "year": "year"}[then_by]
    )

    counts: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
    n = 0
    errors: list[str] = []
    for row, count in pairs:
        if len(row) < len(DATASET_COLUMNS):
            errors.append(f"short dataset row skipped: {list(row)!r}")
            continue
        counts[str(row[primary_col])][str(row[secondary_col])] += int(count)
        n += int(count)
    return AggregateResult(
        group_by=group_by,
        then_by=then_by,
        table=finalize_table(counts),
        records=n,
        errors=errors,
    )


def secondary_order_for(result: AggregateResult, day_buckets: tuple[int, ...] | list[int]) -> list[str]:
    if result.then_by == "date":
        return bucket_labels(day_buckets)
    return sorted(result.secondary_keys())
