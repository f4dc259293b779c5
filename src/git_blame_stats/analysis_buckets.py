from __future__ import annotations

import datetime as dt

SECONDS_PER_DAY = 24 * 60 * 60
OLDER_LABEL = "Older"


def parse_day_buckets(value: str | int | list[int] | tuple[int, ...]) -> tuple[int, ...]:
    if isinstance(value, str):
        raw = [s.strip() for s in value.split(",")]
    elif isinstance(value, int):
        raw = [value]
    else:
        raw = list(value)
    out: list[int] = []
    for v in raw:
        try:
            d = int(v)
        except (TypeError, ValueError):
            continue
        if d > 0:
            out.append(d)
    if not out:
        raise ValueError(f"Invalid day buckets: {value!r} (expected a comma-separated list of positive numbers)")
    return tuple(sorted(set(out)))


def age_in_days(commit_timestamp: int, now: float) -> float:
    return (now - commit_timestamp) / SECONDS_PER_DAY


def bucket_label(day: int) -> str:
    return f"Last {day} days"


def bucket_for_age(age_days: float, day_buckets: tuple[int, ...] | list[int]) -> str:
    for d in day_buckets:
        if age_days <= d:
            return bucket_label(d)
    return OLDER_LABEL


def bucket_labels(day_buckets: tuple[int, ...] | list[int]) -> list[str]:
    return [bucket_label(d) for d in day_buckets] + [OLDER_LABEL]


def year_month(commit_timestamp: int) -> tuple[int, int]:
    d = dt.datetime.fromtimestamp(int(commit_timestamp), tz=dt.timezone.utc)
    return d.year, d.month
