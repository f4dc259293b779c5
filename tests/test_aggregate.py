from __future__ import annotations

import random

import pytest

from git_blame_stats.analysis_aggregate import aggregate, aggregate_dataset, secondary_order_for
from git_blame_stats.analysis_stream import CancelToken, RecordStream
from git_blame_stats.models import AuthorshipRecord

NOW = 1_700_000_000
DAY = 24 * 60 * 60


def _rec(author: str, *, days_ago: float = 0, repo: str = "r1", lang: str = "Python", cluster: str = "src") -> AuthorshipRecord:
    return AuthorshipRecord(
        repository=repo,
        file_path=f"{cluster}/f.py",
        author=author,
        commit_timestamp=int(NOW - days_ago * DAY),
        language=lang,
        cluster=cluster,
    )


def test_group_by_user_then_by_date() -> None:
    records = [
        _rec("alice", days_ago=1),
        _rec("alice", days_ago=7),
        _rec("alice", days_ago=8),
        _rec("bob", days_ago=400),
        _rec("bob", days_ago=2),
    ]
    result = aggregate(records, "user", "date", (7, 30), now=NOW)
    assert result.table == {
        "alice": {"Last 7 days": 2, "Last 30 days": 1},
        "bob": {"Last 7 days": 1, "Older": 1},
    }
    assert result.records == 5
    assert result.interrupted is False
    assert result.totals() == {"alice": 3, "bob": 2}


def test_date_secondaries_keep_bucket_order_with_older_last() -> None:
    records = [_rec("a", days_ago=500), _rec("a", days_ago=100), _rec("a", days_ago=3)]
    result = aggregate(records, "user", "date", (7, 180), now=NOW)
    assert list(result.table["a"]) == ["Last 7 days", "Last 180 days", "Older"]
    assert secondary_order_for(result, (7, 180)) == ["Last 7 days", "Last 180 days", "Older"]


def test_other_dimensions_sort_keys() -> None:
    records = [
        _rec("bob", repo="zeta", lang="Go"),
        _rec("alice", repo="alpha", lang="Python"),
        _rec("alice", repo="zeta", lang="Python"),
    ]
    by_repo = aggregate(records, "repo", "lang", now=NOW)
    assert list(by_repo.table) == ["alpha", "zeta"]
    assert by_repo.table["zeta"] == {"Go": 1, "Python": 1}

    by_lang = aggregate(records, "lang", "repo", now=NOW)
    assert by_lang.table == {"Go": {"zeta": 1}, "Python": {"alpha": 1, "zeta": 1}}


def test_then_by_cluster() -> None:
    records = [_rec("a", cluster="src/main"), _rec("a", cluster="src/test"), _rec("a", cluster="src/main")]
    result = aggregate(records, "user", "cluster", now=NOW)
    assert result.table == {"a": {"src/main": 2, "src/test": 1}}


def test_aggregation_is_order_independent() -> None:
    records = [_rec(a, days_ago=d, repo=r) for a in ("x", "y", "z") for d in (0, 10, 90, 1000) for r in ("r1", "r2")]
    expected = aggregate(records, "repo", "date", now=NOW).table
    rnd = random.Random(3)
    for _ in range(5):
        shuffled = list(records)
        rnd.shuffle(shuffled)
        assert aggregate(shuffled, "repo", "date", now=NOW).table == expected


def test_empty_stream_gives_empty_table() -> None:
    result = aggregate([], now=NOW)
    assert result.table == {}
    assert result.records == 0


def test_invalid_dimensions_raise_before_pulling() -> None:
    pulled: list[int] = []

    def source():
        pulled.append(1)
        yield _rec("a")

    with pytest.raises(ValueError):
        aggregate(source(), "file", "date", now=NOW)
    with pytest.raises(ValueError):
        aggregate(source(), "user", "user", now=NOW)
    assert pulled == []


def test_cancelled_aggregation_returns_partial_table() -> None:
    token = CancelToken()

    def source():
        yield _rec("a")
        yield _rec("a")
        token.cancel("user")
        yield _rec("b")
        yield _rec("b")

    result = aggregate(source(), "user", "repo", now=NOW, cancel=token)
    assert result.interrupted is True
    # The record being pulled when the token flips is kept; nothing after it is.
    assert result.table == {"a": {"r1": 2}, "b": {"r1": 1}}


def test_failing_stream_returns_partial_table_with_error() -> None:
    def source():
        yield _rec("a")
        raise OSError("broken pipe")

    result = aggregate(RecordStream(source()), "user", "repo", now=NOW)
    assert result.table == {"a": {"r1": 1}}
    assert result.interrupted is True
    assert any("broken pipe" in e for e in result.errors)


def test_aggregate_dataset_sums_counts_by_year() -> None:
    pairs = [
        (("alice", 2023, 5, "Python", "src", "r1"), 10),
        (("alice", 2024, 1, "Python", "src", "r1"), 3),
        (("bob", 2024, 2, "Go", "cmd", "r2"), 4),
        (("alice", 2024, 6, "Go", "cmd", "r2"), 1),
        (("short",), 99),
    ]
    result = aggregate_dataset(pairs, "user", "year")
    assert result.table == {"alice": {"2023": 10, "2024": 4}, "bob": {"2024": 4}}
    assert result.records == 18
    assert len(result.errors) == 1

    by_lang = aggregate_dataset(pairs, "lang", "repo")
    assert by_lang.table == {"Go": {"r2": 5}, "Python": {"r1": 13}}


def test_aggregate_dataset_rejects_unknown_dimension() -> None:
    with pytest.raises(ValueError):
        aggregate_dataset([], "user", "date")
