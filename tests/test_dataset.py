from __future__ import annotations

from git_blame_stats.analysis_dataset import dataset_rows, distinct_count


def test_distinct_count_groups_rows_in_first_seen_order() -> None:
    rows = [
        ["alice", 2024, "Python"],
        ["bob", 2024, "Go"],
        ["alice", 2024, "Python"],
        ["alice", 2023, "Python"],
        ["bob", 2024, "Go"],
        ["alice", 2024, "Python"],
    ]
    assert distinct_count(rows) == [
        (("alice", 2024, "Python"), 3),
        (("bob", 2024, "Go"), 2),
        (("alice", 2023, "Python"), 1),
    ]


def test_distinct_count_compares_nested_lists_by_value() -> None:
    rows = [["a", [1, 2]], ("a", [1, 2]), ["a", [2, 1]]]
    pairs = distinct_count(rows)
    assert [count for _, count in pairs] == [2, 1]


def test_distinct_count_keeps_bools_apart_from_ints() -> None:
    pairs = distinct_count([("a", True), ("a", 1), ("a", True)])
    assert pairs == [(("a", True), 2), (("a", 1), 1)]
    assert isinstance(pairs[0][0][1], bool)
    assert not isinstance(pairs[1][0][1], bool)


def test_distinct_count_keeps_dicts_apart_from_pair_lists() -> None:
    rows = [("a", {"k": 1}), ("a", [["k", 1]]), ("a", {"k": 1})]
    assert [count for _, count in distinct_count(rows)] == [2, 1]


def test_distinct_count_compares_dict_keys_by_type_not_text() -> None:
    rows = [("a", {1: "x"}), ("a", {"1": "x"})]
    assert [count for _, count in distinct_count(rows)] == [1, 1]


def test_distinct_count_ignores_dict_key_order() -> None:
    rows = [("a", {"x": 1, "y": [2]}), ("a", {"y": [2], "x": 1})]
    assert [count for _, count in distinct_count(rows)] == [2]


def test_distinct_count_drains_a_generator() -> None:
    pulled: list[int] = []

    def gen():
        for i in range(10):
            pulled.append(i)
            yield ("x",)

    assert distinct_count(gen()) == [(("x",), 10)]
    assert len(pulled) == 10


def test_distinct_count_sums_embedded_counts() -> None:
    rows = [
        ["alice", 2024, 5],
        ["bob", 2024, 1],
        ["alice", 2024, 2],
    ]
    assert distinct_count(rows, multiplicity_index=-1) == [
        (("alice", 2024), 7),
        (("bob", 2024), 1),
    ]
    assert distinct_count(rows, multiplicity_index=2) == distinct_count(rows, multiplicity_index=-1)


def test_distinct_count_of_nothing_is_empty() -> None:
    assert distinct_count([]) == []


def test_dataset_rows_append_count_column() -> None:
    assert dataset_rows([(("a", 1), 3), (("b", 2), 1)]) == [["a", 1, 3], ["b", 2, 1]]
