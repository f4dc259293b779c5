from __future__ import annotations

import math
from collections.abc import Iterable

from .analysis_paths import split_path
from .analysis_trie import PathTrie, TrieNode
from .models import Cluster

SIBLING_ORDERS = ("name", "weight")


def cluster_size_bounds(file_count: int) -> tuple[int, int]:
    """Return (min_size, max_size) for a repository with `file_count` tracked files."""
    n = max(0, int(file_count))
    min_size = int(math.floor(max(2, n / 100)))
    max_size = int(math.floor(max(20, n / 30) + 0.5))
    return min_size, max_size


def _common_prefix(paths: list[tuple[str, ...]]) -> tuple[str, ...]:
    if not paths:
        return ()
    first = min(paths)
    last = max(paths)
    i = 0
    while i < len(first) and i < len(last) and first[i] == last[i]:
        i += 1
    return first[:i]


def make_cluster(files: Iterable[str]) -> Cluster:
    members = frozenset(files)
    label = _common_prefix([split_path(f) for f in members])
    return Cluster(label=label, files=members, weight=len(members))


def _merge(a: Cluster, b: Cluster) -> Cluster:
    return make_cluster(a.files | b.files)


def _is_flat_dir(node: TrieNode) -> bool:
    return bool(node.children) and all(child.is_leaf for child in node.children.values())


def _resolve(
    node: TrieNode,
    *,
    max_size: int,
    min_size: int,
    order: str,
    out: list[Cluster],
) -> list[Cluster]:
    # Returns the candidates still open for merging; final clusters go to `out`.
    if node.weight <= max_size or _is_flat_dir(node):
        return [make_cluster(node.iter_files())]

    candidates: list[Cluster] = []
    if node.file is not None:
        candidates.append(make_cluster([node.file]))
    for _, child in node.sorted_children():
        candidates.extend(_resolve(child, max_size=max_size, min_size=min_size, order=order, out=out))
    if order == "weight":
        candidates.sort(key=lambda c: (c.weight, c.label))

    pending: Cluster | None = None
    for cand in candidates:
        if pending is None:
            if cand.weight < min_size:
                pending = cand
            else:
                out.append(cand)
            continue
        if cand.weight < min_size or pending.weight + cand.weight <= max_size:
            pending = _merge(pending, cand)
            if pending.weight >= min_size:
                out.append(pending)
                pending = None
        else:
            out.append(cand)

    if pending is None:
        return []
    return [pending]


def cluster_files(
    file_paths: Iterable[str | tuple[str, ...]],
    max_size: int,
    min_size: int,
    *,
    order: str = "name",
) -> list[Cluster]:
    """
    Partition file paths into directory-local clusters.

    Subtrees of at most `max_size` files become one cluster. Bigger directories
    are split along their children; undersized pieces (< `min_size`) are merged
    with their next sibling, or carried up to the parent when none is left.
    A flat directory is never split below file granularity, so it may exceed
    `max_size`; an undersized piece that reaches the root stays on its own.

    Malformed paths are skipped. Every valid input path lands in exactly one
    cluster, and the result does not depend on input order.
    """
    if order not in SIBLING_ORDERS:
        raise ValueError(f"Invalid sibling order: {order!r} (expected one of {', '.join(SIBLING_ORDERS)})")
    trie = PathTrie.from_paths(file_paths)
    out: list[Cluster] = []
    if len(trie) == 0:
        return out
    leftover = _resolve(trie.root, max_size=max_size, min_size=min_size, order=order, out=out)
    out.extend(leftover)
    return out


def cluster_lookup(clusters: Iterable[Cluster]) -> dict[str, str]:
    lookup: dict[str, str] = {}
    for c in clusters:
        for f in c.files:
            lookup[f] = c.path
    return lookup
