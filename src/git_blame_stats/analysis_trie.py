from __future__ import annotations

from collections.abc import Iterable, Iterator

from .analysis_paths import join_path, split_path


class TrieNode:
    __slots__ = ("name", "children", "weight", "file")

    def __init__(self, name: str = "") -> None:
        self.name = name
        self.children: dict[str, TrieNode] = {}
        self.weight = 0
        # Set when a file path terminates exactly at this node.
        self.file: str | None = None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def sorted_children(self) -> list[tuple[str, TrieNode]]:
        return sorted(self.children.items())

    def iter_files(self) -> Iterator[str]:
        if self.file is not None:
            yield self.file
        for _, child in self.sorted_children():
            yield from child.iter_files()


class PathTrie:
    """
    Prefix tree over repository-relative file paths.

    Each node's `weight` is the number of distinct files at or below it.
    Structure depends only on the set of inserted paths, not on insertion order.
    """

    def __init__(self) -> None:
        self.root = TrieNode()
        self.rejected: list[str] = []

    @classmethod
    def from_paths(cls, paths: Iterable[str | tuple[str, ...]]) -> PathTrie:
        trie = cls()
        for p in paths:
            try:
                trie.insert(p)
            except ValueError:
                trie.rejected.append(p if isinstance(p, str) else join_path(tuple(p)))
        return trie

    def insert(self, path: str | tuple[str, ...]) -> bool:
        parts = split_path(path)
        file_key = join_path(parts)

        # Walk first so a duplicate insert leaves weights untouched.
        chain = [self.root]
        node = self.root
        for part in parts:
            nxt = node.children.get(part)
            if nxt is None:
                nxt = TrieNode(part)
                node.children[part] = nxt
            node = nxt
            chain.append(node)
        if node.file is not None:
            return False
        node.file = file_key
        for n in chain:
            n.weight += 1
        return True

    def weight(self, node: TrieNode | None = None) -> int:
        return (node or self.root).weight

    def __len__(self) -> int:
        return self.root.weight

    def find(self, path: str | tuple[str, ...]) -> TrieNode | None:
        node = self.root
        for part in split_path(path):
            node = node.children.get(part)
            if node is None:
                return None
        return node
