from __future__ import annotations

from git_blame_stats.analysis_trie import PathTrie


def test_weights_count_files_below_each_node() -> None:
    trie = PathTrie.from_paths(["src/a.py", "src/b.py", "src/lib/c.py", "README.md"])
    assert len(trie) == 4
    assert trie.find("src").weight == 3
    assert trie.weight(trie.find("src")) == 3
    assert trie.weight() == 4
    assert trie.find("src/lib").weight == 1
    assert trie.find("README.md").file == "README.md"
    assert trie.find("nope") is None


def test_duplicate_insert_leaves_weights_untouched() -> None:
    trie = PathTrie()
    assert trie.insert("a/b.py") is True
    assert trie.insert("./a/b.py") is False
    assert trie.insert(("a", "b.py")) is False
    assert trie.weight() == 1
    assert trie.find("a").weight == 1


def test_malformed_paths_are_rejected() -> None:
    trie = PathTrie.from_paths(["ok.py", "", "a//b.py", "../up.py", "a/./b.py"])
    assert len(trie) == 1
    assert trie.rejected == ["", "a//b.py", "../up.py", "a/./b.py"]


def test_structure_does_not_depend_on_insertion_order() -> None:
    paths = ["x/y/z.py", "x/a.py", "b.py", "x/y/w.py"]
    t1 = PathTrie.from_paths(paths)
    t2 = PathTrie.from_paths(list(reversed(paths)))
    assert list(t1.root.iter_files()) == list(t2.root.iter_files())
    assert list(t1.root.iter_files()) == ["b.py", "x/a.py", "x/y/w.py", "x/y/z.py"]
    assert [name for name, _ in t1.root.sorted_children()] == ["b.py", "x"]


def test_file_and_directory_may_share_a_prefix() -> None:
    trie = PathTrie.from_paths(["docs", "docs/index.md"])
    node = trie.find("docs")
    assert node.file == "docs"
    assert node.weight == 2
    assert sorted(node.iter_files()) == ["docs", "docs/index.md"]
