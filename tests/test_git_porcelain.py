from __future__ import annotations

from git_blame_stats.git import BlameLine, parse_porcelain

A = "a" * 40
B = "b" * 40


def test_parse_porcelain_reads_author_and_committer_time() -> None:
    output = f"""{A} 1 1 1
author Alice Doe
author-mail <alice@example.com>
author-time 1700000000
author-tz +0000
committer Alice Doe
committer-mail <alice@example.com>
committer-time 1700000000
committer-tz +0000
summary Initial commit
filename example.txt
\tHello world
{B} 2 2 1
author Bob Smith
author-mail <bob@example.com>
author-time 1700100000
author-tz +0000
committer Bob Smith
committer-mail <bob@example.com>
committer-time 1700100000
committer-tz +0000
summary Update farewell line
filename example.txt
\tGoodbye world"""
    rows = list(parse_porcelain(output.split("\n")))
    assert rows == [
        BlameLine(commit=A, author="Alice Doe", time=1700000000),
        BlameLine(commit=B, author="Bob Smith", time=1700100000),
    ]


def test_parse_porcelain_repeats_state_for_grouped_lines() -> None:
    output = f"""{A} 1 1 2
author Alice Doe
committer-time 1700000000
filename example.txt
\tLine one
\tLine two
{B} 3 3 1
author Bob Smith
committer-time 1700100000
filename example.txt
\tLine three"""
    rows = list(parse_porcelain(output.split("\n")))
    assert [r.commit for r in rows] == [A, A, B]
    assert [r.author for r in rows] == ["Alice Doe", "Alice Doe", "Bob Smith"]


def test_parse_porcelain_marks_boundary() -> None:
    output = f"""^{A} 1 1 1
author Alice Doe
committer-time 1700000000
boundary
filename example.txt
\tRoot line
{B} 2 2 1
author Bob Smith
committer-time 1700100000
filename example.txt
\tNext line"""
    rows = list(parse_porcelain(output.split("\n")))
    assert rows[0] == BlameLine(commit=A, author="Alice Doe", time=1700000000, boundary=True)
    assert rows[1].boundary is False


def test_parse_porcelain_strips_angle_brackets_and_bad_times() -> None:
    output = f"""{A} 1 1 1
author <not.committed.yet>
committer-time soon
\tx"""
    rows = list(parse_porcelain(output.split("\n")))
    assert rows == [BlameLine(commit=A, author="not.committed.yet", time=0)]


def test_source_lines_that_look_like_headers_are_not_parsed() -> None:
    output = f"""{A} 1 1 1
author Alice
committer-time 1
\tauthor Mallory
{A} 2 2 1
author Alice
committer-time 1
\t{B} 1 1 1"""
    rows = list(parse_porcelain(output.split("\n")))
    assert [r.author for r in rows] == ["Alice", "Alice"]
    assert [r.commit for r in rows] == [A, A]
