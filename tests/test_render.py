from __future__ import annotations

from git_blame_stats.analysis_render import bar, fmt_int, ranked_keys, render_html, render_table, trunc
from git_blame_stats.models import AggregateResult


def _result(**kw) -> AggregateResult:
    return AggregateResult(
        group_by="user",
        then_by="date",
        table={
            "alice": {"Last 7 days": 5, "Older": 1},
            "bob": {"Last 7 days": 10},
            "<script>": {"Older": 1},
        },
        **kw,
    )


def test_fmt_int_uses_thousands_separators() -> None:
    assert fmt_int(0) == "0"
    assert fmt_int(1234567) == "1,234,567"


def test_trunc_and_bar() -> None:
    assert trunc("abcdef", 4) == "abc…"
    assert trunc("abc", 4) == "abc"
    assert bar(5, 10, width=10) == "[#####-----]"
    assert bar(0, 0, width=4) == "[----]"


def test_ranked_keys_order_by_total_then_name() -> None:
    assert ranked_keys(_result()) == ["bob", "alice", "<script>"]


def test_render_table_has_totals_and_bucket_columns() -> None:
    out = render_table(_result(), ["Last 7 days", "Last 30 days", "Older"])
    lines = out.splitlines()
    header = next(line for line in lines if line.startswith("Author ") and "Total" in line)
    assert "Author x Age: 3 rows, 17 lines" in lines
    assert "Last 7 days" in header and "Older" in header
    bob = next(line for line in lines if line.startswith("bob"))
    assert "10" in bob
    total = lines[-1]
    assert total.startswith("Total")
    assert "17" in total
    assert "interrupted" not in out


def test_render_table_mentions_interrupted_runs() -> None:
    out = render_table(_result(interrupted=True), ["Last 7 days", "Older"])
    assert "interrupted" in out


def test_render_html_escapes_names_and_embeds_chart_data() -> None:
    page = render_html(_result(), ["Last 7 days", "Older"], title="Demo <report>")
    assert "<title>Demo &lt;report&gt;</title>" in page
    assert "<td>&lt;script&gt;</td>" in page
    assert '"label": "Last 7 days"' in page
    assert "chart.js" in page
    assert "__TABLE_ROWS__" not in page


def test_render_html_limits_chart_to_top_n() -> None:
    page = render_html(_result(), ["Last 7 days", "Older"], top_n=1)
    assert '["bob"]' in page
    assert "<td>alice</td>" in page
