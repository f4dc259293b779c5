from __future__ import annotations

import html
import json

from .models import AggregateResult

REPORT_BANNER = r"""
+------------------------------------------------------------------------+
|                           CODE AUTHORSHIP                              |
+------------------------------------------------------------------------+
""".strip("\n")

HTML_TOP_N = 20

BUCKET_COLORS = [
    "rgba(214, 40, 40, 0.7)",
    "rgba(247, 127, 0, 0.7)",
    "rgba(252, 191, 73, 0.7)",
    "rgba(168, 218, 142, 0.7)",
    "rgba(75, 192, 192, 0.7)",
    "rgba(54, 162, 235, 0.7)",
    "rgba(153, 102, 255, 0.7)",
    "rgba(201, 203, 207, 0.7)",
]

_DIMENSION_TITLES = {
    "user": "Author",
    "repo": "Repository",
    "lang": "Language",
    "date": "Age",
    "cluster": "Cluster",
    "year": "Year",
}


def fmt_int(n: int) -> str:
    return f"{int(n):,}"


def trunc(s: str, max_len: int) -> str:
    if len(s) <= max_len:
        return s
    if max_len <= 1:
        return s[:max_len]
    return s[: max_len - 1] + "…"


def bar(value: int, max_value: int, width: int = 22) -> str:
    if max_value <= 0:
        filled = 0
    else:
        filled = int(round((value / max_value) * width))
    filled = max(0, min(width, filled))
    return "[" + ("#" * filled) + ("-" * (width - filled)) + "]"


def ranked_keys(result: AggregateResult) -> list[str]:
    totals = result.totals()
    return sorted(totals, key=lambda k: (-totals[k], k))


def render_table(result: AggregateResult, secondary_order: list[str], *, top_n: int = 0) -> str:
    """Fixed-width text table: one row per primary key, ranked by total, with a share bar."""
    totals = result.totals()
    keys = ranked_keys(result)
    if top_n > 0:
        keys = keys[:top_n]
    grand_total = sum(totals.values())
    max_total = max(totals.values(), default=0)

    primary_title = _DIMENSION_TITLES.get(result.group_by, result.group_by)
    secondary_title = _DIMENSION_TITLES.get(result.then_by, result.then_by)
    name_w = max([len(primary_title), *(len(trunc(k, 32)) for k in keys)] or [len(primary_title)])
    col_ws = [max(len(trunc(c, 18)), 8) for c in secondary_order]

    lines: list[str] = []
    lines.append(REPORT_BANNER)
    lines.append("")
    lines.append(f"{primary_title} x {secondary_title}: {fmt_int(len(totals))} rows, {fmt_int(grand_total)} lines")
    lines.append("")
    header = f"{primary_title:<{name_w}}  {'Total':>10}"
    for c, w in zip(secondary_order, col_ws):
        header += f"  {trunc(c, 18):>{w}}"
    header += "  Share"
    lines.append(header)
    lines.append("-" * len(header))
    for k in keys:
        row = result.table.get(k, {})
        line = f"{trunc(k, 32):<{name_w}}  {fmt_int(totals[k]):>10}"
        for c, w in zip(secondary_order, col_ws):
            line += f"  {fmt_int(row.get(c, 0)):>{w}}"
        line += f"  {bar(totals[k], max_total)}"
        lines.append(line)
    lines.append("-" * len(header))
    footer = f"{'Total':<{name_w}}  {fmt_int(grand_total):>10}"
    for c, w in zip(secondary_order, col_ws):
        footer += f"  {fmt_int(sum(r.get(c, 0) for r in result.table.values())):>{w}}"
    lines.append(footer)
    if result.interrupted:
        lines.append("")
        lines.append("Note: the run was interrupted; these numbers may be incomplete.")
    return "\n".join(lines) + "\n"


_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>__TITLE__</title>
<script src="https://cdn.jsdelivr.net/npm/chart.js"></script>
<style>
body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif; margin: 2rem; color: #222; }
h1 { font-size: 1.4rem; }
.note { color: #a33; }
.chart { position: relative; height: 60vh; margin-bottom: 2rem; }
table { border-collapse: collapse; width: 100%; }
th, td { padding: 4px 8px; border-bottom: 1px solid #ddd; text-align: left; }
th.num, td.num { text-align: right; }
tfoot td { font-weight: bold; }
</style>
</head>
<body>
<h1>__TITLE__</h1>
__NOTE__
<div class="chart"><canvas id="chart"></canvas></div>
<table>
<thead><tr>__TABLE_HEADERS__</tr></thead>
<tbody>
__TABLE_ROWS__
</tbody>
<tfoot><tr>__TABLE_FOOTER__</tr></tfoot>
</table>
<script>
new Chart(document.getElementById("chart"), {
  type: "bar",
  data: { labels: __CHART_LABELS_JSON__, datasets: __CHART_DATASETS_JSON__ },
  options: {
    maintainAspectRatio: false,
    plugins: { title: { display: true, text: __CHART_TITLE_JSON__ } },
    scales: { x: { stacked: true }, y: { stacked: true } }
  }
});
</script>
</body>
</html>
"""


def _json_for_script(data: object) -> str:
    return json.dumps(data).replace("</", "<\\/")


def render_html(result: AggregateResult, secondary_order: list[str], *, title: str = "Code authorship", top_n: int = HTML_TOP_N) -> str:
    """
    Self-contained HTML report: a stacked bar chart of the top `top_n` primary
    keys (one dataset per secondary key) and the full table below it.
    """
    totals = result.totals()
    keys = ranked_keys(result)
    chart_keys = keys[:top_n] if top_n > 0 else keys

    datasets = [
        {
            "label": c,
            "data": [result.table.get(k, {}).get(c, 0) for k in chart_keys],
            "backgroundColor": BUCKET_COLORS[i % len(BUCKET_COLORS)],
        }
        for i, c in enumerate(secondary_order)
    ]

    primary_title = _DIMENSION_TITLES.get(result.group_by, result.group_by)
    headers = f"<th>{html.escape(primary_title)}</th><th class=\"num\">Total</th>" + "".join(
        f"<th class=\"num\">{html.escape(c)}</th>" for c in secondary_order
    )
    rows: list[str] = []
    for k in keys:
        row = result.table.get(k, {})
        cells = "".join(f"<td class=\"num\">{fmt_int(row.get(c, 0))}</td>" for c in secondary_order)
        rows.append(f"<tr><td>{html.escape(k)}</td><td class=\"num\">{fmt_int(totals[k])}</td>{cells}</tr>")
    footer = f"<td>Total</td><td class=\"num\">{fmt_int(sum(totals.values()))}</td>" + "".join(
        f"<td class=\"num\">{fmt_int(sum(r.get(c, 0) for r in result.table.values()))}</td>" for c in secondary_order
    )
    note = ""
    if result.interrupted:
        note = '<p class="note">The run was interrupted; these numbers may be incomplete.</p>'

    chart_title = f"Lines per {primary_title} (Top {len(chart_keys)})"
    replacements = {
        "__TITLE__": html.escape(title),
        "__NOTE__": note,
        "__TABLE_HEADERS__": headers,
        "__TABLE_ROWS__": "\n".join(rows),
        "__TABLE_FOOTER__": footer,
        "__CHART_LABELS_JSON__": _json_for_script(chart_keys),
        "__CHART_DATASETS_JSON__": _json_for_script(datasets),
        "__CHART_TITLE_JSON__": _json_for_script(chart_title),
    }
    out = _HTML_TEMPLATE
    for placeholder, value in replacements.items():
        out = out.replace(placeholder, value)
    return out
