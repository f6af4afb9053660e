"""Terminal and HTML renderers. Both read a finished :class:`ReportView` only."""

from __future__ import annotations

import html
from collections.abc import Iterable
from string import Template

import plotly.express as px

from contribstats.buckets import Granularity
from contribstats.models import ReportView, SummaryRow
from contribstats.report import series_frame

_MIN_NAME_WIDTH = 12


def render_table(view: ReportView, branch: str | None = None) -> str:
    """Return the contributor summary as a pipe table with a trailing TOTAL row."""
    width = max([len(r.contributor) for r in view.summary] + [_MIN_NAME_WIDTH])

    def row(name: str, commits, added, deleted) -> str:
        return f"| {name:<{width}} | {commits:>8} | {added:>15} | {deleted:>17} |"

    separator = f"|{'-' * (width + 2)}|{'-' * 10}|{'-' * 17}|{'-' * 19}|"

    lines: list[str] = []
    if branch:
        lines += [f"Branch: {branch}", ""]
    lines.append(row("Contributor", "Commits", "Lines added", "Lines deleted"))
    lines.append(separator)
    for r in view.summary:
        lines.append(row(r.contributor, r.commits, r.lines_added, r.lines_deleted))
    lines.append(separator)
    t = view.total
    lines.append(row(t.contributor, t.commits, t.lines_added, t.lines_deleted))
    return "\n".join(lines)


def render_timeline(view: ReportView, granularity: Granularity | str) -> str:
    """Plain-text listing of per-bucket commit counts, quiet buckets included."""
    g = Granularity(granularity)
    points = view.series.get(g.value, [])
    lines = [f"Commits per {g.label.lower()} ({len(points)} bucket(s))", ""]
    for point in points:
        active = "  ".join(f"{name}={n}" for name, n in point.commits.items() if n)
        lines.append(f"  {point.bucket_start.date()}  total={point.total:<5} {active}".rstrip())
    return "\n".join(lines)


_PAGE = Template("""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>$title</title>
<style>
  body { font-family: -apple-system, "Segoe UI", Helvetica, Arial, sans-serif; margin: 2rem; color: #222; }
  table { border-collapse: collapse; margin-bottom: 2rem; }
  th, td { padding: 0.3rem 0.8rem; border-bottom: 1px solid #ddd; }
  td.num, th.num { text-align: right; }
  tr.total td { font-weight: bold; border-top: 2px solid #888; }
  section { margin-bottom: 3rem; }
</style>
</head>
<body>
<h1>$title</h1>
<p>$subtitle</p>
<h2>Contributors</h2>
$summary_table
$sections
</body>
</html>
""")

_SECTION = Template("""<section id="$anchor">
<h2>Commits per $label</h2>
$charts
</section>
""")


def _summary_html(rows: list[SummaryRow], total: SummaryRow) -> str:
    def tr(r: SummaryRow, css: str = "") -> str:
        cls = f' class="{css}"' if css else ""
        return (
            f"<tr{cls}><td>{html.escape(r.contributor)}</td>"
            f'<td class="num">{r.commits}</td>'
            f'<td class="num">{r.lines_added}</td>'
            f'<td class="num">{r.lines_deleted}</td></tr>'
        )

    body = "\n".join(tr(r) for r in rows)
    return (
        "<table>\n<thead><tr><th>Contributor</th><th class=\"num\">Commits</th>"
        "<th class=\"num\">Lines added</th><th class=\"num\">Lines deleted</th></tr></thead>\n"
        f"<tbody>\n{body}\n{tr(total, 'total')}\n</tbody>\n</table>"
    )


def _charts_html(view: ReportView, granularity: Granularity, first: bool) -> str:
    df = series_frame(view, granularity)
    if df.empty:
        return "<p>No commits in range.</p>"

    labels = {"bucket_start": granularity.label, "commits": "Commits", "contributor": "Contributor"}
    fig_area = px.area(
        df,
        x="bucket_start",
        y="commits",
        color="contributor",
        category_orders={"contributor": view.contributors},
        labels=labels,
    )
    fig_area.update_layout(height=420, hovermode="x unified", margin=dict(l=0, r=0, t=10, b=0))

    wrap = 3
    rows = -(-len(view.contributors) // wrap)
    fig_lines = px.line(
        df,
        x="bucket_start",
        y="commits",
        color="contributor",
        facet_col="contributor",
        facet_col_wrap=wrap,
        facet_row_spacing=min(0.07, 0.5 / rows),
        category_orders={"contributor": view.contributors},
        labels=labels,
    )
    fig_lines.for_each_annotation(lambda a: a.update(text=a.text.split("=", 1)[-1]))
    fig_lines.update_layout(height=max(260, 220 * rows), showlegend=False, margin=dict(l=0, r=0, t=30, b=0))

    area_html = fig_area.to_html(full_html=False, include_plotlyjs="cdn" if first else False)
    lines_html = fig_lines.to_html(full_html=False, include_plotlyjs=False)
    return f"<h3>All contributors (stacked)</h3>\n{area_html}\n<h3>Per contributor</h3>\n{lines_html}"


def render_html(
    view: ReportView,
    title: str = "Contributor statistics",
    granularities: Iterable[Granularity | str] | None = None,
    subtitle: str = "",
) -> str:
    """Render a standalone HTML page with the summary table and time-series charts.

    Each granularity present in *view* (or only those in *granularities*) gets
    a stacked area chart and per-contributor line charts.
    """
    if granularities is None:
        selected = [Granularity(key) for key in view.series]
    else:
        selected = [Granularity(g) for g in granularities if Granularity(g).value in view.series]

    sections = []
    for index, granularity in enumerate(selected):
        sections.append(
            _SECTION.substitute(
                anchor=granularity.value,
                label=html.escape(granularity.label.lower()),
                charts=_charts_html(view, granularity, first=index == 0),
            )
        )

    return _PAGE.substitute(
        title=html.escape(title),
        subtitle=html.escape(subtitle or f"{view.total.commits} commit(s) by {len(view.summary)} contributor(s)"),
        summary_table=_summary_html(view.summary, view.total),
        sections="\n".join(sections),
    )
