"""Turn an :class:`AggregationResult` into renderer-ready structures."""

from __future__ import annotations

from collections.abc import Iterable

import pandas as pd

from contribstats.buckets import Granularity
from contribstats.errors import UsageError
from contribstats.models import AggregationResult, ReportView, SeriesPoint, SummaryRow

TOTAL_LABEL = "TOTAL"


def _summary(result: AggregationResult) -> list[SummaryRow]:
    ordered = sorted(result.contributors, key=lambda s: (-s.commits, s.name))
    return [
        SummaryRow(
            contributor=s.name,
            commits=s.commits,
            lines_added=s.lines_added,
            lines_deleted=s.lines_deleted,
        )
        for s in ordered
    ]


def assemble(result: AggregationResult, granularities: Iterable[Granularity] | None = None) -> ReportView:
    """Build the summary table and per-bucket series from *result*.

    Summary rows are ordered by descending commit count, ties broken by name.
    Series values are per-bucket counts, not running totals.

    Parameters
    ----------
    result:
        Finalized aggregation. Left untouched.
    granularities:
        Series to include. Defaults to every granularity the result tracked.
    """
    wanted = tuple(dict.fromkeys(granularities)) if granularities is not None else result.granularities
    missing = [g.value for g in wanted if g not in result.series]
    if missing:
        raise UsageError(f"Aggregation did not track granularity: {', '.join(missing)}")

    summary = _summary(result)
    total = SummaryRow(
        contributor=TOTAL_LABEL,
        commits=sum(r.commits for r in summary),
        lines_added=sum(r.lines_added for r in summary),
        lines_deleted=sum(r.lines_deleted for r in summary),
    )
    names = [r.contributor for r in summary]

    series: dict[str, list[SeriesPoint]] = {}
    for granularity in wanted:
        points = []
        for point in result.series[granularity]:
            counts = {name: point.per_contributor_commits.get(name, 0) for name in names}
            points.append(SeriesPoint(bucket_start=point.bucket_start, commits=counts, total=point.total))
        series[granularity.value] = points

    return ReportView(summary=summary, total=total, contributors=names, series=series)


def series_frame(view: ReportView, granularity: Granularity | str, cumulative: bool = False) -> pd.DataFrame:
    """Long-format frame (bucket_start, contributor, commits) for chart renderers.

    With *cumulative* the counts become per-contributor running totals.
    """
    key = Granularity(granularity).value
    if key not in view.series:
        raise UsageError(f"Report has no {key!r} series")

    rows = [
        {"bucket_start": point.bucket_start, "contributor": name, "commits": count}
        for point in view.series[key]
        for name, count in point.commits.items()
    ]
    df = pd.DataFrame(rows, columns=["bucket_start", "contributor", "commits"])
    if cumulative and not df.empty:
        df["commits"] = df.groupby("contributor", sort=False)["commits"].cumsum()
    return df
