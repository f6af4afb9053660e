"""Accumulate per-contributor totals and per-bucket commit counts."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from datetime import datetime, timezone, tzinfo
from types import MappingProxyType

from contribstats.aliases import AliasTable
from contribstats.buckets import ALL_GRANULARITIES, Granularity, bucket_range
from contribstats.buckets import bucket_start as compute_bucket_start
from contribstats.errors import UsageError
from contribstats.models import AggregationResult, ContributorStats, RawCommit, TimeSeriesPoint

logger = logging.getLogger(__name__)


class Aggregator:
    """Single-run accumulator. Not thread-safe; one instance per analysis run.

    Parameters
    ----------
    alias_table:
        Shared, read-only alias table. Defaults to an empty table (identity).
    granularities:
        Bucket lengths to track. Defaults to all of them.
    tz:
        Reference timezone for bucket boundaries. UTC by default, so commits
        recorded with different offsets fall on the same bucket grid. ``None``
        buckets each commit by its own local calendar and yields naive
        bucket starts.
    """

    def __init__(
        self,
        alias_table: AliasTable | None = None,
        granularities: Iterable[Granularity] = ALL_GRANULARITIES,
        tz: tzinfo | None = timezone.utc,
    ) -> None:
        self.alias_table = alias_table if alias_table is not None else AliasTable()
        self.granularities: tuple[Granularity, ...] = tuple(dict.fromkeys(granularities))
        self.tz = tz
        self._stats: dict[str, ContributorStats] = {}
        self._buckets: dict[Granularity, dict[datetime, Counter[str]]] = {g: {} for g in self.granularities}
        self._ingested = 0
        self._finalized = False

    @property
    def ingested(self) -> int:
        return self._ingested

    def ingest(self, commit: RawCommit) -> str:
        """Account for one commit and return the contributor it was attributed to."""
        if self._finalized:
            raise UsageError("ingest() called after finalize()")

        name = self.alias_table.resolve(commit.author)
        stats = self._stats.get(name) or ContributorStats(name=name)
        self._stats[name] = stats.plus(commit)

        for granularity in self.granularities:
            start = compute_bucket_start(commit.timestamp, granularity, self.tz)
            if self.tz is None:
                # each commit's own wall clock; drop the offset so all keys share one grid
                start = start.replace(tzinfo=None)
            self._buckets[granularity].setdefault(start, Counter())[name] += 1

        self._ingested += 1
        if name != commit.author:
            logger.debug("%s: %r merged into %r", commit.sha or "commit", commit.author, name)
        return name

    def ingest_all(self, commits: Iterable[RawCommit]) -> int:
        """Ingest a whole stream; errors raised by the stream propagate unchanged."""
        count = 0
        for commit in commits:
            self.ingest(commit)
            count += 1
        logger.info("Ingested %d commit(s) from %d contributor(s)", count, len(self._stats))
        return count

    def _series(self, granularity: Granularity) -> tuple[TimeSeriesPoint, ...]:
        buckets = self._buckets[granularity]
        if not buckets:
            return ()
        points = []
        for start in bucket_range(min(buckets), max(buckets), granularity):
            counts = buckets.get(start, Counter())
            points.append(TimeSeriesPoint(bucket_start=start, per_contributor_commits=MappingProxyType(dict(counts))))
        return tuple(points)

    def finalize(self) -> AggregationResult:
        """Close accumulation and return the result. May be called once."""
        if self._finalized:
            raise UsageError("finalize() called twice")
        self._finalized = True

        contributors = tuple(sorted(self._stats.values(), key=lambda s: s.name))
        series = MappingProxyType({g: self._series(g) for g in self.granularities})
        return AggregationResult(contributors=contributors, series=series, granularities=self.granularities)


def aggregate(
    commits: Iterable[RawCommit],
    alias_table: AliasTable | None = None,
    granularities: Iterable[Granularity] = ALL_GRANULARITIES,
    tz: tzinfo | None = timezone.utc,
) -> AggregationResult:
    """Run a fresh :class:`Aggregator` over *commits* and return its result."""
    aggregator = Aggregator(alias_table, granularities=granularities, tz=tz)
    aggregator.ingest_all(commits)
    return aggregator.finalize()
