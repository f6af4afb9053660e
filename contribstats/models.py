"""Shared dataclasses for the statistics pipeline."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from typing import Any

from contribstats.buckets import Granularity


def _default_serializer(obj: Any) -> Any:
    if isinstance(obj, datetime):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def _plain(data: Any) -> Any:
    if hasattr(data, "__dataclass_fields__"):
        return asdict(data)
    if isinstance(data, (list, tuple)):
        return [_plain(item) for item in data]
    if isinstance(data, dict):
        return {key: _plain(value) for key, value in data.items()}
    return data


def to_json(data: Any, indent: int = 2) -> str:
    return json.dumps(_plain(data), indent=indent, default=_default_serializer)


@dataclass(frozen=True)
class RawCommit:
    author: str
    timestamp: datetime
    lines_added: int = 0
    lines_deleted: int = 0
    sha: str = ""  # informational only, never used for aggregation


@dataclass(frozen=True)
class ContributorStats:
    name: str
    commits: int = 0
    lines_added: int = 0
    lines_deleted: int = 0

    def plus(self, commit: RawCommit) -> ContributorStats:
        """Return new totals with *commit* accounted for."""
        return replace(
            self,
            commits=self.commits + 1,
            lines_added=self.lines_added + commit.lines_added,
            lines_deleted=self.lines_deleted + commit.lines_deleted,
        )


@dataclass(frozen=True)
class TimeSeriesPoint:
    bucket_start: datetime
    per_contributor_commits: Mapping[str, int]  # only contributors active in the bucket

    @property
    def total(self) -> int:
        return sum(self.per_contributor_commits.values())


@dataclass(frozen=True)
class AggregationResult:
    """Final state of one aggregation run. Treated as read-only by consumers."""

    contributors: tuple[ContributorStats, ...]
    series: Mapping[Granularity, tuple[TimeSeriesPoint, ...]]
    granularities: tuple[Granularity, ...]

    @property
    def total_commits(self) -> int:
        return sum(c.commits for c in self.contributors)

    def contributor(self, name: str) -> ContributorStats | None:
        for stats in self.contributors:
            if stats.name == name:
                return stats
        return None


@dataclass
class SummaryRow:
    contributor: str
    commits: int
    lines_added: int
    lines_deleted: int


@dataclass
class SeriesPoint:
    bucket_start: datetime
    commits: dict[str, int] = field(default_factory=dict)  # every contributor, zeros included
    total: int = 0


@dataclass
class ReportView:
    summary: list[SummaryRow]
    total: SummaryRow
    contributors: list[str] = field(default_factory=list)
    series: dict[str, list[SeriesPoint]] = field(default_factory=dict)  # keyed by Granularity value
