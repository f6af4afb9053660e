"""Per-contributor git activity statistics."""

from contribstats.aggregator import Aggregator, aggregate
from contribstats.aliases import AliasGroup, AliasTable, parse_directive
from contribstats.buckets import Granularity, bucket_start
from contribstats.errors import ConfigurationError, UpstreamError, UsageError
from contribstats.report import assemble

__all__ = [
    "Aggregator",
    "AliasGroup",
    "AliasTable",
    "ConfigurationError",
    "Granularity",
    "UpstreamError",
    "UsageError",
    "aggregate",
    "assemble",
    "bucket_start",
    "parse_directive",
]
