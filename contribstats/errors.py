"""Error types raised by the statistics pipeline."""

from __future__ import annotations


class ContribStatsError(Exception):
    """Base class for every error this package raises on purpose."""


class ConfigurationError(ContribStatsError, ValueError):
    """Malformed alias directive, granularity name or other startup setting."""


class UsageError(ContribStatsError, RuntimeError):
    """Aggregator used out of order (ingest after finalize, finalize twice)."""


class UpstreamError(ContribStatsError):
    """The commit history could not be read."""
