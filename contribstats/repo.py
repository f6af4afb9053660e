"""Thin helpers for opening a repo and reading its commit history."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from datetime import datetime
from pathlib import Path

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from contribstats.errors import UpstreamError
from contribstats.models import RawCommit

logger = logging.getLogger(__name__)


def open_repo(path: str | Path = ".") -> Repo:
    """Open a git repository at *path* (or any of its parents)."""
    try:
        repo = Repo(str(path), search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError) as exc:
        raise UpstreamError(f"No git repository found at or above: {path}") from exc
    return repo


def default_branch(repo: Repo) -> str:
    """Return 'main' or 'master' depending on what exists, else the first branch."""
    names = {ref.name.split("/")[-1] for ref in repo.references}
    for candidate in ("main", "master"):
        if candidate in names:
            return candidate
    branches = list(repo.branches)
    if not branches:
        raise UpstreamError("Repository has no branches.")
    return branches[0].name


def current_branch(repo: Repo) -> str:
    """Return the checked-out branch, ``HEAD`` when detached, else the default branch."""
    try:
        return repo.active_branch.name
    except TypeError:
        if repo.head.is_valid():
            logger.info("HEAD is detached; analysing HEAD")
            return "HEAD"
        return default_branch(repo)


# NUL-separated header per commit: sha, mailmapped author name, strict ISO committer date
_LOG_FORMAT = "%x00%H%x00%aN%x00%cI"


def _numstat_totals(lines: list[str]) -> tuple[int, int]:
    added = deleted = 0
    for line in lines:
        parts = line.split("\t")
        if len(parts) < 3:
            continue
        # binary files report "-"
        if parts[0].isdigit():
            added += int(parts[0])
        if parts[1].isdigit():
            deleted += int(parts[1])
    return added, deleted


def iter_raw_commits(
    repo: Repo,
    branch: str,
    since: str | None = None,
    until: str | None = None,
    max_count: int | None = None,
    no_merges: bool = False,
    exclude_authors: Iterable[str] = (),
) -> Iterator[RawCommit]:
    """Yield a :class:`RawCommit` per commit reachable from *branch*.

    History is read with a single ``git log --numstat`` call, so author
    names go through the repository's ``.mailmap`` and renames are detected
    (a pure ``git mv`` counts as no changed lines).

    Parameters
    ----------
    repo:
        Open GitPython Repo object.
    branch:
        Branch (or any revision, e.g. ``HEAD``) to walk, most-recent first.
    since, until:
        Passed to git as ``--since``/``--until``; anything git accepts works
        (``2025-01-01``, ``2 weeks ago``).
    max_count:
        Cap the number of commits walked.
    no_merges:
        Skip merge commits entirely. Otherwise they count as commits with no
        line changes, as ``git log --numstat`` shows no diff for them.
    exclude_authors:
        Author names (after ``.mailmap``) to drop, case-insensitive.
    """
    kwargs: dict = {"numstat": True, "format": _LOG_FORMAT}
    if since:
        kwargs["since"] = since
    if until:
        kwargs["until"] = until
    if max_count is not None:
        kwargs["max_count"] = max_count
    if no_merges:
        kwargs["no_merges"] = True
    excluded = {a.casefold() for a in exclude_authors}

    try:
        output = repo.git.log("-M", branch, "--", **kwargs)
    except GitCommandError as exc:
        raise UpstreamError(f"Cannot read history of {branch!r}: {exc}") from exc

    fields = output.split("\x00")[1:]
    for i in range(0, len(fields) - 2, 3):
        sha, author, rest = fields[i], fields[i + 1], fields[i + 2]
        date_line, *stat_lines = rest.splitlines()
        author = author or "unknown"
        if author.casefold() in excluded:
            continue
        added, deleted = _numstat_totals(stat_lines)
        yield RawCommit(
            author=author,
            timestamp=datetime.fromisoformat(date_line.strip()),
            lines_added=added,
            lines_deleted=deleted,
            sha=sha[:8],
        )
