"""CLI entrypoint for contribstats.

Usage:
    python main.py [--repo PATH] [--branch BRANCH] [--since DATE] [--until DATE]
                   [--merge DIRECTIVE ...] [--output FILE] <command>

Commands:
    summary      Per-contributor commits and lines added/deleted, with a TOTAL row
    timeline     Commits per contributor per time bucket
    html         Write an HTML report with stacked and per-contributor charts
    all          Write a combined JSON report (read by the Streamlit dashboard)

Options:
    --repo PATH              Path to the git repository (default: current directory)
    --branch NAME            Branch to analyse (default: the checked-out branch)
    --since DATE             Only commits more recent than DATE (e.g. 2025-01-01)
    --until DATE             Only commits older than DATE (e.g. 2025-12-31)
    --max N                  Cap the number of commits walked
    --no-merges              Skip merge commits
    --exclude-author NAME    Exclude commits by this raw author name (repeatable)
    -m, --merge DIRECTIVE    Merge authors: 'a,b=>Name', 'Alias=Name' or 'Name,Alias' (repeatable)
    --merge-file FILE        Read merge directives from FILE, one per line
    --ignore-case            Match aliases ignoring case (default)
    --case-sensitive         Match aliases exactly
    -g, --granularity G      day, 3day, week, month or year (repeatable, default: all)
    --timezone TZ            Bucket boundaries in TZ: 'utc' (default), 'local' or an IANA name
    --output FILE            Write output to FILE
    --json                   Force JSON output
    -v, --verbose            More logging (repeat for debug)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import timezone, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from contribstats.aggregator import Aggregator
from contribstats.aliases import AliasTable, load_directives
from contribstats.buckets import ALL_GRANULARITIES, Granularity
from contribstats.errors import ConfigurationError, UpstreamError
from contribstats.models import ReportView, to_json
from contribstats.render import render_html, render_table, render_timeline
from contribstats.report import assemble
from contribstats.repo import current_branch, iter_raw_commits, open_repo

logger = logging.getLogger("contribstats")


def _alias_table(args: argparse.Namespace) -> AliasTable:
    directives: list[str] = []
    if args.merge_file:
        directives += load_directives(args.merge_file)
    directives += args.merge
    table = AliasTable.from_directives(directives, ignore_case=not args.case_sensitive)
    for canonical, aliases in table.groups().items():
        if aliases:
            logger.info("Merging %s into %r", ", ".join(repr(a) for a in aliases), canonical)
    return table


def _granularities(args: argparse.Namespace) -> tuple[Granularity, ...]:
    if not args.granularity:
        return ALL_GRANULARITIES
    return tuple(dict.fromkeys(Granularity.parse(g) for g in args.granularity))


def _timezone(name: str) -> tzinfo | None:
    if name.lower() == "utc":
        return timezone.utc
    if name.lower() == "local":
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown timezone {name!r}") from exc


def _build_report(args: argparse.Namespace) -> tuple[ReportView, str, str]:
    """Run the whole pipeline; configuration is validated before any history is read."""
    table = _alias_table(args)
    granularities = _granularities(args)
    tz = _timezone(args.timezone)

    repo = open_repo(args.repo)
    branch = args.branch or current_branch(repo)
    logger.info("Analysing %s (branch %s)", repo.working_dir, branch)

    aggregator = Aggregator(table, granularities=granularities, tz=tz)
    aggregator.ingest_all(
        iter_raw_commits(
            repo,
            branch,
            since=args.since,
            until=args.until,
            max_count=args.max,
            no_merges=args.no_merges,
            exclude_authors=args.exclude_authors,
        )
    )
    view = assemble(aggregator.finalize(), granularities)
    return view, branch, str(repo.working_dir)


def cmd_summary(args: argparse.Namespace) -> None:
    view, branch, _ = _build_report(args)
    if args.json or args.output:
        _emit(to_json({"summary": view.summary, "total": view.total}), args.output)
    else:
        print(render_table(view, branch=branch))


def cmd_timeline(args: argparse.Namespace) -> None:
    view, branch, _ = _build_report(args)
    if args.json or args.output:
        _emit(to_json(view.series), args.output)
    else:
        print(f"Branch: {branch}\n")
        for key in view.series:
            print(render_timeline(view, key))
            print()


def cmd_html(args: argparse.Namespace) -> None:
    view, branch, repo_dir = _build_report(args)
    span = " to ".join(filter(None, [args.since, args.until]))
    subtitle = f"Branch {branch}" + (f", {span}" if span else "") + f": {view.total.commits} commit(s)"
    page = render_html(view, title=f"Contributors of {Path(repo_dir).name}", subtitle=subtitle)
    output_path = args.output or "report.html"
    Path(output_path).write_text(page, encoding="utf-8")
    print(f"HTML report written to: {output_path}")


def cmd_all(args: argparse.Namespace) -> None:
    view, branch, repo_dir = _build_report(args)
    print(f"Analysed '{repo_dir}' (branch: {branch}): {view.total.commits} commits, {len(view.summary)} contributor(s)")

    report = {
        "repo": repo_dir,
        "branch": branch,
        "since": args.since,
        "until": args.until,
        **json.loads(to_json(view)),
    }

    output_path = args.output or "report.json"
    Path(output_path).write_text(json.dumps(report, indent=2))
    print(f"\nFull report written to: {output_path}")


def _emit(text: str, output_path: str | None) -> None:
    if output_path:
        Path(output_path).write_text(text)
        print(f"Output written to: {output_path}")
    else:
        print(text)


def build_parser() -> argparse.ArgumentParser:
    # Shared flags available on every subcommand (and the top-level parser)
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--repo", default=".", metavar="PATH", help="Path to the git repo (default: current directory)")
    common.add_argument("--branch", default=None, metavar="NAME", help="Branch to analyse (default: checked-out branch)")
    common.add_argument("--since", default=None, metavar="DATE", help="Start date (e.g. 2025-01-01)")
    common.add_argument("--until", default=None, metavar="DATE", help="End date (e.g. 2025-12-31)")
    common.add_argument("--max", type=int, default=None, metavar="N", help="Cap the number of commits walked")
    common.add_argument("--no-merges", action="store_true", help="Skip merge commits")
    common.add_argument(
        "--exclude-author",
        dest="exclude_authors",
        metavar="NAME",
        action="append",
        default=[],
        help="Exclude commits by this author name (repeatable)",
    )
    common.add_argument(
        "-m",
        "--merge",
        metavar="DIRECTIVE",
        action="append",
        default=[],
        help="Merge authors: 'a,b=>Name', 'Alias=Name' or 'Name,Alias,...' (repeatable)",
    )
    common.add_argument("--merge-file", default=None, metavar="FILE", help="File of merge directives, one per line")
    case = common.add_mutually_exclusive_group()
    case.add_argument("--ignore-case", dest="case_sensitive", action="store_false", default=False, help="Match aliases ignoring case (default)")
    case.add_argument("--case-sensitive", dest="case_sensitive", action="store_true", default=False, help="Match aliases exactly")
    common.add_argument(
        "-g",
        "--granularity",
        metavar="G",
        action="append",
        default=[],
        help="Time bucket: day, 3day, week, month, year (repeatable, default: all)",
    )
    common.add_argument("--timezone", default="utc", metavar="TZ", help="Bucket timezone: utc, local or an IANA name")
    common.add_argument("--output", default=None, metavar="FILE", help="Write output to FILE")
    common.add_argument("--json", action="store_true", help="Force JSON output")
    common.add_argument("-v", "--verbose", action="count", default=0, help="More logging (repeat for debug)")

    parser = argparse.ArgumentParser(
        prog="contribstats",
        description="Per-contributor commit statistics for a git branch.",
        parents=[common],
    )

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("summary", parents=[common], help="Contributor summary table")
    sub.add_parser("timeline", parents=[common], help="Commits per contributor per time bucket")
    sub.add_parser("html", parents=[common], help="Write an HTML report with charts")
    sub.add_parser("all", parents=[common], help="Write a combined JSON report")

    return parser


_COMMANDS = {
    "summary": cmd_summary,
    "timeline": cmd_timeline,
    "html": cmd_html,
    "all": cmd_all,
}


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        _COMMANDS[args.command](args)
    except ConfigurationError as exc:
        parser.error(str(exc))
    except UpstreamError as exc:
        print(f"contribstats: error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
