import os
import subprocess
from datetime import datetime, timezone

import pytest

from contribstats.aliases import AliasTable
from contribstats.models import RawCommit


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def sample_commits():
    """The three-commit scenario: two spellings of John, one jane."""
    return [
        RawCommit(author="john.doe", timestamp=_utc(2025, 1, 1, 9, 0), lines_added=100, lines_deleted=10, sha="aaa111"),
        RawCommit(author="JohnD", timestamp=_utc(2025, 1, 2, 14, 30), lines_added=50, lines_deleted=5, sha="bbb222"),
        RawCommit(author="jane", timestamp=_utc(2025, 1, 3, 18, 15), lines_added=20, lines_deleted=2, sha="ccc333"),
    ]


@pytest.fixture
def john_table():
    return AliasTable.from_directives(["john.doe,JohnD=>John"])


# (author, ISO date, {path: content or None to delete})
_HISTORY = [
    ("john.doe", "2025-01-01T10:00:00+00:00", {"a.txt": "1\n2\n3\n"}),
    ("JohnD", "2025-01-02T10:00:00+00:00", {"a.txt": "1\nX\n3\n4\n"}),
    ("jane", "2025-01-03T10:00:00+00:00", {"b.txt": "alpha\nbeta\n"}),
    ("jane", "2025-02-10T10:00:00+00:00", {"b.txt": None}),
]


@pytest.fixture
def git_repo(tmp_path):
    """Four commits on 'main': john.doe +3/-0, JohnD +2/-1, jane +2/-0, jane +0/-2."""
    repo = tmp_path / "repo"
    repo.mkdir()

    def run(*args, env=None):
        subprocess.run(["git", "-C", str(repo)] + list(args), check=True, capture_output=True, env=env)

    run("init")
    run("symbolic-ref", "HEAD", "refs/heads/main")
    run("config", "commit.gpgsign", "false")

    for author, when, files in _HISTORY:
        for path, content in files.items():
            if content is None:
                run("rm", "-q", path)
            else:
                (repo / path).write_text(content, encoding="utf-8")
                run("add", path)
        env = dict(
            os.environ,
            GIT_AUTHOR_NAME=author,
            GIT_AUTHOR_EMAIL=f"{author.lower()}@example.com",
            GIT_COMMITTER_NAME=author,
            GIT_COMMITTER_EMAIL=f"{author.lower()}@example.com",
            GIT_AUTHOR_DATE=when,
            GIT_COMMITTER_DATE=when,
        )
        run("commit", "-q", "-m", f"change by {author}", env=env)

    return str(repo)
