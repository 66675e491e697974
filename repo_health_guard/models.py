"""
Provider-neutral records consumed by the analyzers.

Every provider adapter normalizes its API payloads into these shapes, so the
analyzers never see GitHub or GitLab specific fields.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Any, NamedTuple

SECONDS_PER_DAY = 24 * 60 * 60


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse an ISO-8601 string or datetime into an aware UTC datetime.

    Naive values are treated as UTC. Returns None for empty or unparsable
    input instead of raising.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_iso(value: datetime) -> str:
    """Format a datetime as an ISO-8601 UTC string with a trailing Z."""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class TimeFilter(NamedTuple):
    """Analysis window, both ends as ISO-8601 strings."""

    start_date: str
    end_date: str

    @property
    def total_days(self) -> int:
        """Whole days covered by the window (ceil); 0 when either end is invalid."""
        start = parse_timestamp(self.start_date)
        end = parse_timestamp(self.end_date)
        if start is None or end is None:
            return 0
        return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)

    @classmethod
    def last_days(cls, days: int, now: datetime | None = None) -> "TimeFilter":
        end = now or datetime.now(timezone.utc)
        start = end - timedelta(days=days)
        return cls(to_iso(start), to_iso(end))


class Commit(NamedTuple):
    id: str
    message: str
    author_name: str = ""
    author_email: str = ""
    created_at: str = ""
    code_added: int = 0
    code_removed: int = 0
    title: str | None = None

    @property
    def subject(self) -> str:
        """The commit title, falling back to the first line of the message."""
        if self.title:
            return self.title
        return (self.message or "").split("\n", 1)[0]

    @property
    def total_changes(self) -> int:
        return (self.code_added or 0) + (self.code_removed or 0)


class Pipeline(NamedTuple):
    id: int | str
    status: str
    ref: str = ""
    created_at: str = ""
    updated_at: str = ""
    conclusion: str | None = None
    sha: str = ""
    message: str | None = None  # message of the commit the run was built from


class Job(NamedTuple):
    id: int | str
    pipeline_id: int | str
    status: str
    name: str = ""


class Branch(NamedTuple):
    name: str
    last_commit_date: str = ""
    protected: bool = False
    last_commit_sha: str = ""


class Contributor(NamedTuple):
    name: str
    commits: int = 0
    email: str = ""


class PullRequest(NamedTuple):
    id: int | str
    author: str
    created_at: str
    state: str = "open"  # "open", "merged", "closed"
    title: str = ""
    merged_at: str | None = None
    closed_at: str | None = None


class RepositoryFile(NamedTuple):
    path: str
    content: str


class SuiteResult(NamedTuple):
    name: str
    total_count: int = 0
    success_count: int = 0
    failed_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    total_time: float = 0.0  # seconds


class PipelineTestReport(NamedTuple):
    pipeline_id: int | str
    suites: list[SuiteResult]
    coverage: float | None = None
