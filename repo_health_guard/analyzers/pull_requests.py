"""Pull request throughput metrics."""

from typing import NamedTuple

from repo_health_guard.analyzers.base import safe_ratio
from repo_health_guard.models import PullRequest, parse_timestamp


class PullRequestMetrics(NamedTuple):
    total: int
    open: int
    merged: int
    closed: int
    merge_rate: float
    avg_time_to_merge: float  # hours
    unique_authors: int


def analyze_pull_requests(pull_requests: list[PullRequest]) -> PullRequestMetrics:
    states = [(pr.state or "").lower() for pr in pull_requests]

    merge_hours = []
    for pr in pull_requests:
        created = parse_timestamp(pr.created_at)
        merged = parse_timestamp(pr.merged_at)
        if created is not None and merged is not None:
            merge_hours.append((merged - created).total_seconds() / 3600)

    total = len(pull_requests)
    merged_count = states.count("merged")
    return PullRequestMetrics(
        total=total,
        open=states.count("open"),
        merged=merged_count,
        closed=states.count("closed"),
        merge_rate=safe_ratio(merged_count, total) * 100,
        avg_time_to_merge=safe_ratio(sum(merge_hours), len(merge_hours)),
        unique_authors=len({pr.author for pr in pull_requests if pr.author}),
    )
