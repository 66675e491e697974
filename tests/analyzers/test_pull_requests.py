"""
Tests for the pull request analyzer.
"""

import pytest

from repo_health_guard.analyzers.pull_requests import analyze_pull_requests
from repo_health_guard.models import PullRequest


def test_analyze_pull_requests():
    pull_requests = [
        PullRequest(
            1,
            "alice",
            "2024-01-01T00:00:00Z",
            state="merged",
            merged_at="2024-01-01T12:00:00Z",
        ),
        PullRequest(
            2,
            "bob",
            "2024-01-02T00:00:00Z",
            state="merged",
            merged_at="2024-01-03T00:00:00Z",
        ),
        PullRequest(3, "alice", "2024-01-04T00:00:00Z", state="open"),
        PullRequest(
            4,
            "carol",
            "2024-01-05T00:00:00Z",
            state="closed",
            closed_at="2024-01-06T00:00:00Z",
        ),
    ]
    metrics = analyze_pull_requests(pull_requests)

    assert metrics.total == 4
    assert metrics.open == 1
    assert metrics.merged == 2
    assert metrics.closed == 1
    assert metrics.merge_rate == pytest.approx(50.0)
    assert metrics.avg_time_to_merge == pytest.approx(18.0)
    assert metrics.unique_authors == 3


def test_no_pull_requests():
    metrics = analyze_pull_requests([])
    assert metrics.total == 0
    assert metrics.merge_rate == 0
    assert metrics.avg_time_to_merge == 0
    assert metrics.unique_authors == 0
