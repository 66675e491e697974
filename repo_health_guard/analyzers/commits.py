"""Commit hygiene metrics."""

import math
import re
from typing import NamedTuple

from repo_health_guard.analyzers.base import safe_ratio
from repo_health_guard.models import Commit, TimeFilter

CONVENTIONAL_COMMIT_PATTERN = re.compile(
    r"^(feat|fix|docs|style|refactor|perf|test|build|ci|chore|revert)(\([^)]+\))?: .+"
)

UNINFORMATIVE_TITLES = frozenset(
    {"fix", "update", "changes", "wip", "temp", "testing", "commit", "..."}
)

LARGE_CHANGE_THRESHOLD = 1000
SHORT_TITLE_LENGTH = 10
LONG_DESCRIPTION_LENGTH = 50
MERGE_CONFLICT_MARKERS = ("<<<<<<<", ">>>>>>>")


class CommitMetrics(NamedTuple):
    daily_commit_rate: float
    conventional_commit_rate: float
    avg_commit_size: float
    commit_with_long_description: int
    add_remove_ratio: float
    problematic_commits_rate: float
    total_commits: int = 0


def is_conventional_commit(title: str) -> bool:
    """Check for the `type(scope): description` convention."""
    return bool(CONVENTIONAL_COMMIT_PATTERN.match(title or ""))


def get_commit_problems(commit: Commit) -> list[str]:
    """
    List hygiene problems for a single commit.

    Problems are independent and can combine:
    - large-changes: more than 1000 changed lines
    - uninformative-message: title is a bare word like "wip" (skipped for
      conventional commits)
    - merge-conflict-markers: conflict markers left in the message
    - short-message: title shorter than 10 characters
    """
    problems = []
    title = commit.subject

    if commit.total_changes > LARGE_CHANGE_THRESHOLD:
        problems.append("large-changes")

    if not is_conventional_commit(title):
        if title.strip().lower() in UNINFORMATIVE_TITLES:
            problems.append("uninformative-message")

    message = commit.message or ""
    if any(marker in message for marker in MERGE_CONFLICT_MARKERS):
        problems.append("merge-conflict-markers")

    if len(title) < SHORT_TITLE_LENGTH:
        problems.append("short-message")

    return problems


def calculate_add_remove_ratio(total_added: int, total_removed: int) -> float:
    """
    Ratio of added to removed lines.

    Infinite when lines were only added; 1 when nothing changed at all.
    """
    if total_removed > 0:
        return total_added / total_removed
    if total_added > 0:
        return math.inf
    return 1.0


def analyze_commits(commits: list[Commit], time_filter: TimeFilter) -> CommitMetrics:
    """Aggregate commit statistics over an analysis window."""
    total = len(commits)
    total_days = time_filter.total_days

    total_added = sum(commit.code_added or 0 for commit in commits)
    total_removed = sum(commit.code_removed or 0 for commit in commits)

    conventional = sum(1 for commit in commits if is_conventional_commit(commit.subject))
    problematic = sum(1 for commit in commits if get_commit_problems(commit))
    long_descriptions = sum(
        1 for commit in commits if len(commit.message or "") > LONG_DESCRIPTION_LENGTH
    )

    return CommitMetrics(
        daily_commit_rate=safe_ratio(total, total_days),
        conventional_commit_rate=safe_ratio(conventional, total) * 100,
        avg_commit_size=safe_ratio(total_added + total_removed, total),
        commit_with_long_description=long_descriptions,
        add_remove_ratio=calculate_add_remove_ratio(total_added, total_removed),
        problematic_commits_rate=safe_ratio(problematic, total),
        total_commits=total,
    )
