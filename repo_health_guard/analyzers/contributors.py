"""Contributor concentration metrics (bus factor, Gini coefficient)."""

from typing import NamedTuple

from repo_health_guard.analyzers.base import clamp, safe_ratio
from repo_health_guard.models import Commit, Contributor

BUS_FACTOR_THRESHOLD = 0.5
# Share of all commits above which a single contributor is dominant
IMBALANCE_THRESHOLD = 0.35

# Upper bounds (exclusive) of each distribution category
DISTRIBUTION_CATEGORIES = (
    (0.2, "Equal"),
    (0.4, "Moderate"),
    (0.8, "Unequal"),
)


class ContributorMetrics(NamedTuple):
    total_contributors: int
    total_commits: int
    bus_factor: int
    top_contributor: str
    top_contributor_percentage: float
    gini_coefficient: float
    commit_distribution: str
    imbalanced_contribution: bool


def calculate_gini_coefficient(values: list[float]) -> float:
    """
    Gini coefficient from the mean absolute pairwise difference.

        gini = sum_i sum_j |x_i - x_j| / (2 * n^2 * mean)

    The double sum is evaluated on the sorted values as
    2 * sum_i (2i - n + 1) * x_(i), which is exact for integer counts.
    Empty input, a single value or an all-zero distribution gives 0.
    """
    n = len(values)
    if n <= 1:
        return 0.0
    total = sum(values)
    if total <= 0:
        return 0.0

    ordered = sorted(values)
    pairwise_sum = 2 * sum((2 * i - n + 1) * x for i, x in enumerate(ordered))
    # 2 * n^2 * mean == 2 * n * total
    return clamp(pairwise_sum / (2 * n * total), 0.0, 1.0)


def classify_distribution(gini: float) -> str:
    for upper, label in DISTRIBUTION_CATEGORIES:
        if gini < upper:
            return label
    return "Very Unequal"


def calculate_bus_factor(commit_counts: list[int]) -> int:
    """
    Smallest number of top contributors covering at least half of all commits.

    A lone contributor always has a bus factor of 1; no commits at all gives 0.
    """
    if len(commit_counts) == 1:
        return 1
    total = sum(commit_counts)
    if total <= 0:
        return 0

    cumulative = 0
    bus_factor = 0
    for count in sorted(commit_counts, reverse=True):
        cumulative += count
        bus_factor += 1
        if cumulative / total >= BUS_FACTOR_THRESHOLD:
            break
    return bus_factor


def analyze_contributors(contributors: list[Contributor]) -> ContributorMetrics:
    ranked = sorted(contributors, key=lambda c: c.commits or 0, reverse=True)
    counts = [c.commits or 0 for c in ranked]
    total_commits = sum(counts)
    gini = calculate_gini_coefficient(counts)

    if ranked:
        top_contributor = ranked[0].name
        top_percentage = safe_ratio(counts[0], total_commits) * 100
    else:
        top_contributor = "N/A"
        top_percentage = 0.0

    return ContributorMetrics(
        total_contributors=len(ranked),
        total_commits=total_commits,
        bus_factor=calculate_bus_factor(counts),
        top_contributor=top_contributor,
        top_contributor_percentage=top_percentage,
        gini_coefficient=gini,
        commit_distribution=classify_distribution(gini),
        imbalanced_contribution=any(
            safe_ratio(count, total_commits) > IMBALANCE_THRESHOLD for count in counts
        ),
    )


def aggregate_contributors(commits: list[Commit]) -> list[Contributor]:
    """Count commits per author (name + email) in first-seen order."""
    counts: dict[tuple[str, str], int] = {}
    for commit in commits:
        key = (commit.author_name or "", commit.author_email or "")
        counts[key] = counts.get(key, 0) + 1
    return [
        Contributor(name=name or email or "unknown", commits=count, email=email)
        for (name, email), count in counts.items()
    ]
