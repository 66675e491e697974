"""
Category and overall health scores.

Every category score is an integer in [0, 100] built from fixed weighted
components. Each component saturates at its bounds before weighting, so
unbounded inputs (commit sizes, patch times, secret counts) can never push a
score below 0 or above 100.
"""

from typing import NamedTuple

from repo_health_guard.analyzers.base import clamp, round_half_up
from repo_health_guard.analyzers.commits import CommitMetrics
from repo_health_guard.analyzers.deployments import DeploymentMetrics
from repo_health_guard.analyzers.documentation import DocumentationMetrics
from repo_health_guard.analyzers.security import SecurityMetrics
from repo_health_guard.analyzers.testing import TestingMetrics

CATEGORY_WEIGHTS = {
    "documentation": {
        "readme": 0.3,
        "adr": 0.2,
        "inline_doc": 0.3,
        "contributing": 0.1,
        "license": 0.1,
    },
    "testing": {
        "coverage": 0.4,
        "test_count": 0.2,
        "execution_time": 0.2,
        "reliability": 0.2,
    },
    "commits": {
        "conventional_format": 0.2,
        "size": 0.4,
        "frequency": 0.2,
        "problematic": 0.2,
    },
    "security": {
        "vulnerabilities": 0.3,
        "secrets": 0.5,
        "patch_time": 0.2,
    },
    "deployment": {
        "frequency": 0.2,
        "success": 0.2,
        "efficiency": 0.2,
        "rollback": 0.4,
    },
}

CATEGORIES = tuple(CATEGORY_WEIGHTS)


class AnalyticsScore(NamedTuple):
    documentation: int
    testing: int
    commits: int
    security: int
    deployment: int
    overall: int


def _weighted(components: dict[str, float], weights: dict[str, float]) -> int:
    score = sum(clamp(components[name]) * weight for name, weight in weights.items())
    return round_half_up(clamp(score))


def calculate_documentation_score(metrics: DocumentationMetrics) -> int:
    return _weighted(
        {
            "readme": metrics.readme_score,
            "adr": metrics.adr_score,
            "inline_doc": metrics.inline_doc_score,
            "contributing": 100 if metrics.contributing_guide_exists else 0,
            "license": 100 if metrics.license_exists else 0,
        },
        CATEGORY_WEIGHTS["documentation"],
    )


def calculate_testing_score(metrics: TestingMetrics) -> int:
    total_tests = (
        metrics.unit_test_count
        + metrics.integration_test_count
        + metrics.e2e_test_count
    )
    return _weighted(
        {
            "coverage": metrics.coverage,
            "test_count": min(total_tests / 100, 1) * 100,
            "execution_time": max(0, 100 - metrics.avg_execution_time / 10),
            "reliability": metrics.reliability,
        },
        CATEGORY_WEIGHTS["testing"],
    )


def calculate_commit_score(metrics: CommitMetrics) -> int:
    return _weighted(
        {
            "conventional_format": metrics.conventional_commit_rate,
            "size": max(0, 100 - metrics.avg_commit_size),
            "frequency": min(metrics.daily_commit_rate * 20, 100),
            "problematic": max(0, 100 - metrics.problematic_commits_rate * 100),
        },
        CATEGORY_WEIGHTS["commits"],
    )


def calculate_security_score(metrics: SecurityMetrics) -> int:
    return _weighted(
        {
            "vulnerabilities": max(0, 100 - metrics.vulnerability_count * 10),
            "secrets": max(0, 100 - metrics.exposed_secrets_count * 50),
            "patch_time": max(0, 100 - (metrics.avg_patch_time / 24) * 10),
        },
        CATEGORY_WEIGHTS["security"],
    )


def calculate_deployment_score(metrics: DeploymentMetrics) -> int:
    return _weighted(
        {
            "frequency": min(metrics.frequency * 20, 100),
            "success": metrics.success_rate,
            "efficiency": metrics.pipeline_efficiency,
            "rollback": max(0, 100 - metrics.rollback_rate * 500),
        },
        CATEGORY_WEIGHTS["deployment"],
    )


def calculate_overall_score(scores: dict[str, int]) -> int:
    """Equal-weight mean of the five category scores."""
    values = [clamp(scores.get(category, 0)) for category in CATEGORIES]
    return round_half_up(sum(values) / len(CATEGORIES))


def score_categories(
    documentation: DocumentationMetrics | None = None,
    testing: TestingMetrics | None = None,
    commits: CommitMetrics | None = None,
    security: SecurityMetrics | None = None,
    deployment: DeploymentMetrics | None = None,
) -> AnalyticsScore:
    """
    Score every category and the overall health.

    A category without data (None) scores 0; it is not scored from all-zero
    metrics, since penalty components such as commit size would then be full.
    """
    scores = {
        "documentation": calculate_documentation_score(documentation)
        if documentation is not None
        else 0,
        "testing": calculate_testing_score(testing) if testing is not None else 0,
        "commits": calculate_commit_score(commits) if commits is not None else 0,
        "security": calculate_security_score(security) if security is not None else 0,
        "deployment": calculate_deployment_score(deployment)
        if deployment is not None
        else 0,
    }
    return AnalyticsScore(overall=calculate_overall_score(scores), **scores)
