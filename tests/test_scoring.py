"""
Tests for category and overall scoring.
"""

import math

from repo_health_guard.analyzers.commits import CommitMetrics
from repo_health_guard.analyzers.deployments import DeploymentMetrics
from repo_health_guard.analyzers.documentation import DocumentationMetrics
from repo_health_guard.analyzers.security import SecurityMetrics
from repo_health_guard.analyzers.testing import TestingMetrics
from repo_health_guard.scoring import (
    CATEGORY_WEIGHTS,
    calculate_commit_score,
    calculate_deployment_score,
    calculate_documentation_score,
    calculate_overall_score,
    calculate_security_score,
    calculate_testing_score,
    score_categories,
)


def test_category_weights_sum_to_one():
    """Every category's component weights add up to 1."""
    for weights in CATEGORY_WEIGHTS.values():
        assert math.isclose(sum(weights.values()), 1.0)


class TestDocumentationScore:
    def test_weighted_components(self):
        metrics = DocumentationMetrics(100, 100, 0, True, True)
        assert calculate_documentation_score(metrics) == 70

    def test_nothing_present(self):
        metrics = DocumentationMetrics(0, 0, 0, False, False)
        assert calculate_documentation_score(metrics) == 0


class TestTestingScore:
    def test_weighted_components(self):
        metrics = TestingMetrics(80.0, 60, 30, 10, 100.0, 95.0)
        # 80 * 0.4 + 100 * 0.2 + 90 * 0.2 + 95 * 0.2
        assert calculate_testing_score(metrics) == 89

    def test_slow_tests_floor_at_zero(self):
        """A very slow suite cannot push the score below 0."""
        metrics = TestingMetrics(0.0, 0, 0, 0, 5000.0, 0.0)
        assert calculate_testing_score(metrics) == 0

    def test_out_of_range_coverage_is_clamped(self):
        metrics = TestingMetrics(150.0, 1000, 0, 0, 0.0, 100.0)
        assert calculate_testing_score(metrics) == 100


class TestCommitScore:
    def test_weighted_components(self):
        metrics = CommitMetrics(1.0, 50.0, 40.0, 0, 1.0, 0.25, 30)
        # 50 * 0.2 + 60 * 0.4 + 20 * 0.2 + 75 * 0.2
        assert calculate_commit_score(metrics) == 53

    def test_huge_commits_do_not_go_negative(self):
        metrics = CommitMetrics(0.0, 0.0, 5000.0, 0, math.inf, 1.0, 1)
        assert calculate_commit_score(metrics) == 0

    def test_frequency_saturates(self):
        metrics = CommitMetrics(50.0, 100.0, 0.0, 0, 1.0, 0.0, 1500)
        assert calculate_commit_score(metrics) == 100


class TestSecurityScore:
    def test_clean(self):
        assert calculate_security_score(SecurityMetrics(0, 0, 0.0, [])) == 100

    def test_findings_reduce_score(self):
        metrics = SecurityMetrics(2, 1, 0.0, [])
        # 80 * 0.3 + 50 * 0.5 + 100 * 0.2
        assert calculate_security_score(metrics) == 69

    def test_many_secrets_floor_component(self):
        metrics = SecurityMetrics(0, 5, 0.0, [])
        assert calculate_security_score(metrics) == 50


class TestDeploymentScore:
    def test_weighted_components(self):
        metrics = DeploymentMetrics(1.0, 100.0, 0.0, 100.0, 0.0)
        # 20 * 0.2 + 100 * 0.2 + 100 * 0.2 + 100 * 0.4
        assert calculate_deployment_score(metrics) == 84

    def test_frequent_rollbacks_zero_component(self):
        metrics = DeploymentMetrics(1.0, 100.0, 0.0, 100.0, 0.5)
        assert calculate_deployment_score(metrics) == 44


class TestOverallScore:
    def test_mean_of_categories(self):
        scores = {
            "documentation": 80,
            "testing": 90,
            "commits": 70,
            "security": 85,
            "deployment": 75,
        }
        assert calculate_overall_score(scores) == 80

    def test_missing_categories_count_as_zero(self):
        assert calculate_overall_score({"documentation": 100}) == 20

    def test_rounds_half_up(self):
        scores = {
            "documentation": 100,
            "testing": 100,
            "commits": 100,
            "security": 100,
            "deployment": 52,
        }
        # 452 / 5 = 90.4
        assert calculate_overall_score(scores) == 90
        scores["deployment"] = 53  # 90.6
        assert calculate_overall_score(scores) == 91

    def test_out_of_range_inputs_are_clamped(self):
        scores = dict.fromkeys(CATEGORY_WEIGHTS, 250)
        assert calculate_overall_score(scores) == 100


class TestScoreCategories:
    def test_no_data_scores_zero(self):
        """Categories without data score 0, not the score of all-zero metrics."""
        scores = score_categories()
        assert scores.documentation == 0
        assert scores.testing == 0
        assert scores.commits == 0
        assert scores.security == 0
        assert scores.deployment == 0
        assert scores.overall == 0

    def test_partial_data(self):
        scores = score_categories(security=SecurityMetrics(0, 0, 0.0, []))
        assert scores.security == 100
        assert scores.overall == 20

    def test_scores_are_bounded(self):
        scores = score_categories(
            documentation=DocumentationMetrics(100, 100, 100, True, True),
            testing=TestingMetrics(100.0, 500, 0, 0, 0.0, 100.0),
            commits=CommitMetrics(10.0, 100.0, 0.0, 0, 1.0, 0.0, 300),
            security=SecurityMetrics(0, 0, 0.0, []),
            deployment=DeploymentMetrics(10.0, 100.0, 1.0, 100.0, 0.0),
        )
        for value in scores:
            assert 0 <= value <= 100
        assert scores.overall == 100
