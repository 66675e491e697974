"""
Pure analyzers turning provider-neutral records into metrics records.

Each analyzer consumes a complete, homogeneous list of records and never
performs I/O.
"""

from repo_health_guard.analyzers.branches import BranchMetrics, analyze_branches
from repo_health_guard.analyzers.commits import CommitMetrics, analyze_commits
from repo_health_guard.analyzers.contributors import (
    ContributorMetrics,
    analyze_contributors,
    calculate_gini_coefficient,
)
from repo_health_guard.analyzers.deployments import (
    DeploymentMetrics,
    analyze_deployments,
)
from repo_health_guard.analyzers.documentation import (
    DocumentationAnalysis,
    DocumentationMetrics,
    analyze_document,
    analyze_documentation_files,
    calculate_file_score,
)
from repo_health_guard.analyzers.pull_requests import (
    PullRequestMetrics,
    analyze_pull_requests,
)
from repo_health_guard.analyzers.security import SecurityMetrics, analyze_security
from repo_health_guard.analyzers.testing import TestingMetrics, analyze_test_reports

__all__ = [
    "BranchMetrics",
    "CommitMetrics",
    "ContributorMetrics",
    "DeploymentMetrics",
    "DocumentationAnalysis",
    "DocumentationMetrics",
    "PullRequestMetrics",
    "SecurityMetrics",
    "TestingMetrics",
    "analyze_branches",
    "analyze_commits",
    "analyze_contributors",
    "analyze_deployments",
    "analyze_document",
    "analyze_documentation_files",
    "analyze_pull_requests",
    "analyze_security",
    "analyze_test_reports",
    "calculate_file_score",
    "calculate_gini_coefficient",
]
