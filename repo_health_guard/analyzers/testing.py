"""Test suite metrics aggregated from CI test reports."""

from typing import NamedTuple

from repo_health_guard.analyzers.base import safe_ratio
from repo_health_guard.models import PipelineTestReport

E2E_MARKERS = ("e2e", "end-to-end", "end_to_end")
INTEGRATION_MARKERS = ("integration",)


class TestingMetrics(NamedTuple):
    __test__ = False

    coverage: float
    unit_test_count: int
    integration_test_count: int
    e2e_test_count: int
    avg_execution_time: float  # milliseconds per test
    reliability: float
    reports_analyzed: int = 0


def classify_suite(name: str) -> str:
    """Classify a suite as "e2e", "integration" or "unit" by its name."""
    lower = (name or "").lower()
    if any(marker in lower for marker in E2E_MARKERS):
        return "e2e"
    if any(marker in lower for marker in INTEGRATION_MARKERS):
        return "integration"
    return "unit"


def analyze_test_reports(reports: list[PipelineTestReport]) -> TestingMetrics:
    """
    Summarize test reports, most recent first.

    Test counts describe the latest report; timing, reliability and
    coverage are averaged over every report.
    """
    counts = {"unit": 0, "integration": 0, "e2e": 0}
    if reports:
        for suite in reports[0].suites:
            counts[classify_suite(suite.name)] += suite.total_count

    total_tests = 0
    total_time = 0.0
    executed = 0
    passed = 0
    coverages = []
    for report in reports:
        for suite in report.suites:
            total_tests += suite.total_count
            total_time += suite.total_time
            executed += suite.total_count - suite.skipped_count
            passed += suite.success_count
        if report.coverage is not None:
            coverages.append(report.coverage)

    return TestingMetrics(
        coverage=safe_ratio(sum(coverages), len(coverages)),
        unit_test_count=counts["unit"],
        integration_test_count=counts["integration"],
        e2e_test_count=counts["e2e"],
        avg_execution_time=safe_ratio(total_time * 1000, total_tests),
        reliability=safe_ratio(passed, executed) * 100,
        reports_analyzed=len(reports),
    )
