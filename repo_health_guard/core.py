"""
Repository analysis orchestration for Repo Health Guard.

Fetches every entity list from a data source, runs the analyzers and scores
the result. Fetch failures propagate to the caller unchanged.
"""

from datetime import datetime
from typing import Any, NamedTuple

import httpx
from rich.console import Console

from repo_health_guard.analyzers.branches import (
    STAGNATION_DAYS,
    BranchMetrics,
    analyze_branches,
)
from repo_health_guard.analyzers.commits import CommitMetrics, analyze_commits
from repo_health_guard.analyzers.contributors import (
    ContributorMetrics,
    analyze_contributors,
)
from repo_health_guard.analyzers.deployments import (
    DeploymentMetrics,
    analyze_deployments,
    is_deployment_ref,
)
from repo_health_guard.analyzers.documentation import (
    DocumentationMetrics,
    analyze_documentation_files,
    is_documentation_path,
)
from repo_health_guard.analyzers.pull_requests import (
    PullRequestMetrics,
    analyze_pull_requests,
)
from repo_health_guard.analyzers.security import (
    SCANNED_SOURCE_EXTENSIONS,
    SecurityMetrics,
    analyze_security,
)
from repo_health_guard.analyzers.testing import TestingMetrics, analyze_test_reports
from repo_health_guard.models import (
    Commit,
    Pipeline,
    PipelineTestReport,
    RepositoryFile,
    TimeFilter,
    parse_timestamp,
)
from repo_health_guard.scoring import AnalyticsScore, score_categories
from repo_health_guard.vcs.base import RepositoryDataSource

console = Console(stderr=True)

# Directories probed for ADRs and architecture docs besides the root
DOCUMENTATION_DIRS = ("docs", "doc", "adr", "docs/adr", "docs/architecture")
# Extra config files worth scanning for secrets
SECRET_PRONE_EXTENSIONS = (".env", ".json", ".yml", ".yaml", ".toml", ".ini", ".cfg")

DEFAULT_MAX_FILES = 50
DEFAULT_TEST_REPORT_LIMIT = 5


class RepositoryReport(NamedTuple):
    repository: str
    platform: str
    repo_url: str
    time_filter: TimeFilter
    documentation: DocumentationMetrics
    testing: TestingMetrics
    commits: CommitMetrics
    deployments: DeploymentMetrics
    branches: BranchMetrics
    contributors: ContributorMetrics
    pull_requests: PullRequestMetrics
    security: SecurityMetrics
    scores: AnalyticsScore


def _log(verbose: bool, message: str) -> None:
    if verbose:
        console.print(f"[dim]{message}[/dim]")


def _list_optional_dir(
    source: RepositoryDataSource, repository: str, path: str
) -> list[str]:
    """List a directory that may legitimately not exist (404 -> empty)."""
    try:
        return source.list_files(repository, path)
    except httpx.HTTPStatusError as e:
        if e.response.status_code == 404:
            return []
        raise


def select_candidate_files(paths: list[str], max_files: int) -> list[str]:
    """
    Pick the files to download: documentation first, then source and config
    files for the security scan, capped at max_files.
    """
    docs = [p for p in paths if is_documentation_path(p)]
    scannable = [
        p
        for p in paths
        if p not in docs
        and p.lower().endswith(SCANNED_SOURCE_EXTENSIONS + SECRET_PRONE_EXTENSIONS)
    ]
    return (docs + scannable)[:max_files]


def fetch_repository_files(
    source: RepositoryDataSource,
    repository: str,
    max_files: int = DEFAULT_MAX_FILES,
    verbose: bool = False,
) -> list[RepositoryFile]:
    paths = list(source.list_files(repository))
    for directory in DOCUMENTATION_DIRS:
        paths.extend(_list_optional_dir(source, repository, directory))

    selected = select_candidate_files(list(dict.fromkeys(paths)), max_files)
    _log(verbose, f"Fetching {len(selected)} of {len(paths)} files for analysis")
    return [
        RepositoryFile(path, source.get_file_content(repository, path))
        for path in selected
    ]


def attach_commit_messages(
    pipelines: list[Pipeline], commits: list[Commit]
) -> list[Pipeline]:
    """Fill in missing pipeline commit messages from commits with the same sha."""
    messages = {commit.id: commit.message for commit in commits}
    return [
        p._replace(message=messages.get(p.sha)) if p.message is None else p
        for p in pipelines
    ]


def _has_test_data(reports: list[PipelineTestReport]) -> bool:
    return any(report.suites or report.coverage is not None for report in reports)


def _newest_first(pipelines: list[Pipeline]) -> list[Pipeline]:
    def key(pipeline: Pipeline) -> float:
        created = parse_timestamp(pipeline.created_at)
        return created.timestamp() if created else 0.0

    return sorted(pipelines, key=key, reverse=True)


def analyze_repository(
    source: RepositoryDataSource,
    repository: str,
    time_filter: TimeFilter,
    max_files: int = DEFAULT_MAX_FILES,
    stagnation_days: int = STAGNATION_DAYS,
    test_report_limit: int = DEFAULT_TEST_REPORT_LIMIT,
    now: datetime | None = None,
    verbose: bool = False,
) -> RepositoryReport:
    """
    Fetch repository data and compute every metric and score.

    Args:
        source: Data source for the hosting platform.
        repository: Repository path, e.g. "owner/repo" or "group/sub/project".
        time_filter: Analysis window.
        max_files: Maximum number of files downloaded for documentation and
                   security analysis.
        stagnation_days: Idle days after which an unprotected branch is stagnant.
        test_report_limit: Number of most recent pipelines whose test reports
                           are analyzed.
        now: Reference time for branch stagnation (default: current time).
        verbose: Print fetch progress to stderr.

    Returns:
        RepositoryReport with metrics for every category and the scores.

    Raises:
        ValueError: If the repository does not exist.
        httpx.HTTPError: If any upstream request fails.
    """
    _log(verbose, f"Analyzing {repository} on {source.get_platform_name()}")
    source.get_default_branch(repository)

    commits = source.list_commits(repository, time_filter)
    _log(verbose, f"Commits: {len(commits)}")

    pipelines = attach_commit_messages(
        source.list_pipelines(repository, time_filter), commits
    )
    deployment_pipelines = [p for p in pipelines if is_deployment_ref(p.ref)]
    jobs = {
        p.id: source.list_pipeline_jobs(repository, p.id) for p in deployment_pipelines
    }
    _log(
        verbose,
        f"Pipelines: {len(pipelines)} ({len(deployment_pipelines)} deployment runs)",
    )

    branches = source.list_branches(repository)
    contributors = source.list_contributors(repository, time_filter, commits)
    pull_requests = source.list_pull_requests(repository, time_filter)
    test_reports = source.list_test_reports(
        repository, _newest_first(pipelines)[:test_report_limit]
    )
    files = fetch_repository_files(source, repository, max_files, verbose)
    _log(
        verbose,
        f"Branches: {len(branches)}, contributors: {len(contributors)}, "
        f"pull requests: {len(pull_requests)}, test reports: {len(test_reports)}",
    )

    documentation = analyze_documentation_files(files)
    testing = analyze_test_reports(test_reports)
    commit_metrics = analyze_commits(commits, time_filter)
    deployments = analyze_deployments(pipelines, time_filter, jobs)
    security = analyze_security(files)

    scores = score_categories(
        documentation=documentation if documentation.files_analyzed else None,
        testing=testing if _has_test_data(test_reports) else None,
        commits=commit_metrics if commits else None,
        security=security if files else None,
        deployment=deployments if deployment_pipelines else None,
    )

    return RepositoryReport(
        repository=repository,
        platform=source.get_platform_name(),
        repo_url=source.get_repository_url(repository),
        time_filter=time_filter,
        documentation=documentation,
        testing=testing,
        commits=commit_metrics,
        deployments=deployments,
        branches=analyze_branches(branches, now, stagnation_days),
        contributors=analyze_contributors(contributors),
        pull_requests=analyze_pull_requests(pull_requests),
        security=security,
        scores=scores,
    )


def _to_plain(value: Any) -> Any:
    if hasattr(value, "_asdict"):
        return {key: _to_plain(item) for key, item in value._asdict().items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(item) for item in value]
    return value


def report_to_dict(report: RepositoryReport) -> dict[str, Any]:
    """Convert a report to nested dicts/lists of plain values."""
    return _to_plain(report)
