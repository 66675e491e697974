"""
GitLab data source for Repo Health Guard.

Uses the GitLab REST API (v4) to fetch commits, pipelines, jobs, branches,
merge requests, test report summaries and file contents. Works against
gitlab.com or a self-managed instance via ``ProviderConfig.base_url``.
"""

import os
import urllib.parse
from typing import Any

import httpx
from dotenv import load_dotenv

from repo_health_guard.models import (
    Branch,
    Commit,
    Job,
    Pipeline,
    PipelineTestReport,
    PullRequest,
    SuiteResult,
    TimeFilter,
)
from repo_health_guard.vcs.base import (
    ProviderConfig,
    RepositoryDataSource,
    raise_not_found,
)

# Load environment variables
load_dotenv()

GITLAB_URL = "https://gitlab.com"

_MERGE_REQUEST_STATES = {"opened": "open", "merged": "merged"}


class GitLabProvider(RepositoryDataSource):
    """GitLab data source using the REST API."""

    def __init__(self, config: ProviderConfig | None = None):
        """
        Initialize GitLab provider.

        Args:
            config: Connection settings. When no token is given, it is read
                    from the GITLAB_TOKEN environment variable.

        Raises:
            ValueError: If no token is configured
        """
        config = config or ProviderConfig()
        token = config.token or os.getenv("GITLAB_TOKEN")
        if not token:
            raise ValueError(
                "GITLAB_TOKEN is required for GitLab provider.\n"
                "\n"
                "To get started:\n"
                "1. Create a GitLab Personal Access Token:\n"
                "   -> https://gitlab.com/-/user_settings/personal_access_tokens\n"
                "2. Select scopes: 'read_api' and 'read_repository'\n"
                "3. Set the token:\n"
                "   export GITLAB_TOKEN='your_token_here'  # Linux/macOS\n"
                "   or add to your .env file: GITLAB_TOKEN=your_token_here\n"
            )
        super().__init__(
            config._replace(
                token=token, base_url=(config.base_url or GITLAB_URL).rstrip("/")
            )
        )

    def get_platform_name(self) -> str:
        """Return 'gitlab' as the platform identifier."""
        return "gitlab"

    def get_repository_url(self, repository: str) -> str:
        """Construct GitLab project URL."""
        return f"{self.config.base_url}/{repository}"

    def _headers(self) -> dict[str, str]:
        return {"PRIVATE-TOKEN": self.config.token or ""}

    def _url(self, repository: str, endpoint: str = "") -> str:
        # Project paths (group/subgroup/project) must be URL-encoded
        project_id = urllib.parse.quote(repository, safe="")
        return f"{self.config.base_url}/api/v4/projects/{project_id}{endpoint}"

    def get_default_branch(self, repository: str) -> str:
        try:
            data = self._get_json(self._url(repository), self._headers())
        except httpx.HTTPStatusError as e:
            raise_not_found(e, repository)
        return data.get("default_branch") or "main"

    def list_commits(self, repository: str, time_filter: TimeFilter) -> list[Commit]:
        items = self._get_paginated(
            self._url(repository, "/repository/commits"),
            self._headers(),
            {
                "since": time_filter.start_date,
                "until": time_filter.end_date,
                "with_stats": "true",
            },
        )
        return [self._normalize_commit(item) for item in items]

    def list_pipelines(
        self, repository: str, time_filter: TimeFilter
    ) -> list[Pipeline]:
        items = self._get_paginated(
            self._url(repository, "/pipelines"),
            self._headers(),
            {
                "updated_after": time_filter.start_date,
                "updated_before": time_filter.end_date,
            },
        )
        return [
            Pipeline(
                id=item.get("id"),
                status=item.get("status") or "",
                ref=item.get("ref") or "",
                sha=item.get("sha") or "",
                created_at=item.get("created_at") or "",
                updated_at=item.get("updated_at") or "",
            )
            for item in items
        ]

    def list_pipeline_jobs(self, repository: str, pipeline_id: int | str) -> list[Job]:
        items = self._get_paginated(
            self._url(repository, f"/pipelines/{pipeline_id}/jobs"), self._headers()
        )
        return [
            Job(
                id=item.get("id"),
                pipeline_id=pipeline_id,
                status=item.get("status") or "",
                name=item.get("name") or "",
            )
            for item in items
        ]

    def list_branches(self, repository: str) -> list[Branch]:
        items = self._get_paginated(
            self._url(repository, "/repository/branches"), self._headers()
        )
        return [
            Branch(
                name=item.get("name", ""),
                last_commit_date=(item.get("commit") or {}).get("committed_date")
                or "",
                protected=bool(item.get("protected", False)),
                last_commit_sha=(item.get("commit") or {}).get("id", ""),
            )
            for item in items
        ]

    def list_files(self, repository: str, path: str = "") -> list[str]:
        items = self._get_paginated(
            self._url(repository, "/repository/tree"),
            self._headers(),
            {"path": path.strip("/")},
        )
        return [item["path"] for item in items if item.get("type") == "blob"]

    def get_file_content(self, repository: str, path: str) -> str:
        encoded_path = urllib.parse.quote(path.strip("/"), safe="")
        return self._get_text(
            self._url(repository, f"/repository/files/{encoded_path}/raw"),
            self._headers(),
            {"ref": "HEAD"},
        )

    def list_pull_requests(
        self, repository: str, time_filter: TimeFilter
    ) -> list[PullRequest]:
        items = self._get_paginated(
            self._url(repository, "/merge_requests"),
            self._headers(),
            {
                "created_after": time_filter.start_date,
                "created_before": time_filter.end_date,
                "scope": "all",
            },
        )
        return [
            PullRequest(
                id=item.get("id"),
                author=(item.get("author") or {}).get("username", ""),
                created_at=item.get("created_at") or "",
                state=_MERGE_REQUEST_STATES.get(item.get("state"), "closed"),
                title=item.get("title") or "",
                merged_at=item.get("merged_at"),
                closed_at=item.get("closed_at"),
            )
            for item in items
        ]

    def list_test_reports(
        self, repository: str, pipelines: list[Pipeline]
    ) -> list[PipelineTestReport]:
        """Fetch test report summaries and coverage for each pipeline."""
        reports = []
        for pipeline in pipelines:
            summary = self._get_json(
                self._url(repository, f"/pipelines/{pipeline.id}/test_report_summary"),
                self._headers(),
            )
            detail = self._get_json(
                self._url(repository, f"/pipelines/{pipeline.id}"), self._headers()
            )
            suites = [
                self._normalize_suite(suite)
                for suite in summary.get("test_suites") or []
            ]
            reports.append(
                PipelineTestReport(
                    pipeline_id=pipeline.id,
                    suites=suites,
                    coverage=_parse_coverage(detail.get("coverage")),
                )
            )
        return reports

    def _normalize_commit(self, item: dict[str, Any]) -> Commit:
        stats = item.get("stats") or {}
        return Commit(
            id=item.get("id", ""),
            message=item.get("message") or "",
            title=item.get("title"),
            author_name=item.get("author_name") or "",
            author_email=item.get("author_email") or "",
            created_at=item.get("created_at") or "",
            code_added=stats.get("additions") or 0,
            code_removed=stats.get("deletions") or 0,
        )

    def _normalize_suite(self, suite: dict[str, Any]) -> SuiteResult:
        return SuiteResult(
            name=suite.get("name") or "",
            total_count=suite.get("total_count") or 0,
            success_count=suite.get("success_count") or 0,
            failed_count=suite.get("failed_count") or 0,
            skipped_count=suite.get("skipped_count") or 0,
            error_count=suite.get("error_count") or 0,
            total_time=float(suite.get("total_time") or 0),
        )


def _parse_coverage(value: Any) -> float | None:
    """GitLab reports coverage as a string such as "87.50"."""
    if value in (None, ""):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
