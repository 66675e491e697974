"""
GitHub data source for Repo Health Guard.

Uses the GitHub REST API (v3) to fetch commits, workflow runs, branches,
pull requests and file contents, normalized to the neutral records.
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
    PullRequest,
    TimeFilter,
    parse_timestamp,
)
from repo_health_guard.vcs.base import (
    ProviderConfig,
    RepositoryDataSource,
    raise_not_found,
)

# Load environment variables
load_dotenv()

GITHUB_API_URL = "https://api.github.com"
GITHUB_WEB_URL = "https://github.com"


class GitHubProvider(RepositoryDataSource):
    """GitHub data source using the REST API."""

    def __init__(self, config: ProviderConfig | None = None):
        """
        Initialize GitHub provider.

        Args:
            config: Connection settings. When no token is given, it is read
                    from the GITHUB_TOKEN environment variable.

        Raises:
            ValueError: If no token is configured
        """
        config = config or ProviderConfig()
        token = config.token or os.getenv("GITHUB_TOKEN")
        if not token:
            raise ValueError(
                "GITHUB_TOKEN is required for GitHub provider.\n"
                "\n"
                "To get started:\n"
                "1. Create a GitHub Personal Access Token:\n"
                "   -> https://github.com/settings/tokens/new\n"
                "2. Select scopes: 'repo' (or 'public_repo') and 'workflow'\n"
                "3. Set the token:\n"
                "   export GITHUB_TOKEN='your_token_here'  # Linux/macOS\n"
                "   or add to your .env file: GITHUB_TOKEN=your_token_here\n"
            )
        super().__init__(
            config._replace(
                token=token,
                base_url=(config.base_url or GITHUB_API_URL).rstrip("/"),
            )
        )

    def get_platform_name(self) -> str:
        """Return 'github' as the platform identifier."""
        return "github"

    def get_repository_url(self, repository: str) -> str:
        """Construct GitHub repository URL."""
        return f"{GITHUB_WEB_URL}/{repository}"

    def _headers(self, accept: str = "application/vnd.github+json") -> dict[str, str]:
        return {
            "Accept": accept,
            "Authorization": f"Bearer {self.config.token}",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _url(self, repository: str, endpoint: str = "") -> str:
        return f"{self.config.base_url}/repos/{repository}{endpoint}"

    def get_default_branch(self, repository: str) -> str:
        try:
            data = self._get_json(self._url(repository), self._headers())
        except httpx.HTTPStatusError as e:
            raise_not_found(e, repository)
        return data.get("default_branch") or "main"

    def list_commits(self, repository: str, time_filter: TimeFilter) -> list[Commit]:
        """
        Fetch commits in the window.

        The list endpoint carries no line statistics, so each commit is
        fetched individually for its additions/deletions.
        """
        items = self._get_paginated(
            self._url(repository, "/commits"),
            self._headers(),
            {"since": time_filter.start_date, "until": time_filter.end_date},
        )
        commits = []
        for item in items:
            detail = self._get_json(
                self._url(repository, f"/commits/{item['sha']}"), self._headers()
            )
            commits.append(self._normalize_commit(item, detail.get("stats") or {}))
        return commits

    def list_pipelines(
        self, repository: str, time_filter: TimeFilter
    ) -> list[Pipeline]:
        runs = self._get_paginated(
            self._url(repository, "/actions/runs"),
            self._headers(),
            {"created": f"{time_filter.start_date}..{time_filter.end_date}"},
            items_key="workflow_runs",
        )
        return [self._normalize_run(run) for run in runs]

    def list_pipeline_jobs(self, repository: str, pipeline_id: int | str) -> list[Job]:
        jobs = self._get_paginated(
            self._url(repository, f"/actions/runs/{pipeline_id}/jobs"),
            self._headers(),
            items_key="jobs",
        )
        return [
            Job(
                id=job.get("id"),
                pipeline_id=pipeline_id,
                status=job.get("conclusion") or job.get("status") or "",
                name=job.get("name") or "",
            )
            for job in jobs
        ]

    def list_branches(self, repository: str) -> list[Branch]:
        """Fetch branches; the last commit date needs one request per branch."""
        items = self._get_paginated(
            self._url(repository, "/branches"), self._headers()
        )
        branches = []
        for item in items:
            sha = (item.get("commit") or {}).get("sha", "")
            last_commit_date = ""
            if sha:
                detail = self._get_json(
                    self._url(repository, f"/commits/{sha}"), self._headers()
                )
                commit_info = detail.get("commit") or {}
                committer = commit_info.get("committer") or commit_info.get("author")
                last_commit_date = (committer or {}).get("date") or ""
            branches.append(
                Branch(
                    name=item.get("name", ""),
                    last_commit_date=last_commit_date,
                    protected=bool(item.get("protected", False)),
                    last_commit_sha=sha,
                )
            )
        return branches

    def _contents_url(self, repository: str, path: str) -> str:
        encoded = urllib.parse.quote(path.strip("/"))
        return self._url(repository, f"/contents/{encoded}" if encoded else "/contents")

    def list_files(self, repository: str, path: str = "") -> list[str]:
        data = self._get_json(self._contents_url(repository, path), self._headers())
        entries = data if isinstance(data, list) else [data]
        return [entry["path"] for entry in entries if entry.get("type") == "file"]

    def get_file_content(self, repository: str, path: str) -> str:
        return self._get_text(
            self._contents_url(repository, path),
            self._headers(accept="application/vnd.github.raw+json"),
        )

    def list_pull_requests(
        self, repository: str, time_filter: TimeFilter
    ) -> list[PullRequest]:
        """Fetch pull requests created inside the window, newest first."""
        start = parse_timestamp(time_filter.start_date)
        end = parse_timestamp(time_filter.end_date)
        items = self._get_paginated(
            self._url(repository, "/pulls"),
            self._headers(),
            {"state": "all", "sort": "created", "direction": "desc"},
        )
        pull_requests = []
        for item in items:
            created = parse_timestamp(item.get("created_at"))
            if created is None:
                continue
            if start is not None and created < start:
                continue
            if end is not None and created > end:
                continue
            pull_requests.append(self._normalize_pull_request(item))
        return pull_requests

    def _normalize_commit(
        self, item: dict[str, Any], stats: dict[str, Any]
    ) -> Commit:
        commit_info = item.get("commit") or {}
        author = commit_info.get("author") or {}
        message = commit_info.get("message") or ""
        return Commit(
            id=item.get("sha", ""),
            message=message,
            title=message.split("\n", 1)[0],
            author_name=author.get("name") or "",
            author_email=author.get("email") or "",
            created_at=author.get("date") or "",
            code_added=stats.get("additions") or 0,
            code_removed=stats.get("deletions") or 0,
        )

    def _normalize_run(self, run: dict[str, Any]) -> Pipeline:
        head_commit = run.get("head_commit") or {}
        return Pipeline(
            id=run.get("id"),
            status=run.get("status") or "",
            conclusion=run.get("conclusion"),
            ref=run.get("head_branch") or "",
            sha=run.get("head_sha") or "",
            created_at=run.get("created_at") or "",
            updated_at=run.get("updated_at") or "",
            message=head_commit.get("message"),
        )

    def _normalize_pull_request(self, item: dict[str, Any]) -> PullRequest:
        if item.get("merged_at"):
            state = "merged"
        elif item.get("state") == "closed":
            state = "closed"
        else:
            state = "open"
        return PullRequest(
            id=item.get("id"),
            author=(item.get("user") or {}).get("login", ""),
            created_at=item.get("created_at") or "",
            state=state,
            title=item.get("title") or "",
            merged_at=item.get("merged_at"),
            closed_at=item.get("closed_at"),
        )
