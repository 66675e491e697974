"""
Provider-neutral repository data source interface.
"""

from abc import ABC, abstractmethod
from typing import Any, NamedTuple

import httpx

from repo_health_guard.analyzers.contributors import aggregate_contributors
from repo_health_guard.http_client import _get_http_client
from repo_health_guard.models import (
    Branch,
    Commit,
    Contributor,
    Job,
    Pipeline,
    PipelineTestReport,
    PullRequest,
    TimeFilter,
)


class ProviderConfig(NamedTuple):
    """Immutable connection settings handed to a provider at construction."""

    token: str | None = None
    base_url: str | None = None
    verify_ssl: bool = True
    timeout: float = 30
    page_size: int = 100
    max_pages: int = 10


class RepositoryDataSource(ABC):
    """
    Fetches repository entities and normalizes them to the neutral records.

    Every method either returns the complete list for the request or raises;
    a failed request is never reported as an empty list.
    """

    def __init__(self, config: ProviderConfig):
        self.config = config

    @abstractmethod
    def get_platform_name(self) -> str:
        """Return the platform identifier, e.g. 'github'."""

    @abstractmethod
    def get_repository_url(self, repository: str) -> str:
        """Return the web URL of the repository."""

    @abstractmethod
    def get_default_branch(self, repository: str) -> str:
        """Default branch name; raises ValueError for an unknown repository."""

    @abstractmethod
    def list_commits(self, repository: str, time_filter: TimeFilter) -> list[Commit]:
        """Commits authored within the window, with line statistics."""

    @abstractmethod
    def list_pipelines(
        self, repository: str, time_filter: TimeFilter
    ) -> list[Pipeline]:
        """CI runs within the window."""

    @abstractmethod
    def list_pipeline_jobs(self, repository: str, pipeline_id: int | str) -> list[Job]:
        """Jobs belonging to one CI run."""

    @abstractmethod
    def list_branches(self, repository: str) -> list[Branch]:
        """All branches with last-commit date and protection flag."""

    @abstractmethod
    def list_files(self, repository: str, path: str = "") -> list[str]:
        """Paths of the regular files directly under path."""

    @abstractmethod
    def get_file_content(self, repository: str, path: str) -> str:
        """Decoded text of a file on the default branch."""

    def list_contributors(
        self,
        repository: str,
        time_filter: TimeFilter,
        commits: list[Commit] | None = None,
    ) -> list[Contributor]:
        """
        Per-author commit counts within the window.

        Pass already fetched commits to avoid fetching them a second time.
        """
        if commits is None:
            commits = self.list_commits(repository, time_filter)
        return aggregate_contributors(commits)

    def list_pull_requests(
        self, repository: str, time_filter: TimeFilter
    ) -> list[PullRequest]:
        """Pull/merge requests created within the window."""
        return []

    def list_test_reports(
        self, repository: str, pipelines: list[Pipeline]
    ) -> list[PipelineTestReport]:
        """Test reports of the given runs, in the same order."""
        return []

    def validate_credentials(self) -> bool:
        """Check if a token is configured."""
        return bool(self.config.token)

    def _get_json(
        self,
        url: str,
        headers: dict[str, str],
        params: dict[str, Any] | None = None,
    ) -> Any:
        client = _get_http_client(self.config.verify_ssl)
        response = client.get(
            url, headers=headers, params=params, timeout=self.config.timeout
        )
        response.raise_for_status()
        return response.json()

    def _get_text(
        self,
        url: str,
        headers: dict[str, str],
        params: dict[str, Any] | None = None,
    ) -> str:
        client = _get_http_client(self.config.verify_ssl)
        response = client.get(
            url, headers=headers, params=params, timeout=self.config.timeout
        )
        response.raise_for_status()
        return response.text

    def _get_paginated(
        self,
        url: str,
        headers: dict[str, str],
        params: dict[str, Any] | None = None,
        items_key: str | None = None,
    ) -> list[Any]:
        """
        Follow page numbers until a short page.

        Raises:
            ValueError: If every one of max_pages pages came back full, so the
                        result set may be larger than what was fetched.
        """
        items: list[Any] = []
        for page in range(1, self.config.max_pages + 1):
            page_params = dict(params or {})
            page_params.update({"per_page": self.config.page_size, "page": page})
            data = self._get_json(url, headers, page_params)
            batch = data.get(items_key, []) if items_key else data
            items.extend(batch)
            if len(batch) < self.config.page_size:
                return items
        raise ValueError(
            f"More than {self.config.max_pages} pages of "
            f"{self.config.page_size} items from {url}; "
            "increase max_pages or narrow the time window."
        )


def raise_not_found(response_error: httpx.HTTPStatusError, repository: str) -> None:
    """Turn a 404 into a ValueError naming the repository; re-raise otherwise."""
    if response_error.response.status_code == 404:
        raise ValueError(
            f"Repository {repository} not found or is inaccessible."
        ) from response_error
    raise response_error
