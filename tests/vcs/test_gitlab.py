"""Tests for GitLab data source."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from repo_health_guard.models import (
    Branch,
    Commit,
    Job,
    Pipeline,
    PipelineTestReport,
    SuiteResult,
    TimeFilter,
)
from repo_health_guard.vcs.base import ProviderConfig
from repo_health_guard.vcs.gitlab import GitLabProvider, _parse_coverage

API = "https://gitlab.com/api/v4/projects/group%2Fsub%2Fproject"
WINDOW = TimeFilter("2024-01-01T00:00:00Z", "2024-01-31T00:00:00Z")


def _response(payload=None, text="", status_code=200):
    response = MagicMock()
    response.json.return_value = payload
    response.text = text
    if status_code >= 400:
        request = httpx.Request("GET", API)
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            f"HTTP {status_code}",
            request=request,
            response=httpx.Response(status_code, request=request),
        )
    return response


@pytest.fixture
def provider():
    return GitLabProvider(ProviderConfig(token="test_token"))


def test_gitlab_provider_requires_token():
    """Test that GitLabProvider requires a token."""
    with patch.dict("os.environ", {}, clear=True):
        with pytest.raises(ValueError, match="GITLAB_TOKEN is required"):
            GitLabProvider()


def test_gitlab_provider_empty_token_falls_back_to_env():
    """Test that an empty token is replaced by GITLAB_TOKEN."""
    with patch.dict("os.environ", {"GITLAB_TOKEN": "env_token"}):
        provider = GitLabProvider(ProviderConfig(token=""))
        assert provider.config.token == "env_token"


def test_gitlab_provider_get_repository_url(provider):
    """Test GitLabProvider repository URL construction."""
    assert provider.get_platform_name() == "gitlab"
    assert (
        provider.get_repository_url("group/sub/project")
        == "https://gitlab.com/group/sub/project"
    )


def test_gitlab_self_managed_instance():
    """Test that a self-managed base URL is used for API and web URLs."""
    provider = GitLabProvider(
        ProviderConfig(token="t", base_url="https://gitlab.example.com/")
    )
    assert provider.config.base_url == "https://gitlab.example.com"
    assert (
        provider.get_repository_url("team/app")
        == "https://gitlab.example.com/team/app"
    )


@patch("repo_health_guard.vcs.base._get_http_client")
def test_get_default_branch_encodes_project_path(mock_get_client, provider):
    """Test that nested project paths are URL-encoded."""
    mock_get_client.return_value.get.return_value = _response(
        {"default_branch": "main"}
    )

    assert provider.get_default_branch("group/sub/project") == "main"

    args, kwargs = mock_get_client.return_value.get.call_args
    assert args[0] == API
    assert kwargs["headers"] == {"PRIVATE-TOKEN": "test_token"}


@patch("repo_health_guard.vcs.base._get_http_client")
def test_get_default_branch_not_found(mock_get_client, provider):
    """Test that a 404 becomes a ValueError."""
    mock_get_client.return_value.get.return_value = _response(status_code=404)

    with pytest.raises(ValueError, match="not found"):
        provider.get_default_branch("group/sub/project")


@patch("repo_health_guard.vcs.base._get_http_client")
def test_list_commits(mock_get_client, provider):
    """Test commit normalization with stats."""
    mock_get_client.return_value.get.return_value = _response(
        [
            {
                "id": "abc123",
                "title": "fix: handle empty pages",
                "message": "fix: handle empty pages\n\nBody",
                "author_name": "Alice",
                "author_email": "alice@example.com",
                "created_at": "2024-01-02T00:00:00Z",
                "stats": {"additions": 5, "deletions": 1, "total": 6},
            }
        ]
    )

    commits = provider.list_commits("group/sub/project", WINDOW)

    assert commits == [
        Commit(
            id="abc123",
            message="fix: handle empty pages\n\nBody",
            title="fix: handle empty pages",
            author_name="Alice",
            author_email="alice@example.com",
            created_at="2024-01-02T00:00:00Z",
            code_added=5,
            code_removed=1,
        )
    ]
    args, kwargs = mock_get_client.return_value.get.call_args
    assert args[0] == f"{API}/repository/commits"
    assert kwargs["params"]["with_stats"] == "true"
    assert kwargs["params"]["since"] == WINDOW.start_date


@patch("repo_health_guard.vcs.base._get_http_client")
def test_list_commits_beyond_max_pages_raises(mock_get_client):
    """Test that commits are never silently truncated at the page limit."""
    provider = GitLabProvider(
        ProviderConfig(token="test_token", page_size=2, max_pages=3)
    )
    full_page = [
        {"id": "a", "title": "one", "created_at": "2024-01-02T00:00:00Z"},
        {"id": "b", "title": "two", "created_at": "2024-01-03T00:00:00Z"},
    ]
    mock_get_client.return_value.get.return_value = _response(full_page)

    with pytest.raises(ValueError, match="More than 3 pages"):
        provider.list_commits("group/sub/project", WINDOW)
    assert mock_get_client.return_value.get.call_count == 3


@patch("repo_health_guard.vcs.base._get_http_client")
def test_list_pipelines(mock_get_client, provider):
    """Test pipeline normalization and window parameters."""
    mock_get_client.return_value.get.return_value = _response(
        [
            {
                "id": 11,
                "status": "success",
                "ref": "main",
                "sha": "abc123",
                "created_at": "2024-01-02T00:00:00Z",
                "updated_at": "2024-01-02T00:05:00Z",
            }
        ]
    )

    pipelines = provider.list_pipelines("group/sub/project", WINDOW)

    assert pipelines == [
        Pipeline(
            id=11,
            status="success",
            ref="main",
            sha="abc123",
            created_at="2024-01-02T00:00:00Z",
            updated_at="2024-01-02T00:05:00Z",
        )
    ]
    _, kwargs = mock_get_client.return_value.get.call_args
    assert kwargs["params"]["updated_after"] == WINDOW.start_date
    assert kwargs["params"]["updated_before"] == WINDOW.end_date


@patch("repo_health_guard.vcs.base._get_http_client")
def test_list_pipeline_jobs(mock_get_client, provider):
    mock_get_client.return_value.get.return_value = _response(
        [
            {"id": 1, "status": "success", "name": "build"},
            {"id": 2, "status": "failed", "name": "test"},
        ]
    )

    jobs = provider.list_pipeline_jobs("group/sub/project", 11)

    assert jobs == [Job(1, 11, "success", "build"), Job(2, 11, "failed", "test")]
    args, _ = mock_get_client.return_value.get.call_args
    assert args[0] == f"{API}/pipelines/11/jobs"


@patch("repo_health_guard.vcs.base._get_http_client")
def test_list_branches(mock_get_client, provider):
    mock_get_client.return_value.get.return_value = _response(
        [
            {
                "name": "main",
                "protected": True,
                "commit": {"id": "s1", "committed_date": "2024-01-05T00:00:00Z"},
            },
            {"name": "orphan", "protected": False, "commit": None},
        ]
    )

    branches = provider.list_branches("group/sub/project")

    assert branches == [
        Branch("main", "2024-01-05T00:00:00Z", True, "s1"),
        Branch("orphan", "", False, ""),
    ]


@patch("repo_health_guard.vcs.base._get_http_client")
def test_list_files(mock_get_client, provider):
    """Test that only blobs are listed from the repository tree."""
    mock_get_client.return_value.get.return_value = _response(
        [
            {"path": "docs/adr/0001.md", "type": "blob"},
            {"path": "docs/adr/images", "type": "tree"},
        ]
    )

    assert provider.list_files("group/sub/project", "docs/adr/") == [
        "docs/adr/0001.md"
    ]
    _, kwargs = mock_get_client.return_value.get.call_args
    assert kwargs["params"]["path"] == "docs/adr"


@patch("repo_health_guard.vcs.base._get_http_client")
def test_get_file_content(mock_get_client, provider):
    """Test that file paths are URL-encoded for the raw endpoint."""
    mock_get_client.return_value.get.return_value = _response(text="# ADR 1\n")

    content = provider.get_file_content("group/sub/project", "docs/adr/0001.md")

    assert content == "# ADR 1\n"
    args, kwargs = mock_get_client.return_value.get.call_args
    assert args[0] == f"{API}/repository/files/docs%2Fadr%2F0001.md/raw"
    assert kwargs["params"] == {"ref": "HEAD"}


@patch("repo_health_guard.vcs.base._get_http_client")
def test_list_pull_requests_maps_states(mock_get_client, provider):
    """Test merge request state mapping."""
    mock_get_client.return_value.get.return_value = _response(
        [
            {"id": 1, "state": "opened", "author": {"username": "alice"}},
            {
                "id": 2,
                "state": "merged",
                "author": {"username": "bob"},
                "created_at": "2024-01-02T00:00:00Z",
                "merged_at": "2024-01-03T00:00:00Z",
            },
            {"id": 3, "state": "closed", "author": {"username": "carol"}},
            {"id": 4, "state": "locked", "author": {"username": "dave"}},
        ]
    )

    pull_requests = provider.list_pull_requests("group/sub/project", WINDOW)

    assert [pr.state for pr in pull_requests] == ["open", "merged", "closed", "closed"]
    assert pull_requests[1].author == "bob"
    assert pull_requests[1].merged_at == "2024-01-03T00:00:00Z"
    _, kwargs = mock_get_client.return_value.get.call_args
    assert kwargs["params"]["scope"] == "all"
    assert kwargs["params"]["created_after"] == WINDOW.start_date


@patch("repo_health_guard.vcs.base._get_http_client")
def test_list_test_reports(mock_get_client, provider):
    """Test test report summaries with pipeline coverage."""
    routes = {
        f"{API}/pipelines/11/test_report_summary": _response(
            {
                "total": {"count": 12},
                "test_suites": [
                    {
                        "name": "rspec unit",
                        "total_time": 1.5,
                        "total_count": 10,
                        "success_count": 9,
                        "failed_count": 1,
                        "skipped_count": 0,
                        "error_count": 0,
                    },
                    {
                        "name": "integration",
                        "total_time": 3,
                        "total_count": 2,
                        "success_count": 2,
                    },
                ],
            }
        ),
        f"{API}/pipelines/11": _response({"id": 11, "coverage": "87.50"}),
    }
    mock_get_client.return_value.get.side_effect = lambda url, **kwargs: routes[url]

    reports = provider.list_test_reports(
        "group/sub/project", [Pipeline(11, "success")]
    )

    assert reports == [
        PipelineTestReport(
            pipeline_id=11,
            suites=[
                SuiteResult("rspec unit", 10, 9, 1, 0, 0, 1.5),
                SuiteResult("integration", 2, 2, 0, 0, 0, 3.0),
            ],
            coverage=87.5,
        )
    ]


@pytest.mark.parametrize(
    ("value", "expected"),
    [("87.50", 87.5), (92, 92.0), (None, None), ("", None), ("n/a", None)],
)
def test_parse_coverage(value, expected):
    assert _parse_coverage(value) == expected
