"""
VCS (Version Control System) data sources for Repo Health Guard.

This module provides a unified interface for fetching repository entities
(commits, pipelines, branches, contributors, files) from different hosting
platforms, normalized to provider-neutral records.
"""

from repo_health_guard.vcs.base import ProviderConfig, RepositoryDataSource
from repo_health_guard.vcs.github import GitHubProvider
from repo_health_guard.vcs.gitlab import GitLabProvider

__all__ = [
    "GitHubProvider",
    "GitLabProvider",
    "ProviderConfig",
    "RepositoryDataSource",
    "get_data_source",
    "list_supported_platforms",
    "register_data_source",
]

# Registry of supported data sources
_PROVIDERS: dict[str, type[RepositoryDataSource]] = {
    "github": GitHubProvider,
    "gitlab": GitLabProvider,
}


def get_data_source(
    platform: str = "github", config: ProviderConfig | None = None
) -> RepositoryDataSource:
    """
    Factory function to get a data source instance.

    Args:
        platform: Platform name ('github', 'gitlab', etc.). Default: 'github'
        config: Connection settings (token, base URL, SSL verification)

    Returns:
        Initialized data source

    Raises:
        ValueError: If platform is not supported

    Example:
        >>> source = get_data_source("gitlab", ProviderConfig(token="glpat-xxx"))
        >>> commits = source.list_commits("group/project", time_filter)
    """
    platform_lower = platform.lower()

    if platform_lower not in _PROVIDERS:
        supported = ", ".join(sorted(_PROVIDERS.keys()))
        raise ValueError(
            f"Unsupported VCS platform: {platform}. Supported platforms: {supported}"
        )

    provider_class = _PROVIDERS[platform_lower]
    return provider_class(config or ProviderConfig())


def register_data_source(
    platform: str, provider_class: type[RepositoryDataSource]
) -> None:
    """
    Register a custom data source.

    Args:
        platform: Platform identifier (e.g., 'azure', 'gitea')
        provider_class: Class implementing the RepositoryDataSource interface

    Raises:
        TypeError: If provider_class doesn't inherit from RepositoryDataSource
    """
    if not isinstance(provider_class, type) or not issubclass(
        provider_class, RepositoryDataSource
    ):
        raise TypeError(
            f"Provider class must inherit from RepositoryDataSource, "
            f"got {provider_class!r}"
        )
    _PROVIDERS[platform.lower()] = provider_class


def list_supported_platforms() -> list[str]:
    """Return the sorted list of registered platform identifiers."""
    return sorted(_PROVIDERS.keys())
