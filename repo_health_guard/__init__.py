"""Repo Health Guard: repository health analytics for GitHub and GitLab."""

__version__ = "0.1.0"
