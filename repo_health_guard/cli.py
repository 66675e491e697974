"""
Command-line interface for Repo Health Guard.
"""

import json
import math
from datetime import datetime, timezone

import httpx
import typer
from rich.console import Console
from rich.table import Table

from repo_health_guard.config import get_settings
from repo_health_guard.core import RepositoryReport, analyze_repository, report_to_dict
from repo_health_guard.http_client import close_http_client
from repo_health_guard.models import TimeFilter, parse_timestamp, to_iso
from repo_health_guard.vcs import (
    ProviderConfig,
    get_data_source,
    list_supported_platforms,
)

# --- Typer App ---
app = typer.Typer(help="Repository health dashboard for GitHub and GitLab.")
console = Console()

# --- Helper Functions ---


def _score_color(score: int) -> str:
    if score >= 80:
        return "green"
    if score >= 50:
        return "yellow"
    return "red"


def _format_ratio(value: float) -> str:
    return "∞" if math.isinf(value) else f"{value:.2f}"


def build_time_filter(
    days: int, since: str | None = None, until: str | None = None
) -> TimeFilter:
    """Build the analysis window from --since/--until or the last N days."""
    end = parse_timestamp(until) if until else datetime.now(timezone.utc)
    if end is None:
        raise ValueError(f"Invalid --until date: {until}")
    if since:
        start = parse_timestamp(since)
        if start is None:
            raise ValueError(f"Invalid --since date: {since}")
        if start >= end:
            raise ValueError("--since must be earlier than --until")
        return TimeFilter(to_iso(start), to_iso(end))
    if days <= 0:
        raise ValueError(f"--days must be a positive number, got {days}")
    return TimeFilter.last_days(days, now=end)


def display_report(report: RepositoryReport) -> None:
    """Display the category scores and key statistics in a rich table."""
    scores = report.scores
    table = Table(title=f"Repo Health Report: {report.repository}")
    table.add_column("Category", justify="left", style="cyan", no_wrap=True)
    table.add_column("Score", justify="center", style="magenta")
    table.add_column("Key Observations", justify="left")

    commits = report.commits
    deployments = report.deployments
    documentation = report.documentation
    testing = report.testing
    security = report.security

    rows = [
        (
            "Documentation",
            scores.documentation,
            f"README {documentation.readme_score}/100 • ADR {documentation.adr_score}/100 • "
            f"CONTRIBUTING {'✓' if documentation.contributing_guide_exists else '✗'} • "
            f"LICENSE {'✓' if documentation.license_exists else '✗'}",
        ),
        (
            "Testing",
            scores.testing,
            f"Coverage {testing.coverage:.1f}% • Reliability {testing.reliability:.1f}% • "
            f"{testing.unit_test_count + testing.integration_test_count + testing.e2e_test_count} tests",
        ),
        (
            "Commits",
            scores.commits,
            f"{commits.total_commits} commits • {commits.daily_commit_rate:.2f}/day • "
            f"Conventional {commits.conventional_commit_rate:.0f}% • "
            f"Problematic {commits.problematic_commits_rate * 100:.0f}% • "
            f"+/- ratio {_format_ratio(commits.add_remove_ratio)}",
        ),
        (
            "Security",
            scores.security,
            f"{security.exposed_secrets_count} possible secret(s) • "
            f"{security.vulnerability_count} risky construct(s) in "
            f"{security.files_scanned} file(s)",
        ),
        (
            "Deployment",
            scores.deployment,
            f"{deployments.frequency:.2f}/day • Success {deployments.success_rate:.0f}% • "
            f"Efficiency {deployments.pipeline_efficiency:.0f}% • "
            f"Rollbacks {deployments.rollback_rate * 100:.0f}%",
        ),
    ]
    for name, score, observations in rows:
        color = _score_color(score)
        table.add_row(name, f"[{color}]{score}/100[/{color}]", observations)

    overall_color = _score_color(scores.overall)
    table.add_row(
        "[bold]Overall[/bold]",
        f"[bold {overall_color}]{scores.overall}/100[/bold {overall_color}]",
        f"{report.time_filter.start_date} → {report.time_filter.end_date}",
    )
    console.print(table)

    contributors = report.contributors
    branches = report.branches
    pull_requests = report.pull_requests
    imbalance = (
        " • [yellow]Imbalanced[/yellow]" if contributors.imbalanced_contribution else ""
    )
    console.print(
        f"\n👥 Contributors: {contributors.total_contributors} • "
        f"Bus factor {contributors.bus_factor} • "
        f"Top: {contributors.top_contributor} "
        f"({contributors.top_contributor_percentage:.1f}%) • "
        f"Distribution: {contributors.commit_distribution} "
        f"(Gini {contributors.gini_coefficient:.3f}){imbalance}"
    )
    console.print(
        f"🌿 Branches: {branches.total_branches} • "
        f"Stagnant {branches.stagnant_branch_count} • Health {branches.branch_health}"
    )
    if branches.stagnant_branches:
        names = ", ".join(b.name for b in branches.stagnant_branches[:5])
        more = branches.stagnant_branch_count - 5
        suffix = f" (+{more} more)" if more > 0 else ""
        console.print(f"   [dim]Stagnant: {names}{suffix}[/dim]")
    console.print(
        f"🔀 Pull requests: {pull_requests.total} • Merged {pull_requests.merged} "
        f"({pull_requests.merge_rate:.0f}%) • "
        f"Avg time to merge {pull_requests.avg_time_to_merge:.1f}h"
    )


# --- Commands ---


@app.command()
def analyze(
    repository: str = typer.Argument(
        ..., help="Repository path, e.g. owner/repo or group/subgroup/project."
    ),
    platform: str | None = typer.Option(
        None,
        "--platform",
        "-p",
        help="Hosting platform (github, gitlab). Defaults to config or 'github'.",
    ),
    base_url: str | None = typer.Option(
        None, "--base-url", help="API base URL for self-hosted instances."
    ),
    days: int | None = typer.Option(
        None, "--days", "-d", help="Analyze the last N days (default: 30)."
    ),
    since: str | None = typer.Option(
        None, "--since", help="Window start (ISO-8601). Overrides --days."
    ),
    until: str | None = typer.Option(
        None, "--until", help="Window end (ISO-8601). Default: now."
    ),
    output_json: bool = typer.Option(
        False, "--json", help="Print the full report as JSON."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show fetch progress."
    ),
    insecure: bool = typer.Option(
        False, "--insecure", help="Disable SSL certificate verification."
    ),
):
    """Analyze the health of a single repository."""
    try:
        settings = get_settings()
        time_filter = build_time_filter(
            days if days is not None else settings.window_days, since, until
        )
        config = ProviderConfig(
            base_url=base_url or settings.base_url,
            verify_ssl=settings.verify_ssl and not insecure,
            max_pages=settings.max_pages,
        )
        source = get_data_source(platform or settings.platform, config)
        report = analyze_repository(
            source,
            repository,
            time_filter,
            max_files=settings.max_files,
            stagnation_days=settings.stagnation_days,
            verbose=verbose,
        )
    except ValueError as e:
        console.print(f"[yellow]⚠️  {e}[/yellow]")
        raise typer.Exit(code=1) from None
    except httpx.HTTPError as e:
        console.print(f"[yellow]⚠️  Unable to fetch repository data: {e}[/yellow]")
        raise typer.Exit(code=1) from None
    finally:
        close_http_client()

    if output_json:
        print(json.dumps(report_to_dict(report), indent=2, ensure_ascii=False))
    else:
        display_report(report)


@app.command()
def platforms():
    """List supported hosting platforms."""
    for name in list_supported_platforms():
        console.print(f"• {name}")


if __name__ == "__main__":
    app()
