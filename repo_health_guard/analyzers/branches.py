"""Branch hygiene metrics."""

from datetime import datetime, timedelta, timezone
from typing import NamedTuple

from repo_health_guard.models import Branch, parse_timestamp

STAGNATION_DAYS = 30


class BranchMetrics(NamedTuple):
    total_branches: int
    stagnant_branches: list[Branch]
    stagnant_branch_count: int
    healthy_branch_count: int
    branch_health: str  # "75.0%" or "N/A"


def is_stagnant(
    branch: Branch,
    now: datetime | None = None,
    stagnation_days: int = STAGNATION_DAYS,
) -> bool:
    """
    A branch is stagnant when unprotected and idle for more than the threshold.

    Branches without a parsable last-commit date are never flagged.
    """
    if branch.protected:
        return False
    last_commit = parse_timestamp(branch.last_commit_date)
    if last_commit is None:
        return False
    now = now or datetime.now(timezone.utc)
    return now - last_commit > timedelta(days=stagnation_days)


def analyze_branches(
    branches: list[Branch],
    now: datetime | None = None,
    stagnation_days: int = STAGNATION_DAYS,
) -> BranchMetrics:
    now = now or datetime.now(timezone.utc)
    total = len(branches)
    stagnant = [b for b in branches if is_stagnant(b, now, stagnation_days)]
    healthy = total - len(stagnant)

    if total == 0:
        branch_health = "N/A"
    else:
        branch_health = f"{healthy / total * 100:.1f}%"

    return BranchMetrics(
        total_branches=total,
        stagnant_branches=stagnant,
        stagnant_branch_count=len(stagnant),
        healthy_branch_count=healthy,
        branch_health=branch_health,
    )
