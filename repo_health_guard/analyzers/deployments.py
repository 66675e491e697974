"""CI pipeline and deployment metrics."""

from typing import Mapping, NamedTuple, Sequence

from repo_health_guard.analyzers.base import safe_ratio
from repo_health_guard.models import Job, Pipeline, TimeFilter, parse_timestamp

CANONICAL_STATES = (
    "success",
    "failed",
    "running",
    "pending",
    "cancelled",
    "skipped",
    "created",
    "unknown",
)

# Provider-specific spellings (GitHub Actions, GitLab CI, Azure Pipelines)
_STATUS_SYNONYMS = {
    "success": ("success", "succeeded", "passed"),
    "failed": (
        "failed",
        "failure",
        "timed_out",
        "startup_failure",
        "action_required",
        "partiallysucceeded",
        "error",
    ),
    "running": ("running", "in_progress", "inprogress"),
    "pending": (
        "pending",
        "queued",
        "waiting",
        "requested",
        "notstarted",
        "waiting_for_resource",
        "preparing",
        "scheduled",
        "manual",
    ),
    "cancelled": ("cancelled", "canceled", "canceling", "cancelling"),
    "skipped": ("skipped", "neutral"),
    "created": ("created",),
}

_STATE_BY_SYNONYM = {
    synonym: state
    for state, synonyms in _STATUS_SYNONYMS.items()
    for synonym in synonyms
}

DEPLOYMENT_REFS = ("main", "master")
RELEASE_REF_PREFIX = "release/"
REVERT_REF_PREFIX = "revert-"
ROLLBACK_KEYWORDS = ("rollback", "revert")


class DeploymentMetrics(NamedTuple):
    frequency: float
    success_rate: float
    avg_time_between: float
    pipeline_efficiency: float
    rollback_rate: float
    deployment_count: int = 0
    successful_deployments: int = 0
    failed_deployments: int = 0


def _normalize_token(value: str | None) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip().lower().replace(" ", "_")


def normalize_pipeline_status(status: str | None, conclusion: str | None = None) -> str:
    """
    Map a raw provider status/conclusion pair to a canonical state.

    A recognised conclusion wins over the status, so GitHub's
    ``completed``/``success`` and Azure's ``completed``/``succeeded`` both
    normalize to "success". ``completed`` on its own is "unknown".
    """
    conclusion_state = _STATE_BY_SYNONYM.get(_normalize_token(conclusion))
    if conclusion_state is not None:
        return conclusion_state
    return _STATE_BY_SYNONYM.get(_normalize_token(status), "unknown")


def pipeline_state(pipeline: Pipeline) -> str:
    return normalize_pipeline_status(pipeline.status, pipeline.conclusion)


def is_deployment_ref(ref: str | None) -> bool:
    """Deployments are runs on main, master or release/* refs."""
    if not ref:
        return False
    return ref in DEPLOYMENT_REFS or ref.startswith(RELEASE_REF_PREFIX)


def is_rollback(pipeline: Pipeline) -> bool:
    """A successful run on a revert-* ref, or built from a rollback/revert commit."""
    if pipeline_state(pipeline) != "success":
        return False
    if (pipeline.ref or "").startswith(REVERT_REF_PREFIX):
        return True
    message = (pipeline.message or "").lower()
    return any(keyword in message for keyword in ROLLBACK_KEYWORDS)


def average_hours_between(pipelines: Sequence[Pipeline]) -> float:
    """Mean gap between consecutive runs, newest first, in hours."""
    timestamps = [parse_timestamp(p.created_at) for p in pipelines]
    ordered = sorted((ts for ts in timestamps if ts is not None), reverse=True)
    if len(ordered) <= 1:
        return 0.0
    total_seconds = sum(
        (newer - older).total_seconds() for newer, older in zip(ordered, ordered[1:])
    )
    return total_seconds / (len(ordered) - 1) / 3600


def calculate_pipeline_efficiency(
    pipelines: Sequence[Pipeline], jobs: Mapping[int | str, Sequence[Job]]
) -> float:
    """Percentage of successful jobs across the given pipelines."""
    total_jobs = 0
    successful_jobs = 0
    for pipeline in pipelines:
        pipeline_jobs = jobs.get(pipeline.id, ())
        total_jobs += len(pipeline_jobs)
        successful_jobs += sum(
            1
            for job in pipeline_jobs
            if normalize_pipeline_status(job.status) == "success"
        )
    return safe_ratio(successful_jobs, total_jobs) * 100


def analyze_deployments(
    pipelines: list[Pipeline],
    time_filter: TimeFilter,
    jobs: Mapping[int | str, Sequence[Job]] | None = None,
) -> DeploymentMetrics:
    """
    Compute deployment metrics from pipelines on release-like refs.

    Args:
        pipelines: All pipelines in the window; non-deployment refs are ignored.
        time_filter: Analysis window, used for the per-day frequency.
        jobs: Jobs keyed by pipeline id, used for pipeline efficiency.
    """
    deployments = [p for p in pipelines if is_deployment_ref(p.ref)]
    states = [pipeline_state(p) for p in deployments]
    successful = [p for p, state in zip(deployments, states) if state == "success"]
    failed_count = states.count("failed")
    rollbacks = [p for p in successful if is_rollback(p)]

    return DeploymentMetrics(
        frequency=safe_ratio(len(deployments), time_filter.total_days),
        success_rate=safe_ratio(len(successful), len(deployments)) * 100,
        avg_time_between=average_hours_between(deployments),
        pipeline_efficiency=calculate_pipeline_efficiency(deployments, jobs or {}),
        rollback_rate=safe_ratio(len(rollbacks), len(successful)),
        deployment_count=len(deployments),
        successful_deployments=len(successful),
        failed_deployments=failed_count,
    )
