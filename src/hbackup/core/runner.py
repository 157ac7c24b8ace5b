"""Job and batch runners.

A job either produces one archive or is planned into a worklist that is
applied concurrently. Several jobs run as one asyncio task each; a failing
job is reported with its id and never affects its siblings.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from . import archive
from .execution import (
    DEFAULT_MAX_WORKERS,
    ActionError,
    apply,
    apply_async,
    execute_worklist,
)
from .models import Job
from .planning import resolve_file, resolve_tree, summarize

logger = logging.getLogger(__name__)


class JobError(Exception):
    """A job could not be completed."""

    def __init__(self, message: str, failures: Optional[list[ActionError]] = None):
        super().__init__(message)
        self.failures = failures or []


@dataclass
class JobResult:
    """Outcome of one job in a batch."""

    job_id: int
    error: Optional[BaseException] = None
    details: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None


def _check_target_dir(job: Job) -> None:
    if job.target.is_file():
        raise JobError(f"Target {job.target} is a file, a directory is required")


def _raise_for_failures(job: Job, failures: list[ActionError]) -> None:
    if not failures:
        return
    for failure in failures:
        logger.error("Job %d: %s", job.id, failure)
    raise JobError(
        f"{len(failures)} action(s) failed, first: {failures[0]}", failures=failures
    )


async def _run_tree(job: Job, parallel_actions: int) -> dict:
    await asyncio.to_thread(_check_target_dir, job)
    actions = await asyncio.to_thread(resolve_tree, job)
    counts = summarize(actions)
    logger.info(
        "Job %d: %d to copy, %d to delete, %d up to date",
        job.id,
        counts["copy"],
        counts["delete"],
        counts["skip"],
    )
    failures = await execute_worklist(actions, parallel_actions)
    _raise_for_failures(job, failures)
    return counts


def run_job(job: Job, parallel_actions: int = DEFAULT_MAX_WORKERS) -> dict:
    """Run one job to completion.

    Args:
        job: Job to run
        parallel_actions: Max concurrent file operations for directory jobs

    Returns:
        Action counts (``copy``, ``delete``, ``skip``), empty for archive jobs

    Raises:
        PlanningError: If the source is missing or of the wrong type
        JobError: If the target is unusable or any action failed
        ArchiveError: If the archive could not be written
    """
    logger.info("Running %s", job)

    if job.archive is not None:
        _check_target_dir(job)
        archive.compress(
            job.source,
            job.target,
            job.archive.format,
            job.archive.level,
            list(job.ignore),
        )
        return {}

    if job.source.is_dir():
        return asyncio.run(_run_tree(job, parallel_actions))

    action = resolve_file(job)
    try:
        apply(action)
    except ActionError as e:
        _raise_for_failures(job, [e])
    return summarize([action])


async def run_job_async(
    job: Job, parallel_actions: int = DEFAULT_MAX_WORKERS
) -> dict:
    """Coroutine variant of :func:`run_job` for use inside a running loop."""
    logger.info("Running %s", job)

    if job.archive is not None:
        await asyncio.to_thread(_check_target_dir, job)
        await asyncio.to_thread(
            archive.compress,
            job.source,
            job.target,
            job.archive.format,
            job.archive.level,
            list(job.ignore),
        )
        return {}

    if await asyncio.to_thread(job.source.is_dir):
        return await _run_tree(job, parallel_actions)

    action = await asyncio.to_thread(resolve_file, job)
    try:
        await apply_async(action)
    except ActionError as e:
        _raise_for_failures(job, [e])
    return summarize([action])


async def run_jobs_async(
    jobs: list[Job], parallel_actions: int = DEFAULT_MAX_WORKERS
) -> list[JobResult]:
    """Run every job as its own task and wait for all of them."""

    async def run_one(job: Job) -> JobResult:
        try:
            details = await run_job_async(job, parallel_actions)
        except Exception as e:
            logger.error("Failed to run job with id %d: %s", job.id, e)
            return JobResult(job.id, error=e)
        logger.info("Job %d completed", job.id)
        return JobResult(job.id, details=details)

    tasks = [asyncio.create_task(run_one(job)) for job in jobs]
    return list(await asyncio.gather(*tasks))


def run_jobs(
    jobs: list[Job], parallel_actions: int = DEFAULT_MAX_WORKERS
) -> list[JobResult]:
    """Run several jobs concurrently, isolating failures per job.

    Returns:
        One JobResult per job, in input order
    """
    return asyncio.run(run_jobs_async(jobs, parallel_actions))
