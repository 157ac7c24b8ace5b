"""Backup engine for hbackup.

Planning turns a job into a worklist of actions, execution applies the
worklist concurrently, and the runners drive single jobs and batches.
"""

from .archive import ArchiveError, compress
from .execution import ActionError, apply, apply_async, execute_worklist
from .models import (
    Archive,
    ArchiveFormat,
    BackupModel,
    Copy,
    Delete,
    Job,
    Level,
    Skip,
)
from .planning import PlanningError, needs_update, resolve, resolve_file, resolve_tree
from .runner import JobError, JobResult, run_job, run_job_async, run_jobs

__all__ = [
    "Archive",
    "ArchiveFormat",
    "BackupModel",
    "Copy",
    "Delete",
    "Job",
    "Level",
    "Skip",
    "needs_update",
    "resolve",
    "resolve_file",
    "resolve_tree",
    "apply",
    "apply_async",
    "execute_worklist",
    "compress",
    "run_job",
    "run_job_async",
    "run_jobs",
    "JobResult",
    "PlanningError",
    "ActionError",
    "ArchiveError",
    "JobError",
]
