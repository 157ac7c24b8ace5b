"""Run command: Execute configured or ad-hoc backup jobs."""

import argparse
import logging
import time

from .. import __util__
from ..__logger__ import create_logger
from ..config import ConfigError, find_config_file, load_config, validate_job_paths
from ..core import ArchiveError, JobError, PlanningError, run_job, run_jobs
from ..core.models import Job
from .common import (
    EX_CONFIG,
    EX_DATAERR,
    EX_IOERR,
    EX_NOINPUT,
    EX_USAGE,
    archive_from_args,
    get_log_level,
    model_from_args,
)

logger = logging.getLogger(__name__)

# Id of jobs given on the command line, never persisted
ADHOC_JOB_ID = 0


def execute_run(args: argparse.Namespace) -> int:
    """Execute the run command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    log_level = get_log_level(args)
    create_logger(level=log_level)

    try:
        config_path = find_config_file(getattr(args, "config", None))
        config, warnings = load_config(config_path)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return EX_CONFIG

    if config.global_config.log_file:
        create_logger(level=log_level, log_file=config.global_config.log_file)

    for warning in warnings:
        logger.warning("Config: %s", warning)

    parallel_actions = (
        getattr(args, "parallel_actions", None) or config.global_config.parallel_actions
    )

    if args.source or args.target:
        if args.id:
            logger.error("--id cannot be combined with SOURCE and TARGET")
            return EX_USAGE
        if not (args.source and args.target):
            logger.error("SOURCE and TARGET must be given together")
            return EX_USAGE
        try:
            jobs = [_adhoc_job(args)]
        except FileNotFoundError as e:
            logger.error("%s", e)
            return EX_NOINPUT
        except (ValueError, ConfigError) as e:
            logger.error("%s", e)
            return EX_USAGE
    elif args.id:
        if args.compression or args.level or args.ignore or args.model:
            logger.error("Job options cannot be combined with --id")
            return EX_USAGE
        jobs = []
        for job_id in args.id:
            job = config.get_job(job_id)
            if job is None:
                logger.error("Job with id %d not found.", job_id)
                return EX_DATAERR
            jobs.append(job)
    else:
        jobs = config.jobs
        if not jobs:
            print("No jobs are backed up!")
            return 0

    logger.info(__util__.log_heading(f"Started at {time.ctime()}"))

    if len(jobs) == 1:
        code = _run_single(jobs[0], parallel_actions)
    else:
        code = _run_batch(jobs, parallel_actions)

    logger.info(__util__.log_heading(f"Finished at {time.ctime()}"))
    return code


def _adhoc_job(args: argparse.Namespace) -> Job:
    source = __util__.expand_path(args.source)
    target = __util__.expand_path(args.target)
    __util__.check_path(source)
    validate_job_paths(source, target)
    return Job(
        id=ADHOC_JOB_ID,
        source=source,
        target=target,
        ignore=tuple(args.ignore or ()),
        model=model_from_args(args),
        archive=archive_from_args(args),
    )


def _run_single(job: Job, parallel_actions: int) -> int:
    try:
        counts = run_job(job, parallel_actions)
    except PlanningError as e:
        logger.error("Failed to run job with id %d: %s", job.id, e)
        return EX_NOINPUT
    except (JobError, ArchiveError, OSError) as e:
        logger.error("Failed to run job with id %d: %s", job.id, e)
        return EX_IOERR

    if counts:
        logger.info(
            "Job %d completed: %d copied, %d deleted, %d up to date",
            job.id,
            counts["copy"],
            counts["delete"],
            counts["skip"],
        )
    else:
        logger.info("Job %d completed", job.id)
    return 0


def _run_batch(jobs: list[Job], parallel_actions: int) -> int:
    logger.info("Processing %d job(s)", len(jobs))
    results = run_jobs(jobs, parallel_actions)

    failed = [r for r in results if not r.ok]
    if failed:
        logger.warning(
            "Completed with errors: %d succeeded, %d failed (ids: %s)",
            len(results) - len(failed),
            len(failed),
            ", ".join(str(r.job_id) for r in failed),
        )
        return EX_IOERR

    logger.info("All %d job(s) completed successfully", len(results))
    return 0
