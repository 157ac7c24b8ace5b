"""Delete command: Remove backup jobs from the configuration."""

import argparse
import logging

from ..__logger__ import create_logger
from ..config import ConfigError, clear_jobs, find_config_file, remove_jobs
from .common import EX_CONFIG, EX_DATAERR, get_log_level

logger = logging.getLogger(__name__)


def confirm(prompt: str) -> bool:
    """Ask a yes/no question on the terminal; anything but y/yes declines."""
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def execute_delete(args: argparse.Namespace) -> int:
    """Execute the delete command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    create_logger(level=get_log_level(args))

    if args.all:
        prompt = "Delete all jobs?"
    else:
        prompt = f"Delete job(s) {', '.join(str(i) for i in args.id)}?"

    if not args.yes and not confirm(prompt):
        print("Aborted.")
        return 0

    try:
        config_path = find_config_file(getattr(args, "config", None))
        if args.all:
            count = clear_jobs(config_path)
            print(f"All jobs deleted successfully ({count}).")
            return 0
        removed, missing = remove_jobs(config_path, args.id)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return EX_CONFIG

    for job_id in removed:
        print(f"Job with id {job_id} deleted successfully.")
    for job_id in missing:
        logger.warning("Job deletion failed. Job with id %d cannot be found.", job_id)

    return EX_DATAERR if missing else 0
