"""Add command: persist a new backup job."""

import argparse
import logging

from .. import __util__
from ..__logger__ import create_logger
from ..config import ConfigError, add_job, find_config_file
from .common import (
    EX_CONFIG,
    EX_NOINPUT,
    EX_USAGE,
    archive_from_args,
    get_log_level,
    model_from_args,
)

logger = logging.getLogger(__name__)


def execute_add(args: argparse.Namespace) -> int:
    """Execute the add command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    create_logger(level=get_log_level(args))

    source = __util__.expand_path(args.source)
    target = __util__.expand_path(args.target)
    try:
        __util__.check_path(source)
    except FileNotFoundError as e:
        logger.error("%s", e)
        return EX_NOINPUT

    try:
        archive = archive_from_args(args)
    except ValueError as e:
        logger.error("%s", e)
        return EX_USAGE

    try:
        config_path = find_config_file(getattr(args, "config", None))
        job = add_job(
            config_path,
            source,
            target,
            ignore=args.ignore or (),
            model=model_from_args(args),
            archive=archive,
        )
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return EX_CONFIG

    logger.info("Added job %d: %s -> %s", job.id, job.source, job.target)
    return 0
