"""Edit command: Change a persisted backup job."""

import argparse
import logging

from .. import __util__
from ..__logger__ import create_logger
from ..config import ConfigError, edit_job, find_config_file
from ..core.models import ArchiveFormat, BackupModel, Level
from .common import EX_CONFIG, EX_NOINPUT, EX_USAGE, get_log_level

logger = logging.getLogger(__name__)

_EDIT_OPTIONS = (
    "source",
    "target",
    "compression",
    "no_compression",
    "level",
    "no_level",
    "ignore",
    "no_ignore",
    "model",
)


def execute_edit(args: argparse.Namespace) -> int:
    """Execute the edit command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    create_logger(level=get_log_level(args))

    if not any(getattr(args, name, None) for name in _EDIT_OPTIONS):
        logger.error("Nothing to change; give at least one option to edit")
        return EX_USAGE

    source = __util__.expand_path(args.source) if args.source else None
    target = __util__.expand_path(args.target) if args.target else None
    if source is not None:
        try:
            __util__.check_path(source)
        except FileNotFoundError as e:
            logger.error("%s", e)
            return EX_NOINPUT

    try:
        config_path = find_config_file(getattr(args, "config", None))
        job = edit_job(
            config_path,
            args.id,
            source=source,
            target=target,
            compression=ArchiveFormat(args.compression) if args.compression else None,
            no_compression=args.no_compression,
            level=Level(args.level) if args.level else None,
            no_level=args.no_level,
            ignore=args.ignore,
            no_ignore=args.no_ignore,
            model=BackupModel(args.model) if args.model else None,
        )
    except ConfigError as e:
        logger.error("%s", e)
        return EX_CONFIG

    print(f"Job with id {job.id} edited successfully.")
    return 0
