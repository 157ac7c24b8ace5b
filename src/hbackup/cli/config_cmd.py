"""Config command: Configuration file management."""

import argparse
import logging

from ..__logger__ import create_logger
from ..config import (
    ConfigError,
    backup_config_file,
    find_config_file,
    reset_config_file,
    rollback_config_file,
)
from .common import EX_CONFIG, get_log_level

logger = logging.getLogger(__name__)


def execute_config(args: argparse.Namespace) -> int:
    """Execute the config command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    create_logger(level=get_log_level(args))

    try:
        config_path = find_config_file(getattr(args, "config", None))

        if args.copy:
            backup = backup_config_file(config_path)
            print(f"Backup successfully! ({backup})")
        elif args.reset:
            reset_config_file(config_path)
            print(f"Configuration file reset: {config_path}")
        elif args.rollback:
            if not rollback_config_file(config_path):
                logger.error("The backup configuration file does not exist.")
                return EX_CONFIG
            print(f"Configuration file rolled back: {config_path}")
        else:
            print(f"config file: {config_path}")

    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return EX_CONFIG

    return 0
