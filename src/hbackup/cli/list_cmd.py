"""List command: Show configured backup jobs."""

import argparse
import json
import logging

from ..__logger__ import create_logger
from ..config import ConfigError, find_config_file, load_config
from ..config.loader import job_to_dict
from .common import EX_CONFIG, get_log_level

logger = logging.getLogger(__name__)


def execute_list(args: argparse.Namespace) -> int:
    """Execute the list command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    create_logger(level=get_log_level(args))

    try:
        config_path = find_config_file(getattr(args, "config", None))
        config, warnings = load_config(config_path)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return EX_CONFIG

    for warning in warnings:
        logger.warning("Config: %s", warning)

    jobs = [job_to_dict(job) for job in config.jobs]

    if getattr(args, "json", False):
        print(json.dumps(jobs, indent=2))
        return 0

    if not jobs:
        print("No jobs configured.")
        return 0

    for data in jobs:
        print(f"Job {data['id']}:")
        for key, value in data.items():
            if key == "id":
                continue
            if isinstance(value, list):
                value = ", ".join(value)
            print(f"  {key}: {value}")
    return 0
