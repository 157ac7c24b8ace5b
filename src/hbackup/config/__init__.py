"""Configuration system for hbackup.

This module provides TOML-based job storage: loading, validation, saving
and the job list operations used by the CLI.
"""

from .loader import (
    ConfigError,
    config_dir,
    find_config_file,
    load_config,
    save_config,
)
from .schema import Config, GlobalConfig
from .store import (
    add_job,
    backup_config_file,
    clear_jobs,
    edit_job,
    get_job_by_id,
    get_jobs,
    next_job_id,
    remove_jobs,
    reset_config_file,
    rollback_config_file,
    validate_job_paths,
)

__all__ = [
    "Config",
    "GlobalConfig",
    "ConfigError",
    "config_dir",
    "find_config_file",
    "load_config",
    "save_config",
    "add_job",
    "backup_config_file",
    "clear_jobs",
    "edit_job",
    "get_job_by_id",
    "get_jobs",
    "next_job_id",
    "remove_jobs",
    "reset_config_file",
    "rollback_config_file",
    "validate_job_paths",
]
