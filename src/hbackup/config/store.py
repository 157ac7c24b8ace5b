"""Persistent job list operations.

Every mutation loads the config file, changes it and writes it back while
holding the config lock.
"""

import dataclasses
import logging
import shutil
from pathlib import Path
from typing import Iterable, Optional

from ..core.models import Archive, ArchiveFormat, BackupModel, Job, Level
from .loader import (
    ConfigError,
    backup_file_for,
    config_lock,
    load_config,
    save_config,
)
from .schema import Config

logger = logging.getLogger(__name__)


def next_job_id(jobs: Iterable[Job]) -> int:
    """Smallest unused job id; 0 is reserved for ad-hoc jobs."""
    used = {job.id for job in jobs}
    job_id = 1
    while job_id in used:
        job_id += 1
    return job_id


def validate_job_paths(source: Path, target: Path) -> None:
    """Reject source/target combinations that would copy a tree into itself.

    Raises:
        ConfigError: If source and target are equal or one contains the other
    """
    if source == target:
        raise ConfigError(f"Source and target are the same path: {source}")
    if target in source.parents:
        raise ConfigError(f"Target {target} contains the source {source}")
    if source in target.parents:
        raise ConfigError(f"Target {target} is inside the source {source}")


def get_jobs(path: Path) -> list[Job]:
    """All persisted jobs."""
    config, _ = load_config(path)
    return config.jobs


def get_job_by_id(job_id: int, path: Path) -> Optional[Job]:
    """The persisted job with ``job_id``, or None."""
    config, _ = load_config(path)
    return config.get_job(job_id)


def add_job(
    path: Path,
    source: Path,
    target: Path,
    ignore: Iterable[str] = (),
    model: BackupModel = BackupModel.FULL,
    archive: Optional[Archive] = None,
) -> Job:
    """Persist a new job under the smallest unused id and return it."""
    validate_job_paths(source, target)
    with config_lock(path):
        config, _ = load_config(path)
        job = Job(
            id=next_job_id(config.jobs),
            source=source,
            target=target,
            ignore=tuple(ignore),
            model=model,
            archive=archive,
        )
        config.jobs.append(job)
        save_config(config, path)
    logger.debug("Added %s", job)
    return job


def remove_jobs(path: Path, ids: Iterable[int]) -> tuple[list[int], list[int]]:
    """Remove jobs by id.

    Returns:
        Tuple of (removed ids, ids that were not found)
    """
    removed, missing = [], []
    with config_lock(path):
        config, _ = load_config(path)
        for job_id in ids:
            job = config.get_job(job_id)
            if job is None:
                missing.append(job_id)
                continue
            config.jobs.remove(job)
            removed.append(job_id)
        if removed:
            save_config(config, path)
    return removed, missing


def clear_jobs(path: Path) -> int:
    """Remove every job, returning how many were removed."""
    with config_lock(path):
        config, _ = load_config(path)
        count = len(config.jobs)
        config.jobs = []
        save_config(config, path)
    return count


def edit_job(
    path: Path,
    job_id: int,
    source: Optional[Path] = None,
    target: Optional[Path] = None,
    compression: Optional[ArchiveFormat] = None,
    no_compression: bool = False,
    level: Optional[Level] = None,
    no_level: bool = False,
    ignore: Optional[Iterable[str]] = None,
    no_ignore: bool = False,
    model: Optional[BackupModel] = None,
) -> Job:
    """Update fields of a persisted job.

    Clearing the compression also clears the level. A level can only be set
    on a job that has (or is given) a compression format.

    Raises:
        ConfigError: If the job does not exist or the update is inconsistent
    """
    with config_lock(path):
        config, _ = load_config(path)
        job = config.get_job(job_id)
        if job is None:
            raise ConfigError(f"Job with id {job_id} not found.")

        changes: dict = {}
        if source is not None:
            changes["source"] = source
        if target is not None:
            changes["target"] = target
        if model is not None:
            changes["model"] = model
        if no_ignore:
            changes["ignore"] = ()
        elif ignore is not None:
            changes["ignore"] = tuple(ignore)

        archive = job.archive
        if no_compression:
            archive = None
        elif compression is not None:
            archive = Archive(compression, archive.level if archive else Level.DEFAULT)
        if no_level:
            if archive is not None:
                archive = dataclasses.replace(archive, level=Level.DEFAULT)
        elif level is not None:
            if archive is None:
                raise ConfigError(
                    "The compression format is not set, "
                    "and the compression level cannot be updated."
                )
            archive = dataclasses.replace(archive, level=level)
        changes["archive"] = archive

        updated = dataclasses.replace(job, **changes)
        validate_job_paths(updated.source, updated.target)
        config.jobs[config.jobs.index(job)] = updated
        save_config(config, path)
    return updated


def backup_config_file(path: Path) -> Path:
    """Copy the config file to its backup location, creating it if needed."""
    with config_lock(path):
        if not path.exists():
            save_config(Config(), path)
        backup = backup_file_for(path)
        try:
            shutil.copyfile(path, backup)
        except OSError as e:
            raise ConfigError(f"Configuration file backup failed: {e}") from e
    return backup


def reset_config_file(path: Path) -> None:
    """Back up the config file if present, then replace it with an empty one."""
    with config_lock(path):
        if path.exists():
            try:
                shutil.copyfile(path, backup_file_for(path))
            except OSError as e:
                raise ConfigError(f"Configuration file backup failed: {e}") from e
        save_config(Config(), path)


def rollback_config_file(path: Path) -> bool:
    """Restore the config file from its backup.

    Returns:
        False if there is no backup to roll back to

    Raises:
        ConfigError: If the backup cannot be parsed
    """
    backup = backup_file_for(path)
    if not backup.exists():
        return False
    with config_lock(path):
        config, _ = load_config(backup)
        save_config(config, path)
    return True
