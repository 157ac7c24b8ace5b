"""Backup planning: turn a job into a worklist of filesystem actions.

Planning is synchronous and read-only apart from creating the destination
root of directory jobs. The worklist it returns is executed by
:mod:`hbackup.core.execution`.

Directory jobs are resolved in two passes:

1. walk the source, decide Copy or Skip per regular file and record every
   destination that should exist afterwards in a ``seen`` set;
2. for MIRROR jobs only, walk the destination and emit a Delete for every
   regular file missing from ``seen``. Ignored source directories are not
   entered at all, and neither are destination directories that sit where
   a source file now is.

Ignored source files never enter ``seen``, so copies left over from an
earlier run without the ignore pattern are removed by a mirror run.
"""

import logging
import os
import stat
from pathlib import Path

from .models import Action, BackupModel, Copy, Delete, Job, Skip

logger = logging.getLogger(__name__)

# Filesystem timestamp granularity slack, in seconds
MTIME_TOLERANCE = 1.0


class PlanningError(Exception):
    """A job precondition does not hold; nothing was planned."""

    pass


def needs_update(src: Path, dest: Path) -> bool:
    """Return True if ``dest`` is missing or looks out of date.

    Compares size and modification time only. Files of equal size whose
    mtimes differ by less than MTIME_TOLERANCE are considered equal even
    if their contents differ.
    """
    try:
        dest_stat = dest.stat()
    except FileNotFoundError:
        return True
    if not stat.S_ISREG(dest_stat.st_mode):
        return True
    src_stat = src.stat()

    if src_stat.st_size != dest_stat.st_size:
        return True
    return src_stat.st_mtime - dest_stat.st_mtime > MTIME_TOLERANCE


def _decide(model: BackupModel, src: Path, dest: Path) -> Action:
    if model is BackupModel.MIRROR and not needs_update(src, dest):
        return Skip(src, dest)
    return Copy(src, dest)


def _is_ignored(path: Path, ignore_paths: list[Path]) -> bool:
    return any(path == p or p in path.parents for p in ignore_paths)


def _regular_files(dirpath: Path, filenames: list[str]):
    for name in sorted(filenames):
        path = dirpath / name
        if path.is_file() and not path.is_symlink():
            yield path


def _walk_files(root: Path, prune=None):
    """Yield every regular file below ``root``; symlinks are not followed.

    Subdirectories for which ``prune`` returns True are not entered.
    """
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        if prune is not None:
            dirnames[:] = [d for d in dirnames if not prune(current / d)]
        dirnames.sort()
        yield from _regular_files(current, filenames)


def resolve_file(job: Job) -> Action:
    """Plan a single-file job.

    Raises:
        PlanningError: If the source is missing or not a regular file
    """
    src = job.source
    if not src.exists():
        raise PlanningError(f"source does not exist: {src}")
    if not src.is_file():
        raise PlanningError(f"source is not a file: {src}")

    dest = job.target
    if dest.is_dir():
        dest = dest / src.name

    action = _decide(job.model, src, dest)
    logger.debug("Planned %s for %s", type(action).__name__, dest)
    return action


def resolve_tree(job: Job) -> list[Action]:
    """Plan a directory job.

    The top-level source directory name is kept, so ``/data/docs/a.txt``
    backed up to ``/mnt/backup`` lands at ``/mnt/backup/docs/a.txt``.

    Args:
        job: Job whose source is a directory

    Returns:
        Worklist of Copy, Skip and (MIRROR only) Delete actions

    Raises:
        PlanningError: If the source is missing or not a directory
    """
    src = job.source
    if not src.exists():
        raise PlanningError(f"source does not exist: {src}")
    if not src.is_dir():
        raise PlanningError(f"source is not a directory: {src}")

    target = job.target
    target.mkdir(parents=True, exist_ok=True)

    prefix = src.parent
    ignore_paths = job.ignore_paths()
    actions: list[Action] = []
    seen: set[Path] = set()
    ignored = 0

    for dirpath, dirnames, filenames in os.walk(src):
        current = Path(dirpath)
        # Ignored directories are pruned whole and count once
        kept = []
        for name in sorted(dirnames):
            if _is_ignored(current / name, ignore_paths):
                ignored += 1
            else:
                kept.append(name)
        dirnames[:] = kept

        for path in _regular_files(current, filenames):
            if _is_ignored(path, ignore_paths):
                ignored += 1
                continue
            dest = target / path.relative_to(prefix)
            actions.append(_decide(job.model, path, dest))
            seen.add(dest)

    if job.model is BackupModel.MIRROR:
        # A seen path that is a directory in the target gets replaced by its
        # Copy, so nothing below it is planned for deletion
        for path in _walk_files(target, prune=seen.__contains__):
            if path not in seen:
                actions.append(Delete(path))

    logger.debug(
        "Planned %d action(s) for %s (%d ignored path(s))",
        len(actions),
        src,
        ignored,
    )
    return actions


def resolve(job: Job) -> list[Action]:
    """Plan any non-archive job."""
    if job.source.is_dir():
        return resolve_tree(job)
    return [resolve_file(job)]


def summarize(actions: list[Action]) -> dict[str, int]:
    """Count actions per kind, for reporting."""
    counts = {"copy": 0, "delete": 0, "skip": 0}
    for action in actions:
        counts[type(action).__name__.lower()] += 1
    return counts
