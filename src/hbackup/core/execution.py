"""Action execution: apply planned actions to the filesystem."""

import asyncio
import logging
import shutil
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Optional

from .models import Action, Copy, Delete, Skip

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 16


class ActionError(Exception):
    """A single action failed; sibling actions are unaffected."""

    def __init__(self, action: Action, cause: BaseException) -> None:
        self.action = action
        self.cause = cause
        super().__init__(f"{_describe(action)} failed: {cause}")


def _describe(action: Action) -> str:
    if isinstance(action, Delete):
        return f"Delete {action.dest}"
    return f"{type(action).__name__} {action.src} -> {action.dest}"


def _copy(action: Copy) -> None:
    dest = action.dest
    # A directory left at dest by an earlier run is replaced, not copied into
    if dest.is_dir() and not dest.is_symlink():
        shutil.rmtree(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(action.src, dest)
    shutil.copystat(action.src, dest)


def _delete(action: Delete) -> None:
    dest = action.dest
    try:
        if dest.is_dir() and not dest.is_symlink():
            shutil.rmtree(dest)
        else:
            dest.unlink()
    except FileNotFoundError:
        # Already gone, e.g. removed by something else since planning
        logger.debug("Nothing to delete at %s", dest)


def _skip(action: Skip) -> None:
    pass


# One handler per Action variant
_HANDLERS = {
    Copy: _copy,
    Delete: _delete,
    Skip: _skip,
}


def apply(action: Action) -> None:
    """Perform the side effect of one action.

    Copy and a Delete of a missing path may be retried safely.

    Raises:
        ActionError: If the underlying filesystem operation fails
        TypeError: If ``action`` is not a Copy, Delete or Skip
    """
    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise TypeError(f"Unknown action: {action!r}")
    try:
        handler(action)
    except OSError as e:
        raise ActionError(action, e) from e

    logger.debug("%s done", _describe(action))


async def apply_async(action: Action, executor: Optional[Executor] = None) -> None:
    """Same as :func:`apply`, running the blocking I/O on a worker pool."""
    if isinstance(action, Skip):
        return
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(executor, apply, action)


async def execute_worklist(
    actions: list[Action], max_workers: int = DEFAULT_MAX_WORKERS
) -> list[ActionError]:
    """Apply every action concurrently and collect the failures.

    One task is spawned per action; at most ``max_workers`` of them do I/O
    at the same time. A failing action never cancels the others.

    Args:
        actions: Worklist produced by the planner
        max_workers: Size of the worker pool

    Returns:
        Failures in worklist order, empty when everything succeeded
    """
    if not actions:
        return []

    with ThreadPoolExecutor(
        max_workers=max(1, max_workers), thread_name_prefix="hbackup-io"
    ) as pool:
        results = await asyncio.gather(
            *(apply_async(action, pool) for action in actions),
            return_exceptions=True,
        )

    failures: list[ActionError] = []
    for action, result in zip(actions, results):
        if result is None:
            continue
        if isinstance(result, ActionError):
            failures.append(result)
        elif isinstance(result, Exception):
            failures.append(ActionError(action, result))
        else:
            raise result
    return failures
