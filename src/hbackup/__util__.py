"""hbackup: hbackup/__util__.py
Path helpers and small formatting utilities shared by the CLI and config layer.
"""

import os
from pathlib import Path


def log_heading(caption: str) -> str:
    """Formatted heading for logging output sections."""
    return f"--[ {caption} ]--"


def expand_home(value: str) -> str:
    """Replace a leading ``~`` or ``$HOME`` with the user's home directory."""
    if value.startswith("~"):
        return os.path.expanduser(value)
    if value.startswith("$HOME"):
        return value.replace("$HOME", str(Path.home()), 1)
    return value


def expand_path(value: str | os.PathLike) -> Path:
    """Expand, absolutize and normalise a user supplied path.

    Symlinks are left alone; ``..`` components are collapsed lexically.
    """
    path = Path(expand_home(os.fspath(value)))
    if not path.is_absolute():
        path = Path.cwd() / path
    return Path(os.path.normpath(path))


def check_path(path: Path) -> None:
    """Raise FileNotFoundError unless ``path`` exists."""
    if not os.path.lexists(path):
        raise FileNotFoundError(f"The path or file '{path}' is invalid")
