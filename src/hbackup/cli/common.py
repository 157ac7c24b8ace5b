"""Shared CLI utilities, argument types and exit codes."""

import argparse
from typing import Optional

from ..core.models import Archive, ArchiveFormat, BackupModel, Level

# BSD sysexits.h
EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_IOERR = 74
EX_CONFIG = 78


def add_verbosity_args(parser: argparse.ArgumentParser) -> None:
    """Add verbosity-related arguments to a parser."""
    group = parser.add_argument_group("Output options")
    group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    group.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )
    group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output",
    )


def get_log_level(args: argparse.Namespace) -> str:
    """Determine log level from parsed arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        Log level string (DEBUG, INFO, WARNING, ERROR)
    """
    if getattr(args, "debug", False):
        return "DEBUG"
    elif getattr(args, "quiet", False):
        return "WARNING"
    elif getattr(args, "verbose", False):
        return "DEBUG"
    else:
        return "INFO"


def comma_list(value: str) -> list[str]:
    """Split a comma separated option value, dropping empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


def comma_ids(value: str) -> list[int]:
    """Parse a comma separated list of job ids."""
    try:
        ids = [int(item) for item in comma_list(value)]
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid job id list: {value!r}")
    if not ids or any(i < 0 for i in ids):
        raise argparse.ArgumentTypeError(f"invalid job id list: {value!r}")
    return ids


def add_job_options(parser: argparse.ArgumentParser) -> None:
    """Add the archive, ignore and model options shared by add and run."""
    parser.add_argument(
        "-c",
        "--compression",
        type=str.lower,
        choices=[f.value for f in ArchiveFormat],
        help="Archive the source instead of copying it",
    )
    parser.add_argument(
        "-l",
        "--level",
        type=str.lower,
        choices=[lv.value for lv in Level],
        help="Compression level (requires --compression)",
    )
    parser.add_argument(
        "-g",
        "--ignore",
        type=comma_list,
        metavar="PATH[,PATH...]",
        help="Source relative paths to exclude",
    )
    parser.add_argument(
        "-m",
        "--model",
        type=str.lower,
        choices=[m.value for m in BackupModel],
        help="Backup model (default: full)",
    )


def archive_from_args(args: argparse.Namespace) -> Optional[Archive]:
    """Build the archive settings selected by --compression/--level.

    Raises:
        ValueError: If --level is given without --compression
    """
    compression = getattr(args, "compression", None)
    level = getattr(args, "level", None)
    if level and not compression:
        raise ValueError("--level requires --compression")
    if not compression:
        return None
    return Archive(ArchiveFormat(compression), Level(level) if level else Level.DEFAULT)


def model_from_args(args: argparse.Namespace) -> BackupModel:
    """Backup model selected by --model, FULL when absent."""
    model = getattr(args, "model", None)
    return BackupModel(model) if model else BackupModel.FULL
