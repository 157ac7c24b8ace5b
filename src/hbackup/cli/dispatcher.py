"""CLI dispatcher: argument parsing and routing to command handlers."""

import argparse
import sys
from typing import Callable

from ..core.models import ArchiveFormat, BackupModel, Level
from .common import (
    EX_USAGE,
    add_job_options,
    add_verbosity_args,
    comma_ids,
    comma_list,
)


def create_subcommand_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="hbackup",
        description="Copy, mirror or archive files and directories to backup targets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    add_verbosity_args(parser)

    parser.add_argument(
        "-V",
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    parser.add_argument(
        "--config",
        metavar="FILE",
        help="Path to configuration file",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands (use 'command --help' for details)",
    )

    # add command
    add_parser = subparsers.add_parser(
        "add",
        help="Add a new backup job",
        description="Save a source/target pair as a backup job",
    )
    add_parser.add_argument("source", help="Source file or directory")
    add_parser.add_argument("target", help="Target file or directory")
    add_job_options(add_parser)

    # run command
    run_parser = subparsers.add_parser(
        "run",
        help="Run backup jobs",
        description=(
            "Run all jobs, the jobs given with --id, "
            "or an ad-hoc job from SOURCE to TARGET"
        ),
    )
    run_parser.add_argument("source", nargs="?", help="Ad-hoc source path")
    run_parser.add_argument("target", nargs="?", help="Ad-hoc target path")
    add_job_options(run_parser)
    run_parser.add_argument(
        "--id",
        type=comma_ids,
        metavar="ID[,ID...]",
        help="Only run the given job id(s)",
    )
    run_parser.add_argument(
        "--parallel-actions",
        type=int,
        metavar="N",
        help="Max concurrent file operations per job (overrides config)",
    )

    # list command
    list_parser = subparsers.add_parser(
        "list",
        help="List backup jobs",
        description="Show all configured backup jobs",
    )
    list_parser.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format",
    )

    # delete command
    delete_parser = subparsers.add_parser(
        "delete",
        help="Delete backup jobs",
        description="Delete jobs by id, or all jobs",
    )
    delete_group = delete_parser.add_mutually_exclusive_group(required=True)
    delete_group.add_argument(
        "--id",
        type=comma_ids,
        metavar="ID[,ID...]",
        help="Delete the given job id(s)",
    )
    delete_group.add_argument(
        "--all",
        action="store_true",
        help="Delete all jobs",
    )
    delete_parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Do not ask for confirmation",
    )

    # edit command
    edit_parser = subparsers.add_parser(
        "edit",
        help="Edit a backup job",
        description="Change the source, target or options of a job",
    )
    edit_parser.add_argument("--id", type=int, required=True, help="Job id to edit")
    edit_parser.add_argument("-s", "--source", help="New source path")
    edit_parser.add_argument("-t", "--target", help="New target path")
    compression_group = edit_parser.add_mutually_exclusive_group()
    compression_group.add_argument(
        "-c",
        "--compression",
        type=str.lower,
        choices=[f.value for f in ArchiveFormat],
        help="New compression format",
    )
    compression_group.add_argument(
        "-C",
        "--no-compression",
        action="store_true",
        help="Clear compression format and level",
    )
    level_group = edit_parser.add_mutually_exclusive_group()
    level_group.add_argument(
        "-l",
        "--level",
        type=str.lower,
        choices=[lv.value for lv in Level],
        help="New compression level",
    )
    level_group.add_argument(
        "-L",
        "--no-level",
        action="store_true",
        help="Reset compression level to default",
    )
    ignore_group = edit_parser.add_mutually_exclusive_group()
    ignore_group.add_argument(
        "-g",
        "--ignore",
        type=comma_list,
        metavar="PATH[,PATH...]",
        help="Replace the ignore list",
    )
    ignore_group.add_argument(
        "-G",
        "--no-ignore",
        action="store_true",
        help="Clear the ignore list",
    )
    edit_parser.add_argument(
        "-m",
        "--model",
        type=str.lower,
        choices=[m.value for m in BackupModel],
        help="New backup model",
    )

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration file management",
        description="Show the config file path, or back it up, reset or roll it back",
    )
    config_group = config_parser.add_mutually_exclusive_group()
    config_group.add_argument(
        "--copy",
        action="store_true",
        help="Back up the configuration file",
    )
    config_group.add_argument(
        "--reset",
        action="store_true",
        help="Back up, then reset the configuration file",
    )
    config_group.add_argument(
        "--rollback",
        action="store_true",
        help="Restore the last backed up configuration file",
    )

    return parser


def run_subcommand(args: argparse.Namespace) -> int:
    """Run the specified subcommand.

    Args:
        args: Parsed arguments

    Returns:
        Exit code
    """
    from .. import __version__

    if args.version:
        print(f"hbackup {__version__}")
        return 0

    if not args.command:
        print(
            "hbackup requires at least one command to execute. "
            "See 'hbackup --help' for usage.",
            file=sys.stderr,
        )
        return EX_USAGE

    handlers: dict[str, Callable] = {
        "add": cmd_add,
        "run": cmd_run,
        "list": cmd_list,
        "delete": cmd_delete,
        "edit": cmd_edit,
        "config": cmd_config,
    }

    handler = handlers.get(args.command)
    if handler:
        return handler(args)
    else:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return EX_USAGE


def cmd_add(args: argparse.Namespace) -> int:
    """Execute add command."""
    from .add import execute_add

    return execute_add(args)


def cmd_run(args: argparse.Namespace) -> int:
    """Execute run command."""
    from .run import execute_run

    return execute_run(args)


def cmd_list(args: argparse.Namespace) -> int:
    """Execute list command."""
    from .list_cmd import execute_list

    return execute_list(args)


def cmd_delete(args: argparse.Namespace) -> int:
    """Execute delete command."""
    from .delete import execute_delete

    return execute_delete(args)


def cmd_edit(args: argparse.Namespace) -> int:
    """Execute edit command."""
    from .edit import execute_edit

    return execute_edit(args)


def cmd_config(args: argparse.Namespace) -> int:
    """Execute config command."""
    from .config_cmd import execute_config

    return execute_config(args)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the hbackup CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_subcommand_parser()
    args = parser.parse_args(argv)

    return run_subcommand(args)
