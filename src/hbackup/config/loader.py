"""TOML configuration loading, validation and saving.

Handles config file discovery, parsing, and validation with helpful error
messages. Writes go through a file lock next to the config file.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

import tomli_w
from filelock import FileLock

from ..core.models import Archive, ArchiveFormat, BackupModel, Job, Level, parse_enum
from .schema import CONFIG_VERSION, Config, GlobalConfig


class ConfigError(Exception):
    """Configuration loading or validation error."""

    pass


CONFIG_NAME = "config.toml"
CONFIG_BACKUP_NAME = "config_backup.toml"


def config_dir() -> Path:
    """Directory holding the configuration, honouring XDG_CONFIG_HOME."""
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return root / "hbackup"


def find_config_file(explicit_path: str | None = None) -> Path:
    """Find configuration file.

    Unlike a missing explicit path, a missing default file is not an error:
    it simply means no jobs have been added yet.

    Args:
        explicit_path: Explicitly specified config path (highest priority)

    Returns:
        Path to config file
    """
    if explicit_path:
        path = Path(explicit_path)
        if path.exists():
            return path
        raise ConfigError(f"Config file not found: {explicit_path}")

    return config_dir() / CONFIG_NAME


def backup_file_for(path: Path) -> Path:
    """Location of the backup copy of config file ``path``."""
    return path.with_name(CONFIG_BACKUP_NAME)


def _parse_job(data: dict[str, Any]) -> Job:
    """Parse job configuration from dict."""
    for key in ("id", "source", "target"):
        if key not in data:
            raise ConfigError(f"Job missing required '{key}' field")

    job_id = data["id"]
    if not isinstance(job_id, int) or job_id < 0:
        raise ConfigError(f"Job id must be a non-negative integer, got {job_id!r}")

    try:
        model = parse_enum(BackupModel, data.get("model", "full"))
        archive = None
        if data.get("compression"):
            archive = Archive(
                format=parse_enum(ArchiveFormat, data["compression"]),
                level=parse_enum(Level, data.get("level", "default")),
            )
    except ValueError as e:
        raise ConfigError(f"Job {job_id}: {e}") from e

    ignore = data.get("ignore", [])
    if not isinstance(ignore, list):
        raise ConfigError(f"Job {job_id}: 'ignore' must be a list")

    return Job(
        id=job_id,
        source=Path(data["source"]),
        target=Path(data["target"]),
        ignore=tuple(str(p) for p in ignore),
        model=model,
        archive=archive,
    )


def _parse_global(data: dict[str, Any]) -> GlobalConfig:
    """Parse global configuration from dict."""
    parallel_actions = data.get("parallel_actions", 16)
    if not isinstance(parallel_actions, int) or parallel_actions < 1:
        raise ConfigError("'parallel_actions' must be a positive integer")

    return GlobalConfig(
        parallel_actions=parallel_actions,
        log_file=data.get("log_file"),
    )


def _validate_config(config: Config, raw_jobs: list[dict[str, Any]]) -> list[str]:
    """Validate configuration and return list of warnings."""
    warnings = []

    ids = [job.id for job in config.jobs]
    if len(ids) != len(set(ids)):
        warnings.append("Duplicate job ids detected")

    if 0 in ids:
        warnings.append("Job id 0 is reserved for ad-hoc jobs")

    pairs = [(job.source, job.target) for job in config.jobs]
    if len(pairs) != len(set(pairs)):
        warnings.append("Duplicate source/target pairs detected")

    for data in raw_jobs:
        if "level" in data and not data.get("compression"):
            warnings.append(
                f"Job {data.get('id')} sets 'level' without 'compression'; ignored"
            )

    return warnings


def load_config(path: Path | str) -> tuple[Config, list[str]]:
    """Load and validate configuration from TOML file.

    Args:
        path: Path to configuration file; a missing file yields an empty config

    Returns:
        Tuple of (Config object, list of warnings)

    Raises:
        ConfigError: If config is invalid or cannot be parsed
    """
    path = Path(path)
    if not path.exists():
        return Config(), []

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML syntax: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read config file: {e}")

    global_config = _parse_global(data.get("global", {}))

    raw_jobs = data.get("jobs", [])
    jobs = [_parse_job(job_data) for job_data in raw_jobs]

    config = Config(
        version=str(data.get("version", CONFIG_VERSION)),
        global_config=global_config,
        jobs=jobs,
    )

    warnings = _validate_config(config, raw_jobs)

    return config, warnings


def job_to_dict(job: Job) -> dict[str, Any]:
    """Plain dict view of a job, as stored in the config file."""
    data: dict[str, Any] = {
        "id": job.id,
        "source": str(job.source),
        "target": str(job.target),
        "model": job.model.value,
    }
    if job.archive is not None:
        data["compression"] = job.archive.format.value
        data["level"] = job.archive.level.value
    if job.ignore:
        data["ignore"] = list(job.ignore)
    return data


def dump_config(config: Config) -> str:
    """Serialize configuration to TOML text."""
    global_data: dict[str, Any] = {
        "parallel_actions": config.global_config.parallel_actions
    }
    if config.global_config.log_file:
        global_data["log_file"] = config.global_config.log_file

    return tomli_w.dumps(
        {
            "version": config.version,
            "global": global_data,
            "jobs": [job_to_dict(job) for job in config.jobs],
        }
    )


def config_lock(path: Path | str) -> FileLock:
    """Lock guarding read-modify-write cycles on config file ``path``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return FileLock(path.with_name(f".{path.name}.lock"))


def save_config(config: Config, path: Path | str) -> None:
    """Write configuration to ``path``, creating its directory.

    Callers updating an existing file should hold :func:`config_lock`.

    Raises:
        ConfigError: If the file cannot be written
    """
    path = Path(path)
    content = dump_config(config)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot write config file: {e}")

