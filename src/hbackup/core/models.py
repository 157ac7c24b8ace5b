"""Job and action definitions shared by the planner, executor and runners."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union


class BackupModel(Enum):
    """How a job treats its destination."""

    FULL = "full"  # copy everything, never delete
    MIRROR = "mirror"  # skip unchanged files, delete orphans


class ArchiveFormat(Enum):
    """Supported archive formats."""

    GZIP = "gzip"
    ZIP = "zip"
    SEVENZ = "sevenz"
    ZSTD = "zstd"
    BZIP2 = "bzip2"
    XZ = "xz"
    LZ4 = "lz4"
    TAR = "tar"


class Level(Enum):
    """Format independent compression level."""

    FASTEST = "fastest"
    FASTER = "faster"
    DEFAULT = "default"
    BETTER = "better"
    BEST = "best"


def parse_enum(enum_cls, value):
    """Look up an enum member by value, ignoring case.

    Raises:
        ValueError: If ``value`` names no member of ``enum_cls``
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        choices = ", ".join(m.value for m in enum_cls)
        raise ValueError(
            f"Invalid {enum_cls.__name__} '{value}' (choose from: {choices})"
        ) from None


@dataclass(frozen=True)
class Archive:
    """Archive settings of a job."""

    format: ArchiveFormat
    level: Level = Level.DEFAULT


@dataclass(frozen=True)
class Job:
    """One backup unit.

    Attributes:
        id: Job id, 0 for ad-hoc jobs that are never persisted
        source: Absolute path of the file or directory to back up
        target: Directory receiving the copies, or a file path for file jobs
        ignore: Source relative paths excluded together with everything below them
        model: Backup model, FULL by default
        archive: When set, the job produces one archive instead of a copy
    """

    id: int
    source: Path
    target: Path
    ignore: tuple[str, ...] = field(default_factory=tuple)
    model: BackupModel = BackupModel.FULL
    archive: Optional[Archive] = None

    def __post_init__(self):
        object.__setattr__(self, "source", Path(self.source))
        object.__setattr__(self, "target", Path(self.target))
        object.__setattr__(self, "ignore", tuple(self.ignore or ()))

    def ignore_paths(self) -> list[Path]:
        """Absolute paths excluded from this job."""
        return [self.source / pattern for pattern in self.ignore]

    def __str__(self) -> str:
        return f"job {self.id}: {self.source} -> {self.target}"


@dataclass(frozen=True)
class Copy:
    """Copy the contents of ``src`` to ``dest``."""

    src: Path
    dest: Path


@dataclass(frozen=True)
class Delete:
    """Remove ``dest``, recursively if it is a directory."""

    dest: Path


@dataclass(frozen=True)
class Skip:
    """``dest`` is already up to date with ``src``."""

    src: Path
    dest: Path


Action = Union[Copy, Delete, Skip]
