"""Archive creation for jobs that compress instead of copying.

Each call produces exactly one artifact inside the destination directory:

- files: ``{name}.{ext}`` (``.zip``, ``.7z`` and ``.tar`` keep their plain
  extension)
- directories: ``{name}.tar.{ext}`` (``.zip`` and ``.7z`` hold the tree
  directly, ``tar`` writes ``{name}.tar``)

Directory members are stored relative to the source's parent, so the
top-level directory name is preserved. Ignored paths and anything that is
not a regular file or directory are left out.
"""

import bz2
import gzip
import logging
import lzma
import os
import shutil
import tarfile
import zipfile
from pathlib import Path
from typing import Optional

import lz4.frame
import py7zr
import zstandard

from .models import ArchiveFormat, Level

logger = logging.getLogger(__name__)


class ArchiveError(Exception):
    """Archive could not be created."""

    pass


_ORDER = [Level.FASTEST, Level.FASTER, Level.DEFAULT, Level.BETTER, Level.BEST]

# Native level per format, indexed like _ORDER
LEVELS: dict[ArchiveFormat, tuple[int, ...]] = {
    ArchiveFormat.GZIP: (1, 3, 6, 8, 9),
    ArchiveFormat.ZIP: (1, 3, 6, 8, 9),
    ArchiveFormat.SEVENZ: (1, 3, 6, 8, 9),
    ArchiveFormat.ZSTD: (1, 2, 3, 19, 22),
    ArchiveFormat.BZIP2: (1, 3, 6, 8, 9),
    ArchiveFormat.XZ: (1, 3, 6, 8, 9),
    ArchiveFormat.LZ4: (1, 3, 6, 14, 16),
}

EXTENSIONS = {
    ArchiveFormat.GZIP: "gz",
    ArchiveFormat.ZIP: "zip",
    ArchiveFormat.SEVENZ: "7z",
    ArchiveFormat.ZSTD: "zst",
    ArchiveFormat.BZIP2: "bz2",
    ArchiveFormat.XZ: "xz",
    ArchiveFormat.LZ4: "lz4",
    ArchiveFormat.TAR: "tar",
}


def native_level(fmt: ArchiveFormat, level: Level) -> Optional[int]:
    """Translate a generic level to the format's own scale (None for tar)."""
    levels = LEVELS.get(fmt)
    if levels is None:
        return None
    return levels[_ORDER.index(level)]


def artifact_name(source: Path, fmt: ArchiveFormat) -> str:
    """File name of the archive produced for ``source``."""
    ext = EXTENSIONS[fmt]
    if fmt in (ArchiveFormat.ZIP, ArchiveFormat.SEVENZ, ArchiveFormat.TAR):
        return f"{source.name}.{ext}"
    if source.is_dir():
        return f"{source.name}.tar.{ext}"
    return f"{source.name}.{ext}"


def iter_members(source: Path, ignore: Optional[list[str]] = None):
    """Yield ``(path, arcname)`` for every directory and regular file below source.

    The source directory itself comes first.
    """
    prefix = source.parent
    ignore_paths = [source / p for p in ignore or []]

    def ignored(path: Path) -> bool:
        return any(path == p or p in path.parents for p in ignore_paths)

    for dirpath, dirnames, filenames in os.walk(source):
        current = Path(dirpath)
        if ignored(current):
            dirnames[:] = []
            continue
        yield current, current.relative_to(prefix).as_posix()
        dirnames.sort()
        for name in sorted(filenames):
            path = current / name
            if ignored(path) or path.is_symlink() or not path.is_file():
                continue
            yield path, path.relative_to(prefix).as_posix()


def _write_tar(tar: tarfile.TarFile, source: Path, ignore) -> None:
    if source.is_dir():
        for path, arcname in iter_members(source, ignore):
            tar.add(path, arcname=arcname, recursive=False)
    else:
        tar.add(source, arcname=source.name)


def _compress_stream(source: Path, dest: Path, opener) -> None:
    """Compress a single file through a file-like object returned by ``opener``."""
    with open(source, "rb") as reader, opener(dest) as writer:
        shutil.copyfileobj(reader, writer)


def _compress_tree(source: Path, dest: Path, ignore, mode: str, **kwargs) -> None:
    """Write a directory into a tar archive compressed by tarfile itself."""
    with tarfile.open(dest, mode, **kwargs) as tar:
        _write_tar(tar, source, ignore)


def _gzip(source: Path, dest: Path, level: int, ignore) -> None:
    if source.is_dir():
        _compress_tree(source, dest, ignore, "w:gz", compresslevel=level)
    else:
        _compress_stream(
            source, dest, lambda p: gzip.open(p, "wb", compresslevel=level)
        )


def _bzip2(source: Path, dest: Path, level: int, ignore) -> None:
    if source.is_dir():
        _compress_tree(source, dest, ignore, "w:bz2", compresslevel=level)
    else:
        _compress_stream(source, dest, lambda p: bz2.open(p, "wb", compresslevel=level))


def _xz(source: Path, dest: Path, level: int, ignore) -> None:
    if source.is_dir():
        _compress_tree(source, dest, ignore, "w:xz", preset=level)
    else:
        _compress_stream(source, dest, lambda p: lzma.open(p, "wb", preset=level))


def _zstd(source: Path, dest: Path, level: int, ignore) -> None:
    cctx = zstandard.ZstdCompressor(level=level)
    with open(dest, "wb") as fh, cctx.stream_writer(fh, closefd=False) as writer:
        if source.is_dir():
            with tarfile.open(fileobj=writer, mode="w|") as tar:
                _write_tar(tar, source, ignore)
        else:
            with open(source, "rb") as reader:
                shutil.copyfileobj(reader, writer)


def _lz4(source: Path, dest: Path, level: int, ignore) -> None:
    with lz4.frame.open(dest, mode="wb", compression_level=level) as writer:
        if source.is_dir():
            with tarfile.open(fileobj=writer, mode="w|") as tar:
                _write_tar(tar, source, ignore)
        else:
            with open(source, "rb") as reader:
                shutil.copyfileobj(reader, writer)


def _zip(source: Path, dest: Path, level: int, ignore) -> None:
    with zipfile.ZipFile(
        dest, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=level
    ) as zf:
        if source.is_dir():
            for path, arcname in iter_members(source, ignore):
                zf.write(path, arcname=arcname)
        else:
            zf.write(source, arcname=source.name)


def _sevenz(source: Path, dest: Path, level: int, ignore) -> None:
    filters = [{"id": py7zr.FILTER_LZMA2, "preset": level}]
    with py7zr.SevenZipFile(dest, "w", filters=filters) as archive:
        if source.is_dir():
            for path, arcname in iter_members(source, ignore):
                archive.write(path, arcname=arcname)
        else:
            archive.write(source, arcname=source.name)


def _tar(source: Path, dest: Path, level, ignore) -> None:
    with tarfile.open(dest, "w") as tar:
        _write_tar(tar, source, ignore)


_WRITERS = {
    ArchiveFormat.GZIP: _gzip,
    ArchiveFormat.ZIP: _zip,
    ArchiveFormat.SEVENZ: _sevenz,
    ArchiveFormat.ZSTD: _zstd,
    ArchiveFormat.BZIP2: _bzip2,
    ArchiveFormat.XZ: _xz,
    ArchiveFormat.LZ4: _lz4,
    ArchiveFormat.TAR: _tar,
}


def compress(
    source: Path,
    dest_dir: Path,
    fmt: ArchiveFormat,
    level: Level = Level.DEFAULT,
    ignore: Optional[list[str]] = None,
) -> Path:
    """Archive ``source`` into ``dest_dir``.

    Args:
        source: File or directory to archive
        dest_dir: Directory receiving the artifact, created if missing
        fmt: Archive format
        level: Compression level, ignored for tar
        ignore: Source relative paths to leave out

    Returns:
        Path of the created archive

    Raises:
        ArchiveError: If the source or destination is unusable or writing fails
    """
    source = Path(source)
    dest_dir = Path(dest_dir)

    if not source.exists():
        raise ArchiveError(f"Source path does not exist: {source}")
    if not source.is_dir() and not source.is_file():
        raise ArchiveError(f"Only files and directories can be archived: {source}")
    if dest_dir.exists() and not dest_dir.is_dir():
        raise ArchiveError(f"Archive destination is not a directory: {dest_dir}")

    dest = dest_dir / artifact_name(source, fmt)
    native = native_level(fmt, level)
    logger.info("Archiving %s -> %s (%s, level %s)", source, dest, fmt.value, native)

    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
        _WRITERS[fmt](source, dest, native, ignore)
    except (OSError, tarfile.TarError, zipfile.BadZipFile, py7zr.Bad7zFile) as e:
        raise ArchiveError(f"Failed to create {dest}: {e}") from e

    return dest
