"""Tests for archive creation."""

import bz2
import gzip
import io
import lzma
import tarfile
import zipfile

import lz4.frame
import py7zr
import pytest
import zstandard

from hbackup.core.archive import (
    ArchiveError,
    artifact_name,
    compress,
    iter_members,
    native_level,
)
from hbackup.core.models import ArchiveFormat, Level

TREE_NAMES = {"src", "src/a.txt", "src/sub", "src/sub/b.txt", "src/sub/deeper"}


def tar_names(data: bytes) -> set[str]:
    with tarfile.open(fileobj=io.BytesIO(data)) as tar:
        return set(tar.getnames())


class TestNativeLevel:
    """Tests for level translation."""

    def test_default_levels(self):
        """Test the default level of each compressed format."""
        assert native_level(ArchiveFormat.GZIP, Level.DEFAULT) == 6
        assert native_level(ArchiveFormat.ZSTD, Level.DEFAULT) == 3
        assert native_level(ArchiveFormat.LZ4, Level.DEFAULT) == 6

    def test_extremes(self):
        """Test fastest and best levels."""
        assert native_level(ArchiveFormat.XZ, Level.FASTEST) == 1
        assert native_level(ArchiveFormat.XZ, Level.BEST) == 9
        assert native_level(ArchiveFormat.ZSTD, Level.BEST) == 22
        assert native_level(ArchiveFormat.LZ4, Level.BETTER) == 14

    def test_tar_has_no_level(self):
        """Test that plain tar ignores levels."""
        assert native_level(ArchiveFormat.TAR, Level.BEST) is None


class TestArtifactName:
    """Tests for artifact naming."""

    def test_directory_names(self, source_dir):
        """Test names for directory sources."""
        assert artifact_name(source_dir, ArchiveFormat.GZIP) == "src.tar.gz"
        assert artifact_name(source_dir, ArchiveFormat.ZSTD) == "src.tar.zst"
        assert artifact_name(source_dir, ArchiveFormat.LZ4) == "src.tar.lz4"
        assert artifact_name(source_dir, ArchiveFormat.ZIP) == "src.zip"
        assert artifact_name(source_dir, ArchiveFormat.SEVENZ) == "src.7z"
        assert artifact_name(source_dir, ArchiveFormat.TAR) == "src.tar"

    def test_file_names(self, source_dir):
        """Test names for file sources."""
        src = source_dir / "a.txt"
        assert artifact_name(src, ArchiveFormat.GZIP) == "a.txt.gz"
        assert artifact_name(src, ArchiveFormat.BZIP2) == "a.txt.bz2"
        assert artifact_name(src, ArchiveFormat.ZIP) == "a.txt.zip"


class TestIterMembers:
    """Tests for iter_members."""

    def test_relative_to_parent(self, source_dir):
        """Test that member names keep the top-level directory."""
        names = [arcname for _, arcname in iter_members(source_dir)]
        assert names[0] == "src"
        assert set(names) == TREE_NAMES | {"src/sub/deeper/c.txt"}

    def test_ignore_prunes_subtree(self, source_dir):
        """Test that ignored directories are left out entirely."""
        names = {arcname for _, arcname in iter_members(source_dir, ["sub"])}
        assert names == {"src", "src/a.txt"}


class TestCompressDirectory:
    """Tests for archiving directories."""

    def test_gzip(self, source_dir, target_dir):
        """Test a gzip compressed tarball."""
        dest = compress(source_dir, target_dir, ArchiveFormat.GZIP)
        assert dest == target_dir / "src.tar.gz"
        with tarfile.open(dest, "r:gz") as tar:
            assert tar.extractfile("src/sub/deeper/c.txt").read() == b"cc"

    def test_ignore(self, source_dir, target_dir):
        """Test that ignored paths are not archived."""
        dest = compress(
            source_dir, target_dir, ArchiveFormat.GZIP, Level.FASTEST, ["sub/deeper"]
        )
        with tarfile.open(dest, "r:gz") as tar:
            assert set(tar.getnames()) == TREE_NAMES - {"src/sub/deeper"}

    def test_bzip2(self, source_dir, target_dir):
        """Test a bzip2 compressed tarball."""
        dest = compress(source_dir, target_dir, ArchiveFormat.BZIP2, Level.BEST)
        assert tar_names(bz2.decompress(dest.read_bytes())) >= TREE_NAMES

    def test_xz(self, source_dir, target_dir):
        """Test an xz compressed tarball."""
        dest = compress(source_dir, target_dir, ArchiveFormat.XZ)
        assert tar_names(lzma.decompress(dest.read_bytes())) >= TREE_NAMES

    def test_zstd(self, source_dir, target_dir):
        """Test a zstd compressed tarball."""
        dest = compress(source_dir, target_dir, ArchiveFormat.ZSTD, Level.FASTER)
        assert dest.name == "src.tar.zst"
        dctx = zstandard.ZstdDecompressor()
        data = dctx.decompressobj().decompress(dest.read_bytes())
        assert tar_names(data) >= TREE_NAMES

    def test_lz4(self, source_dir, target_dir):
        """Test an lz4 compressed tarball."""
        dest = compress(source_dir, target_dir, ArchiveFormat.LZ4)
        assert tar_names(lz4.frame.decompress(dest.read_bytes())) >= TREE_NAMES

    def test_tar(self, source_dir, target_dir):
        """Test an uncompressed tarball."""
        dest = compress(source_dir, target_dir, ArchiveFormat.TAR)
        with tarfile.open(dest) as tar:
            assert "src/a.txt" in tar.getnames()

    def test_zip(self, source_dir, target_dir):
        """Test a zip archive."""
        dest = compress(source_dir, target_dir, ArchiveFormat.ZIP, Level.BETTER)
        with zipfile.ZipFile(dest) as zf:
            assert zf.read("src/sub/b.txt") == b"bbb"

    def test_sevenz(self, source_dir, target_dir, tmp_path):
        """Test a 7z archive."""
        dest = compress(source_dir, target_dir, ArchiveFormat.SEVENZ)
        assert dest.name == "src.7z"
        out = tmp_path / "extracted"
        with py7zr.SevenZipFile(dest, "r") as archive:
            archive.extractall(path=out)
        assert (out / "src" / "sub" / "deeper" / "c.txt").read_text() == "cc"


class TestCompressFile:
    """Tests for archiving single files."""

    def test_gzip(self, source_dir, target_dir):
        """Test gzip of a single file."""
        dest = compress(source_dir / "sub" / "b.txt", target_dir, ArchiveFormat.GZIP)
        assert dest.name == "b.txt.gz"
        assert gzip.decompress(dest.read_bytes()) == b"bbb"

    def test_zstd(self, source_dir, target_dir):
        """Test zstd of a single file."""
        dest = compress(source_dir / "a.txt", target_dir, ArchiveFormat.ZSTD)
        dctx = zstandard.ZstdDecompressor()
        assert dctx.decompressobj().decompress(dest.read_bytes()) == b"x"

    def test_lz4(self, source_dir, target_dir):
        """Test lz4 of a single file."""
        dest = compress(source_dir / "a.txt", target_dir, ArchiveFormat.LZ4)
        assert lz4.frame.decompress(dest.read_bytes()) == b"x"

    def test_zip(self, source_dir, target_dir):
        """Test zip of a single file."""
        dest = compress(source_dir / "a.txt", target_dir, ArchiveFormat.ZIP)
        with zipfile.ZipFile(dest) as zf:
            assert zf.namelist() == ["a.txt"]


class TestCompressErrors:
    """Tests for archive error handling."""

    def test_missing_source(self, tmp_path, target_dir):
        """Test that a missing source is rejected."""
        with pytest.raises(ArchiveError, match="does not exist"):
            compress(tmp_path / "missing", target_dir, ArchiveFormat.GZIP)

    def test_destination_is_file(self, source_dir, tmp_path):
        """Test that the destination must be a directory."""
        dest = tmp_path / "file"
        dest.write_text("x")
        with pytest.raises(ArchiveError, match="not a directory"):
            compress(source_dir, dest, ArchiveFormat.TAR)

    def test_creates_destination(self, source_dir, tmp_path):
        """Test that a missing destination directory is created."""
        dest = compress(source_dir, tmp_path / "new" / "dir", ArchiveFormat.TAR)
        assert dest.exists()
