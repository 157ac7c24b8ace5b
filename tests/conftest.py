"""Pytest configuration and shared fixtures."""

import os
from pathlib import Path

import pytest

from hbackup.core.models import BackupModel, Job


def make_tree(root: Path, files: dict[str, str]) -> Path:
    """Create ``files`` (relative path -> content) below ``root``."""
    root.mkdir(parents=True, exist_ok=True)
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


def set_mtime(path: Path, mtime: float) -> None:
    """Set both access and modification time of ``path``."""
    os.utime(path, (mtime, mtime))


@pytest.fixture
def source_dir(tmp_path):
    """A small source tree named ``src``."""
    return make_tree(
        tmp_path / "src",
        {
            "a.txt": "x",
            "sub/b.txt": "bbb",
            "sub/deeper/c.txt": "cc",
        },
    )


@pytest.fixture
def target_dir(tmp_path):
    """An empty backup target directory."""
    target = tmp_path / "backup"
    target.mkdir()
    return target


@pytest.fixture
def mirror_job(source_dir, target_dir):
    """Mirror job from ``source_dir`` to ``target_dir``."""
    return Job(id=1, source=source_dir, target=target_dir, model=BackupModel.MIRROR)


@pytest.fixture
def tmp_config_dir(tmp_path, monkeypatch):
    """Point XDG_CONFIG_HOME at a temporary directory."""
    config_home = tmp_path / "xdg"
    config_home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home / "hbackup"


@pytest.fixture
def sample_config_toml():
    """Return a sample valid TOML configuration string."""
    return """
version = "1.0"

[global]
parallel_actions = 8
log_file = "/tmp/hbackup.log"

[[jobs]]
id = 1
source = "/home/user/Documents"
target = "/mnt/backup"
model = "mirror"
ignore = ["tmp", ".cache"]

[[jobs]]
id = 2
source = "/home/user/projects"
target = "/mnt/backup"
compression = "Zstd"
level = "better"

[[jobs]]
id = 4
source = "/home/user/notes.txt"
target = "/mnt/backup/notes.txt"
"""


@pytest.fixture
def minimal_config_toml():
    """Return a minimal valid TOML configuration string."""
    return """
[[jobs]]
id = 1
source = "/home"
target = "/mnt/backup"
"""


@pytest.fixture
def config_file(tmp_path, sample_config_toml):
    """Create a temporary config file with sample content."""
    config_path = tmp_path / "config" / "config.toml"
    config_path.parent.mkdir()
    config_path.write_text(sample_config_toml)
    return config_path


@pytest.fixture
def minimal_config_file(tmp_path, minimal_config_toml):
    """Create a temporary config file with minimal content."""
    config_path = tmp_path / "config" / "minimal.toml"
    config_path.parent.mkdir()
    config_path.write_text(minimal_config_toml)
    return config_path
