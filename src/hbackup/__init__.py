"""hbackup: hbackup/__init__.py."""

__version__ = "0.1.4"
