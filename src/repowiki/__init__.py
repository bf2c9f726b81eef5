"""repowiki: keep a repository wiki in sync with every commit."""

__version__ = "0.1.0"
