"""repo_dump: turn a repository working tree into a tree/markdown/json report."""

__version__ = "0.1.0"
