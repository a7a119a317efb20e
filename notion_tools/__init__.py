"""Command-line tools for reading, rewriting and voicing Notion workspace content."""

__version__ = "0.1.0"
