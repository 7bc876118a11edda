"""Frontmatter metadata index and query engine for org documents."""

__version__ = "0.1.0"
