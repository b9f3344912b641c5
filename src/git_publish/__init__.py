"""Publish a package's installable contents to a git branch."""

__version__ = "0.1.0"
