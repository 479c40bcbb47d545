"""CLI commands module."""

from . import config, export, save, send

__all__ = ["save", "send", "export", "config"]
