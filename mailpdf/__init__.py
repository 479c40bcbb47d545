"""Render Gmail messages and threads to self-contained HTML and PDF documents."""

__version__ = "0.1.0"
