"""Command line interface for mailpdf."""
