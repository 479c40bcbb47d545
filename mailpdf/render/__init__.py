"""Rendering messages to HTML and PDF documents.

Usage:
    from mailpdf.render import render_html, RenderOptions

    blob = render_html(thread, RenderOptions(embed_avatar=False))
"""

from .document import render_html, render_pdf
from .formatting import format_date, format_emails, sanitize_filename
from .images import embed_image, embed_images
from .inline import embed_inline_images
from .options import RenderOptions

__all__ = [
    "RenderOptions",
    "render_html",
    "render_pdf",
    "embed_image",
    "embed_images",
    "embed_inline_images",
    "format_date",
    "format_emails",
    "sanitize_filename",
]
