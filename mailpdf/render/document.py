"""Assemble messages into a single self-contained HTML (or PDF) document.

Each message becomes an optional header block, its body with images
embedded, and a list of its attachments. Messages follow each other in
input order and every message after the first starts on a new page.

Usage:
    from mailpdf.render import render_html, render_pdf

    blob = render_html(thread, embed_avatar=False)
    pdf = render_pdf([message_a, message_b], converter)
"""

import hashlib
import html
import logging
import re
from collections.abc import Sequence
from typing import Protocol

from bs4 import BeautifulSoup

from mailpdf.errors import InvalidArgument
from mailpdf.http import Fetcher, HttpFetcher
from mailpdf.read.models import Attachment, Blob, Message, Renderable, Thread
from mailpdf.render.formatting import (
    default_filename,
    format_date,
    format_emails,
    format_size,
)
from mailpdf.render.images import embed_image, embed_images
from mailpdf.render.inline import embed_inline_images
from mailpdf.render.options import RenderOptions

logger = logging.getLogger(__name__)

PAGE_BREAK = '<div class="page-break" style="page-break-before: always"></div>'

# d=404 makes unknown addresses fail instead of returning a placeholder
AVATAR_URL = "https://www.gravatar.com/avatar/{digest}?s=64&d=404"


class PdfConverter(Protocol):
    """Converts an HTML blob to PDF bytes."""

    def convert(self, blob: Blob) -> bytes:
        ...


def _stylesheet(width: int) -> str:
    return f"""
body {{ font-family: Arial, Helvetica, sans-serif; font-size: 13px; color: #222; }}
.document {{ width: {width}px; margin: 0 auto; }}
.message-header {{ border-bottom: 1px solid #ccc; margin-bottom: 12px; padding-bottom: 8px; overflow: hidden; }}
.message-header .avatar {{ float: right; width: 48px; height: 48px; border-radius: 24px; }}
.message-header table {{ border-collapse: collapse; }}
.message-header th {{ text-align: left; vertical-align: top; padding: 1px 8px 1px 0; color: #777; font-weight: normal; }}
.message-header td {{ padding: 1px 0; }}
.message-header .subject {{ font-weight: bold; }}
.message-body {{ overflow-wrap: break-word; }}
.message-body img {{ max-width: 100%; }}
.attachments {{ border-top: 1px solid #ccc; margin-top: 16px; padding-top: 8px; }}
.attachments ul {{ list-style: none; padding: 0; }}
.attachments li {{ margin-bottom: 8px; }}
.attachments img {{ display: block; max-width: 100%; margin-bottom: 4px; }}
.attachments .size {{ color: #777; }}
"""


def avatar_url(address: str) -> str | None:
    """Avatar image URL for the address in a From header, if any."""
    match = re.search(r"[^\s<>\"',]+@[^\s<>\"',]+", address or "")
    if not match:
        return None
    digest = hashlib.md5(match.group(0).strip().lower().encode("utf-8")).hexdigest()
    return AVATAR_URL.format(digest=digest)


def expand_messages(items: Renderable | Sequence[Renderable]) -> list[Message]:
    """Flatten messages and threads into a list of messages.

    Raises:
        InvalidArgument: If any item is not a Message or Thread, or
            there is nothing to render.
    """
    if isinstance(items, (Message, Thread)):
        items = [items]
    elif not isinstance(items, (list, tuple)):
        raise InvalidArgument(
            f"Expected a Message, Thread or a list of them, got {type(items).__name__}"
        )

    messages: list[Message] = []
    for item in items:
        if isinstance(item, Message):
            messages.append(item)
        elif isinstance(item, Thread):
            messages.extend(item.messages)
        else:
            raise InvalidArgument(
                f"Expected a Message or Thread, got {type(item).__name__}"
            )

    if not messages:
        raise InvalidArgument("No messages to render")

    return messages


def resolve_options(
    options: RenderOptions | None = None, **overrides
) -> RenderOptions:
    """Merge keyword overrides into options (or the defaults)."""
    if options is None:
        options = RenderOptions()
    elif not isinstance(options, RenderOptions):
        raise InvalidArgument(
            f"Expected RenderOptions, got {type(options).__name__}"
        )
    return options.merge(**overrides) if overrides else options


def _extract_body(body: str) -> str:
    """Reduce a full HTML document to its <style> blocks and body content."""
    soup = BeautifulSoup(body, "html.parser")
    if soup.body is None:
        return body
    styles = "".join(
        str(style)
        for style in soup.find_all("style")
        if style.find_parent("body") is None
    )
    return styles + soup.body.decode_contents()


def _render_header(message: Message, options: RenderOptions, fetcher: Fetcher) -> str:
    rows = [("From", format_emails(message.sender))]
    for label, addresses in (("To", message.to), ("Cc", message.cc), ("Bcc", message.bcc)):
        if addresses:
            rows.append((label, format_emails(addresses)))
    rows.append(("Subject", f'<span class="subject">{html.escape(message.subject)}</span>'))
    rows.append(("Date", html.escape(format_date(message.date))))

    avatar = ""
    if options.embed_avatar:
        url = avatar_url(message.sender)
        data_uri = embed_image(url, fetcher) if url else None
        if data_uri:
            avatar = f'<img class="avatar" src="{data_uri}" alt="" />'

    table = "".join(f"<tr><th>{label}:</th><td>{value}</td></tr>" for label, value in rows)
    return f'<div class="message-header">{avatar}<table>{table}</table></div>'


def _render_attachment(attachment: Attachment, options: RenderOptions) -> str:
    image = ""
    if options.embed_attachments and attachment.is_image:
        image = f'<img src="{embed_image(attachment)}" alt="{html.escape(attachment.name)}" />'
    return (
        f"<li>{image}<span class=\"name\">{html.escape(attachment.name)}</span> "
        f'<span class="size">({format_size(attachment.size)})</span></li>'
    )


def _render_attachments(message: Message, options: RenderOptions) -> str:
    if not message.attachments:
        return ""
    count = len(message.attachments)
    title = f"{count} attachment{'s' if count != 1 else ''}"
    items = "".join(_render_attachment(a, options) for a in message.attachments)
    return f'<div class="attachments"><p><strong>{title}</strong></p><ul>{items}</ul></div>'


def _render_body(message: Message, options: RenderOptions, fetcher: Fetcher) -> str:
    body = _extract_body(message.body)
    if options.embed_inline_images:
        body = embed_inline_images(body, message.raw)
    if options.embed_remote_images:
        body = embed_images(body, fetcher)
    return f'<div class="message-body">{body}</div>'


def _render_message(message: Message, options: RenderOptions, fetcher: Fetcher) -> str:
    sections = []
    if options.include_header:
        sections.append(_render_header(message, options, fetcher))
    sections.append(_render_body(message, options, fetcher))
    if options.include_attachments:
        sections.append(_render_attachments(message, options))
    return f'<div class="message">{"".join(sections)}</div>'


def render_html(
    items: Renderable | Sequence[Renderable],
    options: RenderOptions | None = None,
    fetcher: Fetcher | None = None,
    **overrides,
) -> Blob:
    """Render messages and threads into one HTML document.

    Args:
        items: A Message, a Thread, or a list mixing both.
        options: Base render options; defaults are used when None.
        fetcher: Downloads remote images and avatars. An HttpFetcher is
            created when omitted.
        **overrides: Individual RenderOptions fields to override.

    Returns:
        A text/html Blob named after the last message's subject unless
        options.filename is set.

    Raises:
        InvalidArgument: For inputs that are not messages or threads,
            empty input, or unknown option names.
    """
    messages = expand_messages(items)
    opts = resolve_options(options, **overrides)
    if fetcher is None:
        fetcher = HttpFetcher()

    parts = []
    for index, message in enumerate(messages):
        if index > 0:
            parts.append(PAGE_BREAK)
        parts.append(_render_message(message, opts, fetcher))

    title = html.escape(messages[-1].subject)
    document = (
        "<!DOCTYPE html>\n"
        '<html><head><meta charset="utf-8" />'
        f"<title>{title}</title><style>{_stylesheet(opts.width)}</style></head>"
        f'<body><div class="document">{"".join(parts)}</div></body></html>'
    )

    filename = opts.filename or default_filename(messages[-1].subject, ".html")
    logger.debug("Rendered %d message(s) to %s", len(messages), filename)
    return Blob(name=filename, content_type="text/html", data=document.encode("utf-8"))


def render_pdf(
    items: Renderable | Sequence[Renderable],
    converter: PdfConverter,
    options: RenderOptions | None = None,
    fetcher: Fetcher | None = None,
    **overrides,
) -> Blob:
    """Render messages and threads into a PDF.

    Assembles the same document as render_html and hands it to
    converter for the HTML to PDF step.

    Returns:
        An application/pdf Blob.
    """
    messages = expand_messages(items)
    opts = resolve_options(options, **overrides)

    # The HTML intermediate keeps an .html name even when the PDF is renamed
    document = render_html(messages, opts.merge(filename=None), fetcher)
    data = converter.convert(document)

    filename = opts.filename or default_filename(messages[-1].subject, ".pdf")
    return Blob(name=filename, content_type="application/pdf", data=data)
