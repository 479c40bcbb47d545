"""Email message parsing.

Parses raw RFC 2822 messages, as returned by the Gmail API in "raw"
format, into structured Message objects. Uses Python's email.parser
module directly.
"""

import html
from datetime import datetime, timezone
from email import policy
from email.header import decode_header, make_header
from email.message import Message as MimeMessage
from email.parser import BytesParser
from email.utils import getaddresses, parsedate_to_datetime

from mailpdf.read.models import Attachment, Blob, Message, Thread

__all__ = ["Attachment", "Blob", "Message", "Thread", "parse_message"]


def parse_message(
    raw: bytes,
    message_id: str = "",
    thread_id: str = "",
    label_ids: list[str] | None = None,
) -> Message:
    """Parse a raw email into a Message.

    Args:
        raw: The RFC 2822 message bytes.
        message_id: Mail store ID of the message.
        thread_id: Mail store ID of the thread it belongs to.
        label_ids: Labels on the message; STARRED, UNREAD and TRASH set
            the corresponding flags.

    Returns:
        Message with parsed headers, an HTML body and decoded attachments.
    """
    labels = set(label_ids or [])

    # BytesParser with the default (compat32) policy handles
    # real-world malformed emails better than the "email" policy.
    parser = BytesParser(policy=policy.compat32)
    msg = parser.parsebytes(raw)

    body_plain = None
    body_html = None
    attachments: list[Attachment] = []

    for part in msg.walk():
        # Skip multipart containers themselves
        if part.get_content_maintype() == "multipart":
            continue

        content_type = part.get_content_type()
        disposition = str(part.get("Content-Disposition", "")).lower()
        filename = _decode(part.get_filename())

        # Attachments have a Content-Disposition of "attachment", or an
        # explicit filename on a non-text part that is not referenced
        # inline by Content-ID
        if "attachment" in disposition or (
            filename
            and content_type not in ("text/plain", "text/html")
            and not part.get("Content-ID")
        ):
            payload = part.get_payload(decode=True) or b""
            attachments.append(
                Attachment(
                    name=filename or "unnamed",
                    content_type=content_type,
                    data=payload,
                )
            )
        elif content_type == "text/plain" and body_plain is None:
            body_plain = _decode_text(part)
        elif content_type == "text/html" and body_html is None:
            body_html = _decode_text(part)

    if body_html is None:
        body_html = _plain_to_html(body_plain or "")

    return Message(
        id=message_id,
        thread_id=thread_id,
        date=_parse_date(msg.get("Date", "")),
        sender=_decode(msg.get("From")),
        to=_parse_address_list(_decode(msg.get("To"))),
        cc=_parse_address_list(_decode(msg.get("Cc"))),
        bcc=_parse_address_list(_decode(msg.get("Bcc"))),
        subject=_decode(msg.get("Subject")),
        body=body_html,
        raw=raw,
        starred="STARRED" in labels,
        unread="UNREAD" in labels,
        trashed="TRASH" in labels,
        attachments=attachments,
    )


def _decode_text(part: MimeMessage) -> str | None:
    payload = part.get_payload(decode=True)
    if not payload:
        return None
    charset = part.get_content_charset() or "utf-8"
    try:
        return payload.decode(charset, errors="replace")
    except LookupError:
        # Unknown charset name
        return payload.decode("utf-8", errors="replace")


def _plain_to_html(text: str) -> str:
    return f'<pre style="white-space: pre-wrap">{html.escape(text)}</pre>'


def _decode(value) -> str:
    """Decode an RFC 2047 encoded header value to text."""
    if value is None:
        return ""
    try:
        return str(make_header(decode_header(str(value))))
    except (LookupError, UnicodeDecodeError, ValueError):
        return str(value)


def _parse_date(date_str: str) -> datetime:
    """Parse an RFC 2822 date string, falling back to epoch on failure."""
    if not date_str:
        return datetime(1970, 1, 1, tzinfo=timezone.utc)
    try:
        return parsedate_to_datetime(date_str)
    except (ValueError, TypeError):
        return datetime(1970, 1, 1, tzinfo=timezone.utc)


def _parse_address_list(header: str) -> list[str]:
    """Split a comma-separated address header into individual addresses.

    Keeps the full "Name <email>" format for each address.
    Returns an empty list for empty/missing headers.
    """
    if not header:
        return []
    # getaddresses respects quoted names that contain commas
    return [
        _format_address(name, addr) for name, addr in getaddresses([header]) if addr
    ]


def _format_address(name: str, addr: str) -> str:
    if not name:
        return addr
    if any(c in name for c in ',;"'):
        name = '"' + name.replace('"', '\\"') + '"'
    return f"{name} <{addr}>"
