"""Small text helpers used when rendering documents."""

import html
import re
from datetime import datetime
from email.utils import getaddresses

# Characters not allowed in filenames on common filesystems
FORBIDDEN_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f\x7f]')

NO_SUBJECT = "(no subject)"


def format_emails(addresses: str | list[str]) -> str:
    """Render address header values as HTML with mailto links.

    "John Doe <john@example.com>" becomes
    'John Doe <a href="mailto:john@example.com">john@example.com</a>'.

    Args:
        addresses: A comma-separated header value, or a list of them.

    Returns:
        HTML string, addresses joined with ", ". Empty input gives "".
    """
    if isinstance(addresses, str):
        addresses = [addresses]

    rendered = []
    for name, email in getaddresses([a for a in addresses if a]):
        if not email:
            if name:
                rendered.append(html.escape(name))
            continue
        addr = html.escape(email)
        link = f'<a href="mailto:{addr}">{addr}</a>'
        rendered.append(f"{html.escape(name)} {link}" if name else link)

    return ", ".join(rendered)


def sanitize_filename(filename: str) -> str:
    """Strip characters that are not allowed in filenames.

    Removes \\ / : * ? " < > | and control characters, then trims
    surrounding whitespace.
    """
    return FORBIDDEN_FILENAME_CHARS.sub("", filename).strip()


def format_date(value: datetime) -> str:
    """Format a message timestamp the way mail clients display it.

    Example: "Mon, Jan 15, 2024 at 10:00 AM"
    """
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return (
        f"{value:%a, %b} {value.day}, {value.year} "
        f"at {hour}:{value.minute:02d} {meridiem}"
    )


def format_size(size: int) -> str:
    """Human-readable byte count ("512 B", "1.5 KB", "2.0 MB")."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def default_filename(subject: str, extension: str) -> str:
    """Build an output filename from a message subject.

    Args:
        subject: Subject line; empty subjects become "(no subject)".
        extension: Extension including the dot (".pdf").
    """
    base = sanitize_filename(subject) or NO_SUBJECT
    return f"{base}{extension}"
