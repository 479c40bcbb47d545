"""Resolve inline (cid:) images from a message's raw MIME source.

HTML bodies refer to images carried inside the same message with
<img src="cid:...">. The matching MIME part is the one whose Content-ID
header carries that id. Only base64-encoded parts are decoded; anything
else is skipped and the reference is left as it was.

Bodies copied out of the Gmail web UI reference inline images as
"?view=att&...&attid=0.1" URLs instead, with no content-id to match on.
Those are resolved by position: the n-th such reference gets the n-th
inline image, in the order the message's own HTML refers to them.
"""

import base64
import binascii
import logging
from dataclasses import dataclass
from email import policy
from email.errors import MessageError
from email.message import Message as MimeMessage
from email.parser import BytesParser
from urllib.parse import parse_qs, unquote, urlsplit

from bs4 import BeautifulSoup

from mailpdf.errors import UnsupportedEncoding
from mailpdf.render.images import to_data_uri

logger = logging.getLogger(__name__)


def cid_of(src: str) -> str | None:
    """The content-id of a cid: URL, or None for any other URL."""
    src = src.strip()
    if src[:4].lower() != "cid:":
        return None
    return src[4:]


def is_view_att(src: str) -> bool:
    """True for Gmail web UI attachment URLs (...?view=att&attid=...)."""
    query = parse_qs(urlsplit(src.strip()).query)
    return query.get("view") == ["att"]


@dataclass(frozen=True)
class InlinePart:
    """A MIME part carrying a Content-ID, still transfer-encoded."""

    content_id: str
    content_type: str
    encoding: str
    payload: str

    def decode(self) -> bytes:
        """Decode the part body.

        Raises:
            UnsupportedEncoding: If the part is not base64-encoded.
        """
        if self.encoding != "base64":
            raise UnsupportedEncoding(self.content_id, self.encoding)
        return base64.b64decode(self.payload)


def _normalize_cid(value: str) -> str:
    return unquote(value).strip().strip("<>").strip().lower()


def extract_inline_parts(raw: bytes) -> tuple[list[InlinePart], list[str]]:
    """Find the Content-ID parts of a raw message.

    Args:
        raw: Full RFC 2822 message source.

    Returns:
        (parts, referenced) where parts are in the order they appear in
        the source and referenced lists the content-ids used by the
        message's own HTML parts, in document order.
    """
    # compat32 copes with malformed real-world messages better than
    # the stricter "default" policy.
    msg = BytesParser(policy=policy.compat32).parsebytes(raw)

    parts: list[InlinePart] = []
    referenced: list[str] = []

    for part in msg.walk():
        if part.get_content_maintype() == "multipart":
            continue

        if part.get_content_type() == "text/html":
            referenced.extend(_html_cid_references(part))

        content_id = part.get("Content-ID")
        if not content_id:
            continue

        encoding = str(part.get("Content-Transfer-Encoding", "7bit")).strip().lower()
        payload = part.get_payload()
        if not isinstance(payload, str):
            continue

        parts.append(
            InlinePart(
                content_id=_normalize_cid(str(content_id)),
                content_type=part.get_content_type(),
                encoding=encoding,
                payload=payload,
            )
        )

    return parts, referenced


def _html_cid_references(part: MimeMessage) -> list[str]:
    """Content-ids referenced by <img> tags in a text/html part."""
    body = part.get_payload(decode=True)
    if not body:
        return []
    charset = part.get_content_charset() or "utf-8"
    try:
        text = body.decode(charset, errors="replace")
    except LookupError:
        text = body.decode("utf-8", errors="replace")
    soup = BeautifulSoup(text, "html.parser")
    cids = (cid_of(img["src"]) for img in soup.find_all("img", src=True))
    return [_normalize_cid(cid) for cid in cids if cid]


def _part_data_uri(part: InlinePart) -> str | None:
    if not part.content_type.startswith("image/"):
        return None
    try:
        return to_data_uri(part.content_type, part.decode())
    except UnsupportedEncoding as e:
        logger.debug("Skipping inline image: %s", e)
    except (binascii.Error, ValueError) as e:
        logger.debug("Skipping inline image <%s>: %s", part.content_id, e)
    return None


def embed_inline_images(html_text: str, raw: bytes) -> str:
    """Replace cid: and view=att image references with data URIs.

    Args:
        html_text: HTML body of the message.
        raw: Raw source of the same message.

    Returns:
        The HTML with every resolvable inline image embedded. References
        that cannot be matched or decoded are preserved.
    """
    if not raw:
        return html_text

    try:
        parts, referenced = extract_inline_parts(raw)
    except (MessageError, ValueError) as e:
        logger.debug("Could not parse raw message for inline images: %s", e)
        return html_text

    if not parts:
        return html_text

    by_id: dict[str, InlinePart] = {}
    for part in parts:
        by_id.setdefault(part.content_id, part)

    resolved: dict[str, str | None] = {}

    def data_uri_for(content_id: str) -> str | None:
        if content_id not in resolved:
            part = by_id.get(content_id)
            resolved[content_id] = _part_data_uri(part) if part else None
        return resolved[content_id]

    # Positional fallback for references that carry no content-id
    order = list(dict.fromkeys(cid for cid in referenced if cid in by_id))
    if not order:
        order = [p.content_id for p in parts if p.content_type.startswith("image/")]
    positions = iter(order)

    soup = BeautifulSoup(html_text, "html.parser")
    changed = False

    for img in soup.find_all("img", src=True):
        cid = cid_of(img["src"])
        if cid:
            data_uri = data_uri_for(_normalize_cid(cid))
        elif is_view_att(img["src"]):
            content_id = next(positions, None)
            data_uri = data_uri_for(content_id) if content_id else None
        else:
            continue
        if data_uri is not None:
            img["src"] = data_uri
            changed = True

    return str(soup) if changed else html_text
