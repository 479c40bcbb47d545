"""Embed images into HTML as data URIs.

Image references are found in three places:
- <img src="..."> attributes
- inline style="...url(...)..." attributes
- url(...) references inside <style> blocks

Each remote reference is downloaded and replaced with a
data:<type>;base64,<bytes> URI. Anything that cannot be fetched, or
that is not an image, is left exactly as it was. References that are
already data URIs are never touched, so embedding twice is a no-op.
"""

import base64
import logging
import mimetypes
import re

import magic
from bs4 import BeautifulSoup

from mailpdf.errors import FetchFailure
from mailpdf.http import Fetcher
from mailpdf.read.models import Blob

logger = logging.getLogger(__name__)

# CSS url(...) reference
CSS_URL_RE = re.compile(
    r"""url\(\s*(?:"([^"]*)"|'([^']*)'|([^)"'\s]*))\s*\)""",
    re.IGNORECASE,
)


def to_data_uri(content_type: str, data: bytes) -> str:
    """Encode bytes as a data URI."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def sniff_content_type(blob: Blob) -> str:
    """Work out the media type of a blob.

    Uses the declared type unless it is missing or generic, then the
    filename extension, then libmagic on the content.
    """
    declared = (blob.content_type or "").split(";")[0].strip().lower()
    if declared and declared != "application/octet-stream":
        return declared

    guessed, _ = mimetypes.guess_type(blob.name or "")
    if guessed:
        return guessed

    if blob.data:
        detected = magic.from_buffer(blob.data, mime=True)
        if detected:
            return detected

    return "application/octet-stream"


def is_remote(url: str) -> bool:
    """True for http(s) and protocol-relative URLs."""
    lowered = url.strip().lower()
    return lowered.startswith(("http://", "https://", "//"))


def fetch_data_uri(url: str, fetcher: Fetcher) -> str | None:
    """Download an image and return it as a data URI.

    Args:
        url: Remote URL. Protocol-relative URLs are fetched over https.
        fetcher: Object used to perform the download.

    Returns:
        The data URI, or None if the fetch failed, returned a non-200
        status, or the content is not an image.
    """
    target = url.strip()
    if target.startswith("//"):
        target = "https:" + target

    try:
        response = fetcher.fetch(target, mute_http_exceptions=True)
    except FetchFailure as e:
        logger.debug("Skipping image: %s", e)
        return None

    if response.status_code != 200:
        logger.debug("Skipping image %s: HTTP %s", target, response.status_code)
        return None

    if not response.content_type.startswith("image/"):
        logger.debug(
            "Skipping image %s: content type '%s'", target, response.content_type
        )
        return None

    return to_data_uri(response.content_type, response.content)


def embed_image(source: str | Blob, fetcher: Fetcher | None = None) -> str | None:
    """Turn a URL or a blob into a data URI.

    Blobs are encoded directly. URLs are fetched, which requires a
    fetcher; data URIs are returned unchanged.

    Returns:
        The data URI, or None when no image data is available.
    """
    if isinstance(source, Blob):
        return to_data_uri(sniff_content_type(source), source.data)

    if source.strip().lower().startswith("data:"):
        return source
    if fetcher is None or not is_remote(source):
        return None
    return fetch_data_uri(source, fetcher)


class _Embedder:
    """Per-call state for embed_images: the fetcher and a URL cache."""

    def __init__(self, fetcher: Fetcher):
        self._fetcher = fetcher
        self._cache: dict[str, str | None] = {}
        self.changed = False

    def resolve(self, url: str) -> str | None:
        url = url.strip()
        if not is_remote(url):
            return None
        if url not in self._cache:
            self._cache[url] = fetch_data_uri(url, self._fetcher)
        data_uri = self._cache[url]
        if data_uri is not None:
            self.changed = True
        return data_uri

    def css_url(self, match: re.Match) -> str:
        double, single, bare = match.groups()
        url = next(v for v in (double, single, bare) if v is not None)
        data_uri = self.resolve(url)
        if data_uri is None:
            return match.group(0)
        if double is not None:
            return f'url("{data_uri}")'
        if single is not None:
            return f"url('{data_uri}')"
        return f"url({data_uri})"

    def css(self, text: str) -> str:
        return CSS_URL_RE.sub(self.css_url, text)


def embed_images(html_text: str, fetcher: Fetcher) -> str:
    """Replace remote image references in HTML with data URIs.

    Args:
        html_text: HTML fragment or document.
        fetcher: Used to download each distinct URL once.

    Returns:
        The HTML with every fetchable image inlined. References that
        cannot be resolved are preserved unchanged, and input with
        nothing to embed is returned as given.
    """
    soup = BeautifulSoup(html_text, "html.parser")
    embedder = _Embedder(fetcher)

    for style in soup.find_all("style"):
        if style.string:
            css = embedder.css(style.string)
            if css != style.string:
                style.string = css

    for tag in soup.find_all(style=True):
        css = embedder.css(tag["style"])
        if css != tag["style"]:
            tag["style"] = css

    for img in soup.find_all("img", src=True):
        data_uri = embedder.resolve(img["src"])
        if data_uri is not None:
            img["src"] = data_uri

    if not embedder.changed:
        return html_text
    return str(soup)
