"""Exceptions raised by mailpdf.

Only InvalidArgument escapes the library. FetchFailure and
UnsupportedEncoding are raised on internal paths and recovered where
they occur; errors from the Google APIs (HttpError) are never caught here.
"""


class MailPdfError(Exception):
    """Base class for all mailpdf errors."""


class InvalidArgument(MailPdfError, TypeError):
    """Input of the wrong type or shape was passed to a public function."""


class FetchFailure(MailPdfError):
    """A remote resource could not be downloaded."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class UnsupportedEncoding(MailPdfError):
    """A MIME part uses a transfer encoding we cannot decode."""

    def __init__(self, content_id: str, encoding: str):
        super().__init__(
            f"Inline part <{content_id}> uses unsupported encoding '{encoding}'"
        )
        self.content_id = content_id
        self.encoding = encoding
