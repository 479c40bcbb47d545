"""Shared fixtures: a scripted fetcher and a message factory."""

from datetime import datetime, timezone

import pytest

from mailpdf.http import FetchResponse
from mailpdf.read.models import Message

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"fake-png-data"
GIF_BYTES = b"GIF89a" + b"fake-gif-data"


class FakeFetcher:
    """Returns canned responses by URL and records every fetch.

    Unknown URLs get a 404.
    """

    def __init__(self):
        self.responses: dict[str, FetchResponse] = {}
        self.calls: list[str] = []

    def add_image(self, url: str, data: bytes, content_type: str = "image/png"):
        self.responses[url] = FetchResponse(200, data, content_type)

    def fetch(self, url: str, mute_http_exceptions: bool = True) -> FetchResponse:
        self.calls.append(url)
        return self.responses.get(url, FetchResponse(status_code=404))


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def make_message():
    """Factory for Message objects with sensible defaults."""

    def _make(**kwargs) -> Message:
        defaults = {
            "id": "msg1",
            "thread_id": "thread1",
            "date": datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc),
            "sender": "Alice Smith <alice@example.com>",
            "to": ["Bob Jones <bob@example.com>"],
            "subject": "Test message",
            "body": "<p>Hello Bob</p>",
        }
        defaults.update(kwargs)
        return Message(**defaults)

    return _make
