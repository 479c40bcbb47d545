"""Data models for messages, threads and their attachments."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Blob:
    """A named byte buffer with a content type.

    Rendered documents are returned as Blobs, and attachments are Blobs
    owned by their parent message.
    """

    name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class Attachment(Blob):
    """A file attached to a message."""

    @property
    def is_image(self) -> bool:
        return self.content_type.lower().startswith("image/")


@dataclass
class Message:
    """A single email message as read from the mail store.

    Bodies are always HTML: plain-text-only messages are escaped into a
    <pre> block when parsed. The raw RFC 2822 source is kept so that
    inline images can be recovered from their MIME parts later.
    """

    id: str
    thread_id: str
    date: datetime
    sender: str  # Full "Name <email>" format
    to: list[str] = field(default_factory=list)
    cc: list[str] = field(default_factory=list)
    bcc: list[str] = field(default_factory=list)
    subject: str = ""
    body: str = ""
    raw: bytes = b""
    starred: bool = False
    unread: bool = False
    trashed: bool = False
    attachments: list[Attachment] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "thread_id": self.thread_id,
            "date": self.date.isoformat(),
            "from": self.sender,
            "to": self.to,
            "cc": self.cc,
            "bcc": self.bcc,
            "subject": self.subject,
            "starred": self.starred,
            "unread": self.unread,
            "trashed": self.trashed,
            "attachments": [
                {"name": a.name, "content_type": a.content_type, "size": a.size}
                for a in self.attachments
            ],
        }


@dataclass
class Thread:
    """An ordered sequence of related messages."""

    id: str
    messages: list[Message] = field(default_factory=list)


# Values the document assembler accepts
Renderable = Message | Thread
