"""Iterate over messages matching a search, one callback per message.

The filtered variants clear a message's state (unstar, or mark read) as
soon as its callback returns a truthy value, before moving on to the
next message. Nothing is batched: if processing stops part way through,
earlier messages stay cleared and later ones are untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from mailpdf.errors import InvalidArgument
from mailpdf.read.models import Message

if TYPE_CHECKING:
    from mailpdf.gmail import GmailClient

logger = logging.getLogger(__name__)

DEFAULT_QUERY = "in:inbox"
DEFAULT_LIMIT = 10

MessageCallback = Callable[[Message], Any]


def _check_callback(callback: MessageCallback) -> None:
    if not callable(callback):
        raise InvalidArgument(
            f"Expected a callable callback, got {type(callback).__name__}"
        )


def process_messages(
    gmail: GmailClient,
    callback: MessageCallback,
    query: str = DEFAULT_QUERY,
    limit: int = DEFAULT_LIMIT,
) -> int:
    """Call callback for every message in the threads matching query.

    Args:
        gmail: Mail store client.
        callback: Called with each Message, in thread then message order.
        query: Gmail search query.
        limit: Maximum number of threads to visit.

    Returns:
        Number of messages passed to the callback.

    Raises:
        InvalidArgument: If callback is not callable.
    """
    _check_callback(callback)

    count = 0
    for thread in gmail.search(query, 0, limit):
        for message in thread.messages:
            callback(message)
            count += 1
    return count


def _process_filtered(
    gmail: GmailClient,
    callback: MessageCallback,
    query: str,
    limit: int,
    predicate: str,
    selected: Callable[[Message], bool],
    clear: Callable[[str], None],
    action: str,
) -> int:
    _check_callback(callback)

    cleared = 0
    for thread in gmail.search(f"{query} {predicate}".strip(), 0, limit):
        for message in thread.messages:
            if message.trashed or not selected(message):
                continue
            if callback(message):
                clear(message.id)
                cleared += 1
                logger.debug("%s message %s", action, message.id)
    return cleared


def process_starred_messages(
    gmail: GmailClient,
    callback: MessageCallback,
    query: str = DEFAULT_QUERY,
    limit: int = DEFAULT_LIMIT,
) -> int:
    """Call callback for each starred message; unstar it if it returns truthy.

    Messages in the trash are skipped.

    Returns:
        Number of messages unstarred.
    """
    return _process_filtered(
        gmail,
        callback,
        query,
        limit,
        predicate="is:starred",
        selected=lambda m: m.starred,
        clear=gmail.unstar_message,
        action="Unstarred",
    )


def process_unread_messages(
    gmail: GmailClient,
    callback: MessageCallback,
    query: str = DEFAULT_QUERY,
    limit: int = DEFAULT_LIMIT,
) -> int:
    """Call callback for each unread message; mark it read if it returns truthy.

    Messages in the trash are skipped.

    Returns:
        Number of messages marked read.
    """
    return _process_filtered(
        gmail,
        callback,
        query,
        limit,
        predicate="is:unread",
        selected=lambda m: m.unread,
        clear=gmail.mark_read,
        action="Marked read",
    )
