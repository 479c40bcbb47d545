"""Gmail API client.

Wraps the Gmail API to provide the mail store operations mailpdf needs:
searching threads, reading messages, clearing the starred and unread
state, sending mail with attachments, and looking up the active user.
"""

import base64
import logging
from email.message import EmailMessage

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError  # noqa: F401 - re-exported for callers

from mailpdf.auth.gmail import _load_token, _save_token
from mailpdf.read import parse_message
from mailpdf.read.models import Blob, Message, Thread

logger = logging.getLogger(__name__)


def get_credentials() -> Credentials | None:
    """Get Google credentials for API access.

    Returns the cached credentials object which can be used with
    googleapiclient. Automatically refreshes expired tokens if a
    refresh token is available. Returns None if not authenticated
    or if refresh fails.

    Returns:
        Credentials object or None if not authenticated.
    """
    creds = _load_token()
    if not creds:
        return None

    # If token is expired but we have a refresh token, try to refresh
    if creds.expired and creds.refresh_token:
        try:
            creds.refresh(Request())
            _save_token(creds)  # Persist refreshed token
        except RefreshError as e:
            # Refresh failed - token is no longer valid
            logger.debug("Token refresh failed: %s", e)
            return None

    # Return credentials only if valid
    return creds if creds.valid else None


class GmailClient:
    """Client for Gmail API operations.

    Example:
        creds = get_credentials()
        client = GmailClient(creds)
        for thread in client.search("is:starred", max_results=5):
            for message in thread.messages:
                print(message.subject)
    """

    def __init__(self, credentials: Credentials):
        """Initialize Gmail client with credentials.

        Args:
            credentials: Google OAuth credentials object.
        """
        self._credentials = credentials
        # The service is the main entry point for all Gmail API calls
        self._service = build("gmail", "v1", credentials=credentials)

    def list_thread_ids(
        self,
        query: str | None = None,
        start: int = 0,
        max_results: int = 10,
    ) -> list[str]:
        """List thread IDs matching a search query.

        The API has no offset parameter, so the first `start` matches are
        paged through and discarded.

        Args:
            query: Gmail search query (e.g., "in:inbox is:starred").
            start: Number of leading matches to skip.
            max_results: Maximum number of thread IDs to return.

        Returns:
            List of thread ID strings, newest first.
        """
        wanted = start + max_results
        thread_ids: list[str] = []
        page_token = None

        while len(thread_ids) < wanted:
            # API max per page is 500
            params = {
                "userId": "me",
                "maxResults": min(wanted - len(thread_ids), 500),
            }
            if query:
                params["q"] = query
            if page_token:
                params["pageToken"] = page_token

            result = self._service.users().threads().list(**params).execute()

            for thread in result.get("threads", []):
                thread_ids.append(thread["id"])
                if len(thread_ids) >= wanted:
                    break

            page_token = result.get("nextPageToken")
            if not page_token:
                break

        return thread_ids[start:]

    def search(
        self,
        query: str | None = None,
        start: int = 0,
        max_results: int = 10,
    ) -> list[Thread]:
        """Search for threads and load their messages.

        Args:
            query: Gmail search query.
            start: Number of leading matches to skip.
            max_results: Maximum number of threads to return.

        Returns:
            List of Thread objects with fully parsed messages.
        """
        return [
            self.get_thread(thread_id)
            for thread_id in self.list_thread_ids(query, start, max_results)
        ]

    def get_thread(self, thread_id: str) -> Thread:
        """Load a thread with all of its messages, oldest first."""
        result = (
            self._service.users()
            .threads()
            .get(userId="me", id=thread_id, format="minimal")
            .execute()
        )
        messages = [self.get_message(msg["id"]) for msg in result.get("messages", [])]
        return Thread(id=result.get("id", thread_id), messages=messages)

    def get_message(self, message_id: str) -> Message:
        """Get a single message with full content.

        Fetches the message in RAW format (base64url-encoded RFC 2822)
        and parses it.

        Args:
            message_id: The message ID to fetch.

        Returns:
            Parsed Message, with flags taken from the message's labels.
        """
        result = (
            self._service.users()
            .messages()
            .get(userId="me", id=message_id, format="raw")
            .execute()
        )

        # Gmail uses URL-safe base64 encoding
        raw_bytes = base64.urlsafe_b64decode(result.get("raw", ""))

        return parse_message(
            raw_bytes,
            message_id=result["id"],
            thread_id=result.get("threadId", ""),
            label_ids=result.get("labelIds", []),
        )

    def _remove_labels(self, message_id: str, label_ids: list[str]) -> None:
        self._service.users().messages().modify(
            userId="me", id=message_id, body={"removeLabelIds": label_ids}
        ).execute()

    def unstar_message(self, message_id: str) -> None:
        """Remove the STARRED label from a message."""
        self._remove_labels(message_id, ["STARRED"])

    def mark_read(self, message_id: str) -> None:
        """Remove the UNREAD label from a message."""
        self._remove_labels(message_id, ["UNREAD"])

    def send_email(
        self,
        to: str,
        subject: str,
        body: str,
        attachments: list[Blob] | None = None,
        html_body: str | None = None,
    ) -> str:
        """Send an email from the authenticated account.

        Args:
            to: Recipient address(es), comma-separated.
            subject: Subject line.
            body: Plain text body.
            attachments: Files to attach.
            html_body: Optional HTML alternative to the plain body.

        Returns:
            ID of the sent message.
        """
        msg = EmailMessage()
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)
        if html_body:
            msg.add_alternative(html_body, subtype="html")

        for blob in attachments or []:
            maintype, _, subtype = blob.content_type.partition("/")
            msg.add_attachment(
                blob.data,
                maintype=maintype,
                subtype=subtype or "octet-stream",
                filename=blob.name,
            )

        raw = base64.urlsafe_b64encode(msg.as_bytes()).decode("ascii")
        result = (
            self._service.users()
            .messages()
            .send(userId="me", body={"raw": raw})
            .execute()
        )
        logger.info("Sent '%s' to %s", subject, to)
        return result["id"]

    def get_user_email(self) -> str:
        """Email address of the authenticated user."""
        profile = self._service.users().getProfile(userId="me").execute()
        return profile["emailAddress"]
