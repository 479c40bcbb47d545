"""Google Drive API client for saving rendered documents.

Provides folder lookup/creation, file upload, and the HTML to Google Doc
to PDF round trip used for PDF conversion.
"""

import io
import logging

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.http import MediaIoBaseUpload

from mailpdf.read.models import Blob

logger = logging.getLogger(__name__)

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
DOCUMENT_MIME_TYPE = "application/vnd.google-apps.document"


def _escape_query_value(value: str) -> str:
    """Escape a string for use inside a quoted Drive query literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


class DriveClient:
    """Client for Google Drive API operations.

    Example:
        creds = get_credentials()
        drive = DriveClient(creds)
        folder = drive.get_or_create_folder("Gmail PDFs")
        drive.create_file(folder["id"], pdf_blob)
    """

    def __init__(self, credentials: Credentials):
        """Initialize Drive client with credentials.

        Args:
            credentials: Google OAuth credentials object.
        """
        self._credentials = credentials
        self._service = build("drive", "v3", credentials=credentials)

    def find_folders_by_name(self, name: str) -> list[dict]:
        """List folders with exactly this name that are not in the trash.

        Returns:
            List of folder dicts with keys: id, name.
        """
        query = (
            f"name = '{_escape_query_value(name)}' "
            f"and mimeType = '{FOLDER_MIME_TYPE}' and trashed = false"
        )
        result = (
            self._service.files()
            .list(q=query, spaces="drive", fields="files(id, name)")
            .execute()
        )
        return [
            {"id": folder["id"], "name": folder["name"]}
            for folder in result.get("files", [])
        ]

    def create_folder(self, name: str) -> dict:
        """Create a folder in the root of My Drive.

        Returns:
            Folder dict with keys: id, name.
        """
        metadata = {"name": name, "mimeType": FOLDER_MIME_TYPE}
        folder = self._service.files().create(body=metadata, fields="id").execute()
        logger.info("Created Drive folder '%s' (%s)", name, folder["id"])
        return {"id": folder["id"], "name": name}

    def get_or_create_folder(self, name: str) -> dict:
        """Return the first folder with this name, creating it if needed.

        If several folders share the name, whichever Drive lists first
        is returned.
        """
        folders = self.find_folders_by_name(name)
        if folders:
            return folders[0]
        return self.create_folder(name)

    def create_file(self, folder_id: str, blob: Blob) -> dict:
        """Upload a blob into a folder.

        Returns:
            File dict with keys: id, name, webViewLink.
        """
        metadata = {"name": blob.name, "parents": [folder_id]}
        media = MediaIoBaseUpload(io.BytesIO(blob.data), mimetype=blob.content_type)
        result = (
            self._service.files()
            .create(body=metadata, media_body=media, fields="id, name, webViewLink")
            .execute()
        )
        logger.info("Saved %s to Drive (%s)", blob.name, result["id"])
        return {
            "id": result["id"],
            "name": result.get("name", blob.name),
            "webViewLink": result.get("webViewLink"),
        }

    def upload_as_document(self, blob: Blob) -> str:
        """Upload an HTML blob, converting it to a Google Doc.

        Returns:
            The new document's file ID.
        """
        metadata = {"name": blob.name, "mimeType": DOCUMENT_MIME_TYPE}
        media = MediaIoBaseUpload(io.BytesIO(blob.data), mimetype=blob.content_type)
        result = (
            self._service.files()
            .create(body=metadata, media_body=media, fields="id")
            .execute()
        )
        return result["id"]

    def export_pdf(self, file_id: str) -> bytes:
        """Export a Google Doc as PDF bytes."""
        return (
            self._service.files()
            .export(fileId=file_id, mimeType="application/pdf")
            .execute()
        )

    def delete_file(self, file_id: str) -> None:
        """Permanently delete a file."""
        self._service.files().delete(fileId=file_id).execute()
