"""HTML to PDF conversion through Google Drive.

Drive converts an uploaded HTML file into a Google Doc, which can then
be exported as PDF. The temporary document is deleted afterwards.
"""

import logging

from mailpdf.drive import DriveClient
from mailpdf.read.models import Blob

logger = logging.getLogger(__name__)


class DrivePdfConverter:
    """Convert HTML blobs to PDF bytes using Drive document conversion.

    Example:
        converter = DrivePdfConverter(DriveClient(creds))
        pdf_bytes = converter.convert(html_blob)
    """

    def __init__(self, drive: DriveClient):
        self._drive = drive

    def convert(self, blob: Blob) -> bytes:
        """Convert an HTML blob to PDF.

        Args:
            blob: A text/html blob.

        Returns:
            PDF file content.
        """
        file_id = self._drive.upload_as_document(blob)
        try:
            return self._drive.export_pdf(file_id)
        finally:
            self._drive.delete_file(file_id)
            logger.debug("Deleted temporary document %s", file_id)
