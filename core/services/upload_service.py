# =============================================================================
# core/services/upload_service.py - Asset Uploads
# =============================================================================
# Stores uploaded photos/documents in a category collection of the session
# folder (e.g. Wisdom_Heritage_2025-26/Student_Photos) and returns their URL.
#
# An upload failure never fails the enclosing operation: every error is
# logged and the URL comes back empty.
# =============================================================================

import base64
import binascii
import logging

from core.services.directory_service import DirectoryResolver
from lib.backends.protocols import StorageBackend

logger = logging.getLogger(__name__)


def _decode(payload: str) -> bytes:
    # Browsers send data URLs ("data:image/png;base64,....")
    if payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]
    return base64.b64decode(payload, validate=True)


class UploadService:
    """
    Base64 asset upload.

    Example:
        url = uploads.upload(photo_b64, "image/jpeg", "stud_2025001", "Student_Photos", "2025-26")
        # "" if the upload failed
    """

    def __init__(self, directory: DirectoryResolver, backend: StorageBackend):
        self.directory = directory
        self.backend = backend

    def upload(
        self,
        payload: str | None,
        mime_type: str,
        filename: str,
        category: str,
        session: str,
    ) -> str:
        """
        Store a base64 payload and return its URL.

        Returns:
            Retrieval URL, or "" if there was nothing to upload or it failed
        """
        if not payload:
            return ""

        try:
            content = _decode(payload)
        except (binascii.Error, ValueError) as e:
            logger.warning(f"Upload of {filename} rejected: invalid base64 ({e})")
            return ""

        try:
            folder = self.directory.get_session_folder(session)
            target = self.backend.find_collection(category, folder.id)
            if target is None:
                target = self.backend.create_collection(category, folder.id)
            url = self.backend.store_asset(target.id, filename, content, mime_type)
        except Exception as e:
            logger.warning(f"Upload of {filename} to {category} failed: {e}")
            return ""

        logger.info(f"Uploaded {filename} to {category} ({len(content)} bytes)")
        return url
