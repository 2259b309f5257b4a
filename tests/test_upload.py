# =============================================================================
# tests/test_upload.py - Asset Upload Tests
# =============================================================================
# This module contains tests for:
# - Base64 and data-URL payloads
# - Category collections inside the session folder
# - Failures returning an empty URL
# =============================================================================

import base64
from unittest.mock import patch

import pytest

from app.exceptions import StorageBackendError

PHOTO = b"\x89PNG fake image bytes"


@pytest.fixture
def photo_b64():
    return base64.b64encode(PHOTO).decode("ascii")


class TestUpload:
    """Test UploadService against the in-memory backend."""

    def test_upload_returns_url(self, datastore, backend, photo_b64):
        url = datastore.uploads.upload(photo_b64, "image/png", "stud_2024001", "Student_Photos", "2024-25")

        assert url.startswith("memory://assets/")
        assert url.endswith("/stud_2024001")
        assert backend.read_asset(url) == PHOTO

    def test_data_url_prefix_stripped(self, datastore, backend, photo_b64):
        url = datastore.uploads.upload(
            f"data:image/png;base64,{photo_b64}", "image/png", "p.png", "Student_Photos", "2024-25"
        )

        assert backend.read_asset(url) == PHOTO

    def test_category_collection_under_session_folder(self, datastore, backend, photo_b64):
        datastore.uploads.upload(photo_b64, "image/png", "a", "Staff_Photos", "2024-25")
        datastore.uploads.upload(photo_b64, "image/png", "b", "Staff_Photos", "2024-25")

        folder = datastore.directory.get_session_folder("2024-25")
        category = backend.find_collection("Staff_Photos", folder.id)
        assert category is not None
        assert category.parent_id == folder.id

    @pytest.mark.parametrize("payload", [None, ""])
    def test_nothing_to_upload(self, datastore, payload):
        assert datastore.uploads.upload(payload, "image/png", "x", "Student_Photos", "2024-25") == ""

    def test_invalid_base64(self, datastore):
        assert datastore.uploads.upload("not*base64!", "image/png", "x", "Student_Photos", "2024-25") == ""

    def test_backend_failure_returns_empty(self, datastore, backend, photo_b64):
        with patch.object(backend, "store_asset", side_effect=StorageBackendError("store asset", "bucket missing")):
            url = datastore.uploads.upload(photo_b64, "image/png", "x", "Student_Photos", "2024-25")

        assert url == ""
