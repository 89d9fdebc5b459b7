"""Tests for the Cloudinary upload proxy."""

import os

import pytest

from listing_api.exceptions import UploadError
from listing_api.utils.cloudinary_storage import MediaUploader

from conftest import FakeCloudinary


class TestMediaUploader:
    def test_returns_secure_url_and_removes_temp_file(self) -> None:
        fake = FakeCloudinary()
        uploader = MediaUploader(folder="property_uploads", enabled=True, upload_fn=fake)
        url = uploader.upload(b"\x89PNG fake bytes", filename="front.PNG")

        assert url.startswith("https://res.cloudinary.com/")
        path, kwargs = fake.calls[0]
        assert kwargs == {"folder": "property_uploads"}
        assert path.endswith(".png")
        assert fake.seen_existing == [True]
        assert not os.path.exists(path)

    def test_temp_file_removed_when_remote_fails(self) -> None:
        fake = FakeCloudinary(error=RuntimeError("boom"))
        uploader = MediaUploader(folder="f", enabled=True, upload_fn=fake)
        with pytest.raises(UploadError):
            uploader.upload(b"data")
        assert not os.path.exists(fake.calls[0][0])

    def test_missing_url_is_an_error(self) -> None:
        uploader = MediaUploader(folder="f", enabled=True, upload_fn=FakeCloudinary(result={}))
        with pytest.raises(UploadError):
            uploader.upload(b"data")

    def test_not_configured(self) -> None:
        fake = FakeCloudinary()
        uploader = MediaUploader(folder="f", enabled=False, upload_fn=fake)
        with pytest.raises(UploadError):
            uploader.upload(b"data")
        assert fake.calls == []
