from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Callable
from typing import Any

import cloudinary.uploader

from listing_api.exceptions import UploadError

logger = logging.getLogger(__name__)

UploadFn = Callable[..., dict[str, Any]]


class MediaUploader:
    """
    Forwards uploaded files to Cloudinary and hands back the durable URL.

    Bytes are spooled to a temp file first (the SDK uploads from a path); the
    temp file is always removed, whether the remote call succeeded or not.
    """

    def __init__(self, *, folder: str, enabled: bool, upload_fn: UploadFn | None = None) -> None:
        self._folder = folder
        self._enabled = enabled
        self._upload_fn = upload_fn or cloudinary.uploader.upload

    @property
    def enabled(self) -> bool:
        return self._enabled

    def upload(self, raw: bytes, filename: str = "") -> str:
        if not self._enabled:
            raise UploadError("Cloudinary is not configured")

        ext = os.path.splitext(filename or "")[1].lower()
        tmp_path: str | None = None
        try:
            with tempfile.NamedTemporaryFile(delete=False, suffix=ext) as tmp:
                tmp_path = tmp.name
                tmp.write(raw)

            try:
                res = self._upload_fn(tmp_path, folder=self._folder)
            except Exception as e:
                raise UploadError(f"Cloudinary upload failed: {str(e)[:200]}") from e

            url = str((res or {}).get("secure_url") or "").strip()
            if not url:
                raise UploadError("Cloudinary response had no secure_url")
            return url
        finally:
            if tmp_path:
                try:
                    os.unlink(tmp_path)
                except FileNotFoundError:
                    pass
                except OSError:
                    logger.warning("Could not remove temp upload %s", tmp_path)
