from __future__ import annotations

import cloudinary

from listing_api.config import cloudinary_api_key, cloudinary_api_secret, cloudinary_cloud_name


def configure_cloudinary() -> bool:
    """
    Push credentials from the environment into the Cloudinary SDK.
    Returns True when all required values are present.
    """
    if not cloudinary_is_configured():
        return False
    cloudinary.config(
        cloud_name=cloudinary_cloud_name(),
        api_key=cloudinary_api_key(),
        api_secret=cloudinary_api_secret(),
        secure=True,
    )
    return True


def cloudinary_is_configured() -> bool:
    return bool(cloudinary_cloud_name() and cloudinary_api_key() and cloudinary_api_secret())
