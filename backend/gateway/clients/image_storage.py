"""
Event Gateway: Object Storage Client (Cloudinary)
==================================================

What:  Uploads decoded image bytes to Cloudinary and returns the secure URL.
How:   The Cloudinary SDK is blocking, so each upload runs in Starlette's
       thread pool to keep the event loop free.
Who:   Image upload actions.
"""

import io
import logging
from typing import Optional

import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from starlette.concurrency import run_in_threadpool

from gateway.config import Settings, settings as default_settings
from gateway.exceptions import CollaboratorConfigError, ImageUploadError

logger = logging.getLogger(__name__)

COLLABORATOR = "image storage"


class ImageStorage:
    """Cloudinary uploader bound to one set of account credentials."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings

    def _config(self) -> dict:
        if not self.settings.cloudinary_configured:
            raise CollaboratorConfigError(COLLABORATOR)
        return {
            "cloud_name": self.settings.cloudinary_cloud_name,
            "api_key": self.settings.cloudinary_api_key,
            "api_secret": self.settings.cloudinary_api_secret.get_secret_value(),
            "secure": True,
        }

    def ensure_configured(self) -> None:
        """Raise CollaboratorConfigError before any image is processed."""
        self._config()

    async def upload(self, content: bytes, folder: Optional[str] = None) -> str:
        """
        Upload one image and return its canonical HTTPS URL.

        Raises:
            CollaboratorConfigError: credentials missing
            ImageUploadError: the SDK raised, or the response had no secure_url
        """
        options = self._config()
        options["folder"] = folder or self.settings.cloudinary_folder
        options["resource_type"] = "image"

        try:
            result = await run_in_threadpool(
                cloudinary.uploader.upload, io.BytesIO(content), **options
            )
        except CloudinaryError as e:
            logger.error("Cloudinary rejected upload: %s", str(e))
            raise ImageUploadError(
                message="Failed to upload image",
                context={"error": str(e), "size": len(content)},
            )
        except OSError as e:
            logger.error("Cloudinary transport failure: %s", str(e))
            raise ImageUploadError(
                message="Failed to upload image",
                context={"error": str(e), "size": len(content)},
            )

        secure_url = (result or {}).get("secure_url")
        if not secure_url:
            logger.error("Cloudinary response carried no secure_url: %s", result)
            raise ImageUploadError(context={"response": result})

        logger.info(
            "Image uploaded to folder %s (%d bytes, public_id=%s)",
            options["folder"],
            len(content),
            result.get("public_id"),
        )
        return secure_url
