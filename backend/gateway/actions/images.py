"""
Event Gateway: Image Upload Actions
====================================

What:  Decode base64 images and push them to object storage.
How:   Sequential decode-then-upload per image. The first failure aborts the
       whole request; images already uploaded stay uploaded (no rollback).

Input formats accepted for every image string:
    iVBORw0KGgo...                          plain base64
    data:image/png;base64,iVBORw0KGgo...    data URI, prefix is stripped
"""

import base64
import binascii
import logging
import re
from typing import Optional

from gateway.actions.base import Action
from gateway.clients.image_storage import ImageStorage
from gateway.config import Settings, settings as default_settings
from gateway.exceptions import ValidationError
from gateway.schemas.actions import (
    ImageUploadInput,
    ImageUploadOutput,
    UploadImagesInput,
    UploadImagesOutput,
)

logger = logging.getLogger(__name__)

_DATA_URI_PREFIX = re.compile(r"^data:[\w.+-]+/[\w.+-]+(;[\w=.+-]+)*;base64,", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def strip_data_uri(value: str) -> str:
    """Remove a leading `data:<mime>;base64,` marker, if any."""
    return _DATA_URI_PREFIX.sub("", value.strip(), count=1)


def decode_image(value: str, max_size: int, index: int = 0) -> bytes:
    """
    Decode one base64 image string to raw bytes.

    Raises:
        ValidationError: not valid base64, empty, or larger than max_size
    """
    encoded = _WHITESPACE.sub("", strip_data_uri(value))
    try:
        content = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError(
            message="Failed to decode base64 string",
            field="base64_strs",
            context={"index": index},
        )

    if not content:
        raise ValidationError(
            message="Image is empty", field="base64_strs", context={"index": index}
        )
    if len(content) > max_size:
        max_mb = max_size / (1024 * 1024)
        raise ValidationError(
            message=f"Image exceeds maximum size of {max_mb:.0f}MB",
            field="base64_strs",
            context={"index": index, "size": len(content)},
        )
    return content


class UploadImagesAction(Action[UploadImagesInput, UploadImagesOutput]):
    """Batch upload: N strings in, N URLs out, same order."""

    name = "upload_images"

    def __init__(self, storage: ImageStorage, settings: Optional[Settings] = None):
        self.storage = storage
        self.settings = settings or default_settings

    async def execute(self, payload: UploadImagesInput) -> UploadImagesOutput:
        self.storage.ensure_configured()

        urls = []
        for index, value in enumerate(payload.base64_strs):
            content = decode_image(value, self.settings.max_image_size, index=index)
            urls.append(await self.storage.upload(content))

        logger.info("Uploaded %d image(s)", len(urls))
        return UploadImagesOutput(urls=urls)


class UploadImageAction(Action[ImageUploadInput, ImageUploadOutput]):
    """Single image attached to a user; stored under `<folder>/<user_id>`."""

    name = "image_upload"

    def __init__(self, storage: ImageStorage, settings: Optional[Settings] = None):
        self.storage = storage
        self.settings = settings or default_settings

    async def execute(self, payload: ImageUploadInput) -> ImageUploadOutput:
        self.storage.ensure_configured()

        try:
            content = decode_image(payload.file, self.settings.max_image_size)
        except ValidationError as e:
            e.field = "file"
            e.context["field"] = "file"
            raise

        folder = f"{self.settings.cloudinary_folder}/{payload.user_id}"
        url = await self.storage.upload(content, folder=folder)
        return ImageUploadOutput(url=url)
