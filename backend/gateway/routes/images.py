"""
Event Gateway: Image Upload Routes
===================================

What:  POST /uploadImages (batch) and POST /image_upload (single, per user).
How:   Base64 strings in the JSON body; URLs of the stored images out.
"""

from fastapi import APIRouter, Depends

from gateway.actions.images import UploadImageAction, UploadImagesAction
from gateway.dependencies import get_upload_image_action, get_upload_images_action
from gateway.schemas.actions import (
    ActionPayload,
    ErrorResponse,
    ImageUploadInput,
    ImageUploadOutput,
    UploadImagesInput,
    UploadImagesOutput,
)

router = APIRouter(tags=["Images"])

_ERRORS = {
    400: {"description": "No images, or undecodable/oversize image", "model": ErrorResponse},
    500: {"description": "Image storage not configured", "model": ErrorResponse},
    502: {"description": "Image storage rejected the upload", "model": ErrorResponse},
}


@router.post(
    "/uploadImages",
    response_model=UploadImagesOutput,
    responses=_ERRORS,
    summary="Upload a batch of base64 images",
    description=(
        "Decodes and uploads each image in order. The first failure aborts the "
        "request; images uploaded before it are not removed."
    ),
)
async def upload_images(
    payload: ActionPayload[UploadImagesInput],
    action: UploadImagesAction = Depends(get_upload_images_action),
) -> UploadImagesOutput:
    return await action.execute(payload.input)


@router.post(
    "/image_upload",
    response_model=ImageUploadOutput,
    responses=_ERRORS,
    summary="Upload one base64 image for a user",
)
async def upload_image(
    payload: ActionPayload[ImageUploadInput],
    action: UploadImageAction = Depends(get_upload_image_action),
) -> ImageUploadOutput:
    return await action.execute(payload.input)
