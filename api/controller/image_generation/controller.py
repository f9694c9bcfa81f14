from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from typing import List, Optional

import requests

from controller.dependencies import get_image_generation_service
from services.image_generation.service import ImageGenerationService, UploadedImage
from utils.exceptions import ImageGenerationError
from utils.logger import logger

router = APIRouter()


async def _read_upload(upload: Optional[UploadFile]) -> Optional[UploadedImage]:
    if upload is None:
        return None
    content = await upload.read()
    return UploadedImage(
        content=content,
        filename=upload.filename,
        content_type=upload.content_type
    )


@router.options("/generate-image")
async def generate_image_preflight():
    return Response(status_code=204)


@router.post("/generate-image")
async def generate_image(
    head_image: Optional[UploadFile] = File(None, description="Model / head image"),
    costume_image: Optional[UploadFile] = File(None, description="Costume (product) image, required"),
    logo_image: Optional[UploadFile] = File(None, description="Logo image"),
    prompt: Optional[str] = Form(None),
    user_prompt: Optional[str] = Form(None),
    image_type: Optional[str] = Form(None),
    selectedColors: Optional[List[str]] = Form(None),
    service: ImageGenerationService = Depends(get_image_generation_service)
):
    """
    Compose head + costume + logo into a rendered image.

    - **costume_image** is required; the request is rejected with 400 before
      anything is sent upstream when it is absent.
    - **selectedColors** may be repeated.

    Returns `{ success, data }` where `data` is the upstream JSON, text, or
    a base64 string for binary bodies.
    """
    received = [
        name for name, upload in
        (("head_image", head_image), ("costume_image", costume_image), ("logo_image", logo_image))
        if upload is not None
    ]
    logger.info(f"Received files: {received}")

    try:
        files = {
            "head_image": await _read_upload(head_image),
            "costume_image": await _read_upload(costume_image),
            "logo_image": await _read_upload(logo_image),
        }
        fields = {"prompt": prompt, "user_prompt": user_prompt, "image_type": image_type}

        result = await run_in_threadpool(service.generate, fields, selectedColors, files)

        return JSONResponse(
            status_code=result.status_code,
            content={"success": result.ok, "data": result.data}
        )

    except ImageGenerationError as e:
        logger.warning(f"Rejected image generation request: {e}")
        return JSONResponse(
            status_code=e.status or 400,
            content={"success": False, "error": str(e)}
        )
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error(f"Error generating image: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(e) or "Failed to generate image"}
        )
