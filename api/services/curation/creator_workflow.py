"""
Creator-mode wizard: pick a published product and colours, attach artwork,
then generate a composite image and record it in the history.
"""

import base64
import binascii
import logging
from typing import Any, Iterable, List, Optional

import requests

from services.curation.api_client import CatalogApiClient
from services.curation.storage import CurationStore, utc_now_iso
from utils.constants import COMPOSITE_PROMPT_TEMPLATE, DEFAULT_GENERATION_MESSAGE
from utils.exceptions import ApiClientError, ImageGenerationError
from utils.schema.catalog_schema import Product
from utils.schema.curation_schema import (
    AssetImages,
    Base64Image,
    CreatorWorkflowData,
    EmbeddedBase64,
    GeneratedImageAsset,
    GeneratedImageEntry,
    GenerationPayload,
    SelectedProductRef,
)

logger = logging.getLogger(__name__)

DATA_URI_PREFIX = "data:image/jpeg;base64,"


def build_detailed_prompt(user_prompt: str) -> str:
    return COMPOSITE_PROMPT_TEMPLATE.format(user_prompt=user_prompt).strip()


def decode_image_source(image: Optional[str]) -> Optional[bytes]:
    """
    Bytes for an image held as a data URI or bare base64 string.

    Raises:
        ValueError: if the string is not valid base64
    """
    if not image:
        return None
    payload = image.split(",", 1)[1] if image.startswith("data:") else image
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Image is not valid base64 data: {e}") from e


def _error_detail(value: Any) -> Optional[str]:
    if isinstance(value, list) and value:
        return ", ".join(
            str(item.get("msg", item)) if isinstance(item, dict) else str(item)
            for item in value
        )
    if value:
        return str(value)
    return None


def parse_generation_response(status_code: int, ok: bool, result: Any) -> GenerationPayload:
    """
    Resolve the proxy's { success, data } answer into one payload shape.

    Raises:
        ImageGenerationError: HTTP/envelope failure, upstream soft failure,
            or a payload that carries no image
    """
    if not ok or not isinstance(result, dict) or not result.get("success"):
        detail = None
        if isinstance(result, dict) and isinstance(result.get("data"), dict):
            detail = result["data"].get("detail") or result["data"].get("message")
        if detail is None and isinstance(result, dict):
            detail = result.get("error")
        status = result.get("status", status_code) if isinstance(result, dict) else status_code
        raise ImageGenerationError(
            _error_detail(detail) or f"Request failed with status {status}",
            status=status_code
        )

    payload = result.get("data")

    if isinstance(payload, dict) and payload.get("success") is False:
        detail = _error_detail(payload.get("detail")) or _error_detail(payload.get("message"))
        raise ImageGenerationError(detail or "Upstream service failed to generate image")

    if isinstance(payload, str):
        if not payload.strip():
            raise ImageGenerationError("No image returned from generator")
        return Base64Image(data=payload)

    if isinstance(payload, dict):
        metadata = payload.get("metadata") if isinstance(payload.get("metadata"), dict) else None
        message = payload.get("message") if isinstance(payload.get("message"), str) and payload["message"].strip() else None

        if isinstance(payload.get("images"), list):
            assets = [
                GeneratedImageAsset(color=img.get("color") or None, url=img["s3_url"], key=img.get("s3_key") or None)
                for img in payload["images"]
                if isinstance(img, dict) and img.get("s3_url")
            ]
            if assets:
                return AssetImages(assets=assets, metadata=metadata, message=message)

        if isinstance(payload.get("data"), str) and payload["data"].strip():
            return EmbeddedBase64(data=payload["data"], metadata=metadata, message=message)

    raise ImageGenerationError("No image returned from generator")


def resolved_image(payload: GenerationPayload) -> str:
    """Displayable image: first asset URL, or a JPEG data URI."""
    if isinstance(payload, AssetImages):
        return payload.assets[0].url
    return f"{DATA_URI_PREFIX}{payload.data}"


class CreatorWorkflow:
    """
    Multi-step creator wizard backed by the store's workflow slot.

    Each step overwrites the stored workflow wholesale.
    """

    def __init__(self, store: CurationStore, api_client: CatalogApiClient):
        self.store = store
        self.api_client = api_client
        self.last_message: Optional[str] = None

    def current(self) -> Optional[CreatorWorkflowData]:
        return self.store.get_creator_workflow()

    def published_colors(self, style_code: str) -> Optional[List[str]]:
        for product in self.store.get_published_products():
            if product.styleCode == style_code:
                return list(product.selectedColors)
        return None

    def start(self, product: Product, colors: Iterable[str]) -> CreatorWorkflowData:
        """
        Step 1: choose a published product and a subset of its published colours.

        Raises:
            ValueError: product not published, no colours, or colours outside the published set
        """
        colors = list(dict.fromkeys(colors))
        allowed = self.published_colors(product.styleCode)
        if allowed is None:
            raise ValueError(f"Product {product.styleCode} is not published")
        if not colors:
            raise ValueError("Please select at least one color")
        not_allowed = [c for c in colors if c not in allowed]
        if not_allowed:
            raise ValueError(f"Colors not published for {product.styleCode}: {', '.join(not_allowed)}")

        data = CreatorWorkflowData(
            selectedProduct=SelectedProductRef(
                styleCode=product.styleCode,
                styleName=product.styleName,
                productType=product.productType or "",
                gender=product.gender or None,
            ),
            selectedColors=colors,
        )
        self.store.save_creator_workflow(data)
        return data

    def _require_current(self) -> CreatorWorkflowData:
        data = self.current()
        if data is None:
            raise ValueError("No creator workflow in progress")
        return data

    def attach_artwork(self, model_image: Optional[str] = None, logo_image: Optional[str] = None) -> CreatorWorkflowData:
        """Step 2: model (head) image and logo, as data URIs or URLs."""
        data = self._require_current().model_copy(update={
            "modelImage": model_image,
            "logoImage": logo_image,
        })
        self.store.save_creator_workflow(data)
        return data

    def _load_image(self, source: Optional[str]) -> Optional[bytes]:
        """Artwork is kept as a data URI or a URL; URLs are downloaded."""
        if source and source.startswith(("http://", "https://")):
            response = self.api_client.session.get(source, timeout=30)
            response.raise_for_status()
            return response.content
        return decode_image_source(source)

    def generate(self, prompt: str, costume_image: bytes, image_type: Optional[str] = None) -> GeneratedImageEntry:
        """
        Step 3: generate the composite image and store it in the history.

        Raises:
            ValueError: empty prompt or no workflow in progress
            ImageGenerationError: the generator failed or returned no image
        """
        user_prompt = (prompt or "").strip()
        if not user_prompt:
            raise ValueError("Please enter a prompt")

        data = self._require_current().model_copy(update={"prompt": user_prompt})
        self.store.save_creator_workflow(data)

        try:
            response = self.api_client.generate_image(
                prompt=build_detailed_prompt(user_prompt),
                user_prompt=user_prompt,
                costume_image=costume_image,
                selected_colors=data.selectedColors,
                head_image=self._load_image(data.modelImage),
                logo_image=self._load_image(data.logoImage),
                image_type=image_type,
            )
        except (requests.exceptions.RequestException, ApiClientError) as e:
            logger.error(f"Image generation error: {e}")
            raise ImageGenerationError(str(e)) from e

        try:
            result = response.json()
        except ValueError as e:
            logger.error(f"Error parsing image generation response: {e}")
            result = None

        payload = parse_generation_response(response.status_code, response.ok, result)
        image = resolved_image(payload)
        self.last_message = getattr(payload, "message", None) or DEFAULT_GENERATION_MESSAGE

        product = data.selectedProduct
        record = {
            "image": image,
            "prompt": user_prompt,
            "product": {
                "styleCode": product.styleCode,
                "styleName": product.styleName,
                "productType": product.productType or "",
            },
            "selectedColors": data.selectedColors,
            "source": "base64" if image.startswith("data:") else "url",
            "metadata": getattr(payload, "metadata", None),
            "assets": payload.assets if isinstance(payload, AssetImages) else None,
        }

        entry = self.store.save_generated_image(record)
        if entry is None:
            logger.warning(f"Generated image for {product.styleCode} was not saved to history")
            entry = GeneratedImageEntry(id="", createdAt=utc_now_iso(), **record)
        return entry
