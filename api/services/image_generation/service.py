"""
Image Generation Service
Forwards head + costume + logo uploads to the upstream generator and
reshapes whatever it answers into { success, data }.
"""

import base64
import logging
import requests
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from core.config import Settings, settings as default_settings
from utils.constants import GENERATE_IMAGE_FILE_FIELDS, GENERATE_IMAGE_TEXT_FIELDS
from utils.exceptions import ImageGenerationError

logger = logging.getLogger(__name__)


@dataclass
class UploadedImage:
    """An image received from the client, already read into memory"""
    content: bytes
    filename: Optional[str] = None
    content_type: Optional[str] = None


@dataclass
class GenerationResult:
    ok: bool
    status_code: int
    data: Any


class ImageGenerationService:
    """Service for relaying composite image requests to the generator"""

    def __init__(self, config: Optional[Settings] = None, session: Optional[requests.Session] = None):
        config = config or default_settings
        self.generate_url = config.require("GENERATE_IMAGE_URL")
        self.timeout = config.GENERATE_IMAGE_TIMEOUT
        self.session = session or requests.Session()

    @staticmethod
    def normalize_colors(selected_colors: Any) -> List[str]:
        """selectedColors may arrive repeated (list) or as a single string."""
        if isinstance(selected_colors, (list, tuple)):
            return [str(color) for color in selected_colors if str(color).strip()]
        if isinstance(selected_colors, str) and selected_colors.strip():
            return [selected_colors.strip()]
        return []

    def build_multipart(
        self,
        fields: Dict[str, Optional[str]],
        selected_colors: Any,
        files: Dict[str, Optional[UploadedImage]]
    ) -> Tuple[List[Tuple[str, str]], List[Tuple[str, Tuple[str, bytes, str]]]]:
        """
        Build the upstream multipart payload.

        Args:
            fields: text fields (prompt, user_prompt, image_type)
            selected_colors: repeated or single colour value
            files: incoming field name -> uploaded image

        Returns:
            (data, files) tuples ready for requests

        Raises:
            ImageGenerationError: if the costume image is missing
        """
        data: List[Tuple[str, str]] = []
        for name in GENERATE_IMAGE_TEXT_FIELDS:
            value = fields.get(name)
            if value:
                data.append((name, value))

        for color in self.normalize_colors(selected_colors):
            data.append(("colors", color))

        upstream_files: List[Tuple[str, Tuple[str, bytes, str]]] = []
        for incoming_field, target_field in GENERATE_IMAGE_FILE_FIELDS.items():
            upload = files.get(incoming_field)
            if upload is None:
                continue
            upstream_files.append((
                target_field,
                (
                    upload.filename or f"{target_field}.jpg",
                    upload.content,
                    upload.content_type or "application/octet-stream",
                )
            ))

        if not any(name == "second_image" for name, _ in upstream_files):
            raise ImageGenerationError("Costume image is required.", status=400)

        return data, upstream_files

    @staticmethod
    def decode_upstream_body(response: requests.Response) -> Any:
        """JSON is parsed, text/* kept as text, anything else base64 encoded."""
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            return response.json()
        if "text/" in content_type:
            return response.text
        return base64.b64encode(response.content).decode("ascii")

    def generate(
        self,
        fields: Dict[str, Optional[str]],
        selected_colors: Any,
        files: Dict[str, Optional[UploadedImage]]
    ) -> GenerationResult:
        data, upstream_files = self.build_multipart(fields, selected_colors, files)

        logger.info(
            f"Forwarding image generation: files={[name for name, _ in upstream_files]}, "
            f"colors={[value for name, value in data if name == 'colors']}"
        )

        response = self.session.post(
            self.generate_url,
            data=data,
            files=upstream_files,
            timeout=self.timeout
        )

        body = self.decode_upstream_body(response)
        if not response.ok:
            logger.warning(f"Image generator answered {response.status_code}")

        return GenerationResult(
            ok=response.ok,
            status_code=200 if response.ok else response.status_code,
            data=body
        )
