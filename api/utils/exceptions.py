from typing import Optional


class AsColourAPIError(Exception):
    """Raised when the AS Colour catalog API answers with a non-2xx status or cannot be reached."""

    def __init__(self, message: str, status: Optional[int] = None, details: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.details = details


class ApiClientError(Exception):
    """Raised by the curation API client when a request cannot be completed."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ImageGenerationError(Exception):
    """Raised when an image generation request fails or yields no image."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status
