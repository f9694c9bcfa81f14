from functools import lru_cache
from services.ascolour.base_connector import AsColourConnector
from services.image_generation.service import ImageGenerationService


@lru_cache()
def get_ascolour_connector():
    """Get cached AS Colour connector instance."""
    return AsColourConnector()


@lru_cache()
def get_image_generation_service():
    """Get cached Image Generation Service instance."""
    return ImageGenerationService()
