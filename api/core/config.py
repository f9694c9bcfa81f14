import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings

load_dotenv()

DEFAULT_PORT = 4000
DEFAULT_CORS_ORIGIN = "http://localhost:5173"
DEFAULT_API_BASE_URL = "http://localhost:4000"

REQUIRED_VARIABLES = (
    "ASCOLOUR_API_BASE_URL",
    "ASCOLOUR_SUBSCRIPTION_KEY",
    "GENERATE_IMAGE_URL",
)


class Settings(BaseSettings):
    ASCOLOUR_API_BASE_URL: Optional[str] = os.getenv("ASCOLOUR_API_BASE_URL")
    ASCOLOUR_SUBSCRIPTION_KEY: Optional[str] = os.getenv("ASCOLOUR_SUBSCRIPTION_KEY")
    GENERATE_IMAGE_URL: Optional[str] = os.getenv("GENERATE_IMAGE_URL")
    CORS_ORIGIN: str = os.getenv("CORS_ORIGIN", DEFAULT_CORS_ORIGIN)
    PORT: int = DEFAULT_PORT
    CLIENT_DIST_PATH: Optional[str] = os.getenv("CLIENT_DIST_PATH")
    # Base URL the curation client uses to reach this proxy
    API_BASE_URL: str = os.getenv("API_BASE_URL", DEFAULT_API_BASE_URL)
    UPSTREAM_TIMEOUT: int = int(os.getenv("UPSTREAM_TIMEOUT", "30"))
    GENERATE_IMAGE_TIMEOUT: int = int(os.getenv("GENERATE_IMAGE_TIMEOUT", "120"))

    @field_validator(
        "ASCOLOUR_API_BASE_URL",
        "ASCOLOUR_SUBSCRIPTION_KEY",
        "GENERATE_IMAGE_URL",
        "CLIENT_DIST_PATH",
        mode="before",
    )
    @classmethod
    def _strip_blank(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("CORS_ORIGIN", mode="before")
    @classmethod
    def _default_cors(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_CORS_ORIGIN
        return value.strip()

    @field_validator("PORT", mode="before")
    @classmethod
    def _parse_port(cls, value):
        try:
            port = int(str(value).strip())
        except (TypeError, ValueError):
            return DEFAULT_PORT
        return port or DEFAULT_PORT

    @field_validator("API_BASE_URL", mode="before")
    @classmethod
    def _strip_api_base(cls, value):
        if not value or not str(value).strip():
            return DEFAULT_API_BASE_URL
        return str(value).strip().rstrip("/")

    @property
    def ascolour_base_url(self) -> str:
        """AS Colour base URL without a trailing slash."""
        return self.require("ASCOLOUR_API_BASE_URL").rstrip("/")

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGIN.split(",") if origin.strip()]

    def require(self, name: str) -> str:
        """
        Return a required configuration value or fail loudly.

        Raises:
            ValueError: if the variable is missing or blank
        """
        value = getattr(self, name, None)
        if not value:
            raise ValueError(f"Missing required environment variable: {name}")
        return value

    def validate_required(self) -> None:
        for name in REQUIRED_VARIABLES:
            self.require(name)

    def get_ascolour_headers(self) -> dict:
        """Headers sent with every AS Colour request."""
        return {
            "subscription-key": self.require("ASCOLOUR_SUBSCRIPTION_KEY"),
            "Content-Type": "application/json",
            "Accept": "application/json",
        }


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
