"""
pytest configuration and shared fixtures for the curation tests.
"""

import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import pytest
import requests

# Settings are read when core.config is first imported
os.environ.setdefault("ASCOLOUR_API_BASE_URL", "https://catalog.test/v1/")
os.environ.setdefault("ASCOLOUR_SUBSCRIPTION_KEY", "test-subscription-key")
os.environ.setdefault("GENERATE_IMAGE_URL", "https://generator.test/dev")

# Add api/ to path for imports
API_DIR = Path(__file__).parent.parent / "api"
sys.path.insert(0, str(API_DIR))

from services.curation.event_bus import EventBus  # noqa: E402
from services.curation.storage import CurationStore, InMemoryStorage  # noqa: E402
from utils.schema.catalog_schema import Product  # noqa: E402


def make_response(
    status_code: int = 200,
    json_body: Any = None,
    headers: Optional[Dict[str, str]] = None,
    content: Optional[bytes] = None,
    content_type: Optional[str] = None,
) -> requests.Response:
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = "OK" if status_code < 400 else "Error"
    response.url = "https://test.invalid/"
    if json_body is not None:
        response._content = json.dumps(json_body).encode("utf-8")
        response.headers["Content-Type"] = content_type or "application/json"
    else:
        response._content = content or b""
        if content_type:
            response.headers["Content-Type"] = content_type
    for key, value in (headers or {}).items():
        response.headers[key] = value
    response.encoding = "utf-8"
    return response


def product(style_code: str, **fields) -> Product:
    fields.setdefault("styleName", f"Style {style_code}")
    return Product(styleCode=style_code, **fields)


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def backend():
    return InMemoryStorage()


@pytest.fixture
def store(backend, event_bus):
    return CurationStore(backend, event_bus)


@pytest.fixture
def sample_catalog():
    return [
        product("A", productType="T-Shirts", gender="Men", coreRange="Staple", productWeight="Mid Weight"),
        product("B", productType="T-Shirts", gender="Unisex", coreRange="Staple", productWeight="Heavy Weight"),
        product("C", productType="Hooded Sweatshirts", gender="Women", coreRange="Relax", productWeight="Heavy Weight"),
    ]
