"""
Tests for the proxy routes, with the upstream HTTP session mocked.
"""

import base64
from unittest.mock import MagicMock

import pytest
import requests
from fastapi.testclient import TestClient

from conftest import make_response
from controller.dependencies import get_ascolour_connector, get_image_generation_service
from core.config import settings
from main import app
from services.ascolour.base_connector import AsColourConnector
from services.image_generation.service import ImageGenerationService


@pytest.fixture
def upstream():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(upstream):
    app.dependency_overrides[get_ascolour_connector] = lambda: AsColourConnector(settings, session=upstream)
    app.dependency_overrides[get_image_generation_service] = lambda: ImageGenerationService(settings, session=upstream)
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestSystemRoutes:

    def test_root_greeting(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.text == "Hello World from AsColour API Server Backend"

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"


class TestCatalogRoutes:

    def test_products_pass_through_with_subscription_key(self, client, upstream):
        body = {"data": [{"styleCode": "5001", "styleName": "Staple Tee"}]}
        upstream.request.return_value = make_response(200, body)

        response = client.get("/api/products")

        assert response.status_code == 200
        assert response.json() == body
        method, url = upstream.request.call_args[0]
        assert (method, url) == ("GET", "https://catalog.test/v1/catalog/products/")
        assert upstream.request.call_args[1]["headers"]["subscription-key"] == "test-subscription-key"

    @pytest.mark.parametrize("path, upstream_path", [
        ("/api/products/5001", "/catalog/products/5001"),
        ("/api/products/5001/variants", "/catalog/products/5001/variants"),
        ("/api/products/5001/images", "/catalog/products/5001/images"),
        ("/api/colours", "/catalog/colours"),
    ])
    def test_routes_map_to_upstream_paths(self, client, upstream, path, upstream_path):
        upstream.request.return_value = make_response(200, {"ok": True})

        assert client.get(path).json() == {"ok": True}
        assert upstream.request.call_args[0][1] == f"https://catalog.test/v1{upstream_path}"

    def test_inventory_is_wrapped(self, client, upstream):
        items = [{"sku": "5001-WHITE-M", "size": "M"}]
        upstream.request.return_value = make_response(200, items)

        response = client.get("/api/inventory/items", params={"skuFilter": "5001-*"})

        assert response.status_code == 200
        assert response.json() == {"data": items, "success": True}
        assert upstream.request.call_args[0][1] == "https://catalog.test/v1/inventory/items/?skuFilter=5001-*"

    def test_inventory_requires_sku_filter(self, client, upstream):
        response = client.get("/api/inventory/items")

        assert response.status_code == 400
        assert response.json() == {"error": "skuFilter parameter is required"}
        upstream.request.assert_not_called()

    def test_upstream_error_status_and_body_are_relayed(self, client, upstream):
        upstream.request.return_value = make_response(404, content=b"Style not found", content_type="text/plain")

        response = client.get("/api/products/9999")

        assert response.status_code == 404
        assert response.json()["details"] == "Style not found"
        assert "404" in response.json()["error"]

    def test_malformed_json_body_is_a_500_with_details(self, client, upstream):
        upstream.request.return_value = make_response(200, content=b"{not json", content_type="application/json")

        response = client.get("/api/products")

        assert response.status_code == 500
        assert "invalid JSON" in response.json()["error"]
        assert response.json()["details"] == "{not json"

    def test_network_failure_is_a_500(self, client, upstream):
        upstream.request.side_effect = requests.exceptions.ConnectionError("refused")

        response = client.get("/api/colours")

        assert response.status_code == 500
        assert "refused" in response.json()["error"]


class TestGenerateImage:

    COSTUME = ("costume_image", ("tee.jpg", b"costume-bytes", "image/jpeg"))
    HEAD = ("head_image", ("head.png", b"head-bytes", "image/png"))

    def test_preflight(self, client):
        assert client.options("/api/generate-image").status_code == 204

    def test_costume_image_is_required(self, client, upstream):
        response = client.post(
            "/api/generate-image",
            data={"prompt": "studio"},
            files=[self.HEAD],
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Costume image is required."}
        upstream.post.assert_not_called()

    def test_fields_and_files_are_renamed_for_upstream(self, client, upstream):
        upstream.post.return_value = make_response(200, {"success": True, "images": []})

        response = client.post(
            "/api/generate-image",
            data={"prompt": "detailed", "user_prompt": "studio", "selectedColors": ["BLACK", "WHITE"]},
            files=[self.HEAD, self.COSTUME],
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {"success": True, "images": []}}

        args, kwargs = upstream.post.call_args
        assert args[0] == "https://generator.test/dev"
        assert ("prompt", "detailed") in kwargs["data"]
        assert ("user_prompt", "studio") in kwargs["data"]
        assert [v for k, v in kwargs["data"] if k == "colors"] == ["BLACK", "WHITE"]
        assert [name for name, _ in kwargs["files"]] == ["first_image", "second_image"]
        assert kwargs["files"][1][1][1] == b"costume-bytes"

    def test_binary_answer_is_base64_encoded(self, client, upstream):
        upstream.post.return_value = make_response(200, content=b"\x89PNG-data", content_type="image/png")

        response = client.post("/api/generate-image", files=[self.COSTUME])

        assert response.json()["data"] == base64.b64encode(b"\x89PNG-data").decode("ascii")

    def test_upstream_failure_status_is_relayed(self, client, upstream):
        upstream.post.return_value = make_response(502, {"detail": "generator down"})

        response = client.post("/api/generate-image", files=[self.COSTUME])

        assert response.status_code == 502
        assert response.json() == {"success": False, "data": {"detail": "generator down"}}

    def test_transport_failure_is_a_500(self, client, upstream):
        upstream.post.side_effect = requests.exceptions.Timeout("timed out")

        response = client.post("/api/generate-image", files=[self.COSTUME])

        assert response.status_code == 500
        assert response.json()["success"] is False
